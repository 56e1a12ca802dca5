# Copyright 2025 Hathor Labs
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import os
from pathlib import Path
from typing import Any, NamedTuple, Optional, Union

import yaml
from structlog import get_logger

from cbor_oracle.conf.settings import OracleSettings

logger = get_logger()

CONFIG_YAML_ENV_VAR = 'CBOR_ORACLE_CONFIG_YAML'
DEFAULT_SOURCE = '<defaults>'


class _SettingsMetadata(NamedTuple):
    source: str
    settings: OracleSettings


_settings_singleton: Optional[_SettingsMetadata] = None


def get_global_settings() -> OracleSettings:
    """
    Returns the process-wide settings, loaded once.

    The settings come from the yaml filepath in the 'CBOR_ORACLE_CONFIG_YAML' env var, when it is not set the defaults
    are used.
    """
    source = os.environ.get(CONFIG_YAML_ENV_VAR, DEFAULT_SOURCE)
    return _load_settings_singleton(source)


def get_settings_source() -> str:
    """ Returns the path of the YAML file that was loaded, or '<defaults>'.

    XXX: Will raise an assertion error if get_global_settings() wasn't used before.
    """
    assert _settings_singleton is not None, 'get_global_settings() not called before'
    return _settings_singleton.source


def _load_settings_singleton(source: str) -> OracleSettings:
    global _settings_singleton

    if _settings_singleton is not None:
        if _settings_singleton.source != source:
            raise Exception('loading config twice with a different file')
        return _settings_singleton.settings

    if source == DEFAULT_SOURCE:
        settings = OracleSettings()
    else:
        settings = OracleSettings.from_yaml(filepath=source)
        logger.new().info('settings loaded', source=source)

    _settings_singleton = _SettingsMetadata(source=source, settings=settings)
    return settings


def _reset_settings_singleton() -> None:
    """Only meant for tests."""
    global _settings_singleton
    _settings_singleton = None


def dict_from_yaml(*, filepath: Union[Path, str]) -> dict[str, Any]:
    """Takes a filepath to a yaml file and returns a dictionary with its contents."""
    if not os.path.isfile(filepath):
        raise ValueError(f"'{filepath}' is not a file")

    with open(filepath, 'r') as file:
        contents = yaml.safe_load(file)

    if contents is None:
        return {}
    if not isinstance(contents, dict):
        raise ValueError(f"'{filepath}' cannot be parsed as a dictionary")
    return contents
