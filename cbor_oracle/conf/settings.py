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

from pathlib import Path
from typing import Union

from pydantic import model_validator
from typing_extensions import Self

from cbor_oracle.utils import pydantic


class OracleSettings(pydantic.BaseModel):
    # Maximum depth of nested arrays, maps and tags accepted by the item scanner.
    MAX_NESTED_LEVELS: int = 32

    # Maximum number of array elements or map pairs of a single container.
    MAX_CONTAINER_LENGTH: int = 131072

    # Textual timestamps (tag 0, RFC 3339) can only represent 4-digit years, and Python datetimes start at year 1.
    TEXTUAL_TIMESTAMP_MIN_YEAR: int = 1
    TEXTUAL_TIMESTAMP_MAX_YEAR: int = 9999

    # The protocol-specific canonical configuration rejects every tag unless this is enabled.
    PROTOCOL_CANONICAL_ALLOW_TAGS: bool = False

    # Re-encode the decoded deterministic output and require the same bytes.
    CHECK_IDEMPOTENCE: bool = True

    @model_validator(mode='after')
    def _check_limits(self) -> Self:
        if self.MAX_NESTED_LEVELS < 1:
            raise ValueError('MAX_NESTED_LEVELS must be positive')
        if self.MAX_CONTAINER_LENGTH < 1:
            raise ValueError('MAX_CONTAINER_LENGTH must be positive')
        if self.TEXTUAL_TIMESTAMP_MIN_YEAR > self.TEXTUAL_TIMESTAMP_MAX_YEAR:
            raise ValueError('empty textual timestamp year range')
        return self

    def textual_year_in_range(self, year: int) -> bool:
        """Whether a timestamp in the given year can be written in the textual (tag 0) form.

        >>> OracleSettings().textual_year_in_range(2024)
        True
        >>> OracleSettings(TEXTUAL_TIMESTAMP_MAX_YEAR=2000).textual_year_in_range(2024)
        False
        """
        return self.TEXTUAL_TIMESTAMP_MIN_YEAR <= year <= self.TEXTUAL_TIMESTAMP_MAX_YEAR

    @classmethod
    def from_yaml(cls, *, filepath: Union[Path, str]) -> 'OracleSettings':
        from cbor_oracle.conf.get_settings import dict_from_yaml
        return cls.model_validate(dict_from_yaml(filepath=filepath))
