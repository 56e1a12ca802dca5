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

from __future__ import annotations

from typing import TYPE_CHECKING, Iterator, NamedTuple, Optional

from typing_extensions import Self

from cbor_oracle.codec.decoder import decode
from cbor_oracle.codec.options import DecodeOptions, DuplicateKeyMode, IntDecodeMode, UnknownFieldMode
from cbor_oracle.conf.settings import OracleSettings
from cbor_oracle.exception import ErrorKind
from cbor_oracle.oracle.outcome import DecodeAttempt

if TYPE_CHECKING:
    from cbor_oracle.oracle.catalog import ShapeDescriptor

DEFAULT = 'Default'
REJECT_DUPLICATE_MAP_KEYS = 'RejectDuplicateMapKeys'
CONVERT_UNSIGNED_TO_SIGNED = 'ConvertUnsignedToSignedOnOverflow'
REJECT_UNKNOWN_RECORD_FIELDS = 'RejectUnknownRecordFields'


class DecodingConfiguration(NamedTuple):
    name: str
    options: DecodeOptions
    # the only error kind allowed when decoding fails, None for the lenient configuration
    expected_error: Optional[ErrorKind] = None

    def attempt(self, data: bytes, descriptor: ShapeDescriptor) -> DecodeAttempt:
        """Decode into a fresh value of the descriptor's shape, reading from a fresh view of `data`."""
        return DecodeAttempt(descriptor.name, self.name, decode(data, descriptor.shape, self.options))

    def accepts(self, kind: ErrorKind) -> bool:
        return kind is self.expected_error


class DecodingConfigurationSet:
    """ The lenient Default configuration and the strict ones, each strict configuration differs from Default in a
    single option and may only fail with its declared error kind.
    """

    __slots__ = ('default', 'strict')

    def __init__(self, default: DecodingConfiguration, strict: tuple[DecodingConfiguration, ...]) -> None:
        assert default.expected_error is None
        assert all(configuration.expected_error is not None for configuration in strict)
        self.default = default
        self.strict = strict

    @classmethod
    def from_settings(cls, settings: OracleSettings) -> Self:
        base = DecodeOptions(
            max_nested_levels=settings.MAX_NESTED_LEVELS,
            max_container_length=settings.MAX_CONTAINER_LENGTH,
        )
        return cls(
            DecodingConfiguration(DEFAULT, base),
            (
                DecodingConfiguration(
                    REJECT_DUPLICATE_MAP_KEYS,
                    base.model_copy(update=dict(duplicate_keys=DuplicateKeyMode.REJECT)),
                    ErrorKind.DUPLICATE_KEY,
                ),
                DecodingConfiguration(
                    CONVERT_UNSIGNED_TO_SIGNED,
                    base.model_copy(update=dict(int_decode=IntDecodeMode.CONVERT_SIGNED)),
                    ErrorKind.TYPE_MISMATCH,
                ),
                DecodingConfiguration(
                    REJECT_UNKNOWN_RECORD_FIELDS,
                    base.model_copy(update=dict(unknown_fields=UnknownFieldMode.REJECT)),
                    ErrorKind.UNKNOWN_FIELD,
                ),
            ),
        )

    def __iter__(self) -> Iterator[DecodingConfiguration]:
        yield self.default
        yield from self.strict

    def get(self, name: str) -> DecodingConfiguration:
        for configuration in self:
            if configuration.name == name:
                return configuration
        raise KeyError(name)
