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

from typing import Any, Iterator, NamedTuple

from typing_extensions import Self

from cbor_oracle.codec.encoder import encode
from cbor_oracle.codec.options import BigIntForm, EncodeOptions, TimestampForm
from cbor_oracle.conf.settings import OracleSettings
from cbor_oracle.oracle.invariants import (
    LEADING_BIGNUM_TAG,
    LEADING_NATIVE_OR_BIGNUM,
    LEADING_TAG_0,
    LEADING_TAG_1,
    NATIVE_INTEGERS,
    NO_INDEFINITE,
    NO_TAGS,
    SHORTEST_NUMERIC,
    SORTED_KEYS,
    StructuralInvariant,
)
from cbor_oracle.oracle.outcome import EncodeAttempt

DEFAULT = 'Default'
PREFERRED_SHORTEST_FORM = 'PreferredShortestForm'
CANONICAL_SORTED = 'CanonicalSorted'
PROTOCOL_SPECIFIC_CANONICAL = 'ProtocolSpecificCanonical'
CORE_DETERMINISTIC = 'CoreDeterministic'

_TIMESTAMP_MODE_NAMES = {
    TimestampForm.SECONDS: 'TimestampSeconds',
    TimestampForm.MICROSECONDS: 'TimestampMicroseconds',
    TimestampForm.ADAPTIVE: 'TimestampAdaptive',
    TimestampForm.TEXTUAL: 'TimestampTextual',
    TimestampForm.TEXTUAL_FRACTION: 'TimestampTextualFraction',
}

BIGINT_SHORTEST = 'BigIntShortestNative'
BIGINT_EXPLICIT_TAG = 'BigIntExplicitTag'


class EncodingConfiguration(NamedTuple):
    name: str
    options: EncodeOptions
    # checked on the output right after encoding, before it is decoded again
    invariants: tuple[StructuralInvariant, ...] = ()

    def attempt(self, value: Any) -> EncodeAttempt:
        return EncodeAttempt(value, self.name, encode(value, self.options))


class EncodingConfigurationSet:
    """ The encoder configurations of the round trips.

    `general` is used for every ordinary shape, `timestamp_modes` and `bigint_modes` only for the shapes with a
    dedicated round trip.
    """

    __slots__ = ('general', 'timestamp_modes', 'bigint_modes')

    def __init__(
        self,
        general: tuple[EncodingConfiguration, ...],
        timestamp_modes: tuple[EncodingConfiguration, ...],
        bigint_modes: tuple[EncodingConfiguration, ...],
    ) -> None:
        self.general = general
        self.timestamp_modes = timestamp_modes
        self.bigint_modes = bigint_modes

    @classmethod
    def from_settings(cls, settings: OracleSettings) -> Self:
        canonical = EncodeOptions(canonical=True)
        protocol_invariants = (NO_INDEFINITE, NATIVE_INTEGERS, SHORTEST_NUMERIC, SORTED_KEYS)
        if not settings.PROTOCOL_CANONICAL_ALLOW_TAGS:
            protocol_invariants += (NO_TAGS,)

        general = (
            EncodingConfiguration(DEFAULT, EncodeOptions()),
            EncodingConfiguration(
                PREFERRED_SHORTEST_FORM, EncodeOptions(canonical=True, sort_keys=False), (SHORTEST_NUMERIC,)
            ),
            EncodingConfiguration(CANONICAL_SORTED, canonical, (SORTED_KEYS,)),
            EncodingConfiguration(
                PROTOCOL_SPECIFIC_CANONICAL,
                EncodeOptions(
                    canonical=True,
                    allow_tags=settings.PROTOCOL_CANONICAL_ALLOW_TAGS,
                    bigint=BigIntForm.FORBIDDEN,
                ),
                protocol_invariants,
            ),
            EncodingConfiguration(CORE_DETERMINISTIC, canonical, (SHORTEST_NUMERIC, SORTED_KEYS, NO_INDEFINITE)),
        )
        timestamp_modes = tuple(
            EncodingConfiguration(
                _TIMESTAMP_MODE_NAMES[form],
                EncodeOptions(timestamp=form),
                (LEADING_TAG_0 if form.is_textual else LEADING_TAG_1,),
            )
            for form in TimestampForm
        )
        bigint_modes = (
            EncodingConfiguration(BIGINT_SHORTEST, EncodeOptions(bigint=BigIntForm.SHORTEST),
                                  (LEADING_NATIVE_OR_BIGNUM,)),
            EncodingConfiguration(BIGINT_EXPLICIT_TAG, EncodeOptions(bigint=BigIntForm.EXPLICIT_TAG),
                                  (LEADING_BIGNUM_TAG,)),
        )
        return cls(general, timestamp_modes, bigint_modes)

    def __iter__(self) -> Iterator[EncodingConfiguration]:
        yield from self.general
        yield from self.timestamp_modes
        yield from self.bigint_modes

    def get(self, name: str) -> EncodingConfiguration:
        for configuration in self:
            if configuration.name == name:
                return configuration
        raise KeyError(name)
