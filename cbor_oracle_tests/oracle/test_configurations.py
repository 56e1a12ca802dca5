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

import pytest

from cbor_oracle.codec import (
    BigIntForm,
    DuplicateKeyMode,
    EncodeOptions,
    IntDecodeMode,
    TimestampForm,
    UnknownFieldMode,
)
from cbor_oracle.codec.types import Int64
from cbor_oracle.conf.settings import OracleSettings
from cbor_oracle.exception import ErrorKind
from cbor_oracle.oracle.catalog import ShapeDescriptor
from cbor_oracle.oracle.decoding import (
    CONVERT_UNSIGNED_TO_SIGNED,
    DEFAULT,
    REJECT_DUPLICATE_MAP_KEYS,
    REJECT_UNKNOWN_RECORD_FIELDS,
    DecodingConfigurationSet,
)
from cbor_oracle.oracle.encoding import (
    BIGINT_EXPLICIT_TAG,
    BIGINT_SHORTEST,
    CANONICAL_SORTED,
    CORE_DETERMINISTIC,
    PREFERRED_SHORTEST_FORM,
    PROTOCOL_SPECIFIC_CANONICAL,
    EncodingConfigurationSet,
)
from cbor_oracle.oracle.invariants import (
    LEADING_BIGNUM_TAG,
    LEADING_TAG_0,
    LEADING_TAG_1,
    NATIVE_INTEGERS,
    NO_INDEFINITE,
    NO_TAGS,
    SHORTEST_NUMERIC,
    SORTED_KEYS,
)


def test_decoding_configurations() -> None:
    configurations = DecodingConfigurationSet.from_settings(OracleSettings())
    assert [c.name for c in configurations] == [
        DEFAULT,
        REJECT_DUPLICATE_MAP_KEYS,
        CONVERT_UNSIGNED_TO_SIGNED,
        REJECT_UNKNOWN_RECORD_FIELDS,
    ]
    assert configurations.default.expected_error is None
    assert [c.expected_error for c in configurations.strict] == [
        ErrorKind.DUPLICATE_KEY,
        ErrorKind.TYPE_MISMATCH,
        ErrorKind.UNKNOWN_FIELD,
    ]

    default = configurations.default.options
    assert default.duplicate_keys is DuplicateKeyMode.LAST_WINS
    assert default.int_decode is IntDecodeMode.ANY_SIZE
    assert default.unknown_fields is UnknownFieldMode.IGNORE
    assert configurations.get(REJECT_DUPLICATE_MAP_KEYS).options == default.model_copy(
        update=dict(duplicate_keys=DuplicateKeyMode.REJECT)
    )
    assert configurations.get(CONVERT_UNSIGNED_TO_SIGNED).options == default.model_copy(
        update=dict(int_decode=IntDecodeMode.CONVERT_SIGNED)
    )
    assert configurations.get(REJECT_UNKNOWN_RECORD_FIELDS).options == default.model_copy(
        update=dict(unknown_fields=UnknownFieldMode.REJECT)
    )
    with pytest.raises(KeyError):
        configurations.get('Strictest')


def test_decoding_limits_follow_settings() -> None:
    settings = OracleSettings(MAX_NESTED_LEVELS=4, MAX_CONTAINER_LENGTH=16)
    for configuration in DecodingConfigurationSet.from_settings(settings):
        assert configuration.options.max_nested_levels == 4
        assert configuration.options.max_container_length == 16


def test_decode_attempt() -> None:
    configurations = DecodingConfigurationSet.from_settings(OracleSettings())
    descriptor = ShapeDescriptor.from_annotation('int64', Int64)

    attempt = configurations.default.attempt(bytes.fromhex('20'), descriptor)
    assert (attempt.shape, attempt.configuration) == ('int64', DEFAULT)
    assert attempt.outcome.unwrap() == -1
    assert attempt.error_kind is None

    attempt = configurations.default.attempt(bytes.fromhex('6161'), descriptor)
    assert attempt.error_kind is ErrorKind.TYPE_MISMATCH

    strict = configurations.get(REJECT_DUPLICATE_MAP_KEYS)
    assert strict.accepts(ErrorKind.DUPLICATE_KEY)
    assert not strict.accepts(ErrorKind.TYPE_MISMATCH)
    assert not configurations.default.accepts(ErrorKind.MALFORMED)


def test_encoding_configurations() -> None:
    configurations = EncodingConfigurationSet.from_settings(OracleSettings())
    assert [c.name for c in configurations.general] == [
        DEFAULT,
        PREFERRED_SHORTEST_FORM,
        CANONICAL_SORTED,
        PROTOCOL_SPECIFIC_CANONICAL,
        CORE_DETERMINISTIC,
    ]
    assert configurations.get(DEFAULT).invariants == ()
    assert configurations.get(PREFERRED_SHORTEST_FORM).invariants == (SHORTEST_NUMERIC,)
    assert configurations.get(CANONICAL_SORTED).invariants == (SORTED_KEYS,)
    assert configurations.get(CORE_DETERMINISTIC).invariants == (SHORTEST_NUMERIC, SORTED_KEYS, NO_INDEFINITE)

    protocol = configurations.get(PROTOCOL_SPECIFIC_CANONICAL)
    assert protocol.options.bigint is BigIntForm.FORBIDDEN
    assert not protocol.options.allow_tags
    assert NATIVE_INTEGERS in protocol.invariants
    assert NO_TAGS in protocol.invariants


def test_protocol_canonical_with_tags() -> None:
    configurations = EncodingConfigurationSet.from_settings(OracleSettings(PROTOCOL_CANONICAL_ALLOW_TAGS=True))
    protocol = configurations.get(PROTOCOL_SPECIFIC_CANONICAL)
    assert protocol.options.allow_tags
    assert NO_TAGS not in protocol.invariants
    assert NATIVE_INTEGERS in protocol.invariants


def test_dedicated_encoding_configurations() -> None:
    configurations = EncodingConfigurationSet.from_settings(OracleSettings())
    assert [c.options.timestamp for c in configurations.timestamp_modes] == list(TimestampForm)
    for configuration in configurations.timestamp_modes:
        expected = LEADING_TAG_0 if configuration.options.timestamp.is_textual else LEADING_TAG_1
        assert configuration.invariants == (expected,)

    assert [c.name for c in configurations.bigint_modes] == [BIGINT_SHORTEST, BIGINT_EXPLICIT_TAG]
    assert configurations.get(BIGINT_EXPLICIT_TAG).invariants == (LEADING_BIGNUM_TAG,)
    assert configurations.get(BIGINT_SHORTEST).options.bigint is BigIntForm.SHORTEST


def test_encode_attempt() -> None:
    configurations = EncodingConfigurationSet.from_settings(OracleSettings())
    attempt = configurations.get(CORE_DETERMINISTIC).attempt({'b': 1, 'a': 2})
    assert attempt.configuration == CORE_DETERMINISTIC
    assert attempt.outcome.unwrap().hex() == 'a2616102616201'

    attempt = configurations.get(PROTOCOL_SPECIFIC_CANONICAL).attempt(2**64)
    assert attempt.outcome.err().kind is ErrorKind.UNSUPPORTED_VALUE


def test_preferred_shortest_form_keeps_insertion_order() -> None:
    configurations = EncodingConfigurationSet.from_settings(OracleSettings())
    preferred = configurations.get(PREFERRED_SHORTEST_FORM)
    assert preferred.options == EncodeOptions(canonical=True, sort_keys=False)
    assert preferred.attempt({'b': 1.5, 'a': 1}).outcome.unwrap().hex() == 'a26162f93e00616101'
    assert configurations.get(CANONICAL_SORTED).attempt({'b': 1.5, 'a': 1}).outcome.unwrap().hex() == \
        'a26161016162f93e00'
