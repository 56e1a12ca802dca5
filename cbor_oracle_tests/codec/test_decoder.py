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

import math
from datetime import datetime, timezone
from typing import Any, Optional

import pytest
from cbor2 import CBORSimpleValue, CBORTag, FrozenDict, undefined
from typing_extensions import Self, override

from cbor_oracle.codec import (
    DecodeOptions,
    DuplicateKeyMode,
    IntDecodeMode,
    RawMessage,
    UnknownFieldMode,
    decode,
)
from cbor_oracle.codec.types import CustomMarshaler, Float32, Int8, Int64, Uint8, Uint16, Uint64
from cbor_oracle.exception import (
    DecodeError,
    DuplicateKeyError,
    ErrorKind,
    MalformedError,
    OutOfRangeError,
    TrailingDataError,
    TypeMismatchError,
    UnknownFieldError,
)
from cbor_oracle.oracle.samples import Blob, IntKeyedRecord, KeyedRecord, NestedRecord, PositionalRecord, RawFieldRecord
from cbor_oracle.shapes import make_shape

REJECT_DUPLICATES = DecodeOptions(duplicate_keys=DuplicateKeyMode.REJECT)
CONVERT_SIGNED = DecodeOptions(int_decode=IntDecodeMode.CONVERT_SIGNED)
REJECT_UNKNOWN = DecodeOptions(unknown_fields=UnknownFieldMode.REJECT)


def _decode(hex_data: str, annotation: Any, options: DecodeOptions = DecodeOptions()) -> Any:
    return decode(bytes.fromhex(hex_data), make_shape(annotation), options).unwrap()


def _decode_error(hex_data: str, annotation: Any, options: DecodeOptions = DecodeOptions()) -> Exception:
    error = decode(bytes.fromhex(hex_data), make_shape(annotation), options).err()
    assert error is not None
    return error


@pytest.mark.parametrize(
    ['hex_data', 'annotation', 'expected'],
    [
        ('f5', bool, True),
        ('18ff', Uint8, 255),
        ('19012c', Uint16, 300),
        ('1bffffffffffffffff', Uint64, 2**64 - 1),
        ('3863', Int8, -100),
        ('3b7fffffffffffffff', Int64, -(2**63)),
        ('1bffffffffffffffff', int, 2**64 - 1),
        ('c249010000000000000000', int, 2**64),
        ('c349010000000000000000', int, -(2**64) - 1),
        ('f93e00', float, 1.5),
        ('fb3ff199999999999a', float, 1.1),
        ('6449455446', str, 'IETF'),
        ('7f657374726561646d696e67ff', str, 'streaming'),
        ('4401020304', bytes, b'\x01\x02\x03\x04'),
        ('5f42010243030405ff', bytes, b'\x01\x02\x03\x04\x05'),
        ('83010203', list[Uint64], [1, 2, 3]),
        ('820102', tuple[Int64, Int64, Int64], (1, 2, 0)),
        ('8401020304', tuple[Int64, Int64, Int64], (1, 2, 3)),
    ],
)
def test_decode_values(hex_data: str, annotation: Any, expected: Any) -> None:
    value = _decode(hex_data, annotation)
    assert type(value) is type(expected)
    assert value == expected


def test_float32_rounds() -> None:
    assert _decode('fb3ff199999999999a', Float32) == pytest.approx(1.1, rel=1e-7)
    assert _decode('fb3ff199999999999a', Float32) != 1.1
    assert math.isnan(_decode('f97e00', Float32))
    assert isinstance(_decode_error('fb7fefffffffffffff', Float32), OutOfRangeError)


@pytest.mark.parametrize(
    ['hex_data', 'annotation'],
    [
        ('190100', Uint8),
        ('20', Uint64),
        ('1880', Int8),
        ('3880', Int8),
        ('1b8000000000000000', Int64),
    ],
)
def test_sized_int_out_of_range(hex_data: str, annotation: Any) -> None:
    error = _decode_error(hex_data, annotation)
    assert isinstance(error, OutOfRangeError)
    assert error.kind is ErrorKind.OUT_OF_RANGE


@pytest.mark.parametrize(
    ['hex_data', 'annotation'],
    [
        ('6161', Uint8),
        ('01', str),
        ('f5', Uint64),
        ('01', bool),
        ('01', float),
        ('a0', list[Uint64]),
        ('80', dict[str, Any]),
        ('c1f5', int),
        ('c24101', Uint64),
        ('01', CBORTag),
        ('8101', Blob),
    ],
)
def test_type_mismatch(hex_data: str, annotation: Any) -> None:
    assert isinstance(_decode_error(hex_data, annotation), TypeMismatchError)


def test_malformed_input() -> None:
    assert isinstance(_decode_error('62c328', str), MalformedError)
    assert isinstance(_decode_error('0102', Uint8), TrailingDataError)
    assert isinstance(_decode_error('', Any), MalformedError)


@pytest.mark.parametrize(
    ['annotation', 'zero'],
    [
        (bool, False),
        (Uint16, 0),
        (int, 0),
        (str, ''),
        (bytes, b''),
        (list[str], []),
        (dict[str, Any], {}),
        (tuple[Int64, str], (0, '')),
        (KeyedRecord, KeyedRecord()),
        (Blob, Blob()),
        (datetime, datetime(1, 1, 1, tzinfo=timezone.utc)),
    ],
)
def test_null_decodes_to_zero_value(annotation: Any, zero: Any) -> None:
    assert _decode('f6', annotation) == zero
    assert _decode('f7', annotation) == zero


def test_null_captures() -> None:
    assert _decode('f6', Optional[Uint64]) is None
    assert _decode('f7', Any) is undefined
    assert _decode('f6', RawMessage) == RawMessage(b'\xf6')
    assert _decode('826161f6', list[Optional[str]]) == ['a', None]


def test_generic_values() -> None:
    assert _decode('83f4f7f820', Any) == [False, undefined, CBORSimpleValue(32)]
    assert _decode('d8256474657374', Any) == CBORTag(37, 'test')
    assert _decode('c24101', Any) == 1
    assert _decode('a1820102f5', Any) == {(1, 2): True}
    key, = _decode('a1a10102f5', Any)
    assert isinstance(key, FrozenDict)
    assert dict(key) == {1: 2}


def test_duplicate_keys() -> None:
    # scenario: {"a": 1, "a": 2}
    data = 'a2616101616102'
    assert _decode(data, dict[str, Any]) == {'a': 2}
    assert _decode(data, dict[str, Uint64]) == {'a': 2}
    assert _decode(data, Any) == {'a': 2}
    for annotation in (dict[str, Any], dict[str, Uint64], Any, KeyedRecord):
        error = _decode_error(data, annotation, REJECT_DUPLICATES)
        assert isinstance(error, DuplicateKeyError)
        assert error.kind is ErrorKind.DUPLICATE_KEY


def test_duplicate_keys_last_value_keeps_first_position() -> None:
    assert list(_decode('a3616101616202616103', Any).items()) == [('a', 3), ('b', 2)]


def test_duplicate_key_identity() -> None:
    # 1 and 1.0 are different keys, both NaN encodings are the same key
    assert isinstance(_decode('a201f5f93c00f4', Any, REJECT_DUPLICATES), dict)
    assert isinstance(_decode_error('a2f97e00f5fb7ff8000000000000f4', Any, REJECT_DUPLICATES), DuplicateKeyError)


def test_nested_duplicate_keys() -> None:
    data = '81a2616101616102'
    assert _decode(data, list[dict[str, Uint64]]) == [{'a': 2}]
    assert isinstance(_decode_error(data, list[dict[str, Uint64]], REJECT_DUPLICATES), DuplicateKeyError)


def test_raw_capture_skips_duplicate_check() -> None:
    data = 'a2616101616102'
    assert _decode(data, RawMessage, REJECT_DUPLICATES) == RawMessage(bytes.fromhex(data))


def test_convert_signed() -> None:
    data = '821bffffffffffffffff01'
    assert _decode(data, list[Any]) == [2**64 - 1, 1]
    error = _decode_error(data, list[Any], CONVERT_SIGNED)
    assert isinstance(error, TypeMismatchError)
    assert error.kind is ErrorKind.TYPE_MISMATCH
    assert _decode('1b7fffffffffffffff', Any, CONVERT_SIGNED) == 2**63 - 1
    assert isinstance(_decode_error('3b8000000000000000', Any, CONVERT_SIGNED), TypeMismatchError)


def test_convert_signed_keeps_typed_and_bignum_targets() -> None:
    assert _decode('1bffffffffffffffff', Uint64, CONVERT_SIGNED) == 2**64 - 1
    assert _decode('1bffffffffffffffff', int, CONVERT_SIGNED) == 2**64 - 1
    assert _decode('c249010000000000000000', Any, CONVERT_SIGNED) == 2**64


def test_keyed_record() -> None:
    data = 'a4646e616d6563616263666c6162656c73816178646e6f7465616e65636f756e74182a'
    record = _decode(data, KeyedRecord)
    assert record == KeyedRecord(name='abc', count=42, labels=['x'], note='n')


def test_keyed_record_unknown_fields() -> None:
    # {"name": "abc", "zzz": 1}
    data = 'a2646e616d656361626363' '7a7a7a01'
    assert _decode(data, KeyedRecord) == KeyedRecord(name='abc')
    error = _decode_error(data, KeyedRecord, REJECT_UNKNOWN)
    assert isinstance(error, UnknownFieldError)
    assert error.kind is ErrorKind.UNKNOWN_FIELD


def test_keyed_record_key_types_must_match() -> None:
    # a text key "1" and a float key 1.0 never match the integer keys
    assert _decode('a16131f5', IntKeyedRecord) == IntKeyedRecord()
    assert _decode('a1f93c0001', IntKeyedRecord) == IntKeyedRecord()
    assert isinstance(_decode_error('a1f93c0001', IntKeyedRecord, REJECT_UNKNOWN), UnknownFieldError)


def test_int_keyed_record() -> None:
    record = _decode('a3010502420102' '03a16175f5', IntKeyedRecord)
    assert record == IntKeyedRecord(kind=5, payload=b'\x01\x02', options={'u': True})


def test_positional_record() -> None:
    assert _decode('830102616b', PositionalRecord) == PositionalRecord(x=1, y=2, tag='k')
    assert isinstance(_decode_error('820102', PositionalRecord), TypeMismatchError)
    assert isinstance(_decode_error('a0', PositionalRecord), TypeMismatchError)
    # positional records have no field keys to reject
    assert _decode('830102616b', PositionalRecord, REJECT_UNKNOWN) == PositionalRecord(x=1, y=2, tag='k')


def test_nested_record() -> None:
    # {"inner": null, "points": [[1, 2, ""]], "extra": {"k": [1]}}
    data = 'a365696e6e6572f666706f696e74738183010260656578747261a1616b8101'
    record = _decode(data, NestedRecord)
    assert record == NestedRecord(inner=None, points=[PositionalRecord(1, 2, '')], extra={'k': [1]})


def test_raw_field_record() -> None:
    record = _decode('a2646b696e6461786462' '6f6479820102', RawFieldRecord)
    assert record == RawFieldRecord(kind='x', body=RawMessage(bytes.fromhex('820102')))
    assert _decode('a1646b696e646178', RawFieldRecord) == RawFieldRecord(kind='x')


def test_raw_capture_must_be_well_formed() -> None:
    assert _decode('9f01ff', RawMessage) == RawMessage(bytes.fromhex('9f01ff'))
    assert isinstance(_decode_error('c2f5', RawMessage), TypeMismatchError)


def test_tag_capture() -> None:
    assert _decode('c11a514b67b0', CBORTag) == CBORTag(1, 1363896240)
    assert _decode('c24101', CBORTag) == CBORTag(2, b'\x01')


def test_timestamps() -> None:
    expected = datetime(2013, 3, 21, 20, 4, tzinfo=timezone.utc)
    assert _decode('c074323031332d30332d32315432303a30343a30305a', datetime) == expected
    assert _decode('c11a514b67b0', datetime) == expected
    assert _decode('1a514b67b0', datetime) == expected
    assert _decode('c1fb41d452d9ec200000', datetime) == expected.replace(microsecond=500000)
    assert isinstance(_decode_error('c0636e6f77', datetime), TypeMismatchError)
    assert isinstance(_decode_error('c11bffffffffffffffff', datetime), OutOfRangeError)
    assert isinstance(_decode_error('c1f97e00', datetime), OutOfRangeError)
    assert isinstance(_decode_error('c1f5', datetime), TypeMismatchError)


def test_custom_marshaler() -> None:
    assert _decode('82656279746573420102', Blob) == Blob('bytes', b'\x01\x02')
    assert _decode('826474657874626869', Blob) == Blob('text', b'hi')
    assert isinstance(_decode_error('826474657874f5', Blob), TypeMismatchError)


class _Rejecting(CustomMarshaler):
    """Every item is refused with an exception outside the codec taxonomy."""

    @override
    def marshal_cbor(self) -> bytes:
        return b'\xf6'

    @override
    @classmethod
    def unmarshal_cbor(cls, data: bytes) -> Self:
        raise ValueError('not accepted')


@pytest.mark.parametrize(
    'hex_data',
    [
        # decimal fractions, which cbor2 itself would interpret
        'c4821bffffffffffffffff01',
        'c48262c3a965636f756e74',
        '82656279746573c4821bffffffffffffffff01',
    ],
)
def test_custom_marshaler_keeps_tags_opaque(hex_data: str) -> None:
    assert isinstance(_decode_error(hex_data, Blob), TypeMismatchError)


def test_custom_marshaler_foreign_exceptions() -> None:
    error = _decode_error('01', _Rejecting)
    assert type(error) is DecodeError
    assert error.kind is ErrorKind.GENERIC
    assert isinstance(error.__cause__, ValueError)


def test_fresh_zero_values() -> None:
    shape = make_shape(KeyedRecord)
    first = decode(b'\xf6', shape).unwrap()
    second = decode(b'\xf6', shape).unwrap()
    assert first == second
    assert first is not second
    assert first.labels is not second.labels
