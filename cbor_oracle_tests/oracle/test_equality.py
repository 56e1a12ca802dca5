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

from datetime import datetime
from typing import Any

import pytest
from cbor2 import CBORTag, FrozenDict, undefined

from cbor_oracle.codec import EncodeOptions, RawMessage, decode, encode
from cbor_oracle.oracle.catalog import ShapeDescriptor
from cbor_oracle.oracle.equality import EqualityPolicy, deep_equal, raw_equal
from cbor_oracle.oracle.samples import KeyedRecord, RawFieldRecord

NAN = float('nan')


def _raw(hex_data: str) -> RawMessage:
    return RawMessage(bytes.fromhex(hex_data))


@pytest.mark.parametrize(
    ['a', 'b'],
    [
        (None, None),
        (undefined, undefined),
        (1, 1),
        (2**100, 2**100),
        ('x', 'x'),
        (NAN, NAN),
        (-0.0, -0.0),
        ([1, [2, NAN]], [1, [2, NAN]]),
        ({'a': 1, 'b': 2}, {'b': 2, 'a': 1}),
        ({NAN: 1}, {NAN: 1}),
        (FrozenDict({'a': (1, 2)}), FrozenDict({'a': (1, 2)})),
        (CBORTag(37, b'\x00'), CBORTag(37, b'\x00')),
        (KeyedRecord('a', labels=['x']), KeyedRecord('a', labels=['x'])),
        (_raw('1a00000001'), _raw('01')),
        (_raw('a2616101616202'), _raw('a2616202616101')),
        (_raw('8201'), _raw('8201')),
    ],
)
def test_deep_equal(a: Any, b: Any) -> None:
    assert deep_equal(a, b)
    assert deep_equal(b, a)


@pytest.mark.parametrize(
    ['a', 'b'],
    [
        (1, True),
        (1, 1.0),
        (0, None),
        (0.0, -0.0),
        (NAN, 1.0),
        ([1, 2], (1, 2)),
        ([1, 2], [1, 2, 3]),
        ({1: 'a'}, {1.0: 'a'}),
        ({'a': 1}, {'a': 1, 'b': 2}),
        ({'a': 1}, {'a': True}),
        ({'a': 1}, FrozenDict({'a': 1})),
        (CBORTag(1, 2), CBORTag(2, 2)),
        (CBORTag(1, 2), CBORTag(1, 2.0)),
        (KeyedRecord(count=1), KeyedRecord(count=True)),
        (KeyedRecord(), RawFieldRecord()),
        (_raw(''), _raw('f6')),
        (_raw('01'), _raw('02')),
        (_raw('8201'), _raw('820101')),
    ],
)
def test_deep_not_equal(a: Any, b: Any) -> None:
    assert not deep_equal(a, b)
    assert not deep_equal(b, a)


def test_raw_equal_uses_generic_value() -> None:
    assert raw_equal(_raw('c24101'), _raw('01'))
    assert raw_equal(_raw('5f4101ff'), _raw('4101'))
    assert raw_equal(_raw('9f0102ff'), _raw('820102'))


@pytest.fixture
def raw_field_descriptor() -> ShapeDescriptor:
    return ShapeDescriptor.from_annotation('raw_field_record', RawFieldRecord)


def test_default_policy_fields() -> None:
    policy = EqualityPolicy.default()
    assert policy.normalized_fields('raw_field_record') == ['body']
    assert policy.normalized_fields('keyed_record') == []


def test_absent_raw_field_is_normalized(raw_field_descriptor: ShapeDescriptor) -> None:
    policy = EqualityPolicy.default()

    result = policy.compare(raw_field_descriptor, RawFieldRecord('a'), RawFieldRecord('a', _raw('f6')))
    assert result.equal
    assert result.exceptions_applied == {'body'}

    result = policy.compare(raw_field_descriptor, RawFieldRecord('a', _raw('f7')), RawFieldRecord('a', _raw('f6')))
    assert result.equal
    assert result.exceptions_applied == {'body'}

    result = policy.compare(raw_field_descriptor, RawFieldRecord('a', _raw('01')), RawFieldRecord('a', _raw('01')))
    assert result.equal
    assert result.exceptions_applied == frozenset()


def test_present_raw_field_is_compared(raw_field_descriptor: ShapeDescriptor) -> None:
    policy = EqualityPolicy.default()
    result = policy.compare(raw_field_descriptor, RawFieldRecord('a'), RawFieldRecord('a', _raw('01')))
    assert not result.equal
    result = policy.compare(raw_field_descriptor, RawFieldRecord('a'), RawFieldRecord('b', _raw('f6')))
    assert not result.equal


def test_no_exceptions_without_registration(raw_field_descriptor: ShapeDescriptor) -> None:
    result = EqualityPolicy().compare(raw_field_descriptor, RawFieldRecord('a'), RawFieldRecord('a', _raw('f6')))
    assert not result.equal
    assert result.exceptions_applied == frozenset()


def test_absent_raw_field_round_trip(raw_field_descriptor: ShapeDescriptor) -> None:
    original = decode(bytes.fromhex('a1646b696e646161'), raw_field_descriptor.shape).unwrap()
    assert original == RawFieldRecord('a')

    encoded = encode(original, EncodeOptions(canonical=True)).unwrap()
    assert encoded.hex() == 'a264626f6479f6646b696e646161'
    redecoded = decode(encoded, raw_field_descriptor.shape).unwrap()
    assert redecoded.body == _raw('f6')

    result = EqualityPolicy.default().compare(raw_field_descriptor, original, redecoded)
    assert result.equal
    assert result.exceptions_applied == {'body'}
    assert result.original is original
    assert result.redecoded is redecoded


@pytest.mark.parametrize(['name', 'annotation', 'value'], [('timestamp', datetime, None), ('bigint', int, 1)])
def test_dedicated_shapes_are_not_compared(name: str, annotation: Any, value: Any) -> None:
    descriptor = ShapeDescriptor.from_annotation(name, annotation)
    with pytest.raises(ValueError):
        EqualityPolicy.default().compare(descriptor, value, value)
