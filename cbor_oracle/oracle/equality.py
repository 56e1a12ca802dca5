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

"""
Deep structural equality and the declared exceptions applied on top of it.

`deep_equal` is stricter than `==`: types must match exactly (`1`, `1.0` and `True` are all different), NaN equals
NaN, and the sign of zero matters. Maps are compared without regard to order and raw captures are compared by the
generic value they hold.

>>> deep_equal(1, True)
False
>>> deep_equal([float('nan')], [float('nan')])
True
>>> deep_equal({'a': 1, 'b': 2}, {'b': 2, 'a': 1})
True
>>> deep_equal(RawMessage(bytes.fromhex('1a00000001')), RawMessage(bytes.fromhex('01')))
True
"""

from __future__ import annotations

import dataclasses
import math
from typing import TYPE_CHECKING, Any, Iterable

from cbor2 import CBORTag, FrozenDict
from typing_extensions import Self

from cbor_oracle.codec.decoder import decode, key_identity
from cbor_oracle.codec.types import RawMessage, is_record_type
from cbor_oracle.oracle.outcome import RoundTripResult
from cbor_oracle.shapes import ANY

if TYPE_CHECKING:
    from cbor_oracle.oracle.catalog import ShapeDescriptor

# null and undefined captures
_NULL_CAPTURES = (bytes([0xf6]), bytes([0xf7]))


def deep_equal(a: Any, b: Any) -> bool:
    if type(a) is not type(b):
        return False
    match a:
        case float():
            if math.isnan(a) or math.isnan(b):
                return math.isnan(a) and math.isnan(b)
            return a == b and math.copysign(1.0, a) == math.copysign(1.0, b)
        case list() | tuple():
            return len(a) == len(b) and all(deep_equal(x, y) for x, y in zip(a, b))
        case dict() | FrozenDict():
            return _maps_equal(a, b)
        case CBORTag():
            return a.tag == b.tag and deep_equal(a.value, b.value)
        case RawMessage():
            return raw_equal(a, b)
        case _ if is_record_type(type(a)):
            return all(
                deep_equal(getattr(a, field.name), getattr(b, field.name))
                for field in dataclasses.fields(a)
            )
        case _:
            return a == b


def _maps_equal(a: Any, b: Any) -> bool:
    if len(a) != len(b):
        return False
    by_identity = {key_identity(key): (key, value) for key, value in b.items()}
    for key, value in a.items():
        found = by_identity.get(key_identity(key))
        if found is None or not deep_equal(key, found[0]) or not deep_equal(value, found[1]):
            return False
    return True


def raw_equal(a: RawMessage, b: RawMessage) -> bool:
    """Raw captures are equal when they hold the same generic value, byte identity is not required."""
    if a.data == b.data:
        return True
    if a.is_empty() or b.is_empty():
        return False
    generic_a = decode(a.data, ANY)
    generic_b = decode(b.data, ANY)
    if generic_a.is_err() or generic_b.is_err():
        return False
    return deep_equal(generic_a.unwrap(), generic_b.unwrap())


def _is_absent_raw(value: Any) -> bool:
    return isinstance(value, RawMessage) and (value.is_empty() or value.data in _NULL_CAPTURES)


class EqualityPolicy:
    """ Decides whether a re-decoded value is equivalent to the original one.

    The default rule is `deep_equal`. The declared exceptions are:

    - raw capture fields registered as `(shape name, field name)` pairs: a capture that is empty (the key was absent)
      or holds null is normalized to absent on both sides before comparing, because an absent capture is written as
      null and comes back as a captured null;
    - timestamp and arbitrary-precision integer shapes are never compared here, their round trips are checked by
      dedicated procedures since their precision depends on the encoder configuration.
    """

    __slots__ = ('_absent_raw_fields',)

    def __init__(self, absent_raw_fields: Iterable[tuple[str, str]] = ()) -> None:
        self._absent_raw_fields = frozenset(absent_raw_fields)

    @classmethod
    def default(cls) -> Self:
        return cls([('raw_field_record', 'body')])

    def normalized_fields(self, shape_name: str) -> list[str]:
        return sorted(field for shape, field in self._absent_raw_fields if shape == shape_name)

    def compare(self, descriptor: ShapeDescriptor, original: Any, redecoded: Any) -> RoundTripResult:
        if descriptor.has_dedicated_round_trip():
            raise ValueError(f'{descriptor.name} values are compared by their own round-trip procedure')

        applied = set()
        left, right = original, redecoded
        for field in self.normalized_fields(descriptor.name):
            left_value, right_value = getattr(left, field), getattr(right, field)
            if not (_is_absent_raw(left_value) and _is_absent_raw(right_value)):
                continue
            if left_value != right_value:
                applied.add(field)
            left = dataclasses.replace(left, **{field: RawMessage()})
            right = dataclasses.replace(right, **{field: RawMessage()})

        return RoundTripResult(original, redecoded, deep_equal(left, right), frozenset(applied))
