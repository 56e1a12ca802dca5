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
The generic representation, used for `Any` targets and as the reference view of raw captures.

=====================  ===========================================================
CBOR item              Python value
=====================  ===========================================================
integer                `int`
bignum (tags 2 and 3)  `int`
byte/text string       `bytes` / `str`
array                  `list` (`tuple` when used inside a map key)
map                    `dict` (`cbor2.FrozenDict` when used inside a map key)
other tags             `cbor2.CBORTag`, the content is generic too
simple values          `bool`, `None`, `cbor2.undefined` or `cbor2.CBORSimpleValue`
floats                 `float`
=====================  ===========================================================

>>> from cbor_oracle.codec.decoder import decode
>>> decode(bytes.fromhex('a2616182010261628101'), ANY).unwrap()
{'a': [1, 2], 'b': [1]}
>>> decode(bytes.fromhex('d82061'  '78'), ANY).unwrap()
CBORTag(32, 'x')
"""

from __future__ import annotations

from typing import Any

from cbor2 import CBORTag, FrozenDict
from typing_extensions import Self, override

from cbor_oracle.codec.decoder import INT64_MAX, INT64_MIN, DecodeContext, KeyTracker, decode_bignum, decode_int, \
    decode_leaf, is_bignum
from cbor_oracle.codec.options import IntDecodeMode
from cbor_oracle.exception import TypeMismatchError
from cbor_oracle.serialization import Item, MajorType
from cbor_oracle.shapes.shape import Shape


class AnyShape(Shape[Any]):
    __slots__ = ('_immutable', '_is_hashable')
    _captures_null = True

    def __init__(self, *, immutable: bool = False) -> None:
        self._immutable = immutable
        self._is_hashable = immutable

    @override
    @classmethod
    def _from_type(cls, type_: type[Any], /, *, type_map: Shape.TypeMap) -> Self:
        if type_ is not Any:
            raise TypeError('expected typing.Any')
        return cls()

    @override
    def new(self) -> Any:
        return None

    @override
    def _decode(self, item: Item, ctx: DecodeContext, /) -> Any:
        match item.major:
            case MajorType.UNSIGNED_INT | MajorType.NEGATIVE_INT:
                value = decode_int(item)
                if ctx.options.int_decode is IntDecodeMode.CONVERT_SIGNED and not INT64_MIN <= value <= INT64_MAX:
                    raise TypeMismatchError(f'{value} overflows a signed 64-bit integer')
                return value
            case MajorType.ARRAY:
                elements = [self.decode(child, ctx) for child in item.children]
                return tuple(elements) if self._immutable else elements
            case MajorType.MAP:
                return self._decode_map(item, ctx)
            case MajorType.TAG if is_bignum(item):
                return decode_bignum(item)
            case MajorType.TAG:
                return CBORTag(item.argument, self.decode(item.content, ctx))
            case _:
                return decode_leaf(item)

    def _decode_map(self, item: Item, ctx: DecodeContext) -> Any:
        tracker = KeyTracker(ctx)
        entries: dict[bytes, tuple[Any, Any]] = {}
        for key_item, value_item in item.pairs():
            key = ANY_KEY.decode(key_item, ctx)
            identity = tracker.add(key)
            entries[identity] = (key, self.decode(value_item, ctx))
        result = dict(entries.values())
        return FrozenDict(result) if self._immutable else result

    def __repr__(self) -> str:
        return f'AnyShape(immutable={self._immutable})'


ANY = AnyShape()
ANY_KEY = AnyShape(immutable=True)
