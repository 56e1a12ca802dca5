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

from typing import Any, get_args

from typing_extensions import Self, override

from cbor_oracle.codec.decoder import DecodeContext
from cbor_oracle.exception import TypeMismatchError
from cbor_oracle.serialization import Item, MajorType
from cbor_oracle.shapes.shape import Shape


class FixedArrayShape(Shape[tuple]):
    """ Fixed-length arrays, annotated as `tuple[A, B, ...]` with one type per position.

    Like a fixed-size array, an input array with fewer elements leaves the remaining positions with their zero values
    and elements beyond the length are ignored.
    """

    __slots__ = ('_items', '_is_hashable')

    _items: tuple[Shape[Any], ...]

    def __init__(self, items: tuple[Shape[Any], ...]) -> None:
        self._items = items
        self._is_hashable = all(item.is_hashable() for item in items)

    @override
    @classmethod
    def _from_type(cls, type_: type[tuple], /, *, type_map: Shape.TypeMap) -> Self:
        args = get_args(type_)
        if not args or Ellipsis in args:
            raise TypeError('expected tuple[T1, T2, ...] with a fixed number of items')
        return cls(tuple(Shape.from_type(arg, type_map=type_map) for arg in args))

    @override
    def new(self) -> tuple:
        return tuple(item.new() for item in self._items)

    @override
    def _decode(self, item: Item, ctx: DecodeContext, /) -> tuple:
        if item.major is not MajorType.ARRAY:
            raise TypeMismatchError('expected an array')
        values = [shape.decode(child, ctx) for shape, child in zip(self._items, item.children)]
        values.extend(shape.new() for shape in self._items[len(values):])
        return tuple(values)

    def __repr__(self) -> str:
        return f'FixedArrayShape({self._items!r})'
