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

from typing import TypeVar, get_args

from typing_extensions import Self, override

from cbor_oracle.codec.decoder import DecodeContext
from cbor_oracle.exception import TypeMismatchError
from cbor_oracle.serialization import Item, MajorType
from cbor_oracle.shapes.shape import Shape

T = TypeVar('T')


class ListShape(Shape[list[T]]):
    """ Homogeneous arrays of any length.
    """

    __slots__ = ('_item',)

    _item: Shape[T]

    def __init__(self, item: Shape[T]) -> None:
        self._item = item

    @override
    @classmethod
    def _from_type(cls, type_: type[list[T]], /, *, type_map: Shape.TypeMap) -> Self:
        args = get_args(type_)
        if len(args) != 1:
            raise TypeError('expected list[T]')
        item_type, = args
        return cls(Shape.from_type(item_type, type_map=type_map))

    @override
    def new(self) -> list[T]:
        return []

    @override
    def _decode(self, item: Item, ctx: DecodeContext, /) -> list[T]:
        if item.major is not MajorType.ARRAY:
            raise TypeMismatchError('expected an array')
        return [self._item.decode(child, ctx) for child in item.children]

    def __repr__(self) -> str:
        return f'ListShape({self._item!r})'
