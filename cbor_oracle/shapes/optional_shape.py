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

from types import NoneType, UnionType
# XXX: ignore attr-defined because mypy doesn't recognize it, even though all version of python that we support; have
#      this defined, even if it's an internal class
from typing import TypeVar, _UnionGenericAlias as UnionGenericAlias, get_args  # type: ignore[attr-defined]

from typing_extensions import Self, override

from cbor_oracle.codec.decoder import DecodeContext
from cbor_oracle.serialization import Item
from cbor_oracle.shapes.shape import Shape

V = TypeVar('V')


class OptionalShape(Shape[V | None]):
    """ Represents a shape that is either `V` or `None`, null and undefined decode to `None`.
    """

    __slots__ = ('_is_hashable', '_value')
    _captures_null = True

    _value: Shape[V]

    def __init__(self, shape: Shape[V]) -> None:
        self._value = shape
        self._is_hashable = shape.is_hashable()

    @override
    @classmethod
    def _from_type(cls, type_: type[V | None], /, *, type_map: Shape.TypeMap) -> Self:
        if not isinstance(type_, (UnionType, UnionGenericAlias)):
            raise TypeError('expected type union')
        args = get_args(type_)
        assert args, 'union always has args'
        if len(args) != 2 or NoneType not in args:
            raise TypeError('type must be either `None | T` or `T | None`')
        not_none_type, = tuple(set(args) - {NoneType})  # get the type that is not None
        return cls(Shape.from_type(not_none_type, type_map=type_map))

    @override
    def new(self) -> V | None:
        return None

    @override
    def _decode(self, item: Item, ctx: DecodeContext, /) -> V | None:
        if item.is_null:
            return None
        return self._value.decode(item, ctx)

    def __repr__(self) -> str:
        return f'OptionalShape({self._value!r})'
