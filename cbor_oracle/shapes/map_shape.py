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

from typing import Any, TypeVar, get_args

from typing_extensions import Self, override

from cbor_oracle.codec.decoder import DecodeContext, KeyTracker
from cbor_oracle.exception import TypeMismatchError
from cbor_oracle.serialization import Item, MajorType
from cbor_oracle.shapes.any_shape import ANY_KEY
from cbor_oracle.shapes.shape import Shape

K = TypeVar('K')
V = TypeVar('V')


class MapShape(Shape[dict[K, V]]):
    """ Maps with typed keys and values, `dict[Any, V]` uses immutable generic keys.

    Entries are kept in input order, when a key repeats the last value wins unless the options reject duplicates.
    """

    __slots__ = ('_key', '_value')

    _key: Shape[K]
    _value: Shape[V]

    def __init__(self, key: Shape[K], value: Shape[V]) -> None:
        if not key.is_hashable():
            raise TypeError(f'{key!r} values cannot be used as map keys')
        self._key = key
        self._value = value

    @override
    @classmethod
    def _from_type(cls, type_: type[dict[K, V]], /, *, type_map: Shape.TypeMap) -> Self:
        args = get_args(type_)
        if len(args) != 2:
            raise TypeError('expected dict[K, V]')
        key_type, value_type = args
        key: Shape[Any] = ANY_KEY if key_type is Any else Shape.from_type(key_type, type_map=type_map)
        return cls(key, Shape.from_type(value_type, type_map=type_map))

    @override
    def new(self) -> dict[K, V]:
        return {}

    @override
    def _decode(self, item: Item, ctx: DecodeContext, /) -> dict[K, V]:
        if item.major is not MajorType.MAP:
            raise TypeMismatchError('expected a map')
        tracker = KeyTracker(ctx)
        entries: dict[bytes, tuple[K, V]] = {}
        for key_item, value_item in item.pairs():
            key = self._key.decode(key_item, ctx)
            identity = tracker.add(key)
            entries[identity] = (key, self._value.decode(value_item, ctx))
        return dict(entries.values())

    def __repr__(self) -> str:
        return f'MapShape({self._key!r}, {self._value!r})'
