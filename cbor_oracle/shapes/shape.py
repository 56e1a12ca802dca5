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

from abc import ABC, abstractmethod
from typing import ClassVar, Generic, NamedTuple, TypeVar, final

from typing_extensions import Self

from cbor_oracle.codec.decoder import DecodeContext
from cbor_oracle.serialization import Item
from cbor_oracle.shapes.utils import TypeToShapeMap, get_usable_origin_type

T = TypeVar('T')


class Shape(ABC, Generic[T]):
    """ A target representation that CBOR items can be decoded into.

    Shapes are built from type annotations through a `Shape.TypeMap`, compound shapes (lists, maps, records, ...) hold
    the shapes of their members. A shape instance is immutable and can be shared by any number of decode attempts.

    Every shape has a zero value, returned by `new()`, which is what CBOR null and undefined decode to unless the shape
    captures them (`_captures_null = True`).
    """

    class TypeMap(NamedTuple):
        shapes_map: TypeToShapeMap

    # XXX: subclasses must override this if they need any properties
    __slots__ = ()

    _captures_null: ClassVar[bool] = False
    # values can be used as map keys
    _is_hashable: bool = False

    @final
    @staticmethod
    def from_type(type_: type[T], /, *, type_map: TypeMap) -> Shape[T]:
        """ Instantiate a Shape from a type annotation using the given map.
        """
        usable_origin = get_usable_origin_type(type_, shapes_map=type_map.shapes_map)
        shape_class = type_map.shapes_map[usable_origin]
        return shape_class._from_type(type_, type_map=type_map)

    @classmethod
    def _from_type(cls, type_: type[T], /, *, type_map: TypeMap) -> Self:
        """ Instantiate a Shape from a type annotation.

        Compound shapes are expected to call `Shape.from_type` on their type arguments, forwarding the given
        `type_map`.
        """
        raise TypeError(f'{cls} is not compatible with use in a Shape.TypeMap')

    def is_hashable(self) -> bool:
        return self._is_hashable

    @abstractmethod
    def new(self) -> T:
        """ Return a fresh zero value, never shared between calls when it is mutable.
        """
        raise NotImplementedError

    @final
    def decode(self, item: Item, ctx: DecodeContext, /) -> T:
        """ Convert a scanned item into a value of this shape.

        Raises an exception of the `DecodeError` family when the item can't be represented.
        """
        # XXX: subclasses must implement Shape._decode, not Shape.decode
        if item.is_null and not self._captures_null:
            return self.new()
        return self._decode(item, ctx)

    @abstractmethod
    def _decode(self, item: Item, ctx: DecodeContext, /) -> T:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f'{type(self).__name__}()'
