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

from typing import Any, ClassVar

from typing_extensions import Self, override

from cbor_oracle.codec.decoder import DecodeContext, decode_int
from cbor_oracle.codec.types import Int8, Int16, Int32, Int64, Uint8, Uint16, Uint32, Uint64
from cbor_oracle.exception import OutOfRangeError
from cbor_oracle.serialization import Item
from cbor_oracle.shapes.shape import Shape


class _SizedIntShape(Shape[int]):
    """ Base class for shapes of integers with a fixed size and signedness.

    Only native integer items are accepted, values outside the bounds fail with `OutOfRangeError`.
    """

    __slots__ = ()
    _is_hashable = True
    # XXX: subclass must define these values:
    _signed: ClassVar[bool]
    _byte_size: ClassVar[int]
    _annotation: ClassVar[Any]

    @classmethod
    def _upper_bound_value(cls) -> int:
        if cls._signed:
            return 2**(cls._byte_size * 8 - 1) - 1
        else:
            return 2**(cls._byte_size * 8) - 1

    @classmethod
    def _lower_bound_value(cls) -> int:
        if cls._signed:
            return -(2**(cls._byte_size * 8 - 1))
        else:
            return 0

    @override
    @classmethod
    def _from_type(cls, type_: type[int], /, *, type_map: Shape.TypeMap) -> Self:
        if type_ is not cls._annotation:
            raise TypeError(f'expected {cls._annotation.__name__} type')
        return cls()

    @override
    def new(self) -> int:
        return 0

    @override
    def _decode(self, item: Item, ctx: DecodeContext, /) -> int:
        value = decode_int(item)
        if not self._lower_bound_value() <= value <= self._upper_bound_value():
            raise OutOfRangeError(f'{value} does not fit {self._annotation.__name__}')
        return value


class Uint8Shape(_SizedIntShape):
    _signed = False
    _byte_size = 1
    _annotation = Uint8


class Uint16Shape(_SizedIntShape):
    _signed = False
    _byte_size = 2
    _annotation = Uint16


class Uint32Shape(_SizedIntShape):
    _signed = False
    _byte_size = 4
    _annotation = Uint32


class Uint64Shape(_SizedIntShape):
    _signed = False
    _byte_size = 8
    _annotation = Uint64


class Int8Shape(_SizedIntShape):
    _signed = True
    _byte_size = 1
    _annotation = Int8


class Int16Shape(_SizedIntShape):
    _signed = True
    _byte_size = 2
    _annotation = Int16


class Int32Shape(_SizedIntShape):
    _signed = True
    _byte_size = 4
    _annotation = Int32


class Int64Shape(_SizedIntShape):
    _signed = True
    _byte_size = 8
    _annotation = Int64
