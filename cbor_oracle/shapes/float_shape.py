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

import struct

from typing_extensions import Self, override

from cbor_oracle.codec.decoder import DecodeContext, decode_leaf
from cbor_oracle.codec.types import Float32
from cbor_oracle.exception import OutOfRangeError, TypeMismatchError
from cbor_oracle.serialization import Item
from cbor_oracle.shapes.shape import Shape


class Float64Shape(Shape[float]):
    """ Builtin `float`, accepts half, single and double precision items.
    """

    __slots__ = ()
    _is_hashable = True

    @override
    @classmethod
    def _from_type(cls, type_: type[float], /, *, type_map: Shape.TypeMap) -> Self:
        if type_ is not float:
            raise TypeError('expected float type')
        return cls()

    @override
    def new(self) -> float:
        return 0.0

    @override
    def _decode(self, item: Item, ctx: DecodeContext, /) -> float:
        if not item.is_float:
            raise TypeMismatchError('expected a floating-point number')
        value = decode_leaf(item)
        assert isinstance(value, float)
        return value


class Float32Shape(Float64Shape):
    """ Single precision floats, wider values are rounded to the nearest single.

    Finite values beyond the single precision range fail with `OutOfRangeError`.
    """

    __slots__ = ()

    @override
    @classmethod
    def _from_type(cls, type_: type[float], /, *, type_map: Shape.TypeMap) -> Self:
        if type_ is not Float32:
            raise TypeError('expected Float32 type')
        return cls()

    @override
    def _decode(self, item: Item, ctx: DecodeContext, /) -> float:
        value = super()._decode(item, ctx)
        try:
            packed = struct.pack('!f', value)
        except OverflowError:
            raise OutOfRangeError(f'{value!r} does not fit Float32')
        single, = struct.unpack('!f', packed)
        return single
