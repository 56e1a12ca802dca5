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

from typing_extensions import Self, override

from cbor_oracle.codec.decoder import DecodeContext, decode_bignum, decode_int, is_bignum
from cbor_oracle.exception import TypeMismatchError
from cbor_oracle.serialization import Item, MajorType
from cbor_oracle.shapes.shape import Shape


class BigIntShape(Shape[int]):
    """ Arbitrary-precision integers: native integers and the bignum tags 2 and 3.
    """

    __slots__ = ()
    _is_hashable = True

    @override
    @classmethod
    def _from_type(cls, type_: type[int], /, *, type_map: Shape.TypeMap) -> Self:
        if type_ is not int:
            raise TypeError('expected int type')
        return cls()

    @override
    def new(self) -> int:
        return 0

    @override
    def _decode(self, item: Item, ctx: DecodeContext, /) -> int:
        if item.major in (MajorType.UNSIGNED_INT, MajorType.NEGATIVE_INT):
            return decode_int(item)
        if is_bignum(item):
            return decode_bignum(item)
        raise TypeMismatchError('expected an integer or a bignum')
