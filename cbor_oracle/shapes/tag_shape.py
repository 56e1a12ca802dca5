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

from cbor2 import CBORTag
from typing_extensions import Self, override

from cbor_oracle.codec.decoder import DecodeContext
from cbor_oracle.exception import TypeMismatchError
from cbor_oracle.serialization import Item, MajorType
from cbor_oracle.shapes.any_shape import ANY
from cbor_oracle.shapes.shape import Shape


class TagShape(Shape[CBORTag]):
    """ Opaque capture of any tag, the tag number is kept and the content is decoded generically.

    Bignum tags are captured as tags too, their content stays a byte string.
    """

    __slots__ = ()

    @override
    @classmethod
    def _from_type(cls, type_: type[CBORTag], /, *, type_map: Shape.TypeMap) -> Self:
        if type_ is not CBORTag:
            raise TypeError('expected CBORTag type')
        return cls()

    @override
    def new(self) -> CBORTag:
        return CBORTag(0, None)

    @override
    def _decode(self, item: Item, ctx: DecodeContext, /) -> CBORTag:
        if item.major is not MajorType.TAG:
            raise TypeMismatchError('expected a tag')
        return CBORTag(item.argument, ANY.decode(item.content, ctx))
