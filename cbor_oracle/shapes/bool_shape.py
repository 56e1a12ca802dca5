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

from cbor_oracle.codec.decoder import DecodeContext
from cbor_oracle.exception import TypeMismatchError
from cbor_oracle.serialization import Item, MajorType
from cbor_oracle.serialization.item import SIMPLE_FALSE, SIMPLE_TRUE
from cbor_oracle.shapes.shape import Shape


class BoolShape(Shape[bool]):
    """ Represents builtin `bool` values, only the simple values true and false are accepted.
    """

    __slots__ = ()
    _is_hashable = True

    @override
    @classmethod
    def _from_type(cls, type_: type[bool], /, *, type_map: Shape.TypeMap) -> Self:
        if type_ is not bool:
            raise TypeError('expected bool type')
        return cls()

    @override
    def new(self) -> bool:
        return False

    @override
    def _decode(self, item: Item, ctx: DecodeContext, /) -> bool:
        if item.major is not MajorType.SIMPLE or item.info not in (SIMPLE_FALSE, SIMPLE_TRUE):
            raise TypeMismatchError('expected a boolean')
        return item.info == SIMPLE_TRUE
