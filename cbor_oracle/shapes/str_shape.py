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

from cbor_oracle.codec.decoder import DecodeContext, decode_leaf
from cbor_oracle.exception import TypeMismatchError
from cbor_oracle.serialization import Item, MajorType
from cbor_oracle.shapes.shape import Shape


class StrShape(Shape[str]):
    """ Text strings, definite or indefinite length, must be valid UTF-8.
    """

    __slots__ = ()
    _is_hashable = True

    @override
    @classmethod
    def _from_type(cls, type_: type[str], /, *, type_map: Shape.TypeMap) -> Self:
        if type_ is not str:
            raise TypeError('expected str type')
        return cls()

    @override
    def new(self) -> str:
        return ''

    @override
    def _decode(self, item: Item, ctx: DecodeContext, /) -> str:
        if item.major is not MajorType.TEXT_STRING:
            raise TypeMismatchError('expected a text string')
        value = decode_leaf(item)
        assert isinstance(value, str)
        return value
