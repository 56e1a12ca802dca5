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
from cbor_oracle.codec.options import DEFAULT_DECODE_OPTIONS
from cbor_oracle.codec.types import RawMessage
from cbor_oracle.serialization import Item
from cbor_oracle.shapes.any_shape import ANY
from cbor_oracle.shapes.shape import Shape

# raw captures are validated as generic values with the lenient options, whatever the options of the enclosing decode
_CAPTURE_CONTEXT = DecodeContext(DEFAULT_DECODE_OPTIONS)


class RawShape(Shape[RawMessage]):
    """ Captures the exact bytes of an item, including null.
    """

    __slots__ = ()
    _captures_null = True
    _is_hashable = True

    @override
    @classmethod
    def _from_type(cls, type_: type[RawMessage], /, *, type_map: Shape.TypeMap) -> Self:
        if type_ is not RawMessage:
            raise TypeError('expected RawMessage type')
        return cls()

    @override
    def new(self) -> RawMessage:
        return RawMessage()

    @override
    def _decode(self, item: Item, ctx: DecodeContext, /) -> RawMessage:
        ANY.decode(item, _CAPTURE_CONTEXT)
        return RawMessage(item.raw)
