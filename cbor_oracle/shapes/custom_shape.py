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

from typing import TypeVar

from typing_extensions import Self, override

from cbor_oracle.codec.decoder import DecodeContext
from cbor_oracle.codec.types import CustomMarshaler
from cbor_oracle.exception import DecodeError
from cbor_oracle.serialization import Item
from cbor_oracle.shapes.shape import Shape

C = TypeVar('C', bound=CustomMarshaler)


class CustomShape(Shape[C]):
    """ Delegates to the `CustomMarshaler` hooks of the target class.
    """

    __slots__ = ('_type',)

    _type: type[C]

    def __init__(self, type_: type[C]) -> None:
        self._type = type_

    @override
    @classmethod
    def _from_type(cls, type_: type[C], /, *, type_map: Shape.TypeMap) -> Self:
        if not isinstance(type_, type) or not issubclass(type_, CustomMarshaler):
            raise TypeError('expected a CustomMarshaler subclass')
        return cls(type_)

    @override
    def new(self) -> C:
        return self._type()

    @override
    def _decode(self, item: Item, ctx: DecodeContext, /) -> C:
        try:
            value = self._type.unmarshal_cbor(item.raw)
        except DecodeError:
            raise
        except Exception as e:
            # anything else raised by the hook is still a rejected item
            raise DecodeError(f'{self._type.__name__}.unmarshal_cbor failed: {e!r}') from e
        assert isinstance(value, self._type)
        return value

    def __repr__(self) -> str:
        return f'CustomShape({self._type.__name__})'
