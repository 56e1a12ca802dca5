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

"""
Value types understood by the codec binding, on top of the builtin types and `cbor2`'s own types.

Fixed-size numbers are modeled with `NewType` so they can be used in annotations, at runtime the values are plain
`int` and `float` instances.

Records are dataclasses. By default they map to CBOR maps keyed by field name, a field can use another key (text or
integer) through `cbor_field(key=...)`, and a class that sets `__cbor_positional__ = True` maps to a CBOR array with
one element per field, in declaration order.
"""

from __future__ import annotations

import dataclasses
from abc import ABC, abstractmethod
from typing import Any, ClassVar, NamedTuple, NewType

from typing_extensions import Self

Uint8 = NewType('Uint8', int)
Uint16 = NewType('Uint16', int)
Uint32 = NewType('Uint32', int)
Uint64 = NewType('Uint64', int)
Int8 = NewType('Int8', int)
Int16 = NewType('Int16', int)
Int32 = NewType('Int32', int)
Int64 = NewType('Int64', int)
Float32 = NewType('Float32', float)

_CBOR_FIELD_METADATA = 'cbor'


@dataclasses.dataclass(frozen=True, slots=True)
class RawMessage:
    """The verbatim bytes of one encoded data item.

    An empty message means that nothing was captured, it is encoded as null because zero bytes can't stand for an
    item.
    """
    data: bytes = b''

    def is_empty(self) -> bool:
        return not self.data


class CustomMarshaler(ABC):
    """Values with their own CBOR representation.

    The decoder hands `unmarshal_cbor` the exact bytes of the item, the encoder writes the output of `marshal_cbor`
    verbatim. Subclasses must be constructible without arguments, that instance is their zero value.
    """

    @abstractmethod
    def marshal_cbor(self) -> bytes:
        raise NotImplementedError

    @classmethod
    @abstractmethod
    def unmarshal_cbor(cls, data: bytes) -> Self:
        """Must raise a `DecodeError` when the item is not acceptable."""
        raise NotImplementedError


class RecordField(NamedTuple):
    name: str
    key: str | int
    omitempty: bool


def cbor_field(*, key: str | int | None = None, omitempty: bool = False, **kwargs: Any) -> Any:
    """Like `dataclasses.field`, with the CBOR key and the omit-empty flag."""
    metadata = dict(kwargs.pop('metadata', None) or {})
    metadata[_CBOR_FIELD_METADATA] = (key, omitempty)
    return dataclasses.field(metadata=metadata, **kwargs)


def is_record_type(type_: Any) -> bool:
    return isinstance(type_, type) and dataclasses.is_dataclass(type_)


def is_positional_record(type_: type) -> bool:
    positional: ClassVar[bool] = getattr(type_, '__cbor_positional__', False)
    return positional


def record_fields(type_: type) -> tuple[RecordField, ...]:
    """Inspect a record class and return its fields with their keys, in declaration order.

    >>> @dataclasses.dataclass
    ... class Point:
    ...     x: int = 0
    ...     y: int = cbor_field(key=2, default=0)
    ...     label: str = cbor_field(omitempty=True, default='')
    >>> [tuple(f) for f in record_fields(Point)]
    [('x', 'x', False), ('y', 2, False), ('label', 'label', True)]
    """
    assert is_record_type(type_)
    result = []
    for field in dataclasses.fields(type_):
        key, omitempty = field.metadata.get(_CBOR_FIELD_METADATA, (None, False))
        result.append(RecordField(field.name, field.name if key is None else key, omitempty))
    keys = [f.key for f in result]
    if len(set(keys)) != len(keys):
        raise TypeError(f'{type_.__name__} has duplicate CBOR keys')
    return tuple(result)


def is_empty_value(value: Any) -> bool:
    """What counts as empty for fields marked with omitempty."""
    if value is None or value is False:
        return True
    if isinstance(value, RawMessage):
        return value.is_empty()
    if isinstance(value, (int, float)):
        return value == 0
    if isinstance(value, (str, bytes, list, tuple, dict)):
        return len(value) == 0
    return False
