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

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any, Iterable, Iterator, Optional

from cbor2 import CBORTag
from structlog import get_logger
from typing_extensions import Self

from cbor_oracle.codec.types import (
    Float32,
    Int8,
    Int16,
    Int32,
    Int64,
    RawMessage,
    Uint8,
    Uint16,
    Uint32,
    Uint64,
)
from cbor_oracle.oracle.equality import deep_equal
from cbor_oracle.oracle.samples import (
    Blob,
    IntKeyedRecord,
    KeyedRecord,
    NestedRecord,
    PositionalRecord,
    RawFieldRecord,
)
from cbor_oracle.shapes import BigIntShape, Shape, TimestampShape, make_shape

logger = get_logger()


class ShapeFamily(StrEnum):
    GENERIC = 'generic'
    TIMESTAMP = 'timestamp'
    BIGINT = 'bigint'


@dataclass(frozen=True, slots=True)
class ShapeDescriptor:
    name: str
    annotation: Any
    shape: Shape[Any]
    family: ShapeFamily = ShapeFamily.GENERIC

    @classmethod
    def from_annotation(cls, name: str, annotation: Any) -> Self:
        shape = make_shape(annotation)
        match shape:
            case TimestampShape():
                family = ShapeFamily.TIMESTAMP
            case BigIntShape():
                family = ShapeFamily.BIGINT
            case _:
                family = ShapeFamily.GENERIC
        return cls(name, annotation, shape, family)

    def new(self) -> Any:
        """A fresh zero value, what an empty target looks like before decoding."""
        return self.shape.new()

    def equals(self, a: Any, b: Any) -> bool:
        return deep_equal(a, b)

    def has_dedicated_round_trip(self) -> bool:
        return self.family is not ShapeFamily.GENERIC


# (name, annotation) of every shape exercised by default, in the order they are tried
DEFAULT_ENTRIES: tuple[tuple[str, Any], ...] = (
    # scalars
    ('bool', bool),
    ('uint8', Uint8),
    ('uint16', Uint16),
    ('uint32', Uint32),
    ('uint64', Uint64),
    ('int8', Int8),
    ('int16', Int16),
    ('int32', Int32),
    ('int64', Int64),
    ('float32', Float32),
    ('float64', float),
    ('text', str),
    ('bytes', bytes),
    # optional references
    ('optional_text', Optional[str]),
    ('optional_uint64', Optional[Uint64]),
    ('optional_record', Optional[KeyedRecord]),
    # containers
    ('list_uint64', list[Uint64]),
    ('list_any', list[Any]),
    ('fixed_int64x3', tuple[Int64, Int64, Int64]),
    ('map_text_any', dict[str, Any]),
    ('map_uint64_text', dict[Uint64, str]),
    ('map_any_any', dict[Any, Any]),
    ('nested_containers', list[dict[str, list[Int64]]]),
    ('any', Any),
    # records
    ('keyed_record', KeyedRecord),
    ('int_keyed_record', IntKeyedRecord),
    ('positional_record', PositionalRecord),
    ('nested_record', NestedRecord),
    ('raw_field_record', RawFieldRecord),
    # captures and hooks
    ('raw', RawMessage),
    ('tag', CBORTag),
    ('blob', Blob),
    ('list_blob', list[Blob]),
    # dedicated round trips
    ('timestamp', datetime),
    ('bigint', int),
)


class ShapeCatalog:
    """ Ordered, read-only collection of shape descriptors.

    A catalog is built once and shared by every evaluation, descriptors are immutable and so are their shapes.
    """

    __slots__ = ('_descriptors', '_by_name')

    def __init__(self, descriptors: Iterable[ShapeDescriptor]) -> None:
        self._descriptors = tuple(descriptors)
        self._by_name = {descriptor.name: descriptor for descriptor in self._descriptors}
        if len(self._by_name) != len(self._descriptors):
            raise ValueError('shape names must be unique')

    @classmethod
    def build(cls, entries: Iterable[tuple[str, Any]] = DEFAULT_ENTRIES) -> Self:
        catalog = cls(ShapeDescriptor.from_annotation(name, annotation) for name, annotation in entries)
        logger.new().debug('shape catalog built', shapes=len(catalog))
        return catalog

    def __iter__(self) -> Iterator[ShapeDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def get(self, name: str) -> ShapeDescriptor:
        return self._by_name[name]

    def names(self) -> list[str]:
        return [descriptor.name for descriptor in self._descriptors]
