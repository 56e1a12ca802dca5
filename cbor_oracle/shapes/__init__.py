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

from datetime import datetime
from types import UnionType
from typing import Any, TypeVar

from cbor2 import CBORTag

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
from cbor_oracle.shapes.any_shape import ANY, ANY_KEY, AnyShape
from cbor_oracle.shapes.bigint_shape import BigIntShape
from cbor_oracle.shapes.bool_shape import BoolShape
from cbor_oracle.shapes.bytes_shape import BytesShape
from cbor_oracle.shapes.collection_shape import ListShape
from cbor_oracle.shapes.custom_shape import CustomShape
from cbor_oracle.shapes.float_shape import Float32Shape, Float64Shape
from cbor_oracle.shapes.map_shape import MapShape
from cbor_oracle.shapes.optional_shape import OptionalShape
from cbor_oracle.shapes.raw_shape import RawShape
from cbor_oracle.shapes.record_shape import RecordShape
from cbor_oracle.shapes.shape import Shape
from cbor_oracle.shapes.sized_int_shape import (
    Int8Shape,
    Int16Shape,
    Int32Shape,
    Int64Shape,
    Uint8Shape,
    Uint16Shape,
    Uint32Shape,
    Uint64Shape,
)
from cbor_oracle.shapes.str_shape import StrShape
from cbor_oracle.shapes.tag_shape import TagShape
from cbor_oracle.shapes.timestamp_shape import TimestampShape
from cbor_oracle.shapes.tuple_shape import FixedArrayShape
from cbor_oracle.shapes.utils import CUSTOM_ORIGIN, RECORD_ORIGIN, TypeToShapeMap

__all__ = [
    'ANY',
    'ANY_KEY',
    'DEFAULT_TYPE_MAP',
    'AnyShape',
    'BigIntShape',
    'BoolShape',
    'BytesShape',
    'CustomShape',
    'FixedArrayShape',
    'Float32Shape',
    'Float64Shape',
    'Int8Shape',
    'Int16Shape',
    'Int32Shape',
    'Int64Shape',
    'ListShape',
    'MapShape',
    'OptionalShape',
    'RawShape',
    'RecordShape',
    'Shape',
    'StrShape',
    'TagShape',
    'TimestampShape',
    'TypeToShapeMap',
    'Uint8Shape',
    'Uint16Shape',
    'Uint32Shape',
    'Uint64Shape',
    'make_shape',
]

T = TypeVar('T')

# Mapping between type annotations and Shape classes.
_SHAPES_MAP: TypeToShapeMap = {
    # builtin types:
    bool: BoolShape,
    bytes: BytesShape,
    dict: MapShape,
    float: Float64Shape,
    int: BigIntShape,
    list: ListShape,
    str: StrShape,
    tuple: FixedArrayShape,
    # other Python types:
    Any: AnyShape,
    UnionType: OptionalShape,
    datetime: TimestampShape,
    RECORD_ORIGIN: RecordShape,
    # sized numbers:
    Float32: Float32Shape,
    Int8: Int8Shape,
    Int16: Int16Shape,
    Int32: Int32Shape,
    Int64: Int64Shape,
    Uint8: Uint8Shape,
    Uint16: Uint16Shape,
    Uint32: Uint32Shape,
    Uint64: Uint64Shape,
    # codec types:
    CBORTag: TagShape,
    CUSTOM_ORIGIN: CustomShape,
    RawMessage: RawShape,
}

DEFAULT_TYPE_MAP = Shape.TypeMap(shapes_map=_SHAPES_MAP)


def make_shape(type_: type[T], /, *, type_map: Shape.TypeMap = DEFAULT_TYPE_MAP) -> Shape[T]:
    """ Instantiate the shape of a type annotation.

    >>> make_shape(list[Uint16])
    ListShape(Uint16Shape())
    >>> make_shape(dict[str, int | None])
    MapShape(StrShape(), OptionalShape(BigIntShape()))
    """
    return Shape.from_type(type_, type_map=type_map)
