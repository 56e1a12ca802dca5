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

import dataclasses
from collections.abc import Hashable, Mapping
from types import UnionType
from typing import TYPE_CHECKING, Any, TypeAlias, Union, get_origin

from cbor_oracle.codec.types import CustomMarshaler, is_record_type

if TYPE_CHECKING:
    from cbor_oracle.shapes.shape import Shape

TypeToShapeMap: TypeAlias = Mapping[Hashable, type['Shape']]

# keys used in a `TypeToShapeMap` for families of classes instead of a single type
RECORD_ORIGIN: Hashable = dataclasses.dataclass
CUSTOM_ORIGIN: Hashable = CustomMarshaler


def pretty_type(type_: Any) -> str:
    """ Shows a cleaner string representation for a type.

    >>> pretty_type(int)
    'int'
    >>> pretty_type(list[int])
    'list[int]'
    """
    if hasattr(type_, '__args__'):
        return str(type_)
    return getattr(type_, '__name__', str(type_))


def get_usable_origin_type(type_: Any, /, *, shapes_map: TypeToShapeMap) -> Hashable:
    """ Map a type annotation to the key of the shape class that handles it in `shapes_map`.

    Raises `TypeError` if the annotation is not supported.

    >>> from cbor_oracle.shapes import DEFAULT_TYPE_MAP
    >>> get_usable_origin_type(dict[str, int], shapes_map=DEFAULT_TYPE_MAP.shapes_map)
    <class 'dict'>
    """
    if isinstance(type_, str):
        raise NotImplementedError('string annotations are not supported, resolve them with typing.get_type_hints')

    origin = get_origin(type_) or type_
    if origin is Union:
        origin = UnionType

    if isinstance(origin, Hashable) and origin in shapes_map:
        return origin
    # custom marshalers may also be records, the custom codec takes precedence
    if isinstance(origin, type) and issubclass(origin, CustomMarshaler) and CUSTOM_ORIGIN in shapes_map:
        return CUSTOM_ORIGIN
    if is_record_type(origin) and RECORD_ORIGIN in shapes_map:
        return RECORD_ORIGIN
    raise TypeError(f'type {pretty_type(type_)} is not supported')
