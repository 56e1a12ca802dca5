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

from typing import Any, NamedTuple, TypeVar, get_type_hints

from typing_extensions import Self, override

from cbor_oracle.codec.decoder import DecodeContext, KeyTracker
from cbor_oracle.codec.options import UnknownFieldMode
from cbor_oracle.codec.types import RecordField, is_positional_record, is_record_type, record_fields
from cbor_oracle.exception import TypeMismatchError, UnknownFieldError
from cbor_oracle.serialization import Item, MajorType
from cbor_oracle.shapes.any_shape import ANY_KEY
from cbor_oracle.shapes.shape import Shape

D = TypeVar('D')


class _Member(NamedTuple):
    field: RecordField
    shape: Shape[Any]


class RecordShape(Shape[D]):
    """ Dataclass records, either keyed (a map) or positional (an array).

    Keyed records accept their fields in any order, missing fields keep their default values and unknown keys are
    skipped unless the options reject them. Positional records need exactly one array element per field.
    """

    __slots__ = ('_type', '_members', '_by_key', '_positional')

    _type: type[D]

    def __init__(self, type_: type[D], members: tuple[_Member, ...], *, positional: bool) -> None:
        self._type = type_
        self._members = members
        self._by_key = {member.field.key: member for member in members}
        self._positional = positional

    @override
    @classmethod
    def _from_type(cls, type_: type[D], /, *, type_map: Shape.TypeMap) -> Self:
        if not is_record_type(type_):
            raise TypeError('expected a dataclass')
        try:
            type_()
        except TypeError as e:
            raise TypeError(f'every field of {type_.__name__} needs a default') from e
        hints = get_type_hints(type_)
        members = tuple(
            _Member(field, Shape.from_type(hints[field.name], type_map=type_map))
            for field in record_fields(type_)
        )
        return cls(type_, members, positional=is_positional_record(type_))

    @property
    def record_type(self) -> type[D]:
        return self._type

    @override
    def new(self) -> D:
        return self._type()

    @override
    def _decode(self, item: Item, ctx: DecodeContext, /) -> D:
        if self._positional:
            values = self._decode_array(item, ctx)
        else:
            values = self._decode_map(item, ctx)
        return self._type(**values)

    def _decode_array(self, item: Item, ctx: DecodeContext) -> dict[str, Any]:
        if item.major is not MajorType.ARRAY:
            raise TypeMismatchError(f'expected an array for {self._type.__name__}')
        if len(item.children) != len(self._members):
            raise TypeMismatchError(
                f'{self._type.__name__} has {len(self._members)} fields, got {len(item.children)} elements'
            )
        return {
            member.field.name: member.shape.decode(child, ctx)
            for member, child in zip(self._members, item.children)
        }

    def _decode_map(self, item: Item, ctx: DecodeContext) -> dict[str, Any]:
        if item.major is not MajorType.MAP:
            raise TypeMismatchError(f'expected a map for {self._type.__name__}')
        tracker = KeyTracker(ctx)
        values: dict[str, Any] = {}
        for key_item, value_item in item.pairs():
            key = ANY_KEY.decode(key_item, ctx)
            tracker.add(key)
            # bool and float keys never match a field, even when they compare equal to an int
            member = self._by_key.get(key) if type(key) in (str, int) else None
            if member is None:
                if ctx.options.unknown_fields is UnknownFieldMode.REJECT:
                    raise UnknownFieldError(f'unknown field {key!r} for {self._type.__name__}')
                continue
            values[member.field.name] = member.shape.decode(value_item, ctx)
        return values

    def __repr__(self) -> str:
        return f'RecordShape({self._type.__name__})'
