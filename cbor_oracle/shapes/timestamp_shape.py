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

from datetime import datetime, timedelta, timezone

import cbor2
from typing_extensions import Self, override

from cbor_oracle.codec.decoder import DecodeContext, decode_int, decode_leaf
from cbor_oracle.exception import OutOfRangeError, TypeMismatchError
from cbor_oracle.serialization import Item, MajorType
from cbor_oracle.shapes.shape import Shape

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

TAG_DATETIME_STRING = 0
TAG_EPOCH = 1

_TAG_0_HEAD = bytes([0xc0])


class TimestampShape(Shape[datetime]):
    """ Aware `datetime` values in UTC, with microsecond precision.

    Accepts tag 0 (RFC 3339 text), tag 1 (seconds since the epoch, integer or float) and the untagged forms of both.
    """

    __slots__ = ()
    _is_hashable = True

    @override
    @classmethod
    def _from_type(cls, type_: type[datetime], /, *, type_map: Shape.TypeMap) -> Self:
        if type_ is not datetime:
            raise TypeError('expected datetime type')
        return cls()

    @override
    def new(self) -> datetime:
        return ZERO_TIME

    @override
    def _decode(self, item: Item, ctx: DecodeContext, /) -> datetime:
        match item.major:
            case MajorType.TAG if item.argument == TAG_DATETIME_STRING:
                return self._from_text(item.content)
            case MajorType.TAG if item.argument == TAG_EPOCH:
                return self._from_epoch(item.content)
            case MajorType.TEXT_STRING:
                return self._from_text(item)
            case _:
                return self._from_epoch(item)

    def _from_epoch(self, item: Item) -> datetime:
        seconds: int | float
        if item.major in (MajorType.UNSIGNED_INT, MajorType.NEGATIVE_INT):
            seconds = decode_int(item)
        elif item.is_float:
            seconds = decode_leaf(item)
        else:
            raise TypeMismatchError('expected an epoch timestamp')
        try:
            return EPOCH + timedelta(seconds=seconds)
        except (OverflowError, ValueError) as e:
            raise OutOfRangeError(f'epoch timestamp {seconds!r} is out of range') from e

    def _from_text(self, item: Item) -> datetime:
        if item.major is not MajorType.TEXT_STRING:
            raise TypeMismatchError('expected an RFC 3339 text string')
        try:
            value = cbor2.loads(_TAG_0_HEAD + item.raw)
        except (ValueError, OverflowError) as e:
            raise TypeMismatchError(f'invalid RFC 3339 timestamp: {e}') from e
        if not isinstance(value, datetime):
            raise TypeMismatchError('invalid RFC 3339 timestamp')
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        try:
            return value.astimezone(timezone.utc)
        except OverflowError as e:
            raise OutOfRangeError('timestamp is out of range once converted to UTC') from e
