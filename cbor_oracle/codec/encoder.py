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
Encoding entry point.

All bytes are produced by `cbor2.dumps`. Before that, the value is prepared into objects that cbor2 encodes natively:
records become maps or arrays, timestamps and explicit bignums become `CBORTag` instances in the configured form, and
raw captures and custom marshalers become `_Verbatim` markers whose bytes are written as they are by the `default`
hook. Canonical configurations re-encode raw captures from their generic value instead.

>>> encode(300).unwrap().hex()
'19012c'
>>> encode(2**100, EncodeOptions(bigint=BigIntForm.EXPLICIT_TAG)).unwrap()[:1].hex()
'c2'
>>> encode(2**100, EncodeOptions(bigint=BigIntForm.FORBIDDEN)).err()
UnsupportedValueError('integer 1267650600228229401496703205376 needs a bignum')
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import cbor2
from cbor2 import CBORSimpleValue, CBORTag, FrozenDict

from cbor_oracle.codec.options import DEFAULT_ENCODE_OPTIONS, BigIntForm, EncodeOptions, TimestampForm
from cbor_oracle.codec.types import (
    CustomMarshaler,
    RawMessage,
    is_empty_value,
    is_positional_record,
    is_record_type,
    record_fields,
)
from cbor_oracle.exception import CodecError, EncodeError, UnsupportedValueError
from cbor_oracle.serialization import MajorType, scan_complete
from cbor_oracle.utils.result import as_result

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# float epochs must decode back into the datetime range, year 1 to year 9999
FLOAT_EPOCH_MIN = -62135596800.0
FLOAT_EPOCH_LIMIT = 253402300800.0

NATIVE_INT_MIN = -(2**64)
NATIVE_INT_LIMIT = 2**64


@dataclass(frozen=True, slots=True)
class _Verbatim:
    data: bytes


@as_result(EncodeError)
def encode(value: Any, options: EncodeOptions = DEFAULT_ENCODE_OPTIONS) -> bytes:
    prepared = _Preparer(options).prepare(value)
    return _dumps(prepared, canonical=options.canonical and options.sort_keys)


def explicit_bignum(value: int) -> CBORTag:
    """The tag 2 or tag 3 form of an integer with minimal content.

    >>> explicit_bignum(0)
    CBORTag(2, b'')
    >>> explicit_bignum(-257)
    CBORTag(3, b'\\x01\\x00')
    """
    if value >= 0:
        return CBORTag(2, _minimal_bytes(value))
    return CBORTag(3, _minimal_bytes(-1 - value))


def _minimal_bytes(value: int) -> bytes:
    return value.to_bytes((value.bit_length() + 7) // 8, byteorder='big')


def _write_verbatim(encoder: cbor2.CBOREncoder, value: Any) -> None:
    if not isinstance(value, _Verbatim):
        raise cbor2.CBOREncodeTypeError(f'cannot serialize type {type(value).__name__}')
    encoder.write(value.data)


def _dumps(prepared: Any, *, canonical: bool) -> bytes:
    try:
        return cbor2.dumps(prepared, canonical=canonical, default=_write_verbatim)
    except cbor2.CBOREncodeError as e:
        raise EncodeError(str(e)) from e


class _Preparer:
    __slots__ = ('_options',)

    def __init__(self, options: EncodeOptions) -> None:
        self._options = options

    def prepare(self, value: Any, *, key: bool = False) -> Any:
        match value:
            case None | bool() | str() | bytes() | CBORSimpleValue():
                return value
            case float():
                return self._prepare_float(value)
            case _ if value is cbor2.undefined:
                return value
            case int():
                return self._prepare_int(value)
            case datetime():
                return self._prepare_datetime(value)
            case CBORTag():
                return self._prepare_tag(value, key=key)
            case RawMessage():
                return self._prepare_raw(value, key=key)
            case CustomMarshaler():
                return self._prepare_custom(value)
            case _ if is_record_type(type(value)):
                return self._prepare_record(value)
            case list() | tuple():
                items = [self.prepare(item, key=key) for item in value]
                return tuple(items) if key else items
            case dict() | FrozenDict():
                return self._prepare_map(value, key=key)
            case _:
                raise EncodeError(f'cannot encode values of type {type(value).__name__}')

    def _check_tags_allowed(self, what: str) -> None:
        if not self._options.allow_tags:
            raise UnsupportedValueError(f'{what} needs a tag and tags are not allowed')

    def _prepare_float(self, value: float) -> Any:
        if self._options.canonical and not self._options.sort_keys:
            # cbor2 only shrinks floats together with sorting the keys, so the float alone goes through it
            return _Verbatim(_dumps(value, canonical=True))
        return value

    def _prepare_int(self, value: int) -> Any:
        match self._options.bigint:
            case BigIntForm.SHORTEST:
                return value
            case BigIntForm.EXPLICIT_TAG:
                self._check_tags_allowed('an explicit bignum')
                return explicit_bignum(value)
            case BigIntForm.FORBIDDEN:
                if not NATIVE_INT_MIN <= value < NATIVE_INT_LIMIT:
                    raise UnsupportedValueError(f'integer {value} needs a bignum')
                return value

    def _prepare_datetime(self, value: datetime) -> CBORTag:
        if value.tzinfo is None:
            raise EncodeError('naive datetime values cannot be encoded')
        self._check_tags_allowed('a timestamp')
        value = value.astimezone(timezone.utc)
        delta = value - EPOCH
        match self._options.timestamp:
            case TimestampForm.SECONDS:
                return CBORTag(1, delta // timedelta(seconds=1))
            case TimestampForm.MICROSECONDS:
                return CBORTag(1, self._float_epoch(delta))
            case TimestampForm.ADAPTIVE:
                if value.microsecond:
                    return CBORTag(1, self._float_epoch(delta))
                return CBORTag(1, delta // timedelta(seconds=1))
            case TimestampForm.TEXTUAL:
                return CBORTag(0, _rfc3339(value.replace(microsecond=0), timespec='seconds'))
            case TimestampForm.TEXTUAL_FRACTION:
                return CBORTag(0, _rfc3339(value, timespec='microseconds'))

    @staticmethod
    def _float_epoch(delta: timedelta) -> float:
        seconds = delta / timedelta(seconds=1)
        if not FLOAT_EPOCH_MIN <= seconds < FLOAT_EPOCH_LIMIT:
            raise UnsupportedValueError(f'float epoch {seconds!r} leaves the datetime range')
        return seconds

    def _prepare_tag(self, value: CBORTag, *, key: bool) -> CBORTag:
        self._check_tags_allowed(f'tag {value.tag}')
        if value.tag in (2, 3) and self._options.bigint is BigIntForm.FORBIDDEN:
            raise UnsupportedValueError(f'tag {value.tag} is a bignum')
        return CBORTag(value.tag, self.prepare(value.value, key=key))

    def _prepare_raw(self, value: RawMessage, *, key: bool) -> Any:
        if value.is_empty():
            return None
        if not self._options.canonical:
            return _Verbatim(value.data)
        # canonical output can't embed arbitrary bytes, the captured item is encoded again from its generic value
        from cbor_oracle.codec.decoder import decode
        from cbor_oracle.shapes import ANY
        try:
            generic = decode(value.data, ANY).unwrap_or_raise()
        except CodecError as e:
            raise EncodeError(f'raw capture is not a valid item: {e}') from e
        return self.prepare(generic, key=key)

    def _prepare_custom(self, value: CustomMarshaler) -> _Verbatim:
        data = value.marshal_cbor()
        try:
            item = scan_complete(data)
        except CodecError as e:
            raise EncodeError(f'{type(value).__name__}.marshal_cbor produced a malformed item: {e}') from e
        if not self._options.allow_tags and any(i.major is MajorType.TAG for i in item.walk()):
            raise UnsupportedValueError(f'{type(value).__name__} uses tags and tags are not allowed')
        return _Verbatim(data)

    def _prepare_record(self, value: Any) -> Any:
        fields = record_fields(type(value))
        if is_positional_record(type(value)):
            return [self.prepare(getattr(value, field.name)) for field in fields]
        result = {}
        for field in fields:
            field_value = getattr(value, field.name)
            if field.omitempty and is_empty_value(field_value):
                continue
            result[field.key] = self.prepare(field_value)
        return result

    def _prepare_map(self, value: Any, *, key: bool) -> Any:
        result = {self.prepare(k, key=True): self.prepare(v, key=key) for k, v in value.items()}
        if key:
            # maps inside keys are written as already encoded items, with the same canonical rules
            return _Verbatim(_dumps(result, canonical=self._options.canonical and self._options.sort_keys))
        return result


def _rfc3339(value: datetime, *, timespec: str) -> str:
    return value.isoformat(timespec=timespec).replace('+00:00', 'Z')

