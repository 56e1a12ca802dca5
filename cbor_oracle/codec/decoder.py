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
Decoding entry point and the helpers shared by the shapes.

The input is first split into an `Item` tree by the scanner, then the target shape converts the tree into Python
values. Scalar leaves are handed to `cbor2.loads` over their exact span, so the text, float and simple-value semantics
are always the ones of the codec library.

>>> from cbor_oracle.shapes import make_shape
>>> decode(bytes.fromhex('19012c'), make_shape(int))
Ok(300)
>>> decode(bytes.fromhex('19012c00'), make_shape(int)).err()
TrailingDataError('1 trailing byte(s) after the top-level item')
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

import cbor2

from cbor_oracle.codec.options import DEFAULT_DECODE_OPTIONS, DecodeOptions, DuplicateKeyMode
from cbor_oracle.exception import DecodeError, DuplicateKeyError, MalformedError, TypeMismatchError
from cbor_oracle.serialization import Buffer, ByteReader, Item, MajorType, scan_item
from cbor_oracle.utils.result import as_result

if TYPE_CHECKING:
    from cbor_oracle.shapes import Shape

T = TypeVar('T')

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

TAG_POSITIVE_BIGNUM = 2
TAG_NEGATIVE_BIGNUM = 3


@dataclass(frozen=True, slots=True)
class DecodeContext:
    options: DecodeOptions


@as_result(DecodeError)
def decode(data: Buffer, shape: Shape[T], options: DecodeOptions = DEFAULT_DECODE_OPTIONS) -> T:
    """Decode exactly one data item into the given shape, each call reads from its own `ByteReader`."""
    reader = ByteReader(data)
    item = scan_item(
        reader,
        max_nested_levels=options.max_nested_levels,
        max_container_length=options.max_container_length,
    )
    reader.finalize()
    return shape.decode(item, DecodeContext(options))


def decode_leaf(item: Item) -> Any:
    """Decode a scalar item (integer, string, float or simple value) with cbor2."""
    assert item.major not in (MajorType.ARRAY, MajorType.MAP, MajorType.TAG)
    try:
        return cbor2.loads(item.raw)
    except cbor2.CBORDecodeError as e:
        raise MalformedError(str(e)) from e


def decode_int(item: Item) -> int:
    """Value of a native integer item."""
    match item.major, item.argument:
        case MajorType.UNSIGNED_INT, int(argument):
            return argument
        case MajorType.NEGATIVE_INT, int(argument):
            return -1 - argument
        case _:
            raise TypeMismatchError(f'expected an integer, got major type {item.major.value}')


def decode_bignum(item: Item) -> int:
    """Value of a tag 2 or tag 3 item, the content must be a byte string."""
    assert item.major is MajorType.TAG
    content = item.content
    if content.major is not MajorType.BYTE_STRING:
        raise TypeMismatchError('bignum content must be a byte string')
    magnitude = int.from_bytes(decode_leaf(content), byteorder='big', signed=False)
    match item.argument:
        case 2:
            return magnitude
        case 3:
            return -1 - magnitude
        case _:
            raise TypeMismatchError(f'tag {item.argument} is not a bignum')


def is_bignum(item: Item) -> bool:
    return item.major is MajorType.TAG and item.argument in (TAG_POSITIVE_BIGNUM, TAG_NEGATIVE_BIGNUM)


def key_identity(key: Any) -> bytes:
    """Two map keys are the same key when their canonical encodings are identical.

    >>> key_identity(1) == key_identity(1.0)
    False
    >>> key_identity(float('nan')) == key_identity(float('nan'))
    True
    """
    return cbor2.dumps(key, canonical=True)


class KeyTracker:
    """Collect the keys of one map, raising `DuplicateKeyError` on a repeated key when the options require it."""

    __slots__ = ('_reject', '_seen')

    def __init__(self, ctx: DecodeContext) -> None:
        self._reject = ctx.options.duplicate_keys is DuplicateKeyMode.REJECT
        self._seen: set[bytes] = set()

    def add(self, key: Any) -> bytes:
        identity = key_identity(key)
        if identity in self._seen and self._reject:
            raise DuplicateKeyError(f'duplicate map key {key!r}')
        self._seen.add(identity)
        return identity
