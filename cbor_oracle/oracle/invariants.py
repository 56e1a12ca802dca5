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
Structural invariants, predicates over the scanned output of an encoder configuration.

Each check returns `None` when the invariant holds, or a short description of the first offending item.

>>> from cbor_oracle.serialization import scan_complete
>>> SHORTEST_NUMERIC.check(scan_complete(bytes.fromhex('19012c'))) is None
True
>>> SHORTEST_NUMERIC.check(scan_complete(bytes.fromhex('1a0000012c')))
'UNSIGNED_INT argument 300 at offset 0 does not use the shortest head'
>>> SORTED_KEYS.check(scan_complete(bytes.fromhex('a2616202616101')))
'map keys out of order at offset 0'
"""

import math
import struct
from itertools import pairwise
from typing import Callable, NamedTuple, Optional

from cbor_oracle.codec.decoder import decode_leaf, is_bignum
from cbor_oracle.serialization import Item, MajorType
from cbor_oracle.serialization.item import FLOAT16, FLOAT32


class StructuralInvariant(NamedTuple):
    name: str
    description: str
    check: Callable[[Item], Optional[str]]


def _shortest_info(argument: int) -> int:
    if argument < 24:
        return argument
    if argument < 2**8:
        return 24
    if argument < 2**16:
        return 25
    if argument < 2**32:
        return 26
    return 27


def _fits(fmt: str, value: float) -> bool:
    try:
        narrowed, = struct.unpack(fmt, struct.pack(fmt, value))
    except OverflowError:
        return False
    return narrowed == value


def _is_shortest_float(item: Item) -> bool:
    if item.info == FLOAT16:
        return True
    value = decode_leaf(item)
    if math.isnan(value):
        return False
    narrower = ('>e',) if item.info == FLOAT32 else ('>e', '>f')
    return not any(_fits(fmt, value) for fmt in narrower)


def _check_shortest_numeric(root: Item) -> Optional[str]:
    for item in root.walk():
        if item.is_float:
            if not _is_shortest_float(item):
                return f'float at offset {item.start} is not in its shortest lossless width'
        elif item.major is MajorType.SIMPLE or item.argument is None:
            continue
        elif item.info != _shortest_info(item.argument):
            return f'{item.major.name} argument {item.argument} at offset {item.start} does not use the shortest head'
    return None


def _key_order(key: Item) -> tuple[int, bytes]:
    raw = key.raw
    return len(raw), raw


def _check_sorted_keys(root: Item) -> Optional[str]:
    for item in root.walk():
        if item.major is not MajorType.MAP:
            continue
        for (previous, _), (current, _) in pairwise(item.pairs()):
            # equal keys are tolerated, NaN keys all share one canonical encoding
            if _key_order(previous) > _key_order(current):
                return f'map keys out of order at offset {item.start}'
    return None


def _check_no_indefinite(root: Item) -> Optional[str]:
    for item in root.walk():
        if item.is_indefinite:
            return f'indefinite-length {item.major.name} at offset {item.start}'
    return None


def _check_no_tags(root: Item) -> Optional[str]:
    for item in root.walk():
        if item.major is MajorType.TAG:
            return f'tag {item.argument} at offset {item.start}'
    return None


def _check_native_integers(root: Item) -> Optional[str]:
    for item in root.walk():
        if is_bignum(item):
            return f'bignum tag {item.argument} at offset {item.start}'
    return None


def _leading_byte(*allowed: int, majors: tuple[MajorType, ...] = ()) -> Callable[[Item], Optional[str]]:
    def check(root: Item) -> Optional[str]:
        if root.major in majors or root.initial_byte in allowed:
            return None
        return f'unexpected leading byte 0x{root.initial_byte:02x}'
    return check


SHORTEST_NUMERIC = StructuralInvariant(
    'shortest-numeric',
    'integers, lengths, tag numbers and floats use their shortest encoding',
    _check_shortest_numeric,
)
SORTED_KEYS = StructuralInvariant(
    'sorted-keys',
    'map keys are sorted by encoded length, then bytewise',
    _check_sorted_keys,
)
NO_INDEFINITE = StructuralInvariant('no-indefinite', 'no indefinite-length items', _check_no_indefinite)
NO_TAGS = StructuralInvariant('no-tags', 'no tags at all', _check_no_tags)
NATIVE_INTEGERS = StructuralInvariant('native-integers', 'integers never use bignum tags', _check_native_integers)
LEADING_NATIVE_OR_BIGNUM = StructuralInvariant(
    'leading-native-or-bignum',
    'the item is a native integer or a bignum tag',
    _leading_byte(0xc2, 0xc3, majors=(MajorType.UNSIGNED_INT, MajorType.NEGATIVE_INT)),
)
LEADING_BIGNUM_TAG = StructuralInvariant(
    'leading-bignum-tag',
    'the leading byte is 0xc2 or 0xc3',
    _leading_byte(0xc2, 0xc3),
)
LEADING_TAG_0 = StructuralInvariant('leading-tag-0', 'the leading byte is 0xc0', _leading_byte(0xc0))
LEADING_TAG_1 = StructuralInvariant('leading-tag-1', 'the leading byte is 0xc1', _leading_byte(0xc1))
