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

r"""
This module splits a CBOR data item into a tree of `Item` spans without interpreting any value.

Every item starts with a head: the initial byte holds the major type (3 high bits) and the additional information
(5 low bits), the additional information is either the argument itself (< 24), the size of the argument that follows
(24..27 for 1, 2, 4 and 8 bytes) or 31 for indefinite-length items.

>>> item = scan_item(ByteReader(bytes.fromhex('a2616101616282f5f6')))
>>> item.major.name, item.argument, len(item.children)
('MAP', 2, 4)
>>> [(k.raw.hex(), v.raw.hex()) for k, v in item.pairs()]
[('6161', '01'), ('6162', '82f5f6')]
>>> item.children[3].children[1].is_null
True

Indefinite-length items have no argument and their span includes the final break byte:

>>> item = scan_item(ByteReader(bytes.fromhex('9f0102ff')))
>>> item.is_indefinite, item.end, [c.argument for c in item.children]
(True, 4, [1, 2])

Malformed input raises an exception from the `MalformedError` family:

>>> scan_item(ByteReader(bytes.fromhex('1c')))
Traceback (most recent call last):
...
cbor_oracle.exception.MalformedError: reserved additional information 28
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterator

from cbor_oracle.exception import MalformedError, MaxNestingError, OutOfDataError
from cbor_oracle.serialization.byte_reader import ByteReader

INDEFINITE = 31
BREAK = 0xff

# additional information -> argument size in bytes
_ARGUMENT_SIZES = {24: 1, 25: 2, 26: 4, 27: 8}

SIMPLE_FALSE = 20
SIMPLE_TRUE = 21
SIMPLE_NULL = 22
SIMPLE_UNDEFINED = 23
FLOAT16 = 25
FLOAT32 = 26
FLOAT64 = 27


class MajorType(IntEnum):
    UNSIGNED_INT = 0
    NEGATIVE_INT = 1
    BYTE_STRING = 2
    TEXT_STRING = 3
    ARRAY = 4
    MAP = 5
    TAG = 6
    SIMPLE = 7


@dataclass(frozen=True, slots=True)
class Item:
    """A span of one well-formed data item inside `data`.

    `children` holds array elements, flattened map keys and values, the single tag content, or the chunks of an
    indefinite-length string.
    """
    data: bytes = field(repr=False)
    major: MajorType
    info: int
    argument: int | None
    start: int
    head_end: int
    end: int
    children: tuple[Item, ...] = ()

    @property
    def raw(self) -> bytes:
        return self.data[self.start:self.end]

    @property
    def head(self) -> bytes:
        return self.data[self.start:self.head_end]

    @property
    def initial_byte(self) -> int:
        return self.data[self.start]

    @property
    def is_indefinite(self) -> bool:
        return self.argument is None

    @property
    def is_null(self) -> bool:
        """True for both null and undefined."""
        return self.major is MajorType.SIMPLE and self.info in (SIMPLE_NULL, SIMPLE_UNDEFINED)

    @property
    def is_float(self) -> bool:
        return self.major is MajorType.SIMPLE and self.info in (FLOAT16, FLOAT32, FLOAT64)

    @property
    def content(self) -> Item:
        assert self.major is MajorType.TAG
        content, = self.children
        return content

    def pairs(self) -> Iterator[tuple[Item, Item]]:
        assert self.major is MajorType.MAP
        it = iter(self.children)
        return zip(it, it)

    def walk(self) -> Iterator[Item]:
        """Yield this item and all nested items in pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()


def scan_item(reader: ByteReader, *, max_nested_levels: int = 32, max_container_length: int = 131072) -> Item:
    """Scan exactly one data item from the reader, leaving any following bytes unread."""
    scanner = _Scanner(reader, max_nested_levels=max_nested_levels, max_container_length=max_container_length)
    item = scanner.scan(level=0, allow_break=False)
    assert item is not None
    return item


def scan_complete(data: bytes, *, max_nested_levels: int = 32, max_container_length: int = 131072) -> Item:
    """Scan a byte sequence that must hold exactly one data item."""
    reader = ByteReader(data)
    item = scan_item(reader, max_nested_levels=max_nested_levels, max_container_length=max_container_length)
    reader.finalize()
    return item


class _Scanner:
    __slots__ = ('_reader', '_max_nested_levels', '_max_container_length')

    def __init__(self, reader: ByteReader, *, max_nested_levels: int, max_container_length: int) -> None:
        self._reader = reader
        self._max_nested_levels = max_nested_levels
        self._max_container_length = max_container_length

    def scan(self, *, level: int, allow_break: bool) -> Item | None:
        """Scan one item, returns None when a break code is found where `allow_break` permits it."""
        reader = self._reader
        start = reader.position
        initial_byte = reader.read_byte()
        if initial_byte == BREAK:
            if not allow_break:
                raise MalformedError('unexpected break code')
            return None
        major = MajorType(initial_byte >> 5)
        info = initial_byte & 0x1f
        argument = self._read_argument(major, info)
        head_end = reader.position

        children: tuple[Item, ...] = ()
        match major:
            case MajorType.BYTE_STRING | MajorType.TEXT_STRING:
                if argument is None:
                    children = self._scan_chunks(major, level)
                else:
                    self._check_length(argument, minimum_size=1)
                    reader.read_bytes(argument)
            case MajorType.ARRAY:
                self._check_level(level)
                children = self._scan_children(argument, 1, level)
            case MajorType.MAP:
                self._check_level(level)
                children = self._scan_children(argument, 2, level)
            case MajorType.TAG:
                self._check_level(level)
                content = self.scan(level=level + 1, allow_break=False)
                assert content is not None
                children = (content,)
            case _:
                pass

        return Item(reader.data, major, info, argument, start, head_end, reader.position, children)

    def _read_argument(self, major: MajorType, info: int) -> int | None:
        if info < 24:
            return info
        if info in _ARGUMENT_SIZES:
            argument = self._reader.read_uint(_ARGUMENT_SIZES[info])
            if major is MajorType.SIMPLE and info == 24 and argument < 32:
                raise MalformedError(f'invalid two-byte simple value {argument}')
            return argument
        if info == INDEFINITE:
            if major in (MajorType.UNSIGNED_INT, MajorType.NEGATIVE_INT, MajorType.TAG, MajorType.SIMPLE):
                raise MalformedError(f'indefinite length not allowed for major type {major.value}')
            return None
        raise MalformedError(f'reserved additional information {info}')

    def _check_level(self, level: int) -> None:
        if level + 1 > self._max_nested_levels:
            raise MaxNestingError(f'exceeded max nested levels ({self._max_nested_levels})')

    def _check_length(self, count: int, *, minimum_size: int) -> None:
        """Reject declared lengths that can't possibly be satisfied by the remaining input."""
        if count * minimum_size > self._reader.remaining():
            raise OutOfDataError('declared length exceeds remaining data')

    def _scan_children(self, argument: int | None, arity: int, level: int) -> tuple[Item, ...]:
        children: list[Item] = []
        if argument is not None:
            if argument > self._max_container_length:
                raise MalformedError(f'container length {argument} exceeds {self._max_container_length}')
            self._check_length(argument * arity, minimum_size=1)
            for _ in range(argument * arity):
                child = self.scan(level=level + 1, allow_break=False)
                assert child is not None
                children.append(child)
            return tuple(children)

        while True:
            # a break is only allowed where a new element (or map key) would start
            child = self.scan(level=level + 1, allow_break=len(children) % arity == 0)
            if child is None:
                break
            children.append(child)
            if len(children) > self._max_container_length * arity:
                raise MalformedError(f'container length exceeds {self._max_container_length}')
        return tuple(children)

    def _scan_chunks(self, major: MajorType, level: int) -> tuple[Item, ...]:
        chunks: list[Item] = []
        while True:
            chunk = self.scan(level=level, allow_break=True)
            if chunk is None:
                return tuple(chunks)
            if chunk.major is not major or chunk.is_indefinite:
                raise MalformedError('indefinite-length string chunk of the wrong type')
            chunks.append(chunk)
