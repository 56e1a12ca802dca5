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

from typing import Union

from cbor_oracle.exception import OutOfDataError, TrailingDataError

Buffer = Union[bytes, bytearray, memoryview]


class ByteReader:
    """Single-use reader to consume an immutable byte sequence from the front.

    Every decode attempt must use its own reader, a reader is exhausted by `finalize()` and can't be used again. The
    positions it reports are offsets into `data`, which is never copied after construction.

    >>> reader = ByteReader(bytes.fromhex('0102ff'))
    >>> reader.read_byte()
    1
    >>> bytes(reader.read_bytes(1))
    b'\\x02'
    >>> reader.position
    2
    >>> try:
    ...     reader.finalize()
    ... except TrailingDataError as e:
    ...     print(e)
    1 trailing byte(s) after the top-level item
    """

    __slots__ = ('data', '_view', '_pos', '_finalized')

    def __init__(self, data: Buffer) -> None:
        self.data = bytes(data)
        self._view = memoryview(self.data)
        self._pos = 0
        self._finalized = False

    @property
    def position(self) -> int:
        return self._pos

    def remaining(self) -> int:
        return len(self.data) - self._pos

    def is_empty(self) -> bool:
        return self._pos >= len(self.data)

    def peek_byte(self) -> int:
        """Read a single byte but don't consume it."""
        assert not self._finalized, 'reader already finalized'
        if self.is_empty():
            raise OutOfDataError('not enough bytes to read')
        return self.data[self._pos]

    def read_byte(self) -> int:
        b = self.peek_byte()
        self._pos += 1
        return b

    def read_bytes(self, n: int) -> memoryview:
        """Read exactly n bytes, errors if there isn't enough data."""
        assert not self._finalized, 'reader already finalized'
        if n < 0:
            raise ValueError('value cannot be negative')
        if self.remaining() < n:
            raise OutOfDataError('not enough bytes to read')
        view = self._view[self._pos:self._pos + n]
        self._pos += n
        return view

    def read_uint(self, n: int) -> int:
        return int.from_bytes(self.read_bytes(n), byteorder='big', signed=False)

    def finalize(self) -> None:
        """Check that everything was consumed and make the reader unusable."""
        assert not self._finalized, 'reader already finalized'
        self._finalized = True
        if not self.is_empty():
            raise TrailingDataError(f'{self.remaining()} trailing byte(s) after the top-level item')
