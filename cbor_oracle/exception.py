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
This module contains the error taxonomy shared by the codec binding and the oracle.

Codec errors describe why a single decode or encode attempt failed, each class carries the `ErrorKind` that the
oracle uses to check the error-kind contract of strict decoding configurations:

- `DecodeError` is the generic catch-all, only its subclasses are classified with a specific kind.
- `EncodeError` is raised when the encoder cannot serialize a value, `UnsupportedValueError` is the only encode
  failure that is expected (the value is outside what the configuration can represent).

Oracle violations are not codec errors, they are raised by harnesses when the oracle finds a bug.
"""

from enum import StrEnum
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from cbor_oracle.oracle.outcome import Violation


class ErrorKind(StrEnum):
    GENERIC = 'generic'
    MALFORMED = 'malformed'
    TYPE_MISMATCH = 'type-mismatch'
    OUT_OF_RANGE = 'out-of-range'
    DUPLICATE_KEY = 'duplicate-key'
    UNKNOWN_FIELD = 'unknown-field'
    UNSUPPORTED_VALUE = 'unsupported-value'
    ENCODE_FAILURE = 'encode-failure'


class CodecError(Exception):
    kind: ClassVar[ErrorKind] = ErrorKind.GENERIC


class DecodeError(CodecError):
    """Generic decoding failure, subclasses narrow down the classification."""
    pass


class MalformedError(DecodeError):
    """The input is not well-formed CBOR."""
    kind = ErrorKind.MALFORMED


class OutOfDataError(MalformedError):
    pass


class TrailingDataError(MalformedError):
    pass


class MaxNestingError(MalformedError):
    pass


class TypeMismatchError(DecodeError):
    """The CBOR item cannot be represented by the target shape."""
    kind = ErrorKind.TYPE_MISMATCH


class OutOfRangeError(DecodeError):
    """The value has the right type but doesn't fit in the target shape."""
    kind = ErrorKind.OUT_OF_RANGE


class DuplicateKeyError(DecodeError):
    kind = ErrorKind.DUPLICATE_KEY


class UnknownFieldError(DecodeError):
    kind = ErrorKind.UNKNOWN_FIELD


class EncodeError(CodecError):
    kind = ErrorKind.ENCODE_FAILURE


class UnsupportedValueError(EncodeError):
    """The value is outside the domain that the encoding configuration can represent."""
    kind = ErrorKind.UNSUPPORTED_VALUE


class OracleViolationError(AssertionError):
    """Raised by harnesses to surface a violation to the fuzzing engine as a crash."""

    def __init__(self, violation: 'Violation') -> None:
        super().__init__(violation.describe())
        self.violation = violation
