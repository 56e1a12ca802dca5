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

from dataclasses import dataclass
from enum import IntEnum, StrEnum
from typing import Any, NamedTuple

from cbor_oracle.exception import DecodeError, EncodeError, ErrorKind
from cbor_oracle.utils.result import Result


class FuzzStatus(IntEnum):
    """The value a harness hands back to the fuzzing engine."""
    # no shape could decode the input
    UNINTERESTING = 0
    # at least one shape decoded the input and every check passed
    INTERESTING = 1


class ViolationCategory(StrEnum):
    NON_DETERMINISTIC_DECODE = 'non-deterministic-decode'
    UNEXPECTED_ERROR_KIND = 'unexpected-error-kind'
    ENCODE_FAILURE = 'encode-failure'
    STRUCTURAL_INVARIANT = 'structural-invariant'
    ROUND_TRIP_DECODE = 'round-trip-decode'
    EQUALITY = 'equality'
    NOT_IDEMPOTENT = 'not-idempotent'


@dataclass(frozen=True, slots=True)
class DecodeAttempt:
    shape: str
    configuration: str
    outcome: Result[Any, DecodeError]

    @property
    def error_kind(self) -> ErrorKind | None:
        error = self.outcome.err()
        return None if error is None else error.kind


@dataclass(frozen=True, slots=True)
class EncodeAttempt:
    value: Any
    configuration: str
    outcome: Result[bytes, EncodeError]


@dataclass(frozen=True, slots=True)
class RoundTripResult:
    original: Any
    redecoded: Any
    equal: bool
    # names of the record fields that were normalized before comparing
    exceptions_applied: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class Violation:
    """Everything needed to reproduce a bug found by the oracle."""
    category: ViolationCategory
    shape: str
    configuration: str
    original: Any
    round_tripped: Any = None
    detail: str = ''
    encoded: bytes | None = None

    def describe(self) -> str:
        lines = [
            f'{self.category} violation',
            f'  shape:         {self.shape}',
            f'  configuration: {self.configuration}',
            f'  original:      {self.original!r}',
        ]
        if self.round_tripped is not None:
            lines.append(f'  round-tripped: {self.round_tripped!r}')
        if self.encoded is not None:
            lines.append(f'  encoded:       {self.encoded.hex()}')
        if self.detail:
            lines.append(f'  detail:        {self.detail}')
        return '\n'.join(lines)


class OracleOutcome(NamedTuple):
    status: FuzzStatus
    violation: Violation | None = None

    @property
    def passed(self) -> bool:
        return self.violation is None
