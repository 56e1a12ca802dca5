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

from enum import StrEnum

from cbor_oracle.utils.pydantic import BaseModel


class DuplicateKeyMode(StrEnum):
    LAST_WINS = 'last-wins'
    REJECT = 'reject'


class IntDecodeMode(StrEnum):
    # integers of any size are accepted by generic targets
    ANY_SIZE = 'any-size'
    # native integers in generic targets must fit a signed 64-bit integer
    CONVERT_SIGNED = 'convert-signed'


class UnknownFieldMode(StrEnum):
    IGNORE = 'ignore'
    REJECT = 'reject'


class DecodeOptions(BaseModel):
    duplicate_keys: DuplicateKeyMode = DuplicateKeyMode.LAST_WINS
    int_decode: IntDecodeMode = IntDecodeMode.ANY_SIZE
    unknown_fields: UnknownFieldMode = UnknownFieldMode.IGNORE
    max_nested_levels: int = 32
    max_container_length: int = 131072


class TimestampForm(StrEnum):
    SECONDS = 'seconds'
    MICROSECONDS = 'microseconds'
    ADAPTIVE = 'adaptive'
    TEXTUAL = 'textual'
    TEXTUAL_FRACTION = 'textual-fraction'

    @property
    def is_textual(self) -> bool:
        return self in (TimestampForm.TEXTUAL, TimestampForm.TEXTUAL_FRACTION)


class BigIntForm(StrEnum):
    SHORTEST = 'shortest'
    EXPLICIT_TAG = 'explicit-tag'
    # only integers that fit a native 64-bit head are supported
    FORBIDDEN = 'forbidden'


class EncodeOptions(BaseModel):
    # shortest numbers and strings, raw captures encoded again from their generic value
    canonical: bool = False
    # only used with canonical, map keys in length-first order
    sort_keys: bool = True
    allow_tags: bool = True
    bigint: BigIntForm = BigIntForm.SHORTEST
    timestamp: TimestampForm = TimestampForm.TEXTUAL_FRACTION


DEFAULT_DECODE_OPTIONS = DecodeOptions()
DEFAULT_ENCODE_OPTIONS = EncodeOptions()
