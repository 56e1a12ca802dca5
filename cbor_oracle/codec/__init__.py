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

from cbor_oracle.codec.decoder import DecodeContext, decode
from cbor_oracle.codec.encoder import encode
from cbor_oracle.codec.options import (
    DEFAULT_DECODE_OPTIONS,
    DEFAULT_ENCODE_OPTIONS,
    BigIntForm,
    DecodeOptions,
    DuplicateKeyMode,
    EncodeOptions,
    IntDecodeMode,
    TimestampForm,
    UnknownFieldMode,
)
from cbor_oracle.codec.types import CustomMarshaler, RawMessage, cbor_field

__all__ = [
    'DEFAULT_DECODE_OPTIONS',
    'DEFAULT_ENCODE_OPTIONS',
    'BigIntForm',
    'CustomMarshaler',
    'DecodeContext',
    'DecodeOptions',
    'DuplicateKeyMode',
    'EncodeOptions',
    'IntDecodeMode',
    'RawMessage',
    'TimestampForm',
    'UnknownFieldMode',
    'cbor_field',
    'decode',
    'encode',
]
