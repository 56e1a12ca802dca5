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
Record and custom types that the catalog decodes into.

They cover the structurally distinct record paths: text keys, integer keys, positional fields, omitted empty fields,
nested records behind optional references and a raw capture field.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Literal, Optional

import cbor2
from typing_extensions import Self, override

from cbor_oracle.codec.decoder import decode
from cbor_oracle.codec.types import CustomMarshaler, Int64, RawMessage, Uint32, cbor_field
from cbor_oracle.exception import TypeMismatchError
from cbor_oracle.shapes.any_shape import ANY


@dataclass
class KeyedRecord:
    name: str = ''
    count: Uint32 = Uint32(0)
    labels: list[str] = field(default_factory=list)
    note: str = cbor_field(omitempty=True, default='')


@dataclass
class IntKeyedRecord:
    """Small integer keys, like the command maps of authenticator protocols."""
    kind: Int64 = cbor_field(key=1, default=Int64(0))
    payload: bytes = cbor_field(key=2, default=b'')
    options: dict[str, bool] = cbor_field(key=3, default_factory=dict)


@dataclass
class PositionalRecord:
    __cbor_positional__: ClassVar[bool] = True

    x: Int64 = Int64(0)
    y: Int64 = Int64(0)
    tag: str = ''


@dataclass
class NestedRecord:
    inner: Optional[KeyedRecord] = None
    points: list[PositionalRecord] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class RawFieldRecord:
    kind: str = ''
    body: RawMessage = field(default_factory=RawMessage)


@dataclass
class Blob(CustomMarshaler):
    """Bytes or text carried in a `[kind, payload]` pair, with its own canonical encoding."""

    kind: Literal['bytes', 'text'] = 'bytes'
    data: bytes = b''

    @override
    def marshal_cbor(self) -> bytes:
        payload = self.data if self.kind == 'bytes' else self.data.decode('utf-8')
        return cbor2.dumps([self.kind, payload], canonical=True)

    @override
    @classmethod
    def unmarshal_cbor(cls, data: bytes) -> Self:
        # the pair is read as a generic value, tags stay opaque `CBORTag` instances
        match decode(data, ANY).unwrap_or_raise():
            case ['bytes', bytes() as payload]:
                return cls('bytes', payload)
            case ['text', str() as payload]:
                return cls('text', payload.encode('utf-8'))
            case _:
                raise TypeMismatchError('a blob is a [kind, payload] pair')
