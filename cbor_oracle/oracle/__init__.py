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

from cbor_oracle.oracle.catalog import ShapeCatalog, ShapeDescriptor, ShapeFamily
from cbor_oracle.oracle.decoding import DecodingConfiguration, DecodingConfigurationSet
from cbor_oracle.oracle.driver import Oracle
from cbor_oracle.oracle.encoding import EncodingConfiguration, EncodingConfigurationSet
from cbor_oracle.oracle.equality import EqualityPolicy, deep_equal
from cbor_oracle.oracle.invariants import StructuralInvariant
from cbor_oracle.oracle.outcome import (
    DecodeAttempt,
    EncodeAttempt,
    FuzzStatus,
    OracleOutcome,
    RoundTripResult,
    Violation,
    ViolationCategory,
)

__all__ = [
    'DecodeAttempt',
    'DecodingConfiguration',
    'DecodingConfigurationSet',
    'EncodeAttempt',
    'EncodingConfiguration',
    'EncodingConfigurationSet',
    'EqualityPolicy',
    'FuzzStatus',
    'Oracle',
    'OracleOutcome',
    'RoundTripResult',
    'ShapeCatalog',
    'ShapeDescriptor',
    'ShapeFamily',
    'StructuralInvariant',
    'Violation',
    'ViolationCategory',
    'deep_equal',
]
