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

from typing import Any

import cbor2
from cbor2 import CBORTag
from hypothesis import given, settings
from hypothesis import strategies as st

from cbor_oracle.conf.settings import OracleSettings
from cbor_oracle.oracle.driver import Oracle
from cbor_oracle.oracle.outcome import FuzzStatus, OracleOutcome

ORACLE = Oracle(settings=OracleSettings())

scalars = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(min_value=-(2**70), max_value=2**70),
    st.floats(allow_nan=True, allow_infinity=True),
    st.text(max_size=16),
    st.binary(max_size=16),
)

keys = st.one_of(st.text(max_size=8), st.integers(min_value=-1000, max_value=2**40))

documents = st.recursive(
    scalars,
    lambda children: st.one_of(
        st.lists(children, max_size=4),
        st.dictionaries(keys=keys, values=children, max_size=4),
    ),
    max_leaves=20,
)

tagged_documents = st.recursive(
    scalars,
    lambda children: st.one_of(
        st.lists(children, max_size=4),
        st.dictionaries(keys=keys, values=children, max_size=4),
        st.builds(CBORTag, st.integers(min_value=0, max_value=2**64 - 1), children),
    ),
    max_leaves=20,
)


@settings(max_examples=300, deadline=None)
@given(data=st.binary(max_size=64))
def test_arbitrary_bytes_never_raise(data: bytes) -> None:
    assert isinstance(ORACLE.check(data), OracleOutcome)


@settings(max_examples=200, deadline=None)
@given(obj=documents)
def test_well_formed_documents_are_interesting(obj: Any) -> None:
    outcome = ORACLE.check(cbor2.dumps(obj))
    assert isinstance(outcome, OracleOutcome)
    assert outcome.status is FuzzStatus.INTERESTING


@settings(max_examples=200, deadline=None)
@given(obj=tagged_documents)
def test_tagged_documents_never_raise(obj: Any) -> None:
    assert isinstance(ORACLE.check(cbor2.dumps(obj)), OracleOutcome)


@settings(max_examples=100, deadline=None)
@given(prefix=st.binary(min_size=1, max_size=4), obj=documents)
def test_truncated_and_prefixed_documents_never_raise(prefix: bytes, obj: Any) -> None:
    encoded = cbor2.dumps(obj)
    assert isinstance(ORACLE.check(prefix + encoded), OracleOutcome)
    assert isinstance(ORACLE.check(encoded[:-1]), OracleOutcome)
