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
Fuzzing harness for atheris.

Every loaded module is instrumented before fuzzing so the engine gets coverage feedback from the decoding paths. Every
violation is raised as `OracleViolationError` and recorded by the engine as a crash, arguments not consumed here are
handed to libFuzzer (corpus directories, `-runs=N`, ...).
"""

import sys
from typing import Optional

from cbor_oracle.oracle import Oracle

_oracle: Optional[Oracle] = None


def TestOneInput(data: bytes) -> int:
    assert _oracle is not None, 'harness not set up'
    return _oracle.run(data)


def main() -> None:
    global _oracle

    import atheris

    _oracle = Oracle()
    atheris.instrument_all()
    atheris.Setup(sys.argv, TestOneInput, enable_python_coverage=True)
    atheris.Fuzz()
