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

import pytest

from cbor_oracle.utils.result import Err, Ok, Result, UnwrapError, as_result, is_err, is_ok, propagate_result


def test_ok() -> None:
    result: Result[int, str] = Ok(1)
    assert is_ok(result) and not is_err(result)
    assert result.ok() == 1
    assert result.err() is None
    assert result.unwrap() == 1
    assert result.map(lambda x: x + 1) == Ok(2)
    assert result.map_err(len) == Ok(1)
    assert result.and_then(lambda x: Err(str(x))) == Err('1')
    with pytest.raises(UnwrapError):
        result.unwrap_err()


def test_err() -> None:
    result: Result[int, str] = Err('bad')
    assert is_err(result) and not is_ok(result)
    assert result.ok() is None
    assert result.err() == 'bad'
    assert result.unwrap_or(0) == 0
    assert result.map(lambda x: x + 1) == Err('bad')
    assert result.map_err(len) == Err(3)
    with pytest.raises(UnwrapError) as exc_info:
        result.unwrap()
    assert exc_info.value.result == result


def test_unwrap_or_raise() -> None:
    error = ValueError('boom')
    with pytest.raises(ValueError) as exc_info:
        Err(error).unwrap_or_raise()
    assert exc_info.value is error
    assert Ok(5).unwrap_or_raise() == 5


def test_match_variants() -> None:
    match Err(KeyError('k')):
        case Ok(_):
            pytest.fail('not an Ok')
        case Err(KeyError() as e):
            assert e.args == ('k',)


def test_propagate_result() -> None:
    calls = []

    def step(n: int) -> Result[int, str]:
        calls.append(n)
        return Ok(n) if n < 3 else Err(f'step {n}')

    @propagate_result
    def run(count: int) -> Result[list[int], str]:
        return Ok([step(n).unwrap_or_propagate() for n in range(count)])

    assert run(3) == Ok([0, 1, 2])
    calls.clear()
    assert run(10) == Err('step 3')
    assert calls == [0, 1, 2, 3]


def test_unwrap_or_propagate_needs_decorator() -> None:
    with pytest.raises(Exception, match='propagate_result'):
        Err('x').unwrap_or_propagate()


def test_as_result() -> None:
    @as_result(KeyError, IndexError)
    def lookup(values: list[int], i: int) -> int:
        return values[i]

    assert lookup([1, 2], 1) == Ok(2)
    assert isinstance(lookup([1, 2], 5).err(), IndexError)
    with pytest.raises(TypeError):
        lookup(None, 0)  # type: ignore[arg-type]


def test_as_result_requires_exceptions() -> None:
    with pytest.raises(TypeError):
        as_result()
    with pytest.raises(TypeError):
        as_result(int)  # type: ignore[arg-type]
