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

import sys
from pathlib import Path
from typing import Any

import pytest
from structlog.testing import capture_logs

from cbor_oracle.cli import check
from cbor_oracle.codec import EncodeOptions
from cbor_oracle.exception import EncodeError
from cbor_oracle.oracle import encoding
from cbor_oracle.utils.result import Err, Result


def _parse(*argv: str) -> Any:
    return check.create_parser().parse_args(list(argv))


def _always_fail(value: Any, options: EncodeOptions) -> Result[bytes, EncodeError]:
    return Err(EncodeError('boom'))


def test_hex_inputs(capsys: pytest.CaptureFixture[str]) -> None:
    with capture_logs():
        assert check.execute(_parse('--hex', '19012c', '--hex', 'ff')) == 0
    assert capsys.readouterr().out == 'hex[0]: interesting\nhex[1]: uninteresting\n'


def test_file_and_directory_inputs(tmp_path: Path) -> None:
    corpus = tmp_path / 'corpus'
    corpus.mkdir()
    (corpus / 'b.cbor').write_bytes(b'\xff')
    (corpus / 'a.cbor').write_bytes(bytes.fromhex('a2616101616102'))
    (corpus / 'nested').mkdir()
    single = tmp_path / 'single.cbor'
    single.write_bytes(b'\x01')

    args = _parse(str(single), str(corpus), '--hex', '00')
    assert list(check.iter_inputs(args)) == [
        ('hex[0]', b'\x00'),
        (str(single), b'\x01'),
        (str(corpus / 'a.cbor'), bytes.fromhex('a2616101616102')),
        (str(corpus / 'b.cbor'), b'\xff'),
    ]
    with capture_logs() as logs:
        assert check.execute(args) == 0
    summary, = [log for log in logs if log['event'] == 'inputs checked']
    assert (summary['interesting'], summary['uninteresting'], summary['violations']) == (3, 1, 0)


def test_violations_set_the_exit_code(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(encoding, 'encode', _always_fail)
    with capture_logs() as logs:
        assert check.execute(_parse('--hex', '01', '--hex', '02')) == 1
    assert [log['category'] for log in logs if log['event'] == 'violation found'] == ['encode-failure'] * 2
    out = capsys.readouterr().out
    assert out.count(': violation\n') == 2
    assert 'encode-failure violation' in out
    assert 'detail:        EncodeError: boom' in out


def test_stop_on_violation(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(encoding, 'encode', _always_fail)
    with capture_logs():
        assert check.execute(_parse('--hex', '01', '--hex', '02', '--stop-on-violation')) == 1
    out = capsys.readouterr().out
    assert 'hex[0]: violation' in out
    assert 'hex[1]' not in out


def test_main_requires_input(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, 'argv', ['cbor-oracle check'])
    with pytest.raises(SystemExit) as exc_info:
        check.main()
    assert exc_info.value.code == 2


def test_invalid_hex_is_a_usage_error(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        _parse('--hex', '19012')
    assert exc_info.value.code == 2
    assert "not a hex string: '19012'" in capsys.readouterr().err
