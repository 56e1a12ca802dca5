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

import os
from argparse import ArgumentParser, ArgumentTypeError, Namespace
from typing import Iterator

from structlog import get_logger

from cbor_oracle.oracle import FuzzStatus, Oracle

logger = get_logger()


def create_parser() -> ArgumentParser:
    from cbor_oracle.cli.util import create_parser
    parser = create_parser()
    parser.add_argument('paths', nargs='*', help='Input files, or directories whose files are all checked')
    parser.add_argument('--hex', action='append', default=[], type=_hex_input, metavar='HEX',
                        help='Hex-encoded input, may be repeated')
    parser.add_argument('--stop-on-violation', action='store_true', help='Stop at the first violation')
    return parser


def _hex_input(text: str) -> bytes:
    try:
        return bytes.fromhex(text)
    except ValueError:
        raise ArgumentTypeError(f'not a hex string: {text!r}')


def iter_inputs(args: Namespace) -> Iterator[tuple[str, bytes]]:
    """Yield (label, data) for every input given on the command line."""
    for i, data in enumerate(args.hex):
        yield f'hex[{i}]', data
    for path in args.paths:
        if os.path.isdir(path):
            for name in sorted(os.listdir(path)):
                filepath = os.path.join(path, name)
                if os.path.isfile(filepath):
                    yield filepath, _read(filepath)
        else:
            yield path, _read(path)


def _read(filepath: str) -> bytes:
    with open(filepath, 'rb') as f:
        return f.read()


def execute(args: Namespace) -> int:
    log = logger.new()
    oracle = Oracle()
    counts = {status: 0 for status in FuzzStatus}
    violations = 0
    for label, data in iter_inputs(args):
        outcome = oracle.check(data)
        counts[outcome.status] += 1
        if outcome.violation is None:
            print(f'{label}: {outcome.status.name.lower()}')
            continue
        violations += 1
        print(f'{label}: violation')
        print(outcome.violation.describe())
        if args.stop_on_violation:
            break
    log.info('inputs checked', interesting=counts[FuzzStatus.INTERESTING],
             uninteresting=counts[FuzzStatus.UNINTERESTING], violations=violations)
    return 1 if violations else 0


def main() -> int:
    from cbor_oracle.cli.util import check_or_exit
    parser = create_parser()
    args = parser.parse_args()
    check_or_exit(bool(args.paths or args.hex), 'no input given, pass paths or --hex')
    return execute(args)
