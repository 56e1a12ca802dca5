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

from argparse import ArgumentParser, Namespace

from cbor_oracle.conf.get_settings import get_global_settings
from cbor_oracle.oracle import DecodingConfigurationSet, EncodingConfigurationSet, ShapeCatalog
from cbor_oracle.shapes.utils import pretty_type


def create_parser() -> ArgumentParser:
    from cbor_oracle.cli.util import create_parser
    parser = create_parser()
    parser.add_argument('--shapes-only', action='store_true', help='Only list the shape catalog')
    return parser


def execute(args: Namespace) -> None:
    catalog = ShapeCatalog.build()
    longest = max(len(name) for name in catalog.names())
    print('Shapes:')
    for descriptor in catalog:
        filling = ' ' * (longest - len(descriptor.name))
        print(f'    {descriptor.name}{filling}   {pretty_type(descriptor.annotation)} ({descriptor.family})')
    if args.shapes_only:
        return

    settings = get_global_settings()
    print()
    print('Decoding configurations:')
    for decoding in DecodingConfigurationSet.from_settings(settings):
        expected = decoding.expected_error or '-'
        print(f'    {decoding.name} (accepted failure: {expected})')
    print()
    print('Encoding configurations:')
    for encoding in EncodingConfigurationSet.from_settings(settings):
        invariants = ', '.join(invariant.name for invariant in encoding.invariants) or '-'
        print(f'    {encoding.name} (invariants: {invariants})')


def main():
    parser = create_parser()
    args = parser.parse_args()
    execute(args)
