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

from datetime import datetime

import pytest

from cbor_oracle.codec.types import Uint16
from cbor_oracle.oracle.catalog import DEFAULT_ENTRIES, ShapeCatalog, ShapeDescriptor, ShapeFamily
from cbor_oracle.oracle.samples import NestedRecord
from cbor_oracle.shapes import BigIntShape, TimestampShape


@pytest.fixture(scope='module')
def catalog() -> ShapeCatalog:
    return ShapeCatalog.build()


def test_default_catalog(catalog: ShapeCatalog) -> None:
    assert len(catalog) == len(DEFAULT_ENTRIES)
    assert catalog.names() == [name for name, _ in DEFAULT_ENTRIES]
    assert [descriptor.name for descriptor in catalog] == catalog.names()


@pytest.mark.parametrize(
    ['name', 'family'],
    [
        ('uint16', ShapeFamily.GENERIC),
        ('keyed_record', ShapeFamily.GENERIC),
        ('raw', ShapeFamily.GENERIC),
        ('any', ShapeFamily.GENERIC),
        ('timestamp', ShapeFamily.TIMESTAMP),
        ('bigint', ShapeFamily.BIGINT),
    ],
)
def test_families(catalog: ShapeCatalog, name: str, family: ShapeFamily) -> None:
    descriptor = catalog.get(name)
    assert descriptor.family is family
    assert descriptor.has_dedicated_round_trip() is (family is not ShapeFamily.GENERIC)


def test_dedicated_shapes(catalog: ShapeCatalog) -> None:
    assert isinstance(catalog.get('timestamp').shape, TimestampShape)
    assert isinstance(catalog.get('bigint').shape, BigIntShape)
    dedicated = [descriptor.name for descriptor in catalog if descriptor.has_dedicated_round_trip()]
    assert dedicated == ['timestamp', 'bigint']


def test_lookup(catalog: ShapeCatalog) -> None:
    assert 'raw_field_record' in catalog
    assert 'complex' not in catalog
    with pytest.raises(KeyError):
        catalog.get('complex')


def test_fresh_values(catalog: ShapeCatalog) -> None:
    descriptor = catalog.get('nested_record')
    first, second = descriptor.new(), descriptor.new()
    assert first == second == NestedRecord()
    assert first is not second
    assert first.points is not second.points


def test_custom_catalog() -> None:
    catalog = ShapeCatalog.build([('small', Uint16), ('when', datetime)])
    assert catalog.names() == ['small', 'when']
    assert catalog.get('when').family is ShapeFamily.TIMESTAMP


def test_unique_names() -> None:
    descriptor = ShapeDescriptor.from_annotation('small', Uint16)
    with pytest.raises(ValueError):
        ShapeCatalog([descriptor, descriptor])


def test_unsupported_annotation() -> None:
    with pytest.raises(TypeError):
        ShapeCatalog.build([('complex', complex)])
