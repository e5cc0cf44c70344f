"""Tests for geometry kind tags, names and merging."""

import logging

import pytest

from vectortools import GeometryType, type_to_name, merge_geometry_types
from vectortools.engine import flatten_type, has_z, with_z, geometry_type_to_name, geometry_name


class TestKindFlags:
    def test_flatten_drops_the_25d_flag(self):
        assert flatten_type(GeometryType.POLYGON_25D) == GeometryType.POLYGON
        assert flatten_type(GeometryType.POINT) == GeometryType.POINT

    def test_has_z(self):
        assert has_z(GeometryType.MULTI_POINT_25D)
        assert not has_z(GeometryType.MULTI_POINT)

    def test_with_z_on_and_off(self):
        assert with_z(GeometryType.LINE_STRING) == GeometryType.LINE_STRING_25D
        assert with_z(GeometryType.LINE_STRING_25D, False) == GeometryType.LINE_STRING

    def test_with_z_keeps_kinds_without_25d_variant(self):
        assert with_z(GeometryType.NONE) == GeometryType.NONE
        assert with_z(GeometryType.LINEAR_RING) == GeometryType.LINEAR_RING

    def test_unknown_code_falls_back_to_unknown(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert GeometryType.from_code(42) == GeometryType.UNKNOWN
        assert '42' in caplog.text


class TestTypeNames:
    @pytest.mark.parametrize('kind, expected', [
        (GeometryType.POINT, 'Point'),
        (GeometryType.LINE_STRING, 'Line String'),
        (GeometryType.LINEAR_RING, 'Linear Ring'),
        (GeometryType.MULTI_POLYGON_25D, '3D Multi Polygon'),
        (GeometryType.GEOMETRY_COLLECTION, 'Geometry Collection'),
        (GeometryType.UNKNOWN, 'Unknown (any)'),
        (GeometryType.NONE, 'None'),
    ])
    def test_type_to_name(self, kind, expected):
        assert type_to_name(kind) == expected

    def test_unrecognized_code(self):
        assert geometry_type_to_name(42) == 'Unrecognized: 42'

    def test_wkt_keywords(self):
        assert geometry_name(GeometryType.MULTI_LINE_STRING_25D) == 'MULTILINESTRING'
        assert geometry_name(GeometryType.LINEAR_RING) == 'LINEARRING'
        assert geometry_name(GeometryType.UNKNOWN) == 'UNKNOWN'


class TestMergeGeometryTypes:
    def test_same_kind(self):
        assert merge_geometry_types(GeometryType.POINT, GeometryType.POINT) == GeometryType.POINT

    def test_25d_flag_is_kept(self):
        assert merge_geometry_types(GeometryType.POINT_25D, GeometryType.POINT) == GeometryType.POINT_25D

    def test_none_is_neutral(self):
        assert merge_geometry_types(GeometryType.NONE, GeometryType.POLYGON) == GeometryType.POLYGON
        assert merge_geometry_types(GeometryType.POLYGON, GeometryType.NONE) == GeometryType.POLYGON

    def test_collections_merge_to_geometry_collection(self):
        merged = merge_geometry_types(GeometryType.MULTI_POINT, GeometryType.MULTI_POLYGON)
        assert merged == GeometryType.GEOMETRY_COLLECTION

    def test_unrelated_kinds_merge_to_unknown(self):
        assert merge_geometry_types(GeometryType.POINT, GeometryType.LINE_STRING) == GeometryType.UNKNOWN
        assert merge_geometry_types(GeometryType.POINT_25D, GeometryType.LINE_STRING) == GeometryType.UNKNOWN_25D
