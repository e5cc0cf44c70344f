"""Tests for the geometry factory, the parsing constructors and handle ownership."""

import pytest

from vectortools import (
    GeometryType,
    Geometry,
    Point,
    Point25D,
    LineString,
    LineString25D,
    LinearRing,
    Polygon,
    Polygon25D,
    MultiPoint,
    MultiLineString,
    MultiPolygon,
    MultiPolygon25D,
    GeometryCollection,
    GeometryCollection25D,
    NoneGeometry,
    UnknownGeometry,
    factory,
    create,
    create_from_wkt,
    AllocationError,
    InvalidHandle,
    ParseError,
    use_engine
)

from fakes import FixedKindEngine

WKT_SAMPLES = [
    'POINT (1 2)',
    'POINT (1 2 3)',
    'LINESTRING (0 0,1 1,2 0)',
    'LINESTRING (0 0 1,1 1 2)',
    'LINEARRING (0 0,0 1,1 1,0 0)',
    'POLYGON ((0 0,0 10,10 10,10 0,0 0),(2 2,2 4,4 4,4 2,2 2))',
    'MULTIPOINT (0 0,1 1)',
    'MULTILINESTRING ((0 0,1 1),(2 2,3 3))',
    'MULTIPOLYGON (((0 0,0 1,1 1,0 0)),((0 0,1 1,1 0,0 0)))',
    'GEOMETRYCOLLECTION (POINT (1 2),LINESTRING (0 0,1 1))',
    'GEOMETRYCOLLECTION (POINT (1 2 3))',
    'POINT EMPTY',
    'POLYGON EMPTY',
]


class TestCreate:
    @pytest.mark.parametrize('kind, variant', [
        (GeometryType.POINT, Point),
        (GeometryType.POINT_25D, Point25D),
        (GeometryType.LINE_STRING, LineString),
        (GeometryType.LINE_STRING_25D, LineString25D),
        (GeometryType.LINEAR_RING, LinearRing),
        (GeometryType.POLYGON, Polygon),
        (GeometryType.POLYGON_25D, Polygon25D),
        (GeometryType.MULTI_POINT, MultiPoint),
        (GeometryType.MULTI_LINE_STRING, MultiLineString),
        (GeometryType.MULTI_POLYGON, MultiPolygon),
        (GeometryType.MULTI_POLYGON_25D, MultiPolygon25D),
        (GeometryType.GEOMETRY_COLLECTION, GeometryCollection),
    ])
    def test_variant_matches_kind(self, kind, variant):
        geometry = create(kind)
        assert type(geometry) is variant
        assert geometry.is_empty()
        assert geometry.owned

    def test_empty_3d_collection_reports_a_2d_kind(self):
        geometry = create(GeometryType.GEOMETRY_COLLECTION_25D)
        assert type(geometry) is GeometryCollection
        assert geometry.geometry_type == GeometryType.GEOMETRY_COLLECTION

    @pytest.mark.parametrize('kind', [GeometryType.NONE, GeometryType.UNKNOWN])
    def test_kinds_without_allocation(self, kind):
        with pytest.raises(AllocationError):
            create(kind)

    def test_variant_class_allocates_its_kind(self):
        polygon = Polygon()
        assert polygon.geometry_type == GeometryType.POLYGON
        assert polygon.to_wkt() == 'POLYGON EMPTY'

    def test_base_class_needs_a_handle(self):
        with pytest.raises(InvalidHandle):
            Geometry()

    def test_special_kinds_cannot_be_allocated(self):
        with pytest.raises(AllocationError):
            NoneGeometry()
        with pytest.raises(AllocationError):
            UnknownGeometry()


class TestFactory:
    def test_null_handle(self):
        assert factory(None) is None

    @pytest.mark.parametrize('wkt', WKT_SAMPLES)
    def test_clone_round_trip(self, wkt):
        geometry = create_from_wkt(wkt)
        assert factory(geometry.clone()).equals(geometry)

    def test_ownership_moves_to_the_new_wrapper(self):
        original = create_from_wkt('POINT (1 2)')
        rewrapped = factory(original)
        assert rewrapped.owned
        assert not original.owned
        original.destroy()
        assert rewrapped.to_wkt() == 'POINT (1 2)'

    def test_rewrap_picks_up_a_new_kind(self):
        collection = create(GeometryType.GEOMETRY_COLLECTION)
        collection.add_geometry(Point25D.from_coordinates(1, 2, 3))
        assert collection.geometry_type == GeometryType.GEOMETRY_COLLECTION_25D
        assert type(factory(collection)) is GeometryCollection25D

    def test_linear_ring_is_told_apart_from_line_string(self):
        ring = create_from_wkt('LINEARRING (0 0,0 1,1 1,0 0)')
        assert type(ring) is LinearRing
        assert ring.geometry_type == GeometryType.LINE_STRING
        assert ring.type_to_name() == 'Line String'

    def test_3d_line_string_is_never_taken_for_a_ring(self):
        polygon = create_from_wkt('POLYGON ((0 0 1,0 1 1,1 1 1,0 0 1))')
        assert type(polygon.exterior_ring) is LineString25D
        ring_copy = polygon.exterior_ring.clone()
        assert ring_copy.geometry_type == GeometryType.LINE_STRING_25D
        assert type(ring_copy) is LineString25D
        assert type(factory(ring_copy)) is LineString25D

    def test_unrecognized_kind_gives_unknown_geometry(self):
        point = create_from_wkt('POINT (1 2)')
        with use_engine(FixedKindEngine(42)) as odd_engine:
            geometry = factory(point.clone().release_ownership(), engine=odd_engine)
            assert type(geometry) is UnknownGeometry
            assert geometry.geometry_type == GeometryType.UNKNOWN
            assert geometry.raw_geometry_type == 42
            assert geometry.type_to_name() == 'Unrecognized: 42'
            assert geometry.to_wkt() == 'POINT (1 2)'
            geometry.destroy()

    def test_none_kind_gives_none_geometry(self):
        point = create_from_wkt('POINT (1 2)')
        odd_engine = FixedKindEngine(GeometryType.NONE)
        geometry = factory(point.clone().release_ownership(), engine=odd_engine)
        assert type(geometry) is NoneGeometry


class TestCreateFromWkt:
    @pytest.mark.parametrize('wkt', WKT_SAMPLES)
    def test_wkt_round_trip(self, wkt):
        geometry = create_from_wkt(wkt)
        assert geometry.to_wkt() == wkt
        assert create_from_wkt(geometry.to_wkt()).equals(geometry)

    @pytest.mark.parametrize('blank', ['', '   '])
    def test_blank_input(self, blank):
        assert create_from_wkt(blank) is None

    def test_empty_variant(self):
        polygon = create_from_wkt('POLYGON EMPTY')
        assert isinstance(polygon, Polygon)
        assert polygon.is_empty()

    def test_parse_error_carries_engine_message(self):
        with pytest.raises(ParseError) as excinfo:
            create_from_wkt('POINT (1')
        assert str(excinfo.value).startswith('create_from_wkt: ')
        assert excinfo.value.engine_message

    def test_spatial_reference_is_attached(self, wgs84):
        point = create_from_wkt('POINT (1 2)', wgs84)
        srs = point.spatial_reference
        assert srs.authority_code == 4326
        assert srs.is_same(wgs84)


class TestOwnership:
    def test_destroy_releases_once(self):
        point = create_from_wkt('POINT (1 2)')
        handle = point.handle
        point.destroy()
        point.destroy()
        assert handle.released
        with pytest.raises(InvalidHandle):
            point.handle

    def test_context_manager_destroys(self):
        with create_from_wkt('POINT (1 2)') as point:
            handle = point.handle
        assert handle.released

    def test_view_destroy_leaves_the_owner_untouched(self, square):
        ring = square.exterior_ring
        assert not ring.owned
        ring.destroy()
        assert square.area == 100.0
        assert not ring.handle.released

    def test_view_is_invalid_once_the_owner_is_released(self, square):
        ring = square.exterior_ring
        square.destroy()
        with pytest.raises(InvalidHandle):
            ring.to_wkt()

    def test_wrapping_a_released_handle(self):
        point = create_from_wkt('POINT (1 2)')
        handle = point.handle
        point.destroy()
        with pytest.raises(InvalidHandle):
            factory(handle)
