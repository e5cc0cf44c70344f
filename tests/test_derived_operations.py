"""Tests for overlays, constructive operations, measures and kind conversions."""

import math

import pytest

from vectortools import (
    GeometryType,
    Point,
    Point25D,
    LineString,
    LinearRing,
    Polygon,
    MultiPolygon,
    GeometryCollection,
    create_from_wkt,
    set_engine,
    EngineError
)

from fakes import RecordingEngine, SameHandleEngine, NullHandleEngine

SHIFTED_SQUARE = 'POLYGON ((5 5,5 15,15 15,15 5,5 5))'


class TestOverlays:
    def test_intersection(self, square):
        result = square.intersection(create_from_wkt(SHIFTED_SQUARE))
        assert isinstance(result, Polygon)
        assert result.area == pytest.approx(25.0)

    def test_union(self, square):
        assert square.union(create_from_wkt(SHIFTED_SQUARE)).area == pytest.approx(175.0)

    def test_difference(self, square):
        assert square.difference(create_from_wkt(SHIFTED_SQUARE)).area == pytest.approx(75.0)

    def test_symmetric_difference(self, square):
        result = square.symmetric_difference(create_from_wkt(SHIFTED_SQUARE))
        assert isinstance(result, MultiPolygon)
        assert result.area == pytest.approx(150.0)

    def test_result_is_a_new_owned_geometry(self, square):
        result = square.union(create_from_wkt(SHIFTED_SQUARE))
        assert result.owned
        assert result.handle is not square.handle

    def test_result_inherits_the_spatial_reference(self, wgs84):
        point = create_from_wkt('POINT (1 2)', wgs84)
        buffered = point.buffer(1)
        assert buffered.spatial_reference.authority_code == 4326


class TestUnionCascaded:
    def test_touching_polygons_merge_into_a_polygon(self):
        multi = create_from_wkt('MULTIPOLYGON(((0 0,0 1,1 1,0 0)),((0 0,1 1,1 0,0 0)))')
        result = multi.union_cascaded()
        assert isinstance(result, Polygon)
        assert result.to_wkt().startswith('POLYGON ((')
        assert result.area == pytest.approx(1.0)

    def test_disjoint_polygons_stay_a_multi_polygon(self):
        multi = create_from_wkt('MULTIPOLYGON (((0 0,0 1,1 1,0 0)),((5 5,5 6,6 6,5 5)))')
        assert isinstance(multi.union_cascaded(), MultiPolygon)


class TestConstructive:
    def test_buffer_default_segments_approximate_a_circle(self):
        disc = create_from_wkt('POINT (0 0)').buffer(1)
        assert isinstance(disc, Polygon)
        assert disc.area == pytest.approx(math.pi, abs=0.01)

    def test_buffer_with_one_segment_per_quadrant(self):
        diamond = create_from_wkt('POINT (0 0)').buffer(1, quad_segments=1)
        assert diamond.area == pytest.approx(2.0)

    def test_convex_hull(self):
        points = create_from_wkt('MULTIPOINT (0 0,1 0,0 1,1 1,0.5 0.5)')
        hull = points.convex_hull()
        assert isinstance(hull, Polygon)
        assert hull.area == pytest.approx(1.0)

    def test_boundary(self, square):
        boundary = square.boundary()
        assert isinstance(boundary, LineString)
        assert boundary.length == pytest.approx(40.0)

    def test_point_on_surface(self, square):
        point = square.point_on_surface()
        assert isinstance(point, Point)
        assert square.contains(point)

    def test_polygonize(self):
        lines = create_from_wkt('MULTILINESTRING ((0 0,0 1),(0 1,1 1),(1 1,1 0),(1 0,0 0))')
        result = lines.polygonize()
        assert isinstance(result, GeometryCollection)
        assert len(result) == 1
        assert isinstance(result[0], Polygon)

    def test_polygonize_needs_lines(self, square):
        with pytest.raises(EngineError):
            square.polygonize()

    def test_simplify(self):
        line = create_from_wkt('LINESTRING (0 0,1 0.01,2 0)')
        assert line.simplify(0.1).to_wkt() == 'LINESTRING (0 0,2 0)'
        assert line.simplify(0.1, preserve_topology=True).to_wkt() == 'LINESTRING (0 0,2 0)'

    def test_segmentize_returns_self(self):
        line = create_from_wkt('LINESTRING (0 0,10 0)')
        assert line.segmentize(5) is line
        assert line.to_wkt() == 'LINESTRING (0 0,5 0,10 0)'


class TestSimplifyDispatch:
    def test_each_flavor_has_its_own_entry_point(self):
        engine = RecordingEngine()
        set_engine(engine)
        line = create_from_wkt('LINESTRING (0 0,1 0.01,2 0)')
        line.simplify(0.1)
        assert engine.calls == ['simplify']
        line.simplify(0.1, preserve_topology=True)
        assert engine.calls == ['simplify', 'simplify_preserve_topology']


class TestSameHandleSentinel:
    @pytest.fixture(autouse=True)
    def same_handle_engine(self):
        set_engine(SameHandleEngine())

    def test_suppressed_for_most_operations(self, square):
        other = create_from_wkt(SHIFTED_SQUARE)
        assert square.union(other) is None
        assert square.intersection(other) is None
        assert square.buffer(1) is None
        assert square.convex_hull() is None
        assert square.simplify(1) is None

    def test_not_suppressed_for_the_difference_family(self, square):
        other = create_from_wkt(SHIFTED_SQUARE)
        for result in (square.difference(other), square.symmetric_difference(other)):
            assert result is not None
            assert result.handle is square.handle
            result.release_ownership()
        assert not square.handle.released


class TestNullResults:
    def test_difference_family_returns_none(self, square):
        set_engine(NullHandleEngine())
        other = create_from_wkt(SHIFTED_SQUARE)
        assert square.difference(other) is None
        assert square.symmetric_difference(other) is None


class TestMeasures:
    def test_centroid(self, square):
        centroid = square.centroid()
        assert type(centroid) is Point
        assert centroid.coordinates == (5.0, 5.0)

    def test_centroid_of_3d_geometry(self):
        centroid = create_from_wkt('LINESTRING (0 0 5,2 0 5)').centroid()
        assert type(centroid) is Point25D
        assert centroid.coordinates == (1.0, 0.0, 0.0)

    def test_centroid_keeps_the_spatial_reference(self, square, wgs84):
        square.spatial_reference = wgs84
        assert square.centroid().spatial_reference.authority_code == 4326

    def test_distance(self):
        assert create_from_wkt('POINT (0 0)').distance_to(create_from_wkt('POINT (3 4)')) == pytest.approx(5.0)

    def test_distance_failure_answers_minus_one(self):
        assert create_from_wkt('POINT EMPTY').distance_to(create_from_wkt('POINT (3 4)')) == -1

    def test_area_and_length(self, square):
        assert square.area == pytest.approx(100.0)
        assert create_from_wkt('LINESTRING (0 0,3 4)').length == pytest.approx(5.0)
        assert create_from_wkt('MULTILINESTRING ((0 0,1 0),(0 0,0 2))').length == pytest.approx(3.0)
        assert create_from_wkt('LINEARRING (0 0,0 2,2 2,2 0,0 0)').area == pytest.approx(4.0)


class TestKindConversions:
    def test_closed_line_to_polygon(self):
        polygon = create_from_wkt('LINESTRING (0 0,0 1,1 1,0 0)').to_polygon()
        assert isinstance(polygon, Polygon)
        assert polygon.to_wkt() == 'POLYGON ((0 0,0 1,1 1,0 0))'

    def test_polygon_to_multi_polygon(self, square):
        multi = square.to_multi_polygon()
        assert isinstance(multi, MultiPolygon)
        assert multi.to_wkt() == 'MULTIPOLYGON (((0 0,0 10,10 10,10 0,0 0)))'
        assert square.to_wkt() == 'POLYGON ((0 0,0 10,10 10,10 0,0 0))'

    def test_point_to_multi_point(self):
        assert create_from_wkt('POINT (1 2)').to_multi_point().to_wkt() == 'MULTIPOINT (1 2)'

    def test_polygon_to_multi_line_string(self, square):
        lines = square.to_multi_line_string()
        assert lines.to_wkt() == 'MULTILINESTRING ((0 0,0 10,10 10,10 0,0 0))'

    def test_connected_lines_to_line_string(self):
        multi = create_from_wkt('MULTILINESTRING ((0 0,1 1),(1 1,2 0))')
        assert multi.to_line_string().to_wkt() == 'LINESTRING (0 0,1 1,2 0)'

    def test_unconvertible_kind_gives_an_unchanged_copy(self):
        point = create_from_wkt('POINT (1 2)')
        copy = point.to_line_string()
        assert type(copy) is Point
        assert copy.handle is not point.handle
        assert copy.equals(point)

    def test_to_linear_ring(self):
        ring = create_from_wkt('LINESTRING (0 0,0 1,1 1)').to_linear_ring(close_rings=True)
        assert isinstance(ring, LinearRing)
        assert ring.to_wkt() == 'LINEARRING (0 0,0 1,1 1,0 0)'

    def test_to_linear_ring_of_a_point(self):
        assert create_from_wkt('POINT (1 2)').to_linear_ring() is None

    def test_conversion_keeps_the_spatial_reference(self, square, wgs84):
        square.spatial_reference = wgs84
        assert square.to_multi_polygon().spatial_reference.authority_code == 4326

    def test_kind_of_converted_3d_geometry(self):
        multi = create_from_wkt('POLYGON ((0 0 1,0 1 1,1 1 1,0 0 1))').to_multi_polygon()
        assert multi.geometry_type == GeometryType.MULTI_POLYGON_25D
