"""Tests for the variant specific accessors and container editing."""

import pytest

from vectortools import (
    GeometryType,
    Point,
    Point25D,
    LineString,
    LinearRing,
    Polygon,
    MultiPoint,
    MultiLineString,
    MultiPolygon,
    GeometryCollection,
    create_from_wkt,
    InvalidHandle,
    InvalidCoordinateDimension,
    OperationFailure
)


def _ring(*points):
    ring = LinearRing()
    for x, y in points:
        ring.add_point(x, y)
    return ring


class TestPoint:
    def test_coordinates(self):
        point = Point.from_coordinates(1, 2)
        assert (point.x, point.y, point.z) == (1.0, 2.0, None)
        assert point.coordinates == (1.0, 2.0)
        assert point.to_wkt() == 'POINT (1 2)'

    def test_z_makes_the_point_3d(self):
        point = Point.from_coordinates(1, 2, 3)
        assert point.is_3d
        assert point.geometry_type == GeometryType.POINT_25D
        assert point.coordinates == (1.0, 2.0, 3.0)

    def test_point25d_defaults_z(self):
        assert Point25D.from_coordinates(1, 2).to_wkt() == 'POINT (1 2 0)'

    def test_empty_point(self):
        point = Point()
        assert point.x is None
        assert point.coordinates is None
        assert point.coordinate_dimension == 0
        assert point.point_count == 0

    def test_set_point_moves_it(self):
        point = Point.from_coordinates(1, 2)
        point.set_point(5, 6)
        assert point.coordinates == (5.0, 6.0)
        assert point.point_count == 1


class TestLineString:
    def test_points(self):
        line = create_from_wkt('LINESTRING (0 0,1 1,2 0)')
        assert line.point_count == 3
        assert len(line) == 3
        assert line.point(1) == (1.0, 1.0)
        assert line.points == [(0.0, 0.0), (1.0, 1.0), (2.0, 0.0)]
        assert list(line) == line.points

    def test_point_out_of_range(self):
        line = create_from_wkt('LINESTRING (0 0,1 1)')
        with pytest.raises(IndexError):
            line.point(2)

    def test_add_and_set_points(self):
        line = LineString()
        line.add_point(0, 0)
        line.add_point(1, 1)
        line.set_point(0, 5, 5)
        line.set_point(2, 9, 9)
        assert line.to_wkt() == 'LINESTRING (5 5,1 1,9 9)'

    def test_negative_index_is_rejected(self):
        line = create_from_wkt('LINESTRING (0 0,1 1)')
        with pytest.raises(OperationFailure):
            line.set_point(-1, 0, 0)

    def test_z_promotes_the_whole_line(self):
        line = create_from_wkt('LINESTRING (0 0,1 1)')
        line.add_point(2, 2, 7)
        assert line.to_wkt() == 'LINESTRING (0 0 0,1 1 0,2 2 7)'
        assert line.point(2) == (2.0, 2.0, 7.0)

    def test_length(self):
        assert create_from_wkt('LINESTRING (0 0,3 4,3 5)').length == pytest.approx(6.0)


class TestCoordinateDimension:
    def test_to_3d_and_back(self):
        line = create_from_wkt('LINESTRING (0 0,1 1)')
        line.coordinate_dimension = 3
        assert line.to_wkt() == 'LINESTRING (0 0 0,1 1 0)'
        line.flatten_to_2d()
        assert line.to_wkt() == 'LINESTRING (0 0,1 1)'
        assert line.is_2d

    def test_dropping_z_zeroes_it(self):
        line = create_from_wkt('LINESTRING (0 0 5,1 1 5)')
        line.coordinate_dimension = 2
        line.coordinate_dimension = 3
        assert line.to_wkt() == 'LINESTRING (0 0 0,1 1 0)'

    @pytest.mark.parametrize('dimension', [0, 1, 4])
    def test_invalid_dimension(self, dimension):
        line = create_from_wkt('LINESTRING (0 0,1 1)')
        with pytest.raises(InvalidCoordinateDimension):
            line.coordinate_dimension = dimension
        with pytest.raises(ValueError):
            line.coordinate_dimension = dimension


class TestPolygon:
    def test_rings(self):
        polygon = create_from_wkt('POLYGON ((0 0,0 10,10 10,10 0,0 0),(2 2,2 4,4 4,4 2,2 2))')
        assert isinstance(polygon.exterior_ring, LinearRing)
        assert polygon.interior_ring_count == 1
        assert polygon.interior_ring(0).to_wkt() == 'LINEARRING (2 2,2 4,4 4,4 2,2 2)'
        assert polygon.interior_ring(1) is None
        assert len(polygon.rings) == 2
        assert polygon.area == pytest.approx(96.0)

    def test_empty_polygon_has_no_exterior_ring(self):
        assert Polygon().exterior_ring is None

    def test_add_ring_copies(self):
        polygon = Polygon()
        ring = _ring((0, 0), (0, 1), (1, 1), (0, 0))
        polygon.add_ring(ring)
        ring.set_point(1, 5, 5)
        assert polygon.to_wkt() == 'POLYGON ((0 0,0 1,1 1,0 0))'
        assert ring.owned

    def test_add_ring_directly_moves_ownership(self):
        polygon = Polygon()
        ring = _ring((0, 0), (0, 1), (1, 1), (0, 0))
        polygon.add_ring_directly(ring)
        assert not ring.owned
        ring.set_point(1, 0, 2)
        assert polygon.to_wkt() == 'POLYGON ((0 0,0 2,1 1,0 0))'
        polygon.destroy()
        with pytest.raises(InvalidHandle):
            ring.to_wkt()

    def test_line_string_added_as_ring(self):
        polygon = Polygon()
        polygon.add_ring(create_from_wkt('LINESTRING (0 0,0 1,1 1,0 0)'))
        assert isinstance(polygon.exterior_ring, LinearRing)

    def test_close_rings(self):
        polygon = Polygon()
        polygon.add_ring(_ring((0, 0), (0, 1), (1, 1)))
        polygon.close_rings()
        assert polygon.to_wkt() == 'POLYGON ((0 0,0 1,1 1,0 0))'


class TestCollections:
    def test_members_are_views(self):
        multi = create_from_wkt('MULTIPOINT (0 0,1 1)')
        member = multi[1]
        assert isinstance(member, Point)
        assert not member.owned
        assert multi[-1].equals(member)
        assert [p.coordinates for p in multi] == [(0.0, 0.0), (1.0, 1.0)]

    def test_index_out_of_range(self):
        with pytest.raises(IndexError):
            create_from_wkt('MULTIPOINT (0 0,1 1)').geometry_at(2)

    def test_add_geometry_copies(self):
        multi = MultiPoint()
        point = Point.from_coordinates(1, 2)
        multi.add_geometry(point)
        point.set_point(5, 5)
        assert multi.to_wkt() == 'MULTIPOINT (1 2)'
        assert point.owned

    def test_add_geometry_directly_moves_ownership(self):
        multi = MultiPoint()
        point = Point.from_coordinates(1, 2)
        multi.add_geometry_directly(point)
        assert not point.owned
        assert multi.to_wkt() == 'MULTIPOINT (1 2)'
        multi.destroy()
        with pytest.raises(InvalidHandle):
            point.to_wkt()

    def test_views_cannot_be_given_away(self):
        source = create_from_wkt('MULTIPOINT (0 0,1 1)')
        with pytest.raises(OperationFailure):
            MultiPoint().add_geometry_directly(source[0])

    def test_wrong_member_kind(self):
        with pytest.raises(OperationFailure):
            MultiPoint().add_geometry(create_from_wkt('LINESTRING (0 0,1 1)'))

    def test_remove_geometry(self):
        multi = create_from_wkt('MULTIPOINT (0 0,1 1,2 2)')
        first = multi[0]
        multi.remove_geometry(0)
        assert multi.to_wkt() == 'MULTIPOINT (1 1,2 2)'
        with pytest.raises(InvalidHandle):
            first.to_wkt()
        with pytest.raises(OperationFailure):
            multi.remove_geometry(5)
        multi.remove_geometry(-1)
        assert multi.is_empty()
        assert len(multi) == 0

    def test_nested_collection(self):
        collection = GeometryCollection()
        collection.add_geometry(create_from_wkt('MULTIPOINT (0 0,1 1)'))
        collection.add_geometry(create_from_wkt('POLYGON ((0 0,0 1,1 1,0 0))'))
        assert collection.to_wkt() == 'GEOMETRYCOLLECTION (MULTIPOINT (0 0,1 1),POLYGON ((0 0,0 1,1 1,0 0)))'
        assert collection.dimension == 2

    def test_3d_member_promotes_a_multi_geometry(self):
        multi = MultiLineString()
        multi.add_geometry(create_from_wkt('LINESTRING (0 0,1 1)'))
        multi.add_geometry(create_from_wkt('LINESTRING (0 0 1,1 1 1)'))
        assert multi.geometry_type == GeometryType.MULTI_LINE_STRING_25D
        assert multi.to_wkt() == 'MULTILINESTRING ((0 0 0,1 1 0),(0 0 1,1 1 1))'

    def test_multi_polygon_area(self):
        multi = MultiPolygon()
        multi.add_geometry(create_from_wkt('POLYGON ((0 0,0 1,1 1,1 0,0 0))'))
        multi.add_geometry(create_from_wkt('POLYGON ((5 5,5 7,7 7,7 5,5 5))'))
        assert multi.area == pytest.approx(5.0)
        assert multi.count == 2

    def test_multi_line_string_length(self):
        assert create_from_wkt('MULTILINESTRING ((0 0,0 2),(0 0,3 0))').length == pytest.approx(5.0)
