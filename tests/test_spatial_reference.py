"""Tests for spatial references and their sharing between geometries."""

import pytest

from vectortools import (
    SpatialReference,
    create_from_wkt,
    InvalidHandle,
    ParseError,
    OperationFailure
)


class TestCreation:
    def test_from_epsg(self, wgs84):
        assert wgs84.authority_code == 4326
        assert wgs84.is_geographic
        assert not wgs84.is_projected

    def test_projected(self):
        utm = SpatialReference.from_epsg(32632)
        assert utm.is_projected
        assert not utm.is_geographic
        assert not utm.is_local

    def test_user_input(self):
        assert SpatialReference('EPSG:3857').authority_code == 3857

    def test_from_wkt(self, wgs84):
        srs = SpatialReference.from_wkt(wgs84.to_wkt())
        assert srs.is_geographic
        assert srs.authority_code == 4326

    def test_from_proj4(self):
        srs = SpatialReference.from_proj4('+proj=longlat +datum=WGS84 +no_defs')
        assert srs.is_geographic

    def test_invalid_input(self):
        with pytest.raises(ParseError):
            SpatialReference('definitely not a crs')

    def test_invalid_epsg_code(self):
        with pytest.raises(ParseError):
            SpatialReference.from_epsg(999999)

    def test_empty_reference(self):
        srs = SpatialReference()
        assert srs.authority_code is None
        assert not srs.is_geographic
        with pytest.raises(OperationFailure):
            srs.to_wkt()


class TestExport:
    def test_wkt1(self, wgs84):
        assert wgs84.to_wkt().startswith('GEOGCS["WGS 84"')

    def test_pretty_wkt(self, wgs84):
        assert '\n' in wgs84.to_wkt(pretty=True)

    def test_proj4(self, wgs84):
        assert '+proj=longlat' in wgs84.to_proj4()

    def test_repr(self, wgs84):
        assert repr(wgs84) == '<SpatialReference EPSG:4326 (refs: 1)>'


class TestComparison:
    def test_same(self, wgs84, web_mercator):
        assert wgs84.is_same(SpatialReference('EPSG:4326'))
        assert not wgs84.is_same(web_mercator)

    def test_geographic_part(self, wgs84):
        utm = SpatialReference.from_epsg(32632)
        assert utm.is_geog_cs_same(wgs84)
        assert not utm.is_same(wgs84)

    def test_vertical_part_absent_on_both_sides(self, wgs84, web_mercator):
        assert wgs84.is_vert_cs_same(web_mercator)

    def test_vertical_part_of_compound_reference(self, wgs84):
        compound = SpatialReference('EPSG:4326+5773')
        assert compound.is_compound
        assert not compound.is_vert_cs_same(wgs84)
        assert compound.is_vert_cs_same(SpatialReference('EPSG:5773'))

    def test_clone_is_independent(self, wgs84):
        copy = wgs84.clone()
        assert copy.is_same(wgs84)
        assert copy.handle is not wgs84.handle
        assert copy.reference_count == 1


class TestReferenceCounting:
    def test_geometries_share_the_reference(self, wgs84):
        first = create_from_wkt('POINT (1 2)')
        second = create_from_wkt('POINT (3 4)')
        first.spatial_reference = wgs84
        second.spatial_reference = wgs84
        assert wgs84.reference_count == 3

        first.destroy()
        assert wgs84.reference_count == 2

        handle = wgs84.handle
        wgs84.destroy()
        assert not handle.released
        with second.spatial_reference as srs:
            assert srs.authority_code == 4326

        second.destroy()
        assert handle.released

    def test_destroyed_wrapper_is_unusable(self, wgs84):
        wgs84.destroy()
        with pytest.raises(InvalidHandle):
            wgs84.to_wkt()

    def test_getter_returns_its_own_reference(self, wgs84):
        point = create_from_wkt('POINT (1 2)', wgs84)
        srs = point.spatial_reference
        assert wgs84.reference_count == 3
        srs.destroy()
        assert wgs84.reference_count == 2

    def test_setter_replaces_and_releases(self, wgs84, web_mercator):
        point = create_from_wkt('POINT (1 2)', wgs84)
        point.spatial_reference = web_mercator
        assert wgs84.reference_count == 1
        assert web_mercator.reference_count == 2
        point.spatial_reference = None
        assert point.spatial_reference is None
        assert web_mercator.reference_count == 1

    def test_parts_use_the_reference_of_their_container(self, wgs84):
        polygon = create_from_wkt('POLYGON ((0 0,0 1,1 1,0 0))', wgs84)
        assert polygon.exterior_ring.spatial_reference.authority_code == 4326

    def test_parts_added_to_a_container_drop_their_reference(self, wgs84, web_mercator):
        collection = create_from_wkt('GEOMETRYCOLLECTION EMPTY', wgs84)
        point = create_from_wkt('POINT (1 2)', web_mercator)
        collection.add_geometry_directly(point)
        assert web_mercator.reference_count == 1
        assert collection[0].spatial_reference.authority_code == 4326
