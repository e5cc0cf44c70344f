"""Shared fixtures for vectortools tests."""

import pytest

from vectortools.engine import ShapelyEngine, set_engine, current_error_context
from vectortools.geometries import create_from_wkt
from vectortools.spatial_ref import SpatialReference


@pytest.fixture(autouse=True)
def engine():
    """Fresh default engine for every test, restored afterwards."""
    fresh = ShapelyEngine()
    previous = set_engine(fresh)
    current_error_context().clear()
    yield fresh
    set_engine(previous)
    current_error_context().clear()


@pytest.fixture
def square():
    """10 x 10 square polygon with a corner at the origin."""
    return create_from_wkt('POLYGON ((0 0,0 10,10 10,10 0,0 0))')


@pytest.fixture
def inner_point():
    return create_from_wkt('POINT (5 5)')


@pytest.fixture
def wgs84():
    return SpatialReference.from_epsg(4326)


@pytest.fixture
def web_mercator():
    return SpatialReference.from_epsg(3857)
