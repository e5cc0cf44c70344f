# %% === Import necessary modules
import logging
from collections.abc import Iterator

from ..engine import GeometryType
from ..utilities.error_handling import call_engine, call_engine_checked
from ..utilities.exceptions import OperationFailure
from ..utilities.logging_utils import log_and_error
from .geometry import Geometry, operand_handle

logger = logging.getLogger(__name__)

# %% === Points
class Point(Geometry):
    """Single position, possibly empty."""

    GEOMETRY_TYPE = GeometryType.POINT

    @classmethod
    def from_coordinates(cls, x: float, y: float, z: float = None, engine=None) -> 'Point':
        """New point at (x, y[, z]); a 2D Point with z given becomes 3D."""
        point = cls(engine=engine)
        point.set_point(x, y, z)
        return point

    def _coordinate(self, index: int) -> float | None:
        if self.point_count == 0:
            return None
        return call_engine('get_point', self._engine.get_point, self.handle, 0)[index]

    @property
    def x(self) -> float | None:
        return self._coordinate(0)

    @property
    def y(self) -> float | None:
        return self._coordinate(1)

    @property
    def z(self) -> float | None:
        if not self.is_3d:
            return None
        return self._coordinate(2)

    @property
    def coordinates(self) -> tuple[float, ...] | None:
        """(x, y) or (x, y, z), None for an empty point."""
        if self.point_count == 0:
            return None
        x, y, z = call_engine('get_point', self._engine.get_point, self.handle, 0)
        return (x, y, z) if self.is_3d else (x, y)

    def set_point(self, x: float, y: float, z: float = None) -> None:
        call_engine_checked('set_point', self._engine.set_point, self.handle, 0, x, y, z)


class Point25D(Point):
    GEOMETRY_TYPE = GeometryType.POINT_25D

    @classmethod
    def from_coordinates(cls, x: float, y: float, z: float = 0.0, engine=None) -> 'Point25D':
        return super().from_coordinates(x, y, z, engine=engine)

# %% === Curves
class LineString(Geometry):
    """Sequence of points joined by straight segments."""

    GEOMETRY_TYPE = GeometryType.LINE_STRING

    def point(self, index: int) -> tuple[float, ...]:
        """Point at index, as (x, y) or (x, y, z)."""
        if not 0 <= index < self.point_count:
            log_and_error(f"Point index {index} out of range for a {self.name} of {self.point_count} points", IndexError, logger)
        x, y, z = call_engine('get_point', self._engine.get_point, self.handle, index)
        return (x, y, z) if self.is_3d else (x, y)

    def each_point(self) -> Iterator[tuple[float, ...]]:
        for index in range(self.point_count):
            yield self.point(index)

    @property
    def points(self) -> list[tuple[float, ...]]:
        return list(self.each_point())

    def add_point(self, x: float, y: float, z: float = None) -> None:
        call_engine_checked('add_point', self._engine.add_point, self.handle, x, y, z)

    def set_point(self, index: int, x: float, y: float, z: float = None) -> None:
        """Set the point at index (index == point_count appends a point)."""
        call_engine_checked('set_point', self._engine.set_point, self.handle, index, x, y, z)

    @property
    def length(self) -> float:
        return float(call_engine('length', self._engine.length, self.handle))

    def __len__(self):
        return self.point_count

    def __iter__(self):
        return self.each_point()


class LineString25D(LineString):
    GEOMETRY_TYPE = GeometryType.LINE_STRING_25D


class LinearRing(LineString):
    """Closed line string, used as the boundary of polygons."""

    GEOMETRY_TYPE = GeometryType.LINEAR_RING

    @property
    def area(self) -> float:
        """Area enclosed by the ring."""
        return float(call_engine('area', self._engine.area, self.handle))

# %% === Surfaces
class Polygon(Geometry):
    """Surface bounded by an exterior ring, with optional interior rings (holes)."""

    GEOMETRY_TYPE = GeometryType.POLYGON

    def _ring(self, index: int) -> LinearRing | None:
        if not 0 <= index < self.geometry_count:
            return None
        return self._wrap(call_engine('ring', self._engine.get_geometry_ref, self.handle, index), owned=False)

    @property
    def exterior_ring(self) -> LinearRing | None:
        """Exterior ring, as a view owned by the polygon (None if the polygon has no ring)."""
        return self._ring(0)

    def interior_ring(self, index: int) -> LinearRing | None:
        return self._ring(index + 1)

    @property
    def interior_ring_count(self) -> int:
        return max(self.geometry_count - 1, 0)

    @property
    def rings(self) -> list[LinearRing]:
        return [self._ring(i) for i in range(self.geometry_count)]

    def add_ring(self, ring) -> None:
        """Add a copy of ring (the first ring added is the exterior one)."""
        call_engine_checked('add_ring', self._engine.add_geometry, self.handle, operand_handle(ring))

    def add_ring_directly(self, ring: LinearRing) -> None:
        """Add ring, giving its ownership to the polygon (ring becomes a view)."""
        call_engine_checked('add_ring_directly', self._engine.add_geometry_directly, self.handle, ring.handle)
        ring.release_ownership()

    @property
    def area(self) -> float:
        return float(call_engine('area', self._engine.area, self.handle))


class Polygon25D(Polygon):
    GEOMETRY_TYPE = GeometryType.POLYGON_25D

# %% === Collections
class GeometryCollection(Geometry):
    """
    Ordered set of geometries.

    Members returned by geometry_at and iteration are views: the collection
    keeps their ownership and releases them with itself.
    """

    GEOMETRY_TYPE = GeometryType.GEOMETRY_COLLECTION

    def geometry_at(self, index: int) -> Geometry:
        if not 0 <= index < self.geometry_count:
            log_and_error(f"Geometry index {index} out of range for a {self.name} of {self.geometry_count} members", IndexError, logger)
        handle = call_engine('geometry_at', self._engine.get_geometry_ref, self.handle, index)
        return self._wrap(handle, owned=False)

    def each_geometry(self) -> Iterator[Geometry]:
        for index in range(self.geometry_count):
            yield self.geometry_at(index)

    @property
    def geometries(self) -> list[Geometry]:
        return list(self.each_geometry())

    def add_geometry(self, geometry) -> None:
        """Add a copy of geometry."""
        call_engine_checked('add_geometry', self._engine.add_geometry, self.handle, operand_handle(geometry))

    def add_geometry_directly(self, geometry: Geometry) -> None:
        """Add geometry, giving its ownership to the collection (geometry becomes a view)."""
        if not geometry.owned:
            log_and_error("add_geometry_directly: can't give away a geometry owned by someone else", OperationFailure, logger)
        call_engine_checked('add_geometry_directly', self._engine.add_geometry_directly, self.handle, geometry.handle)
        geometry.release_ownership()

    def remove_geometry(self, index: int) -> None:
        """Remove and release the member at index (-1 removes all the members)."""
        call_engine_checked('remove_geometry', self._engine.remove_geometry, self.handle, index)

    def __getitem__(self, index: int) -> Geometry:
        if index < 0:
            index += self.geometry_count
        return self.geometry_at(index)

    def __len__(self):
        return self.geometry_count

    def __iter__(self):
        return self.each_geometry()


class GeometryCollection25D(GeometryCollection):
    GEOMETRY_TYPE = GeometryType.GEOMETRY_COLLECTION_25D


class MultiPoint(GeometryCollection):
    GEOMETRY_TYPE = GeometryType.MULTI_POINT


class MultiPoint25D(MultiPoint):
    GEOMETRY_TYPE = GeometryType.MULTI_POINT_25D


class MultiLineString(GeometryCollection):
    GEOMETRY_TYPE = GeometryType.MULTI_LINE_STRING

    @property
    def length(self) -> float:
        return float(call_engine('length', self._engine.length, self.handle))


class MultiLineString25D(MultiLineString):
    GEOMETRY_TYPE = GeometryType.MULTI_LINE_STRING_25D


class MultiPolygon(GeometryCollection):
    GEOMETRY_TYPE = GeometryType.MULTI_POLYGON

    @property
    def area(self) -> float:
        return float(call_engine('area', self._engine.area, self.handle))

    def union_cascaded(self) -> Geometry | None:
        """Union of all the member polygons (ex: a single Polygon when they touch)."""
        return self._build_geometry(call_engine('union_cascaded', self._engine.union_cascaded, self.handle))


class MultiPolygon25D(MultiPolygon):
    GEOMETRY_TYPE = GeometryType.MULTI_POLYGON_25D

# %% === Special kinds
class NoneGeometry(Geometry):
    """Geometry of kind NONE, only obtained by wrapping an engine handle."""

    GEOMETRY_TYPE = GeometryType.NONE


class UnknownGeometry(Geometry):
    """Geometry whose kind the engine reports with an unrecognized code; supports the common capabilities."""

    GEOMETRY_TYPE = GeometryType.UNKNOWN
