"""
Base wrapper of all the geometry variants.

A Geometry wraps an engine handle and delegates every operation to the engine
that created it. The wrapper is either owning (it releases the handle when it
is destroyed) or a non-owning view (the handle belongs to a container, or to a
feature, and is released with it).
"""

# %% === Import necessary modules
import json
import logging
import weakref
from dataclasses import asdict

from config.default_params import ENGINE_CONFIG
from ..engine import (
    get_engine,
    GeometryEngine,
    GeometryHandle,
    GeometryType,
    ByteOrder,
    TransformationHandle,
    with_z
)
from ..spatial_ref import SpatialReference, CoordinateTransformation
from ..utilities.error_handling import call_engine, call_engine_checked
from ..utilities.exceptions import (
    InvalidHandle,
    AllocationError,
    InvalidCoordinateDimension,
    EngineError,
    TopologyError,
    ParseError,
    TransformError,
    OperationFailure
)
from ..utilities.logging_utils import log_and_error
from .envelope import Envelope
from .export_options import GmlExportOptions, GeoJsonExportOptions

logger = logging.getLogger(__name__)

# %% === Helper functions
def _destroy_handle(engine: GeometryEngine, handle: GeometryHandle) -> None:
    if not handle.released:
        engine.destroy_geometry(handle)

def allocate_handle(engine: GeometryEngine, geometry_type: int) -> GeometryHandle:
    """
    Ask the engine for a new empty geometry handle.

    Args:
        engine (GeometryEngine): The engine to use.
        geometry_type (int): The kind to allocate.

    Returns:
        GeometryHandle: The new handle.

    Raises:
        AllocationError: If the engine can't allocate the kind.
    """
    errors = engine.errors
    errors.clear()
    handle = engine.create_geometry(geometry_type)
    record = errors.take_failure()
    if handle is None:
        details = f": {record.message}" if record is not None else ''
        log_and_error(f"create: can't allocate a geometry of kind {int(geometry_type)}{details}", AllocationError, logger)
    return handle

def operand_handle(other) -> GeometryHandle:
    """Handle of a predicate or operation operand (a Geometry or a raw handle)."""
    if isinstance(other, Geometry):
        return other.handle
    if isinstance(other, GeometryHandle):
        return other
    log_and_error(f"Operand must be a Geometry or a GeometryHandle, got {type(other).__name__}", TypeError, logger)

def _byte_order(byte_order: ByteOrder | str | None) -> ByteOrder:
    if byte_order is None:
        byte_order = ENGINE_CONFIG['wkb_byte_order']
    if isinstance(byte_order, str):
        if byte_order.upper() not in ByteOrder.__members__:
            log_and_error(f"Unknown WKB byte order: {byte_order}. Use 'xdr' (big endian) or 'ndr' (little endian).", ValueError, logger)
        return ByteOrder[byte_order.upper()]
    return ByteOrder(byte_order)

# %% === Geometry base class
class Geometry:
    """
    Common capability set of all the geometry variants.

    Variants are built by the factory from the kind reported by the engine;
    building a variant class directly without a handle creates a new empty
    geometry of that kind.
    """

    GEOMETRY_TYPE = None

    def __init__(
            self,
            handle: GeometryHandle = None,
            owned: bool = True,
            engine: GeometryEngine = None
        ):
        """
        Wrap a geometry handle, or create a new empty geometry of the class kind.

        Args:
            handle (GeometryHandle, optional): The handle to wrap. If None, a new geometry of
                kind GEOMETRY_TYPE is created (and owned). Defaults to None.
            owned (bool, optional): If True, the wrapper releases the handle when destroyed. Defaults to True.
            engine (GeometryEngine, optional): Engine owning the handle. Defaults to the active engine.

        Raises:
            InvalidHandle: If the handle is released, or is None on a class without a kind.
            AllocationError: If the engine can't allocate the kind of the class.
        """
        self._engine = engine or get_engine()
        if handle is None:
            if self.GEOMETRY_TYPE is None:
                log_and_error(f"{type(self).__name__}: can't wrap a null geometry handle.", InvalidHandle, logger)
            handle = allocate_handle(self._engine, self.GEOMETRY_TYPE)
            owned = True
        if handle.released:
            log_and_error(f"{type(self).__name__}: can't wrap a released geometry handle.", InvalidHandle, logger)

        self._handle = handle
        self._owned = owned
        self._finalizer = weakref.finalize(self, _destroy_handle, self._engine, handle) if owned else None

    # === Handle access and lifetime
    @property
    def handle(self) -> GeometryHandle:
        if self._handle.released:
            raise InvalidHandle(f"{type(self).__name__}: geometry handle already released.")
        return self._handle

    @property
    def engine(self) -> GeometryEngine:
        return self._engine

    @property
    def owned(self) -> bool:
        return self._owned

    def release_ownership(self) -> GeometryHandle:
        """Stop owning the handle (someone else will release it); the wrapper becomes a view."""
        if self._finalizer is not None:
            self._finalizer.detach()
            self._finalizer = None
        self._owned = False
        return self._handle

    def destroy(self) -> None:
        """Release the handle if owned (only once). Non-owning views are left untouched."""
        if self._finalizer is not None:
            self._finalizer()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.destroy()

    def _wrap(self, handle: GeometryHandle, owned: bool = True) -> 'Geometry':
        from .factory import factory
        return factory(handle, owned=owned, engine=self._engine)

    def _build_geometry(self, handle: GeometryHandle) -> 'Geometry | None':
        # The engine returns the input handle as a no-op sentinel: it is already owned by self.
        if handle is None or handle is self._handle:
            return None
        return self._wrap(handle)

    # === Introspection
    @property
    def raw_geometry_type(self) -> int:
        """Kind code exactly as reported by the engine, kept even when GeometryType does not know it."""
        return int(self._engine.geometry_type(self.handle))

    @property
    def geometry_type(self) -> GeometryType:
        return GeometryType.from_code(self.raw_geometry_type)

    def type_to_name(self) -> str:
        """Human readable name of the geometry kind (ex: '3D Polygon', 'Unrecognized: 42')."""
        return self._engine.type_to_name(self.raw_geometry_type)

    @property
    def name(self) -> str:
        """WKT keyword of the geometry (ex: 'POLYGON')."""
        return self._engine.geometry_name(self.handle)

    @property
    def dimension(self) -> int:
        return self._engine.dimension(self.handle)

    @property
    def coordinate_dimension(self) -> int:
        return self._engine.coordinate_dimension(self.handle)

    @coordinate_dimension.setter
    def coordinate_dimension(self, dimension: int) -> None:
        if dimension not in (2, 3):
            log_and_error(f"Coordinate dimension must be 2 or 3, got {dimension}", InvalidCoordinateDimension, logger)
        call_engine('set_coordinate_dimension', self._engine.set_coordinate_dimension, self.handle, dimension)

    @property
    def is_2d(self) -> bool:
        return self.coordinate_dimension == 2

    @property
    def is_3d(self) -> bool:
        return self.coordinate_dimension == 3

    @property
    def envelope(self) -> Envelope | None:
        """Bounding box, 3D if the geometry has Z values, None if it has no coordinates."""
        if self.coordinate_dimension == 3:
            extent = self._engine.envelope_3d(self.handle)
        else:
            extent = self._engine.envelope(self.handle)
        if extent is None:
            return None
        return Envelope.from_extent(extent)

    @property
    def geometry_count(self) -> int:
        return self._engine.geometry_count(self.handle)

    count = geometry_count

    @property
    def point_count(self) -> int:
        return self._engine.point_count(self.handle)

    def centroid(self) -> 'Geometry':
        """Centroid as a Point (Point25D for 3D geometries, with Z set to 0)."""
        point_handle = allocate_handle(self._engine, with_z(GeometryType.POINT, self.is_3d))
        point = self._wrap(point_handle)
        call_engine_checked('centroid', self._engine.centroid, self.handle, point.handle)
        srs_handle = self._engine.get_spatial_reference(self.handle)
        if srs_handle is not None:
            self._engine.assign_spatial_reference(point.handle, srs_handle)
        return point

    def distance_to(self, other) -> float:
        """Shortest distance to other, -1 if the engine can't compute it."""
        result = self._engine.distance(self.handle, operand_handle(other))
        self._engine.errors.clear()
        return result

    # === Mutation
    def make_empty(self) -> None:
        call_engine('make_empty', self._engine.make_empty, self.handle)

    def flatten_to_2d(self) -> None:
        call_engine('flatten_to_2d', self._engine.flatten_to_2d, self.handle)

    def close_rings(self) -> None:
        call_engine('close_rings', self._engine.close_rings, self.handle)

    def segmentize(self, max_length: float) -> 'Geometry':
        """Add points so that no segment is longer than max_length. Returns self."""
        call_engine_checked('segmentize', self._engine.segmentize, self.handle, max_length)
        return self

    # === Relationship predicates
    def _predicate(self, operation: str, function, other) -> bool:
        return bool(call_engine(operation, function, self.handle, operand_handle(other)))

    def intersects(self, other) -> bool:
        return self._predicate('intersects', self._engine.intersects, other)

    def equals(self, other) -> bool:
        """True if other has the same kind and the same coordinates."""
        if not isinstance(other, (Geometry, GeometryHandle)):
            return False
        return self._predicate('equals', self._engine.equals, other)

    def __eq__(self, other):
        if not isinstance(other, (Geometry, GeometryHandle)):
            return False
        return self.equals(other)

    __hash__ = None

    def disjoint(self, other) -> bool:
        return self._predicate('disjoint', self._engine.disjoint, other)

    def touches(self, other) -> bool:
        return self._predicate('touches', self._engine.touches, other)

    def crosses(self, other) -> bool:
        return self._predicate('crosses', self._engine.crosses, other)

    def within(self, other) -> bool:
        return self._predicate('within', self._engine.within, other)

    def contains(self, other) -> bool:
        return self._predicate('contains', self._engine.contains, other)

    def overlaps(self, other) -> bool:
        return self._predicate('overlaps', self._engine.overlaps, other)

    def is_empty(self) -> bool:
        return bool(call_engine('is_empty', self._engine.is_empty, self.handle))

    def is_valid(self) -> bool:
        """
        Check the topological validity of the geometry.

        Any engine error (ex: a ring with too few points) answers False.

        Returns:
            bool: True if the geometry is valid.
        """
        try:
            return bool(call_engine('is_valid', self._engine.is_valid, self.handle))
        except EngineError as error:
            logger.debug(f"Geometry considered invalid after engine error: {error}")
            return False

    def is_simple(self) -> bool:
        return bool(call_engine('is_simple', self._engine.is_simple, self.handle))

    def is_ring(self) -> bool:
        """
        Check if the geometry is a closed and simple curve.

        Topology errors of the engine answer False; other errors are raised.

        Returns:
            bool: True if the geometry is a ring.
        """
        try:
            return bool(call_engine('is_ring', self._engine.is_ring, self.handle))
        except TopologyError as error:
            logger.debug(f"Geometry considered not a ring after topology error: {error}")
            return False

    # === Derived geometries
    def intersection(self, other) -> 'Geometry | None':
        return self._build_geometry(call_engine('intersection', self._engine.intersection, self.handle, operand_handle(other)))

    def union(self, other) -> 'Geometry | None':
        return self._build_geometry(call_engine('union', self._engine.union, self.handle, operand_handle(other)))

    def difference(self, other) -> 'Geometry | None':
        handle = call_engine('difference', self._engine.difference, self.handle, operand_handle(other))
        # No same-handle check here, unlike the other derived operations
        if handle is None:
            return None
        return self._wrap(handle)

    def symmetric_difference(self, other) -> 'Geometry | None':
        handle = call_engine('symmetric_difference', self._engine.symmetric_difference, self.handle, operand_handle(other))
        if handle is None:
            return None
        return self._wrap(handle)

    def polygonize(self) -> 'Geometry | None':
        return self._build_geometry(call_engine('polygonize', self._engine.polygonize, self.handle))

    def boundary(self) -> 'Geometry | None':
        return self._build_geometry(call_engine('boundary', self._engine.boundary, self.handle))

    def buffer(
            self,
            distance: float,
            quad_segments: int = None
        ) -> 'Geometry | None':
        """
        Region within distance of the geometry.

        Args:
            distance (float): Buffer distance, in the units of the coordinates.
            quad_segments (int, optional): Number of segments used to approximate a quarter circle.
                Defaults to the buffer_quad_segments engine setting (30).

        Returns:
            Geometry | None: The buffer region.
        """
        if quad_segments is None:
            quad_segments = ENGINE_CONFIG['buffer_quad_segments']
        return self._build_geometry(call_engine('buffer', self._engine.buffer, self.handle, distance, quad_segments))

    def convex_hull(self) -> 'Geometry | None':
        return self._build_geometry(call_engine('convex_hull', self._engine.convex_hull, self.handle))

    def point_on_surface(self) -> 'Geometry | None':
        return self._build_geometry(call_engine('point_on_surface', self._engine.point_on_surface, self.handle))

    def simplify(
            self,
            tolerance: float,
            preserve_topology: bool = False
        ) -> 'Geometry | None':
        """
        Simplified copy of the geometry.

        Args:
            tolerance (float): Distance tolerance of the simplification.
            preserve_topology (bool, optional): If True, use the topology preserving algorithm,
                which never introduces self intersections. Defaults to False (Douglas-Peucker).

        Returns:
            Geometry | None: The simplified geometry.
        """
        if preserve_topology:
            handle = call_engine('simplify', self._engine.simplify_preserve_topology, self.handle, tolerance)
        else:
            handle = call_engine('simplify', self._engine.simplify, self.handle, tolerance)
        return self._build_geometry(handle)

    def clone(self) -> 'Geometry':
        return self._wrap(call_engine('clone', self._engine.clone_geometry, self.handle))

    # === Kind conversions
    def _force(self, operation: str, function) -> 'Geometry':
        copy_handle = call_engine('clone', self._engine.clone_geometry, self.handle)
        return self._wrap(call_engine(operation, function, copy_handle))

    def to_line_string(self) -> 'Geometry':
        """Copy converted to a LineString when possible (unchanged copy otherwise)."""
        return self._force('to_line_string', self._engine.force_to_line_string)

    def to_linear_ring(self, close_rings: bool = False) -> 'Geometry | None':
        """
        Copy converted to a LinearRing.

        Args:
            close_rings (bool, optional): Close the ring if its last point differs from the first one. Defaults to False.

        Returns:
            Geometry | None: The LinearRing, None if the geometry can't be converted to a line string.
        """
        from .variants import LineString, LinearRing
        line = self.to_line_string()
        if not isinstance(line, LineString):
            logger.debug(f"{self.name} can't be converted to a linear ring.")
            return None
        ring = LinearRing(engine=self._engine)
        for point in line.each_point():
            ring.add_point(*(point if line.is_3d else point[:2]))
        if close_rings:
            ring.close_rings()
        return ring

    def to_polygon(self) -> 'Geometry':
        return self._force('to_polygon', self._engine.force_to_polygon)

    def to_multi_point(self) -> 'Geometry':
        return self._force('to_multi_point', self._engine.force_to_multi_point)

    def to_multi_line_string(self) -> 'Geometry':
        return self._force('to_multi_line_string', self._engine.force_to_multi_line_string)

    def to_multi_polygon(self) -> 'Geometry':
        return self._force('to_multi_polygon', self._engine.force_to_multi_polygon)

    # === Spatial reference and transformations
    @property
    def spatial_reference(self) -> SpatialReference | None:
        """Spatial reference of the geometry (the returned wrapper holds its own reference)."""
        srs_handle = self._engine.get_spatial_reference(self.handle)
        return SpatialReference.from_handle(srs_handle, self._engine)

    @spatial_reference.setter
    def spatial_reference(self, spatial_reference: SpatialReference | None) -> None:
        srs_handle = None if spatial_reference is None else spatial_reference.handle
        call_engine('spatial_reference', self._engine.assign_spatial_reference, self.handle, srs_handle)

    def transform(self, coordinate_transformation: CoordinateTransformation | TransformationHandle | None) -> None:
        """
        Transform the coordinates in place with a prebuilt transformation.

        This is the cheap path for many geometries sharing the same source and
        target references. A None transformation leaves the geometry unchanged.

        Args:
            coordinate_transformation (CoordinateTransformation | TransformationHandle | None): The transformation.

        Raises:
            TransformError: If the engine rejects the transformation, with the engine message.
        """
        if coordinate_transformation is None:
            logger.debug("No coordinate transformation given: geometry left unchanged.")
            return
        if isinstance(coordinate_transformation, CoordinateTransformation):
            coordinate_transformation = coordinate_transformation._handle
        call_engine_checked(
            'transform',
            self._engine.transform,
            self.handle,
            coordinate_transformation,
            error_type=TransformError
        )

    def transform_to(self, spatial_reference: SpatialReference) -> None:
        """
        Transform the coordinates in place to another spatial reference.

        A transformation is built and dropped at every call: prefer transform
        with a CoordinateTransformation when converting many geometries. A
        geometry without spatial reference just takes the new one.

        Args:
            spatial_reference (SpatialReference): The target spatial reference.

        Raises:
            TransformError: If the engine can't transform the geometry, with the engine message.
        """
        call_engine_checked(
            'transform_to',
            self._engine.transform_to,
            self.handle,
            spatial_reference.handle,
            error_type=TransformError
        )

    # === Serialization
    def to_wkt(self) -> str:
        _, text = call_engine_checked('to_wkt', self._engine.export_to_wkt, self.handle)
        return text

    def to_iso_wkt(self) -> str:
        _, text = call_engine_checked('to_iso_wkt', self._engine.export_to_iso_wkt, self.handle)
        return text

    def import_from_wkt(self, wkt_data: str) -> None:
        call_engine_checked('import_from_wkt', self._engine.import_from_wkt, self.handle, wkt_data, error_type=ParseError)

    def import_from_wkb(self, wkb_data: bytes) -> None:
        call_engine_checked('import_from_wkb', self._engine.import_from_wkb, self.handle, wkb_data, error_type=ParseError)

    def wkb_size(self) -> int:
        return int(call_engine('wkb_size', self._engine.wkb_size, self.handle))

    def to_wkb(self, byte_order: ByteOrder | str = None) -> bytes:
        """
        Export as WKB.

        Args:
            byte_order (ByteOrder | str, optional): ByteOrder.XDR / 'xdr' (big endian) or ByteOrder.NDR / 'ndr'
                (little endian). Defaults to the wkb_byte_order engine setting.

        Returns:
            bytes: The WKB, exactly wkb_size() bytes long.
        """
        output = bytearray(self.wkb_size())
        call_engine_checked('to_wkb', self._engine.export_to_wkb, self.handle, _byte_order(byte_order), output)
        return bytes(output)

    def _export_text(self, operation: str, function, *args, **kwargs) -> str:
        text = call_engine(operation, function, self.handle, *args, error_type=OperationFailure, **kwargs)
        if text is None:
            raise OperationFailure(f"{operation}: engine returned no output.")
        return text

    def to_geo_json(self) -> str:
        return self._export_text('to_geo_json', self._engine.export_to_json)

    def to_geo_json_ex(self, **options) -> str:
        """GeoJSON with options (coordinate_precision, significant_figures), see GeoJsonExportOptions."""
        engine_options = GeoJsonExportOptions(**options).to_engine_options()
        return self._export_text('to_geo_json_ex', self._engine.export_to_json, **engine_options)

    def to_gml(self, **options) -> str:
        """GML fragment with options (format, gml3_linestring_element, gml3_longsrs, gmlid), see GmlExportOptions."""
        engine_options = GmlExportOptions(**options).to_engine_options()
        return self._export_text('to_gml', self._engine.export_to_gml, **engine_options)

    def to_kml(self, altitude_mode: str = None) -> str:
        return self._export_text('to_kml', self._engine.export_to_kml, altitude_mode=altitude_mode)

    def as_json(self) -> dict:
        """Summary of the geometry as a dictionary of plain values."""
        envelope = self.envelope
        spatial_reference = self.spatial_reference
        summary = {
            'coordinate_dimension': self.coordinate_dimension,
            'geometry_count': self.geometry_count,
            'dimension': self.dimension,
            'envelope': asdict(envelope) if envelope is not None else None,
            'is_empty': self.is_empty(),
            'is_ring': self.is_ring(),
            'is_simple': self.is_simple() if self.is_valid() else False,
            'is_valid': self.is_valid(),
            'name': self.name,
            'point_count': self.point_count,
            'spatial_reference': None,
            'type': self.type_to_name(),
            'wkb_size': self.wkb_size()
        }
        if spatial_reference is not None:
            with spatial_reference:
                summary['spatial_reference'] = spatial_reference.authority_code
        return summary

    def to_json(self, **kwargs) -> str:
        return json.dumps(self.as_json(), **kwargs)

    def dump_readable(self, file_path: str = None, prefix: str = None) -> str:
        """
        Write a readable description of the geometry (name and WKT).

        Args:
            file_path (str, optional): File to write to. If None, the text is printed. Defaults to None.
            prefix (str, optional): Prefix of every line. Defaults to None.

        Returns:
            str: The text written.
        """
        prefix = prefix or ''
        lines = [f"{prefix}{type(self).__name__} ({self.type_to_name()})", f"{prefix}{self.to_wkt()}"]
        text = '\n'.join(lines) + '\n'
        if file_path:
            with open(file_path, 'w', encoding='utf-8') as f:
                f.write(text)
        else:
            print(text, end='')
        return text

    def __repr__(self):
        if self._handle.released:
            return f"<{type(self).__name__} (released)>"
        ownership = '' if self._owned else ', view'
        return f"<{type(self).__name__} {self.to_wkt()}{ownership}>"
