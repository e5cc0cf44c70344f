"""
Default geometry engine, backed by shapely (GEOS) and pyproj (PROJ).

Geometries are kept as handle trees (see handles.GeometryHandle) and converted
to shapely geometries on demand for predicates, overlays and serialization.
Every failure is recorded in the thread's ErrorContext: methods return None,
False, -1 or a failing OGRErr code and never raise.
"""

# %% === Import necessary modules
import json
import logging
import math
import xml.etree.ElementTree as ET  # nosec B405

import numpy as np
import shapely
from shapely import ops
from shapely.errors import GEOSException, ShapelyError
from shapely.geometry import mapping, shape
from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError, ProjError

from config.default_params import ENGINE_CONFIG
from .base import GeometryEngine
from .codecs import write_wkt, write_gml, read_gml, write_kml, clean_geojson_mapping
from .error_context import ErrorLevel, ErrorNumber
from .geometry_types import (
    GeometryType,
    OGRErr,
    COLLECTION_TYPES,
    with_z,
    geometry_name,
    geometry_type_to_name,
    merge_geometry_types
)
from .handles import (
    GeometryHandle,
    SpatialReferenceHandle,
    TransformationHandle,
    is_empty_handle,
    iter_point_lists,
    set_3d,
    has_3d_parts
)

logger = logging.getLogger(__name__)

_CURVE_TYPES = (GeometryType.LINE_STRING, GeometryType.LINEAR_RING)

_ALLOWED_PARTS = {
    GeometryType.POLYGON: (GeometryType.LINEAR_RING, GeometryType.LINE_STRING),
    GeometryType.MULTI_POINT: (GeometryType.POINT,),
    GeometryType.MULTI_LINE_STRING: (GeometryType.LINE_STRING, GeometryType.LINEAR_RING),
    GeometryType.MULTI_POLYGON: (GeometryType.POLYGON,),
    GeometryType.GEOMETRY_COLLECTION: (
        GeometryType.POINT,
        GeometryType.LINE_STRING,
        GeometryType.LINEAR_RING,
        GeometryType.POLYGON,
        GeometryType.MULTI_POINT,
        GeometryType.MULTI_LINE_STRING,
        GeometryType.MULTI_POLYGON,
        GeometryType.GEOMETRY_COLLECTION
    )
}

_SHAPELY_KINDS = {
    'Point': GeometryType.POINT,
    'LineString': GeometryType.LINE_STRING,
    'LinearRing': GeometryType.LINEAR_RING,
    'Polygon': GeometryType.POLYGON,
    'MultiPoint': GeometryType.MULTI_POINT,
    'MultiLineString': GeometryType.MULTI_LINE_STRING,
    'MultiPolygon': GeometryType.MULTI_POLYGON,
    'GeometryCollection': GeometryType.GEOMETRY_COLLECTION
}

_COLLECTION_BUILDERS = {
    GeometryType.MULTI_POINT: shapely.multipoints,
    GeometryType.MULTI_LINE_STRING: shapely.multilinestrings,
    GeometryType.MULTI_POLYGON: shapely.multipolygons,
    GeometryType.GEOMETRY_COLLECTION: shapely.geometrycollections
}

_SRS_KIND_CHECKS = {
    'geographic': lambda crs: crs.is_geographic,
    'projected': lambda crs: crs.is_projected,
    'local': lambda crs: crs.is_engineering,
    'compound': lambda crs: crs.is_compound,
    'geocentric': lambda crs: crs.is_geocentric,
    'vertical': lambda crs: crs.is_vertical
}

# %% === Helper functions
def _reports_z(handle: GeometryHandle) -> bool:
    """Z flag as reported to callers: collections only report it once a part has Z."""
    if handle.kind == GeometryType.GEOMETRY_COLLECTION:
        return any(_reports_z(child) for child in handle.children)
    return handle.is_3d

def _coordinates(points: list[list[float]], is_3d: bool) -> list[tuple]:
    if is_3d:
        return [tuple(p[:3]) for p in points]
    return [tuple(p[:2]) for p in points]

def _attach(parent: GeometryHandle, child: GeometryHandle) -> None:
    child.owner = parent
    parent.children.append(child)

def _release_tree(handle: GeometryHandle) -> None:
    handle.released = True
    for child in handle.children:
        _release_tree(child)

def _copy_tree(handle: GeometryHandle) -> GeometryHandle:
    copy = GeometryHandle(handle.kind, handle.is_3d)
    copy.points = [list(p) for p in handle.points]
    for child in handle.children:
        _attach(copy, _copy_tree(child))
    return copy

def _same_structure(first: GeometryHandle, second: GeometryHandle) -> bool:
    if first.kind != second.kind:
        kinds = {first.kind, second.kind}
        if kinds != {GeometryType.LINE_STRING, GeometryType.LINEAR_RING}:
            return False
    if _reports_z(first) != _reports_z(second):
        return False
    if _coordinates(first.points, first.is_3d) != _coordinates(second.points, second.is_3d):
        return False
    if len(first.children) != len(second.children):
        return False
    return all(_same_structure(a, b) for a, b in zip(first.children, second.children))

def _empty_shapely(handle: GeometryHandle):
    # The shapely constructors only build 2D empties
    keyword = geometry_name(handle.kind)
    return shapely.from_wkt(f"{keyword} Z EMPTY" if _reports_z(handle) else f"{keyword} EMPTY")

def _to_shapely(handle: GeometryHandle):
    """Convert a handle tree to a shapely geometry (may raise ValueError or GEOSException)."""
    kind = handle.kind
    coords = _coordinates(handle.points, handle.is_3d)

    if kind in (GeometryType.POINT, *_CURVE_TYPES) and not coords:
        return _empty_shapely(handle)
    if kind == GeometryType.POINT:
        return shapely.Point(*coords[0])
    if kind == GeometryType.LINE_STRING:
        return shapely.LineString(coords)
    if kind == GeometryType.LINEAR_RING:
        return shapely.LinearRing(coords)
    if kind == GeometryType.POLYGON:
        if not handle.children or is_empty_handle(handle.children[0]):
            return _empty_shapely(handle)
        rings = [_coordinates(ring.points, handle.is_3d) for ring in handle.children]
        return shapely.Polygon(shell=rings[0], holes=rings[1:])

    if kind not in _COLLECTION_BUILDERS:
        raise ValueError(f"Geometry kind {kind.name} has no shapely counterpart")
    if not handle.children:
        return _empty_shapely(handle)
    # The builders accept empty members, unlike the Multi* classes
    return _COLLECTION_BUILDERS[kind]([_to_shapely(child) for child in handle.children])

def _from_shapely(geometry) -> GeometryHandle:
    """Convert a shapely geometry to a new handle tree."""
    kind = _SHAPELY_KINDS.get(geometry.geom_type)
    if kind is None:
        raise ValueError(f"Unsupported shapely geometry type: {geometry.geom_type}")

    is_3d = bool(shapely.has_z(geometry))
    handle = GeometryHandle(kind, is_3d)
    if geometry.is_empty and kind in (GeometryType.POINT, *_CURVE_TYPES, GeometryType.POLYGON):
        return handle

    if kind == GeometryType.POINT or kind in _CURVE_TYPES:
        coords = shapely.get_coordinates(geometry, include_z=is_3d).tolist()
        # WKB writes an empty point as NaN coordinates
        if kind == GeometryType.POINT and all(math.isnan(v) for c in coords for v in c):
            return handle
        handle.points = [[c[0], c[1], c[2] if is_3d else 0.0] for c in coords]
    elif kind == GeometryType.POLYGON:
        for ring in [geometry.exterior, *geometry.interiors]:
            _attach(handle, _from_shapely(ring))
        set_3d(handle, is_3d)
    else:
        for part in geometry.geoms:
            _attach(handle, _from_shapely(part))
        if kind != GeometryType.GEOMETRY_COLLECTION:
            set_3d(handle, has_3d_parts(handle))
        else:
            handle.is_3d = any(_reports_z(child) for child in handle.children)
    return handle

# %% === Shapely engine
class ShapelyEngine(GeometryEngine):
    """Geometry engine backed by shapely for geometries and pyproj for spatial references."""

    name = 'shapely'

    # === Error reporting
    def _report(self, message: str, number: ErrorNumber = ErrorNumber.APP_DEFINED, level: ErrorLevel = ErrorLevel.FAILURE) -> None:
        self.errors.report(level, number, message)

    def _report_exception(self, error: Exception) -> None:
        if isinstance(error, GEOSException):
            self._report(str(error))
        else:
            self._report(f"IllegalArgumentException: {error}", ErrorNumber.ILLEGAL_ARG)

    def _check(self, handle, operation: str) -> bool:
        if handle is None or handle.released:
            self._report(f"Pointer to geometry is NULL in '{operation}'.", ErrorNumber.OBJECT_NULL)
            return False
        return True

    def _check_srs(self, srs_handle, operation: str) -> bool:
        if srs_handle is None or srs_handle.released:
            self._report(f"Pointer to spatial reference is NULL in '{operation}'.", ErrorNumber.OBJECT_NULL)
            return False
        return True

    def _inherit_spatial_reference(self, result: GeometryHandle, source: GeometryHandle) -> GeometryHandle:
        srs_handle = self.get_spatial_reference(source)
        if srs_handle is not None:
            self.assign_spatial_reference(result, srs_handle)
        return result

    def _replace_content(self, handle: GeometryHandle, parsed: GeometryHandle) -> None:
        handle.is_3d = parsed.is_3d
        handle.points = parsed.points
        for child in handle.children:
            _release_tree(child)
        handle.children = []
        for child in parsed.children:
            _attach(handle, child)

    # === Construction / destruction
    def create_geometry(self, geometry_type):
        kind = GeometryType.from_code(int(geometry_type))
        flat = with_z(kind, False)
        if flat in (GeometryType.NONE, GeometryType.UNKNOWN):
            self._report(f"Can't allocate a geometry of kind {geometry_type_to_name(kind)}.", ErrorNumber.NOT_SUPPORTED)
            return None
        return GeometryHandle(flat, is_3d=kind != flat)

    def destroy_geometry(self, handle):
        if not self._check(handle, 'destroy_geometry'):
            return
        if handle.spatial_reference is not None:
            self.release_spatial_reference(handle.spatial_reference)
            handle.spatial_reference = None
        if handle.owner is not None and handle in handle.owner.children:
            handle.owner.children.remove(handle)
        _release_tree(handle)

    def clone_geometry(self, handle):
        if not self._check(handle, 'clone_geometry'):
            return None
        return self._inherit_spatial_reference(_copy_tree(handle), handle)

    def make_empty(self, handle):
        if not self._check(handle, 'make_empty'):
            return
        handle.points = []
        for child in handle.children:
            _release_tree(child)
        handle.children = []

    # === Parsing
    def _parse(self, parser, data, spatial_reference):
        try:
            parsed = _from_shapely(parser(data))
        except (GEOSException, ValueError, TypeError) as error:
            self._report(str(error), ErrorNumber.ILLEGAL_ARG)
            return OGRErr.CORRUPT_DATA, None
        if spatial_reference is not None:
            self.assign_spatial_reference(parsed, spatial_reference)
        return OGRErr.NONE, parsed

    def create_from_wkt(self, wkt_data, spatial_reference=None):
        if wkt_data is None or not str(wkt_data).strip():
            return OGRErr.NONE, None
        return self._parse(shapely.from_wkt, str(wkt_data), spatial_reference)

    def create_from_wkb(self, wkb_data, spatial_reference=None):
        if not wkb_data:
            return OGRErr.NONE, None
        return self._parse(shapely.from_wkb, bytes(wkb_data), spatial_reference)

    def create_from_gml(self, gml_data):
        try:
            return read_gml(str(gml_data))
        except (ET.ParseError, ValueError, KeyError, TypeError) as error:
            self._report(f"GML geometry parsing failed: {error}", ErrorNumber.ILLEGAL_ARG)
            return None

    def create_from_json(self, json_data):
        try:
            geojson = json.loads(json_data)
        except (json.JSONDecodeError, TypeError) as error:
            self._report(f"GeoJSON parsing error: {error}", ErrorNumber.ILLEGAL_ARG)
            return None
        if geojson is None:
            return None
        try:
            return _from_shapely(shape(geojson))
        except (ShapelyError, ValueError, TypeError, KeyError, AttributeError) as error:
            self._report(f"Invalid GeoJSON geometry: {error}", ErrorNumber.ILLEGAL_ARG)
            return None

    def _import(self, handle, parser, data, operation):
        if not self._check(handle, operation):
            return OGRErr.INVALID_HANDLE
        err, parsed = self._parse(parser, data, None)
        if err != OGRErr.NONE:
            return err
        same_kind = parsed.kind == handle.kind or {parsed.kind, handle.kind} == set(_CURVE_TYPES)
        if not same_kind:
            self._report(
                f"Can't import a {geometry_name(parsed.kind)} into a {geometry_name(handle.kind)}.",
                ErrorNumber.ILLEGAL_ARG
            )
            return OGRErr.UNSUPPORTED_GEOMETRY_TYPE
        self._replace_content(handle, parsed)
        return OGRErr.NONE

    def import_from_wkt(self, handle, wkt_data):
        return self._import(handle, shapely.from_wkt, str(wkt_data), 'import_from_wkt')

    def import_from_wkb(self, handle, wkb_data):
        return self._import(handle, shapely.from_wkb, bytes(wkb_data), 'import_from_wkb')

    # === Export
    def _export_wkt(self, handle, iso, operation):
        if not self._check(handle, operation):
            return OGRErr.INVALID_HANDLE, None
        try:
            return OGRErr.NONE, write_wkt(handle, iso=iso)
        except ValueError as error:
            self._report(str(error), ErrorNumber.NOT_SUPPORTED)
            return OGRErr.UNSUPPORTED_GEOMETRY_TYPE, None

    def export_to_wkt(self, handle):
        return self._export_wkt(handle, False, 'export_to_wkt')

    def export_to_iso_wkt(self, handle):
        return self._export_wkt(handle, True, 'export_to_iso_wkt')

    def _wkb_size(self, handle: GeometryHandle, dimension: int) -> int:
        if handle.kind == GeometryType.POINT:
            return 5 + 8 * dimension
        if handle.kind in _CURVE_TYPES:
            return 9 + 8 * dimension * len(handle.points)
        if handle.kind == GeometryType.POLYGON:
            if not handle.children or is_empty_handle(handle.children[0]):
                return 9
            return 9 + sum(4 + 8 * dimension * len(ring.points) for ring in handle.children)
        return 9 + sum(self._wkb_size(child, dimension) for child in handle.children)

    def wkb_size(self, handle):
        if not self._check(handle, 'wkb_size'):
            return 0
        return self._wkb_size(handle, 3 if _reports_z(handle) else 2)

    def export_to_wkb(self, handle, byte_order, output):
        if not self._check(handle, 'export_to_wkb'):
            return OGRErr.INVALID_HANDLE
        try:
            data = shapely.to_wkb(
                _to_shapely(handle),
                hex=False,
                output_dimension=3 if _reports_z(handle) else 2,
                byte_order=int(byte_order),
                include_srid=False
            )
        except (GEOSException, ValueError) as error:
            self._report_exception(error)
            return OGRErr.FAILURE
        if len(data) != len(output):
            self._report(f"WKB buffer of {len(output)} bytes can't hold {len(data)} bytes.", ErrorNumber.ILLEGAL_ARG)
            return OGRErr.NOT_ENOUGH_DATA
        output[:] = data
        return OGRErr.NONE

    def export_to_json(self, handle, coordinate_precision=None, significant_figures=None):
        if not self._check(handle, 'export_to_json'):
            return None
        try:
            geojson = clean_geojson_mapping(mapping(_to_shapely(handle)), coordinate_precision, significant_figures)
        except (GEOSException, ValueError) as error:
            self._report_exception(error)
            return None
        return json.dumps(geojson)

    def export_to_gml(self, handle, **options):
        if not self._check(handle, 'export_to_gml'):
            return None
        srs_handle = self.get_spatial_reference(handle)
        srs_code = self.spatial_reference_authority_code(srs_handle) if srs_handle is not None else None
        try:
            return write_gml(handle, srs_code=srs_code, **options)
        except ValueError as error:
            self._report(str(error), ErrorNumber.NOT_SUPPORTED)
            return None

    def export_to_kml(self, handle, altitude_mode=None):
        if not self._check(handle, 'export_to_kml'):
            return None
        try:
            return write_kml(handle, altitude_mode=altitude_mode)
        except ValueError as error:
            self._report(str(error), ErrorNumber.NOT_SUPPORTED)
            return None

    # === Introspection
    def geometry_type(self, handle):
        if not self._check(handle, 'geometry_type'):
            return GeometryType.UNKNOWN
        kind = GeometryType.LINE_STRING if handle.kind == GeometryType.LINEAR_RING else handle.kind
        return with_z(kind, _reports_z(handle))

    def geometry_name(self, handle):
        if not self._check(handle, 'geometry_name'):
            return None
        return geometry_name(handle.kind)

    def dimension(self, handle):
        if not self._check(handle, 'dimension'):
            return -1
        if handle.kind in (GeometryType.POINT, GeometryType.MULTI_POINT):
            return 0
        if handle.kind in (*_CURVE_TYPES, GeometryType.MULTI_LINE_STRING):
            return 1
        if handle.kind in (GeometryType.POLYGON, GeometryType.MULTI_POLYGON):
            return 2
        return max((self.dimension(child) for child in handle.children), default=0)

    def coordinate_dimension(self, handle):
        if not self._check(handle, 'coordinate_dimension'):
            return 0
        if handle.kind == GeometryType.POINT and not handle.points:
            return 0
        return 3 if _reports_z(handle) else 2

    def set_coordinate_dimension(self, handle, dimension):
        if not self._check(handle, 'set_coordinate_dimension'):
            return
        set_3d(handle, int(dimension) == 3)

    def point_count(self, handle):
        if not self._check(handle, 'point_count'):
            return 0
        if handle.kind == GeometryType.POINT or handle.kind in _CURVE_TYPES:
            return len(handle.points)
        return 0

    def geometry_count(self, handle):
        if not self._check(handle, 'geometry_count'):
            return 0
        return len(handle.children)

    def _extent(self, handle, with_z_values):
        points = [p for point_list in iter_point_lists(handle) for p in point_list]
        if not points:
            return None
        values = np.asarray(points, dtype=float)
        extent = (values[:, 0].min(), values[:, 0].max(), values[:, 1].min(), values[:, 1].max())
        if with_z_values:
            extent += (values[:, 2].min(), values[:, 2].max())
        return tuple(float(v) for v in extent)

    def envelope(self, handle):
        if not self._check(handle, 'envelope'):
            return None
        return self._extent(handle, False)

    def envelope_3d(self, handle):
        if not self._check(handle, 'envelope_3d'):
            return None
        return self._extent(handle, True)

    def type_to_name(self, geometry_type):
        return geometry_type_to_name(geometry_type)

    def merge_geometry_types(self, main, extra):
        return merge_geometry_types(main, extra)

    # === Coordinates and containers
    def _promote_owners(self, handle: GeometryHandle) -> None:
        owner = handle.owner
        while owner is not None:
            if owner.kind != GeometryType.GEOMETRY_COLLECTION and not owner.is_3d:
                set_3d(owner, True)
            owner = owner.owner

    def get_point(self, handle, index):
        if not self._check(handle, 'get_point'):
            return None
        if not 0 <= index < len(handle.points):
            self._report(f"Point index {index} out of range (0 to {len(handle.points) - 1}).", ErrorNumber.ILLEGAL_ARG)
            return None
        return tuple(handle.points[index])

    def set_point(self, handle, index, x, y, z=None):
        if not self._check(handle, 'set_point'):
            return OGRErr.INVALID_HANDLE
        if handle.kind != GeometryType.POINT and handle.kind not in _CURVE_TYPES:
            self._report(f"Incompatible geometry for operation 'set_point': {geometry_name(handle.kind)}.", ErrorNumber.NOT_SUPPORTED)
            return OGRErr.UNSUPPORTED_OPERATION
        if index < 0 or (handle.kind == GeometryType.POINT and index != 0):
            self._report(f"Invalid point index: {index}.", ErrorNumber.ILLEGAL_ARG)
            return OGRErr.FAILURE

        if z is not None and not handle.is_3d:
            handle.is_3d = True
            self._promote_owners(handle)
        while len(handle.points) <= index:
            handle.points.append([0.0, 0.0, 0.0])
        handle.points[index] = [float(x), float(y), float(z) if z is not None and handle.is_3d else 0.0]
        return OGRErr.NONE

    def add_point(self, handle, x, y, z=None):
        if not self._check(handle, 'add_point'):
            return OGRErr.INVALID_HANDLE
        index = 0 if handle.kind == GeometryType.POINT else len(handle.points)
        return self.set_point(handle, index, x, y, z)

    def get_geometry_ref(self, handle, index):
        if not self._check(handle, 'get_geometry_ref'):
            return None
        if not 0 <= index < len(handle.children):
            self._report(f"Geometry index {index} out of range (0 to {len(handle.children) - 1}).", ErrorNumber.ILLEGAL_ARG)
            return None
        return handle.children[index]

    def add_geometry(self, handle, child):
        if not self._check(child, 'add_geometry'):
            return OGRErr.INVALID_HANDLE
        return self.add_geometry_directly(handle, _copy_tree(child))

    def add_geometry_directly(self, handle, child):
        if not (self._check(handle, 'add_geometry_directly') and self._check(child, 'add_geometry_directly')):
            return OGRErr.INVALID_HANDLE
        allowed = _ALLOWED_PARTS.get(handle.kind, ())
        if child.kind not in allowed:
            self._report(
                f"Can't add a {geometry_name(child.kind)} to a {geometry_name(handle.kind)}.",
                ErrorNumber.ILLEGAL_ARG
            )
            return OGRErr.UNSUPPORTED_GEOMETRY_TYPE
        if child.owner is not None:
            self._report("Geometry is already owned by a container.", ErrorNumber.ILLEGAL_ARG)
            return OGRErr.FAILURE

        if handle.kind == GeometryType.POLYGON:
            child.kind = GeometryType.LINEAR_RING
        elif handle.kind == GeometryType.MULTI_LINE_STRING:
            child.kind = GeometryType.LINE_STRING
        if child.spatial_reference is not None:
            self.release_spatial_reference(child.spatial_reference)
            child.spatial_reference = None

        if handle.kind != GeometryType.GEOMETRY_COLLECTION:
            if has_3d_parts(child) and not handle.is_3d:
                set_3d(handle, True)
                self._promote_owners(handle)
            elif handle.is_3d:
                set_3d(child, True)
        elif _reports_z(child):
            self._promote_owners(handle)

        _attach(handle, child)
        return OGRErr.NONE

    def remove_geometry(self, handle, index):
        if not self._check(handle, 'remove_geometry'):
            return OGRErr.INVALID_HANDLE
        if index == -1:
            for child in handle.children:
                _release_tree(child)
            handle.children = []
            return OGRErr.NONE
        if not 0 <= index < len(handle.children):
            self._report(f"Geometry index {index} out of range (0 to {len(handle.children) - 1}).", ErrorNumber.ILLEGAL_ARG)
            return OGRErr.FAILURE
        _release_tree(handle.children.pop(index))
        return OGRErr.NONE

    def close_rings(self, handle):
        if not self._check(handle, 'close_rings'):
            return
        if handle.kind == GeometryType.LINEAR_RING and handle.points and handle.points[0] != handle.points[-1]:
            handle.points.append(list(handle.points[0]))
        for child in handle.children:
            self.close_rings(child)

    def flatten_to_2d(self, handle):
        if not self._check(handle, 'flatten_to_2d'):
            return
        set_3d(handle, False)

    def segmentize(self, handle, max_length):
        if not self._check(handle, 'segmentize'):
            return OGRErr.INVALID_HANDLE
        if max_length <= 0:
            self._report(f"Maximum segment length must be positive, got {max_length}.", ErrorNumber.ILLEGAL_ARG)
            return OGRErr.FAILURE
        try:
            densified = _from_shapely(shapely.segmentize(_to_shapely(handle), max_length))
        except (GEOSException, ValueError) as error:
            self._report_exception(error)
            return OGRErr.FAILURE
        if handle.kind == GeometryType.LINEAR_RING:
            densified.kind = GeometryType.LINEAR_RING
        self._replace_content(handle, densified)
        return OGRErr.NONE

    # === Predicates
    def _predicate(self, operation, function, handle, other=None):
        handles = (handle,) if other is None else (handle, other)
        if not all(self._check(h, operation) for h in handles):
            return False
        try:
            return bool(function(*[_to_shapely(h) for h in handles]))
        except (GEOSException, ValueError) as error:
            self._report_exception(error)
            return False

    def intersects(self, handle, other):
        return self._predicate('intersects', shapely.intersects, handle, other)

    def equals(self, handle, other):
        if not (self._check(handle, 'equals') and self._check(other, 'equals')):
            return False
        return _same_structure(handle, other)

    def disjoint(self, handle, other):
        return self._predicate('disjoint', shapely.disjoint, handle, other)

    def touches(self, handle, other):
        return self._predicate('touches', shapely.touches, handle, other)

    def crosses(self, handle, other):
        return self._predicate('crosses', shapely.crosses, handle, other)

    def within(self, handle, other):
        return self._predicate('within', shapely.within, handle, other)

    def contains(self, handle, other):
        return self._predicate('contains', shapely.contains, handle, other)

    def overlaps(self, handle, other):
        return self._predicate('overlaps', shapely.overlaps, handle, other)

    def is_empty(self, handle):
        if not self._check(handle, 'is_empty'):
            return False
        return is_empty_handle(handle)

    def is_valid(self, handle):
        return self._predicate('is_valid', shapely.is_valid, handle)

    def is_simple(self, handle):
        return self._predicate('is_simple', shapely.is_simple, handle)

    def is_ring(self, handle):
        if not self._check(handle, 'is_ring'):
            return False
        if handle.kind not in _CURVE_TYPES:
            return False
        try:
            coords = _coordinates(handle.points, handle.is_3d)
            return bool(shapely.is_ring(shapely.LineString(coords) if coords else shapely.LineString()))
        except (GEOSException, ValueError) as error:
            self._report_exception(error)
            return False

    # === Derived geometries and measures
    def _derive(self, operation, function, handle, *others):
        handles = (handle, *others)
        if not all(self._check(h, operation) for h in handles):
            return None
        try:
            result = _from_shapely(function(*[_to_shapely(h) for h in handles]))
        except (GEOSException, ValueError) as error:
            self._report_exception(error)
            return None
        return self._inherit_spatial_reference(result, handle)

    def intersection(self, handle, other):
        return self._derive('intersection', shapely.intersection, handle, other)

    def union(self, handle, other):
        return self._derive('union', shapely.union, handle, other)

    def union_cascaded(self, handle):
        if not self._check(handle, 'union_cascaded'):
            return None
        if handle.kind != GeometryType.MULTI_POLYGON:
            self._report(f"Cascaded union requires a MULTIPOLYGON, got {geometry_name(handle.kind)}.", ErrorNumber.NOT_SUPPORTED)
            return None
        return self._derive('union_cascaded', lambda g: ops.unary_union(list(g.geoms)), handle)

    def difference(self, handle, other):
        return self._derive('difference', shapely.difference, handle, other)

    def symmetric_difference(self, handle, other):
        return self._derive('symmetric_difference', shapely.symmetric_difference, handle, other)

    def polygonize(self, handle):
        if not self._check(handle, 'polygonize'):
            return None
        if handle.kind != GeometryType.MULTI_LINE_STRING:
            self._report(f"Polygonize requires a MULTILINESTRING, got {geometry_name(handle.kind)}.", ErrorNumber.NOT_SUPPORTED)
            return None
        return self._derive('polygonize', lambda g: shapely.polygonize(list(g.geoms)), handle)

    def boundary(self, handle):
        return self._derive('boundary', shapely.boundary, handle)

    def buffer(self, handle, distance, quad_segments):
        return self._derive('buffer', lambda g: shapely.buffer(g, distance, quad_segs=quad_segments), handle)

    def convex_hull(self, handle):
        return self._derive('convex_hull', shapely.convex_hull, handle)

    def point_on_surface(self, handle):
        return self._derive('point_on_surface', shapely.point_on_surface, handle)

    def simplify(self, handle, tolerance):
        return self._derive('simplify', lambda g: shapely.simplify(g, tolerance, preserve_topology=False), handle)

    def simplify_preserve_topology(self, handle, tolerance):
        return self._derive('simplify_preserve_topology', lambda g: shapely.simplify(g, tolerance, preserve_topology=True), handle)

    def centroid(self, handle, point_handle):
        if not (self._check(handle, 'centroid') and self._check(point_handle, 'centroid')):
            return OGRErr.INVALID_HANDLE
        if point_handle.kind != GeometryType.POINT:
            self._report("Centroid can only be written into a POINT.", ErrorNumber.ILLEGAL_ARG)
            return OGRErr.UNSUPPORTED_GEOMETRY_TYPE
        try:
            center = shapely.centroid(_to_shapely(handle))
        except (GEOSException, ValueError) as error:
            self._report_exception(error)
            return OGRErr.FAILURE
        point_handle.points = [] if center.is_empty else [[center.x, center.y, 0.0]]
        return OGRErr.NONE

    def distance(self, handle, other):
        if not (self._check(handle, 'distance') and self._check(other, 'distance')):
            return -1.0
        try:
            result = float(shapely.distance(_to_shapely(handle), _to_shapely(other)))
        except (GEOSException, ValueError) as error:
            self._report_exception(error)
            return -1.0
        if math.isnan(result):
            self._report("Distance is undefined for empty geometries.", ErrorNumber.ILLEGAL_ARG)
            return -1.0
        return result

    def area(self, handle):
        if not self._check(handle, 'area'):
            return 0.0
        try:
            if handle.kind == GeometryType.LINEAR_RING:
                coords = _coordinates(handle.points, False)
                return float(shapely.area(shapely.Polygon(coords))) if len(coords) >= 3 else 0.0
            return float(shapely.area(_to_shapely(handle)))
        except (GEOSException, ValueError) as error:
            self._report_exception(error)
            return 0.0

    def length(self, handle):
        if not self._check(handle, 'length'):
            return 0.0
        if handle.kind in (GeometryType.POLYGON, GeometryType.MULTI_POLYGON):
            return 0.0
        if handle.kind == GeometryType.GEOMETRY_COLLECTION:
            return sum(self.length(child) for child in handle.children)
        try:
            return float(shapely.length(_to_shapely(handle)))
        except (GEOSException, ValueError) as error:
            self._report_exception(error)
            return 0.0

    # === Kind conversions (consume the input, return it unchanged when not possible)
    def _rebuild(self, handle, kind, parts=(), points=None):
        result = GeometryHandle(kind, handle.is_3d)
        result.points = points if points is not None else []
        for part in parts:
            part.owner = None
            _attach(result, part)
        set_3d(result, has_3d_parts(result))
        result.spatial_reference = handle.spatial_reference
        handle.spatial_reference = None
        handle.children = []
        _release_tree(handle)
        return result

    def force_to_line_string(self, handle):
        if not self._check(handle, 'force_to_line_string'):
            return None
        if handle.kind == GeometryType.LINEAR_RING:
            return self._rebuild(handle, GeometryType.LINE_STRING, points=handle.points)
        if handle.kind == GeometryType.POLYGON and len(handle.children) == 1:
            return self._rebuild(handle, GeometryType.LINE_STRING, points=handle.children[0].points)
        if handle.kind == GeometryType.MULTI_LINE_STRING and handle.children:
            points = [list(p) for p in handle.children[0].points]
            for part in handle.children[1:]:
                if not points or not part.points or points[-1] != part.points[0]:
                    return handle
                points.extend(list(p) for p in part.points[1:])
            return self._rebuild(handle, GeometryType.LINE_STRING, points=points)
        return handle

    def force_to_polygon(self, handle):
        if not self._check(handle, 'force_to_polygon'):
            return None
        if handle.kind in _CURVE_TYPES and len(handle.points) >= 4 and handle.points[0] == handle.points[-1]:
            ring = GeometryHandle(GeometryType.LINEAR_RING, handle.is_3d)
            ring.points = handle.points
            return self._rebuild(handle, GeometryType.POLYGON, parts=[ring])
        if handle.kind in (GeometryType.MULTI_POLYGON, GeometryType.GEOMETRY_COLLECTION) and handle.children \
                and all(c.kind == GeometryType.POLYGON for c in handle.children):
            rings = [ring for polygon in handle.children for ring in polygon.children]
            return self._rebuild(handle, GeometryType.POLYGON, parts=rings)
        return handle

    def force_to_multi_point(self, handle):
        if not self._check(handle, 'force_to_multi_point'):
            return None
        if handle.kind == GeometryType.POINT:
            part = GeometryHandle(GeometryType.POINT, handle.is_3d)
            part.points = handle.points
            return self._rebuild(handle, GeometryType.MULTI_POINT, parts=[part])
        if handle.kind == GeometryType.GEOMETRY_COLLECTION and all(c.kind == GeometryType.POINT for c in handle.children):
            return self._rebuild(handle, GeometryType.MULTI_POINT, parts=list(handle.children))
        return handle

    def force_to_multi_line_string(self, handle):
        if not self._check(handle, 'force_to_multi_line_string'):
            return None

        def _as_line(curve):
            line = GeometryHandle(GeometryType.LINE_STRING, curve.is_3d)
            line.points = curve.points
            return line

        if handle.kind in _CURVE_TYPES:
            return self._rebuild(handle, GeometryType.MULTI_LINE_STRING, parts=[_as_line(handle)])
        if handle.kind == GeometryType.POLYGON:
            return self._rebuild(handle, GeometryType.MULTI_LINE_STRING, parts=[_as_line(r) for r in handle.children])
        if handle.kind == GeometryType.MULTI_POLYGON:
            rings = [ring for polygon in handle.children for ring in polygon.children]
            return self._rebuild(handle, GeometryType.MULTI_LINE_STRING, parts=[_as_line(r) for r in rings])
        if handle.kind == GeometryType.GEOMETRY_COLLECTION and all(c.kind in _CURVE_TYPES for c in handle.children):
            return self._rebuild(handle, GeometryType.MULTI_LINE_STRING, parts=[_as_line(c) for c in handle.children])
        return handle

    def force_to_multi_polygon(self, handle):
        if not self._check(handle, 'force_to_multi_polygon'):
            return None
        if handle.kind == GeometryType.POLYGON:
            part = GeometryHandle(GeometryType.POLYGON, handle.is_3d)
            for ring in list(handle.children):
                _attach(part, ring)
            return self._rebuild(handle, GeometryType.MULTI_POLYGON, parts=[part])
        if handle.kind == GeometryType.GEOMETRY_COLLECTION and all(c.kind == GeometryType.POLYGON for c in handle.children):
            return self._rebuild(handle, GeometryType.MULTI_POLYGON, parts=list(handle.children))
        return handle

    # === Spatial references
    def _build_crs(self, user_input, input_format='user'):
        if input_format == 'epsg':
            return CRS.from_epsg(int(user_input))
        if input_format == 'wkt':
            return CRS.from_wkt(user_input)
        if input_format == 'proj4':
            return CRS.from_proj4(user_input)
        return CRS.from_user_input(user_input)

    def create_spatial_reference(self, user_input=None):
        if user_input is None:
            return SpatialReferenceHandle()
        try:
            return SpatialReferenceHandle(self._build_crs(user_input))
        except (CRSError, ValueError, TypeError) as error:
            self._report(f"Failed to create spatial reference from {user_input!r}: {error}", ErrorNumber.ILLEGAL_ARG)
            return None

    def import_spatial_reference(self, srs_handle, user_input, input_format):
        if not self._check_srs(srs_handle, 'import_spatial_reference'):
            return OGRErr.INVALID_HANDLE
        try:
            srs_handle.crs = self._build_crs(user_input, input_format)
        except (CRSError, ValueError, TypeError) as error:
            self._report(f"Failed to import {input_format} spatial reference {user_input!r}: {error}", ErrorNumber.ILLEGAL_ARG)
            return OGRErr.UNSUPPORTED_SRS
        return OGRErr.NONE

    def export_spatial_reference(self, srs_handle, output_format, pretty=False):
        if not self._check_srs(srs_handle, 'export_spatial_reference'):
            return OGRErr.INVALID_HANDLE, None
        if srs_handle.crs is None:
            self._report("Can't export an empty spatial reference.", ErrorNumber.ILLEGAL_ARG)
            return OGRErr.FAILURE, None
        try:
            if output_format == 'wkt':
                text = srs_handle.crs.to_wkt(version=ENGINE_CONFIG['srs_wkt_version'], pretty=pretty)
            elif output_format == 'proj4':
                text = srs_handle.crs.to_proj4()
            else:
                self._report(f"Unsupported spatial reference output format: {output_format}", ErrorNumber.NOT_SUPPORTED)
                return OGRErr.UNSUPPORTED_OPERATION, None
        except (CRSError, ValueError) as error:
            self._report(str(error))
            return OGRErr.FAILURE, None
        if text is None:
            self._report(f"Spatial reference can't be expressed as {output_format}.", ErrorNumber.NOT_SUPPORTED)
            return OGRErr.UNSUPPORTED_SRS, None
        return OGRErr.NONE, text

    def spatial_reference_authority_code(self, srs_handle):
        if not self._check_srs(srs_handle, 'spatial_reference_authority_code') or srs_handle.crs is None:
            return None
        return srs_handle.crs.to_epsg()

    def spatial_reference_kind(self, srs_handle, kind):
        if not self._check_srs(srs_handle, 'spatial_reference_kind'):
            return False
        if kind not in _SRS_KIND_CHECKS:
            self._report(f"Unknown spatial reference kind: {kind}", ErrorNumber.ILLEGAL_ARG)
            return False
        if srs_handle.crs is None:
            return False
        return bool(_SRS_KIND_CHECKS[kind](srs_handle.crs))

    @staticmethod
    def _vertical_part(crs):
        if crs.is_compound:
            return next((sub for sub in crs.sub_crs_list if sub.is_vertical), None)
        return crs if crs.is_vertical else None

    def is_same_spatial_reference(self, srs_handle, other, part=None):
        if not (self._check_srs(srs_handle, 'is_same_spatial_reference') and self._check_srs(other, 'is_same_spatial_reference')):
            return False
        first, second = srs_handle.crs, other.crs
        if first is None or second is None:
            return first is None and second is None
        if part == 'geog_cs':
            first, second = first.geodetic_crs, second.geodetic_crs
        elif part == 'vert_cs':
            first, second = self._vertical_part(first), self._vertical_part(second)
        if first is None or second is None:
            return first is None and second is None
        return first.equals(second, ignore_axis_order=True)

    def clone_spatial_reference(self, srs_handle):
        if not self._check_srs(srs_handle, 'clone_spatial_reference'):
            return None
        if srs_handle.crs is None:
            return SpatialReferenceHandle()
        return SpatialReferenceHandle(CRS.from_user_input(srs_handle.crs))

    def reference_spatial_reference(self, srs_handle):
        if not self._check_srs(srs_handle, 'reference_spatial_reference'):
            return 0
        srs_handle.ref_count += 1
        return srs_handle.ref_count

    def release_spatial_reference(self, srs_handle):
        if not self._check_srs(srs_handle, 'release_spatial_reference'):
            return 0
        srs_handle.ref_count -= 1
        if srs_handle.ref_count <= 0:
            srs_handle.ref_count = 0
            srs_handle.released = True
            srs_handle.crs = None
        return srs_handle.ref_count

    def spatial_reference_count(self, srs_handle):
        if srs_handle is None or srs_handle.released:
            return 0
        return srs_handle.ref_count

    def assign_spatial_reference(self, handle, srs_handle):
        if not self._check(handle, 'assign_spatial_reference'):
            return
        if srs_handle is not None:
            self.reference_spatial_reference(srs_handle)
        if handle.spatial_reference is not None:
            self.release_spatial_reference(handle.spatial_reference)
        handle.spatial_reference = srs_handle

    def get_spatial_reference(self, handle):
        if not self._check(handle, 'get_spatial_reference'):
            return None
        while handle.spatial_reference is None and handle.owner is not None:
            handle = handle.owner
        return handle.spatial_reference

    # === Coordinate transformations
    def create_coordinate_transformation(self, source, target):
        if not (self._check_srs(source, 'create_coordinate_transformation') and self._check_srs(target, 'create_coordinate_transformation')):
            return None
        if source.crs is None or target.crs is None:
            self._report("Can't create a transformation from or to an empty spatial reference.", ErrorNumber.ILLEGAL_ARG)
            return None
        try:
            transformer = Transformer.from_crs(source.crs, target.crs, always_xy=ENGINE_CONFIG['transform_always_xy'])
        except (ProjError, CRSError) as error:
            self._report(str(error))
            return None
        self.reference_spatial_reference(source)
        self.reference_spatial_reference(target)
        return TransformationHandle(transformer, source, target)

    def destroy_coordinate_transformation(self, transformation):
        if transformation is None or transformation.released:
            self._report("Pointer to coordinate transformation is NULL in 'destroy_coordinate_transformation'.", ErrorNumber.OBJECT_NULL)
            return
        self.release_spatial_reference(transformation.source)
        self.release_spatial_reference(transformation.target)
        transformation.transformer = None
        transformation.released = True

    def transform_coordinates(self, transformation, xs, ys, zs=None):
        if transformation is None or transformation.released:
            self._report("Pointer to coordinate transformation is NULL in 'transform_coordinates'.", ErrorNumber.OBJECT_NULL)
            return OGRErr.INVALID_HANDLE, None, None, None
        xs = np.asarray(xs, dtype=float)
        ys = np.asarray(ys, dtype=float)
        zs = None if zs is None else np.asarray(zs, dtype=float)
        try:
            if zs is None:
                out_x, out_y = transformation.transformer.transform(xs, ys, errcheck=True)
                out_z = None
            else:
                out_x, out_y, out_z = transformation.transformer.transform(xs, ys, zs, errcheck=True)
        except ProjError as error:
            self._report(str(error))
            return OGRErr.FAILURE, None, None, None
        if not (np.all(np.isfinite(out_x)) and np.all(np.isfinite(out_y))):
            self._report("Some points could not be transformed (non finite coordinates).")
            return OGRErr.FAILURE, None, None, None
        return OGRErr.NONE, np.asarray(out_x), np.asarray(out_y), None if out_z is None else np.asarray(out_z)

    def transform(self, handle, transformation):
        if not self._check(handle, 'transform'):
            return OGRErr.INVALID_HANDLE
        points = [p for point_list in iter_point_lists(handle) for p in point_list]
        if points:
            values = np.asarray(points, dtype=float)
            zs = values[:, 2] if has_3d_parts(handle) else None
            err, out_x, out_y, out_z = self.transform_coordinates(transformation, values[:, 0], values[:, 1], zs)
            if err != OGRErr.NONE:
                return err
            for idx, point in enumerate(points):
                point[0], point[1] = float(out_x[idx]), float(out_y[idx])
                if out_z is not None:
                    point[2] = float(out_z[idx])
        elif transformation is None or transformation.released:
            self._report("Pointer to coordinate transformation is NULL in 'transform'.", ErrorNumber.OBJECT_NULL)
            return OGRErr.INVALID_HANDLE
        self.assign_spatial_reference(handle, transformation.target)
        return OGRErr.NONE

    def transform_to(self, handle, srs_handle):
        if not (self._check(handle, 'transform_to') and self._check_srs(srs_handle, 'transform_to')):
            return OGRErr.INVALID_HANDLE
        source = self.get_spatial_reference(handle)
        if source is None:
            self.assign_spatial_reference(handle, srs_handle)
            return OGRErr.NONE
        transformation = self.create_coordinate_transformation(source, srs_handle)
        if transformation is None:
            return OGRErr.FAILURE
        try:
            return self.transform(handle, transformation)
        finally:
            self.destroy_coordinate_transformation(transformation)
