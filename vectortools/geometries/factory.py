"""
Factory of geometry wrappers and parsing constructors.

The factory picks the variant class from the kind reported by the engine. The
match is a closed if/elif chain: any kind it does not list ends up as
UnknownGeometry, which still supports the common capability set.
"""

# %% === Import necessary modules
import json
import logging

from ..engine import get_engine, GeometryEngine, GeometryHandle, GeometryType
from ..spatial_ref import SpatialReference
from ..utilities.error_handling import call_engine, call_engine_checked
from ..utilities.exceptions import ParseError
from .geometry import Geometry, allocate_handle
from .variants import (
    Point,
    Point25D,
    LineString,
    LineString25D,
    LinearRing,
    Polygon,
    Polygon25D,
    MultiPoint,
    MultiPoint25D,
    MultiLineString,
    MultiLineString25D,
    MultiPolygon,
    MultiPolygon25D,
    GeometryCollection,
    GeometryCollection25D,
    NoneGeometry,
    UnknownGeometry
)

logger = logging.getLogger(__name__)

# %% === Function to select the variant of a handle
def _is_linear_ring(engine: GeometryEngine, handle: GeometryHandle) -> bool:
    # The engine reports linear rings as line strings: only their WKT tells them apart
    _, wkt = engine.export_to_wkt(handle)
    engine.errors.clear()
    return bool(wkt) and wkt.startswith('LINEARRING')

def _variant_class(
        geometry_type: GeometryType,
        engine: GeometryEngine,
        handle: GeometryHandle
    ) -> type:
    if geometry_type == GeometryType.POINT:
        return Point
    elif geometry_type == GeometryType.POINT_25D:
        return Point25D
    elif geometry_type == GeometryType.LINE_STRING:
        return LinearRing if _is_linear_ring(engine, handle) else LineString
    elif geometry_type == GeometryType.LINE_STRING_25D:
        return LineString25D
    elif geometry_type == GeometryType.LINEAR_RING:
        return LinearRing
    elif geometry_type == GeometryType.POLYGON:
        return Polygon
    elif geometry_type == GeometryType.POLYGON_25D:
        return Polygon25D
    elif geometry_type == GeometryType.MULTI_POINT:
        return MultiPoint
    elif geometry_type == GeometryType.MULTI_POINT_25D:
        return MultiPoint25D
    elif geometry_type == GeometryType.MULTI_LINE_STRING:
        return MultiLineString
    elif geometry_type == GeometryType.MULTI_LINE_STRING_25D:
        return MultiLineString25D
    elif geometry_type == GeometryType.MULTI_POLYGON:
        return MultiPolygon
    elif geometry_type == GeometryType.MULTI_POLYGON_25D:
        return MultiPolygon25D
    elif geometry_type == GeometryType.GEOMETRY_COLLECTION:
        return GeometryCollection
    elif geometry_type == GeometryType.GEOMETRY_COLLECTION_25D:
        return GeometryCollection25D
    elif geometry_type == GeometryType.NONE:
        return NoneGeometry
    else:
        return UnknownGeometry

# %% === Function to wrap a handle or a geometry
def factory(
        geometry_or_handle: Geometry | GeometryHandle | None,
        owned: bool = True,
        engine: GeometryEngine = None
    ) -> Geometry | None:
    """
    Wrap a handle (or re-wrap a geometry) in the variant matching its kind.

    Args:
        geometry_or_handle (Geometry | GeometryHandle | None): What to wrap. When a Geometry owning
            its handle is given and owned is True, the ownership moves to the new wrapper.
        owned (bool, optional): If True, the new wrapper releases the handle when destroyed. Defaults to True.
        engine (GeometryEngine, optional): Engine of a raw handle. Defaults to the active engine.

    Returns:
        Geometry | None: The variant wrapper, None for a null handle.
    """
    if geometry_or_handle is None:
        return None

    if isinstance(geometry_or_handle, Geometry):
        source = geometry_or_handle
        engine = source.engine
        handle = source.handle
        owned = owned and source.owned
        if owned:
            source.release_ownership()
    else:
        engine = engine or get_engine()
        handle = geometry_or_handle

    geometry_type = GeometryType.from_code(engine.geometry_type(handle))
    variant = _variant_class(geometry_type, engine, handle)
    return variant(handle=handle, owned=owned, engine=engine)

# %% === Constructors
def create(geometry_type: GeometryType | int) -> Geometry:
    """
    New empty geometry of the given kind.

    Args:
        geometry_type (GeometryType | int): The kind (ex: GeometryType.POLYGON_25D).

    Returns:
        Geometry: The new geometry, of the variant matching the kind.

    Raises:
        AllocationError: If the engine can't allocate the kind (ex: NONE, UNKNOWN).
    """
    engine = get_engine()
    return factory(allocate_handle(engine, geometry_type), engine=engine)

def _srs_handle(spatial_reference: SpatialReference | None):
    return None if spatial_reference is None else spatial_reference.handle

def create_from_wkt(
        wkt_data: str,
        spatial_reference: SpatialReference = None
    ) -> Geometry | None:
    """
    Parse a WKT string.

    Args:
        wkt_data (str): The WKT text (ex: 'POINT (1 2)', 'POLYGON EMPTY').
        spatial_reference (SpatialReference, optional): Spatial reference to attach. Defaults to None.

    Returns:
        Geometry | None: The geometry (an empty variant for '... EMPTY'), None for blank input.

    Raises:
        ParseError: If the engine can't parse the text.
    """
    engine = get_engine()
    _, handle = call_engine_checked(
        'create_from_wkt',
        engine.create_from_wkt,
        wkt_data,
        _srs_handle(spatial_reference),
        error_type=ParseError
    )
    return factory(handle, engine=engine)

def create_from_wkb(
        wkb_data: bytes,
        spatial_reference: SpatialReference = None
    ) -> Geometry | None:
    """Parse WKB bytes (None for empty input; ParseError if the engine rejects them)."""
    engine = get_engine()
    _, handle = call_engine_checked(
        'create_from_wkb',
        engine.create_from_wkb,
        wkb_data,
        _srs_handle(spatial_reference),
        error_type=ParseError
    )
    return factory(handle, engine=engine)

def create_from_gml(gml_data: str) -> Geometry | None:
    engine = get_engine()
    handle = call_engine('create_from_gml', engine.create_from_gml, gml_data, error_type=ParseError)
    return factory(handle, engine=engine)

def create_from_json(json_data: str | dict) -> Geometry | None:
    """
    Parse a GeoJSON geometry.

    Args:
        json_data (str | dict): The GeoJSON text, or the already decoded dictionary.

    Returns:
        Geometry | None: The geometry, None for a JSON null.

    Raises:
        ParseError: If the text is not a valid GeoJSON geometry.
    """
    if isinstance(json_data, dict):
        json_data = json.dumps(json_data)
    engine = get_engine()
    handle = call_engine('create_from_json', engine.create_from_json, json_data, error_type=ParseError)
    return factory(handle, engine=engine)

# %% === Kind helpers
def type_to_name(geometry_type: GeometryType | int) -> str:
    """Human readable name of a kind (ex: 'Multi Polygon', '3D Point')."""
    return get_engine().type_to_name(geometry_type)

def merge_geometry_types(main: GeometryType | int, extra: GeometryType | int) -> GeometryType:
    """Most specific common kind of two kinds, UNKNOWN when they have none."""
    return GeometryType.from_code(get_engine().merge_geometry_types(main, extra))
