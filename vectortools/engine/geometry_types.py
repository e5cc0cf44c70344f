# %% === Import necessary modules
import logging
from enum import IntEnum

logger = logging.getLogger(__name__)

WKB_25D_BIT = 0x80000000

# %% === Enumerations shared with the engine
class GeometryType(IntEnum):
    """Kind tags reported by the engine (WKB geometry type codes)."""
    UNKNOWN = 0
    POINT = 1
    LINE_STRING = 2
    POLYGON = 3
    MULTI_POINT = 4
    MULTI_LINE_STRING = 5
    MULTI_POLYGON = 6
    GEOMETRY_COLLECTION = 7
    NONE = 100
    LINEAR_RING = 101
    UNKNOWN_25D = WKB_25D_BIT | 0
    POINT_25D = WKB_25D_BIT | 1
    LINE_STRING_25D = WKB_25D_BIT | 2
    POLYGON_25D = WKB_25D_BIT | 3
    MULTI_POINT_25D = WKB_25D_BIT | 4
    MULTI_LINE_STRING_25D = WKB_25D_BIT | 5
    MULTI_POLYGON_25D = WKB_25D_BIT | 6
    GEOMETRY_COLLECTION_25D = WKB_25D_BIT | 7

    @classmethod
    def from_code(cls, code: int) -> 'GeometryType':
        """
        Convert a raw engine code to a GeometryType.

        Args:
            code (int): The code reported by the engine.

        Returns:
            GeometryType: The matching kind tag, or UNKNOWN if the code is not recognized.
        """
        try:
            return cls(code)
        except ValueError:
            logger.warning(f"Unrecognized geometry type code from engine: [{code}]. Treated as UNKNOWN.")
            return cls.UNKNOWN


class ByteOrder(IntEnum):
    """WKB byte order: XDR is big endian, NDR is little endian."""
    XDR = 0
    NDR = 1


class OGRErr(IntEnum):
    """Return codes of the engine calls that do not return a handle."""
    NONE = 0
    NOT_ENOUGH_DATA = 1
    NOT_ENOUGH_MEMORY = 2
    UNSUPPORTED_GEOMETRY_TYPE = 3
    UNSUPPORTED_OPERATION = 4
    CORRUPT_DATA = 5
    FAILURE = 6
    UNSUPPORTED_SRS = 7
    INVALID_HANDLE = 8


COLLECTION_TYPES = (
    GeometryType.MULTI_POINT,
    GeometryType.MULTI_LINE_STRING,
    GeometryType.MULTI_POLYGON,
    GeometryType.GEOMETRY_COLLECTION
)

_TYPE_NAMES = {
    GeometryType.UNKNOWN: 'Unknown (any)',
    GeometryType.POINT: 'Point',
    GeometryType.LINE_STRING: 'Line String',
    GeometryType.POLYGON: 'Polygon',
    GeometryType.MULTI_POINT: 'Multi Point',
    GeometryType.MULTI_LINE_STRING: 'Multi Line String',
    GeometryType.MULTI_POLYGON: 'Multi Polygon',
    GeometryType.GEOMETRY_COLLECTION: 'Geometry Collection',
    GeometryType.NONE: 'None',
    GeometryType.LINEAR_RING: 'Linear Ring'
}

_GEOMETRY_NAMES = {
    GeometryType.POINT: 'POINT',
    GeometryType.LINE_STRING: 'LINESTRING',
    GeometryType.LINEAR_RING: 'LINEARRING',
    GeometryType.POLYGON: 'POLYGON',
    GeometryType.MULTI_POINT: 'MULTIPOINT',
    GeometryType.MULTI_LINE_STRING: 'MULTILINESTRING',
    GeometryType.MULTI_POLYGON: 'MULTIPOLYGON',
    GeometryType.GEOMETRY_COLLECTION: 'GEOMETRYCOLLECTION'
}

# %% === Helpers on kind tags
def flatten_type(geometry_type: int) -> GeometryType:
    """Return the 2D kind of a (possibly 25D) kind tag."""
    return GeometryType.from_code(int(geometry_type) & ~WKB_25D_BIT)

def has_z(geometry_type: int) -> bool:
    """Return True if the kind tag carries the 25D flag."""
    return bool(int(geometry_type) & WKB_25D_BIT)

def with_z(geometry_type: int, is_3d: bool = True) -> GeometryType:
    """
    Add (or keep off) the 25D flag on a kind tag.

    Args:
        geometry_type (int): The kind tag.
        is_3d (bool, optional): Whether the 25D flag must be set. Defaults to True.

    Returns:
        GeometryType: The kind tag with the 25D flag set if is_3d and the kind supports it.
    """
    flat = flatten_type(geometry_type)
    if not is_3d or flat in (GeometryType.NONE, GeometryType.LINEAR_RING):
        return flat
    return GeometryType.from_code(int(flat) | WKB_25D_BIT)

def geometry_type_to_name(geometry_type: int) -> str:
    """
    Human readable name of a kind tag (ex: '3D Multi Polygon').

    Args:
        geometry_type (int): The kind tag.

    Returns:
        str: The name of the kind.
    """
    flat = flatten_type(geometry_type)
    if int(geometry_type) & ~WKB_25D_BIT != int(flat):
        return f"Unrecognized: {int(geometry_type)}"
    name = _TYPE_NAMES[flat]
    if has_z(geometry_type):
        return f"3D {name}"
    return name

def geometry_name(geometry_type: int) -> str:
    """Upper case WKT keyword of a kind tag (ex: 'MULTIPOLYGON')."""
    return _GEOMETRY_NAMES.get(flatten_type(geometry_type), 'UNKNOWN')

# %% === Function to merge two kind tags
def merge_geometry_types(
        main: int,
        extra: int
    ) -> GeometryType:
    """
    Find the most specific common kind of two kind tags.

    Useful to report a single kind for a set of heterogeneous geometries
    (ex: all the geometries of a layer).

    Args:
        main (int): The kind collected so far.
        extra (int): The kind to merge in.

    Returns:
        GeometryType: The common kind, or UNKNOWN (with the 25D flag if any input has it) when there is none.
    """
    flat_main = flatten_type(main)
    flat_extra = flatten_type(extra)
    is_3d = has_z(main) or has_z(extra)

    if flat_main == GeometryType.UNKNOWN or flat_extra == GeometryType.UNKNOWN:
        return with_z(GeometryType.UNKNOWN, is_3d)
    if flat_main == GeometryType.NONE:
        return GeometryType.from_code(int(extra))
    if flat_extra == GeometryType.NONE:
        return GeometryType.from_code(int(main))
    if flat_main == flat_extra:
        return with_z(flat_main, is_3d)
    if flat_main in COLLECTION_TYPES and flat_extra in COLLECTION_TYPES:
        return with_z(GeometryType.GEOMETRY_COLLECTION, is_3d)

    return with_z(GeometryType.UNKNOWN, is_3d)
