from .envelope import Envelope
from .export_options import GmlExportOptions, GeoJsonExportOptions
from .geometry import Geometry
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
from .factory import (
    factory,
    create,
    create_from_wkt,
    create_from_wkb,
    create_from_gml,
    create_from_json,
    type_to_name,
    merge_geometry_types
)

__all__ = [
    'Envelope',
    'GmlExportOptions',
    'GeoJsonExportOptions',
    'Geometry',
    'Point',
    'Point25D',
    'LineString',
    'LineString25D',
    'LinearRing',
    'Polygon',
    'Polygon25D',
    'MultiPoint',
    'MultiPoint25D',
    'MultiLineString',
    'MultiLineString25D',
    'MultiPolygon',
    'MultiPolygon25D',
    'GeometryCollection',
    'GeometryCollection25D',
    'NoneGeometry',
    'UnknownGeometry',
    'factory',
    'create',
    'create_from_wkt',
    'create_from_wkb',
    'create_from_gml',
    'create_from_json',
    'type_to_name',
    'merge_geometry_types'
]
