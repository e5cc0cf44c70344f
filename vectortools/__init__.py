"""
vectortools: vector geometries over a pluggable geometry engine.

Provides the geometry variants with their predicates, derived operations,
serializations and transformations, the spatial references, and the feature
attribute boundary. The default engine uses shapely and pyproj.
"""

from .engine import (
    GeometryType,
    ByteOrder,
    OGRErr,
    GeometryEngine,
    ShapelyEngine,
    get_engine,
    set_engine,
    use_engine
)

from .geometries import (
    Envelope,
    Geometry,
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
    UnknownGeometry,
    factory,
    create,
    create_from_wkt,
    create_from_wkb,
    create_from_gml,
    create_from_json,
    type_to_name,
    merge_geometry_types
)

from .spatial_ref import (
    SpatialReference,
    CoordinateTransformation
)

from .features import (
    FieldType,
    FieldDefinition,
    GeometryFieldDefinition,
    FeatureDefinition,
    Feature
)

from .utilities import (
    VectorToolsError,
    InvalidHandle,
    AllocationError,
    UnsupportedFieldType,
    InvalidCoordinateDimension,
    EngineError,
    TopologyError,
    ParseError,
    TransformError,
    OperationFailure
)

__version__ = '0.1.0'

__all__ = [
    "GeometryType",
    "ByteOrder",
    "OGRErr",
    "GeometryEngine",
    "ShapelyEngine",
    "get_engine",
    "set_engine",
    "use_engine",
    "Envelope",
    "Geometry",
    "Point",
    "Point25D",
    "LineString",
    "LineString25D",
    "LinearRing",
    "Polygon",
    "Polygon25D",
    "MultiPoint",
    "MultiPoint25D",
    "MultiLineString",
    "MultiLineString25D",
    "MultiPolygon",
    "MultiPolygon25D",
    "GeometryCollection",
    "GeometryCollection25D",
    "NoneGeometry",
    "UnknownGeometry",
    "factory",
    "create",
    "create_from_wkt",
    "create_from_wkb",
    "create_from_gml",
    "create_from_json",
    "type_to_name",
    "merge_geometry_types",
    "SpatialReference",
    "CoordinateTransformation",
    "FieldType",
    "FieldDefinition",
    "GeometryFieldDefinition",
    "FeatureDefinition",
    "Feature",
    "VectorToolsError",
    "InvalidHandle",
    "AllocationError",
    "UnsupportedFieldType",
    "InvalidCoordinateDimension",
    "EngineError",
    "TopologyError",
    "ParseError",
    "TransformError",
    "OperationFailure"
]
