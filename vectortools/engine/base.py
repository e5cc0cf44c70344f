"""
Capability interface of a geometry engine.

An engine owns the native representation of geometries, spatial references and
coordinate transformations, and is the only code allowed to look inside their
handles. Engines follow the conventions of the native library they stand for:
they do not raise for engine-level problems, they record them in the thread's
ErrorContext and return a null handle, False, -1 or a failing OGRErr code.
"""

# %% === Import necessary modules
from abc import ABC, abstractmethod

from .error_context import ErrorContext, current_error_context

# %% === Abstract engine
class GeometryEngine(ABC):
    """Abstract geometry engine, grouped by capability."""

    name = 'abstract'

    @property
    def errors(self) -> ErrorContext:
        return current_error_context()

    # === Construction / destruction
    @abstractmethod
    def create_geometry(self, geometry_type):
        """New empty geometry handle of the given kind, None if the kind can't be allocated."""

    @abstractmethod
    def destroy_geometry(self, handle):
        """Release a geometry handle and the references it holds."""

    @abstractmethod
    def clone_geometry(self, handle):
        """Deep copy of a geometry handle (the spatial reference is shared)."""

    @abstractmethod
    def make_empty(self, handle):
        """Clear all the coordinates and parts of a geometry."""

    # === Parsing
    @abstractmethod
    def create_from_wkt(self, wkt_data, spatial_reference=None):
        """Return (OGRErr, handle) for a WKT string."""

    @abstractmethod
    def create_from_wkb(self, wkb_data, spatial_reference=None):
        """Return (OGRErr, handle) for WKB bytes."""

    @abstractmethod
    def create_from_gml(self, gml_data):
        """Handle for a GML fragment, None on failure."""

    @abstractmethod
    def create_from_json(self, json_data):
        """Handle for a GeoJSON geometry, None on failure."""

    @abstractmethod
    def import_from_wkt(self, handle, wkt_data):
        """Replace the content of a geometry with a WKT string; return OGRErr."""

    @abstractmethod
    def import_from_wkb(self, handle, wkb_data):
        """Replace the content of a geometry with WKB bytes; return OGRErr."""

    # === Export
    @abstractmethod
    def export_to_wkt(self, handle):
        """Return (OGRErr, text) with the classic WKT of a geometry."""

    @abstractmethod
    def export_to_iso_wkt(self, handle):
        """Return (OGRErr, text) with the ISO WKT of a geometry."""

    @abstractmethod
    def wkb_size(self, handle):
        """Exact number of bytes of the WKB of a geometry."""

    @abstractmethod
    def export_to_wkb(self, handle, byte_order, output):
        """Fill the bytearray output with the WKB of a geometry; return OGRErr."""

    @abstractmethod
    def export_to_json(self, handle, coordinate_precision=None, significant_figures=None):
        """GeoJSON text of a geometry, None on failure."""

    @abstractmethod
    def export_to_gml(self, handle, **options):
        """GML text of a geometry, None on failure."""

    @abstractmethod
    def export_to_kml(self, handle, altitude_mode=None):
        """KML text of a geometry, None on failure."""

    # === Introspection
    @abstractmethod
    def geometry_type(self, handle):
        """Raw kind code of a geometry."""

    @abstractmethod
    def geometry_name(self, handle):
        """WKT keyword of a geometry."""

    @abstractmethod
    def dimension(self, handle):
        """Topological dimension: 0 for points, 1 for lines, 2 for surfaces."""

    @abstractmethod
    def coordinate_dimension(self, handle):
        """2 or 3, 0 for an empty point."""

    @abstractmethod
    def set_coordinate_dimension(self, handle, dimension):
        """Force the coordinate dimension of a geometry and of its parts."""

    @abstractmethod
    def point_count(self, handle):
        """Number of points of a point or curve."""

    @abstractmethod
    def geometry_count(self, handle):
        """Number of parts of a polygon or collection."""

    @abstractmethod
    def envelope(self, handle):
        """(min_x, max_x, min_y, max_y), None for an empty geometry."""

    @abstractmethod
    def envelope_3d(self, handle):
        """(min_x, max_x, min_y, max_y, min_z, max_z), None for an empty geometry."""

    @abstractmethod
    def type_to_name(self, geometry_type):
        """Human readable name of a kind code."""

    @abstractmethod
    def merge_geometry_types(self, main, extra):
        """Most specific common kind of two kind codes."""

    # === Coordinates and containers
    @abstractmethod
    def get_point(self, handle, index):
        """(x, y, z) of the point at index."""

    @abstractmethod
    def set_point(self, handle, index, x, y, z=None):
        """Set the point at index, extending the curve if index equals the count."""

    @abstractmethod
    def add_point(self, handle, x, y, z=None):
        """Append a point to a curve (or set the point of a point)."""

    @abstractmethod
    def get_geometry_ref(self, handle, index):
        """Child handle at index, still owned by the container."""

    @abstractmethod
    def add_geometry(self, handle, child):
        """Add a copy of child to a container; return OGRErr."""

    @abstractmethod
    def add_geometry_directly(self, handle, child):
        """Add child to a container, which takes its ownership; return OGRErr."""

    @abstractmethod
    def remove_geometry(self, handle, index):
        """Remove and release the child at index; return OGRErr."""

    @abstractmethod
    def close_rings(self, handle):
        """Close the unclosed rings of a geometry."""

    @abstractmethod
    def flatten_to_2d(self, handle):
        """Drop the Z coordinates of a geometry."""

    @abstractmethod
    def segmentize(self, handle, max_length):
        """Densify a geometry so that no segment is longer than max_length."""

    # === Predicates
    @abstractmethod
    def intersects(self, handle, other):
        """True if the geometries share any point."""

    @abstractmethod
    def equals(self, handle, other):
        """True if the geometries have the same kind and coordinates."""

    @abstractmethod
    def disjoint(self, handle, other):
        """True if the geometries share no point."""

    @abstractmethod
    def touches(self, handle, other):
        """True if the geometries touch at their boundaries only."""

    @abstractmethod
    def crosses(self, handle, other):
        """True if the geometries cross."""

    @abstractmethod
    def within(self, handle, other):
        """True if the geometry is within other."""

    @abstractmethod
    def contains(self, handle, other):
        """True if the geometry contains other."""

    @abstractmethod
    def overlaps(self, handle, other):
        """True if the geometries overlap."""

    @abstractmethod
    def is_empty(self, handle):
        """True if the geometry has no points."""

    @abstractmethod
    def is_valid(self, handle):
        """True if the geometry is topologically valid."""

    @abstractmethod
    def is_simple(self, handle):
        """True if the geometry has no self intersection or self tangency."""

    @abstractmethod
    def is_ring(self, handle):
        """True if the geometry is a closed and simple curve."""

    # === Derived geometries and measures
    @abstractmethod
    def intersection(self, handle, other):
        """Handle of the intersection."""

    @abstractmethod
    def union(self, handle, other):
        """Handle of the union."""

    @abstractmethod
    def union_cascaded(self, handle):
        """Handle of the union of all the parts of a multi polygon."""

    @abstractmethod
    def difference(self, handle, other):
        """Handle of the difference."""

    @abstractmethod
    def symmetric_difference(self, handle, other):
        """Handle of the symmetric difference."""

    @abstractmethod
    def polygonize(self, handle):
        """Handle of the polygons rebuilt from the edges of a multi line string."""

    @abstractmethod
    def boundary(self, handle):
        """Handle of the boundary."""

    @abstractmethod
    def buffer(self, handle, distance, quad_segments):
        """Handle of the buffer region."""

    @abstractmethod
    def convex_hull(self, handle):
        """Handle of the convex hull."""

    @abstractmethod
    def point_on_surface(self, handle):
        """Handle of a point guaranteed to lie on the surface."""

    @abstractmethod
    def simplify(self, handle, tolerance):
        """Handle of the simplified geometry (Douglas-Peucker, no topology check)."""

    @abstractmethod
    def simplify_preserve_topology(self, handle, tolerance):
        """Handle of the simplified geometry, without new self intersections."""

    @abstractmethod
    def centroid(self, handle, point_handle):
        """Write the centroid into point_handle; return OGRErr."""

    @abstractmethod
    def distance(self, handle, other):
        """Shortest distance between the geometries, -1 on error."""

    @abstractmethod
    def area(self, handle):
        """Area of a surface (0 for other kinds)."""

    @abstractmethod
    def length(self, handle):
        """Length of a curve (0 for other kinds)."""

    @abstractmethod
    def force_to_line_string(self, handle):
        """Convert to a line string; return the same handle if not possible."""

    @abstractmethod
    def force_to_polygon(self, handle):
        """Convert to a polygon; return the same handle if not possible."""

    @abstractmethod
    def force_to_multi_point(self, handle):
        """Convert to a multi point; return the same handle if not possible."""

    @abstractmethod
    def force_to_multi_line_string(self, handle):
        """Convert to a multi line string; return the same handle if not possible."""

    @abstractmethod
    def force_to_multi_polygon(self, handle):
        """Convert to a multi polygon; return the same handle if not possible."""

    # === Spatial references
    @abstractmethod
    def create_spatial_reference(self, user_input=None):
        """New spatial reference handle (empty if user_input is None), None on failure."""

    @abstractmethod
    def import_spatial_reference(self, srs_handle, user_input, input_format):
        """Replace the definition of a spatial reference; return OGRErr."""

    @abstractmethod
    def export_spatial_reference(self, srs_handle, output_format, pretty=False):
        """Return (OGRErr, text) with the definition of a spatial reference."""

    @abstractmethod
    def spatial_reference_authority_code(self, srs_handle):
        """EPSG code of a spatial reference, None if it has none."""

    @abstractmethod
    def spatial_reference_kind(self, srs_handle, kind):
        """True if the spatial reference is of kind ('geographic', 'projected', ...)."""

    @abstractmethod
    def is_same_spatial_reference(self, srs_handle, other, part=None):
        """True if the spatial references (or their 'geog_cs'/'vert_cs' parts) are the same."""

    @abstractmethod
    def clone_spatial_reference(self, srs_handle):
        """New spatial reference handle with the same definition."""

    @abstractmethod
    def reference_spatial_reference(self, srs_handle):
        """Increment the reference count; return the new count."""

    @abstractmethod
    def release_spatial_reference(self, srs_handle):
        """Decrement the reference count, releasing at zero; return the new count."""

    @abstractmethod
    def spatial_reference_count(self, srs_handle):
        """Current reference count."""

    @abstractmethod
    def assign_spatial_reference(self, handle, srs_handle):
        """Associate a spatial reference to a geometry (and its parts) without reprojecting."""

    @abstractmethod
    def get_spatial_reference(self, handle):
        """Spatial reference handle of a geometry, None if it has none."""

    # === Coordinate transformations
    @abstractmethod
    def create_coordinate_transformation(self, source, target):
        """New transformation handle, None on failure."""

    @abstractmethod
    def destroy_coordinate_transformation(self, transformation):
        """Release a transformation handle."""

    @abstractmethod
    def transform_coordinates(self, transformation, xs, ys, zs=None):
        """Return (OGRErr, xs, ys, zs) with the transformed coordinates."""

    @abstractmethod
    def transform(self, handle, transformation):
        """Transform a geometry in place with a transformation; return OGRErr."""

    @abstractmethod
    def transform_to(self, handle, srs_handle):
        """Transform a geometry in place to a spatial reference; return OGRErr."""
