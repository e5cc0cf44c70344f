"""
Opaque handles exchanged between the wrappers and the geometry engine.

Wrappers never look inside a handle: they only pass it back to the engine that
created it. A handle is "null" when it is None and invalid once released.
"""

# %% === Import necessary modules
from .geometry_types import GeometryType

# %% === Geometry handle
class GeometryHandle:
    """
    Engine representation of a geometry.

    Point, line string and linear ring keep their coordinates in points (lists
    of [x, y, z]); polygons and collections keep their parts in children.
    A child handle has its container as owner.
    """
    __slots__ = ('kind', 'is_3d', 'points', 'children', 'spatial_reference', 'owner', 'released')

    def __init__(self, kind: GeometryType, is_3d: bool = False):
        self.kind = kind
        self.is_3d = is_3d
        self.points = []
        self.children = []
        self.spatial_reference = None
        self.owner = None
        self.released = False

    def __repr__(self):
        state = 'released' if self.released else f"{len(self.points)} points, {len(self.children)} children"
        return f"<GeometryHandle {self.kind.name}{' Z' if self.is_3d else ''} ({state}) at {hex(id(self))}>"

# %% === Helpers on geometry handles
def is_empty_handle(handle: GeometryHandle) -> bool:
    """True if the geometry has no points, in itself or in any of its parts."""
    if handle.kind in (GeometryType.POINT, GeometryType.LINE_STRING, GeometryType.LINEAR_RING):
        return not handle.points
    return all(is_empty_handle(child) for child in handle.children)

def iter_point_lists(handle: GeometryHandle):
    """Yield the point lists of a geometry and of all its parts."""
    if handle.kind in (GeometryType.POINT, GeometryType.LINE_STRING, GeometryType.LINEAR_RING):
        yield handle.points
    for child in handle.children:
        yield from iter_point_lists(child)

def set_3d(handle: GeometryHandle, is_3d: bool) -> None:
    """Set the 3D flag of a geometry and of all its parts (Z is zeroed when dropped)."""
    handle.is_3d = is_3d
    if not is_3d:
        for point in handle.points:
            point[2] = 0.0
    for child in handle.children:
        set_3d(child, is_3d)

def has_3d_parts(handle: GeometryHandle) -> bool:
    """True if the geometry or any of its parts is 3D."""
    return handle.is_3d or any(has_3d_parts(child) for child in handle.children)

# %% === Spatial reference handle
class SpatialReferenceHandle:
    """
    Engine representation of a coordinate reference system, reference counted.

    The handle starts with one reference (the creator's); it is released when
    the count drops to zero.
    """
    __slots__ = ('crs', 'ref_count', 'released')

    def __init__(self, crs=None):
        self.crs = crs
        self.ref_count = 1
        self.released = False

    def __repr__(self):
        name = self.crs.name if self.crs is not None else 'empty'
        return f"<SpatialReferenceHandle {name} (refs: {self.ref_count}) at {hex(id(self))}>"

# %% === Coordinate transformation handle
class TransformationHandle:
    """Engine representation of a coordinate transformation."""
    __slots__ = ('transformer', 'source', 'target', 'released')

    def __init__(self, transformer, source: SpatialReferenceHandle, target: SpatialReferenceHandle):
        self.transformer = transformer
        self.source = source
        self.target = target
        self.released = False

    def __repr__(self):
        return f"<TransformationHandle {self.source!r} -> {self.target!r} at {hex(id(self))}>"
