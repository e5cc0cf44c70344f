# %% === Import necessary modules
import logging
import weakref

import numpy as np

from ..engine import GeometryEngine, TransformationHandle
from ..utilities.error_handling import call_engine, call_engine_checked
from ..utilities.exceptions import InvalidHandle, TransformError
from .spatial_reference import SpatialReference

logger = logging.getLogger(__name__)

def _destroy_handle(engine: GeometryEngine, handle: TransformationHandle) -> None:
    if not handle.released:
        engine.destroy_coordinate_transformation(handle)

# %% === Coordinate transformation wrapper
class CoordinateTransformation:
    """
    Transformation between two spatial references.

    Build it once and reuse it for many geometries: Geometry.transform_to
    rebuilds an equivalent transformation at every call.
    """

    def __init__(
            self,
            source: SpatialReference,
            target: SpatialReference
        ):
        """
        Create a transformation from source to target.

        Args:
            source (SpatialReference): The spatial reference of the input coordinates.
            target (SpatialReference): The spatial reference of the output coordinates.

        Raises:
            TransformError: If the engine can't build a transformation between the two references.
        """
        self._engine = source.engine
        handle = call_engine(
            'CoordinateTransformation',
            self._engine.create_coordinate_transformation,
            source.handle,
            target.handle,
            error_type=TransformError
        )
        if handle is None:
            raise TransformError("CoordinateTransformation: engine returned a null transformation.")
        self._handle = handle
        self._finalizer = weakref.finalize(self, _destroy_handle, self._engine, handle)

    @property
    def handle(self) -> TransformationHandle:
        if self._handle.released:
            raise InvalidHandle("CoordinateTransformation: handle already released.")
        return self._handle

    @property
    def engine(self) -> GeometryEngine:
        return self._engine

    @property
    def source(self) -> SpatialReference:
        return SpatialReference.from_handle(self.handle.source, self._engine)

    @property
    def target(self) -> SpatialReference:
        return SpatialReference.from_handle(self.handle.target, self._engine)

    def transform(
            self,
            xs: np.ndarray | list[float],
            ys: np.ndarray | list[float],
            zs: np.ndarray | list[float] | None = None
        ) -> tuple[np.ndarray, np.ndarray, np.ndarray | None]:
        """
        Transform arrays of coordinates.

        Args:
            xs (np.ndarray | list[float]): X (or longitude) values.
            ys (np.ndarray | list[float]): Y (or latitude) values.
            zs (np.ndarray | list[float] | None, optional): Z values. Defaults to None.

        Returns:
            tuple(np.ndarray, np.ndarray, np.ndarray | None): The transformed x, y and z arrays (z is None if zs was None).

        Raises:
            TransformError: If the engine fails to transform any of the points.
        """
        xs, ys = np.atleast_1d(np.asarray(xs, dtype=float)), np.atleast_1d(np.asarray(ys, dtype=float))
        if xs.shape != ys.shape:
            raise ValueError(f"xs and ys must have the same shape, got {xs.shape} and {ys.shape}")
        if zs is not None:
            zs = np.atleast_1d(np.asarray(zs, dtype=float))
        _, out_x, out_y, out_z = call_engine_checked(
            'transform',
            self._engine.transform_coordinates,
            self.handle,
            xs,
            ys,
            zs,
            error_type=TransformError
        )
        return out_x, out_y, out_z

    def transform_point(self, x: float, y: float, z: float = None) -> tuple[float, ...]:
        """Transform a single point, returning (x, y) or (x, y, z)."""
        out_x, out_y, out_z = self.transform([x], [y], None if z is None else [z])
        if out_z is None:
            return float(out_x[0]), float(out_y[0])
        return float(out_x[0]), float(out_y[0]), float(out_z[0])

    def destroy(self) -> None:
        self._finalizer()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.destroy()

    def __repr__(self):
        state = 'released' if self._handle.released else 'active'
        return f"<CoordinateTransformation ({state})>"
