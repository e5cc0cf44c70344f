# %% === Import necessary modules
import logging
import weakref

from ..engine import get_engine, GeometryEngine, SpatialReferenceHandle
from ..utilities.error_handling import call_engine, call_engine_checked
from ..utilities.exceptions import InvalidHandle, ParseError, OperationFailure

logger = logging.getLogger(__name__)

def _release_handle(engine: GeometryEngine, handle: SpatialReferenceHandle) -> None:
    if not handle.released:
        engine.release_spatial_reference(handle)

# %% === Spatial reference wrapper
class SpatialReference:
    """
    Coordinate reference system, shared between geometries and reference counted.

    The wrapper holds one reference on its handle and gives it back when it is
    destroyed (explicitly, at the end of a with block or when garbage collected).
    Geometries attached to the same handle keep it alive on their own.

    Example:
        >>> srs = SpatialReference.from_epsg(4326)
        >>> srs.is_geographic
        True
    """

    def __init__(
            self,
            user_input=None,
            handle: SpatialReferenceHandle = None,
            engine: GeometryEngine = None
        ):
        """
        Create a spatial reference.

        Args:
            user_input (Any, optional): Anything pyproj understands (EPSG code, 'EPSG:32632', WKT, PROJ string).
                If None, an empty spatial reference is created. Defaults to None.
            handle (SpatialReferenceHandle, optional): Existing handle to wrap; the wrapper takes
                over one reference already counted on it. Defaults to None.
            engine (GeometryEngine, optional): Engine owning the handle. Defaults to the active engine.

        Raises:
            ParseError: If user_input can't be understood by the engine.
            InvalidHandle: If the handle to wrap is released.
        """
        self._engine = engine or get_engine()
        if handle is None:
            handle = call_engine(
                'SpatialReference',
                self._engine.create_spatial_reference,
                user_input,
                error_type=ParseError
            )
        if handle is None or handle.released:
            raise InvalidHandle("SpatialReference: can't wrap a null or released spatial reference handle.")
        self._handle = handle
        self._finalizer = weakref.finalize(self, _release_handle, self._engine, handle)

    @classmethod
    def from_handle(
            cls,
            handle: SpatialReferenceHandle,
            engine: GeometryEngine,
            retain: bool = True
        ) -> 'SpatialReference':
        """Wrap a handle held by someone else, adding a reference for the wrapper if retain is True."""
        if handle is None:
            return None
        if retain:
            engine.reference_spatial_reference(handle)
        return cls(handle=handle, engine=engine)

    @classmethod
    def from_epsg(cls, code: int) -> 'SpatialReference':
        srs = cls()
        srs.import_from_epsg(code)
        return srs

    @classmethod
    def from_wkt(cls, wkt: str) -> 'SpatialReference':
        srs = cls()
        srs.import_from_wkt(wkt)
        return srs

    @classmethod
    def from_proj4(cls, proj4: str) -> 'SpatialReference':
        srs = cls()
        srs.import_from_proj4(proj4)
        return srs

    # === Handle access and lifetime
    @property
    def handle(self) -> SpatialReferenceHandle:
        if self._handle.released or not self._finalizer.alive:
            raise InvalidHandle("SpatialReference: handle already released.")
        return self._handle

    @property
    def engine(self) -> GeometryEngine:
        return self._engine

    @property
    def reference_count(self) -> int:
        return self._engine.spatial_reference_count(self._handle)

    def destroy(self) -> None:
        """Give back the reference held by this wrapper (only once)."""
        self._finalizer()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.destroy()

    # === Import
    def _import(self, user_input, input_format: str) -> None:
        call_engine_checked(
            f"import_from_{input_format}",
            self._engine.import_spatial_reference,
            self.handle,
            user_input,
            input_format,
            error_type=ParseError
        )

    def import_from_epsg(self, code: int) -> None:
        self._import(code, 'epsg')

    def import_from_wkt(self, wkt: str) -> None:
        self._import(wkt, 'wkt')

    def import_from_proj4(self, proj4: str) -> None:
        self._import(proj4, 'proj4')

    # === Export
    def to_wkt(self, pretty: bool = False) -> str:
        """
        Export as WKT (WKT1 GDAL flavor, as set in the engine configuration).

        Args:
            pretty (bool, optional): Indent the output on several lines. Defaults to False.

        Returns:
            str: The WKT text.

        Raises:
            OperationFailure: If the spatial reference is empty or can't be expressed as WKT.
        """
        _, text = call_engine_checked(
            'to_wkt',
            self._engine.export_spatial_reference,
            self.handle,
            'wkt',
            pretty=pretty,
            error_type=OperationFailure
        )
        return text

    def to_proj4(self) -> str:
        _, text = call_engine_checked(
            'to_proj4',
            self._engine.export_spatial_reference,
            self.handle,
            'proj4',
            error_type=OperationFailure
        )
        return text

    @property
    def authority_code(self) -> int | None:
        return self._engine.spatial_reference_authority_code(self.handle)

    # === Type checks
    def _is_kind(self, kind: str) -> bool:
        return bool(call_engine(f"is_{kind}", self._engine.spatial_reference_kind, self.handle, kind))

    @property
    def is_geographic(self) -> bool:
        return self._is_kind('geographic')

    @property
    def is_projected(self) -> bool:
        return self._is_kind('projected')

    @property
    def is_local(self) -> bool:
        return self._is_kind('local')

    @property
    def is_compound(self) -> bool:
        return self._is_kind('compound')

    @property
    def is_geocentric(self) -> bool:
        return self._is_kind('geocentric')

    @property
    def is_vertical(self) -> bool:
        return self._is_kind('vertical')

    # === Comparison
    def is_same(self, other: 'SpatialReference') -> bool:
        """True if both describe the same coordinate reference system (axis order ignored)."""
        return bool(call_engine('is_same', self._engine.is_same_spatial_reference, self.handle, other.handle))

    def is_geog_cs_same(self, other: 'SpatialReference') -> bool:
        return bool(call_engine(
            'is_geog_cs_same', self._engine.is_same_spatial_reference, self.handle, other.handle, part='geog_cs'
        ))

    def is_vert_cs_same(self, other: 'SpatialReference') -> bool:
        return bool(call_engine(
            'is_vert_cs_same', self._engine.is_same_spatial_reference, self.handle, other.handle, part='vert_cs'
        ))

    def clone(self) -> 'SpatialReference':
        """New independent spatial reference with the same definition."""
        handle = call_engine('clone', self._engine.clone_spatial_reference, self.handle)
        return SpatialReference(handle=handle, engine=self._engine)

    def __repr__(self):
        if self._handle.released:
            return '<SpatialReference (released)>'
        code = self.authority_code
        return f"<SpatialReference {'EPSG:' + str(code) if code else 'custom'} (refs: {self.reference_count})>"
