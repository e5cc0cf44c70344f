# %% === Import necessary modules
import logging
from contextlib import contextmanager

from config.default_params import ENGINE_CONFIG
from .base import GeometryEngine
from .error_context import ErrorContext, ErrorLevel, ErrorNumber, ErrorRecord, current_error_context
from .geometry_types import (
    WKB_25D_BIT,
    GeometryType,
    ByteOrder,
    OGRErr,
    COLLECTION_TYPES,
    flatten_type,
    has_z,
    with_z,
    geometry_type_to_name,
    geometry_name,
    merge_geometry_types
)
from .handles import GeometryHandle, SpatialReferenceHandle, TransformationHandle
from .shapely_engine import ShapelyEngine

logger = logging.getLogger(__name__)

_ENGINE_CLASSES = {
    ShapelyEngine.name: ShapelyEngine
}

_active_engine = None

# %% === Function to get the active engine
def get_engine() -> GeometryEngine:
    """
    Get the engine used by new geometries, creating the default one at first use.

    Returns:
        GeometryEngine: The active engine.
    """
    global _active_engine
    if _active_engine is None:
        engine_name = ENGINE_CONFIG['engine']
        if engine_name not in _ENGINE_CLASSES:
            raise ValueError(f"Unknown geometry engine: {engine_name}. Available: {list(_ENGINE_CLASSES)}")
        _active_engine = _ENGINE_CLASSES[engine_name]()
        logger.debug(f"Geometry engine initialized: {engine_name}")
    return _active_engine

# %% === Function to replace the active engine
def set_engine(engine: GeometryEngine | None) -> GeometryEngine | None:
    """
    Replace the engine used by new geometries.

    Args:
        engine (GeometryEngine | None): The new engine, None to go back to the default one at next use.

    Returns:
        GeometryEngine | None: The previous engine.
    """
    global _active_engine
    if engine is not None and not isinstance(engine, GeometryEngine):
        raise TypeError(f"Engine must be a GeometryEngine, got {type(engine).__name__}")
    previous = _active_engine
    _active_engine = engine
    return previous

@contextmanager
def use_engine(engine: GeometryEngine):
    """Use an engine for the geometries created inside the with block."""
    previous = set_engine(engine)
    try:
        yield engine
    finally:
        set_engine(previous)

__all__ = [
    'GeometryEngine',
    'ShapelyEngine',
    'ErrorContext',
    'ErrorLevel',
    'ErrorNumber',
    'ErrorRecord',
    'current_error_context',
    'WKB_25D_BIT',
    'GeometryType',
    'ByteOrder',
    'OGRErr',
    'COLLECTION_TYPES',
    'flatten_type',
    'has_z',
    'with_z',
    'geometry_type_to_name',
    'geometry_name',
    'merge_geometry_types',
    'GeometryHandle',
    'SpatialReferenceHandle',
    'TransformationHandle',
    'get_engine',
    'set_engine',
    'use_engine'
]
