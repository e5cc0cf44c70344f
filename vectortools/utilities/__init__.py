from .exceptions import (
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
from .error_handling import call_engine, call_engine_checked, handle_ogr_err
from .logging_utils import setup_logger, log_and_error

__all__ = [
    'VectorToolsError',
    'InvalidHandle',
    'AllocationError',
    'UnsupportedFieldType',
    'InvalidCoordinateDimension',
    'EngineError',
    'TopologyError',
    'ParseError',
    'TransformError',
    'OperationFailure',
    'call_engine',
    'call_engine_checked',
    'handle_ogr_err',
    'setup_logger',
    'log_and_error'
]
