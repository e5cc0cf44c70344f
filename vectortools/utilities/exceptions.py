"""
Exception hierarchy for vectortools.

All the errors raised by the wrappers inherit from VectorToolsError, so that a
caller can catch everything coming from this package with a single clause.
Errors reported by the geometry engine are EngineError subclasses and keep the
original engine message in the engine_message attribute.
"""


class VectorToolsError(Exception):
    """
    Base exception for all vectortools errors.
    """
    pass


class InvalidHandle(VectorToolsError):
    """
    A wrapper was built around a null or released engine handle.
    """
    pass


class AllocationError(VectorToolsError):
    """
    The engine could not allocate the requested geometry kind.
    """
    pass


class UnsupportedFieldType(VectorToolsError):
    """
    A feature field has a type that is not mapped to a Python value.
    """
    pass


class InvalidCoordinateDimension(VectorToolsError, ValueError):
    """
    A coordinate dimension other than 2 or 3 was requested.
    """
    pass


class EngineError(VectorToolsError):
    """
    Failure reported by the geometry engine.

    Raised when:
    - The engine records a failure in the error context during a call
    - An engine call returns a failing OGRErr code

    Attributes:
        engine_message (str): The message reported by the engine, verbatim.
        error_number (int | None): The engine error number, if any.
        ogr_err (int | None): The return code of the engine call, if any.
    """

    def __init__(self, message, engine_message=None, error_number=None, ogr_err=None):
        super().__init__(message)
        self.engine_message = message if engine_message is None else engine_message
        self.error_number = error_number
        self.ogr_err = ogr_err


class TopologyError(EngineError):
    """
    The engine rejected a geometry because of its topology.

    Raised when:
    - The engine reports an IllegalArgumentException (ex: ring with too few points)
    - The engine reports a TopologyException (ex: self-intersecting input)
    """
    pass


class ParseError(EngineError):
    """
    A serialized form (WKT, WKB, GML, GeoJSON) could not be imported.
    """
    pass


class TransformError(EngineError):
    """
    A coordinate transformation was incompatible or rejected by the engine.
    """
    pass


class OperationFailure(EngineError):
    """
    An engine operation (export, container update, ...) returned a failure code.
    """
    pass
