# %% === Import necessary modules
import logging

from config.default_params import TOPOLOGY_ERROR_MARKERS
from ..engine.error_context import ErrorRecord, current_error_context
from ..engine.geometry_types import OGRErr
from .exceptions import EngineError, TopologyError, OperationFailure

logger = logging.getLogger(__name__)

# %% === Function to build the exception of an engine failure
def _engine_exception(
        operation: str,
        engine_message: str,
        error_type: type,
        error_number: int = None,
        ogr_err: int = None
    ) -> EngineError:
    exception_type = error_type
    if error_type is EngineError and any(marker in engine_message for marker in TOPOLOGY_ERROR_MARKERS):
        exception_type = TopologyError
    logger.debug(f"Engine failure in {operation}, raised as {exception_type.__name__}: {engine_message}")
    return exception_type(
        f"{operation}: {engine_message}",
        engine_message=engine_message,
        error_number=error_number,
        ogr_err=ogr_err
    )

# %% === Function to call the engine and translate its failures
def call_engine(
        operation: str,
        function,
        *args,
        error_type: type = EngineError,
        **kwargs
    ):
    """
    Call an engine method and raise the failure it reports, if any.

    The error context of the thread is cleared before the call and read right
    after it, so the failure raised is always the one of this call.

    Args:
        operation (str): Name of the operation, used as prefix of the error message.
        function (callable): The engine method to call.
        *args: Positional arguments of the engine method.
        error_type (type, optional): EngineError subclass to raise. Defaults to EngineError
            (upgraded to TopologyError when the engine message carries a topology marker).
        **kwargs: Keyword arguments of the engine method.

    Returns:
        Any: What the engine method returns.

    Raises:
        EngineError: (or the given subclass) If the engine reported a failure during the call.
    """
    errors = current_error_context()
    errors.clear()
    result = function(*args, **kwargs)
    record: ErrorRecord | None = errors.take_failure()
    if record is not None:
        ogr_err = result if isinstance(result, OGRErr) else None
        raise _engine_exception(operation, record.message, error_type, int(record.number), ogr_err)
    return result

# %% === Function to translate a failing return code
def handle_ogr_err(
        operation: str,
        ogr_err: int,
        error_type: type = OperationFailure
    ) -> None:
    """
    Raise if an engine return code is not OGRErr.NONE.

    Args:
        operation (str): Name of the operation, used as prefix of the error message.
        ogr_err (int): The return code of the engine call.
        error_type (type, optional): EngineError subclass to raise. Defaults to OperationFailure.

    Raises:
        EngineError: (or the given subclass) If the return code is a failure.
    """
    if ogr_err == OGRErr.NONE:
        return
    record = current_error_context().take_failure()
    try:
        code_name = OGRErr(ogr_err).name
    except ValueError:
        code_name = str(ogr_err)
    engine_message = record.message if record is not None else f"OGR Error: {code_name}"
    error_number = int(record.number) if record is not None else None
    raise _engine_exception(operation, engine_message, error_type, error_number, int(ogr_err))

def call_engine_checked(
        operation: str,
        function,
        *args,
        error_type: type = OperationFailure,
        **kwargs
    ):
    """Call an engine method returning an OGRErr code (alone or first of a tuple) and raise on failure."""
    result = call_engine(operation, function, *args, error_type=error_type, **kwargs)
    ogr_err = result[0] if isinstance(result, tuple) else result
    handle_ogr_err(operation, ogr_err, error_type)
    return result
