"""
Error channel of the geometry engine.

The engine does not raise: like the native library it stands for, it reports
problems through a side channel and signals them with null handles or OGRErr
codes. The side channel is confined to the calling thread, so the record left
by one call can only be read back by the thread that made it.
"""

# %% === Import necessary modules
import logging
import threading
from dataclasses import dataclass
from enum import IntEnum

logger = logging.getLogger(__name__)

# %% === Error levels and numbers
class ErrorLevel(IntEnum):
    NONE = 0
    DEBUG = 1
    WARNING = 2
    FAILURE = 3
    FATAL = 4


class ErrorNumber(IntEnum):
    NONE = 0
    APP_DEFINED = 1
    OUT_OF_MEMORY = 2
    FILE_IO = 3
    OPEN_FAILED = 4
    ILLEGAL_ARG = 5
    NOT_SUPPORTED = 6
    ASSERTION_FAILED = 7
    NO_WRITE_ACCESS = 8
    USER_INTERRUPT = 9
    OBJECT_NULL = 10


@dataclass(frozen=True)
class ErrorRecord:
    level: ErrorLevel
    number: ErrorNumber
    message: str

    @property
    def is_failure(self) -> bool:
        return self.level >= ErrorLevel.FAILURE

# %% === Thread-confined error context
class ErrorContext(threading.local):
    """
    Per-thread list of the error records reported by the engine.

    Callers clear the context before an engine call and take the failure
    right after it, before any other engine call can overwrite it.
    """

    def __init__(self):
        self._records = []

    def clear(self) -> None:
        self._records = []

    def report(
            self,
            level: ErrorLevel,
            number: ErrorNumber,
            message: str
        ) -> ErrorRecord:
        """
        Record an error reported by the engine.

        Args:
            level (ErrorLevel): Severity of the error.
            number (ErrorNumber): Error class.
            message (str): Message of the engine.

        Returns:
            ErrorRecord: The stored record.
        """
        record = ErrorRecord(ErrorLevel(level), ErrorNumber(number), str(message))
        self._records.append(record)
        logger.debug(f"Engine reported {record.level.name} ({record.number.name}): {record.message}")
        return record

    @property
    def records(self) -> list[ErrorRecord]:
        return list(self._records)

    @property
    def last_record(self) -> ErrorRecord | None:
        if not self._records:
            return None
        return self._records[-1]

    def take_failure(self) -> ErrorRecord | None:
        """
        Return the last failure recorded and clear the context.

        Returns:
            ErrorRecord | None: The last record with level FAILURE or FATAL, None if there is none.
        """
        failures = [r for r in self._records if r.is_failure]
        self.clear()
        if not failures:
            return None
        return failures[-1]


_ERROR_CONTEXT = ErrorContext()

def current_error_context() -> ErrorContext:
    """Error context of the calling thread."""
    return _ERROR_CONTEXT
