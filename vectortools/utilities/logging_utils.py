# %% === Import necessary modules
import logging

from config.default_params import LOG_CONFIG

# %% === Logger
# This will log messages to the console, with the format defined in the config package
def setup_logger(
        module_name: str = None
    ) -> logging.Logger:
    """
    Set up a logger with the package logging configuration.

    Args:
        module_name (str, optional): Name of the module (use __name__). If None, the logger of this module is used.

    Returns:
        logging.Logger: The logger object.
    """
    logging.basicConfig(
        level=LOG_CONFIG['level'],
        format=LOG_CONFIG['format'],
        datefmt=LOG_CONFIG['date_format']
    )
    if module_name:
        logger = logging.getLogger(module_name)
    else:
        logger = logging.getLogger(__name__)
    return logger

# This will log errors and raise exceptions, using the given logger or creating a new one
def log_and_error(
        error_msg: str,
        exception_type: type = ValueError,
        logger: logging.Logger = None
    ) -> None:
    """
    Log an error message and raise the specified exception.

    Args:
        error_msg (str): Error message to log.
        exception_type (type, optional): Exception type to raise. Defaults to ValueError.
        logger (logging.Logger, optional): Logger object. If None, a new logger is created.

    Raises:
        exception_type: Always, with error_msg as message.
    """
    if logger is None:
        logger = setup_logger()

    logger.error(error_msg)

    raise exception_type(error_msg)
