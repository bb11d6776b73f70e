"""
gltfcore.log - Logging module with proper Python exception handling.

Usage:
    from gltfcore import log

    log.info("Hello")
    log.warn("Something wrong")

    try:
        do_something()
    except Exception as e:
        log.error(e, "Failed to do something")  # includes traceback
"""

import enum
import logging
import traceback

_logger = logging.getLogger("gltfcore")
_callback_handler = None


class Level(enum.IntEnum):
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARN = logging.WARNING
    ERROR = logging.ERROR


def debug(msg_or_exc, context: str = ""):
    """Log debug message or exception with context."""
    if isinstance(msg_or_exc, BaseException):
        _log_exception(_logger.debug, msg_or_exc, context)
    else:
        _logger.debug(str(msg_or_exc))


def info(msg_or_exc, context: str = ""):
    """Log info message or exception with context."""
    if isinstance(msg_or_exc, BaseException):
        _log_exception(_logger.info, msg_or_exc, context)
    else:
        _logger.info(str(msg_or_exc))


def warn(msg_or_exc, context: str = ""):
    """Log warning message or exception with context."""
    if isinstance(msg_or_exc, BaseException):
        _log_exception(_logger.warning, msg_or_exc, context)
    else:
        _logger.warning(str(msg_or_exc))


def warning(msg_or_exc, context: str = ""):
    """Alias for warn()."""
    warn(msg_or_exc, context)


def error(msg_or_exc, context: str = ""):
    """Log error message or exception with context."""
    if isinstance(msg_or_exc, BaseException):
        _log_exception(_logger.error, msg_or_exc, context)
    else:
        _logger.error(str(msg_or_exc))


def exception(msg: str = ""):
    """Log error with current exception traceback."""
    _logger.exception(msg)


def _log_exception(log_func, exc: BaseException, context: str):
    """Format and log exception with traceback."""
    exc_type = type(exc).__name__
    exc_msg = str(exc)

    # Get traceback if available
    tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

    if context:
        full_msg = f"{context}: {exc_type}: {exc_msg}\n{tb}"
    else:
        full_msg = f"{exc_type}: {exc_msg}\n{tb}"

    log_func(full_msg)


def set_level(level):
    """Set minimal level of messages passed to handlers."""
    _logger.setLevel(int(level))


class _CallbackHandler(logging.Handler):
    def __init__(self, callback):
        super().__init__()
        self.callback = callback

    def emit(self, record: logging.LogRecord):
        if record.levelno >= logging.ERROR:
            level = Level.ERROR
        elif record.levelno >= logging.WARNING:
            level = Level.WARN
        elif record.levelno >= logging.INFO:
            level = Level.INFO
        else:
            level = Level.DEBUG
        self.callback(level, record.getMessage())


def set_callback(callback):
    """
    Forward every message as callback(level, message).

    Passing None removes the previously installed callback.
    """
    global _callback_handler
    if _callback_handler is not None:
        _logger.removeHandler(_callback_handler)
        _callback_handler = None
    if callback is not None:
        _callback_handler = _CallbackHandler(callback)
        _logger.addHandler(_callback_handler)
