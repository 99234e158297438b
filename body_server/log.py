"""Pretty console logging for the body server."""
from __future__ import annotations

import logging
import sys

LOGGER_NAME = "body_server"
_FRAMEWORK_LOGGERS = ("uvicorn",)

_COLORS = {
    logging.DEBUG: ("\033[36m", "DEBUG"),
    logging.INFO: ("\033[32m", "INFO"),
    logging.WARNING: ("\033[33m", "WARN"),
    logging.ERROR: ("\033[31m", "ERROR"),
    logging.CRITICAL: ("\033[31m", "FATAL"),
}


class PrettyFormatter(logging.Formatter):
    """Prefix each record with a coloured ``[LEVEL]`` tag."""

    def __init__(self, color: bool = True) -> None:
        super().__init__("%(message)s")
        self._color = color

    def format(self, record: logging.LogRecord) -> str:
        color, tag = _COLORS.get(record.levelno, ("", record.levelname))
        msg = super().format(record)
        if self._color:
            return f"{color}[{tag}]\033[0m {msg}"
        return f"[{tag}] {msg}"


def _reset_handlers(logger: logging.Logger, handler: logging.Handler) -> None:
    for old in list(logger.handlers):
        logger.removeHandler(old)
    logger.addHandler(handler)
    logger.propagate = False


def setup_logging(debug: bool = False, stream=None) -> logging.Logger:
    """Configure and return the process logger.

    The returned logger is handed to each component explicitly. uvicorn's
    own loggers share the handler so all output has one format. Calling this
    again replaces handlers instead of stacking them.
    """
    stream = stream or sys.stderr
    handler = logging.StreamHandler(stream)
    isatty = getattr(stream, "isatty", None)
    handler.setFormatter(PrettyFormatter(color=bool(isatty and isatty())))

    for name in _FRAMEWORK_LOGGERS:
        _reset_handlers(logging.getLogger(name), handler)

    logger = logging.getLogger(LOGGER_NAME)
    _reset_handlers(logger, handler)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    return logger
