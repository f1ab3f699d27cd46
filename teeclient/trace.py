"""Levelled trace messages written through the logging module."""

from __future__ import annotations

import enum
import logging


class TraceLevel(enum.IntEnum):
    """Trace levels, from the most to the least important."""

    ERROR = 1
    INFO = 2
    DEBUG = 3
    FLOW = 4


DEFAULT_LEVEL = TraceLevel.INFO

_CONFIG_LEVELS = {
    0: TraceLevel.ERROR,
    1: TraceLevel.ERROR,
    2: TraceLevel.INFO,
    3: TraceLevel.DEBUG,
    4: TraceLevel.FLOW,
}

FLOW_LOGGING_LEVEL = 5
"""Logging level used for FLOW messages, below logging.DEBUG."""

_LOGGING_LEVELS = {
    TraceLevel.ERROR: logging.ERROR,
    TraceLevel.INFO: logging.INFO,
    TraceLevel.DEBUG: logging.DEBUG,
    TraceLevel.FLOW: FLOW_LOGGING_LEVEL,
}


def level_from_config(config_level) -> TraceLevel:
    """Map a configured log level (0 to 4, or None for the default) to a trace level."""
    if config_level is None:
        return DEFAULT_LEVEL
    try:
        return _CONFIG_LEVELS[int(config_level)]
    except (KeyError, TypeError, ValueError):
        raise ValueError(f"log level must be 0 to 4, got {config_level!r}") from None


class Tracer:
    """Writes messages at or below its level to the logger named by its prefix."""

    def __init__(self, prefix, level=DEFAULT_LEVEL):
        if not prefix:
            raise ValueError("a tracer needs a prefix")
        self.prefix = str(prefix)
        self.level = TraceLevel(level)
        self.logger = logging.getLogger(self.prefix)

    def enabled(self, level) -> bool:
        """Whether messages of ``level`` are written."""
        return TraceLevel(level) <= self.level

    def _emit(self, level: TraceLevel, fmt: str, args) -> bool:
        if not self.enabled(level):
            return False
        self.logger.log(_LOGGING_LEVELS[level], fmt, *args, stacklevel=3)
        return True

    def emsg(self, fmt, *args) -> bool:
        """Write an error message; returns whether it was written."""
        return self._emit(TraceLevel.ERROR, fmt, args)

    def imsg(self, fmt, *args) -> bool:
        """Write an informational message; returns whether it was written."""
        return self._emit(TraceLevel.INFO, fmt, args)

    def dmsg(self, fmt, *args) -> bool:
        """Write a debug message; returns whether it was written."""
        return self._emit(TraceLevel.DEBUG, fmt, args)

    def fmsg(self, fmt, *args) -> bool:
        """Write an execution-flow message; returns whether it was written."""
        return self._emit(TraceLevel.FLOW, fmt, args)