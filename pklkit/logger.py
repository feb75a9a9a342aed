"""Loggers for messages emitted by the Pkl evaluator."""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from typing import TextIO


class Logger(ABC):
    """Receives log messages emitted during evaluation."""

    @abstractmethod
    def trace(self, message: str, frame_uri: str) -> None:
        """Log ``message`` at level TRACE."""

    @abstractmethod
    def warn(self, message: str, frame_uri: str) -> None:
        """Log ``message`` at level WARN."""


def format_log_message(level: str, message: str, frame_uri: str) -> str:
    """Return the default one-line rendering of a log message."""
    return f"pkl: {level}: {message} ({frame_uri})\n"


class StreamLogger(Logger):
    """Writes formatted messages to a text stream.

    With no stream given, writes to whatever ``sys.stderr`` is at the time.
    """

    def __init__(self, out: TextIO | None = None) -> None:
        self._out = out

    def _write(self, level: str, message: str, frame_uri: str) -> None:
        out = self._out if self._out is not None else sys.stderr
        out.write(format_log_message(level, message, frame_uri))

    def trace(self, message: str, frame_uri: str) -> None:
        self._write("TRACE", message, frame_uri)

    def warn(self, message: str, frame_uri: str) -> None:
        self._write("WARN", message, frame_uri)


class _NoopLogger(Logger):
    def trace(self, message: str, frame_uri: str) -> None:
        pass

    def warn(self, message: str, frame_uri: str) -> None:
        pass


def new_logger(out: TextIO) -> StreamLogger:
    """Build a logger that writes to ``out`` with the default formatting."""
    return StreamLogger(out)


STDERR_LOGGER: Logger = StreamLogger()
NOOP_LOGGER: Logger = _NoopLogger()