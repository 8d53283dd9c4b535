"""Logging framework for pcdistance.
Provides leveled, categorized logging that stays cheap on the hot path:
distance evaluations check :meth:`DistanceLogger.is_enabled` before
building a message, and only a bounded tail of entries is retained.
"""

from __future__ import annotations

import logging
import os
import sys
import threading
import time
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Any, TextIO


class LogLevel(IntEnum):
    """Log levels for pcdistance."""

    QUIET = 0
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3
    TRACE = 4

    @staticmethod
    def parse(value: str | int) -> LogLevel:
        """Accept a level name (any case) or number."""
        if isinstance(value, int):
            return LogLevel(value)
        try:
            return LogLevel[value.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown log level: {value!r}") from None


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"
    GRAY = "\033[90m"


def supports_color(stream: TextIO) -> bool:
    """Check if the stream supports ANSI colors."""
    if not hasattr(stream, "isatty") or not stream.isatty():
        return False
    if os.environ.get("NO_COLOR"):
        return False
    if sys.platform == "win32":
        return bool(os.environ.get("TERM") or "ANSICON" in os.environ)
    return True


_INDICATORS = {
    LogLevel.NORMAL: ("•", Colors.WHITE),
    LogLevel.VERBOSE: ("→", Colors.BLUE),
    LogLevel.DEBUG: ("⚙", Colors.MAGENTA),
    LogLevel.TRACE: ("⋯", Colors.GRAY),
}


@dataclass
class LogEntry:
    """A log entry with metadata."""

    level: LogLevel
    message: str
    category: str = "general"
    timestamp: float = field(default_factory=time.time)
    context: dict[str, Any] = field(default_factory=dict)

    def format(self, color: bool = True, show_time: bool = True) -> str:
        """Format the log entry for display."""
        parts = []
        if show_time:
            stamp = time.strftime("%H:%M:%S", time.localtime(self.timestamp))
            parts.append(f"{Colors.GRAY}{stamp}{Colors.RESET}" if color else stamp)
        char, col = _INDICATORS.get(self.level, ("", ""))
        if char:
            parts.append(f"{col}{char}{Colors.RESET}" if color else char)
        if self.category != "general":
            tag = f"[{self.category}]"
            parts.append(f"{Colors.CYAN}{tag}{Colors.RESET}" if color else tag)
        parts.append(self.message)
        if self.context:
            extra = " ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"{Colors.GRAY}{extra}{Colors.RESET}" if color else extra)
        return " ".join(parts)


class DistanceLogger:
    """Main logger for pcdistance."""

    def __init__(
        self,
        level: LogLevel = LogLevel.NORMAL,
        color: bool = True,
        stream: TextIO | None = None,
        file_path: Path | None = None,
        history: int = 1000,
    ):
        self.level = level
        self._stream = stream or sys.stderr
        self._color = color and supports_color(self._stream)
        self._file_handle: TextIO | None = None
        self._entries: deque[LogEntry] = deque(maxlen=history)
        self._counters: dict[str, int] = {}
        self._lock = threading.Lock()
        if file_path is not None:
            self.open_file(file_path)

    def set_level(self, level: LogLevel) -> None:
        self.level = level

    def is_enabled(self, level: LogLevel) -> bool:
        """Check if a message at this level would be shown."""
        return level <= self.level

    def _emit(self, entry: LogEntry) -> None:
        with self._lock:
            self._entries.append(entry)
            self._stream.write(entry.format(color=self._color) + "\n")
            self._stream.flush()
            if self._file_handle:
                self._file_handle.write(entry.format(color=False) + "\n")
                self._file_handle.flush()

    def log(
        self,
        level: LogLevel,
        message: str,
        category: str = "general",
        **context: Any,
    ) -> None:
        """Log a message at the specified level."""
        if not self.is_enabled(level):
            return
        self._emit(LogEntry(level=level, message=message, category=category, context=context))

    def info(self, message: str, **context: Any) -> None:
        self.log(LogLevel.NORMAL, message, **context)

    def verbose(self, message: str, **context: Any) -> None:
        self.log(LogLevel.VERBOSE, message, **context)

    def debug(self, message: str, **context: Any) -> None:
        self.log(LogLevel.DEBUG, message, **context)

    def trace(self, message: str, **context: Any) -> None:
        self.log(LogLevel.TRACE, message, **context)

    def warning(self, message: str) -> None:
        """Log a warning message (shown unless quiet)."""
        if self.level == LogLevel.QUIET:
            return
        prefix = f"{Colors.YELLOW}⚠{Colors.RESET}" if self._color else "⚠"
        with self._lock:
            self._stream.write(f"{prefix} {message}\n")
            self._stream.flush()

    def error(self, message: str) -> None:
        """Log an error message (always shown)."""
        prefix = f"{Colors.RED}✗{Colors.RESET}" if self._color else "✗"
        with self._lock:
            self._stream.write(f"{prefix} {message}\n")
            self._stream.flush()

    @contextmanager
    def timer(self, name: str, category: str = "timing"):
        """Context manager for timing operations."""
        start = time.perf_counter()
        try:
            yield
        finally:
            if self.is_enabled(LogLevel.VERBOSE):
                elapsed = time.perf_counter() - start
                self.verbose(f"{name}: {elapsed:.3f}s", category=category)

    def count(self, name: str, increment: int = 1) -> int:
        """Increment a counter and return new value."""
        with self._lock:
            self._counters[name] = self._counters.get(name, 0) + increment
            return self._counters[name]

    def get_count(self, name: str) -> int:
        return self._counters.get(name, 0)

    def get_entries(
        self,
        level: LogLevel | None = None,
        category: str | None = None,
    ) -> list[LogEntry]:
        """Get retained entries, optionally filtered."""
        entries = list(self._entries)
        if level is not None:
            entries = [e for e in entries if e.level == level]
        if category is not None:
            entries = [e for e in entries if e.category == category]
        return entries

    def open_file(self, path: Path) -> None:
        """Mirror log output into a file."""
        self.close()
        self._file_handle = open(path, "w", encoding="utf-8")

    def close(self) -> None:
        if self._file_handle:
            self._file_handle.close()
            self._file_handle = None


_logger: DistanceLogger | None = None


def get_logger() -> DistanceLogger:
    """Get the global logger instance (quiet until configured)."""
    global _logger
    if _logger is None:
        _logger = DistanceLogger(level=LogLevel.QUIET)
    return _logger


def set_logger(logger: DistanceLogger) -> None:
    global _logger
    _logger = logger


def configure_logging(
    level: LogLevel = LogLevel.NORMAL,
    color: bool = True,
    stream: TextIO | None = None,
    file_path: Path | None = None,
) -> DistanceLogger:
    """Configure and return the global logger."""
    global _logger
    if _logger is not None:
        _logger.close()
    _logger = DistanceLogger(level=level, color=color, stream=stream, file_path=file_path)
    return _logger


class PythonLoggingBridge(logging.Handler):
    """Forward records of the standard ``logging`` module to the pcdistance logger."""

    _LEVEL_MAP = {
        logging.DEBUG: LogLevel.DEBUG,
        logging.INFO: LogLevel.NORMAL,
    }

    def __init__(self, target: DistanceLogger):
        super().__init__()
        self.target = target

    def emit(self, record: logging.LogRecord) -> None:
        message = self.format(record)
        if record.levelno >= logging.ERROR:
            self.target.error(message)
        elif record.levelno >= logging.WARNING:
            self.target.warning(message)
        else:
            level = self._LEVEL_MAP.get(record.levelno, LogLevel.TRACE)
            self.target.log(level, message, category="python")


def setup_python_logging(level: int = logging.INFO) -> None:
    """Route the ``pcdistance`` standard-library logger through the pcdistance logger."""
    logger = logging.getLogger("pcdistance")
    logger.setLevel(level)
    logger.addHandler(PythonLoggingBridge(get_logger()))


__all__ = [
    "LogLevel",
    "LogEntry",
    "Colors",
    "DistanceLogger",
    "get_logger",
    "set_logger",
    "configure_logging",
    "setup_python_logging",
    "supports_color",
    "PythonLoggingBridge",
]
