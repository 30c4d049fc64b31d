# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging helpers for CacheProbe."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import IO

DEFAULT_LOG_LEVEL = os.getenv("CACHEPROBE_LOG_LEVEL", "WARNING").upper()

logger = logging.getLogger("cacheprobe")

# Per-request chatter from the HTTP stack; kept out of the run transcript.
QUIET_LOGGERS: tuple[str, ...] = ("httpx", "httpcore")


def setup_logging(level: str | None = None) -> None:
    """
    Configure standard logging for CLI/library use.

    `level` applies to the `cacheprobe` logger only; the root logger and the HTTP
    stack stay at WARNING.
    """
    effective_level = getattr(logging, (level or DEFAULT_LOG_LEVEL).upper(), logging.WARNING)
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    logger.setLevel(effective_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, effective_level))


class TraceLog:
    """
    Run-scoped trace sink.

    Every line that reaches the user through `echo()` is also appended to the trace
    file, so the file holds a complete transcript of the run. Constructed without a
    path (or stream) it only logs. Use it as a context manager so the file is closed
    on every exit path.
    """

    def __init__(self, path: str | os.PathLike[str] | None = None, *, stream: IO[str] | None = None):
        self.path = Path(path) if path is not None else None
        self._stream: IO[str] | None = stream
        self._owns_stream = False

    @property
    def enabled(self) -> bool:
        return self._stream is not None

    def open(self) -> TraceLog:
        if self._stream is None and self.path is not None:
            self._stream = self.path.open("w", encoding="utf-8")
            self._owns_stream = True
        return self

    def write(self, message: str) -> None:
        """Append a line to the trace file only."""
        if self._stream is None:
            return
        self._stream.write(message + "\n")
        self._stream.flush()

    def echo(self, message: str, level: int = logging.INFO, *, log: logging.Logger | None = None) -> None:
        """Log a line and mirror it into the trace file."""
        (log or logger).log(level, message)
        self.write(message)

    def close(self) -> None:
        if self._stream is not None and self._owns_stream:
            self._stream.close()
        self._stream = None
        self._owns_stream = False

    def __enter__(self) -> TraceLog:
        return self.open()

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()


__all__ = ["TraceLog", "setup_logging"]
