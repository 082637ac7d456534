# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Line-splitting framer for encoded part bodies."""

from __future__ import annotations

from ..config import FramingConfig
from .pipeline import Stage


class LineSplitter(Stage):
    """Re-emit buffered bytes as fixed length lines.

    Every line except the first is preceded by the delimiter, so the output
    never ends with a delimiter and an input whose length is an exact
    multiple of ``line_length`` produces no trailing empty line.

    Args:
        framing: Line length and delimiter. Defaults to 76 / CRLF.
    """

    def __init__(self, framing: FramingConfig | None = None):
        super().__init__()
        self.framing = framing or FramingConfig()
        self._buffer = bytearray()
        self._emitted = False

    def write(self, data: bytes) -> int:
        self._buffer += data
        length = self.framing.line_length
        if len(self._buffer) >= length:
            consumed = 0
            while len(self._buffer) - consumed >= length:
                self._emit_line(bytes(self._buffer[consumed:consumed + length]))
                consumed += length
            del self._buffer[:consumed]
        return len(data)

    def close(self) -> None:
        if self._buffer:
            line = bytes(self._buffer)
            self._buffer.clear()
            self._emit_line(line)

    def _emit_line(self, line: bytes) -> None:
        if self._emitted:
            self.emit(self.framing.delimiter)
        self.emit(line)
        self._emitted = True

    @property
    def pending(self) -> int:
        """Bytes buffered and not yet emitted."""
        return len(self._buffer)


__all__ = ["LineSplitter"]
