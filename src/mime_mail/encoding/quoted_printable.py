# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Streaming quoted-printable encoder for text bodies."""

from __future__ import annotations

import binascii

from ..config import FramingConfig
from .pipeline import Pipeline, Stage, Writable


class QuotedPrintableEncoder(Stage):
    """Encode text line by line as quoted-printable (RFC 2045 6.7).

    Input is held back until a line break arrives; each complete line is
    encoded on its own, with soft line breaks keeping encoded lines within
    76 characters. Hard line breaks (``\\n`` or ``\\r\\n``) become the
    configured delimiter. The last, unterminated line is flushed on close.
    """

    def __init__(self, framing: FramingConfig | None = None):
        super().__init__()
        self.framing = framing or FramingConfig()
        self._buffer = bytearray()

    def write(self, data: bytes) -> int:
        self._buffer += data
        end = self._buffer.rfind(b"\n")
        if end >= 0:
            complete = bytes(self._buffer[:end + 1])
            del self._buffer[:end + 1]
            for line in complete.split(b"\n")[:-1]:
                self.emit(self._encode_line(line) + self.framing.delimiter)
        return len(data)

    def close(self) -> None:
        if self._buffer:
            line = bytes(self._buffer)
            self._buffer.clear()
            self.emit(self._encode_line(line))

    def _encode_line(self, line: bytes) -> bytes:
        if line.endswith(b"\r"):
            line = line[:-1]
        encoded = binascii.b2a_qp(line, quotetabs=False, istext=True, header=False)
        return encoded.replace(b"\n", self.framing.delimiter)


def quoted_printable_pipeline(sink: Writable, framing: FramingConfig | None = None) -> Pipeline:
    return Pipeline([QuotedPrintableEncoder(framing)], sink)


__all__ = ["QuotedPrintableEncoder", "quoted_printable_pipeline"]
