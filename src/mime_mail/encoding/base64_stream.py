# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Streaming base64 encoder.

The encoder turns every complete 3-byte group into output as soon as it is
written and keeps at most two bytes back, so encoding an attachment never
needs the whole payload in memory. The output is identical whatever the
sizes of the individual writes.

Example:
    Encoding a stream into 76 character lines::

        sink = BufferSink()
        pipeline = base64_pipeline(sink)
        for chunk in iter(lambda: source.read(8192), b""):
            pipeline.write(chunk)
        pipeline.close()
"""

from __future__ import annotations

import base64

from ..config import FramingConfig
from .framer import LineSplitter
from .pipeline import Pipeline, Stage, Writable


class Base64Encoder(Stage):
    """Incremental base64 encoder using the standard padded alphabet."""

    def __init__(self) -> None:
        super().__init__()
        self._remainder = b""

    def write(self, data: bytes) -> int:
        pending = self._remainder + bytes(data)
        whole = len(pending) - len(pending) % 3
        self._remainder = pending[whole:]
        if whole:
            self.emit(base64.b64encode(pending[:whole]))
        return len(data)

    def close(self) -> None:
        """Encode the held back bytes, with padding."""
        if self._remainder:
            remainder, self._remainder = self._remainder, b""
            self.emit(base64.b64encode(remainder))


def base64_pipeline(sink: Writable, framing: FramingConfig | None = None) -> Pipeline:
    """Build the ``Base64Encoder -> LineSplitter -> sink`` chain."""
    return Pipeline([Base64Encoder(), LineSplitter(framing)], sink)


__all__ = ["Base64Encoder", "base64_pipeline"]
