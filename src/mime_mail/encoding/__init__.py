# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Payload encoding subsystem.

This package provides the stages a part payload is streamed through:

- Base64Encoder: incremental base64 with the standard padded alphabet
- LineSplitter: fixed length line framing with a configurable delimiter
- QuotedPrintableEncoder: line based quoted-printable for text bodies
- Pipeline: explicit stage chaining with head-first flush order

Usage:
    from mime_mail.encoding import BufferSink, base64_pipeline

    sink = BufferSink()
    pipeline = base64_pipeline(sink)
    pipeline.write(b"Hello World!")
    pipeline.close()
    sink.getvalue()  # b"SGVsbG8gV29ybGQh"
"""

from .base64_stream import Base64Encoder, base64_pipeline
from .framer import LineSplitter
from .pipeline import BufferSink, ByteSink, Pipeline, Stage
from .quoted_printable import QuotedPrintableEncoder, quoted_printable_pipeline

__all__ = [
    "Base64Encoder",
    "BufferSink",
    "ByteSink",
    "LineSplitter",
    "Pipeline",
    "QuotedPrintableEncoder",
    "Stage",
    "base64_pipeline",
    "quoted_printable_pipeline",
]
