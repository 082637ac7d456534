# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Transform stages, byte sinks and explicit stage chaining.

A part payload travels through a chain of stages before reaching the
output sink::

    raw bytes -> Base64Encoder -> LineSplitter -> ByteSink -> output

Each stage accepts chunks with ``write()`` and flushes its own remainder on
``close()``. Closing a stage never closes the next one: the
:class:`Pipeline` owns the flush order and closes stages head first, so
every remainder reaches its downstream stage before that stage flushes.
"""

from __future__ import annotations

import io
from typing import BinaryIO, Protocol

from ..errors import EncoderStateError


class Writable(Protocol):
    """Anything accepting byte chunks."""

    def write(self, data: bytes) -> int | None: ...


class Stage:
    """Base class for a transform stage forwarding output downstream."""

    def __init__(self) -> None:
        self._downstream: Writable | None = None

    def link(self, downstream: Writable) -> Writable:
        """Forward this stage's output to ``downstream`` and return it."""
        self._downstream = downstream
        return downstream

    def emit(self, data: bytes) -> None:
        if self._downstream is None:
            raise EncoderStateError(f"{type(self).__name__} has no downstream target")
        if data:
            self._downstream.write(data)

    def write(self, data: bytes) -> int:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError


class ByteSink:
    """Adapter over a binary writable that counts the bytes written."""

    def __init__(self, stream: BinaryIO):
        self._stream = stream
        self.bytes_written = 0

    def write(self, data: bytes) -> int:
        self._stream.write(data)
        self.bytes_written += len(data)
        return len(data)


class BufferSink(ByteSink):
    """In-memory sink."""

    def __init__(self) -> None:
        self._buffer = io.BytesIO()
        super().__init__(self._buffer)

    def getvalue(self) -> bytes:
        return self._buffer.getvalue()


class Pipeline:
    """Explicit chain of stages ending in a sink.

    Example:
        pipeline = Pipeline([Base64Encoder(), LineSplitter(framing)], sink)
        pipeline.write(b"payload")
        pipeline.close()

    Used as a context manager the pipeline is closed only when the block
    exits cleanly: after a failed write the stages are left as they are and
    the output must be discarded.
    """

    def __init__(self, stages: list[Stage], sink: Writable):
        if not stages:
            raise ValueError("a pipeline needs at least one stage")
        self._stages = list(stages)
        self._sink = sink
        for stage, downstream in zip(self._stages, [*self._stages[1:], sink]):
            stage.link(downstream)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def stages(self) -> tuple[Stage, ...]:
        return tuple(self._stages)

    def write(self, data: bytes) -> int:
        if self._closed:
            raise EncoderStateError("write on a closed pipeline")
        return self._stages[0].write(data)

    def close(self) -> None:
        """Flush every stage, head first."""
        if self._closed:
            raise EncoderStateError("pipeline already closed")
        self._closed = True
        for stage in self._stages:
            stage.close()

    def __enter__(self) -> Pipeline:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()


__all__ = ["BufferSink", "ByteSink", "Pipeline", "Stage", "Writable"]
