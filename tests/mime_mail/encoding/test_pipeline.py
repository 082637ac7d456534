# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Tests for stage chaining and flush order."""

import io

import pytest

from mime_mail.encoding import BufferSink, ByteSink, Pipeline, Stage
from mime_mail.errors import EncoderStateError


class RecordingStage(Stage):
    def __init__(self, name, log):
        super().__init__()
        self.name = name
        self.log = log

    def write(self, data):
        self.log.append((self.name, "write", bytes(data)))
        self.emit(data)
        return len(data)

    def close(self):
        self.log.append((self.name, "close", b""))
        self.emit(f"<{self.name}>".encode())


def test_stages_are_closed_head_first():
    log = []
    sink = BufferSink()
    pipeline = Pipeline([RecordingStage("outer", log), RecordingStage("inner", log)], sink)

    pipeline.write(b"x")
    pipeline.close()

    closes = [name for name, action, _ in log if action == "close"]
    assert closes == ["outer", "inner"]
    # the head's remainder passes through the next stage before it flushes
    assert sink.getvalue() == b"x<outer><inner>"


def test_write_after_close_is_rejected():
    pipeline = Pipeline([RecordingStage("a", [])], BufferSink())
    pipeline.close()

    with pytest.raises(EncoderStateError):
        pipeline.write(b"late")


def test_double_close_is_rejected():
    pipeline = Pipeline([RecordingStage("a", [])], BufferSink())
    pipeline.close()

    with pytest.raises(EncoderStateError) as exc_info:
        pipeline.close()
    assert exc_info.value.code == "encoder_state"


def test_context_manager_closes_on_success_only():
    log = []
    with Pipeline([RecordingStage("a", log)], BufferSink()) as pipeline:
        pipeline.write(b"ok")
    assert pipeline.closed

    failing = Pipeline([RecordingStage("b", log)], BufferSink())
    with pytest.raises(RuntimeError):
        with failing:
            raise RuntimeError("boom")
    assert not failing.closed
    assert ("b", "close", b"") not in log


def test_stage_without_downstream_cannot_emit():
    stage = RecordingStage("lonely", [])
    with pytest.raises(EncoderStateError):
        stage.write(b"data")


def test_pipeline_needs_a_stage():
    with pytest.raises(ValueError):
        Pipeline([], BufferSink())


def test_byte_sink_counts_bytes():
    stream = io.BytesIO()
    sink = ByteSink(stream)
    sink.write(b"abc")
    sink.write(b"de")

    assert sink.bytes_written == 5
    assert stream.getvalue() == b"abcde"
