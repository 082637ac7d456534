# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Tests for the line-splitting framer."""

import pytest

from mime_mail.config import FramingConfig
from mime_mail.encoding import BufferSink, LineSplitter, Pipeline


def _frame(chunks, line_length=4, delimiter=b"\r\n"):
    sink = BufferSink()
    pipeline = Pipeline([LineSplitter(FramingConfig(line_length=line_length, delimiter=delimiter))], sink)
    for chunk in chunks:
        pipeline.write(chunk)
    pipeline.close()
    return sink.getvalue()


def test_short_input_is_a_single_line():
    assert _frame([b"abc"]) == b"abc"


def test_exact_multiple_has_no_trailing_delimiter():
    assert _frame([b"abcdefgh"]) == b"abcd\r\nefgh"


def test_remainder_is_flushed_on_close():
    assert _frame([b"abcdefghij"]) == b"abcd\r\nefgh\r\nij"


def test_lines_span_write_boundaries():
    assert _frame([b"ab", b"cdefg", b"h", b"ij"]) == b"abcd\r\nefgh\r\nij"


def test_first_chunk_emitted_on_close_has_no_delimiter():
    assert _frame([b"a", b"b"]) == b"ab"


def test_custom_delimiter_and_length():
    assert _frame([b"abcdef"], line_length=2, delimiter=b"|") == b"ab|cd|ef"


def test_empty_input_emits_nothing():
    assert _frame([]) == b""
    assert _frame([b""]) == b""


def test_pending_counts_buffered_bytes():
    splitter = LineSplitter(FramingConfig(line_length=4))
    sink = BufferSink()
    splitter.link(sink)

    splitter.write(b"abcdef")

    assert splitter.pending == 2
    assert sink.getvalue() == b"abcd"


def test_default_framing_is_76_crlf():
    splitter = LineSplitter()
    assert splitter.framing.line_length == 76
    assert splitter.framing.delimiter == b"\r\n"


@pytest.mark.parametrize("kwargs", [{"line_length": 0}, {"delimiter": b""}])
def test_invalid_framing_config_is_rejected(kwargs):
    with pytest.raises(ValueError):
        FramingConfig(**kwargs)


def test_independent_configurations_coexist():
    assert _frame([b"abcdef"], line_length=3) == b"abc\r\ndef"
    assert _frame([b"abcdef"], line_length=2, delimiter=b"\n") == b"ab\ncd\nef"
