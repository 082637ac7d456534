# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Tests for RFC 2047 encoded-word folding."""

import base64
import re
from email.header import decode_header

import pytest

from mime_mail.errors import HeaderEncodingError
from mime_mail.headers import FoldedValue
from mime_mail.words import encode_header_word, needs_encoding, split_encoded_words

WORD = re.compile(r"^=\?utf-8\?([BQ])\?([^?]*)\?=$")


def _decode_b_words(words):
    data = b""
    for word in words:
        match = WORD.match(word)
        assert match and match.group(1) == "B"
        fragment = base64.b64decode(match.group(2))
        fragment.decode("utf-8")  # every fragment is valid on its own
        data += fragment
    return data.decode("utf-8")


def test_plain_ascii_is_returned_unchanged():
    assert encode_header_word("My Subject") == "My Subject"
    assert encode_header_word('"Hi World"') == '"Hi World"'


def test_short_non_ascii_is_one_word():
    assert encode_header_word("Grüße") == "=?utf-8?B?R3LDvMOfZQ==?="


@pytest.mark.parametrize("text", ["café", "tab\x01control", "looks =?like?= a word", "line\nbreak"])
def test_needs_encoding(text):
    assert needs_encoding(text)


def test_ascii_with_tab_does_not_need_encoding():
    assert not needs_encoding("plain\ttext (with) punctuation!")


def test_long_subject_is_folded_into_bounded_words():
    subject = "Ünïcödé Betreff mit vielen Wörtern – " * 6

    folded = encode_header_word(subject)
    words = folded.split("\r\n ")

    assert isinstance(folded, FoldedValue)
    assert len(words) > 1
    assert all(len(word) <= 75 for word in words)
    assert _decode_b_words(words) == subject


def test_folded_subject_decodes_with_stdlib():
    subject = "日本語の件名はとても長いのでいくつかのエンコードされた単語に分割されます" * 2
    folded = encode_header_word(subject)

    decoded = "".join(
        part.decode(charset) if isinstance(part, bytes) else part
        for part, charset in decode_header(folded)
    )
    assert decoded == subject


def test_multibyte_characters_are_never_split():
    subject = "🙂" * 40
    words = split_encoded_words(subject, max_word_length=30)

    assert all(len(word) <= 30 for word in words)
    assert _decode_b_words(words) == subject


def test_q_encoding_words_are_bounded_and_decodable():
    subject = "Prüfung der Übertragung = mit Fragezeichen? und_Unterstrich " * 3
    words = split_encoded_words(subject, encoding="Q")

    assert all(len(word) <= 75 for word in words)
    assert all(WORD.match(word).group(1) == "Q" for word in words)
    assert " " not in "".join(words)
    decoded = b"".join(decode_header(word)[0][0] for word in words)
    assert decoded.decode("utf-8") == subject


def test_custom_delimiter_is_used_for_folding():
    folded = encode_header_word("é" * 60, delimiter="\n")
    assert "\n " in folded
    assert "\r" not in folded


def test_too_small_word_length_is_an_error():
    with pytest.raises(HeaderEncodingError):
        split_encoded_words("é", max_word_length=12)


def test_unknown_encoding_is_an_error():
    with pytest.raises(HeaderEncodingError):
        split_encoded_words("é", encoding="X")


def test_first_word_leaves_room_for_the_header_name():
    subject = "Ünïcödé Betreff mit vielen Wörtern " * 4
    words = split_encoded_words(subject, first_line_offset=len("Subject: "))

    assert len("Subject: " + words[0]) <= 76
    assert all(len(word) <= 75 for word in words[1:])
    assert _decode_b_words(words) == subject


def test_first_word_gets_full_limit_when_the_name_is_too_long():
    words = split_encoded_words("é", first_line_offset=70)

    assert len(words) == 1
    assert _decode_b_words(words) == "é"
