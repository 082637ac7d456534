# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""RFC 2047 encoded-words for free-text header values.

Text that cannot travel as plain header text (non-ASCII, control
characters, or a literal ``=?`` that readers would take for an
encoded-word) is turned into one or more ``=?charset?X?text?=`` tokens.
No token exceeds ``max_word_length`` characters, markers included. Longer
text is split between characters, never inside the byte sequence of a
single character, and the tokens are folded onto continuation lines
(``delimiter + " "``). Readers drop the whitespace between adjacent
encoded-words, so decoding the fragments gives back the original text.
"""

from __future__ import annotations

import base64
import string

from .errors import HeaderEncodingError
from .headers import FoldedValue

# Characters allowed unescaped in a Q encoded-word anywhere (RFC 2047 5(3)).
_Q_LITERAL = frozenset((string.ascii_letters + string.digits + "!*+-/").encode("ascii"))


def needs_encoding(text: str) -> bool:
    """Return True when ``text`` must be carried as encoded-words."""
    if "=?" in text:
        return True
    return any(ord(ch) > 126 or (ord(ch) < 32 and ch != "\t") for ch in text)


def _b_length(size: int) -> int:
    return 4 * ((size + 2) // 3)


def _q_cost(data: bytes) -> int:
    return sum(1 if (byte in _Q_LITERAL or byte == 0x20) else 3 for byte in data)


def _q_encode(data: bytes) -> str:
    out = []
    for byte in data:
        if byte == 0x20:
            out.append("_")
        elif byte in _Q_LITERAL:
            out.append(chr(byte))
        else:
            out.append(f"={byte:02X}")
    return "".join(out)


def split_encoded_words(
    text: str,
    *,
    charset: str = "utf-8",
    encoding: str = "B",
    max_word_length: int = 75,
    first_line_offset: int = 0,
) -> list[str]:
    """Encode ``text`` as a list of encoded-words, each within the limit.

    ``first_line_offset`` is the number of characters already on the line
    of the first word (``"Subject: "``). The first word is shortened so that
    line stays within ``max_word_length + 1`` characters, the length of a
    continuation line. When not even one character fits there, the first
    word gets the full limit.

    Raises:
        HeaderEncodingError: ``encoding`` is unknown or a single character
            does not fit into ``max_word_length``.
    """
    encoding = encoding.upper()
    if encoding not in ("B", "Q"):
        raise HeaderEncodingError(f"Unknown encoded-word encoding {encoding!r}")
    prefix = f"=?{charset}?{encoding}?"
    suffix = "?="
    budget = max_word_length - len(prefix) - len(suffix)
    first_budget = min(budget, max_word_length + 1 - first_line_offset - len(prefix) - len(suffix))

    def encoded_size(data: bytes) -> int:
        return _b_length(len(data)) if encoding == "B" else _q_cost(data)

    def render(data: bytes) -> str:
        if encoding == "B":
            payload = base64.b64encode(data).decode("ascii")
        else:
            payload = _q_encode(data)
        return f"{prefix}{payload}{suffix}"

    words: list[str] = []
    current = b""
    limit = first_budget
    for ch in text:
        try:
            char_bytes = ch.encode(charset)
        except UnicodeEncodeError as exc:
            raise HeaderEncodingError(f"Cannot encode {ch!r} as {charset}") from exc
        if encoded_size(char_bytes) > budget:
            raise HeaderEncodingError(
                f"max_word_length {max_word_length} cannot hold a single {charset} character"
            )
        if not words and not current and encoded_size(char_bytes) > limit:
            limit = budget
        if current and encoded_size(current + char_bytes) > limit:
            words.append(render(current))
            current = b""
            limit = budget
        current += char_bytes
    if current:
        words.append(render(current))
    return words


def encode_header_word(
    text: str,
    *,
    charset: str = "utf-8",
    encoding: str = "B",
    max_word_length: int = 75,
    delimiter: str = "\r\n",
    first_line_offset: int = 0,
) -> str:
    """Encode a free-text header value (e.g. Subject) when required.

    Text that needs no encoding is returned unchanged. Otherwise the
    encoded-words are joined by ``delimiter + " "`` and returned as a
    :class:`~mime_mail.headers.FoldedValue`.

    Example:
        >>> encode_header_word("Hello")
        'Hello'
        >>> encode_header_word("Grüße")
        '=?utf-8?B?R3LDvMOfZQ==?='
    """
    if not needs_encoding(text):
        return text
    words = split_encoded_words(
        text,
        charset=charset,
        encoding=encoding,
        max_word_length=max_word_length,
        first_line_offset=first_line_offset,
    )
    return FoldedValue((delimiter + " ").join(words), delimiter)


__all__ = ["encode_header_word", "needs_encoding", "split_encoded_words"]
