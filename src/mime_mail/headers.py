# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Header blocks and their serialization.

A :class:`HeaderBlock` maps canonical header names to lists of values and
keeps insertion order, so the serialized output is deterministic.
:func:`write_header_block` writes one ``Name: value`` line per header
followed by the blank line separating headers from the body.

Values are sanitized on output: CR and LF become spaces (no header
injection through a value) and surrounding whitespace is trimmed. Values
produced by the folding encoders are wrapped in :class:`FoldedValue` so their
``delimiter + " "`` continuations survive sanitization.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

from .errors import UnsupportedMultiValueHeaderError
from .logger import get_logger

logger = get_logger("MimeMail.headers")

_ACRONYMS = {
    "mime": "MIME",
    "id": "ID",
    "spf": "SPF",
    "dkim": "DKIM",
}


def canonical_header_name(name: str) -> str:
    """Return the canonical spelling of a header name.

    >>> canonical_header_name("content-type")
    'Content-Type'
    >>> canonical_header_name("mime-version")
    'MIME-Version'
    """
    name = name.strip()
    if not name:
        raise ValueError("header name must not be empty")
    if any(ch in name for ch in ": \t\r\n"):
        raise ValueError(f"invalid header name: {name!r}")
    parts = []
    for token in name.split("-"):
        lowered = token.lower()
        parts.append(_ACRONYMS.get(lowered, lowered.capitalize()))
    return "-".join(parts)


class FoldedValue(str):
    """A header value already folded by one of our encoders.

    Attributes:
        delimiter: The line delimiter used between folded lines.
    """

    delimiter: str

    def __new__(cls, value: str, delimiter: str = "\r\n") -> FoldedValue:
        obj = super().__new__(cls, value)
        obj.delimiter = delimiter
        return obj

    def continuation(self) -> str:
        return self.delimiter + " "


def sanitize_header_value(value: str) -> str:
    """Replace CR/LF with spaces and trim surrounding whitespace.

    :class:`FoldedValue` instances keep their continuation lines; each
    folded piece is sanitized on its own.
    """
    if isinstance(value, FoldedValue):
        sep = value.continuation()
        pieces = [_clean(piece) for piece in str(value).split(sep)]
        return sep.join(piece for piece in pieces if piece)
    return _clean(str(value))


def _clean(value: str) -> str:
    return value.replace("\r", " ").replace("\n", " ").strip()


class HeaderBlock:
    """Insertion-ordered mapping of header name to a list of values.

    Names compare case-insensitively and are stored in canonical form.

    Example:
        headers = HeaderBlock()
        headers.add("content-type", "text/plain; charset=utf-8")
        headers.get("Content-Type")  # "text/plain; charset=utf-8"
    """

    def __init__(self, items: Mapping[str, str | Iterable[str]] | None = None):
        self._values: dict[str, list[str]] = {}
        if items:
            for name, values in items.items():
                if isinstance(values, str):
                    self.add(name, values)
                else:
                    for value in values:
                        self.add(name, value)

    def add(self, name: str, value: str) -> None:
        """Append ``value`` to the values of ``name``."""
        self._values.setdefault(canonical_header_name(name), []).append(value)

    def set(self, name: str, value: str) -> None:
        """Replace every value of ``name`` with ``value``."""
        self._values[canonical_header_name(name)] = [value]

    def get(self, name: str, default: str | None = None) -> str | None:
        values = self._values.get(canonical_header_name(name))
        return values[0] if values else default

    def get_all(self, name: str) -> list[str]:
        return list(self._values.get(canonical_header_name(name), []))

    def remove(self, name: str) -> None:
        self._values.pop(canonical_header_name(name), None)

    def names(self) -> list[str]:
        return list(self._values)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return canonical_header_name(name) in self._values

    def __iter__(self) -> Iterator[tuple[str, list[str]]]:
        for name, values in self._values.items():
            yield name, list(values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"HeaderBlock({self._values!r})"


def render_header_lines(
    headers: HeaderBlock,
    joiners: Mapping[str, str] | None = None,
) -> list[tuple[str, str]]:
    """Resolve every header to exactly one ``(name, value)`` line.

    Raises:
        UnsupportedMultiValueHeaderError: A header has several values and
            ``joiners`` defines no separator for it.
    """
    separators = {canonical_header_name(k): v for k, v in (joiners or {}).items()}
    lines: list[tuple[str, str]] = []
    for name, values in headers:
        if not values:
            continue
        if len(values) > 1:
            separator = separators.get(name)
            if separator is None:
                raise UnsupportedMultiValueHeaderError(name, len(values))
            value = separator.join(_clean(str(v)) for v in values)
        else:
            value = sanitize_header_value(values[0])
        lines.append((name, value))
    return lines


def write_header_block(
    sink,
    headers: HeaderBlock,
    *,
    delimiter: bytes = b"\r\n",
    joiners: Mapping[str, str] | None = None,
) -> int:
    """Write ``headers`` and the terminating blank line to ``sink``.

    Every header is resolved before the first byte is written, so a
    rejected multi-value header leaves the sink untouched.

    Returns:
        Number of header lines written.
    """
    lines = render_header_lines(headers, joiners)
    for name, value in lines:
        sink.write(f"{name}: {value}".encode("utf-8") + delimiter)
    sink.write(delimiter)
    logger.debug("Wrote header block with %d lines", len(lines))
    return len(lines)


__all__ = [
    "FoldedValue",
    "HeaderBlock",
    "canonical_header_name",
    "render_header_lines",
    "sanitize_header_value",
    "write_header_block",
]
