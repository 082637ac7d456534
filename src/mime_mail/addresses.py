# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Address parsing and address-list header values.

:func:`parse_address` normalizes a single RFC 5322 address such as
``"Barry Gibbs <bg@example.com>"`` into its header form and its bare
address (used for the SMTP envelope). :func:`encode_address_list` joins
already-normalized addresses into one folded header value.
"""

from __future__ import annotations

from collections.abc import Iterable
from email.utils import formataddr, getaddresses
from typing import NamedTuple

from .errors import InvalidAddressError
from .headers import FoldedValue
from .words import encode_header_word, needs_encoding

_FORBIDDEN_IN_ADDRESS = set(" \t\r\n<>(),;:\"[]\\")


class ParsedAddress(NamedTuple):
    """A parsed address.

    Attributes:
        display: Header form, ``Name <addr>`` or bare ``addr``.
        address: Bare ``local@domain`` address.
        name: Display name, empty when absent.
    """

    display: str
    address: str
    name: str = ""


def _check_addr_spec(text: str, addr: str) -> None:
    if not addr:
        raise InvalidAddressError(text, "no address found")
    if addr.count("@") != 1:
        raise InvalidAddressError(text, "address must contain exactly one '@'")
    local, domain = addr.split("@")
    if not local or not domain:
        raise InvalidAddressError(text, "empty local part or domain")
    bad = _FORBIDDEN_IN_ADDRESS.intersection(addr)
    if bad or any(ord(ch) < 32 or ord(ch) == 127 for ch in addr):
        raise InvalidAddressError(text, "address contains forbidden characters")


def parse_address(text: str, *, delimiter: str = "\r\n") -> ParsedAddress:
    """Parse a single address into its canonical display string.

    Non-ASCII display names are carried as RFC 2047 encoded-words.

    Raises:
        InvalidAddressError: ``text`` is empty, holds more than one
            address, or its address part is malformed.
    """
    if text is None or not str(text).strip():
        raise InvalidAddressError("" if text is None else str(text), "empty address")
    text = str(text).strip()
    if "\r" in text or "\n" in text:
        raise InvalidAddressError(text, "line break in address")

    pairs = getaddresses([text])
    if len(pairs) != 1:
        raise InvalidAddressError(text, "expected a single address")
    name, addr = pairs[0]
    name = name.strip()
    _check_addr_spec(text, addr)

    if not name:
        return ParsedAddress(addr, addr)
    if needs_encoding(name):
        encoded = encode_header_word(name, delimiter=delimiter)
        return ParsedAddress(FoldedValue(f"{encoded} <{addr}>", delimiter), addr, name)
    return ParsedAddress(formataddr((name, addr)), addr, name)


def parse_address_list(addresses: Iterable[str], *, delimiter: str = "\r\n") -> list[ParsedAddress]:
    """Parse every non-empty entry of ``addresses``."""
    return [
        parse_address(address, delimiter=delimiter)
        for address in addresses
        if address and str(address).strip()
    ]


def encode_address_list(addresses: Iterable[str], delimiter: str = "\r\n") -> str:
    """Join addresses into a single folded header value.

    Empty entries are skipped. An empty result means the caller omits the
    header entirely.

    >>> encode_address_list(["a@x.com", "b@y.com"])
    'a@x.com,\\r\\n b@y.com'
    >>> encode_address_list([])
    ''
    """
    entries = [str(address).strip() for address in addresses if address and str(address).strip()]
    if not entries:
        return ""
    return FoldedValue(("," + delimiter + " ").join(entries), delimiter)


__all__ = [
    "ParsedAddress",
    "encode_address_list",
    "parse_address",
    "parse_address_list",
]
