# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Tests for address parsing and address-list encoding."""

from email.header import decode_header, make_header

import pytest

from mime_mail.addresses import encode_address_list, parse_address, parse_address_list
from mime_mail.errors import InvalidAddressError, ValidationError


def test_empty_list_encodes_to_empty_string():
    assert encode_address_list([]) == ""
    assert encode_address_list(["", "  "]) == ""


def test_two_addresses_are_folded():
    assert encode_address_list(["a@x.com", "b@y.com"]) == "a@x.com,\r\n b@y.com"


def test_empty_entries_are_skipped():
    assert encode_address_list(["a@x.com", "", "b@y.com"]) == "a@x.com,\r\n b@y.com"


def test_single_address_has_no_fold():
    assert encode_address_list(["a@x.com"]) == "a@x.com"


def test_custom_delimiter():
    assert encode_address_list(["a@x.com", "b@y.com"], delimiter="\n") == "a@x.com,\n b@y.com"


def test_parse_named_address():
    parsed = parse_address("Barry Gibbs <bg@example.com>")

    assert parsed.display == "Barry Gibbs <bg@example.com>"
    assert parsed.address == "bg@example.com"
    assert parsed.name == "Barry Gibbs"


def test_parse_bare_address():
    parsed = parse_address("  to_2@domain.com ")
    assert parsed.display == "to_2@domain.com"
    assert parsed.address == "to_2@domain.com"


def test_non_ascii_display_name_is_encoded():
    parsed = parse_address("José Müller <jose@example.com>")

    assert parsed.address == "jose@example.com"
    assert parsed.display.startswith("=?utf-8?B?")
    assert parsed.display.endswith(" <jose@example.com>")
    encoded_name = parsed.display.rsplit(" <", 1)[0]
    assert str(make_header(decode_header(encoded_name))) == "José Müller"


@pytest.mark.parametrize(
    "bad",
    ["", "   ", "no-at-sign", "a@x.com, b@y.com", "Name <>", "evil@x.com\r\nBcc: y@z.com"],
)
def test_malformed_addresses_are_rejected(bad):
    with pytest.raises(InvalidAddressError) as exc_info:
        parse_address(bad)
    assert exc_info.value.code == "invalid_address"
    assert isinstance(exc_info.value, ValidationError)


def test_parse_address_list_skips_empty_entries():
    parsed = parse_address_list(["a@x.com", "", "B <b@y.com>"])
    assert [p.address for p in parsed] == ["a@x.com", "b@y.com"]
