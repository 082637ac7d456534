# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
from mime_mail.errors import (
    InvalidAddressError,
    MailError,
    MissingRecipientError,
    UnsupportedMultiValueHeaderError,
    ValidationError,
)


def test_default_message_comes_from_docstring():
    err = MissingRecipientError()
    assert str(err).startswith("No recipient specified")
    assert err.code == "missing_recipient"
    assert isinstance(err, ValidationError)
    assert isinstance(err, MailError)


def test_invalid_address_keeps_details():
    err = InvalidAddressError("broken", "no '@'")
    assert err.address == "broken"
    assert err.reason == "no '@'"
    assert "broken" in str(err)


def test_multi_value_error_names_header():
    err = UnsupportedMultiValueHeaderError("Keywords", 2)
    assert err.code == "unsupported_multi_value_header"
    assert (err.name, err.count) == ("Keywords", 2)
