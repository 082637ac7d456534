# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Error taxonomy for message assembly.

Every error carries a stable ``code`` attribute so callers can branch on the
cause without matching message text. I/O failures (``OSError``) raised by an
output sink or an attachment data source are not wrapped: they propagate
unchanged and the partial output must be discarded.
"""

from __future__ import annotations


class MailError(Exception):
    """Base class for all errors raised while assembling a message."""

    code = "mail_error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.__class__.__doc__)


class ValidationError(MailError):
    """The message is missing required data or holds malformed values."""

    code = "validation_error"


class MissingSenderError(ValidationError):
    """No sender specified."""

    code = "missing_sender"


class MissingRecipientError(ValidationError):
    """No recipient specified. At least one To, Cc or Bcc recipient is required."""

    code = "missing_recipient"


class InvalidAddressError(ValidationError):
    """An address could not be parsed."""

    code = "invalid_address"

    def __init__(self, address: str, reason: str | None = None):
        detail = f"Invalid address {address!r}"
        if reason:
            detail = f"{detail}: {reason}"
        super().__init__(detail)
        self.address = address
        self.reason = reason


class MissingAttachmentNameError(ValidationError):
    """An attachment has no file name."""

    code = "missing_attachment_name"


class BodyEncodingError(ValidationError):
    """A text body cannot be encoded in the configured charset."""

    code = "body_encoding"

    def __init__(self, part: str, charset: str):
        super().__init__(f"The {part} body cannot be encoded as {charset}")
        self.part = part
        self.charset = charset


class HeaderEncodingError(MailError):
    """A header value cannot be encoded."""

    code = "header_encoding"


class UnsupportedMultiValueHeaderError(HeaderEncodingError):
    """A header holds several values and no separator is defined to join them."""

    code = "unsupported_multi_value_header"

    def __init__(self, name: str, count: int):
        super().__init__(
            f"Header {name!r} has {count} values and no multi-value join policy"
        )
        self.name = name
        self.count = count


class ReservedHeaderError(HeaderEncodingError):
    """An extra header names a header the composer owns."""

    code = "reserved_header"

    def __init__(self, name: str):
        super().__init__(f"Header {name!r} is reserved and cannot be set as an extra header")
        self.name = name


class BoundaryCollisionError(MailError):
    """No boundary free of collisions could be generated."""

    code = "boundary_collision"


class EncoderStateError(MailError):
    """An encoder pipeline was used after it was closed."""

    code = "encoder_state"


__all__ = [
    "BodyEncodingError",
    "BoundaryCollisionError",
    "EncoderStateError",
    "HeaderEncodingError",
    "InvalidAddressError",
    "MailError",
    "MissingAttachmentNameError",
    "MissingRecipientError",
    "MissingSenderError",
    "ReservedHeaderError",
    "UnsupportedMultiValueHeaderError",
    "ValidationError",
]
