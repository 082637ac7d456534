# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""MIME message assembly and SMTP delivery.

This package turns a :class:`Message` (addresses, subject, plain and HTML
bodies, attachments, extra headers) into a single CRLF-delimited byte
stream and hands it to an SMTP server.

Components:
    MessageComposer: Builds the multipart/mixed envelope, the nested
        multipart/alternative body and one part per attachment.
    encoding: Streaming base64 / quoted-printable encoders and the
        line-splitting framer, chained as explicit pipelines.
    HeaderBlock / write_header_block: Header serialization and sanitization.
    encode_address_list / encode_header_word: Folded address lists and
        RFC 2047 encoded-words.
    SmtpTransport / send_mail: Delivery with aiosmtplib.

Example:
    Assemble and send a message::

        from mime_mail import Message, SmtpConfig, send_mail

        message = Message(sender="Domain Sender <sender@domain.com>")
        message.add_to("First person <to_1@domain.com>")
        message.subject = "My Subject"
        message.body = "My Plain Text Body"
        with open("report.pdf", "rb") as fp:
            message.attach("report.pdf", fp)
            await send_mail(message, SmtpConfig(host="smtp.domain.com"))
"""

from .addresses import ParsedAddress, encode_address_list, parse_address
from .composer import ComposerState, MessageComposer
from .config import ComposerConfig, FramingConfig, SmtpConfig, TransferEncoding
from .errors import (
    BodyEncodingError,
    BoundaryCollisionError,
    EncoderStateError,
    HeaderEncodingError,
    InvalidAddressError,
    MailError,
    MissingAttachmentNameError,
    MissingRecipientError,
    MissingSenderError,
    ReservedHeaderError,
    UnsupportedMultiValueHeaderError,
    ValidationError,
)
from .headers import HeaderBlock, write_header_block
from .message import Attachment, Message
from .transport import SmtpTransport, send_mail
from .words import encode_header_word

__all__ = [
    "Attachment",
    "BodyEncodingError",
    "BoundaryCollisionError",
    "ComposerConfig",
    "ComposerState",
    "EncoderStateError",
    "FramingConfig",
    "HeaderBlock",
    "HeaderEncodingError",
    "InvalidAddressError",
    "MailError",
    "Message",
    "MessageComposer",
    "MissingAttachmentNameError",
    "MissingRecipientError",
    "MissingSenderError",
    "ParsedAddress",
    "ReservedHeaderError",
    "SmtpConfig",
    "SmtpTransport",
    "TransferEncoding",
    "UnsupportedMultiValueHeaderError",
    "ValidationError",
    "encode_address_list",
    "encode_header_word",
    "parse_address",
    "send_mail",
    "write_header_block",
]
