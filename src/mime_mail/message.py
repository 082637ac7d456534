# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Message and attachment data model.

A :class:`Message` is the unit of work handed to the composer. Attachment
data sources are consumed while the message is assembled and cannot be
replayed: build a fresh :class:`Attachment` for every assembly.
"""

from __future__ import annotations

import io
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, BinaryIO

from .addresses import parse_address

if TYPE_CHECKING:
    from .config import ComposerConfig


@dataclass
class Attachment:
    """A named payload streamed into its own part.

    Attributes:
        name: File name, used in Content-Disposition and for type lookup.
        data: Readable binary source (``read(size) -> bytes``), or raw bytes.
        content_type: Explicit MIME type. Looked up from ``name`` when unset.
    """

    name: str
    data: BinaryIO | bytes
    content_type: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.data, (bytes, bytearray, memoryview)):
            self.data = io.BytesIO(bytes(self.data))


@dataclass
class Message:
    """An email message.

    Addresses may be of any form permitted by RFC 5322
    (``"Name <addr@host>"`` or ``"addr@host"``). At least one of ``to``,
    ``cc`` and ``bcc`` must be non-empty. Bcc recipients only take part in
    the SMTP envelope and never appear in the headers.

    Example:
        message = Message(sender="Domain Sender <sender@domain.com>")
        message.add_to("First person <to_1@domain.com>")
        message.subject = "My Subject"
        message.body = "My Plain Text Body"
        data = message.to_bytes()
    """

    sender: str = ""
    reply_to: str = ""
    to: list[str] = field(default_factory=list)
    cc: list[str] = field(default_factory=list)
    bcc: list[str] = field(default_factory=list)
    subject: str = ""
    body: str = ""
    html_body: str = ""
    attachments: list[Attachment] = field(default_factory=list)
    headers: dict[str, list[str]] = field(default_factory=dict)

    def set_from(self, address: str) -> None:
        self.sender = address

    def set_reply_to(self, address: str) -> None:
        self.reply_to = address

    def add_to(self, *addresses: str) -> None:
        self.to.extend(addresses)

    def add_cc(self, *addresses: str) -> None:
        self.cc.extend(addresses)

    def add_bcc(self, *addresses: str) -> None:
        self.bcc.extend(addresses)

    def add_header(self, name: str, value: str) -> None:
        """Append an extra header value (e.g. In-Reply-To, List-Unsubscribe)."""
        self.headers.setdefault(name, []).append(value)

    def attach(self, name: str, data: BinaryIO | bytes, content_type: str | None = None) -> Attachment:
        attachment = Attachment(name=name, data=data, content_type=content_type)
        self.attachments.append(attachment)
        return attachment

    def has_recipients(self) -> bool:
        return any(_non_empty(group) for group in (self.to, self.cc, self.bcc))

    def envelope_sender(self) -> str:
        """Bare address of the sender, for SMTP ``MAIL FROM``."""
        return parse_address(self.sender).address

    def envelope_recipients(self) -> list[str]:
        """Bare addresses of To, Cc and Bcc, for SMTP ``RCPT TO``.

        Order is To, Cc, Bcc; repeated addresses are kept once.
        """
        seen: set[str] = set()
        recipients: list[str] = []
        for group in (self.to, self.cc, self.bcc):
            for entry in _non_empty(group):
                address = parse_address(entry).address
                if address.lower() not in seen:
                    seen.add(address.lower())
                    recipients.append(address)
        return recipients

    def to_bytes(self, config: ComposerConfig | None = None) -> bytes:
        """Assemble the message. See :meth:`MessageComposer.to_bytes`."""
        from .composer import MessageComposer

        return MessageComposer(config).to_bytes(self)


def _non_empty(addresses: Iterable[str]) -> list[str]:
    return [address for address in addresses if address and address.strip()]


__all__ = ["Attachment", "Message"]
