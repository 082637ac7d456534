# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Pydantic schemas for JSON message payloads."""

from __future__ import annotations

import base64
import binascii
from contextlib import ExitStack
from email.utils import getaddresses
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .message import Attachment, Message

_SPECIALS = set('()<>@,:;."[]\\')


def _split_addresses(value: list[str] | str | None) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return _split_address_string(value)
    return [str(addr).strip() for addr in value if addr and str(addr).strip()]


def _split_address_string(value: str) -> list[str]:
    """Split a comma separated list, keeping commas inside quoted display names."""
    pairs = getaddresses([value])
    if any(not name and not addr for name, addr in pairs):
        # Unparseable input: keep the raw entries so validation reports them.
        return [part.strip() for part in value.split(",") if part.strip()]
    return [_join_address(name, addr) for name, addr in pairs]


def _join_address(name: str, addr: str) -> str:
    if not name:
        return addr
    if any(ch in _SPECIALS for ch in name):
        escaped = name.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}" <{addr}>'
    return f"{name} <{addr}>"


class AttachmentPayload(BaseModel):
    """Email attachment specification.

    Attributes:
        filename: Attachment filename, used in Content-Disposition.
        content_base64: Inline base64-encoded content.
        path: Local filesystem path, opened when the message is built.
        mime_type: Optional MIME type override.
    """

    model_config = ConfigDict(extra="forbid")

    filename: Annotated[
        str,
        Field(min_length=1, max_length=255, description="Attachment filename")
    ]
    content_base64: Annotated[
        str | None,
        Field(default=None, description="Inline base64 content")
    ]
    path: Annotated[
        str | None,
        Field(default=None, description="Filesystem path of the content")
    ]
    mime_type: Annotated[
        str | None,
        Field(default=None, description="MIME type override")
    ]

    @model_validator(mode="after")
    def _one_source(self) -> AttachmentPayload:
        if (self.content_base64 is None) == (self.path is None):
            raise ValueError("exactly one of content_base64 or path is required")
        return self

    @field_validator("content_base64")
    @classmethod
    def _valid_base64(cls, value: str | None) -> str | None:
        if value is None:
            return value
        try:
            base64.b64decode(value.strip(), validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"Invalid base64 content: {e}") from e
        return value.strip()

    def open(self, stack: ExitStack, base_dir: Path | None = None) -> Attachment:
        """Build the :class:`Attachment`, registering opened files on ``stack``."""
        if self.content_base64 is not None:
            data = base64.b64decode(self.content_base64)
            return Attachment(name=self.filename, data=data, content_type=self.mime_type)
        path = Path(self.path)
        if not path.is_absolute() and base_dir is not None:
            path = base_dir / path
        if not path.is_file():
            raise FileNotFoundError(f"Attachment file not found: {path}")
        handle = stack.enter_context(path.open("rb"))
        return Attachment(name=self.filename, data=handle, content_type=self.mime_type)


class MessagePayload(BaseModel):
    """Payload describing a message to assemble.

    ``to``, ``cc`` and ``bcc`` accept a comma separated string or a list.

    Attributes:
        from_addr: Sender address (JSON key ``from``).
        reply_to: Reply-To address.
        to: Recipient address(es).
        cc: CC address(es).
        bcc: BCC address(es), envelope only.
        subject: Email subject.
        body: Plain text body.
        html_body: HTML body.
        attachments: List of attachments.
        headers: Additional email headers, one value or a list of values each.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    from_addr: Annotated[
        str,
        Field(alias="from", min_length=1, description="Sender email address")
    ]
    reply_to: Annotated[
        str | None,
        Field(default=None, description="Reply-To address")
    ]
    to: Annotated[
        list[str] | str | None,
        Field(default=None, description="Recipient address(es)")
    ]
    cc: Annotated[
        list[str] | str | None,
        Field(default=None, description="CC address(es)")
    ]
    bcc: Annotated[
        list[str] | str | None,
        Field(default=None, description="BCC address(es)")
    ]
    subject: Annotated[
        str,
        Field(default="", description="Email subject")
    ]
    body: Annotated[
        str,
        Field(default="", description="Plain text body")
    ]
    html_body: Annotated[
        str,
        Field(default="", description="HTML body")
    ]
    attachments: Annotated[
        list[AttachmentPayload],
        Field(default_factory=list, description="Attachments")
    ]
    headers: Annotated[
        dict[str, list[str] | str],
        Field(default_factory=dict, description="Additional headers")
    ]

    def to_message(self, stack: ExitStack, base_dir: Path | None = None) -> Message:
        """Build a :class:`Message`; file attachments stay open until ``stack`` closes."""
        return Message(
            sender=self.from_addr,
            reply_to=self.reply_to or "",
            to=_split_addresses(self.to),
            cc=_split_addresses(self.cc),
            bcc=_split_addresses(self.bcc),
            subject=self.subject,
            body=self.body,
            html_body=self.html_body,
            attachments=[att.open(stack, base_dir) for att in self.attachments],
            headers={
                name: [value] if isinstance(value, str) else list(value)
                for name, value in self.headers.items()
            },
        )


__all__ = ["AttachmentPayload", "MessagePayload"]
