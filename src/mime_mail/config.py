# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Configuration dataclasses for message assembly and delivery.

Configuration is passed explicitly to every component that needs it, so
several framing policies can coexist in one process:
- composer.config.framing.line_length
- composer.config.plain_encoding
- transport.config.host
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class TransferEncoding(str, Enum):
    """Content-Transfer-Encoding applied to a text body part.

    Attributes:
        BASE64: Base64, split into fixed length lines.
        QUOTED_PRINTABLE: Quoted-printable, readable for mostly-ASCII text.
    """

    BASE64 = "base64"
    QUOTED_PRINTABLE = "quoted-printable"


@dataclass(frozen=True)
class FramingConfig:
    """Line framing of encoded part bodies."""

    line_length: int = 76
    """Maximum encoded line length, excluding the delimiter (RFC 2045)."""

    delimiter: bytes = b"\r\n"
    """Line delimiter written between encoded lines."""

    def __post_init__(self) -> None:
        if self.line_length < 1:
            raise ValueError(f"line_length must be positive, got {self.line_length}")
        if not self.delimiter:
            raise ValueError("delimiter must not be empty")

    @property
    def delimiter_text(self) -> str:
        """Delimiter as text, for header folding."""
        return self.delimiter.decode("ascii")


@dataclass
class ComposerConfig:
    """Settings for :class:`mime_mail.composer.MessageComposer`.

    Example:
        config = ComposerConfig(
            plain_encoding=TransferEncoding.QUOTED_PRINTABLE,
            framing=FramingConfig(line_length=64),
        )
        data = MessageComposer(config).to_bytes(message)
    """

    framing: FramingConfig = field(default_factory=FramingConfig)
    """Line length and delimiter for headers and encoded bodies."""

    plain_encoding: TransferEncoding = TransferEncoding.BASE64
    """Transfer encoding of the text/plain body part."""

    html_encoding: TransferEncoding = TransferEncoding.BASE64
    """Transfer encoding of the text/html body part."""

    charset: str = "utf-8"
    """Charset of text bodies and RFC 2047 encoded-words."""

    word_encoding: str = "B"
    """RFC 2047 encoding for header words: "B" (base64) or "Q"."""

    max_word_length: int = 75
    """Maximum length of a single encoded-word, markers included."""

    read_chunk_size: int = 57 * 1024
    """Bytes read from an attachment data source per read call."""

    add_date: bool = False
    """Emit a Date header when the message does not carry one."""

    add_message_id: bool = False
    """Emit a Message-ID header when the message does not carry one."""

    boundary_attempts: int = 8
    """Boundary candidates tried before giving up on a collision."""

    header_joiners: dict[str, str] = field(default_factory=dict)
    """Separators for headers allowed to carry several values."""

    def __post_init__(self) -> None:
        self.plain_encoding = TransferEncoding(self.plain_encoding)
        self.html_encoding = TransferEncoding(self.html_encoding)
        self.word_encoding = self.word_encoding.upper()
        if self.word_encoding not in ("B", "Q"):
            raise ValueError(f"word_encoding must be 'B' or 'Q', got {self.word_encoding!r}")
        if self.read_chunk_size < 1:
            raise ValueError(f"read_chunk_size must be positive, got {self.read_chunk_size}")
        if self.boundary_attempts < 1:
            raise ValueError(f"boundary_attempts must be positive, got {self.boundary_attempts}")


@dataclass
class SmtpConfig:
    """Connection settings for :class:`mime_mail.transport.SmtpTransport`."""

    host: str
    """SMTP server hostname."""

    port: int = 587
    """SMTP server port."""

    user: str | None = None
    """Login user. No AUTH is attempted when unset."""

    password: str | None = None
    """Login password."""

    use_tls: bool = False
    """Connect with implicit TLS (port 465 style)."""

    start_tls: bool | None = None
    """STARTTLS policy: None upgrades when the server offers it, True requires it, False never."""

    timeout: float = 30.0
    """Timeout in seconds for SMTP operations."""

    @property
    def server_address(self) -> str:
        return f"{self.host}:{self.port}"


__all__ = [
    "ComposerConfig",
    "FramingConfig",
    "SmtpConfig",
    "TransferEncoding",
]
