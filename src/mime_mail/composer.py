# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Multipart body composer.

Assembles a :class:`~mime_mail.message.Message` into an RFC 5322 byte
stream with this structure::

    <headers>                       From, To, Cc, Subject, MIME-Version, ...
    multipart/mixed
    ├── multipart/alternative       only when a plain or HTML body is set
    │   ├── text/plain              base64 or quoted-printable
    │   └── text/html               base64 or quoted-printable
    ├── attachment 1                base64
    └── attachment N                base64

Output is streamed to a binary writable. Attachment data sources are read
chunk by chunk through the base64 pipeline, so peak memory does not depend
on attachment size.

Assembly walks a fixed sequence of states::

    START -> HEADERS_WRITTEN -> MIXED_OPEN
          [-> ALTERNATIVE_OPEN -> ALTERNATIVE_CLOSED]
          [-> ATTACHMENT ...] -> MIXED_CLOSED -> DONE

Every validation runs before the first byte is written. Once writing has
started any error aborts the assembly and the partial output is invalid.

Example:
    Composing into a file::

        composer = MessageComposer(ComposerConfig())
        with open("message.eml", "wb") as fp:
            composer.compose(message, fp)
"""

from __future__ import annotations

import secrets
from collections.abc import Callable, Iterable
from email.utils import formatdate, make_msgid
from enum import Enum
from typing import BinaryIO
from urllib.parse import quote

from .addresses import ParsedAddress, encode_address_list, parse_address, parse_address_list
from .config import ComposerConfig, TransferEncoding
from .encoding import BufferSink, ByteSink, Pipeline, base64_pipeline, quoted_printable_pipeline
from .errors import (
    BodyEncodingError,
    BoundaryCollisionError,
    EncoderStateError,
    MissingAttachmentNameError,
    MissingRecipientError,
    MissingSenderError,
    ReservedHeaderError,
)
from .headers import HeaderBlock, canonical_header_name, sanitize_header_value, write_header_block
from .logger import get_logger
from .message import Attachment, Message
from .mimetypes_lookup import resolve_content_type
from .words import encode_header_word

RESERVED_HEADERS = frozenset(
    {"Bcc", "MIME-Version", "Content-Type", "Content-Transfer-Encoding"}
)


class ComposerState(str, Enum):
    START = "start"
    HEADERS_WRITTEN = "headers_written"
    MIXED_OPEN = "mixed_open"
    ALTERNATIVE_OPEN = "alternative_open"
    ALTERNATIVE_CLOSED = "alternative_closed"
    ATTACHMENT = "attachment"
    MIXED_CLOSED = "mixed_closed"
    DONE = "done"


_TRANSITIONS: dict[ComposerState, frozenset[ComposerState]] = {
    ComposerState.START: frozenset({ComposerState.HEADERS_WRITTEN}),
    ComposerState.HEADERS_WRITTEN: frozenset({ComposerState.MIXED_OPEN}),
    ComposerState.MIXED_OPEN: frozenset(
        {ComposerState.ALTERNATIVE_OPEN, ComposerState.ATTACHMENT, ComposerState.MIXED_CLOSED}
    ),
    ComposerState.ALTERNATIVE_OPEN: frozenset({ComposerState.ALTERNATIVE_CLOSED}),
    ComposerState.ALTERNATIVE_CLOSED: frozenset(
        {ComposerState.ATTACHMENT, ComposerState.MIXED_CLOSED}
    ),
    ComposerState.ATTACHMENT: frozenset({ComposerState.ATTACHMENT, ComposerState.MIXED_CLOSED}),
    ComposerState.MIXED_CLOSED: frozenset({ComposerState.DONE}),
    ComposerState.DONE: frozenset(),
}


def default_boundary() -> str:
    """Return a fresh random boundary token."""
    return secrets.token_hex(15)


class Envelope:
    """One multipart section: a boundary and its delimiter lines.

    The first part is introduced by ``--boundary``, every later part by
    ``<delim>--boundary``; :meth:`close` writes ``<delim>--boundary--``.
    A section closed without any part gets one empty part so the result is
    still well-formed.
    """

    def __init__(self, sink: ByteSink, subtype: str, boundary: str, delimiter: bytes):
        self.sink = sink
        self.subtype = subtype
        self.boundary = boundary
        self.delimiter = delimiter
        self.parts = 0
        self.closed = False

    @property
    def content_type(self) -> str:
        return f'multipart/{self.subtype}; boundary="{self.boundary}"'

    def begin_part(self) -> None:
        if self.closed:
            raise EncoderStateError(f"multipart/{self.subtype} envelope already closed")
        marker = b"--" + self.boundary.encode("ascii") + self.delimiter
        if self.parts:
            marker = self.delimiter + marker
        self.sink.write(marker)
        self.parts += 1

    def close(self) -> None:
        if not self.parts:
            self.begin_part()
        self.sink.write(self.delimiter + b"--" + self.boundary.encode("ascii") + b"--" + self.delimiter)
        self.closed = True


class _Assembly:
    """State of a single :meth:`MessageComposer.compose` call."""

    def __init__(self, composer: MessageComposer, message: Message, out: BinaryIO):
        self.composer = composer
        self.config = composer.config
        self.message = message
        self.sink = out if isinstance(out, ByteSink) else ByteSink(out)
        self.delimiter = self.config.framing.delimiter
        self.state = ComposerState.START
        self.envelopes: list[Envelope] = []
        self.used_boundaries: list[str] = []
        self.open_pipeline: Pipeline | None = None
        self.mixed_boundary = ""
        self.alternative_boundary = ""
        self.bodies: list[tuple[str, bytes, TransferEncoding]] = []
        self.logger = composer.logger

    def advance(self, state: ComposerState) -> None:
        if state not in _TRANSITIONS[self.state]:
            raise EncoderStateError(f"invalid composer transition {self.state.value} -> {state.value}")
        self.logger.debug("Composer state %s -> %s", self.state.value, state.value)
        self.state = state

    def new_boundary(self) -> str:
        texts = [t for t in (self.message.body, self.message.html_body) if t]
        for _ in range(self.config.boundary_attempts):
            candidate = self.composer.boundary_factory()
            if not candidate:
                continue
            if any(candidate.startswith(b) or b.startswith(candidate) for b in self.used_boundaries):
                continue
            if any(candidate in text for text in texts):
                continue
            self.used_boundaries.append(candidate)
            return candidate
        raise BoundaryCollisionError(
            f"No collision-free boundary after {self.config.boundary_attempts} attempts"
        )

    def open_envelope(self, subtype: str, boundary: str) -> Envelope:
        envelope = Envelope(self.sink, subtype, boundary, self.delimiter)
        self.envelopes.append(envelope)
        self.logger.debug("Opened multipart/%s envelope (boundary=%s)", subtype, boundary)
        return envelope

    def close_envelope(self, envelope: Envelope) -> None:
        if self.open_pipeline is not None:
            raise EncoderStateError("part encoder must be closed before its envelope")
        if not self.envelopes or self.envelopes[-1] is not envelope:
            raise EncoderStateError(f"multipart/{envelope.subtype} is not the innermost open envelope")
        envelope.close()
        self.envelopes.pop()
        self.logger.debug("Closed multipart/%s envelope", envelope.subtype)

    def write_part(self, envelope: Envelope, headers: HeaderBlock, payload: Iterable[bytes], pipeline_factory) -> None:
        envelope.begin_part()
        write_header_block(self.sink, headers, delimiter=self.delimiter)
        pipeline = pipeline_factory(self.sink, self.config.framing)
        self.open_pipeline = pipeline
        for chunk in payload:
            pipeline.write(chunk)
        pipeline.close()
        self.open_pipeline = None


class MessageComposer:
    """Assemble messages into MIME byte streams.

    Args:
        config: Framing, body encodings and header options.
        boundary_factory: Callable returning boundary candidates.
            Defaults to 30 random hex characters.
    """

    def __init__(
        self,
        config: ComposerConfig | None = None,
        *,
        boundary_factory: Callable[[], str] | None = None,
    ):
        self.config = config or ComposerConfig()
        self.boundary_factory = boundary_factory or default_boundary
        self.logger = get_logger("MimeMail.composer")

    # ------------------------------------------------------------ public API
    def to_bytes(self, message: Message) -> bytes:
        """Return the assembled message."""
        sink = BufferSink()
        self.compose(message, sink)
        return sink.getvalue()

    def compose(self, message: Message, out: BinaryIO) -> ComposerState:
        """Stream the assembled message into ``out``.

        Raises:
            MissingSenderError: No sender.
            MissingRecipientError: No To, Cc or Bcc recipient.
            InvalidAddressError: An address cannot be parsed.
            MissingAttachmentNameError: An attachment has no name.
            BodyEncodingError: A body cannot be encoded in ``config.charset``.
            ReservedHeaderError: An extra header names a composer-owned header.
            UnsupportedMultiValueHeaderError: A header has several values and
                no separator in ``config.header_joiners``.
            BoundaryCollisionError: No usable boundary was generated.
            OSError: Writing ``out`` or reading an attachment failed.
        """
        assembly = _Assembly(self, message, out)
        headers = self.build_headers(message, assembly)
        write_header_block(assembly.sink, headers, delimiter=assembly.delimiter, joiners=self.config.header_joiners)
        assembly.advance(ComposerState.HEADERS_WRITTEN)

        mixed = assembly.open_envelope("mixed", assembly.mixed_boundary)
        assembly.advance(ComposerState.MIXED_OPEN)

        if message.body or message.html_body:
            self._write_alternative(assembly, mixed)

        for attachment in message.attachments:
            assembly.advance(ComposerState.ATTACHMENT)
            self._write_attachment(assembly, mixed, attachment)

        assembly.close_envelope(mixed)
        assembly.advance(ComposerState.MIXED_CLOSED)
        assembly.advance(ComposerState.DONE)
        self.logger.debug(
            "Composed message: %d bytes, %d attachment(s)",
            assembly.sink.bytes_written,
            len(message.attachments),
        )
        return assembly.state

    # ------------------------------------------------------------ validation
    def validate(self, message: Message) -> dict[str, list[ParsedAddress]]:
        """Check the message invariants and return its parsed addresses."""
        if not message.sender or not message.sender.strip():
            raise MissingSenderError()
        if not message.has_recipients():
            raise MissingRecipientError()
        delimiter = self.config.framing.delimiter_text
        parsed = {
            "from": [parse_address(message.sender, delimiter=delimiter)],
            "reply_to": parse_address_list([message.reply_to], delimiter=delimiter),
            "to": parse_address_list(message.to, delimiter=delimiter),
            "cc": parse_address_list(message.cc, delimiter=delimiter),
            "bcc": parse_address_list(message.bcc, delimiter=delimiter),
        }
        for attachment in message.attachments:
            if not attachment.name or not attachment.name.strip():
                raise MissingAttachmentNameError()
        for name in message.headers:
            if canonical_header_name(name) in RESERVED_HEADERS:
                raise ReservedHeaderError(canonical_header_name(name))
        return parsed

    def build_headers(self, message: Message, assembly: _Assembly) -> HeaderBlock:
        """Validate ``message`` and build its top-level header block.

        Bcc recipients are validated but never written.
        """
        parsed = self.validate(message)
        delimiter = self.config.framing.delimiter_text

        headers = HeaderBlock()
        headers.add("From", parsed["from"][0].display)
        if parsed["reply_to"]:
            headers.add("Reply-To", parsed["reply_to"][0].display)
        if to_value := encode_address_list([p.display for p in parsed["to"]], delimiter):
            headers.add("To", to_value)
        if cc_value := encode_address_list([p.display for p in parsed["cc"]], delimiter):
            headers.add("Cc", cc_value)
        if subject := sanitize_header_value(message.subject):
            headers.add("Subject", self._encode_word(subject, "Subject"))

        extra = {canonical_header_name(name) for name in message.headers}
        if self.config.add_date and "Date" not in extra:
            headers.add("Date", formatdate(localtime=True))
        if self.config.add_message_id and "Message-ID" not in extra:
            domain = parsed["from"][0].address.rsplit("@", 1)[1]
            headers.add("Message-ID", make_msgid(domain=domain))

        for name, values in message.headers.items():
            if isinstance(values, str):
                values = [values]
            for value in values:
                headers.add(name, self._encode_word(sanitize_header_value(value), name))

        assembly.bodies = self.message_bodies(message)
        assembly.mixed_boundary = assembly.new_boundary()
        if message.body or message.html_body:
            assembly.alternative_boundary = assembly.new_boundary()
        headers.add("MIME-Version", "1.0")
        headers.add("Content-Type", f'multipart/mixed; boundary="{assembly.mixed_boundary}"')
        return headers

    # ------------------------------------------------------------ parts
    def _write_alternative(self, assembly: _Assembly, mixed: Envelope) -> None:
        mixed.begin_part()
        alternative = assembly.open_envelope("alternative", assembly.alternative_boundary)
        write_header_block(
            assembly.sink,
            HeaderBlock({"Content-Type": alternative.content_type}),
            delimiter=assembly.delimiter,
        )
        assembly.advance(ComposerState.ALTERNATIVE_OPEN)

        for subtype, payload, encoding in assembly.bodies:
            headers = HeaderBlock()
            headers.add("Content-Type", f"text/{subtype}; charset={self.config.charset}")
            headers.add("Content-Transfer-Encoding", encoding.value)
            assembly.write_part(
                alternative,
                headers,
                [payload],
                _PIPELINES[encoding],
            )
            self.logger.debug("Wrote text/%s body part (%s)", subtype, encoding.value)

        assembly.close_envelope(alternative)
        assembly.advance(ComposerState.ALTERNATIVE_CLOSED)

    def message_bodies(self, message: Message) -> list[tuple[str, bytes, TransferEncoding]]:
        """Return ``(subtype, payload, encoding)`` for every non-empty body.

        Bodies are encoded here, before any output, so a charset that cannot
        carry them fails while the sink is still empty.
        """
        bodies = []
        for subtype, text, encoding in (
            ("plain", message.body, self.config.plain_encoding),
            ("html", message.html_body, self.config.html_encoding),
        ):
            if not text:
                continue
            try:
                payload = text.encode(self.config.charset)
            except UnicodeEncodeError as exc:
                raise BodyEncodingError(subtype, self.config.charset) from exc
            bodies.append((subtype, payload, encoding))
        return bodies

    def _write_attachment(self, assembly: _Assembly, mixed: Envelope, attachment: Attachment) -> None:
        content_type = resolve_content_type(attachment.name, attachment.content_type)
        headers = HeaderBlock()
        headers.add("Content-Type", content_type)
        headers.add("Content-Disposition", content_disposition(attachment.name))
        headers.add("Content-Transfer-Encoding", TransferEncoding.BASE64.value)
        assembly.write_part(mixed, headers, self._read_chunks(attachment), base64_pipeline)
        self.logger.debug("Wrote attachment %s (%s)", attachment.name, content_type)

    def _read_chunks(self, attachment: Attachment) -> Iterable[bytes]:
        read = attachment.data.read
        size = self.config.read_chunk_size
        while True:
            chunk = read(size)
            if not chunk:
                return
            yield chunk

    def _encode_word(self, text: str, name: str) -> str:
        return encode_header_word(
            text,
            first_line_offset=len(canonical_header_name(name)) + 2,
            charset=self.config.charset,
            encoding=self.config.word_encoding,
            max_word_length=self.config.max_word_length,
            delimiter=self.config.framing.delimiter_text,
        )


_PIPELINES = {
    TransferEncoding.BASE64: base64_pipeline,
    TransferEncoding.QUOTED_PRINTABLE: quoted_printable_pipeline,
}


def content_disposition(filename: str) -> str:
    """Return the ``attachment`` disposition value for ``filename``.

    >>> content_disposition("report.pdf")
    'attachment; filename="report.pdf"'

    Non-ASCII names are carried in an RFC 2231 ``filename*`` parameter.
    """
    filename = filename.replace("\r", " ").replace("\n", " ").strip()
    if filename.isascii():
        escaped = filename.replace("\\", "\\\\").replace('"', '\\"')
        return f'attachment; filename="{escaped}"'
    return f"attachment; filename*=utf-8''{quote(filename, safe='')}"


__all__ = [
    "ComposerState",
    "Envelope",
    "MessageComposer",
    "RESERVED_HEADERS",
    "content_disposition",
    "default_boundary",
]
