# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""SMTP delivery of assembled messages.

The transport takes finished message bytes plus the envelope addresses and
hands them to a mail server with aiosmtplib: connect, upgrade with
STARTTLS when the server offers it (or as configured), authenticate when
credentials are configured, ``MAIL FROM`` / ``RCPT TO`` / ``DATA``, quit.

There is no pooling and no retry at this layer. Every aiosmtplib or
network error propagates to the caller.

Example:
    Sending a message::

        config = SmtpConfig(host="smtp.example.com", port=587,
                            user="mailer@example.com", password="secret")
        accepted = await send_mail(message, config)
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import aiosmtplib

from .composer import MessageComposer
from .config import ComposerConfig, SmtpConfig
from .errors import MissingRecipientError
from .logger import get_logger
from .message import Message


class SmtpTransport:
    """Deliver message bytes to one SMTP server.

    Args:
        config: Server address, credentials and TLS policy.
    """

    def __init__(self, config: SmtpConfig):
        self.config = config
        self.logger = get_logger("MimeMail.transport")

    def _client(self) -> aiosmtplib.SMTP:
        return aiosmtplib.SMTP(
            hostname=self.config.host,
            port=self.config.port,
            use_tls=self.config.use_tls,
            start_tls=self.config.start_tls,
            timeout=self.config.timeout,
        )

    async def send(self, message_bytes: bytes, sender: str, recipients: Sequence[str]) -> int:
        """Send ``message_bytes`` from ``sender`` to every address in ``recipients``.

        Returns:
            Number of recipients the server accepted.

        Raises:
            MissingRecipientError: ``recipients`` is empty.
            aiosmtplib.SMTPException: The server refused the session, the
                sender or every recipient.
            OSError: Connection failures.
        """
        if not recipients:
            raise MissingRecipientError()
        smtp = self._client()
        try:
            await smtp.connect()
            if self.config.user and self.config.password:
                await smtp.login(self.config.user, self.config.password)
            errors, response = await smtp.sendmail(sender, list(recipients), message_bytes)
        except (aiosmtplib.SMTPException, OSError, asyncio.TimeoutError) as exc:
            self.logger.error("Delivery to %s failed: %s", self.config.server_address, exc)
            raise
        finally:
            if smtp.is_connected:
                try:
                    await smtp.quit()
                except aiosmtplib.SMTPException as exc:
                    self.logger.warning("QUIT failed on %s: %s", self.config.server_address, exc)

        for address, (code, text) in errors.items():
            self.logger.warning("Recipient %s refused: %s %s", address, code, text)
        accepted = len(recipients) - len(errors)
        self.logger.info(
            "Delivered %d bytes via %s to %d/%d recipient(s): %s",
            len(message_bytes),
            self.config.server_address,
            accepted,
            len(recipients),
            response,
        )
        return accepted


async def send_mail(
    message: Message,
    smtp_config: SmtpConfig,
    composer_config: ComposerConfig | None = None,
    *,
    transport: SmtpTransport | None = None,
) -> int:
    """Assemble ``message`` and deliver it.

    The message is assembled before any connection is opened, so validation
    errors never reach the network. Bcc recipients are part of the SMTP
    envelope only.
    """
    message_bytes = MessageComposer(composer_config).to_bytes(message)
    transport = transport or SmtpTransport(smtp_config)
    return await transport.send(
        message_bytes,
        message.envelope_sender(),
        message.envelope_recipients(),
    )


__all__ = ["SmtpTransport", "send_mail"]
