# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Command-line interface for mime-mail.

Usage:
    mime-mail compose message.json -o message.eml
    mime-mail compose message.json --config config.ini   # writes to stdout
    mime-mail send message.json --config config.ini

The payload is a JSON document matching
:class:`mime_mail.schema.MessagePayload`::

    {
      "from": "Domain Sender <sender@domain.com>",
      "to": ["First person <to_1@domain.com>"],
      "subject": "Report",
      "body": "See attached.",
      "attachments": [{"filename": "report.pdf", "path": "report.pdf"}]
    }

Relative attachment paths are resolved against the payload's directory.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from contextlib import ExitStack
from pathlib import Path

import aiosmtplib
import click
from pydantic import ValidationError
from rich.console import Console

from .composer import MessageComposer
from .config import ComposerConfig
from .config_loader import load_config
from .errors import MailError
from .schema import MessagePayload
from .transport import send_mail

console = Console(stderr=True)
err_console = Console(stderr=True)


def run_async(coro):
    """Run an async coroutine synchronously."""
    return asyncio.run(coro)


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    err_console.print(f"[red]Error:[/red] {message}")


def print_success(message: str) -> None:
    console.print(f"[green]✓[/green] {message}")


def _load_payload(path: Path) -> MessagePayload:
    try:
        return MessagePayload.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except json.JSONDecodeError as e:
        print_error(f"{path} is not valid JSON: {e}")
        sys.exit(1)
    except ValidationError as e:
        print_error(f"Invalid payload in {path}:")
        for err in e.errors():
            loc = ".".join(str(part) for part in err["loc"])
            err_console.print(f"  {loc}: {err['msg']}")
        sys.exit(1)


@click.group()
@click.version_option(package_name="mime-mail")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(verbose: bool) -> None:
    """Assemble MIME messages and deliver them over SMTP."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("payload", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Write the message to this file instead of stdout.")
@click.option("--config", "-c", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="INI file with a [composer] section.")
def compose(payload: Path, output: Path | None, config_path: Path | None) -> None:
    """Assemble PAYLOAD into an RFC 5322 message."""
    composer_config = ComposerConfig()
    if config_path:
        try:
            _, composer_config = load_config(config_path, require_smtp=False)
        except ValueError as e:
            print_error(str(e))
            sys.exit(1)
    message_payload = _load_payload(payload)

    try:
        with ExitStack() as stack:
            message = message_payload.to_message(stack, base_dir=payload.parent)
            data = MessageComposer(composer_config).to_bytes(message)
    except (MailError, OSError) as e:
        print_error(str(e))
        sys.exit(1)

    if output is None:
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
        return
    output.write_bytes(data)
    print_success(f"Wrote {len(data)} bytes to {output}")


@main.command()
@click.argument("payload", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--config", "-c", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              required=True, help="INI file with [smtp] and optional [composer] sections.")
def send(payload: Path, config_path: Path) -> None:
    """Assemble PAYLOAD and deliver it to the configured SMTP server."""
    try:
        smtp_config, composer_config = load_config(config_path)
    except ValueError as e:
        print_error(str(e))
        sys.exit(1)
    message_payload = _load_payload(payload)

    try:
        with ExitStack() as stack:
            message = message_payload.to_message(stack, base_dir=payload.parent)
            accepted = run_async(send_mail(message, smtp_config, composer_config))
    except (MailError, aiosmtplib.SMTPException, OSError) as e:
        print_error(str(e))
        sys.exit(1)

    print_success(f"Delivered to {accepted} recipient(s) via {smtp_config.server_address}")


if __name__ == "__main__":
    main()
