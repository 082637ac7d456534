# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Tests for the mime-mail command-line interface."""

import json
from email import message_from_bytes, policy

import pytest
from click.testing import CliRunner

from mime_mail import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def payload_file(tmp_path):
    (tmp_path / "notes.txt").write_bytes(b"some notes")
    path = tmp_path / "message.json"
    path.write_text(json.dumps({
        "from": "Domain Sender <sender@domain.com>",
        "to": ["First person <to_1@domain.com>"],
        "bcc": "hidden@domain.com",
        "subject": "Report",
        "body": "See attached.",
        "attachments": [{"filename": "notes.txt", "path": "notes.txt"}],
    }))
    return path


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.ini"
    path.write_text("[smtp]\nhost = smtp.local\nport = 2525\n\n[composer]\nplain_encoding = quoted-printable\n")
    return path


def test_compose_writes_output_file(runner, payload_file, tmp_path):
    output = tmp_path / "out.eml"

    result = runner.invoke(cli.main, ["compose", str(payload_file), "-o", str(output)])

    assert result.exit_code == 0, result.output
    parsed = message_from_bytes(output.read_bytes(), policy=policy.default)
    assert parsed["Subject"] == "Report"
    assert parsed["Bcc"] is None
    attachment = next(parsed.iter_attachments())
    assert attachment.get_filename() == "notes.txt"
    assert attachment.get_content() == "some notes"


def test_compose_uses_composer_config(runner, payload_file, config_file, tmp_path):
    output = tmp_path / "out.eml"

    result = runner.invoke(cli.main, ["compose", str(payload_file), "-o", str(output), "-c", str(config_file)])

    assert result.exit_code == 0, result.output
    assert b"Content-Transfer-Encoding: quoted-printable" in output.read_bytes()


def test_compose_rejects_invalid_payload(runner, tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"to": "a@x.com"}))

    result = runner.invoke(cli.main, ["compose", str(path)])

    assert result.exit_code == 1


def test_compose_rejects_message_without_recipients(runner, tmp_path):
    path = tmp_path / "norcpt.json"
    path.write_text(json.dumps({"from": "s@d.com", "body": "Hi"}))

    result = runner.invoke(cli.main, ["compose", str(path)])

    assert result.exit_code == 1


def test_send_delivers_with_configured_server(runner, payload_file, config_file, monkeypatch):
    calls = []

    async def fake_send_mail(message, smtp_config, composer_config=None):
        calls.append((message, smtp_config, composer_config))
        return 2

    monkeypatch.setattr(cli, "send_mail", fake_send_mail)

    result = runner.invoke(cli.main, ["send", str(payload_file), "-c", str(config_file)])

    assert result.exit_code == 0, result.output
    message, smtp_config, composer_config = calls[0]
    assert smtp_config.server_address == "smtp.local:2525"
    assert composer_config.plain_encoding.value == "quoted-printable"
    assert message.bcc == ["hidden@domain.com"]


def test_send_requires_smtp_section(runner, payload_file, tmp_path):
    config = tmp_path / "composer-only.ini"
    config.write_text("[composer]\nline_length = 64\n")

    result = runner.invoke(cli.main, ["send", str(payload_file), "-c", str(config)])

    assert result.exit_code == 1
