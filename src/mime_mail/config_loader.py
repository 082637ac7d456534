# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Configuration loader for SMTP and composer settings.

Expected format in config.ini::

    [smtp]
    host = smtp.example.com
    port = 587
    user = mailer@example.com
    password = secret
    use_tls = false
    # true, false, or empty for "when offered"
    start_tls =
    timeout = 30

    [composer]
    line_length = 76
    plain_encoding = quoted-printable
    html_encoding = base64
    word_encoding = B
    add_date = true
    add_message_id = true
    # Header=separator pairs for multi-value headers
    header_joiners = Keywords=", "
"""

from __future__ import annotations

import configparser
import json
from pathlib import Path

from .config import ComposerConfig, FramingConfig, SmtpConfig, TransferEncoding
from .logger import get_logger

logger = get_logger("MimeMail.config")


class ConfigLoader:
    """Load :class:`SmtpConfig` and :class:`ComposerConfig` from an INI file."""

    def __init__(self, config_path: str | Path):
        self.config_path = str(config_path)
        self.config = configparser.ConfigParser()

    def load_config(self) -> None:
        """Read the configuration file."""
        if not Path(self.config_path).exists():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")
        self.config.read(self.config_path)

    def _get(self, section: str, key: str, convert, default=None):
        raw = self.config.get(section, key, fallback=None)
        if raw is None or raw.strip() == "":
            return default
        try:
            return convert(raw.strip())
        except ValueError as e:
            logger.error(f"Invalid value for {section}.{key}: {raw!r} ({e})")
            raise ValueError(f"Invalid value for {section}.{key}: {raw!r}") from e

    def _bool(self, section: str, key: str, default: bool | None) -> bool | None:
        def convert(value: str) -> bool:
            lowered = value.lower()
            if lowered not in configparser.ConfigParser.BOOLEAN_STATES:
                raise ValueError(f"not a boolean: {value}")
            return configparser.ConfigParser.BOOLEAN_STATES[lowered]

        return self._get(section, key, convert, default)

    def parse_smtp(self) -> SmtpConfig:
        """Parse the [smtp] section.

        Raises:
            ValueError: Section or host missing, or a malformed value.
        """
        if not self.config.has_section("smtp"):
            logger.error("No [smtp] section found in config file")
            raise ValueError(f"No [smtp] section in {self.config_path}")
        host = self._get("smtp", "host", str)
        if not host:
            logger.error("SMTP section missing required field 'host'")
            raise ValueError("SMTP section missing required field 'host'")
        return SmtpConfig(
            host=host,
            port=self._get("smtp", "port", int, 587),
            user=self._get("smtp", "user", str),
            password=self._get("smtp", "password", str),
            use_tls=self._bool("smtp", "use_tls", False),
            start_tls=self._bool("smtp", "start_tls", None),
            timeout=self._get("smtp", "timeout", float, 30.0),
        )

    def parse_composer(self) -> ComposerConfig:
        """Parse the [composer] section. Missing section or keys use defaults."""
        if not self.config.has_section("composer"):
            logger.info("No [composer] section found in config file, using defaults")
            return ComposerConfig()
        section = "composer"
        defaults = ComposerConfig()
        framing = FramingConfig(
            line_length=self._get(section, "line_length", int, defaults.framing.line_length),
        )
        return ComposerConfig(
            framing=framing,
            plain_encoding=self._get(section, "plain_encoding", TransferEncoding, defaults.plain_encoding),
            html_encoding=self._get(section, "html_encoding", TransferEncoding, defaults.html_encoding),
            charset=self._get(section, "charset", str, defaults.charset),
            word_encoding=self._get(section, "word_encoding", str, defaults.word_encoding),
            max_word_length=self._get(section, "max_word_length", int, defaults.max_word_length),
            read_chunk_size=self._get(section, "read_chunk_size", int, defaults.read_chunk_size),
            add_date=self._bool(section, "add_date", defaults.add_date),
            add_message_id=self._bool(section, "add_message_id", defaults.add_message_id),
            boundary_attempts=self._get(section, "boundary_attempts", int, defaults.boundary_attempts),
            header_joiners=self._get(section, "header_joiners", _parse_joiners, {}),
        )


def _parse_joiners(value: str) -> dict[str, str]:
    joiners: dict[str, str] = {}
    for line in value.splitlines():
        line = line.strip()
        if not line:
            continue
        name, sep, raw = line.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"expected Header=separator, got {line!r}")
        raw = raw.strip()
        joiners[name.strip()] = json.loads(raw) if raw.startswith('"') else raw
    return joiners


def load_config(config_path: str | Path, *, require_smtp: bool = True) -> tuple[SmtpConfig | None, ComposerConfig]:
    """Convenience function returning ``(smtp_config, composer_config)``."""
    loader = ConfigLoader(config_path)
    loader.load_config()
    smtp = loader.parse_smtp() if require_smtp or loader.config.has_section("smtp") else None
    return smtp, loader.parse_composer()


__all__ = ["ConfigLoader", "load_config"]
