# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""MIME type lookup by file extension."""

from __future__ import annotations

import mimetypes
from pathlib import PurePosixPath

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def lookup(extension: str) -> str | None:
    """Return the MIME type registered for ``extension`` (``".pdf"`` or ``"pdf"``)."""
    if not extension:
        return None
    if not extension.startswith("."):
        extension = "." + extension
    return mimetypes.types_map.get(extension.lower()) or mimetypes.guess_type(
        "file" + extension.lower(), strict=False
    )[0]


def resolve_content_type(filename: str, explicit: str | None = None) -> str:
    """Return ``explicit`` when set, else the type guessed from ``filename``."""
    if explicit and explicit.strip():
        return explicit.strip()
    return lookup(PurePosixPath(filename).suffix) or DEFAULT_CONTENT_TYPE


__all__ = ["DEFAULT_CONTENT_TYPE", "lookup", "resolve_content_type"]
