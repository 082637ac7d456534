# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Logging helpers for the mime-mail package.

Handlers, levels and formats are configured by the entry point
(``logging.basicConfig()`` in :mod:`mime_mail.cli`) to avoid duplicate
handlers when the package is embedded in another application.

Example:
    Typical usage in a module::

        from mime_mail.logger import get_logger

        logger = get_logger("composer")
        logger.debug("Opened multipart/mixed envelope")
"""

import logging


def get_logger(name: str = "MimeMail") -> logging.Logger:
    """Return the :class:`logging.Logger` bound to ``name``.

    Args:
        name: The logger name. Defaults to "MimeMail".

    Returns:
        A ``logging.Logger`` instance. No handler is attached here.
    """
    return logging.getLogger(name)
