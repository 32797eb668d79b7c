# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""Small I/O helpers: stderr log handlers and list formatting."""

from __future__ import annotations

import sys
from logging import NOTSET, WARN, Formatter, StreamHandler, getLogger

STDERR_HANDLER_NAME = "stderr"

_FORMATTER = Formatter("%(levelname)s %(name)s:%(funcName)s(%(lineno)d): %(message)s")


def dashlist(iterable, indent=2):
    """Render items as an indented ``- item`` list, each on its own line."""
    prefix = "\n" + " " * indent + "- "
    return "".join(prefix + str(item) for item in iterable)


def attach_stderr_handler(level=WARN, logger_name=None, propagate=False, formatter=None):
    """Give ``logger_name`` (the root logger when None) a single stderr handler at ``level``.

    A previously attached stderr handler is replaced. The logger level is lowered to
    ``level`` when needed so the handler actually sees those records.
    """
    logger = getLogger(logger_name)
    for handler in [h for h in logger.handlers if h.name == STDERR_HANDLER_NAME]:
        logger.removeHandler(handler)

    handler = StreamHandler(sys.stderr)
    handler.name = STDERR_HANDLER_NAME
    handler.setLevel(level)
    handler.setFormatter(formatter or _FORMATTER)
    logger.addHandler(handler)

    if logger.level == NOTSET or level < logger.getEffectiveLevel():
        logger.setLevel(level)
    logger.propagate = propagate
    return handler
