# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""Logging setup for the command line.

Library modules only ever call ``getLogger(__name__)``. The front-end calls
:func:`initialize_logging` once and then :func:`set_log_level` with the configured
verbosity. User-facing output goes through the ``modman.stdout`` and ``modman.stderr``
loggers, which print bare messages.
"""

import logging
import sys
from functools import cache
from logging import DEBUG, INFO, WARN, Formatter, StreamHandler, getLogger

from ..common.constants import TRACE
from ..common.io import attach_stderr_handler

log = getLogger(__name__)

#: -v count to log level
VERBOSITY_LEVELS = (WARN, WARN, INFO, DEBUG, TRACE)

logging.addLevelName(TRACE, "TRACE")


class StdStreamHandler(StreamHandler):
    """A handler bound to ``sys.<name>`` at emit time, so redirection and capture work."""

    def __init__(self, sys_stream):
        self.sys_stream = sys_stream
        super().__init__()

    @property
    def stream(self):
        return getattr(sys, self.sys_stream)

    @stream.setter
    def stream(self, value):
        # StreamHandler assigns a stream on init; ours is always looked up on sys
        pass


@cache
def initialize_logging():
    attach_stderr_handler(WARN, "modman")
    plain = Formatter("%(message)s")
    for name in ("stdout", "stderr"):
        logger = getLogger(f"modman.{name}")
        handler = StdStreamHandler(name)
        handler.setLevel(INFO)
        handler.setFormatter(plain)
        logger.handlers = [handler]
        logger.setLevel(INFO)
        logger.propagate = False


def set_log_level(log_level: int):
    # below INFO keep the detailed format everywhere; otherwise the root logger prints bare
    formatter = Formatter("%(message)s\n") if log_level >= INFO else None
    attach_stderr_handler(log_level, formatter=formatter)
    attach_stderr_handler(log_level, "modman")
    # http libraries always log in the detailed format
    attach_stderr_handler(log_level, "requests")
    attach_stderr_handler(log_level, "urllib3")
    log.debug("log_level set to %d", log_level)


def set_verbosity(verbosity: int):
    set_log_level(VERBOSITY_LEVELS[max(0, min(verbosity, len(VERBOSITY_LEVELS) - 1))])
