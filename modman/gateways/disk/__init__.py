# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""Low-level filesystem helpers shared by the disk gateways."""

import os
import random
from errno import EACCES, EPERM
from logging import getLogger
from time import sleep

from ...common.compat import on_win
from ...common.constants import TRACE

log = getLogger(__name__)

MAX_TRIES = 7
RETRY_ERRNOS = (EPERM, EACCES)


def exp_backoff_fn(fn, *args, max_tries=MAX_TRIES, **kwargs):
    """Call ``fn``, retrying permission errors with exponential backoff.

    Windows virus scanners and indexers hold files open for a moment after they are
    written; elsewhere the call is made exactly once.
    """
    if not on_win:
        return fn(*args, **kwargs)

    for attempt in range(max_tries):
        try:
            return fn(*args, **kwargs)
        except OSError as e:
            if e.errno not in RETRY_ERRNOS or attempt == max_tries - 1:
                raise
            delay = (2**attempt + random.random()) * 0.1
            log.log(TRACE, "%s failed with %r, retrying in %.2f sec", fn.__name__, e, delay)
            sleep(delay)


def mkdir_p(path):
    """Create ``path`` and its parents; an existing directory is fine."""
    if not path:
        return None
    log.log(TRACE, "making directory %s", path)
    os.makedirs(path, exist_ok=True)
    return path
