# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""Moving files and directories into place."""

from __future__ import annotations

import os
from errno import EEXIST, EXDEV
from logging import getLogger
from os.path import isdir, islink, lexists
from shutil import move

from ...common.constants import TRACE
from . import exp_backoff_fn
from .delete import rm_rf

log = getLogger(__name__)


def rename(source_path, destination_path, force=False):
    """Move ``source_path`` to ``destination_path``.

    An existing destination is an error unless ``force`` is given, in which case it is
    replaced. Moves across filesystems fall back to copy and delete.
    """
    log.log(TRACE, "renaming %s => %s", source_path, destination_path)
    if lexists(destination_path):
        if not force:
            raise FileExistsError(EEXIST, os.strerror(EEXIST), destination_path)
        if isdir(destination_path) and not islink(destination_path):
            rm_rf(destination_path)
    try:
        exp_backoff_fn(os.replace, source_path, destination_path)
    except OSError as e:
        if e.errno != EXDEV:
            raise
        log.log(TRACE, "%s is on another device, copying instead", source_path)
        move(source_path, destination_path)
