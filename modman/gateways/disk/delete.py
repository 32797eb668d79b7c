# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""Disk utility functions for deleting files and folders."""

from __future__ import annotations

import os
from errno import ENOENT
from logging import getLogger
from os.path import abspath, basename, dirname, isdir, islink, lexists, normpath
from shutil import rmtree
from stat import S_IWRITE

from ...common.constants import TRACE
from . import exp_backoff_fn

log = getLogger(__name__)


def _make_writable(func, path, exc_info):
    if getattr(exc_info[1], "errno", None) == ENOENT:
        return
    os.chmod(path, S_IWRITE)
    func(path)


def backoff_rmdir(dirpath, max_tries=5):
    if not isdir(dirpath):
        return
    try:
        exp_backoff_fn(rmtree, dirpath, onerror=_make_writable, max_tries=max_tries)
    except OSError as e:
        if e.errno == ENOENT:
            log.log(TRACE, "no such file or directory: %s", dirpath)
        else:
            raise


def rm_rf(path, max_retries=5):
    """
    Completely delete path
    max_retries is the number of times to retry on failure. This only applies to deleting a
    directory.
    """
    path = abspath(path)
    log.log(TRACE, "rm_rf %s", path)
    try:
        if isdir(path) and not islink(path):
            backoff_rmdir(path, max_tries=max_retries)
        elif lexists(path):
            exp_backoff_fn(os.unlink, path)
        else:
            log.log(TRACE, "rm_rf failed. Not a link, file, or directory: %s", path)
    except OSError as e:
        log.info("rm_rf failed for %s: %r", path, e)
    if lexists(path):
        log.info("rm_rf failed for %s", path)
        return False
    return True


class SafeRemover:
    """Refuses recursive deletion of anything but a direct child of the packages container.

    A directory ``<root>/<container>/<name>`` may be removed when all of these hold:

      * the immediate parent is named like the packages container
      * unless the application runs in an isolated container, the parent of the container
        is named like the application root, and the absolute path contains that name
      * the absolute path contains the container name

    Name comparisons ignore case.
    """

    def __init__(self, packages_dirname, app_root_name, isolated_container=False):
        self.packages_dirname = packages_dirname
        self.app_root_name = app_root_name
        self.isolated_container = isolated_container

    @classmethod
    def from_context(cls, context):
        return cls(
            context.packages_dirname, context.app_root_name, context.isolated_container
        )

    def is_removable(self, path) -> bool:
        if not path:
            return False
        absolute = normpath(abspath(path))
        parent = dirname(absolute)
        if parent == absolute or basename(absolute) in ("", ".", ".."):
            return False

        if basename(parent).lower() != self.packages_dirname.lower():
            log.debug(
                "refusing removal of %s: parent is not %s", absolute, self.packages_dirname
            )
            return False

        if not self.isolated_container:
            grandparent = dirname(parent)
            if basename(grandparent).lower() != self.app_root_name.lower():
                log.debug(
                    "refusing removal of %s: container is not inside %s",
                    absolute,
                    self.app_root_name,
                )
                return False
            if self.app_root_name.lower() not in absolute.lower():
                return False

        if self.packages_dirname.lower() not in absolute.lower():
            return False
        return True

    def remove_package_dir(self, path) -> bool:
        if not self.is_removable(path):
            return False
        log.info("removing package directory %s", path)
        return rm_rf(path)
