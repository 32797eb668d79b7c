# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""Disk utility functions for reading and processing file contents."""

from __future__ import annotations

import os
import re
from logging import getLogger
from os.path import isdir, join
from typing import TYPE_CHECKING

from ...base.constants import MANIFEST_FILENAME
from ...common.serialize import JSONDecodeError, json_load

if TYPE_CHECKING:
    from collections.abc import Iterator

log = getLogger(__name__)

# manifests written by hand often carry full-line // comments
_LINE_COMMENT = re.compile(r"^\s*//.*$", re.MULTILINE)


def parse_manifest(text: str | bytes) -> dict:
    if isinstance(text, bytes):
        text = text.decode("utf-8-sig")
    try:
        data = json_load(text)
    except JSONDecodeError:
        data = json_load(_LINE_COMMENT.sub("", text))
    if not isinstance(data, dict):
        raise JSONDecodeError("manifest must be a JSON object", str(text), 0)
    return data


def read_manifest(package_directory) -> dict:
    with open(join(package_directory, MANIFEST_FILENAME), "rb") as fi:
        return parse_manifest(fi.read())


def find_child_ci(parent, name):
    """Return the path of the entry of ``parent`` named ``name`` ignoring case, or None."""
    exact = join(parent, name)
    if os.path.lexists(exact):
        return exact
    lowered = name.lower()
    try:
        with os.scandir(parent) as it:
            for entry in it:
                if entry.name.lower() == lowered:
                    return entry.path
    except FileNotFoundError:
        return None
    return None


def yield_files(path) -> Iterator[str]:
    for root, _, files in os.walk(path):
        for fn in files:
            yield join(root, fn)


def directory_size(path) -> int:
    if not isdir(path):
        return 0
    total = 0
    for file_path in yield_files(path):
        try:
            total += os.lstat(file_path).st_size
        except OSError as e:
            log.debug("could not stat %s: %r", file_path, e)
    return total
