# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""Filesystem path and ``file://`` url conversions."""

from __future__ import annotations

import os
import re
from os.path import abspath, expanduser, expandvars
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import unquote, urlsplit

from .. import ModmanError

if TYPE_CHECKING:
    from collections.abc import Iterable
    from typing import Union

    PathType = Union[str, os.PathLike[str]]
    PathsType = Iterable[PathType]

LOCAL_HOSTS = ("", "localhost", "127.0.0.1", "::1")
_DRIVE_PATH = re.compile(r"^/([a-zA-Z])[:|](.*)$")


def expand(path):
    """Absolute path with ``~`` and environment variables resolved."""
    return abspath(expanduser(expandvars(path)))


def url_to_path(url):
    """Convert a ``file://`` url to a local path; plain paths pass through.

    Examples:
        >>> url_to_path('file:///tmp/Some%20Mod.zip')
        '/tmp/Some Mod.zip'
    """
    scheme, netloc, path, _, _ = urlsplit(url)
    if "://" not in url:
        return url
    if scheme != "file":
        raise ModmanError("Not a file url: %(url)s", url=url)

    path = unquote(path)
    if netloc not in LOCAL_HOSTS:
        # a windows share, file://server/share/...
        return "//" + netloc.lstrip("\\/") + path
    drive = _DRIVE_PATH.match(path)
    if drive:
        return f"{drive.group(1)}:{drive.group(2)}"
    return path


def path_to_url(path):
    """
    Examples:
        >>> path_to_url('/tmp/index.json')
        'file:///tmp/index.json'
    """
    return Path(expand(path)).as_uri()
