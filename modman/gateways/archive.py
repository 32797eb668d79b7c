# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""Archive codecs exposing the two operations modman needs: list entries, extract entries.

Entry names always use ``/`` as separator and directory entries end with ``/``.
"""

from __future__ import annotations

import os
import posixpath
import tarfile
import zipfile
from logging import getLogger
from os.path import abspath, join, normpath
from typing import TYPE_CHECKING

from ..common.constants import TRACE
from ..exceptions import CorruptedArchiveError, UnsafeArchiveEntryError

if TYPE_CHECKING:
    from collections.abc import Iterable

log = getLogger(__name__)


def is_unsafe_entry(name: str) -> bool:
    if not name or name.startswith(("/", "\\")) or "\\" in name:
        return True
    if len(name) > 1 and name[1] == ":":
        return True
    return ".." in name.split("/")


class ArchiveReader:
    def __init__(self, archive_path):
        self.archive_path = archive_path

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def close(self):
        raise NotImplementedError()

    def list_files(self) -> list[str]:
        raise NotImplementedError()

    def read(self, name) -> bytes:
        raise NotImplementedError()

    def _extract_members(self, destination, members):
        raise NotImplementedError()

    def extract(self, destination, members: Iterable[str] | None = None):
        members = self.list_files() if members is None else list(members)
        destination = abspath(destination)
        for name in members:
            if is_unsafe_entry(name):
                raise UnsafeArchiveEntryError(self.archive_path, name)
            target = normpath(join(destination, name))
            if target != destination and not target.startswith(destination + os.sep):
                raise UnsafeArchiveEntryError(self.archive_path, name)
        log.log(TRACE, "extracting %d entries of %s", len(members), self.archive_path)
        self._extract_members(destination, members)


class ZipArchiveReader(ArchiveReader):
    def __init__(self, archive_path):
        super().__init__(archive_path)
        self._zip = zipfile.ZipFile(archive_path)

    def close(self):
        self._zip.close()

    def list_files(self):
        return self._zip.namelist()

    def read(self, name):
        return self._zip.read(name)

    def _extract_members(self, destination, members):
        self._zip.extractall(destination, members)


class TarArchiveReader(ArchiveReader):
    def __init__(self, archive_path):
        super().__init__(archive_path)
        self._tar = tarfile.open(archive_path)
        self._members = {}
        for member in self._tar.getmembers():
            if not (member.isfile() or member.isdir()):
                log.debug("skipping special entry %s in %s", member.name, archive_path)
                continue
            name = posixpath.normpath(member.name)
            if name == ".":
                continue
            self._members[name + "/" if member.isdir() else name] = member

    def close(self):
        self._tar.close()

    def list_files(self):
        return list(self._members)

    def read(self, name):
        fh = self._tar.extractfile(self._members[name])
        if fh is None:
            raise KeyError(name)
        with fh:
            return fh.read()

    def _extract_members(self, destination, members):
        selected = [self._members[name] for name in members if name in self._members]
        if hasattr(tarfile, "data_filter"):
            self._tar.extractall(destination, selected, filter="data")
        else:  # pragma: no cover
            self._tar.extractall(destination, selected)


def open_archive(archive_path) -> ArchiveReader:
    """Open ``archive_path`` as zip or tar, raising CorruptedArchiveError otherwise."""
    try:
        if zipfile.is_zipfile(archive_path):
            return ZipArchiveReader(archive_path)
        if tarfile.is_tarfile(archive_path):
            return TarArchiveReader(archive_path)
    except (OSError, zipfile.BadZipFile, tarfile.TarError, EOFError) as e:
        raise CorruptedArchiveError(archive_path, reason=repr(e))
    raise CorruptedArchiveError(archive_path, reason="unrecognized archive format")
