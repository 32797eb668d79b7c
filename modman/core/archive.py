# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""Locate the package folder inside an archive.

The manifest may sit at the archive root, inside one folder (``Foo/mod.json``) or inside
a wrapper folder (``Outer/Foo/mod.json``). Every entry is checked at one depth before any
entry is checked at the next, so the shallowest manifest wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import DEBUG, getLogger

from ..base.constants import MANIFEST_FILENAME, MANIFEST_SEARCH_DEPTHS
from ..common.io import dashlist
from ..common.serialize import JSONDecodeError
from ..exceptions import CorruptedArchiveError
from ..gateways.archive import open_archive
from ..gateways.disk.read import parse_manifest

log = getLogger(__name__)

#: returned by ``locate_root`` when no manifest was found
NOT_FOUND = None


def _clean_entry(name: str) -> str:
    while name.startswith("./"):
        name = name[2:]
    return name


def find_manifest_root(entries, depths=MANIFEST_SEARCH_DEPTHS) -> str | None:
    """
    Examples:
        >>> find_manifest_root(["Foo/", "Foo/mod.json", "Foo/sub/mod.json"])
        'Foo'
        >>> find_manifest_root(["mod.json", "Foo/mod.json"])
        ''
        >>> find_manifest_root(["readme.txt"]) is None
        True
    """
    cleaned = [_clean_entry(entry) for entry in entries]
    for depth in depths:
        for entry in cleaned:
            parts = entry.split("/")
            if len(parts) == depth + 1 and parts[-1] == MANIFEST_FILENAME:
                return "/".join(parts[:-1])
    return NOT_FOUND


@dataclass(frozen=True)
class ArchiveLayout:
    archive_path: str
    root: str
    entries: tuple[str, ...]

    @property
    def members(self) -> tuple[str, ...]:
        """Entries that belong to the package folder."""
        if not self.root:
            return self.entries
        prefix = self.root + "/"
        return tuple(e for e in self.entries if _clean_entry(e).startswith(prefix))

    @property
    def top_level(self) -> str:
        return self.root.split("/", 1)[0]

    @property
    def wrapper(self) -> str | None:
        """The outer folder enclosing the package folder, if any."""
        if "/" in self.root:
            return self.top_level
        return None

    @property
    def manifest_entry(self) -> str:
        return f"{self.root}/{MANIFEST_FILENAME}" if self.root else MANIFEST_FILENAME


class ArchiveInspector:
    def __init__(self, opener=open_archive):
        self._open = opener

    def list_files(self, archive_path) -> tuple[str, ...]:
        with self._open(archive_path) as archive:
            return tuple(archive.list_files())

    def locate_root(self, archive_path) -> str | None:
        try:
            return self.inspect(archive_path).root
        except CorruptedArchiveError:
            return NOT_FOUND

    def inspect(self, archive_path) -> ArchiveLayout:
        entries = self.list_files(archive_path)
        root = find_manifest_root(entries)
        if root is NOT_FOUND:
            log.info("Failed to detect mod path in archive %s", archive_path)
            if log.isEnabledFor(DEBUG):
                log.debug("List of files in archive:%s", dashlist(entries))
            raise CorruptedArchiveError(archive_path, reason="no manifest found")
        return ArchiveLayout(archive_path, root, entries)

    def read_manifest(self, archive_path, layout: ArchiveLayout | None = None) -> dict:
        layout = layout or self.inspect(archive_path)
        with self._open(archive_path) as archive:
            wanted = layout.manifest_entry
            entry = next(
                (e for e in archive.list_files() if _clean_entry(e) == wanted), wanted
            )
            try:
                return parse_manifest(archive.read(entry))
            except (KeyError, UnicodeDecodeError, JSONDecodeError) as e:
                raise CorruptedArchiveError(archive_path, reason=repr(e))
