# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""Discovery of installed packages under the packages container.

Every directory directly under the container holding a readable ``mod.json`` is an
installed package named after the directory (lowercased). Its ``mods`` folder, if any,
holds submods named ``parent.child``. Directories without a readable manifest are
orphans: they are reported, never fatal.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from logging import getLogger
from os.path import isdir, join, realpath
from typing import TYPE_CHECKING

from ..base.constants import SUBMODS_DIRNAMES
from ..common.serialize import JSONDecodeError
from ..gateways.disk.read import directory_size, find_child_ci, read_manifest
from ..models.package import SUBMOD_SEPARATOR, normalize_name

if TYPE_CHECKING:
    from collections.abc import Iterator

log = getLogger(__name__)


@dataclass(frozen=True)
class InstalledEntry:
    name: str
    path: str
    manifest: dict = field(compare=False, hash=False)
    size_bytes: int = 0


def _subdirectories(path) -> Iterator[os.DirEntry]:
    try:
        with os.scandir(path) as it:
            entries = sorted(it, key=lambda e: e.name.lower())
    except FileNotFoundError:
        return
    for entry in entries:
        if entry.name.startswith("."):
            continue
        if entry.is_dir(follow_symlinks=True):
            yield entry


def _submods_dir(path) -> str | None:
    for dirname in SUBMODS_DIRNAMES:
        candidate = join(path, dirname)
        if isdir(candidate):
            return candidate
    return None


class PackageResources:
    def __init__(self, packages_dir):
        self.packages_dir = packages_dir
        self._entries: dict[str, InstalledEntry] = {}
        self._orphans: tuple[str, ...] = ()

    def rescan(self) -> PackageResources:
        entries = {}
        orphans = []
        for entry in _subdirectories(self.packages_dir):
            self._scan_package(
                entry.path, normalize_name(entry.name), entries, orphans, frozenset()
            )
        self._entries = entries
        self._orphans = tuple(orphans)
        log.debug(
            "scanned %s: %d packages, %d orphans",
            self.packages_dir,
            len(entries),
            len(orphans),
        )
        return self

    def _scan_package(self, path, name, entries, orphans, ancestors):
        real = realpath(path)
        if real in ancestors:
            log.warning("Skipping %s, it links back to one of its parent folders", path)
            return
        ancestors = ancestors | {real}
        try:
            manifest = read_manifest(path)
        except (OSError, UnicodeDecodeError, JSONDecodeError) as e:
            log.warning("Directory %s holds no readable mod.json: %s", path, e)
            orphans.append(path)
            return
        entries[name] = InstalledEntry(name, path, manifest, directory_size(path))

        submods_dir = _submods_dir(path)
        if submods_dir is None:
            return
        for child in _subdirectories(submods_dir):
            child_name = f"{name}{SUBMOD_SEPARATOR}{normalize_name(child.name)}"
            self._scan_package(child.path, child_name, entries, orphans, ancestors)

    @property
    def installed(self) -> tuple[InstalledEntry, ...]:
        return tuple(self._entries.values())

    @property
    def orphans(self) -> tuple[str, ...]:
        return self._orphans

    def get(self, name) -> InstalledEntry | None:
        return self._entries.get(normalize_name(name))

    def lookup_dir(self, name) -> str | None:
        """Resolve the on-disk directory of a package ignoring case, whether scanned or not."""
        entry = self.get(name)
        if entry is not None:
            return entry.path
        parts = normalize_name(name).split(SUBMOD_SEPARATOR)
        path = find_child_ci(self.packages_dir, parts[0])
        for part in parts[1:]:
            if path is None:
                return None
            submods_dir = _submods_dir(path)
            path = find_child_ci(submods_dir, part) if submods_dir else None
        if path is None or not isdir(path):
            return None
        return path
