# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""Package records and the package graph the validator reasons over.

Records are immutable; the package list rebuilds all of them on every reload.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from logging import getLogger
from typing import TYPE_CHECKING

from boltons.setutils import IndexedSet
from frozendict import frozendict

from ..common.constants import EMPTY_MAP
from .enums import PackageSource, PackageState
from .version import DottedVersion, is_compatible

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

log = getLogger(__name__)

SUBMOD_SEPARATOR = "."


def normalize_name(name: str) -> str:
    return name.strip().lower()


def _name_set(values) -> IndexedSet:
    if isinstance(values, str):
        values = (values,)
    elif not isinstance(values, (list, tuple)):
        if values:
            log.warning("ignoring malformed package name list %r", values)
        values = ()
    return IndexedSet(normalize_name(v) for v in values or () if isinstance(v, str))


def freeze(value):
    if isinstance(value, Mapping):
        return frozendict((k, freeze(v)) for k, v in value.items())
    if isinstance(value, list):
        return tuple(freeze(v) for v in value)
    return value


@dataclass(frozen=True)
class Package:
    name: str
    manifest: frozendict = EMPTY_MAP
    installed: bool = False
    # the activation document's "active" leaf; None when the package is absent from it
    active: bool | None = None
    path: str | None = None
    size_bytes: int = 0
    compatible: bool = True
    sources: frozenset = field(default_factory=frozenset)
    repository_manifest: frozendict = EMPTY_MAP
    repository_compatible: bool = True
    download_url: str | None = None
    download_size: float | None = None
    archive_path: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "name", normalize_name(self.name))
        object.__setattr__(self, "manifest", freeze(dict(self.manifest)))
        object.__setattr__(
            self, "repository_manifest", freeze(dict(self.repository_manifest))
        )
        object.__setattr__(self, "sources", frozenset(self.sources))

    def merge(self, **kwargs) -> Package:
        return replace(self, **kwargs)

    @property
    def _effective_manifest(self):
        if self.installed or not self.repository_manifest:
            return self.manifest
        return self.repository_manifest

    @property
    def depends(self) -> IndexedSet:
        return _name_set(self._effective_manifest.get("depends"))

    @property
    def conflicts(self) -> IndexedSet:
        return _name_set(self._effective_manifest.get("conflicts"))

    @property
    def is_submod(self) -> bool:
        return SUBMOD_SEPARATOR in self.name

    @property
    def parent_name(self) -> str | None:
        if not self.is_submod:
            return None
        return self.name.rsplit(SUBMOD_SEPARATOR, 1)[0]

    @property
    def top_level_name(self) -> str:
        return self.name.split(SUBMOD_SEPARATOR, 1)[0]

    @property
    def display_name(self) -> str:
        return self._effective_manifest.get("name") or self.name

    @property
    def version(self) -> DottedVersion:
        return DottedVersion(self.manifest.get("version"))

    @property
    def repository_version(self) -> DottedVersion:
        return DottedVersion(self.repository_manifest.get("version"))

    @property
    def mod_type(self) -> str | None:
        return self._effective_manifest.get("modType")

    @property
    def keep_disabled(self) -> bool:
        return bool(self._effective_manifest.get("keepDisabled", False))

    @property
    def available(self) -> bool:
        return bool(
            self.sources & {PackageSource.repository, PackageSource.archive}
        )

    @property
    def enabled(self) -> bool:
        return self.installed and self.active is True

    @property
    def disabled(self) -> bool:
        return not self.enabled

    @property
    def state(self) -> PackageState:
        if self.installed:
            return PackageState.installed
        if self.available:
            return PackageState.available
        return PackageState.unknown

    @property
    def update_available(self) -> bool:
        if not (self.installed and self.repository_manifest):
            return False
        return self.repository_compatible and self.repository_version > self.version

    def dump(self):
        return {
            "name": self.name,
            "display_name": self.display_name,
            "state": self.state,
            "enabled": self.enabled,
            "version": str(self.version) or None,
            "repository_version": str(self.repository_version) or None,
            "update_available": self.update_available,
            "compatible": self.compatible,
            "mod_type": self.mod_type,
            "keep_disabled": self.keep_disabled,
            "submod": self.is_submod,
            "depends": list(self.depends),
            "conflicts": list(self.conflicts),
            "size_bytes": self.size_bytes,
            "path": self.path,
        }


def check_compatibility(manifest, engine_version) -> bool:
    return is_compatible(engine_version, manifest.get("compatibility"))


class PackageGraph:
    """
    A read-only view over every known package, keyed by lowercased dotted name.

    The validator only ever asks the graph questions; it never mutates it.
    """

    def __init__(self, packages: Iterable[Package] = ()):
        self._packages = {}
        for package in packages:
            if package.name in self._packages:
                log.debug("duplicate package record for %s", package.name)
            self._packages[package.name] = package

    def __contains__(self, name):
        return normalize_name(name) in self._packages

    def __iter__(self) -> Iterator[Package]:
        return iter(self._packages.values())

    def __len__(self):
        return len(self._packages)

    def __eq__(self, other):
        if not isinstance(other, PackageGraph):
            return NotImplemented
        return self._packages == other._packages

    def get(self, name, default=None) -> Package | None:
        return self._packages.get(normalize_name(name), default)

    def __getitem__(self, name) -> Package:
        return self._packages[normalize_name(name)]

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._packages)

    def enabled(self) -> tuple[Package, ...]:
        return tuple(p for p in self if p.enabled)

    def is_enabled(self, name) -> bool:
        package = self.get(name)
        return package is not None and package.enabled

    def dependents(self, name) -> tuple[Package, ...]:
        """Enabled packages that list ``name`` in their depends."""
        name = normalize_name(name)
        return tuple(p for p in self if p.enabled and name in p.depends)

    def reverse_conflicts(self, name) -> tuple[Package, ...]:
        """Enabled packages that list ``name`` in their conflicts."""
        name = normalize_name(name)
        return tuple(p for p in self if p.enabled and name in p.conflicts)

    def children(self, name) -> tuple[Package, ...]:
        prefix = normalize_name(name) + SUBMOD_SEPARATOR
        return tuple(p for p in self if p.name.startswith(prefix))
