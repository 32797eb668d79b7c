# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""The canonical list of known packages.

Repository entries, local archive sources, installed directories and the activation
document are merged here into :class:`~modman.models.package.Package` records. Records are
only ever created by :meth:`PackageList.rebuild`.
"""

from __future__ import annotations

from logging import getLogger
from os.path import isfile
from typing import TYPE_CHECKING

from ..exceptions import ArchiveNotFoundError
from ..models.activation import ActivationTree
from ..models.enums import PackageSource
from ..models.package import Package, PackageGraph, check_compatibility, normalize_name
from .archive import ArchiveInspector

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from .repository import RepositoryEntry
    from .resources import InstalledEntry

    PackageListener = Callable[[str, Package], None]

log = getLogger(__name__)


class ArchiveSource:
    def __init__(self, name, archive_path, manifest):
        self.name = normalize_name(name)
        self.archive_path = archive_path
        self.manifest = manifest

    def __repr__(self):
        return f"{self.__class__.__name__}({self.name!r}, {self.archive_path!r})"


class PackageList:
    def __init__(self, engine_version, inspector: ArchiveInspector | None = None):
        self.engine_version = engine_version
        self._inspector = inspector or ArchiveInspector()
        self._installed: tuple[InstalledEntry, ...] = ()
        self._orphans: tuple[str, ...] = ()
        self._repositories: dict[str, RepositoryEntry] = {}
        self._archives: dict[str, ArchiveSource] = {}
        self._activation = ActivationTree()
        self._graph = PackageGraph()
        self._listeners: list[PackageListener] = []

    # ------------------------------------------------------------------------
    # inputs

    def set_installed(self, entries: Iterable[InstalledEntry], orphans=()):
        self._installed = tuple(entries)
        self._orphans = tuple(orphans)

    def set_activation(self, tree: ActivationTree):
        self._activation = tree

    def set_repositories(self, entries: Mapping[str, RepositoryEntry]):
        self._repositories = dict(entries)

    def reset_repositories(self):
        self._repositories = {}

    def add_archive_source(self, name, archive_path) -> ArchiveSource:
        """Register a local archive as the source of package ``name``."""
        if not isfile(archive_path):
            raise ArchiveNotFoundError(archive_path)
        manifest = self._inspector.read_manifest(archive_path)
        source = ArchiveSource(name, archive_path, manifest)
        self._archives[source.name] = source
        log.debug("registered archive source %r", source)
        return source

    def remove_archive_source(self, name):
        self._archives.pop(normalize_name(name), None)

    # ------------------------------------------------------------------------
    # outputs

    @property
    def activation(self) -> ActivationTree:
        return self._activation

    @property
    def graph(self) -> PackageGraph:
        return self._graph

    @property
    def orphans(self) -> tuple[str, ...]:
        return self._orphans

    def get(self, name) -> Package:
        """The package record for ``name``; unknown names get an empty record."""
        return self._graph.get(name) or Package(name)

    def has(self, name) -> bool:
        return name in self._graph

    def __iter__(self):
        return iter(self._graph)

    def __len__(self):
        return len(self._graph)

    def rebuild(self) -> PackageGraph:
        installed = {entry.name: entry for entry in self._installed}
        names = list(installed)
        names.extend(n for n in self._repositories if n not in installed)
        names.extend(
            n for n in self._archives if n not in installed and n not in self._repositories
        )

        self._graph = PackageGraph(self._make_package(name, installed) for name in names)
        return self._graph

    def _make_package(self, name, installed) -> Package:
        entry = installed.get(name)
        repository = self._repositories.get(name)
        archive = self._archives.get(name)

        sources = set()
        fields = {}
        if entry is not None:
            sources.add(PackageSource.installed)
            fields.update(
                manifest=entry.manifest,
                installed=True,
                path=entry.path,
                size_bytes=entry.size_bytes,
            )
        remote_manifest = {}
        if repository is not None:
            sources.add(PackageSource.repository)
            remote_manifest = repository.manifest
            fields.update(
                download_url=repository.download_url,
                download_size=repository.download_size,
            )
        if archive is not None:
            sources.add(PackageSource.archive)
            remote_manifest = remote_manifest or archive.manifest
            fields.update(archive_path=archive.archive_path)

        local_manifest = fields.get("manifest") or {}
        effective = local_manifest if entry is not None else remote_manifest
        return Package(
            name=name,
            active=self._activation.is_active(name),
            compatible=check_compatibility(effective, self.engine_version),
            sources=sources,
            repository_manifest=remote_manifest,
            repository_compatible=check_compatibility(
                remote_manifest, self.engine_version
            ),
            **fields,
        )

    # ------------------------------------------------------------------------
    # change notification

    def subscribe(self, listener: PackageListener):
        self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener: PackageListener):
        self._listeners.remove(listener)

    def package_changed(self, name):
        package = self.get(name)
        for listener in tuple(self._listeners):
            listener(package.name, package)

    def update_activation(self, tree: ActivationTree, name=None):
        """Swap the activation document and refresh the affected records in place."""
        self._activation = tree
        self._graph = PackageGraph(
            package.merge(active=tree.is_active(package.name)) for package in self._graph
        )
        if name is not None:
            self.package_changed(name)
