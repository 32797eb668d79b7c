# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""The package manager: install, uninstall, enable and disable packages.

Every public transition returns a bool. A refused or failed transition leaves a
``"<package>: <message>"`` line in the :class:`ErrorLog`, which callers drain with
:meth:`PackageManager.get_errors` after each user-facing action.

Only one transition runs at a time; starting a second one while another is in flight
raises :class:`~modman.exceptions.OperationInProgressError`.
"""

from __future__ import annotations

from contextlib import contextmanager
from logging import getLogger
from os.path import abspath, isdir, isfile, join, lexists
from threading import Lock
from typing import TYPE_CHECKING

from .. import ModmanError
from ..base.context import context as default_context
from ..exceptions import (
    ArchiveNotFoundError,
    OperationInProgressError,
    PackageDataNotFoundError,
    PackageExistsError,
    PackageNotAvailableError,
    PackageNotDiscoveredError,
    SettingsSaveError,
    UnsafeRemovalError,
)
from ..gateways.connection.download import TmpDownload
from ..gateways.disk import mkdir_p
from ..gateways.disk.delete import SafeRemover
from ..gateways.disk.update import rename
from ..models.activation import activation_path
from ..models.enums import Transition
from ..models.package import normalize_name
from ..reporters import get_progress_bar
from . import validate
from .archive import ArchiveInspector
from .extract import start_extraction
from .package_list import PackageList
from .repository import load_repositories
from .resources import PackageResources
from .settings import SettingsStore, write_activation

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..base.context import Context
    from ..models.package import Package, PackageGraph
    from .archive import ArchiveLayout
    from .extract import ExtractionProgress

log = getLogger(__name__)


class ErrorLog:
    """Ordered ``(package, message)`` pairs, drained by the reader."""

    def __init__(self):
        self._entries: list[tuple[str, str]] = []

    def __len__(self):
        return len(self._entries)

    def __bool__(self):
        return bool(self._entries)

    @property
    def entries(self) -> tuple[tuple[str, str], ...]:
        return tuple(self._entries)

    def add(self, package_name, message) -> bool:
        self._entries.append((package_name, message))
        return False

    def drain(self) -> list[str]:
        drained = [f"{name}: {message}" for name, message in self._entries]
        self._entries.clear()
        return drained


class PackageManager:
    def __init__(
        self,
        context: Context | None = None,
        *,
        settings: SettingsStore | None = None,
        resources: PackageResources | None = None,
        inspector: ArchiveInspector | None = None,
        remover: SafeRemover | None = None,
        progress_factory: Callable | None = None,
    ):
        context = context or default_context
        self.packages_dir = context.packages_dir
        self.poll_interval = context.extract_poll_interval
        self.repository_urls = context.repositories
        self.settings = settings or SettingsStore(context.settings_file)
        self.resources = resources or PackageResources(self.packages_dir)
        self.inspector = inspector or ArchiveInspector()
        self.remover = remover or SafeRemover.from_context(context)
        self.package_list = PackageList(context.engine_version, self.inspector)
        self.errors = ErrorLog()
        self._progress_factory = progress_factory or get_progress_bar
        self._lock = Lock()
        #: called with every ExtractionProgress while an archive is being extracted
        self.on_extraction_progress: Callable[[ExtractionProgress], None] | None = None

        self.load_settings()
        self.reload()

    # ------------------------------------------------------------------------
    # queries

    @property
    def graph(self) -> PackageGraph:
        return self.package_list.graph

    @property
    def packages(self) -> tuple[Package, ...]:
        return tuple(self.package_list)

    @property
    def orphans(self) -> tuple[str, ...]:
        return self.package_list.orphans

    def get(self, name) -> Package:
        return self.package_list.get(name)

    def get_errors(self) -> list[str]:
        return self.errors.drain()

    # ------------------------------------------------------------------------
    # state loading

    def load_settings(self):
        self.package_list.set_activation(self.settings.load())

    def reload(self) -> PackageGraph:
        self.resources.rescan()
        self.package_list.set_installed(self.resources.installed, self.resources.orphans)
        graph = self.package_list.rebuild()
        for orphan in self.package_list.orphans:
            log.info("orphaned package directory: %s", orphan)
        return graph

    def refresh_repositories(self) -> PackageGraph:
        self.package_list.set_repositories(load_repositories(self.repository_urls))
        return self.package_list.rebuild()

    def add_archive_source(self, name, archive_path) -> bool:
        try:
            self.package_list.add_archive_source(name, archive_path)
        except ModmanError as e:
            return self.errors.add(normalize_name(name), str(e))
        self.package_list.rebuild()
        return True

    # ------------------------------------------------------------------------
    # transitions

    @contextmanager
    def _exclusive(self, transition: Transition, name):
        if not self._lock.acquire(blocking=False):
            raise OperationInProgressError(str(transition), name)
        try:
            yield
        finally:
            self._lock.release()

    def _run(self, transition: Transition, name, func, *args) -> bool:
        name = normalize_name(name)
        with self._exclusive(transition, name):
            try:
                func(name, *args)
            except ModmanError as e:
                log.info("%s of %s failed: %s", transition, name, e)
                return self.errors.add(name, str(e))
        return True

    def install(self, name, archive_path) -> bool:
        return self._run(Transition.install, name, self._install, archive_path)

    def install_from_repository(self, name) -> bool:
        return self._run(Transition.install, name, self._install_from_repository)

    def uninstall(self, name) -> bool:
        return self._run(Transition.uninstall, name, self._uninstall)

    def enable(self, name) -> bool:
        return self._run(Transition.enable, name, self._set_enabled, True)

    def disable(self, name) -> bool:
        return self._run(Transition.disable, name, self._set_enabled, False)

    # ------------------------------------------------------------------------
    # implementations; each raises a ModmanError on refusal or failure

    def _install(self, name, archive_path):
        validate.can_install(self.get(name), self.graph)
        self._install_archive(name, archive_path)

    def _install_from_repository(self, name):
        package = self.get(name)
        validate.can_install(package, self.graph)
        if package.download_url:
            with self._progress_factory(f"Downloading {name}") as progress:
                download = TmpDownload(package.download_url, progress.update_to)
                with download as archive_path:
                    progress.finish()
                    self._install_archive(name, archive_path)
        elif package.archive_path:
            self._install_archive(name, package.archive_path)
        else:
            raise PackageNotAvailableError(name)

    def _install_archive(self, name, archive_path):
        if not isfile(archive_path):
            raise ArchiveNotFoundError(archive_path)
        existing = self.resources.lookup_dir(name)
        if existing is not None:
            raise PackageExistsError(existing)

        layout = self.inspector.inspect(archive_path)
        mkdir_p(self.packages_dir)
        target = join(self.packages_dir, name)
        if layout.root:
            destination = self.packages_dir
            extracted_top = join(self.packages_dir, layout.top_level)
            if lexists(extracted_top):
                raise PackageExistsError(extracted_top)
            extracted = join(self.packages_dir, *layout.root.split("/"))
        else:
            destination = extracted_top = extracted = target

        self._extract(layout, destination, extracted_top)

        if extracted != target:
            extracted = self._move_into_place(name, layout, extracted, target)

        self.reload()
        if self.resources.get(name) is None:
            raise PackageNotDiscoveredError(name, extracted)

    def _move_into_place(self, name, layout: ArchiveLayout, extracted, target) -> str:
        """Rename the extracted root to ``target``; return where the package ended up."""
        if layout.wrapper:
            # the wrapper may be named like the target, so park the root next to it first
            staging = join(self.packages_dir, f".{name}.partial")
            if lexists(staging):
                self.remover.remove_package_dir(staging)
            try:
                rename(extracted, staging)
            except OSError as e:
                log.warning(
                    "Could not rename %s to %s, keeping the archive folder name: %s",
                    extracted,
                    staging,
                    e,
                )
                return extracted
            extracted = staging
            wrapper = join(self.packages_dir, layout.wrapper)
            if not self.remover.remove_package_dir(wrapper):
                log.warning("Could not remove archive wrapper folder %s", wrapper)
        try:
            rename(extracted, target)
        except OSError as e:
            log.warning(
                "Could not rename %s to %s, keeping the archive folder name: %s",
                extracted,
                target,
                e,
            )
            return extracted
        return target

    def _extract(self, layout: ArchiveLayout, destination, extracted_top):
        task = start_extraction(layout.archive_path, destination, layout.members)
        progress = self._progress_factory("Extracting", indeterminate=True)
        try:
            for tick in task.ticks(self.poll_interval):
                progress.tick()
                if self.on_extraction_progress is not None:
                    self.on_extraction_progress(tick)
            task.result()
        except ModmanError:
            if not self.remover.remove_package_dir(extracted_top):
                log.warning("Could not clean up partial extraction at %s", extracted_top)
            raise
        finally:
            progress.close()

    def _uninstall(self, name):
        validate.can_uninstall(self.get(name), self.graph)
        path = self.resources.lookup_dir(name)
        if path is None or not isdir(path):
            raise PackageDataNotFoundError(name)
        if not self.remover.remove_package_dir(path):
            raise UnsafeRemovalError(abspath(path))
        self.reload()

    def _set_enabled(self, name, on):
        package = self.get(name)
        if on:
            validate.can_enable(package, self.graph)
        else:
            validate.can_disable(package, self.graph)

        tree = write_activation(activation_path(name), self.package_list.activation, on)
        try:
            self.settings.save(tree)
        except OSError as e:
            raise SettingsSaveError(self.settings.settings_file, caused_by=e)
        self.package_list.update_activation(tree, name)
