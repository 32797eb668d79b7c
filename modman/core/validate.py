# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""Decide whether a package may change state.

Each ``can_*`` function inspects the package graph and either returns None or raises the
first :class:`~modman.exceptions.TransitionRejected` that applies. Rules are checked in a
fixed order so the reason reported for a given graph is always the same. Nothing in this
module touches the filesystem or any mutable state.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from ..exceptions import (
    DisabledDependencyError,
    IncompatiblePackageError,
    MissingDependencyError,
    PackageConflictError,
    PackageNotAvailableError,
    PackageStateError,
    RequiredByDependentError,
    SubmodOperationError,
    TransitionRejected,
)
from ..models.enums import Transition
from ..models.package import Package, normalize_name

if TYPE_CHECKING:
    from ..models.package import PackageGraph

log = getLogger(__name__)


def _resolve(package: Package | str, graph: PackageGraph) -> Package:
    if isinstance(package, Package):
        return package
    # unknown names behave like a package nobody has heard of
    return graph.get(package) or Package(normalize_name(package))


def can_install(package: Package | str, graph: PackageGraph) -> None:
    pkg = _resolve(package, graph)
    if pkg.is_submod:
        raise SubmodOperationError(pkg.name, "install")
    if pkg.installed:
        raise PackageStateError(pkg.name, "Mod is already installed")
    if not pkg.available:
        raise PackageNotAvailableError(pkg.name)


def can_uninstall(package: Package | str, graph: PackageGraph) -> None:
    pkg = _resolve(package, graph)
    if pkg.is_submod:
        raise SubmodOperationError(pkg.name, "uninstall")
    if not pkg.installed:
        raise PackageStateError(pkg.name, "Mod is not installed")

    # removing the files would break an enabled package that needs them
    for dependent in graph.dependents(pkg.name):
        raise RequiredByDependentError(pkg.name, dependent.name)


def can_enable(package: Package | str, graph: PackageGraph) -> None:
    pkg = _resolve(package, graph)
    if pkg.enabled:
        raise PackageStateError(pkg.name, "Mod is already enabled")
    if not pkg.installed:
        raise PackageStateError(pkg.name, "Mod must be installed first")
    if not pkg.compatible:
        raise IncompatiblePackageError(pkg.name)

    for dependency in pkg.depends:
        if dependency not in graph:
            raise MissingDependencyError(pkg.name, dependency)
        if not graph.is_enabled(dependency):
            raise DisabledDependencyError(pkg.name, dependency)

    # an enabled package that lists this one among its conflicts
    for other in graph.reverse_conflicts(pkg.name):
        raise PackageConflictError(pkg.name, other.name)

    for conflicting in pkg.conflicts:
        if graph.is_enabled(conflicting):
            raise PackageConflictError(pkg.name, conflicting)


def can_disable(package: Package | str, graph: PackageGraph) -> None:
    pkg = _resolve(package, graph)
    if pkg.disabled:
        raise PackageStateError(pkg.name, "Mod is already disabled")
    if not pkg.installed:
        raise PackageStateError(pkg.name, "Mod must be installed first")

    for dependent in graph.dependents(pkg.name):
        raise RequiredByDependentError(pkg.name, dependent.name)


_CHECKS = {
    Transition.install: can_install,
    Transition.uninstall: can_uninstall,
    Transition.enable: can_enable,
    Transition.disable: can_disable,
}


def validate(transition: Transition | str, package: Package | str, graph: PackageGraph):
    check = _CHECKS[Transition(transition)]
    log.debug("checking %s of %s", transition, getattr(package, "name", package))
    check(package, graph)


def is_allowed(transition: Transition | str, package: Package | str, graph: PackageGraph):
    """Boolean form of :func:`validate`."""
    try:
        validate(transition, package, graph)
    except TransitionRejected:
        return False
    return True
