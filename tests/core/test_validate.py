# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
from __future__ import annotations

import pytest

from modman.core.validate import (
    can_disable,
    can_enable,
    can_install,
    can_uninstall,
    is_allowed,
    validate,
)
from modman.exceptions import (
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
from modman.models.enums import PackageSource, Transition
from modman.models.package import Package, PackageGraph


def installed(name, active=False, **manifest):
    return Package(
        name,
        manifest=manifest,
        installed=True,
        active=active,
        sources={PackageSource.installed},
    )


def available(name, **manifest):
    return Package(name, repository_manifest=manifest, sources={PackageSource.repository})


def test_enable_missing_dependency_names_dependency():
    a = installed("a", depends=["b"])
    graph = PackageGraph([a])
    with pytest.raises(MissingDependencyError) as exc:
        can_enable("a", graph)
    assert exc.value.dependency == "b"
    assert str(exc.value) == "Required mod b is missing"


def test_enable_known_but_disabled_dependency():
    graph = PackageGraph([installed("a", depends=["b"]), installed("b")])
    with pytest.raises(DisabledDependencyError, match="Required mod b is not enabled"):
        can_enable("a", graph)

    # a dependency that is only available from a repository is known but not enabled
    graph = PackageGraph([installed("a", depends=["b"]), available("b")])
    with pytest.raises(DisabledDependencyError):
        can_enable("a", graph)


def test_enable_conflict_then_disable_then_enable():
    a = installed("a", conflicts=["c"])
    c = installed("c", active=True)
    with pytest.raises(PackageConflictError) as exc:
        can_enable(a, PackageGraph([a, c]))
    assert str(exc.value) == "This mod conflicts with c"

    c_disabled = c.merge(active=False)
    can_enable(a, PackageGraph([a, c_disabled]))


def test_enable_reverse_conflict():
    a = installed("a")
    c = installed("c", active=True, conflicts=["a"])
    with pytest.raises(PackageConflictError) as exc:
        can_enable(a, PackageGraph([a, c]))
    assert exc.value.conflicting == "c"


def test_enable_reverse_conflict_is_checked_before_own_conflicts():
    a = installed("a", conflicts=["d"])
    c = installed("c", active=True, conflicts=["a"])
    d = installed("d", active=True)
    with pytest.raises(PackageConflictError) as exc:
        can_enable(a, PackageGraph([a, c, d]))
    assert exc.value.conflicting == "c"


def test_enable_ignores_conflict_with_unknown_package():
    a = installed("a", conflicts=["nowhere"])
    can_enable(a, PackageGraph([a]))


def test_enable_rule_order():
    # already enabled wins over everything else
    a = installed("a", active=True, depends=["missing"])
    with pytest.raises(PackageStateError, match="already enabled"):
        can_enable(a, PackageGraph([a]))

    with pytest.raises(PackageStateError, match="must be installed first"):
        can_enable(available("a"), PackageGraph([available("a")]))

    incompatible = Package(
        "a",
        installed=True,
        compatible=False,
        manifest={"depends": ["missing"]},
        sources={PackageSource.installed},
    )
    with pytest.raises(IncompatiblePackageError, match="not compatible"):
        can_enable(incompatible, PackageGraph([incompatible]))


def test_enable_with_enabled_dependencies():
    a = installed("a", depends=["b", "c"])
    graph = PackageGraph([a, installed("b", active=True), installed("c", active=True)])
    can_enable(a, graph)
    assert is_allowed(Transition.enable, a, graph)


def test_disable_rejected_while_dependent_enabled():
    a = installed("a", active=True, depends=["b"])
    b = installed("b", active=True)
    with pytest.raises(RequiredByDependentError) as exc:
        can_disable(b, PackageGraph([a, b]))
    assert str(exc.value) == "This mod is needed to run a"

    # a disabled dependent does not hold the dependency
    can_disable(b, PackageGraph([a.merge(active=False), b]))


def test_disable_state_rules():
    with pytest.raises(PackageStateError, match="already disabled"):
        can_disable(installed("a"), PackageGraph([installed("a")]))
    # an uninstalled package is reported as disabled first
    with pytest.raises(PackageStateError, match="already disabled"):
        can_disable(available("a"), PackageGraph([available("a")]))


def test_install_rules():
    with pytest.raises(SubmodOperationError, match="Can not install submod"):
        can_install(available("a.b"), PackageGraph())
    with pytest.raises(PackageStateError, match="already installed"):
        can_install(installed("a"), PackageGraph([installed("a")]))
    with pytest.raises(PackageNotAvailableError, match="Mod is not available"):
        can_install("unknown", PackageGraph())
    can_install(available("a"), PackageGraph([available("a")]))


def test_uninstall_rules():
    with pytest.raises(SubmodOperationError, match="Can not uninstall submod"):
        can_uninstall(installed("a.b"), PackageGraph())
    with pytest.raises(PackageStateError, match="Mod is not installed"):
        can_uninstall(available("a"), PackageGraph([available("a")]))
    can_uninstall(installed("a"), PackageGraph([installed("a")]))


def test_uninstall_rejected_while_dependent_enabled():
    a = installed("a", active=True, depends=["b"])
    b = installed("b", active=True)
    with pytest.raises(RequiredByDependentError) as exc:
        can_uninstall(b, PackageGraph([a, b]))
    assert exc.value.dependent == "a"


def test_submods_can_be_toggled():
    parent = installed("a", active=True)
    child = installed("a.b")
    graph = PackageGraph([parent, child])
    can_enable("a.b", graph)


@pytest.mark.parametrize(
    "transition, allowed",
    [
        ("install", False),
        ("uninstall", True),
        ("enable", True),
        ("disable", False),
    ],
)
def test_validate_dispatch(transition, allowed):
    graph = PackageGraph([installed("a")])
    assert is_allowed(transition, "a", graph) is allowed
    if not allowed:
        with pytest.raises(TransitionRejected):
            validate(transition, "a", graph)


def test_names_are_case_insensitive():
    a = installed("A", depends=["B"])
    graph = PackageGraph([a, installed("b", active=True)])
    can_enable("a", graph)
    assert graph.get("A") is a
