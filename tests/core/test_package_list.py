# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from modman.core.package_list import PackageList
from modman.core.repository import RepositoryEntry
from modman.core.resources import InstalledEntry
from modman.exceptions import ArchiveNotFoundError
from modman.models.activation import ActivationTree
from modman.models.enums import PackageSource, PackageState

from ..helpers import package_archive

if TYPE_CHECKING:
    from pathlib import Path


def entry(name, **manifest):
    return InstalledEntry(name, f"/games/vcmi/Mods/{name}", manifest, 100)


def remote(name, **manifest):
    return RepositoryEntry(
        name,
        "https://example.com/repo.json",
        download_url=f"https://example.com/{name}.zip",
        download_size=1.5,
        manifest=manifest,
    )


def test_rebuild_merges_sources():
    packages = PackageList("1.4.0")
    packages.set_installed([entry("a", version="1.0")])
    packages.set_repositories(
        {"a": remote("a", version="1.1"), "b": remote("b", version="0.1")}
    )
    packages.set_activation(ActivationTree({"a": {"active": True}}))
    graph = packages.rebuild()

    assert graph.names == ("a", "b")
    a = packages.get("a")
    assert a.sources == {PackageSource.installed, PackageSource.repository}
    assert a.enabled
    assert a.update_available
    assert a.download_url == "https://example.com/a.zip"
    b = packages.get("b")
    assert b.state is PackageState.available
    assert b.active is None


def test_unknown_name_yields_empty_record():
    packages = PackageList("1.4.0")
    packages.rebuild()
    unknown = packages.get("Nope")
    assert unknown.name == "nope"
    assert unknown.state is PackageState.unknown
    assert not packages.has("nope")


def test_compatibility_is_evaluated_against_engine():
    packages = PackageList("1.3.0")
    packages.set_installed([entry("a", compatibility={"min": "1.4.0"})])
    packages.rebuild()
    assert not packages.get("a").compatible


def test_reset_repositories():
    packages = PackageList("1.4.0")
    packages.set_repositories({"b": remote("b")})
    packages.rebuild()
    assert packages.has("b")
    packages.reset_repositories()
    packages.rebuild()
    assert not packages.has("b")
    assert len(packages) == 0


def test_archive_source(tmp_path: Path):
    archive = package_archive(tmp_path / "foo.zip", "foo", depends=["bar"])
    packages = PackageList("1.4.0")
    packages.add_archive_source("Foo", str(archive))
    packages.rebuild()

    foo = packages.get("foo")
    assert foo.sources == {PackageSource.archive}
    assert foo.archive_path == str(archive)
    assert list(foo.depends) == ["bar"]

    packages.remove_archive_source("FOO")
    packages.rebuild()
    assert not packages.has("foo")

    with pytest.raises(ArchiveNotFoundError):
        packages.add_archive_source("foo", str(tmp_path / "missing.zip"))


def test_update_activation_notifies():
    packages = PackageList("1.4.0")
    packages.set_installed([entry("a"), entry("b")])
    packages.rebuild()
    seen = []
    listener = packages.subscribe(lambda name, package: seen.append(package))

    packages.update_activation(ActivationTree({"a": {"active": True}}), "a")
    assert [p.name for p in seen] == ["a"]
    assert seen[0].enabled
    assert not packages.get("b").enabled

    packages.unsubscribe(listener)
    packages.update_activation(ActivationTree(), "a")
    assert len(seen) == 1
    assert not packages.get("a").enabled
