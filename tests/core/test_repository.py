# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from modman import ModmanError
from modman.base.context import reset_context
from modman.common.path import path_to_url
from modman.core.repository import Repository, load_repositories
from modman.models.enums import PackageState

from ..helpers import manifest, package_archive

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def repository_dir(tmp_path: Path) -> Path:
    path = tmp_path / "repo"
    (path / "manifests").mkdir(parents=True)
    (path / "manifests" / "foo.json").write_text(
        json.dumps(manifest("foo", version="2.0", depends=["bar"]))
    )
    (path / "manifests" / "bar.json").write_text(json.dumps(manifest("bar")))
    package_archive(path / "foo.zip", "Foo", version="2.0", depends=["bar"])
    package_archive(path / "bar.zip", "Bar")
    index = {
        "Foo": {
            "mod": "manifests/foo.json",
            "download": "foo.zip",
            "downloadSize": "0.5",
            "screenshots": ["shots/1.png"],
        },
        "bar": {"mod": "manifests/bar.json", "download": "bar.zip"},
        "broken": "not an object",
        "lost": {"mod": "manifests/missing.json"},
    }
    (path / "index.json").write_text(json.dumps(index))
    return path


def test_load_repository(modman_context, repository_dir: Path):
    url = path_to_url(str(repository_dir / "index.json"))
    entries = {e.name: e for e in Repository(url).load()}

    assert sorted(entries) == ["bar", "foo", "lost"]
    foo = entries["foo"]
    assert foo.manifest["version"] == "2.0"
    assert foo.download_url == path_to_url(str(repository_dir / "foo.zip"))
    assert foo.download_size == 0.5
    assert foo.screenshots[0].endswith("/shots/1.png")
    # a missing manifest leaves the entry without one
    assert not entries["lost"].manifest


def test_invalid_index(modman_context, tmp_path: Path):
    index = tmp_path / "index.json"
    index.write_text("[1, 2]")
    with pytest.raises(ModmanError, match="must be a JSON object"):
        Repository(path_to_url(str(index))).fetch_index()
    index.write_text("{nope")
    with pytest.raises(ModmanError, match="not valid JSON"):
        Repository(path_to_url(str(index))).fetch_index()


def test_unreachable_repositories_are_skipped(
    modman_context, repository_dir: Path, tmp_path: Path, caplog
):
    good = path_to_url(str(repository_dir / "index.json"))
    missing = path_to_url(str(tmp_path / "missing.json"))
    merged = load_repositories([missing, good])
    assert "foo" in merged
    assert "Skipping repository" in caplog.text


def test_first_repository_wins(modman_context, repository_dir: Path, tmp_path: Path):
    other = tmp_path / "other.json"
    other.write_text(json.dumps({"foo": {"download": "https://example.com/other.zip"}}))
    merged = load_repositories(
        [path_to_url(str(repository_dir / "index.json")), path_to_url(str(other))]
    )
    assert merged["foo"].download_url.endswith("repo/foo.zip")


def test_manager_installs_from_repository(
    make_manager, repository_dir: Path, packages_dir: Path, monkeypatch
):
    monkeypatch.setenv("MODMAN_REPOSITORIES", path_to_url(str(repository_dir / "index.json")))
    reset_context(())
    manager = make_manager()
    manager.refresh_repositories()
    assert manager.get("foo").state is PackageState.available

    assert manager.install_from_repository("bar"), manager.get_errors()
    assert manager.install_from_repository("foo"), manager.get_errors()
    assert (packages_dir / "foo" / "mod.json").is_file()
    assert manager.enable("bar")
    assert manager.enable("foo")

    assert manager.install_from_repository("foo") is False
    assert manager.get_errors() == ["foo: Mod is already installed"]
