# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from modman.gateways.disk.delete import SafeRemover, rm_rf

from ...helpers import make_package_dir

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def remover() -> SafeRemover:
    return SafeRemover("Mods", "vcmi")


def test_rm_rf(tmp_path: Path):
    tree = tmp_path / "tree"
    (tree / "nested").mkdir(parents=True)
    (tree / "nested" / "file.txt").write_text("data")
    os.chmod(tree / "nested" / "file.txt", 0o444)
    assert rm_rf(tree)
    assert not tree.exists()

    single = tmp_path / "single.txt"
    single.write_text("x")
    assert rm_rf(single)
    assert rm_rf(tmp_path / "never-existed")


def test_removes_direct_child_of_container(remover: SafeRemover, packages_dir: Path):
    package = make_package_dir(packages_dir, "foo")
    assert remover.is_removable(package)
    assert remover.remove_package_dir(str(package))
    assert not package.exists()
    assert packages_dir.is_dir()


def test_container_names_ignore_case(packages_dir: Path):
    package = make_package_dir(packages_dir, "foo")
    assert SafeRemover("MODS", "VCMI").is_removable(str(package))


def test_refuses_documents_folder(remover: SafeRemover, tmp_path: Path):
    documents = tmp_path / "home" / "user" / "Documents"
    documents.mkdir(parents=True)
    (documents / "thesis.txt").write_text("precious")
    assert not remover.remove_package_dir(str(documents))
    assert (documents / "thesis.txt").exists()
    assert not remover.is_removable("/home/user/Documents")


@pytest.mark.parametrize("path", ["", "/", ".", "..", "Mods"])
def test_refuses_degenerate_paths(remover: SafeRemover, path):
    assert not remover.is_removable(path)


def test_refuses_container_itself(remover: SafeRemover, packages_dir: Path):
    assert not remover.remove_package_dir(str(packages_dir))
    assert packages_dir.is_dir()


def test_refuses_nested_package_content(remover: SafeRemover, packages_dir: Path):
    package = make_package_dir(packages_dir, "foo")
    (package / "data").mkdir()
    assert not remover.remove_package_dir(str(package / "data"))


def test_refuses_container_outside_app_root(remover: SafeRemover, tmp_path: Path):
    elsewhere = make_package_dir(tmp_path / "other" / "Mods", "foo")
    assert not remover.remove_package_dir(str(elsewhere))
    assert elsewhere.is_dir()


def test_isolated_container_skips_app_root_check(tmp_path: Path):
    package = make_package_dir(tmp_path / "sandbox" / "Mods", "foo")
    remover = SafeRemover("Mods", "vcmi", isolated_container=True)
    assert remover.remove_package_dir(str(package))
    assert not package.exists()


def test_from_context(modman_context, packages_dir: Path):
    remover = SafeRemover.from_context(modman_context)
    assert remover.packages_dirname == "Mods"
    assert remover.app_root_name == "vcmi"
    assert remover.is_removable(str(packages_dir / "anything"))
