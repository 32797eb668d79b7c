# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from modman import __version__
from modman.cli.main import generate_parser, main

from ..helpers import make_package_dir, package_archive

if TYPE_CHECKING:
    from pathlib import Path

    from modman.base.context import Context


def test_parser_requires_a_command(capsys):
    with pytest.raises(SystemExit) as exc:
        generate_parser().parse_args([])
    assert exc.value.code == 2


def test_version(capsys):
    with pytest.raises(SystemExit):
        main("--version")
    assert __version__ in capsys.readouterr().out


def test_list_empty(modman_context: Context, packages_dir: Path, capsys):
    assert main("list") == 0
    assert "No packages found in" in capsys.readouterr().out


def test_list_json(modman_context: Context, packages_dir: Path, capsys):
    make_package_dir(packages_dir, "foo", modType="Graphical", keepDisabled=True)
    (packages_dir / "stray").mkdir()

    assert main("list", "--json") == 0
    data = json.loads(capsys.readouterr().out)
    assert [p["name"] for p in data["packages"]] == ["foo"]
    assert data["packages"][0]["state"] == "installed"
    assert data["packages"][0]["enabled"] is False
    assert data["packages"][0]["mod_type"] == "Graphical"
    assert data["packages"][0]["keep_disabled"] is True
    assert data["orphans"] == [str(packages_dir / "stray")]


def test_install_enable_disable_uninstall(
    modman_context: Context, packages_dir: Path, tmp_path: Path, capsys
):
    archive = package_archive(tmp_path / "foo.zip", "foo")

    assert main("install", "foo", "--archive", str(archive), "-q") == 0
    assert (packages_dir / "foo" / "mod.json").is_file()

    assert main("enable", "foo") == 0
    assert main("enable", "foo") == 1
    assert "foo: Mod is already enabled" in capsys.readouterr().err

    assert main("disable", "foo") == 0
    assert main("uninstall", "foo") == 0
    assert not (packages_dir / "foo").exists()


def test_rejection_reported_as_json(modman_context: Context, packages_dir: Path, capsys):
    make_package_dir(packages_dir, "foo")

    assert main("disable", "foo", "--json") == 1
    data = json.loads(capsys.readouterr().out)
    assert data == {
        "success": False,
        "name": "foo",
        "errors": ["foo: Mod is already disabled"],
    }


def test_root_dir_option(modman_context: Context, tmp_path: Path, capsys):
    other = tmp_path / "elsewhere" / "vcmi"
    make_package_dir(other / "Mods", "bar")

    assert main("list", "--root-dir", str(other)) == 0
    assert "bar" in capsys.readouterr().out


def test_configuration_error_is_handled(
    modman_context: Context, monkeypatch: pytest.MonkeyPatch, capsys
):
    monkeypatch.setenv("MODMAN_ENGINE_VERSION", "one.two")

    assert main("list") == 1
    assert "dotted integer version" in capsys.readouterr().err
