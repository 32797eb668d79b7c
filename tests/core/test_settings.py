# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from modman.core.settings import SettingsStore, write_activation
from modman.models.activation import ActivationTree

if TYPE_CHECKING:
    from pathlib import Path


@pytest.mark.parametrize(
    "route",
    [
        "/foo/active",
        "/foo/mods/bar/active",
        ("foo", "mods", "bar", "mods", "baz", "active"),
        "/brand_new/active",
    ],
)
@pytest.mark.parametrize("value", [True, False])
def test_write_activation_round_trip(route, value):
    document = {
        "foo": {
            "active": True,
            "checksum": "abc",
            "mods": {"bar": {"active": False, "mods": {}}, "other": {"active": True}},
        },
        "unrelated": {"active": False, "validated": True},
    }
    before = json.loads(json.dumps(document))
    tree = write_activation(route, document, value)

    assert tree.get_path(route) is value
    assert document == before
    result = tree.to_document()
    assert result["unrelated"] == before["unrelated"]
    assert result["foo"]["checksum"] == "abc"
    assert result["foo"]["mods"]["other"] == {"active": True}


def test_write_activation_terminal_replaces_node():
    tree = write_activation("/foo", {"foo": {"active": True}}, {"active": False})
    assert tree.to_document() == {"foo": {"active": False}}


def test_load_missing_file(tmp_path: Path):
    store = SettingsStore(str(tmp_path / "nope" / "modSettings.json"))
    assert store.load() == ActivationTree()


@pytest.mark.parametrize(
    "content",
    ["{ not json", "[1, 2, 3]", '{"activeMods": [1]}', b"\xff\xfe\x00garbage"],
)
def test_load_malformed_file_yields_empty_document(tmp_path: Path, content):
    path = tmp_path / "modSettings.json"
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content)
    assert SettingsStore(str(path)).load() == ActivationTree()


def test_save_preserves_other_keys(tmp_path: Path):
    path = tmp_path / "modSettings.json"
    path.write_text(
        json.dumps({"core": {"version": 3}, "activeMods": {"foo": {"active": False}}})
    )
    store = SettingsStore(str(path))
    tree = store.load().set_active("foo", True)
    store.save(tree)

    saved = json.loads(path.read_text())
    assert saved["core"] == {"version": 3}
    assert saved["activeMods"] == {"foo": {"active": True}}
    assert SettingsStore(str(path)).load() == tree


def test_save_without_load_keeps_other_keys(tmp_path: Path):
    path = tmp_path / "modSettings.json"
    path.write_text(json.dumps({"core": 1, "activeMods": {}}))
    SettingsStore(str(path)).save(ActivationTree({"x": {"active": True}}))
    assert json.loads(path.read_text()) == {"core": 1, "activeMods": {"x": {"active": True}}}


def test_save_creates_parent_directory(tmp_path: Path):
    path = tmp_path / "deep" / "config" / "modSettings.json"
    SettingsStore(str(path)).save(ActivationTree({"a": {"active": False}}))
    assert json.loads(path.read_text()) == {"activeMods": {"a": {"active": False}}}
    assert list(path.parent.iterdir()) == [path]
