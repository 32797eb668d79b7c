# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""Persistence of the activation document inside the per-user settings file."""

from __future__ import annotations

import os
from collections.abc import Mapping
from logging import getLogger
from os.path import dirname, isfile
from typing import TYPE_CHECKING

from ..base.constants import ACTIVE_MODS_KEY
from ..common.serialize import JSONDecodeError, json_dump, json_load
from ..gateways.disk import mkdir_p
from ..gateways.disk.update import rename
from ..models.activation import ActivationTree, split_route

if TYPE_CHECKING:
    from collections.abc import Sequence
    from typing import Any

log = getLogger(__name__)


def write_activation(
    path: str | Sequence[str], document: Mapping | ActivationTree, value: Any
) -> ActivationTree:
    """Write ``value`` at ``path`` (``"/foo/mods/bar/active"`` or its segments).

    Every key not on the path is carried over unchanged.
    """
    tree = document if isinstance(document, ActivationTree) else ActivationTree(document)
    return tree.set_path(split_route(path), value)


class SettingsStore:
    """Reads and writes ``modSettings.json``.

    Only the ``activeMods`` key belongs to modman; every other top-level key of the file
    survives a load/save round trip.
    """

    def __init__(self, settings_file):
        self.settings_file = settings_file
        self._extra = None

    def _read(self) -> dict:
        if not isfile(self.settings_file):
            log.debug("no settings file at %s", self.settings_file)
            return {}
        try:
            with open(self.settings_file, "rb") as fh:
                data = json_load(fh.read().decode("utf-8-sig"))
        except (OSError, UnicodeDecodeError, JSONDecodeError) as e:
            log.warning(
                "Ignoring unreadable settings file %s: %s", self.settings_file, e
            )
            return {}
        if not isinstance(data, dict):
            log.warning(
                "Ignoring settings file %s: top level is not an object", self.settings_file
            )
            return {}
        return data

    def load(self) -> ActivationTree:
        data = self._read()
        active_mods = data.pop(ACTIVE_MODS_KEY, None)
        self._extra = data
        if active_mods is not None and not isinstance(active_mods, Mapping):
            log.warning(
                "Ignoring malformed '%s' in %s", ACTIVE_MODS_KEY, self.settings_file
            )
            active_mods = None
        return ActivationTree(active_mods)

    def save(self, tree: ActivationTree):
        if self._extra is None:
            self._extra = {
                k: v for k, v in self._read().items() if k != ACTIVE_MODS_KEY
            }
        data = dict(self._extra)
        data[ACTIVE_MODS_KEY] = tree.to_document()
        mkdir_p(dirname(self.settings_file))
        # the settings file is only ever replaced whole
        temp_path = f"{self.settings_file}.{os.getpid()}.tmp"
        with open(temp_path, "w", encoding="utf-8") as fh:
            fh.write(json_dump(data))
            fh.write("\n")
        rename(temp_path, self.settings_file, force=True)
        log.debug("saved activation document to %s", self.settings_file)
