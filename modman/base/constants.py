# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""
This file should hold most string literals and magic numbers used throughout the code base.
The exception is if a literal is specifically meant to be private to and isolated within a module.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..common.compat import on_win

if TYPE_CHECKING:
    from typing import Final

APP_NAME: Final = "modman"
GAME_DATA_NAME: Final = "vcmi"

SEARCH_PATH: tuple[str, ...]

if on_win:  # pragma: no cover
    SEARCH_PATH = (
        "C:/ProgramData/modman/.modmanrc",
        "C:/ProgramData/modman/modmanrc",
    )
else:
    SEARCH_PATH = (
        "/etc/modman/.modmanrc",
        "/etc/modman/modmanrc",
    )

SEARCH_PATH += (
    "$XDG_CONFIG_HOME/modman/.modmanrc",
    "~/.config/modman/.modmanrc",
    "~/.modmanrc",
    "$MODMAN_ROOT/.modmanrc",
    "$MODMANRC",
)

DEFAULT_MODMANRC_FILENAME: Final = ".modmanrc"

# package manifest, one per package directory
MANIFEST_FILENAME: Final = "mod.json"
# the managed packages container inside the application data root
PACKAGES_DIRNAME: Final = "Mods"
# child key of the activation document and name of the submods folder on disk
SUBMODS_KEY: Final = "mods"
SUBMODS_DIRNAMES: Final = ("mods", "Mods")
ACTIVE_KEY: Final = "active"

SETTINGS_FILENAME: Final = "modSettings.json"
ACTIVE_MODS_KEY: Final = "activeMods"

# depth 0 is the archive root, depth 2 is "wrapper/package/mod.json"
MANIFEST_SEARCH_DEPTHS: Final = (0, 1, 2)

DEFAULT_ENGINE_VERSION: Final = "1.4.0"
DEFAULT_REPOSITORY_URL: Final = (
    "https://raw.githubusercontent.com/vcmi/vcmi-mods-repository/develop/vcmi-1.4.json"
)
DEFAULT_EXTRACT_POLL_INTERVAL: Final = 0.05
