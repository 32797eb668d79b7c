# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
from __future__ import annotations

from logging import NOTSET, WARNING, getLogger
from typing import TYPE_CHECKING

import pytest

from modman.base.context import reset_context
from modman.core.manager import PackageManager
from modman.gateways.logging import initialize_logging
from modman.reporters import QuietProgressBar

if TYPE_CHECKING:
    from pathlib import Path

    from modman.base.context import Context


@pytest.fixture(autouse=True)
def reset_loggers():
    yield
    # the cli reconfigures logging globally; give the next test a clean slate
    for name in (None, "modman", "requests", "urllib3"):
        logger = getLogger(name)
        logger.handlers = [h for h in logger.handlers if h.name != "stderr"]
        if name is None:
            logger.setLevel(WARNING)
        else:
            logger.propagate = True
            logger.setLevel(NOTSET)
    initialize_logging.cache_clear()


@pytest.fixture
def root_dir(tmp_path: Path) -> Path:
    # the application root must be named like the game data folder for the removal guard
    path = tmp_path / "vcmi"
    (path / "Mods").mkdir(parents=True)
    return path


@pytest.fixture
def packages_dir(root_dir: Path) -> Path:
    return root_dir / "Mods"


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    return tmp_path / "config"


@pytest.fixture
def modman_context(
    root_dir: Path, config_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> Context:
    monkeypatch.setenv("MODMAN_ROOT_DIR", str(root_dir))
    monkeypatch.setenv("MODMAN_CONFIG_DIR", str(config_dir))
    monkeypatch.setenv("MODMAN_DEFAULT_REPOSITORY_ENABLED", "false")
    monkeypatch.setenv("MODMAN_EXTRACT_POLL_INTERVAL", "0.01")
    yield reset_context(())
    monkeypatch.undo()
    reset_context(())


@pytest.fixture
def make_manager(modman_context: Context):
    def _make_manager(**kwargs) -> PackageManager:
        kwargs.setdefault("progress_factory", QuietProgressBar)
        return PackageManager(modman_context, **kwargs)

    return _make_manager


@pytest.fixture
def manager(make_manager) -> PackageManager:
    return make_manager()
