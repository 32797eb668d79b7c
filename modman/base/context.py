# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""The process-wide :data:`context`: every modman setting, resolved from rc files,
``MODMAN_*`` environment variables and command line flags.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from logging import getLogger
from os.path import basename, join
from typing import TYPE_CHECKING

import platformdirs

from .. import __version__
from ..common.configuration import (
    Configuration,
    ParameterLoader,
    PrimitiveParameter,
    SequenceParameter,
    ValidationError,
)
from ..common.path import expand
from .constants import (
    APP_NAME,
    DEFAULT_ENGINE_VERSION,
    DEFAULT_EXTRACT_POLL_INTERVAL,
    DEFAULT_REPOSITORY_URL,
    GAME_DATA_NAME,
    PACKAGES_DIRNAME,
    SEARCH_PATH,
    SETTINGS_FILENAME,
)

if TYPE_CHECKING:
    from argparse import Namespace
    from collections.abc import Iterator
    from typing import Literal

    from ..common.path import PathsType

log = getLogger(__name__)


def version_validation(value: str) -> str | Literal[True]:
    parts = value.split(".")
    if not all(part.isdigit() for part in parts):
        return f"'{value}' is not a dotted integer version"
    return True


def positive_validation(value: float) -> str | Literal[True]:
    if value <= 0:
        return "value must be greater than zero"
    return True


class Context(Configuration):
    _root_dir = ParameterLoader(
        PrimitiveParameter("", element_type=str), aliases=("root_dir",), expandvars=True
    )
    _config_dir = ParameterLoader(
        PrimitiveParameter("", element_type=str),
        aliases=("config_dir",),
        expandvars=True,
    )
    packages_dirname = ParameterLoader(PrimitiveParameter(PACKAGES_DIRNAME))
    _app_root_name = ParameterLoader(
        PrimitiveParameter("", element_type=str), aliases=("app_root_name",)
    )
    # mobile sandboxes have no application root folder to match against
    isolated_container = ParameterLoader(PrimitiveParameter(False))
    engine_version = ParameterLoader(
        PrimitiveParameter(DEFAULT_ENGINE_VERSION, validation=version_validation)
    )

    # repositories
    _repositories = ParameterLoader(
        SequenceParameter(PrimitiveParameter("", element_type=str)),
        aliases=("repositories",),
        expandvars=True,
    )
    default_repository_enabled = ParameterLoader(PrimitiveParameter(True))
    extra_repository_enabled = ParameterLoader(PrimitiveParameter(False))
    extra_repository_url = ParameterLoader(PrimitiveParameter("", element_type=str))

    # remote connection details
    remote_connect_timeout_secs = ParameterLoader(
        PrimitiveParameter(9.15, validation=positive_validation)
    )
    remote_read_timeout_secs = ParameterLoader(
        PrimitiveParameter(60.0, validation=positive_validation)
    )
    remote_max_retries = ParameterLoader(PrimitiveParameter(3))
    ssl_verify = ParameterLoader(PrimitiveParameter(True), aliases=("verify_ssl",))
    offline = ParameterLoader(PrimitiveParameter(False))

    extract_poll_interval = ParameterLoader(
        PrimitiveParameter(DEFAULT_EXTRACT_POLL_INTERVAL, validation=positive_validation)
    )

    # output, verbosity
    json = ParameterLoader(PrimitiveParameter(False))
    quiet = ParameterLoader(PrimitiveParameter(False))
    verbosity = ParameterLoader(PrimitiveParameter(0), aliases=("verbose",))

    def __init__(
        self,
        search_path: PathsType | None = None,
        argparse_args: Namespace | None = None,
    ):
        super().__init__(
            SEARCH_PATH if search_path is None else search_path,
            APP_NAME,
            argparse_args,
        )

    def post_build_validation(self) -> list[ValidationError]:
        errors = []
        if self.extra_repository_enabled and not self.extra_repository_url:
            errors.append(
                ValidationError(
                    "extra_repository_url",
                    self.extra_repository_url,
                    "<<merged>>",
                    "'extra_repository_url' is required when "
                    "'extra_repository_enabled' is True",
                )
            )
        if not 0 <= self.verbosity <= 4:
            errors.append(
                ValidationError(
                    "verbosity",
                    self.verbosity,
                    "<<merged>>",
                    "'verbosity' must be between 0 and 4",
                )
            )
        return errors

    @property
    def root_dir(self) -> str:
        if self._root_dir:
            return expand(self._root_dir)
        return platformdirs.user_data_dir(GAME_DATA_NAME, appauthor=False)

    @property
    def config_dir(self) -> str:
        if self._config_dir:
            return expand(self._config_dir)
        return platformdirs.user_config_dir(GAME_DATA_NAME, appauthor=False)

    @property
    def packages_dir(self) -> str:
        return join(self.root_dir, self.packages_dirname)

    @property
    def settings_file(self) -> str:
        return join(self.config_dir, SETTINGS_FILENAME)

    @property
    def app_root_name(self) -> str:
        return self._app_root_name or basename(self.root_dir.rstrip("/\\"))

    @property
    def repositories(self) -> tuple[str, ...]:
        if self._repositories:
            repositories = list(self._repositories)
        elif self.default_repository_enabled:
            repositories = [DEFAULT_REPOSITORY_URL]
        else:
            repositories = []
        if self.extra_repository_enabled and self.extra_repository_url:
            repositories.append(self.extra_repository_url)
        return tuple(dict.fromkeys(repositories))

    @property
    def log_level(self) -> int:
        from ..gateways.logging import VERBOSITY_LEVELS

        return VERBOSITY_LEVELS[min(self.verbosity, 4)]

    @property
    def user_agent(self) -> str:
        return f"modman/{__version__}"

    @property
    def category_map(self) -> dict[str, tuple[str, ...]]:
        return {
            "Paths": (
                "root_dir",
                "config_dir",
                "packages_dirname",
                "app_root_name",
                "isolated_container",
            ),
            "Engine": ("engine_version", "extract_poll_interval"),
            "Repositories": (
                "repositories",
                "default_repository_enabled",
                "extra_repository_enabled",
                "extra_repository_url",
            ),
            "Network Configuration": (
                "remote_connect_timeout_secs",
                "remote_read_timeout_secs",
                "remote_max_retries",
                "ssl_verify",
                "offline",
            ),
            "Output": ("json", "quiet", "verbosity"),
        }


def reset_context(
    search_path: PathsType = SEARCH_PATH,
    argparse_args: Namespace | None = None,
) -> Context:
    global context
    context.__init__(search_path, argparse_args)

    # need to import here to avoid circular dependency
    from ..gateways.connection.session import clear_sessions

    clear_sessions()
    return context


@contextmanager
def fresh_context(
    env: dict[str, str] | None = None,
    search_path: PathsType = SEARCH_PATH,
    argparse_args: Namespace | None = None,
    **kwargs,
) -> Iterator[Context]:
    overrides = {**(env or {}), **kwargs}
    saved = os.environ.copy()
    os.environ.update(overrides)
    try:
        yield reset_context(search_path=search_path, argparse_args=argparse_args)
    finally:
        if overrides:
            os.environ.clear()
            os.environ.update(saved)
        reset_context()


context = Context((), None)
