# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""Mod manager for extensible game-content ecosystems."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from typing import Any

__all__ = (
    "__name__",
    "__version__",
    "__author__",
    "__license__",
    "__summary__",
    "ModmanError",
    "ModmanMultiError",
)

__name__ = "modman"
__version__ = "0.3.0"
__author__ = "VCMI Team"
__license__ = "BSD-3-Clause"
__summary__ = __doc__


class ModmanError(Exception):
    """Base of every error modman reports to its user.

    ``message`` is a %-template filled from the keyword arguments, which are also
    kept for :meth:`dump_map`.
    """

    return_code: int = 1

    def __init__(self, message: str | None, caused_by: Any = None, **kwargs):
        self.message = message or ""
        self._kwargs = kwargs
        self._caused_by = caused_by
        super().__init__(message)

    @property
    def caused_by(self):
        return self._caused_by

    def __repr__(self) -> str:
        return f"{type(self).__name__}: {self}"

    def __str__(self) -> str:
        if not self._kwargs:
            return str(self.message)
        return str(self.message) % self._kwargs

    def dump_map(self) -> dict[str, Any]:
        dumped = {k: v for k, v in vars(self).items() if not k.startswith("_")}
        dumped.update(self._kwargs)
        dumped.update(
            exception_type=str(type(self)),
            exception_name=type(self).__name__,
            message=str(self),
            error=repr(self),
            caused_by=repr(self._caused_by),
        )
        return dumped


class ModmanMultiError(ModmanError):
    def __init__(self, errors: Iterable[ModmanError]):
        self.errors = tuple(errors)
        super().__init__(None)

    def __repr__(self) -> str:
        return "\n".join(repr(e) for e in self.errors)

    def __str__(self) -> str:
        return "".join(f"{e}\n" for e in self.errors)

    def dump_map(self) -> dict[str, Any]:
        return {
            "exception_type": str(type(self)),
            "exception_name": type(self).__name__,
            "errors": tuple(e.dump_map() for e in self.errors),
            "error": "Multiple Errors Encountered.",
        }

    def contains(self, exception_class) -> bool:
        return any(isinstance(e, exception_class) for e in self.errors)
