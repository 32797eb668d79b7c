# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""Dotted integer versions as used by package manifests and the engine."""

from __future__ import annotations

import re
from collections.abc import Mapping
from functools import total_ordering
from logging import getLogger

log = getLogger(__name__)

_COMPONENT = re.compile(r"^\s*(\d+)")


@total_ordering
class DottedVersion:
    """
    Examples:
        >>> DottedVersion("1.4.2") > DottedVersion("1.4")
        True
        >>> DottedVersion("1.4.0") == DottedVersion("1.4")
        True
    """

    def __init__(self, vstr):
        self.norm_version = str(vstr or "").strip()
        components = []
        for part in self.norm_version.split(".") if self.norm_version else ():
            match = _COMPONENT.match(part)
            components.append(int(match.group(1)) if match else 0)
        self.components = tuple(components)

    def _padded(self, other):
        width = max(len(self.components), len(other.components))
        return (
            self.components + (0,) * (width - len(self.components)),
            other.components + (0,) * (width - len(other.components)),
        )

    def __eq__(self, other):
        if not isinstance(other, DottedVersion):
            other = DottedVersion(other)
        left, right = self._padded(other)
        return left == right

    def __lt__(self, other):
        if not isinstance(other, DottedVersion):
            other = DottedVersion(other)
        left, right = self._padded(other)
        return left < right

    def __hash__(self):
        components = list(self.components)
        while components and components[-1] == 0:
            components.pop()
        return hash(tuple(components))

    def __bool__(self):
        return bool(self.components)

    def __str__(self):
        return self.norm_version

    def __repr__(self):
        return f'{self.__class__.__name__}("{self}")'

    def within_upper_bound(self, upper):
        # an upper bound only constrains the components it spells out: "1.4" admits "1.4.9"
        upper = upper if isinstance(upper, DottedVersion) else DottedVersion(upper)
        if not upper:
            return True
        return self.components[: len(upper.components)] <= upper.components


def _bound(value):
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise TypeError(value)
    return value


def is_compatible(engine_version, compatibility) -> bool:
    """Check an engine version against a manifest ``compatibility: {min, max}`` block.

    A block that is not a mapping, or bounds that are not version strings, make the
    package incompatible.
    """
    if not compatibility:
        return True
    if not isinstance(compatibility, Mapping):
        log.warning(
            "malformed compatibility block %r, treating as incompatible", compatibility
        )
        return False
    try:
        minimum = _bound(compatibility.get("min") or "")
        maximum = _bound(compatibility.get("max") or "")
    except TypeError as e:
        log.warning(
            "malformed compatibility bound %r, treating as incompatible", e.args[0]
        )
        return False
    engine = DottedVersion(engine_version)
    if minimum and engine < DottedVersion(minimum):
        return False
    if maximum and not engine.within_upper_bound(maximum):
        return False
    return True
