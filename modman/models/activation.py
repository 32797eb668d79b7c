# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""The activation document: a tree keyed by package name recording which packages are enabled.

A top-level package ``foo`` lives at ``/foo``; its submod ``foo.bar`` lives at
``/foo/mods/bar``. Every node carries an ``active`` leaf next to arbitrary sibling data.
"""

from __future__ import annotations

from collections.abc import Mapping
from copy import deepcopy
from logging import getLogger
from typing import TYPE_CHECKING

from ..base.constants import ACTIVE_KEY, SUBMODS_KEY
from .package import SUBMOD_SEPARATOR, normalize_name

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from typing import Any

log = getLogger(__name__)


def package_segments(name: str) -> tuple[str, ...]:
    """
    Examples:
        >>> package_segments("foo.bar")
        ('foo', 'mods', 'bar')
    """
    segments = []
    for part in normalize_name(name).split(SUBMOD_SEPARATOR):
        if segments:
            segments.append(SUBMODS_KEY)
        segments.append(part)
    return tuple(segments)


def activation_path(name: str) -> tuple[str, ...]:
    return package_segments(name) + (ACTIVE_KEY,)


def split_route(route: str | Sequence[str]) -> tuple[str, ...]:
    if isinstance(route, str):
        return tuple(segment for segment in route.split("/") if segment)
    return tuple(route)


def set_path(node: Any, segments: Sequence[str], value: Any) -> Any:
    """Return a copy of ``node`` with ``value`` written at ``segments``.

    Only the nodes along the path are copied; sibling subtrees are shared with the input.
    A node that is not a mapping is replaced by an empty one before descending into it.
    """
    if not segments:
        return value
    head, rest = segments[0], segments[1:]
    result = dict(node) if isinstance(node, Mapping) else {}
    result[head] = set_path(result.get(head), rest, value)
    return result


def get_path(node: Any, segments: Sequence[str], default: Any = None) -> Any:
    for segment in segments:
        if not isinstance(node, Mapping) or segment not in node:
            return default
        node = node[segment]
    return node


class ActivationTree:
    """Immutable-by-convention wrapper around the activation document."""

    def __init__(self, document: Mapping | None = None):
        self._document = dict(document) if isinstance(document, Mapping) else {}

    def __eq__(self, other):
        if not isinstance(other, ActivationTree):
            return NotImplemented
        return self._document == other._document

    def __repr__(self):
        return f"{self.__class__.__name__}({self._document!r})"

    def __bool__(self):
        return bool(self._document)

    def set_path(self, segments: str | Sequence[str], value: Any) -> ActivationTree:
        return ActivationTree(set_path(self._document, split_route(segments), value))

    def get_path(self, segments: str | Sequence[str], default: Any = None) -> Any:
        return get_path(self._document, split_route(segments), default)

    def is_active(self, name: str) -> bool | None:
        """The package's ``active`` leaf, or None when the package has no node."""
        segments = package_segments(name)
        node = self.get_path(segments)
        if not isinstance(node, Mapping):
            return None
        active = node.get(ACTIVE_KEY)
        return active if isinstance(active, bool) else None

    def set_active(self, name: str, active: bool) -> ActivationTree:
        return self.set_path(activation_path(name), bool(active))

    def walk(self) -> Iterator[tuple[str, Mapping]]:
        """Yield ``(dotted_name, node)`` for every package node in the tree."""

        def _walk(prefix, mapping):
            for key, node in mapping.items():
                if not isinstance(node, Mapping):
                    continue
                name = f"{prefix}{SUBMOD_SEPARATOR}{key}" if prefix else key
                yield name, node
                children = node.get(SUBMODS_KEY)
                if isinstance(children, Mapping):
                    yield from _walk(name, children)

        yield from _walk("", self._document)

    def to_document(self) -> dict:
        return deepcopy(self._document)
