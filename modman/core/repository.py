# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""Remote repository indexes.

An index is a JSON object mapping package names to their entry::

    {"foo": {"mod": "<manifest url>", "download": "<archive url>",
             "screenshots": ["<url>", ...], "downloadSize": 1.5}}

Relative urls are resolved against the index url. Manifests are fetched concurrently.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import urljoin

from frozendict import frozendict

from .. import ModmanError
from ..common.constants import EMPTY_MAP
from ..common.serialize import JSONDecodeError, json_load
from ..gateways.connection.download import download_text
from ..gateways.disk.read import parse_manifest
from ..models.package import freeze, normalize_name

if TYPE_CHECKING:
    from collections.abc import Iterable

log = getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


@dataclass(frozen=True)
class RepositoryEntry:
    name: str
    repository_url: str
    manifest_url: str | None = None
    download_url: str | None = None
    screenshots: tuple[str, ...] = ()
    download_size: float | None = None
    manifest: frozendict = field(default=EMPTY_MAP, compare=False)


def _float_or_none(value):
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class Repository:
    def __init__(self, url, max_workers=DEFAULT_MAX_WORKERS):
        self.url = url
        self.max_workers = max_workers

    def __repr__(self):
        return f"{self.__class__.__name__}({self.url!r})"

    def _absolute(self, value):
        if not isinstance(value, str) or not value:
            return None
        return urljoin(self.url, value)

    def fetch_index(self) -> dict:
        try:
            index = json_load(download_text(self.url))
        except JSONDecodeError as e:
            raise ModmanError(
                "Repository index at %(url)s is not valid JSON: %(error)s",
                url=self.url,
                error=str(e),
            )
        if not isinstance(index, dict):
            raise ModmanError(
                "Repository index at %(url)s must be a JSON object", url=self.url
            )
        return index

    def _entries_from_index(self, index) -> list[RepositoryEntry]:
        entries = []
        for name, info in index.items():
            if not isinstance(info, dict):
                log.debug("skipping malformed repository entry %s in %s", name, self.url)
                continue
            screenshots = info.get("screenshots") or ()
            entries.append(
                RepositoryEntry(
                    name=normalize_name(name),
                    repository_url=self.url,
                    manifest_url=self._absolute(info.get("mod")),
                    download_url=self._absolute(info.get("download")),
                    screenshots=tuple(
                        self._absolute(s) for s in screenshots if isinstance(s, str)
                    ),
                    download_size=_float_or_none(info.get("downloadSize")),
                )
            )
        return entries

    def _fetch_manifest(self, entry: RepositoryEntry) -> RepositoryEntry:
        if not entry.manifest_url:
            return entry
        try:
            manifest = parse_manifest(download_text(entry.manifest_url))
        except (ModmanError, JSONDecodeError) as e:
            log.warning("Could not fetch manifest of %s: %s", entry.name, e)
            return entry
        return replace(entry, manifest=freeze(manifest))

    def load(self) -> tuple[RepositoryEntry, ...]:
        entries = self._entries_from_index(self.fetch_index())
        if not entries:
            return ()
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            return tuple(executor.map(self._fetch_manifest, entries))


def load_repositories(
    urls: Iterable[str], max_workers=DEFAULT_MAX_WORKERS
) -> dict[str, RepositoryEntry]:
    """Merge the entries of every reachable repository; the first repository listing a name wins."""
    merged = {}
    for url in urls:
        try:
            entries = Repository(url, max_workers).load()
        except ModmanError as e:
            log.warning("Skipping repository %s: %s", url, e)
            continue
        for entry in entries:
            merged.setdefault(entry.name, entry)
    return merged
