# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""Archive extraction in the background.

Extraction is the only long running step of an install. It runs on a worker thread and is
observed through an :class:`ExtractionTask`: synchronous callers iterate :meth:`ticks`,
asynchronous callers ``await task.wait()``. Extraction cannot be cancelled once started.
"""

from __future__ import annotations

import asyncio
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import dataclass
from logging import getLogger
from time import monotonic
from typing import TYPE_CHECKING

from .. import ModmanError
from ..base.constants import DEFAULT_EXTRACT_POLL_INTERVAL
from ..exceptions import ExtractionError
from ..gateways.archive import open_archive

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from concurrent.futures import Future

log = getLogger(__name__)


@dataclass(frozen=True)
class ExtractionProgress:
    """Emitted while extraction runs. ``total`` is None: progress is indeterminate."""

    elapsed: float
    ticks: int
    total: int | None = None


def _extract(opener, archive_path, destination, members):
    with opener(archive_path) as archive:
        archive.extract(destination, members)
    return destination


class ExtractionTask:
    def __init__(self, future: Future, archive_path, destination):
        self._future = future
        self.archive_path = archive_path
        self.destination = destination
        self._started = monotonic()

    def done(self) -> bool:
        return self._future.done()

    def ticks(self, interval=DEFAULT_EXTRACT_POLL_INTERVAL) -> Iterator[ExtractionProgress]:
        count = 0
        while True:
            finished, _ = wait((self._future,), timeout=interval, return_when=FIRST_COMPLETED)
            if finished:
                return
            count += 1
            yield ExtractionProgress(monotonic() - self._started, count)

    def result(self):
        try:
            return self._future.result()
        except ModmanError:
            raise
        except Exception as e:
            log.debug("extraction of %s failed", self.archive_path, exc_info=True)
            raise ExtractionError(self.archive_path, caused_by=e)

    async def wait(self):
        try:
            return await asyncio.wrap_future(self._future)
        except ModmanError:
            raise
        except Exception as e:
            raise ExtractionError(self.archive_path, caused_by=e)


def start_extraction(
    archive_path, destination, members: Iterable[str] | None = None, opener=open_archive
) -> ExtractionTask:
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="modman-extract")
    members = None if members is None else tuple(members)
    future = executor.submit(_extract, opener, archive_path, destination, members)
    executor.shutdown(wait=False)
    log.debug("started extraction of %s into %s", archive_path, destination)
    return ExtractionTask(future, archive_path, destination)
