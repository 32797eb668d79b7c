# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""One requests session per thread, configured from the context.

Repository manifests are fetched from a thread pool; each worker gets its own
session. :func:`clear_sessions` invalidates every thread's session after the
configuration changes.
"""

from __future__ import annotations

from logging import getLogger
from threading import local
from typing import TYPE_CHECKING

from ...base.context import context
from ...exceptions import OfflineError
from . import BaseAdapter, HTTPAdapter, Retry, Session
from .adapters.localfs import LocalFSAdapter

if TYPE_CHECKING:
    from requests.models import PreparedRequest

log = getLogger(__name__)

RETRY_STATUSES = (413, 429, 500, 503)


class OfflineAdapter(BaseAdapter):
    """Mounted for http(s) in offline mode; any use is an error."""

    def send(self, request: PreparedRequest, *args, **kwargs):
        raise OfflineError(
            f"Cannot fetch {request.url}: remote connections are disabled in offline mode."
        )

    def close(self):
        pass


class ModmanSession(Session):
    def __init__(self):
        super().__init__()
        self.verify = context.ssl_verify
        self.headers["User-Agent"] = context.user_agent

        if context.offline:
            remote = OfflineAdapter()
        else:
            remote = HTTPAdapter(
                max_retries=Retry(
                    total=context.remote_max_retries,
                    backoff_factor=0.25,
                    status_forcelist=RETRY_STATUSES,
                    raise_on_status=False,
                    respect_retry_after_header=False,
                )
            )
        self.mount("http://", remote)
        self.mount("https://", remote)
        self.mount("file://", LocalFSAdapter())


class _ThreadSessions(local):
    session: ModmanSession | None = None
    generation = -1


_sessions = _ThreadSessions()
_generation = 0


def get_session(url: str) -> ModmanSession:
    """The calling thread's session; http, https and file urls all share it."""
    if _sessions.session is None or _sessions.generation != _generation:
        log.debug("creating a new session for %s", url)
        _sessions.session = ModmanSession()
        _sessions.generation = _generation
    return _sessions.session


def clear_sessions():
    global _generation
    _generation += 1
