# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""Fetching repository indexes, manifests and package archives."""

from __future__ import annotations

import tempfile
import warnings
from contextlib import contextmanager
from logging import getLogger
from os.path import basename, exists, join
from typing import TYPE_CHECKING
from urllib.parse import unquote, urlsplit

from ... import ModmanError
from ...base.context import context
from ...exceptions import ModmanHTTPError, ModmanSSLError, PackageExistsError
from ..disk.delete import rm_rf
from . import InsecureRequestWarning, RequestException, SSLError
from .session import get_session

if TYPE_CHECKING:
    from collections.abc import Callable

    from . import Response

log = getLogger(__name__)

CHUNK_SIZE = 1 << 14

HTTP_HELP = (
    "An HTTP error occurred when trying to retrieve this URL.\n"
    "HTTP errors are often intermittent, and a simple retry will get you on your way."
)


@contextmanager
def download_http_errors(url: str):
    """Turn requests exceptions raised in the block into modman errors."""
    try:
        yield
    except SSLError as e:
        raise ModmanSSLError(
            "Encountered an SSL error. Most likely a certificate verification issue.\n\n"
            "Exception: %(exception)s",
            exception=str(e),
        )
    except RequestException as e:
        response = e.response
        raise ModmanHTTPError(
            HTTP_HELP,
            url,
            getattr(response, "status_code", None),
            getattr(response, "reason", None),
            getattr(response, "elapsed", None),
            response,
            caused_by=e,
        )


def _get(url) -> Response:
    if not context.ssl_verify:
        warnings.simplefilter("ignore", InsecureRequestWarning)
    timeout = (context.remote_connect_timeout_secs, context.remote_read_timeout_secs)
    response = get_session(url).get(url, stream=True, timeout=timeout)
    log.debug("GET %s -> %s %s", url, response.status_code, response.reason)
    response.raise_for_status()
    return response


def _write_chunks(response: Response, fh, progress: Callable[[float], None] | None):
    total = int(response.headers.get("Content-Length") or 0)
    written = 0
    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
        fh.write(chunk)
        written += len(chunk)
        if total and progress is not None:
            progress(min(written / total, 1.0))


def download(url, target_full_path, progress_update_callback=None):
    """Stream ``url`` into a new file, reporting the completed fraction as it goes."""
    if exists(target_full_path):
        raise PackageExistsError(target_full_path)

    with download_http_errors(url):
        response = _get(url)
        try:
            with open(target_full_path, "wb") as fh:
                _write_chunks(response, fh, progress_update_callback)
        except RequestException:
            # a broken stream; download_http_errors reports it
            rm_rf(target_full_path)
            raise
        except OSError as e:
            rm_rf(target_full_path)
            raise ModmanError(
                "Failed to write to %(target_path)s\n  errno: %(errno)d",
                target_path=target_full_path,
                errno=e.errno or 0,
            )
        except BaseException:
            rm_rf(target_full_path)
            raise
        finally:
            response.close()


def download_text(url) -> str:
    with download_http_errors(url):
        return _get(url).text


def url_basename(url):
    return basename(unquote(urlsplit(url).path)) or "download"


class TmpDownload:
    """Download ``url`` into a temporary directory for the duration of the block.

    A plain filesystem path is handed back untouched and never deleted.
    """

    def __init__(self, url, progress_update_callback=None):
        self.url = url
        self.progress_update_callback = progress_update_callback
        self.tmp_dir = None

    def __enter__(self):
        if "://" not in self.url:
            return self.url
        self.tmp_dir = tempfile.mkdtemp(prefix="modman-")
        target = join(self.tmp_dir, url_basename(self.url))
        try:
            download(self.url, target, self.progress_update_callback)
        except BaseException:
            self.__exit__(None, None, None)
            raise
        return target

    def __exit__(self, exc_type, exc_value, traceback):
        if self.tmp_dir:
            rm_rf(self.tmp_dir)
            self.tmp_dir = None
