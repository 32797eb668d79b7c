# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""Serves ``file://`` urls so local repositories behave like remote ones."""

from __future__ import annotations

from email.utils import formatdate
from io import BytesIO
from logging import getLogger
from mimetypes import guess_type
from os import stat

from ....common.path import url_to_path
from ....common.serialize import json_dump
from .. import BaseAdapter, CaseInsensitiveDict, Response

log = getLogger(__name__)


def _not_found(response: Response, path, exc: OSError) -> Response:
    # the json body mirrors what an http server would explain
    body = {"error": "file does not exist", "path": path, "exception": repr(exc)}
    response.status_code = 404
    response.reason = "NOT FOUND"
    response.headers = CaseInsensitiveDict({"Content-Type": "application/json"})
    response.raw = BytesIO(json_dump(body).encode("utf-8"))
    return response


class LocalFSAdapter(BaseAdapter):
    def send(
        self, request, stream=None, timeout=None, verify=None, cert=None, proxies=None
    ):
        path = url_to_path(request.url)
        response = Response()
        response.url = request.url
        response.request = request

        try:
            info = stat(path)
        except OSError as exc:
            log.debug("local file %s is missing", path)
            _not_found(response, path, exc)
        else:
            response.status_code = 200
            response.headers = CaseInsensitiveDict(
                {
                    "Content-Type": guess_type(path)[0] or "text/plain",
                    "Content-Length": str(info.st_size),
                    "Last-Modified": formatdate(info.st_mtime, usegmt=True),
                }
            )
            response.raw = open(path, "rb")
        response.close = response.raw.close
        return response

    def close(self):
        pass
