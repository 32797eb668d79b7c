# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from modman.base.context import reset_context
from modman.common.path import path_to_url
from modman.exceptions import ModmanHTTPError, OfflineError, PackageExistsError
from modman.gateways.connection import HTTPError
from modman.gateways.connection.download import (
    TmpDownload,
    download,
    download_http_errors,
    download_text,
    url_basename,
)
from modman.gateways.connection.session import ModmanSession, clear_sessions, get_session

if TYPE_CHECKING:
    from pathlib import Path


def test_local_file_download(modman_context, tmp_path: Path):
    source = tmp_path / "source.bin"
    source.write_bytes(b"0123456789" * 5000)
    target = tmp_path / "target.bin"
    fractions = []
    download(path_to_url(str(source)), str(target), fractions.append)
    assert target.read_bytes() == source.read_bytes()
    assert fractions[-1] == 1.0
    assert fractions == sorted(fractions)


def test_download_refuses_existing_target(modman_context, tmp_path: Path):
    target = tmp_path / "exists"
    target.write_text("x")
    with pytest.raises(PackageExistsError):
        download(path_to_url(str(target)), str(target))


def test_missing_local_file_is_http_404(modman_context, tmp_path: Path):
    url = path_to_url(str(tmp_path / "missing.json"))
    with pytest.raises(ModmanHTTPError) as exc:
        download_text(url)
    assert exc.value.dump_map()["status_code"] == 404
    assert "NOT FOUND" in str(exc.value)
    assert url in str(exc.value)
    assert exc.value.dump_map()["json"]["error"] == "file does not exist"


def test_download_text(modman_context, tmp_path: Path):
    index = tmp_path / "index.json"
    index.write_text(json.dumps({"a": 1}))
    assert json.loads(download_text(path_to_url(str(index)))) == {"a": 1}


def test_tmp_download(modman_context, tmp_path: Path):
    source = tmp_path / "pkg.zip"
    source.write_bytes(b"zip")
    with TmpDownload(path_to_url(str(source))) as path:
        assert path != str(source)
        assert path.endswith("pkg.zip")
        with open(path, "rb") as fh:
            assert fh.read() == b"zip"
    assert not (tmp_path / path).exists()

    # plain paths are used as they are
    with TmpDownload(str(source)) as path:
        assert path == str(source)
    assert source.exists()


def test_url_basename():
    assert url_basename("https://example.com/mods/Some%20Mod.zip?raw=1") == "Some Mod.zip"
    assert url_basename("https://example.com/") == "download"


def test_http_error_translation():
    with pytest.raises(ModmanHTTPError) as exc:
        with download_http_errors("https://example.com/100%/index.json"):
            raise HTTPError("boom")
    message = str(exc.value)
    assert message.startswith(
        "HTTP 000 CONNECTION FAILED for url <https://example.com/100%/index.json>"
    )
    assert "simple retry" in message


def test_offline_session_refuses_http(monkeypatch, modman_context):
    monkeypatch.setenv("MODMAN_OFFLINE", "true")
    reset_context(())
    clear_sessions()
    try:
        session = get_session("https://example.com/index.json")
        with pytest.raises(OfflineError):
            session.get("https://example.com/index.json")
    finally:
        clear_sessions()


def test_session_headers(modman_context):
    clear_sessions()
    session = get_session("https://example.com")
    assert isinstance(session, ModmanSession)
    assert session.headers["User-Agent"].startswith("modman/")
    assert session is get_session("https://example.com")
    clear_sessions()
