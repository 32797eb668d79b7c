# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""Collection of helper functions used in modman tests."""

from __future__ import annotations

import io
import json
import tarfile
import zipfile
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


def manifest(name, **fields) -> dict:
    data = {"name": name.title(), "version": "1.0"}
    data.update(fields)
    return data


def make_package_dir(parent: Path, dirname, **fields) -> Path:
    """Create ``parent/dirname/mod.json`` plus a data file."""
    path = parent / dirname
    path.mkdir(parents=True, exist_ok=True)
    (path / "mod.json").write_text(json.dumps(manifest(dirname, **fields)))
    (path / "content.txt").write_text("x" * 10)
    return path


def make_submod_dir(package_dir: Path, dirname, **fields) -> Path:
    return make_package_dir(package_dir / "mods", dirname, **fields)


def _encode(content) -> bytes:
    if isinstance(content, bytes):
        return content
    if isinstance(content, dict):
        return json.dumps(content).encode("utf-8")
    return content.encode("utf-8")


def make_zip(path: Path, files: dict) -> Path:
    """Write a zip archive; keys ending in ``/`` become directory entries."""
    with zipfile.ZipFile(path, "w") as zf:
        for name, content in files.items():
            if name.endswith("/"):
                zf.writestr(zipfile.ZipInfo(name), b"")
            else:
                zf.writestr(name, _encode(content))
    return path


def make_tar(path: Path, files: dict) -> Path:
    with tarfile.open(path, "w:gz") as tf:
        for name, content in files.items():
            info = tarfile.TarInfo(name.rstrip("/"))
            if name.endswith("/"):
                info.type = tarfile.DIRTYPE
                info.mode = 0o755
                tf.addfile(info)
            else:
                data = _encode(content)
                info.size = len(data)
                info.mode = 0o644
                tf.addfile(info, io.BytesIO(data))
    return path


def package_archive(path: Path, name, root=None, **fields) -> Path:
    """Zip a single package whose manifest lives at ``root/mod.json`` (default: ``name/``)."""
    root = name if root is None else root
    prefix = f"{root}/" if root else ""
    files = {}
    if root:
        parts = root.split("/")
        for i in range(len(parts)):
            files["/".join(parts[: i + 1]) + "/"] = b""
    files[f"{prefix}mod.json"] = manifest(name, **fields)
    files[f"{prefix}content/data.txt"] = "payload"
    return make_zip(path, files)
