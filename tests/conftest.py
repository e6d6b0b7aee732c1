from __future__ import annotations

import os
import pathlib

import pytest


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def write_file(tmp_path: pathlib.Path):
    """Write `content` to `tmp_path/name`, optionally setting its mtime."""

    def _write(name: str, content: bytes, mtime: float | None = None) -> pathlib.Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        if mtime is not None:
            os.utime(path, (mtime, mtime))
        return path

    return _write
