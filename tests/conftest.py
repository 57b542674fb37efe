from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import pytest


@pytest.fixture
def workspace(tmp_path: Path) -> str:
    """Resolved scratch directory as a plain str (tmp_path may sit behind a symlink)."""
    return os.path.realpath(tmp_path)


@pytest.fixture
def umask_022() -> Iterator[int]:
    old = os.umask(0o022)
    try:
        yield 0o022
    finally:
        os.umask(old)


@pytest.fixture
def write_text():
    def _write(path: str, text: str = "") -> str:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
        return path

    return _write


@pytest.fixture
def read_text():
    def _read(path: str) -> str:
        with open(path, encoding="utf-8") as f:
            return f.read()

    return _read
