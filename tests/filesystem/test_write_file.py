from __future__ import annotations

import gzip
import io
import os
import stat

import pytest

from atomfs.errors import FSIOError, InvalidArgumentError
from atomfs.filesystem import append_to_file, read_file, write_file


class FailingReader(io.RawIOBase):
    """Yields one chunk, then fails like a broken pipe or a vanished mount."""

    def __init__(self, first: bytes) -> None:
        self._first: bytes | None = first

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        if self._first is not None:
            chunk, self._first = self._first, None
            return chunk
        raise OSError(5, "Input/output error")


@pytest.mark.parametrize(
    "content,expected",
    [
        (b"\x00\x01binary", b"\x00\x01binary"),
        ("héllo", "héllo".encode("utf-8")),
        (b"", b""),
    ],
)
def test_write_then_read_round_trip(workspace: str, content, expected: bytes) -> None:
    target = os.path.join(workspace, "out", "file.bin")
    write_file(target, content)
    assert read_file(target) == expected


def test_write_from_stream(workspace: str) -> None:
    target = os.path.join(workspace, "stream.bin")
    data = os.urandom(2 * 1024 * 1024 + 3)
    write_file(target, io.BytesIO(data))
    assert read_file(target) == data


def test_failed_write_keeps_original_and_cleans_up(workspace: str, write_text, read_text) -> None:
    target = write_text(os.path.join(workspace, "keep.txt"), "original")

    with pytest.raises(FSIOError, match="Failed to write file"):
        write_file(target, FailingReader(b"partial"))

    assert read_text(target) == "original"
    assert os.listdir(workspace) == ["keep.txt"]


def test_failed_write_leaves_no_file(workspace: str) -> None:
    target = os.path.join(workspace, "new.txt")

    with pytest.raises(FSIOError):
        write_file(target, FailingReader(b"partial"))

    assert os.listdir(workspace) == []


@pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
def test_write_preserves_existing_mode(workspace: str, write_text) -> None:
    target = write_text(os.path.join(workspace, "script"), "old")
    os.chmod(target, 0o750)

    write_file(target, b"new")

    assert stat.S_IMODE(os.stat(target).st_mode) == 0o750


@pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
def test_new_file_mode_honours_umask(workspace: str, umask_022: int) -> None:
    target = os.path.join(workspace, "fresh")
    write_file(target, b"x")
    assert stat.S_IMODE(os.stat(target).st_mode) == 0o666 & ~umask_022


def test_write_compressed(workspace: str) -> None:
    target = os.path.join(workspace, "data.gz")
    write_file(f"compress.zlib://{target}", b"squeezed")

    with gzip.open(target, "rb") as f:
        assert f.read() == b"squeezed"
    assert read_file(f"compress.zlib://{target}") == b"squeezed"


def test_write_remote_is_rejected() -> None:
    with pytest.raises(InvalidArgumentError):
        write_file("https://example.org/file", b"x")


def test_write_rejects_unknown_content(workspace: str) -> None:
    with pytest.raises(TypeError, match="content must be"):
        write_file(os.path.join(workspace, "f"), 42)  # type: ignore[arg-type]


def test_read_missing_file(workspace: str) -> None:
    with pytest.raises(FSIOError, match="Unable to read file"):
        read_file(os.path.join(workspace, "missing"))


def test_append_to_file(workspace: str) -> None:
    target = os.path.join(workspace, "sub", "log.txt")
    append_to_file(target, "one\n")
    append_to_file(target, b"two\n")
    append_to_file(target, io.BytesIO(b"three\n"))
    assert read_file(target) == b"one\ntwo\nthree\n"
