from __future__ import annotations

import os
import stat
import tempfile

import pytest

from atomfs.errors import FSIOError
from atomfs.reporting.warnings_bridge import TempDirectoryFallbackWarning
from atomfs.tempfiles import tempdir, tempnam


def test_tempnam_creates_empty_unique_files(workspace: str) -> None:
    names = {tempnam(workspace, "pre") for _ in range(20)}

    assert len(names) == 20
    for name in names:
        assert os.path.dirname(name) == workspace
        assert os.path.basename(name).startswith("pre")
        assert os.path.getsize(name) == 0


@pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
def test_tempnam_is_private(workspace: str) -> None:
    name = tempnam(workspace, "pre")
    assert stat.S_IMODE(os.stat(name).st_mode) == 0o600


def test_tempnam_with_suffix(workspace: str) -> None:
    name = tempnam(workspace, "pre", ".tmp")
    assert name.endswith(".tmp")
    assert os.path.isfile(name)


def test_tempnam_keeps_file_scheme(workspace: str) -> None:
    name = tempnam(f"file://{workspace}", "pre")
    assert name.startswith(f"file://{workspace}/pre")
    assert os.path.isfile(name[len("file://") :])


def test_tempnam_falls_back_to_system_temp(workspace: str) -> None:
    missing = os.path.join(workspace, "missing")

    with pytest.warns(TempDirectoryFallbackWarning):
        name = tempnam(missing, "pre")

    try:
        assert os.path.dirname(name) == tempfile.gettempdir()
    finally:
        os.unlink(name)


def test_tempnam_gives_up_after_repeated_failures(workspace: str) -> None:
    missing = os.path.join(workspace, "missing")
    with pytest.raises(FSIOError, match="could not be created") as ei:
        tempnam(missing, "pre", ".tmp")
    assert ei.value.diagnostic.notes


def test_tempdir(workspace: str) -> None:
    d = tempdir("pre", "suf", workspace)
    assert os.path.isdir(d)
    assert os.path.basename(d).startswith("pre")
    assert d.endswith("suf")


def test_tempdir_in_missing_parent(workspace: str) -> None:
    with pytest.raises(FSIOError):
        tempdir(dir=os.path.join(workspace, "missing"))
