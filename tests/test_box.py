from __future__ import annotations

import errno
import os

import pytest

from atomfs.box import Boxed, box, describe_os_error


def test_box_returns_value() -> None:
    res = box(len, "abc")
    assert res.ok
    assert res.value == 3
    assert res.error is None


def test_box_captures_os_error(tmp_path) -> None:
    missing = os.path.join(tmp_path, "missing")
    res = box(os.stat, missing)
    assert not res.ok
    assert res.value is None
    assert res.errno == errno.ENOENT
    assert missing in (res.error or "")


def test_box_lets_other_exceptions_through() -> None:
    def boom() -> None:
        raise TypeError("not an OS problem")

    with pytest.raises(TypeError):
        box(boom)


def test_box_results_are_independent(tmp_path) -> None:
    outer_missing = os.path.join(tmp_path, "outer")

    def nested() -> int:
        inner = box(os.stat, os.path.join(tmp_path, "inner"))
        assert not inner.ok
        return 1

    ok = box(nested)
    bad = box(os.stat, outer_missing)
    assert ok.ok and ok.value == 1
    assert "outer" in (bad.error or "")
    assert "inner" not in (bad.error or "")


@pytest.mark.parametrize(
    "code,denied",
    [(errno.EACCES, True), (errno.EPERM, True), (errno.ENOENT, False)],
)
def test_permission_denied(code: int, denied: bool) -> None:
    res: Boxed[None] = Boxed.failed(OSError(code, os.strerror(code), "/x"))
    assert res.permission_denied is denied


def test_describe_os_error_with_two_files() -> None:
    e = OSError(errno.EXDEV, "Invalid cross-device link", "/a", None, "/b")
    assert describe_os_error(e) == "Invalid cross-device link (/a -> /b)"


def test_describe_os_error_without_file() -> None:
    assert describe_os_error(OSError(errno.EIO, "I/O error")) == "I/O error"
