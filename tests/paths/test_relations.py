from __future__ import annotations

import pytest

from atomfs.errors import InvalidArgumentError, UnsupportedEnvironmentError
from atomfs.paths import (
    get_directory,
    get_home_directory,
    get_longest_common_base_path,
    get_root,
    get_scheme_and_hierarchy,
    is_absolute,
    is_base_path,
    is_local,
    is_relative,
    make_absolute,
    make_relative,
    split_root,
)


@pytest.mark.parametrize(
    "path,absolute",
    [
        ("/var/lib", True),
        ("c:\\\\var\\lib", True),
        ("\\var\\lib", True),
        ("C:", True),
        ("var/lib", False),
        ("../var/lib", False),
        ("", False),
        ("phar:///archive", True),
        ("phar://archive", False),
    ],
)
def test_is_absolute(path: str, absolute: bool) -> None:
    assert is_absolute(path) is absolute
    assert is_relative(path) is not absolute


@pytest.mark.parametrize(
    "path,root",
    [
        ("/webmozart/puli", "/"),
        ("\\webmozart", "/"),
        ("C:/webmozart", "C:/"),
        ("C:\\webmozart", "C:/"),
        ("C:", "C:/"),
        ("webmozart", ""),
        ("", ""),
        ("phar:///webmozart", "phar:///"),
        ("phar://C:/webmozart", "phar://C:/"),
    ],
)
def test_get_root(path: str, root: str) -> None:
    assert get_root(path) == root


@pytest.mark.parametrize(
    "path,expected",
    [
        ("/webmozart/puli/style.css", "/webmozart/puli"),
        ("/webmozart/puli/", "/webmozart/puli"),
        ("flamecore/", "flamecore"),
        ("C:/webmozart/", "C:/webmozart"),
        ("/webmozart", "/"),
        ("/", "/"),
        ("C:/webmozart", "C:/"),
        ("C:\\webmozart\\puli", "C:/webmozart"),
        ("C:", "C:/"),
        ("webmozart", ""),
        ("webmozart/puli", "webmozart"),
        ("", ""),
        ("phar:///webmozart/style.css", "phar:///webmozart"),
        ("phar://C:/webmozart", "phar://C:/"),
    ],
)
def test_get_directory(path: str, expected: str) -> None:
    assert get_directory(path) == expected


@pytest.mark.parametrize(
    "path,expected",
    [
        ("/a/b", ("/", "a/b")),
        ("C:/a", ("C:/", "a")),
        ("C:", ("C:/", "")),
        ("a/b", ("", "a/b")),
        ("", ("", "")),
        ("phar:///a", ("phar:///", "a")),
    ],
)
def test_split_root(path: str, expected: tuple[str, str]) -> None:
    assert split_root(path) == expected


def test_scheme_helpers() -> None:
    assert get_scheme_and_hierarchy("file:///tmp/x") == ("file", "/tmp/x")
    assert get_scheme_and_hierarchy("/tmp/x") == (None, "/tmp/x")
    assert get_scheme_and_hierarchy("C://x") == (None, "C://x")
    assert is_local("/tmp")
    assert not is_local("")
    assert not is_local("http://example.org/x")


@pytest.mark.parametrize(
    "path,base,expected",
    [
        ("css/style.css", "/webmozart/puli", "/webmozart/puli/css/style.css"),
        ("../css/style.css", "/webmozart/puli", "/webmozart/css/style.css"),
        ("css", "/webmozart/puli/", "/webmozart/puli/css"),
        ("css", "C:/webmozart", "C:/webmozart/css"),
        ("css", "C:\\webmozart\\", "C:/webmozart/css"),
        ("/abs/path", "/webmozart", "/abs/path"),
        ("D:/abs", "C:/webmozart", "D:/abs"),
        ("css", "phar:///base", "phar:///base/css"),
    ],
)
def test_make_absolute(path: str, base: str, expected: str) -> None:
    assert make_absolute(path, base) == expected


@pytest.mark.parametrize("base", ["", "relative/base"])
def test_make_absolute_rejects_bad_base(base: str) -> None:
    with pytest.raises(InvalidArgumentError) as ei:
        make_absolute("css", base)
    assert isinstance(ei.value, ValueError)


@pytest.mark.parametrize(
    "path,base,expected",
    [
        ("/var/lib/symfony/src/Symfony/", "/var/lib/symfony/src/Symfony/Component", "../"),
        ("/var/lib/symfony/src/Symfony", "/var/lib/symfony/src/Symfony/Component/", "../"),
        ("/usr/lib/symfony/", "/var/lib/symfony/src/Symfony/Component", "../../../../../../usr/lib/symfony/"),
        ("/var/lib/symfony/src/Symfony/", "/var/lib/symfony/", "src/Symfony/"),
        ("/aa/bb", "/aa/bb", "./"),
        ("/aa/bb", "/aa/bb/", "./"),
        ("/aa/bb/", "/aa/bb", "./"),
        ("/aa/bb/cc", "/aa/bb/cc/dd", "../"),
        ("/aa/bb/cc/", "/aa/bb/cc/dd/", "../"),
        ("/aa/bb/cc", "/aa", "bb/cc/"),
        ("/aa/bb/cc/", "/aa/", "bb/cc/"),
        ("/a/aab/bb", "/a/aa", "../aab/bb/"),
        ("/a/aab/bb/", "/", "a/aab/bb/"),
        ("/a/aab/bb/", "/b/aab", "../../a/aab/bb/"),
        ("/aab/bb", "/aa", "../aab/bb/"),
        ("/aab", "/aa", "../aab/"),
        ("/aa/bb/cc", "/aa/dd/..", "bb/cc/"),
        ("/aa/../bb/cc", "/aa/dd/..", "../bb/cc/"),
        ("/aa/bb/../../cc", "/aa/../dd/..", "cc/"),
        ("/../aa/bb/cc", "/aa/dd/..", "bb/cc/"),
        ("/../../aa/../bb/cc", "/aa/dd/..", "../bb/cc/"),
        ("C:/aa/bb/cc", "C:/aa/dd/..", "bb/cc/"),
        ("C:/aa/bb/cc", "c:/aa/dd/..", "bb/cc/"),
        ("c:/aa/../bb/cc", "c:/aa/dd/..", "../bb/cc/"),
        ("C:/aa/bb/../../cc", "C:/aa/../dd/..", "cc/"),
        ("C:/../aa/bb/cc", "C:/aa/dd/..", "bb/cc/"),
        ("C:/../../aa/../bb/cc", "C:/aa/dd/..", "../bb/cc/"),
        ("c:\\var\\lib/symfony/src/Symfony/", "c:/var/lib/symfony/", "src/Symfony/"),
        ("a/b/c", "a", "b/c/"),
        ("a", "a/b", "../"),
    ],
)
def test_make_relative(path: str, base: str, expected: str) -> None:
    assert make_relative(path, base) == expected


@pytest.mark.parametrize(
    "path,base",
    [
        ("/var/lib/symfony/", "var/lib/symfony/src/Symfony/Component"),
        ("var/lib/symfony/", "/var/lib/symfony/src/Symfony/Component"),
        ("D:/", "C:/aa/../bb/cc"),
        ("D:/aa/bb", "C:/aa"),
        ("/aa", "C:/aa"),
    ],
)
def test_make_relative_rejects_unrelated_paths(path: str, base: str) -> None:
    with pytest.raises(InvalidArgumentError):
        make_relative(path, base)


def test_make_relative_then_absolute_round_trip() -> None:
    base = "/var/lib/app"
    for p in ["/var/lib/app/x/y", "/var/log", "/"]:
        rel = make_relative(p, base)
        assert canonical_dir(make_absolute(rel, base)) == canonical_dir(p)


def canonical_dir(p: str) -> str:
    return p.rstrip("/") or "/"


@pytest.mark.parametrize(
    "paths,expected",
    [
        (("/webmozart/css/style.css", "/webmozart/css"), "/webmozart/css"),
        (("/webmozart/css", "/webmozart/css/style.css"), "/webmozart/css"),
        (("/webmozart/css/style.css", "/webmozart/js"), "/webmozart"),
        (("/webmozart/css/style.css", "/puli/css/.."), "/"),
        (("/base/foo", "/base/foobar"), "/base"),
        (("C:/webmozart/css", "c:/webmozart/js"), "C:/webmozart"),
        (("C:/webmozart", "D:/webmozart"), None),
        (("/webmozart", "webmozart"), None),
        (("webmozart/css", "webmozart/js"), "webmozart"),
        (("/a/b/c", "/a/b/d", "/a/x"), "/a"),
        (("/only/one",), "/only/one"),
        ((), None),
    ],
)
def test_get_longest_common_base_path(paths: tuple[str, ...], expected: str | None) -> None:
    assert get_longest_common_base_path(*paths) == expected


@pytest.mark.parametrize(
    "base,path,expected",
    [
        ("/webmozart", "/webmozart/css", True),
        ("/webmozart", "/webmozart", True),
        ("/webmozart/", "/webmozart", True),
        ("/webmozart", "/webmozartfoo", False),
        ("/webmozart", "/puli", False),
        ("/", "/webmozart", True),
        ("C:/", "C:/webmozart", True),
        ("webmozart", "webmozart/css", True),
        ("/webmozart/css/..", "/webmozart/js", True),
    ],
)
def test_is_base_path(base: str, path: str, expected: bool) -> None:
    assert is_base_path(base, path) is expected


def test_home_directory_from_home(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HOME", "/home//webmozart/")
    assert get_home_directory() == "/home/webmozart/"


def test_home_directory_from_windows_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("HOME", raising=False)
    monkeypatch.setenv("HOMEDRIVE", "C:")
    monkeypatch.setenv("HOMEPATH", "\\users\\webmozart")
    assert get_home_directory() == "C:/users/webmozart"


def test_home_directory_unsupported(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("HOME", "HOMEDRIVE", "HOMEPATH"):
        monkeypatch.delenv(var, raising=False)
    with pytest.raises(UnsupportedEnvironmentError):
        get_home_directory()
