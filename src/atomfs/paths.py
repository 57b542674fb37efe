# atomfs/paths.py
# Path algebra: pure string transformations over path strings.
#
# Goals:
# - Deal with both UNIX and Windows paths, with forward and backward slashes,
#   regardless of the host platform.
# - Keep an optional "<scheme>://" prefix (file://, phar://, compress.zlib://)
#   verbatim and operate on the remainder.
# - Return canonical parts: forward slashes, no "." segments, ".." collapsed
#   where a preceding segment exists.
# - Never touch the filesystem. Only the documented InvalidArgumentError cases
#   of make_absolute()/make_relative() raise.

from __future__ import annotations

import os
import re

from atomfs.constants import SCHEME_SEPARATOR
from atomfs.errors import InvalidArgumentError, UnsupportedEnvironmentError
from atomfs.reporting.diagnostics import PathSpan

__all__ = [
    "canonicalize",
    "normalize",
    "is_absolute",
    "is_relative",
    "is_local",
    "get_root",
    "get_directory",
    "get_scheme_and_hierarchy",
    "split_root",
    "join",
    "make_absolute",
    "make_relative",
    "get_longest_common_base_path",
    "is_base_path",
    "get_home_directory",
]

_SEPARATORS = "/\\"
_SEP_RUN = re.compile(r"[/\\]+")

# Two or more characters so "C://foo" stays a drive-anchored path.
_SCHEME = re.compile(r"^([A-Za-z][A-Za-z0-9+.\-]+)://")

# "C:" alone or followed by a separator
_DRIVE_ROOT = re.compile(r"^[A-Za-z]:(?:[/\\]|$)")


# ---------------------------------------------------------------------------
# Scheme handling
# ---------------------------------------------------------------------------
def _split_scheme(path: str) -> tuple[str, str]:
    """("<scheme>://", rest) or ("", path)."""
    m = _SCHEME.match(path)
    if m is None:
        return "", path
    return path[: m.end()], path[m.end() :]


def get_scheme_and_hierarchy(path: str) -> tuple[str | None, str]:
    """
    Scheme (without "://") and hierarchical part of a path, e.g.
    "file:///tmp" -> ("file", "/tmp"), "/tmp" -> (None, "/tmp").
    """
    prefix, rest = _split_scheme(path)
    if not prefix:
        return None, path
    return prefix[: -len(SCHEME_SEPARATOR)], rest


def is_local(path: str) -> bool:
    return path != "" and SCHEME_SEPARATOR not in path


# ---------------------------------------------------------------------------
# Canonical forms
# ---------------------------------------------------------------------------
def _is_root_marker(result: list[str]) -> bool:
    # "" is the UNIX root, a lone leading "C:" the Windows one; ".." never collapses.
    last = result[-1]
    if last in ("..", ""):
        return True
    return len(result) == 1 and _DRIVE_ROOT.match(last) is not None


def canonicalize(path: str, use_backslash: bool = False) -> str:
    """
    Canonicalize a path: split on any run of "/" or "\\", drop "." segments
    and collapse ".." with the previous segment unless there is none, it is
    itself "..", or it is the root marker.

    >>> canonicalize("/file/./.././.././bar")
    '/../bar'
    >>> canonicalize("phar://archive/../x")
    'phar://x'
    """
    scheme, path = _split_scheme(path)

    parts = _SEP_RUN.split(path) if path else []
    result: list[str] = []
    for part in parts:
        if part == ".." and result and not _is_root_marker(result):
            result.pop()
        elif part != ".":
            result.append(part)

    sep = "\\" if use_backslash else "/"
    return scheme + (sep if result == [""] else sep.join(result))


def normalize(path: str, use_backslash: bool = False) -> str:
    """
    Replace every run of separators with a single target separator.

    Contrary to canonicalize(), dot segments are left alone, so this is the
    cheaper choice for paths already known to be valid absolute paths.
    """
    scheme, path = _split_scheme(path)
    return scheme + _SEP_RUN.sub("\\\\" if use_backslash else "/", path)


# ---------------------------------------------------------------------------
# Roots
# ---------------------------------------------------------------------------
def is_absolute(path: str) -> bool:
    _, path = _split_scheme(path)
    if path == "":
        return False
    # UNIX root "/" or "\" (Windows style)
    if path[0] in _SEPARATORS:
        return True
    return _DRIVE_ROOT.match(path) is not None


def is_relative(path: str) -> bool:
    return not is_absolute(path)


def get_root(path: str) -> str:
    """
    Canonical root of a path ("/", "C:/", scheme included), or "" when the path
    is relative or empty.
    """
    scheme, path = _split_scheme(path)
    if path == "":
        return ""
    if path[0] in _SEPARATORS:
        return scheme + "/"
    if _DRIVE_ROOT.match(path):
        return scheme + path[:2] + "/"
    return ""


def split_root(path: str) -> tuple[str, str]:
    """
    Split a canonical path into its root (scheme included) and the remainder.

    Windows partitions always come back with a trailing slash:
    "C:/flamecore" -> ("C:/", "flamecore"), "C:" -> ("C:/", "").
    """
    if path == "":
        return "", ""

    root, path = _split_scheme(path)

    if path.startswith("/"):
        return root + "/", path[1:]
    if len(path) >= 2 and path[0].isascii() and path[0].isalpha() and path[1] == ":":
        if len(path) == 2:
            return root + path + "/", ""
        if path[2] == "/":
            return root + path[:3], path[3:]
    return root, path


def _root_key(root: str) -> str:
    # Drive letters compare case-insensitively ("c:/" == "C:/").
    scheme, rest = _split_scheme(root)
    return scheme + (rest[:1].upper() + rest[1:] if rest[1:2] == ":" else rest)


def get_directory(path: str) -> str:
    """
    Directory part of a path, as a canonical path.

    Unlike os.path.dirname():
      - backslashes are separators on every host
      - get_directory("C:/x") is "C:/" and get_directory("C:") is "C:/"
      - get_directory("flamecore") is "", not "."

    Only the last "/"-delimited segment of the canonical path is cut, so
    get_directory("/a/b/") is "/a/b".
    """
    if path == "":
        return ""

    scheme, path = _split_scheme(canonicalize(path))

    root, rest = split_root(path)
    if rest == "" and root:
        return scheme + root

    if root:
        pos = rest.rfind("/")
        return scheme + (root if pos == -1 else root + rest[:pos])

    pos = rest.rfind("/")
    if pos == -1:
        return ""
    return scheme + rest[:pos]


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------
def join(*paths: str) -> str:
    """
    Join path strings into a canonical path.

    The first non-empty part keeps its leading separators ("/top", "C:\\",
    "phar://"); later parts have theirs stripped, except right after a part
    that carried a scheme.
    """
    final: str | None = None
    was_scheme = False

    for path in paths:
        if path == "":
            continue

        if final is None:
            final = path
            was_scheme = SCHEME_SEPARATOR in path
            continue

        if final[-1] not in _SEPARATORS:
            final += "/"

        final += path if was_scheme else path.lstrip(_SEPARATORS)
        was_scheme = False

    if final is None:
        return ""
    return canonicalize(final)


def make_absolute(path: str, base_path: str) -> str:
    """
    Turn a relative path into an absolute canonical path under `base_path`.

    An absolute `path` is returned canonicalized, even if its root differs
    from the base path's.
    """
    if base_path == "":
        raise InvalidArgumentError.of(
            f'The base path must be a non-empty string. Got: "{base_path}".',
            operation="make_absolute",
        )

    if not is_absolute(base_path):
        raise InvalidArgumentError.of(
            f'The base path "{base_path}" is not an absolute path.',
            path=base_path,
            span=PathSpan.whole(base_path),
            operation="make_absolute",
        )

    if is_absolute(path):
        return canonicalize(path)

    scheme, base_path = _split_scheme(base_path)
    return scheme + canonicalize(base_path.rstrip(_SEPARATORS) + "/" + path)


def _canonical_parts(relative_path: str, *, absolute: bool) -> list[str]:
    """
    Segments of the root-less part of a path. Leading ".." of absolute paths
    point above the root and are dropped.
    """
    parts: list[str] = []
    for part in relative_path.split("/"):
        if part in ("", "."):
            continue
        if part == ".." and parts and parts[-1] != "..":
            parts.pop()
            continue
        if part != ".." or not absolute:
            parts.append(part)
    return parts


def make_relative(path: str, base_path: str) -> str:
    """
    Express `path` relative to `base_path`.

    Both paths are treated as directories, so the result always ends in "/":

    >>> make_relative("/aa/bb/cc", "/aa")
    'bb/cc/'
    >>> make_relative("/aa/bb", "/aa/bb")
    './'
    """
    path = canonicalize(path)
    base_path = canonicalize(base_path)

    root, relative_path = split_root(path)
    base_root, relative_base_path = split_root(base_path)

    # Mixed absolute/relative inputs cannot be related to each other
    if bool(root) != bool(base_root):
        if root:
            msg = (
                f'The absolute path "{path}" cannot be made relative to the relative '
                f'path "{base_path}". You should provide an absolute base path instead.'
            )
            offending = base_path
        else:
            msg = (
                f'The relative path "{path}" cannot be made relative to the absolute '
                f'path "{base_path}". You should provide an absolute path instead.'
            )
            offending = path
        raise InvalidArgumentError.of(
            msg,
            path=offending,
            span=PathSpan.whole(offending),
            operation="make_relative",
        )

    # Fail if the roots of the two paths are different
    if root and _root_key(root) != _root_key(base_root):
        raise InvalidArgumentError.of(
            f'The path "{path}" cannot be made relative to "{base_path}", because '
            f'they have different roots ("{root}" and "{base_root}").',
            path=path,
            span=PathSpan(0, len(root)),
            operation="make_relative",
        )

    parts = _canonical_parts(relative_path, absolute=bool(root))
    base_parts = _canonical_parts(relative_base_path, absolute=bool(base_root))

    common = 0
    while common < len(parts) and common < len(base_parts) and parts[common] == base_parts[common]:
        common += 1

    traverser = "../" * (len(base_parts) - common)
    remainder = "/".join(parts[common:])
    relative = traverser + (remainder + "/" if remainder else "")

    return relative or "./"


def get_longest_common_base_path(*paths: str) -> str | None:
    """
    Longest common base path of a set of paths in canonical form, or None if
    the paths sit on different roots (e.g. "C:/" vs "D:/").

    The root is returned if no deeper common base path exists:
    ("/flamecore/css/style.css", "/puli/css/..") -> "/"
    """
    if not paths:
        return None

    base_root, base = split_root(canonicalize(paths[0]))
    base = base.rstrip("/")

    for other in paths[1:]:
        root, rest = split_root(canonicalize(other))

        # Different roots (e.g. C:/ vs. D:/) share nothing
        if _root_key(root) != _root_key(base_root):
            return None

        rest = rest.rstrip("/")

        # Shorten the base path until it fits into this path. The trailing
        # slashes prevent "/base/foo" matching "/base/foobar".
        while base and not (rest + "/").startswith(base + "/"):
            base = base.rpartition("/")[0]

    return base_root + base


def is_base_path(base_path: str, of_path: str) -> bool:
    """
    Whether `base_path` is `of_path` or one of its ancestors.

    >>> is_base_path("/flamecore", "/flamecore/css")
    True
    >>> is_base_path("/flamecore", "/flamecorefoo")
    False
    """
    base_path = canonicalize(base_path)
    of_path = canonicalize(of_path)

    # Don't append a slash for the root "/", because then that root won't be
    # discovered as common prefix ("//" is not a prefix of "/foobar/").
    return (of_path + "/").startswith(base_path.rstrip("/") + "/")


def get_home_directory() -> str:
    """Canonical path of the user's home directory (UNIX, or Windows 8 and up)."""
    home = os.environ.get("HOME")
    if home:
        return canonicalize(home)

    drive = os.environ.get("HOMEDRIVE")
    home_path = os.environ.get("HOMEPATH")
    if drive and home_path:
        return canonicalize(drive + home_path)

    raise UnsupportedEnvironmentError.of(
        "Cannot find the home directory path: "
        "your environment or operating system is not supported.",
        hint="Set HOME (or HOMEDRIVE and HOMEPATH on Windows).",
    )
