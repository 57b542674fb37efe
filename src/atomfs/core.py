from __future__ import annotations

import errno
import os
import stat
from collections.abc import Iterable
from enum import StrEnum
from typing import TypeAlias

# Accept easy user inputs at the edges; everything internal is a plain str.
UserPath: TypeAlias = str | os.PathLike[str]
UserPaths: TypeAlias = UserPath | Iterable[UserPath]

_MISSING_ERRNOS = frozenset({errno.ENOENT, errno.ENOTDIR})


class EntryKind(StrEnum):
    SYMLINK = "symlink"
    DIRECTORY = "directory"
    REGULAR_FILE = "file"
    OTHER = "other"
    MISSING = "missing"


def fspath(p: UserPath) -> str:
    s = os.fspath(p)
    if not isinstance(s, str):
        raise TypeError(f"expected a str path, got {type(s).__name__}")
    return s


def to_path_list(paths: UserPaths) -> list[str]:
    """A single path or any iterable of paths, as a list of str."""
    if isinstance(paths, str | os.PathLike):
        return [fspath(paths)]
    return [fspath(p) for p in paths]


def classify(path: UserPath, *, follow_symlinks: bool = False) -> EntryKind:
    """
    Single classification step used by remove/mirror/symlink.

    A path we cannot stat for a reason other than "not there" (e.g. EACCES on
    the parent) is OTHER, so callers still attempt the operation and report
    the real OS error.
    """
    try:
        st = os.stat(path, follow_symlinks=follow_symlinks)
    except OSError as e:
        return EntryKind.MISSING if e.errno in _MISSING_ERRNOS else EntryKind.OTHER

    mode = st.st_mode
    if stat.S_ISLNK(mode):
        return EntryKind.SYMLINK
    if stat.S_ISDIR(mode):
        return EntryKind.DIRECTORY
    if stat.S_ISREG(mode):
        return EntryKind.REGULAR_FILE
    return EntryKind.OTHER
