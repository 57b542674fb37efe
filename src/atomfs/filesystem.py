"""
atomfs.filesystem
=================

Filesystem mutation primitives.

Every OS call goes through `box()` so failures carry the OS diagnostic into a
typed exception. Multi-step operations leave the filesystem in its pre- or
post-state unless documented otherwise:

- write_file() writes a temp file next to the target and renames it over.
- remove() hides a directory under a random sibling name before deleting its
  contents, and renames it back if the final rmdir fails.
- append_to_file() and the cross-device fallback of rename() are NOT atomic.

Batch operations (create_dir, touch, chmod, ... over several paths) stop at the
first failure and do not roll back earlier entries.
"""

from __future__ import annotations

import os
import secrets
import shutil
import stat
import warnings
from collections.abc import Callable
from typing import IO

from atomfs.box import Boxed, box
from atomfs.constants import (
    COPY_CHUNK_SIZE,
    DEFAULT_DIR_MODE,
    DEFAULT_FILE_MODE,
    EXECUTABLE_BITS,
    HIDDEN_DIR_TOKEN_BYTES,
)
from atomfs.core import EntryKind, UserPath, UserPaths, classify, fspath, to_path_list
from atomfs.errors import FSIOError, InvalidArgumentError, NotFoundError
from atomfs.platform import platform
from atomfs.platform.base import LinkType
from atomfs.reporting.diagnostics import Diagnostic, PathSpan, Related, Severity
from atomfs.reporting.warnings_bridge import NonAtomicOperationWarning
from atomfs.streams import is_plain_file, is_remote, local_path, open_stream, rewrap
from atomfs.tempfiles import tempnam

__all__ = [
    "Content",
    "copy",
    "create_dir",
    "exists",
    "is_readable",
    "touch",
    "remove",
    "chmod",
    "chown",
    "chgrp",
    "rename",
    "symlink",
    "hardlink",
    "readlink",
    "read_file",
    "write_file",
    "append_to_file",
]

# bytes, str (written as UTF-8) or a readable binary stream
Content = bytes | str | IO[bytes]


# -----------------------------------------------------------------------------
# Copy
# -----------------------------------------------------------------------------
def copy(origin: UserPath, target: UserPath, overwrite_newer: bool = False) -> None:
    """
    Copy a file.

    A target older than the origin is always overwritten. A newer (or equally
    old) target is only overwritten when `overwrite_newer` is set, and never
    skipped for remote origins.

    Raises
    ------
    NotFoundError
        If a local origin does not exist.
    FSIOError
        If the copy fails or is incomplete.
    """
    origin_s, target_s = fspath(origin), fspath(target)

    origin_local = local_path(origin_s)
    target_local = local_path(target_s)
    if target_local is None:
        raise InvalidArgumentError.of(
            f'Cannot copy to remote target "{target_s}".', path=target_s, operation="copy"
        )

    if origin_local is not None and not os.path.isfile(origin_local):
        raise NotFoundError.of(
            f'Failed to copy "{origin_s}" because file does not exist.',
            path=origin_s,
            operation="copy",
        )

    # Opening the target for writing would truncate the origin.
    if (
        origin_local is not None
        and os.path.exists(target_local)
        and os.path.samefile(origin_local, target_local)
    ):
        return

    parent = os.path.dirname(target_local)
    if parent:
        create_dir(parent)

    do_copy = True
    if not overwrite_newer and origin_local is not None and os.path.isfile(target_local):
        do_copy = os.stat(origin_local).st_mtime > os.stat(target_local).st_mtime

    if not do_copy:
        return

    source = box(open_stream, origin_s, "rb")
    if not source.ok or source.value is None:
        raise FSIOError.of(
            f'Failed to copy "{origin_s}" to "{target_s}" because source file '
            "could not be opened for reading",
            path=origin_s,
            operation="copy",
            os_error=source.error,
        )

    with source.value as src:
        sink = box(open_stream, target_s, "wb")
        if not sink.ok or sink.value is None:
            raise FSIOError.of(
                f'Failed to copy "{origin_s}" to "{target_s}" because target file '
                "could not be opened for writing",
                path=target_s,
                operation="copy",
                os_error=sink.error,
            )
        with sink.value as dst:
            copied = box(_copy_stream, src, dst)

    if not copied.ok or not os.path.isfile(target_local):
        raise FSIOError.of(
            f'Failed to copy "{origin_s}" to "{target_s}"',
            path=target_s,
            operation="copy",
            os_error=copied.error,
        )

    if origin_local is not None and is_plain_file(origin_s) and is_plain_file(target_s):
        # Like `cp`, preserve executable permission bits (best-effort).
        target_mode = stat.S_IMODE(os.stat(target_local).st_mode)
        origin_mode = stat.S_IMODE(os.stat(origin_local).st_mode)
        box(os.chmod, target_local, target_mode | (origin_mode & EXECUTABLE_BITS))

        origin_size = os.stat(origin_local).st_size
        if copied.value != origin_size:
            raise FSIOError.of(
                f'Failed to copy the whole content of "{origin_s}" to "{target_s}" '
                f"({copied.value} of {origin_size} bytes copied).",
                path=target_s,
                operation="copy",
            )


def _copy_stream(src: IO[bytes], dst: IO[bytes]) -> int:
    copied = 0
    while chunk := src.read(COPY_CHUNK_SIZE):
        dst.write(chunk)
        copied += len(chunk)
    return copied


# -----------------------------------------------------------------------------
# Create / test
# -----------------------------------------------------------------------------
def create_dir(dirs: UserPaths, mode: int = DEFAULT_DIR_MODE) -> None:
    """
    Create directories recursively. Existing directories are skipped, and a
    directory that appears concurrently while we create it is not an error.
    """
    for d in to_path_list(dirs):
        if os.path.isdir(d):
            continue

        res = box(os.makedirs, d, mode)
        if not res.ok and not os.path.isdir(d):
            raise FSIOError.of(
                f'Failed to create "{d}"', path=d, operation="create_dir", os_error=res.error
            )


def _check_path_length(path: str, action: str) -> None:
    limit = platform.max_path_length
    if len(path) > limit:
        raise FSIOError.of(
            f"Could not check if {action} because path length exceeds {limit} characters.",
            path=path,
            span=PathSpan(limit, len(path)),
            operation="exists",
        )


def exists(files: UserPaths) -> bool:
    """
    Whether every given file or directory exists.

    Raises
    ------
    FSIOError
        If a path is longer than the platform allows.
    """
    for f in to_path_list(files):
        _check_path_length(f, "file exists")
        if not os.path.exists(f):
            return False
    return True


def is_readable(filename: UserPath) -> bool:
    """Whether the file exists and is readable, gated by the platform path-length limit."""
    f = fspath(filename)
    _check_path_length(f, "file is readable")
    return os.access(f, os.R_OK)


def _touch_one(path: str, times: tuple[float, float] | None) -> None:
    with open(path, "ab"):
        pass
    os.utime(path, times)


def touch(files: UserPaths, time: float | None = None, atime: float | None = None) -> None:
    """
    Create files if needed and set their access/modification times (Unix
    timestamps; the current time when not given).
    """
    times = None if time is None else (time if atime is None else atime, time)
    for f in to_path_list(files):
        res = box(_touch_one, f, times)
        if not res.ok:
            raise FSIOError.of(f'Failed to touch "{f}"', path=f, operation="touch", os_error=res.error)


# -----------------------------------------------------------------------------
# Remove
# -----------------------------------------------------------------------------
def remove(files: UserPaths) -> None:
    """
    Remove files, symlinks and directories (recursively).

    Missing paths are ignored. Inputs are processed in reverse order, so a
    list of "dir" followed by "dir/child" removes the child first.
    """
    _do_remove(to_path_list(files), is_recursive=False)


def _do_remove(files: list[str], *, is_recursive: bool) -> None:
    for file in reversed(files):
        match classify(file):
            case EntryKind.MISSING:
                continue
            case EntryKind.SYMLINK:
                res = platform.remove_symlink(file)
                if not res.ok and os.path.lexists(file):
                    raise FSIOError.of(
                        f'Failed to remove symlink "{file}"',
                        path=file,
                        operation="remove",
                        os_error=res.error,
                    )
            case EntryKind.DIRECTORY:
                _remove_directory(file, is_recursive=is_recursive)
            case EntryKind.REGULAR_FILE | EntryKind.OTHER:
                res = box(os.unlink, file)
                # A file that vanished under us is fine; a permission problem is not.
                if not res.ok and (res.permission_denied or os.path.lexists(file)):
                    raise FSIOError.of(
                        f'Failed to remove file "{file}"',
                        path=file,
                        operation="remove",
                        os_error=res.error,
                    )


def _hidden_sibling(path: str) -> str:
    parent = os.path.dirname(os.path.realpath(path))
    return os.path.join(parent, "." + secrets.token_urlsafe(HIDDEN_DIR_TOKEN_BYTES))


def _remove_directory(directory: str, *, is_recursive: bool) -> None:
    original: str | None = None
    current = directory

    if not is_recursive:
        # Hide the tree before deleting it, so a half-deleted directory is
        # never visible under its original name.
        hidden = _hidden_sibling(directory)
        if not os.path.lexists(hidden) and box(os.rename, directory, hidden).ok:
            original, current = directory, hidden

    try:
        listing = box(os.listdir, current)
        if not listing.ok or listing.value is None:
            raise FSIOError.of(
                f'Failed to remove directory "{directory}": cannot list its contents',
                path=directory,
                operation="remove",
                os_error=listing.error,
            )
        _do_remove([os.path.join(current, name) for name in listing.value], is_recursive=True)
    except FSIOError:
        if original is not None:
            box(os.rename, current, original)
        raise

    res = box(os.rmdir, current)
    # Nested failures surface as the top-level rmdir failing.
    if not res.ok and os.path.lexists(current) and not is_recursive:
        if original is not None and box(os.rename, current, original).ok:
            current = original
        raise FSIOError.of(
            f'Failed to remove directory "{current}"',
            path=current,
            operation="remove",
            os_error=res.error,
        )


# -----------------------------------------------------------------------------
# Permissions & ownership
# -----------------------------------------------------------------------------
def _is_real_dir(path: str) -> bool:
    return classify(path) is EntryKind.DIRECTORY


def _children(path: str) -> list[str]:
    listing = box(os.listdir, path)
    if not listing.ok or listing.value is None:
        raise FSIOError.of(
            f'Failed to list "{path}"', path=path, operation="list", os_error=listing.error
        )
    return [os.path.join(path, name) for name in listing.value]


def _apply(func: Callable[..., None], path: str, *args: int) -> Boxed[None]:
    """Run os.chmod/os.chown on `path`, acting on the link itself when possible."""
    if classify(path) is EntryKind.SYMLINK and platform.has_link_primitive(func):
        return box(func, path, *args, follow_symlinks=False)
    return box(func, path, *args)


def chmod(files: UserPaths, mode: int, umask: int = 0o000, recursive: bool = False) -> None:
    """
    Change the mode of files or directories (`mode & ~umask`). With
    `recursive`, real subdirectories are walked after their parent changed.
    """
    for f in to_path_list(files):
        res = _apply(os.chmod, f, mode & ~umask)
        if not res.ok:
            raise FSIOError.of(
                f'Failed to chmod file "{f}"', path=f, operation="chmod", os_error=res.error
            )
        if recursive and _is_real_dir(f):
            chmod(_children(f), mode, umask, True)


def _owner_failure(op: str, path: str, subject: str | int) -> FSIOError:
    return FSIOError.of(
        f'Failed to {op} file "{path}": unknown {"user" if op == "chown" else "group"} {subject!r}',
        path=path,
        operation=op,
    )


def chown(files: UserPaths, user: str | int, recursive: bool = False) -> None:
    """Change the owner (name or uid); children are changed before their parent."""
    paths = to_path_list(files)
    try:
        uid = platform.resolve_uid(user)
    except KeyError:
        raise _owner_failure("chown", ", ".join(paths), user) from None

    for f in paths:
        if recursive and _is_real_dir(f):
            chown(_children(f), uid, True)
        res = _apply(os.chown, f, uid, -1)
        if not res.ok:
            raise FSIOError.of(
                f'Failed to chown file "{f}"', path=f, operation="chown", os_error=res.error
            )


def chgrp(files: UserPaths, group: str | int, recursive: bool = False) -> None:
    """Change the group (name or gid); children are changed before their parent."""
    paths = to_path_list(files)
    try:
        gid = platform.resolve_gid(group)
    except KeyError:
        raise _owner_failure("chgrp", ", ".join(paths), group) from None

    for f in paths:
        if recursive and _is_real_dir(f):
            chgrp(_children(f), gid, True)
        res = _apply(os.chown, f, -1, gid)
        if not res.ok:
            raise FSIOError.of(
                f'Failed to chgrp file "{f}"', path=f, operation="chgrp", os_error=res.error
            )


# -----------------------------------------------------------------------------
# Rename
# -----------------------------------------------------------------------------
def rename(origin: UserPath, target: UserPath, overwrite: bool = False) -> None:
    """
    Rename a file or a directory.

    The rename itself is atomic. When it fails for a directory (typically a
    cross-device move) the directory is mirrored to `target` and then removed.
    That fallback is NOT atomic: if interrupted, both a partial copy and the
    original may remain. A NonAtomicOperationWarning is emitted when it is used.

    Raises
    ------
    FSIOError
        If `target` exists and `overwrite` is false, or the rename fails.
    """
    origin_s, target_s = fspath(origin), fspath(target)

    if not overwrite and is_readable(target_s):
        raise FSIOError.of(
            f'Cannot rename because the target "{target_s}" already exists.',
            path=target_s,
            operation="rename",
        )

    res = box(os.replace, origin_s, target_s)
    if res.ok:
        return

    if os.path.isdir(origin_s):
        from atomfs.mirror import MirrorOptions, mirror

        warnings.warn(
            NonAtomicOperationWarning(
                Diagnostic(
                    message=f'Renaming "{origin_s}" fell back to copy-then-remove',
                    severity=Severity.WARN,
                    path=origin_s,
                    operation="rename",
                    os_error=res.error,
                    code="non-atomic-rename",
                    related=[Related("target", target_s)],
                    notes=["If interrupted, both a partial copy and the original may remain."],
                )
            ),
            stacklevel=2,
        )
        mirror(origin_s, target_s, MirrorOptions(overwrite_newer=overwrite, delete=overwrite))
        remove(origin_s)
        return

    raise FSIOError.of(
        f'Cannot rename "{origin_s}" to "{target_s}"',
        path=target_s,
        operation="rename",
        os_error=res.error,
        related=[Related("origin", origin_s)],
    )


# -----------------------------------------------------------------------------
# Links
# -----------------------------------------------------------------------------
def _link_failure(target: str, link: str, link_type: LinkType, res: Boxed[None]) -> FSIOError:
    special = platform.link_failure_message(link_type, res)
    if special is not None:
        return FSIOError.of(special, path=link, operation=f"{link_type} link", os_error=res.error)
    return FSIOError.of(
        f'Failed to create {link_type} link to "{target}" from "{link}"',
        path=link,
        operation=f"{link_type} link",
        os_error=res.error,
    )


def symlink(target_dir: UserPath, link_dir: UserPath, copy_on_windows: bool = False) -> None:
    """
    Create a symbolic link `link_dir` pointing at `target_dir`.

    A link that already points at `target_dir` is left alone; one pointing
    elsewhere is replaced. Where the platform cannot create symlinks
    (see PlatformOps.supports_symlinks), `copy_on_windows` mirrors the target
    instead of linking it.
    """
    target_s, link_s = fspath(target_dir), fspath(link_dir)

    if platform.name == "nt":
        target_s = target_s.replace("/", "\\")
        link_s = link_s.replace("/", "\\")

    if copy_on_windows and not platform.supports_symlinks:
        from atomfs.mirror import mirror

        mirror(target_s, link_s)
        return

    parent = os.path.dirname(link_s)
    if parent:
        create_dir(parent)

    if classify(link_s) is EntryKind.SYMLINK:
        if os.readlink(link_s) == target_s:
            return
        remove(link_s)

    res = platform.symlink(target_s, link_s)
    if not res.ok:
        raise _link_failure(target_s, link_s, "symbolic", res)


def hardlink(origin_file: UserPath, target_files: UserPaths) -> None:
    """
    Create one or several hard links to `origin_file`. Targets that already
    share the origin's inode are skipped; other existing targets are replaced.

    Raises
    ------
    NotFoundError
        If the origin is missing or not a regular file.
    FSIOError
        If a link cannot be created.
    """
    origin = fspath(origin_file)

    if not exists(origin):
        raise NotFoundError.of(f'File "{origin}" could not be found.', path=origin, operation="hard link")

    if not os.path.isfile(origin):
        raise NotFoundError.of(f'Origin file "{origin}" is not a file.', path=origin, operation="hard link")

    for target in to_path_list(target_files):
        if os.path.isfile(target):
            if os.path.samefile(origin, target):
                continue
            remove(target)

        res = box(os.link, origin, target)
        if not res.ok:
            raise _link_failure(origin, target, "hard", res)


def readlink(path: UserPath, canonicalize: bool = False) -> str | None:
    """
    Resolve links in paths.

    With canonicalize=False: None if `path` is missing or not a link, else the
    immediate target of the link (which may itself not exist).
    With canonicalize=True: None if `path` is missing, else its absolute, fully
    resolved form.
    """
    p = fspath(path)

    if canonicalize:
        if not exists(p):
            return None
        return os.path.realpath(p)

    if classify(p) is not EntryKind.SYMLINK:
        return None

    res = box(os.readlink, p)
    if not res.ok or res.value is None:
        raise FSIOError.of(f'Failed to read link "{p}"', path=p, operation="readlink", os_error=res.error)
    return res.value


# -----------------------------------------------------------------------------
# Read / write
# -----------------------------------------------------------------------------
def _read_all(path: str) -> bytes:
    with open_stream(path, "rb") as f:
        return f.read()


def read_file(path: UserPath) -> bytes:
    """Whole content of a file (any supported stream scheme)."""
    p = fspath(path)
    res = box(_read_all, p)
    if not res.ok or res.value is None:
        raise FSIOError.of(f'Unable to read file "{p}"', path=p, operation="read", os_error=res.error)
    return res.value


def _write_content(path: str, mode: str, content: Content, durable: bool = False) -> None:
    with open_stream(path, mode) as out:
        if isinstance(content, str):
            out.write(content.encode("utf-8"))
        elif isinstance(content, bytes | bytearray | memoryview):
            out.write(content)
        else:
            shutil.copyfileobj(content, out, COPY_CHUNK_SIZE)
        if durable and is_plain_file(path):
            out.flush()
            os.fsync(out.fileno())


def _sync_directory(directory: str) -> None:
    fd = os.open(directory, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


def _check_content(content: object, func: str) -> None:
    if isinstance(content, str | bytes | bytearray | memoryview) or hasattr(content, "read"):
        return
    raise TypeError(
        f"{func}() content must be bytes, str or a readable binary stream, "
        f"{type(content).__name__} given."
    )


def _prepare_directory(filename: str, local: str, operation: str) -> str:
    directory = os.path.dirname(local) or "."
    if not os.path.isdir(directory):
        create_dir(directory)

    if not os.access(directory, os.W_OK):
        raise FSIOError.of(
            f'Unable to write to the "{directory}" directory.',
            path=directory,
            operation=operation,
            related=[Related("file", filename)],
        )
    return directory


def _local_target(filename: str, operation: str) -> str:
    local = local_path(filename)
    if local is None or is_remote(filename):
        raise InvalidArgumentError.of(
            f'Cannot write to remote file "{filename}".', path=filename, operation=operation
        )
    return local


def write_file(filename: UserPath, content: Content) -> None:
    """
    Atomically dump content into a file.

    The content is written in full to a temp file in the target directory,
    which then takes over the target's permissions (or the default mode minus
    the umask for new files) and is renamed over the target. The temp file is
    removed if anything fails before the rename consumed it.
    """
    name = fspath(filename)
    _check_content(content, "write_file")
    local = _local_target(name, "write")
    directory = _prepare_directory(name, local, "write")

    # Created with 0600 access rights where the filesystem supports chmod.
    tmp = tempnam(directory, os.path.basename(local))

    try:
        res = box(_write_content, rewrap(name, tmp), "wb", content, durable=True)
        if not res.ok:
            raise FSIOError.of(
                f'Failed to write file "{name}"', path=name, operation="write", os_error=res.error
            )

        if os.path.exists(local):
            mode = stat.S_IMODE(os.stat(local).st_mode)
        else:
            mode = DEFAULT_FILE_MODE & ~platform.current_umask()
        box(os.chmod, tmp, mode)

        rename(tmp, local, overwrite=True)
        # Make the rename durable (not supported everywhere, e.g. Windows).
        box(_sync_directory, directory)
    finally:
        if os.path.lexists(tmp):
            box(os.unlink, tmp)


def append_to_file(filename: UserPath, content: Content) -> None:
    """
    Append content to a file, creating it if needed.

    This is NOT atomic: the target is opened in append mode directly, so a
    failure midway can leave partially appended content.
    """
    name = fspath(filename)
    _check_content(content, "append_to_file")
    local = _local_target(name, "append")
    _prepare_directory(name, local, "append")

    res = box(_write_content, name, "ab", content)
    if not res.ok:
        raise FSIOError.of(
            f'Failed to write file "{name}"', path=name, operation="append", os_error=res.error
        )
