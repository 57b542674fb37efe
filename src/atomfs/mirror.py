"""
Directory mirroring.

`mirror()` copies a whole tree to another location: links are recreated as
links, directories are created and regular files copied (skipping targets that
are already up to date). With `delete=True`, target entries with no
counterpart in the origin are removed first.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any, Self

import msgspec

from atomfs.box import describe_os_error
from atomfs.core import EntryKind, UserPath, classify, fspath
from atomfs.errors import DirectoryNotFoundError, FSIOError, InvalidArgumentError
from atomfs.filesystem import copy, create_dir, remove, symlink
from atomfs.reporting.diagnostics import Related

__all__ = ["MirrorOptions", "mirror"]

_SEPARATORS = "/\\"


class MirrorOptions(msgspec.Struct, frozen=True, kw_only=True, forbid_unknown_fields=True):
    # Overwrite target files even when they are newer than the origin's.
    overwrite_newer: bool = False
    # Follow links and copy their contents instead of recreating the links.
    copy_on_windows: bool = False
    # Remove target entries that do not exist in the origin.
    delete: bool = False

    @classmethod
    def coerce(cls, options: MirrorOptions | Mapping[str, Any] | None) -> Self:
        """Accept an instance, a plain mapping (validated) or None (defaults)."""
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        try:
            return msgspec.convert(dict(options), type=cls)
        except msgspec.ValidationError as e:
            raise InvalidArgumentError.of(
                f"Invalid mirror options: {e}",
                operation="mirror",
                hint="Known options are overwrite_newer, copy_on_windows and delete.",
            ) from e


def _strip_separators(path: str) -> str:
    # Keep a lone root ("/") intact.
    return path.rstrip(_SEPARATORS) or path


def _delete_orphans(origin_dir: str, target_dir: str) -> None:
    for root, dirs, files in os.walk(target_dir, topdown=False):
        for name in (*files, *dirs):
            entry = os.path.join(root, name)
            counterpart = origin_dir + entry[len(target_dir) :]
            if not os.path.lexists(counterpart):
                remove(entry)


def mirror(
    origin_dir: UserPath,
    target_dir: UserPath,
    options: MirrorOptions | Mapping[str, Any] | None = None,
) -> None:
    """
    Mirror `origin_dir` into `target_dir`.

    Raises
    ------
    DirectoryNotFoundError
        If `origin_dir` does not exist.
    InvalidArgumentError
        If `options` holds unknown keys or values of the wrong type.
    FSIOError
        If an entry cannot be listed, copied, linked, or its type is unknown.
    """
    opts = MirrorOptions.coerce(options)
    origin = _strip_separators(fspath(origin_dir))
    target = _strip_separators(fspath(target_dir))

    if not os.path.exists(origin):
        raise DirectoryNotFoundError.of(
            f'The origin directory specified "{origin}" was not found.',
            path=origin,
            operation="mirror",
        )

    if opts.delete and os.path.exists(target):
        _delete_orphans(origin, target)

    create_dir(target)

    target_real = os.path.realpath(target)
    created: set[str] = set()

    def _on_error(err: OSError) -> None:
        raise FSIOError.of(
            f'Failed to mirror "{origin}" to "{target}"',
            path=err.filename if isinstance(err.filename, str) else origin,
            operation="mirror",
            os_error=describe_os_error(err),
        ) from err

    for root, dirs, files in os.walk(origin, followlinks=opts.copy_on_windows, onerror=_on_error):
        # Never descend into the target when it lives inside the origin.
        dirs[:] = [
            d
            for d in dirs
            if os.path.join(root, d) != target and os.path.realpath(os.path.join(root, d)) != target_real
        ]

        for name in sorted(dirs) + sorted(files):
            source = os.path.join(root, name)
            real = os.path.realpath(source)
            if source == target or real == target_real or real in created:
                continue

            destination = target + source[len(origin) :]
            created.add(os.path.realpath(destination))

            match classify(source, follow_symlinks=opts.copy_on_windows):
                case EntryKind.SYMLINK:
                    symlink(os.readlink(source), destination)
                case EntryKind.DIRECTORY:
                    create_dir(destination)
                case EntryKind.REGULAR_FILE:
                    copy(real, destination, opts.overwrite_newer)
                case _:
                    raise FSIOError.of(
                        f'Unable to guess "{source}" file type.',
                        path=source,
                        operation="mirror",
                        related=[Related("target", destination)],
                    )
