"""
Temporary files and directories.

`tempnam()` returns the path of a freshly created, empty file that no other
caller can have received: the file is created with an exclusive create-only
open, so two concurrent callers never get the same name.
"""

from __future__ import annotations

import os
import secrets
import tempfile
import warnings

from atomfs.box import box
from atomfs.constants import SCHEME_SEPARATOR, TEMP_TOKEN_BYTES, TEMPNAM_ATTEMPTS, TRANSPARENT_TEMP_SCHEMES
from atomfs.core import UserPath, fspath
from atomfs.errors import FSIOError
from atomfs.paths import get_scheme_and_hierarchy
from atomfs.reporting.diagnostics import Diagnostic, Severity
from atomfs.reporting.warnings_bridge import TempDirectoryFallbackWarning
from atomfs.streams import open_stream

__all__ = ["tempnam", "tempdir"]


def _mkstemp(prefix: str, directory: str) -> str:
    fd, name = tempfile.mkstemp(prefix=prefix, dir=directory)
    os.close(fd)
    return name


def tempnam(dir: UserPath, prefix: str, suffix: str = "") -> str:
    """
    Create a unique empty file in `dir` and return its path.

    Local directories use the host primitive (0600 permissions). When the
    requested local directory cannot host the file, the system temp directory
    is used instead and a TempDirectoryFallbackWarning is emitted. Other stream
    schemes get random candidate names opened create-only.

    Raises
    ------
    FSIOError
        If no candidate could be created.
    """
    directory = fspath(dir)
    scheme, hierarchy = get_scheme_and_hierarchy(directory)

    if (scheme is None or scheme in TRANSPARENT_TEMP_SCHEMES) and suffix == "":
        res = box(_mkstemp, prefix, hierarchy)
        if res.ok and res.value is not None:
            tmp = res.value
        else:
            fallback = tempfile.gettempdir()
            warnings.warn(
                TempDirectoryFallbackWarning(
                    Diagnostic(
                        message=f'Could not create a temporary file in "{hierarchy}", '
                        f'using "{fallback}" instead',
                        severity=Severity.WARN,
                        path=hierarchy,
                        operation="tempnam",
                        os_error=res.error,
                        code="temp-fallback",
                    )
                ),
                stacklevel=2,
            )
            retry = box(_mkstemp, prefix, fallback)
            if not retry.ok or retry.value is None:
                raise FSIOError.of(
                    "A temporary file could not be created.",
                    path=fallback,
                    operation="tempnam",
                    os_error=retry.error,
                )
            tmp = retry.value

        if scheme is None or scheme == "gs":
            return tmp
        return scheme + SCHEME_SEPARATOR + tmp

    last_error: str | None = None
    for _ in range(TEMPNAM_ATTEMPTS):
        candidate = f"{directory}/{prefix}{secrets.token_hex(TEMP_TOKEN_BYTES)}{suffix}"

        opened = box(open_stream, candidate, "xb")
        if opened.ok and opened.value is not None:
            opened.value.close()
            return candidate
        last_error = opened.error

    raise FSIOError.of(
        "A temporary file could not be created.",
        path=directory,
        operation="tempnam",
        os_error=last_error,
        notes=[f"{TEMPNAM_ATTEMPTS} candidate names were tried."],
    )


def tempdir(prefix: str = "", suffix: str = "", dir: UserPath | None = None) -> str:
    """Create a unique private (0700) directory and return its path."""
    parent = None if dir is None else fspath(dir)
    res = box(tempfile.mkdtemp, suffix, prefix, parent)
    if not res.ok or res.value is None:
        raise FSIOError.of(
            "A temporary directory could not be created.",
            path=parent,
            operation="tempdir",
            os_error=res.error,
        )
    return res.value
