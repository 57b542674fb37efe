"""
Scheme-aware byte streams.

- no scheme / "file://"   -> plain local files
- "compress.zlib://"      -> gzip-compressed local files
- "http(s)://", "ftp://"  -> read-only remote resources (urllib)

Anything else is rejected with InvalidArgumentError.
"""

from __future__ import annotations

import gzip
import urllib.request
from typing import IO, cast

from atomfs.constants import FILE_SCHEME, REMOTE_SCHEMES, ZLIB_SCHEME
from atomfs.errors import InvalidArgumentError
from atomfs.paths import get_scheme_and_hierarchy
from atomfs.reporting.diagnostics import PathSpan

__all__ = ["local_path", "is_plain_file", "is_remote", "rewrap", "open_stream"]


def local_path(path: str) -> str | None:
    """On-disk path behind `path`, or None for remote resources."""
    scheme, hierarchy = get_scheme_and_hierarchy(path)
    if scheme is None:
        return path
    if scheme in (FILE_SCHEME, ZLIB_SCHEME):
        return hierarchy
    return None


def is_plain_file(path: str) -> bool:
    """Local and stored as-is (sizes and permission bits are meaningful)."""
    scheme, _ = get_scheme_and_hierarchy(path)
    return scheme is None or scheme == FILE_SCHEME


def is_remote(path: str) -> bool:
    scheme, _ = get_scheme_and_hierarchy(path)
    return scheme in REMOTE_SCHEMES


def rewrap(path: str, local: str) -> str:
    """Put `local` behind the same stream wrapper as `path` (only compression is kept)."""
    scheme, _ = get_scheme_and_hierarchy(path)
    return f"{ZLIB_SCHEME}://{local}" if scheme == ZLIB_SCHEME else local


def open_stream(path: str, mode: str) -> IO[bytes]:
    """
    Open `path` in binary `mode` ("rb", "wb", "ab", "xb"). OS failures raise
    OSError so callers can box the call.
    """
    scheme, hierarchy = get_scheme_and_hierarchy(path)

    if scheme is None:
        return cast(IO[bytes], open(path, mode))
    if scheme == FILE_SCHEME:
        return cast(IO[bytes], open(hierarchy, mode))
    if scheme == ZLIB_SCHEME:
        return cast(IO[bytes], gzip.open(hierarchy, mode))
    if scheme in REMOTE_SCHEMES:
        if mode != "rb":
            raise InvalidArgumentError.of(
                f'Remote resource "{path}" can only be opened for reading.',
                path=path,
                span=PathSpan(0, len(scheme)),
                operation="open",
            )
        return cast(IO[bytes], urllib.request.urlopen(path))

    raise InvalidArgumentError.of(
        f'Unsupported stream scheme "{scheme}" in "{path}".',
        path=path,
        span=PathSpan(0, len(scheme)),
        operation="open",
    )
