"""
atomfs.constants
================

Single place for default modes, scheme names and retry budgets. The path
algebra, the mutation engine and the stream layer import from here so we never
duplicate strings like "://".
"""

from __future__ import annotations

from typing import Final

# ---- schemes -----------------------------------------------------------------

SCHEME_SEPARATOR: Final = "://"

# Schemes whose hierarchy part is a plain local path.
FILE_SCHEME: Final = "file"

# Local schemes for which temp files can be created with the host primitive.
TRANSPARENT_TEMP_SCHEMES: Final = frozenset({FILE_SCHEME, "gs"})

# Local, gzip-compressed stream wrapper.
ZLIB_SCHEME: Final = "compress.zlib"

# Schemes readable through urllib (no mtime comparison, no size verification).
REMOTE_SCHEMES: Final = frozenset({"http", "https", "ftp"})

# ---- modes -------------------------------------------------------------------

DEFAULT_DIR_MODE: Final = 0o777
DEFAULT_FILE_MODE: Final = 0o666  # umask is applied on top
EXECUTABLE_BITS: Final = 0o111

# ---- budgets -----------------------------------------------------------------

TEMPNAM_ATTEMPTS: Final = 10
TEMP_TOKEN_BYTES: Final = 8
HIDDEN_DIR_TOKEN_BYTES: Final = 6
COPY_CHUNK_SIZE: Final = 1024 * 1024  # 1 MiB

# Headroom kept below the host's maximum path length.
PATH_LENGTH_HEADROOM: Final = 2
