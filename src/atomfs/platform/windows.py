from __future__ import annotations

import os
from typing import ClassVar, Literal

from atomfs.box import Boxed, box
from atomfs.errors import UnsupportedEnvironmentError

from .base import LinkType, PlatformOps

# MAX_PATH without the long-path prefix.
_WINDOWS_MAX_PATH = 260

# ERROR_PRIVILEGE_NOT_HELD
_PRIVILEGE_NOT_HELD = 1314


class _Win(PlatformOps):
    name: ClassVar[Literal["posix", "nt"]] = "nt"

    def host_max_path_length(self) -> int:
        return _WINDOWS_MAX_PATH

    def resolve_uid(self, user: str | int) -> int:
        raise UnsupportedEnvironmentError.of(
            f"Cannot change owner to {user!r}: file ownership is not supported on Windows.",
            operation="chown",
        )

    def resolve_gid(self, group: str | int) -> int:
        raise UnsupportedEnvironmentError.of(
            f"Cannot change group to {group!r}: file groups are not supported on Windows.",
            operation="chgrp",
        )

    @property
    def supports_symlinks(self) -> bool:
        # Needs SeCreateSymbolicLinkPrivilege or developer mode.
        return False

    def current_umask(self) -> int:
        return 0

    def remove_symlink(self, path: str) -> Boxed[None]:
        # Directory symlinks and junctions refuse unlink() and need rmdir().
        res = box(os.unlink, path)
        if res.ok:
            return res
        return box(os.rmdir, path)

    def link_failure_message(self, link_type: LinkType, result: Boxed[None]) -> str | None:
        if result.winerror == _PRIVILEGE_NOT_HELD:
            return (
                f"Unable to create {link_type} link due to error code 1314: "
                "'A required privilege is not held by the client'. "
                "Do you have the required Administrator rights?"
            )
        return None


platform_impl: PlatformOps = _Win()
