from __future__ import annotations

import grp
import os
import pwd
import threading
from typing import ClassVar, Literal

from atomfs.box import Boxed, box

from .base import LinkType, PlatformOps

_FALLBACK_PATH_MAX = 4096

# os.umask() is the only portable way to read the mask and it writes it too.
_umask_lock = threading.Lock()


class _Posix(PlatformOps):
    name: ClassVar[Literal["posix", "nt"]] = "posix"

    def host_max_path_length(self) -> int:
        try:
            return os.pathconf("/", "PC_PATH_MAX")
        except (OSError, ValueError):
            return _FALLBACK_PATH_MAX

    def resolve_uid(self, user: str | int) -> int:
        if isinstance(user, int):
            return user
        if user.isdigit():
            return int(user)
        return pwd.getpwnam(user).pw_uid

    def resolve_gid(self, group: str | int) -> int:
        if isinstance(group, int):
            return group
        if group.isdigit():
            return int(group)
        return grp.getgrnam(group).gr_gid

    def current_umask(self) -> int:
        with _umask_lock:
            mask = os.umask(0)
            os.umask(mask)
        return mask

    def remove_symlink(self, path: str) -> Boxed[None]:
        return box(os.unlink, path)

    def link_failure_message(self, link_type: LinkType, result: Boxed[None]) -> str | None:
        _ = link_type
        _ = result
        return None


platform_impl: PlatformOps = _Posix()
