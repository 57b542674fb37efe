import os
from typing import Literal, Protocol

from atomfs.box import Boxed, box
from atomfs.constants import PATH_LENGTH_HEADROOM

LinkType = Literal["symbolic", "hard"]


class PlatformOps(Protocol):
    name: str  # "posix" | "nt"

    def host_max_path_length(self) -> int: ...
    def resolve_uid(self, user: str | int) -> int: ...
    def resolve_gid(self, group: str | int) -> int: ...
    def current_umask(self) -> int: ...
    def remove_symlink(self, path: str) -> Boxed[None]: ...
    def link_failure_message(self, link_type: LinkType, result: Boxed[None]) -> str | None: ...

    @property
    def max_path_length(self) -> int:
        """
        Longest path string `exists()`/`is_readable()` accept before refusing
        with an explicit error instead of letting the OS truncate or fail oddly.
        """
        return self.host_max_path_length() - PATH_LENGTH_HEADROOM

    @property
    def supports_symlinks(self) -> bool:
        """Whether symlink() can be relied on; otherwise callers may copy instead."""
        return hasattr(os, "symlink")

    def has_link_primitive(self, func: object) -> bool:
        """
        Whether `func` (os.chmod, os.chown, ...) can act on a symlink itself
        via follow_symlinks=False on this host.
        """
        return func in os.supports_follow_symlinks

    def symlink(self, target: str, link: str) -> Boxed[None]:
        # Directory links need the flag on Windows; it is ignored elsewhere.
        anchor = os.path.dirname(link)
        resolved = target if os.path.isabs(target) else os.path.join(anchor, target)
        return box(os.symlink, target, link, target_is_directory=os.path.isdir(resolved))
