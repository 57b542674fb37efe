"""Filename and extension helpers over path strings (UNIX and Windows separators)."""

from __future__ import annotations

from collections.abc import Iterable

__all__ = [
    "get_basename",
    "get_extension",
    "get_filename_without_extension",
    "has_extension",
    "change_extension",
]


def get_basename(path: str) -> str:
    """Last path segment, ignoring trailing separators ("a/b/" -> "b")."""
    stripped = path.rstrip("/\\")
    for sep in ("/", "\\"):
        stripped = stripped.rpartition(sep)[2]
    return stripped


def get_extension(path: str, force_lower_case: bool = False) -> str:
    """Extension without the leading dot; "" when there is none."""
    name = get_basename(path)
    if "." not in name:
        return ""
    extension = name.rpartition(".")[2]
    return extension.lower() if force_lower_case else extension


def get_filename_without_extension(path: str, extension: str | None = None) -> str:
    """
    File name with the extension cut off. If `extension` is given (with or
    without leading dot) only that extension is removed.
    """
    name = get_basename(path)
    if name == "":
        return ""

    if extension is not None:
        if extension and name != extension and name.endswith(extension):
            name = name[: -len(extension)]
        return name.rstrip(".")

    if "." not in name:
        return name
    return name.rpartition(".")[0]


def has_extension(
    path: str,
    extensions: str | Iterable[str] | None = None,
    ignore_case: bool = False,
) -> bool:
    """
    Whether the path has any extension, or one of `extensions` (each given
    with or without leading dot).
    """
    if path == "":
        return False

    actual = get_extension(path, force_lower_case=ignore_case)

    if extensions is None:
        return actual != ""

    wanted = [extensions] if isinstance(extensions, str) else list(extensions)
    if not wanted:
        return actual != ""

    normalized = {(e.lower() if ignore_case else e).lstrip(".") for e in wanted}
    return actual in normalized


def change_extension(path: str, extension: str) -> str:
    """
    Replace (or add) the extension of a path. Paths ending in "/" name
    directories and are returned unchanged.
    """
    if path == "":
        return ""

    extension = extension.lstrip(".")

    if path.endswith("/"):
        return path

    actual = get_extension(path)
    if actual == "":
        return path + ("" if path.endswith(".") else ".") + extension

    return path[: -len(actual)] + extension
