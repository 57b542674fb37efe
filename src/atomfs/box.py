"""
Boxed OS calls.

`box(func, *args)` runs one filesystem call and returns a `Boxed` result that
carries either the call's value or the diagnostic text of the OSError it
raised. The captured message lives on the returned value only, so concurrent
or nested boxed calls never see each other's errors.

Anything that is not an OSError (TypeError, KeyboardInterrupt, ...) is a hard
failure and propagates unchanged.
"""

from __future__ import annotations

import errno as _errno
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, ParamSpec, TypeVar

__all__ = ["Boxed", "box", "describe_os_error"]

T = TypeVar("T")
P = ParamSpec("P")

_PERMISSION_ERRNOS = frozenset({_errno.EACCES, _errno.EPERM})


@dataclass(frozen=True, slots=True)
class Boxed(Generic[T]):
    value: T | None = None
    error: str | None = None
    errno: int | None = None
    winerror: int | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def permission_denied(self) -> bool:
        return self.errno in _PERMISSION_ERRNOS

    @classmethod
    def failed(cls, exc: OSError) -> Boxed[T]:
        return cls(
            error=describe_os_error(exc),
            errno=exc.errno,
            winerror=getattr(exc, "winerror", None),
        )


def describe_os_error(exc: OSError) -> str:
    """Render an OSError the way a user reads it: strerror plus the file(s) involved."""
    text = exc.strerror or str(exc) or type(exc).__name__
    if exc.filename is not None and exc.filename2 is not None:
        return f"{text} ({exc.filename!s} -> {exc.filename2!s})"
    if exc.filename is not None:
        return f"{text} ({exc.filename!s})"
    return text


def box(func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> Boxed[T]:
    try:
        return Boxed(value=func(*args, **kwargs))
    except OSError as e:
        return Boxed.failed(e)
