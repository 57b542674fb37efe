"""
atomfs exceptions: a base FSError that wraps a Diagnostic and renders using
the same rich path-frame formatting as warnings.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import ClassVar, Self

from rich.console import Console, ConsoleOptions, RenderResult

from atomfs.reporting.diagnostics import Diagnostic, PathSpan, Related, Severity, render_diagnostic

__all__ = [
    "FSError",
    "FSIOError",
    "NotFoundError",
    "DirectoryNotFoundError",
    "InvalidArgumentError",
    "UnsupportedEnvironmentError",
]


@dataclass(eq=False)
class FSError(Exception):
    """
    Base atomfs exception that carries a Diagnostic and renders nicely with Rich.
    """

    diagnostic: Diagnostic

    code: ClassVar[str] = "fs"

    @classmethod
    def of(
        cls,
        message: str,
        *,
        path: str | None = None,
        span: PathSpan | None = None,
        operation: str | None = None,
        os_error: str | None = None,
        hint: str | None = None,
        notes: Iterable[str] = (),
        related: Iterable[Related] = (),
    ) -> Self:
        return cls(
            Diagnostic(
                message=message,
                severity=Severity.ERROR,
                path=path,
                span=span,
                operation=operation,
                os_error=os_error,
                code=cls.code,
                notes=list(notes),
                hint=hint,
                related=list(related),
            )
        )

    @property
    def message(self) -> str:
        return self.diagnostic.message

    @property
    def path(self) -> str | None:
        return self.diagnostic.path

    @property
    def os_error(self) -> str | None:
        return self.diagnostic.os_error

    # Plain-text fallback (CI/log files; or if user didn't use Console)
    def __str__(self) -> str:
        d = self.diagnostic
        return f"{d.message}: {d.os_error}" if d.os_error else d.message

    # Pretty rendering when printed via Rich Console
    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        _ = console
        _ = options
        yield render_diagnostic(self.diagnostic)


class FSIOError(FSError):
    """An OS-level operation on the filesystem failed."""

    code = "io"


class NotFoundError(FSIOError):
    """An expected file or directory is missing."""

    code = "not-found"


class DirectoryNotFoundError(NotFoundError):
    code = "dir-not-found"


class InvalidArgumentError(FSError, ValueError):
    """Malformed input, e.g. a relative base path where an absolute one is required."""

    code = "invalid-argument"


class UnsupportedEnvironmentError(FSError, RuntimeError):
    """The host platform or environment cannot support the requested operation."""

    code = "unsupported"
