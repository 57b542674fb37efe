"""
Script-friendly helpers for running filesystem jobs with diagnostics:
- `use_diagnostics(...)`: context manager that tracks atomfs warnings for the
  duration of a job, optionally renders them as Rich frames, and reports the
  operations that ran non-atomically once the job ends.
- `run_with_diagnostics(...)`: decorator to wrap a function in the same context,
  pretty-print an escaping FSError and exit with a code chosen by its class.
"""

from __future__ import annotations

import contextvars
import functools
import os
import sys
from collections import Counter
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import ParamSpec, TypeVar

from rich.console import Console

from atomfs.errors import (
    FSError,
    FSIOError,
    InvalidArgumentError,
    NotFoundError,
    UnsupportedEnvironmentError,
)
from atomfs.reporting.diagnostics import Diagnostic, Emitter, Related, Severity
from atomfs.reporting.warnings_bridge import (
    DiagnosticWarning,
    NonAtomicOperationWarning,
    TempDirectoryFallbackWarning,
    install_warnings_bridge,
)

__all__ = [
    "DiagnosticsSession",
    "current_session",
    "exit_code_for",
    "use_diagnostics",
    "print_exception",
    "run_with_diagnostics",
]

P = ParamSpec("P")
R = TypeVar("R")

_COLOR_MODES = frozenset({"auto", "always", "never"})
_PRETTY_MODES = frozenset({"auto", "true", "1", "false", "0"})

# Most specific class first; FSError is the catch-all.
_EXIT_CODES: tuple[tuple[type[FSError], int], ...] = (
    (InvalidArgumentError, 2),
    (NotFoundError, 3),
    (UnsupportedEnvironmentError, 4),
    (FSIOError, 5),
    (FSError, 1),
)

_active_session: contextvars.ContextVar[DiagnosticsSession | None] = contextvars.ContextVar(
    "_active_session", default=None
)


@dataclass
class DiagnosticsSession:
    """Warnings seen while a `use_diagnostics` block was active."""

    console: Console
    emitter: Emitter
    counts: Counter[str] = field(default_factory=Counter)
    non_atomic: list[Diagnostic] = field(default_factory=list)
    temp_fallbacks: list[Diagnostic] = field(default_factory=list)

    def record(self, w: DiagnosticWarning) -> None:
        self.counts[type(w).__name__] += 1
        if isinstance(w, NonAtomicOperationWarning):
            self.non_atomic.append(w.diagnostic)
        elif isinstance(w, TempDirectoryFallbackWarning):
            self.temp_fallbacks.append(w.diagnostic)

    def summary(self) -> Diagnostic | None:
        """
        One WARN diagnostic listing every operation that did not run atomically
        or landed in the system temp directory, or None if there were none.
        """
        if not self.non_atomic and not self.temp_fallbacks:
            return None

        parts = []
        if self.non_atomic:
            n = len(self.non_atomic)
            parts.append(f"{n} operation{'s' if n != 1 else ''} did not run atomically")
        if self.temp_fallbacks:
            n = len(self.temp_fallbacks)
            parts.append(f"{n} temporary file{'s' if n != 1 else ''} used the system temp directory")

        related = [
            Related(d.operation or "operation", d.path or "")
            for d in (*self.non_atomic, *self.temp_fallbacks)
        ]
        hint = None
        if self.non_atomic:
            hint = "Keep origin and target on the same filesystem to get an atomic rename."
        return Diagnostic(
            message="; ".join(parts),
            severity=Severity.WARN,
            operation="summary",
            code="non-atomic-summary",
            related=related,
            hint=hint,
        )


def current_session() -> DiagnosticsSession | None:
    """The session of the innermost active `use_diagnostics` block, if any."""
    return _active_session.get()


def _mode(value: object, allowed: frozenset[str], name: str) -> str:
    mode = str(value).lower()
    if mode not in allowed:
        raise InvalidArgumentError.of(
            f"{name} must be one of {', '.join(sorted(allowed))}, got {value!r}",
            operation="use_diagnostics",
        )
    return mode


@contextmanager
def use_diagnostics(
    *,
    color: str | None = None,
    pretty: bool | str | None = None,
    only_atomfs: bool = True,
    summary: bool = True,
) -> Iterator[DiagnosticsSession]:
    """
    Track atomfs warnings for *this script* and optionally render them.

    Args:
      color: 'auto' | 'always' | 'never' | None (env ATOMFS_COLOR or 'auto')
      pretty: True | False | 'auto' | None (env ATOMFS_PRETTY_WARNINGS or 'auto')
      only_atomfs: if True, only atomfs warnings get prettified.
      summary: emit the session summary on exit when something ran non-atomically.

    Behavior:
      - pretty='auto' → render warnings only if a TTY is attached.
      - pretty=True   → always render warnings as Rich frames.
      - pretty=False  → leave rendering to Python's warnings display.
      Warnings are counted in every mode.

    Raises InvalidArgumentError for an unknown color or pretty mode.
    """
    color_mode = _mode(color or os.getenv("ATOMFS_COLOR") or "auto", _COLOR_MODES, "color")
    pretty_val = pretty if pretty is not None else os.getenv("ATOMFS_PRETTY_WARNINGS", "auto")
    pretty_mode = _mode(pretty_val, _PRETTY_MODES, "pretty")
    is_tty = sys.stderr.isatty() or sys.stdout.isatty()
    enable_pretty = pretty_mode in {"true", "1"} or (pretty_mode == "auto" and is_tty)

    console = Console(
        stderr=True,
        force_terminal=(color_mode == "always"),
        no_color=(color_mode == "never"),
    )
    session = DiagnosticsSession(console=console, emitter=Emitter(console=console))
    token = _active_session.set(session)

    uninstall = install_warnings_bridge(
        emitter=session.emitter,
        only_atomfs=only_atomfs,
        render=enable_pretty,
        on_warning=session.record,
    )
    try:
        yield session
    finally:
        uninstall()
        _active_session.reset(token)
        if summary:
            d = session.summary()
            if d is not None:
                session.emitter.emit(d)


def exit_code_for(e: FSError) -> int:
    """
    Process exit code for an escaping FSError:
    2 invalid argument, 3 not found, 4 unsupported environment, 5 other I/O, 1 otherwise.
    """
    for cls, code in _EXIT_CODES:
        if isinstance(e, cls):
            return code
    return 1


def print_exception(e: FSError) -> None:
    """Pretty-print an FSError; uses the active session's Console if available."""
    session = _active_session.get()
    (session.console if session else Console(stderr=True)).print(e)


def run_with_diagnostics(
    *,
    color: str | None = None,
    pretty: bool | str | None = None,
    only_atomfs: bool = True,
    exit_on_exception: bool = True,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """
    Decorator: runs the function inside `use_diagnostics(...)`.
    If an FSError escapes, pretty-print it and (by default) exit with `exit_code_for(e)`.
    """

    def deco(fn: Callable[P, R]) -> Callable[P, R]:
        @functools.wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            with use_diagnostics(color=color, pretty=pretty, only_atomfs=only_atomfs):
                try:
                    return fn(*args, **kwargs)
                except FSError as e:
                    print_exception(e)
                    if exit_on_exception:
                        raise SystemExit(exit_code_for(e)) from e
                    raise

        return wrapper

    return deco
