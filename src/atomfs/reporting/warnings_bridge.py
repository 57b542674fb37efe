"""
Opt-in bridge that routes atomfs warnings to rich path-frame rendering.
This preserves Python's warnings semantics and filtering.

Do NOT install this at import time. Let scripts/CLIs opt in.
"""

from __future__ import annotations

import warnings
from collections.abc import Callable
from dataclasses import dataclass
from typing import TextIO

from rich.console import Console

from atomfs.reporting.diagnostics import Diagnostic, Emitter

__all__ = [
    "FSWarning",
    "DiagnosticWarning",
    "NonAtomicOperationWarning",
    "TempDirectoryFallbackWarning",
    "install_warnings_bridge",
]


# ─────────── Warning categories (parity with exceptions) ───────────


class FSWarning(Warning):
    """Base atomfs warning category."""


@dataclass(eq=False)
class DiagnosticWarning(FSWarning):
    """
    A warning carrying a Diagnostic. Works fine without the bridge (plain text via __str__),
    and pretty-prints when the bridge is installed.
    """

    diagnostic: Diagnostic

    def __str__(self) -> str:
        d = self.diagnostic
        code = f" [{d.code}]" if d.code else ""
        where = f" ({d.path})" if d.path else ""
        return f"{d.severity.upper()}{code}: {d.message}{where}"


class NonAtomicOperationWarning(DiagnosticWarning):
    """An operation fell back to a multi-step strategy that is not atomic."""


class TempDirectoryFallbackWarning(DiagnosticWarning):
    """A temporary file was created in the system temp directory instead of the requested one."""


# ─────────── Opt-in bridge (atomfs-only by default) ───────────


def install_warnings_bridge(
    *,
    emitter: Emitter | None = None,
    only_atomfs: bool = True,
    render: bool = True,
    on_warning: Callable[[DiagnosticWarning], None] | None = None,
) -> Callable[[], None]:
    """
    Route Python's warnings display for atomfs warnings through Rich frames.

    - Returns an `uninstall()` function to restore the previous handler.
    - If `only_atomfs=True` (default), non-atomfs warnings are passed through unchanged.
    - `on_warning` sees every atomfs warning that gets displayed; with
      `render=False` those warnings still go to the previous handler.
    """
    # Default to stderr per warnings convention
    em = emitter or Emitter(Console(stderr=True))

    prev_showwarning = warnings.showwarning

    def _showwarning(
        message: Warning | str,
        category: type[Warning],
        filename: str,
        lineno: int,
        file: TextIO | None = None,
        line: str | None = None,
    ) -> None:
        if isinstance(message, DiagnosticWarning):
            if on_warning is not None:
                on_warning(message)
            if render:
                em.emit(message.diagnostic)
                return
            return prev_showwarning(message, category, filename, lineno, file=file, line=line)
        if only_atomfs or not render:
            return prev_showwarning(message, category, filename, lineno, file=file, line=line)
        em.console.print(f"{category.__name__}: {message} ({filename}:{lineno})")

    warnings.showwarning = _showwarning

    def uninstall() -> None:
        warnings.showwarning = prev_showwarning

    return uninstall
