from __future__ import annotations

import warnings

from rich.console import Console

from atomfs.reporting.diagnostics import Diagnostic, Emitter, Severity
from atomfs.reporting.warnings_bridge import (
    DiagnosticWarning,
    NonAtomicOperationWarning,
    install_warnings_bridge,
)


def make_warning() -> NonAtomicOperationWarning:
    return NonAtomicOperationWarning(
        Diagnostic(
            message="fell back to copy-then-remove",
            severity=Severity.WARN,
            path="/data/src",
            code="non-atomic-rename",
        )
    )


def test_plain_text_fallback() -> None:
    w = make_warning()
    assert str(w) == "WARN [non-atomic-rename]: fell back to copy-then-remove (/data/src)"
    assert isinstance(w, DiagnosticWarning)


def test_bridge_renders_and_uninstalls() -> None:
    console = Console(record=True, width=100, color_system=None)
    previous = warnings.showwarning
    uninstall = install_warnings_bridge(emitter=Emitter(console))
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("always")
            warnings.warn(make_warning(), stacklevel=1)
    finally:
        uninstall()

    assert warnings.showwarning is previous
    out = console.export_text()
    assert "WARN [non-atomic-rename]: fell back to copy-then-remove" in out
    assert "/data/src" in out


def test_bridge_passes_foreign_warnings_through() -> None:
    console = Console(record=True, width=100, color_system=None)
    seen: list[str] = []

    def recorder(message, category, filename, lineno, file=None, line=None):
        seen.append(str(message))

    previous = warnings.showwarning
    warnings.showwarning = recorder
    try:
        uninstall = install_warnings_bridge(emitter=Emitter(console))
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("always")
                warnings.warn("unrelated", UserWarning, stacklevel=1)
        finally:
            uninstall()
    finally:
        warnings.showwarning = previous

    assert seen == ["unrelated"]
    assert console.export_text() == ""


def test_bridge_reports_atomfs_warnings_without_rendering() -> None:
    console = Console(record=True, width=100, color_system=None)
    seen: list[DiagnosticWarning] = []
    shown: list[str] = []

    def recorder(message, category, filename, lineno, file=None, line=None):
        shown.append(str(message))

    previous = warnings.showwarning
    warnings.showwarning = recorder
    try:
        uninstall = install_warnings_bridge(
            emitter=Emitter(console), render=False, on_warning=seen.append
        )
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("always")
                warnings.warn(make_warning(), stacklevel=1)
                warnings.warn("unrelated", UserWarning, stacklevel=1)
        finally:
            uninstall()
    finally:
        warnings.showwarning = previous

    assert [w.diagnostic.code for w in seen] == ["non-atomic-rename"]
    assert shown == [
        "WARN [non-atomic-rename]: fell back to copy-then-remove (/data/src)",
        "unrelated",
    ]
    assert console.export_text() == ""
