"""
atomfs diagnostics: shared data model, rich renderer (path frames with carets),
and a lightweight Emitter. Designed to be used by both warnings and exceptions.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum

from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text

__all__ = [
    "Severity",
    "PathSpan",
    "Related",
    "Diagnostic",
    "FrameConfig",
    "Theme",
    "Emitter",
    "render_diagnostic",
]


# ────────────────────────── Core model ──────────────────────────


class Severity(StrEnum):
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class PathSpan:
    """0-indexed, [start, end) half-open interval into a path string."""

    start: int  # inclusive
    end: int  # exclusive

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError(f"PathSpan.start cannot be negative (got {self.start})")
        if self.end <= self.start:
            raise ValueError(f"PathSpan.end ({self.end}) <= start ({self.start})")

    @classmethod
    def whole(cls, path: str) -> PathSpan | None:
        return cls(0, len(path)) if path else None


@dataclass(frozen=True, slots=True)
class Related:
    label: str
    path: str


@dataclass(frozen=True, slots=True)
class Diagnostic:
    message: str
    severity: Severity
    path: str | None = None
    span: PathSpan | None = None
    operation: str | None = None
    os_error: str | None = None
    code: str | None = None
    notes: list[str] = field(default_factory=list)
    hint: str | None = None
    related: list[Related] = field(default_factory=list)


# ─────────────────────── Rendering config/theme ───────────────────────


@dataclass(frozen=True, slots=True)
class FrameConfig:
    max_path_width: int = 120  # longer paths are elided around the span
    max_related: int = 6  # cap to avoid huge dumps


@dataclass(frozen=True, slots=True)
class Theme:
    info_header: str = "bold cyan"
    warn_header: str = "bold yellow"
    error_header: str = "bold red"
    operation: str = "italic"
    label: str = "dim"
    path: str = ""
    caret: str = "bold red"
    os_error: str = "red"
    note_bullet: str = "dim"
    hint_label: str = "italic dim"


def _sev_style(sev: Severity, theme: Theme) -> str:
    return {
        Severity.INFO: theme.info_header,
        Severity.WARN: theme.warn_header,
        Severity.ERROR: theme.error_header,
    }[sev]


# ────────────────────────── Span helpers ──────────────────────────


def _clamp_span(path: str, span: PathSpan | None) -> tuple[int, int]:
    if span is None:
        return 0, max(1, len(path))
    start = min(span.start, len(path))
    end = min(max(span.end, start + 1), max(len(path), start + 1))
    return start, end


def _elide(path: str, start: int, end: int, width: int) -> tuple[str, int, int]:
    """
    Shorten `path` to roughly `width` characters, keeping the highlighted region
    visible. Returns the display string and the shifted span.
    """
    if len(path) <= width:
        return path, start, end

    keep = max(8, width - (end - start))
    lo = max(0, start - keep // 2)
    hi = min(len(path), end + keep // 2)
    prefix = "…" if lo > 0 else ""
    suffix = "…" if hi < len(path) else ""
    shown = prefix + path[lo:hi] + suffix
    shift = len(prefix) - lo
    return shown, start + shift, end + shift


# ────────────────────────── Frame builder ──────────────────────────


def _build_path_frame(
    path: str,
    span: PathSpan | None,
    severity: Severity,
    operation: str | None,
    theme: Theme,
    cfg: FrameConfig,
) -> RenderableType:
    """
    Visual frame around the offending path, with carets under the span that
    triggered the diagnostic (the whole path when no span is given).
    """
    start, end = _clamp_span(path, span)
    shown, s_disp, e_disp = _elide(path, start, end, cfg.max_path_width)

    title = Text()
    title.append(operation or "path", style=theme.operation)

    body = Text(shown, style=theme.path)
    body.append("\n")
    body.append(" " * s_disp)
    body.append("^" * max(1, e_disp - s_disp), style=theme.caret)

    return Panel.fit(body, title=title, border_style=_sev_style(severity, theme), padding=(0, 1))


def render_diagnostic(
    d: Diagnostic,
    *,
    theme: Theme | None = None,
    cfg: FrameConfig | None = None,
) -> RenderableType:
    """
    Assemble a Rich renderable for a Diagnostic: header, rule, the path frame,
    the captured OS error, related paths (capped), and optional notes/hint.
    """
    theme = theme or Theme()
    cfg = cfg or FrameConfig()

    head = Text()
    head.append(f"{d.severity.upper()}", style=_sev_style(d.severity, theme))
    if d.code:
        head.append(f" [{d.code}]")
    head.append(f": {d.message}")

    blocks: list[RenderableType] = [head, Rule(style=_sev_style(d.severity, theme))]

    if d.path is not None:
        blocks.append(_build_path_frame(d.path, d.span, d.severity, d.operation, theme, cfg))

    if d.os_error:
        err = Text()
        err.append("os error: ", style=theme.label)
        err.append(d.os_error, style=theme.os_error)
        blocks.append(err)

    if d.related:
        rel = d.related[: cfg.max_related]
        for r in rel:
            line = Text()
            line.append(f"{r.label}: ", style=theme.label)
            line.append(r.path, style=theme.path)
            blocks.append(line)
        omitted = len(d.related) - len(rel)
        if omitted > 0:
            blocks.append(Text(f"... and {omitted} more related paths", style=theme.label))

    trailer = Text()
    for n in d.notes:
        trailer.append("\n• ", style=theme.note_bullet)
        trailer.append(n)
    if d.hint:
        trailer.append("\n")
        trailer.append("Hint: ", style=theme.hint_label)
        trailer.append(d.hint)
    if trailer.plain:
        blocks.append(trailer)

    return Group(*blocks)


# ────────────────────────── Emitter (opt-in) ──────────────────────────


class Emitter:
    """
    Lightweight printer for diagnostics. Create ad-hoc instances bound to the
    Console you want output on.
    """

    def __init__(
        self,
        console: Console | None = None,
        theme: Theme | None = None,
        cfg: FrameConfig | None = None,
    ):
        self.console = console or Console()
        self.theme = theme or Theme()
        self.cfg = cfg or FrameConfig()

    def emit(self, d: Diagnostic) -> None:
        self.console.print(render_diagnostic(d, theme=self.theme, cfg=self.cfg))

    def _emit_new(
        self,
        severity: Severity,
        message: str,
        path: str | None,
        *,
        code: str | None,
        hint: str | None,
        notes: Iterable[str],
        related: list[Related] | None,
    ) -> None:
        self.emit(
            Diagnostic(
                message=message,
                severity=severity,
                path=path,
                code=code,
                hint=hint,
                notes=list(notes),
                related=related or [],
            )
        )

    def info(
        self,
        message: str,
        path: str | None = None,
        *,
        code: str | None = None,
        hint: str | None = None,
        notes: Iterable[str] = (),
    ) -> None:
        self._emit_new(Severity.INFO, message, path, code=code, hint=hint, notes=notes, related=None)

    def warn(
        self,
        message: str,
        path: str | None = None,
        *,
        code: str | None = None,
        hint: str | None = None,
        notes: Iterable[str] = (),
        related: list[Related] | None = None,
    ) -> None:
        self._emit_new(
            Severity.WARN, message, path, code=code, hint=hint, notes=notes, related=related
        )

    def error(
        self,
        message: str,
        path: str | None = None,
        *,
        code: str | None = None,
        hint: str | None = None,
        notes: Iterable[str] = (),
        related: list[Related] | None = None,
    ) -> None:
        self._emit_new(
            Severity.ERROR, message, path, code=code, hint=hint, notes=notes, related=related
        )
