from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from compass import __version__
from compass.engine.analyzer import AnalysisResult
from compass.engine.types import SEVERITY_ORDER, Issue, Rating, ScoreBreakdown, Severity

_SEVERITY_ICON = {
    Severity.ERROR: "✖",
    Severity.WARNING: "⚠",
    Severity.INFO: "ℹ",
    Severity.STYLE: "·",
}
_SEVERITY_STYLE = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "yellow",
    Severity.INFO: "cyan",
    Severity.STYLE: "dim",
}
_BUCKET_LABEL = {
    Severity.ERROR: "errors",
    Severity.WARNING: "warnings",
    Severity.INFO: "info",
    Severity.STYLE: "style",
}
_RATING_STYLE = {
    Rating.EXCELLENT: "bold green",
    Rating.GOOD: "green",
    Rating.FAIR: "yellow",
    Rating.POOR: "red",
    Rating.CRITICAL: "bold red",
}

# Matched text longer than this is cut in the terminal view.
_SNIPPET_WIDTH = 80


def render_terminal(
    result: AnalysisResult,
    *,
    console: Console,
    config_label: str | None = None,
    show_details: bool = True,
) -> None:
    header = Text()
    header.append("compass ", style="bold")
    header.append(f"v{__version__}", style="dim")
    header.append(f" · {result.language.display_name} quality score", style="dim")

    subtitle = str(result.path) if result.path is not None else None
    if config_label:
        subtitle = f"{subtitle} · {config_label}" if subtitle else config_label
    console.print(Panel(header, subtitle=subtitle, border_style="cyan"))

    if show_details:
        for issue in result.issues:
            _print_issue(console, issue)
        if result.issues:
            console.print()

    _print_score(result, console=console)


def _print_issue(console: Console, issue: Issue) -> None:
    style = _SEVERITY_STYLE[issue.severity]
    line = Text()
    line.append(f"  {_SEVERITY_ICON[issue.severity]} ", style=style)
    line.append(issue.rule_name, style="bold")
    line.append(f"  ({issue.line}:{issue.column})", style="dim")
    line.append(f"  {issue.message}")
    line.append(f"  {issue.score_impact:+.1f}", style=style)
    console.print(line)

    snippet = issue.matched_text.splitlines()[0] if issue.matched_text else ""
    if snippet:
        if len(snippet) > _SNIPPET_WIDTH:
            snippet = snippet[: _SNIPPET_WIDTH - 1] + "…"
        console.print(f"     {issue.line:>4} │ {snippet}", style="dim", markup=False, highlight=False)

    if issue.suggestion:
        console.print(f"     → {issue.suggestion}", style="dim", markup=False, highlight=False)


def _buckets(breakdown: ScoreBreakdown) -> dict[Severity, tuple[int, float]]:
    return {
        Severity.ERROR: (breakdown.errors, breakdown.error_deduction),
        Severity.WARNING: (breakdown.warnings, breakdown.warning_deduction),
        Severity.INFO: (breakdown.info_issues, breakdown.info_deduction),
        Severity.STYLE: (breakdown.style_issues, breakdown.style_deduction),
    }


def _print_score(result: AnalysisResult, *, console: Console) -> None:
    score = result.score
    buckets = _buckets(score.breakdown)
    console.print(Text("─" * 60, style="dim"))
    line = Text()
    line.append(f"Score: {score.overall_score:.1f}/{score.max_score:.0f} ", style="bold")
    line.append(score.rating.value, style=_RATING_STYLE[score.rating])
    console.print(line)
    console.print(Text(score.summary))

    counts = ", ".join(f"{_BUCKET_LABEL[sev]} {buckets[sev][0]}" for sev in SEVERITY_ORDER)
    console.print(Text(f"Issues: {score.total_issues} ({counts})", style="dim"))
    deductions = " | ".join(f"{_BUCKET_LABEL[sev]} {buckets[sev][1]:.1f}" for sev in SEVERITY_ORDER)
    console.print(
        Text(f"Deductions: {deductions} | size bonus {score.breakdown.size_bonus:.2f}", style="dim")
    )
    console.print(Text("─" * 60, style="dim"))
