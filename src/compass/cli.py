from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from compass import __version__
from compass.config import builtin_rule_set, load_rule_set, resolve_rules, save_rule_set
from compass.engine.analyzer import AnalysisResult, Analyzer
from compass.engine.tree_sitter import is_available
from compass.errors import CompassError
from compass.languages.registry import LANGUAGES, language_by_name, language_for_path
from compass.logging_utils import configure_logging
from compass.reporters.json_reporter import render_json
from compass.reporters.terminal import render_terminal

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="compass: score the quality of a single source file with tree-sitter pattern rules.",
)
console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)

_ERROR_EXIT = 2
_FAIL_UNDER_EXIT = 1


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def _main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Verbose logs (printed to stderr)."),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Only log warnings and errors."),
    ] = False,
) -> None:
    """compass CLI."""

    if verbose and quiet:
        raise typer.BadParameter("Choose at most one: --verbose or --quiet.")
    configure_logging(verbose=verbose, quiet=quiet)


def _fail(exc: CompassError) -> typer.Exit:
    err_console.print(f"Error: {exc}", markup=False, highlight=False, soft_wrap=True)
    return typer.Exit(code=_ERROR_EXIT)


def _normalize_format(value: str, allowed: tuple[str, ...]) -> str:
    normalized = value.strip().lower()
    if normalized not in allowed:
        raise typer.BadParameter(f"Unsupported format. Use: {', '.join(allowed)}.")
    return normalized


@app.command()
def analyze(
    source: Annotated[
        Path,
        typer.Argument(
            exists=True,
            file_okay=True,
            dir_okay=False,
            help="Source file to analyze.",
        ),
    ],
    config: Annotated[
        Path | None,
        typer.Argument(
            help="Rule-set TOML file (default: the built-in rules for the file's language).",
            show_default=False,
        ),
    ] = None,
    output_format: Annotated[
        str,
        typer.Option("--format", help="Output format: json, terminal.", show_default=True),
    ] = "json",
    fail_under: Annotated[
        float | None,
        typer.Option("--fail-under", min=0.0, max=10.0, help="Exit with status 1 when the score is below this value."),
    ] = None,
) -> None:
    """Analyze one source file and print its score and issues."""

    fmt = _normalize_format(output_format, ("json", "terminal"))
    try:
        language = language_for_path(source)
        rules, config_label = resolve_rules(language, config)
        logger.info("Analyzing %s file: %s", language.display_name, source)
        logger.info("Config: %s", config_label)
        result = Analyzer(rules).analyze_file(source, language)
    except CompassError as exc:
        raise _fail(exc) from exc

    _emit(result, fmt=fmt, config_label=config_label)

    if fail_under is not None and result.score.overall_score < fail_under:
        raise typer.Exit(code=_FAIL_UNDER_EXIT)


def _emit(result: AnalysisResult, *, fmt: str, config_label: str) -> None:
    if fmt == "terminal":
        render_terminal(result, console=console, config_label=config_label)
        return
    typer.echo(render_json(result, config_label=config_label))


@app.command()
def rules(
    language: Annotated[str, typer.Argument(help="Language name (see `compass languages`).")],
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", exists=True, dir_okay=False, help="Rule-set TOML file to inspect."),
    ] = None,
    output_format: Annotated[
        str,
        typer.Option("--format", help="Output format: terminal, json.", show_default=True),
    ] = "terminal",
    enabled_only: Annotated[
        bool,
        typer.Option("--enabled-only", help="Only show enabled rules."),
    ] = False,
) -> None:
    """List the rules of a rule set and whether each is enabled."""

    fmt = _normalize_format(output_format, ("terminal", "json"))
    try:
        spec = language_by_name(language)
        rule_set = load_rule_set(config) if config is not None else builtin_rule_set(spec.name)
    except CompassError as exc:
        raise _fail(exc) from exc

    rows = [
        {
            "name": rc.name,
            "enabled": rc.enabled,
            "severity": rc.severity,
            "weight": rc.weight,
            "message": rc.message,
        }
        for rc in rule_set.rules
        if rc.enabled or not enabled_only
    ]

    if fmt == "json":
        typer.echo(json.dumps(rows, indent=2))
        return

    table = Table(title=f"compass rules: {spec.display_name}")
    table.add_column("Name", style="bold")
    table.add_column("Enabled", justify="center")
    table.add_column("Severity")
    table.add_column("Weight", justify="right")
    table.add_column("Message")
    for row in rows:
        table.add_row(
            str(row["name"]),
            "yes" if row["enabled"] else "no",
            str(row["severity"]),
            f"{row['weight']:g}",
            str(row["message"]),
        )
    console.print(table)


@app.command()
def init(
    language: Annotated[str, typer.Argument(help="Language whose built-in rules should be written.")],
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Destination file (default: compass-<language>.toml).", show_default=False),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite the destination if it exists."),
    ] = False,
) -> None:
    """Write a language's built-in rule set to a file for customization."""

    try:
        spec = language_by_name(language)
        rule_set = builtin_rule_set(spec.name)
    except CompassError as exc:
        raise _fail(exc) from exc

    destination = output if output is not None else Path(f"compass-{spec.name}.toml")
    if destination.exists() and not force:
        err_console.print(f"Error: {destination} already exists (use --force to overwrite)", markup=False, soft_wrap=True)
        raise typer.Exit(code=_ERROR_EXIT)

    try:
        save_rule_set(rule_set, destination)
    except OSError as exc:
        err_console.print(f"Error: failed to write {destination}: {exc}", markup=False, soft_wrap=True)
        raise typer.Exit(code=_ERROR_EXIT) from exc
    console.print(f"Wrote {len(rule_set.rules)} {spec.display_name} rule(s) to {destination}")


@app.command()
def languages() -> None:
    """List supported languages and file extensions."""

    table = Table(title="compass languages")
    table.add_column("Language", style="bold")
    table.add_column("Name")
    table.add_column("Extensions")
    for spec in LANGUAGES:
        table.add_row(spec.display_name, spec.name, " ".join(spec.extensions))
    console.print(table)
    if not is_available():
        err_console.print(
            "tree-sitter grammars are not installed; install with: pip install \"compass-score[treesitter]\"",
            markup=False,
            soft_wrap=True,
        )
