"""Command-line interface for typo-learn.

Uses Typer for a type-hinted CLI with Rich output.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from typo_learn import __version__
from typo_learn.config import EngineSettings, get_settings_path, load_settings
from typo_learn.errors import TypoLearnError, ValidationError, format_error_for_display
from typo_learn.learning import LearningEngine
from typo_learn.logging import LogLevel, set_verbosity
from typo_learn.models import Correction, CorrectionSource
from typo_learn.storage import JsonCorrectionStore

app = typer.Typer(
    name="typo-learn",
    help="Learn recurring transcription typos from your edits and fix them automatically.",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()


@dataclass
class CliState:
    """Objects shared by all commands of one invocation."""

    settings: EngineSettings
    store: JsonCorrectionStore


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"typo-learn version {__version__}")
        raise typer.Exit()


def _fail(error: Exception) -> NoReturn:
    console.print(f"[red]Error:[/red] {escape(format_error_for_display(error))}")
    raise typer.Exit(1)


@app.callback()
def main(
    ctx: typer.Context,
    store: Annotated[
        Optional[Path],
        typer.Option("--store", "-s", help="Correction store file (defaults to the configured one)"),
    ] = None,
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase log output (-vv for debug)"),
    ] = 0,
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version and exit"),
    ] = None,
) -> None:
    """Typo Learn - self-learning transcription typo correction."""
    if verbose:
        set_verbosity(LogLevel.DEBUG if verbose > 1 else LogLevel.VERBOSE)

    try:
        settings = load_settings()
    except TypoLearnError as e:
        _fail(e)

    store_path = store or settings.resolved_store_path()
    ctx.obj = CliState(settings=settings, store=JsonCorrectionStore(store_path))


def _engine(state: CliState) -> LearningEngine:
    return LearningEngine.from_storage(state.store, state.settings)


def _single_token(value: str, name: str) -> str:
    value = value.strip()
    if not value or len(value.split()) != 1:
        raise ValidationError(f"{name} must be a single word", context={name: value})
    return value


@app.command()
def learn(
    ctx: typer.Context,
    original: Annotated[str, typer.Argument(help="Text as it was transcribed")],
    edited: Annotated[str, typer.Argument(help="Text after your edits")],
) -> None:
    """Learn typo corrections from an edit."""
    state: CliState = ctx.obj
    try:
        engine = _engine(state)
        learned = engine.learn_from_edit(original, edited)
    except TypoLearnError as e:
        _fail(e)

    if not learned:
        console.print("[yellow]No typo corrections found in this edit.[/yellow]")
        return

    table = Table(title=f"Learned {len(learned)} correction(s)")
    table.add_column("Original", style="red")
    table.add_column("Corrected", style="green")
    table.add_column("Similarity", justify="right")

    for item in learned:
        table.add_row(escape(item.original), escape(item.corrected), f"{item.similarity:.2f}")

    console.print(table)
    console.print(f"[dim]Active corrections: {engine.cache_size()}[/dim]")


@app.command()
def apply(
    ctx: typer.Context,
    text: Annotated[str, typer.Argument(help="Text to correct")],
    show: Annotated[
        bool,
        typer.Option("--show", help="List the corrections that were applied"),
    ] = False,
    min_confidence: Annotated[
        Optional[float],
        typer.Option("--min-confidence", "-m", min=0.0, max=1.0, help="Override the auto-apply threshold"),
    ] = None,
) -> None:
    """Apply learned corrections to text."""
    state: CliState = ctx.obj
    try:
        engine = _engine(state)
    except TypoLearnError as e:
        _fail(e)

    if min_confidence is not None:
        engine.set_min_confidence(min_confidence)

    corrected, applied = engine.apply_corrections(text)
    typer.echo(corrected)

    if show and applied:
        table = Table(title=f"Applied {len(applied)} correction(s)")
        table.add_column("Position", justify="right")
        table.add_column("Original", style="red")
        table.add_column("Corrected", style="green")
        table.add_column("Confidence", justify="right")
        for item in applied:
            table.add_row(
                str(item.position),
                escape(item.original),
                escape(item.corrected),
                f"{item.confidence:.2f}",
            )
        console.print(table)


@app.command()
def add(
    ctx: typer.Context,
    original: Annotated[str, typer.Argument(help="Misspelled word")],
    corrected: Annotated[str, typer.Argument(help="Replacement word")],
    times: Annotated[
        int,
        typer.Option("--times", "-t", min=1, help="Number of observations to record"),
    ] = 1,
) -> None:
    """Record a correction by hand."""
    state: CliState = ctx.obj
    try:
        correction = Correction(
            original=_single_token(original, "original"),
            corrected=_single_token(corrected, "corrected"),
            source=CorrectionSource.MANUAL,
            occurrences=times,
        )
        saved = state.store.save_correction(correction)
    except TypoLearnError as e:
        _fail(e)

    active = saved.confidence >= state.settings.min_confidence
    status = "[green]active[/green]" if active else "[yellow]not yet active[/yellow]"
    console.print(
        f"Saved '{escape(saved.original)}' -> '{escape(saved.corrected)}' "
        f"({saved.occurrences} occurrence(s), confidence {saved.confidence:.2f}, {status})"
    )


@app.command("list")
def list_corrections(
    ctx: typer.Context,
    min_confidence: Annotated[
        float,
        typer.Option("--min-confidence", "-m", min=0.0, max=1.0, help="Only show corrections at or above this confidence"),
    ] = 0.0,
) -> None:
    """List stored corrections."""
    state: CliState = ctx.obj
    try:
        corrections = state.store.get_corrections(min_confidence)
    except TypoLearnError as e:
        _fail(e)

    if not corrections:
        console.print("[yellow]No corrections stored.[/yellow]")
        return

    table = Table(title=f"Corrections ({len(corrections)})")
    table.add_column("Original", style="red")
    table.add_column("Corrected", style="green")
    table.add_column("Seen", justify="right")
    table.add_column("Confidence", justify="right")
    table.add_column("Source", style="dim")
    table.add_column("Active", justify="center")

    for c in corrections:
        active = "yes" if c.confidence >= state.settings.min_confidence else "no"
        table.add_row(
            escape(c.original),
            escape(c.corrected),
            str(c.occurrences),
            f"{c.confidence:.2f}",
            c.source.value,
            active,
        )

    console.print(table)


@app.command()
def forget(
    ctx: typer.Context,
    original: Annotated[str, typer.Argument(help="Misspelled word to forget")],
    corrected: Annotated[
        Optional[str],
        typer.Option("--corrected", "-c", help="Only forget this replacement"),
    ] = None,
) -> None:
    """Delete stored corrections for a word."""
    state: CliState = ctx.obj
    try:
        removed = state.store.delete_correction(original, corrected)
    except TypoLearnError as e:
        _fail(e)

    if not removed:
        console.print(f"[red]Error:[/red] No corrections stored for '{escape(original)}'.")
        raise typer.Exit(1)

    console.print(f"[green]Removed {removed} correction(s) for '{escape(original)}'.[/green]")


@app.command("config")
def show_config(ctx: typer.Context) -> None:
    """Show the effective settings."""
    state: CliState = ctx.obj

    table = Table(title="Settings", show_header=True, header_style="bold")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    for name, value in state.settings.model_dump(mode="json").items():
        table.add_row(name, escape(str(value)))
    table.add_row("store file", escape(str(state.store.path)))
    table.add_row("settings file", escape(str(get_settings_path())))

    console.print(table)


if __name__ == "__main__":
    app()
