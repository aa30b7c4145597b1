"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
chapter listing rows, and bulk conversion summaries.
"""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer

from .errors import PipelineStageError
from .models.datatypes import BulkConversionReport, Chapter


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PipelineStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def format_page_range(chapter: Chapter) -> str:
    return f"pages {chapter.page_number}-{chapter.end_page_number}"


def echo_chapter_list(chapters: list[Chapter]) -> None:
    """Print compact deterministic `position. title (pages a-b)` rows."""

    for position, chapter in enumerate(chapters, start=1):
        typer.echo(f"{position}. {chapter.title} ({format_page_range(chapter)})")


def echo_chapter_outcome(position: int, chapter: Chapter, written_path: Path | None) -> None:
    """Print one line describing a finished chapter conversion."""

    if written_path is not None:
        typer.echo(
            f"[done] {position}. {chapter.title} -> {written_path} ({chapter.duration or 0.0:.1f}s)"
        )
        return
    typer.secho(
        f"[failed] {position}. {chapter.title}: {chapter.error or 'unknown error'}",
        fg=typer.colors.RED,
        err=True,
    )


def echo_conversion_summary(report: BulkConversionReport, output_dir: Path) -> None:
    """Print bulk conversion counters and the output directory."""

    typer.echo(f"Converted: {len(report.converted)}")
    typer.echo(f"Failed: {len(report.failed)}")
    typer.echo(f"Skipped: {len(report.skipped)}")
    typer.echo(f"Output directory: {output_dir}")
