"""Command-line interface for chaptervoice.

Responsibilities:
- Expose user-facing commands for listing and converting PDF chapters.
- Convert CLI arguments into `ChapterVoiceConfig` and run a `DocumentSession`.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from dataclasses import replace
import os
from pathlib import Path
from typing import Annotated

import typer

from .cli_rendering import (
    echo_chapter_list,
    echo_chapter_outcome,
    echo_conversion_summary,
    exit_with_command_error,
)
from .config import (
    ChapterVoiceConfig,
    ConfigLoader,
    RuntimeConfigSources,
    normalize_optional_string,
)
from .errors import DocumentLoadError, NoOutlineError, PipelineStageError
from .io.outline_resolver import OutlineResolver
from .io.pdf_document import open_document
from .models.datatypes import STATUS_CONVERTING, Chapter, ConversionResult
from .provider_factory import ProviderFactory
from .session import DocumentSession
from .telemetry.logger import RunLogger
from .text.chapter_selection import format_chapter_selection, parse_chapter_selection

app = typer.Typer(
    name="chaptervoice",
    no_args_is_help=True,
    help="Convert PDF chapters into spoken audio.",
)


class ConversionProgressIndicator:
    """Render one progress line whenever a chapter's progress changes."""

    def __init__(self, positions: dict[str, int]) -> None:
        """Initialize with 1-based document positions keyed by chapter id."""

        self._positions = positions
        self._last_progress: dict[str, int] = {}

    def on_update(self, chapter: Chapter) -> None:
        """Print a progress line for a converting chapter."""

        if chapter.status != STATUS_CONVERTING:
            self._last_progress.pop(chapter.id, None)
            return
        if self._last_progress.get(chapter.id) == chapter.progress:
            return
        self._last_progress[chapter.id] = chapter.progress
        position = self._positions.get(chapter.id, 0)
        typer.echo(f"[progress] chapter={position} {chapter.progress}% {chapter.title}")


def _load_yaml_config(config_path: Path | None) -> ChapterVoiceConfig | None:
    """Load a YAML config file when requested and map failures to stage errors."""

    if config_path is None:
        return None

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc
    except OSError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Failed to load config file `{config_path}`: {exc}",
            hint="Verify YAML syntax and file permissions.",
        ) from exc


def _resolve_command_config(
    config_file: Path | None,
    input_pdf: Path | None,
    out: Path | None,
    chapters: str | None,
    chunk_size: int | None,
) -> tuple[ChapterVoiceConfig, Path]:
    """Resolve effective config with precedence CLI > env > YAML file > defaults."""

    loaded_config = _load_yaml_config(config_file)
    try:
        config = ConfigLoader.from_env(os.environ, base=loaded_config)
        overrides: dict[str, object] = {}
        if input_pdf is not None:
            overrides["input_pdf"] = input_pdf
        if out is not None:
            overrides["output_dir"] = out
        if normalize_optional_string(chapters) is not None:
            overrides["chapter_selection"] = chapters
        if chunk_size is not None:
            overrides["chunk_size_chars"] = chunk_size
        config = replace(config, **overrides)
        config.validate()
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=str(exc),
            hint="Check `CHAPTERVOICE_*` environment values and CLI options.",
        ) from exc

    if config.input_pdf is None:
        raise PipelineStageError(
            stage="config",
            detail="Input PDF path is required when `--config` does not provide `input_pdf`.",
            hint="Pass `<input.pdf>` or use `--config <path.yaml>` with `input_pdf`.",
        )
    return config, config.input_pdf


def _document_stage_error(exc: Exception, input_pdf: Path) -> PipelineStageError:
    """Map document-scoped failures to CLI stage diagnostics."""

    if isinstance(exc, NoOutlineError):
        return PipelineStageError(
            stage="outline",
            detail=str(exc),
            hint="Only PDFs with a bookmark outline can be split into chapters.",
        )
    return PipelineStageError(
        stage="load",
        detail=str(exc),
        hint=f"Verify that `{input_pdf}` is a readable, unencrypted PDF.",
    )


def _numbered_filename(position: int, width: int, filename: str) -> str:
    """Prefix the document position so repeated chapter titles get distinct files."""

    return f"{position:0{width}d}_{filename}"


def _select_chapter_ids(
    chapters: list[Chapter],
    selection: str | None,
) -> list[str]:
    """Resolve a 1-based selection expression to chapter ids."""

    try:
        positions = parse_chapter_selection(selection, len(chapters))
    except ValueError as exc:
        raise PipelineStageError(
            stage="chapter-selection",
            detail=str(exc),
            hint=(
                f"Valid chapter positions are 1-{len(chapters)}; "
                "run `chaptervoice chapters` to list them."
            ),
        ) from exc
    return [chapters[position - 1].id for position in positions]


@app.command("chapters")
def chapters_command(
    input_pdf: Annotated[Path, typer.Argument(help="Path to source PDF.")],
) -> None:
    """List chapters resolved from the PDF outline."""

    try:
        try:
            document = open_document(input_pdf)
        except DocumentLoadError as exc:
            raise _document_stage_error(exc, input_pdf) from exc
        try:
            chapters = OutlineResolver().resolve(document)
        except NoOutlineError as exc:
            raise _document_stage_error(exc, input_pdf) from exc
        finally:
            document.close()
    except Exception as exc:
        exit_with_command_error("chapters", exc)

    echo_chapter_list(chapters)


@app.command("convert")
def convert_command(
    input_pdf: Annotated[
        Path | None,
        typer.Argument(
            help="Path to source PDF. Required unless provided by `--config`.",
        ),
    ] = None,
    chapters: Annotated[
        str | None,
        typer.Option(
            "--chapters",
            help="1-based chapter selection: `5`, `1,3,7`, `2-4`, or mixed `1,3-5`.",
        ),
    ] = None,
    out: Annotated[
        Path | None,
        typer.Option("--out", help="Output directory (overrides config file value)."),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file with command defaults."),
    ] = None,
    chunk_size: Annotated[
        int | None,
        typer.Option("--chunk-size", help="Maximum characters per synthesis request."),
    ] = None,
    model: Annotated[
        str | None,
        typer.Option("--model", help="TTS model id override."),
    ] = None,
    voice: Annotated[
        str | None,
        typer.Option("--voice", help="TTS voice name override."),
    ] = None,
    api_key: Annotated[
        str | None,
        typer.Option(
            "--api-key",
            help="Gemini API key override. Prefer `GEMINI_API_KEY` to avoid shell history.",
        ),
    ] = None,
) -> None:
    """Convert selected chapters into one WAV file each."""

    try:
        config, source_pdf = _resolve_command_config(
            config_file=config_file,
            input_pdf=input_pdf,
            out=out,
            chapters=chapters,
            chunk_size=chunk_size,
        )
        runtime_cli_values = {
            key: value
            for key, value in (("tts_model", model), ("tts_voice", voice), ("api_key", api_key))
            if normalize_optional_string(value) is not None
        }
        runtime = config.resolved_synthesis_runtime(
            RuntimeConfigSources(cli=runtime_cli_values, env=os.environ)
        )
        if runtime.api_key is None:
            raise PipelineStageError(
                stage="config",
                detail="Gemini API key is missing.",
                hint="Set `GEMINI_API_KEY` (or `GOOGLE_API_KEY`) or pass `--api-key`.",
            )
        synthesizer = ProviderFactory.create_synthesizer(config, runtime)

        positions: dict[str, int] = {}
        progress = ConversionProgressIndicator(positions)
        try:
            session = DocumentSession.load(
                source_pdf,
                synthesizer,
                chunk_size_chars=config.chunk_size_chars,
                run_logger=RunLogger(),
                on_update=progress.on_update,
            )
        except (DocumentLoadError, NoOutlineError) as exc:
            raise _document_stage_error(exc, source_pdf) from exc

        try:
            positions.update(
                {chapter.id: position for position, chapter in enumerate(session.chapters, start=1)}
            )
            selected_ids = _select_chapter_ids(session.chapters, config.chapter_selection)
            typer.echo(
                f"Chapter scope: {format_chapter_selection(positions[i] for i in selected_ids)}"
            )
            output_dir = config.output_dir
            output_dir.mkdir(parents=True, exist_ok=True)
            position_width = max(2, len(str(len(positions))))

            def _write_chapter(chapter: Chapter, result: ConversionResult) -> None:
                written_path: Path | None = None
                if result.error is None:
                    filename, wav_bytes = session.export_wav(chapter.id)
                    written_path = output_dir / _numbered_filename(
                        positions[chapter.id], position_width, filename
                    )
                    written_path.write_bytes(wav_bytes)
                echo_chapter_outcome(positions[chapter.id], chapter, written_path)

            report = session.convert_selected(selected_ids, on_chapter_done=_write_chapter)
        finally:
            session.discard()
    except Exception as exc:
        exit_with_command_error("convert", exc)

    echo_conversion_summary(report, output_dir)
    if report.failed:
        raise typer.Exit(code=1)


def main() -> None:
    """Run the Typer application."""

    app()


if __name__ == "__main__":
    main()
