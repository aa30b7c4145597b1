"""Structured conversion logging utilities.

Responsibilities:
- Emit concise, deterministic chapter- and bulk-level runtime logs via `loguru`.
- Keep log lines free of chapter text, audio payloads, and credentials.
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


class RunLogger:
    """Emit deterministic conversion events for CLI-observable activity."""

    def __init__(self, sink: TextIO | None = None, level: str = "INFO") -> None:
        """Route `chaptervoice` logs to `sink` with a bare message format."""

        self._sink = sink or sys.stdout
        logger.remove()
        logger.add(self._sink, format="{message}", level=level, colorize=False)
        logger.enable("chaptervoice")

    def _emit(self, level: str, scope: str, event: str, **context: object) -> None:
        """Emit one structured runtime log line."""

        logger.log(level, f"[{scope}] level={level} event={event}{_format_context(context)}")

    def log_chapter_start(self, chapter_id: str, title: str) -> None:
        self._emit("INFO", "chapter", "start", chapter=chapter_id, title=title)

    def log_chapter_progress(self, chapter_id: str, completed: int, total: int, progress: int) -> None:
        self._emit(
            "DEBUG",
            "chapter",
            "progress",
            chapter=chapter_id,
            chunk=f"{completed}/{total}",
            progress=progress,
        )

    def log_chapter_ready(self, chapter_id: str, duration_seconds: float) -> None:
        self._emit("INFO", "chapter", "ready", chapter=chapter_id, duration=f"{duration_seconds:.2f}")

    def log_chapter_failure(self, chapter_id: str, error_type: str) -> None:
        """Emit a chapter-failure event without the error message payload."""

        self._emit("ERROR", "chapter", "failure", chapter=chapter_id, error_type=error_type)

    def log_chapter_skipped(self, chapter_id: str, status: str) -> None:
        self._emit("INFO", "chapter", "skipped", chapter=chapter_id, status=status)

    def log_bulk_start(self, chapter_count: int) -> None:
        self._emit("INFO", "bulk", "start", chapters=chapter_count)

    def log_bulk_complete(self, converted: int, failed: int, skipped: int) -> None:
        self._emit(
            "INFO",
            "bulk",
            "complete",
            converted=converted,
            failed=failed,
            skipped=skipped,
        )
