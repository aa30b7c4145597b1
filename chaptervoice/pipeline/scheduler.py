"""Sequential bulk conversion of selected chapters.

Responsibilities:
- Convert selected chapters one at a time in document order.
- Skip chapters that are already `ready` or `converting`.
- Keep going after a chapter failure and report every outcome.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping

from loguru import logger

from ..errors import BulkConversionInProgressError
from ..models.datatypes import (
    STATUS_CONVERTING,
    STATUS_READY,
    BulkConversionReport,
    Chapter,
    ConversionResult,
)
from ..telemetry.logger import RunLogger
from .orchestrator import ChapterConversionOrchestrator

ChapterDoneCallback = Callable[[Chapter, ConversionResult], None]


class BulkConversionScheduler:
    """Run the orchestrator over a chapter selection without parallelism."""

    def __init__(
        self,
        orchestrator: ChapterConversionOrchestrator,
        chapters: Mapping[str, Chapter],
        run_logger: RunLogger | None = None,
    ) -> None:
        """Bind the orchestrator and the session's chapter record keyed by id."""

        self.orchestrator = orchestrator
        self._chapters = chapters
        self._run_logger = run_logger
        self._in_progress = False

    @property
    def in_progress(self) -> bool:
        """Return whether a bulk run is currently executing."""

        return self._in_progress

    def run(
        self,
        chapter_ids: Iterable[str],
        on_chapter_done: ChapterDoneCallback | None = None,
    ) -> BulkConversionReport:
        """Convert the selected chapters ordered by start page.

        Raises:
            BulkConversionInProgressError: If another bulk run is in progress.
        """

        if self._in_progress:
            raise BulkConversionInProgressError("A bulk conversion is already in progress.")

        self._in_progress = True
        try:
            selected = self._select(chapter_ids)
            if self._run_logger is not None:
                self._run_logger.log_bulk_start(len(selected))

            converted: list[str] = []
            failed: list[str] = []
            skipped: list[str] = []
            for chapter in selected:
                if chapter.status in (STATUS_READY, STATUS_CONVERTING):
                    skipped.append(chapter.id)
                    if self._run_logger is not None:
                        self._run_logger.log_chapter_skipped(chapter.id, chapter.status)
                    continue

                result = self.orchestrator.convert(chapter)
                if result.status == STATUS_READY:
                    converted.append(chapter.id)
                else:
                    failed.append(chapter.id)
                if on_chapter_done is not None:
                    on_chapter_done(chapter, result)

            if self._run_logger is not None:
                self._run_logger.log_bulk_complete(len(converted), len(failed), len(skipped))
            return BulkConversionReport(
                converted=tuple(converted),
                failed=tuple(failed),
                skipped=tuple(skipped),
            )
        finally:
            self._in_progress = False

    def _select(self, chapter_ids: Iterable[str]) -> list[Chapter]:
        """Resolve ids to chapters, dropping unknown ids, sorted by start page."""

        selected: list[Chapter] = []
        seen: set[str] = set()
        for chapter_id in chapter_ids:
            if chapter_id in seen:
                continue
            seen.add(chapter_id)
            chapter = self._chapters.get(chapter_id)
            if chapter is None:
                logger.warning("Ignoring unknown chapter id {} in bulk selection", chapter_id)
                continue
            selected.append(chapter)
        return sorted(selected, key=lambda chapter: chapter.page_number)
