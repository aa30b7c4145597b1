"""Tests for deterministic structured run logging."""

import io

from chaptervoice.telemetry.logger import RunLogger


def test_run_logger_formats_sorted_sanitized_context() -> None:
    sink = io.StringIO()
    run_logger = RunLogger(sink=sink)

    run_logger.log_chapter_start("abc123", "Part I: The Start")
    run_logger.log_chapter_ready("abc123", 12.3456)
    run_logger.log_bulk_complete(converted=2, failed=1, skipped=0)

    assert sink.getvalue().splitlines() == [
        "[chapter] level=INFO event=start chapter=abc123 title=Part_I:_The_Start",
        "[chapter] level=INFO event=ready chapter=abc123 duration=12.35",
        "[bulk] level=INFO event=complete converted=2 failed=1 skipped=0",
    ]


def test_run_logger_hides_debug_progress_by_default() -> None:
    sink = io.StringIO()
    RunLogger(sink=sink).log_chapter_progress("abc", 1, 4, 25)
    assert sink.getvalue() == ""

    verbose_sink = io.StringIO()
    RunLogger(sink=verbose_sink, level="DEBUG").log_chapter_progress("abc", 1, 4, 25)
    assert verbose_sink.getvalue().strip() == (
        "[chapter] level=DEBUG event=progress chapter=abc chunk=1/4 progress=25"
    )
