"""Per-chapter conversion state machine.

Responsibilities:
- Drive one chapter through extraction, chunking, synthesis, decoding, and merge.
- Own the `pending|error -> converting -> ready|error` transitions of a chapter.
- Record chapter-scoped failures on the chapter instead of raising them.

Notes:
- Chunks are synthesized strictly in order; chunk `i` completes before `i + 1` starts.
- Audio is exposed on the chapter only after every chunk succeeded.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from loguru import logger

from ..audio.decoder import AudioDecoder
from ..audio.merger import AudioConcatenator
from ..errors import DecodeError, ExtractionError, SynthesisError
from ..models.datatypes import (
    STATUS_CONVERTING,
    STATUS_ERROR,
    STATUS_READY,
    AudioBuffer,
    Chapter,
    ConversionResult,
)
from ..telemetry.logger import RunLogger
from ..text.chunking import Chunker
from ..tts.synthesizer import SpeechSynthesizer

ChapterUpdateCallback = Callable[[Chapter], None]


class ChapterTextSource(Protocol):
    """Protocol for page-range text extraction."""

    def extract(self, page_number: int, end_page_number: int) -> str:
        """Return plain text for an inclusive 1-based page range."""


class ChapterConversionOrchestrator:
    """Convert single chapters into decoded audio buffers."""

    def __init__(
        self,
        text_source: ChapterTextSource,
        synthesizer: SpeechSynthesizer,
        chunker: Chunker | None = None,
        decoder: AudioDecoder | None = None,
        concatenator: AudioConcatenator | None = None,
        sample_rate: int = 24000,
        channels: int = 1,
        run_logger: RunLogger | None = None,
        on_update: ChapterUpdateCallback | None = None,
    ) -> None:
        """Initialize collaborators and the PCM format produced by the synthesizer."""

        self.text_source = text_source
        self.synthesizer = synthesizer
        self.chunker = chunker or Chunker()
        self.decoder = decoder or AudioDecoder()
        self.concatenator = concatenator or AudioConcatenator(default_sample_rate=sample_rate)
        self.sample_rate = sample_rate
        self.channels = channels
        self._run_logger = run_logger
        self._on_update = on_update

    def convert(self, chapter: Chapter) -> ConversionResult:
        """Convert `chapter` and return the outcome of this attempt.

        Raises:
            ValueError: If the chapter is already `converting` or `ready`.
        """

        if chapter.status in (STATUS_CONVERTING, STATUS_READY):
            raise ValueError(
                f"Chapter `{chapter.id}` cannot be converted while `{chapter.status}`."
            )
        self._begin(chapter)

        try:
            text = self.text_source.extract(chapter.page_number, chapter.end_page_number)
        except ExtractionError as exc:
            return self._fail(chapter, exc)
        except Exception as exc:
            return self._fail_unexpected(chapter, exc)

        if not text.strip():
            placeholder = AudioBuffer.silence(1, self.sample_rate, self.channels)
            return self._complete(chapter, placeholder, duration=0.0, chunk_count=0)

        chunks = self.chunker.chunk(text)
        total = len(chunks)
        decoded: list[AudioBuffer] = []
        try:
            for completed, chunk in enumerate(chunks, start=1):
                pcm = self.synthesizer.synthesize(chunk)
                if not pcm:
                    raise SynthesisError("No audio data received from API for chunk.")
                decoded.append(
                    self.decoder.decode(pcm, sample_rate=self.sample_rate, channels=self.channels)
                )
                self._advance(chapter, completed, total)
            merged = self.concatenator.concatenate(decoded)
        except (SynthesisError, DecodeError) as exc:
            decoded.clear()
            return self._fail(chapter, exc)
        except Exception as exc:
            decoded.clear()
            return self._fail_unexpected(chapter, exc)

        return self._complete(chapter, merged, duration=merged.duration_seconds, chunk_count=total)

    @staticmethod
    def progress_percent(completed: int, total: int) -> int:
        """Return `completed / total` as a whole percent, rounding halves up.

        `total` is the chunk count of a non-blank chapter and is always positive.
        """

        return (200 * completed + total) // (2 * total)

    def _begin(self, chapter: Chapter) -> None:
        chapter.status = STATUS_CONVERTING
        chapter.progress = 0
        chapter.error = None
        chapter.audio_buffer = None
        chapter.duration = None
        if self._run_logger is not None:
            self._run_logger.log_chapter_start(chapter.id, chapter.title)
        self._notify(chapter)

    def _advance(self, chapter: Chapter, completed: int, total: int) -> None:
        chapter.progress = self.progress_percent(completed, total)
        if self._run_logger is not None:
            self._run_logger.log_chapter_progress(chapter.id, completed, total, chapter.progress)
        self._notify(chapter)

    def _complete(
        self,
        chapter: Chapter,
        buffer: AudioBuffer,
        *,
        duration: float,
        chunk_count: int,
    ) -> ConversionResult:
        chapter.audio_buffer = buffer
        chapter.duration = duration
        chapter.progress = 100
        chapter.status = STATUS_READY
        if self._run_logger is not None:
            self._run_logger.log_chapter_ready(chapter.id, duration)
        self._notify(chapter)
        return ConversionResult(
            chapter_id=chapter.id,
            status=STATUS_READY,
            chunk_count=chunk_count,
        )

    def _fail(self, chapter: Chapter, exc: Exception) -> ConversionResult:
        """Move `chapter` to `error` with the failure message and no audio."""

        message = str(exc) or exc.__class__.__name__
        chapter.audio_buffer = None
        chapter.duration = None
        chapter.error = message
        chapter.status = STATUS_ERROR
        if self._run_logger is not None:
            self._run_logger.log_chapter_failure(chapter.id, exc.__class__.__name__)
        self._notify(chapter)
        return ConversionResult(chapter_id=chapter.id, status=STATUS_ERROR, error=message)

    def _fail_unexpected(self, chapter: Chapter, exc: Exception) -> ConversionResult:
        logger.opt(exception=exc).error(
            "Unexpected failure while converting chapter {}", chapter.id
        )
        return self._fail(chapter, exc)

    def _notify(self, chapter: Chapter) -> None:
        if self._on_update is not None:
            self._on_update(chapter)
