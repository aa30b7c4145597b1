"""Document session facade.

Responsibilities:
- Open one document and resolve its chapters.
- Own the chapter record keyed by chapter id for the session lifetime.
- Expose single and bulk conversion, WAV export, and discard operations.

Key types:
- `DocumentSession`: the entry point used by the CLI and by embedding callers.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from loguru import logger

from .audio.decoder import AudioDecoder
from .audio.merger import AudioConcatenator
from .audio.wav import WavEncoder
from .io.outline_resolver import OutlineResolver
from .io.page_text import PageRangeTextExtractor
from .io.pdf_document import DocumentHandle, open_document
from .models.datatypes import (
    STATUS_ERROR,
    STATUS_PENDING,
    STATUS_READY,
    BulkConversionReport,
    Chapter,
    ConversionResult,
)
from .pipeline.orchestrator import ChapterConversionOrchestrator, ChapterUpdateCallback
from .pipeline.scheduler import BulkConversionScheduler, ChapterDoneCallback
from .playback import PlaybackController
from .telemetry.logger import RunLogger
from .text.chunking import Chunker
from .text.slug import suggested_wav_filename
from .tts.synthesizer import SpeechSynthesizer


class DocumentSession:
    """Chapters of one loaded document and the operations available on them."""

    def __init__(
        self,
        document: DocumentHandle,
        chapters: list[Chapter],
        synthesizer: SpeechSynthesizer,
        *,
        chunk_size_chars: int = Chunker.DEFAULT_LIMIT,
        run_logger: RunLogger | None = None,
        on_update: ChapterUpdateCallback | None = None,
        playback: PlaybackController | None = None,
    ) -> None:
        """Wire the conversion pipeline around already resolved chapters.

        Synthesized PCM is decoded with the format the synthesizer declares.
        """

        self.document = document
        self._chapters: dict[str, Chapter] = {chapter.id: chapter for chapter in chapters}
        self.orchestrator = ChapterConversionOrchestrator(
            text_source=PageRangeTextExtractor(document),
            synthesizer=synthesizer,
            chunker=Chunker(limit=chunk_size_chars),
            decoder=AudioDecoder(),
            concatenator=AudioConcatenator(default_sample_rate=synthesizer.sample_rate),
            sample_rate=synthesizer.sample_rate,
            channels=synthesizer.channels,
            run_logger=run_logger,
            on_update=on_update,
        )
        self.scheduler = BulkConversionScheduler(
            self.orchestrator,
            self._chapters,
            run_logger=run_logger,
        )
        self.playback = playback
        self._wav_encoder = WavEncoder()

    @classmethod
    def load(
        cls,
        source: bytes | Path,
        synthesizer: SpeechSynthesizer,
        *,
        chunk_size_chars: int = Chunker.DEFAULT_LIMIT,
        run_logger: RunLogger | None = None,
        on_update: ChapterUpdateCallback | None = None,
        playback: PlaybackController | None = None,
    ) -> DocumentSession:
        """Open a PDF and resolve its outline into chapters.

        Raises:
            DocumentLoadError: If the document cannot be parsed.
            NoOutlineError: If no usable chapter can be derived from the outline.
        """

        document = open_document(source)
        try:
            chapters = OutlineResolver().resolve(document)
        except Exception:
            document.close()
            raise
        logger.debug("Resolved {} chapter(s) from outline", len(chapters))
        return cls(
            document,
            chapters,
            synthesizer,
            chunk_size_chars=chunk_size_chars,
            run_logger=run_logger,
            on_update=on_update,
            playback=playback,
        )

    @property
    def chapters(self) -> list[Chapter]:
        """Return chapters in document order."""

        return list(self._chapters.values())

    def get(self, chapter_id: str) -> Chapter:
        """Return the chapter with `chapter_id`.

        Raises:
            KeyError: If no such chapter exists in this session.
        """

        try:
            return self._chapters[chapter_id]
        except KeyError:
            raise KeyError(f"Unknown chapter id `{chapter_id}`.") from None

    def selectable_chapters(self) -> list[Chapter]:
        """Return chapters eligible for bulk selection (`pending` or `error`)."""

        return [
            chapter
            for chapter in self._chapters.values()
            if chapter.status in (STATUS_PENDING, STATUS_ERROR)
        ]

    def convert(self, chapter_id: str) -> ConversionResult:
        """Convert one chapter."""

        return self.orchestrator.convert(self.get(chapter_id))

    def retry(self, chapter_id: str) -> ConversionResult:
        """Re-run a failed conversion from extraction onwards."""

        chapter = self.get(chapter_id)
        if chapter.status != STATUS_ERROR:
            raise ValueError(
                f"Chapter `{chapter_id}` is `{chapter.status}`; only failed chapters can be retried."
            )
        return self.orchestrator.convert(chapter)

    def convert_selected(
        self,
        chapter_ids: Iterable[str],
        on_chapter_done: ChapterDoneCallback | None = None,
    ) -> BulkConversionReport:
        """Convert the selected chapters sequentially in document order."""

        return self.scheduler.run(chapter_ids, on_chapter_done=on_chapter_done)

    def export_wav(self, chapter_id: str) -> tuple[str, bytes]:
        """Return the suggested filename and WAV bytes for a `ready` chapter."""

        chapter = self.get(chapter_id)
        if chapter.status != STATUS_READY or chapter.audio_buffer is None:
            raise ValueError(f"Chapter `{chapter_id}` has no converted audio to export.")
        return suggested_wav_filename(chapter.title), self._wav_encoder.encode(chapter.audio_buffer)

    def discard(self) -> None:
        """Stop playback and drop every chapter together with its audio."""

        if self.playback is not None:
            self.playback.stop()
        self._chapters.clear()
        self.document.close()
