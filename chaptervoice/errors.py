"""Domain exceptions for chapter conversion and CLI diagnostics.

Document-scoped errors (`DocumentLoadError`, `NoOutlineError`) propagate to the
caller and end the session. Chapter-scoped errors (`ExtractionError`,
`SynthesisError`, `DecodeError`) are recorded on the affected chapter only.
"""

from __future__ import annotations


class ChapterVoiceError(RuntimeError):
    """Base class for chaptervoice domain errors."""


class DocumentLoadError(ChapterVoiceError):
    """Raised when the source document cannot be opened or parsed."""


class NoOutlineError(ChapterVoiceError):
    """Raised when a document has no usable outline to derive chapters from."""


class ExtractionError(ChapterVoiceError):
    """Raised when text extraction fails for a chapter page range."""


class SynthesisError(ChapterVoiceError):
    """Raised when a synthesis request returns no audio payload."""


class DecodeError(ChapterVoiceError):
    """Raised when a raw audio payload is malformed or truncated."""


class BulkConversionInProgressError(ChapterVoiceError):
    """Raised when a bulk conversion is started while another one is running."""


class PipelineStageError(RuntimeError):
    """Raised when a specific command stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped pipeline error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint
