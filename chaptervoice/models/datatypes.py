"""Core datatypes shared across chaptervoice modules.

Responsibilities:
- Represent chapter records and their conversion state.
- Represent decoded audio and the records exchanged with collaborators.

Key types:
- `Chapter`, `AudioBuffer`, `OutlineEntry`, `TextSpan`, `ConversionResult`,
  and `BulkConversionReport`.
"""

from __future__ import annotations

from array import array
from dataclasses import dataclass, field
from typing import Literal

ChapterStatus = Literal["pending", "converting", "ready", "error"]

STATUS_PENDING: ChapterStatus = "pending"
STATUS_CONVERTING: ChapterStatus = "converting"
STATUS_READY: ChapterStatus = "ready"
STATUS_ERROR: ChapterStatus = "error"


@dataclass(frozen=True, slots=True)
class AudioBuffer:
    """Decoded floating-point audio.

    Attributes:
        sample_rate: Frames per second.
        channels: Per-channel sample sequences with values in `[-1, 1]`.
    """

    sample_rate: int
    channels: tuple[array, ...]

    def __post_init__(self) -> None:
        if self.sample_rate <= 0:
            raise ValueError("`sample_rate` must be a positive integer.")
        if not self.channels:
            raise ValueError("Audio buffer requires at least one channel.")
        frame_count = len(self.channels[0])
        if any(len(channel) != frame_count for channel in self.channels[1:]):
            raise ValueError("All audio channels must have the same frame count.")

    @property
    def channel_count(self) -> int:
        return len(self.channels)

    @property
    def frame_count(self) -> int:
        return len(self.channels[0])

    @property
    def duration_seconds(self) -> float:
        return self.frame_count / float(self.sample_rate)

    @classmethod
    def silence(cls, frame_count: int, sample_rate: int, channel_count: int = 1) -> AudioBuffer:
        """Return a zero-filled buffer with the requested shape."""

        return cls(
            sample_rate=sample_rate,
            channels=tuple(array("d", [0.0]) * frame_count for _ in range(channel_count)),
        )


@dataclass(slots=True)
class Chapter:
    """One convertible chapter resolved from the document outline.

    Attributes:
        id: Opaque identifier, stable for the document session.
        title: Display title from the outline.
        page_number: Inclusive 1-based start page.
        end_page_number: Inclusive 1-based end page.
        status: Conversion state (`pending`, `converting`, `ready`, `error`).
        progress: Percent of chunks synthesized in the current attempt.
        audio_buffer: Converted audio, set only while `ready`.
        error: Failure message, set only while `error`.
        duration: Audio duration in seconds, set only while `ready`.
    """

    id: str
    title: str
    page_number: int
    end_page_number: int
    status: ChapterStatus = STATUS_PENDING
    progress: int = 0
    audio_buffer: AudioBuffer | None = None
    error: str | None = None
    duration: float | None = None


@dataclass(slots=True)
class OutlineEntry:
    """One node of a document outline tree."""

    title: str
    destination: object
    children: list[OutlineEntry] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class TextSpan:
    """A positioned text token from one page.

    Attributes:
        text: Token text.
        y: Vertical position measured from the bottom of the page.
        page_height: Height of the page the token belongs to.
    """

    text: str
    y: float
    page_height: float


@dataclass(frozen=True, slots=True)
class ConversionResult:
    """Outcome of one chapter conversion attempt."""

    chapter_id: str
    status: ChapterStatus
    error: str | None = None
    chunk_count: int = 0


@dataclass(frozen=True, slots=True)
class BulkConversionReport:
    """Per-outcome chapter ids of one bulk conversion run, in processing order."""

    converted: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()
