"""Exclusive chapter playback control.

Responsibilities:
- Keep at most one chapter playing at a time.
- Toggle playback off when the playing chapter is played again.
- Clear the current handle when a sink reports its natural end.

Audio output itself is delegated to a `PlaybackSink` implementation.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from loguru import logger

from .models.datatypes import AudioBuffer, Chapter


class PlaybackHandle(Protocol):
    """Protocol for one started playback."""

    def stop(self) -> None:
        """Stop this playback."""


class PlaybackSink(Protocol):
    """Protocol for audio outputs that can play decoded buffers."""

    def start(self, buffer: AudioBuffer, on_ended: Callable[[], None]) -> PlaybackHandle:
        """Start playing `buffer` and call `on_ended` when it finishes by itself."""


@dataclass(slots=True)
class _ActivePlayback:
    chapter_id: str
    handle: PlaybackHandle


class PlaybackController:
    """Single "currently playing" slot on top of a playback sink."""

    def __init__(self, sink: PlaybackSink) -> None:
        self.sink = sink
        self._active: _ActivePlayback | None = None

    @property
    def currently_playing_id(self) -> str | None:
        return self._active.chapter_id if self._active is not None else None

    def play(self, chapter: Chapter) -> bool:
        """Play `chapter`, or stop it when it is already playing.

        Returns:
            `True` when playback started, `False` when it was toggled off.

        Raises:
            ValueError: If the chapter has no converted audio.
        """

        if self._active is not None and self._active.chapter_id == chapter.id:
            self.stop()
            return False
        if chapter.audio_buffer is None:
            raise ValueError(f"Chapter `{chapter.id}` has no audio to play.")

        self.stop()
        active = _ActivePlayback(chapter_id=chapter.id, handle=_PendingHandle())
        self._active = active
        active.handle = self.sink.start(chapter.audio_buffer, lambda: self._on_ended(active))
        logger.debug("Started playback for chapter {}", chapter.id)
        return True

    def stop(self) -> None:
        """Stop the current playback, if any."""

        active = self._active
        self._active = None
        if active is not None:
            active.handle.stop()
            logger.debug("Stopped playback for chapter {}", active.chapter_id)

    def _on_ended(self, active: _ActivePlayback) -> None:
        if self._active is active:
            self._active = None


class _PendingHandle:
    """Placeholder used until the sink returns the real handle."""

    def stop(self) -> None:
        return None
