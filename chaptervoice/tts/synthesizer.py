"""Speech synthesizer interfaces and the Gemini-backed implementation.

Responsibilities:
- Define the chunk-level synthesis contract consumed by the orchestrator.
- Provide a Gemini-backed synthesizer returning 24 kHz mono 16-bit PCM.
"""

from __future__ import annotations

from typing import Protocol

from .gemini_client import GeminiSpeechClient

DEFAULT_PROMPT_TEMPLATE = 'Read this text aloud with a natural intonation: "{text}"'


class SpeechSynthesizer(Protocol):
    """Protocol for synthesis backends.

    Attributes:
        sample_rate: Sample rate of the returned PCM in Hz.
        channels: Interleaved channel count of the returned PCM.
    """

    sample_rate: int
    channels: int

    def synthesize(self, text: str) -> bytes:
        """Return raw signed 16-bit little-endian PCM in the declared format for `text`.

        Raises:
            SynthesisError: If no audio payload is returned.
        """


class GeminiSpeechSynthesizer:
    """Gemini-backed synthesizer for chunk-level speech generation."""

    sample_rate = 24000
    channels = 1

    def __init__(
        self,
        client: GeminiSpeechClient,
        model: str = "gemini-2.5-flash-preview-tts",
        voice: str = "Kore",
        prompt_template: str = DEFAULT_PROMPT_TEMPLATE,
    ) -> None:
        """Initialize synthesizer settings and the underlying HTTP client."""

        if "{text}" not in prompt_template:
            raise ValueError("`prompt_template` must contain a `{text}` placeholder.")
        self.client = client
        self.model = model
        self.voice = voice
        self.prompt_template = prompt_template

    def synthesize(self, text: str) -> bytes:
        """Synthesize one chunk and return its raw PCM payload."""

        return self.client.generate_speech(
            model=self.model,
            voice=self.voice,
            prompt=self.prompt_template.replace("{text}", text),
        )

    @property
    def retry_attempt_count(self) -> int:
        """Return retry attempt count performed by the underlying client."""

        return self.client.retry_attempt_count
