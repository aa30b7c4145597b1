"""Provider factory helpers for the synthesis stage.

Responsibilities:
- Resolve provider identifiers to concrete synthesizer implementations.
- Keep session wiring independent from concrete provider class construction.

Notes:
- Only `gemini` is implemented at the moment.
"""

from __future__ import annotations

from .config import ChapterVoiceConfig, SynthesisRuntimeConfig
from .tts.gemini_client import GeminiSpeechClient
from .tts.rate_limiter import RateLimiter
from .tts.synthesizer import GeminiSpeechSynthesizer, SpeechSynthesizer


class ProviderFactory:
    """Factory for provider-backed synthesizers used by conversion sessions."""

    @staticmethod
    def create_synthesizer(
        config: ChapterVoiceConfig,
        runtime: SynthesisRuntimeConfig,
    ) -> SpeechSynthesizer:
        """Create a synthesizer for the resolved provider identifier."""

        if runtime.provider == "gemini":
            client = GeminiSpeechClient(
                api_key=runtime.api_key,
                timeout_seconds=config.request_timeout_seconds,
                max_retries=config.max_retries,
                rate_limiter=RateLimiter(
                    min_interval_seconds=config.min_request_interval_seconds
                ),
            )
            return GeminiSpeechSynthesizer(
                client=client,
                model=runtime.model,
                voice=runtime.voice,
                prompt_template=config.tts_prompt_template,
            )
        raise ValueError(f"Unsupported TTS provider `{runtime.provider}`.")
