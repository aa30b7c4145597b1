"""Text-to-speech provider abstractions.

This package contains the synthesizer contract, the Gemini HTTP client, and
request pacing used by the chapter conversion pipeline.
"""

from .gemini_client import GeminiSpeechClient, SynthesisProviderError
from .rate_limiter import RateLimiter
from .synthesizer import GeminiSpeechSynthesizer, SpeechSynthesizer

__all__ = [
    "GeminiSpeechClient",
    "GeminiSpeechSynthesizer",
    "RateLimiter",
    "SpeechSynthesizer",
    "SynthesisProviderError",
]
