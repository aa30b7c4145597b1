"""Integration-test fixtures for deterministic provider behavior."""

from __future__ import annotations

import os
import struct

import pytest

from chaptervoice.tts.gemini_client import GeminiSpeechClient

MOCK_FRAMES_PER_CHUNK = 2400


@pytest.fixture
def synthesized_prompts() -> list[str]:
    """Collect prompts sent to the mocked Gemini client."""

    return []


@pytest.fixture(autouse=True)
def _mock_gemini_speech_calls(
    monkeypatch: pytest.MonkeyPatch, synthesized_prompts: list[str]
) -> None:
    """Mock Gemini speech calls in integration tests to avoid network/key requirements."""

    def _mock_generate_speech(self, **kwargs: object) -> bytes:
        """Return deterministic 0.1 s of 24 kHz mono PCM per chunk."""

        _ = self
        synthesized_prompts.append(str(kwargs["prompt"]))
        return struct.pack(f"<{MOCK_FRAMES_PER_CHUNK}h", *([0] * MOCK_FRAMES_PER_CHUNK))

    monkeypatch.setattr(GeminiSpeechClient, "generate_speech", _mock_generate_speech)


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Provide a Gemini key and drop ambient `CHAPTERVOICE_*` overrides."""

    for key in list(os.environ):
        if key.startswith("CHAPTERVOICE_") or key == "GOOGLE_API_KEY":
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("GEMINI_API_KEY", "integration-key")
