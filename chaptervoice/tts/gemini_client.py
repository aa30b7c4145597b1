"""Gemini HTTP client for speech generation.

Responsibilities:
- Send `generateContent` requests with audio response modality to the Gemini REST API.
- Retry transient failures with bounded exponential backoff.
- Raise classified provider exceptions with redacted, length-capped messages.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
import socket
import time
from typing import Any

from loguru import logger
import requests

from ..errors import SynthesisError
from .rate_limiter import RateLimiter, RequestGate


class SynthesisProviderError(SynthesisError):
    """Raised when a synthesis provider request fails or returns malformed output."""

    def __init__(
        self,
        message: str,
        *,
        failure_kind: str = "unknown",
        status_code: int | None = None,
        provider_code: str | None = None,
    ) -> None:
        """Initialize provider error metadata for diagnostics and retry decisions."""

        super().__init__(message)
        self.failure_kind = failure_kind
        self.status_code = status_code
        self.provider_code = provider_code


class GeminiSpeechClient:
    """Minimal requests-based Gemini client returning raw PCM speech audio."""

    _MAX_PROVIDER_MESSAGE_CHARS = 180
    _RETRYABLE_FAILURE_KINDS = frozenset({"timeout", "transport", "rate_limited", "server_error"})

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout_seconds: float = 120.0,
        max_retries: int = 2,
        retry_backoff_base_seconds: float = 1.0,
        retry_backoff_max_seconds: float = 8.0,
        rate_limiter: RequestGate | None = None,
    ) -> None:
        """Initialize Gemini HTTP client settings."""

        self.api_key = api_key.strip() if isinstance(api_key, str) else ""
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.max_retries = max(0, max_retries)
        self.retry_backoff_base_seconds = retry_backoff_base_seconds
        self.retry_backoff_max_seconds = retry_backoff_max_seconds
        self.rate_limiter = rate_limiter if rate_limiter is not None else RateLimiter()
        self.retry_attempt_count = 0

    def generate_speech(
        self,
        *,
        model: str,
        voice: str,
        prompt: str,
    ) -> bytes:
        """Return decoded audio bytes from the first inline audio part of a response."""

        if not self.api_key:
            raise SynthesisProviderError(
                "Missing Gemini API key. Set `GEMINI_API_KEY` or pass `--api-key`.",
                failure_kind="invalid_api_key",
            )

        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseModalities": ["AUDIO"],
                "speechConfig": {
                    "voiceConfig": {"prebuiltVoiceConfig": {"voiceName": voice}},
                },
            },
        }
        raw_payload = self._post_with_retries(
            endpoint_path=f"/models/{model}:generateContent",
            payload=payload,
            rate_limit_key=f"gemini:tts:{model}",
        )
        return self._extract_inline_audio(raw_payload)

    def _post_with_retries(
        self,
        *,
        endpoint_path: str,
        payload: dict[str, Any],
        rate_limit_key: str,
    ) -> bytes:
        """POST a JSON payload, retrying transient failures within the retry budget."""

        attempt = 0
        while True:
            self.rate_limiter.acquire(rate_limit_key)
            try:
                return self._post_json_bytes(endpoint_path=endpoint_path, payload=payload)
            except SynthesisProviderError as exc:
                if exc.failure_kind not in self._RETRYABLE_FAILURE_KINDS:
                    raise
                if attempt >= self.max_retries:
                    raise
                delay = min(
                    self.retry_backoff_max_seconds,
                    self.retry_backoff_base_seconds * (2**attempt),
                )
                attempt += 1
                self.retry_attempt_count += 1
                logger.debug(
                    "Retrying Gemini request after {} failure ({}/{}) in {:.2f}s",
                    exc.failure_kind,
                    attempt,
                    self.max_retries,
                    delay,
                )
                time.sleep(delay)

    def _post_json_bytes(self, *, endpoint_path: str, payload: dict[str, Any]) -> bytes:
        """Execute one Gemini JSON POST request and map failures consistently."""

        endpoint = f"{self.base_url}{endpoint_path}"
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }
        try:
            response = requests.post(
                endpoint,
                headers=headers,
                json=payload,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            return bytes(response.content)
        except requests.HTTPError as exc:
            raise self._http_error_to_provider_error(exc) from exc
        except requests.RequestException as exc:
            failure_kind = self._classify_transport_failure(exc)
            if failure_kind == "timeout":
                detail = "Gemini request timed out."
            else:
                detail = f"Gemini request transport error: {self._short_message(str(exc))}"
            raise SynthesisProviderError(detail, failure_kind=failure_kind) from exc
        except TimeoutError as exc:
            raise SynthesisProviderError(
                "Gemini request timed out.",
                failure_kind="timeout",
            ) from exc

    @staticmethod
    def _extract_inline_audio(raw_payload: bytes) -> bytes:
        """Extract and base64-decode the first inline audio part of a response."""

        try:
            payload = json.loads(raw_payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise SynthesisProviderError("Gemini returned invalid JSON payload.") from exc

        candidates = payload.get("candidates") if isinstance(payload, dict) else None
        if not isinstance(candidates, list) or not candidates:
            raise SynthesisError("No audio data received from API for chunk.")
        content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        for part in parts if isinstance(parts, list) else []:
            inline_data = part.get("inlineData") if isinstance(part, dict) else None
            data = inline_data.get("data") if isinstance(inline_data, dict) else None
            if isinstance(data, str) and data:
                try:
                    return base64.b64decode(data, validate=True)
                except (binascii.Error, ValueError) as exc:
                    raise SynthesisProviderError(
                        "Gemini audio payload is not valid base64."
                    ) from exc
        raise SynthesisError("No audio data received from API for chunk.")

    @staticmethod
    def _decode_error_body(exc: requests.HTTPError) -> str:
        """Decode an HTTP error body into a best-effort UTF-8 payload string."""

        response = exc.response
        if response is None:
            return ""
        return bytes(response.content or b"").decode("utf-8", errors="replace").strip()

    @classmethod
    def _redact_sensitive_tokens(cls, text: str) -> str:
        """Redact API-key-like tokens from provider error content."""

        redacted = re.sub(r"\bAIza[0-9A-Za-z_-]{20,}", "[redacted-key]", text)
        redacted = re.sub(r"(?i)key=[A-Za-z0-9._-]{12,}", "key=[redacted-key]", redacted)
        return redacted

    @classmethod
    def _short_message(cls, text: str) -> str:
        """Normalize and cap user-facing provider message length."""

        compact = " ".join(text.split())
        if len(compact) <= cls._MAX_PROVIDER_MESSAGE_CHARS:
            return compact
        return f"{compact[: cls._MAX_PROVIDER_MESSAGE_CHARS - 1]}..."

    @classmethod
    def _extract_provider_message(cls, body: str) -> tuple[str, str | None]:
        """Extract a concise provider message and optional provider status code."""

        if not body:
            return "", None
        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            return cls._short_message(cls._redact_sensitive_tokens(body)), None

        provider_code: str | None = None
        message: str | None = None
        error_payload = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(error_payload, dict):
            status_value = error_payload.get("status")
            if isinstance(status_value, str) and status_value.strip():
                provider_code = status_value.strip()
            message_value = error_payload.get("message")
            if isinstance(message_value, str) and message_value.strip():
                message = message_value.strip()
        if message is None:
            message = body
        return cls._short_message(cls._redact_sensitive_tokens(message)), provider_code

    @staticmethod
    def _classify_http_failure(
        status_code: int,
        provider_message: str,
        provider_code: str | None,
    ) -> str:
        """Classify Gemini HTTP errors into diagnostic kinds."""

        message_lower = provider_message.lower()
        normalized_code = provider_code.upper() if provider_code is not None else ""

        if status_code in {401, 403} or "api key" in message_lower:
            return "invalid_api_key"
        if status_code == 429 or normalized_code == "RESOURCE_EXHAUSTED":
            if "quota" in message_lower and "per minute" not in message_lower:
                return "insufficient_quota"
            return "rate_limited"
        if status_code == 404 or (
            "model" in message_lower
            and any(phrase in message_lower for phrase in ("not found", "does not exist"))
        ):
            return "invalid_model"
        if status_code in {408, 504} or "timeout" in message_lower or "timed out" in message_lower:
            return "timeout"
        if status_code >= 500:
            return "server_error"
        return "http_error"

    @staticmethod
    def _classify_transport_failure(reason: object) -> str:
        """Classify network-layer failures into diagnostic kinds."""

        if isinstance(reason, (TimeoutError, socket.timeout, requests.Timeout)):
            return "timeout"
        return "transport"

    @classmethod
    def _http_error_to_provider_error(cls, exc: requests.HTTPError) -> SynthesisProviderError:
        """Convert HTTP errors into normalized provider exceptions with metadata."""

        status_code = exc.response.status_code if exc.response is not None else 0
        provider_message, provider_code = cls._extract_provider_message(
            cls._decode_error_body(exc)
        )
        failure_kind = cls._classify_http_failure(status_code, provider_message, provider_code)

        headline = {
            "invalid_api_key": "Gemini authentication failed",
            "insufficient_quota": "Gemini quota is insufficient for this request",
            "rate_limited": "Gemini rate limit exceeded",
            "invalid_model": "Gemini rejected the selected model",
            "timeout": "Gemini request timed out",
            "server_error": "Gemini service error",
        }.get(failure_kind, "Gemini request failed")

        if provider_message:
            detail = f"{headline} (HTTP {status_code}): {provider_message}"
        else:
            detail = f"{headline} (HTTP {status_code})."
        return SynthesisProviderError(
            detail,
            failure_kind=failure_kind,
            status_code=status_code,
            provider_code=provider_code,
        )
