"""Configuration model and loaders for chaptervoice.

Responsibilities:
- Define runtime configuration as a typed dataclass.
- Resolve synthesis provider settings with deterministic source precedence.
- Provide loader entry points for YAML- and environment-based configuration.

Key types:
- `ChapterVoiceConfig`: normalized settings for one conversion session.
- `SynthesisRuntimeConfig`: resolved provider/model/voice/key values.
- `RuntimeConfigSources`: optional value sources for precedence resolution.
- `ConfigLoader`: static construction helpers for `ChapterVoiceConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .tts.synthesizer import DEFAULT_PROMPT_TEMPLATE

_DEFAULT_TTS_MODEL = "gemini-2.5-flash-preview-tts"
_DEFAULT_TTS_VOICE = "Kore"
_SUPPORTED_PROVIDER_IDS = frozenset({"gemini"})
_API_KEY_ENV_KEYS = ("GEMINI_API_KEY", "GOOGLE_API_KEY")


def normalize_optional_string(value: object) -> str | None:
    """Return a stripped string, or `None` when the value is missing or blank."""

    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True, slots=True)
class RuntimeConfigSources:
    """Source mappings used for runtime value precedence.

    Attributes:
        cli: Values explicitly provided by CLI arguments.
        env: Values loaded from environment variables.
    """

    cli: Mapping[str, str] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class SynthesisRuntimeConfig:
    """Resolved synthesis provider settings for one session."""

    provider: str
    model: str
    voice: str
    api_key: str | None = None


@dataclass(slots=True)
class ChapterVoiceConfig:
    """Runtime configuration for one conversion session.

    Attributes:
        input_pdf: Optional path to the source PDF.
        output_dir: Directory receiving exported chapter WAV files.
        chunk_size_chars: Maximum characters per synthesis request.
        provider_tts: Synthesis provider identifier.
        tts_model: Synthesis model identifier.
        tts_voice: Prebuilt voice name.
        tts_prompt_template: Reading prompt wrapped around each chunk (`{text}` placeholder).
        api_key: Optional provider API key.
        request_timeout_seconds: Per-request HTTP timeout.
        max_retries: Retry budget for transient provider failures.
        min_request_interval_seconds: Minimum spacing between provider requests.
        chapter_selection: Optional 1-based chapter selection expression.
    """

    input_pdf: Path | None = None
    output_dir: Path = Path("out")
    chunk_size_chars: int = 4000
    provider_tts: str = "gemini"
    tts_model: str = _DEFAULT_TTS_MODEL
    tts_voice: str = _DEFAULT_TTS_VOICE
    tts_prompt_template: str = DEFAULT_PROMPT_TEMPLATE
    api_key: str | None = None
    request_timeout_seconds: float = 120.0
    max_retries: int = 2
    min_request_interval_seconds: float = 0.0
    chapter_selection: str | None = None

    def validate(self) -> None:
        """Validate configuration values before a session starts."""

        if self.chunk_size_chars <= 0:
            raise ValueError("`chunk_size_chars` must be a positive integer.")
        if self.provider_tts not in _SUPPORTED_PROVIDER_IDS:
            supported = ", ".join(sorted(_SUPPORTED_PROVIDER_IDS))
            raise ValueError(
                f"Unsupported `provider_tts` value `{self.provider_tts}`; supported: {supported}."
            )
        for field_name in ("tts_model", "tts_voice", "tts_prompt_template"):
            if normalize_optional_string(getattr(self, field_name)) is None:
                raise ValueError(f"`{field_name}` must be a non-empty string.")
        if "{text}" not in self.tts_prompt_template:
            raise ValueError("`tts_prompt_template` must contain a `{text}` placeholder.")
        if self.request_timeout_seconds <= 0:
            raise ValueError("`request_timeout_seconds` must be positive.")
        if self.max_retries < 0:
            raise ValueError("`max_retries` must be zero or a positive integer.")
        if self.min_request_interval_seconds < 0:
            raise ValueError("`min_request_interval_seconds` must not be negative.")

    def resolved_synthesis_runtime(
        self, sources: RuntimeConfigSources | None = None
    ) -> SynthesisRuntimeConfig:
        """Resolve provider settings with precedence `cli` > `env` > config field."""

        resolved_sources = sources if sources is not None else RuntimeConfigSources()
        model = self._resolve("tts_model", ("CHAPTERVOICE_TTS_MODEL",), self.tts_model, resolved_sources)
        voice = self._resolve("tts_voice", ("CHAPTERVOICE_TTS_VOICE",), self.tts_voice, resolved_sources)
        api_key = self._resolve("api_key", _API_KEY_ENV_KEYS, self.api_key, resolved_sources)
        if model is None:
            raise ValueError("`tts_model` could not be resolved from CLI, env, or defaults.")
        if voice is None:
            raise ValueError("`tts_voice` could not be resolved from CLI, env, or defaults.")
        return SynthesisRuntimeConfig(
            provider=self.provider_tts,
            model=model,
            voice=voice,
            api_key=api_key,
        )

    @staticmethod
    def _resolve(
        key: str,
        env_keys: tuple[str, ...],
        default_value: str | None,
        sources: RuntimeConfigSources,
    ) -> str | None:
        cli_value = normalize_optional_string(sources.cli.get(key))
        if cli_value is not None:
            return cli_value
        for env_key in env_keys:
            env_value = normalize_optional_string(sources.env.get(env_key))
            if env_value is not None:
                return env_value
        return normalize_optional_string(default_value)


class ConfigLoader:
    """Factory methods for creating `ChapterVoiceConfig` from external sources."""

    _PATH_KEYS = frozenset({"input_pdf", "output_dir"})
    _INT_KEYS = frozenset({"chunk_size_chars", "max_retries"})
    _FLOAT_KEYS = frozenset({"request_timeout_seconds", "min_request_interval_seconds"})
    _REQUIRED_STRING_KEYS = frozenset(
        {"provider_tts", "tts_model", "tts_voice", "tts_prompt_template"}
    )
    _OPTIONAL_STRING_KEYS = frozenset({"api_key", "chapter_selection"})
    _SUPPORTED_KEYS = (
        _PATH_KEYS | _INT_KEYS | _FLOAT_KEYS | _REQUIRED_STRING_KEYS | _OPTIONAL_STRING_KEYS
    )
    _ENV_PREFIX = "CHAPTERVOICE_"

    @staticmethod
    def from_yaml(path: Path) -> ChapterVoiceConfig:
        """Create a validated config from a YAML file."""

        try:
            payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ValueError(f"YAML config `{path}` is not valid YAML: {exc}") from exc
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return ConfigLoader.from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(
        env: Mapping[str, str] | None = None,
        base: ChapterVoiceConfig | None = None,
    ) -> ChapterVoiceConfig:
        """Overlay `CHAPTERVOICE_*` environment variables onto `base` (or defaults)."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        payload: dict[str, Any] = {}
        for key in ConfigLoader._SUPPORTED_KEYS - {"api_key"}:
            value = normalize_optional_string(env_map.get(f"{ConfigLoader._ENV_PREFIX}{key.upper()}"))
            if value is not None:
                payload[key] = value
        return ConfigLoader.from_mapping(
            payload,
            source_label="environment",
            base=base,
        )

    @staticmethod
    def from_mapping(
        payload: Mapping[str, Any],
        source_label: str,
        base: ChapterVoiceConfig | None = None,
    ) -> ChapterVoiceConfig:
        """Build a validated config from a mapping, overriding `base` field by field."""

        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_KEYS))
        if unknown:
            raise ValueError(f"{source_label} includes unsupported key(s): {', '.join(unknown)}.")

        overrides: dict[str, Any] = {}
        for key, raw_value in payload.items():
            if key in ConfigLoader._PATH_KEYS:
                value = normalize_optional_string(raw_value)
                if value is not None:
                    overrides[key] = Path(value)
            elif key in ConfigLoader._INT_KEYS:
                overrides[key] = ConfigLoader._parse_int(raw_value, key, source_label)
            elif key in ConfigLoader._FLOAT_KEYS:
                overrides[key] = ConfigLoader._parse_float(raw_value, key, source_label)
            elif key in ConfigLoader._REQUIRED_STRING_KEYS:
                value = normalize_optional_string(raw_value)
                if value is None:
                    raise ValueError(f"{source_label} field `{key}` must be a non-empty string.")
                overrides[key] = value
            else:
                overrides[key] = normalize_optional_string(raw_value)

        config = replace(base if base is not None else ChapterVoiceConfig(), **overrides)
        config.validate()
        return config

    @staticmethod
    def _parse_int(raw_value: object, key: str, source_label: str) -> int:
        if isinstance(raw_value, bool):
            raise ValueError(f"{source_label} field `{key}` must be an integer.")
        try:
            return int(str(raw_value).strip(), 10)
        except ValueError as exc:
            raise ValueError(f"{source_label} field `{key}` must be an integer.") from exc

    @staticmethod
    def _parse_float(raw_value: object, key: str, source_label: str) -> float:
        if isinstance(raw_value, bool):
            raise ValueError(f"{source_label} field `{key}` must be a number.")
        try:
            return float(str(raw_value).strip())
        except ValueError as exc:
            raise ValueError(f"{source_label} field `{key}` must be a number.") from exc
