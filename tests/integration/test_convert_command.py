"""Integration tests for the `convert` command."""

from collections.abc import Callable
from pathlib import Path
import wave

from pytest import MonkeyPatch
from typer.testing import CliRunner

from chaptervoice.cli import app
from chaptervoice.errors import SynthesisError
from chaptervoice.tts.gemini_client import GeminiSpeechClient


def test_convert_writes_one_wav_per_selected_chapter(
    three_chapter_pdf: Path, tmp_path: Path, synthesized_prompts: list[str]
) -> None:
    """Selected chapters are converted in document order and exported as WAV files."""

    out_dir = tmp_path / "audio"
    runner = CliRunner()

    result = runner.invoke(
        app,
        ["convert", str(three_chapter_pdf), "--chapters", "3,1", "--out", str(out_dir)],
    )

    assert result.exit_code == 0, result.output
    assert sorted(path.name for path in out_dir.iterdir()) == [
        "01_orchard_ledger.wav",
        "03_lantern_assembly.wav",
    ]
    assert "Orchard Ledger opens here." in synthesized_prompts[0]
    assert "Lantern Assembly begins." in synthesized_prompts[1]
    assert "Chapter scope: 1,3" in result.output
    assert "Converted: 2" in result.output
    assert "Failed: 0" in result.output
    with wave.open(str(out_dir / "01_orchard_ledger.wav"), "rb") as wav_file:
        assert wav_file.getframerate() == 24000
        assert wav_file.getnchannels() == 1
        assert wav_file.getsampwidth() == 2
        assert wav_file.getnframes() == 2400


def test_convert_uses_prompt_voice_and_model_overrides(
    three_chapter_pdf: Path, tmp_path: Path, monkeypatch: MonkeyPatch
) -> None:
    requests_seen: list[dict[str, object]] = []

    def _capture(self: GeminiSpeechClient, **kwargs: object) -> bytes:
        requests_seen.append({"api_key": self.api_key, **kwargs})
        return b"\x00\x00" * 10

    monkeypatch.setattr(GeminiSpeechClient, "generate_speech", _capture)
    runner = CliRunner()

    result = runner.invoke(
        app,
        [
            "convert",
            str(three_chapter_pdf),
            "--chapters",
            "2",
            "--out",
            str(tmp_path / "out"),
            "--voice",
            "Puck",
            "--model",
            "custom-tts",
            "--api-key",
            "cli-key",
        ],
    )

    assert result.exit_code == 0, result.output
    assert len(requests_seen) == 1
    assert requests_seen[0]["api_key"] == "cli-key"
    assert requests_seen[0]["voice"] == "Puck"
    assert requests_seen[0]["model"] == "custom-tts"
    assert str(requests_seen[0]["prompt"]).startswith(
        'Read this text aloud with a natural intonation: "River Workshop starts.'
    )


def test_convert_exits_non_zero_when_a_chapter_fails(
    three_chapter_pdf: Path, tmp_path: Path, monkeypatch: MonkeyPatch
) -> None:
    """Failures are reported per chapter while the remaining chapters still convert."""

    def _flaky(self: GeminiSpeechClient, **kwargs: object) -> bytes:
        if "River Workshop" in str(kwargs["prompt"]):
            raise SynthesisError("No audio data received from API for chunk.")
        return b"\x00\x00" * 10

    monkeypatch.setattr(GeminiSpeechClient, "generate_speech", _flaky)
    out_dir = tmp_path / "out"
    runner = CliRunner()

    result = runner.invoke(app, ["convert", str(three_chapter_pdf), "--out", str(out_dir)])

    assert result.exit_code == 1
    assert "[failed] 2. River Workshop: No audio data received from API for chunk." in result.output
    assert "Converted: 2" in result.output
    assert "Failed: 1" in result.output
    assert sorted(path.name for path in out_dir.iterdir()) == [
        "01_orchard_ledger.wav",
        "03_lantern_assembly.wav",
    ]


def test_convert_reads_defaults_from_yaml_config(
    three_chapter_pdf: Path, tmp_path: Path, synthesized_prompts: list[str]
) -> None:
    out_dir = tmp_path / "from-config"
    config_path = tmp_path / "chaptervoice.yaml"
    config_path.write_text(
        "\n".join(
            [
                f"input_pdf: {three_chapter_pdf}",
                f"output_dir: {out_dir}",
                "chapter_selection: '2'",
                "tts_prompt_template: 'Narrate: {text}'",
            ]
        ),
        encoding="utf-8",
    )
    runner = CliRunner()

    result = runner.invoke(app, ["convert", "--config", str(config_path)])

    assert result.exit_code == 0, result.output
    assert [path.name for path in out_dir.iterdir()] == ["02_river_workshop.wav"]
    assert synthesized_prompts[0].startswith("Narrate: River Workshop starts.")


def test_convert_keeps_chapters_with_repeated_titles(
    outline_pdf_factory: Callable[..., Path], tmp_path: Path
) -> None:
    """Chapters sharing a title are written to distinct position-prefixed files."""

    pdf_path = outline_pdf_factory(
        [
            ["Part One opens."],
            ["The first introduction."],
            ["Part Two opens."],
            ["The second introduction."],
        ],
        [
            ("Part One", 0, [("Introduction", 1)]),
            ("Part Two", 2, [("Introduction", 3)]),
        ],
    )
    out_dir = tmp_path / "out"
    runner = CliRunner()

    result = runner.invoke(app, ["convert", str(pdf_path), "--out", str(out_dir)])

    assert result.exit_code == 0, result.output
    assert sorted(path.name for path in out_dir.iterdir()) == [
        "01_part_one.wav",
        "02_introduction.wav",
        "03_part_two.wav",
        "04_introduction.wav",
    ]
    assert "Converted: 4" in result.output


def test_convert_writes_synthesizer_format_regardless_of_environment(
    three_chapter_pdf: Path, tmp_path: Path, monkeypatch: MonkeyPatch
) -> None:
    monkeypatch.setenv("CHAPTERVOICE_SAMPLE_RATE", "48000")
    monkeypatch.setenv("CHAPTERVOICE_CHANNELS", "2")
    out_dir = tmp_path / "out"
    runner = CliRunner()

    result = runner.invoke(
        app, ["convert", str(three_chapter_pdf), "--chapters", "1", "--out", str(out_dir)]
    )

    assert result.exit_code == 0, result.output
    with wave.open(str(out_dir / "01_orchard_ledger.wav"), "rb") as wav_file:
        assert wav_file.getnchannels() == 1
        assert wav_file.getframerate() == 24000
        assert wav_file.getnframes() == 2400


def test_convert_rejects_pcm_format_keys_in_yaml_config(
    three_chapter_pdf: Path, tmp_path: Path
) -> None:
    config_path = tmp_path / "chaptervoice.yaml"
    config_path.write_text("sample_rate: 48000\nchannels: 2\n", encoding="utf-8")
    out_dir = tmp_path / "out"
    runner = CliRunner()

    result = runner.invoke(
        app,
        ["convert", str(three_chapter_pdf), "--config", str(config_path), "--out", str(out_dir)],
    )

    assert result.exit_code == 1
    assert "convert failed at stage `config`" in result.output
    assert "unsupported key(s): channels, sample_rate" in result.output
    assert not out_dir.exists()
