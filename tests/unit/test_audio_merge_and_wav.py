"""Unit tests for audio concatenation and WAV encoding."""

from array import array
import io
import struct
import wave

import pytest

from chaptervoice.audio.merger import AudioConcatenator
from chaptervoice.audio.wav import WavEncoder, read_wav_header
from chaptervoice.errors import DecodeError
from chaptervoice.models.datatypes import AudioBuffer


def _mono(*samples: float, sample_rate: int = 24000) -> AudioBuffer:
    return AudioBuffer(sample_rate=sample_rate, channels=(array("d", samples),))


def test_concatenate_preserves_order_and_total_length() -> None:
    merged = AudioConcatenator().concatenate([_mono(0.1, 0.2), _mono(0.3), _mono(0.4, 0.5)])

    assert merged.sample_rate == 24000
    assert merged.frame_count == 5
    assert list(merged.channels[0]) == [0.1, 0.2, 0.3, 0.4, 0.5]


def test_concatenate_without_inputs_returns_one_silent_frame() -> None:
    merged = AudioConcatenator(default_sample_rate=16000).concatenate([])

    assert merged.sample_rate == 16000
    assert merged.frame_count == 1
    assert list(merged.channels[0]) == [0.0]


def test_concatenate_single_input_is_returned_unchanged() -> None:
    only = _mono(0.25)

    assert AudioConcatenator().concatenate([only]) is only


def test_concatenate_rejects_mismatched_sample_rates() -> None:
    with pytest.raises(ValueError, match="Incompatible audio format"):
        AudioConcatenator().concatenate([_mono(0.1), _mono(0.2, sample_rate=16000)])


def test_wav_header_fields_round_trip_through_stdlib_reader() -> None:
    """Encoded header must describe 16-bit PCM with the buffer's rate and length."""

    buffer = _mono(0.0, 0.5, -0.5, 1.0)

    encoded = WavEncoder().encode(buffer)

    assert len(encoded) == 44 + 4 * 2
    assert encoded[:4] == b"RIFF"
    assert struct.unpack_from("<I", encoded, 4)[0] == 36 + 8
    header = read_wav_header(encoded)
    assert header.channels == 1
    assert header.sample_rate == 24000
    assert header.byte_rate == 48000
    assert header.block_align == 2
    assert header.bits_per_sample == 16
    assert header.frame_count == 4
    with wave.open(io.BytesIO(encoded), "rb") as wav_file:
        assert wav_file.getnchannels() == 1
        assert wav_file.getsampwidth() == 2
        assert wav_file.getframerate() == 24000
        assert wav_file.getnframes() == 4


def test_wav_encoding_uses_asymmetric_quantization_and_clamps() -> None:
    """Negative samples scale by 32768, non-negative by 32767, out-of-range values clamp."""

    buffer = _mono(-1.0, 1.0, -2.0, 2.0, 0.5, -0.5)

    encoded = WavEncoder().encode(buffer)

    samples = struct.unpack("<6h", encoded[44:])
    assert samples == (-32768, 32767, -32768, 32767, 16383, -16384)


def test_wav_encoding_interleaves_channels() -> None:
    buffer = AudioBuffer(
        sample_rate=8000,
        channels=(array("d", [0.5, 0.0]), array("d", [-0.5, 1.0])),
    )

    encoded = WavEncoder().encode(buffer)

    header = read_wav_header(encoded)
    assert header.channels == 2
    assert header.block_align == 4
    assert header.byte_rate == 32000
    assert struct.unpack("<4h", encoded[44:]) == (16383, -16384, 0, 32767)


def test_read_wav_header_rejects_short_or_foreign_payloads() -> None:
    with pytest.raises(DecodeError, match="shorter"):
        read_wav_header(b"RIFF")
    with pytest.raises(DecodeError, match="RIFF/WAVE"):
        read_wav_header(b"X" * 44)


def test_read_wav_header_rejects_zero_block_alignment() -> None:
    encoded = bytearray(WavEncoder().encode(_mono(0.25, -0.25)))
    struct.pack_into("<H", encoded, 32, 0)

    with pytest.raises(DecodeError, match="zero block alignment"):
        read_wav_header(bytes(encoded))
