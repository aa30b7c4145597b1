"""Canonical 16-bit PCM WAV container encoding.

Responsibilities:
- Quantize floating-point audio into signed 16-bit samples.
- Write a byte-exact 44-byte RIFF/WAVE header followed by interleaved samples.
- Parse canonical headers back for validation and inspection.
"""

from __future__ import annotations

from array import array
from dataclasses import dataclass
import struct
import sys

from ..errors import DecodeError
from ..models.datatypes import AudioBuffer

_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")
_PCM_FORMAT_TAG = 1
_BITS_PER_SAMPLE = 16
_FMT_CHUNK_SIZE = 16


@dataclass(frozen=True, slots=True)
class WavHeader:
    """Parsed fields of a canonical PCM WAV header."""

    channels: int
    sample_rate: int
    byte_rate: int
    block_align: int
    bits_per_sample: int
    data_size: int

    @property
    def frame_count(self) -> int:
        """Return the number of sample frames in the `data` chunk."""

        return self.data_size // self.block_align


class WavEncoder:
    """Encode `AudioBuffer` values into canonical PCM WAV bytes."""

    header_size = _HEADER.size

    def encode(self, buffer: AudioBuffer) -> bytes:
        """Return WAV bytes for a buffer (44-byte header plus 16-bit PCM data)."""

        channel_count = buffer.channel_count
        block_align = 2 * channel_count
        data_size = buffer.frame_count * block_align
        header = _HEADER.pack(
            b"RIFF",
            36 + data_size,
            b"WAVE",
            b"fmt ",
            _FMT_CHUNK_SIZE,
            _PCM_FORMAT_TAG,
            channel_count,
            buffer.sample_rate,
            buffer.sample_rate * block_align,
            block_align,
            _BITS_PER_SAMPLE,
            b"data",
            data_size,
        )

        samples = array("h", bytes(data_size))
        position = 0
        for frame in zip(*buffer.channels):
            for value in frame:
                samples[position] = self.quantize(value)
                position += 1
        if sys.byteorder == "big":
            samples.byteswap()
        return header + samples.tobytes()

    @staticmethod
    def quantize(value: float) -> int:
        """Clamp to `[-1, 1]` and scale asymmetrically into the signed 16-bit range.

        Negative values use 32768 and non-negative values use 32767 so that
        `+1.0` maps to 32767 instead of overflowing.
        """

        clamped = max(-1.0, min(1.0, value))
        if clamped < 0:
            return int(clamped * 0x8000)
        return int(clamped * 0x7FFF)


def read_wav_header(data: bytes) -> WavHeader:
    """Parse the canonical 44-byte header of a PCM WAV payload."""

    if len(data) < _HEADER.size:
        raise DecodeError(f"WAV payload is shorter than the {_HEADER.size}-byte header.")

    (
        riff,
        _riff_size,
        wave_tag,
        fmt_tag,
        fmt_size,
        format_tag,
        channels,
        sample_rate,
        byte_rate,
        block_align,
        bits_per_sample,
        data_tag,
        data_size,
    ) = _HEADER.unpack_from(data)
    if riff != b"RIFF" or wave_tag != b"WAVE":
        raise DecodeError("WAV payload is missing the RIFF/WAVE signature.")
    if fmt_tag != b"fmt " or fmt_size != _FMT_CHUNK_SIZE or format_tag != _PCM_FORMAT_TAG:
        raise DecodeError("WAV payload does not start with a canonical PCM `fmt ` chunk.")
    if data_tag != b"data":
        raise DecodeError("WAV payload does not contain a canonical `data` chunk.")
    if channels == 0 or block_align == 0:
        raise DecodeError("WAV payload declares zero channels or a zero block alignment.")
    return WavHeader(
        channels=channels,
        sample_rate=sample_rate,
        byte_rate=byte_rate,
        block_align=block_align,
        bits_per_sample=bits_per_sample,
        data_size=data_size,
    )
