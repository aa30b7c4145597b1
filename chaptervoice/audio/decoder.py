"""Raw PCM decoding into floating-point audio buffers.

Responsibilities:
- Interpret signed 16-bit little-endian PCM payloads from the synthesis backend.
- De-interleave multi-channel payloads into per-channel sample sequences.
"""

from __future__ import annotations

from array import array
import sys

from ..errors import DecodeError
from ..models.datatypes import AudioBuffer

_SAMPLE_WIDTH_BYTES = 2
_PCM16_SCALE = 32768.0


class AudioDecoder:
    """Decode signed 16-bit little-endian PCM bytes into `AudioBuffer` values."""

    def decode(
        self,
        pcm: bytes,
        sample_rate: int = 24000,
        channels: int = 1,
    ) -> AudioBuffer:
        """Decode a raw PCM payload.

        Args:
            pcm: Interleaved signed 16-bit little-endian samples.
            sample_rate: Sample rate of the payload in Hz.
            channels: Number of interleaved channels.

        Returns:
            Decoded buffer with samples scaled into `[-1, 1)`.

        Raises:
            DecodeError: If the payload is empty or truncated mid-frame.
        """

        if channels < 1:
            raise ValueError("`channels` must be a positive integer.")
        if sample_rate <= 0:
            raise ValueError("`sample_rate` must be a positive integer.")

        frame_width = channels * _SAMPLE_WIDTH_BYTES
        if not pcm:
            raise DecodeError("Audio payload is empty.")
        if len(pcm) % frame_width != 0:
            raise DecodeError(
                f"Audio payload of {len(pcm)} bytes is not a whole number of "
                f"{frame_width}-byte frames (truncated payload)."
            )

        samples = array("h")
        samples.frombytes(bytes(pcm))
        if sys.byteorder == "big":
            samples.byteswap()

        decoded = tuple(
            array("d", (value / _PCM16_SCALE for value in samples[channel::channels]))
            for channel in range(channels)
        )
        return AudioBuffer(sample_rate=sample_rate, channels=decoded)
