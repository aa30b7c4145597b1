"""Audio concatenation stage.

Responsibilities:
- Join ordered chunk buffers of one chapter into a single buffer.
- Preserve input order with no gaps or overlap between chunks.
"""

from __future__ import annotations

from array import array
from collections.abc import Sequence

from ..models.datatypes import AudioBuffer


class AudioConcatenator:
    """Concatenate same-format audio buffers into one deterministic buffer."""

    def __init__(self, default_sample_rate: int = 24000) -> None:
        """Initialize the sample rate used for the empty-input placeholder."""

        self.default_sample_rate = default_sample_rate

    def concatenate(self, buffers: Sequence[AudioBuffer]) -> AudioBuffer:
        """Concatenate ordered buffers.

        Zero inputs produce a one-frame silent placeholder. A single input is
        returned unchanged.
        """

        if not buffers:
            return AudioBuffer.silence(frame_count=1, sample_rate=self.default_sample_rate)
        if len(buffers) == 1:
            return buffers[0]

        first = buffers[0]
        for position, buffer in enumerate(buffers[1:], start=1):
            if (
                buffer.sample_rate != first.sample_rate
                or buffer.channel_count != first.channel_count
            ):
                raise ValueError(
                    f"Incompatible audio format for buffer {position}: "
                    f"{buffer.channel_count}ch@{buffer.sample_rate}Hz, expected "
                    f"{first.channel_count}ch@{first.sample_rate}Hz."
                )

        merged: list[array] = []
        for channel in range(first.channel_count):
            samples = array("d")
            for buffer in buffers:
                samples.extend(buffer.channels[channel])
            merged.append(samples)
        return AudioBuffer(sample_rate=first.sample_rate, channels=tuple(merged))
