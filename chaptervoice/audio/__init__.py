"""Audio decoding, concatenation, and WAV encoding components."""

from .decoder import AudioDecoder
from .merger import AudioConcatenator
from .wav import WavEncoder, WavHeader, read_wav_header

__all__ = [
    "AudioDecoder",
    "AudioConcatenator",
    "WavEncoder",
    "WavHeader",
    "read_wav_header",
]
