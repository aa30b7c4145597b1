"""Filename helpers for exported chapter audio.

Responsibilities:
- Derive a stable download filename from a chapter title.
"""

from __future__ import annotations

import re


def suggested_wav_filename(title: str) -> str:
    """Return `title` lower-cased with every char outside `[a-z0-9]` as `_`, plus `.wav`."""

    return f"{re.sub(r'[^a-z0-9]', '_', title.lower())}.wav"
