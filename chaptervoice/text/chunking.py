"""Chapter-to-chunk segmentation logic.

Responsibilities:
- Split chapter text into bounded chunks for synthesis requests.
- Keep chunk boundaries on sentence ends so no request starts mid-word.
"""

from __future__ import annotations

import re


class Chunker:
    """Greedily pack sentences into chunks no longer than a character limit."""

    DEFAULT_LIMIT = 4000

    _TRAILING_SENTENCE_CLOSERS = "\"')]}»”’"
    _SENTENCE_RE = re.compile(
        r"[^.!?]*[.!?]+[" + re.escape(_TRAILING_SENTENCE_CLOSERS) + r"]*|[^.!?]+"
    )

    def __init__(self, limit: int = DEFAULT_LIMIT) -> None:
        """Initialize the per-chunk character limit."""

        if limit <= 0:
            raise ValueError("Chunk `limit` must be a positive integer.")
        self.limit = limit

    def split_sentences(self, text: str) -> list[str]:
        """Split text into sentence pieces that together cover every character."""

        return [match.group(0) for match in self._SENTENCE_RE.finditer(text)]

    def chunk(self, text: str) -> list[str]:
        """Split text into ordered chunks.

        A sentence longer than the limit becomes its own oversized chunk rather
        than being cut. Joining the returned chunks reproduces `text` exactly.
        """

        chunks: list[str] = []
        current = ""
        for sentence in self.split_sentences(text):
            if current and len(current) + len(sentence) > self.limit:
                chunks.append(current)
                current = sentence
            else:
                current += sentence
        if current:
            chunks.append(current)
        return chunks
