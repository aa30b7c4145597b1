"""Page-range text extraction with printed page-number stripping.

Responsibilities:
- Concatenate page texts of an inclusive 1-based page range in reading order.
- Drop numeric footer tokens that are printed page numbers.
"""

from __future__ import annotations

import re

from ..errors import ExtractionError
from ..models.datatypes import TextSpan
from .pdf_document import DocumentHandle


class PageRangeTextExtractor:
    """Extract plain chapter text from a document collaborator."""

    FOOTER_HEIGHT_RATIO = 0.1
    _PAGE_NUMBER_RE = re.compile(r"[0-9]+")

    def __init__(self, document: DocumentHandle) -> None:
        self.document = document

    def extract(self, page_number: int, end_page_number: int) -> str:
        """Return text for pages `page_number..end_page_number` (1-based, inclusive).

        The end page is clamped to the document page count. Every page
        contributes one line, even when all of its tokens were filtered out.
        """

        try:
            last_page = min(end_page_number, self.document.page_count)
            parts: list[str] = []
            for page in range(max(1, page_number), last_page + 1):
                spans = self.document.get_page_text(page - 1)
                kept = [span.text for span in spans if self._keep_span(span)]
                parts.append(" ".join(kept) + "\n")
        except ExtractionError:
            raise
        except Exception as exc:
            raise ExtractionError(
                f"Text extraction failed for pages {page_number}-{end_page_number}: {exc}"
            ) from exc
        return "".join(parts)

    def _keep_span(self, span: TextSpan) -> bool:
        """Return whether a token is body text rather than blank or a footer page number."""

        text = span.text.strip()
        if not text:
            return False
        if not self._PAGE_NUMBER_RE.fullmatch(text):
            return True
        return span.y >= span.page_height * self.FOOTER_HEIGHT_RATIO
