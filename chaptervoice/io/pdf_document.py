"""PDF document access backed by `pypdf`.

Responsibilities:
- Open PDF payloads from bytes or paths and report parse failures uniformly.
- Expose the outline tree, destination resolution, and positioned page text.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import Protocol

from loguru import logger
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from ..errors import DocumentLoadError
from ..models.datatypes import OutlineEntry, TextSpan


class DocumentHandle(Protocol):
    """Document-parsing collaborator consumed by the conversion pipeline."""

    @property
    def page_count(self) -> int:
        """Total number of pages."""

    def get_outline(self) -> list[OutlineEntry]:
        """Return the outline tree, empty when the document has none."""

    def resolve_destination(self, destination: object) -> int | None:
        """Resolve a destination to a 0-based page index."""

    def get_page_text(self, page_index: int) -> list[TextSpan]:
        """Return positioned text spans for a 0-based page index."""

    def close(self) -> None:
        """Release resources held by the parsed document."""


def open_document(source: bytes | Path) -> PdfDocument:
    """Open a PDF from raw bytes or a filesystem path."""

    try:
        if isinstance(source, Path):
            reader = PdfReader(str(source))
        else:
            reader = PdfReader(io.BytesIO(source))
        # Touch the page tree so structural damage surfaces at load time.
        _ = len(reader.pages)
    except FileNotFoundError as exc:
        raise DocumentLoadError(f"Input PDF not found: {source}") from exc
    except (PyPdfError, ValueError, KeyError, TypeError, OSError) as exc:
        raise DocumentLoadError(f"Failed to parse PDF document: {exc}") from exc
    return PdfDocument(reader)


class PdfDocument:
    """Read-only view over a parsed PDF."""

    def __init__(self, reader: PdfReader) -> None:
        self._reader = reader

    @property
    def page_count(self) -> int:
        return len(self._reader.pages)

    def get_outline(self) -> list[OutlineEntry]:
        """Return the outline as a tree of entries in document order.

        `pypdf` represents children as a nested list that directly follows
        their parent item; a nested list without a preceding parent is ignored.
        """

        root: list[OutlineEntry] = []
        pending: list[tuple[list[object], list[OutlineEntry]]] = [
            (list(self._reader.outline or []), root)
        ]
        while pending:
            items, target = pending.pop()
            previous: OutlineEntry | None = None
            for item in items:
                if isinstance(item, list):
                    if previous is not None:
                        pending.append((item, previous.children))
                    continue
                previous = OutlineEntry(
                    title=" ".join(str(getattr(item, "title", "") or "").split()),
                    destination=item,
                )
                target.append(previous)
        return root

    def resolve_destination(self, destination: object) -> int | None:
        """Resolve an outline destination to a 0-based page index, or `None`."""

        try:
            page_index = self._reader.get_destination_page_number(destination)
        except Exception as exc:
            logger.debug("Could not resolve outline destination: {}", exc)
            return None
        if page_index is None or page_index < 0:
            return None
        return page_index

    def get_page_text(self, page_index: int) -> list[TextSpan]:
        """Return positioned text spans of one page in content-stream order."""

        page = self._reader.pages[page_index]
        bottom = float(page.mediabox.bottom)
        page_height = float(page.mediabox.height)
        spans: list[TextSpan] = []

        def _visit(
            text: str,
            cm: list[float],
            tm: list[float],
            _font_dict: object,
            _font_size: float,
        ) -> None:
            if not text:
                return
            y = tm[4] * cm[1] + tm[5] * cm[3] + cm[5]
            spans.append(TextSpan(text=text, y=float(y) - bottom, page_height=page_height))

        page.extract_text(visitor_text=_visit)
        return spans

    def close(self) -> None:
        self._reader.close()
