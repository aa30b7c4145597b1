"""Outline-to-chapter boundary resolution.

Responsibilities:
- Flatten a nested document outline in document order without recursion.
- Resolve outline destinations into inclusive 1-based chapter page ranges.
- Drop degenerate ranges so every chapter satisfies `start <= end`.
"""

from __future__ import annotations

from dataclasses import dataclass
import uuid

from loguru import logger

from ..errors import NoOutlineError
from ..models.datatypes import Chapter, OutlineEntry
from .pdf_document import DocumentHandle


@dataclass(frozen=True, slots=True)
class _ResolvedEntry:
    """Arena slot holding one outline entry with a resolved start page."""

    title: str
    page_number: int


class OutlineResolver:
    """Derive ordered `Chapter` records from a document outline."""

    def resolve(self, document: DocumentHandle) -> list[Chapter]:
        """Resolve chapters for a loaded document.

        Raises:
            NoOutlineError: If the document has no outline or no entry yields
                a usable page range.
        """

        outline = document.get_outline()
        if not outline:
            raise NoOutlineError(
                "This PDF has no outline (table of contents); it cannot be split into chapters."
            )

        arena = self._flatten(outline, document)
        chapters = self._chapters_from_arena(arena, document.page_count)
        if not chapters:
            raise NoOutlineError(
                "The PDF outline does not point to any usable page ranges."
            )
        return chapters

    def _flatten(
        self, outline: list[OutlineEntry], document: DocumentHandle
    ) -> list[_ResolvedEntry]:
        """Depth-first pre-order flatten, keeping only entries with resolvable pages."""

        page_count = document.page_count
        arena: list[_ResolvedEntry] = []
        stack: list[OutlineEntry] = list(reversed(outline))
        while stack:
            entry = stack.pop()
            stack.extend(reversed(entry.children))

            page_index = document.resolve_destination(entry.destination)
            if page_index is None or not 0 <= page_index < page_count:
                logger.debug("Skipping outline entry without resolvable page: {!r}", entry.title)
                continue
            page_number = page_index + 1
            arena.append(
                _ResolvedEntry(
                    title=entry.title or f"Page {page_number}",
                    page_number=page_number,
                )
            )
        return arena

    def _chapters_from_arena(
        self, arena: list[_ResolvedEntry], page_count: int
    ) -> list[Chapter]:
        """Assign end pages from the next entry's start page and drop empty ranges."""

        chapters: list[Chapter] = []
        for position, entry in enumerate(arena):
            if position + 1 < len(arena):
                end_page_number = arena[position + 1].page_number - 1
            else:
                end_page_number = page_count
            if end_page_number < entry.page_number:
                logger.debug(
                    "Dropping outline entry {!r} with empty page range {}-{}",
                    entry.title,
                    entry.page_number,
                    end_page_number,
                )
                continue
            chapters.append(
                Chapter(
                    id=uuid.uuid4().hex,
                    title=entry.title,
                    page_number=entry.page_number,
                    end_page_number=end_page_number,
                )
            )
        return chapters
