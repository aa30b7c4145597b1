"""Shared pytest fixtures for the full chaptervoice test suite."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from pathlib import Path

import pytest
from loguru import logger
from pypdf import PdfWriter
from pypdf.generic import DecodedStreamObject, DictionaryObject, NameObject

PAGE_WIDTH = 595
PAGE_HEIGHT = 842
FONT_SIZE = 12
LEFT_MARGIN = 72
TOP_Y = 780
LINE_HEIGHT = 16

OutlineSpec = Sequence[tuple]


def _escape_pdf_text(value: str) -> str:
    """Escape literal text for safe inclusion in a PDF text stream."""

    return value.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def _add_text_page(writer: PdfWriter, lines: list[str]) -> None:
    """Append a single page containing extractable text lines."""

    page = writer.add_blank_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
    font_ref = writer._add_object(
        DictionaryObject(
            {
                NameObject("/Type"): NameObject("/Font"),
                NameObject("/Subtype"): NameObject("/Type1"),
                NameObject("/BaseFont"): NameObject("/Helvetica"),
            }
        )
    )
    page[NameObject("/Resources")] = DictionaryObject(
        {NameObject("/Font"): DictionaryObject({NameObject("/F1"): font_ref})}
    )

    content_lines = [
        "BT",
        f"/F1 {FONT_SIZE} Tf",
        f"{LEFT_MARGIN} {TOP_Y} Td",
        f"{LINE_HEIGHT} TL",
    ]
    for index, line in enumerate(lines):
        content_lines.append(f"({_escape_pdf_text(line)}) Tj")
        if index < len(lines) - 1:
            content_lines.append("T*")
    content_lines.append("ET")

    stream = DecodedStreamObject()
    stream.set_data("\n".join(content_lines).encode("latin-1"))
    page[NameObject("/Contents")] = writer._add_object(stream)


def _add_outline_items(writer: PdfWriter, items: OutlineSpec, parent: object = None) -> None:
    """Add `(title, page_index[, children])` outline items under `parent`."""

    for item in items:
        title, page_index = item[0], item[1]
        reference = writer.add_outline_item(title, page_number=page_index, parent=parent)
        if len(item) > 2:
            _add_outline_items(writer, item[2], parent=reference)


@pytest.fixture
def outline_pdf_factory(tmp_path: Path) -> Callable[..., Path]:
    """Build small text PDFs with a bookmark outline inside `tmp_path`."""

    def _build(
        pages: Sequence[list[str]],
        outline: OutlineSpec = (),
        name: str = "book.pdf",
    ) -> Path:
        writer = PdfWriter()
        for lines in pages:
            _add_text_page(writer, list(lines))
        _add_outline_items(writer, outline)
        pdf_path = tmp_path / name
        with pdf_path.open("wb") as handle:
            writer.write(handle)
        return pdf_path

    return _build


@pytest.fixture
def three_chapter_pdf(outline_pdf_factory: Callable[..., Path]) -> Path:
    """Provide a five-page PDF with three outline chapters."""

    pages = [
        ["Orchard Ledger opens here.", "The board records observations."],
        ["Orchard Ledger continues with a second page."],
        ["River Workshop starts.", "Teams meet at noon."],
        ["Lantern Assembly begins.", "Lamps are checked."],
        ["Lantern Assembly closes the book."],
    ]
    outline = [
        ("Orchard Ledger", 0),
        ("River Workshop", 2),
        ("Lantern Assembly", 3),
    ]
    return outline_pdf_factory(pages, outline)


@pytest.fixture(autouse=True)
def _reset_loguru() -> Iterator[None]:
    """Keep loguru sinks added by one test from leaking into the next."""

    yield
    logger.remove()
    logger.disable("chaptervoice")
