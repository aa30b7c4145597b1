"""Unit tests for chapter selection parser utilities."""

import pytest

from chaptervoice.text.chapter_selection import (
    format_chapter_selection,
    parse_chapter_selection,
)
from chaptervoice.text.slug import suggested_wav_filename


def test_parse_chapter_selection_supports_single_list_and_range() -> None:
    """Parser should support single index, comma list, and closed range syntax."""

    assert parse_chapter_selection("3", 5) == [3]
    assert parse_chapter_selection("5,1,3", 5) == [1, 3, 5]
    assert parse_chapter_selection("2-4", 5) == [2, 3, 4]
    assert parse_chapter_selection(" 1, 3-4 ", 5) == [1, 3, 4]


def test_parse_chapter_selection_selects_all_when_blank() -> None:
    """Missing or blank selection should select every chapter."""

    assert parse_chapter_selection(None, 3) == [1, 2, 3]
    assert parse_chapter_selection("   ", 3) == [1, 2, 3]


def test_parse_chapter_selection_rejects_malformed_or_overlapping_ranges() -> None:
    """Parser should reject malformed and overlapping chapter selection expressions."""

    with pytest.raises(ValueError, match="Malformed chapter range"):
        parse_chapter_selection("4-2", 5)
    with pytest.raises(ValueError, match="Malformed chapter range"):
        parse_chapter_selection("2-", 5)
    with pytest.raises(ValueError, match="empty item"):
        parse_chapter_selection("1,,2", 5)
    with pytest.raises(ValueError, match="Overlapping chapter selection"):
        parse_chapter_selection("1-3,3-4", 5)
    with pytest.raises(ValueError, match="must be integers"):
        parse_chapter_selection("one", 5)


def test_parse_chapter_selection_rejects_out_of_bounds_indices() -> None:
    """Parser should reject out-of-bound chapter indices with clear diagnostics."""

    with pytest.raises(ValueError, match="positive and 1-based"):
        parse_chapter_selection("0", 5)
    with pytest.raises(ValueError, match="out of available bounds"):
        parse_chapter_selection("6", 5)


def test_format_chapter_selection_renders_compact_ranges() -> None:
    """Formatter should collapse consecutive positions into ranges."""

    assert format_chapter_selection([1, 2, 3, 5]) == "1-3,5"
    assert format_chapter_selection([4]) == "4"
    assert format_chapter_selection([]) == ""


def test_suggested_wav_filename_replaces_non_alphanumerics() -> None:
    """Every character outside `[a-z0-9]` in the lower-cased title becomes `_`."""

    assert suggested_wav_filename("Chapter 1: The Start") == "chapter_1__the_start.wav"
    assert suggested_wav_filename("Čtení") == "_ten_.wav"
    assert suggested_wav_filename("") == ".wav"
