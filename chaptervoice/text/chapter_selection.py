"""Chapter selection parsing utilities for the CLI.

Responsibilities:
- Parse 1-based chapter position expressions (`1`, `1,3`, `2-5`, mixed).
- Validate positions against the number of resolved chapters.
- Produce compact normalized selection labels.
"""

from __future__ import annotations

from typing import Iterable

_SYNTAX_HINT = "Use syntax like `1`, `1,3`, `2-4`, or `1,3-5`."


def parse_chapter_selection(selection: str | None, chapter_count: int) -> list[int]:
    """Parse a selection expression into sorted unique 1-based chapter positions.

    Args:
        selection: User selection string. `None` or blank selects all chapters.
        chapter_count: Number of chapters available for selection.

    Returns:
        Sorted selected positions.

    Raises:
        ValueError: If the syntax is malformed, positions repeat, or are out of bounds.
    """

    if chapter_count <= 0:
        raise ValueError("No chapters are available for selection.")
    if selection is None or not selection.strip():
        return list(range(1, chapter_count + 1))

    selected: set[int] = set()
    for token in (part.strip() for part in selection.split(",")):
        if not token:
            raise ValueError(f"Malformed chapter selection: empty item in list. {_SYNTAX_HINT}")
        for position in _expand_token(token, chapter_count):
            if position in selected:
                raise ValueError(
                    f"Overlapping chapter selection contains duplicate index `{position}`."
                )
            selected.add(position)
    return sorted(selected)


def format_chapter_selection(positions: Iterable[int]) -> str:
    """Format positions into compact range syntax, e.g. `[1, 2, 3, 5]` -> `1-3,5`."""

    ordered = sorted(set(positions))
    if not ordered:
        return ""

    ranges: list[tuple[int, int]] = []
    for position in ordered:
        if ranges and position == ranges[-1][1] + 1:
            ranges[-1] = (ranges[-1][0], position)
        else:
            ranges.append((position, position))
    return ",".join(str(start) if start == end else f"{start}-{end}" for start, end in ranges)


def _expand_token(token: str, chapter_count: int) -> range:
    """Expand one `N` or `N-M` token into validated positions."""

    if "-" not in token:
        position = _parse_position(token, chapter_count)
        return range(position, position + 1)

    start_text, _, end_text = token.partition("-")
    if not start_text.strip() or not end_text.strip() or "-" in end_text:
        raise ValueError(f"Malformed chapter range `{token}`. Use closed range syntax like `2-4`.")
    start = _parse_position(start_text.strip(), chapter_count)
    end = _parse_position(end_text.strip(), chapter_count)
    if start > end:
        raise ValueError(
            f"Malformed chapter range `{token}`: range start must be less than or equal to end."
        )
    return range(start, end + 1)


def _parse_position(token: str, chapter_count: int) -> int:
    try:
        value = int(token, 10)
    except ValueError as exc:
        raise ValueError(f"Invalid chapter index `{token}`. Indices must be integers.") from exc
    if value < 1:
        raise ValueError(f"Invalid chapter index `{token}`. Indices must be positive and 1-based.")
    if value > chapter_count:
        raise ValueError(
            f"Chapter index `{value}` is out of available bounds `1-{chapter_count}`."
        )
    return value
