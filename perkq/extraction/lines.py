"""Split raw recognition text into indexed lines."""

from __future__ import annotations

from perkq.extraction.types import TextLine


def split_lines(text: str) -> list[TextLine]:
    """
    Trim every line and drop empty ones.

    Indexes are positions in the returned sequence, so two lines separated by
    a blank line in the source are adjacent here.
    """
    if not text:
        return []
    stripped = (raw.strip() for raw in text.splitlines())
    return [TextLine(index=i, text=line) for i, line in enumerate(line for line in stripped if line)]
