"""
Issuer parsers, one per layout.

parser_for() is the single dispatch point: every LayoutKind maps to exactly
one parser, checked when this module is imported.
"""

from __future__ import annotations

from perkq.extraction.parsers.base import BaseIssuerParser
from perkq.extraction.parsers.block import BlockParser
from perkq.extraction.parsers.generic import GenericParser
from perkq.extraction.parsers.shared_line import SharedLineParser
from perkq.extraction.types import LayoutKind

_PARSERS: dict[LayoutKind, BaseIssuerParser] = {
    LayoutKind.BLOCK: BlockParser(),
    LayoutKind.SHARED_LINE: SharedLineParser(),
    LayoutKind.GENERIC: GenericParser(),
}

_missing = set(LayoutKind) - set(_PARSERS)
if _missing:
    raise RuntimeError(f"No parser registered for layouts: {sorted(k.value for k in _missing)}")


def parser_for(layout: LayoutKind) -> BaseIssuerParser:
    """The parser for a layout. Raises ValueError for anything else."""
    try:
        return _PARSERS[LayoutKind(layout)]
    except (KeyError, ValueError) as e:
        raise ValueError(f"Unknown layout: {layout!r}") from e


__all__ = [
    "BaseIssuerParser",
    "BlockParser",
    "GenericParser",
    "SharedLineParser",
    "parser_for",
]
