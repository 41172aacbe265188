"""
Layout A parser (Amex, Citi): one merchant per block.

    Shake Shack                                   <- merchant
    Earn 20% back on a single                     <- offer anchor
    purchase, up to a total of $8                 <- continuation
    Expires 11/12/25                              <- expiration, ends the block
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from perkq.extraction.models import PerkCandidate
from perkq.extraction.parsers.base import BaseIssuerParser
from perkq.extraction.profiles import IssuerProfile
from perkq.extraction.types import ClassifiedLine, LayoutKind

# Tile badge counters read into the offer text: "3 Spend $98 on ..."
_LEADING_BADGE = re.compile(r"^\d\s+(?=(?:spend|earn|get)\b)", re.IGNORECASE)


class BlockParser(BaseIssuerParser):
    layout = LayoutKind.BLOCK

    def parse(self, lines: Sequence[ClassifiedLine], profile: IssuerProfile) -> list[PerkCandidate]:
        consumed: set[int] = set()
        return self.in_reading_order(self.parse_blocks(lines, profile, consumed))

    def join_description(self, parts: Iterable[str]) -> str:
        return _LEADING_BADGE.sub("", super().join_description(parts))
