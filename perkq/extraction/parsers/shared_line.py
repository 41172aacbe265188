"""
Layout B parser (Chase): several merchants can share one offer line.

    Dyson Arlo                       <- two merchants, one line
    5% cash back 15% cash back       <- two offers, one line
    24d left                         <- countdown under the first tile

Shared lines are resolved first with the two-pass association in
perkq.extraction.association; whatever remains is parsed with the block
skeleton, which also covers the one-tile-per-line rendering of the same
screen.
"""

from __future__ import annotations

from collections.abc import Sequence

from perkq.extraction.association import associate
from perkq.extraction.models import PerkCandidate
from perkq.extraction.normalizer import find_known_merchants
from perkq.extraction.parsers.base import BaseIssuerParser
from perkq.extraction.profiles import IssuerProfile
from perkq.extraction.types import ClassifiedLine, LayoutKind, LineRole, MerchantMention
from perkq.observability.logging import get_logger

logger = get_logger(__name__)


class SharedLineParser(BaseIssuerParser):
    layout = LayoutKind.SHARED_LINE

    def parse(self, lines: Sequence[ClassifiedLine], profile: IssuerProfile) -> list[PerkCandidate]:
        consumed: set[int] = set()
        candidates = self.parse_shared_lines(lines, profile, consumed)
        candidates.extend(self.parse_blocks(lines, profile, consumed))
        return self.in_reading_order(candidates)

    def shared_line_merchants(self, text: str, profile: IssuerProfile) -> list[MerchantMention]:
        """
        Two or more merchants named on one line, left to right.

        Known multi-merchant line shapes are tried first and fix the merchant
        order, but only when every merchant the dictionary scan locates is
        one the shape names. Otherwise the scan itself is used.
        """
        located = find_known_merchants(text, profile)
        located_names = {mention.name for mention in located}
        for multi in profile.multi_merchant_patterns:
            if not multi.pattern.search(text):
                continue
            if not located_names <= set(multi.merchants):
                logger.debug("Line %r names merchants outside pattern %s", text, multi.merchants)
                continue
            by_name = {mention.name: mention for mention in located}
            return [by_name.get(name, MerchantMention(name=name, start=None)) for name in multi.merchants]
        return located if len(located) >= 2 else []

    def parse_shared_lines(
        self,
        lines: Sequence[ClassifiedLine],
        profile: IssuerProfile,
        consumed: set[int],
    ) -> list[PerkCandidate]:
        candidates: list[PerkCandidate] = []
        for pos, line in enumerate(lines):
            if pos in consumed or line.role in (LineRole.NOISE, LineRole.EXPIRATION):
                continue
            merchants = self.shared_line_merchants(line.text, profile)
            if len(merchants) < 2:
                continue

            found = self.find_offer_line(lines, pos, consumed)
            if found is None:
                logger.debug("Line %d names %d merchants but no offer line follows", line.index, len(merchants))
                continue
            offer_pos, offers = found

            offer_line_mentions = (
                find_known_merchants(lines[offer_pos].text, profile) if offer_pos != pos else []
            )
            pairs = associate(merchants, offers, offer_line_mentions)
            if not pairs:
                logger.debug("Could not associate merchants on line %d; dropped", line.index)
                continue

            expirations, expiration_pos = self.shared_line_expirations(lines, offer_pos, offers, consumed)
            consumed.update({pos, offer_pos})
            if expiration_pos is not None:
                consumed.add(expiration_pos)

            logger.debug(
                "Shared line %d: %s",
                line.index,
                ", ".join(f"{m.name}={o.value}" for m, o in pairs),
            )
            candidates.extend(self.emit_pairs(pairs, offers, expirations, profile, line.index))
        return candidates
