"""
Shared parsing skeleton for every issuer layout.

The block skeleton is: merchant line found -> scan forward for the first
offer anchor -> append continuation lines until an expiration, another
merchant or the description cap. Layout parsers add their own passes in
front of it and override the few decisions that differ by issuer.

Parsers are stateless; the profile and every intermediate structure are
passed explicitly, so one parser instance serves concurrent parses.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from perkq import config
from perkq.extraction.association import unique_nearest
from perkq.extraction.classifier import is_brand_shaped, merchant_name_part
from perkq.extraction.models import PerkCandidate
from perkq.extraction.normalizer import (
    clean_merchant_name,
    clean_ocr_text,
    correct_merchant,
    find_known_merchants,
)
from perkq.extraction.profiles import IssuerProfile
from perkq.extraction.types import ClassifiedLine, LayoutKind, LineRole, MerchantMention, ValueMatch
from perkq.extraction.values import (
    contains_offer_vocabulary,
    extract_value,
    find_expirations,
    find_values,
    split_expiration,
)
from perkq.observability.logging import get_logger

logger = get_logger(__name__)

# "... on Walmart+ Annual Membership", "... at Target"
_INLINE_MERCHANT = re.compile(
    r"\b(?:at|on|with)\s+(?P<name>[A-Z][\w'&+.-]*(?:\s+[A-Z][\w'&+.-]*){0,3})"
)

_CONTINUATION_ROLES = (LineRole.OFFER, LineRole.UNCLASSIFIED)


@dataclass
class Block:
    """Lines grouped under one offer anchor."""

    anchor: int  # position of the first offer line
    end: int  # first position after the block
    parts: list[str] = field(default_factory=list)
    expiration: str | None = None

    @property
    def description(self) -> str:
        return " ".join(self.parts)


class BaseIssuerParser:
    """
    Contract: parse(lines, profile) -> list[PerkCandidate].

    Candidates leave a parser at CONFIDENCE_BASE; scoring happens later.
    """

    layout: LayoutKind

    def parse(self, lines: Sequence[ClassifiedLine], profile: IssuerProfile) -> list[PerkCandidate]:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Issuer-specific decisions
    # ------------------------------------------------------------------

    def resolve_ambiguous(self, line: ClassifiedLine, profile: IssuerProfile) -> LineRole:
        """An ambiguous line is a merchant only when it names a dictionary merchant."""
        name = merchant_name_part(line.text)
        if name and correct_merchant(name, profile):
            return LineRole.MERCHANT
        return LineRole.OFFER

    def merchant_for_line(self, line: ClassifiedLine, profile: IssuerProfile) -> str:
        """Display name for a merchant line: canonical when known, else cleaned text."""
        name = merchant_name_part(line.text)
        known = correct_merchant(name, profile)
        if known:
            return known
        mentions = find_known_merchants(name, profile)
        if len(mentions) == 1:
            return mentions[0].name
        return clean_merchant_name(name)

    def join_description(self, parts: Iterable[str]) -> str:
        return clean_ocr_text(" ".join(parts))

    # ------------------------------------------------------------------
    # Block skeleton
    # ------------------------------------------------------------------

    def effective_roles(
        self, lines: Sequence[ClassifiedLine], profile: IssuerProfile
    ) -> list[LineRole]:
        return [
            self.resolve_ambiguous(line, profile) if line.role is LineRole.AMBIGUOUS else line.role
            for line in lines
        ]

    def parse_blocks(
        self,
        lines: Sequence[ClassifiedLine],
        profile: IssuerProfile,
        consumed: set[int],
    ) -> list[PerkCandidate]:
        """
        Merchant blocks first, then offers no merchant claimed.

        Positions of every line used are added to consumed.
        """
        roles = self.effective_roles(lines, profile)
        candidates: list[PerkCandidate] = []

        for pos, line in enumerate(lines):
            if pos in consumed or roles[pos] is not LineRole.MERCHANT:
                continue
            block = self.collect_block(lines, roles, pos, consumed)
            if block is None:
                logger.debug("Merchant line %d has no offer anchor; skipped", line.index)
                continue
            consumed.update(range(pos, block.end))
            candidate = self.build_candidate(
                merchant=self.merchant_for_line(line, profile),
                description=block.description,
                expiration=block.expiration,
                profile=profile,
                source_line=line.index,
            )
            if candidate is not None:
                candidates.append(candidate)

        candidates.extend(self.parse_orphan_offers(lines, roles, profile, consumed))
        return candidates

    def collect_block(
        self,
        lines: Sequence[ClassifiedLine],
        roles: Sequence[LineRole],
        start: int,
        consumed: set[int],
    ) -> Block | None:
        """Offer block under the merchant at start, or None without an anchor."""
        block: Block | None = None
        if lines[start].role is LineRole.AMBIGUOUS:
            # Merchant and offer share the line, e.g. "Turo $30"
            block = Block(anchor=start, end=start + 1, parts=[lines[start].text])
        else:
            limit = min(len(lines), start + 1 + config.OFFER_SEARCH_WINDOW)
            for pos in range(start + 1, limit):
                if pos in consumed:
                    break
                role = roles[pos]
                if role in (LineRole.NOISE, LineRole.UNCLASSIFIED):
                    continue
                if role is LineRole.OFFER:
                    block = Block(anchor=pos, end=pos + 1, parts=[lines[pos].text])
                    break
                if role is LineRole.EXPIRATION:
                    leading, expiration = split_expiration(lines[pos].text)
                    if leading and extract_value(leading):
                        return Block(anchor=pos, end=pos + 1, parts=[leading], expiration=expiration)
                break
            if block is None:
                return None

        self.extend_block(block, lines, roles, consumed)
        return block

    def extend_block(
        self,
        block: Block,
        lines: Sequence[ClassifiedLine],
        roles: Sequence[LineRole],
        consumed: set[int],
        stop_at_new_offer: bool = False,
    ) -> None:
        """
        Append continuation lines to block until an expiration line, a line
        of another role, or DESCRIPTION_LINE_CAP lines.

        With stop_at_new_offer, a line opening with a fresh reward phrase
        ends a block that already has a value.
        """
        pos = block.end
        while pos < len(lines) and pos not in consumed:
            role = roles[pos]
            text = lines[pos].text
            if role is LineRole.NOISE:
                pos += 1
                continue
            if role is LineRole.EXPIRATION:
                # Offer text before the date belongs to the description
                leading, block.expiration = split_expiration(text)
                if leading:
                    block.parts.append(leading)
                pos += 1
                break
            if role not in _CONTINUATION_ROLES or len(block.parts) >= config.DESCRIPTION_LINE_CAP:
                break
            if stop_at_new_offer and find_values(text) and extract_value(block.description):
                break
            block.parts.append(text)
            pos += 1
        block.end = pos

    def parse_orphan_offers(
        self,
        lines: Sequence[ClassifiedLine],
        roles: Sequence[LineRole],
        profile: IssuerProfile,
        consumed: set[int],
    ) -> list[PerkCandidate]:
        """
        Offer anchors no merchant claimed.

        Emitted only with a value; the merchant comes from the offer text
        itself ("... at Target") or is left empty.
        """
        candidates = []
        pos = 0
        while pos < len(lines):
            if pos in consumed or roles[pos] is not LineRole.OFFER:
                pos += 1
                continue
            block = Block(anchor=pos, end=pos + 1, parts=[lines[pos].text])
            self.extend_block(block, lines, roles, consumed, stop_at_new_offer=True)
            consumed.update(range(block.anchor, block.end))
            pos = block.end

            description = self.join_description(block.parts)
            if extract_value(description) is None:
                logger.debug("Unclaimed offer at line %d has no value; skipped", lines[block.anchor].index)
                continue
            candidate = self.build_candidate(
                merchant=self.inline_merchant(description, profile),
                description=description,
                expiration=block.expiration,
                profile=profile,
                source_line=lines[block.anchor].index,
            )
            if candidate is not None:
                candidates.append(candidate)
        return candidates

    def inline_merchant(self, description: str, profile: IssuerProfile) -> str:
        """Merchant named inside offer text, or ""."""
        mentions = find_known_merchants(description, profile)
        if mentions:
            return mentions[0].name
        match = _INLINE_MERCHANT.search(description)
        if match:
            name = clean_merchant_name(match.group("name"))
            if is_brand_shaped(name) and not contains_offer_vocabulary(name, profile):
                return correct_merchant(name, profile) or name
        return ""

    # ------------------------------------------------------------------
    # Shared offer lines
    # ------------------------------------------------------------------

    def find_offer_line(
        self,
        lines: Sequence[ClassifiedLine],
        pos: int,
        consumed: set[int],
    ) -> tuple[int, list[ValueMatch]] | None:
        """
        The reward-bearing line for the merchants at pos: the same line when
        it carries reward phrases, else the next one within SHARED_LINE_WINDOW.
        """
        same = find_values(lines[pos].text)
        if same:
            return pos, same
        limit = min(len(lines), pos + 1 + config.SHARED_LINE_WINDOW)
        for nxt in range(pos + 1, limit):
            if nxt in consumed:
                break
            line = lines[nxt]
            if line.is_noise:
                continue
            values = find_values(line.text)
            if values:
                return nxt, values
            if line.role is LineRole.MERCHANT:
                break
        return None

    def shared_line_expirations(
        self,
        lines: Sequence[ClassifiedLine],
        offer_pos: int,
        offers: Sequence[ValueMatch],
        consumed: set[int],
    ) -> tuple[list[str | None], int | None]:
        """
        Per-offer expirations from the expiration line right after the offer
        line, plus that line's position.

        One date per offer pairs positionally; otherwise a date goes to the
        offer whose start offset is the unique mutual nearest, and offers
        left over get no expiration.
        """
        expirations: list[str | None] = [None] * len(offers)
        for nxt in range(offer_pos + 1, len(lines)):
            if nxt in consumed:
                break
            line = lines[nxt]
            if line.is_noise:
                continue
            if line.role is not LineRole.EXPIRATION:
                break
            found = find_expirations(line.text)
            if not found:
                break
            if len(found) == len(offers):
                return [date for _, date in found], nxt

            offer_offsets = [offer.start for offer in offers]
            date_offsets = [start for start, _ in found]
            for i, (start, date) in enumerate(found):
                j = unique_nearest(start, offer_offsets)
                if j is not None and unique_nearest(offer_offsets[j], date_offsets) == i:
                    expirations[j] = date
            return expirations, nxt
        return expirations, None

    def emit_pairs(
        self,
        pairs: Sequence[tuple[MerchantMention, ValueMatch]],
        offers: Sequence[ValueMatch],
        expirations: Sequence[str | None],
        profile: IssuerProfile,
        source_line: int,
    ) -> list[PerkCandidate]:
        candidates = []
        for merchant, offer in pairs:
            expiration = expirations[offers.index(offer)]
            candidate = self.build_candidate(
                merchant=merchant.name,
                description=offer.text,
                expiration=expiration,
                profile=profile,
                source_line=source_line,
            )
            if candidate is not None:
                candidates.append(candidate)
        return candidates

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def build_candidate(
        self,
        merchant: str,
        description: str,
        expiration: str | None,
        profile: IssuerProfile,
        source_line: int | None,
    ) -> PerkCandidate | None:
        """A base-confidence candidate, or None without a merchant or a value."""
        description = self.join_description([description])
        value = extract_value(description)
        if not merchant and not value:
            logger.debug("Block at line %s has no merchant and no value; dropped", source_line)
            return None
        return PerkCandidate(
            merchant=merchant,
            description=description,
            value=value,
            expiration=expiration,
            confidence=config.CONFIDENCE_BASE,
            issuer=profile.key,
            source_line=source_line,
        )

    @staticmethod
    def in_reading_order(candidates: list[PerkCandidate]) -> list[PerkCandidate]:
        """Candidates sorted by anchoring line, stable within a line."""
        return sorted(
            candidates,
            key=lambda c: c.source_line if c.source_line is not None else -1,
        )
