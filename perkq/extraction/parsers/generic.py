"""
Generic fallback parser for screens from unregistered issuers.

There is no issuer dictionary to lean on, so merchants come from shape:
title-case or brand-shaped lines, or an inline "at <Brand>" inside the
offer text. A shared offer line is only split when it is unambiguous: one
brand word per merchant and an offer line holding nothing but one reward
phrase per merchant.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from perkq import config
from perkq.extraction.association import pair_by_position
from perkq.extraction.classifier import is_brand_shaped, merchant_name_part
from perkq.extraction.models import PerkCandidate
from perkq.extraction.normalizer import clean_merchant_name, correct_merchant
from perkq.extraction.parsers.base import BaseIssuerParser
from perkq.extraction.profiles import IssuerProfile
from perkq.extraction.types import ClassifiedLine, LayoutKind, LineRole, MerchantMention
from perkq.extraction.values import is_reward_only
from perkq.extraction.vocabulary import BRAND_TOKEN, MERCHANT_CONNECTORS
from perkq.observability.logging import get_logger

logger = get_logger(__name__)

_TOKEN = re.compile(r"\S+")


class GenericParser(BaseIssuerParser):
    layout = LayoutKind.GENERIC

    def parse(self, lines: Sequence[ClassifiedLine], profile: IssuerProfile) -> list[PerkCandidate]:
        consumed: set[int] = set()
        candidates = self.parse_shared_lines(lines, profile, consumed)
        candidates.extend(self.parse_blocks(lines, profile, consumed))
        return self.in_reading_order(candidates)

    def resolve_ambiguous(self, line: ClassifiedLine, profile: IssuerProfile) -> LineRole:
        """Without a dictionary, a brand-shaped name in front of a value is the merchant."""
        name = merchant_name_part(line.text)
        if name and (correct_merchant(name, profile) or is_brand_shaped(name)):
            return LineRole.MERCHANT
        return LineRole.OFFER

    def single_word_merchants(self, line: ClassifiedLine, profile: IssuerProfile) -> list[MerchantMention]:
        """One merchant per brand word, e.g. "Dyson Arlo"; [] for anything else."""
        if line.role is not LineRole.MERCHANT:
            return []
        tokens = list(_TOKEN.finditer(line.text))
        if not 2 <= len(tokens) <= config.MERCHANT_MAX_WORDS:
            return []
        mentions = []
        for token in tokens:
            word = token.group(0)
            if word.lower() in MERCHANT_CONNECTORS or not BRAND_TOKEN.match(word):
                return []
            name = correct_merchant(word, profile) or clean_merchant_name(word)
            if not name:
                return []
            mentions.append(MerchantMention(name=name, start=token.start()))
        return mentions

    def parse_shared_lines(
        self,
        lines: Sequence[ClassifiedLine],
        profile: IssuerProfile,
        consumed: set[int],
    ) -> list[PerkCandidate]:
        candidates: list[PerkCandidate] = []
        for pos, line in enumerate(lines):
            if pos in consumed:
                continue
            merchants = self.single_word_merchants(line, profile)
            if not merchants:
                continue
            found = self.find_offer_line(lines, pos, consumed)
            if found is None or found[0] == pos:
                continue
            offer_pos, offers = found
            if not is_reward_only(lines[offer_pos].text):
                continue
            pairs = pair_by_position(merchants, offers)
            if pairs is None:
                logger.debug(
                    "Line %d: %d brand words vs %d offers; left to block parsing",
                    line.index,
                    len(merchants),
                    len(offers),
                )
                continue

            expirations, expiration_pos = self.shared_line_expirations(lines, offer_pos, offers, consumed)
            consumed.update({pos, offer_pos})
            if expiration_pos is not None:
                consumed.add(expiration_pos)
            candidates.extend(self.emit_pairs(pairs, offers, expirations, profile, line.index))
        return candidates
