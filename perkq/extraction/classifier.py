"""
Line classifier: assigns each cleaned line a structural role.

Roles are decided in priority order: noise, then expiration, then merchant
and offer shape. A line with both shapes is AMBIGUOUS and left for the
issuer parser to settle; a line with neither is UNCLASSIFIED continuation
text. Classification reads nothing but the line and the issuer profile.
"""

from __future__ import annotations

import logging

from perkq import config
from perkq.extraction.normalizer import clean_line, correct_merchant
from perkq.extraction.profiles import IssuerProfile
from perkq.extraction.types import ClassifiedLine, LineRole, TextLine
from perkq.extraction.values import (
    contains_offer_vocabulary,
    has_value_shape,
    is_expiration_line,
    looks_like_offer,
    strip_values,
)
from perkq.extraction.vocabulary import (
    BRAND_TOKEN,
    MERCHANT_CONNECTORS,
    NEVER_NOISE,
    NOISE_PATTERNS,
    NON_MERCHANT_WORDS,
    UI_CAPTIONS,
    WORD_RUN,
)
from perkq.observability.logging import get_logger

logger = get_logger(__name__)


def merchant_name_part(text: str) -> str:
    """The part of a line left once value tokens are removed."""
    return strip_values(text).strip(" ,;:-")


def is_brand_shaped(name: str) -> bool:
    """
    Title-case or brand-shaped token sequence, e.g. "Cole Haan", "fuboTV", "Lands' End".

    The first token must be brand-shaped; later tokens may also be
    connectors ("&", "of", "and").
    """
    if not name or "," in name or "(" in name or ")" in name:
        return False
    words = name.split()
    if not words or len(words) > config.MERCHANT_MAX_WORDS:
        return False
    if not BRAND_TOKEN.match(words[0]):
        return False
    for word in words:
        lowered = word.lower()
        if lowered in NON_MERCHANT_WORDS:
            return False
        if not BRAND_TOKEN.match(word) and lowered not in MERCHANT_CONNECTORS:
            return False
    return bool(WORD_RUN.search(name))


class LineClassifier:
    """
    Classify lines for one issuer profile.

    Usage:
        classifier = LineClassifier(profile)
        classified = classifier.classify_lines(split_lines(text))
    """

    def __init__(self, profile: IssuerProfile):
        self.profile = profile

    def classify_lines(self, lines: list[TextLine]) -> list[ClassifiedLine]:
        """Clean and classify every line, keeping indexes (noise included)."""
        classified = []
        for line in lines:
            text = clean_line(line.text, self.profile)
            role = self.classify(text)
            classified.append(ClassifiedLine(line=line, text=text, role=role))
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Classified %d lines for %s: %s",
                len(classified),
                self.profile.key.value,
                ", ".join(f"{c.index}={c.role.value}" for c in classified),
            )
        return classified

    def classify(self, text: str) -> LineRole:
        """Role of one already-cleaned line."""
        if self.is_noise(text):
            return LineRole.NOISE
        if is_expiration_line(text):
            return LineRole.EXPIRATION

        merchant = self.looks_like_merchant(text)
        offer = looks_like_offer(text, self.profile)
        if merchant and offer:
            return LineRole.AMBIGUOUS
        if merchant:
            return LineRole.MERCHANT
        if offer:
            return LineRole.OFFER
        return LineRole.UNCLASSIFIED

    def is_noise(self, text: str) -> bool:
        if len(text) < config.MIN_LINE_CHARS:
            return True
        if NEVER_NOISE.search(text):
            return False

        lowered = text.lower()
        if lowered in UI_CAPTIONS or lowered in self.profile.noise_phrases:
            return True
        if any(pattern.search(text) for pattern in NOISE_PATTERNS):
            return True
        if any(pattern.search(text) for pattern in self.profile.noise_patterns):
            return True
        return not WORD_RUN.search(text) and not has_value_shape(text)

    def looks_like_merchant(self, text: str) -> bool:
        """Short, no offer vocabulary, and a known or brand-shaped name."""
        if len(text) > config.MERCHANT_MAX_CHARS:
            return False
        if contains_offer_vocabulary(text, self.profile):
            return False
        name = merchant_name_part(text)
        if not name:
            return False
        if correct_merchant(name, self.profile):
            return True
        return is_brand_shaped(name)
