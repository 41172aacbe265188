"""
Scores candidates and removes equivalent ones.

Scoring is additive and capped: a fixed bonus for a real merchant, for a
value and for a substantive description. Deduplication keeps the first-seen
candidate of every equivalence class, so issuer-specific results that come
out of a parser first win over later heuristic ones.

Key: CandidateDeduplicator.deduplicate() walks candidates in order and drops
any candidate equivalent to one already kept.
"""

from __future__ import annotations

from collections.abc import Iterable

from perkq import config
from perkq.extraction.models import PerkCandidate
from perkq.observability.logging import get_logger

logger = get_logger(__name__)


def _normalize(value: str | None) -> str:
    """Comparable form of a text field."""
    if not value:
        return ""
    return " ".join(value.split()).lower()


def has_real_merchant(candidate: PerkCandidate) -> bool:
    return _normalize(candidate.merchant) not in config.PLACEHOLDER_MERCHANTS


def score_candidate(candidate: PerkCandidate) -> PerkCandidate:
    """
    Copy of candidate with its evidence bonuses added to its confidence.

    Confidence never decreases and never exceeds CONFIDENCE_MAX.
    """
    bonus = 0.0
    if has_real_merchant(candidate):
        bonus += config.CONFIDENCE_MERCHANT_BONUS
    if candidate.value:
        bonus += config.CONFIDENCE_VALUE_BONUS
    if len(candidate.description) > config.CONFIDENCE_DESCRIPTION_MIN_CHARS:
        bonus += config.CONFIDENCE_DESCRIPTION_BONUS

    # Rounded so 0.5 + 0.2 + 0.2 + 0.1 lands on 1.0, not 0.9999999999999999
    confidence = round(min(config.CONFIDENCE_MAX, candidate.confidence + bonus), 4)
    confidence = max(confidence, candidate.confidence)
    return candidate.model_copy(update={"confidence": confidence})


def _distinct_merchants(a: PerkCandidate, b: PerkCandidate) -> bool:
    """Both name a real merchant, and not the same one."""
    return (
        has_real_merchant(a)
        and has_real_merchant(b)
        and _normalize(a.merchant) != _normalize(b.merchant)
    )


def _descriptions_overlap(a: PerkCandidate, b: PerkCandidate) -> bool:
    """
    Identical descriptions, or a shared leading prefix of
    min(DEDUP_MIN_PREFIX_CHARS, shorter length) characters where the shorter
    one is at least DEDUP_MIN_OVERLAP_CHARS long.
    """
    desc_a, desc_b = _normalize(a.description), _normalize(b.description)
    if desc_a == desc_b:
        return True
    n = min(config.DEDUP_MIN_PREFIX_CHARS, len(desc_a), len(desc_b))
    return n >= config.DEDUP_MIN_OVERLAP_CHARS and desc_a[:n] == desc_b[:n]


def are_equivalent(a: PerkCandidate, b: PerkCandidate) -> bool:
    """
    Same merchant (case-insensitive, both real), or the same value with
    overlapping descriptions.

    Two different real merchants are never merged on value and description
    alone: "Dyson 5% cash back" and "Lands' End 5% cash back" stay apart.
    """
    if has_real_merchant(a) and _normalize(a.merchant) == _normalize(b.merchant):
        return True

    if a.value and a.value == b.value and not _distinct_merchants(a, b):
        return _descriptions_overlap(a, b)

    return False


class CandidateDeduplicator:
    """Stable, first-seen-wins deduplication."""

    def deduplicate(self, candidates: Iterable[PerkCandidate]) -> list[PerkCandidate]:
        """
        Drop every candidate equivalent to an earlier one.

        Side Effects:
            None (returns a new list)
        """
        kept: list[PerkCandidate] = []
        for candidate in candidates:
            duplicate_of = next((k for k in kept if are_equivalent(k, candidate)), None)
            if duplicate_of is not None:
                logger.debug(
                    "Dropping duplicate %r (matches %r)",
                    candidate.merchant or candidate.value,
                    duplicate_of.merchant or duplicate_of.value,
                )
                continue
            kept.append(candidate)
        return kept
