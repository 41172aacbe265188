"""
Merchant to offer association for shared offer lines.

Two passes, tried in order:

1. pair_by_position: the Nth merchant takes the Nth offer, left to right.
   Only used when both sides have the same count (two or more).
2. pair_by_distance: each merchant takes the offer whose start offset is
   nearest its own. A pair is kept only when that offer is the unique
   nearest for the merchant and the merchant is the unique nearest for the
   offer. Anything else is dropped; a missing perk is better than a perk
   credited to the wrong merchant.

Offsets are character indexes within each token's own line.
"""

from __future__ import annotations

from collections.abc import Sequence

from perkq.extraction.types import MerchantMention, ValueMatch
from perkq.observability.logging import get_logger

logger = get_logger(__name__)

Pair = tuple[MerchantMention, ValueMatch]


def pair_by_position(
    merchants: Sequence[MerchantMention],
    offers: Sequence[ValueMatch],
) -> list[Pair] | None:
    """Positional pairs, or None when counts differ or fewer than two."""
    if len(merchants) < 2 or len(merchants) != len(offers):
        return None
    return list(zip(merchants, offers))


def unique_nearest(target: int, offsets: Sequence[int]) -> int | None:
    """Index of the offset nearest target, or None on a tie."""
    if not offsets:
        return None
    distances = [abs(offset - target) for offset in offsets]
    best = min(distances)
    if distances.count(best) > 1:
        return None
    return distances.index(best)


def pair_by_distance(
    merchants: Sequence[MerchantMention],
    offers: Sequence[ValueMatch],
) -> list[Pair]:
    """
    Mutual-nearest pairs by start offset, in merchant order.

    Merchants without a located offset cannot be measured and are skipped.
    """
    located = [m for m in merchants if m.start is not None]
    merchant_offsets = [m.start for m in located if m.start is not None]
    offer_offsets = [offer.start for offer in offers]

    pairs: list[Pair] = []
    for i, merchant in enumerate(located):
        j = unique_nearest(merchant_offsets[i], offer_offsets)
        if j is None:
            logger.debug("No unique nearest offer for %s, dropped", merchant.name)
            continue
        back = unique_nearest(offer_offsets[j], merchant_offsets)
        if back != i:
            logger.debug(
                "Offer %r is not mutually nearest to %s, dropped", offers[j].text, merchant.name
            )
            continue
        pairs.append((merchant, offers[j]))
    return pairs


def orders_conflict(
    merchants: Sequence[MerchantMention],
    offer_line_mentions: Sequence[MerchantMention],
) -> bool:
    """
    True when the offer line names two or more of the merchants in a
    different order than the merchant line does.
    """
    names = {m.name for m in merchants}
    on_offer_line = [m.name for m in offer_line_mentions if m.name in names]
    if len(on_offer_line) < 2:
        return False
    shared = set(on_offer_line)
    on_merchant_line = [m.name for m in merchants if m.name in shared]
    return on_offer_line != on_merchant_line


def associate(
    merchants: Sequence[MerchantMention],
    offers: Sequence[ValueMatch],
    offer_line_mentions: Sequence[MerchantMention] = (),
) -> list[Pair]:
    """
    Pair merchants with offers.

    Args:
        merchants: Merchants from the merchant line, left to right.
        offers: Reward phrases from the offer line, left to right.
        offer_line_mentions: Merchants also named on the offer line. When
            they disagree with the merchant line's order, positions on the
            offer line are the only trustworthy order and distance pairing is
            done against them.
    """
    if not merchants or not offers:
        return []

    if offer_line_mentions and orders_conflict(merchants, offer_line_mentions):
        logger.debug("Merchant order differs between lines; pairing by distance")
        names = {m.name for m in merchants}
        return pair_by_distance([m for m in offer_line_mentions if m.name in names], offers)

    pairs = pair_by_position(merchants, offers)
    if pairs is not None:
        return pairs

    logger.debug(
        "%d merchants vs %d offers; pairing by distance", len(merchants), len(offers)
    )
    return pair_by_distance(merchants, offers)
