"""
OCR-error normalizer.

Two jobs: scrub recognition artifacts out of a line before any pattern
matching, and map a noisy merchant token onto the issuer's merchant
dictionary. Dictionary correction is a bounded positional character match,
never an edit-distance search, so every correction can be explained by
pointing at the characters that matched.
"""

from __future__ import annotations

import re

from perkq import config
from perkq.extraction.profiles import IssuerProfile
from perkq.extraction.types import MerchantMention

# Brackets, pipes, stray "=" and the (c)/(r)/(tm) glyphs recognition invents
_STRAY_SYMBOLS = re.compile(r"[=\[\]{}|©®™«»]")

# Swipe-arrow chrome read as text, e.g. "c——>" or "-->"
_ARROW_ARTIFACT = re.compile(r"(?<![A-Za-z])c?[—–-]{2,}>?|[—–]+>")

# Two-letter capitals left behind by card badges at the end of a line
_TRAILING_ARTIFACT = re.compile(r"\s+(?:AF|AL)$")

# "$" or "$12." cut off by the edge of the screenshot
_TRUNCATED_CURRENCY = re.compile(r"\s*\$(?:\d+\.)?$")

# A brand glued to a stray digit, e.g. "Walmart+2"
_COMPOUND_ARTIFACT = re.compile(r"\b[A-Za-z]+\+\d\b")

_WHITESPACE = re.compile(r"\s+")
_LEADING_SEPARATORS = re.compile(r"^[\s\-–—:•·*>]+")
_TRAILING_SEPARATORS = re.compile(r"[\s\-–—:•·]+$")

_MERCHANT_DISALLOWED = re.compile(r"[^\w\s'&.+-]")
_ELLIPSIS = re.compile(r"(?:\.{2,}|…)+")
_MERCHANT_TRAILING = re.compile(r"[\s.&-]+$")


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def clean_ocr_text(text: str) -> str:
    """
    Remove recognition artifacts from one line.

    Order is fixed: stray symbols and arrows, trailing badge suffixes,
    truncated currency, whitespace, then glued brand+digit artifacts.
    """
    if not text:
        return ""
    cleaned = _STRAY_SYMBOLS.sub(" ", text)
    cleaned = _ARROW_ARTIFACT.sub(" ", cleaned)
    cleaned = cleaned.rstrip()
    cleaned = _TRAILING_ARTIFACT.sub("", cleaned)
    cleaned = _TRUNCATED_CURRENCY.sub("", cleaned)
    cleaned = collapse_whitespace(cleaned)
    cleaned = _COMPOUND_ARTIFACT.sub("", cleaned)
    cleaned = collapse_whitespace(cleaned)
    cleaned = _LEADING_SEPARATORS.sub("", cleaned)
    return _TRAILING_SEPARATORS.sub("", cleaned)


def clean_line(text: str, profile: IssuerProfile) -> str:
    """Strip the issuer's artifact patterns, then the generic artifacts."""
    for pattern in profile.artifact_patterns:
        text = pattern.sub("", text)
    return clean_ocr_text(text)


def clean_merchant_name(text: str) -> str:
    name = _ELLIPSIS.sub("", text)
    name = _MERCHANT_DISALLOWED.sub("", name)
    name = collapse_whitespace(name)
    return _MERCHANT_TRAILING.sub("", name)


# ---------------------------------------------------------------------------
# Dictionary correction
# ---------------------------------------------------------------------------


def similarity(a: str, b: str) -> float:
    """
    Positional character-match ratio, case-insensitive.

    Counts characters equal at the same index and divides by the longer
    length. Strings whose lengths differ by more than FUZZY_MAX_LENGTH_DELTA
    score 0.0.
    """
    a, b = a.lower(), b.lower()
    if not a or not b:
        return 0.0
    if abs(len(a) - len(b)) > config.FUZZY_MAX_LENGTH_DELTA:
        return 0.0
    matches = sum(1 for x, y in zip(a, b) if x == y)
    return matches / max(len(a), len(b))


def apply_substitutions(token: str, profile: IssuerProfile) -> str:
    """Apply the profile's OCR substitution rules in order."""
    result = token.lower()
    for source, target in profile.substitutions:
        result = result.replace(source, target)
    return result


def correct_merchant(
    token: str,
    profile: IssuerProfile,
    threshold: float | None = None,
) -> str | None:
    """
    Canonical merchant name for token, or None.

    Tries an exact alias, then the alias after substitution rules, then the
    best fuzzy alias at or above the threshold. Ties keep dictionary order.
    """
    if threshold is None:
        threshold = config.FUZZY_MATCH_THRESHOLD

    candidate = clean_merchant_name(token).lower()
    if not candidate:
        return None

    exact = profile.canonical_for_alias(candidate)
    if exact:
        return exact

    substituted = apply_substitutions(candidate, profile)
    if substituted != candidate:
        exact = profile.canonical_for_alias(substituted)
        if exact:
            return exact

    best: str | None = None
    best_score = 0.0
    for canonical, aliases in profile.merchants.items():
        for alias in (canonical.lower(), *aliases):
            score = max(similarity(candidate, alias), similarity(substituted, alias))
            if score > best_score:
                best, best_score = canonical, score

    if best is not None and best_score >= threshold:
        return best
    return None


def find_known_merchants(line: str, profile: IssuerProfile) -> list[MerchantMention]:
    """
    Dictionary merchants named in line, left to right.

    Aliases are matched on word boundaries, longest first, without
    overlapping an earlier match. Each canonical merchant is reported once,
    at its first non-overlapping occurrence.
    """
    lowered = line.lower()
    taken: list[tuple[int, int]] = []
    found: dict[str, MerchantMention] = {}

    for alias, canonical in profile.alias_index:
        if canonical in found:
            continue
        pattern = r"(?<![a-z0-9])" + re.escape(alias) + r"(?![a-z0-9])"
        for match in re.finditer(pattern, lowered):
            start, end = match.span()
            if any(start < t_end and t_start < end for t_start, t_end in taken):
                continue
            taken.append((start, end))
            found[canonical] = MerchantMention(name=canonical, start=start)
            break

    return sorted(found.values(), key=lambda mention: mention.start or 0)
