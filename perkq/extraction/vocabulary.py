"""
Module: vocabulary
Purpose: Issuer-independent keyword and pattern constants for line classification.
Dependencies: None (pure data, stdlib re only)

Separates classification policy data from the classifier logic. Issuer-specific
vocabularies live in issuer_profiles.yaml; edit this file for words that mean
the same thing on every issuer's screen.
"""

from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Offer vocabulary: any of these words makes a line offer-shaped and rules it
# out as a merchant name
# ---------------------------------------------------------------------------

OFFER_VOCABULARY: frozenset[str] = frozenset(
    {
        "earn",
        "spend",
        "get",
        "back",
        "cash",
        "cashback",
        "points",
        "pts",
        "miles",
        "credit",
        "bonus",
        "purchase",
        "statement",
        "off",
        "save",
        "total",
        "times",
    }
)

# ---------------------------------------------------------------------------
# UI captions that are navigation on every issuer's screens (whole line)
# ---------------------------------------------------------------------------

UI_CAPTIONS: frozenset[str] = frozenset(
    {
        "new",
        "all",
        "see all",
        "view all",
        "show more",
        "load more",
        "menu",
        "search",
        "filter",
        "sort",
        "done",
        "cancel",
        "close",
        "sign in",
        "log in",
        "add to card",
        "added",
        "activate",
        "activated",
        "enroll",
        "enrolled",
        "terms apply",
        "details",
    }
)

# ---------------------------------------------------------------------------
# Generic noise patterns
# ---------------------------------------------------------------------------

NOISE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^\d{1,2}:\d{2}"),  # status-bar clock "4:36"
    re.compile(r"^[^A-Za-z0-9]+$"),  # symbols only
    re.compile(r"^\d+$"),  # standalone counters like "3"
    re.compile(r"^[A-Za-z]$"),  # single letters like "Q"
    re.compile(r"(?i)^ocr\s*confidence\s*:"),  # recognition metadata
)

# Lines carrying money or an offer verb are never navigation
NEVER_NOISE = re.compile(r"\$\d|\d\s*%|\b(?:earn|spend)\b", re.IGNORECASE)

# A content line has at least one run of three letters
WORD_RUN = re.compile(r"[A-Za-z]{3,}")

# ---------------------------------------------------------------------------
# Merchant-shape helpers
# ---------------------------------------------------------------------------

# Lowercase connectors allowed inside a title-cased merchant name
MERCHANT_CONNECTORS: frozenset[str] = frozenset(
    {"&", "+", "-", "and", "of", "the", "de", "la", "el", "by", "at"}
)

# A brand-shaped token: capitalized word, all-caps word, or camel-case brand
BRAND_TOKEN = re.compile(r"^(?:[A-Z][A-Za-z'.+&-]*|[A-Z0-9][A-Z0-9'.+&-]*|[a-z]+[A-Z][A-Za-z]*)$")

# Words that look like brands but never are
NON_MERCHANT_WORDS: frozenset[str] = frozenset(
    {"expires", "expired", "valid", "offer", "offers", "new", "all", "terms", "details", "apply"}
)
