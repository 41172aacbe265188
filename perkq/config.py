"""Centralized configuration for the PerkQ extraction engine.

Typed constants for scoring, fuzzy matching, layout windows and profile
loading. Environment variable overrides (PERKQ_*) use safe defaults so the
engine works without any env configuration; a local .env file is honoured
but never overrides variables already set in the process environment.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv(override=False)


# --- Profiles ---
# Alternate issuer profile YAML; empty means the packaged issuer_profiles.yaml
ISSUER_PROFILES_PATH: str = os.getenv("PERKQ_ISSUER_PROFILES", "")

# --- Scoring ---
CONFIDENCE_BASE: float = 0.5
CONFIDENCE_MERCHANT_BONUS: float = 0.2
CONFIDENCE_VALUE_BONUS: float = 0.2
CONFIDENCE_DESCRIPTION_BONUS: float = 0.1
CONFIDENCE_DESCRIPTION_MIN_CHARS: int = 10
CONFIDENCE_MAX: float = 1.0
EXTRACTION_MIN_CONFIDENCE: float = float(os.getenv("PERKQ_MIN_CONFIDENCE", "0.0"))

# Merchant strings that carry no information
PLACEHOLDER_MERCHANTS: frozenset[str] = frozenset({"", "unknown", "unknown merchant", "n/a"})

# --- Deduplication ---
DEDUP_MIN_PREFIX_CHARS: int = 20
# Shortest description a prefix overlap may rest on
DEDUP_MIN_OVERLAP_CHARS: int = 8

# --- Fuzzy merchant correction ---
FUZZY_MATCH_THRESHOLD: float = float(os.getenv("PERKQ_FUZZY_THRESHOLD", "0.8"))
FUZZY_MAX_LENGTH_DELTA: int = 2

# --- Line shapes ---
MERCHANT_MAX_CHARS: int = 40
MERCHANT_MAX_WORDS: int = 5
MIN_LINE_CHARS: int = 2

# --- Layout windows (line-index distances) ---
OFFER_SEARCH_WINDOW: int = 5
DESCRIPTION_LINE_CAP: int = 4
SHARED_LINE_WINDOW: int = 2
