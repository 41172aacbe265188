"""
Module: types
Purpose: Shared value types for the extraction pipeline.
Dependencies: None (stdlib only)

Leaf module imported by every stage (lines, classifier, parsers, engine).
Keeping these types dependency-free prevents circular imports between the
normalizer, the profile loader and the parsers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class IssuerKey(str, Enum):
    """Card issuer whose offer-screen layout drives parsing.

    Extends str so JSON dumps and config lookups use the raw value ("chase").
    """

    CHASE = "chase"
    AMEX = "amex"
    CITI = "citi"
    GENERIC = "generic"

    @classmethod
    def parse(cls, value: object) -> IssuerKey | None:
        """Return the key for a caller-supplied hint, or None if unrecognized."""
        if isinstance(value, IssuerKey):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return None
        return None


class LayoutKind(str, Enum):
    """Structural layout an issuer's screens produce after recognition."""

    BLOCK = "block"  # one merchant, multi-line offer + expiration under it
    SHARED_LINE = "shared_line"  # several merchants share one offer line
    GENERIC = "generic"


class LineRole(str, Enum):
    NOISE = "noise"
    MERCHANT = "merchant"
    OFFER = "offer"
    EXPIRATION = "expiration"
    AMBIGUOUS = "ambiguous"
    UNCLASSIFIED = "unclassified"


# ---------------------------------------------------------------------------
# Lines
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TextLine:
    """One trimmed, non-empty line of recognition text and its position."""

    index: int
    text: str


@dataclass(frozen=True)
class ClassifiedLine:
    """A line after OCR cleanup and role assignment."""

    line: TextLine
    text: str  # cleaned text; line.text keeps the original
    role: LineRole

    @property
    def index(self) -> int:
        return self.line.index

    @property
    def is_noise(self) -> bool:
        return self.role is LineRole.NOISE


# ---------------------------------------------------------------------------
# Token mentions (offsets are character indexes within one line)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MerchantMention:
    """A merchant name found in a line."""

    name: str
    start: int | None  # None when the name came from a pattern, not a located token


@dataclass(frozen=True)
class ValueMatch:
    """A reward phrase found in a line, e.g. "5% cash back"."""

    value: str  # normalized value, e.g. "5%"
    text: str  # full phrase as it appears
    start: int
    end: int
