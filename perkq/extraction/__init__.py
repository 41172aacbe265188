"""
Offer extraction: recognition text -> PerkCandidate list.

Public surface:
    extract(text, issuer_hint=None) -> list[PerkCandidate]
    supported_issuers() -> list[IssuerKey]
    OfferExtractor for a custom registry or confidence floor
"""

from __future__ import annotations

from perkq.extraction.engine import OfferExtractor, extract, supported_issuers
from perkq.extraction.models import ExtractionResult, PerkCandidate, RecognitionResult
from perkq.extraction.profiles import (
    IssuerProfile,
    ProfileConfigError,
    ProfileRegistry,
    default_registry,
    load_profiles,
)
from perkq.extraction.types import IssuerKey, LayoutKind, LineRole

__all__ = [
    "ExtractionResult",
    "IssuerKey",
    "IssuerProfile",
    "LayoutKind",
    "LineRole",
    "OfferExtractor",
    "PerkCandidate",
    "ProfileConfigError",
    "ProfileRegistry",
    "RecognitionResult",
    "default_registry",
    "extract",
    "load_profiles",
    "supported_issuers",
]
