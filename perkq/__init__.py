"""PerkQ - turn credit-card offer screenshots into reviewable perk candidates"""

from __future__ import annotations

__version__ = "0.1.0"


# Lazy imports so "import perkq.config" does not load the profile registry
def __getattr__(name: str):
    """
    Lazy imports to avoid loading profiles and parsers when only importing lightweight modules.
    """
    if name in ("extract", "supported_issuers", "OfferExtractor"):
        from perkq.extraction import engine

        if name == "extract":
            return engine.extract
        if name == "supported_issuers":
            return engine.supported_issuers
        if name == "OfferExtractor":
            return engine.OfferExtractor

    if name in ("PerkCandidate", "RecognitionResult", "ExtractionResult"):
        from perkq.extraction import models

        return getattr(models, name)

    if name == "IssuerKey":
        from perkq.extraction.types import IssuerKey

        return IssuerKey

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "ExtractionResult",
    "IssuerKey",
    "OfferExtractor",
    "PerkCandidate",
    "RecognitionResult",
    "extract",
    "supported_issuers",
]
