"""
Offer extraction engine: raw recognition text in, scored perk candidates out.

Pipeline:
    1. Split text into trimmed, non-empty lines
    2. Resolve the issuer (caller hint, else identifier scan, else generic)
    3. Clean and classify every line against the issuer profile
    4. Parse with the issuer's layout parser
    5. Score, deduplicate, apply the confidence floor

Each extract() call is a pure function of its text and the registry; the
only shared state touched is telemetry, which results never read.
"""

from __future__ import annotations

from functools import lru_cache

from perkq import config
from perkq.extraction.classifier import LineClassifier
from perkq.extraction.deduplicator import CandidateDeduplicator, score_candidate
from perkq.extraction.dispatcher import IssuerClassifier
from perkq.extraction.lines import split_lines
from perkq.extraction.models import ExtractionResult, PerkCandidate, RecognitionResult
from perkq.extraction.parsers import parser_for
from perkq.extraction.profiles import ProfileRegistry, default_registry
from perkq.extraction.types import IssuerKey
from perkq.observability.logging import get_logger
from perkq.observability.telemetry import counter, log_event, time_block

logger = get_logger(__name__)


class OfferExtractor:
    """
    Extract perk candidates from offer-screen text.

    Usage:
        extractor = OfferExtractor()
        perks = extractor.extract(ocr_text, issuer_hint="amex")
    """

    def __init__(
        self,
        registry: ProfileRegistry | None = None,
        min_confidence: float | None = None,
    ):
        self.registry = registry if registry is not None else default_registry()
        self.issuer_classifier = IssuerClassifier(self.registry)
        self.deduplicator = CandidateDeduplicator()
        self.min_confidence = (
            config.EXTRACTION_MIN_CONFIDENCE if min_confidence is None else min_confidence
        )

    def supported_issuers(self) -> list[IssuerKey]:
        """Registered issuers in registry order, generic excluded."""
        return self.registry.issuers()

    def resolve_issuer(self, text: str, issuer_hint: IssuerKey | str | None = None) -> IssuerKey:
        return self.issuer_classifier.resolve(text, issuer_hint)

    def extract(
        self,
        text: str,
        issuer_hint: IssuerKey | str | None = None,
    ) -> list[PerkCandidate]:
        """
        Perk candidates found in text, in reading order.

        Args:
            text: Raw recognition text for one screenshot.
            issuer_hint: Optional issuer key from the caller (e.g. the card the
                user picked). Unknown hints fall back to classification.

        Returns:
            Candidates with confidence in [0, 1]; [] when nothing usable is
            found. Never raises for bad input.
        """
        if not isinstance(text, str) or not text.strip():
            counter("extraction.empty_input")
            logger.warning(
                "Skipping extraction: unusable input (%s)",
                type(text).__name__ if not isinstance(text, str) else "blank text",
            )
            return []

        counter("extraction.runs")
        with time_block("extraction.latency"):
            issuer = self.resolve_issuer(text, issuer_hint)
            profile = self.registry.resolve(issuer)

            lines = split_lines(text)
            classified = LineClassifier(profile).classify_lines(lines)
            raw = parser_for(profile.layout).parse(classified, profile)

            scored = [score_candidate(candidate) for candidate in raw]
            unique = self.deduplicator.deduplicate(scored)
            perks = [p for p in unique if p.confidence >= self.min_confidence]

        dropped = len(scored) - len(unique)
        if dropped:
            counter("extraction.duplicates_dropped", dropped)
        counter("extraction.candidates", len(perks))
        log_event(
            "perk_extraction_complete",
            issuer=issuer.value,
            hinted=issuer_hint is not None,
            lines=len(lines),
            parsed=len(raw),
            duplicates=dropped,
            below_threshold=len(unique) - len(perks),
            perks=len(perks),
        )
        return perks

    def extract_recognition(
        self,
        result: RecognitionResult,
        issuer_hint: IssuerKey | str | None = None,
    ) -> ExtractionResult:
        """Extract from a recognition result, keeping its text and confidence."""
        text = result.text
        issuer = self.resolve_issuer(text, issuer_hint) if text.strip() else IssuerKey.GENERIC
        return ExtractionResult(
            text=text,
            issuer=issuer,
            perks=self.extract(text, issuer),
            recognition_confidence=result.confidence,
        )


@lru_cache(maxsize=1)
def default_extractor() -> OfferExtractor:
    """Process-wide extractor over default_registry()."""
    return OfferExtractor()


def extract(text: str, issuer_hint: IssuerKey | str | None = None) -> list[PerkCandidate]:
    return default_extractor().extract(text, issuer_hint)


def supported_issuers() -> list[IssuerKey]:
    return default_extractor().supported_issuers()
