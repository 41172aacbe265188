"""
Pytest configuration for PerkQ tests

Provides issuer profiles, recognition-text samples and a classify helper
shared across the unit, integration and contract suites
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from perkq.extraction.classifier import LineClassifier
from perkq.extraction.engine import OfferExtractor
from perkq.extraction.lines import split_lines
from perkq.extraction.profiles import IssuerProfile, ProfileRegistry, default_registry
from perkq.extraction.types import ClassifiedLine, IssuerKey
from perkq.observability import telemetry

OCR_SAMPLES = Path(__file__).parent / "fixtures" / "ocr"


@pytest.fixture(scope="session")
def registry() -> ProfileRegistry:
    """The packaged issuer profiles"""
    return default_registry()


@pytest.fixture(scope="session")
def amex_profile(registry) -> IssuerProfile:
    return registry[IssuerKey.AMEX]


@pytest.fixture(scope="session")
def chase_profile(registry) -> IssuerProfile:
    return registry[IssuerKey.CHASE]


@pytest.fixture(scope="session")
def citi_profile(registry) -> IssuerProfile:
    return registry[IssuerKey.CITI]


@pytest.fixture(scope="session")
def generic_profile(registry) -> IssuerProfile:
    return registry.generic


@pytest.fixture
def extractor(registry) -> OfferExtractor:
    """Extractor with no confidence floor, independent of PERKQ_MIN_CONFIDENCE"""
    return OfferExtractor(registry=registry, min_confidence=0.0)


@pytest.fixture(scope="session")
def ocr_sample() -> Callable[[str], str]:
    """Load a recorded recognition output from tests/fixtures/ocr by name"""

    def load(name: str) -> str:
        return (OCR_SAMPLES / f"{name}.txt").read_text(encoding="utf-8")

    return load


@pytest.fixture
def classify() -> Callable[[str, IssuerProfile], list[ClassifiedLine]]:
    """Split and classify text the way the engine does before parsing"""

    def run(text: str, profile: IssuerProfile) -> list[ClassifiedLine]:
        return LineClassifier(profile).classify_lines(split_lines(text))

    return run


@pytest.fixture(autouse=True)
def reset_telemetry():
    """Counters are process-wide; start every test from zero"""
    telemetry.reset()
    yield
    telemetry.reset()
