from __future__ import annotations

import pytest
from pydantic import ValidationError

from perkq.extraction.models import ExtractionResult, PerkCandidate, RecognitionResult
from perkq.extraction.types import IssuerKey


def _perk(**overrides) -> PerkCandidate:
    data = {
        "merchant": "Shake Shack",
        "description": "Earn 20% back on a single purchase",
        "value": "20%",
        "expiration": "11/12/25",
        "confidence": 0.5,
        "issuer": "amex",
        "source_line": 11,
    }
    data.update(overrides)
    return PerkCandidate.model_validate(data)


def test_perk_candidate_happy_path():
    perk = _perk()
    assert perk.issuer is IssuerKey.AMEX
    assert perk.model_dump(mode="json") == {
        "merchant": "Shake Shack",
        "description": "Earn 20% back on a single purchase",
        "value": "20%",
        "expiration": "11/12/25",
        "confidence": 0.5,
        "issuer": "amex",
        "source_line": 11,
    }


@pytest.mark.parametrize("confidence", [-0.01, 1.01])
def test_perk_candidate_confidence_bounds(confidence):
    with pytest.raises(ValidationError):
        _perk(confidence=confidence)


def test_perk_candidate_needs_merchant_or_value():
    with pytest.raises(ValidationError, match="merchant or a value"):
        _perk(merchant="  ", value=None)

    assert _perk(merchant="", value="$5").merchant == ""
    assert _perk(value=None).value is None


def test_perk_candidate_normalizes_text():
    perk = _perk(merchant="  Peacock ", description=None, value=" ", expiration="")
    assert perk.merchant == "Peacock"
    assert perk.description == ""
    assert perk.value is None
    assert perk.expiration is None


def test_perk_candidate_is_frozen():
    perk = _perk()
    with pytest.raises(ValidationError):
        perk.confidence = 1.0  # type: ignore[misc]

    raised = perk.model_copy(update={"confidence": 1.0})
    assert raised.confidence == 1.0
    assert perk.confidence == 0.5


def test_perk_candidate_rejects_unknown_issuer():
    with pytest.raises(ValidationError):
        _perk(issuer="discover")


def test_recognition_result_defaults_and_bounds():
    assert RecognitionResult() == RecognitionResult(text="", confidence=0.0)
    with pytest.raises(ValidationError):
        RecognitionResult(text="x", confidence=1.5)


def test_extraction_result_round_trip():
    result = ExtractionResult(text="Shake Shack", issuer=IssuerKey.AMEX, perks=[_perk()])
    restored = ExtractionResult.model_validate_json(result.model_dump_json())
    assert restored == result
    assert restored.recognition_confidence is None
