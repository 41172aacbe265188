"""Tests for issuer classification and hint resolution."""

from __future__ import annotations

import logging

import pytest

from perkq.extraction.dispatcher import IssuerClassifier
from perkq.extraction.types import IssuerKey


@pytest.fixture
def issuers(registry):
    return IssuerClassifier(registry)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("4:36\nChase Offers\nTuro", IssuerKey.CHASE),
        ("AMEX OFFERS\nShake Shack", IssuerKey.AMEX),
        ("Earn 2,500 Membership Rewards points", IssuerKey.AMEX),
        ("Citi ThankYou rewards", IssuerKey.CITI),
        ("Earn 5% back on your next purchase", IssuerKey.GENERIC),
        ("", IssuerKey.GENERIC),
    ],
)
def test_classify(issuers, text, expected):
    assert issuers.classify(text) is expected


def test_identifiers_are_word_bounded(issuers):
    # "purchase" contains "chase"; "citizen" contains "citi"
    assert issuers.classify("purchase from a citizen") is IssuerKey.GENERIC


def test_first_registered_issuer_wins(issuers):
    # Chase is registered before Amex
    assert issuers.classify("Chase Sapphire\nAmerican Express") is IssuerKey.CHASE


def test_hint_overrides_text(issuers):
    assert issuers.resolve("Chase Offers", IssuerKey.CITI) is IssuerKey.CITI
    assert issuers.resolve("Chase Offers", " AMEX ") is IssuerKey.AMEX


def test_generic_hint_is_honoured(issuers):
    assert issuers.resolve("Chase Offers", "generic") is IssuerKey.GENERIC


@pytest.mark.parametrize("hint", ["discover", 42])
def test_unknown_hint_falls_back_to_classification(issuers, caplog, hint):
    with caplog.at_level(logging.WARNING, logger="perkq"):
        assert issuers.resolve("Chase Offers", hint) is IssuerKey.CHASE
    assert "Ignoring unknown issuer hint" in caplog.text


def test_no_hint_classifies(issuers):
    assert issuers.resolve("American Express") is IssuerKey.AMEX
