"""Tests for issuer profile loading and the profile registry."""

from __future__ import annotations

import dataclasses
import textwrap

import pytest

from perkq import config
from perkq.extraction.profiles import ProfileConfigError, load_profiles
from perkq.extraction.types import IssuerKey, LayoutKind

MINIMAL = """
issuers:
  - key: chase
    layout: shared_line
    identifiers: [Chase]
    merchants:
      Turo: [turo, tur0]
  - key: generic
    layout: generic
"""


def _write(tmp_path, body: str):
    path = tmp_path / "profiles.yaml"
    path.write_text(textwrap.dedent(body), encoding="utf-8")
    return path


# =============================================================================
# Packaged profiles
# =============================================================================


class TestPackagedRegistry:
    def test_registry_order(self, registry):
        assert list(registry) == [IssuerKey.CHASE, IssuerKey.AMEX, IssuerKey.CITI, IssuerKey.GENERIC]

    def test_issuers_exclude_generic(self, registry):
        assert registry.issuers() == [IssuerKey.CHASE, IssuerKey.AMEX, IssuerKey.CITI]

    def test_layouts(self, registry):
        assert registry[IssuerKey.CHASE].layout is LayoutKind.SHARED_LINE
        assert registry[IssuerKey.AMEX].layout is LayoutKind.BLOCK
        assert registry[IssuerKey.CITI].layout is LayoutKind.BLOCK
        assert registry.generic.layout is LayoutKind.GENERIC

    def test_read_only(self, registry, amex_profile):
        with pytest.raises(TypeError):
            registry[IssuerKey.AMEX] = amex_profile  # type: ignore[index]
        with pytest.raises(dataclasses.FrozenInstanceError):
            amex_profile.name = "Other"  # type: ignore[misc]

    def test_alias_index_longest_first(self, amex_profile):
        lengths = [len(alias) for alias, _ in amex_profile.alias_index]
        assert lengths == sorted(lengths, reverse=True)

    def test_canonical_for_alias(self, amex_profile):
        assert amex_profile.canonical_for_alias(" NORDSTROM RACK ") == "Nordstrom & Nordstrom Rack"
        assert amex_profile.canonical_for_alias("Peacock") == "Peacock"
        assert amex_profile.canonical_for_alias("Turo") is None

    def test_multi_merchant_patterns_compiled(self, chase_profile):
        first = chase_profile.multi_merchant_patterns[0]
        assert first.merchants == ("fuboTV", "Event Tickets Center", "Turo")
        assert first.pattern.search("fubo 57 event tickets 38 turo")


# =============================================================================
# load_profiles
# =============================================================================


class TestLoadProfiles:
    def test_minimal_file(self, tmp_path):
        registry = load_profiles(_write(tmp_path, MINIMAL))
        assert list(registry) == [IssuerKey.CHASE, IssuerKey.GENERIC]
        chase = registry[IssuerKey.CHASE]
        assert chase.name == "chase"
        assert chase.identifiers == ("chase",)
        assert chase.canonical_for_alias("tur0") == "Turo"

    def test_resolve_falls_back_to_generic(self, tmp_path):
        registry = load_profiles(_write(tmp_path, MINIMAL))
        assert registry.resolve(IssuerKey.AMEX) is registry.generic
        assert registry.resolve(IssuerKey.CHASE) is registry[IssuerKey.CHASE]

    def test_path_from_config(self, tmp_path, monkeypatch):
        monkeypatch.setattr(config, "ISSUER_PROFILES_PATH", str(_write(tmp_path, MINIMAL)))
        assert load_profiles().issuers() == [IssuerKey.CHASE]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ProfileConfigError, match="not found"):
            load_profiles(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ProfileConfigError, match="not valid YAML"):
            load_profiles(_write(tmp_path, "issuers: [\n"))

    def test_no_issuers_list(self, tmp_path):
        with pytest.raises(ProfileConfigError, match="'issuers' list"):
            load_profiles(_write(tmp_path, "profiles: {}\n"))

    def test_generic_required(self, tmp_path):
        body = """
        issuers:
          - key: amex
            layout: block
        """
        with pytest.raises(ProfileConfigError, match="generic"):
            load_profiles(_write(tmp_path, body))

    def test_duplicate_issuer(self, tmp_path):
        body = MINIMAL + "  - key: chase\n    layout: block\n"
        with pytest.raises(ProfileConfigError, match="Duplicate"):
            load_profiles(_write(tmp_path, body))

    @pytest.mark.parametrize(
        "entry",
        [
            "  - key: discover\n    layout: block\n",
            "  - key: amex\n    layout: carousel\n",
            "  - key: amex\n    noise_patterns: ['(']\n",
            "  - key: amex\n    substitutions: [[a]]\n",
        ],
        ids=["unknown-issuer", "unknown-layout", "bad-regex", "bad-substitution"],
    )
    def test_malformed_entry(self, tmp_path, entry):
        with pytest.raises(ProfileConfigError):
            load_profiles(_write(tmp_path, MINIMAL + entry))

    def test_multi_merchant_pattern_names_known_merchants(self, tmp_path):
        body = MINIMAL.replace(
            "      Turo: [turo, tur0]\n",
            "      Turo: [turo, tur0]\n"
            "    multi_merchant_patterns:\n"
            "      - pattern: 'turo.*dyson'\n"
            "        merchants: [Turo, Dyson]\n",
        )
        with pytest.raises(ProfileConfigError, match="unknown merchants"):
            load_profiles(_write(tmp_path, body))
