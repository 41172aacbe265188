"""
Issuer profiles: per-issuer dictionaries, noise vocabularies and layout patterns.

Profiles are read once from issuer_profiles.yaml into frozen dataclasses and
held in an ordered, read-only ProfileRegistry. Parsing code receives the
resolved profile explicitly; nothing reads profile data from module globals
except default_registry(), which is the process-wide cached instance.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from perkq import config
from perkq.extraction.types import IssuerKey, LayoutKind
from perkq.observability.logging import get_logger

logger = get_logger(__name__)

DEFAULT_PROFILES_PATH = Path(__file__).parent / "issuer_profiles.yaml"


class ProfileConfigError(ValueError):
    """Raised when an issuer profile file is missing or malformed."""


@dataclass(frozen=True)
class MultiMerchantPattern:
    """A known line shape that names several merchants, in display order."""

    pattern: re.Pattern[str]
    merchants: tuple[str, ...]


@dataclass(frozen=True)
class IssuerProfile:
    key: IssuerKey
    name: str
    layout: LayoutKind
    identifiers: tuple[str, ...] = ()
    merchants: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    substitutions: tuple[tuple[str, str], ...] = ()
    noise_phrases: frozenset[str] = frozenset()
    noise_patterns: tuple[re.Pattern[str], ...] = ()
    artifact_patterns: tuple[re.Pattern[str], ...] = ()
    offer_keywords: frozenset[str] = frozenset()
    offer_patterns: tuple[re.Pattern[str], ...] = ()
    multi_merchant_patterns: tuple[MultiMerchantPattern, ...] = ()
    # (alias, canonical) pairs, longest alias first; derived in __post_init__
    alias_index: tuple[tuple[str, str], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        pairs: list[tuple[str, str]] = []
        for canonical, aliases in self.merchants.items():
            seen = {canonical.lower()}
            pairs.append((canonical.lower(), canonical))
            for alias in aliases:
                if alias not in seen:
                    seen.add(alias)
                    pairs.append((alias, canonical))
        # Stable sort keeps dictionary order among equal lengths
        pairs.sort(key=lambda pair: -len(pair[0]))
        object.__setattr__(self, "alias_index", tuple(pairs))

    @property
    def merchant_names(self) -> tuple[str, ...]:
        return tuple(self.merchants)

    def canonical_for_alias(self, alias: str) -> str | None:
        """Exact (case-insensitive) alias lookup."""
        needle = alias.strip().lower()
        for known, canonical in self.alias_index:
            if known == needle:
                return canonical
        return None


class ProfileRegistry(Mapping[IssuerKey, IssuerProfile]):
    """
    Ordered, immutable mapping of issuer key to profile.

    Iteration order is the order of the source file and is the order issuer
    classification tries identifiers in. A generic profile is always present.
    """

    def __init__(self, profiles: Iterable[IssuerProfile]):
        ordered: dict[IssuerKey, IssuerProfile] = {}
        for profile in profiles:
            if profile.key in ordered:
                raise ProfileConfigError(f"Duplicate issuer profile: {profile.key.value}")
            ordered[profile.key] = profile
        if IssuerKey.GENERIC not in ordered:
            raise ProfileConfigError("Issuer profiles must include a generic profile")
        self._profiles = MappingProxyType(ordered)

    def __getitem__(self, key: IssuerKey) -> IssuerProfile:
        return self._profiles[key]

    def __iter__(self) -> Iterator[IssuerKey]:
        return iter(self._profiles)

    def __len__(self) -> int:
        return len(self._profiles)

    @property
    def generic(self) -> IssuerProfile:
        return self._profiles[IssuerKey.GENERIC]

    def issuers(self) -> list[IssuerKey]:
        """Registered issuer keys, excluding the generic fallback."""
        return [key for key in self._profiles if key is not IssuerKey.GENERIC]

    def resolve(self, key: IssuerKey) -> IssuerProfile:
        """Profile for key, or the generic profile when key is not registered."""
        return self._profiles.get(key, self.generic)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def _compile_all(patterns: Iterable[str], where: str) -> tuple[re.Pattern[str], ...]:
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern))
        except re.error as e:
            raise ProfileConfigError(f"{where}: invalid pattern {pattern!r}: {e}") from e
    return tuple(compiled)


def _build_profile(raw: Mapping[str, Any]) -> IssuerProfile:
    try:
        key = IssuerKey(str(raw["key"]).lower())
        layout = LayoutKind(str(raw.get("layout", "generic")).lower())
    except (KeyError, ValueError) as e:
        raise ProfileConfigError(f"Invalid issuer entry {raw!r}: {e}") from e

    where = f"issuer {key.value}"
    merchants = {
        str(canonical): tuple(str(alias).lower() for alias in (aliases or []))
        for canonical, aliases in (raw.get("merchants") or {}).items()
    }

    substitutions = []
    for rule in raw.get("substitutions") or []:
        if not isinstance(rule, list | tuple) or len(rule) != 2:
            raise ProfileConfigError(f"{where}: substitution must be a [from, to] pair, got {rule!r}")
        substitutions.append((str(rule[0]).lower(), str(rule[1]).lower()))

    multi = []
    for entry in raw.get("multi_merchant_patterns") or []:
        (pattern,) = _compile_all([entry["pattern"]], where)
        names = tuple(str(name) for name in entry.get("merchants") or [])
        unknown = [name for name in names if name not in merchants]
        if unknown:
            raise ProfileConfigError(f"{where}: multi-merchant pattern names unknown merchants {unknown}")
        multi.append(MultiMerchantPattern(pattern=pattern, merchants=names))

    return IssuerProfile(
        key=key,
        name=str(raw.get("name") or key.value),
        layout=layout,
        identifiers=tuple(str(word).lower() for word in raw.get("identifiers") or []),
        merchants=MappingProxyType(merchants),
        substitutions=tuple(substitutions),
        noise_phrases=frozenset(str(p).lower() for p in raw.get("noise_phrases") or []),
        noise_patterns=_compile_all(raw.get("noise_patterns") or [], where),
        artifact_patterns=_compile_all(raw.get("artifact_patterns") or [], where),
        offer_keywords=frozenset(str(k).lower() for k in raw.get("offer_keywords") or []),
        offer_patterns=_compile_all(raw.get("offer_patterns") or [], where),
        multi_merchant_patterns=tuple(multi),
    )


def load_profiles(path: Path | str | None = None) -> ProfileRegistry:
    """
    Load issuer profiles from YAML.

    Args:
        path: Profile file. Defaults to PERKQ_ISSUER_PROFILES when set,
              otherwise the packaged issuer_profiles.yaml.

    Raises:
        ProfileConfigError: file missing, unreadable or malformed.
    """
    if path is None:
        path = config.ISSUER_PROFILES_PATH or DEFAULT_PROFILES_PATH
    path = Path(path)

    if not path.exists():
        raise ProfileConfigError(f"Issuer profiles not found at {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ProfileConfigError(f"Issuer profiles at {path} are not valid YAML: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("issuers"), list):
        raise ProfileConfigError(f"Issuer profiles at {path} must define an 'issuers' list")

    registry = ProfileRegistry(_build_profile(entry) for entry in data["issuers"])
    logger.info(
        "Loaded %d issuer profiles from %s: %s",
        len(registry),
        path,
        ", ".join(key.value for key in registry),
    )
    return registry


@lru_cache(maxsize=1)
def default_registry() -> ProfileRegistry:
    """Process-wide registry, loaded on first use."""
    return load_profiles()
