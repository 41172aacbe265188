"""
Issuer classification.

First match wins: identifiers are tried profile by profile in registry
order, and the first profile with any identifier present in the text is the
issuer. Identifier sets are curated to be mutually exclusive, so there is no
scoring.
"""

from __future__ import annotations

import re

from perkq.extraction.profiles import ProfileRegistry
from perkq.extraction.types import IssuerKey
from perkq.observability.logging import get_logger

logger = get_logger(__name__)


class IssuerClassifier:
    def __init__(self, registry: ProfileRegistry):
        self.registry = registry
        self._patterns: list[tuple[IssuerKey, re.Pattern[str]]] = []
        for key in registry.issuers():
            identifiers = registry[key].identifiers
            if not identifiers:
                continue
            alternation = "|".join(
                re.escape(word) for word in sorted(identifiers, key=len, reverse=True)
            )
            # Word-bounded so "purchase" never reads as "chase"
            self._patterns.append(
                (key, re.compile(rf"(?<![a-z0-9])(?:{alternation})(?![a-z0-9])", re.IGNORECASE))
            )

    def classify(self, text: str) -> IssuerKey:
        """Issuer whose identifiers appear in text, else GENERIC."""
        if not text:
            return IssuerKey.GENERIC
        for key, pattern in self._patterns:
            match = pattern.search(text)
            if match:
                logger.debug("Issuer %s identified by %r", key.value, match.group(0))
                return key
        return IssuerKey.GENERIC

    def resolve(self, text: str, hint: IssuerKey | str | None = None) -> IssuerKey:
        """
        Issuer for text, honouring a caller hint.

        A hint that does not name a registered issuer is ignored and the text
        is classified instead.
        """
        if hint is not None:
            key = IssuerKey.parse(hint)
            if key is not None and key in self.registry:
                return key
            logger.warning("Ignoring unknown issuer hint %r", hint)
        return self.classify(text)
