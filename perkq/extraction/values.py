"""
Value and expiration extraction.

Values are returned as the matched span of the input with whitespace
collapsed, never reformatted, so a value can always be found again in the
text it came from.
"""

from __future__ import annotations

import re

from perkq.extraction.profiles import IssuerProfile
from perkq.extraction.types import ValueMatch
from perkq.extraction.vocabulary import OFFER_VOCABULARY, WORD_RUN

_DOLLAR = r"\$\s?\d[\d,]*(?:\.\d{2})?"
_PERCENT = r"\d+(?:\.\d+)?\s?%"
_POINTS_UNIT = r"(?:points?|pts)"

# Ordered: the first pattern that matches decides the value
_VALUE_PATTERNS: tuple[re.Pattern[str], ...] = (
    # "earn $15 back", "get $30 back", "receive $10 statement credit"
    re.compile(
        rf"\b(?:earn|get|receive)\s+(?P<value>{_DOLLAR})\s*"
        r"(?:cash\s*back|back|(?:in\s+)?statement\s+credits?|credit)",
        re.IGNORECASE,
    ),
    # "$10.99 statement credit"
    re.compile(rf"(?P<value>{_DOLLAR})\s*(?:statement\s+)?credits?\b", re.IGNORECASE),
    # "20% back", "5% cash back", "earn 5%"
    re.compile(rf"(?P<value>{_PERCENT})\s*(?:cash\s*)?back\b", re.IGNORECASE),
    re.compile(rf"\bearn\s+(?P<value>{_PERCENT})", re.IGNORECASE),
    # "5x points", "3X miles"
    re.compile(rf"(?P<value>\d+(?:\.\d+)?x\s*(?:{_POINTS_UNIT}|miles))", re.IGNORECASE),
    # "2,500 Membership Rewards points", "1,000 bonus points"
    re.compile(
        r"(?P<value>\d[\d,]*\s*(?:bonus\s+)?(?:membership\s+rewards\s+|thankyou\s+)?"
        rf"{_POINTS_UNIT})\b",
        re.IGNORECASE,
    ),
    re.compile(r"(?P<value>\d[\d,]*\s*(?:bonus\s+)?miles)\b", re.IGNORECASE),
    # "$30 cash back"
    re.compile(rf"(?P<value>{_DOLLAR})\s*(?:cash\s*)?back\b", re.IGNORECASE),
    # bare "15%"
    re.compile(rf"(?P<value>{_PERCENT})"),
)

_BARE_DOLLAR = re.compile(_DOLLAR)
_SPEND_BEFORE = re.compile(r"\bspend\s*$", re.IGNORECASE)

# Reward phrases for shared offer lines: "5% cash back", "$30 cash back", "5x points"
_REWARD_PHRASE = re.compile(
    rf"(?P<amount>{_PERCENT}|{_DOLLAR})\s*(?:cash\s*back|back|off)\b"
    rf"|(?P<points>\d+(?:\.\d+)?x\s*(?:{_POINTS_UNIT}|miles)|\d[\d,]*\s*(?:bonus\s+)?(?:{_POINTS_UNIT}|miles))\b",
    re.IGNORECASE,
)

_VALUE_SHAPE = re.compile(
    rf"{_DOLLAR}|{_PERCENT}|\d+(?:\.\d+)?x\s*(?:{_POINTS_UNIT}|miles)\b"
    rf"|\d[\d,]*\s*(?:{_POINTS_UNIT}|miles)\b",
    re.IGNORECASE,
)

_WHITESPACE = re.compile(r"\s+")


def _span(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def extract_value(text: str) -> str | None:
    """The reward value of an offer description, or None."""
    if not text:
        return None
    for pattern in _VALUE_PATTERNS:
        match = pattern.search(text)
        if match:
            return _span(match.group("value"))
    for match in _BARE_DOLLAR.finditer(text):
        if not _SPEND_BEFORE.search(text[: match.start()]):
            return _span(match.group(0))
    return None


def find_values(text: str) -> list[ValueMatch]:
    """Every reward phrase in text, left to right, with its offsets."""
    found = []
    for match in _REWARD_PHRASE.finditer(text):
        value = match.group("amount") or match.group("points")
        found.append(
            ValueMatch(
                value=_span(value),
                text=_span(match.group(0)),
                start=match.start(),
                end=match.end(),
            )
        )
    return found


def has_value_shape(text: str) -> bool:
    """Currency, percentage, multiplier, points or miles anywhere in text."""
    return bool(_VALUE_SHAPE.search(text))


def strip_values(text: str) -> str:
    """text with every value-shaped token removed."""
    return _span(_VALUE_SHAPE.sub(" ", text))


def is_reward_only(text: str) -> bool:
    """True when text is nothing but reward phrases, e.g. "5% cash back 15% cash back"."""
    values = find_values(text)
    if not values:
        return False
    remainder = _REWARD_PHRASE.sub(" ", text)
    return not WORD_RUN.search(remainder) and not has_value_shape(remainder)


def contains_offer_vocabulary(text: str, profile: IssuerProfile | None = None) -> bool:
    lowered = text.lower()
    if any(word in OFFER_VOCABULARY for word in re.findall(r"[a-z]+", lowered)):
        return True
    if profile is not None:
        for keyword in profile.offer_keywords:
            if re.search(r"\b" + re.escape(keyword) + r"\b", lowered):
                return True
    return False


def looks_like_offer(text: str, profile: IssuerProfile | None = None) -> bool:
    """Offer shape: a value token, a profile offer pattern, or offer vocabulary."""
    if has_value_shape(text):
        return True
    if profile is not None and any(p.search(text) for p in profile.offer_patterns):
        return True
    return contains_offer_vocabulary(text, profile)


# ---------------------------------------------------------------------------
# Expiration
# ---------------------------------------------------------------------------

_MONTHS = r"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)[a-z]*\.?"
_DATE_NUMERIC = r"\d{1,2}[/-]\d{1,2}[/-]\d{2,4}"
_DATE_RUN_TOGETHER = r"\d{4}/\d{2,4}"
_DATE_MONTH_FIRST = rf"{_MONTHS}\s+\d{{1,2}}(?:st|nd|rd|th)?(?:,?\s*\d{{4}})?"
_DATE_DAY_FIRST = rf"\d{{1,2}}\s+{_MONTHS}(?:,?\s*\d{{4}})?"
_DATE_MONTH_YEAR = r"\d{1,2}/\d{4}"

_DATE = (
    f"(?:{_DATE_NUMERIC}|{_DATE_RUN_TOGETHER}|{_DATE_MONTH_FIRST}"
    f"|{_DATE_DAY_FIRST}|{_DATE_MONTH_YEAR})"
)

_EXPIRATION_KEYWORD = (
    r"\b(?:expires?|expiring|exp\.?|valid\s+(?:through|thru|until)|valid|through|thru"
    r"|until|ends?|offer\s+ends)"
)

_KEYWORD_DATE = re.compile(
    rf"{_EXPIRATION_KEYWORD}\s*:?\s*(?:on\s+)?(?P<date>{_DATE})(?![\d/])",
    re.IGNORECASE,
)
_RELATIVE = re.compile(r"\b(?P<date>\d{1,3}\s*(?:d|days?)\s+left)\b", re.IGNORECASE)
_BARE_DATE = re.compile(r"(?<![\d/])(?P<date>\d{1,2}/\d{1,2}/\d{2,4})(?![\d/])")
_DATE_ONLY_LINE = re.compile(rf"^\s*{_DATE_NUMERIC}\s*$")

# "1112/25" -> "11/12/25"
_RUN_TOGETHER = re.compile(r"^(\d{2})(\d{2})/(\d{2,4})$")


def _normalize_date(raw: str) -> str:
    date = _span(raw).rstrip(",.")
    repaired = _RUN_TOGETHER.match(date)
    if repaired:
        return "/".join(repaired.groups())
    return date


def _find_expiration(text: str) -> re.Match[str] | None:
    return _KEYWORD_DATE.search(text) or _RELATIVE.search(text)


def extract_expiration(text: str) -> str | None:
    """
    Expiration date in text, or None.

    Keyword dates win over countdowns, which win over a bare numeric date.
    """
    if not text:
        return None
    match = _find_expiration(text) or _BARE_DATE.search(text)
    if match:
        return _normalize_date(match.group("date"))
    return None


def is_expiration_line(text: str) -> bool:
    return bool(_find_expiration(text) or _DATE_ONLY_LINE.match(text))


def split_expiration(text: str) -> tuple[str, str | None]:
    """
    Split "earn $5 back Expires 12/31/25" into ("earn $5 back", "12/31/25").

    Text after the date is dropped. Returns (text, None) when there is no
    expiration in text.
    """
    match = _find_expiration(text) or _BARE_DATE.search(text)
    if not match:
        return text, None
    leading = text[: match.start()].strip(" ,;:-")
    return leading, _normalize_date(match.group("date"))


def find_expirations(text: str) -> list[tuple[int, str]]:
    """
    Every countdown or bare date on a line as (start, expiration), left to
    right, e.g. "24d left    10d left".
    """
    matches = list(_RELATIVE.finditer(text)) or list(_BARE_DATE.finditer(text))
    return [(m.start(), _normalize_date(m.group("date"))) for m in matches]
