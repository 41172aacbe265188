"""Tests for value and expiration extraction."""

from __future__ import annotations

import pytest

from perkq.extraction.values import (
    contains_offer_vocabulary,
    extract_expiration,
    extract_value,
    find_expirations,
    find_values,
    has_value_shape,
    is_expiration_line,
    is_reward_only,
    looks_like_offer,
    split_expiration,
)

# =============================================================================
# extract_value
# =============================================================================


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Spend $80 or more, earn $15 back", "$15"),
        ("Get $30 back on your purchase", "$30"),
        ("$10.99 statement credit", "$10.99"),
        ("Earn 20% back on a single purchase, up to a total of $8", "20%"),
        ("earn 5% on dining", "5%"),
        ("5x points at restaurants", "5x points"),
        ("Earn 2,500 Membership Rewards points", "2,500 Membership Rewards points"),
        ("1,000 bonus miles", "1,000 bonus miles"),
        ("$30 cash back", "$30"),
        ("10% off", "10%"),
        ("Up to $25", "$25"),
    ],
)
def test_extract_value(text, expected):
    assert extract_value(text) == expected


def test_earned_dollars_beat_spend_threshold():
    text = "peacock Spend $10.99 or more, earn $10.99 back, up to 2 times (total of $21.98)."
    assert extract_value(text) == "$10.99"


def test_spend_amount_alone_is_not_a_value():
    assert extract_value("Spend $80 or more, earn") is None


def test_value_is_substring_of_input():
    text = "Earn   2,500   points"
    value = extract_value(text)
    assert value == "2,500 points"
    assert value in " ".join(text.split())


def test_no_value():
    assert extract_value("Clothes, Shoes, Beauty, and") is None
    assert extract_value("") is None


# =============================================================================
# find_values
# =============================================================================


def test_find_values_offsets():
    values = find_values("35% cash back 10% cash back $30 cash back")
    assert [(v.value, v.start) for v in values] == [("35%", 0), ("10%", 14), ("$30", 28)]
    assert values[0].text == "35% cash back"


def test_find_values_points():
    values = find_values("5x points 2,000 bonus points")
    assert [v.value for v in values] == ["5x points", "2,000 bonus points"]


def test_find_values_ignores_bare_numbers():
    assert find_values("fubo 57 event tickets 38") == []


def test_is_reward_only():
    assert is_reward_only("5% cash back 15% cash back")
    assert not is_reward_only("5% cash back on travel")
    assert not is_reward_only("Dyson Arlo")


# =============================================================================
# Offer shape
# =============================================================================


def test_has_value_shape():
    assert has_value_shape("$15 back")
    assert has_value_shape("20 %")
    assert has_value_shape("3x miles")
    assert not has_value_shape("Shake Shack")


def test_contains_offer_vocabulary(citi_profile):
    assert contains_offer_vocabulary("back")
    assert contains_offer_vocabulary("purchase, up to a total of $8")
    assert not contains_offer_vocabulary("Cole Haan")
    # Profile keywords count too
    assert not contains_offer_vocabulary("Double")
    assert contains_offer_vocabulary("Double", citi_profile)


def test_looks_like_offer(chase_profile):
    assert looks_like_offer("35% cash back", chase_profile)
    assert looks_like_offer("Spend $80 or more, earn")
    assert not looks_like_offer("Lands' End", chase_profile)


# =============================================================================
# Expiration
# =============================================================================


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Expires 12/31/25", "12/31/25"),
        ("Expires 01/28/2026", "01/28/2026"),
        ("exp 12-31-25", "12-31-25"),
        ("Valid through Dec 31, 2025", "Dec 31, 2025"),
        ("Offer ends 5 May 2026", "5 May 2026"),
        ("Expires: 12/2025", "12/2025"),
        ("24d left", "24d left"),
        ("5 days left", "5 days left"),
        ("12/31/25", "12/31/25"),
    ],
)
def test_extract_expiration(text, expected):
    assert extract_expiration(text) == expected


def test_run_together_date_is_repaired():
    assert extract_expiration("Expires 1112/25") == "11/12/25"


def test_keyword_date_wins_over_countdown():
    assert extract_expiration("3 days left, expires 12/31/25") == "12/31/25"


def test_no_expiration():
    assert extract_expiration("Spend $80 or more, earn $15 back") is None
    assert extract_expiration("") is None


def test_is_expiration_line():
    assert is_expiration_line("Expires 12/26/25")
    assert is_expiration_line("24d left")
    assert is_expiration_line("01/28/26")
    assert not is_expiration_line("(total of $21.98).")
    assert not is_expiration_line("Lands' End")


def test_split_expiration_keeps_leading_offer_text():
    leading, expiration = split_expiration("purchase, up to a total of $8 Expires 11/12/25")
    assert leading == "purchase, up to a total of $8"
    assert expiration == "11/12/25"


def test_split_expiration_expiration_only():
    assert split_expiration("Expires 1112/25") == ("", "11/12/25")


def test_split_expiration_without_date():
    assert split_expiration("$15 back") == ("$15 back", None)


def test_find_expirations_offsets():
    assert find_expirations("24d left   9d left") == [(0, "24d left"), (11, "9d left")]
    assert find_expirations("nothing here") == []
