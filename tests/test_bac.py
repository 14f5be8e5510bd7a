"""Tests for BAC calculations, drinks and display helpers. Run from project root: pytest tests/ -v"""
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from safenight.calculations import (
    bac_curve,
    calculate_bac,
    distribution_ratio,
    drink_contribution,
    estimate_time_to_legal_limit,
    estimate_time_to_sober,
    get_full_bac_estimate,
    get_recommendation,
    get_safety_level,
)
from safenight.display import format_bac, format_time_to_sober, get_bac_color
from safenight.drinks import (
    STANDARD_DRINKS,
    Drink,
    DrinkValidationError,
    alcohol_grams,
    display_name,
    quick_log_drink,
    validate_amounts,
)
from safenight.parsing import parse_drink_response

NOW = datetime(2026, 10, 17, 23, 0, tzinfo=timezone.utc)


def beer(logged_at=NOW, oz=12.0, abv=0.05, drink_id="b1"):
    return Drink(
        id=drink_id,
        user_id="u1",
        name="Beer",
        alcohol_type="beer",
        estimated_oz=oz,
        estimated_abv=abv,
        logged_at=logged_at,
    )


def test_alcohol_grams_beer():
    assert alcohol_grams(beer()) == pytest.approx(14.0, abs=0.01)


def test_single_beer_at_logged_time_is_caution():
    bac = calculate_bac([beer()], 140, "female", NOW)
    assert bac == pytest.approx(0.0401, abs=0.0001)
    assert get_safety_level(bac) == "caution"


def test_single_beer_two_hours_later_is_safe():
    bac = calculate_bac([beer()], 140, "female", NOW + timedelta(hours=2))
    assert bac == pytest.approx(0.0101, abs=0.0001)
    assert get_safety_level(bac) == "safe"


def test_empty_drinks():
    assert calculate_bac([], 140, "female", NOW) == 0
    estimate = get_full_bac_estimate([], 140, "female", NOW)
    assert estimate.bac == 0
    assert estimate.time_to_sober == 0
    assert estimate.safety_level == "safe"


def test_future_drink_contributes_nothing():
    future = beer(logged_at=NOW + timedelta(minutes=30))
    assert drink_contribution(future, 140, "female", NOW) == 0.0
    assert calculate_bac([future], 140, "female", NOW) == 0.0


def test_fully_metabolized_drink_never_negative():
    old = beer(logged_at=NOW - timedelta(hours=10))
    assert calculate_bac([old], 140, "female", NOW) == 0.0
    assert calculate_bac([old, beer()], 140, "female", NOW) == calculate_bac([beer()], 140, "female", NOW)


def test_extra_drink_never_decreases_bac():
    drinks = [beer(logged_at=NOW - timedelta(hours=1)), beer(NOW - timedelta(hours=3), drink_id="b2")]
    before = calculate_bac(drinks, 160, "other", NOW)
    after = calculate_bac(drinks + [beer(drink_id="b3", oz=1.5, abv=0.4)], 160, "other", NOW)
    assert after > before


def test_order_does_not_matter():
    drinks = [beer(NOW - timedelta(minutes=m), drink_id=str(m)) for m in (0, 20, 45, 90)]
    assert calculate_bac(drinks, 150, "female", NOW) == pytest.approx(
        calculate_bac(list(reversed(drinks)), 150, "female", NOW)
    )


def test_gender_does_not_change_ratio():
    assert distribution_ratio("female") == distribution_ratio("other") == 0.55
    assert calculate_bac([beer()], 140, "other", NOW) == calculate_bac([beer()], 140, "female", NOW)


def test_full_estimate_is_deterministic():
    drinks = [beer(), beer(NOW - timedelta(hours=1), drink_id="b2")]
    assert get_full_bac_estimate(drinks, 140, "female", NOW) == get_full_bac_estimate(drinks, 140, "female", NOW)


def test_time_projections():
    assert estimate_time_to_legal_limit(0.10) == 80
    assert estimate_time_to_sober(0.10) == 400
    assert estimate_time_to_sober(0) == 0
    assert estimate_time_to_sober(-0.01) == 0
    assert estimate_time_to_legal_limit(0.08) == 0
    assert estimate_time_to_legal_limit(0.05) == 0
    assert estimate_time_to_sober(0.0401) == 161


@pytest.mark.parametrize(
    "bac, level",
    [
        (0.0, "safe"),
        (0.0399, "safe"),
        (0.04, "caution"),
        (0.0799, "caution"),
        (0.08, "warning"),
        (0.1199, "warning"),
        (0.12, "danger"),
        (0.3, "danger"),
    ],
)
def test_safety_level_boundaries(bac, level):
    assert get_safety_level(bac) == level


def test_recommendation_follows_level():
    assert "Stay hydrated" in get_recommendation(0.01)
    assert "safe ride home" in get_recommendation(0.05)
    assert "do NOT drive" in get_recommendation(0.09)
    assert "medical attention" in get_recommendation(0.2)


def test_full_estimate_above_limit():
    shots = [
        Drink(str(i), "u1", "Shot", "shot", 1.5, 0.4, NOW - timedelta(minutes=10 * i))
        for i in range(5)
    ]
    estimate = get_full_bac_estimate(shots, 130, "female", NOW)
    assert estimate.safety_level in ("warning", "danger")
    assert estimate.time_to_legal_limit > 0
    assert estimate.time_to_sober > estimate.time_to_legal_limit
    assert estimate.to_dict()["safetyLevel"] == estimate.safety_level


def test_bac_curve_declines_to_zero():
    curve = bac_curve([beer()], 140, "female", NOW, step_minutes=30)
    assert curve[0] == (0.0, pytest.approx(0.0401, abs=0.0001))
    assert curve[-1][1] < 0.005
    bacs = [b for _, b in curve]
    assert bacs == sorted(bacs, reverse=True)


def test_bac_curve_rejects_bad_step():
    with pytest.raises(ValueError):
        bac_curve([beer()], 140, "female", NOW, step_minutes=0)
    assert bac_curve([], 140, "female", NOW) == []


def test_standard_drink_table():
    assert len(STANDARD_DRINKS) == 10
    assert (STANDARD_DRINKS["longIsland"].oz, STANDARD_DRINKS["longIsland"].abv) == (8, 0.22)
    assert (STANDARD_DRINKS["lightBeer"].oz, STANDARD_DRINKS["lightBeer"].abv) == (12, 0.042)


def test_quick_log_margarita():
    drink = quick_log_drink("margarita", "u1", plan_id="p1")
    assert drink.estimated_oz == 6
    assert drink.estimated_abv == 0.13
    assert drink.alcohol_type == "cocktail"
    assert drink.name == "Margarita"
    assert drink.plan_id == "p1"
    assert drink.logged_at.tzinfo is not None
    assert drink.id != quick_log_drink("margarita", "u1").id


@pytest.mark.parametrize(
    "kind, alcohol_type",
    [("ipa", "beer"), ("champagne", "wine"), ("shot", "shot"), ("martini", "cocktail")],
)
def test_quick_log_alcohol_type(kind, alcohol_type):
    assert quick_log_drink(kind, "u1").alcohol_type == alcohol_type


def test_quick_log_unknown_kind():
    with pytest.raises(KeyError):
        quick_log_drink("mead", "u1")


def test_display_name():
    assert display_name("longIsland") == "Long Island"
    assert display_name("beer") == "Beer"


def test_drink_dict_roundtrip_keeps_timestamp():
    drink = beer(NOW - timedelta(minutes=5))
    restored = Drink.from_dict(drink.to_dict())
    assert restored == drink


def test_drink_from_dict_rejects_bad_amounts():
    raw = beer().to_dict()
    with pytest.raises(DrinkValidationError):
        Drink.from_dict({**raw, "estimatedABV": 1.5})
    with pytest.raises(DrinkValidationError):
        Drink.from_dict({**raw, "estimatedOz": 0})
    with pytest.raises(DrinkValidationError):
        Drink.from_dict({**raw, "loggedAt": "last night"})


def test_parse_drink_response():
    parsed = parse_drink_response(
        '{"name": "Margarita", "alcoholType": "cocktail", "estimatedOz": 6, "estimatedABV": 0.13}',
        "a margarita",
    )
    assert (parsed.name, parsed.alcohol_type, parsed.estimated_oz, parsed.estimated_abv) == (
        "Margarita", "cocktail", 6.0, 0.13,
    )


def test_parse_drink_response_fallback_on_bad_json():
    parsed = parse_drink_response("Sorry, I can't help with that", "mystery punch")
    assert parsed.name == "mystery punch"
    assert parsed.alcohol_type == "other"
    assert (parsed.estimated_oz, parsed.estimated_abv) == (4.0, 0.1)


def test_parse_drink_response_unknown_type_and_bad_abv():
    parsed = parse_drink_response({"name": "Mead", "alcoholType": "honey", "estimatedOz": 8, "estimatedABV": 0.11}, "")
    assert parsed.alcohol_type == "other"
    with pytest.raises(DrinkValidationError):
        parse_drink_response('{"name": "Beer", "estimatedOz": 12, "estimatedABV": 5}', "beer")


def test_display_helpers():
    assert format_bac(0.0451) == "0.045%"
    assert format_time_to_sober(0) == "Sober"
    assert format_time_to_sober(45) == "45 min"
    assert format_time_to_sober(120) == "2h"
    assert format_time_to_sober(125) == "2h 5m"
    assert get_bac_color(0.0) == "#22c55e"
    assert get_bac_color(0.13) == "#ef4444"


def test_drinks_are_immutable():
    drink = beer()
    with pytest.raises(AttributeError):
        drink.estimated_oz = 24
    assert replace(drink, estimated_oz=24).estimated_oz == 24


@pytest.mark.parametrize("oz, abv", [("inf", 0.05), (1e308, 0.05), ("nan", 0.05), (12, "nan"), (129, 0.05)])
def test_validate_amounts_rejects_non_finite_and_huge(oz, abv):
    with pytest.raises(DrinkValidationError):
        validate_amounts(oz, abv)
    assert validate_amounts(128, 0.05) == (128.0, 0.05)
