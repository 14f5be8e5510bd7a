"""BAC calculations using Widmark-style rise and linear elimination.

Model:
- Rise per drink: BAC = [grams / (body_weight_g * r)] * 100
- r = 0.55 for every user (the female ratio, applied universally)
- Elimination: 0.015 BAC percentage points per hour, applied to each drink
  independently from its own logged time

Each drink is eliminated on its own clock and the residuals are summed. This
is not the textbook Widmark variant (which eliminates from the total), and the
results must stay exactly as computed here.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from safenight.drinks import Drink, alcohol_grams, utc_now

# Distribution ratio (Widmark r)
R_FEMALE = 0.55
R_MALE = 0.68

# Elimination rate (% BAC per hour)
METABOLISM_RATE = 0.015

GRAMS_PER_LB = 453.592
LEGAL_LIMIT_BAC = 0.08

CAUTION_BAC = 0.04
WARNING_BAC = 0.08
DANGER_BAC = 0.12

RECOMMENDATIONS = {
    "safe": "You're doing great! Stay hydrated and continue to enjoy your evening responsibly.",
    "caution": (
        "You're approaching the legal limit. Consider slowing down, drinking water, "
        "and make sure you have a safe ride home planned."
    ),
    "warning": (
        "You're above the legal limit. Please stop drinking alcohol, drink water, eat food "
        "if available, and do NOT drive. Consider texting your emergency contact."
    ),
    "danger": (
        "Your BAC is dangerously high. Stop drinking immediately, stay with trusted friends, "
        "and seek medical attention if you feel unwell. Do not leave with anyone you don't know well."
    ),
}


@dataclass(frozen=True)
class BACEstimate:
    bac: float
    time_to_sober: int  # minutes
    safety_level: str
    recommendation: str
    time_to_legal_limit: int = 0  # minutes

    def to_dict(self) -> dict:
        return {
            "bac": self.bac,
            "timeToSober": self.time_to_sober,
            "timeToLegalLimit": self.time_to_legal_limit,
            "safetyLevel": self.safety_level,
            "recommendation": self.recommendation,
        }


def distribution_ratio(gender: str) -> float:
    """Widmark r for the given gender. Always the female ratio."""
    return R_FEMALE


def _hours_elapsed(logged_at: datetime, current_time: datetime) -> float:
    return (current_time - logged_at).total_seconds() / 3600.0


def drink_contribution(
    drink: Drink,
    weight_lbs: float,
    gender: str,
    current_time: datetime,
) -> float:
    """Residual BAC (%) from a single drink at current_time. Never negative."""
    hours = _hours_elapsed(drink.logged_at, current_time)
    if hours < 0:
        return 0.0
    weight_grams = weight_lbs * GRAMS_PER_LB
    r = distribution_ratio(gender)
    drink_bac = (alcohol_grams(drink) / (weight_grams * r)) * 100.0
    metabolized = METABOLISM_RATE * hours
    return max(0.0, drink_bac - metabolized)


def calculate_bac(
    drinks: Iterable[Drink],
    weight_lbs: float,
    gender: str = "female",
    current_time: Optional[datetime] = None,
) -> float:
    """Current BAC (%) summed over all drinks."""
    if current_time is None:
        current_time = utc_now()
    total = 0.0
    for drink in drinks:
        total += drink_contribution(drink, weight_lbs, gender, current_time)
    return max(0.0, total)


def _ceil_minutes(hours: float) -> int:
    # Round off float noise first: (0.10 - 0.08) / 0.015 * 60 is 80.00000000000003.
    return math.ceil(round(hours * 60, 9))


def estimate_time_to_sober(bac: float) -> int:
    """Minutes until BAC reaches 0 at the fixed elimination rate."""
    if bac <= 0:
        return 0
    return _ceil_minutes(bac / METABOLISM_RATE)


def estimate_time_to_legal_limit(bac: float) -> int:
    """Minutes until BAC drops to the legal limit; 0 if already at or under it."""
    if bac <= LEGAL_LIMIT_BAC:
        return 0
    return _ceil_minutes((bac - LEGAL_LIMIT_BAC) / METABOLISM_RATE)


def get_safety_level(bac: float) -> str:
    if bac < CAUTION_BAC:
        return "safe"
    if bac < WARNING_BAC:
        return "caution"
    if bac < DANGER_BAC:
        return "warning"
    return "danger"


def get_recommendation(bac: float) -> str:
    return RECOMMENDATIONS[get_safety_level(bac)]


def get_full_bac_estimate(
    drinks: Iterable[Drink],
    weight_lbs: float,
    gender: str = "female",
    current_time: Optional[datetime] = None,
) -> BACEstimate:
    """Display-ready estimate for a drink snapshot."""
    bac = calculate_bac(drinks, weight_lbs, gender, current_time)
    return BACEstimate(
        bac=bac,
        time_to_sober=estimate_time_to_sober(bac),
        safety_level=get_safety_level(bac),
        recommendation=get_recommendation(bac),
        time_to_legal_limit=estimate_time_to_legal_limit(bac),
    )


def _curve_end_minutes(
    drinks: List[Drink],
    weight_lbs: float,
    gender: str,
    current_time: datetime,
) -> float:
    """Minutes from current_time at which every drink is fully eliminated."""
    weight_grams = weight_lbs * GRAMS_PER_LB
    r = distribution_ratio(gender)
    ends = []
    for drink in drinks:
        rise = (alcohol_grams(drink) / (weight_grams * r)) * 100.0
        offset_hours = _hours_elapsed(current_time, drink.logged_at)
        ends.append((offset_hours + rise / METABOLISM_RATE) * 60.0)
    return max(ends)


def bac_curve(
    drinks: Iterable[Drink],
    weight_lbs: float,
    gender: str = "female",
    current_time: Optional[datetime] = None,
    step_minutes: float = 15.0,
    start_minutes: float = 0.0,
    max_minutes: Optional[float] = None,
) -> List[Tuple[float, float]]:
    """Return (minutes_from_now, bac_percent) pairs for graphing."""
    drinks = list(drinks)
    if not drinks:
        return []
    if step_minutes <= 0:
        raise ValueError("step_minutes must be > 0")
    if current_time is None:
        current_time = utc_now()

    end = _curve_end_minutes(drinks, weight_lbs, gender, current_time)
    if max_minutes is not None:
        end = min(end, max_minutes)
    end = max(end, start_minutes)

    points: List[Tuple[float, float]] = []
    m = start_minutes
    while m <= end:
        at = current_time + timedelta(minutes=m)
        points.append((m, round(calculate_bac(drinks, weight_lbs, gender, at), 4)))
        m += step_minutes
    return points
