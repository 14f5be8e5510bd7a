"""
SafeNight BAC engine: Widmark-based estimates, drink logging, and display helpers.
Use from project root: python -m safenight.main
"""

from safenight.calculations import (
    BACEstimate,
    calculate_bac,
    estimate_time_to_legal_limit,
    estimate_time_to_sober,
    get_full_bac_estimate,
    get_recommendation,
    get_safety_level,
)
from safenight.drinks import (
    STANDARD_DRINKS,
    Drink,
    DrinkValidationError,
    alcohol_grams,
    quick_log_drink,
)
from safenight.store import DrinkStore

__all__ = [
    "BACEstimate",
    "Drink",
    "DrinkStore",
    "DrinkValidationError",
    "STANDARD_DRINKS",
    "alcohol_grams",
    "calculate_bac",
    "estimate_time_to_legal_limit",
    "estimate_time_to_sober",
    "get_full_bac_estimate",
    "get_recommendation",
    "get_safety_level",
    "quick_log_drink",
]
