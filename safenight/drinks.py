"""Drink records, standard-drink reference values, and alcohol content helpers."""

import math
import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# 1 US fl oz ~= 29.5735 mL.
ML_PER_OZ = 29.5735

# Ethanol density (g/mL) for volume x ABV -> grams.
ETHANOL_DENSITY = 0.789

ALCOHOL_TYPES = ("beer", "wine", "liquor", "cocktail", "shot", "other")

# A gallon; anything larger is not a single drink.
MAX_OZ = 128.0


class DrinkValidationError(ValueError):
    """Raised when a drink does not satisfy the ingestion contract."""


@dataclass(frozen=True)
class StandardDrink:
    oz: float
    abv: float  # e.g. 0.05 for 5%


# Quick-log reference values.
STANDARD_DRINKS: Dict[str, StandardDrink] = {
    "beer": StandardDrink(12, 0.05),
    "lightBeer": StandardDrink(12, 0.042),
    "ipa": StandardDrink(12, 0.065),
    "wine": StandardDrink(5, 0.12),
    "champagne": StandardDrink(5, 0.12),
    "shot": StandardDrink(1.5, 0.4),
    "cocktail": StandardDrink(4, 0.15),
    "margarita": StandardDrink(6, 0.13),
    "longIsland": StandardDrink(8, 0.22),
    "martini": StandardDrink(3, 0.3),
}

ALCOHOL_TYPE_BY_KIND: Dict[str, str] = {
    "beer": "beer",
    "lightBeer": "beer",
    "ipa": "beer",
    "wine": "wine",
    "champagne": "wine",
    "shot": "shot",
    "cocktail": "cocktail",
    "margarita": "cocktail",
    "longIsland": "cocktail",
    "martini": "cocktail",
}


@dataclass(frozen=True)
class Drink:
    """A logged alcohol-consumption event."""

    id: str
    user_id: str
    name: str
    alcohol_type: str
    estimated_oz: float
    estimated_abv: float  # decimal fraction in [0, 1)
    logged_at: datetime
    plan_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "planId": self.plan_id,
            "name": self.name,
            "alcoholType": self.alcohol_type,
            "estimatedOz": self.estimated_oz,
            "estimatedABV": self.estimated_abv,
            "loggedAt": self.logged_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Drink":
        """Rebuild a drink from its wire shape, validating the ingestion contract."""
        try:
            logged_at = datetime.fromisoformat(str(raw["loggedAt"]))
        except (KeyError, ValueError) as exc:
            raise DrinkValidationError("loggedAt must be an ISO-8601 timestamp") from exc
        logged_at = as_utc(logged_at)
        oz, abv = validate_amounts(raw.get("estimatedOz"), raw.get("estimatedABV"))
        return cls(
            id=str(raw.get("id") or generate_id()),
            user_id=str(raw.get("userId") or ""),
            plan_id=raw.get("planId") or None,
            name=str(raw.get("name") or "Drink"),
            alcohol_type=normalize_alcohol_type(raw.get("alcoholType")),
            estimated_oz=oz,
            estimated_abv=abv,
            logged_at=logged_at,
        )


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def generate_id() -> str:
    return uuid.uuid4().hex[:13]


def normalize_alcohol_type(value: Any) -> str:
    lowered = str(value or "").strip().lower()
    return lowered if lowered in ALCOHOL_TYPES else "other"


def validate_amounts(oz: Any, abv: Any) -> tuple[float, float]:
    """Return (oz, abv) as floats or raise DrinkValidationError."""
    try:
        oz_f = float(oz)
        abv_f = float(abv)
    except (TypeError, ValueError) as exc:
        raise DrinkValidationError("estimatedOz and estimatedABV must be numbers") from exc
    if not (math.isfinite(oz_f) and math.isfinite(abv_f)):
        raise DrinkValidationError("estimatedOz and estimatedABV must be finite numbers")
    if not 0 < oz_f <= MAX_OZ:
        raise DrinkValidationError(f"estimatedOz must be greater than 0 and at most {MAX_OZ:g}")
    if not 0 <= abv_f < 1:
        raise DrinkValidationError("estimatedABV must be a fraction in [0, 1)")
    return oz_f, abv_f


def alcohol_grams(drink: Drink) -> float:
    """Grams of pure ethanol in one drink."""
    return drink.estimated_oz * ML_PER_OZ * drink.estimated_abv * ETHANOL_DENSITY


def alcohol_type_for_kind(kind: str) -> str:
    return ALCOHOL_TYPE_BY_KIND.get(kind, "other")


def display_name(kind: str) -> str:
    """'longIsland' -> 'Long Island'."""
    spaced = re.sub(r"([A-Z])", r" \1", kind)
    return spaced[:1].upper() + spaced[1:]


def quick_log_drink(kind: str, user_id: str, plan_id: Optional[str] = None) -> Drink:
    """Build a drink from the standard reference table, logged now.

    ``kind`` must be a key of STANDARD_DRINKS; unknown kinds raise KeyError.
    """
    standard = STANDARD_DRINKS[kind]
    return Drink(
        id=generate_id(),
        user_id=user_id,
        plan_id=plan_id,
        name=display_name(kind),
        alcohol_type=alcohol_type_for_kind(kind),
        estimated_oz=standard.oz,
        estimated_abv=standard.abv,
        logged_at=utc_now(),
    )


def list_standard_drinks():
    """Return reference entries as dicts for UI pickers."""
    return [
        {
            "kind": kind,
            "name": display_name(kind),
            "alcoholType": alcohol_type_for_kind(kind),
            "oz": d.oz,
            "abv": d.abv,
        }
        for kind, d in STANDARD_DRINKS.items()
    ]
