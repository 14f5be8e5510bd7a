"""
Drink store: user profile, drink log, and the latest BAC estimate snapshot.
The store owns the drink list; the engine in calculations is stateless and is
called after every mutation.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, tzinfo
from typing import Any, Callable, Dict, List, Optional, Union

from safenight import calculations
from safenight.calculations import BACEstimate
from safenight.drinks import Drink, DrinkValidationError, as_utc, generate_id, utc_now, validate_amounts
from safenight.parsing import ParsedDrink, parse_drink_response

logger = logging.getLogger(__name__)

DEFAULT_WEIGHT_LBS = 140.0
DEFAULT_GENDER = "female"
GENDERS = ("female", "other")
RECENT_WINDOW_HOURS = 12.0

# Parser callable: free text -> raw JSON answer (or an already decoded dict).
DrinkParser = Callable[[str], Union[str, Dict[str, Any]]]


@dataclass
class DrinkStore:
    weight_lbs: float = DEFAULT_WEIGHT_LBS
    gender: str = DEFAULT_GENDER
    window_hours: float = RECENT_WINDOW_HOURS
    drinks: List[Drink] = field(default_factory=list)
    current_bac: Optional[BACEstimate] = None
    error: Optional[str] = None

    def set_user_profile(self, weight_lbs: float, gender: str) -> None:
        self.weight_lbs = weight_lbs
        self.gender = gender if gender in GENDERS else DEFAULT_GENDER
        self.recalculate()

    def add_drink(self, drink: Drink) -> Drink:
        """Append a drink and recompute; the log is left unchanged if recomputing fails."""
        if drink.logged_at.tzinfo is None:
            drink = replace(drink, logged_at=as_utc(drink.logged_at))
        previous = self.drinks
        self.drinks = previous + [drink]
        try:
            self.recalculate()
        except Exception:
            self.drinks = previous
            raise
        logger.debug("Logged drink %s (%s, %.1f oz @ %.3f)", drink.id, drink.name, drink.estimated_oz, drink.estimated_abv)
        return drink

    def log_drink(
        self,
        *,
        user_id: str,
        name: str,
        alcohol_type: str,
        estimated_oz: float,
        estimated_abv: float,
        plan_id: Optional[str] = None,
        logged_at: Optional[datetime] = None,
    ) -> Drink:
        oz, abv = validate_amounts(estimated_oz, estimated_abv)
        drink = Drink(
            id=generate_id(),
            user_id=user_id,
            plan_id=plan_id,
            name=name,
            alcohol_type=alcohol_type,
            estimated_oz=oz,
            estimated_abv=abv,
            logged_at=as_utc(logged_at) if logged_at else utc_now(),
        )
        return self.add_drink(drink)

    def log_parsed_drink(self, parsed: ParsedDrink, user_id: str, plan_id: Optional[str] = None) -> Drink:
        return self.log_drink(
            user_id=user_id,
            plan_id=plan_id,
            name=parsed.name,
            alcohol_type=parsed.alcohol_type,
            estimated_oz=parsed.estimated_oz,
            estimated_abv=parsed.estimated_abv,
        )

    def log_drink_from_text(
        self,
        description: str,
        user_id: str,
        parser: DrinkParser,
        plan_id: Optional[str] = None,
    ) -> Drink:
        """Parse a free-text description and log it.

        Parser or validation failures are kept in ``error`` and re-raised.
        """
        self.error = None
        try:
            parsed = parse_drink_response(parser(description), description)
            return self.log_parsed_drink(parsed, user_id, plan_id)
        except DrinkValidationError as exc:
            self.error = str(exc) or "Failed to log drink"
            logger.info("Rejected parsed drink %r: %s", description, exc)
            raise
        except Exception as exc:
            self.error = str(exc) or "Failed to log drink"
            logger.exception("Drink parser failed for %r", description)
            raise

    def remove_drink(self, drink_id: str) -> bool:
        before = len(self.drinks)
        self.drinks = [d for d in self.drinks if d.id != drink_id]
        removed = len(self.drinks) != before
        self.recalculate()
        return removed

    def clear_drinks(self) -> None:
        self.drinks = []
        self.current_bac = None

    def clear_error(self) -> None:
        self.error = None

    def recent_drinks(self, current_time: Optional[datetime] = None, hours: Optional[float] = None) -> List[Drink]:
        """Drinks logged less than ``hours`` (default: the store window) before current_time."""
        if current_time is None:
            current_time = utc_now()
        window = timedelta(hours=self.window_hours if hours is None else hours)
        return [d for d in self.drinks if current_time - d.logged_at < window]

    def recalculate(self, current_time: Optional[datetime] = None) -> Optional[BACEstimate]:
        """Recompute the estimate from one consistent snapshot of drinks and time."""
        if current_time is None:
            current_time = utc_now()
        recent = self.recent_drinks(current_time)
        if not recent:
            self.current_bac = None
            return None
        self.current_bac = calculations.get_full_bac_estimate(
            recent,
            self.weight_lbs,
            self.gender,
            current_time,
        )
        return self.current_bac

    def curve(self, current_time: Optional[datetime] = None, step_minutes: float = 15.0, max_minutes: float = 12 * 60.0):
        if current_time is None:
            current_time = utc_now()
        return calculations.bac_curve(
            self.recent_drinks(current_time),
            self.weight_lbs,
            self.gender,
            current_time,
            step_minutes=step_minutes,
            max_minutes=max_minutes,
        )

    def drinks_for_plan(self, plan_id: str) -> List[Drink]:
        return [d for d in self.drinks if d.plan_id == plan_id]

    def todays_drinks(self, current_time: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> List[Drink]:
        """Drinks logged on the same calendar day as current_time.

        The day is taken in ``tz``, defaulting to current_time's own zone (UTC for
        timestamps from utc_now). Pass the user's zone to bucket by their local day.
        """
        if current_time is None:
            current_time = utc_now()
        zone = tz or current_time.tzinfo
        today = current_time.astimezone(zone).date()
        return [d for d in self.drinks if d.logged_at.astimezone(zone).date() == today]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "weight_lbs": self.weight_lbs,
            "gender": self.gender,
            "drinks": [d.to_dict() for d in self.drinks],
        }

    @classmethod
    def from_dict(cls, raw: Any, window_hours: float = RECENT_WINDOW_HOURS) -> "DrinkStore":
        """Rebuild a store from ``to_dict`` output, skipping malformed drinks."""
        store = cls(window_hours=window_hours)
        if not isinstance(raw, dict):
            return store
        try:
            store.weight_lbs = float(raw.get("weight_lbs", DEFAULT_WEIGHT_LBS))
        except (TypeError, ValueError):
            store.weight_lbs = DEFAULT_WEIGHT_LBS
        gender = raw.get("gender")
        store.gender = gender if gender in GENDERS else DEFAULT_GENDER
        for item in raw.get("drinks") or []:
            if not isinstance(item, dict):
                continue
            try:
                store.drinks.append(Drink.from_dict(item))
            except DrinkValidationError as exc:
                logger.warning("Dropping stored drink %r: %s", item.get("id"), exc)
        store.recalculate()
        return store
