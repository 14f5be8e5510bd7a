"""Ingestion of free-text drink parser output.

The parser itself (an LLM call) lives outside this package. It answers with a
JSON object shaped like ``{name, alcoholType, estimatedOz, estimatedABV}``;
this module turns that answer into validated drink fields.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from safenight.drinks import DrinkValidationError, normalize_alcohol_type, validate_amounts

logger = logging.getLogger(__name__)

FALLBACK_OZ = 4.0
FALLBACK_ABV = 0.1


@dataclass(frozen=True)
class ParsedDrink:
    name: str
    alcohol_type: str
    estimated_oz: float
    estimated_abv: float


def fallback_drink(description: str) -> ParsedDrink:
    """Generic mid-strength drink used when the parser answer is unreadable."""
    return ParsedDrink(
        name=description.strip() or "Drink",
        alcohol_type="other",
        estimated_oz=FALLBACK_OZ,
        estimated_abv=FALLBACK_ABV,
    )


def drink_from_parser_output(data: dict[str, Any], description: str = "") -> ParsedDrink:
    """Validate a decoded parser answer.

    Raises DrinkValidationError when amounts are missing or out of range.
    """
    if not isinstance(data, dict):
        raise DrinkValidationError("parser output must be a JSON object")
    oz, abv = validate_amounts(data.get("estimatedOz"), data.get("estimatedABV"))
    name = str(data.get("name") or "").strip() or description.strip() or "Drink"
    return ParsedDrink(
        name=name[:80],
        alcohol_type=normalize_alcohol_type(data.get("alcoholType")),
        estimated_oz=oz,
        estimated_abv=abv,
    )


def parse_drink_response(response: str | dict[str, Any], description: str) -> ParsedDrink:
    """Decode a raw parser answer, falling back to a generic drink on bad JSON."""
    if isinstance(response, dict):
        return drink_from_parser_output(response, description)
    try:
        data = json.loads(response)
    except (TypeError, json.JSONDecodeError):
        logger.warning("Unreadable drink parser response for %r; using fallback", description)
        return fallback_drink(description)
    return drink_from_parser_output(data, description)
