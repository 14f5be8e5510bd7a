"""SafeNight BAC Flask API.

Run from project root:
    python app.py
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timedelta
from typing import Any

from flask import Flask, jsonify, request, session as flask_session

from safenight.display import format_bac, format_time_to_sober, get_bac_color
from safenight.drinks import STANDARD_DRINKS, DrinkValidationError, list_standard_drinks, quick_log_drink, utc_now
from safenight.parsing import drink_from_parser_output
from safenight.store import DEFAULT_WEIGHT_LBS, GENDERS, RECENT_WINDOW_HOURS, DrinkStore

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["SECRET_KEY"] = os.environ.get("APP_SECRET_KEY", "dev-only-change-me")
app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
app.config["SESSION_COOKIE_HTTPONLY"] = True
app.config["SESSION_COOKIE_SECURE"] = os.environ.get("SESSION_COOKIE_SECURE", "0") == "1"
app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(days=1)

MIN_WEIGHT_LB = 80.0
MAX_WEIGHT_LB = 400.0
STORE_KEY = "drink_store"
USER_KEY = "user_id"
DEFAULT_USER_ID = "local"


def _window_hours() -> float:
    try:
        return float(os.environ.get("DRINK_WINDOW_HOURS", RECENT_WINDOW_HOURS))
    except ValueError:
        return RECENT_WINDOW_HOURS


def _clamp_float(value: Any, default: float, min_value: float, max_value: float) -> float:
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        parsed = default
    return max(min_value, min(max_value, parsed))


def get_store() -> DrinkStore:
    return DrinkStore.from_dict(flask_session.get(STORE_KEY), window_hours=_window_hours())


def set_store(store: DrinkStore) -> None:
    flask_session.permanent = True
    flask_session[STORE_KEY] = store.to_dict()


def _current_user_id() -> str:
    user_id = flask_session.get(USER_KEY)
    return user_id if isinstance(user_id, str) and user_id else DEFAULT_USER_ID


def _json_body() -> dict[str, Any] | None:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def _body_error():
    return jsonify({"error": "Request body must be a JSON object"}), 400


def _estimate_payload(store: DrinkStore, now: datetime) -> dict[str, Any]:
    estimate = store.recalculate(now)
    if estimate is None:
        return {
            "estimate": None,
            "bac_display": format_bac(0.0),
            "time_to_sober_display": format_time_to_sober(0),
            "color": get_bac_color(0.0),
            "curve": [],
        }
    return {
        "estimate": estimate.to_dict(),
        "bac_display": format_bac(estimate.bac),
        "time_to_sober_display": format_time_to_sober(estimate.time_to_sober),
        "color": get_bac_color(estimate.bac),
        "curve": [{"minutes": m, "bac": bac} for m, bac in store.curve(now)],
    }


@app.errorhandler(DrinkValidationError)
def handle_validation_error(exc: DrinkValidationError):
    return jsonify({"error": str(exc)}), 400


@app.route("/healthz")
def healthz():
    return jsonify({"ok": True})


@app.route("/api/standard-drinks")
def api_standard_drinks():
    return jsonify({"items": list_standard_drinks()})


@app.route("/api/profile", methods=["POST"])
def api_profile():
    data = _json_body()
    if data is None:
        return _body_error()
    weight = _clamp_float(data.get("weight_lbs"), DEFAULT_WEIGHT_LBS, MIN_WEIGHT_LB, MAX_WEIGHT_LB)
    gender = str(data.get("gender", "female")).strip().lower()
    if gender not in GENDERS:
        return jsonify({"error": "Gender must be female or other"}), 400
    user_id = str(data.get("user_id", "")).strip()
    if user_id:
        flask_session[USER_KEY] = user_id[:64]

    store = get_store()
    store.set_user_profile(weight, gender)
    set_store(store)
    return jsonify({"ok": True, "weight_lbs": weight, "gender": gender})


@app.route("/api/drinks", methods=["POST"])
def api_log_drink():
    data = _json_body()
    if data is None:
        return _body_error()
    store = get_store()
    user_id = _current_user_id()
    plan_id = str(data.get("plan_id") or "").strip() or None

    kind = data.get("kind")
    if kind:
        if not isinstance(kind, str) or kind not in STANDARD_DRINKS:
            return jsonify({"error": f"Unknown drink kind: {kind}"}), 400
        drink = quick_log_drink(kind, user_id, plan_id)
        store.add_drink(drink)
    else:
        parsed = drink_from_parser_output(data, str(data.get("description", "")))
        drink = store.log_parsed_drink(parsed, user_id, plan_id)

    set_store(store)
    logger.info("User %s logged %s (%s)", user_id, drink.name, drink.alcohol_type)
    return jsonify({"ok": True, "drink": drink.to_dict(), **_estimate_payload(store, utc_now())})


@app.route("/api/drinks/<drink_id>", methods=["DELETE"])
def api_remove_drink(drink_id: str):
    store = get_store()
    if not store.remove_drink(drink_id):
        return jsonify({"error": "Drink not found"}), 404
    set_store(store)
    return jsonify({"ok": True})


@app.route("/api/reset", methods=["POST"])
def api_reset():
    store = get_store()
    store.clear_drinks()
    set_store(store)
    return jsonify({"ok": True})


@app.route("/api/state")
def api_state():
    store = get_store()
    now = utc_now()
    plan_id = request.args.get("plan_id", type=str)
    drinks = store.drinks_for_plan(plan_id) if plan_id else store.drinks
    return jsonify({
        "user_id": _current_user_id(),
        "weight_lbs": store.weight_lbs,
        "gender": store.gender,
        "drinks": [d.to_dict() for d in drinks],
        "drink_count": len(drinks),
        "todays_drink_count": len(store.todays_drinks(now)),
        **_estimate_payload(store, now),
    })


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    port = int(os.environ.get("PORT", 5000))
    app.run(host="0.0.0.0", port=port, debug=os.environ.get("FLASK_DEBUG", "0") == "1")
