"""
SafeNight BAC CLI. Run from project root: python -m safenight.main
Quick-logs standard drinks, prints the current estimate, and optionally saves a graph.
"""

import argparse
import logging
import sys
from dataclasses import replace
from datetime import timedelta

from safenight.display import format_bac, format_time_to_sober
from safenight.drinks import STANDARD_DRINKS, quick_log_drink, utc_now
from safenight.graph import save_bac_graph
from safenight.store import DrinkStore

logger = logging.getLogger(__name__)


def _parse_drink_arg(value: str):
    """'beer' or 'beer@30' (minutes ago) -> (kind, minutes_ago)."""
    kind, _, ago = value.partition("@")
    if kind not in STANDARD_DRINKS:
        raise argparse.ArgumentTypeError(
            f"unknown drink {kind!r}; choose from {', '.join(STANDARD_DRINKS)}"
        )
    try:
        minutes = float(ago) if ago else 0.0
    except ValueError:
        raise argparse.ArgumentTypeError(f"minutes ago must be a number: {ago!r}")
    return kind, minutes


def main(argv=None):
    parser = argparse.ArgumentParser(description="SafeNight: estimate BAC from logged drinks")
    parser.add_argument("--weight", type=float, default=140.0, help="Body weight (lb)")
    parser.add_argument(
        "--drink",
        action="append",
        type=_parse_drink_arg,
        default=[],
        metavar="KIND[@MINUTES_AGO]",
        help="Standard drink to log, e.g. margarita@45. Repeatable.",
    )
    parser.add_argument("--graph", type=str, metavar="FILE", help="Save BAC graph to FILE (e.g. bac_graph.png)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    now = utc_now()
    store = DrinkStore(weight_lbs=args.weight)
    drinks = args.drink or [("beer", 60.0), ("beer", 0.0)]
    if not args.drink:
        print("No drinks given; using demo: one beer an hour ago, one beer now")
    for kind, minutes_ago in drinks:
        drink = quick_log_drink(kind, user_id="cli")
        store.add_drink(replace(drink, logged_at=now - timedelta(minutes=minutes_ago)))

    estimate = store.recalculate(now)
    logger.debug("Estimate at %s: %s", now.isoformat(), estimate)
    if estimate is None:
        print("No drinks in the last 12 hours.")
        return 0

    print(f"Weight: {store.weight_lbs} lb, drinks: {len(store.drinks)}")
    print(f"BAC: {format_bac(estimate.bac)} ({estimate.safety_level})")
    print(f"Time to sober: {format_time_to_sober(estimate.time_to_sober)}")
    if estimate.time_to_legal_limit:
        print(f"Time to legal limit: {format_time_to_sober(estimate.time_to_legal_limit)}")
    print(estimate.recommendation)

    if args.graph:
        path = save_bac_graph(store, output_path=args.graph, current_time=now)
        print(f"Graph saved: {path}")

    return 0


if __name__ == "__main__":
    sys.exit(main() or 0)
