"""Formatting helpers for showing a BAC estimate."""

from safenight.calculations import get_safety_level

SAFETY_COLORS = {
    "safe": "#22c55e",
    "caution": "#eab308",
    "warning": "#f97316",
    "danger": "#ef4444",
}


def get_bac_color(bac: float) -> str:
    return SAFETY_COLORS[get_safety_level(bac)]


def format_bac(bac: float) -> str:
    """0.0451 -> '0.045%'."""
    return f"{bac:.3f}%"


def format_time_to_sober(minutes: int) -> str:
    if minutes == 0:
        return "Sober"
    if minutes < 60:
        return f"{minutes} min"
    hours, remaining = divmod(minutes, 60)
    if remaining == 0:
        return f"{hours}h"
    return f"{hours}h {remaining}m"
