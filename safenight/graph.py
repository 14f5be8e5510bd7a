"""
BAC-over-time graph. Produces image file or returns data for web/mobile.
"""

from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from safenight.calculations import LEGAL_LIMIT_BAC
from safenight.store import DrinkStore


def curve_data(
    store: DrinkStore,
    current_time: Optional[datetime] = None,
    step_minutes: float = 15.0,
    max_minutes: float = 12 * 60.0,
) -> List[Tuple[float, float]]:
    """(minutes_from_now, bac_percent) for use in any frontend."""
    return store.curve(current_time=current_time, step_minutes=step_minutes, max_minutes=max_minutes)


def save_bac_graph(
    store: DrinkStore,
    output_path: str = "bac_graph.png",
    current_time: Optional[datetime] = None,
    step_minutes: float = 15.0,
    max_minutes: float = 12 * 60.0,
    title: str = "Estimated BAC",
) -> str:
    """
    Plot the projected BAC curve with matplotlib and save to file.
    Returns path to saved file.
    """
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    points = curve_data(store, current_time=current_time, step_minutes=step_minutes, max_minutes=max_minutes)
    if not points:
        hours, bacs = [0.0], [0.0]
    else:
        minutes, bacs = zip(*points)
        hours = [m / 60.0 for m in minutes]

    fig, ax = plt.subplots(figsize=(10, 5))
    ax.plot(hours, bacs, color="#7c3aed", linewidth=2, label="BAC")
    ax.fill_between(hours, bacs, alpha=0.2, color="#7c3aed")
    ax.axhline(y=LEGAL_LIMIT_BAC, color="#ef4444", linestyle="--", linewidth=1, label="Legal limit (0.08%)")
    ax.set_xlabel("Hours from now")
    ax.set_ylabel("BAC (%)")
    ax.set_title(title)
    ax.legend(loc="upper right")
    ax.set_ylim(bottom=0)
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=150)
    plt.close(fig)
    return output_path
