"""Gym calculators: one-rep max estimate and barbell plate loading."""

from __future__ import annotations

STANDARD_BAR_WEIGHT = 20.0
AVAILABLE_PLATES = (25.0, 20.0, 15.0, 10.0, 5.0, 2.5, 1.25)
PERCENTAGES = (95, 90, 85, 80, 75, 70, 65, 60, 55, 50)


def estimate_one_rep_max(weight: float, reps: int) -> float:
    """Estimate the one-rep max with the Epley formula.

    A single rep is returned unchanged; otherwise the estimate is rounded to
    the nearest kilogram.
    """
    if weight <= 0 or reps <= 0:
        return 0.0
    if reps == 1:
        return float(weight)
    return float(round(weight * (1 + reps / 30)))


def percentage_table(one_rep_max: float) -> list[tuple[int, float]]:
    """Return ``(percent, weight)`` pairs from 95% down to 50%."""
    return [(pct, round(one_rep_max * pct / 100, 1)) for pct in PERCENTAGES]


def plate_breakdown(
    target: float,
    bar_weight: float = STANDARD_BAR_WEIGHT,
    plates: tuple[float, ...] = AVAILABLE_PLATES,
) -> list[float]:
    """Return the plates to load on each side of the bar, heaviest first.

    Weight that cannot be matched with the available plates is left off.
    """
    if target <= bar_weight:
        return []
    remaining = (target - bar_weight) / 2
    loaded: list[float] = []
    for plate in plates:
        while remaining >= plate:
            loaded.append(plate)
            remaining -= plate
    return loaded
