"""Storey naming for detected floor elevations (UK convention)."""

from __future__ import annotations

from collections.abc import Sequence

FLOOR_NAMES: tuple[str, ...] = (
    "Basement 2", "Basement 1", "Ground Floor",
    "First Floor", "Second Floor", "Third Floor",
    "Fourth Floor", "Fifth Floor", "Sixth Floor",
    "Seventh Floor", "Eighth Floor", "Ninth Floor",
)

# More floors than this and the lowest one is assumed to be a basement.
# Unverified heuristic: no scan set has confirmed it, do not tune without one.
BASEMENT_INFERENCE_THRESHOLD = 4

_GROUND_INDEX = FLOOR_NAMES.index("Ground Floor")


def floor_label(index: int, total: int) -> str:
    """Name of the floor at ``index`` (0 = lowest) out of ``total`` floors."""
    if total <= 1:
        return "Ground Floor"

    has_basement = total > BASEMENT_INFERENCE_THRESHOLD
    if index == 0:
        return "Basement 1" if has_basement else "Ground Floor"

    name_idx = (_GROUND_INDEX - 1 if has_basement else _GROUND_INDEX) + index
    return FLOOR_NAMES[name_idx] if name_idx < len(FLOOR_NAMES) else f"Level {index}"


def label_floors(elevations: Sequence[float]) -> list[str]:
    """Label an ascending list of floor elevations."""
    if any(b < a for a, b in zip(elevations, elevations[1:])):
        raise ValueError("Floor elevations must be sorted ascending")
    total = len(elevations)
    return [floor_label(i, total) for i in range(total)]
