"""Millimetre, canvas pixel and printer dot conversions."""

from __future__ import annotations

import math

from ..options import CANVAS_PX_PER_MM


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero (2.5 -> 3, -2.5 -> -3)."""
    rounded = math.floor(abs(value) + 0.5)
    return int(rounded if value >= 0 else -rounded)


def mm_to_dots(mm: float, dots_per_mm: int) -> int:
    if not mm:
        return 0
    return round_half_away(mm * dots_per_mm)


def px_to_dots(px: float, dots_per_mm: int) -> int:
    """Canvas pixels (6 px per mm) to printer dots."""
    if not px:
        return 0
    return mm_to_dots(px / CANVAS_PX_PER_MM, dots_per_mm)
