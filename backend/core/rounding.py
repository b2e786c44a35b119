# core/rounding.py
from __future__ import annotations
import math


def round_half_up(x: float, places: int = 0) -> float:
    """
    Round to `places` decimals with halves going up, after scaling.

    Unlike built-in round() (banker's rounding on the stored binary value),
    22.5 -> 23 and 0.075 -> 0.08 at two places.
    """
    scale = 10 ** places
    return math.floor(x * scale + 0.5) / scale
