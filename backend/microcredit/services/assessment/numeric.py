"""
Numeric helpers shared by the scoring components.

Every score in this system rounds halves upward (floor(x + 0.5)) so results
match the published tables (75.5 -> 76, 74.5 -> 75). The built-in round()
uses banker's rounding and is not used for scores.
"""
import math
from typing import Optional


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_score(value: Optional[float], default: float = 50) -> float:
    """Clamp a component score to [0, 100], substituting default for None."""
    if value is None:
        value = default
    return max(0.0, min(100.0, float(value)))
