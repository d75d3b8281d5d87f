# levelup/utils/leveling.py
import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with ties going up (12.5 -> 13), unlike the built-in round()."""
    quantum = Decimal(1).scaleb(-digits)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return float(rounded) if digits else int(rounded)


def xp_to_reach_next(level: int) -> int:
    """XP required to go from `level` to `level + 1`."""
    return math.floor(50 * level + level ** 1.8)


def progress_from_total_xp(total_xp: Any) -> Dict[str, int]:
    """
    Break a cumulative XP total down into level and in-level progress.

    Returns a dict with:
        level: current level (starts at 1)
        prev_total: cumulative XP at the start of the current level
        next_total: cumulative XP needed to reach the next level
        current: XP earned inside the current level
        span: XP width of the current level
        percent: floor(current / span * 100)
    """
    xp = max(0, int(total_xp or 0))

    level = 1
    prev_total = 0
    span = xp_to_reach_next(level)

    while xp >= prev_total + span:
        prev_total += span
        level += 1
        span = xp_to_reach_next(level)

    current = xp - prev_total

    return {
        "level": level,
        "prev_total": prev_total,
        "next_total": prev_total + span,
        "current": current,
        "span": span,
        "percent": math.floor(current / span * 100),
    }


def level_for_xp(total_xp: Any) -> int:
    return progress_from_total_xp(total_xp)["level"]
