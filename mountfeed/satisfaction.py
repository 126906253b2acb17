"""
MountFeed — mountfeed/satisfaction.py
Satisfaction Model: value -> state, state -> speed, food -> benefit.
====================================================================
Version:     0.2
Stack:       Python 3.11+
Status:      Production-ready. Pure functions, no side effects.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Iterable, Tuple

# ============================================================
# DESIGN VARIABLE DEFAULTS
# Same scale as pet happiness: three levels of 333000 each.
# ============================================================

HAPPINESS_LEVEL_SIZE: int = 333000
SATISFACTION_MAX: int = 999000
THRESHOLD_HAPPY: int = 2 * HAPPINESS_LEVEL_SIZE     # 666000
THRESHOLD_CONTENT: int = HAPPINESS_LEVEL_SIZE       # 333000

# (max level gap above item level, benefit). One good feed moves the
# mount up roughly one tier.
DEFAULT_FOOD_BENEFIT_TIERS: Tuple[Tuple[int, int], ...] = (
    (5, 350000),
    (10, 175000),
    (14, 80000),
)


class SatisfactionState(IntEnum):
    UNHAPPY = 0
    CONTENT = 1
    HAPPY = 2

    @property
    def label(self) -> str:
        return self.name.lower()


def clamp_satisfaction(value: int) -> int:
    return max(0, min(SATISFACTION_MAX, value))


def state_of(satisfaction: int) -> SatisfactionState:
    """Threshold comparison. Total and non-decreasing in satisfaction."""
    if satisfaction >= THRESHOLD_HAPPY:
        return SatisfactionState.HAPPY
    if satisfaction >= THRESHOLD_CONTENT:
        return SatisfactionState.CONTENT
    return SatisfactionState.UNHAPPY


def speed_multiplier(state: SatisfactionState, content: float = 0.75, unhappy: float = 0.50) -> float:
    if state == SatisfactionState.CONTENT:
        return content
    if state == SatisfactionState.UNHAPPY:
        return unhappy
    return 1.0


def food_benefit(player_level: int, item_level: int,
                 tiers: Iterable[Tuple[int, int]] = DEFAULT_FOOD_BENEFIT_TIERS) -> int:
    """
    Satisfaction granted by one unit of food.
    tiers are (max_level_gap, amount) pairs in ascending gap order; the
    first tier whose gap covers the player wins. Food more than the
    widest gap below the player is worth nothing ("too low level").
    """
    for max_gap, amount in tiers:
        if player_level <= item_level + max_gap:
            return amount
    return 0
