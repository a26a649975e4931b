"""Streak level and next-badge helpers for the streak card."""

from typing import Dict, Union

from nutritrack.models.streak import StreakLevel

SILVER_AT = 4
GOLD_AT = 8
MONTHLY_BADGE_AT = 30
CENTURY_BADGE_AT = 100


def streak_level(current_streak: int) -> StreakLevel:
    if current_streak >= GOLD_AT:
        return "gold"
    if current_streak >= SILVER_AT:
        return "silver"
    return "bronze"


def level_progress(current_streak: int) -> float:
    """Percent of the way to the next level (100 once gold)."""
    if current_streak < SILVER_AT:
        return current_streak / SILVER_AT * 100
    if current_streak < GOLD_AT:
        return (current_streak - SILVER_AT) / (GOLD_AT - SILVER_AT) * 100
    return 100.0


def next_milestone(current_streak: int) -> Dict[str, Union[int, str]]:
    if current_streak < SILVER_AT:
        return {"days": SILVER_AT - current_streak, "level": "Silver"}
    if current_streak < GOLD_AT:
        return {"days": GOLD_AT - current_streak, "level": "Gold"}
    if current_streak < MONTHLY_BADGE_AT:
        return {"days": MONTHLY_BADGE_AT - current_streak, "level": "Monthly Badge"}
    return {"days": max(0, CENTURY_BADGE_AT - current_streak), "level": "Century Badge"}
