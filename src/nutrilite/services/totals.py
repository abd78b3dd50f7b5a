"""Totals and energy estimates for meal logs."""

import math

from nutrilite.domain.days import DayRecord
from nutrilite.domain.meals import MealLog, Totals, to_number

DEFAULT_KCAL_PER_STEP = 0.04


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero for positive values, like a calculator.

    Values that overflow to infinity, and NaN, round to zero.
    """
    factor = 10**digits
    scaled = value * factor + 0.5
    if not math.isfinite(scaled):
        return 0.0
    return math.floor(scaled) / factor


def compute_totals(meal_log: object) -> Totals:
    """Sum calories and macros across all four slots.

    Accepts a MealLog or any raw stored value; malformed input contributes
    zero instead of raising.
    """
    items = MealLog.from_raw(meal_log).all_items()
    kcal = sum(item.kcal for item in items)
    protein = sum(item.protein for item in items)
    carbs = sum(item.carbs for item in items)
    fat = sum(item.fat for item in items)
    return Totals(
        calories=int(round_half_up(kcal)),
        protein=round_half_up(protein, 1),
        carbs=round_half_up(carbs, 1),
        fat=round_half_up(fat, 1),
    )


def estimate_burned_from_steps(
    steps: object, kcal_per_step: float = DEFAULT_KCAL_PER_STEP
) -> int:
    """Estimate calories burned from a step count."""
    return int(round_half_up(to_number(steps) * kcal_per_step))


def burned_for_day(
    record: DayRecord | None, kcal_per_step: float = DEFAULT_KCAL_PER_STEP
) -> int:
    """Prefer a stored burned value, else estimate from the record's steps."""
    if record is None:
        return 0
    if record.burned > 0:
        return record.burned
    return estimate_burned_from_steps(record.steps, kcal_per_step)


def remaining_calories(goal: int, totals: Totals) -> int:
    return max(0, goal - totals.calories)


def net_calories(totals: Totals, burned: int) -> int:
    return max(0, totals.calories - burned)


def goal_progress_percent(goal: int, totals: Totals) -> int:
    """Percentage of the goal consumed, capped at 100."""
    if not goal:
        return 0
    return min(100, int(round_half_up(totals.calories / goal * 100)))
