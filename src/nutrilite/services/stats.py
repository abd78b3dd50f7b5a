"""Statistics over saved days: body metrics, goals, analytics and history."""

from dataclasses import dataclass
from datetime import date, timedelta

from nutrilite.domain.days import DayRecord, Mode
from nutrilite.domain.meals import MEAL_SLOTS, MealSlot, Totals
from nutrilite.services.totals import (
    burned_for_day,
    goal_progress_percent,
    net_calories,
    remaining_calories,
    round_half_up,
)
from nutrilite.services.tracker import sorted_date_keys

CM_PER_INCH = 2.54
LB_PER_KG = 2.20462
MIN_SUGGESTED_CALORIES = 1200

# kcal per kg of body weight, low and high end, by mode
CALORIES_PER_KG: dict[Mode, tuple[int, int]] = {
    Mode.CUT: (20, 25),
    Mode.MAINTAIN: (25, 30),
    Mode.BULK: (30, 35),
}

BMI_ADJUSTMENTS: dict[str, int] = {
    "Underweight": 150,
    "Normal": 0,
    "Overweight": -150,
    "Obesity": -250,
}


@dataclass(frozen=True)
class MacroTargets:
    """Daily gram targets for a mode."""

    protein: int
    carbs: int
    fat: int


MACRO_TARGETS: dict[Mode, MacroTargets] = {
    Mode.CUT: MacroTargets(protein=160, carbs=180, fat=55),
    Mode.MAINTAIN: MacroTargets(protein=150, carbs=220, fat=65),
    Mode.BULK: MacroTargets(protein=170, carbs=280, fat=75),
}


@dataclass(frozen=True)
class BodyMetrics:
    height_cm: float
    weight_kg: float
    height_ft: int
    height_in: int
    weight_lb: int
    bmi: float
    category: str


def us_to_metric(
    height_ft: float, height_in: float, weight_lb: float
) -> tuple[int, float]:
    """Convert feet/inches/pounds to whole centimeters and kilograms."""
    height_cm = int(round_half_up((height_ft * 12 + height_in) * CM_PER_INCH))
    weight_kg = round_half_up(weight_lb / LB_PER_KG, 1)
    return max(0, height_cm), max(0.0, weight_kg)


def metric_to_us(height_cm: float, weight_kg: float) -> tuple[int, int, int]:
    """Convert centimeters/kilograms to feet, inches and pounds."""
    total_inches = max(0.0, height_cm) / CM_PER_INCH
    feet = int(total_inches // 12)
    inches = int(round_half_up(total_inches - feet * 12))
    if inches == 12:
        feet, inches = feet + 1, 0
    pounds = int(round_half_up(max(0.0, weight_kg) * LB_PER_KG))
    return feet, inches, pounds


def body_mass_index(height_cm: float, weight_kg: float) -> float:
    height_m = height_cm / 100
    if height_m <= 0:
        return 0.0
    return round_half_up(weight_kg / (height_m * height_m), 1)


def bmi_category(bmi: float) -> str:
    if bmi <= 0:
        return "Unknown"
    if bmi < 18.5:
        return "Underweight"
    if bmi < 25:
        return "Normal"
    if bmi < 30:
        return "Overweight"
    return "Obesity"


def body_metrics(height_cm: float, weight_kg: float) -> BodyMetrics:
    """Derive both unit systems, BMI and its category."""
    feet, inches, pounds = metric_to_us(height_cm, weight_kg)
    bmi = body_mass_index(height_cm, weight_kg)
    return BodyMetrics(
        height_cm=height_cm,
        weight_kg=weight_kg,
        height_ft=feet,
        height_in=inches,
        weight_lb=pounds,
        bmi=bmi,
        category=bmi_category(bmi),
    )


def suggested_calories(weight_kg: float, mode: Mode, category: str) -> int:
    """Suggest a daily goal from body weight, mode and BMI category."""
    if weight_kg <= 0:
        return 0
    low, high = CALORIES_PER_KG[mode]
    adjust = BMI_ADJUSTMENTS.get(category, 0)
    goal = int(round_half_up((low + high) / 2 * weight_kg + adjust))
    return max(MIN_SUGGESTED_CALORIES, goal)


def macro_targets(mode: Mode) -> MacroTargets:
    return MACRO_TARGETS[mode]


@dataclass(frozen=True)
class DayCalories:
    date_key: str
    calories: int


@dataclass(frozen=True)
class AnalyticsSummary:
    """Figures for the analytics view, anchored on today."""

    today_key: str
    has_today: bool
    goal: int
    mode: Mode
    last_7_days: list[DayCalories]
    avg_7_days: float
    best_day: int
    worst_day: int
    hit_rate: int
    consumed_today: int
    remaining_today: int
    burned_today: int
    net_today: int
    macros_today: Totals


def last_n_keys(end_key: str, count: int) -> list[str]:
    """Return `count` consecutive date keys ending at `end_key`, oldest first."""
    end = date.fromisoformat(end_key)
    return [
        (end - timedelta(days=offset)).isoformat()
        for offset in range(count - 1, -1, -1)
    ]


def build_analytics(
    days: dict[str, DayRecord],
    today_key: str,
    *,
    default_goal: int = 2000,
    kcal_per_step: float = 0.04,
) -> AnalyticsSummary:
    """Summarize today and the trailing 7 days of saved records."""
    today = days.get(today_key)
    goal = today.goal if today else default_goal
    last_7 = [
        DayCalories(key, days[key].totals.calories if key in days else 0)
        for key in last_n_keys(today_key, 7)
    ]
    logged = [day.calories for day in last_7 if day.calories > 0]
    within_goal = [calories for calories in logged if calories <= goal]
    totals = today.totals if today else Totals()
    burned = burned_for_day(today, kcal_per_step)
    return AnalyticsSummary(
        today_key=today_key,
        has_today=today is not None,
        goal=goal,
        mode=today.mode if today else Mode.MAINTAIN,
        last_7_days=last_7,
        avg_7_days=sum(logged) / len(logged) if logged else 0.0,
        best_day=max(logged) if logged else 0,
        worst_day=min(logged) if logged else 0,
        hit_rate=(
            int(round_half_up(len(within_goal) / len(logged) * 100)) if logged else 0
        ),
        consumed_today=totals.calories,
        remaining_today=remaining_calories(goal, totals),
        burned_today=burned,
        net_today=net_calories(totals, burned),
        macros_today=totals,
    )


@dataclass(frozen=True)
class HistoryFilter:
    """Filters for the history list; empty values disable a filter."""

    last_days: int = 14
    from_date: str | None = None
    to_date: str | None = None
    meal: MealSlot | None = None
    food_query: str = ""


def filter_history(
    days: dict[str, DayRecord], filters: HistoryFilter, today_key: str
) -> list[str]:
    """Return matching date keys, newest first."""
    keys = [key for key in sorted_date_keys(days) if _parse_key(key) is not None]

    if filters.last_days > 0:
        cutoff = date.fromisoformat(today_key) - timedelta(days=filters.last_days - 1)
        keys = [key for key in keys if _parse_key(key) >= cutoff]

    start = _parse_key(filters.from_date)
    if start is not None:
        keys = [key for key in keys if _parse_key(key) >= start]
    end = _parse_key(filters.to_date)
    if end is not None:
        keys = [key for key in keys if _parse_key(key) <= end]

    query = filters.food_query.strip().lower()
    if filters.meal is not None or query:
        slots = [filters.meal] if filters.meal is not None else list(MEAL_SLOTS)
        matched = []
        for key in keys:
            log = days[key].meal_log
            items = [item for slot in slots for item in log.slot(slot)]
            if query:
                if any(query in item.description.lower() for item in items):
                    matched.append(key)
            elif items:
                matched.append(key)
        keys = matched
    return keys


@dataclass(frozen=True)
class WeekBar:
    date_key: str
    label: str
    calories: int
    goal: int
    percent: int
    has_data: bool


def week_bars(
    days: dict[str, DayRecord], end_key: str, fallback_goal: int = 2000
) -> list[WeekBar]:
    """Seven daily bars ending at `end_key`."""
    bars = []
    for index, key in enumerate(last_n_keys(end_key, 7)):
        day = days.get(key)
        goal = day.goal if day else fallback_goal
        totals = day.totals if day else Totals()
        bars.append(
            WeekBar(
                date_key=key,
                label=f"D{index + 1}",
                calories=totals.calories,
                goal=goal,
                percent=goal_progress_percent(goal, totals),
                has_data=day is not None,
            )
        )
    return bars


def _parse_key(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None
