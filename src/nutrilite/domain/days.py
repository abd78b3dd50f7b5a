"""Domain models for saved days and the in-progress draft."""

from dataclasses import dataclass, field
from enum import Enum

from nutrilite.domain.meals import MealLog, Totals


class Mode(str, Enum):
    """Diet mode selected for a day."""

    CUT = "Cut"
    MAINTAIN = "Maintain"
    BULK = "Bulk"

    @classmethod
    def parse(cls, value: object) -> "Mode":
        """Return the matching mode, falling back to Maintain."""
        if isinstance(value, Mode):
            return value
        cleaned = str(value or "").strip().lower()
        for mode in cls:
            if mode.value.lower() == cleaned:
                return mode
        return cls.MAINTAIN


@dataclass(frozen=True)
class DayRecord:
    """A saved snapshot of one date's log and derived totals."""

    date_key: str
    saved_at: str
    mode: Mode
    goal: int
    water_cups: int
    steps: int
    burned: int
    meal_log: MealLog
    totals: Totals


@dataclass(frozen=True)
class Draft:
    """The single persisted in-progress state."""

    date_key: str
    meal_log: MealLog
    water_cups: int
    steps: int
    mode: Mode
    daily_goal: int
    last_saved_at: str | None
    updated_at: str


@dataclass(frozen=True)
class WorkingDay:
    """In-memory working state for one date key."""

    date_key: str
    meal_log: MealLog = field(default_factory=MealLog)
    water_cups: int = 0
    steps: int = 2500
    mode: Mode = Mode.MAINTAIN
    goal: int = 2000
    last_saved_at: str | None = None
