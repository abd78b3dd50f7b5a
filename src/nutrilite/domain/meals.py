"""Domain models for meal logging."""

from dataclasses import dataclass, replace
from enum import Enum


class MealSlot(str, Enum):
    """Fixed meal slots of a day log."""

    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"
    SNACK = "Snack"

    @classmethod
    def from_name(cls, value: str) -> "MealSlot":
        """Resolve a slot from its name, ignoring case."""
        cleaned = value.strip().lower()
        for slot in cls:
            if slot.value.lower() == cleaned:
                return slot
        raise ValueError(f"Unknown meal slot: {value!r}")


MEAL_SLOTS: tuple[MealSlot, ...] = tuple(MealSlot)


@dataclass(frozen=True)
class FoodItem:
    """A single logged food entry."""

    description: str
    grams: float
    kcal: float
    protein: float
    carbs: float
    fat: float
    ts: str
    brand_name: str | None = None
    data_type: str | None = None
    fdc_id: int | None = None

    @classmethod
    def from_raw(cls, raw: object) -> "FoodItem | None":
        """Parse a stored item, treating bad numbers as zero."""
        if not isinstance(raw, dict):
            return None
        fdc_id = raw.get("fdcId")
        return cls(
            description=str(raw.get("description") or ""),
            grams=to_number(raw.get("grams")),
            kcal=to_number(raw.get("kcal")),
            protein=to_number(raw.get("protein")),
            carbs=to_number(raw.get("carbs")),
            fat=to_number(raw.get("fat")),
            ts=str(raw.get("ts") or ""),
            brand_name=str(raw["brandName"]) if raw.get("brandName") else None,
            data_type=str(raw["dataType"]) if raw.get("dataType") else None,
            fdc_id=fdc_id if isinstance(fdc_id, int) else None,
        )

    def to_dict(self) -> dict[str, object]:
        """Serialize using the persisted key names."""
        return {
            "description": self.description,
            "brandName": self.brand_name or "",
            "dataType": self.data_type or "",
            "fdcId": self.fdc_id,
            "grams": self.grams,
            "kcal": self.kcal,
            "protein": self.protein,
            "carbs": self.carbs,
            "fat": self.fat,
            "ts": self.ts,
        }


@dataclass(frozen=True)
class MealLog:
    """Four meal slots, each an ordered tuple of items (newest first)."""

    breakfast: tuple[FoodItem, ...] = ()
    lunch: tuple[FoodItem, ...] = ()
    dinner: tuple[FoodItem, ...] = ()
    snack: tuple[FoodItem, ...] = ()

    def slot(self, slot: MealSlot) -> tuple[FoodItem, ...]:
        """Return the items of one slot."""
        return getattr(self, slot.name.lower())

    def with_slot(self, slot: MealSlot, items: tuple[FoodItem, ...]) -> "MealLog":
        """Return a copy with one slot replaced."""
        return replace(self, **{slot.name.lower(): tuple(items)})

    def all_items(self) -> list[FoodItem]:
        """Return every item across the four slots."""
        return [item for slot in MEAL_SLOTS for item in self.slot(slot)]

    def is_empty(self) -> bool:
        """Return True when no slot has items."""
        return not self.all_items()

    def to_dict(self) -> dict[str, list[dict[str, object]]]:
        """Serialize keyed by slot name."""
        return {
            slot.value: [item.to_dict() for item in self.slot(slot)]
            for slot in MEAL_SLOTS
        }

    @classmethod
    def from_raw(cls, raw: object) -> "MealLog":
        """Normalize any stored value into a four-slot log."""
        if isinstance(raw, MealLog):
            return raw
        if not isinstance(raw, dict):
            return cls()
        log = cls()
        for slot in MEAL_SLOTS:
            entries = raw.get(slot.value)
            if not isinstance(entries, list | tuple):
                continue
            items = tuple(
                item
                for item in (FoodItem.from_raw(entry) for entry in entries)
                if item is not None
            )
            log = log.with_slot(slot, items)
        return log


@dataclass(frozen=True)
class Totals:
    """Aggregate nutrition for a meal log."""

    calories: int = 0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fat": self.fat,
        }

    @classmethod
    def from_raw(cls, raw: object) -> "Totals | None":
        if not isinstance(raw, dict):
            return None
        return cls(
            calories=int(to_number(raw.get("calories"))),
            protein=to_number(raw.get("protein")),
            carbs=to_number(raw.get("carbs")),
            fat=to_number(raw.get("fat")),
        )


def to_number(value: object) -> float:
    """Coerce a stored value to a finite float, or zero."""
    if isinstance(value, bool):
        return 0.0
    if not isinstance(value, int | float | str):
        return 0.0
    try:
        number = float(value)
    except (OverflowError, ValueError):
        return 0.0
    if number != number or number in {float("inf"), float("-inf")}:
        return 0.0
    return number
