"""Merging of saved and draft meal logs."""

from nutrilite.domain.meals import MEAL_SLOTS, FoodItem, MealLog


def item_signature(item: FoodItem) -> tuple[str, float, float, str]:
    """Identity of a logged item for de-duplication."""
    return (item.description, item.grams, item.kcal, item.ts)


def dedupe_items(items: list[FoodItem]) -> tuple[FoodItem, ...]:
    """Drop later items whose signature was already seen."""
    seen: set[tuple[str, float, float, str]] = set()
    unique: list[FoodItem] = []
    for item in items:
        signature = item_signature(item)
        if signature in seen:
            continue
        seen.add(signature)
        unique.append(item)
    return tuple(unique)


def merge_meal_logs(existing: object, new: object) -> MealLog:
    """Combine a saved log with a draft log without losing saved items.

    Each slot keeps the existing items first, followed by new ones, with
    duplicates removed. Malformed inputs are treated as empty logs.
    """
    old_log = MealLog.from_raw(existing)
    new_log = MealLog.from_raw(new)
    merged = MealLog()
    for slot in MEAL_SLOTS:
        combined = [*old_log.slot(slot), *new_log.slot(slot)]
        merged = merged.with_slot(slot, dedupe_items(combined))
    return merged
