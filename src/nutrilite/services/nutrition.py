"""Nutrient extraction from FDC payloads and portion scaling."""

from datetime import UTC, datetime

from nutrilite.domain.meals import FoodItem, to_number
from nutrilite.domain.nutrition import FoodDetails, FoodSummary, MacroProfile
from nutrilite.services.totals import round_half_up

# Canonical key -> acceptable lower-case substrings of the upstream nutrient name.
NUTRIENT_NAMES: dict[str, tuple[str, ...]] = {
    "kcal": ("energy",),
    "protein": ("protein",),
    "carbs": ("carbohydrate",),
    "fat": ("total lipid", "total fat"),
}

DATA_TYPE_FILTERS: dict[str, list[str]] = {
    "all": ["Foundation", "Branded", "Survey (FNDDS)", "SR Legacy"],
    "foundation": ["Foundation"],
    "branded": ["Branded"],
    "srlegacy": ["SR Legacy"],
}


def data_types_for_filter(name: str | None) -> list[str]:
    """Map a UI filter name to FDC data types, defaulting to all."""
    key = (name or "all").replace(" ", "").replace("_", "").lower()
    return list(DATA_TYPE_FILTERS.get(key, DATA_TYPE_FILTERS["all"]))


def nutrient_amount(food_nutrients: object, names: tuple[str, ...]) -> float:
    """Return the amount of the first nutrient whose name matches."""
    if not isinstance(food_nutrients, list):
        return 0.0
    for nutrient in food_nutrients:
        if not isinstance(nutrient, dict):
            continue
        info = nutrient.get("nutrient")
        info_name = info.get("name") if isinstance(info, dict) else None
        name = str(info_name or nutrient.get("nutrientName") or "").lower()
        if not name or not any(fragment in name for fragment in names):
            continue
        if _is_kilojoules(nutrient, info):
            continue
        amount = nutrient.get("amount")
        if amount is None:
            amount = nutrient.get("value")
        return to_number(amount)
    return 0.0


def extract_per_100g(food: dict[str, object]) -> MacroProfile:
    """Extract kcal and macros per 100 g from an FDC food payload."""
    nutrients = food.get("foodNutrients")
    values = {
        key: nutrient_amount(nutrients, names) for key, names in NUTRIENT_NAMES.items()
    }
    return MacroProfile(
        kcal=values["kcal"],
        protein=values["protein"],
        carbs=values["carbs"],
        fat=values["fat"],
    )


def summarize_food(food: dict[str, object]) -> FoodSummary | None:
    """Return the display fields of a search hit, or None without an id."""
    fdc_id = food.get("fdcId")
    if not isinstance(fdc_id, int):
        return None
    return FoodSummary(
        fdc_id=fdc_id,
        description=str(food.get("description") or ""),
        brand_name=str(food.get("brandName") or food.get("brandOwner") or ""),
        data_type=str(food.get("dataType") or ""),
    )


def summarize_search_results(payload: object) -> list[FoodSummary]:
    """Reduce an FDC search payload to display summaries."""
    if not isinstance(payload, dict) or not isinstance(payload.get("foods"), list):
        return []
    summaries = []
    for food in payload["foods"]:
        if isinstance(food, dict):
            summary = summarize_food(food)
            if summary is not None:
                summaries.append(summary)
    return summaries


def food_details(food: dict[str, object]) -> FoodDetails | None:
    summary = summarize_food(food)
    if summary is None:
        return None
    return FoodDetails(summary=summary, per_100g=extract_per_100g(food))


def build_food_item(
    details: FoodDetails, grams: float, now: datetime | None = None
) -> FoodItem:
    """Scale per-100g values to a portion and stamp it."""
    ratio = max(0.0, grams) / 100
    per_100g = details.per_100g
    return FoodItem(
        description=details.summary.description,
        brand_name=details.summary.brand_name or None,
        data_type=details.summary.data_type or None,
        fdc_id=details.summary.fdc_id,
        grams=max(0.0, grams),
        kcal=round_half_up(per_100g.kcal * ratio),
        protein=round_half_up(per_100g.protein * ratio, 1),
        carbs=round_half_up(per_100g.carbs * ratio, 1),
        fat=round_half_up(per_100g.fat * ratio, 1),
        ts=(now or datetime.now(tz=UTC)).isoformat(),
    )


def _is_kilojoules(nutrient: dict[str, object], info: object) -> bool:
    unit = nutrient.get("unitName")
    if isinstance(info, dict):
        unit = info.get("unitName") or unit
    return str(unit or "").lower() == "kj"
