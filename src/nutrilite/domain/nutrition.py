"""Nutrition domain models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MacroProfile:
    """Macronutrient profile per 100 g of a food."""

    kcal: float
    protein: float
    carbs: float
    fat: float


@dataclass(frozen=True)
class FoodSummary:
    """Summary information about a food from FDC search results."""

    fdc_id: int
    description: str
    brand_name: str
    data_type: str


@dataclass(frozen=True)
class FoodDetails:
    """Food details with per-100g macros."""

    summary: FoodSummary
    per_100g: MacroProfile
