"""Pydantic models for API request payloads."""

from pydantic import BaseModel, ConfigDict, Field


class UsdaSearchRequest(BaseModel):
    """Body of a food search."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    query: str | None = None
    pageSize: int | None = None  # noqa: N815
    dataType: list[str] | None = None  # noqa: N815


class ChatRequest(BaseModel):
    """Body of a chat prompt."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    message: str | None = None


class FoodItemPayload(BaseModel):
    """A food item already scaled to a portion by the client."""

    description: str = Field(min_length=1)
    brandName: str | None = None  # noqa: N815
    dataType: str | None = None  # noqa: N815
    fdcId: int | None = None  # noqa: N815
    grams: float = Field(gt=0)
    kcal: float = Field(default=0.0, ge=0)
    protein: float = Field(default=0.0, ge=0)
    carbs: float = Field(default=0.0, ge=0)
    fat: float = Field(default=0.0, ge=0)
    ts: str | None = None


class AddFoodRequest(BaseModel):
    """Add a food to a meal, either as a ready item or by FDC id and grams."""

    meal: str
    food: FoodItemPayload | None = None
    fdcId: int | None = None  # noqa: N815
    grams: float | None = Field(default=None, gt=0)


class UpdateDayRequest(BaseModel):
    """Partial update of the working day's settings."""

    waterCups: int | None = Field(default=None, ge=0)  # noqa: N815
    steps: int | None = Field(default=None, ge=0)
    mode: str | None = None
    goal: int | None = Field(default=None, gt=0)


class BodyMetricsRequest(BaseModel):
    """Height and weight in either unit system."""

    units: str = "Metric"
    heightCm: float | None = Field(default=None, ge=0)  # noqa: N815
    weightKg: float | None = Field(default=None, ge=0)  # noqa: N815
    heightFt: float | None = Field(default=None, ge=0)  # noqa: N815
    heightIn: float | None = Field(default=None, ge=0)  # noqa: N815
    weightLb: float | None = Field(default=None, ge=0)  # noqa: N815
    mode: str | None = None


class AssistantRequest(BaseModel):
    """Question for the offline helper."""

    message: str = ""
    date: str | None = None
