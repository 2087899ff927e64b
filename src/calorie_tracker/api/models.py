"""Pydantic request models for the HTTP API."""

from pydantic import Field

from calorie_tracker.domain.nutrition import CamelModel, FoodItem


class AnalyzeRequest(CamelModel):
    """Optional photo to analyze instead of the current capture."""

    photo_data_uri: str | None = Field(default=None, pattern=r"^data:[\w/+.-]+;base64,")


class TotalsPayload(CamelModel):
    """Meal totals supplied by the client."""

    calories: float = 0.0
    protein: float = 0.0
    fat: float = 0.0
    carbs: float = 0.0


class LogMealRequest(CamelModel):
    """Explicit meal to log instead of the pending analysis."""

    meal_items: list[FoodItem] = Field(default_factory=list)
    totals: TotalsPayload | None = None


class GoalUpdate(CamelModel):
    """Manual daily goal override."""

    daily_goal: int | float | str


class GoalPresetRequest(CamelModel):
    """Goal adjuster preset."""

    add_calories: int | None = None
    match_intake: bool = False
