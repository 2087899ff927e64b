"""Domain models for meal logging and history."""

from dataclasses import dataclass
from datetime import date, datetime

from calorie_tracker.domain.nutrition import CamelModel, FoodItem


@dataclass(frozen=True)
class MealTotals:
    """Summed calories and macros of a meal."""

    calories: float
    protein: float
    fat: float
    carbs: float


class CalorieLogEntry(CamelModel):
    """Confirmed meal stored in the history log."""

    id: str
    date: datetime
    meal_items: list[FoodItem]
    total_calories: float
    total_protein: float
    total_fat: float
    total_carbohydrates: float


@dataclass(frozen=True)
class DailyHistoryGroup:
    """History entries of one calendar day with aggregated totals."""

    day: date
    label: str
    formatted_date: str
    entries: list[CalorieLogEntry]
    total_calories: float
    total_protein: float
    total_fat: float
    total_carbohydrates: float
