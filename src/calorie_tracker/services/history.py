"""Meal history: totals, logging and by-day grouping."""

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

from calorie_tracker.domain.errors import EmptyMealError
from calorie_tracker.domain.meals import CalorieLogEntry, DailyHistoryGroup, MealTotals
from calorie_tracker.domain.nutrition import FoodItem
from calorie_tracker.services.storage import PersistentValue

_logger = logging.getLogger(__name__)


def compute_totals(items: list[FoodItem]) -> MealTotals:
    """Sum calories and macros across meal items."""
    total = MealTotals(calories=0.0, protein=0.0, fat=0.0, carbs=0.0)
    for item in items:
        info = item.nutrient_info
        total = MealTotals(
            calories=total.calories + (info.calories or 0.0),
            protein=total.protein + (info.protein or 0.0),
            fat=total.fat + (info.fat or 0.0),
            carbs=total.carbs + (info.carbohydrates or 0.0),
        )
    return total


@dataclass
class HistoryService:
    """Ordered meal log, most recent entry first."""

    history: PersistentValue[list[CalorieLogEntry]]
    timezone_name: str = "UTC"

    def entries(self) -> list[CalorieLogEntry]:
        """Return the logged meals, newest first."""
        return list(self.history.value)

    def log_meal(
        self,
        items: list[FoodItem],
        totals: MealTotals,
        logged_at: datetime | None = None,
    ) -> CalorieLogEntry:
        """Prepend a new log entry for a confirmed meal."""
        if not items:
            raise EmptyMealError("Cannot log an empty meal. There are no items to log.")
        resolved_at = logged_at or datetime.now(tz=UTC)
        entry = CalorieLogEntry(
            id=_new_entry_id(resolved_at, self.history.value),
            date=resolved_at,
            meal_items=list(items),
            total_calories=totals.calories,
            total_protein=totals.protein,
            total_fat=totals.fat,
            total_carbohydrates=totals.carbs,
        )
        self.history.set(lambda previous: [entry, *previous])
        _logger.info(
            "Logged meal %s: %s items, %.0f kcal", entry.id, len(items), totals.calories
        )
        return entry

    def remove_entry(self, entry_id: str) -> None:
        """Remove an entry by id; unknown ids are ignored."""
        self.history.set(
            lambda previous: [entry for entry in previous if entry.id != entry_id]
        )

    def clear_all(self) -> None:
        """Remove every entry."""
        self.history.set([])

    def group_by_day(self, now: datetime | None = None) -> list[DailyHistoryGroup]:
        """Group entries by local calendar day, newest day first."""
        tz = ZoneInfo(self.timezone_name)
        today = (now or datetime.now(tz=tz)).astimezone(tz).date()
        grouped: dict[date, list[CalorieLogEntry]] = {}
        ordered = sorted(
            self.history.value, key=lambda entry: _as_aware(entry.date), reverse=True
        )
        for entry in ordered:
            day = _as_aware(entry.date).astimezone(tz).date()
            grouped.setdefault(day, []).append(entry)
        return [
            _aggregate_group(day, entries, today)
            for day, entries in sorted(grouped.items(), reverse=True)
        ]

    def today_totals(self, now: datetime | None = None) -> MealTotals:
        """Return the totals consumed on the current local day."""
        tz = ZoneInfo(self.timezone_name)
        today = (now or datetime.now(tz=tz)).astimezone(tz).date()
        total = MealTotals(calories=0.0, protein=0.0, fat=0.0, carbs=0.0)
        for entry in self.history.value:
            if _as_aware(entry.date).astimezone(tz).date() != today:
                continue
            total = MealTotals(
                calories=total.calories + entry.total_calories,
                protein=total.protein + entry.total_protein,
                fat=total.fat + entry.total_fat,
                carbs=total.carbs + entry.total_carbohydrates,
            )
        return total


def _aggregate_group(
    day: date, entries: list[CalorieLogEntry], today: date
) -> DailyHistoryGroup:
    formatted = format_day(day)
    if day == today:
        label = "Today"
    elif day == today - timedelta(days=1):
        label = "Yesterday"
    else:
        label = formatted
    return DailyHistoryGroup(
        day=day,
        label=label,
        formatted_date=formatted,
        entries=entries,
        total_calories=sum(entry.total_calories for entry in entries),
        total_protein=sum(entry.total_protein for entry in entries),
        total_fat=sum(entry.total_fat for entry in entries),
        total_carbohydrates=sum(entry.total_carbohydrates for entry in entries),
    )


def format_day(day: date) -> str:
    """Format a day like ``October 18, 2026``."""
    return f"{day:%B} {day.day}, {day.year}"


def _as_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _new_entry_id(logged_at: datetime, existing: list[CalorieLogEntry]) -> str:
    """Return a millisecond timestamp id that is not used yet."""
    taken = {entry.id for entry in existing}
    candidate = int(logged_at.timestamp() * 1000)
    while str(candidate) in taken:
        candidate += 1
    return str(candidate)
