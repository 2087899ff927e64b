"""Current meal: analysis results awaiting confirmation."""

from dataclasses import dataclass

from calorie_tracker.domain.errors import EmptyMealError, NoImageSelectedError
from calorie_tracker.domain.meals import CalorieLogEntry, MealTotals
from calorie_tracker.domain.nutrition import FoodItem
from calorie_tracker.services.capture import CaptureSurface
from calorie_tracker.services.history import HistoryService, compute_totals
from calorie_tracker.services.pipeline import MealAnalysis, NutritionPipeline


@dataclass
class MealService:
    """Analyzes the selected photo and logs the resulting meal on request."""

    pipeline: NutritionPipeline
    capture_surface: CaptureSurface
    history_service: HistoryService
    current: MealAnalysis | None = None

    async def analyze(self, photo_data_uri: str | None = None) -> MealAnalysis:
        """Analyze the given photo, or the one held by the capture surface."""
        image = photo_data_uri or self.capture_surface.image_data_uri
        if not image:
            raise NoImageSelectedError(
                "Please select an image or capture a photo first."
            )
        self.current = None
        analysis = await self.pipeline.analyze(image)
        self.current = analysis
        return analysis

    def current_items(self) -> list[FoodItem]:
        """Return the items of the pending meal."""
        return list(self.current.items) if self.current else []

    def current_totals(self) -> MealTotals:
        """Return totals of the pending meal."""
        return compute_totals(self.current_items())

    def log_current(self) -> CalorieLogEntry:
        """Log the pending meal and clear it."""
        items = self.current_items()
        if not items:
            raise EmptyMealError("Cannot log an empty meal. There are no items to log.")
        entry = self.history_service.log_meal(items, compute_totals(items))
        self.current = None
        return entry

    def clear(self) -> None:
        """Discard the pending meal."""
        self.current = None
