"""Photo to nutrition pipeline: recognize, then calculate."""

import logging
from dataclasses import dataclass, field

from calorie_tracker.domain.errors import NoFoodItemsError, NotFoodError, PipelineError
from calorie_tracker.domain.nutrition import FoodItem
from calorie_tracker.services.nutrition import CalorieCalculationService, parse_food_item
from calorie_tracker.services.recognition import RecognitionService

NOT_FOOD_MESSAGE = (
    "This image doesn't appear to contain food. Please try a different photo."
)
NO_ITEMS_MESSAGE = (
    "Could not recognize any food items. Try a clearer image or different angle."
)
ANALYSIS_FAILED_MESSAGE = "Sorry, we couldn't analyze that photo. Please try again."

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MealAnalysis:
    """Outcome of analyzing one photo: a full meal or a message, never both."""

    items: list[FoodItem] = field(default_factory=list)
    message: str | None = None

    @property
    def succeeded(self) -> bool:
        """Return True when the analysis produced a meal."""
        return self.message is None


@dataclass
class NutritionPipeline:
    """Runs the recognize and calculate stages for a photo."""

    recognition_service: RecognitionService
    calculation_service: CalorieCalculationService
    debug: bool = False

    async def analyze(self, photo_data_uri: str) -> MealAnalysis:
        """Analyze a photo data URI; failures become a message with no items."""
        try:
            items = await self.run(photo_data_uri)
        except PipelineError as exc:
            _logger.info("Food analysis stopped: %s", exc.message)
            return MealAnalysis(message=exc.message)
        except Exception as exc:
            _logger.exception("Food analysis failed")
            return MealAnalysis(message=self._failure_message(exc))
        return MealAnalysis(items=items)

    async def run(self, photo_data_uri: str) -> list[FoodItem]:
        """Run both stages, raising on any failure."""
        recognition = await self.recognition_service.recognize(photo_data_uri)
        if not recognition.is_food:
            raise NotFoodError(NOT_FOOD_MESSAGE)
        if not recognition.food_items:
            raise NoFoodItemsError(NO_ITEMS_MESSAGE)
        requests = [parse_food_item(name) for name in recognition.food_items]
        return await self.calculation_service.calculate(requests)

    def _failure_message(self, exc: Exception) -> str:
        if self.debug:
            detail = f"{type(exc).__name__}: {exc}".strip()
            return f"{ANALYSIS_FAILED_MESSAGE} (debug: {detail})"
        return ANALYSIS_FAILED_MESSAGE
