"""Calorie calculation stage: food item names to nutrient estimates."""

import logging
import re
from dataclasses import dataclass
from typing import Protocol

from calorie_tracker.adapters.fdc_client import FdcClient
from calorie_tracker.domain.nutrition import FoodItem, FoodItemRequest, NutrientInfo
from calorie_tracker.services.recognition import StructuredOutputClient

_NUTRIENT_IDS = {
    "calories": 1008,
    "protein": 1003,
    "fat": 1004,
    "carbohydrates": 1005,
}

_QUANTITY_PATTERN = re.compile(r"^(?P<name>.+?)\s*\((?P<quantity>[^()]*)\)\s*$")
_GRAMS_PATTERN = re.compile(r"^\s*(?P<amount>\d+(?:\.\d+)?)\s*(?:g|gram|grams)\s*$")

NUTRIENT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "calories": {"type": "number"},
        "protein": {"type": "number"},
        "fat": {"type": "number"},
        "carbohydrates": {"type": "number"},
    },
    "required": ["calories", "protein", "fat", "carbohydrates"],
    "additionalProperties": False,
}

_logger = logging.getLogger(__name__)


class NutrientSource(Protocol):
    """Pluggable lookup of nutrient values for one food item."""

    async def lookup(self, item: FoodItemRequest) -> NutrientInfo:
        """Return calories and macros for the item and quantity."""


@dataclass
class LlmNutrientSource(NutrientSource):
    """Estimates nutrients with a structured-output model call."""

    client: StructuredOutputClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def lookup(self, item: FoodItemRequest) -> NutrientInfo:
        """Estimate nutrients for a single item."""
        quantity = item.quantity or "one typical serving"
        prompt = (
            "Estimate the nutrient content of the following food. "
            "Return calories (kcal) and protein, fat and carbohydrates in grams "
            "as numbers.\n"
            f"Food: {item.name}\n"
            f"Quantity: {quantity}"
        )
        raw = await self.client.complete(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            prompt=prompt,
            schema=NUTRIENT_SCHEMA,
            schema_name="food_nutrients",
        )
        return NutrientInfo.model_validate(raw)


@dataclass
class FdcNutrientSource(NutrientSource):
    """Looks nutrients up in USDA FoodData Central."""

    fdc_client: FdcClient

    async def lookup(self, item: FoodItemRequest) -> NutrientInfo:
        """Use the best search match, scaled to the item's portion."""
        payload = await self.fdc_client.search_foods(item.name, page_size=1)
        foods = payload.get("foods") or []
        if not foods:
            raise LookupError(f"No nutrition data found for {item.name}")
        details = await self.fdc_client.get_food(int(foods[0]["fdcId"]))
        per_100g = _extract_nutrients(details.get("foodNutrients") or [])
        grams = _portion_grams(item.quantity, details)
        return _scale(per_100g, grams / 100.0)


@dataclass
class CalorieCalculationService:
    """Enriches recognized food names with nutrient information."""

    source: NutrientSource

    async def calculate(self, items: list[FoodItemRequest]) -> list[FoodItem]:
        """Look up each item in order; any failure aborts the whole batch."""
        results: list[FoodItem] = []
        for item in items:
            _logger.info(
                "Looking up nutrients for %s (%s)", item.name, item.quantity or "-"
            )
            nutrient_info = await self.source.lookup(item)
            results.append(
                FoodItem(
                    name=item.name,
                    quantity=item.quantity,
                    nutrient_info=nutrient_info,
                )
            )
        return results


def parse_food_item(text: str) -> FoodItemRequest:
    """Split ``"name (quantity)"`` into a name and an optional quantity."""
    cleaned = text.strip()
    match = _QUANTITY_PATTERN.match(cleaned)
    if match:
        quantity = match.group("quantity").strip()
        return FoodItemRequest(name=match.group("name"), quantity=quantity or None)
    return FoodItemRequest(name=cleaned)


def _extract_nutrients(food_nutrients: list[dict[str, object]]) -> NutrientInfo:
    """Extract calories, protein, fat and carbs from FDC nutrient rows."""
    values = dict.fromkeys(_NUTRIENT_IDS, 0.0)
    for nutrient in food_nutrients:
        nutrient_info = nutrient.get("nutrient") or {}
        nutrient_id = nutrient_info.get("id") or nutrient.get("nutrientId")
        amount = nutrient.get("amount")
        if amount is None:
            continue
        for field_name, expected_id in _NUTRIENT_IDS.items():
            if nutrient_id == expected_id:
                values[field_name] = float(amount)
    return NutrientInfo(**values)


def _portion_grams(quantity: str | None, details: dict[str, object]) -> float:
    """Return grams for an explicit gram quantity, else the serving size, else 100."""
    if quantity:
        match = _GRAMS_PATTERN.match(quantity.lower())
        if match:
            return float(match.group("amount"))
    serving_size = details.get("servingSize")
    unit = str(details.get("servingSizeUnit") or "g").lower()
    is_grams = unit in {"g", "grm"}
    if isinstance(serving_size, int | float) and serving_size > 0 and is_grams:
        return float(serving_size)
    return 100.0


def _scale(info: NutrientInfo, factor: float) -> NutrientInfo:
    return NutrientInfo(
        calories=info.calories * factor,
        protein=info.protein * factor,
        fat=info.fat * factor,
        carbohydrates=info.carbohydrates * factor,
    )
