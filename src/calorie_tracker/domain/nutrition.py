"""Nutrition domain models shared by the recognition and enrichment stages."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model persisted and exchanged with camelCase field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class NutrientInfo(CamelModel):
    """Calories and macronutrients (grams) for one food item."""

    calories: float = 0.0
    protein: float = 0.0
    fat: float = 0.0
    carbohydrates: float = 0.0


class FoodItemRequest(CamelModel):
    """Food item name with an optional free-form quantity."""

    name: str = Field(min_length=1)
    quantity: str | None = None


class FoodItem(CamelModel):
    """Recognized food item enriched with nutrient estimates."""

    name: str
    quantity: str | None = None
    nutrient_info: NutrientInfo = Field(default_factory=NutrientInfo)


class RecognitionResult(CamelModel):
    """Structured output of the recognize stage."""

    is_food: bool
    food_items: list[str] = Field(default_factory=list)
