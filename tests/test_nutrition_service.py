"""Tests for nutrient calculation."""

import asyncio

import pytest

from calorie_tracker.domain.nutrition import FoodItemRequest
from calorie_tracker.services.nutrition import (
    CalorieCalculationService,
    FdcNutrientSource,
    LlmNutrientSource,
    parse_food_item,
)
from tests.conftest import FakeFdcClient, FakeNutrientSource, FakeStructuredClient


def test_parse_food_item_splits_quantity() -> None:
    item = parse_food_item("white rice (1 cup)")

    assert item.name == "white rice"
    assert item.quantity == "1 cup"


def test_parse_food_item_without_quantity() -> None:
    item = parse_food_item("  salad ")

    assert item.name == "salad"
    assert item.quantity is None


def test_parse_food_item_empty_parentheses() -> None:
    item = parse_food_item("soup ()")

    assert item.name == "soup"
    assert item.quantity is None


def test_calculation_preserves_order_and_quantity() -> None:
    source = FakeNutrientSource()
    service = CalorieCalculationService(source=source)

    items = asyncio.run(
        service.calculate(
            [
                FoodItemRequest(name="rice", quantity="1 cup"),
                FoodItemRequest(name="salad"),
            ]
        )
    )

    assert [item.name for item in items] == ["rice", "salad"]
    assert items[0].quantity == "1 cup"
    assert items[1].nutrient_info.calories == 100
    assert [lookup.name for lookup in source.lookups] == ["rice", "salad"]


def test_calculation_aborts_on_source_failure() -> None:
    service = CalorieCalculationService(
        source=FakeNutrientSource(error=RuntimeError("service down"))
    )

    with pytest.raises(RuntimeError):
        asyncio.run(service.calculate([FoodItemRequest(name="rice")]))


def test_llm_source_prompts_with_name_and_quantity() -> None:
    client = FakeStructuredClient()
    source = LlmNutrientSource(
        client=client, model="gpt-5.2", reasoning_effort=None, store=False
    )

    info = asyncio.run(source.lookup(FoodItemRequest(name="rice", quantity="1 cup")))

    assert info.calories == 200
    assert info.carbohydrates == 44
    assert "rice" in str(client.calls[0]["prompt"])
    assert "1 cup" in str(client.calls[0]["prompt"])
    assert client.calls[0]["image_data_url"] is None


def test_fdc_source_defaults_to_100_grams() -> None:
    fdc_client = FakeFdcClient()
    source = FdcNutrientSource(fdc_client=fdc_client)

    info = asyncio.run(source.lookup(FoodItemRequest(name="rice")))

    assert info.calories == pytest.approx(130)
    assert info.protein == pytest.approx(2.7)
    assert fdc_client.queries == ["rice"]


def test_fdc_source_scales_to_gram_quantity() -> None:
    source = FdcNutrientSource(fdc_client=FakeFdcClient())

    info = asyncio.run(source.lookup(FoodItemRequest(name="rice", quantity="200 g")))

    assert info.calories == pytest.approx(260)
    assert info.carbohydrates == pytest.approx(56)


def test_fdc_source_scales_to_serving_size() -> None:
    fdc_client = FakeFdcClient()
    fdc_client.food_payload = {
        **fdc_client.food_payload,
        "servingSize": 50,
        "servingSizeUnit": "g",
    }
    source = FdcNutrientSource(fdc_client=fdc_client)

    info = asyncio.run(source.lookup(FoodItemRequest(name="rice", quantity="1 cup")))

    assert info.calories == pytest.approx(65)


def test_fdc_source_raises_when_nothing_found() -> None:
    source = FdcNutrientSource(fdc_client=FakeFdcClient(search_payload={"foods": []}))

    with pytest.raises(LookupError):
        asyncio.run(source.lookup(FoodItemRequest(name="mystery")))
