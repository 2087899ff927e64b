"""Tests for container wiring."""

import asyncio

import pytest

from calorie_tracker.containers import build_container
from calorie_tracker.services.nutrition import FdcNutrientSource, LlmNutrientSource


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert isinstance(
        container.pipeline.calculation_service.source, LlmNutrientSource
    )
    assert container.history_service.history.initialized
    assert container.profile_service.get_goal() == settings.default_daily_goal
    asyncio.run(container.close_resources())


def test_build_container_with_fdc_source(settings) -> None:
    settings.nutrient_source = "fdc"
    settings.fdc_api_key = "fdc-key"

    container = build_container(settings)

    assert isinstance(
        container.pipeline.calculation_service.source, FdcNutrientSource
    )
    asyncio.run(container.close_resources())


def test_fdc_source_requires_api_key(settings) -> None:
    settings.nutrient_source = "fdc"

    with pytest.raises(ValueError):
        build_container(settings)
