"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from pydantic import TypeAdapter

from calorie_tracker.adapters.fdc_client import HttpxFdcClient
from calorie_tracker.adapters.json_file_store import JsonFileKeyValueStore
from calorie_tracker.adapters.media_capture import UnavailableMediaCapture
from calorie_tracker.adapters.openai_client import OpenAIStructuredClient
from calorie_tracker.config import Settings, parse_nutrient_source
from calorie_tracker.domain.meals import CalorieLogEntry
from calorie_tracker.domain.profile import UserProfile
from calorie_tracker.services.capture import CaptureSurface, MediaCapture
from calorie_tracker.services.history import HistoryService
from calorie_tracker.services.meals import MealService
from calorie_tracker.services.nutrition import (
    CalorieCalculationService,
    FdcNutrientSource,
    LlmNutrientSource,
    NutrientSource,
)
from calorie_tracker.services.pipeline import NutritionPipeline
from calorie_tracker.services.profile import ProfileService
from calorie_tracker.services.recognition import RecognitionService
from calorie_tracker.services.storage import (
    GOAL_STORAGE_KEY,
    HISTORY_STORAGE_KEY,
    PROFILE_SETUP_COMPLETE_KEY,
    USER_PROFILE_STORAGE_KEY,
    KeyValueStore,
    PersistentValue,
)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    capture_surface: CaptureSurface
    pipeline: NutritionPipeline
    history_service: HistoryService
    profile_service: ProfileService
    meal_service: MealService
    close_resources: Callable[[], Awaitable[None]]


def build_services(  # noqa: PLR0913
    settings: Settings,
    store: KeyValueStore,
    pipeline: NutritionPipeline,
    media_capture: MediaCapture,
    close_resources: Callable[[], Awaitable[None]],
) -> AppContainer:
    """Wire services around the given capabilities and load stored state."""
    history = PersistentValue(
        store=store,
        key=HISTORY_STORAGE_KEY,
        default=[],
        adapter=TypeAdapter(list[CalorieLogEntry]),
    )
    profile = PersistentValue(
        store=store,
        key=USER_PROFILE_STORAGE_KEY,
        default=None,
        adapter=TypeAdapter(UserProfile | None),
    )
    setup_complete = PersistentValue(
        store=store,
        key=PROFILE_SETUP_COMPLETE_KEY,
        default=False,
        adapter=TypeAdapter(bool),
    )
    daily_goal = PersistentValue(
        store=store,
        key=GOAL_STORAGE_KEY,
        default=settings.default_daily_goal,
        adapter=TypeAdapter(int),
    )
    for value in (history, profile, setup_complete, daily_goal):
        value.load()

    capture_surface = CaptureSurface(
        media_capture=media_capture,
        max_upload_bytes=settings.max_upload_bytes,
    )
    history_service = HistoryService(history=history, timezone_name=settings.timezone)
    profile_service = ProfileService(
        profile=profile,
        setup_complete=setup_complete,
        daily_goal=daily_goal,
        default_goal=settings.default_daily_goal,
    )
    meal_service = MealService(
        pipeline=pipeline,
        capture_surface=capture_surface,
        history_service=history_service,
    )

    async def close_all() -> None:
        capture_surface.close()
        await close_resources()

    return AppContainer(
        settings=settings,
        capture_surface=capture_surface,
        pipeline=pipeline,
        history_service=history_service,
        profile_service=profile_service,
        meal_service=meal_service,
        close_resources=close_all,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    use_fdc = parse_nutrient_source(resolved_settings.nutrient_source) == "fdc"
    if use_fdc and not resolved_settings.fdc_api_key:
        raise ValueError("FDC_API_KEY is required for the fdc nutrient source")
    openai_client = OpenAIStructuredClient.create(resolved_settings.openai_api_key)
    recognition_service = RecognitionService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    fdc_client: HttpxFdcClient | None = None
    source: NutrientSource
    if use_fdc and resolved_settings.fdc_api_key:
        fdc_client = HttpxFdcClient.create(
            api_key=resolved_settings.fdc_api_key,
            base_url=resolved_settings.fdc_base_url,
        )
        source = FdcNutrientSource(fdc_client=fdc_client)
    else:
        source = LlmNutrientSource(
            client=openai_client,
            model=resolved_settings.openai_model,
            reasoning_effort=resolved_settings.openai_reasoning_effort,
            store=resolved_settings.openai_store,
        )
    pipeline = NutritionPipeline(
        recognition_service=recognition_service,
        calculation_service=CalorieCalculationService(source=source),
        debug=resolved_settings.environment == "local",
    )

    async def close_resources() -> None:
        await openai_client.close()
        if fdc_client is not None:
            await fdc_client.close()

    return build_services(
        settings=resolved_settings,
        store=JsonFileKeyValueStore.create(resolved_settings.storage_path),
        pipeline=pipeline,
        media_capture=UnavailableMediaCapture(),
        close_resources=close_resources,
    )
