"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest
from PIL import Image

from calorie_tracker.adapters.fdc_client import FdcClient
from calorie_tracker.config import Settings
from calorie_tracker.containers import AppContainer, build_services
from calorie_tracker.domain.errors import CameraError, CameraErrorKind
from calorie_tracker.domain.nutrition import FoodItemRequest, NutrientInfo
from calorie_tracker.services.capture import MediaCapture, MediaStream
from calorie_tracker.services.nutrition import CalorieCalculationService, NutrientSource
from calorie_tracker.services.pipeline import NutritionPipeline
from calorie_tracker.services.recognition import (
    RecognitionService,
    StructuredOutputClient,
)
from calorie_tracker.services.storage import KeyValueStore


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed key-value store for tests."""

    items: dict[str, str] = field(default_factory=dict)

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


@dataclass
class FailingKeyValueStore(KeyValueStore):
    """Store whose writes always fail, like a full or disabled storage."""

    items: dict[str, str] = field(default_factory=dict)
    write_attempts: int = 0

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.write_attempts += 1
        raise OSError("quota exceeded")

    def remove_item(self, key: str) -> None:
        raise OSError("storage disabled")


@dataclass
class FakeStructuredClient(StructuredOutputClient):
    """Fake LLM client returning canned payloads per schema name."""

    payloads: dict[str, dict[str, object]] = field(
        default_factory=lambda: {
            "recognize_food": {"isFood": True, "foodItems": ["rice (1 cup)", "salad"]},
            "food_nutrients": {
                "calories": 200,
                "protein": 4,
                "fat": 1,
                "carbohydrates": 44,
            },
        }
    )
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
        image_data_url: str | None = None,
    ) -> dict[str, object]:
        self.calls.append(
            {
                "schema_name": schema_name,
                "prompt": prompt,
                "image_data_url": image_data_url,
            }
        )
        if self.error is not None:
            raise self.error
        return self.payloads[schema_name]


@dataclass
class FakeNutrientSource(NutrientSource):
    """Nutrient source with fixed values that records lookups."""

    info: NutrientInfo = field(
        default_factory=lambda: NutrientInfo(
            calories=100, protein=5, fat=2, carbohydrates=15
        )
    )
    error: Exception | None = None
    lookups: list[FoodItemRequest] = field(default_factory=list)

    async def lookup(self, item: FoodItemRequest) -> NutrientInfo:
        self.lookups.append(item)
        if self.error is not None:
            raise self.error
        return self.info


@dataclass
class FakeFdcClient(FdcClient):
    """Fake FDC client with in-memory responses."""

    search_payload: dict[str, object] = field(
        default_factory=lambda: {
            "foods": [
                {
                    "fdcId": 168878,
                    "description": "Rice, white, long-grain, cooked",
                    "dataType": "SR Legacy",
                }
            ]
        }
    )
    food_payload: dict[str, object] = field(
        default_factory=lambda: {
            "fdcId": 168878,
            "description": "Rice, white, long-grain, cooked",
            "foodNutrients": [
                {"nutrient": {"id": 1008}, "amount": 130},
                {"nutrient": {"id": 1003}, "amount": 2.7},
                {"nutrient": {"id": 1004}, "amount": 0.3},
                {"nutrient": {"id": 1005}, "amount": 28},
            ],
        }
    )
    queries: list[str] = field(default_factory=list)

    async def search_foods(self, query: str, page_size: int = 5) -> dict[str, object]:
        self.queries.append(query)
        return self.search_payload

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        return self.food_payload


@dataclass
class FakeMediaStream(MediaStream):
    """Stream producing a solid-color frame."""

    facing_mode: str | None = None
    stopped: bool = False

    def read_frame(self) -> Image.Image:
        return Image.new("RGB", (8, 6), color=(200, 120, 40))

    def stop(self) -> None:
        self.stopped = True


@dataclass
class FakeMediaCapture(MediaCapture):
    """Media capture that fails with queued errors before handing out streams."""

    errors: list[Exception] = field(default_factory=list)
    requests: list[str | None] = field(default_factory=list)
    streams: list[FakeMediaStream] = field(default_factory=list)

    async def get_user_media(self, facing_mode: str | None = None) -> MediaStream:
        self.requests.append(facing_mode)
        if self.errors:
            raise self.errors.pop(0)
        stream = FakeMediaStream(facing_mode=facing_mode)
        self.streams.append(stream)
        return stream


def overconstrained() -> CameraError:
    return CameraError(CameraErrorKind.OVERCONSTRAINED)


def build_pipeline(
    client: FakeStructuredClient | None = None,
    source: FakeNutrientSource | None = None,
    debug: bool = False,
) -> NutritionPipeline:
    return NutritionPipeline(
        recognition_service=RecognitionService(
            client=client or FakeStructuredClient(),
            model="gpt-5.2",
            reasoning_effort=None,
            store=False,
        ),
        calculation_service=CalorieCalculationService(
            source=source or FakeNutrientSource()
        ),
        debug=debug,
    )


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        openai_api_key="openai-key",
        storage_path=str(tmp_path / "storage.json"),
        environment="test",
    )


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def structured_client() -> FakeStructuredClient:
    return FakeStructuredClient()


@pytest.fixture
def nutrient_source() -> FakeNutrientSource:
    return FakeNutrientSource()


@pytest.fixture
def media_capture() -> FakeMediaCapture:
    return FakeMediaCapture()


@pytest.fixture
def container(
    settings: Settings,
    store: InMemoryKeyValueStore,
    structured_client: FakeStructuredClient,
    nutrient_source: FakeNutrientSource,
    media_capture: FakeMediaCapture,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return build_services(
        settings=settings,
        store=store,
        pipeline=build_pipeline(structured_client, nutrient_source),
        media_capture=media_capture,
        close_resources=close_resources,
    )
