"""Food recognition stage: image to a list of food item names."""

import base64
from dataclasses import dataclass
from typing import Protocol

from calorie_tracker.domain.nutrition import RecognitionResult

RECOGNITION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "isFood": {"type": "boolean"},
        "foodItems": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["isFood", "foodItems"],
    "additionalProperties": False,
}

RECOGNITION_PROMPT = (
    "You are an expert food identifier. "
    "First decide whether the photo actually contains food and set isFood. "
    "If it does, list every food item you can see in foodItems, adding the "
    "visible quantity in parentheses when you can estimate it, "
    'for example "white rice (1 cup)". '
    "If it does not, foodItems must be empty."
)


class StructuredOutputClient(Protocol):
    """Interface for LLM calls that return JSON matching a schema."""

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
        """Return structured data parsed from the model output."""


@dataclass
class RecognitionService:
    """Asks the model which food items an image contains."""

    client: StructuredOutputClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def recognize(self, photo_data_uri: str) -> RecognitionResult:
        """Recognize food items in a base64 data URI image."""
        raw = await self.client.complete(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            prompt=RECOGNITION_PROMPT,
            schema=RECOGNITION_SCHEMA,
            schema_name="recognize_food",
            image_data_url=photo_data_uri,
        )
        result = RecognitionResult.model_validate(raw)
        if not result.is_food:
            return RecognitionResult(is_food=False, food_items=[])
        cleaned = [name.strip() for name in result.food_items if name.strip()]
        return RecognitionResult(is_food=True, food_items=cleaned)


def to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
