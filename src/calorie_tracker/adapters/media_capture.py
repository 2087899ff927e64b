"""Media capture used when no camera device is attached."""

from dataclasses import dataclass

from calorie_tracker.domain.errors import CameraError, CameraErrorKind
from calorie_tracker.services.capture import MediaCapture, MediaStream


@dataclass
class UnavailableMediaCapture(MediaCapture):
    """Reports that no camera exists for every request."""

    async def get_user_media(self, facing_mode: str | None = None) -> MediaStream:
        """Fail with a not-found camera error."""
        raise CameraError(CameraErrorKind.NOT_FOUND)
