"""Capture modes as a tagged variant."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from calorie_tracker.services.capture import MediaStream


@dataclass(frozen=True)
class UploadMode:
    """The user picks an image file."""

    kind: Literal["upload"] = "upload"


@dataclass(frozen=True)
class CameraMode:
    """A live camera stream is attached to the preview."""

    stream: "MediaStream"
    kind: Literal["camera"] = "camera"


CaptureMode = UploadMode | CameraMode
