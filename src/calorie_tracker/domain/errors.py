"""Error types with user-facing messages."""

from enum import Enum


class CalorieTrackerError(Exception):
    """Base error carrying a message that is safe to show to the user."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ImageTooLargeError(CalorieTrackerError):
    """Raised when a selected image exceeds the upload limit."""


class NoImageSelectedError(CalorieTrackerError):
    """Raised when analysis is requested without an image."""


class EmptyMealError(CalorieTrackerError):
    """Raised when logging a meal without items."""


class InvalidGoalError(CalorieTrackerError):
    """Raised when a calorie goal is not a non-negative integer."""


class CameraErrorKind(str, Enum):
    """Categories of camera acquisition failures."""

    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    IN_USE = "in_use"
    OVERCONSTRAINED = "overconstrained"
    UNKNOWN = "unknown"


_CAMERA_MESSAGES = {
    CameraErrorKind.NOT_FOUND: "No camera found on this device.",
    CameraErrorKind.PERMISSION_DENIED: (
        "Camera permission denied. Please enable it in your settings."
    ),
    CameraErrorKind.IN_USE: "Camera is already in use or a hardware error occurred.",
    CameraErrorKind.OVERCONSTRAINED: "No camera matches the requested constraints.",
    CameraErrorKind.UNKNOWN: "Could not access the camera. Please check permissions.",
}


class CameraError(CalorieTrackerError):
    """Raised when a camera stream cannot be acquired or used."""

    def __init__(self, kind: CameraErrorKind, message: str | None = None) -> None:
        super().__init__(message or _CAMERA_MESSAGES[kind])
        self.kind = kind


class CameraInactiveError(CalorieTrackerError):
    """Raised when capturing a frame without an active camera stream."""


class PipelineError(CalorieTrackerError):
    """Raised when food analysis cannot produce a meal."""


class NotFoodError(PipelineError):
    """Raised when the image does not contain food."""


class NoFoodItemsError(PipelineError):
    """Raised when the image is food but no items were recognized."""
