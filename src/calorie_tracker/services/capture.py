"""Image capture from an uploaded file or a camera stream."""

import base64
import io
import logging
from dataclasses import dataclass, field
from typing import Protocol

from PIL import Image

from calorie_tracker.config import MAX_UPLOAD_BYTES
from calorie_tracker.domain.capture import CameraMode, CaptureMode, UploadMode
from calorie_tracker.domain.errors import (
    CameraError,
    CameraErrorKind,
    CameraInactiveError,
    ImageTooLargeError,
)
from calorie_tracker.services.recognition import detect_mime_type

REAR_FACING = "environment"

_logger = logging.getLogger(__name__)


class MediaStream(Protocol):
    """A live video stream that can be sampled frame by frame."""

    def read_frame(self) -> Image.Image:
        """Return the current video frame."""

    def stop(self) -> None:
        """Release the underlying device."""


class MediaCapture(Protocol):
    """Camera device access."""

    async def get_user_media(self, facing_mode: str | None = None) -> MediaStream:
        """Open a stream, optionally constrained to a facing mode.

        Raises CameraError categorized by cause.
        """


@dataclass
class CaptureSurface:
    """Holds the selected image and owns the camera stream while in camera mode."""

    media_capture: MediaCapture
    max_upload_bytes: int = MAX_UPLOAD_BYTES
    jpeg_quality: int = 90
    mode: CaptureMode = field(default_factory=UploadMode)
    image_data_uri: str | None = None

    @property
    def is_camera_active(self) -> bool:
        """Return True when a camera stream is attached."""
        return isinstance(self.mode, CameraMode)

    def select_file(
        self,
        content: bytes,
        content_type: str | None = None,
        size: int | None = None,
    ) -> str:
        """Validate an uploaded image and hold it as a data URI.

        ``size`` is the declared upload size when ``content`` was read only
        up to the limit.
        """
        self.enter_upload()
        total = max(len(content), size or 0)
        if total > self.max_upload_bytes:
            size_mb = total / (1024 * 1024)
            limit_mb = self.max_upload_bytes / (1024 * 1024)
            raise ImageTooLargeError(
                f"Image is too large ({size_mb:.1f} MB). Max {limit_mb:.0f} MB."
            )
        mime_type = (
            content_type
            if content_type and content_type.startswith("image/")
            else detect_mime_type(content)
        )
        encoded = base64.b64encode(content).decode("utf-8")
        self.image_data_uri = f"data:{mime_type};base64,{encoded}"
        return self.image_data_uri

    async def enter_camera(self) -> None:
        """Switch to camera mode, falling back to upload mode on failure."""
        if isinstance(self.mode, CameraMode):
            return
        self.image_data_uri = None
        try:
            stream = await self._open_stream()
        except CameraError as exc:
            _logger.warning("Camera unavailable (%s): %s", exc.kind.value, exc.message)
            self.mode = UploadMode()
            raise
        self.mode = CameraMode(stream=stream)

    def enter_upload(self) -> None:
        """Switch to upload mode, releasing any camera stream first."""
        self._release_stream()
        self.image_data_uri = None

    def capture(self) -> str:
        """Encode the current camera frame as a JPEG data URI.

        The stream stays open so the photo can be retaken.
        """
        if not isinstance(self.mode, CameraMode):
            raise CameraInactiveError("Start the camera before capturing a photo.")
        frame = self.mode.stream.read_frame()
        buffer = io.BytesIO()
        frame.convert("RGB").save(buffer, format="JPEG", quality=self.jpeg_quality)
        encoded = base64.b64encode(buffer.getvalue()).decode("utf-8")
        self.image_data_uri = f"data:image/jpeg;base64,{encoded}"
        return self.image_data_uri

    def close(self) -> None:
        """Release every held resource."""
        self._release_stream()

    async def _open_stream(self) -> MediaStream:
        try:
            return await self.media_capture.get_user_media(facing_mode=REAR_FACING)
        except CameraError as exc:
            if exc.kind != CameraErrorKind.OVERCONSTRAINED:
                raise
            _logger.info("Rear camera unavailable, retrying without constraints")
        except Exception as exc:
            raise CameraError(CameraErrorKind.UNKNOWN) from exc
        try:
            return await self.media_capture.get_user_media(facing_mode=None)
        except CameraError:
            raise
        except Exception as exc:
            raise CameraError(CameraErrorKind.UNKNOWN) from exc

    def _release_stream(self) -> None:
        if isinstance(self.mode, CameraMode):
            stream = self.mode.stream
            self.mode = UploadMode()
            stream.stop()
