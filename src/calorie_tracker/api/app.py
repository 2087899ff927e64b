"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from http import HTTPStatus

from fastapi import FastAPI, File, Request, UploadFile, status
from fastapi.responses import JSONResponse

from calorie_tracker.api.models import (
    AnalyzeRequest,
    GoalPresetRequest,
    GoalUpdate,
    LogMealRequest,
)
from calorie_tracker.app_logging import configure_logging
from calorie_tracker.containers import AppContainer
from calorie_tracker.domain.errors import (
    CalorieTrackerError,
    CameraError,
    CameraErrorKind,
    CameraInactiveError,
    ImageTooLargeError,
)
from calorie_tracker.domain.meals import CalorieLogEntry, DailyHistoryGroup, MealTotals
from calorie_tracker.domain.profile import UserProfile
from calorie_tracker.services.history import compute_totals
from calorie_tracker.services.pipeline import MealAnalysis
from calorie_tracker.services.profile import calorie_deficit

_CAMERA_STATUS = {
    CameraErrorKind.NOT_FOUND: status.HTTP_503_SERVICE_UNAVAILABLE,
    CameraErrorKind.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    CameraErrorKind.IN_USE: status.HTTP_409_CONFLICT,
    CameraErrorKind.OVERCONSTRAINED: status.HTTP_503_SERVICE_UNAVAILABLE,
    CameraErrorKind.UNKNOWN: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        try:
            await app.state.container.close_resources()
        except Exception:
            logger.exception("Failed to close resources")

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(CalorieTrackerError)
    async def handle_app_error(
        request: Request, exc: CalorieTrackerError
    ) -> JSONResponse:
        payload: dict[str, object] = {"detail": exc.message}
        if isinstance(exc, CameraError):
            payload["cameraError"] = exc.kind.value
            payload["mode"] = request.app.state.container.capture_surface.mode.kind
        return JSONResponse(status_code=_status_for(exc), content=payload)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/capture")
    async def capture_state(request: Request) -> dict[str, object]:
        """Return the capture mode and the selected image."""
        state_container: AppContainer = request.app.state.container
        return _capture_payload(state_container)

    @app.post("/capture/upload")
    async def upload_image(
        request: Request, file: UploadFile = File(...)
    ) -> dict[str, object]:
        """Select an uploaded image file."""
        state_container: AppContainer = request.app.state.container
        state_container.meal_service.clear()
        surface = state_container.capture_surface
        content = await file.read(surface.max_upload_bytes + 1)
        surface.select_file(content, file.content_type, size=file.size)
        logger.info("Image selected: %s (%s bytes)", file.filename, len(content))
        return _capture_payload(state_container)

    @app.post("/capture/camera")
    async def start_camera(request: Request) -> dict[str, object]:
        """Switch to camera mode."""
        state_container: AppContainer = request.app.state.container
        state_container.meal_service.clear()
        await state_container.capture_surface.enter_camera()
        return _capture_payload(state_container)

    @app.post("/capture/snapshot")
    async def take_snapshot(request: Request) -> dict[str, object]:
        """Capture the current camera frame."""
        state_container: AppContainer = request.app.state.container
        state_container.capture_surface.capture()
        state_container.meal_service.clear()
        return _capture_payload(state_container)

    @app.post("/capture/upload-mode")
    async def stop_camera(request: Request) -> dict[str, object]:
        """Switch to upload mode, releasing the camera."""
        state_container: AppContainer = request.app.state.container
        state_container.capture_surface.enter_upload()
        state_container.meal_service.clear()
        return _capture_payload(state_container)

    @app.post("/meals/analyze")
    async def analyze_meal(
        request: Request, body: AnalyzeRequest | None = None
    ) -> dict[str, object]:
        """Recognize food in the photo and calculate its nutrients."""
        state_container: AppContainer = request.app.state.container
        analysis = await state_container.meal_service.analyze(
            body.photo_data_uri if body else None
        )
        return _analysis_payload(analysis)

    @app.get("/meals/current")
    async def current_meal(request: Request) -> dict[str, object]:
        """Return the meal awaiting confirmation."""
        state_container: AppContainer = request.app.state.container
        current = state_container.meal_service.current
        return _analysis_payload(current or MealAnalysis())

    @app.delete("/meals/current")
    async def discard_meal(request: Request) -> dict[str, str]:
        """Discard the meal awaiting confirmation."""
        state_container: AppContainer = request.app.state.container
        state_container.meal_service.clear()
        return {"status": "ok"}

    @app.post("/meals/log", status_code=status.HTTP_201_CREATED)
    async def log_meal(
        request: Request, body: LogMealRequest | None = None
    ) -> dict[str, object]:
        """Log the pending meal, or the items given in the body."""
        state_container: AppContainer = request.app.state.container
        if body is None:
            entry = state_container.meal_service.log_current()
        else:
            totals = (
                MealTotals(
                    calories=body.totals.calories,
                    protein=body.totals.protein,
                    fat=body.totals.fat,
                    carbs=body.totals.carbs,
                )
                if body.totals
                else compute_totals(body.meal_items)
            )
            entry = state_container.history_service.log_meal(body.meal_items, totals)
        return {"entry": _entry_payload(entry)}

    @app.get("/history")
    async def list_history(request: Request) -> dict[str, object]:
        """Return logged meals, newest first."""
        state_container: AppContainer = request.app.state.container
        entries = state_container.history_service.entries()
        return {"entries": [_entry_payload(entry) for entry in entries]}

    @app.get("/history/days")
    async def history_by_day(request: Request) -> dict[str, object]:
        """Return logged meals grouped by day."""
        state_container: AppContainer = request.app.state.container
        groups = state_container.history_service.group_by_day()
        return {"days": [_group_payload(group) for group in groups]}

    @app.delete("/history/{entry_id}")
    async def delete_entry(entry_id: str, request: Request) -> dict[str, str]:
        """Delete one logged meal."""
        state_container: AppContainer = request.app.state.container
        state_container.history_service.remove_entry(entry_id)
        return {"status": "ok"}

    @app.delete("/history")
    async def clear_history(request: Request) -> dict[str, str]:
        """Delete every logged meal."""
        state_container: AppContainer = request.app.state.container
        state_container.history_service.clear_all()
        return {"status": "ok"}

    @app.get("/profile")
    async def get_profile(request: Request) -> dict[str, object]:
        """Return the user profile and setup state."""
        state_container: AppContainer = request.app.state.container
        profile_service = state_container.profile_service
        profile = profile_service.get_profile()
        return {
            "profile": _profile_payload(profile),
            "setupComplete": profile_service.is_setup_complete(),
        }

    @app.put("/profile")
    async def save_profile(profile: UserProfile, request: Request) -> dict[str, object]:
        """Save the profile and reseed the daily goal."""
        state_container: AppContainer = request.app.state.container
        goal = state_container.profile_service.save_profile(profile)
        return {"profile": _profile_payload(profile), "dailyGoal": goal}

    @app.get("/goal")
    async def get_goal(request: Request) -> dict[str, object]:
        """Return the daily calorie goal."""
        state_container: AppContainer = request.app.state.container
        return {"dailyGoal": state_container.profile_service.get_goal()}

    @app.put("/goal")
    async def set_goal(body: GoalUpdate, request: Request) -> dict[str, object]:
        """Override the daily calorie goal."""
        state_container: AppContainer = request.app.state.container
        goal = state_container.profile_service.set_goal(body.daily_goal)
        return {"dailyGoal": goal}

    @app.post("/goal/preset")
    async def goal_preset(
        body: GoalPresetRequest, request: Request
    ) -> dict[str, object]:
        """Suggest a goal from a preset without saving it."""
        state_container: AppContainer = request.app.state.container
        consumed = state_container.history_service.today_totals().calories
        suggested = state_container.profile_service.preset_goal(
            consumed,
            add_calories=body.add_calories,
            match_intake=body.match_intake,
        )
        return {"suggestedGoal": suggested}

    @app.get("/summary/today")
    async def today_summary(request: Request) -> dict[str, object]:
        """Return today's intake against the goals."""
        state_container: AppContainer = request.app.state.container
        consumed = state_container.history_service.today_totals()
        goal = state_container.profile_service.get_goal()
        macro_goals = state_container.profile_service.macro_goals()
        return {
            "consumed": _totals_payload(consumed),
            "dailyGoal": goal,
            "deficit": calorie_deficit(goal, consumed.calories),
            "macroGoals": {
                "protein": macro_goals.protein_g,
                "fat": macro_goals.fat_g,
                "carbs": macro_goals.carbs_g,
            },
        }

    return app


def _status_for(exc: CalorieTrackerError) -> int:
    """Return the HTTP status for an application error."""
    if isinstance(exc, CameraError):
        return _CAMERA_STATUS[exc.kind]
    if isinstance(exc, ImageTooLargeError):
        return HTTPStatus.REQUEST_ENTITY_TOO_LARGE
    if isinstance(exc, CameraInactiveError):
        return status.HTTP_409_CONFLICT
    return status.HTTP_400_BAD_REQUEST


def _capture_payload(container: AppContainer) -> dict[str, object]:
    surface = container.capture_surface
    return {
        "mode": surface.mode.kind,
        "hasImage": surface.image_data_uri is not None,
        "imageDataUri": surface.image_data_uri,
    }


def _analysis_payload(analysis: MealAnalysis) -> dict[str, object]:
    return {
        "items": [
            item.model_dump(mode="json", by_alias=True) for item in analysis.items
        ],
        "totals": _totals_payload(compute_totals(analysis.items)),
        "message": analysis.message,
    }


def _totals_payload(totals: MealTotals) -> dict[str, float]:
    return {
        "calories": totals.calories,
        "protein": totals.protein,
        "fat": totals.fat,
        "carbs": totals.carbs,
    }


def _entry_payload(entry: CalorieLogEntry) -> dict[str, object]:
    return entry.model_dump(mode="json", by_alias=True)


def _group_payload(group: DailyHistoryGroup) -> dict[str, object]:
    return {
        "day": group.day.isoformat(),
        "label": group.label,
        "formattedDate": group.formatted_date,
        "entries": [_entry_payload(entry) for entry in group.entries],
        "totalCalories": group.total_calories,
        "totalProtein": group.total_protein,
        "totalFat": group.total_fat,
        "totalCarbohydrates": group.total_carbohydrates,
    }


def _profile_payload(profile: UserProfile | None) -> dict[str, object] | None:
    if profile is None:
        return None
    return profile.model_dump(mode="json", by_alias=True)
