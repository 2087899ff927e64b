"""User profile and daily calorie goal."""

import logging
from dataclasses import dataclass

from calorie_tracker.config import DEFAULT_DAILY_GOAL
from calorie_tracker.domain.errors import InvalidGoalError
from calorie_tracker.domain.profile import (
    ActivityLevel,
    Gender,
    MacroGoals,
    UserProfile,
)
from calorie_tracker.services.storage import PersistentValue

ACTIVITY_MULTIPLIERS = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHTLY_ACTIVE: 1.375,
    ActivityLevel.MODERATELY_ACTIVE: 1.55,
    ActivityLevel.VERY_ACTIVE: 1.725,
}
MIN_PLAUSIBLE_GOAL = 1000

_logger = logging.getLogger(__name__)


def calculate_bmr(profile: UserProfile) -> float:
    """Return the Mifflin-St Jeor basal metabolic rate."""
    base = 10 * profile.weight_kg + 6.25 * profile.height_cm - 5 * profile.age
    if profile.gender == Gender.MALE:
        return base + 5
    if profile.gender == Gender.FEMALE:
        return base - 161
    return ((base + 5) + (base - 161)) / 2


def compute_daily_goal(
    profile: UserProfile, default_goal: int = DEFAULT_DAILY_GOAL
) -> int:
    """Return the TDEE-based daily goal, or the default when implausibly low."""
    multiplier = ACTIVITY_MULTIPLIERS.get(profile.activity_level, 1.2)
    tdee = calculate_bmr(profile) * multiplier
    return round(tdee if tdee > MIN_PLAUSIBLE_GOAL else default_goal)


def compute_macro_goals(profile: UserProfile | None, goal_calories: float) -> MacroGoals:
    """Return protein/fat/carb targets for a goal."""
    if profile is None:
        return MacroGoals(protein_g=100, fat_g=50, carbs_g=250)
    return MacroGoals(
        protein_g=round(profile.weight_kg * 1.6),
        fat_g=round(goal_calories * 0.25 / 9),
        carbs_g=round(goal_calories * 0.50 / 4),
    )


def calorie_deficit(goal_calories: float, consumed_calories: float) -> float:
    """Return how far consumption is below the goal, never negative."""
    return max(0.0, goal_calories - consumed_calories)


@dataclass
class ProfileService:
    """Stores the profile, the setup flag and the daily goal."""

    profile: PersistentValue[UserProfile | None]
    setup_complete: PersistentValue[bool]
    daily_goal: PersistentValue[int]
    default_goal: int = DEFAULT_DAILY_GOAL

    def get_profile(self) -> UserProfile | None:
        """Return the saved profile, if any."""
        return self.profile.value

    def is_setup_complete(self) -> bool:
        """Return True once a profile has been saved."""
        return bool(self.setup_complete.value)

    def save_profile(self, profile: UserProfile) -> int:
        """Save the profile and reseed the daily goal from it."""
        goal = compute_daily_goal(profile, self.default_goal)
        self.profile.set(profile)
        self.daily_goal.set(goal)
        self.setup_complete.set(True)
        _logger.info("Profile saved, daily goal set to %s kcal", goal)
        return goal

    def get_goal(self) -> int:
        """Return the current daily calorie goal."""
        return self.daily_goal.value

    def set_goal(self, calories: object) -> int:
        """Override the daily goal with a non-negative whole number."""
        goal = _parse_goal(calories)
        self.daily_goal.set(goal)
        return goal

    def preset_goal(
        self,
        consumed_calories: float,
        add_calories: int | None = None,
        match_intake: bool = False,
    ) -> int:
        """Return a suggested goal: current intake, or a bump on top of it."""
        if match_intake:
            return max(0, round(consumed_calories))
        base = max(consumed_calories, self.daily_goal.value)
        return max(0, round(base + (add_calories or 0)))

    def macro_goals(self) -> MacroGoals:
        """Return macro targets for the current goal."""
        return compute_macro_goals(self.profile.value, self.daily_goal.value)


def _parse_goal(value: object) -> int:
    if isinstance(value, bool):
        raise InvalidGoalError("Goal must be a whole number of calories.")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError as exc:
            raise InvalidGoalError("Goal must be a whole number of calories.") from exc
    if not isinstance(value, int):
        raise InvalidGoalError("Goal must be a whole number of calories.")
    if value < 0:
        raise InvalidGoalError("Goal cannot be negative.")
    return value
