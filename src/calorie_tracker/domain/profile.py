"""User profile domain models."""

from dataclasses import dataclass
from enum import Enum

from pydantic import Field

from calorie_tracker.domain.nutrition import CamelModel


class Gender(str, Enum):
    """Gender options used by the BMR formula."""

    MALE = "male"
    FEMALE = "female"
    PREFER_NOT_TO_SAY = "prefer_not_to_say"


class ActivityLevel(str, Enum):
    """Activity levels with their TDEE multipliers."""

    SEDENTARY = "sedentary"
    LIGHTLY_ACTIVE = "lightly_active"
    MODERATELY_ACTIVE = "moderately_active"
    VERY_ACTIVE = "very_active"


class UserProfile(CamelModel):
    """Body attributes that seed the daily calorie goal."""

    age: int = Field(gt=0)
    gender: Gender
    weight_kg: float = Field(gt=0)
    height_cm: int = Field(gt=0)
    activity_level: ActivityLevel


@dataclass(frozen=True)
class MacroGoals:
    """Daily macro targets in grams."""

    protein_g: int
    fat_g: int
    carbs_g: int
