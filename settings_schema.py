from typing import Literal

from pydantic import BaseModel, Field, ValidationError


class SettingsSchema(BaseModel):
    game_enabled: bool = False
    workout_recommendations_enabled: bool = False
    long_workout_notifications_enabled: bool = True
    long_workout_threshold: int = Field(default=90, gt=0)
    rest_time: int = Field(default=60, ge=0)
    set_rest_time: int = Field(default=60, ge=0)
    workout_rest_time: int = Field(default=60, ge=0)
    default_rest_time: int = Field(default=60, ge=0)
    default_set_count: int = Field(default=3, ge=1)
    sound_enabled: bool = True
    vibration_enabled: bool = True
    auto_start_rest: bool = False
    fitness_level: Literal["beginner", "intermediate", "advanced"] = "beginner"
    fitness_goal: str = "maintain"
    activity_level: str = "moderate"
    body_weight: float = Field(default=70.0, gt=0)
    weight_unit: Literal["kg", "lb"] = "kg"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


def validate_settings(data: dict) -> None:
    try:
        SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))
