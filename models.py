from __future__ import annotations
import datetime
import uuid
from typing import Literal, Optional

from pydantic import BaseModel, Field


def new_id() -> str:
    return uuid.uuid4().hex


def now_iso() -> str:
    return datetime.datetime.now().isoformat()


class Exercise(BaseModel):
    """Catalog exercise definition."""

    id: str
    name: str
    description: str = ""
    muscle_groups: list[str] = Field(default_factory=list)
    equipment: list[str] = Field(default_factory=list)
    difficulty: str = "beginner"


class WorkoutExercise(BaseModel):
    """Prescribed exercise inside a workout template."""

    id: str
    sets: int = 3
    reps: int = 10
    rest_time: int = 60


class Workout(BaseModel):
    """Workout template."""

    id: str
    name: str
    description: str = ""
    category: str = "Strength"
    difficulty: str = "beginner"
    intensity: str = "medium"
    estimated_duration: Optional[int] = None
    duration: Optional[int] = None
    exercises: list[WorkoutExercise] = Field(default_factory=list)
    is_custom: bool = False
    created_at: Optional[str] = None

    def effective_duration(self) -> int:
        return self.estimated_duration or self.duration or 60


class WorkoutSet(BaseModel):
    weight: float = Field(default=0.0, ge=0)
    reps: int = Field(default=0, ge=0)
    completed: bool = False
    notes: str = ""


class ExerciseLog(BaseModel):
    id: str = Field(default_factory=new_id)
    exercise_id: str
    sets: list[WorkoutSet] = Field(default_factory=list)
    notes: str = ""
    completed: bool = False


class WorkoutRating(BaseModel):
    """Post-session rating on a 1-5 scale with optional sub-scores."""

    overall: int = Field(ge=1, le=5)
    difficulty: Optional[int] = Field(default=None, ge=1, le=5)
    energy: Optional[int] = Field(default=None, ge=1, le=5)
    enjoyment: Optional[int] = Field(default=None, ge=1, le=5)
    notes: str = ""


class WorkoutMedia(BaseModel):
    id: str = Field(default_factory=new_id)
    type: Literal["photo", "video"] = "photo"
    uri: str
    timestamp: str = Field(default_factory=now_iso)


class WorkoutLog(BaseModel):
    """One performed session, active or archived."""

    id: str = Field(default_factory=new_id)
    workout_id: Optional[str] = None
    date: str
    start_time: str
    end_time: str = ""
    duration: int = 0
    exercises: list[ExerciseLog] = Field(default_factory=list)
    notes: str = ""
    completed: bool = False
    rating: Optional[WorkoutRating] = None
    media: list[WorkoutMedia] = Field(default_factory=list)


class PersonalRecord(BaseModel):
    id: str = Field(default_factory=new_id)
    exercise_id: str
    exercise_name: str
    weight: float
    reps: int
    estimated_one_rep_max: float
    date: str
    previous_best: float = 0.0
    improvement: float = 0.0


class ScheduledWorkout(BaseModel):
    """A one-time or weekly recurring placement of a workout.

    ``day_of_week`` follows the 0 = Sunday ... 6 = Saturday convention.
    """

    id: str = Field(default_factory=new_id)
    workout_id: str
    schedule_type: Literal["one-time", "recurring"] = "one-time"
    scheduled_date: Optional[datetime.date] = None
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    recurrence_end_date: Optional[datetime.date] = None
    time: str = "08:00"
    duration: int = 60
    completed: bool = False


class TimerSettings(BaseModel):
    rest_time: int = 60
    set_rest_time: int = 60
    workout_rest_time: int = 60
    default_rest_time: int = 60
    sound_enabled: bool = True
    vibration_enabled: bool = True
    auto_start_rest: bool = False
    default_set_count: int = 3


class TimerState(BaseModel):
    is_running: bool = False
    start_time: float = 0.0
    elapsed_time: float = 0.0
    rest_duration: int = 60
    is_resting: bool = False


class UserProfile(BaseModel):
    fitness_level: str = "beginner"
    fitness_goal: str = "maintain"
    activity_level: str = "moderate"
    weight: float = 70.0
