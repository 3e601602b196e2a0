from __future__ import annotations
import datetime
import logging
from typing import Callable, Optional

from algorithms.math_tools import MathTools
from catalog_service import CatalogService
from db import PersonalRecordRepository, best_effort
from gamification_service import GamificationService
from history_service import HistoryService
from models import PersonalRecord

logger = logging.getLogger(__name__)

# Matched as case-insensitive substrings of the exercise name, so
# "Incline Bench Press" and "Romanian Deadlift" count as major lifts.
MAJOR_LIFTS = (
    "Squat",
    "Bench Press",
    "Deadlift",
    "Overhead Press",
    "Barbell Row",
    "Power Clean",
    "Front Squat",
    "Hip Thrust",
)


def is_major_lift_name(name: str) -> bool:
    lowered = name.lower()
    return any(lift.lower() in lowered for lift in MAJOR_LIFTS)


class PersonalRecordService:
    """Detect and keep the single best estimated one-rep max per exercise."""

    WARMUP_SESSIONS = 4
    MAJOR_LIFT_POINTS = 25
    MINOR_LIFT_POINTS = 10

    def __init__(
        self,
        catalog: CatalogService,
        history: HistoryService,
        record_repo: PersonalRecordRepository | None = None,
        gamification: GamificationService | None = None,
        clock: Callable[[], datetime.datetime] = datetime.datetime.now,
    ) -> None:
        self.catalog = catalog
        self.history = history
        self.repo = record_repo
        self.gamification = gamification
        self.clock = clock
        records = record_repo.fetch_all() if record_repo else []
        self._records: dict[str, PersonalRecord] = {r.exercise_id: r for r in records}

    def check_for_personal_record(
        self, exercise_id: str, weight: float, reps: int
    ) -> Optional[PersonalRecord]:
        """Store and return a new record when the set beats the current one.

        No record is considered until the exercise appears with logged sets
        in at least ``WARMUP_SESSIONS`` completed sessions.
        """
        exercise = self.catalog.get_exercise(exercise_id)
        if exercise is None or weight <= 0 or reps <= 0:
            return None
        attempts = self.history.count_completed_sessions_with_exercise(exercise_id)
        if attempts < self.WARMUP_SESSIONS:
            return None
        estimate = MathTools.epley_1rm(weight, reps)
        previous = self._records.get(exercise_id)
        if previous is not None and estimate <= previous.estimated_one_rep_max:
            return None
        record = PersonalRecord(
            exercise_id=exercise_id,
            exercise_name=exercise.name,
            weight=weight,
            reps=reps,
            estimated_one_rep_max=estimate,
            date=self.clock().isoformat(),
            previous_best=previous.weight if previous else 0.0,
            improvement=weight - previous.weight if previous else weight,
        )
        self._records[exercise_id] = record
        if self.repo is not None:
            best_effort(self.repo.save, record)
        logger.info(
            "new personal record for %s: %.2f x %d (1RM %.2f)",
            exercise.name,
            weight,
            reps,
            estimate,
        )
        if self.gamification is not None:
            best_effort(self._reward, record)
        return record

    def _reward(self, record: PersonalRecord) -> None:
        game = self.gamification
        if not game.is_enabled():
            return
        first_pr = GamificationService.FIRST_PR_ACHIEVEMENT
        if game.is_achievement_locked(first_pr):
            game.update_achievement_progress(first_pr, 1)
            game.unlock_achievement(first_pr)
        if self.is_major_lift(record.exercise_id):
            game.add_points(self.MAJOR_LIFT_POINTS, f"pr:{record.exercise_id}")
        else:
            game.add_points(self.MINOR_LIFT_POINTS, f"pr:{record.exercise_id}")

    def is_major_lift(self, exercise_id: str) -> bool:
        exercise = self.catalog.get_exercise(exercise_id)
        if exercise is None:
            return False
        return is_major_lift_name(exercise.name)

    def get_exercise_pr(self, exercise_id: str) -> Optional[PersonalRecord]:
        return self._records.get(exercise_id)

    def get_all_personal_records(self) -> list[PersonalRecord]:
        return list(self._records.values())

    def get_recent_personal_records(self, count: int = 5) -> list[PersonalRecord]:
        ordered = sorted(
            self._records.values(),
            key=lambda r: datetime.datetime.fromisoformat(r.date),
            reverse=True,
        )
        return ordered[:count]

    def clear(self) -> None:
        self._records = {}
        if self.repo is not None:
            best_effort(self.repo.delete_all)
