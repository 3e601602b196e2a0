from __future__ import annotations
import datetime
import logging
from typing import Optional

from pydantic import ValidationError

from algorithms.math_tools import MathTools
from catalog_service import CatalogService
from db import WorkoutLogRepository, best_effort
from models import ExerciseLog, WorkoutLog, WorkoutSet

logger = logging.getLogger(__name__)


def _log_time(log: WorkoutLog) -> datetime.datetime:
    return datetime.datetime.fromisoformat(log.date)


class HistoryService:
    """Archive of completed workout sessions.

    Archived logs are only changed through the explicit edit operations
    below. Every edit addressing an unknown log, exercise or set index is
    ignored.
    """

    def __init__(
        self,
        workout_log_repo: WorkoutLogRepository | None = None,
        catalog: CatalogService | None = None,
        logs: list[WorkoutLog] | None = None,
    ) -> None:
        self.repo = workout_log_repo
        self.catalog = catalog
        if logs is None:
            logs = workout_log_repo.fetch_all(completed=True) if workout_log_repo else []
        self._logs: list[WorkoutLog] = list(logs)

    @property
    def logs(self) -> list[WorkoutLog]:
        return list(self._logs)

    def _persist(self, log: WorkoutLog) -> None:
        if self.repo is not None:
            best_effort(self.repo.save, log)

    def add(self, log: WorkoutLog) -> None:
        self._logs.append(log)
        self._persist(log)

    def get_workout_log(self, workout_log_id: str) -> Optional[WorkoutLog]:
        for log in self._logs:
            if log.id == workout_log_id:
                return log
        return None

    def completed_logs(self) -> list[WorkoutLog]:
        """Completed logs, newest first."""
        done = [log for log in self._logs if log.completed]
        return sorted(done, key=_log_time, reverse=True)

    def _exercise(self, workout_log_id: str, exercise_index: int) -> Optional[ExerciseLog]:
        log = self.get_workout_log(workout_log_id)
        if log is None or not 0 <= exercise_index < len(log.exercises):
            return None
        return log.exercises[exercise_index]

    def update_workout_log(self, workout_log_id: str, **updates) -> None:
        log = self.get_workout_log(workout_log_id)
        if log is None:
            return
        updates.pop("id", None)
        try:
            edited = WorkoutLog.model_validate({**log.model_dump(), **updates})
        except ValidationError as e:
            logger.warning("rejected edit of workout log %s: %s", workout_log_id, e)
            return
        self._logs[self._logs.index(log)] = edited
        self._persist(edited)

    def update_workout_log_exercise(
        self, workout_log_id: str, exercise_index: int, **updates
    ) -> None:
        exercise = self._exercise(workout_log_id, exercise_index)
        if exercise is None:
            return
        updates.pop("id", None)
        try:
            edited = ExerciseLog.model_validate({**exercise.model_dump(), **updates})
        except ValidationError as e:
            logger.warning("rejected edit of exercise %d: %s", exercise_index, e)
            return
        log = self.get_workout_log(workout_log_id)
        log.exercises[exercise_index] = edited
        self._persist(log)

    def update_workout_log_set(
        self, workout_log_id: str, exercise_index: int, set_index: int, **updates
    ) -> None:
        exercise = self._exercise(workout_log_id, exercise_index)
        if exercise is None or not 0 <= set_index < len(exercise.sets):
            return
        try:
            edited = WorkoutSet.model_validate(
                {**exercise.sets[set_index].model_dump(), **updates}
            )
        except ValidationError as e:
            logger.warning("rejected edit of set %d: %s", set_index, e)
            return
        exercise.sets[set_index] = edited
        self._persist(self.get_workout_log(workout_log_id))

    def add_workout_log_set(
        self, workout_log_id: str, exercise_index: int, set_data: WorkoutSet
    ) -> None:
        exercise = self._exercise(workout_log_id, exercise_index)
        if exercise is None:
            return
        exercise.sets.append(set_data)
        self._persist(self.get_workout_log(workout_log_id))

    def remove_workout_log_set(
        self, workout_log_id: str, exercise_index: int, set_index: int
    ) -> None:
        exercise = self._exercise(workout_log_id, exercise_index)
        if exercise is None or not 0 <= set_index < len(exercise.sets):
            return
        del exercise.sets[set_index]
        self._persist(self.get_workout_log(workout_log_id))

    def delete_workout_log(self, workout_log_id: str) -> None:
        log = self.get_workout_log(workout_log_id)
        if log is None:
            return
        self._logs.remove(log)
        if self.repo is not None:
            best_effort(self.repo.delete, workout_log_id)

    def clear_all(self) -> None:
        self._logs = []
        if self.repo is not None:
            best_effort(self.repo.delete_all)

    def count_completed_sessions_with_exercise(self, exercise_id: str) -> int:
        return sum(
            1
            for log in self._logs
            if log.completed
            and any(ex.exercise_id == exercise_id and ex.sets for ex in log.exercises)
        )

    def get_previous_set_data(self, exercise_id: str) -> Optional[dict]:
        """Best set (heaviest, then most reps) from the latest session with the exercise."""
        for log in self.completed_logs():
            for ex in log.exercises:
                if ex.exercise_id == exercise_id and ex.sets:
                    best = max(ex.sets, key=lambda s: (s.weight, s.reps))
                    return {"weight": best.weight, "reps": best.reps}
        return None

    def get_recent_exercise_history(self, exercise_id: str, limit: int = 5) -> list[dict]:
        history = []
        for log in self.completed_logs():
            ex = next(
                (e for e in log.exercises if e.exercise_id == exercise_id and e.sets),
                None,
            )
            if ex is None:
                continue
            workout = self.catalog.get_workout(log.workout_id) if self.catalog else None
            history.append(
                {
                    "date": log.date,
                    "workout_id": log.workout_id,
                    "workout_name": workout.name if workout else "Unknown Workout",
                    "sets": list(ex.sets),
                    "max_weight": max(s.weight for s in ex.sets),
                    "max_reps": max(s.reps for s in ex.sets),
                    "volume": MathTools.volume([(s.reps, s.weight) for s in ex.sets]),
                }
            )
            if len(history) >= limit:
                break
        return history

    def get_average_workout_duration(self, workout_id: str) -> int:
        durations = [
            log.duration
            for log in self._logs
            if log.workout_id == workout_id and log.completed and log.duration
        ]
        if not durations:
            return 0
        return sum(durations) // len(durations)

    def workouts_for_date(self, date: datetime.date) -> list[WorkoutLog]:
        return [
            log for log in self._logs if log.completed and _log_time(log).date() == date
        ]

    def workouts_for_date_range(
        self, start: datetime.date, end: datetime.date
    ) -> list[WorkoutLog]:
        return [
            log
            for log in self._logs
            if log.completed and start <= _log_time(log).date() <= end
        ]

    def muscle_groups_for_date(self, date: datetime.date) -> list[str]:
        if self.catalog is None:
            return []
        groups: list[str] = []
        for log in self.workouts_for_date(date):
            workout = self.catalog.get_workout(log.workout_id)
            if workout is None:
                continue
            for ref in workout.exercises:
                ex = self.catalog.get_exercise(ref.id)
                if ex is None:
                    continue
                for g in ex.muscle_groups:
                    if g not in groups:
                        groups.append(g)
        return groups
