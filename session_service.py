from __future__ import annotations
import datetime
import logging
from typing import Callable, Optional

from algorithms.math_tools import MathTools
from catalog_service import CatalogService
from db import SettingsRepository, WorkoutLogRepository, best_effort
from gamification_service import GamificationService
from history_service import HistoryService
from models import ExerciseLog, WorkoutLog, WorkoutMedia, WorkoutRating, WorkoutSet
from personal_record_service import PersonalRecordService
from timer_service import TimerService

logger = logging.getLogger(__name__)


class SetLedger:
    """Index-checked mutations of the exercises and sets of one session."""

    def __init__(self, log: WorkoutLog) -> None:
        self.log = log

    def exercise(self, index: int) -> Optional[ExerciseLog]:
        if not 0 <= index < len(self.log.exercises):
            return None
        return self.log.exercises[index]

    def workout_set(self, exercise_index: int, set_index: int) -> Optional[WorkoutSet]:
        exercise = self.exercise(exercise_index)
        if exercise is None or not 0 <= set_index < len(exercise.sets):
            return None
        return exercise.sets[set_index]

    def append_set(self, exercise_index: int, set_data: WorkoutSet) -> Optional[ExerciseLog]:
        exercise = self.exercise(exercise_index)
        if exercise is None:
            return None
        exercise.sets.append(set_data)
        return exercise

    def reorder(self, from_index: int, to_index: int) -> bool:
        size = len(self.log.exercises)
        if not (0 <= from_index < size and 0 <= to_index < size):
            return False
        moved = self.log.exercises.pop(from_index)
        self.log.exercises.insert(to_index, moved)
        return True

    def is_exercise_completed(self, index: int) -> bool:
        exercise = self.exercise(index)
        return bool(exercise and exercise.completed)

    def are_all_sets_completed(self, index: int) -> bool:
        exercise = self.exercise(index)
        if exercise is None or not exercise.sets:
            return False
        return all(s.weight is not None and s.reps is not None for s in exercise.sets)


class SessionService:
    """State machine for the single active workout session.

    ``Idle -> Active -> {Completed, Cancelled}``. Operations that are not
    valid in the current state, or that address a missing exercise or set,
    leave everything unchanged.
    """

    def __init__(
        self,
        catalog: CatalogService,
        history: HistoryService,
        records: PersonalRecordService,
        timer: TimerService,
        workout_log_repo: WorkoutLogRepository | None = None,
        gamification: GamificationService | None = None,
        settings_repo: SettingsRepository | None = None,
        clock: Callable[[], datetime.datetime] = datetime.datetime.now,
    ) -> None:
        self.catalog = catalog
        self.history = history
        self.records = records
        self.timer = timer
        self.repo = workout_log_repo
        self.gamification = gamification
        self.settings = settings_repo
        self.clock = clock
        self._active: Optional[SetLedger] = None
        if workout_log_repo is not None:
            restored = workout_log_repo.fetch_active()
            if restored is not None:
                self._active = SetLedger(restored)

    @property
    def active_workout(self) -> Optional[WorkoutLog]:
        return self._active.log if self._active else None

    def is_active(self) -> bool:
        return self._active is not None

    def _persist(self) -> None:
        if self.repo is not None and self._active is not None:
            best_effort(self.repo.save, self._active.log)

    def start(self, workout_id: str) -> Optional[WorkoutLog]:
        if self._active is not None:
            logger.debug("start(%s) ignored: a session is already active", workout_id)
            return None
        workout = self.catalog.get_workout(workout_id)
        if workout is None:
            return None
        now = self.clock().isoformat()
        log = WorkoutLog(
            workout_id=workout_id,
            date=now,
            start_time=now,
            exercises=[
                ExerciseLog(exercise_id=ref.id)
                for ref in workout.exercises
                if ref.id and self.catalog.get_exercise(ref.id) is not None
            ],
        )
        self._active = SetLedger(log)
        self.timer.restart()
        self._persist()
        logger.info("started workout %s (%s)", workout.name, log.id)
        return log

    def cancel(self) -> None:
        if self._active is None:
            return
        log_id = self._active.log.id
        self._active = None
        if self.repo is not None:
            best_effort(self.repo.delete, log_id)

    def complete(self) -> Optional[WorkoutLog]:
        if self._active is None:
            return None
        log = self._active.log
        now = self.clock()
        log.end_time = now.isoformat()
        log.duration = MathTools.session_minutes(log.start_time or log.date, now)
        log.completed = True
        self._active = None
        self.history.add(log)
        logger.info("completed workout %s in %d min", log.id, log.duration)
        if self.gamification is not None:
            self._fire_completion_hooks(now.date())
        return log

    def _fire_completion_hooks(self, today: datetime.date) -> None:
        game = self.gamification
        try:
            enabled = game.is_enabled()
        except Exception:
            logger.exception("could not read gamification state")
            return
        if not enabled:
            return
        best_effort(game.update_streak)
        best_effort(game.check_achievements)
        best_effort(self._advance_workout_goals, today)

    def _advance_workout_goals(self, today: datetime.date) -> None:
        game = self.gamification
        for challenge_id, progress in game.open_challenges("workout"):
            best_effort(game.update_challenge_progress, challenge_id, progress + 1)
        quest_id = game.open_daily_quest("workout", today)
        if quest_id is not None:
            game.complete_daily_quest(quest_id)

    def log_set(self, exercise_index: int, set_data: WorkoutSet) -> None:
        if self._active is None:
            return
        exercise = self._active.append_set(exercise_index, set_data)
        if exercise is None:
            return
        self._persist()
        if set_data.weight > 0 and set_data.reps > 0:
            self.records.check_for_personal_record(
                exercise.exercise_id, set_data.weight, set_data.reps
            )

    def update_set_weight(self, exercise_index: int, set_index: int, weight: float) -> None:
        if self._active is None:
            return
        target = self._active.workout_set(exercise_index, set_index)
        if target is None:
            return
        if weight < 0:
            logger.debug("ignored negative weight %s", weight)
            return
        old_weight = target.weight or 0
        target.weight = weight
        self._persist()
        if weight > old_weight and target.reps > 0:
            exercise = self._active.exercise(exercise_index)
            self.records.check_for_personal_record(exercise.exercise_id, weight, target.reps)

    def update_set_reps(self, exercise_index: int, set_index: int, reps: int) -> None:
        if self._active is None:
            return
        target = self._active.workout_set(exercise_index, set_index)
        if target is None:
            return
        if reps < 0:
            logger.debug("ignored negative reps %s", reps)
            return
        old_reps = target.reps or 0
        target.reps = reps
        self._persist()
        if reps > old_reps and target.weight > 0:
            exercise = self._active.exercise(exercise_index)
            self.records.check_for_personal_record(exercise.exercise_id, target.weight, reps)

    def update_set_completed(self, exercise_index: int, set_index: int, completed: bool) -> None:
        if self._active is None:
            return
        target = self._active.workout_set(exercise_index, set_index)
        if target is None:
            return
        target.completed = completed
        self._persist()

    def update_set_note(self, exercise_index: int, set_index: int, note: str) -> None:
        if self._active is None:
            return
        target = self._active.workout_set(exercise_index, set_index)
        if target is None:
            return
        target.notes = note
        self._persist()

    def update_exercise_note(self, exercise_index: int, note: str) -> None:
        if self._active is None:
            return
        exercise = self._active.exercise(exercise_index)
        if exercise is None:
            return
        exercise.notes = note
        self._persist()

    def update_workout_note(self, note: str) -> None:
        if self._active is None:
            return
        self._active.log.notes = note
        self._persist()

    def reorder_exercises(self, from_index: int, to_index: int) -> None:
        if self._active is None:
            return
        if self._active.reorder(from_index, to_index):
            self._persist()

    def mark_exercise_completed(self, exercise_index: int, completed: bool) -> None:
        if self._active is None:
            return
        exercise = self._active.exercise(exercise_index)
        if exercise is None:
            return
        exercise.completed = completed
        self._persist()

    def is_exercise_completed(self, exercise_index: int) -> bool:
        if self._active is None:
            return False
        return self._active.is_exercise_completed(exercise_index)

    def are_all_sets_completed(self, exercise_index: int) -> bool:
        if self._active is None:
            return False
        return self._active.are_all_sets_completed(exercise_index)

    def rate_workout(self, rating: WorkoutRating) -> None:
        if self._active is None:
            return
        self._active.log.rating = rating
        self._persist()

    def add_workout_media(self, media: WorkoutMedia) -> None:
        if self._active is None:
            return
        self._active.log.media.append(media)
        self._persist()

    def start_exercise_rest_timer(self, duration: int | None = None) -> None:
        self.timer.start_rest(duration or self.timer.settings.default_rest_time)

    def get_workout_duration(self) -> int:
        if self._active is None or not self._active.log.start_time:
            return 0
        return MathTools.elapsed_minutes(self._active.log.start_time, self.clock())

    def is_workout_running_too_long(self) -> bool:
        if self._active is None:
            return False
        enabled = True
        threshold = 90
        if self.settings is not None:
            enabled = self.settings.get_bool("long_workout_notifications_enabled", True)
            threshold = self.settings.get_int("long_workout_threshold", 90)
        if not enabled:
            return False
        return self.get_workout_duration() >= threshold

    def clear_all_workout_logs(self) -> None:
        """Drop history, personal records and any active session."""
        self.history.clear_all()
        self.records.clear()
        self.cancel()
