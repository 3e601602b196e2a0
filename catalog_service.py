from __future__ import annotations
import logging
from typing import Optional

from db import ExerciseRepository, WorkoutRepository, best_effort
from models import Exercise, Workout

logger = logging.getLogger(__name__)


class CatalogService:
    """Read-only access to exercise definitions and workout templates.

    The only writes accepted are user-authored templates (``is_custom``),
    which are validated against the known exercises before registration.
    """

    def __init__(
        self,
        exercise_repo: ExerciseRepository | None = None,
        workout_repo: WorkoutRepository | None = None,
        exercises: list[Exercise] | None = None,
        workouts: list[Workout] | None = None,
    ) -> None:
        self.exercise_repo = exercise_repo
        self.workout_repo = workout_repo
        if exercises is None:
            exercises = exercise_repo.fetch_all() if exercise_repo else []
        if workouts is None:
            workouts = workout_repo.fetch_all() if workout_repo else []
        self._exercises: dict[str, Exercise] = {e.id: e for e in exercises}
        self._workouts: dict[str, Workout] = {w.id: w for w in workouts}

    @property
    def exercises(self) -> list[Exercise]:
        return list(self._exercises.values())

    @property
    def workouts(self) -> list[Workout]:
        return list(self._workouts.values())

    def get_exercise(self, exercise_id: str | None) -> Optional[Exercise]:
        if not exercise_id:
            return None
        return self._exercises.get(exercise_id)

    def get_workout(self, workout_id: str | None) -> Optional[Workout]:
        if not workout_id:
            return None
        return self._workouts.get(workout_id)

    def validate_workout(self, workout: Workout) -> Workout:
        """Return a copy without exercise references missing from the catalog."""
        valid = [ex for ex in workout.exercises if ex.id in self._exercises]
        if len(valid) != len(workout.exercises):
            logger.warning(
                "workout %s references %d unknown exercises",
                workout.id,
                len(workout.exercises) - len(valid),
            )
        return workout.model_copy(update={"exercises": valid}, deep=True)

    def add_workout(self, workout: Workout) -> Workout:
        validated = self.validate_workout(workout)
        self._workouts[validated.id] = validated
        if self.workout_repo is not None:
            best_effort(self.workout_repo.save, validated)
        return validated

    def update_workout(self, workout: Workout) -> None:
        if workout.id not in self._workouts:
            return
        self.add_workout(workout)

    def remove_workout(self, workout_id: str) -> None:
        if self._workouts.pop(workout_id, None) is None:
            return
        if self.workout_repo is not None:
            best_effort(self.workout_repo.delete, workout_id)

    def muscle_groups(self) -> list[str]:
        names = {g for e in self._exercises.values() for g in e.muscle_groups}
        return sorted(names)

    def equipment_types(self) -> list[str]:
        names = {eq for e in self._exercises.values() for eq in e.equipment}
        return sorted(names)

    def filter_exercises(
        self,
        muscle_group: str | None = None,
        equipment: str | None = None,
        difficulty: str | None = None,
        search_query: str | None = None,
    ) -> list[Exercise]:
        query = search_query.lower() if search_query else None
        result = []
        for ex in self._exercises.values():
            if muscle_group and muscle_group not in ex.muscle_groups:
                continue
            if equipment and equipment not in ex.equipment:
                continue
            if difficulty and ex.difficulty != difficulty:
                continue
            if query and not (
                query in ex.name.lower()
                or query in ex.description.lower()
                or any(query in g.lower() for g in ex.muscle_groups)
            ):
                continue
            result.append(ex)
        return result

    def workouts_by_muscle_group(self, muscle_group: str) -> list[Workout]:
        result = []
        for workout in self._workouts.values():
            for ref in workout.exercises:
                ex = self._exercises.get(ref.id)
                if ex and muscle_group in ex.muscle_groups:
                    result.append(workout)
                    break
        return result
