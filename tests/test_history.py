import os
import sys
import datetime
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from catalog_service import CatalogService
from history_service import HistoryService
from models import Exercise, ExerciseLog, Workout, WorkoutExercise, WorkoutLog, WorkoutSet


def session(workout_id, day, duration, *sets, exercise_id="press"):
    stamp = datetime.datetime(2024, 4, day, 17, 30).isoformat()
    return WorkoutLog(
        workout_id=workout_id,
        date=stamp,
        start_time=stamp,
        duration=duration,
        completed=True,
        exercises=[
            ExerciseLog(
                exercise_id=exercise_id,
                sets=[WorkoutSet(weight=w, reps=r, completed=True) for w, r in sets],
            )
        ],
    )


class HistoryServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.catalog = CatalogService(
            exercises=[
                Exercise(id="press", name="Overhead Press", muscle_groups=["Shoulders", "Triceps"]),
                Exercise(id="dip", name="Dip", muscle_groups=["Chest", "Triceps"]),
            ],
            workouts=[
                Workout(id="push", name="Push", exercises=[WorkoutExercise(id="press"), WorkoutExercise(id="dip")]),
            ],
        )
        self.first = session("push", 1, 40, (40, 8), (45, 6))
        self.second = session("push", 3, 51, (45, 8), (45, 9), (42.5, 10))
        self.history = HistoryService(catalog=self.catalog, logs=[self.first, self.second])

    def test_completed_logs_newest_first(self) -> None:
        self.assertEqual(
            [log.id for log in self.history.completed_logs()],
            [self.second.id, self.first.id],
        )

    def test_update_workout_log(self) -> None:
        self.history.update_workout_log(self.first.id, notes="deload", id="hijack")
        edited = self.history.get_workout_log(self.first.id)
        self.assertEqual(edited.notes, "deload")

    def test_invalid_edit_is_ignored(self) -> None:
        self.history.update_workout_log_set(self.first.id, 0, 0, reps=-3)
        self.assertEqual(self.history.get_workout_log(self.first.id).exercises[0].sets[0].reps, 8)

    def test_set_edits(self) -> None:
        self.history.update_workout_log_set(self.first.id, 0, 1, weight=47.5)
        self.history.add_workout_log_set(self.first.id, 0, WorkoutSet(weight=30, reps=12))
        self.history.remove_workout_log_set(self.first.id, 0, 0)
        sets = self.history.get_workout_log(self.first.id).exercises[0].sets
        self.assertEqual([(s.weight, s.reps) for s in sets], [(47.5, 6), (30, 12)])

    def test_exercise_edit(self) -> None:
        self.history.update_workout_log_exercise(self.second.id, 0, notes="strict form", completed=True)
        ex = self.history.get_workout_log(self.second.id).exercises[0]
        self.assertEqual(ex.notes, "strict form")
        self.assertTrue(ex.completed)

    def test_unknown_references_are_noops(self) -> None:
        before = [log.model_dump() for log in self.history.logs]
        self.history.update_workout_log("missing", notes="x")
        self.history.update_workout_log_exercise(self.first.id, 4, notes="x")
        self.history.update_workout_log_set(self.first.id, 0, 9, weight=1)
        self.history.add_workout_log_set(self.first.id, 3, WorkoutSet())
        self.history.remove_workout_log_set(self.first.id, 0, 9)
        self.history.delete_workout_log("missing")
        self.assertEqual([log.model_dump() for log in self.history.logs], before)

    def test_previous_set_data(self) -> None:
        self.assertEqual(self.history.get_previous_set_data("press"), {"weight": 45, "reps": 9})
        self.assertIsNone(self.history.get_previous_set_data("dip"))

    def test_recent_exercise_history(self) -> None:
        recent = self.history.get_recent_exercise_history("press", limit=1)
        self.assertEqual(len(recent), 1)
        self.assertEqual(recent[0]["workout_name"], "Push")
        self.assertEqual(recent[0]["max_weight"], 45)
        self.assertEqual(recent[0]["max_reps"], 10)
        self.assertEqual(recent[0]["volume"], 1190)

    def test_average_duration_floors(self) -> None:
        self.assertEqual(self.history.get_average_workout_duration("push"), 45)
        self.assertEqual(self.history.get_average_workout_duration("pull"), 0)

    def test_date_queries(self) -> None:
        self.assertEqual(
            [l.id for l in self.history.workouts_for_date(datetime.date(2024, 4, 3))],
            [self.second.id],
        )
        in_range = self.history.workouts_for_date_range(
            datetime.date(2024, 4, 1), datetime.date(2024, 4, 2)
        )
        self.assertEqual([l.id for l in in_range], [self.first.id])
        self.assertEqual(
            self.history.muscle_groups_for_date(datetime.date(2024, 4, 1)),
            ["Shoulders", "Triceps", "Chest"],
        )

    def test_counts_sessions_with_sets(self) -> None:
        self.history.add(session("push", 5, 30, exercise_id="press"))
        self.assertEqual(self.history.count_completed_sessions_with_exercise("press"), 2)

    def test_delete_and_clear(self) -> None:
        self.history.delete_workout_log(self.first.id)
        self.assertIsNone(self.history.get_workout_log(self.first.id))
        self.history.clear_all()
        self.assertEqual(self.history.logs, [])


if __name__ == "__main__":
    unittest.main()
