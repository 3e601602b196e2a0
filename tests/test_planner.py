import os
import sys
import datetime

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from catalog_service import CatalogService
from db import ScheduledWorkoutRepository, WorkoutRepository
from history_service import HistoryService
from models import Exercise, ScheduledWorkout, Workout, WorkoutExercise, WorkoutLog
from planner_service import PlannerService, day_of_week


FIXED_NOW = datetime.datetime(2024, 1, 10, 12, 0)


def make_planner(repo=None, workout_repo=None, logs=None) -> PlannerService:
    catalog = CatalogService(
        workout_repo=workout_repo,
        exercises=[Exercise(id="squat", name="Back Squat")],
        workouts=[
            Workout(
                id="legs",
                name="Leg Day",
                category="Strength",
                estimated_duration=50,
                exercises=[WorkoutExercise(id="squat", sets=5, reps=5, rest_time=180)],
            )
        ],
    )
    history = HistoryService(catalog=catalog, logs=logs or [])
    return PlannerService(catalog, history, repo, clock=lambda: FIXED_NOW)


def test_day_of_week_starts_on_sunday():
    assert day_of_week(datetime.date(2024, 1, 7)) == 0
    assert day_of_week(datetime.date(2024, 1, 3)) == 3
    assert day_of_week(datetime.date(2024, 1, 6)) == 6


def test_recurring_wednesday_without_end_date():
    planner = make_planner()
    entry = planner.schedule_workout(
        ScheduledWorkout(workout_id="legs", schedule_type="recurring", day_of_week=3)
    )
    for offset in range(0, 70, 7):
        day = datetime.date(2024, 1, 3) + datetime.timedelta(days=offset)
        assert planner.get_scheduled_workouts_for_date(day) == [entry]
    assert planner.get_scheduled_workouts_for_date(datetime.date(2024, 1, 4)) == []


def test_recurring_end_date_is_inclusive():
    planner = make_planner()
    entry = planner.schedule_workout(
        ScheduledWorkout(
            workout_id="legs",
            schedule_type="recurring",
            day_of_week=3,
            recurrence_end_date=datetime.date(2024, 1, 17),
        )
    )
    assert planner.get_scheduled_workouts_for_date(datetime.date(2024, 1, 17)) == [entry]
    assert planner.get_scheduled_workouts_for_date(datetime.date(2024, 1, 24)) == []


def test_one_time_exact_date():
    planner = make_planner()
    entry = planner.schedule_workout(
        ScheduledWorkout(workout_id="legs", scheduled_date=datetime.date(2024, 2, 1))
    )
    assert planner.get_scheduled_workouts_for_date(datetime.date(2024, 2, 1)) == [entry]
    assert planner.get_scheduled_workouts_for_date(datetime.date(2024, 2, 8)) == []


def test_recurring_for_day_ignores_expired():
    planner = make_planner()
    active = planner.schedule_workout(
        ScheduledWorkout(workout_id="legs", schedule_type="recurring", day_of_week=1)
    )
    planner.schedule_workout(
        ScheduledWorkout(
            workout_id="legs",
            schedule_type="recurring",
            day_of_week=1,
            recurrence_end_date=datetime.date(2024, 1, 1),
        )
    )
    assert planner.get_recurring_workouts_for_day(1) == [active]
    assert len(planner.get_recurring_workouts_for_day(1, datetime.date(2023, 12, 1))) == 2


def test_update_and_remove(tmp_path):
    repo = ScheduledWorkoutRepository(str(tmp_path / "plan.db"))
    planner = make_planner(repo)
    entry = planner.schedule_workout(
        ScheduledWorkout(workout_id="legs", scheduled_date=datetime.date(2024, 2, 1))
    )
    planner.update_scheduled_workout(entry.model_copy(update={"time": "18:30"}))
    planner.update_scheduled_workout(ScheduledWorkout(workout_id="legs"))
    assert [e.time for e in repo.fetch_all()] == ["18:30"]
    reloaded = make_planner(repo)
    assert reloaded.get_scheduled_workout(entry.id).time == "18:30"
    planner.remove_scheduled_workout(entry.id)
    planner.remove_scheduled_workout("unknown")
    assert planner.scheduled_workouts == []
    assert repo.fetch_all() == []


def test_copy_workout_to_custom(tmp_path):
    workout_repo = WorkoutRepository(str(tmp_path / "catalog.db"))
    done = WorkoutLog(
        workout_id="legs",
        date="2024-01-08T18:00:00",
        start_time="2024-01-08T18:00:00",
        duration=42,
        completed=True,
    )
    planner = make_planner(workout_repo=workout_repo, logs=[done])
    new_id = planner.copy_workout_to_custom(done.id)
    custom = planner.catalog.get_workout(new_id)
    assert custom.name == "Leg Day (Custom)"
    assert custom.is_custom
    assert custom.estimated_duration == 42
    assert [(e.id, e.sets, e.reps, e.rest_time) for e in custom.exercises] == [
        ("squat", 5, 5, 180)
    ]
    assert custom.created_at == FIXED_NOW.isoformat()
    assert [w.id for w in workout_repo.fetch_all()] == [new_id]


def test_copy_uses_template_estimate_without_duration():
    done = WorkoutLog(
        workout_id="legs",
        date="2024-01-08T18:00:00",
        start_time="2024-01-08T18:00:00",
        completed=True,
    )
    planner = make_planner(logs=[done])
    custom = planner.catalog.get_workout(planner.copy_workout_to_custom(done.id))
    assert custom.estimated_duration == 50


def test_copy_unknown_sources_returns_empty():
    orphan = WorkoutLog(
        workout_id="deleted",
        date="2024-01-08T18:00:00",
        start_time="2024-01-08T18:00:00",
        completed=True,
    )
    planner = make_planner(logs=[orphan])
    assert planner.copy_workout_to_custom("missing") == ""
    assert planner.copy_workout_to_custom(orphan.id) == ""
