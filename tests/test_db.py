import os
import sys
import sqlite3
import datetime

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from catalog_service import CatalogService
from db import (
    Database,
    ExerciseRepository,
    PersonalRecordRepository,
    ScheduledWorkoutRepository,
    WorkoutLogRepository,
    WorkoutRepository,
    best_effort,
)
from history_service import HistoryService
from models import (
    Exercise,
    ExerciseLog,
    PersonalRecord,
    ScheduledWorkout,
    Workout,
    WorkoutExercise,
    WorkoutLog,
    WorkoutMedia,
    WorkoutRating,
    WorkoutSet,
)
from personal_record_service import PersonalRecordService
from session_service import SessionService
from timer_service import TimerService


def test_workout_log_round_trip(tmp_path):
    repo = WorkoutLogRepository(str(tmp_path / "logs.db"))
    log = WorkoutLog(
        workout_id="w1",
        date="2024-02-02T06:00:00",
        start_time="2024-02-02T06:00:00",
        end_time="2024-02-02T06:41:00",
        duration=41,
        notes="early",
        completed=True,
        rating=WorkoutRating(overall=5, difficulty=3, notes="great"),
        media=[WorkoutMedia(type="video", uri="file:///v.mp4", timestamp="2024-02-02T06:40:00")],
        exercises=[
            ExerciseLog(
                exercise_id="e2",
                notes="second",
                completed=True,
                sets=[WorkoutSet(weight=20.5, reps=12, completed=True, notes="warm")],
            ),
            ExerciseLog(exercise_id="e1", sets=[]),
        ],
    )
    repo.save(log)
    assert repo.fetch_detail(log.id) == log
    assert repo.fetch_all(completed=True) == [log]
    assert repo.fetch_active() is None


def test_workout_log_without_template_or_rating(tmp_path):
    repo = WorkoutLogRepository(str(tmp_path / "logs.db"))
    log = WorkoutLog(date="2024-02-02T06:00:00", start_time="2024-02-02T06:00:00")
    repo.save(log)
    assert repo.fetch_active() == log
    repo.delete(log.id)
    assert repo.fetch_all() == []


def test_fetch_detail_missing_raises(tmp_path):
    repo = WorkoutLogRepository(str(tmp_path / "logs.db"))
    try:
        repo.fetch_detail("nope")
    except ValueError as e:
        assert "not found" in str(e)
    else:
        raise AssertionError("expected ValueError")


def test_catalog_round_trip(tmp_path):
    db_file = str(tmp_path / "catalog.db")
    exercises = ExerciseRepository(db_file)
    workouts = WorkoutRepository(db_file)
    ex = Exercise(id="e1", name="Row", muscle_groups=["Back", "Biceps"], equipment=["Cable"])
    wk = Workout(
        id="w1",
        name="Pull",
        estimated_duration=35,
        exercises=[WorkoutExercise(id="e1", sets=4, reps=12, rest_time=75)],
    )
    exercises.bulk_save([ex])
    workouts.save(wk)
    catalog = CatalogService(exercises, workouts)
    assert catalog.get_exercise("e1") == ex
    assert catalog.get_workout("w1") == wk
    catalog.update_workout(wk.model_copy(update={"name": "Pull Heavy"}))
    catalog.update_workout(Workout(id="w9", name="Ghost"))
    reloaded = CatalogService(exercises, workouts)
    assert reloaded.get_workout("w1").name == "Pull Heavy"
    assert reloaded.get_workout("w9") is None


def test_personal_record_single_per_exercise(tmp_path):
    repo = PersonalRecordRepository(str(tmp_path / "pr.db"))
    old = PersonalRecord(
        exercise_id="e1", exercise_name="Squat", weight=100, reps=5,
        estimated_one_rep_max=116.67, date="2024-01-01T00:00:00",
    )
    new = PersonalRecord(
        exercise_id="e1", exercise_name="Squat", weight=105, reps=5,
        estimated_one_rep_max=122.5, date="2024-01-08T00:00:00",
        previous_best=100, improvement=5,
    )
    repo.save(old)
    repo.save(new)
    assert repo.fetch_all() == [new]


def test_schedule_round_trip(tmp_path):
    repo = ScheduledWorkoutRepository(str(tmp_path / "plan.db"))
    entry = ScheduledWorkout(
        workout_id="w1",
        schedule_type="recurring",
        day_of_week=5,
        recurrence_end_date=datetime.date(2024, 6, 30),
        time="06:15",
        duration=45,
    )
    repo.save(entry)
    assert repo.fetch_all() == [entry]


def test_adds_missing_columns(tmp_path):
    db_file = tmp_path / "old.db"
    conn = sqlite3.connect(str(db_file))
    conn.execute(
        "CREATE TABLE workout_logs (id TEXT PRIMARY KEY, workout_id TEXT, date TEXT NOT NULL, start_time TEXT NOT NULL)"
    )
    conn.execute(
        "INSERT INTO workout_logs VALUES ('a', 'w1', '2024-01-01T10:00:00', '2024-01-01T10:00:00')"
    )
    conn.commit()
    conn.close()

    Database(str(db_file))

    repo = WorkoutLogRepository(str(db_file))
    (log,) = repo.fetch_all()
    assert log.id == "a"
    assert log.notes == ""
    assert log.completed is False
    assert log.rating is None


def test_active_session_survives_restart(tmp_path):
    db_file = str(tmp_path / "app.db")
    log_repo = WorkoutLogRepository(db_file)
    catalog = CatalogService(
        exercises=[Exercise(id="e1", name="Lunge")],
        workouts=[Workout(id="w1", name="Legs", exercises=[WorkoutExercise(id="e1")])],
    )

    def build():
        history = HistoryService(log_repo, catalog)
        return SessionService(
            catalog,
            history,
            PersonalRecordService(catalog, history),
            TimerService(),
            workout_log_repo=log_repo,
        )

    sessions = build()
    sessions.start("w1")
    sessions.log_set(0, WorkoutSet(weight=16, reps=10))
    restored = build()
    assert restored.active_workout.exercises[0].sets == [WorkoutSet(weight=16, reps=10)]
    restored.complete()
    again = build()
    assert again.active_workout is None
    assert len(again.history.logs) == 1


def test_best_effort_swallows_failures(caplog):
    def boom():
        raise RuntimeError("disk full")

    best_effort(boom)
    assert "disk full" in caplog.text


def test_negative_set_edit_does_not_block_restart(tmp_path):
    db_file = str(tmp_path / "app.db")
    log_repo = WorkoutLogRepository(db_file)
    catalog = CatalogService(
        exercises=[Exercise(id="e1", name="Lunge")],
        workouts=[Workout(id="w1", name="Legs", exercises=[WorkoutExercise(id="e1")])],
    )

    def build():
        history = HistoryService(log_repo, catalog)
        return SessionService(
            catalog,
            history,
            PersonalRecordService(catalog, history),
            TimerService(),
            workout_log_repo=log_repo,
        )

    sessions = build()
    sessions.start("w1")
    sessions.log_set(0, WorkoutSet(weight=50, reps=5))
    sessions.update_set_weight(0, 0, -5)
    sessions.update_set_reps(0, 0, -1)
    assert sessions.active_workout.exercises[0].sets == [WorkoutSet(weight=50, reps=5)]
    restored = build()
    assert restored.active_workout.exercises[0].sets == [WorkoutSet(weight=50, reps=5)]
