import sqlite3
import os
import datetime
import json
import logging
from contextlib import contextmanager
from typing import List, Tuple, Optional, Iterable

from config import YamlConfig
from settings_schema import validate_settings
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

logger = logging.getLogger(__name__)


def best_effort(action, *args, **kwargs) -> None:
    """Run a side-effect call, logging and swallowing any failure."""
    try:
        action(*args, **kwargs)
    except Exception:
        logger.exception(
            "side effect %s failed", getattr(action, "__qualname__", repr(action))
        )


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "exercises": (
            """CREATE TABLE exercises (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    description TEXT NOT NULL DEFAULT '',
                    muscle_groups TEXT NOT NULL DEFAULT '',
                    equipment TEXT NOT NULL DEFAULT '',
                    difficulty TEXT NOT NULL DEFAULT 'beginner'
                );""",
            ["id", "name", "description", "muscle_groups", "equipment", "difficulty"],
        ),
        "workouts": (
            """CREATE TABLE workouts (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    description TEXT NOT NULL DEFAULT '',
                    category TEXT NOT NULL DEFAULT 'Strength',
                    difficulty TEXT NOT NULL DEFAULT 'beginner',
                    intensity TEXT NOT NULL DEFAULT 'medium',
                    estimated_duration INTEGER,
                    duration INTEGER,
                    is_custom INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT
                );""",
            [
                "id",
                "name",
                "description",
                "category",
                "difficulty",
                "intensity",
                "estimated_duration",
                "duration",
                "is_custom",
                "created_at",
            ],
        ),
        "workout_exercises": (
            """CREATE TABLE workout_exercises (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    workout_id TEXT NOT NULL,
                    exercise_id TEXT NOT NULL,
                    sets INTEGER NOT NULL DEFAULT 3,
                    reps INTEGER NOT NULL DEFAULT 10,
                    rest_time INTEGER NOT NULL DEFAULT 60,
                    position INTEGER NOT NULL DEFAULT 0,
                    FOREIGN KEY(workout_id) REFERENCES workouts(id) ON DELETE CASCADE
                );""",
            ["id", "workout_id", "exercise_id", "sets", "reps", "rest_time", "position"],
        ),
        "workout_logs": (
            """CREATE TABLE workout_logs (
                    id TEXT PRIMARY KEY,
                    workout_id TEXT,
                    date TEXT NOT NULL,
                    start_time TEXT NOT NULL,
                    end_time TEXT NOT NULL DEFAULT '',
                    duration INTEGER NOT NULL DEFAULT 0,
                    notes TEXT NOT NULL DEFAULT '',
                    completed INTEGER NOT NULL DEFAULT 0,
                    rating TEXT
                );""",
            [
                "id",
                "workout_id",
                "date",
                "start_time",
                "end_time",
                "duration",
                "notes",
                "completed",
                "rating",
            ],
        ),
        "exercise_logs": (
            """CREATE TABLE exercise_logs (
                    id TEXT PRIMARY KEY,
                    workout_log_id TEXT NOT NULL,
                    exercise_id TEXT NOT NULL,
                    notes TEXT NOT NULL DEFAULT '',
                    completed INTEGER NOT NULL DEFAULT 0,
                    position INTEGER NOT NULL DEFAULT 0,
                    FOREIGN KEY(workout_log_id) REFERENCES workout_logs(id) ON DELETE CASCADE
                );""",
            ["id", "workout_log_id", "exercise_id", "notes", "completed", "position"],
        ),
        "workout_sets": (
            """CREATE TABLE workout_sets (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    exercise_log_id TEXT NOT NULL,
                    weight REAL NOT NULL DEFAULT 0,
                    reps INTEGER NOT NULL DEFAULT 0,
                    completed INTEGER NOT NULL DEFAULT 0,
                    notes TEXT NOT NULL DEFAULT '',
                    position INTEGER NOT NULL DEFAULT 0,
                    FOREIGN KEY(exercise_log_id) REFERENCES exercise_logs(id) ON DELETE CASCADE
                );""",
            ["id", "exercise_log_id", "weight", "reps", "completed", "notes", "position"],
        ),
        "workout_media": (
            """CREATE TABLE workout_media (
                    id TEXT PRIMARY KEY,
                    workout_log_id TEXT NOT NULL,
                    type TEXT NOT NULL DEFAULT 'photo',
                    uri TEXT NOT NULL,
                    timestamp TEXT NOT NULL,
                    position INTEGER NOT NULL DEFAULT 0,
                    FOREIGN KEY(workout_log_id) REFERENCES workout_logs(id) ON DELETE CASCADE
                );""",
            ["id", "workout_log_id", "type", "uri", "timestamp", "position"],
        ),
        "personal_records": (
            """CREATE TABLE personal_records (
                    id TEXT PRIMARY KEY,
                    exercise_id TEXT NOT NULL UNIQUE,
                    exercise_name TEXT NOT NULL,
                    weight REAL NOT NULL,
                    reps INTEGER NOT NULL,
                    estimated_one_rep_max REAL NOT NULL,
                    date TEXT NOT NULL,
                    previous_best REAL NOT NULL DEFAULT 0,
                    improvement REAL NOT NULL DEFAULT 0
                );""",
            [
                "id",
                "exercise_id",
                "exercise_name",
                "weight",
                "reps",
                "estimated_one_rep_max",
                "date",
                "previous_best",
                "improvement",
            ],
        ),
        "scheduled_workouts": (
            """CREATE TABLE scheduled_workouts (
                    id TEXT PRIMARY KEY,
                    workout_id TEXT NOT NULL,
                    schedule_type TEXT NOT NULL DEFAULT 'one-time',
                    scheduled_date TEXT,
                    day_of_week INTEGER,
                    recurrence_end_date TEXT,
                    time TEXT NOT NULL DEFAULT '08:00',
                    duration INTEGER NOT NULL DEFAULT 60,
                    completed INTEGER NOT NULL DEFAULT 0
                );""",
            [
                "id",
                "workout_id",
                "schedule_type",
                "scheduled_date",
                "day_of_week",
                "recurrence_end_date",
                "time",
                "duration",
                "completed",
            ],
        ),
        "settings": (
            """CREATE TABLE settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );""",
            ["key", "value"],
        ),
        "gamification_points": (
            """CREATE TABLE gamification_points (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    reason TEXT NOT NULL DEFAULT '',
                    points REAL NOT NULL,
                    timestamp TEXT NOT NULL
                );""",
            ["id", "reason", "points", "timestamp"],
        ),
        "challenges": (
            """CREATE TABLE challenges (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    category TEXT NOT NULL DEFAULT 'workout',
                    target INTEGER NOT NULL,
                    progress INTEGER NOT NULL DEFAULT 0,
                    completed INTEGER NOT NULL DEFAULT 0
                );""",
            ["id", "name", "category", "target", "progress", "completed"],
        ),
        "daily_quests": (
            """CREATE TABLE daily_quests (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    category TEXT NOT NULL DEFAULT 'workout',
                    date TEXT NOT NULL,
                    completed INTEGER NOT NULL DEFAULT 0
                );""",
            ["id", "name", "category", "date", "completed"],
        ),
        "achievements": (
            """CREATE TABLE achievements (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    target INTEGER NOT NULL DEFAULT 1,
                    progress INTEGER NOT NULL DEFAULT 0,
                    completed INTEGER NOT NULL DEFAULT 0,
                    unlocked_at TEXT
                );""",
            ["id", "name", "target", "progress", "completed", "unlocked_at"],
        ),
    }

    def __init__(self, db_path: str = "workout.db") -> None:
        self._db_path = db_path
        self._ensure_schema()
        self._init_settings()

    @contextmanager
    def _connection(self):
        connection = sqlite3.connect(self._db_path)
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute("PRAGMA foreign_keys=off;")
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)
            cursor.execute("PRAGMA foreign_keys=on;")

    def _ensure_table(
        self, conn: sqlite3.Connection, table: str, sql: str, columns: List[str]
    ) -> None:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        if cur.fetchone() is None:
            conn.execute(sql)
            return

        cur = conn.execute(f"PRAGMA table_info({table});")
        existing_cols = [row[1] for row in cur.fetchall()]
        if existing_cols == columns:
            return

        conn.execute(f"DROP TABLE IF EXISTS {table}_old;")
        conn.execute(f"ALTER TABLE {table} RENAME TO {table}_old;")
        conn.execute(sql)

        common = [c for c in existing_cols if c in columns]
        if common:
            cols = ", ".join(common)
            missing = [c for c in columns if c not in existing_cols]
            if missing:
                def default_val(col: str) -> str:
                    if col in ("position", "completed", "is_custom", "duration"):
                        return "0"
                    if col in ("notes", "description", "end_time", "reason"):
                        return "''"
                    return "NULL"

                defaults = ", ".join(default_val(c) for c in missing)
                conn.execute(
                    f"INSERT INTO {table} ({cols}, {', '.join(missing)}) SELECT {cols}, {defaults} FROM {table}_old;"
                )
            else:
                conn.execute(
                    f"INSERT INTO {table} ({cols}) SELECT {cols} FROM {table}_old;"
                )
        conn.execute(f"DROP TABLE {table}_old;")

    def _init_settings(self) -> None:
        defaults = {
            "game_enabled": "0",
            "workout_recommendations_enabled": "0",
            "long_workout_notifications_enabled": "1",
            "long_workout_threshold": "90",
            "rest_time": "60",
            "set_rest_time": "60",
            "workout_rest_time": "60",
            "default_rest_time": "60",
            "default_set_count": "3",
            "sound_enabled": "1",
            "vibration_enabled": "1",
            "auto_start_rest": "0",
            "fitness_level": "beginner",
            "fitness_goal": "maintain",
            "activity_level": "moderate",
            "body_weight": "70.0",
            "weight_unit": "kg",
            "log_level": "INFO",
        }
        with self._connection() as conn:
            for key, value in defaults.items():
                conn.execute(
                    "INSERT OR IGNORE INTO settings (key, value) VALUES (?, ?);",
                    (key, value),
                )


class BaseRepository(Database):
    """Base repository providing helper methods."""

    def execute(self, query: str, params: Tuple = ()) -> int:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.lastrowid

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()

    def _delete_all(self, table: str) -> None:
        self.execute(f"DELETE FROM {table};")


def _split(value: str) -> list[str]:
    return [v for v in value.split("|") if v]


class ExerciseRepository(BaseRepository):
    """Repository for catalog exercises."""

    def save(self, exercise: Exercise) -> None:
        self.execute(
            "INSERT INTO exercises (id, name, description, muscle_groups, equipment, difficulty) "
            "VALUES (?, ?, ?, ?, ?, ?) "
            "ON CONFLICT(id) DO UPDATE SET name=excluded.name, description=excluded.description, "
            "muscle_groups=excluded.muscle_groups, equipment=excluded.equipment, difficulty=excluded.difficulty;",
            (
                exercise.id,
                exercise.name,
                exercise.description,
                "|".join(exercise.muscle_groups),
                "|".join(exercise.equipment),
                exercise.difficulty,
            ),
        )

    def bulk_save(self, exercises: Iterable[Exercise]) -> None:
        for exercise in exercises:
            self.save(exercise)

    def fetch_all(self) -> list[Exercise]:
        rows = super().fetch_all(
            "SELECT id, name, description, muscle_groups, equipment, difficulty FROM exercises ORDER BY rowid;"
        )
        return [
            Exercise(
                id=eid,
                name=name,
                description=desc,
                muscle_groups=_split(groups),
                equipment=_split(equipment),
                difficulty=difficulty,
            )
            for eid, name, desc, groups, equipment, difficulty in rows
        ]

    def delete(self, exercise_id: str) -> None:
        self.execute("DELETE FROM exercises WHERE id = ?;", (exercise_id,))

    def delete_all(self) -> None:
        self._delete_all("exercises")


class WorkoutRepository(BaseRepository):
    """Repository for workout templates and their prescribed exercises."""

    def save(self, workout: Workout) -> None:
        with self._connection() as conn:
            conn.execute(
                "INSERT INTO workouts (id, name, description, category, difficulty, intensity, estimated_duration, duration, is_custom, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?) "
                "ON CONFLICT(id) DO UPDATE SET name=excluded.name, description=excluded.description, "
                "category=excluded.category, difficulty=excluded.difficulty, intensity=excluded.intensity, "
                "estimated_duration=excluded.estimated_duration, duration=excluded.duration, "
                "is_custom=excluded.is_custom, created_at=excluded.created_at;",
                (
                    workout.id,
                    workout.name,
                    workout.description,
                    workout.category,
                    workout.difficulty,
                    workout.intensity,
                    workout.estimated_duration,
                    workout.duration,
                    1 if workout.is_custom else 0,
                    workout.created_at,
                ),
            )
            conn.execute(
                "DELETE FROM workout_exercises WHERE workout_id = ?;", (workout.id,)
            )
            for pos, ex in enumerate(workout.exercises):
                conn.execute(
                    "INSERT INTO workout_exercises (workout_id, exercise_id, sets, reps, rest_time, position) "
                    "VALUES (?, ?, ?, ?, ?, ?);",
                    (workout.id, ex.id, ex.sets, ex.reps, ex.rest_time, pos),
                )

    def fetch_all(self) -> list[Workout]:
        rows = super().fetch_all(
            "SELECT id, name, description, category, difficulty, intensity, estimated_duration, duration, is_custom, created_at "
            "FROM workouts ORDER BY rowid;"
        )
        ex_rows = super().fetch_all(
            "SELECT workout_id, exercise_id, sets, reps, rest_time FROM workout_exercises ORDER BY workout_id, position;"
        )
        by_workout: dict[str, list[WorkoutExercise]] = {}
        for wid, eid, sets, reps, rest in ex_rows:
            by_workout.setdefault(wid, []).append(
                WorkoutExercise(id=eid, sets=sets, reps=reps, rest_time=rest)
            )
        return [
            Workout(
                id=wid,
                name=name,
                description=desc,
                category=category,
                difficulty=difficulty,
                intensity=intensity,
                estimated_duration=est,
                duration=duration,
                exercises=by_workout.get(wid, []),
                is_custom=bool(custom),
                created_at=created,
            )
            for wid, name, desc, category, difficulty, intensity, est, duration, custom, created in rows
        ]

    def delete(self, workout_id: str) -> None:
        with self._connection() as conn:
            conn.execute(
                "DELETE FROM workout_exercises WHERE workout_id = ?;", (workout_id,)
            )
            conn.execute("DELETE FROM workouts WHERE id = ?;", (workout_id,))

    def delete_all(self) -> None:
        self._delete_all("workout_exercises")
        self._delete_all("workouts")


class WorkoutLogRepository(BaseRepository):
    """Repository mirroring workout sessions including nested exercises and sets."""

    def save(self, log: WorkoutLog) -> None:
        rating = log.rating.model_dump_json() if log.rating is not None else None
        with self._connection() as conn:
            conn.execute(
                "INSERT INTO workout_logs (id, workout_id, date, start_time, end_time, duration, notes, completed, rating) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?) "
                "ON CONFLICT(id) DO UPDATE SET workout_id=excluded.workout_id, date=excluded.date, "
                "start_time=excluded.start_time, end_time=excluded.end_time, duration=excluded.duration, "
                "notes=excluded.notes, completed=excluded.completed, rating=excluded.rating;",
                (
                    log.id,
                    log.workout_id,
                    log.date,
                    log.start_time,
                    log.end_time,
                    log.duration,
                    log.notes,
                    1 if log.completed else 0,
                    rating,
                ),
            )
            self._delete_children(conn, log.id)
            for pos, ex in enumerate(log.exercises):
                conn.execute(
                    "INSERT INTO exercise_logs (id, workout_log_id, exercise_id, notes, completed, position) "
                    "VALUES (?, ?, ?, ?, ?, ?);",
                    (ex.id, log.id, ex.exercise_id, ex.notes, 1 if ex.completed else 0, pos),
                )
                for set_pos, s in enumerate(ex.sets):
                    conn.execute(
                        "INSERT INTO workout_sets (exercise_log_id, weight, reps, completed, notes, position) "
                        "VALUES (?, ?, ?, ?, ?, ?);",
                        (ex.id, s.weight, s.reps, 1 if s.completed else 0, s.notes, set_pos),
                    )
            for pos, m in enumerate(log.media):
                conn.execute(
                    "INSERT INTO workout_media (id, workout_log_id, type, uri, timestamp, position) "
                    "VALUES (?, ?, ?, ?, ?, ?);",
                    (m.id, log.id, m.type, m.uri, m.timestamp, pos),
                )

    @staticmethod
    def _delete_children(conn: sqlite3.Connection, log_id: str) -> None:
        conn.execute(
            "DELETE FROM workout_sets WHERE exercise_log_id IN "
            "(SELECT id FROM exercise_logs WHERE workout_log_id = ?);",
            (log_id,),
        )
        conn.execute("DELETE FROM exercise_logs WHERE workout_log_id = ?;", (log_id,))
        conn.execute("DELETE FROM workout_media WHERE workout_log_id = ?;", (log_id,))

    def fetch_all(self, completed: Optional[bool] = None) -> list[WorkoutLog]:
        query = (
            "SELECT id, workout_id, date, start_time, end_time, duration, notes, completed, rating "
            "FROM workout_logs"
        )
        params: tuple = ()
        if completed is not None:
            query += " WHERE completed = ?"
            params = (1 if completed else 0,)
        query += " ORDER BY rowid;"
        rows = super().fetch_all(query, params)
        return [self._build(row) for row in rows]

    def fetch_active(self) -> Optional[WorkoutLog]:
        logs = self.fetch_all(completed=False)
        return logs[-1] if logs else None

    def fetch_detail(self, log_id: str) -> WorkoutLog:
        rows = super().fetch_all(
            "SELECT id, workout_id, date, start_time, end_time, duration, notes, completed, rating "
            "FROM workout_logs WHERE id = ?;",
            (log_id,),
        )
        if not rows:
            raise ValueError("workout log not found")
        return self._build(rows[0])

    def _build(self, row: Tuple) -> WorkoutLog:
        lid, wid, date, start, end, duration, notes, completed, rating = row
        exercises: list[ExerciseLog] = []
        ex_rows = super().fetch_all(
            "SELECT id, exercise_id, notes, completed FROM exercise_logs "
            "WHERE workout_log_id = ? ORDER BY position;",
            (lid,),
        )
        for ex_id, exercise_id, ex_notes, ex_completed in ex_rows:
            set_rows = super().fetch_all(
                "SELECT weight, reps, completed, notes FROM workout_sets "
                "WHERE exercise_log_id = ? ORDER BY position;",
                (ex_id,),
            )
            exercises.append(
                ExerciseLog(
                    id=ex_id,
                    exercise_id=exercise_id,
                    notes=ex_notes,
                    completed=bool(ex_completed),
                    sets=[
                        WorkoutSet(
                            weight=float(w), reps=int(r), completed=bool(c), notes=n
                        )
                        for w, r, c, n in set_rows
                    ],
                )
            )
        media_rows = super().fetch_all(
            "SELECT id, type, uri, timestamp FROM workout_media "
            "WHERE workout_log_id = ? ORDER BY position;",
            (lid,),
        )
        return WorkoutLog(
            id=lid,
            workout_id=wid,
            date=date,
            start_time=start,
            end_time=end,
            duration=int(duration),
            notes=notes,
            completed=bool(completed),
            rating=WorkoutRating.model_validate(json.loads(rating)) if rating else None,
            exercises=exercises,
            media=[
                WorkoutMedia(id=mid, type=mtype, uri=uri, timestamp=ts)
                for mid, mtype, uri, ts in media_rows
            ],
        )

    def delete(self, log_id: str) -> None:
        with self._connection() as conn:
            self._delete_children(conn, log_id)
            conn.execute("DELETE FROM workout_logs WHERE id = ?;", (log_id,))

    def delete_all(self) -> None:
        self._delete_all("workout_sets")
        self._delete_all("exercise_logs")
        self._delete_all("workout_media")
        self._delete_all("workout_logs")


class PersonalRecordRepository(BaseRepository):
    """Repository holding the single current record per exercise."""

    def save(self, record: PersonalRecord) -> None:
        with self._connection() as conn:
            conn.execute(
                "DELETE FROM personal_records WHERE exercise_id = ?;",
                (record.exercise_id,),
            )
            conn.execute(
                "INSERT INTO personal_records (id, exercise_id, exercise_name, weight, reps, estimated_one_rep_max, date, previous_best, improvement) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);",
                (
                    record.id,
                    record.exercise_id,
                    record.exercise_name,
                    record.weight,
                    record.reps,
                    record.estimated_one_rep_max,
                    record.date,
                    record.previous_best,
                    record.improvement,
                ),
            )

    def fetch_all(self) -> list[PersonalRecord]:
        rows = super().fetch_all(
            "SELECT id, exercise_id, exercise_name, weight, reps, estimated_one_rep_max, date, previous_best, improvement "
            "FROM personal_records ORDER BY rowid;"
        )
        return [
            PersonalRecord(
                id=rid,
                exercise_id=eid,
                exercise_name=name,
                weight=float(w),
                reps=int(r),
                estimated_one_rep_max=float(est),
                date=date,
                previous_best=float(prev),
                improvement=float(imp),
            )
            for rid, eid, name, w, r, est, date, prev, imp in rows
        ]

    def delete_all(self) -> None:
        self._delete_all("personal_records")


class ScheduledWorkoutRepository(BaseRepository):
    """Repository for one-time and recurring workout placements."""

    def save(self, entry: ScheduledWorkout) -> None:
        self.execute(
            "INSERT INTO scheduled_workouts (id, workout_id, schedule_type, scheduled_date, day_of_week, recurrence_end_date, time, duration, completed) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?) "
            "ON CONFLICT(id) DO UPDATE SET workout_id=excluded.workout_id, schedule_type=excluded.schedule_type, "
            "scheduled_date=excluded.scheduled_date, day_of_week=excluded.day_of_week, "
            "recurrence_end_date=excluded.recurrence_end_date, time=excluded.time, "
            "duration=excluded.duration, completed=excluded.completed;",
            (
                entry.id,
                entry.workout_id,
                entry.schedule_type,
                entry.scheduled_date.isoformat() if entry.scheduled_date else None,
                entry.day_of_week,
                entry.recurrence_end_date.isoformat() if entry.recurrence_end_date else None,
                entry.time,
                entry.duration,
                1 if entry.completed else 0,
            ),
        )

    def fetch_all(self) -> list[ScheduledWorkout]:
        rows = super().fetch_all(
            "SELECT id, workout_id, schedule_type, scheduled_date, day_of_week, recurrence_end_date, time, duration, completed "
            "FROM scheduled_workouts ORDER BY rowid;"
        )
        return [
            ScheduledWorkout(
                id=sid,
                workout_id=wid,
                schedule_type=stype,
                scheduled_date=datetime.date.fromisoformat(sdate) if sdate else None,
                day_of_week=dow,
                recurrence_end_date=datetime.date.fromisoformat(end) if end else None,
                time=time,
                duration=duration,
                completed=bool(completed),
            )
            for sid, wid, stype, sdate, dow, end, time, duration, completed in rows
        ]

    def delete(self, entry_id: str) -> None:
        self.execute("DELETE FROM scheduled_workouts WHERE id = ?;", (entry_id,))

    def delete_all(self) -> None:
        self._delete_all("scheduled_workouts")


class SettingsRepository(BaseRepository):
    """Repository for general application settings synchronized with YAML."""

    BOOL_KEYS = {
        "game_enabled",
        "workout_recommendations_enabled",
        "long_workout_notifications_enabled",
        "sound_enabled",
        "vibration_enabled",
        "auto_start_rest",
    }

    def __init__(
        self, db_path: str = "workout.db", yaml_path: str = "settings.yaml"
    ) -> None:
        super().__init__(db_path)
        self._yaml = YamlConfig(yaml_path)
        self._sync_from_yaml()
        self._sync_to_yaml()

    def _raw_all_settings(self) -> dict:
        rows = self.fetch_all("SELECT key, value FROM settings ORDER BY key;")
        result: dict[str, float | str | bool] = {}
        for k, v in rows:
            if k in self.BOOL_KEYS:
                result[k] = v in {"1", "1.0", "true", "True"}
                continue
            try:
                result[k] = float(v)
            except ValueError:
                result[k] = v
        return result

    def _sync_from_yaml(self) -> None:
        data = self._yaml.load()
        if not data:
            return
        validate_settings(data)
        with self._connection() as conn:
            for key, value in data.items():
                val = str(value)
                if key in self.BOOL_KEYS:
                    val = "1" if val in {"1", "1.0", "true", "True"} else "0"
                conn.execute(
                    "INSERT INTO settings (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value=excluded.value;",
                    (key, val),
                )

    def _sync_to_yaml(self) -> None:
        self._yaml.save(self._raw_all_settings())

    def all_settings(self) -> dict:
        self._sync_from_yaml()
        return self._raw_all_settings()

    def get_text(self, key: str, default: str) -> str:
        self._sync_from_yaml()
        rows = self.fetch_all("SELECT value FROM settings WHERE key = ?;", (key,))
        return rows[0][0] if rows else default

    def set_text(self, key: str, value: str) -> None:
        self.execute(
            "INSERT INTO settings (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value;",
            (key, value),
        )
        self._sync_to_yaml()

    def get_float(self, key: str, default: float) -> float:
        try:
            return float(self.get_text(key, str(default)))
        except ValueError:
            return default

    def set_float(self, key: str, value: float) -> None:
        self.set_text(key, str(value))

    def get_int(self, key: str, default: int) -> int:
        try:
            return int(float(self.get_text(key, str(default))))
        except ValueError:
            return default

    def set_int(self, key: str, value: int) -> None:
        self.set_text(key, str(value))

    def get_bool(self, key: str, default: bool) -> bool:
        return self.get_text(key, "1" if default else "0") in {
            "1",
            "true",
            "True",
            "1.0",
        }

    def set_bool(self, key: str, value: bool) -> None:
        self.set_text(key, "1" if value else "0")


class GamificationRepository(BaseRepository):
    """Repository for gamification points."""

    def add(self, points: float, reason: str = "") -> int:
        return self.execute(
            "INSERT INTO gamification_points (reason, points, timestamp) VALUES (?, ?, ?);",
            (reason, points, datetime.datetime.now().isoformat()),
        )

    def total_points(self) -> float:
        rows = self.fetch_all("SELECT SUM(points) FROM gamification_points;")
        return float(rows[0][0] or 0.0)

    def delete_all(self) -> None:
        self._delete_all("gamification_points")


class ChallengeRepository(BaseRepository):
    """Repository for tracking challenges."""

    def add(self, name: str, target: int, category: str = "workout") -> int:
        return self.execute(
            "INSERT INTO challenges (name, category, target) VALUES (?, ?, ?);",
            (name, category, target),
        )

    def update_progress(self, challenge_id: int, progress: int) -> None:
        rows = super().fetch_all(
            "SELECT target FROM challenges WHERE id = ?;",
            (challenge_id,),
        )
        if not rows:
            raise ValueError("challenge not found")
        completed = 1 if progress >= int(rows[0][0]) else 0
        self.execute(
            "UPDATE challenges SET progress = ?, completed = ? WHERE id = ?;",
            (progress, completed, challenge_id),
        )

    def fetch_open(self, category: str) -> list[tuple[int, str, int, int]]:
        rows = super().fetch_all(
            "SELECT id, name, target, progress FROM challenges "
            "WHERE category = ? AND completed = 0 ORDER BY id;",
            (category,),
        )
        return [(int(cid), n, int(t), int(p)) for cid, n, t, p in rows]

    def fetch_all(self) -> list[tuple[int, str, str, int, int, int]]:
        rows = super().fetch_all(
            "SELECT id, name, category, target, progress, completed FROM challenges ORDER BY id;"
        )
        return [(int(cid), n, cat, int(t), int(p), int(c)) for cid, n, cat, t, p, c in rows]


class DailyQuestRepository(BaseRepository):
    """Repository for one-day quests."""

    def add(self, name: str, date: str, category: str = "workout") -> int:
        return self.execute(
            "INSERT INTO daily_quests (name, category, date) VALUES (?, ?, ?);",
            (name, category, date),
        )

    def fetch_open(self, category: str, date: str) -> Optional[int]:
        rows = self.fetch_all(
            "SELECT id FROM daily_quests WHERE category = ? AND date = ? AND completed = 0 ORDER BY id LIMIT 1;",
            (category, date),
        )
        return int(rows[0][0]) if rows else None

    def complete(self, quest_id: int) -> None:
        rows = self.fetch_all("SELECT id FROM daily_quests WHERE id = ?;", (quest_id,))
        if not rows:
            raise ValueError("quest not found")
        self.execute("UPDATE daily_quests SET completed = 1 WHERE id = ?;", (quest_id,))

    def is_completed(self, quest_id: int) -> bool:
        rows = self.fetch_all(
            "SELECT completed FROM daily_quests WHERE id = ?;", (quest_id,)
        )
        return bool(rows and rows[0][0])


class AchievementRepository(BaseRepository):
    """Repository for achievement progress and unlocks."""

    def ensure(self, achievement_id: str, name: str, target: int = 1) -> None:
        self.execute(
            "INSERT OR IGNORE INTO achievements (id, name, target) VALUES (?, ?, ?);",
            (achievement_id, name, target),
        )

    def fetch_detail(self, achievement_id: str) -> dict:
        rows = self.fetch_all(
            "SELECT id, name, target, progress, completed, unlocked_at FROM achievements WHERE id = ?;",
            (achievement_id,),
        )
        if not rows:
            raise ValueError("achievement not found")
        aid, name, target, progress, completed, unlocked_at = rows[0]
        return {
            "id": aid,
            "name": name,
            "target": int(target),
            "progress": int(progress),
            "completed": bool(completed),
            "unlocked_at": unlocked_at,
        }

    def add_progress(self, achievement_id: str, delta: int) -> None:
        self.fetch_detail(achievement_id)
        self.execute(
            "UPDATE achievements SET progress = progress + ? WHERE id = ?;",
            (delta, achievement_id),
        )

    def unlock(self, achievement_id: str) -> None:
        self.fetch_detail(achievement_id)
        self.execute(
            "UPDATE achievements SET completed = 1, unlocked_at = ? WHERE id = ? AND completed = 0;",
            (datetime.datetime.now().isoformat(), achievement_id),
        )

    def fetch_all_ids(self, completed: Optional[bool] = None) -> list[str]:
        query = "SELECT id FROM achievements"
        params: tuple = ()
        if completed is not None:
            query += " WHERE completed = ?"
            params = (1 if completed else 0,)
        rows = self.fetch_all(query + " ORDER BY id;", params)
        return [r[0] for r in rows]
