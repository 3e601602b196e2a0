import datetime
import logging
import random
from typing import Callable

from fastapi import FastAPI, HTTPException, APIRouter

from db import (
    AchievementRepository,
    ChallengeRepository,
    DailyQuestRepository,
    ExerciseRepository,
    GamificationRepository,
    PersonalRecordRepository,
    ScheduledWorkoutRepository,
    SettingsRepository,
    WorkoutLogRepository,
    WorkoutRepository,
)
from catalog_service import CatalogService
from history_service import HistoryService
from gamification_service import GamificationService
from personal_record_service import PersonalRecordService
from timer_service import TimerService
from session_service import SessionService
from planner_service import PlannerService
from recommendation_service import RecommendationService
from models import ScheduledWorkout, WorkoutMedia, WorkoutRating, WorkoutSet
from settings_schema import validate_settings
from config import APP_VERSION

logger = logging.getLogger(__name__)


class TrackerAPI:
    """Provides REST endpoints over the workout tracker services."""

    def __init__(
        self,
        db_path: str = "workout.db",
        yaml_path: str = "settings.yaml",
        *,
        rng: random.Random | None = None,
        clock: Callable[[], datetime.datetime] = datetime.datetime.now,
    ) -> None:
        self.db_path = db_path
        self.settings = SettingsRepository(db_path, yaml_path)
        self.exercises = ExerciseRepository(db_path)
        self.workouts = WorkoutRepository(db_path)
        self.workout_logs = WorkoutLogRepository(db_path)
        self.records = PersonalRecordRepository(db_path)
        self.schedules = ScheduledWorkoutRepository(db_path)
        self.game_repo = GamificationRepository(db_path)
        self.challenges = ChallengeRepository(db_path)
        self.quests = DailyQuestRepository(db_path)
        self.achievements = AchievementRepository(db_path)
        self.catalog = CatalogService(self.exercises, self.workouts)
        self.history = HistoryService(self.workout_logs, self.catalog)
        self.gamification = GamificationService(
            self.game_repo,
            self.settings,
            self.challenges,
            self.quests,
            self.achievements,
            self.workout_logs,
        )
        self.personal_records = PersonalRecordService(
            self.catalog,
            self.history,
            self.records,
            self.gamification,
            clock=clock,
        )
        self.timer = TimerService(settings_repo=self.settings)
        self.sessions = SessionService(
            self.catalog,
            self.history,
            self.personal_records,
            self.timer,
            workout_log_repo=self.workout_logs,
            gamification=self.gamification,
            settings_repo=self.settings,
            clock=clock,
        )
        self.planner = PlannerService(
            self.catalog, self.history, self.schedules, clock=clock
        )
        self.recommender = RecommendationService(
            self.catalog, self.history, self.settings, rng=rng
        )
        self.app = FastAPI(
            title="Workout Tracker API",
            description="REST API for workout sessions, records and schedules",
            version=APP_VERSION,
        )
        self._setup_routes()

    def _require_active(self):
        log = self.sessions.active_workout
        if log is None:
            raise HTTPException(status_code=400, detail="no active workout")
        return log

    def _setup_routes(self) -> None:
        session_router = APIRouter(prefix="/session", tags=["Session"])
        history_router = APIRouter(prefix="/history", tags=["History"])
        schedule_router = APIRouter(prefix="/schedule", tags=["Schedule"])
        timer_router = APIRouter(prefix="/timer", tags=["Timer"])

        @self.app.get("/health")
        def health():
            return {"status": "ok", "version": APP_VERSION}

        @self.app.get("/exercises")
        def list_exercises(
            muscle_group: str = None,
            equipment: str = None,
            difficulty: str = None,
            query: str = None,
        ):
            return self.catalog.filter_exercises(
                muscle_group, equipment, difficulty, query
            )

        @self.app.get("/exercises/muscle_groups")
        def list_muscle_groups():
            return self.catalog.muscle_groups()

        @self.app.get("/exercises/equipment")
        def list_equipment():
            return self.catalog.equipment_types()

        @self.app.get("/exercises/{exercise_id}")
        def get_exercise(exercise_id: str):
            exercise = self.catalog.get_exercise(exercise_id)
            if exercise is None:
                raise HTTPException(status_code=404, detail="exercise not found")
            return exercise

        @self.app.get("/workouts")
        def list_workouts(muscle_group: str = None):
            if muscle_group:
                return self.catalog.workouts_by_muscle_group(muscle_group)
            return self.catalog.workouts

        @self.app.get("/workouts/{workout_id}")
        def get_workout(workout_id: str):
            workout = self.catalog.get_workout(workout_id)
            if workout is None:
                raise HTTPException(status_code=404, detail="workout not found")
            return {
                **workout.model_dump(),
                "average_duration": self.history.get_average_workout_duration(
                    workout_id
                ),
            }

        @self.app.delete("/workouts/{workout_id}")
        def delete_workout(workout_id: str):
            workout = self.catalog.get_workout(workout_id)
            if workout is None:
                raise HTTPException(status_code=404, detail="workout not found")
            if not workout.is_custom:
                raise HTTPException(
                    status_code=400, detail="only custom workouts can be deleted"
                )
            self.catalog.remove_workout(workout_id)
            return {"status": "deleted"}

        @session_router.get("")
        def get_session():
            log = self.sessions.active_workout
            if log is None:
                raise HTTPException(status_code=404, detail="no active workout")
            return {
                **log.model_dump(),
                "elapsed_minutes": self.sessions.get_workout_duration(),
                "running_too_long": self.sessions.is_workout_running_too_long(),
            }

        @session_router.post("/start")
        def start_session(workout_id: str):
            if self.sessions.is_active():
                raise HTTPException(status_code=400, detail="workout already active")
            log = self.sessions.start(workout_id)
            if log is None:
                raise HTTPException(status_code=404, detail="workout not found")
            return {"id": log.id}

        @session_router.post("/cancel")
        def cancel_session():
            self.sessions.cancel()
            return {"status": "cancelled"}

        @session_router.post("/complete")
        def complete_session():
            self._require_active()
            log = self.sessions.complete()
            return {"id": log.id, "duration": log.duration}

        @session_router.post("/exercises/{exercise_index}/sets")
        def log_set(
            exercise_index: int,
            weight: float,
            reps: int,
            completed: bool = True,
            notes: str = "",
        ):
            self._require_active()
            try:
                entry = WorkoutSet(
                    weight=weight, reps=reps, completed=completed, notes=notes
                )
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            self.sessions.log_set(exercise_index, entry)
            return {"status": "logged"}

        @session_router.put("/exercises/{exercise_index}/sets/{set_index}")
        def update_set(
            exercise_index: int,
            set_index: int,
            weight: float = None,
            reps: int = None,
            completed: bool = None,
            notes: str = None,
        ):
            self._require_active()
            if weight is not None:
                self.sessions.update_set_weight(exercise_index, set_index, weight)
            if reps is not None:
                self.sessions.update_set_reps(exercise_index, set_index, reps)
            if completed is not None:
                self.sessions.update_set_completed(exercise_index, set_index, completed)
            if notes is not None:
                self.sessions.update_set_note(exercise_index, set_index, notes)
            return {"status": "updated"}

        @session_router.put("/exercises/{exercise_index}")
        def update_exercise(
            exercise_index: int, notes: str = None, completed: bool = None
        ):
            self._require_active()
            if notes is not None:
                self.sessions.update_exercise_note(exercise_index, notes)
            if completed is not None:
                self.sessions.mark_exercise_completed(exercise_index, completed)
            return {
                "completed": self.sessions.is_exercise_completed(exercise_index),
                "all_sets_completed": self.sessions.are_all_sets_completed(
                    exercise_index
                ),
            }

        @session_router.put("/notes")
        def update_workout_note(notes: str):
            self._require_active()
            self.sessions.update_workout_note(notes)
            return {"status": "updated"}

        @session_router.post("/reorder")
        def reorder_exercises(from_index: int, to_index: int):
            self._require_active()
            self.sessions.reorder_exercises(from_index, to_index)
            return {"status": "reordered"}

        @session_router.post("/rating")
        def rate_workout(rating: WorkoutRating):
            self._require_active()
            self.sessions.rate_workout(rating)
            return {"status": "rated"}

        @session_router.post("/media")
        def add_media(media: WorkoutMedia):
            self._require_active()
            self.sessions.add_workout_media(media)
            return {"id": media.id}

        @session_router.post("/rest")
        def start_rest(duration: int = None):
            self.sessions.start_exercise_rest_timer(duration)
            return self.timer.state

        @timer_router.get("")
        def timer_state():
            return {
                **self.timer.state.model_dump(),
                "elapsed": self.timer.current_elapsed(),
                "remaining_rest": self.timer.remaining_rest(),
            }

        @timer_router.post("/start")
        def timer_start():
            self.timer.start()
            return self.timer.state

        @timer_router.post("/pause")
        def timer_pause():
            self.timer.pause()
            return self.timer.state

        @timer_router.post("/reset")
        def timer_reset():
            self.timer.reset()
            return self.timer.state

        @timer_router.post("/rest")
        def timer_rest(duration: int):
            self.timer.start_rest(duration)
            return self.timer.state

        @timer_router.post("/skip")
        def timer_skip():
            self.timer.skip_rest()
            return self.timer.state

        @timer_router.get("/settings")
        def get_timer_settings():
            return self.timer.settings

        @timer_router.post("/settings")
        def update_timer_settings(
            rest_time: int = None,
            default_rest_time: int = None,
            default_set_count: int = None,
            sound_enabled: bool = None,
            vibration_enabled: bool = None,
            auto_start_rest: bool = None,
        ):
            updates = {
                k: v
                for k, v in {
                    "rest_time": rest_time,
                    "default_rest_time": default_rest_time,
                    "default_set_count": default_set_count,
                    "sound_enabled": sound_enabled,
                    "vibration_enabled": vibration_enabled,
                    "auto_start_rest": auto_start_rest,
                }.items()
                if v is not None
            }
            try:
                return self.timer.set_timer_settings(**updates)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @history_router.get("")
        def list_history(start_date: str = None, end_date: str = None):
            if start_date and end_date:
                return self.history.workouts_for_date_range(
                    datetime.date.fromisoformat(start_date),
                    datetime.date.fromisoformat(end_date),
                )
            return self.history.completed_logs()

        @history_router.get("/muscle_groups")
        def history_muscle_groups(date: str):
            return self.history.muscle_groups_for_date(datetime.date.fromisoformat(date))

        @history_router.get("/exercise/{exercise_id}")
        def exercise_history(exercise_id: str, limit: int = 5):
            return {
                "previous": self.history.get_previous_set_data(exercise_id),
                "recent": self.history.get_recent_exercise_history(exercise_id, limit),
            }

        @history_router.get("/{log_id}")
        def get_history_entry(log_id: str):
            log = self.history.get_workout_log(log_id)
            if log is None:
                raise HTTPException(status_code=404, detail="workout log not found")
            return log

        @history_router.put("/{log_id}")
        def update_history_entry(log_id: str, notes: str = None, duration: int = None):
            if self.history.get_workout_log(log_id) is None:
                raise HTTPException(status_code=404, detail="workout log not found")
            updates = {}
            if notes is not None:
                updates["notes"] = notes
            if duration is not None:
                updates["duration"] = duration
            self.history.update_workout_log(log_id, **updates)
            return {"status": "updated"}

        @history_router.post("/{log_id}/exercises/{exercise_index}/sets")
        def add_history_set(
            log_id: str, exercise_index: int, weight: float, reps: int
        ):
            if self.history.get_workout_log(log_id) is None:
                raise HTTPException(status_code=404, detail="workout log not found")
            try:
                entry = WorkoutSet(weight=weight, reps=reps, completed=True)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            self.history.add_workout_log_set(log_id, exercise_index, entry)
            return {"status": "added"}

        @history_router.put("/{log_id}/exercises/{exercise_index}/sets/{set_index}")
        def update_history_set(
            log_id: str,
            exercise_index: int,
            set_index: int,
            weight: float = None,
            reps: int = None,
        ):
            if self.history.get_workout_log(log_id) is None:
                raise HTTPException(status_code=404, detail="workout log not found")
            updates = {}
            if weight is not None:
                updates["weight"] = weight
            if reps is not None:
                updates["reps"] = reps
            self.history.update_workout_log_set(
                log_id, exercise_index, set_index, **updates
            )
            return {"status": "updated"}

        @history_router.delete("/{log_id}/exercises/{exercise_index}/sets/{set_index}")
        def delete_history_set(log_id: str, exercise_index: int, set_index: int):
            self.history.remove_workout_log_set(log_id, exercise_index, set_index)
            return {"status": "deleted"}

        @history_router.delete("/{log_id}")
        def delete_history_entry(log_id: str):
            if self.history.get_workout_log(log_id) is None:
                raise HTTPException(status_code=404, detail="workout log not found")
            self.history.delete_workout_log(log_id)
            return {"status": "deleted"}

        @history_router.post("/{log_id}/copy")
        def copy_to_custom(log_id: str):
            new_id = self.planner.copy_workout_to_custom(log_id)
            if not new_id:
                raise HTTPException(status_code=404, detail="workout log not found")
            return {"id": new_id}

        @self.app.delete("/history")
        def clear_history():
            self.sessions.clear_all_workout_logs()
            return {"status": "cleared"}

        @self.app.get("/records")
        def list_records():
            return self.personal_records.get_all_personal_records()

        @self.app.get("/records/recent")
        def recent_records(count: int = 5):
            return self.personal_records.get_recent_personal_records(count)

        @self.app.get("/records/{exercise_id}")
        def get_record(exercise_id: str):
            record = self.personal_records.get_exercise_pr(exercise_id)
            if record is None:
                raise HTTPException(status_code=404, detail="personal record not found")
            return record

        @self.app.get("/recommendations")
        def recommendations(count: int = 3, mood: str = None):
            return self.recommender.get_recommended_workouts(count, mood)

        @self.app.get("/recommendations/rest_day")
        def rest_day_activities():
            return self.recommender.get_rest_day_activities()

        @self.app.post("/recommendations/enable")
        def enable_recommendations(enabled: bool = True):
            self.recommender.set_recommendations_enabled(enabled)
            return {"status": "updated"}

        @schedule_router.get("")
        def scheduled_for_date(date: str = None):
            if date is None:
                return self.planner.scheduled_workouts
            return self.planner.get_scheduled_workouts_for_date(
                datetime.date.fromisoformat(date)
            )

        @schedule_router.get("/recurring/{day}")
        def recurring_for_day(day: int):
            return self.planner.get_recurring_workouts_for_day(day)

        @schedule_router.post("")
        def schedule_workout(entry: ScheduledWorkout):
            if self.catalog.get_workout(entry.workout_id) is None:
                raise HTTPException(status_code=404, detail="workout not found")
            self.planner.schedule_workout(entry)
            return {"id": entry.id}

        @schedule_router.put("/{entry_id}")
        def update_scheduled(entry_id: str, entry: ScheduledWorkout):
            if self.planner.get_scheduled_workout(entry_id) is None:
                raise HTTPException(status_code=404, detail="scheduled workout not found")
            self.planner.update_scheduled_workout(entry.model_copy(update={"id": entry_id}))
            return {"status": "updated"}

        @schedule_router.delete("/{entry_id}")
        def delete_scheduled(entry_id: str):
            if self.planner.get_scheduled_workout(entry_id) is None:
                raise HTTPException(status_code=404, detail="scheduled workout not found")
            self.planner.remove_scheduled_workout(entry_id)
            return {"status": "deleted"}

        @self.app.get("/gamification")
        def gamification_status():
            return {
                "enabled": self.gamification.is_enabled(),
                "points": self.gamification.total_points(),
            }

        @self.app.post("/gamification/enable")
        def gamification_enable(enabled: bool = True):
            self.gamification.enable(enabled)
            return {"status": "updated"}

        @self.app.get("/gamification/streak")
        def gamification_streak():
            return self.gamification.workout_streak()

        @self.app.get("/gamification/achievements")
        def gamification_achievements():
            return [
                self.achievements.fetch_detail(aid)
                for aid in self.achievements.fetch_all_ids()
            ]

        @self.app.get("/challenges")
        def list_challenges():
            return [
                {
                    "id": cid,
                    "name": name,
                    "category": category,
                    "target": target,
                    "progress": progress,
                    "completed": bool(comp),
                }
                for cid, name, category, target, progress, comp in self.challenges.fetch_all()
            ]

        @self.app.post("/challenges")
        def add_challenge(name: str, target: int, category: str = "workout"):
            cid = self.challenges.add(name, target, category)
            return {"id": cid}

        @self.app.put("/challenges/{cid}/progress")
        def update_challenge_progress(cid: int, progress: int):
            try:
                self.challenges.update_progress(cid, progress)
                return {"status": "updated"}
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @self.app.post("/daily_quests")
        def add_daily_quest(name: str, date: str = None, category: str = "workout"):
            day = date or datetime.date.today().isoformat()
            qid = self.quests.add(name, day, category)
            return {"id": qid}

        @self.app.get("/daily_quests/{qid}")
        def daily_quest_status(qid: int):
            return {"id": qid, "completed": self.quests.is_completed(qid)}

        @self.app.get("/settings/general")
        def get_general_settings():
            return self.settings.all_settings()

        @self.app.post("/settings/general")
        def update_general_settings(
            fitness_level: str = None,
            fitness_goal: str = None,
            activity_level: str = None,
            body_weight: float = None,
            weight_unit: str = None,
            long_workout_notifications_enabled: bool = None,
            long_workout_threshold: int = None,
            log_level: str = None,
        ):
            updates = {
                k: v
                for k, v in {
                    "fitness_level": fitness_level,
                    "fitness_goal": fitness_goal,
                    "activity_level": activity_level,
                    "body_weight": body_weight,
                    "weight_unit": weight_unit,
                    "long_workout_notifications_enabled": long_workout_notifications_enabled,
                    "long_workout_threshold": long_workout_threshold,
                    "log_level": log_level,
                }.items()
                if v is not None
            }
            try:
                validate_settings({**self.settings.all_settings(), **updates})
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            for key, value in updates.items():
                if isinstance(value, bool):
                    self.settings.set_bool(key, value)
                elif isinstance(value, int):
                    self.settings.set_int(key, value)
                elif isinstance(value, float):
                    self.settings.set_float(key, value)
                else:
                    self.settings.set_text(key, value)
            return {"status": "updated"}

        self.app.include_router(session_router)
        self.app.include_router(history_router)
        self.app.include_router(schedule_router)
        self.app.include_router(timer_router)


if __name__ == "__main__":
    import uvicorn

    from logger import setup_logger

    api = TrackerAPI()
    setup_logger(level=api.settings.get_text("log_level", "INFO"))
    uvicorn.run(api.app)
