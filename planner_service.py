from __future__ import annotations
import datetime
import logging
from typing import Callable, Optional

from catalog_service import CatalogService
from db import ScheduledWorkoutRepository, best_effort
from history_service import HistoryService
from models import ScheduledWorkout, Workout, new_id

logger = logging.getLogger(__name__)


def day_of_week(date: datetime.date) -> int:
    """Weekday number with 0 = Sunday ... 6 = Saturday."""
    return (date.weekday() + 1) % 7


class PlannerService:
    """Store scheduled workouts and turn archived sessions into templates."""

    def __init__(
        self,
        catalog: CatalogService,
        history: HistoryService,
        schedule_repo: ScheduledWorkoutRepository | None = None,
        clock: Callable[[], datetime.datetime] = datetime.datetime.now,
    ) -> None:
        self.catalog = catalog
        self.history = history
        self.repo = schedule_repo
        self.clock = clock
        entries = schedule_repo.fetch_all() if schedule_repo else []
        self._entries: dict[str, ScheduledWorkout] = {e.id: e for e in entries}

    @property
    def scheduled_workouts(self) -> list[ScheduledWorkout]:
        return list(self._entries.values())

    def get_scheduled_workout(self, entry_id: str) -> Optional[ScheduledWorkout]:
        return self._entries.get(entry_id)

    def schedule_workout(self, entry: ScheduledWorkout) -> ScheduledWorkout:
        self._entries[entry.id] = entry
        if self.repo is not None:
            best_effort(self.repo.save, entry)
        return entry

    def update_scheduled_workout(self, entry: ScheduledWorkout) -> None:
        if entry.id not in self._entries:
            return
        self.schedule_workout(entry)

    def remove_scheduled_workout(self, entry_id: str) -> None:
        if self._entries.pop(entry_id, None) is None:
            return
        if self.repo is not None:
            best_effort(self.repo.delete, entry_id)

    def get_scheduled_workouts_for_date(self, date: datetime.date) -> list[ScheduledWorkout]:
        weekday = day_of_week(date)
        result = []
        for entry in self._entries.values():
            if entry.schedule_type == "one-time":
                if entry.scheduled_date == date:
                    result.append(entry)
            elif entry.day_of_week is not None:
                if entry.recurrence_end_date and date > entry.recurrence_end_date:
                    continue
                if entry.day_of_week == weekday:
                    result.append(entry)
        return result

    def get_recurring_workouts_for_day(
        self, weekday: int, today: datetime.date | None = None
    ) -> list[ScheduledWorkout]:
        """Recurring entries on ``weekday`` whose end date has not passed."""
        today = today or self.clock().date()
        return [
            entry
            for entry in self._entries.values()
            if entry.schedule_type == "recurring"
            and entry.day_of_week == weekday
            and (not entry.recurrence_end_date or entry.recurrence_end_date >= today)
        ]

    def copy_workout_to_custom(self, workout_log_id: str) -> str:
        """Register a custom template built from an archived session.

        Returns the new template id, or ``""`` when the session or its
        template is unknown.
        """
        log = self.history.get_workout_log(workout_log_id)
        if log is None:
            return ""
        original = self.catalog.get_workout(log.workout_id)
        if original is None:
            return ""
        session_day = datetime.datetime.fromisoformat(log.date).date()
        custom = Workout(
            id=new_id(),
            name=f"{original.name} (Custom)",
            description=(
                f"Custom workout based on {original.name} completed on "
                f"{session_day.isoformat()}"
            ),
            category=original.category,
            difficulty=original.difficulty,
            intensity=original.intensity,
            estimated_duration=log.duration or original.estimated_duration,
            exercises=[ref.model_copy() for ref in original.exercises],
            is_custom=True,
            created_at=self.clock().isoformat(),
        )
        self.catalog.add_workout(custom)
        logger.info("copied session %s to custom workout %s", log.id, custom.id)
        return custom.id
