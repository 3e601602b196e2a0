import datetime
import logging
from db import (
    AchievementRepository,
    ChallengeRepository,
    DailyQuestRepository,
    GamificationRepository,
    SettingsRepository,
    WorkoutLogRepository,
)

logger = logging.getLogger(__name__)


class GamificationService:
    """Manage optional gamification features."""

    FIRST_PR_ACHIEVEMENT = "special-first-pr"

    # achievement id -> (name, completed workouts required)
    WORKOUT_MILESTONES = {
        "workouts-1": ("First Workout", 1),
        "workouts-10": ("Ten Workouts", 10),
        "workouts-50": ("Fifty Workouts", 50),
    }

    def __init__(
        self,
        repo: GamificationRepository,
        settings_repo: SettingsRepository,
        challenge_repo: ChallengeRepository,
        quest_repo: DailyQuestRepository,
        achievement_repo: AchievementRepository,
        workout_log_repo: WorkoutLogRepository | None = None,
    ) -> None:
        self.repo = repo
        self.settings = settings_repo
        self.challenges = challenge_repo
        self.quests = quest_repo
        self.achievements = achievement_repo
        self.workout_logs = workout_log_repo
        self.achievements.ensure(self.FIRST_PR_ACHIEVEMENT, "First Personal Record")
        for aid, (name, target) in self.WORKOUT_MILESTONES.items():
            self.achievements.ensure(aid, name, target)
        self._streak = {"current": 0, "record": 0}

    def enable(self, enabled: bool) -> None:
        self.settings.set_bool("game_enabled", enabled)

    def is_enabled(self) -> bool:
        return self.settings.get_bool("game_enabled", False)

    def total_points(self) -> float:
        return self.repo.total_points()

    def add_points(self, points: float, reason: str = "") -> None:
        self.repo.add(points, reason)

    def open_challenges(self, category: str) -> list[tuple[int, int]]:
        """Return ``(id, progress)`` for unfinished challenges of a category."""
        return [(cid, p) for cid, _n, _t, p in self.challenges.fetch_open(category)]

    def update_challenge_progress(self, challenge_id: int, progress: int) -> None:
        self.challenges.update_progress(challenge_id, progress)

    def open_daily_quest(self, category: str, date: datetime.date) -> int | None:
        return self.quests.fetch_open(category, date.isoformat())

    def complete_daily_quest(self, quest_id: int) -> None:
        self.quests.complete(quest_id)

    def is_achievement_locked(self, achievement_id: str) -> bool:
        try:
            return not self.achievements.fetch_detail(achievement_id)["completed"]
        except ValueError:
            return False

    def update_achievement_progress(self, achievement_id: str, delta: int) -> None:
        self.achievements.add_progress(achievement_id, delta)

    def unlock_achievement(self, achievement_id: str) -> None:
        self.achievements.unlock(achievement_id)
        logger.info("achievement %s unlocked", achievement_id)

    def check_achievements(self) -> list[str]:
        """Unlock workout-count milestones and return newly unlocked ids."""
        if self.workout_logs is None:
            return []
        done = len(self.workout_logs.fetch_all(completed=True))
        unlocked = []
        for aid, (_name, target) in self.WORKOUT_MILESTONES.items():
            if done >= target and self.is_achievement_locked(aid):
                self.unlock_achievement(aid)
                unlocked.append(aid)
        return unlocked

    def update_streak(self) -> dict[str, int]:
        self._streak = self.workout_streak()
        return self._streak

    def workout_streak(self) -> dict[str, int]:
        """Return current and record workout streak lengths."""
        if self.workout_logs is None:
            return {"current": 0, "record": 0}
        logs = self.workout_logs.fetch_all(completed=True)
        if not logs:
            return {"current": 0, "record": 0}
        dates = sorted(
            {datetime.datetime.fromisoformat(log.date).date() for log in logs}
        )
        record = 1
        current = 1
        for i in range(1, len(dates)):
            gap = (dates[i] - dates[i - 1]).days
            if gap == 1:
                current += 1
            elif gap > 1:
                record = max(record, current)
                current = 1
        record = max(record, current)
        if (datetime.date.today() - dates[-1]).days > 1:
            current = 0
        return {"current": current, "record": record}
