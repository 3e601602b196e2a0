from __future__ import annotations
import logging
import random
from typing import Callable, Iterable, Optional

from catalog_service import CatalogService
from db import SettingsRepository
from history_service import HistoryService
from models import UserProfile, Workout

logger = logging.getLogger(__name__)

DIFFICULTY_TIERS = ("beginner", "intermediate", "advanced")

# Mood narrowing works on lower-cased categories and intensities.
LIGHT_INTENSITIES = frozenset({"low"})
LIGHT_CATEGORIES = frozenset({"mobility", "recovery"})
REST_CATEGORIES = frozenset({"mobility", "recovery"})
REST_NAME_TOKENS = ("stretch",)
ENERGETIC_INTENSITIES = frozenset({"high"})
ENERGETIC_CATEGORIES = frozenset({"hiit", "strength"})
SHORT_WORKOUT_MINUTES = 30

RECENT_RATED_SESSIONS = 5
FAVORITE_CATEGORY_COUNT = 3
PRIORITY_SLOTS = 2

REST_DAY_ACTIVITIES = (
    "Light stretching for 10-15 minutes",
    "Gentle yoga flow",
    "Walking outdoors for 20-30 minutes",
    "Foam rolling session",
    "Meditation for recovery",
    "Light mobility exercises",
    "Active recovery with swimming",
    "Deep breathing exercises",
    "Gentle cycling",
    "Tai Chi practice",
)


def _tier(name: str) -> int:
    try:
        return DIFFICULTY_TIERS.index(name.lower())
    except ValueError:
        return 0


class EligibilityFilter:
    """Boolean predicate over ``Workout`` x ``UserProfile``."""

    def is_eligible(self, workout: Workout, profile: UserProfile) -> bool:
        return True

    def filter(self, workouts: Iterable[Workout], profile: UserProfile) -> list[Workout]:
        return [w for w in workouts if self.is_eligible(w, profile)]


class ProfileEligibilityFilter(EligibilityFilter):
    """Match workouts to fitness level, activity level and goal."""

    def is_eligible(self, workout: Workout, profile: UserProfile) -> bool:
        level = _tier(profile.fitness_level)
        difficulty = _tier(workout.difficulty)
        if difficulty > level + 1:
            return False
        if profile.activity_level == "sedentary" and workout.intensity.lower() == "high":
            return False
        if (
            profile.fitness_goal == "lose"
            and difficulty == DIFFICULTY_TIERS.index("advanced")
            and level < difficulty
        ):
            return False
        return True


class RecommendationService:
    """Select workouts from the catalog for the current user."""

    def __init__(
        self,
        catalog: CatalogService,
        history: HistoryService,
        settings_repo: SettingsRepository | None = None,
        profile_provider: Callable[[], UserProfile] | None = None,
        eligibility: EligibilityFilter | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.catalog = catalog
        self.history = history
        self.settings = settings_repo
        self.profile_provider = profile_provider or self._profile_from_settings
        self.eligibility = eligibility or ProfileEligibilityFilter()
        self.rng = rng or random.Random()
        self._enabled = False

    def _profile_from_settings(self) -> UserProfile:
        if self.settings is None:
            return UserProfile()
        return UserProfile(
            fitness_level=self.settings.get_text("fitness_level", "beginner"),
            fitness_goal=self.settings.get_text("fitness_goal", "maintain"),
            activity_level=self.settings.get_text("activity_level", "moderate"),
            weight=self.settings.get_float("body_weight", 70.0),
        )

    def recommendations_enabled(self) -> bool:
        if self.settings is not None:
            return self.settings.get_bool("workout_recommendations_enabled", False)
        return self._enabled

    def set_recommendations_enabled(self, enabled: bool) -> None:
        self._enabled = enabled
        if self.settings is not None:
            self.settings.set_bool("workout_recommendations_enabled", enabled)

    def eligible_workouts(self) -> list[Workout]:
        return self.eligibility.filter(self.catalog.workouts, self.profile_provider())

    def _sample(self, pool: list[Workout], count: int) -> list[Workout]:
        return self.rng.sample(pool, min(max(count, 0), len(pool)))

    def get_recommended_workouts(
        self, count: int = 3, mood_preference: str | None = None
    ) -> list[Workout]:
        if mood_preference:
            return self.get_mood_based_workouts(mood_preference, count)
        eligible = self.eligible_workouts()
        if not self.recommendations_enabled():
            return self._sample(eligible, count)
        rated = [log for log in self.history.completed_logs() if log.rating is not None]
        recent = rated[:RECENT_RATED_SESSIONS]
        if not recent:
            return self._sample(eligible, count)

        favorites = self._favorite_categories(recent)
        recent_ids = {log.workout_id for log in recent}
        picks = [
            w for w in eligible if w.id not in recent_ids and w.category in favorites
        ]
        if len(picks) < count:
            others = [w for w in eligible if w.id not in recent_ids and w not in picks]
            picks += self._sample(others, count - len(picks))
        if len(picks) < count:
            logger.debug("history ranking found %d of %d workouts", len(picks), count)
            return self._sample(eligible, count)
        return picks[:count]

    def _favorite_categories(self, recent) -> list[str]:
        ratings: dict[str, list[int]] = {}
        for log in recent:
            ratings.setdefault(log.workout_id, []).append(log.rating.overall)
        per_category: dict[str, float] = {}
        for workout_id, values in ratings.items():
            workout = self.catalog.get_workout(workout_id)
            if workout is None:
                continue
            mean = sum(values) / len(values)
            per_category[workout.category] = per_category.get(workout.category, 0.0) + mean
        ranked = sorted(per_category, key=lambda c: per_category[c], reverse=True)
        return ranked[:FAVORITE_CATEGORY_COUNT]

    def get_mood_based_workouts(self, preference: str, count: int = 3) -> list[Workout]:
        """Narrow eligible workouts by mood, backfilling to ``count``.

        The first two picks keep their ranked order; the tail is shuffled.
        """
        eligible = self.eligible_workouts()
        picks = self._narrow_by_mood(eligible, preference, count)
        if len(picks) < count:
            rest = [w for w in eligible if w not in picks]
            picks += self._sample(rest, count - len(picks))
        head = picks[:PRIORITY_SLOTS]
        tail = picks[PRIORITY_SLOTS:]
        self.rng.shuffle(tail)
        return (head + tail)[:count]

    @staticmethod
    def _narrow_by_mood(
        workouts: list[Workout], preference: str, count: int
    ) -> list[Workout]:
        mood = preference.lower()
        if mood == "shorter":
            short = [
                w for w in workouts if w.effective_duration() <= SHORT_WORKOUT_MINUTES
            ]
            return sorted(short, key=lambda w: w.effective_duration())
        if mood == "light":
            return [
                w
                for w in workouts
                if w.intensity.lower() in LIGHT_INTENSITIES
                or w.category.lower() in LIGHT_CATEGORIES
            ]
        if mood == "rest":
            restful = [
                w
                for w in workouts
                if w.category.lower() in REST_CATEGORIES
                or any(token in w.name.lower() for token in REST_NAME_TOKENS)
            ]
            return restful[:count]
        if mood == "energetic":
            energetic = [
                w
                for w in workouts
                if w.intensity.lower() in ENERGETIC_INTENSITIES
                or w.category.lower() in ENERGETIC_CATEGORIES
            ]
            return sorted(energetic, key=lambda w: w.effective_duration(), reverse=True)
        return list(workouts)

    @staticmethod
    def get_rest_day_activities() -> list[str]:
        return list(REST_DAY_ACTIVITIES)
