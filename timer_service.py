from __future__ import annotations
import time
from typing import Callable

from db import SettingsRepository, best_effort
from models import TimerSettings, TimerState


class TimerService:
    """Stopwatch plus rest countdown sharing one :class:`TimerState`.

    Times are seconds from ``clock``. The timer knows nothing about
    exercises or sets.
    """

    def __init__(
        self,
        settings: TimerSettings | None = None,
        settings_repo: SettingsRepository | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.settings_repo = settings_repo
        if settings is None:
            settings = self._load_settings(settings_repo) if settings_repo else TimerSettings()
        self.settings = settings
        self.clock = clock
        self.state = TimerState(rest_duration=settings.rest_time)

    @staticmethod
    def _load_settings(repo: SettingsRepository) -> TimerSettings:
        values = {}
        for name, field in TimerSettings.model_fields.items():
            if field.annotation is bool:
                values[name] = repo.get_bool(name, field.default)
            else:
                values[name] = repo.get_int(name, field.default)
        return TimerSettings(**values)

    def start(self) -> None:
        self.state.is_running = True
        self.state.start_time = self.clock() - self.state.elapsed_time

    def pause(self) -> None:
        if not self.state.is_running:
            return
        self.state.is_running = False
        self.state.elapsed_time = self.clock() - self.state.start_time

    def reset(self) -> None:
        self.state.is_running = False
        self.state.start_time = 0.0
        self.state.elapsed_time = 0.0
        self.state.is_resting = False

    def restart(self) -> None:
        """Return to a fresh state for a new session."""
        self.state = TimerState(rest_duration=self.settings.rest_time)

    def start_rest(self, duration: int) -> None:
        self.state.is_running = True
        self.state.start_time = self.clock()
        self.state.elapsed_time = 0.0
        self.state.rest_duration = duration
        self.state.is_resting = True

    def skip_rest(self) -> None:
        self.state.is_running = False
        self.state.is_resting = False

    def current_elapsed(self) -> float:
        if self.state.is_running:
            return self.clock() - self.state.start_time
        return self.state.elapsed_time

    def remaining_rest(self) -> float:
        if not self.state.is_resting:
            return 0.0
        return max(0.0, self.state.rest_duration - self.current_elapsed())

    def set_timer_settings(self, **updates) -> TimerSettings:
        self.settings = TimerSettings.model_validate(
            {**self.settings.model_dump(), **updates}
        )
        if self.settings_repo is not None:
            for key in updates:
                if key not in TimerSettings.model_fields:
                    continue
                value = getattr(self.settings, key)
                if isinstance(value, bool):
                    best_effort(self.settings_repo.set_bool, key, value)
                else:
                    best_effort(self.settings_repo.set_int, key, value)
        return self.settings
