import datetime
import math


class MathTools:
    """Provides essential mathematical utilities for workout calculations."""

    EPLEY_DIVISOR: float = 30.0

    @classmethod
    def epley_1rm(cls, weight: float, reps: int) -> float:
        """Return the estimated one-rep max using the Epley formula."""
        if reps < 0:
            raise ValueError("reps must be non-negative")
        return weight * (1 + reps / cls.EPLEY_DIVISOR)

    @staticmethod
    def volume(sets: list[tuple[int, float]]) -> float:
        """Compute training volume as the sum of reps times weight."""
        vol = 0.0
        for reps, weight in sets:
            vol += reps * weight
        return vol

    @staticmethod
    def session_minutes(
        start_time: datetime.datetime | str,
        end_time: datetime.datetime | str,
    ) -> int:
        """Return the session length in whole minutes, half minutes round up."""
        if isinstance(start_time, str):
            start_time = datetime.datetime.fromisoformat(start_time)
        if isinstance(end_time, str):
            end_time = datetime.datetime.fromisoformat(end_time)
        return math.floor((end_time - start_time).total_seconds() / 60 + 0.5)

    @staticmethod
    def elapsed_minutes(
        start_time: datetime.datetime | str, now: datetime.datetime
    ) -> int:
        """Return whole minutes elapsed since ``start_time``, rounded down."""
        if isinstance(start_time, str):
            start_time = datetime.datetime.fromisoformat(start_time)
        return int((now - start_time).total_seconds() // 60)
