import requests
from typing import Optional


class TrackerClient:
    """Simple REST client for the workout tracker API."""

    def __init__(self, base_url: str = "http://localhost:8000", timeout: float = 10) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _get(self, path: str, **params):
        resp = requests.get(f"{self.base_url}{path}", params=params, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def _post(self, path: str, json: Optional[dict] = None, **params):
        resp = requests.post(
            f"{self.base_url}{path}", params=params, json=json, timeout=self.timeout
        )
        resp.raise_for_status()
        return resp.json()

    def list_workouts(self, muscle_group: Optional[str] = None):
        if muscle_group:
            return self._get("/workouts", muscle_group=muscle_group)
        return self._get("/workouts")

    def start_workout(self, workout_id: str) -> str:
        return self._post("/session/start", workout_id=workout_id)["id"]

    def active_workout(self) -> Optional[dict]:
        resp = requests.get(f"{self.base_url}/session", timeout=self.timeout)
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return resp.json()

    def log_set(self, exercise_index: int, weight: float, reps: int) -> None:
        self._post(f"/session/exercises/{exercise_index}/sets", weight=weight, reps=reps)

    def rate_workout(self, overall: int, **scores) -> None:
        self._post("/session/rating", json={"overall": overall, **scores})

    def complete_workout(self) -> dict:
        return self._post("/session/complete")

    def cancel_workout(self) -> None:
        self._post("/session/cancel")

    def personal_records(self):
        return self._get("/records")

    def recommendations(self, count: int = 3, mood: Optional[str] = None):
        if mood:
            return self._get("/recommendations", count=count, mood=mood)
        return self._get("/recommendations", count=count)

    def schedule_workout(self, workout_id: str, **fields) -> str:
        return self._post("/schedule", json={"workout_id": workout_id, **fields})["id"]

    def scheduled_for_date(self, date: str):
        return self._get("/schedule", date=date)
