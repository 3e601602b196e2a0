import os
import sys
import random
import datetime
import unittest
from fastapi.testclient import TestClient

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from rest_api import TrackerAPI
from seed_sample_data import seed


class APITestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_workout.db"
        self.yaml_path = "test_settings.yaml"
        for path in (self.db_path, self.yaml_path):
            if os.path.exists(path):
                os.remove(path)
        seed(self.db_path)
        self.api = TrackerAPI(
            db_path=self.db_path, yaml_path=self.yaml_path, rng=random.Random(7)
        )
        self.client = TestClient(self.api.app)

    def tearDown(self) -> None:
        for path in (self.db_path, self.yaml_path):
            if os.path.exists(path):
                os.remove(path)

    def test_catalog(self) -> None:
        response = self.client.get("/workouts")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()), 10)

        response = self.client.get("/workouts/w1")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["name"], "Full Body Strength")
        self.assertEqual(response.json()["average_duration"], 0)

        self.assertEqual(self.client.get("/workouts/nope").status_code, 404)
        self.assertEqual(self.client.get("/exercises/nope").status_code, 404)
        self.assertEqual(self.client.delete("/workouts/w1").status_code, 400)

        response = self.client.get("/exercises", params={"muscle_group": "Chest"})
        self.assertIn("ex1", [e["id"] for e in response.json()])

    def test_session_workflow(self) -> None:
        self.assertEqual(self.client.get("/session").status_code, 404)
        self.assertEqual(self.client.post("/session/complete").status_code, 400)
        self.assertEqual(
            self.client.post("/session/start", params={"workout_id": "nope"}).status_code,
            404,
        )

        response = self.client.post("/session/start", params={"workout_id": "w1"})
        self.assertEqual(response.status_code, 200)
        log_id = response.json()["id"]
        self.assertEqual(
            self.client.post("/session/start", params={"workout_id": "w2"}).status_code,
            400,
        )

        response = self.client.post(
            "/session/exercises/0/sets", params={"weight": 60, "reps": 8}
        )
        self.assertEqual(response.status_code, 200)
        response = self.client.post(
            "/session/exercises/0/sets", params={"weight": -5, "reps": 8}
        )
        self.assertEqual(response.status_code, 400)

        self.client.put("/session/exercises/0/sets/0", params={"weight": -5})
        self.assertEqual(
            self.client.get("/session").json()["exercises"][0]["sets"][0]["weight"], 60
        )

        response = self.client.put(
            "/session/exercises/0", params={"notes": "paused reps"}
        )
        self.assertEqual(
            response.json(), {"completed": False, "all_sets_completed": True}
        )
        response = self.client.post(
            "/session/rating", json={"overall": 4, "difficulty": 3}
        )
        self.assertEqual(response.status_code, 200)

        response = self.client.get("/session")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["exercises"][0]["notes"], "paused reps")
        self.assertEqual(body["exercises"][0]["sets"][0]["weight"], 60)
        self.assertEqual(body["elapsed_minutes"], 0)
        self.assertFalse(body["running_too_long"])

        response = self.client.post("/session/complete")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["id"], log_id)
        self.assertEqual(self.client.get("/session").status_code, 404)

        response = self.client.get("/history")
        self.assertEqual([log["id"] for log in response.json()], [log_id])
        self.assertEqual(response.json()[0]["rating"]["overall"], 4)

        response = self.client.get("/history/exercise/ex1")
        self.assertEqual(response.json()["previous"], {"weight": 60, "reps": 8})

        response = self.client.post(f"/history/{log_id}/copy")
        self.assertEqual(response.status_code, 200)
        custom_id = response.json()["id"]
        self.assertEqual(
            self.client.get(f"/workouts/{custom_id}").json()["name"],
            "Full Body Strength (Custom)",
        )
        self.assertEqual(self.client.delete(f"/workouts/{custom_id}").status_code, 200)

        response = self.client.post(
            f"/history/{log_id}/exercises/0/sets", params={"weight": 40, "reps": -2}
        )
        self.assertEqual(response.status_code, 400)
        response = self.client.post(
            f"/history/{log_id}/exercises/0/sets", params={"weight": 40, "reps": 6}
        )
        self.assertEqual(response.status_code, 200)
        sets = self.client.get(f"/history/{log_id}").json()["exercises"][0]["sets"]
        self.assertEqual([(s["weight"], s["reps"]) for s in sets], [(60, 8), (40, 6)])

        self.assertEqual(self.client.delete("/history").status_code, 200)
        self.assertEqual(self.client.get("/history").json(), [])
        self.assertEqual(self.client.get(f"/history/{log_id}").status_code, 404)

    def test_cancel_discards_session(self) -> None:
        self.client.post("/session/start", params={"workout_id": "w4"})
        self.client.post("/session/cancel")
        self.assertEqual(self.client.get("/session").status_code, 404)
        self.assertEqual(self.client.get("/history").json(), [])

    def test_timer(self) -> None:
        response = self.client.post("/timer/rest", params={"duration": 90})
        self.assertTrue(response.json()["is_resting"])
        response = self.client.post("/timer/skip")
        self.assertFalse(response.json()["is_resting"])

        response = self.client.post("/timer/settings", params={"default_rest_time": 75})
        self.assertEqual(response.json()["default_rest_time"], 75)
        self.assertEqual(self.client.get("/timer/settings").json()["default_rest_time"], 75)

    def test_schedule(self) -> None:
        response = self.client.post(
            "/schedule",
            json={
                "workout_id": "w2",
                "schedule_type": "recurring",
                "day_of_week": 3,
                "recurrence_end_date": "2030-12-31",
            },
        )
        self.assertEqual(response.status_code, 200)
        entry_id = response.json()["id"]

        # 2030-01-02 is a Wednesday
        response = self.client.get("/schedule", params={"date": "2030-01-02"})
        self.assertEqual([e["id"] for e in response.json()], [entry_id])
        response = self.client.get("/schedule", params={"date": "2030-01-03"})
        self.assertEqual(response.json(), [])

        response = self.client.post("/schedule", json={"workout_id": "nope"})
        self.assertEqual(response.status_code, 404)

        self.assertEqual(self.client.delete(f"/schedule/{entry_id}").status_code, 200)
        self.assertEqual(self.client.delete(f"/schedule/{entry_id}").status_code, 404)

    def test_recommendations(self) -> None:
        response = self.client.get("/recommendations")
        self.assertEqual(response.status_code, 200)
        self.assertLessEqual(len(response.json()), 3)

        response = self.client.get("/recommendations", params={"mood": "rest"})
        categories = {w["category"] for w in response.json()}
        self.assertTrue(categories <= {"Mobility", "Recovery"})

        response = self.client.get("/recommendations/rest_day")
        self.assertEqual(len(response.json()), 10)

    def test_general_settings(self) -> None:
        response = self.client.post(
            "/settings/general", params={"fitness_level": "elite"}
        )
        self.assertEqual(response.status_code, 400)

        response = self.client.post(
            "/settings/general",
            params={"fitness_level": "advanced", "long_workout_threshold": 45},
        )
        self.assertEqual(response.status_code, 200)
        settings = self.client.get("/settings/general").json()
        self.assertEqual(settings["fitness_level"], "advanced")
        self.assertEqual(settings["long_workout_threshold"], 45)

    def test_gamification(self) -> None:
        self.assertEqual(
            self.client.get("/gamification").json(), {"enabled": False, "points": 0}
        )
        self.client.post("/gamification/enable", params={"enabled": True})
        response = self.client.post(
            "/challenges", params={"name": "One workout", "target": 1}
        )
        cid = response.json()["id"]
        today = datetime.date.today().isoformat()
        qid = self.client.post(
            "/daily_quests", params={"name": "Train", "date": today}
        ).json()["id"]

        self.client.post("/session/start", params={"workout_id": "w5"})
        self.client.post("/session/complete")

        challenges = self.client.get("/challenges").json()
        self.assertEqual([(c["id"], c["completed"]) for c in challenges], [(cid, True)])
        self.assertTrue(self.client.get(f"/daily_quests/{qid}").json()["completed"])
        self.assertEqual(self.client.get("/gamification/streak").json()["current"], 1)
        self.assertEqual(
            self.client.put("/challenges/999/progress", params={"progress": 1}).status_code,
            404,
        )


if __name__ == "__main__":
    unittest.main()
