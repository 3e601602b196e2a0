import os
import sys
import unittest
from unittest import mock
from fastapi.testclient import TestClient

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
import client as client_module
from client import TrackerClient
from rest_api import TrackerAPI
from seed_sample_data import seed


class _Transport:
    """Route ``requests`` calls into an in-process TestClient."""

    def __init__(self, app) -> None:
        self.test_client = TestClient(app)

    def get(self, url, params=None, timeout=None):
        return self.test_client.get(url, params=params)

    def post(self, url, params=None, json=None, timeout=None):
        return self.test_client.post(url, params=params, json=json)


class ClientTest(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_client.db"
        self.yaml_path = "test_client.yaml"
        for path in (self.db_path, self.yaml_path):
            if os.path.exists(path):
                os.remove(path)
        seed(self.db_path)
        self.api = TrackerAPI(db_path=self.db_path, yaml_path=self.yaml_path)
        patcher = mock.patch.object(client_module, "requests", _Transport(self.api.app))
        patcher.start()
        self.addCleanup(patcher.stop)
        self.client = TrackerClient(base_url="http://testserver")

    def tearDown(self) -> None:
        for path in (self.db_path, self.yaml_path):
            if os.path.exists(path):
                os.remove(path)

    def test_session_round(self) -> None:
        self.assertIsNone(self.client.active_workout())
        log_id = self.client.start_workout("w2")
        self.client.log_set(0, 50, 10)
        self.client.rate_workout(5, energy=4)
        active = self.client.active_workout()
        self.assertEqual(active["id"], log_id)
        self.assertEqual(active["rating"]["energy"], 4)
        result = self.client.complete_workout()
        self.assertEqual(result["id"], log_id)
        self.assertIsNone(self.client.active_workout())
        self.assertEqual(self.client.personal_records(), [])

    def test_cancel(self) -> None:
        self.client.start_workout("w5")
        self.client.cancel_workout()
        self.assertIsNone(self.client.active_workout())

    def test_catalog_and_schedule(self) -> None:
        self.assertEqual(len(self.client.list_workouts()), 10)
        core = self.client.list_workouts(muscle_group="Core")
        self.assertTrue(core)
        entry_id = self.client.schedule_workout("w4", scheduled_date="2030-05-01")
        scheduled = self.client.scheduled_for_date("2030-05-01")
        self.assertEqual([e["id"] for e in scheduled], [entry_id])
        self.assertLessEqual(len(self.client.recommendations(count=2)), 2)


if __name__ == "__main__":
    unittest.main()
