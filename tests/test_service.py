"""End-to-end tests for the exercise tracker HTTP API."""

from __future__ import annotations

import tempfile
import unittest
from datetime import date
from pathlib import Path

from fastapi.testclient import TestClient

from exercise_tracker.config import Settings
from exercise_tracker.database import Database
from exercise_tracker.service import create_api_app, create_app

TODAY = date(2024, 6, 1)


class ExerciseTrackerServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tempdir = tempfile.TemporaryDirectory()
        db_path = Path(self._tempdir.name) / "exercise_tracker.sqlite3"
        self.settings = Settings(database_path=db_path)
        self.database = Database(db_path)

    def tearDown(self) -> None:
        self._tempdir.cleanup()

    def _client(self, settings: Settings | None = None) -> TestClient:
        app = create_app(database=self.database, settings=settings or self.settings, today=lambda: TODAY)
        return TestClient(app)

    def _create_user(self, client: TestClient, username: str = "alice") -> str:
        response = client.post("/api/users", data={"username": username})
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()["_id"]

    def test_create_and_list_users(self) -> None:
        with self._client() as client:
            created = client.post("/api/users", data={"username": "alice"})
            self.assertEqual(created.status_code, 200, created.text)
            payload = created.json()
            self.assertEqual(list(payload.keys()), ["username", "_id"])
            self.assertEqual(payload["username"], "alice")

            self._create_user(client, "bob")

            listed = client.get("/api/users")
            self.assertEqual(listed.status_code, 200)
            self.assertEqual(
                listed.json(),
                [
                    {"username": "alice", "_id": payload["_id"]},
                    {"username": "bob", "_id": listed.json()[1]["_id"]},
                ],
            )

    def test_add_exercise_returns_merged_view(self) -> None:
        with self._client() as client:
            user_id = self._create_user(client)

            response = client.post(
                f"/api/users/{user_id}/exercises",
                data={"description": "run", "duration": "30", "date": "2024-01-15"},
            )

            self.assertEqual(response.status_code, 200, response.text)
            self.assertEqual(
                response.json(),
                {
                    "_id": user_id,
                    "username": "alice",
                    "description": "run",
                    "duration": 30,
                    "date": "Mon Jan 15 2024",
                },
            )

            log = client.get(f"/api/users/{user_id}/logs").json()
            self.assertEqual(log["log"], [{"description": "run", "duration": 30, "date": "Mon Jan 15 2024"}])

    def test_log_scenario_with_limit(self) -> None:
        with self._client() as client:
            user_id = self._create_user(client)
            client.post(
                f"/api/users/{user_id}/exercises",
                data={"description": "run", "duration": "30", "date": "2024-03-01"},
            )
            swim = client.post(
                f"/api/users/{user_id}/exercises",
                data={"description": "swim", "duration": "45"},
            )
            self.assertEqual(swim.json()["date"], "Sat Jun 01 2024")

            limited = client.get(f"/api/users/{user_id}/logs", params={"limit": "1"})
            self.assertEqual(limited.status_code, 200)
            self.assertEqual(
                limited.json(),
                {
                    "_id": user_id,
                    "username": "alice",
                    "count": 1,
                    "log": [{"description": "run", "duration": 30, "date": "Fri Mar 01 2024"}],
                },
            )

            full = client.get(f"/api/users/{user_id}/logs").json()
            self.assertEqual(full["count"], 2)
            self.assertEqual([entry["description"] for entry in full["log"]], ["run", "swim"])

    def test_log_date_range_filters(self) -> None:
        with self._client() as client:
            user_id = self._create_user(client)
            for description, day in (("a", "2024-01-01"), ("b", "2024-01-10"), ("c", "2024-01-20")):
                client.post(
                    f"/api/users/{user_id}/exercises",
                    data={"description": description, "duration": "10", "date": day},
                )

            same_day = client.get(
                f"/api/users/{user_id}/logs",
                params={"from": "2024-01-10", "to": "2024-01-10"},
            ).json()
            self.assertEqual([entry["description"] for entry in same_day["log"]], ["b"])
            self.assertEqual(same_day["count"], 1)

            ranged = client.get(
                f"/api/users/{user_id}/logs",
                params={"from": "2024-01-05", "to": "2024-01-31", "limit": "5"},
            ).json()
            self.assertEqual([entry["description"] for entry in ranged["log"]], ["b", "c"])

            malformed = client.get(f"/api/users/{user_id}/logs", params={"from": "not-a-date"})
            self.assertEqual(malformed.status_code, 200)
            self.assertEqual(malformed.json()["count"], 0)
            self.assertEqual(malformed.json()["log"], [])

    def test_non_numeric_duration_is_coerced(self) -> None:
        with self._client() as client:
            user_id = self._create_user(client)
            response = client.post(
                f"/api/users/{user_id}/exercises",
                data={"description": "walk", "duration": "long"},
            )
            self.assertEqual(response.status_code, 200, response.text)
            self.assertIsNone(response.json()["duration"])

    def test_errors_use_status_codes_and_error_body(self) -> None:
        with self._client() as client:
            missing_name = client.post("/api/users", data={})
            self.assertEqual(missing_name.status_code, 400)
            self.assertEqual(missing_name.json(), {"error": "Error saving user"})

            unknown = client.get(f"/api/users/{'0' * 24}/logs")
            self.assertEqual(unknown.status_code, 404)
            self.assertEqual(unknown.json(), {"error": "User not found"})

            malformed = client.post(
                "/api/users/not-an-id/exercises",
                data={"description": "run", "duration": "5"},
            )
            self.assertEqual(malformed.status_code, 400)
            self.assertEqual(malformed.json(), {"error": "Error saving exercise"})

            user_id = self._create_user(client)
            no_description = client.post(
                f"/api/users/{user_id}/exercises",
                data={"duration": "5"},
            )
            self.assertEqual(no_description.status_code, 400)
            self.assertEqual(no_description.json(), {"error": "Error saving exercise"})

    def test_unknown_user_is_reported_before_body_errors(self) -> None:
        with self._client() as client:
            response = client.post(
                f"/api/users/{'0' * 24}/exercises",
                data={"duration": "5"},
            )
            self.assertEqual(response.status_code, 404)
            self.assertEqual(response.json(), {"error": "User not found"})

    def test_oversized_duration_is_stored_as_null(self) -> None:
        with self._client() as client:
            user_id = self._create_user(client)
            response = client.post(
                f"/api/users/{user_id}/exercises",
                data={"description": "marathon", "duration": "9" * 20, "date": "2024-01-15"},
            )
            self.assertEqual(response.status_code, 200, response.text)
            self.assertIsNone(response.json()["duration"])

            log = client.get(f"/api/users/{user_id}/logs").json()
            self.assertEqual(log["log"], [{"description": "marathon", "duration": None, "date": "Mon Jan 15 2024"}])

    def test_oversized_limit_keeps_whole_log(self) -> None:
        with self._client() as client:
            user_id = self._create_user(client)
            for description in ("a", "b"):
                client.post(
                    f"/api/users/{user_id}/exercises",
                    data={"description": description, "duration": "10", "date": "2024-01-01"},
                )

            response = client.get(f"/api/users/{user_id}/logs", params={"limit": "9" * 5000})
            self.assertEqual(response.status_code, 200, response.text)
            self.assertEqual(response.json()["count"], 2)

    def test_legacy_error_mode_always_returns_200(self) -> None:
        legacy = Settings(database_path=self.settings.database_path, legacy_error_status=True)
        with self._client(legacy) as client:
            unknown = client.post(
                f"/api/users/{'0' * 24}/exercises",
                data={"description": "run", "duration": "5"},
            )
            self.assertEqual(unknown.status_code, 200)
            self.assertEqual(unknown.json(), {"error": "User not found"})

            malformed = client.get("/api/users/xyz/logs")
            self.assertEqual(malformed.status_code, 200)
            self.assertEqual(malformed.json(), {"error": "Error fetching logs"})

    def test_landing_page_and_static_assets(self) -> None:
        with self._client() as client:
            page = client.get("/")
            self.assertEqual(page.status_code, 200)
            self.assertIn("text/html", page.headers["content-type"])
            self.assertIn('action="/api/users"', page.text)

            stylesheet = client.get("/public/style.css")
            self.assertEqual(stylesheet.status_code, 200)

            self.assertEqual(client.get("/healthz").json(), {"status": "ok"})

    def test_api_only_app_has_no_landing_page(self) -> None:
        app = create_api_app(database=self.database, settings=self.settings)
        with TestClient(app) as client:
            self.assertEqual(client.get("/").status_code, 404)
            self.assertEqual(client.get("/api/users").json(), [])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
