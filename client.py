import requests
from typing import Optional


class TrackerClient:
    """Simple REST client for the tracking API."""

    def __init__(self, base_url: str = "http://localhost:8000", timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _get(self, path: str, **params):
        resp = requests.get(
            f"{self.base_url}{path}",
            params={k: v for k, v in params.items() if v is not None},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()

    def _post(self, path: str, json: Optional[dict] = None, **params):
        resp = requests.post(
            f"{self.base_url}{path}",
            params={k: v for k, v in params.items() if v is not None},
            json=json,
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()

    def log_workout(self, user_id: str, date: str, duration_minutes: Optional[int] = None) -> int:
        return self._post(
            "/workouts", user_id=user_id, date=date, duration_minutes=duration_minutes
        )["id"]

    def plan_workout(self, user_id: str, date: str, notes: Optional[str] = None) -> int:
        return self._post("/planned_workouts", user_id=user_id, date=date, notes=notes)["id"]

    def workout_stats(self, user_id: str, today: Optional[str] = None) -> dict:
        return self._get("/stats/overview", user_id=user_id, today=today)

    def weekly_volume(self, user_id: str, today: Optional[str] = None) -> dict:
        return self._get("/stats/weekly_volume", user_id=user_id, today=today)

    def latest_pr(self, user_id: str) -> Optional[dict]:
        return self._get("/stats/latest_pr", user_id=user_id)

    def calendar(self, user_id: str, year: int, month: int) -> dict:
        return self._get(f"/calendar/{year}/{month}", user_id=user_id)

    def app_foreground(self) -> Optional[dict]:
        return self._post("/notifications/foreground")
