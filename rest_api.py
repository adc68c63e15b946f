import datetime
import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Body, APIRouter
from pydantic import BaseModel

from db import (
    WorkoutHistoryRepository,
    ExerciseProgressRepository,
    WeightHistoryRepository,
    SettingsRepository,
    ScheduledNotificationRepository,
)
from config import APP_VERSION
from localization import Translator
from notification_service import (
    LocalNotificationDelivery,
    NotificationScheduler,
    NotificationSettingsStore,
    NOTIFICATION_KINDS,
    WEEKLY_SUMMARY,
)
from planner_service import PlannerService
from settings_schema import NotificationScheduleState
from stats_service import StatisticsService
from tools import DateTools, InvalidDateError, SystemClock

logger = logging.getLogger(__name__)


class ExerciseLog(BaseModel):
    name: str
    reps: str | int = 0
    completed_sets: int = 0
    weights: List[str | float | None] = []
    notes: Optional[str] = None


class CompletedWorkout(BaseModel):
    user_id: str
    date: str
    duration_minutes: Optional[int] = None
    program_id: Optional[str] = None
    notes: Optional[str] = None
    exercises: List[ExerciseLog] = []


class TrackerAPI:
    """Provides REST endpoints for workout tracking and reminders."""

    def __init__(
        self,
        db_path: str = "workout.db",
        yaml_path: str = "settings.yaml",
        *,
        clock=None,
    ) -> None:
        self.db_path = db_path
        self.clock = clock or SystemClock()
        self.settings = SettingsRepository(db_path, yaml_path)
        self.workouts = WorkoutHistoryRepository(db_path)
        self.progress = ExerciseProgressRepository(db_path)
        self.weights = WeightHistoryRepository(db_path)
        self.scheduled = ScheduledNotificationRepository(db_path)
        self.translator = Translator(self.settings.get_text("language", "en"))
        self.statistics = StatisticsService(self.workouts, self.progress, self.weights)
        self.planner = PlannerService(self.workouts, self.progress)
        self.notification_settings = NotificationSettingsStore(self.settings)
        self.delivery = LocalNotificationDelivery(self.scheduled, self.settings)
        self.notifier = NotificationScheduler(
            self.delivery, self.notification_settings, self.translator
        )
        self.app = FastAPI(
            title="LiftLog API",
            description="Workout tracking, analytics and reminder scheduling",
            version=APP_VERSION,
        )
        self._setup_routes()

    def _today(self) -> datetime.date:
        return self.clock.now().date()

    def _day(self, value: Optional[str]) -> datetime.date:
        if not value:
            return self._today()
        try:
            return DateTools.normalize_date(value)
        except InvalidDateError as e:
            raise HTTPException(status_code=400, detail=str(e))

    def home_summary(self, user_id: str) -> dict:
        """Everything the home screen shows, re-arming the weekly summary."""
        now = self.clock.now()
        today = now.date()
        week = self.statistics.week_overview(user_id, today)
        completed_count = sum(1 for d in week if d.completed)
        if self.notification_settings.get().weekly_summary_enabled:
            self.notifier.schedule_weekly_summary(completed_count, now)
        pr = self.statistics.latest_pr(user_id)
        return {
            "quote": self.translator.quote_of_the_day(),
            "stats": self.statistics.workout_stats(user_id, today).to_dict(),
            "week": [d.to_dict() for d in week],
            "weekly_completed": completed_count,
            "volume": self.statistics.weekly_volume(user_id, today).to_dict(),
            "latest_pr": pr.to_dict() if pr else None,
        }

    def _setup_routes(self) -> None:
        stats_router = APIRouter(prefix="/stats", tags=["Statistics"])
        calendar_router = APIRouter(prefix="/calendar", tags=["Calendar"])
        notifications_router = APIRouter(prefix="/notifications", tags=["Notifications"])

        @self.app.get(
            "/health",
            summary="Health check",
            description="Verify API and database connectivity.",
        )
        def health():
            """Return API and database connection status."""
            try:
                self.workouts.fetch_all("SELECT 1;")
                return {"status": "ok"}
            except Exception as e:  # pragma: no cover - connectivity failure
                raise HTTPException(status_code=500, detail=str(e))

        @self.app.post("/workouts")
        def create_workout(
            user_id: str,
            date: str = None,
            duration_minutes: int = None,
            notes: str = None,
            program_id: str = None,
        ):
            day = self._day(date)
            wid = self.workouts.create(
                user_id, day.isoformat(), True, duration_minutes, notes, program_id
            )
            return {"id": wid}

        @self.app.post("/workouts/complete")
        def complete_workout(payload: CompletedWorkout):
            day = self._day(payload.date)
            return self.planner.complete_workout(
                payload.user_id,
                day,
                payload.duration_minutes,
                [ex.model_dump() for ex in payload.exercises],
                payload.program_id,
                payload.notes,
            )

        @self.app.get("/workouts")
        def list_workouts(
            user_id: str,
            start_date: str = None,
            end_date: str = None,
            limit: int = 30,
        ):
            try:
                rows = self.workouts.fetch_history(
                    user_id, start_date, end_date, limit=limit
                )
            except InvalidDateError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return [r.to_dict() for r in rows]

        @self.app.post("/planned_workouts")
        def create_planned_workout(
            user_id: str, date: str, program_id: str = None, notes: str = None
        ):
            plan_id = self.planner.add_planned_workout(
                user_id, self._day(date), program_id, notes
            )
            return {"id": plan_id}

        @self.app.get("/planned_workouts")
        def list_planned_workouts(user_id: str):
            return [p.to_dict() for p in self.workouts.fetch_planned(user_id)]

        @self.app.delete("/planned_workouts/{plan_id}")
        def delete_planned_workout(plan_id: int):
            if not self.planner.delete_planned_workout(plan_id):
                raise HTTPException(status_code=404, detail="planned workout not found")
            return {"status": "deleted"}

        @self.app.post("/exercise_progress")
        def add_exercise_progress(
            user_id: str,
            exercise_name: str,
            weight: float,
            reps: str,
            sets: int = 1,
            date: str = None,
            notes: str = None,
        ):
            pid = self.progress.add(
                user_id,
                exercise_name,
                weight,
                reps,
                sets,
                self._day(date).isoformat(),
                notes,
            )
            return {"id": pid}

        @self.app.get("/exercise_progress")
        def list_exercise_progress(
            user_id: str, exercise_name: str = None, limit: int = 50
        ):
            return [
                e.to_dict()
                for e in self.progress.fetch_progress(user_id, exercise_name, limit)
            ]

        @self.app.get("/exercise_progress/names")
        def list_exercise_names(user_id: str):
            return self.progress.exercise_names(user_id)

        @self.app.post("/weight")
        def add_weight(user_id: str, weight: float, date: str = None):
            wid = self.weights.add(user_id, weight, self._day(date).isoformat())
            return {"id": wid}

        @self.app.get("/weight")
        def list_weight(user_id: str, limit: int = 30):
            return [
                {"date": d, "weight": w}
                for d, w in self.weights.fetch_history(user_id, limit)
            ]

        @stats_router.get("/overview")
        def stats_overview(user_id: str, today: str = None):
            return self.statistics.workout_stats(user_id, self._day(today)).to_dict()

        @stats_router.get("/weekly_volume")
        def weekly_volume(user_id: str, today: str = None):
            return self.statistics.weekly_volume(user_id, self._day(today)).to_dict()

        @stats_router.get("/volume")
        def volume(user_id: str, start_date: str, end_date: str):
            start, end = self._day(start_date), self._day(end_date)
            return {"volume": self.statistics.volume_load(user_id, start, end)}

        @stats_router.get("/latest_pr")
        def latest_pr(user_id: str):
            pr = self.statistics.latest_pr(user_id)
            return pr.to_dict() if pr else None

        @stats_router.get("/monthly_minutes")
        def monthly_minutes(user_id: str, today: str = None):
            return {
                "minutes": self.statistics.monthly_minutes(user_id, self._day(today))
            }

        @stats_router.get("/week")
        def week(user_id: str, today: str = None):
            return [
                d.to_dict()
                for d in self.statistics.week_overview(user_id, self._day(today))
            ]

        @stats_router.get("/exercise_history")
        def exercise_history(user_id: str, exercise_name: str, limit: int = 10):
            return [
                e.to_dict()
                for e in self.statistics.exercise_history(user_id, exercise_name, limit)
            ]

        @stats_router.get("/home")
        def home(user_id: str):
            return self.home_summary(user_id)

        @calendar_router.get("/day/{date}")
        def calendar_day(date: str, user_id: str):
            return self.planner.day_action(user_id, self._day(date)).to_dict()

        @calendar_router.get("/{year}/{month}")
        def calendar_month(year: int, month: int, user_id: str):
            if not 1 <= month <= 12:
                raise HTTPException(status_code=400, detail="month must be 1-12")
            return self.planner.month(user_id, year, month, self._today()).to_dict()

        @notifications_router.get("/settings")
        def get_notification_settings():
            return self.notification_settings.get().model_dump(by_alias=True)

        @notifications_router.put("/settings")
        def update_notification_settings(
            payload: dict = Body(...), user_id: str = None
        ):
            """Save preferences and arm or cancel only the kinds that changed."""
            try:
                state = NotificationScheduleState.model_validate(payload)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            previous = self.notification_settings.get()
            self.notification_settings.set(state)
            now = self.clock.now()
            if state.motivation_reminder_enabled != previous.motivation_reminder_enabled:
                if state.motivation_reminder_enabled:
                    self.notifier.schedule_motivation_reminder(now)
                else:
                    self.notifier.cancel_motivation_reminder()
            if state.weekly_summary_enabled != previous.weekly_summary_enabled:
                if state.weekly_summary_enabled:
                    count = 0
                    if user_id:
                        count = self.statistics.weekly_completed_count(
                            user_id, now.date()
                        )
                    self.notifier.schedule_weekly_summary(count, now)
                else:
                    self.delivery.cancel_all_of_kind(WEEKLY_SUMMARY)
            return state.model_dump(by_alias=True)

        @notifications_router.post("/foreground")
        def app_foreground():
            result = self.notifier.on_app_foreground(
                self.notification_settings.get(), self.clock.now()
            )
            return result.to_dict() if result else None

        @notifications_router.post("/initialize")
        def initialize(user_id: str, force: bool = False):
            now = self.clock.now()
            count = self.statistics.weekly_completed_count(user_id, now.date())
            return {"initialized": self.notifier.initialize_notifications(count, now, force)}

        @notifications_router.post("/toggle")
        def toggle(enabled: bool):
            results = self.notifier.toggle_notifications(enabled, self.clock.now())
            return [r.to_dict() for r in results]

        @notifications_router.get("/scheduled")
        def scheduled(kind: str = None):
            if kind is not None and kind not in NOTIFICATION_KINDS:
                raise HTTPException(status_code=400, detail=f"unknown kind: {kind}")
            return self.delivery.pending(kind)

        self.app.include_router(stats_router)
        self.app.include_router(calendar_router)
        self.app.include_router(notifications_router)


def create_app(db_path: str = "workout.db", yaml_path: str = "settings.yaml") -> FastAPI:
    return TrackerAPI(db_path=db_path, yaml_path=yaml_path).app


if __name__ == "__main__":
    import uvicorn
    from config import default_paths

    logging.basicConfig(level=logging.INFO)
    db_path, yaml_path = default_paths()
    uvicorn.run(create_app(db_path, yaml_path))
