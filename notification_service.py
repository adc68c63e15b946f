"""Local reminder notifications.

``NotificationScheduler`` decides when the weekly summary and the
motivation reminder fire. Delivery is delegated to a
``NotificationDeliveryPort``; at most one notification per kind is pending
because every schedule call cancels that kind first.
"""

from __future__ import annotations
import abc
import datetime
import logging
import random
from dataclasses import dataclass
from typing import Optional

from db import ScheduledNotificationRepository, SettingsRepository
from localization import Translator
from settings_schema import NotificationScheduleState
from tools import DateTools

logger = logging.getLogger(__name__)

WEEKLY_SUMMARY = "weekly-summary"
MOTIVATION_REMINDER = "motivation"
NOTIFICATION_KINDS = (WEEKLY_SUMMARY, MOTIVATION_REMINDER)

STATE_SCHEDULED = "scheduled"
STATE_UNSCHEDULED = "unscheduled"

REASON_TOO_SOON = "too_soon"
REASON_NO_PERMISSION = "no_permission"
REASON_UNAVAILABLE = "unavailable"
REASON_DISABLED = "disabled"


class NotificationDeliveryError(RuntimeError):
    """Raised by a delivery adapter that cannot reach the platform."""


@dataclass(frozen=True)
class ScheduleResult:
    kind: str
    scheduled: bool
    fire_at: Optional[datetime.datetime] = None
    reason: Optional[str] = None
    handle: Optional[int] = None

    @classmethod
    def done(cls, kind: str, fire_at: datetime.datetime, handle) -> "ScheduleResult":
        return cls(kind=kind, scheduled=True, fire_at=fire_at, handle=handle)

    @classmethod
    def skipped(cls, kind: str, reason: str, fire_at=None) -> "ScheduleResult":
        return cls(kind=kind, scheduled=False, fire_at=fire_at, reason=reason)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "scheduled": self.scheduled,
            "fire_at": self.fire_at.isoformat() if self.fire_at else None,
            "reason": self.reason,
            "handle": self.handle,
        }


class NotificationDeliveryPort(abc.ABC):
    """Platform side of notification scheduling."""

    @abc.abstractmethod
    def has_permission(self) -> bool: ...

    @abc.abstractmethod
    def schedule(
        self, kind: str, fire_at: datetime.datetime, title: str, body: str
    ): ...

    @abc.abstractmethod
    def cancel_all_of_kind(self, kind: str) -> None: ...

    @abc.abstractmethod
    def cancel_all(self) -> None: ...

    @abc.abstractmethod
    def pending(self, kind: Optional[str] = None) -> list[dict]: ...


class LocalNotificationDelivery(NotificationDeliveryPort):
    """Delivery adapter storing scheduled notifications in sqlite."""

    def __init__(
        self,
        repo: ScheduledNotificationRepository,
        settings: SettingsRepository,
    ) -> None:
        self.repo = repo
        self.settings = settings

    def has_permission(self) -> bool:
        return self.settings.get_bool("notification_permission", True)

    def schedule(self, kind: str, fire_at: datetime.datetime, title: str, body: str) -> int:
        return self.repo.add(kind, fire_at, title, body)

    def cancel_all_of_kind(self, kind: str) -> None:
        self.repo.cancel_kind(kind)

    def cancel_all(self) -> None:
        self.repo.cancel_all()

    def pending(self, kind: Optional[str] = None) -> list[dict]:
        return self.repo.fetch_all_notifications(kind=kind, status="pending")

    def fire_due(self, now: datetime.datetime) -> list[dict]:
        """Mark pending notifications due at ``now`` as fired and return them."""
        fired = self.repo.mark_fired(now)
        for n in fired:
            logger.info("notification %s fired: %s", n["kind"], n["body"])
        return fired


class NotificationSettingsStore:
    """Key-value persistence for notification preferences."""

    def __init__(self, settings: SettingsRepository) -> None:
        self.settings = settings

    def get(self) -> NotificationScheduleState:
        return NotificationScheduleState(
            weekly_summary_enabled=self.settings.get_bool("weekly_summary_enabled", True),
            motivation_reminder_enabled=self.settings.get_bool(
                "motivation_reminder_enabled", True
            ),
            last_login_date=self.settings.get_date("last_login_date"),
        )

    def set(self, state: NotificationScheduleState) -> None:
        self.settings.set_bool("weekly_summary_enabled", state.weekly_summary_enabled)
        self.settings.set_bool(
            "motivation_reminder_enabled", state.motivation_reminder_enabled
        )
        if state.last_login_date is not None:
            self.settings.set_date("last_login_date", state.last_login_date)

    def record_login(self, day: datetime.date) -> None:
        self.settings.set_date("last_login_date", day)

    def last_login(self) -> Optional[datetime.date]:
        return self.settings.get_date("last_login_date")

    def initialized_on(self) -> Optional[datetime.date]:
        return self.settings.get_date("notifications_initialized_date")

    def mark_initialized(self, day: datetime.date) -> None:
        self.settings.set_date("notifications_initialized_date", day)

    def language(self) -> str:
        return self.settings.get_text("language", "en")


class NotificationScheduler:
    """Arms and cancels the weekly summary and the motivation reminder."""

    WEEKLY_WEEKDAY = 6  # Sunday, datetime.weekday()
    WEEKLY_HOUR = 22
    MOTIVATION_DELAY_DAYS = 3
    MOTIVATION_HOUR = 18
    MIN_LEAD = datetime.timedelta(hours=1)

    def __init__(
        self,
        delivery: NotificationDeliveryPort,
        store: NotificationSettingsStore,
        translator: Translator | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.delivery = delivery
        self.store = store
        self.translator = translator or Translator(store.language())
        self.rng = rng or random.Random()

    @classmethod
    def next_weekly_summary_time(cls, now: datetime.datetime) -> datetime.datetime:
        """Next Sunday 22:00 strictly after ``now``."""
        days_ahead = (cls.WEEKLY_WEEKDAY - now.weekday()) % 7
        target = datetime.datetime.combine(
            now.date() + datetime.timedelta(days=days_ahead),
            datetime.time(cls.WEEKLY_HOUR),
            tzinfo=now.tzinfo,
        )
        if target <= now:
            target += datetime.timedelta(days=7)
        return target

    @classmethod
    def motivation_reminder_time(cls, now: datetime.datetime) -> datetime.datetime:
        return datetime.datetime.combine(
            now.date() + datetime.timedelta(days=cls.MOTIVATION_DELAY_DAYS),
            datetime.time(cls.MOTIVATION_HOUR),
            tzinfo=now.tzinfo,
        )

    def _arm(
        self, kind: str, fire_at: datetime.datetime, now: datetime.datetime, title: str, body: str
    ) -> ScheduleResult:
        if fire_at - now < self.MIN_LEAD:
            logger.info("%s at %s is too soon, not scheduled", kind, fire_at)
            return ScheduleResult.skipped(kind, REASON_TOO_SOON, fire_at)
        try:
            if not self.delivery.has_permission():
                logger.warning("notification permission not granted, %s skipped", kind)
                return ScheduleResult.skipped(kind, REASON_NO_PERMISSION, fire_at)
            self.delivery.cancel_all_of_kind(kind)
            handle = self.delivery.schedule(kind, fire_at, title, body)
        except NotificationDeliveryError as e:
            logger.warning("notification delivery unavailable for %s: %s", kind, e)
            return ScheduleResult.skipped(kind, REASON_UNAVAILABLE, fire_at)
        logger.info("%s scheduled for %s", kind, fire_at)
        return ScheduleResult.done(kind, fire_at, handle)

    def schedule_weekly_summary(
        self, workout_count_this_week: int, now: datetime.datetime
    ) -> ScheduleResult:
        return self._arm(
            WEEKLY_SUMMARY,
            self.next_weekly_summary_time(now),
            now,
            self.translator.gettext("weekly_summary_title"),
            self.translator.weekly_summary_body(workout_count_this_week),
        )

    def motivation_messages(self) -> list[str]:
        return self.translator.pool("motivation")

    def schedule_motivation_reminder(self, now: datetime.datetime) -> ScheduleResult:
        return self._arm(
            MOTIVATION_REMINDER,
            self.motivation_reminder_time(now),
            now,
            self.translator.gettext("motivation_title"),
            self.translator.choice("motivation", self.rng),
        )

    def cancel_motivation_reminder(self) -> bool:
        try:
            self.delivery.cancel_all_of_kind(MOTIVATION_REMINDER)
        except NotificationDeliveryError as e:
            logger.warning("could not cancel motivation reminder: %s", e)
            return False
        return True

    def on_app_foreground(
        self, settings: NotificationScheduleState, now: datetime.datetime
    ) -> ScheduleResult:
        """Record activity and restart the motivation countdown.

        The weekly summary is left alone.
        """
        self.store.record_login(now.date())
        self.cancel_motivation_reminder()
        if settings.motivation_reminder_enabled:
            return self.schedule_motivation_reminder(now)
        return ScheduleResult.skipped(MOTIVATION_REMINDER, REASON_DISABLED)

    def initialize_notifications(
        self, workout_count: int, now: datetime.datetime, force: bool = False
    ) -> bool:
        """Arm notifications on app start, at most once per day unless ``force``."""
        today = now.date()
        if not force and self.store.initialized_on() == today:
            logger.info("notifications already initialized today, skipping")
            return True
        try:
            permitted = self.delivery.has_permission()
        except NotificationDeliveryError as e:
            logger.warning("notification delivery unavailable: %s", e)
            return False
        if not permitted:
            return False
        settings = self.store.get()
        self.on_app_foreground(settings, now)
        if settings.weekly_summary_enabled:
            self.schedule_weekly_summary(workout_count, now)
        self.store.mark_initialized(today)
        return True

    def toggle_notifications(self, enabled: bool, now: datetime.datetime) -> list[ScheduleResult]:
        results: list[ScheduleResult] = []
        if enabled:
            results.append(self.schedule_weekly_summary(0, now))
            results.append(self.schedule_motivation_reminder(now))
        else:
            try:
                self.delivery.cancel_all()
            except NotificationDeliveryError as e:
                logger.warning("could not cancel notifications: %s", e)
        state = self.store.get()
        state.weekly_summary_enabled = enabled
        state.motivation_reminder_enabled = enabled
        self.store.set(state)
        return results

    def days_since_last_login(self, now: datetime.datetime) -> int:
        last = self.store.last_login()
        if last is None:
            return 0
        return abs(DateTools.days_between(last, now.date()))

    def state(self, kind: str) -> str:
        if self.delivery.pending(kind):
            return STATE_SCHEDULED
        return STATE_UNSCHEDULED
