from __future__ import annotations
import datetime
from typing import Iterable, List, Optional

from db import (
    WorkoutHistoryRepository,
    ExerciseProgressRepository,
    WeightHistoryRepository,
)
from models import (
    ExerciseProgressEntry,
    PRRecord,
    VolumeStats,
    WeekDay,
    WorkoutRecord,
    WorkoutStats,
)
from tools import DateTools, MathTools


def compute_streak(completed_dates: Iterable, today) -> int:
    """Return the number of consecutive active days ending today or yesterday.

    Duplicate dates count once. Without a workout today or yesterday the
    streak is broken and ``0`` is returned.
    """
    days = {DateTools.normalize_date(d) for d in completed_dates}
    today = DateTools.normalize_date(today)
    if today in days:
        anchor = today
    elif today - datetime.timedelta(days=1) in days:
        anchor = today - datetime.timedelta(days=1)
    else:
        return 0
    streak = 0
    while anchor - datetime.timedelta(days=streak) in days:
        streak += 1
    return streak


def volume_in_range(entries: Iterable[ExerciseProgressEntry], start, end) -> float:
    """Sum ``weight * reps * sets`` over entries dated within ``[start, end]``."""
    start = DateTools.normalize_date(start)
    end = DateTools.normalize_date(end)
    total = 0.0
    for entry in entries:
        day = DateTools.normalize_date(entry.date)
        if start <= day <= end:
            total += MathTools.entry_volume(entry.weight, entry.reps, entry.sets)
    return total


def weekly_volume_stats(entries: Iterable[ExerciseProgressEntry], today) -> VolumeStats:
    """Compare this Monday-Sunday week's volume with the previous week."""
    entries = list(entries)
    monday, sunday = DateTools.week_bounds(today)
    week = datetime.timedelta(days=7)
    current = volume_in_range(entries, monday, sunday)
    previous = volume_in_range(entries, monday - week, sunday - week)
    return VolumeStats(
        current_volume=current,
        previous_volume=previous,
        percentage_change=MathTools.percentage_change(current, previous),
    )


def latest_pr(entries: Iterable[ExerciseProgressEntry]) -> Optional[PRRecord]:
    """Return the most recently dated per-exercise maximum weight.

    For each exercise the heaviest entry wins; equal weights go to the later
    date, then to the earlier position in ``entries``. Among those maxima
    the latest date wins, ties going to the exercise seen first.
    """
    best: dict[str, tuple[float, datetime.date, ExerciseProgressEntry]] = {}
    for entry in entries:
        weight = MathTools.safe_float(entry.weight, 0.0)
        day = DateTools.normalize_date(entry.date)
        current = best.get(entry.exercise_name)
        if current is None or (weight, day) > (current[0], current[1]):
            best[entry.exercise_name] = (weight, day, entry)
    if not best:
        return None
    winner = None
    for weight, day, entry in best.values():
        if winner is None or day > winner[1]:
            winner = (weight, day, entry)
    weight, day, entry = winner
    return PRRecord(
        exercise_name=entry.exercise_name,
        weight=weight,
        reps=entry.reps,
        date=day,
    )


def monthly_minutes(records: Iterable[WorkoutRecord], today) -> int:
    """Total duration of completed workouts in the month of ``today``."""
    today = DateTools.normalize_date(today)
    total = 0
    for record in records:
        if not record.completed or not record.duration_minutes:
            continue
        day = DateTools.normalize_date(record.date)
        if day.year == today.year and day.month == today.month:
            total += MathTools.safe_int(record.duration_minutes, 0)
    return total


def weekly_workout_days(completed_dates: Iterable, today) -> List[WeekDay]:
    """Return Monday..Sunday of the current week flagged with activity."""
    days = {DateTools.normalize_date(d) for d in completed_dates}
    monday, _sunday = DateTools.week_bounds(today)
    result = []
    for offset in range(7):
        day = monday + datetime.timedelta(days=offset)
        result.append(WeekDay(date=day, completed=day in days))
    return result


class StatisticsService:
    """Compute workout statistics for one user from the repositories."""

    # Streaks longer than this are not looked up.
    STREAK_LOOKBACK_DAYS = 366

    def __init__(
        self,
        workout_repo: WorkoutHistoryRepository,
        progress_repo: ExerciseProgressRepository,
        weight_repo: WeightHistoryRepository | None = None,
    ) -> None:
        self.workouts = workout_repo
        self.progress = progress_repo
        self.weights = weight_repo

    def _completed_dates(self, user_id: str, start, end) -> List[datetime.date]:
        return self.workouts.fetch_completed_dates(
            user_id,
            DateTools.normalize_date(start).isoformat(),
            DateTools.normalize_date(end).isoformat(),
        )

    def workout_streak(self, user_id: str, today) -> int:
        today = DateTools.normalize_date(today)
        start = today - datetime.timedelta(days=self.STREAK_LOOKBACK_DAYS)
        return compute_streak(self._completed_dates(user_id, start, today), today)

    def workout_stats(self, user_id: str, today) -> WorkoutStats:
        current_weight = None
        if self.weights is not None:
            current_weight = self.weights.fetch_latest_weight(user_id)
        return WorkoutStats(
            total_workouts=self.workouts.count_completed(user_id),
            current_weight=current_weight,
            workout_streak=self.workout_streak(user_id, today),
        )

    def volume_load(self, user_id: str, start_date, end_date) -> float:
        entries = self.progress.fetch_range(user_id, start_date, end_date)
        return volume_in_range(entries, start_date, end_date)

    def weekly_volume(self, user_id: str, today) -> VolumeStats:
        monday, sunday = DateTools.week_bounds(today)
        entries = self.progress.fetch_range(
            user_id,
            (monday - datetime.timedelta(days=7)).isoformat(),
            sunday.isoformat(),
        )
        return weekly_volume_stats(entries, today)

    def latest_pr(self, user_id: str) -> Optional[PRRecord]:
        return latest_pr(self.progress.fetch_progress(user_id, limit=None))

    def monthly_minutes(self, user_id: str, today) -> int:
        first, last = DateTools.month_bounds(
            DateTools.normalize_date(today).year,
            DateTools.normalize_date(today).month,
        )
        records = self.workouts.fetch_history(
            user_id, first.isoformat(), last.isoformat(), completed=True
        )
        return monthly_minutes(records, today)

    def week_overview(self, user_id: str, today) -> List[WeekDay]:
        monday, sunday = DateTools.week_bounds(today)
        return weekly_workout_days(
            self._completed_dates(user_id, monday, sunday), today
        )

    def weekly_completed_count(self, user_id: str, today) -> int:
        return sum(1 for d in self.week_overview(user_id, today) if d.completed)

    def exercise_history(
        self, user_id: str, exercise_name: str, limit: int = 10
    ) -> List[ExerciseProgressEntry]:
        """Return the latest ``limit`` entries for ``exercise_name``, oldest first."""
        entries = self.progress.fetch_progress(user_id, exercise_name, limit)
        return list(reversed(entries))
