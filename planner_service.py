from __future__ import annotations
import datetime
from typing import Iterable, List, Optional

from db import WorkoutHistoryRepository, ExerciseProgressRepository
from models import (
    CalendarMonth,
    DayAction,
    DayCell,
    WorkoutRecord,
    DAY_COMPLETED,
    DAY_EMPTY,
    DAY_PLANNED,
)
from tools import DateTools, MathTools


def build_month(
    year: int,
    month: int,
    completed_dates: Iterable,
    planned_dates: Iterable,
    today,
) -> CalendarMonth:
    """Lay out ``year``/``month`` as Monday-first weeks of day cells.

    A date present in both ``completed_dates`` and ``planned_dates`` is shown
    as completed.
    """
    completed = {DateTools.normalize_date(d) for d in completed_dates}
    planned = {DateTools.normalize_date(d) for d in planned_dates}
    today = DateTools.normalize_date(today)
    weeks: list[list[Optional[DayCell]]] = []
    for row in DateTools.month_grid(year, month):
        cells: list[Optional[DayCell]] = []
        for day in row:
            if day is None:
                cells.append(None)
                continue
            date = datetime.date(year, month, day)
            if date in completed:
                state = DAY_COMPLETED
            elif date in planned:
                state = DAY_PLANNED
            else:
                state = DAY_EMPTY
            cells.append(DayCell(day=day, date=date, state=state, is_today=date == today))
        weeks.append(cells)
    return CalendarMonth(year=year, month=month, weeks=weeks)


def day_click(
    date,
    history: Iterable[WorkoutRecord],
    planned: Iterable[WorkoutRecord],
) -> DayAction:
    """Decide what tapping ``date`` on the calendar should open."""
    day = DateTools.normalize_date(date)
    done = [w for w in history if w.completed and DateTools.normalize_date(w.date) == day]
    plans = [
        w for w in planned if not w.completed and DateTools.normalize_date(w.date) == day
    ]
    if done:
        return DayAction(action="show_completed", date=day, workouts=done, planned=plans)
    if plans:
        return DayAction(action="show_planned", date=day, planned=plans, deletable=True)
    return DayAction(action="create_plan", date=day)


def progress_weight(weights: Iterable, completed_sets: int) -> float:
    """Average logged weight per completed set.

    Unparseable or empty weights are skipped but the divisor stays the
    number of completed sets.
    """
    if completed_sets <= 0:
        return 0.0
    total = 0.0
    for w in weights:
        if w is None or w == "":
            continue
        total += MathTools.safe_float(w, 0.0)
    return total / completed_sets


class PlannerService:
    """Handles planned workouts, calendar views and workout completion."""

    def __init__(
        self,
        workout_repo: WorkoutHistoryRepository,
        progress_repo: ExerciseProgressRepository,
    ) -> None:
        self.workouts = workout_repo
        self.progress = progress_repo

    def add_planned_workout(
        self,
        user_id: str,
        date,
        program_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        return self.workouts.create(
            user_id,
            DateTools.normalize_date(date).isoformat(),
            False,
            None,
            notes,
            program_id,
        )

    def delete_planned_workout(self, plan_id: int) -> bool:
        return self.workouts.delete_planned(plan_id)

    def complete_workout(
        self,
        user_id: str,
        date,
        duration_minutes: Optional[int],
        exercises: List[dict],
        program_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> dict:
        """Store a finished session and its exercise progress entries.

        Each exercise dict carries ``name``, ``reps``, ``completed_sets``,
        ``weights`` (one entry per set) and optional ``notes``. A progress
        entry is written only for exercises whose average weight is above 0.
        """
        day = DateTools.normalize_date(date).isoformat()
        workout_id = self.workouts.create(
            user_id, day, True, duration_minutes, notes, program_id
        )
        progress_ids: list[int] = []
        for ex in exercises:
            completed_sets = MathTools.safe_int(ex.get("completed_sets"), 0)
            if completed_sets <= 0:
                continue
            weight = progress_weight(ex.get("weights") or [], completed_sets)
            if weight <= 0:
                continue
            progress_ids.append(
                self.progress.add(
                    user_id,
                    ex["name"],
                    weight,
                    ex.get("reps", 0),
                    completed_sets,
                    day,
                    ex.get("notes"),
                )
            )
        return {"workout_id": workout_id, "progress_ids": progress_ids}

    def month(self, user_id: str, year: int, month: int, today) -> CalendarMonth:
        first, last = DateTools.month_bounds(year, month)
        completed = self.workouts.fetch_completed_dates(
            user_id, first.isoformat(), last.isoformat()
        )
        planned = [p.date for p in self.workouts.fetch_planned(user_id)]
        return build_month(year, month, completed, planned, today)

    def day_action(self, user_id: str, date) -> DayAction:
        day = DateTools.normalize_date(date).isoformat()
        history = self.workouts.fetch_history(user_id, day, day, completed=True)
        return day_click(day, history, self.workouts.fetch_planned(user_id))
