from __future__ import annotations
import datetime
from dataclasses import dataclass, field
from typing import Any, Optional


DAY_COMPLETED = "completed"
DAY_PLANNED = "planned"
DAY_EMPTY = "empty"


def _jsonable(value: Any) -> Any:
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value


@dataclass(frozen=True)
class WorkoutRecord:
    """A finished (``completed``) or planned workout on one calendar date."""

    id: Optional[int]
    user_id: str
    date: datetime.date
    completed: bool
    duration_minutes: Optional[int] = None
    notes: Optional[str] = None
    program_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "date": self.date.isoformat(),
            "completed": self.completed,
            "duration_minutes": self.duration_minutes,
            "notes": self.notes,
            "program_id": self.program_id,
        }


@dataclass(frozen=True)
class ExerciseProgressEntry:
    """Weight logged for one exercise in one session.

    ``weight``, ``reps`` and ``sets`` keep whatever was stored; analytics
    parse them leniently.
    """

    id: Optional[int]
    user_id: str
    exercise_name: str
    weight: Any
    reps: Any
    sets: Any
    date: datetime.date
    notes: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "exercise_name": self.exercise_name,
            "weight": self.weight,
            "reps": self.reps,
            "sets": self.sets,
            "date": self.date.isoformat(),
            "notes": self.notes,
        }


@dataclass(frozen=True)
class WorkoutStats:
    total_workouts: int
    current_weight: Optional[float]
    workout_streak: int

    def to_dict(self) -> dict:
        return {
            "totalWorkouts": self.total_workouts,
            "currentWeight": self.current_weight,
            "workoutStreak": self.workout_streak,
        }


@dataclass(frozen=True)
class VolumeStats:
    current_volume: float
    previous_volume: float
    percentage_change: int

    def to_dict(self) -> dict:
        return {
            "currentVolume": self.current_volume,
            "previousVolume": self.previous_volume,
            "percentageChange": self.percentage_change,
        }


@dataclass(frozen=True)
class PRRecord:
    exercise_name: str
    weight: float
    reps: Any
    date: datetime.date

    def to_dict(self) -> dict:
        return {
            "exerciseName": self.exercise_name,
            "weight": self.weight,
            "reps": self.reps,
            "date": self.date.isoformat(),
        }


@dataclass(frozen=True)
class WeekDay:
    date: datetime.date
    completed: bool

    def to_dict(self) -> dict:
        return {"date": self.date.isoformat(), "completed": self.completed}


@dataclass(frozen=True)
class DayCell:
    """One populated day of a calendar month.

    ``state`` is one of ``completed``, ``planned`` or ``empty``; ``is_today``
    is independent of it.
    """

    day: int
    date: datetime.date
    state: str
    is_today: bool = False

    def to_dict(self) -> dict:
        return {
            "day": self.day,
            "date": self.date.isoformat(),
            "state": self.state,
            "isToday": self.is_today,
        }


@dataclass(frozen=True)
class CalendarMonth:
    year: int
    month: int
    weeks: list[list[Optional[DayCell]]]

    def cells(self) -> list[DayCell]:
        """Return every populated cell in day order."""
        return [c for week in self.weeks for c in week if c is not None]

    def to_dict(self) -> dict:
        return {
            "year": self.year,
            "month": self.month,
            "weeks": [
                [c.to_dict() if c is not None else None for c in week]
                for week in self.weeks
            ],
        }


@dataclass(frozen=True)
class DayAction:
    """Outcome of tapping a calendar day.

    ``action`` is ``show_completed``, ``show_planned`` or ``create_plan``.
    """

    action: str
    date: datetime.date
    workouts: list[WorkoutRecord] = field(default_factory=list)
    planned: list[WorkoutRecord] = field(default_factory=list)
    deletable: bool = False

    def to_dict(self) -> dict:
        return {
            "action": self.action,
            "date": self.date.isoformat(),
            "workouts": _jsonable(self.workouts),
            "planned": _jsonable(self.planned),
            "deletable": self.deletable,
        }
