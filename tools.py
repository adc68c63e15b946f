import calendar
import datetime
import math
import re
from typing import List, Optional, Tuple


class InvalidDateError(ValueError):
    """Raised when a value cannot be interpreted as a calendar date."""


class SystemClock:
    """Clock returning the local wall-clock time."""

    def now(self) -> datetime.datetime:
        return datetime.datetime.now()


class FixedClock:
    """Clock frozen at ``instant``; used by tests and the CLI ``--now`` flag."""

    def __init__(self, instant: datetime.datetime) -> None:
        self.instant = instant

    def now(self) -> datetime.datetime:
        return self.instant


class DateTools:
    """Calendar arithmetic shared by every analytics component.

    All dates are plain ``datetime.date`` values. Anything carrying a time
    of day is cut down to its calendar date as written, without timezone
    conversion, so a record stored as ``2024-01-07T23:30:00+03:00`` stays
    on the 7th.
    """

    _ISO_DATE = re.compile(r"^\s*(\d{4})-(\d{1,2})-(\d{1,2})(?:[T ].*)?\s*$")

    @classmethod
    def normalize_date(cls, raw) -> datetime.date:
        """Return ``raw`` as a ``datetime.date``.

        Accepts ``date``/``datetime`` objects and ISO strings in date-only or
        date-time form. Raises ``InvalidDateError`` on anything else.
        """
        if isinstance(raw, datetime.datetime):
            return raw.date()
        if isinstance(raw, datetime.date):
            return raw
        if not isinstance(raw, str):
            raise InvalidDateError(f"unsupported date value: {raw!r}")
        match = cls._ISO_DATE.match(raw)
        if match is None:
            raise InvalidDateError(f"invalid date: {raw!r}")
        year, month, day = (int(g) for g in match.groups())
        try:
            return datetime.date(year, month, day)
        except ValueError as e:
            raise InvalidDateError(f"invalid date: {raw!r}") from e

    @staticmethod
    def sunday_based_weekday(date: datetime.date) -> int:
        """Return weekday with Sunday=0 .. Saturday=6."""
        return (date.weekday() + 1) % 7

    @classmethod
    def week_bounds(cls, date) -> Tuple[datetime.date, datetime.date]:
        """Return the Monday and Sunday of the week containing ``date``."""
        day = cls.normalize_date(date)
        monday = day - datetime.timedelta(
            days=(cls.sunday_based_weekday(day) + 6) % 7
        )
        return monday, monday + datetime.timedelta(days=6)

    @classmethod
    def days_between(cls, a, b) -> int:
        """Whole days from ``a`` to ``b`` (``b - a``)."""
        return (cls.normalize_date(b) - cls.normalize_date(a)).days

    @classmethod
    def add_days(cls, date, days: int) -> datetime.date:
        return cls.normalize_date(date) + datetime.timedelta(days=days)

    @staticmethod
    def days_in_month(year: int, month: int) -> int:
        return calendar.monthrange(year, month)[1]

    @classmethod
    def month_bounds(cls, year: int, month: int) -> Tuple[datetime.date, datetime.date]:
        first = datetime.date(year, month, 1)
        return first, first.replace(day=cls.days_in_month(year, month))

    @staticmethod
    def previous_month(year: int, month: int) -> Tuple[int, int]:
        if month == 1:
            return year - 1, 12
        return year, month - 1

    @staticmethod
    def next_month(year: int, month: int) -> Tuple[int, int]:
        if month == 12:
            return year + 1, 1
        return year, month + 1

    @classmethod
    def month_grid(cls, year: int, month: int) -> List[List[Optional[int]]]:
        """Return Monday-aligned weeks of day numbers.

        The first week is left-padded with ``None``; the last week simply
        ends at the last day of the month.
        """
        first = datetime.date(year, month, 1)
        offset = (cls.sunday_based_weekday(first) + 6) % 7
        weeks: List[List[Optional[int]]] = []
        week: List[Optional[int]] = [None] * offset
        total = cls.days_in_month(year, month)
        for day in range(1, total + 1):
            week.append(day)
            if len(week) == 7 or day == total:
                weeks.append(week)
                week = []
        return weeks


class MathTools:
    """Numeric helpers tolerant of user-entered values."""

    _LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
    _LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

    @classmethod
    def safe_float(cls, value, default: float = 0.0) -> float:
        """Return the leading number of ``value`` as a finite float or ``default``.

        Strings such as ``"62.5 kg"`` yield ``62.5``.
        """
        if isinstance(value, bool) or value is None:
            return default
        if isinstance(value, (int, float)):
            result = float(value)
        else:
            match = cls._LEADING_FLOAT.match(str(value))
            if match is None:
                return default
            result = float(match.group(1))
        if math.isnan(result) or math.isinf(result):
            return default
        return result

    @classmethod
    def safe_int(cls, value, default: int = 0) -> int:
        """Return the leading integer of ``value`` or ``default``.

        Strings such as ``"8-10"`` yield ``8``.
        """
        if isinstance(value, bool) or value is None:
            return default
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            if math.isnan(value) or math.isinf(value):
                return default
            return int(value)
        match = cls._LEADING_INT.match(str(value))
        if match is None:
            return default
        return int(match.group(1))

    @classmethod
    def entry_volume(cls, weight, reps, sets) -> float:
        """Return ``weight * reps * sets`` using the tolerant parsers."""
        w = cls.safe_float(weight, 0.0)
        r = cls.safe_int(reps, 0)
        s = cls.safe_int(sets, 1) or 1
        return w * r * s

    @staticmethod
    def round_half_up(value: float) -> int:
        """Round to the nearest integer, halves towards positive infinity."""
        return int(math.floor(value + 0.5))

    @classmethod
    def percentage_change(cls, current: float, previous: float) -> int:
        """Return the rounded change from ``previous`` to ``current`` in percent.

        No previous activity reports +100 when there is current activity and
        0 otherwise.
        """
        if previous > 0:
            return cls.round_half_up(100.0 * (current - previous) / previous)
        return 100 if current > 0 else 0
