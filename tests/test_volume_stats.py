import datetime
import os
import sys

import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from models import ExerciseProgressEntry
from stats_service import volume_in_range, weekly_volume_stats


def entry(weight, reps, sets, date, name="Bench Press"):
    return ExerciseProgressEntry(
        id=None,
        user_id="u1",
        exercise_name=name,
        weight=weight,
        reps=reps,
        sets=sets,
        date=datetime.date.fromisoformat(date),
    )


HISTORY = [
    entry(100, 5, 3, "2024-01-01"),
    entry("60", "8-10", "3", "2024-01-03"),
    entry(80, 10, 1, "2024-01-07"),
    entry(50, 10, 1, "2024-01-09"),
    entry(70, 5, 2, "2024-01-14"),
    entry(90, 5, 2, "2024-01-15"),
]


def test_range_is_inclusive():
    assert volume_in_range(HISTORY, "2024-01-01", "2024-01-01") == 1500
    assert volume_in_range(HISTORY, "2024-01-09", "2024-01-14") == 500 + 700


def test_range_outside_history_is_zero():
    assert volume_in_range(HISTORY, "2023-01-01", "2023-12-31") == 0
    assert volume_in_range([], "2024-01-01", "2024-12-31") == 0


@pytest.mark.parametrize(
    "split", ["2024-01-01", "2024-01-03", "2024-01-06", "2024-01-09", "2024-01-14"]
)
def test_range_is_additive(split):
    start, end = "2024-01-01", "2024-01-31"
    after = (datetime.date.fromisoformat(split) + datetime.timedelta(days=1)).isoformat()
    whole = volume_in_range(HISTORY, start, end)
    parts = volume_in_range(HISTORY, start, split) + volume_in_range(HISTORY, after, end)
    assert whole == pytest.approx(parts)


def test_malformed_numbers_never_raise():
    rows = [
        entry("abc", 10, 3, "2024-01-02"),
        entry(20, "x", 3, "2024-01-02"),
        entry(20, 10, "three", "2024-01-02"),
        entry(None, None, None, "2024-01-02"),
    ]
    assert volume_in_range(rows, "2024-01-01", "2024-01-07") == 200


def test_weights_with_units_use_leading_number():
    rows = [entry("60kg", 5, 3, "2024-01-02"), entry("62.5 kg", 10, 1, "2024-01-03")]
    assert volume_in_range(rows, "2024-01-01", "2024-01-07") == 900 + 625


def test_new_activity_from_nothing_is_plus_100():
    stats = weekly_volume_stats([entry(50, 10, 1, "2024-01-09")], "2024-01-10")
    assert stats.previous_volume == 0
    assert stats.current_volume == 500
    assert stats.percentage_change == 100


def test_drop_against_previous_week():
    rows = [entry(100, 10, 1, "2024-01-03"), entry(50, 10, 1, "2024-01-09")]
    stats = weekly_volume_stats(rows, datetime.date(2024, 1, 10))
    assert stats.previous_volume == 1000
    assert stats.current_volume == 500
    assert stats.percentage_change == -50


def test_no_activity_is_zero_change():
    stats = weekly_volume_stats([], "2024-01-10")
    assert stats.to_dict() == {
        "currentVolume": 0,
        "previousVolume": 0,
        "percentageChange": 0,
    }


def test_weeks_run_monday_to_sunday():
    stats = weekly_volume_stats(HISTORY, "2024-01-14")
    # current week 2024-01-08..14, previous 2024-01-01..07
    assert stats.current_volume == 500 + 700
    assert stats.previous_volume == 1500 + 1440 + 800
    assert stats.percentage_change == round(100 * (1200 - 3740) / 3740)
