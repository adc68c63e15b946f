import datetime
import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from models import ExerciseProgressEntry
from stats_service import latest_pr


def entry(name, weight, date, reps=5):
    return ExerciseProgressEntry(
        id=None,
        user_id="u1",
        exercise_name=name,
        weight=weight,
        reps=reps,
        sets=3,
        date=datetime.date.fromisoformat(date),
    )


class LatestPRTest(unittest.TestCase):
    def test_most_recent_of_per_exercise_maxima(self) -> None:
        pr = latest_pr(
            [
                entry("Bench", 60, "2024-01-01"),
                entry("Bench", 65, "2024-01-10"),
                entry("Squat", 100, "2024-01-05"),
            ]
        )
        self.assertEqual(pr.exercise_name, "Bench")
        self.assertEqual(pr.weight, 65)
        self.assertEqual(pr.date, datetime.date(2024, 1, 10))

    def test_lighter_recent_set_is_not_a_record(self) -> None:
        pr = latest_pr(
            [
                entry("Squat", 120, "2024-01-02"),
                entry("Squat", 100, "2024-01-20"),
                entry("Bench", 80, "2024-01-08"),
            ]
        )
        self.assertEqual((pr.exercise_name, pr.weight), ("Bench", 80))

    def test_equal_weight_prefers_later_date(self) -> None:
        pr = latest_pr(
            [
                entry("Deadlift", 140, "2024-02-01", reps=3),
                entry("Deadlift", 140, "2024-02-15", reps=2),
            ]
        )
        self.assertEqual(pr.date, datetime.date(2024, 2, 15))
        self.assertEqual(pr.reps, 2)

    def test_full_tie_keeps_input_order(self) -> None:
        pr = latest_pr(
            [
                entry("Row", 70, "2024-03-01", reps=8),
                entry("Row", 70, "2024-03-01", reps=6),
                entry("Press", 50, "2024-03-01"),
            ]
        )
        self.assertEqual(pr.exercise_name, "Row")
        self.assertEqual(pr.reps, 8)

    def test_malformed_weight_counts_as_zero(self) -> None:
        pr = latest_pr(
            [
                entry("Curl", "twenty", "2024-01-09"),
                entry("Curl", "15", "2024-01-02"),
            ]
        )
        self.assertEqual(pr.weight, 15.0)
        self.assertEqual(pr.date, datetime.date(2024, 1, 2))

    def test_weight_with_unit_text(self) -> None:
        pr = latest_pr(
            [
                entry("Curl", "17.5 kg", "2024-01-09"),
                entry("Curl", "15kg", "2024-01-02"),
            ]
        )
        self.assertEqual(pr.weight, 17.5)
        self.assertEqual(pr.date, datetime.date(2024, 1, 9))

    def test_empty_history(self) -> None:
        self.assertIsNone(latest_pr([]))

    def test_to_dict(self) -> None:
        pr = latest_pr([entry("Bench", "62.5", "2024-01-01")])
        self.assertEqual(
            pr.to_dict(),
            {"exerciseName": "Bench", "weight": 62.5, "reps": 5, "date": "2024-01-01"},
        )


if __name__ == "__main__":
    unittest.main()
