import datetime
import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from tools import DateTools, InvalidDateError, MathTools


class DateToolsTest(unittest.TestCase):
    def test_normalize_strips_time(self) -> None:
        self.assertEqual(
            DateTools.normalize_date("2024-01-07T23:30:00+03:00"),
            datetime.date(2024, 1, 7),
        )
        self.assertEqual(
            DateTools.normalize_date("2024-01-07 08:15:00"),
            datetime.date(2024, 1, 7),
        )
        self.assertEqual(
            DateTools.normalize_date(datetime.datetime(2024, 1, 7, 23, 59)),
            datetime.date(2024, 1, 7),
        )
        self.assertEqual(DateTools.normalize_date("2024-1-7"), datetime.date(2024, 1, 7))

    def test_normalize_rejects_garbage(self) -> None:
        for raw in ["", "yesterday", "2024-02-30", "07/01/2024", None, 20240107]:
            with self.assertRaises(InvalidDateError):
                DateTools.normalize_date(raw)

    def test_invalid_date_is_value_error(self) -> None:
        self.assertTrue(issubclass(InvalidDateError, ValueError))

    def test_week_bounds_monday_start(self) -> None:
        sunday = datetime.date(2024, 1, 7)
        monday = datetime.date(2024, 1, 1)
        self.assertEqual(DateTools.week_bounds(sunday), (monday, sunday))
        self.assertEqual(DateTools.week_bounds(monday), (monday, sunday))
        self.assertEqual(
            DateTools.week_bounds("2024-01-10T12:00:00"),
            (datetime.date(2024, 1, 8), datetime.date(2024, 1, 14)),
        )

    def test_days_between_ignores_time_of_day(self) -> None:
        self.assertEqual(DateTools.days_between("2024-03-09T23:00:00", "2024-03-11T01:00:00"), 2)
        self.assertEqual(DateTools.days_between("2024-03-11", "2024-03-09"), -2)
        self.assertEqual(DateTools.days_between("2024-03-31", "2024-03-31T23:59:59"), 0)

    def test_add_days_crosses_months(self) -> None:
        self.assertEqual(DateTools.add_days("2024-02-28", 2), datetime.date(2024, 3, 1))
        self.assertEqual(DateTools.add_days("2024-01-01T08:00:00", -1), datetime.date(2023, 12, 31))

    def test_month_grid_february_leap_year(self) -> None:
        grid = DateTools.month_grid(2024, 2)
        self.assertEqual(grid[0], [None, None, None, 1, 2, 3, 4])
        self.assertEqual(grid[-1], [26, 27, 28, 29])
        self.assertEqual(len(grid), 5)

    def test_month_grid_starting_on_monday(self) -> None:
        grid = DateTools.month_grid(2024, 1)
        self.assertEqual(grid[0], [1, 2, 3, 4, 5, 6, 7])

    def test_month_navigation_wraps_year(self) -> None:
        self.assertEqual(DateTools.previous_month(2024, 1), (2023, 12))
        self.assertEqual(DateTools.next_month(2024, 12), (2025, 1))
        self.assertEqual(DateTools.next_month(2024, 5), (2024, 6))
        self.assertEqual(
            DateTools.month_bounds(2023, 2),
            (datetime.date(2023, 2, 1), datetime.date(2023, 2, 28)),
        )


class MathToolsTest(unittest.TestCase):
    def test_safe_parsers(self) -> None:
        self.assertEqual(MathTools.safe_int("8-10"), 8)
        self.assertEqual(MathTools.safe_int("abc"), 0)
        self.assertEqual(MathTools.safe_int(None, 1), 1)
        self.assertEqual(MathTools.safe_float("62.5"), 62.5)
        self.assertEqual(MathTools.safe_float("heavy"), 0.0)
        self.assertEqual(MathTools.safe_float("nan"), 0.0)

    def test_safe_float_reads_leading_number(self) -> None:
        self.assertEqual(MathTools.safe_float("60kg"), 60.0)
        self.assertEqual(MathTools.safe_float(" 62.5 kg"), 62.5)
        self.assertEqual(MathTools.safe_float(".5"), 0.5)
        self.assertEqual(MathTools.safe_float("kg 60"), 0.0)
        self.assertEqual(MathTools.safe_float("inf"), 0.0)
        self.assertEqual(MathTools.entry_volume("60kg", 5, 3), 900.0)

    def test_entry_volume_defaults(self) -> None:
        self.assertEqual(MathTools.entry_volume("60", "8-10", "x"), 480.0)
        self.assertEqual(MathTools.entry_volume("??", 10, 3), 0.0)
        self.assertEqual(MathTools.entry_volume(50, None, 2), 0.0)

    def test_percentage_change(self) -> None:
        self.assertEqual(MathTools.percentage_change(500, 0), 100)
        self.assertEqual(MathTools.percentage_change(500, 1000), -50)
        self.assertEqual(MathTools.percentage_change(0, 0), 0)
        self.assertEqual(MathTools.percentage_change(0, 400), -100)
        self.assertEqual(MathTools.percentage_change(1005, 1000), 1)


if __name__ == "__main__":
    unittest.main()
