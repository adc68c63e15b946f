import datetime
import os
import sys
import tempfile
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from db import WorkoutHistoryRepository, ExerciseProgressRepository
from models import WorkoutRecord
from planner_service import PlannerService, build_month, day_click, progress_weight
from tools import DateTools


def record(date, completed, rid=1, notes=None):
    return WorkoutRecord(
        id=rid,
        user_id="u1",
        date=datetime.date.fromisoformat(date),
        completed=completed,
        notes=notes,
    )


class BuildMonthTest(unittest.TestCase):
    def test_states_and_today_ring(self) -> None:
        cal = build_month(
            2024,
            2,
            completed_dates=["2024-02-05"],
            planned_dates=["2024-02-05", "2024-02-06T00:00:00"],
            today=datetime.date(2024, 2, 6),
        )
        cells = {c.day: c for c in cal.cells()}
        self.assertEqual(cells[5].state, "completed")
        self.assertEqual(cells[6].state, "planned")
        self.assertTrue(cells[6].is_today)
        self.assertFalse(cells[5].is_today)
        self.assertEqual(cells[7].state, "empty")
        self.assertEqual(cal.weeks[0][:3], [None, None, None])

    def test_cell_counts_for_every_month(self) -> None:
        for month in range(1, 13):
            cal = build_month(2024, month, [], [], datetime.date(2023, 1, 1))
            first = datetime.date(2024, month, 1)
            leading = (DateTools.sunday_based_weekday(first) + 6) % 7
            self.assertEqual(len(cal.cells()), DateTools.days_in_month(2024, month))
            self.assertEqual(cal.weeks[0].count(None), leading)
            flat = [c for week in cal.weeks for c in week]
            self.assertEqual(flat.count(None), leading)
            self.assertTrue(all(len(week) == 7 for week in cal.weeks[:-1]))

    def test_completed_always_wins(self) -> None:
        days = [f"2024-03-{d:02d}" for d in range(1, 32)]
        cal = build_month(2024, 3, days, days, "2024-03-15")
        self.assertTrue(all(c.state == "completed" for c in cal.cells()))


class DayClickTest(unittest.TestCase):
    def test_completed_records_shown(self) -> None:
        history = [record("2024-02-05", True, 1), record("2024-02-06", True, 2)]
        action = day_click("2024-02-05", history, [record("2024-02-05", False, 3)])
        self.assertEqual(action.action, "show_completed")
        self.assertEqual([w.id for w in action.workouts], [1])

    def test_planned_offers_delete(self) -> None:
        action = day_click(
            "2024-02-07", [], [record("2024-02-07", False, 4, notes="legs")]
        )
        self.assertEqual(action.action, "show_planned")
        self.assertTrue(action.deletable)
        self.assertEqual(action.planned[0].notes, "legs")

    def test_empty_day_opens_plan_creation(self) -> None:
        action = day_click(datetime.date(2024, 2, 8), [], [])
        self.assertEqual(action.action, "create_plan")
        self.assertEqual(action.to_dict()["date"], "2024-02-08")


class PlannerServiceTest(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        db_path = os.path.join(self.tmp.name, "test.db")
        self.workouts = WorkoutHistoryRepository(db_path)
        self.progress = ExerciseProgressRepository(db_path)
        self.planner = PlannerService(self.workouts, self.progress)

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def test_progress_weight_divides_by_completed_sets(self) -> None:
        self.assertEqual(progress_weight(["60", "", "abc"], 3), 20.0)
        self.assertEqual(progress_weight([], 0), 0.0)

    def test_complete_workout_writes_progress_for_weighted_exercises(self) -> None:
        result = self.planner.complete_workout(
            "u1",
            "2024-02-05T18:30:00",
            50,
            [
                {"name": "Bench", "reps": "8-10", "completed_sets": 2, "weights": ["60", "62"]},
                {"name": "Plank", "reps": "1", "completed_sets": 3, "weights": ["", "", ""]},
                {"name": "Squat", "reps": "5", "completed_sets": 0, "weights": ["100"]},
            ],
        )
        self.assertEqual(len(result["progress_ids"]), 1)
        entries = self.progress.fetch_progress("u1")
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].exercise_name, "Bench")
        self.assertEqual(float(entries[0].weight), 61.0)
        self.assertEqual(entries[0].date, datetime.date(2024, 2, 5))
        detail = self.workouts.fetch_detail(result["workout_id"])
        self.assertTrue(detail.completed)
        self.assertEqual(detail.duration_minutes, 50)

    def test_delete_only_planned(self) -> None:
        plan_id = self.planner.add_planned_workout("u1", "2024-02-10", notes="push")
        done = self.planner.complete_workout("u1", "2024-02-09", 40, [])
        self.assertFalse(self.planner.delete_planned_workout(done["workout_id"]))
        self.assertTrue(self.planner.delete_planned_workout(plan_id))
        self.assertEqual(self.workouts.fetch_planned("u1"), [])
        self.assertIsNotNone(self.workouts.fetch_detail(done["workout_id"]))

    def test_month_and_day_action_from_repository(self) -> None:
        self.planner.complete_workout("u1", "2024-02-05", 40, [])
        self.planner.add_planned_workout("u1", "2024-02-05")
        self.planner.add_planned_workout("u1", "2024-02-12")
        self.planner.add_planned_workout("u2", "2024-02-13")
        cal = self.planner.month("u1", 2024, 2, datetime.date(2024, 2, 6))
        cells = {c.day: c.state for c in cal.cells()}
        self.assertEqual(cells[5], "completed")
        self.assertEqual(cells[12], "planned")
        self.assertEqual(cells[13], "empty")
        self.assertEqual(self.planner.day_action("u1", "2024-02-12").action, "show_planned")
        self.assertEqual(self.planner.day_action("u1", "2024-02-14").action, "create_plan")


if __name__ == "__main__":
    unittest.main()
