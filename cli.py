import argparse
import datetime
import json
import logging
import shutil
from typing import Optional

from config import default_paths
from models import DAY_COMPLETED, DAY_PLANNED
from rest_api import TrackerAPI
from tools import DateTools, FixedClock, SystemClock


def _clock(now: Optional[str]):
    if now:
        return FixedClock(datetime.datetime.fromisoformat(now))
    return SystemClock()


def backup_db(db_path: str, backup_path: str) -> None:
    shutil.copy(db_path, backup_path)


def restore_db(backup_path: str, db_path: str) -> None:
    shutil.copy(backup_path, db_path)


def demo_data(db_path: str, yaml_path: str, user_id: str = "demo", today=None) -> None:
    """Populate the database with two weeks of demo history if empty."""
    api = TrackerAPI(db_path=db_path, yaml_path=yaml_path)
    if api.workouts.fetch_history(user_id, limit=1):
        print("Database already contains workouts")
        return
    today = DateTools.normalize_date(today or datetime.date.today())
    for offset in (13, 11, 9, 6, 4, 2, 1, 0):
        day = DateTools.add_days(today, -offset)
        api.planner.complete_workout(
            user_id,
            day,
            45,
            [
                {
                    "name": "Bench Press",
                    "reps": "8-10",
                    "completed_sets": 3,
                    "weights": [60 + (13 - offset), 60 + (13 - offset), 60 + (13 - offset)],
                },
                {
                    "name": "Squat",
                    "reps": "5",
                    "completed_sets": 3,
                    "weights": [100, 100, 100],
                },
            ],
        )
    api.planner.add_planned_workout(user_id, DateTools.add_days(today, 2))
    api.weights.add(user_id, 80.0, today.isoformat())
    print("Demo data inserted")


def print_stats(api: TrackerAPI, user_id: str) -> None:
    today = api.clock.now().date()
    pr = api.statistics.latest_pr(user_id)
    report = {
        "stats": api.statistics.workout_stats(user_id, today).to_dict(),
        "volume": api.statistics.weekly_volume(user_id, today).to_dict(),
        "latest_pr": pr.to_dict() if pr else None,
        "monthly_minutes": api.statistics.monthly_minutes(user_id, today),
    }
    print(json.dumps(report, indent=2, ensure_ascii=False))


def render_month(api: TrackerAPI, user_id: str, year: int, month: int) -> str:
    cal = api.planner.month(user_id, year, month, api.clock.now().date())
    lines = [f"{year}-{month:02d}", "Mo  Tu  We  Th  Fr  Sa  Su"]
    marks = {DAY_COMPLETED: "*", DAY_PLANNED: "+"}
    for week in cal.weeks:
        cells = []
        for cell in week:
            if cell is None:
                cells.append("   ")
                continue
            mark = marks.get(cell.state, " ")
            if cell.is_today and mark == " ":
                mark = "<"
            cells.append(f"{cell.day:>2}{mark}")
        lines.append(" ".join(cells).rstrip())
    lines.append("* completed  + planned  < today")
    return "\n".join(lines)


def main(argv=None) -> None:
    db_default, yaml_default = default_paths()
    parser = argparse.ArgumentParser(description="Workout tracking utilities")
    parser.add_argument("--db", default=db_default)
    parser.add_argument("--yaml", default=yaml_default)
    parser.add_argument("--now", help="ISO timestamp used instead of the current time")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="cmd", required=True)

    st = sub.add_parser("stats")
    st.add_argument("--user", required=True)

    cal = sub.add_parser("calendar")
    cal.add_argument("--user", required=True)
    cal.add_argument("--year", type=int)
    cal.add_argument("--month", type=int)

    sub.add_parser("foreground")

    bkp = sub.add_parser("backup")
    bkp.add_argument("--out", default="backup.db")

    rst = sub.add_parser("restore")
    rst.add_argument("--in", dest="src", default="backup.db")

    demo = sub.add_parser("demo")
    demo.add_argument("--user", default="demo")

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    if args.cmd == "backup":
        backup_db(args.db, args.out)
        return
    if args.cmd == "restore":
        restore_db(args.src, args.db)
        return
    if args.cmd == "demo":
        demo_data(args.db, args.yaml, args.user)
        return

    api = TrackerAPI(db_path=args.db, yaml_path=args.yaml, clock=_clock(args.now))
    if args.cmd == "stats":
        print_stats(api, args.user)
    elif args.cmd == "calendar":
        today = api.clock.now().date()
        print(render_month(api, args.user, args.year or today.year, args.month or today.month))
    elif args.cmd == "foreground":
        result = api.notifier.on_app_foreground(
            api.notification_settings.get(), api.clock.now()
        )
        print(json.dumps(result.to_dict() if result else None, indent=2))


if __name__ == "__main__":
    main()
