import os
import sqlite3
import sys

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import Database, WorkoutHistoryRepository


class TestSchemaMigration:
    def test_adds_missing_columns_and_keeps_rows(self, tmp_path):
        db_file = tmp_path / "test.db"
        conn = sqlite3.connect(str(db_file))
        conn.execute(
            "CREATE TABLE workout_history (id INTEGER PRIMARY KEY AUTOINCREMENT, user_id TEXT NOT NULL, date TEXT NOT NULL, completed INTEGER NOT NULL DEFAULT 0)"
        )
        conn.execute(
            "INSERT INTO workout_history (user_id, date, completed) VALUES ('u1', '2024-01-05', 1)"
        )
        conn.execute("CREATE TABLE workout_history_old (id INTEGER)")
        conn.commit()
        conn.close()

        Database(str(db_file))

        conn = sqlite3.connect(str(db_file))
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='workout_history_old'"
        )
        assert cur.fetchone() is None
        cur = conn.execute("PRAGMA table_info(workout_history)")
        cols = [row[1] for row in cur.fetchall()]
        assert "duration_minutes" in cols
        assert "program_id" in cols
        conn.close()

        records = WorkoutHistoryRepository(str(db_file)).fetch_history("u1")
        assert len(records) == 1
        assert records[0].completed is True
        assert records[0].duration_minutes is None

    def test_default_settings_seeded(self, tmp_path):
        db_file = tmp_path / "test.db"
        Database(str(db_file))
        conn = sqlite3.connect(str(db_file))
        rows = dict(conn.execute("SELECT key, value FROM settings").fetchall())
        conn.close()
        assert rows["weekly_summary_enabled"] == "1"
        assert rows["language"] == "en"
