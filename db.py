import sqlite3
import datetime
from contextlib import contextmanager
from typing import List, Tuple, Optional

from config import YamlConfig
from models import WorkoutRecord, ExerciseProgressEntry
from settings_schema import validate_settings, BOOL_KEYS
from tools import DateTools


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "workout_history": (
            """CREATE TABLE workout_history (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    date TEXT NOT NULL,
                    completed INTEGER NOT NULL DEFAULT 0,
                    duration_minutes INTEGER,
                    notes TEXT,
                    program_id TEXT
                );""",
            [
                "id",
                "user_id",
                "date",
                "completed",
                "duration_minutes",
                "notes",
                "program_id",
            ],
        ),
        "exercise_progress": (
            """CREATE TABLE exercise_progress (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    exercise_name TEXT NOT NULL,
                    weight TEXT,
                    reps TEXT,
                    sets TEXT,
                    date TEXT NOT NULL,
                    notes TEXT
                );""",
            [
                "id",
                "user_id",
                "exercise_name",
                "weight",
                "reps",
                "sets",
                "date",
                "notes",
            ],
        ),
        "weight_history": (
            """CREATE TABLE weight_history (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    weight REAL NOT NULL,
                    date TEXT NOT NULL
                );""",
            ["id", "user_id", "weight", "date"],
        ),
        "settings": (
            """CREATE TABLE settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );""",
            ["key", "value"],
        ),
        "scheduled_notifications": (
            """CREATE TABLE scheduled_notifications (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    kind TEXT NOT NULL,
                    fire_at TEXT NOT NULL,
                    title TEXT NOT NULL,
                    body TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'pending',
                    created_at TEXT NOT NULL
                );""",
            ["id", "kind", "fire_at", "title", "body", "status", "created_at"],
        ),
    }

    _SETTINGS_DEFAULTS = {
        "weekly_summary_enabled": "1",
        "motivation_reminder_enabled": "1",
        "notification_permission": "1",
        "last_login_date": "",
        "notifications_initialized_date": "",
        "language": "en",
    }

    def __init__(self, db_path: str = "workout.db") -> None:
        self._db_path = db_path
        self._ensure_schema()
        self._init_settings()

    @contextmanager
    def _connection(self):
        connection = sqlite3.connect(self._db_path)
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            conn.execute("PRAGMA foreign_keys=off;")
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)
            conn.execute("PRAGMA foreign_keys=on;")

    def _ensure_table(
        self, conn: sqlite3.Connection, table: str, sql: str, columns: List[str]
    ) -> None:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        if cur.fetchone() is None:
            conn.execute(sql)
            return

        cur = conn.execute(f"PRAGMA table_info({table});")
        existing_cols = [row[1] for row in cur.fetchall()]
        if existing_cols == columns:
            return

        conn.execute(f"DROP TABLE IF EXISTS {table}_old;")
        conn.execute(f"ALTER TABLE {table} RENAME TO {table}_old;")
        conn.execute(sql)

        common = [c for c in existing_cols if c in columns]
        if common:
            cols = ", ".join(common)
            missing = [c for c in columns if c not in existing_cols]
            if missing:
                def default_val(col: str) -> str:
                    if col == "completed":
                        return "0"
                    if col == "status":
                        return "'pending'"
                    return "NULL"

                defaults = ", ".join(default_val(c) for c in missing)
                conn.execute(
                    f"INSERT INTO {table} ({cols}, {', '.join(missing)}) SELECT {cols}, {defaults} FROM {table}_old;"
                )
            else:
                conn.execute(
                    f"INSERT INTO {table} ({cols}) SELECT {cols} FROM {table}_old;"
                )
        conn.execute(f"DROP TABLE {table}_old;")

    def _init_settings(self) -> None:
        with self._connection() as conn:
            for key, value in self._SETTINGS_DEFAULTS.items():
                conn.execute(
                    "INSERT OR IGNORE INTO settings (key, value) VALUES (?, ?);",
                    (key, value),
                )


class BaseRepository(Database):
    """Base repository providing helper methods."""

    def execute(self, query: str, params: Tuple = ()) -> int:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.lastrowid

    def execute_count(self, query: str, params: Tuple = ()) -> int:
        """Execute ``query`` and return the number of affected rows."""
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.rowcount

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()


class WorkoutHistoryRepository(BaseRepository):
    """Repository for completed and planned workouts."""

    _COLUMNS = "id, user_id, date, completed, duration_minutes, notes, program_id"

    @staticmethod
    def _row_to_record(row: Tuple) -> WorkoutRecord:
        return WorkoutRecord(
            id=row[0],
            user_id=row[1],
            date=DateTools.normalize_date(row[2]),
            completed=bool(row[3]),
            duration_minutes=row[4],
            notes=row[5],
            program_id=row[6],
        )

    def create(
        self,
        user_id: str,
        date: str,
        completed: bool,
        duration_minutes: Optional[int] = None,
        notes: Optional[str] = None,
        program_id: Optional[str] = None,
    ) -> int:
        day = DateTools.normalize_date(date)
        return self.execute(
            "INSERT INTO workout_history (user_id, date, completed, duration_minutes, notes, program_id) "
            "VALUES (?, ?, ?, ?, ?, ?);",
            (
                user_id,
                day.isoformat(),
                int(completed),
                duration_minutes,
                notes,
                program_id,
            ),
        )

    def fetch_detail(self, record_id: int) -> Optional[WorkoutRecord]:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM workout_history WHERE id = ?;",
            (record_id,),
        )
        return self._row_to_record(rows[0]) if rows else None

    def fetch_history(
        self,
        user_id: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        completed: Optional[bool] = None,
        limit: Optional[int] = None,
    ) -> List[WorkoutRecord]:
        query = f"SELECT {self._COLUMNS} FROM workout_history WHERE user_id = ?"
        params: list = [user_id]
        if start_date:
            query += " AND date >= ?"
            params.append(DateTools.normalize_date(start_date).isoformat())
        if end_date:
            query += " AND date <= ?"
            params.append(DateTools.normalize_date(end_date).isoformat())
        if completed is not None:
            query += " AND completed = ?"
            params.append(int(completed))
        query += " ORDER BY date DESC, id DESC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)
        rows = self.fetch_all(query + ";", tuple(params))
        return [self._row_to_record(r) for r in rows]

    def fetch_completed_dates(
        self, user_id: str, start_date: str, end_date: str
    ) -> List[datetime.date]:
        rows = self.fetch_all(
            "SELECT DISTINCT date FROM workout_history "
            "WHERE user_id = ? AND completed = 1 AND date >= ? AND date <= ? "
            "ORDER BY date;",
            (
                user_id,
                DateTools.normalize_date(start_date).isoformat(),
                DateTools.normalize_date(end_date).isoformat(),
            ),
        )
        return [DateTools.normalize_date(r[0]) for r in rows]

    def fetch_planned(self, user_id: str) -> List[WorkoutRecord]:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM workout_history "
            "WHERE user_id = ? AND completed = 0 ORDER BY date ASC, id ASC;",
            (user_id,),
        )
        return [self._row_to_record(r) for r in rows]

    def count_completed(self, user_id: str) -> int:
        rows = self.fetch_all(
            "SELECT COUNT(*) FROM workout_history WHERE user_id = ? AND completed = 1;",
            (user_id,),
        )
        return rows[0][0] if rows else 0

    def delete_planned(self, record_id: int) -> bool:
        """Delete a planned workout; completed history is never removed."""
        return (
            self.execute_count(
                "DELETE FROM workout_history WHERE id = ? AND completed = 0;",
                (record_id,),
            )
            > 0
        )


class ExerciseProgressRepository(BaseRepository):
    """Repository for per-exercise weight logs."""

    _COLUMNS = "id, user_id, exercise_name, weight, reps, sets, date, notes"

    @staticmethod
    def _row_to_entry(row: Tuple) -> ExerciseProgressEntry:
        return ExerciseProgressEntry(
            id=row[0],
            user_id=row[1],
            exercise_name=row[2],
            weight=row[3],
            reps=row[4],
            sets=row[5],
            date=DateTools.normalize_date(row[6]),
            notes=row[7],
        )

    def add(
        self,
        user_id: str,
        exercise_name: str,
        weight,
        reps,
        sets,
        date: str,
        notes: Optional[str] = None,
    ) -> int:
        return self.execute(
            "INSERT INTO exercise_progress (user_id, exercise_name, weight, reps, sets, date, notes) "
            "VALUES (?, ?, ?, ?, ?, ?, ?);",
            (
                user_id,
                exercise_name,
                str(weight),
                str(reps),
                str(sets),
                DateTools.normalize_date(date).isoformat(),
                notes,
            ),
        )

    def fetch_progress(
        self,
        user_id: str,
        exercise_name: Optional[str] = None,
        limit: Optional[int] = 50,
    ) -> List[ExerciseProgressEntry]:
        """Return entries newest first, optionally for one exercise."""
        query = f"SELECT {self._COLUMNS} FROM exercise_progress WHERE user_id = ?"
        params: list = [user_id]
        if exercise_name:
            query += " AND exercise_name = ?"
            params.append(exercise_name)
        query += " ORDER BY date DESC, id DESC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)
        rows = self.fetch_all(query + ";", tuple(params))
        return [self._row_to_entry(r) for r in rows]

    def fetch_range(
        self, user_id: str, start_date: str, end_date: str
    ) -> List[ExerciseProgressEntry]:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM exercise_progress "
            "WHERE user_id = ? AND date >= ? AND date <= ? ORDER BY date, id;",
            (
                user_id,
                DateTools.normalize_date(start_date).isoformat(),
                DateTools.normalize_date(end_date).isoformat(),
            ),
        )
        return [self._row_to_entry(r) for r in rows]

    def exercise_names(self, user_id: str) -> List[str]:
        rows = self.fetch_all(
            "SELECT DISTINCT exercise_name FROM exercise_progress "
            "WHERE user_id = ? ORDER BY exercise_name;",
            (user_id,),
        )
        return [r[0] for r in rows]


class WeightHistoryRepository(BaseRepository):
    """Repository for body weight entries."""

    def add(self, user_id: str, weight: float, date: Optional[str] = None) -> int:
        day = DateTools.normalize_date(date or datetime.date.today())
        return self.execute(
            "INSERT INTO weight_history (user_id, weight, date) VALUES (?, ?, ?);",
            (user_id, float(weight), day.isoformat()),
        )

    def fetch_latest_weight(self, user_id: str) -> Optional[float]:
        rows = self.fetch_all(
            "SELECT weight FROM weight_history WHERE user_id = ? "
            "ORDER BY date DESC, id DESC LIMIT 1;",
            (user_id,),
        )
        return float(rows[0][0]) if rows else None

    def fetch_history(self, user_id: str, limit: int = 30) -> List[Tuple[str, float]]:
        rows = self.fetch_all(
            "SELECT date, weight FROM weight_history WHERE user_id = ? "
            "ORDER BY date DESC, id DESC LIMIT ?;",
            (user_id, limit),
        )
        return [(r[0], float(r[1])) for r in rows]


class SettingsRepository(BaseRepository):
    """Repository for general application settings synchronized with YAML."""

    def __init__(
        self, db_path: str = "workout.db", yaml_path: str = "settings.yaml"
    ) -> None:
        super().__init__(db_path)
        self._yaml = YamlConfig(yaml_path)
        self._sync_from_yaml()
        self._sync_to_yaml()

    def _raw_all_settings(self) -> dict:
        rows = self.fetch_all("SELECT key, value FROM settings ORDER BY key;")
        result: dict[str, bool | str] = {}
        for k, v in rows:
            if k in BOOL_KEYS:
                result[k] = v in {"1", "1.0", "true", "True"}
                continue
            result[k] = v
        return result

    def _sync_from_yaml(self) -> None:
        data = self._yaml.load()
        if not data:
            return
        validate_settings(data)
        with self._connection() as conn:
            for key, value in data.items():
                val = "" if value is None else str(value)
                if key in BOOL_KEYS:
                    if val in {"1", "1.0", "true", "True"}:
                        val = "1"
                    else:
                        val = "0"
                conn.execute(
                    "INSERT INTO settings (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value=excluded.value;",
                    (key, val),
                )

    def _sync_to_yaml(self) -> None:
        self._yaml.save(self._raw_all_settings())

    def all_settings(self) -> dict:
        self._sync_from_yaml()
        return self._raw_all_settings()

    def get_text(self, key: str, default: str) -> str:
        self._sync_from_yaml()
        rows = self.fetch_all("SELECT value FROM settings WHERE key = ?;", (key,))
        return rows[0][0] if rows else default

    def set_text(self, key: str, value: str) -> None:
        self.execute(
            "INSERT INTO settings (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value;",
            (key, value),
        )
        self._sync_to_yaml()

    def get_bool(self, key: str, default: bool) -> bool:
        return self.get_text(key, "1" if default else "0") in {
            "1",
            "true",
            "True",
            "1.0",
        }

    def set_bool(self, key: str, value: bool) -> None:
        self.set_text(key, "1" if value else "0")

    def get_date(self, key: str) -> Optional[datetime.date]:
        val = self.get_text(key, "")
        return DateTools.normalize_date(val) if val else None

    def set_date(self, key: str, value: datetime.date) -> None:
        self.set_text(key, DateTools.normalize_date(value).isoformat())


class ScheduledNotificationRepository(BaseRepository):
    """Repository for locally scheduled notifications."""

    _COLUMNS = "id, kind, fire_at, title, body, status, created_at"

    @staticmethod
    def _row_to_dict(row: Tuple) -> dict:
        return {
            "id": row[0],
            "kind": row[1],
            "fire_at": row[2],
            "title": row[3],
            "body": row[4],
            "status": row[5],
            "created_at": row[6],
        }

    def add(self, kind: str, fire_at: datetime.datetime, title: str, body: str) -> int:
        return self.execute(
            "INSERT INTO scheduled_notifications (kind, fire_at, title, body, status, created_at) "
            "VALUES (?, ?, ?, ?, 'pending', ?);",
            (
                kind,
                fire_at.isoformat(),
                title,
                body,
                datetime.datetime.now().isoformat(),
            ),
        )

    def fetch_all_notifications(
        self, kind: Optional[str] = None, status: Optional[str] = None
    ) -> List[dict]:
        query = f"SELECT {self._COLUMNS} FROM scheduled_notifications"
        clauses: list[str] = []
        params: list = []
        if kind is not None:
            clauses.append("kind = ?")
            params.append(kind)
        if status is not None:
            clauses.append("status = ?")
            params.append(status)
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY id;"
        return [self._row_to_dict(r) for r in self.fetch_all(query, tuple(params))]

    def cancel_kind(self, kind: str) -> int:
        return self.execute_count(
            "UPDATE scheduled_notifications SET status = 'cancelled' "
            "WHERE kind = ? AND status = 'pending';",
            (kind,),
        )

    def cancel_all(self) -> int:
        return self.execute_count(
            "UPDATE scheduled_notifications SET status = 'cancelled' "
            "WHERE status = 'pending';"
        )

    def mark_fired(self, until: datetime.datetime) -> List[dict]:
        due = [
            n
            for n in self.fetch_all_notifications(status="pending")
            if datetime.datetime.fromisoformat(n["fire_at"]) <= until
        ]
        for n in due:
            self.execute(
                "UPDATE scheduled_notifications SET status = 'fired' WHERE id = ?;",
                (n["id"],),
            )
            n["status"] = "fired"
        return due
