"""
SQLite-based storage for tasks and their completion days.

Single-writer persistence: each call opens its own connection, commits and
closes it before returning.
"""

import logging
import sqlite3
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Iterator

from streakly.calendar_utils import validate_day
from streakly.config import get_db_path
from streakly.models import Task

logger = logging.getLogger(__name__)


class TaskNotFoundError(Exception):
    """Raised when an operation targets a task that doesn't exist."""


def toggle_day(completed_dates: list[str], day: str) -> list[str]:
    """
    Flip one day in a completion list.

    Present days are removed and absent days are added, so toggling the
    same day twice restores the original set.

    Returns:
        A new sorted list; the input is not modified
    """
    validate_day(day)
    dates = set(completed_dates)
    dates ^= {day}
    return sorted(dates)


class TaskStorage:
    """SQLite-based storage for habit tasks."""

    def __init__(self, db_path: str | Path | None = None):
        """
        Initialize the task storage.

        Args:
            db_path: Path to the SQLite database file.
                     Defaults to STREAKLY_DB_PATH or ~/.streakly/tasks.db
        """
        if db_path is None:
            db_path = get_db_path()
        self.db_path = Path(db_path)
        self._init_db()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Open a connection for one transaction and close it afterwards."""
        with closing(sqlite3.connect(self.db_path)) as conn:
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
            # Commits on success, rolls back on error
            with conn:
                yield conn

    def _init_db(self) -> None:
        """Create tables and indexes if they don't exist."""
        # Ensure parent directory exists
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    color TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    position INTEGER NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS completions (
                    task_id TEXT NOT NULL REFERENCES tasks(id) ON DELETE CASCADE,
                    date TEXT NOT NULL,
                    PRIMARY KEY (task_id, date)
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_completions_date ON completions(date)
            """)
            conn.commit()

    def _load_task(self, conn: sqlite3.Connection, row: sqlite3.Row) -> Task:
        dates = conn.execute(
            "SELECT date FROM completions WHERE task_id = ? ORDER BY date",
            (row["id"],),
        ).fetchall()
        return Task(
            id=row["id"],
            name=row["name"],
            color=row["color"],
            created_at=row["created_at"],
            completed_dates=[d["date"] for d in dates],
        )

    def _write_completions(self, conn: sqlite3.Connection, task: Task) -> None:
        conn.execute("DELETE FROM completions WHERE task_id = ?", (task.id,))
        conn.executemany(
            "INSERT INTO completions (task_id, date) VALUES (?, ?)",
            [(task.id, day) for day in task.completed_dates],
        )

    def get_tasks(self) -> list[Task]:
        """
        Retrieve all tasks.

        Returns:
            Tasks in the order they were added
        """
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT id, name, color, created_at FROM tasks ORDER BY position"
            ).fetchall()
            return [self._load_task(conn, row) for row in rows]

    def get_task(self, task_id: str) -> Task | None:
        """
        Retrieve a single task by ID.

        Returns:
            The task, or None if it doesn't exist
        """
        with self._connect() as conn:
            row = conn.execute(
                "SELECT id, name, color, created_at FROM tasks WHERE id = ?",
                (task_id,),
            ).fetchone()
            return self._load_task(conn, row) if row else None

    def count_tasks(self) -> int:
        with self._connect() as conn:
            return conn.execute("SELECT COUNT(*) FROM tasks").fetchone()[0]

    def add_task(self, task: Task) -> Task:
        """
        Insert a new task.

        Args:
            task: Validated task record

        Returns:
            The stored task

        Raises:
            sqlite3.IntegrityError: If a task with the same ID exists
        """
        with self._connect() as conn:
            position = conn.execute(
                "SELECT COALESCE(MAX(position), -1) + 1 FROM tasks"
            ).fetchone()[0]
            conn.execute(
                """
                INSERT INTO tasks (id, name, color, created_at, position)
                VALUES (?, ?, ?, ?, ?)
                """,
                (task.id, task.name, task.color, task.created_at, position),
            )
            self._write_completions(conn, task)
            conn.commit()

        logger.info("Added task %s (%s)", task.id, task.name)
        return task

    def update_task(self, task: Task) -> Task:
        """
        Replace a task's name, color and completion days.

        The creation day is immutable and is left untouched.

        Raises:
            TaskNotFoundError: If the task doesn't exist
        """
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE tasks SET name = ?, color = ? WHERE id = ?",
                (task.name, task.color, task.id),
            )
            if cursor.rowcount == 0:
                raise TaskNotFoundError(f"Task not found: {task.id}")
            self._write_completions(conn, task)
            conn.commit()

        logger.debug("Updated task %s", task.id)
        return task

    def delete_task(self, task_id: str) -> bool:
        """
        Delete a task and its completions.

        Returns:
            True if a task was deleted, False if it didn't exist
        """
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            conn.commit()
            deleted = cursor.rowcount > 0

        if deleted:
            logger.info("Deleted task %s", task_id)
        return deleted

    def toggle_completion(self, task_id: str, day: str) -> Task | None:
        """
        Mark a day complete, or unmark it if it already is.

        Args:
            task_id: Task to update
            day: Day to flip (YYYY-MM-DD)

        Returns:
            The updated task, or None if the task doesn't exist
        """
        validate_day(day)

        with self._connect() as conn:
            row = conn.execute(
                "SELECT id FROM tasks WHERE id = ?", (task_id,)
            ).fetchone()
            if row is None:
                logger.warning("Toggle for unknown task %s", task_id)
                return None

            cursor = conn.execute(
                "DELETE FROM completions WHERE task_id = ? AND date = ?",
                (task_id, day),
            )
            if cursor.rowcount == 0:
                conn.execute(
                    "INSERT INTO completions (task_id, date) VALUES (?, ?)",
                    (task_id, day),
                )
            conn.commit()

        logger.debug("Toggled %s for task %s", day, task_id)
        return self.get_task(task_id)

    def clear(self) -> None:
        """Delete all tasks and completions. Primarily for testing."""
        with self._connect() as conn:
            conn.execute("DELETE FROM completions")
            conn.execute("DELETE FROM tasks")
            conn.commit()
