"""Tests for the task storage module."""

import sqlite3
import tempfile
from contextlib import closing
from pathlib import Path
from unittest.mock import patch

import pytest

from streakly.calendar_utils import InvalidDayError
from streakly.models import Task
from streakly.storage import TaskNotFoundError, TaskStorage, toggle_day


@pytest.fixture
def temp_db():
    """Create a temporary database file for testing."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)
    yield db_path
    # Cleanup
    if db_path.exists():
        db_path.unlink()


@pytest.fixture
def storage(temp_db):
    """Create a TaskStorage instance with a temporary database."""
    return TaskStorage(temp_db)


@pytest.fixture
def sample_task():
    return Task(
        name="Read 20 pages",
        color="#3B82F6",
        created_at="2024-03-01",
        completed_dates=["2024-03-08", "2024-03-09"],
    )


class TestDatabaseInitialization:
    """Tests for database initialization."""

    def test_creates_db_file(self, temp_db):
        """Database file is created on initialization."""
        if temp_db.exists():
            temp_db.unlink()

        TaskStorage(temp_db)
        assert temp_db.exists()

    def test_creates_parent_directories(self):
        """Parent directories are created if they don't exist."""
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = Path(tmpdir) / "subdir" / "nested" / "tasks.db"
            TaskStorage(db_path)
            assert db_path.exists()

    def test_initialization_is_idempotent(self, temp_db):
        """Multiple initializations don't cause errors."""
        TaskStorage(temp_db)
        TaskStorage(temp_db)
        storage = TaskStorage(temp_db)
        assert storage.get_tasks() == []

    def test_default_path_from_environment(self, monkeypatch):
        """STREAKLY_DB_PATH selects the database file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = Path(tmpdir) / "env.db"
            monkeypatch.setenv("STREAKLY_DB_PATH", str(db_path))

            storage = TaskStorage()

            assert storage.db_path == db_path
            assert db_path.exists()


class TestTaskCrud:
    """Tests for adding, reading, updating and deleting tasks."""

    def test_add_and_get(self, storage, sample_task):
        storage.add_task(sample_task)

        loaded = storage.get_task(sample_task.id)

        assert loaded == sample_task

    def test_get_missing_returns_none(self, storage):
        assert storage.get_task("missing") is None

    def test_get_tasks_in_creation_order(self, storage):
        names = ["Read", "Run", "Write"]
        for name in names:
            storage.add_task(Task(name=name, created_at="2024-03-01"))

        assert [task.name for task in storage.get_tasks()] == names

    def test_count_tasks(self, storage, sample_task):
        assert storage.count_tasks() == 0
        storage.add_task(sample_task)
        assert storage.count_tasks() == 1

    def test_duplicate_id_rejected(self, storage, sample_task):
        storage.add_task(sample_task)

        with pytest.raises(sqlite3.IntegrityError):
            storage.add_task(sample_task)

    def test_update_replaces_fields(self, storage, sample_task):
        storage.add_task(sample_task)
        updated = sample_task.model_copy(
            update={"name": "Read 30 pages", "completed_dates": ["2024-03-10"]}
        )

        storage.update_task(updated)
        loaded = storage.get_task(sample_task.id)

        assert loaded.name == "Read 30 pages"
        assert loaded.completed_dates == ["2024-03-10"]
        assert loaded.created_at == "2024-03-01"

    def test_update_keeps_created_at(self, storage, sample_task):
        storage.add_task(sample_task)
        updated = sample_task.model_copy(update={"created_at": "2020-01-01"})

        storage.update_task(updated)

        assert storage.get_task(sample_task.id).created_at == "2024-03-01"

    def test_update_missing_raises(self, storage, sample_task):
        with pytest.raises(TaskNotFoundError):
            storage.update_task(sample_task)

    def test_delete(self, storage, sample_task):
        storage.add_task(sample_task)

        assert storage.delete_task(sample_task.id) is True
        assert storage.get_task(sample_task.id) is None
        assert storage.delete_task(sample_task.id) is False

    def test_delete_removes_completions(self, storage, sample_task, temp_db):
        storage.add_task(sample_task)
        storage.delete_task(sample_task.id)

        with closing(sqlite3.connect(temp_db)) as conn:
            count = conn.execute("SELECT COUNT(*) FROM completions").fetchone()[0]
        assert count == 0

    def test_clear(self, storage, sample_task):
        storage.add_task(sample_task)
        storage.clear()

        assert storage.get_tasks() == []


class TestToggleCompletion:
    """Tests for toggling completion days."""

    def test_toggle_adds_day(self, storage, sample_task):
        storage.add_task(sample_task)

        task = storage.toggle_completion(sample_task.id, "2024-03-10")

        assert task.completed_dates == ["2024-03-08", "2024-03-09", "2024-03-10"]

    def test_toggle_removes_day(self, storage, sample_task):
        storage.add_task(sample_task)

        task = storage.toggle_completion(sample_task.id, "2024-03-08")

        assert task.completed_dates == ["2024-03-09"]

    def test_toggle_twice_restores(self, storage, sample_task):
        storage.add_task(sample_task)

        storage.toggle_completion(sample_task.id, "2024-03-10")
        task = storage.toggle_completion(sample_task.id, "2024-03-10")

        assert task.completed_dates == sample_task.completed_dates

    def test_toggle_unknown_task_returns_none(self, storage):
        assert storage.toggle_completion("missing", "2024-03-10") is None

    def test_toggle_rejects_malformed_day(self, storage, sample_task):
        storage.add_task(sample_task)

        with pytest.raises(InvalidDayError):
            storage.toggle_completion(sample_task.id, "2024-3-10")

        assert storage.get_task(sample_task.id).completed_dates == sample_task.completed_dates

    def test_toggle_only_affects_one_task(self, storage, sample_task):
        other = Task(name="Run", created_at="2024-03-01")
        storage.add_task(sample_task)
        storage.add_task(other)

        storage.toggle_completion(other.id, "2024-03-08")

        assert storage.get_task(sample_task.id).completed_dates == ["2024-03-08", "2024-03-09"]
        assert storage.get_task(other.id).completed_dates == ["2024-03-08"]


class TestToggleDay:
    """Tests for the pure toggle_day helper."""

    def test_adds_absent_day(self):
        assert toggle_day(["2024-03-08"], "2024-03-09") == ["2024-03-08", "2024-03-09"]

    def test_removes_present_day(self):
        assert toggle_day(["2024-03-08", "2024-03-09"], "2024-03-08") == ["2024-03-09"]

    def test_twice_is_identity(self):
        original = ["2024-03-01", "2024-03-05"]
        for day in ["2024-03-01", "2024-03-02", "2024-03-05"]:
            assert toggle_day(toggle_day(original, day), day) == original

    def test_does_not_mutate_input(self):
        original = ["2024-03-08"]
        toggle_day(original, "2024-03-09")
        assert original == ["2024-03-08"]

    def test_rejects_malformed_day(self):
        with pytest.raises(InvalidDayError):
            toggle_day([], "tomorrow")


class TestConnections:
    """Tests for connection lifetime."""

    @pytest.fixture
    def opened(self):
        """Record every connection the storage opens."""
        connections = []
        real_connect = sqlite3.connect

        def connect(*args, **kwargs):
            conn = real_connect(*args, **kwargs)
            connections.append(conn)
            return conn

        with patch("streakly.storage.sqlite3.connect", side_effect=connect):
            yield connections

    def _assert_all_closed(self, connections):
        assert connections
        for conn in connections:
            with pytest.raises(sqlite3.ProgrammingError):
                conn.execute("SELECT 1")

    def test_connections_closed_after_each_call(self, temp_db, sample_task, opened):
        storage = TaskStorage(temp_db)
        storage.add_task(sample_task)
        storage.get_tasks()
        storage.toggle_completion(sample_task.id, "2024-03-10")
        storage.delete_task(sample_task.id)

        self._assert_all_closed(opened)

    def test_connection_closed_and_rolled_back_on_error(self, temp_db, sample_task, opened):
        storage = TaskStorage(temp_db)

        with pytest.raises(TaskNotFoundError):
            storage.update_task(sample_task)

        self._assert_all_closed(opened)
        assert storage.get_tasks() == []
