"""
Tests for the console entry point.
"""

import io
import tempfile
from contextlib import redirect_stdout
from pathlib import Path

import pytest

from streakly.main import main
from streakly.storage import TaskStorage


@pytest.fixture
def db_path(monkeypatch):
    """Point the app at a temporary database."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "tasks.db"
        monkeypatch.setenv("STREAKLY_DB_PATH", str(path))
        yield path


def _run(argv: list[str]) -> tuple[int, str]:
    output = io.StringIO()
    with redirect_stdout(output):
        code = main(argv)
    return code, output.getvalue()


def test_list_empty(db_path):
    code, output = _run([])

    assert code == 0
    assert "No tasks yet" in output


def test_add_and_list(db_path):
    code, output = _run(["add", "Read"])
    assert code == 0
    assert "Added Read" in output

    code, output = _run(["list"])
    assert code == 0
    assert "Read" in output
    assert "0%" in output


def test_toggle_by_prefix(db_path):
    _run(["add", "Read"])
    task = TaskStorage(db_path).get_tasks()[0]

    code, output = _run(["toggle", task.id[:6], "2024-03-10"])

    assert code == 0
    assert "2024-03-10 marked done" in output
    assert TaskStorage(db_path).get_task(task.id).completed_dates == ["2024-03-10"]

    code, output = _run(["toggle", task.id, "2024-03-10"])
    assert "marked not done" in output


def test_toggle_unknown_task(db_path):
    code, output = _run(["toggle", "zzz"])

    assert code == 1
    assert "No task matches" in output


def test_toggle_invalid_day(db_path):
    _run(["add", "Read"])
    task = TaskStorage(db_path).get_tasks()[0]

    code, output = _run(["toggle", task.id, "2024-02-30"])

    assert code == 1
    assert "Invalid calendar day" in output


def test_show(db_path):
    _run(["add", "Read"])
    task = TaskStorage(db_path).get_tasks()[0]
    _run(["toggle", task.id])

    code, output = _run(["show", task.id])

    assert code == 0
    assert "Read" in output
    assert "Current Streak: 1 day" in output
    assert "Completion rate: 100%" in output
    assert "[*]" in output


def test_delete(db_path):
    _run(["add", "Read"])
    task = TaskStorage(db_path).get_tasks()[0]

    code, output = _run(["delete", task.id])

    assert code == 0
    assert TaskStorage(db_path).get_tasks() == []


def test_add_blank_name(db_path):
    code, output = _run(["add", "   "])

    assert code == 1
    assert "cannot be empty" in output


def test_config_error(monkeypatch):
    with tempfile.TemporaryDirectory() as tmpdir:
        monkeypatch.setenv("STREAKLY_DB_PATH", tmpdir)

        code, output = _run(["list"])

    assert code == 1
    assert "Configuration Error" in output
