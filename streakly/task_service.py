"""
Task service for streakly.

Owns the task list on behalf of the UI layers: creating, renaming, deleting
and toggling tasks through a TaskStorage, and handing stats and heatmap
data back. Pass one instance to whatever needs it; there is no global
task state.
"""

import logging

from streakly.calendar_utils import today, validate_day
from streakly.heatmap import build_heatmap
from streakly.models import MAX_NAME_LENGTH, TASK_COLORS, Task
from streakly.stats_calculator import TaskStats, task_stats
from streakly.storage import TaskNotFoundError, TaskStorage

logger = logging.getLogger(__name__)


class TaskService:
    """Manages tasks and derives their statistics."""

    def __init__(self, storage: TaskStorage):
        """
        Initialize the task service.

        Args:
            storage: TaskStorage instance for persistence
        """
        self.storage = storage

    def list_tasks(self) -> list[Task]:
        return self.storage.get_tasks()

    def get_task(self, task_id: str) -> Task:
        """
        Get a task by ID.

        Raises:
            TaskNotFoundError: If the task doesn't exist
        """
        task = self.storage.get_task(task_id)
        if task is None:
            raise TaskNotFoundError(f"Task not found: {task_id}")
        return task

    def next_color(self) -> str:
        """Pick the palette color for the next new task."""
        return TASK_COLORS[self.storage.count_tasks() % len(TASK_COLORS)]

    def add_task(self, name: str, color: str | None = None, created_at: str | None = None) -> Task:
        """
        Create and store a new task.

        Args:
            name: Task name (surrounding whitespace is trimmed)
            color: Hex color; defaults to the next palette color
            created_at: Creation day, defaults to today

        Returns:
            The created task

        Raises:
            ValueError: If the name is blank or too long
        """
        name = name.strip()
        if not name:
            raise ValueError("Task name cannot be empty")
        if len(name) > MAX_NAME_LENGTH:
            raise ValueError(f"Task name cannot exceed {MAX_NAME_LENGTH} characters")

        task = Task(
            name=name,
            color=color or self.next_color(),
            created_at=created_at or today(),
        )
        return self.storage.add_task(task)

    def update_task(self, task: Task) -> Task:
        return self.storage.update_task(task)

    def rename_task(self, task_id: str, name: str, color: str | None = None) -> Task:
        """
        Change a task's name and optionally its color.

        Raises:
            TaskNotFoundError: If the task doesn't exist
            ValueError: If the new name or color is invalid
        """
        task = self.get_task(task_id)
        changes = {"name": name}
        if color is not None:
            changes["color"] = color
        # Re-validate through the model rather than model_copy, which skips validators
        updated = Task.model_validate({**task.model_dump(), **changes})
        return self.storage.update_task(updated)

    def delete_task(self, task_id: str) -> bool:
        deleted = self.storage.delete_task(task_id)
        if not deleted:
            logger.debug("Delete requested for missing task %s", task_id)
        return deleted

    def toggle_completion(self, task_id: str, day: str | None = None) -> Task:
        """
        Toggle a task's completion for a day.

        Args:
            task_id: Task to update
            day: Day to flip, defaults to today

        Returns:
            The updated task

        Raises:
            TaskNotFoundError: If the task doesn't exist
            InvalidDayError: If the day is malformed
        """
        day = validate_day(day) if day is not None else today()
        task = self.storage.toggle_completion(task_id, day)
        if task is None:
            raise TaskNotFoundError(f"Task not found: {task_id}")
        logger.info(
            "Task %s %s on %s",
            task_id,
            "completed" if task.is_completed(day) else "uncompleted",
            day,
        )
        return task

    def stats_for(self, task_id: str, now: str | None = None) -> TaskStats:
        return task_stats(self.get_task(task_id), now=now)

    def heatmap_for(self, task_id: str, reference_day: str | None = None) -> dict:
        task = self.get_task(task_id)
        return build_heatmap(task.completed_dates, reference_day=reference_day)
