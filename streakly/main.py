"""
streakly: A personal habit tracker

Entry point for the console application.
"""

import argparse
import sys

from streakly.calendar_utils import InvalidDayError, parse_day, today, year_heatmap_grid
from streakly.cli import (
    display_heatmap,
    display_month_calendar,
    display_stats,
    display_streak,
    format_task_line,
)
from streakly.config import configure_logging, validate_config
from streakly.stats_calculator import task_stats
from streakly.storage import TaskNotFoundError, TaskStorage
from streakly.task_service import TaskService


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="streakly", description="Track your daily habits.")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("list", help="List tasks with their streaks")

    add_parser = subparsers.add_parser("add", help="Add a new task")
    add_parser.add_argument("name")
    add_parser.add_argument("--color", help="Hex color, e.g. #3B82F6")

    toggle_parser = subparsers.add_parser("toggle", help="Mark or unmark a day")
    toggle_parser.add_argument("task_id", help="Task ID or unique prefix")
    toggle_parser.add_argument("day", nargs="?", help="Day (YYYY-MM-DD), defaults to today")

    show_parser = subparsers.add_parser("show", help="Show stats, calendar and heatmap")
    show_parser.add_argument("task_id", help="Task ID or unique prefix")

    delete_parser = subparsers.add_parser("delete", help="Delete a task")
    delete_parser.add_argument("task_id", help="Task ID or unique prefix")

    return parser


def _resolve_task_id(service: TaskService, prefix: str) -> str:
    """Expand a unique ID prefix to a full task ID."""
    matches = [task.id for task in service.list_tasks() if task.id.startswith(prefix)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        raise TaskNotFoundError(f"No task matches {prefix!r}")
    raise TaskNotFoundError(f"Task ID prefix {prefix!r} is ambiguous")


def _list_tasks(service: TaskService) -> None:
    tasks = service.list_tasks()
    if not tasks:
        print("No tasks yet. Add one with: streakly add NAME")
        return

    for task in tasks:
        print(format_task_line(task, task_stats(task)))
    print()


def _show_task(service: TaskService, task_id: str) -> None:
    task = service.get_task(task_id)
    now = today()

    print(f"{task.name}")
    print("-" * 50)
    stats = task_stats(task, now=now)
    display_streak(stats, task.completed_dates, today=now)
    display_stats(stats)

    current = parse_day(now)
    display_month_calendar(current.year, current.month - 1, task.completed_dates, today=now)
    display_heatmap(year_heatmap_grid(now), task.completed_dates, today=now)


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        validate_config()
    except ValueError as e:
        print(f"\nConfiguration Error:\n{e}")
        return 1

    configure_logging()
    service = TaskService(TaskStorage())

    try:
        if args.command in (None, "list"):
            _list_tasks(service)
        elif args.command == "add":
            task = service.add_task(args.name, color=args.color)
            print(f"Added {task.name} ({task.id[:8]})")
        elif args.command == "toggle":
            task_id = _resolve_task_id(service, args.task_id)
            day = args.day or today()
            task = service.toggle_completion(task_id, day)
            state = "done" if task.is_completed(day) else "not done"
            print(f"{task.name}: {day} marked {state}")
        elif args.command == "show":
            _show_task(service, _resolve_task_id(service, args.task_id))
        elif args.command == "delete":
            task_id = _resolve_task_id(service, args.task_id)
            service.delete_task(task_id)
            print(f"Deleted {task_id[:8]}")
    except (TaskNotFoundError, InvalidDayError, ValueError) as e:
        print(f"\nError: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
