"""
Calculate completion statistics for a task.
"""

import math
from dataclasses import asdict, dataclass
from typing import Iterable

from streakly.calendar_utils import coerce_day, days_between, today as get_today, validate_day
from streakly.streak_calculator import (
    calculate_current_streak,
    calculate_longest_streak,
    normalize_dates,
)


@dataclass
class TaskStats:
    """Derived statistics for a single task. Recomputed on every request."""

    current_streak: int = 0
    longest_streak: int = 0
    total_completions: int = 0
    completion_rate: int = 0  # Percentage, 0-100
    monthly_completions: int = 0
    yearly_completions: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


def compute_stats(
    completed_dates: Iterable[str],
    created_at: str,
    now: str | None = None,
) -> TaskStats:
    """
    Calculate streak, rate and period statistics for a task.

    Args:
        completed_dates: Days the task was completed (YYYY-MM-DD).
            Duplicates are counted once.
        created_at: Task creation day (a date-time string is accepted and
            reduced to its local calendar day)
        now: Override today's date for testing (YYYY-MM-DD format).
            Defaults to current date.

    Returns:
        TaskStats for the task as of ``now``

    Raises:
        InvalidDayError: If any date is malformed
    """
    if now is None:
        now = get_today()
    else:
        validate_day(now)

    created_day = coerce_day(created_at)
    dates = normalize_dates(completed_dates)

    total_completions = len(dates)

    # Day strings are YYYY-MM-DD, so prefixes select the month and year
    month_prefix = now[:7]
    year_prefix = now[:4]
    monthly_completions = sum(1 for d in dates if d[:7] == month_prefix)
    yearly_completions = sum(1 for d in dates if d[:4] == year_prefix)

    return TaskStats(
        current_streak=calculate_current_streak(dates, now),
        longest_streak=calculate_longest_streak(dates),
        total_completions=total_completions,
        completion_rate=calculate_completion_rate(total_completions, created_day, now),
        monthly_completions=monthly_completions,
        yearly_completions=yearly_completions,
    )


def calculate_completion_rate(total_completions: int, created_at: str, now: str) -> int:
    """
    Calculate the completion rate as a whole percentage.

    The denominator counts days since creation including the creation day,
    with a minimum of 1, so a creation day after ``now`` cannot divide by
    zero. Completions outside the creation window could push the ratio past
    100%; the result is clamped to 0-100.

    Args:
        total_completions: Number of unique completed days
        created_at: Creation day (YYYY-MM-DD)
        now: Today's date (YYYY-MM-DD)

    Returns:
        Integer percentage rounded half up
    """
    if total_completions <= 0:
        return 0

    days_since_creation = max(days_between(created_at, now) + 1, 1)
    rate = math.floor(total_completions / days_since_creation * 100 + 0.5)
    return min(rate, 100)


def task_stats(task, now: str | None = None) -> TaskStats:
    """Calculate stats for a Task record."""
    return compute_stats(task.completed_dates, task.created_at, now=now)
