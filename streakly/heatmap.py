"""
Heatmap intensity for habit completions.

Calculates per-day intensity levels for a GitHub-style contribution heatmap.
Unlike a count-based heatmap, a day's level reflects how long the streak
ending on that day is, so long runs glow brighter.
"""

from dataclasses import asdict, dataclass
from datetime import date, timedelta
from typing import Iterable

from streakly.calendar_utils import (
    format_day,
    parse_day,
    today as get_today,
    validate_day,
    visible_month_labels,
    year_heatmap_grid,
)
from streakly.streak_calculator import normalize_dates, streak_ending_at


@dataclass
class DayCompletion:
    """Completion state of a single grid cell."""

    date: str
    completed: bool
    intensity: int  # 0 = not completed, 1-4 based on streak

    def to_dict(self) -> dict:
        return asdict(self)


def level_for_streak(length: int) -> int:
    """
    Map a streak length to a heatmap intensity level.

    Args:
        length: Consecutive completed days ending on the day

    Returns:
        Level from 0-4:
            0: Not completed
            1: 1-6 day streak
            2: 7-13 day streak
            3: 14-29 day streak
            4: 30+ day streak
    """
    if length <= 0:
        return 0
    elif length >= 30:
        return 4
    elif length >= 14:
        return 3
    elif length >= 7:
        return 2
    else:
        return 1


def intensity(day: str, completed_dates: Iterable[str]) -> int:
    """
    Calculate the heatmap intensity of a day.

    Does not look at today: future days are scored like any other, and
    masking them is left to the caller.

    Args:
        day: Day to score (YYYY-MM-DD)
        completed_dates: All completion days of the task

    Returns:
        0 if the day isn't completed, otherwise 1-4
    """
    validate_day(day)
    completed = normalize_dates(completed_dates)
    return level_for_streak(streak_ending_at(day, completed))


def _cached_streak(day: str, completed: set[str], cache: dict[str, int]) -> int:
    """Streak ending at ``day``, reusing runs already measured in this batch."""
    if day not in completed:
        return 0

    # Collect the unmeasured part of the run, newest first
    pending = []
    current = parse_day(day)
    while True:
        key = format_day(current)
        if key not in completed:
            length = 0
            break
        if key in cache:
            length = cache[key]
            break
        pending.append(key)
        if current == date.min:
            length = 0
            break
        current -= timedelta(days=1)

    for key in reversed(pending):
        length += 1
        cache[key] = length

    return cache[day]


def completion_map(days: Iterable[str], completed_dates: Iterable[str]) -> list[DayCompletion]:
    """
    Resolve completion and intensity for a sequence of days.

    One entry is returned per input day, in input order; repeated days get
    repeated entries, so the result lines up with the grid that was passed.

    Args:
        days: Days to look up (YYYY-MM-DD)
        completed_dates: All completion days of the task

    Returns:
        List of DayCompletion, positionally matching ``days``
    """
    completed = normalize_dates(completed_dates)
    cache: dict[str, int] = {}

    entries = []
    for day in days:
        validate_day(day)
        is_completed = day in completed
        level = level_for_streak(_cached_streak(day, completed, cache)) if is_completed else 0
        entries.append(DayCompletion(date=day, completed=is_completed, intensity=level))

    return entries


def build_heatmap(
    completed_dates: Iterable[str],
    reference_day: str | None = None,
    min_label_span: int = 3,
) -> dict:
    """
    Build the one-year heatmap payload for display.

    Args:
        completed_dates: All completion days of the task
        reference_day: Last day of the window (defaults to today). Days
            after it are flagged ``future``.
        min_label_span: Narrowest month label span, in weeks, that stays
            visible when another label follows

    Returns:
        Dictionary with:
            - weeks: Lists of seven {date, completed, intensity, future}
            - months: Every month label with start_week and span_weeks
            - visible_months: Labels left after collision filtering
            - period: First and last day of the grid
            - total_completions: Completed days shown in the grid
    """
    if reference_day is None:
        reference_day = get_today()

    grid = year_heatmap_grid(reference_day)
    flat_days = [day for week in grid.weeks for day in week]
    entries = completion_map(flat_days, completed_dates)

    weeks = []
    for week_index in range(len(grid.weeks)):
        week_entries = entries[week_index * 7:(week_index + 1) * 7]
        weeks.append([
            {**entry.to_dict(), "future": entry.date > reference_day}
            for entry in week_entries
        ])

    return {
        "weeks": weeks,
        "months": [asdict(label) for label in grid.months],
        "visible_months": [
            asdict(label) for label in visible_month_labels(grid.months, min_label_span)
        ],
        "period": {
            "start": flat_days[0],
            "end": flat_days[-1],
            "reference": reference_day,
        },
        "total_completions": sum(1 for entry in entries if entry.completed),
    }
