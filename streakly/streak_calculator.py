"""
Calculate habit streaks from completion dates.
"""

from datetime import date, timedelta
from typing import Iterable

from streakly.calendar_utils import add_days, format_day, parse_day, validate_day


def normalize_dates(completed_dates: Iterable[str]) -> set[str]:
    """
    Validate completion dates and collapse duplicates.

    Raises:
        InvalidDayError: If any entry is not a canonical calendar day
    """
    return {validate_day(day) for day in completed_dates}


def streak_ending_at(day: str, completed: set[str]) -> int:
    """
    Count the consecutive completed days ending exactly at ``day``.

    Args:
        day: Last day of the run (YYYY-MM-DD)
        completed: Set of completed days

    Returns:
        Run length, 0 if ``day`` itself is not completed
    """
    streak = 0
    current = parse_day(day)

    # Walk backwards until the first missing day (or 0001-01-01)
    while format_day(current) in completed:
        streak += 1
        if current == date.min:
            break
        current -= timedelta(days=1)

    return streak


def calculate_current_streak(completed: set[str], today: str) -> int:
    """
    Calculate the current streak.

    The streak is anchored at today when today is completed, otherwise at
    yesterday (grace period: an unmarked today does not break a streak that
    was alive through yesterday). If neither day is completed, it's 0.

    Args:
        completed: Set of completed days
        today: Today's date in YYYY-MM-DD format

    Returns:
        Current streak count
    """
    if today in completed:
        return streak_ending_at(today, completed)

    # 0001-01-01 has no yesterday
    if parse_day(today) == date.min:
        return 0
    yesterday = add_days(today, -1)
    if yesterday in completed:
        return streak_ending_at(yesterday, completed)
    return 0


def calculate_longest_streak(completed: Iterable[str]) -> int:
    """
    Calculate the longest streak in the completion history.

    Args:
        completed: Completed days, in any order

    Returns:
        Longest streak count (0 for no completions)
    """
    ordered = sorted(set(completed))

    if not ordered:
        return 0

    longest = 1
    current_streak = 1

    for i in range(1, len(ordered)):
        prev_date = parse_day(ordered[i - 1])
        current_date = parse_day(ordered[i])

        # Dates are ascending, so a run continues on exactly one day's gap
        if current_date - prev_date == timedelta(days=1):
            current_streak += 1
            longest = max(longest, current_streak)
        else:
            current_streak = 1

    return longest
