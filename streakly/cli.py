"""
CLI display functions for streakly.
"""

from streakly.calendar_utils import (
    MONTH_NAMES,
    WEEKDAY_ABBREVS,
    HeatmapGrid,
    month_grid,
    today as get_today,
    visible_month_labels,
)
from streakly.heatmap import completion_map
from streakly.models import Task
from streakly.stats_calculator import TaskStats

# Heatmap cell glyphs by intensity level
LEVEL_GLYPHS = ["·", "░", "▒", "▓", "█"]


def get_milestone_message(streak_days: int) -> str | None:
    """
    Get milestone message for a given streak length.

    Args:
        streak_days: Current streak in days

    Returns:
        Milestone message string or None if no milestone
    """
    milestones = {
        7: "One week strong!",
        14: "Two weeks of consistency!",
        30: "One month champion!",
        60: "Two months unstoppable!",
        100: "100 days - legendary!",
    }
    return milestones.get(streak_days)


def display_streak(
    stats: TaskStats,
    completed_dates: list[str],
    today: str | None = None,
) -> None:
    """
    Display streak information to the console with milestone messages.

    Args:
        stats: TaskStats for the task as of ``today``
        completed_dates: Days the task was completed (YYYY-MM-DD)
        today: Override today's date for testing (YYYY-MM-DD format)
    """
    if today is None:
        today = get_today()

    current = stats.current_streak
    last_date = max(completed_dates, default=None)
    active = today in completed_dates

    if current == 0:
        status = "No active streak"
    else:
        day_word = "day" if current == 1 else "days"
        status = f"Current Streak: {current} {day_word}"

        milestone = get_milestone_message(current)
        if milestone:
            status = f"{status} - {milestone}"
        elif not active:
            status = f"{status} (complete it today to continue!)"

    print(f"🔥 {status}")
    if last_date:
        print(f"   Last completed: {last_date}")
    print()


def display_stats(stats: TaskStats) -> None:
    """Display task statistics to the console."""
    def days(n: int) -> str:
        return f"{n} day" if n == 1 else f"{n} days"

    print("📊 Stats:")
    print(f"   Current streak:  {days(stats.current_streak)}")
    print(f"   Longest streak:  {days(stats.longest_streak)}")
    print(f"   Completion rate: {stats.completion_rate}%")
    print(f"   This month:      {stats.monthly_completions}")
    print(f"   This year:       {stats.yearly_completions}")
    print(f"   Total:           {stats.total_completions}")
    print()


def display_month_calendar(
    year: int,
    month: int,
    completed_dates: list[str],
    today: str | None = None,
) -> None:
    """
    Display a month calendar with completed days marked.

    Args:
        year: Four-digit year
        month: Zero-based month (0 = January)
        completed_dates: Days the task was completed (YYYY-MM-DD)
        today: Override today's date for testing (YYYY-MM-DD format)
    """
    if today is None:
        today = get_today()

    completed = set(completed_dates)
    cells = month_grid(year, month)

    print(f"{MONTH_NAMES[month]} {year}")
    print("  " + " ".join(f"{abbrev:>3}" for abbrev in WEEKDAY_ABBREVS))

    for start in range(0, len(cells), 7):
        row = "  "
        for cell in cells[start:start + 7]:
            if cell is None:
                row += "    "
            elif cell in completed:
                row += "[*] "
            elif cell > today:
                row += "    "  # Future days can't be completed yet
            else:
                row += "[ ] "
        print(row.rstrip())

    print()


def display_heatmap(
    grid: HeatmapGrid,
    completed_dates: list[str],
    today: str | None = None,
) -> None:
    """
    Display a one-year heatmap, one row per weekday and one column per week.

    Args:
        grid: HeatmapGrid from year_heatmap_grid()
        completed_dates: Days the task was completed (YYYY-MM-DD)
        today: Override today's date for testing (YYYY-MM-DD format)
    """
    if today is None:
        today = get_today()

    flat_days = [day for week in grid.weeks for day in week]
    levels = {entry.date: entry.intensity for entry in completion_map(flat_days, completed_dates)}

    # Month header, skipping labels too narrow to fit
    header = [" "] * len(grid.weeks)
    for label in visible_month_labels(grid.months):
        for offset, char in enumerate(label.name):
            if label.start_week + offset < len(header):
                header[label.start_week + offset] = char
    print("     " + "".join(header).rstrip())

    for weekday in range(7):
        row = ""
        for week in grid.weeks:
            day = week[weekday]
            row += " " if day > today else LEVEL_GLYPHS[levels[day]]
        print(f"{WEEKDAY_ABBREVS[weekday]}  {row.rstrip()}")

    print()


def format_task_line(task: Task, stats: TaskStats) -> str:
    """
    Format a task and its stats for a one-line listing.

    Args:
        task: The task
        stats: Stats calculated for the task

    Returns:
        Formatted string for display
    """
    name = task.name
    if len(name) > 30:
        name = name[:27] + "..."

    return (
        f"  {task.id[:8]}  {name:<30} "
        f"🔥 {stats.current_streak:>3}  best {stats.longest_streak:>3}  "
        f"{stats.completion_rate:>3}%"
    )
