"""
Calendar date utilities for streakly.

Every day travels through the project as a canonical ``YYYY-MM-DD`` string
(a "calendar day"). The format is zero-padded and big-endian, so plain
string comparison orders days chronologically. Arithmetic is always done on
``datetime.date`` values, never on timestamps, so DST transitions cannot
shift a day.
"""

import re
from calendar import monthrange
from dataclasses import asdict, dataclass, field
from datetime import MAXYEAR, MINYEAR, date, datetime, timedelta

DAY_FORMAT = "%Y-%m-%d"
DAY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
WEEKDAY_ABBREVS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

HEATMAP_WINDOW_DAYS = 365


class InvalidDayError(ValueError):
    """Raised when a value is not a valid canonical calendar day."""


@dataclass
class MonthLabel:
    """Where a month's label starts in a heatmap grid."""

    name: str
    start_week: int
    span_weeks: int = 0  # Weeks until the next label (or the grid end)


@dataclass
class HeatmapGrid:
    """Week-partitioned days for a contribution-style heatmap."""

    weeks: list[list[str]] = field(default_factory=list)
    months: list[MonthLabel] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def format_day(value: date) -> str:
    """Format a date as a canonical calendar day."""
    return value.isoformat()


def validate_day(day: str) -> str:
    """
    Check that a value is a canonical calendar day.

    Args:
        day: Candidate day string

    Returns:
        The same string, unchanged

    Raises:
        InvalidDayError: If the value is not a zero-padded YYYY-MM-DD
            string naming a real date
    """
    if not isinstance(day, str) or not DAY_PATTERN.match(day):
        raise InvalidDayError(f"Invalid calendar day: {day!r} (expected YYYY-MM-DD)")
    try:
        datetime.strptime(day, DAY_FORMAT)
    except ValueError:
        raise InvalidDayError(f"Invalid calendar day: {day!r} (no such date)")
    return day


def parse_day(day: str) -> date:
    """Parse a canonical calendar day into a date."""
    return datetime.strptime(validate_day(day), DAY_FORMAT).date()


def coerce_day(value: date | datetime | str) -> str:
    """
    Normalize a date, datetime or ISO string to a calendar day.

    Timezone-aware datetimes are converted to local time first, so a
    creation timestamp stored in UTC lands on the user's local day.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return format_day(value.date())
    if isinstance(value, date):
        return format_day(value)
    if isinstance(value, str):
        if DAY_PATTERN.match(value):
            return validate_day(value)
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            raise InvalidDayError(f"Invalid date or date-time: {value!r}")
        return coerce_day(parsed)
    raise InvalidDayError(f"Cannot convert {type(value).__name__} to a calendar day")


def today() -> str:
    """Get today's local calendar day."""
    return format_day(date.today())


def is_today(day: str, now: str | None = None) -> bool:
    """Check whether a day is today."""
    return validate_day(day) == (now or today())


def is_future(day: str, now: str | None = None) -> bool:
    """Check whether a day is strictly after today."""
    return validate_day(day) > (now or today())


def add_days(day: str, n: int) -> str:
    """
    Shift a calendar day by n days (n may be negative).

    Month, year and leap-year rollover come from date arithmetic.

    Raises:
        InvalidDayError: If the day is malformed or the result falls
            outside years 0001-9999
    """
    try:
        return format_day(parse_day(day) + timedelta(days=n))
    except OverflowError:
        raise InvalidDayError(f"{day} shifted by {n} days is out of range") from None


def days_between(start: str, end: str) -> int:
    """Signed number of calendar days from start to end."""
    return (parse_day(end) - parse_day(start)).days


def date_range(start: str, end: str) -> list[str]:
    """
    List every day from start to end inclusive, oldest first.

    Returns an empty list when start is after end.
    """
    start_date = parse_day(start)
    count = (parse_day(end) - start_date).days + 1
    return [format_day(start_date + timedelta(days=i)) for i in range(max(count, 0))]


def past_days(count: int, now: str | None = None) -> list[str]:
    """
    Get the last ``count`` days ending at today (inclusive), oldest first.
    """
    if count <= 0:
        return []
    end = now or today()
    return date_range(add_days(end, -(count - 1)), end)


def year_dates(year: int) -> list[str]:
    """Get every day of a calendar year."""
    return date_range(f"{year:04d}-01-01", f"{year:04d}-12-31")


def _sunday_weekday(value: date) -> int:
    # date.weekday() is Monday-based
    return (value.weekday() + 1) % 7


def day_of_week(day: str) -> int:
    """Weekday index of a day, 0 = Sunday through 6 = Saturday."""
    return _sunday_weekday(parse_day(day))


def week_number(day: str) -> int:
    """
    Sunday-based week of the year; week 1 is the week containing 1 January.
    """
    value = parse_day(day)
    first_of_year = value.replace(month=1, day=1)
    days_into_year = (value - first_of_year).days
    return (days_into_year + _sunday_weekday(first_of_year)) // 7 + 1


def month_name(day: str, short: bool = False) -> str:
    """English name of a day's month, e.g. "March" or "Mar"."""
    name = MONTH_NAMES[parse_day(day).month - 1]
    return name[:3] if short else name


def relative_label(day: str, now: str | None = None) -> str:
    """
    Human label for a day relative to today.

    Returns:
        "Today", "Yesterday", or a short label like "Sat, Mar 9"
    """
    now = now or today()
    if day == now:
        return "Today"
    if day == add_days(now, -1):
        return "Yesterday"
    value = parse_day(day)
    return f"{WEEKDAY_ABBREVS[_sunday_weekday(value)]}, {MONTH_NAMES[value.month - 1][:3]} {value.day}"


def month_grid(year: int, month: int) -> list[str | None]:
    """
    Build the cells of a month calendar.

    Args:
        year: Four-digit year
        month: Zero-based month (0 = January, 11 = December)

    Returns:
        ``None`` placeholders for the weekdays before the 1st (0 = Sunday),
        followed by one calendar day per day of the month in order.

    Raises:
        InvalidDayError: If the month is outside 0-11 or the year is
            outside 1-9999
    """
    if not 0 <= month <= 11:
        raise InvalidDayError(f"Invalid month index: {month} (expected 0-11)")
    if not MINYEAR <= year <= MAXYEAR:
        raise InvalidDayError(f"Invalid year: {year} (expected {MINYEAR}-{MAXYEAR})")

    first = date(year, month + 1, 1)
    days_in_month = monthrange(year, month + 1)[1]

    grid: list[str | None] = [None] * _sunday_weekday(first)
    for offset in range(days_in_month):
        grid.append(format_day(first + timedelta(days=offset)))
    return grid


def year_heatmap_grid(reference_day: str | None = None) -> HeatmapGrid:
    """
    Build the rolling one-year heatmap grid ending at a reference day.

    The 365-day window ending at ``reference_day`` is extended backward to
    the Sunday on or before its first day and forward to the Saturday on or
    after ``reference_day``, so every week holds exactly seven days. Days
    outside the window are kept; hiding future days is up to the renderer.

    Args:
        reference_day: Last day of the window. Defaults to today.

    Returns:
        HeatmapGrid with weeks oldest first and a MonthLabel for the first
        week and for each week whose first day starts a new month.

    Raises:
        InvalidDayError: If the reference day is malformed, or the padded
            grid would reach outside years 0001-9999
    """
    reference = parse_day(reference_day or today())

    try:
        start = reference - timedelta(days=HEATMAP_WINDOW_DAYS - 1)
        start -= timedelta(days=_sunday_weekday(start))
        end = reference + timedelta(days=6 - _sunday_weekday(reference))
    except OverflowError:
        raise InvalidDayError(
            f"Heatmap grid for {format_day(reference)} is out of range"
        ) from None

    weeks = []
    current = start
    while current <= end:
        weeks.append([format_day(current + timedelta(days=i)) for i in range(7)])
        current += timedelta(days=7)

    months: list[MonthLabel] = []
    last_month = None
    for index, week in enumerate(weeks):
        week_start = parse_day(week[0])
        key = (week_start.year, week_start.month)
        if key != last_month:
            last_month = key
            months.append(MonthLabel(name=MONTH_NAMES[week_start.month - 1][:3], start_week=index))

    # Span runs to the next label, the last label runs to the grid end
    for label, following in zip(months, months[1:]):
        label.span_weeks = following.start_week - label.start_week
    if months:
        months[-1].span_weeks = len(weeks) - months[-1].start_week

    return HeatmapGrid(weeks=weeks, months=months)


def visible_month_labels(months: list[MonthLabel], min_span: int = 3) -> list[MonthLabel]:
    """
    Drop month labels that would collide with the next one.

    A label narrower than ``min_span`` weeks is hidden when another label
    follows it; the last label is always kept.
    """
    visible = []
    for index, label in enumerate(months):
        is_last = index == len(months) - 1
        if is_last or label.span_weeks >= min_span:
            visible.append(label)
    return visible
