"""
Task record for streakly.

Validation happens here, at the persistence boundary, so the stats engine
only ever sees canonical calendar days.
"""

import re
import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator

from streakly.calendar_utils import InvalidDayError, coerce_day, validate_day

MAX_NAME_LENGTH = 50
COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")

# Palette handed out to new tasks in order
TASK_COLORS = [
    "#10B981",  # Emerald
    "#3B82F6",  # Blue
    "#8B5CF6",  # Violet
    "#F59E0B",  # Amber
    "#EF4444",  # Red
    "#EC4899",  # Pink
    "#06B6D4",  # Cyan
    "#84CC16",  # Lime
]


def new_task_id() -> str:
    return uuid.uuid4().hex


class Task(BaseModel):
    """A habit the user tracks daily."""

    id: str = Field(default_factory=new_task_id, min_length=1)
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    color: str = Field(TASK_COLORS[0], description="Hex color, #RRGGBB")
    created_at: str = Field(..., description="Creation day (YYYY-MM-DD)")
    completed_dates: list[str] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("color")
    @classmethod
    def _check_color(cls, value: str) -> str:
        if not COLOR_PATTERN.match(value):
            raise ValueError(f"Invalid color: {value!r} (expected #RRGGBB)")
        return value.upper()

    @field_validator("created_at", mode="before")
    @classmethod
    def _normalize_created_at(cls, value: date | datetime | str) -> str:
        try:
            return coerce_day(value)
        except InvalidDayError as e:
            raise ValueError(str(e))

    @field_validator("completed_dates")
    @classmethod
    def _normalize_completed_dates(cls, value: list[str]) -> list[str]:
        try:
            return sorted({validate_day(day) for day in value})
        except InvalidDayError as e:
            raise ValueError(str(e))

    def is_completed(self, day: str) -> bool:
        return day in self.completed_dates
