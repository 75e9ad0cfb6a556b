"""
FastAPI web application for streakly.

Provides REST API endpoints for tasks, stats, calendars and heatmaps.
"""

import logging

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from streakly.calendar_utils import (
    MONTH_NAMES,
    InvalidDayError,
    month_grid,
    parse_day,
    today,
    validate_day,
)
from streakly.config import validate_config
from streakly.heatmap import completion_map
from streakly.models import MAX_NAME_LENGTH, Task
from streakly.stats_calculator import task_stats
from streakly.storage import TaskNotFoundError, TaskStorage
from streakly.task_service import TaskService

logger = logging.getLogger(__name__)

app = FastAPI(
    title="streakly",
    description="A personal habit tracker",
    version="0.1.0",
)


class TaskCreate(BaseModel):
    """Request model for creating a task."""

    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH, description="Task name")
    color: str | None = Field(None, description="Hex color (#RRGGBB), defaults to the next palette color")


class TaskUpdate(BaseModel):
    """Request model for renaming or recoloring a task."""

    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH, description="Task name")
    color: str | None = Field(None, description="Hex color (#RRGGBB)")


class ToggleRequest(BaseModel):
    """Request model for toggling a day's completion."""

    date: str | None = Field(None, description="Day to toggle (YYYY-MM-DD), defaults to today")


def _get_service() -> TaskService:
    """
    Build the task service.

    Raises:
        HTTPException: on configuration errors
    """
    try:
        validate_config()
    except ValueError as e:
        raise HTTPException(status_code=500, detail=f"Configuration error: {e}")

    return TaskService(TaskStorage())


def _get_task_or_404(service: TaskService, task_id: str) -> Task:
    try:
        return service.get_task(task_id)
    except TaskNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


def _check_day(day: str | None) -> str | None:
    if day is None:
        return None
    try:
        return validate_day(day)
    except InvalidDayError as e:
        raise HTTPException(status_code=422, detail=str(e))


def _task_payload(task: Task, now: str | None = None) -> dict:
    return {**task.model_dump(), "stats": task_stats(task, now=now).to_dict()}


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/api/tasks")
def list_tasks():
    """
    Get all tasks with their stats.

    Returns:
        JSON with the task list in creation order
    """
    service = _get_service()
    now = today()
    return {"tasks": [_task_payload(task, now) for task in service.list_tasks()]}


@app.post("/api/tasks")
def create_task(request: TaskCreate):
    """
    Create a new task.

    Args:
        request: TaskCreate with name and optional color

    Returns:
        JSON with the created task
    """
    service = _get_service()
    try:
        task = service.add_task(request.name, color=request.color)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return {"task": _task_payload(task)}


@app.get("/api/tasks/{task_id}")
def get_task(task_id: str):
    """Get a single task with its stats."""
    service = _get_service()
    return {"task": _task_payload(_get_task_or_404(service, task_id))}


@app.put("/api/tasks/{task_id}")
def update_task(task_id: str, request: TaskUpdate):
    """
    Rename or recolor a task.

    Returns:
        JSON with the updated task
    """
    service = _get_service()
    try:
        task = service.rename_task(task_id, request.name, color=request.color)
    except TaskNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return {"task": _task_payload(task)}


@app.delete("/api/tasks/{task_id}")
def delete_task(task_id: str):
    """Delete a task and all of its completions."""
    service = _get_service()
    if not service.delete_task(task_id):
        raise HTTPException(status_code=404, detail=f"Task not found: {task_id}")
    return {"deleted": True, "id": task_id}


@app.post("/api/tasks/{task_id}/toggle")
def toggle_completion(task_id: str, request: ToggleRequest | None = None):
    """
    Toggle a task's completion for a day.

    Args:
        task_id: The task ID
        request: Optional ToggleRequest with the day (defaults to today)

    Returns:
        JSON with the updated task and whether the day is now completed
    """
    service = _get_service()
    day = _check_day(request.date if request else None) or today()

    try:
        task = service.toggle_completion(task_id, day)
    except TaskNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {
        "task": _task_payload(task),
        "date": day,
        "completed": task.is_completed(day),
    }


@app.get("/api/tasks/{task_id}/stats")
def get_task_stats(task_id: str, now: str | None = None):
    """
    Get stats for a task.

    Args:
        task_id: The task ID
        now: Optional day to calculate stats as of (YYYY-MM-DD)
    """
    service = _get_service()
    now = _check_day(now)
    task = _get_task_or_404(service, task_id)
    return {"id": task.id, "stats": task_stats(task, now=now).to_dict()}


@app.get("/api/tasks/{task_id}/heatmap")
def get_task_heatmap(task_id: str, reference: str | None = None):
    """
    Get the one-year heatmap for a task.

    Args:
        task_id: The task ID
        reference: Optional last day of the window (YYYY-MM-DD)

    Returns:
        JSON with weeks of day cells, month labels and the period
    """
    service = _get_service()
    reference = _check_day(reference)
    _get_task_or_404(service, task_id)

    try:
        return service.heatmap_for(task_id, reference_day=reference)
    except InvalidDayError as e:
        raise HTTPException(status_code=422, detail=str(e))


@app.get("/api/tasks/{task_id}/calendar")
def get_task_calendar(task_id: str, year: int | None = None, month: int | None = None):
    """
    Get a month calendar for a task.

    Args:
        task_id: The task ID
        year: Four-digit year, defaults to the current year
        month: Zero-based month (0 = January), defaults to the current month

    Returns:
        JSON with one cell per grid slot; leading placeholder cells have a
        null date
    """
    service = _get_service()
    task = _get_task_or_404(service, task_id)

    now = today()
    current = parse_day(now)
    year = current.year if year is None else year
    month = current.month - 1 if month is None else month

    try:
        cells = month_grid(year, month)
    except InvalidDayError as e:
        raise HTTPException(status_code=422, detail=str(e))

    days = [cell for cell in cells if cell is not None]
    entries = iter(completion_map(days, task.completed_dates))

    payload = []
    for cell in cells:
        if cell is None:
            payload.append({"date": None, "completed": False, "intensity": 0, "future": False})
        else:
            entry = next(entries)
            payload.append({**entry.to_dict(), "future": cell > now})

    logger.debug("Calendar %04d-%02d for task %s", year, month + 1, task_id)
    return {
        "id": task.id,
        "year": year,
        "month": month,
        "name": f"{MONTH_NAMES[month]} {year}",
        "cells": payload,
    }
