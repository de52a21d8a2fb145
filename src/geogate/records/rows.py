"""
Backend row shapes and their mapping onto the eligibility types.

Rows come from the hosted backend as plain JSON objects (`groups`, `tasks`,
`answers` tables). Only the columns the check needs are modelled; unknown columns
are ignored.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from geogate.core.geo import GeoPoint
from geogate.core.time import parse_calendar_date
from geogate.domain.models import PositionSample, TaskKind, TaskWindow


class _Row(BaseModel):
    model_config = ConfigDict(extra="ignore")


class GroupRow(_Row):
    id: str
    name: str
    description: str | None = None
    lat: float | None = None
    lng: float | None = None
    address: str | None = None
    created_by: str | None = None


class TaskRow(_Row):
    id: str
    title: str
    type: TaskKind
    group_id: str
    description: str | None = None
    deadline: str | None = None
    # Scheduled internship day; date-only or a full timestamp.
    date: str | None = None


class AnswerRow(_Row):
    id: str | None = None
    task_id: str
    user_id: str
    description: str | None = None
    file_url: str | None = None
    location_lat: float | None = None
    location_lng: float | None = None
    score: float | None = None
    teacher_comment: str | None = None


def group_location(group: GroupRow) -> GeoPoint | None:
    """Registered group location, or None unless both coordinates are set."""
    if group.lat is None or group.lng is None:
        return None
    return GeoPoint(latitude=group.lat, longitude=group.lng)


def task_window_from_rows(
    task: TaskRow,
    group: GroupRow | None,
    *,
    timezone: str,
    allowed_radius_meters: float | None = None,
) -> TaskWindow:
    """Build the `TaskWindow` for `task` (homework windows carry no constraints)."""
    if task.type is TaskKind.HOMEWORK:
        return TaskWindow(task_kind=TaskKind.HOMEWORK)

    scheduled = parse_calendar_date(task.date, timezone) if task.date else None
    return TaskWindow(
        task_kind=TaskKind.INTERNSHIP,
        scheduled_date=scheduled,
        target_location=group_location(group) if group is not None else None,
        allowed_radius_meters=allowed_radius_meters,
    )


def already_verified_point(answer: AnswerRow | None) -> GeoPoint | None:
    if answer is None or answer.location_lat is None or answer.location_lng is None:
        return None
    return GeoPoint(latitude=answer.location_lat, longitude=answer.location_lng)


def answer_location_fields(sample: PositionSample | None) -> dict[str, Any]:
    """Location columns to store with a new answer (null when no fix was taken)."""
    if sample is None:
        return {"location_lat": None, "location_lng": None}
    return {"location_lat": sample.point.latitude, "location_lng": sample.point.longitude}
