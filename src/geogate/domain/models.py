"""
Domain models (Pydantic).

These types are the contract between the acquirer, the evaluator, the gate and the
outer surfaces (API/CLI):
- `PositionSample`: one device fix, consumed once by the evaluator
- `TaskWindow`: when and where an internship task must be submitted from
- `EligibilityVerdict`: the allow/block decision, never persisted

Keeping them in one place keeps JSON output consistent across CLI and API.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from geogate.core.geo import GeoPoint

__all__ = [
    "EligibilityVerdict",
    "GeoPoint",
    "PositionSample",
    "ReasonCode",
    "TaskKind",
    "TaskWindow",
]


class TaskKind(str, Enum):
    HOMEWORK = "homework"
    INTERNSHIP = "internship"


class ReasonCode(str, Enum):
    """Why a verdict came out the way it did."""

    NOT_APPLICABLE = "NOT_APPLICABLE"
    OK = "OK"
    NO_LOCATION_CONFIGURED = "NO_LOCATION_CONFIGURED"
    WRONG_DATE = "WRONG_DATE"
    TOO_FAR = "TOO_FAR"
    LOCATION_NOT_ACQUIRED = "LOCATION_NOT_ACQUIRED"
    GPS_ACCURACY_TOO_LOW = "GPS_ACCURACY_TOO_LOW"


class PositionSample(BaseModel):
    """A device position fix with its platform-reported accuracy radius."""

    model_config = ConfigDict(frozen=True)

    point: GeoPoint
    accuracy_meters: float = Field(..., ge=0)
    captured_at: datetime


class TaskWindow(BaseModel):
    """Submission constraints of a task, as configured by its author.

    `allowed_radius_meters=None` means "use the policy default" (500 m unless configured).
    """

    model_config = ConfigDict(frozen=True)

    task_kind: TaskKind
    scheduled_date: date | None = None
    target_location: GeoPoint | None = None
    allowed_radius_meters: float | None = Field(default=None, gt=0)


class EligibilityVerdict(BaseModel):
    """Allow/block decision for one check.

    `reason_code` is the single reason that drives the gate; `issues` lists every
    problem found (e.g. wrong date *and* too far) so both can be displayed.
    """

    model_config = ConfigDict(frozen=True)

    allowed: bool
    reason_code: ReasonCode
    distance_meters: float | None = None
    issues: tuple[ReasonCode, ...] = ()
