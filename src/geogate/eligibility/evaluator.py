"""
Eligibility evaluation for task submissions.

Homework is never gated. Internship submissions must happen on the scheduled day and
within `allowed_radius_meters` of the group's registered location.

Rules are applied in order (first match decides `reason_code`):
1. homework -> allowed (NOT_APPLICABLE)
2. no target location -> allowed if the date matches (NO_LOCATION_CONFIGURED is a warning)
3. no position sample -> blocked (LOCATION_NOT_ACQUIRED)
4. out of radius with a low-accuracy fix -> blocked as inconclusive (GPS_ACCURACY_TOO_LOW)
5. otherwise WRONG_DATE, TOO_FAR or OK

A low-accuracy fix (network-based estimates) can be off by kilometres, so "far away but
imprecise" is reported separately from a definite TOO_FAR.

This module is pure: no I/O, no clock, no settings lookup unless asked for.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from geogate.config.settings import Settings
from geogate.core.geo import haversine_m
from geogate.domain.models import EligibilityVerdict, PositionSample, ReasonCode, TaskKind, TaskWindow


@dataclass(frozen=True)
class EligibilityPolicy:
    """Policy thresholds applied to internship check-ins."""

    default_radius_meters: float = 500.0
    accuracy_threshold_meters: float = 200.0

    def __post_init__(self) -> None:
        if self.default_radius_meters <= 0:
            raise ValueError("default_radius_meters must be > 0")
        if self.accuracy_threshold_meters <= 0:
            raise ValueError("accuracy_threshold_meters must be > 0")

    @classmethod
    def from_settings(cls, settings: Settings) -> "EligibilityPolicy":
        return cls(
            default_radius_meters=float(settings.eligibility.default_radius_meters),
            accuracy_threshold_meters=float(settings.eligibility.accuracy_threshold_meters),
        )


DEFAULT_POLICY = EligibilityPolicy()


def effective_radius(window: TaskWindow, policy: EligibilityPolicy = DEFAULT_POLICY) -> float:
    """Radius in meters the window is checked against."""
    if window.allowed_radius_meters is not None:
        return float(window.allowed_radius_meters)
    return policy.default_radius_meters


def evaluate(
    window: TaskWindow,
    sample: PositionSample | None,
    today: date,
    *,
    policy: EligibilityPolicy | None = None,
) -> EligibilityVerdict:
    """Decide whether a submission for `window` is allowed right now."""
    policy = policy or DEFAULT_POLICY

    if window.task_kind is TaskKind.HOMEWORK:
        return EligibilityVerdict(allowed=True, reason_code=ReasonCode.NOT_APPLICABLE)

    date_ok = window.scheduled_date is None or window.scheduled_date == today
    issues: list[ReasonCode] = [] if date_ok else [ReasonCode.WRONG_DATE]

    if window.target_location is None:
        reason = ReasonCode.NO_LOCATION_CONFIGURED if date_ok else ReasonCode.WRONG_DATE
        issues.append(ReasonCode.NO_LOCATION_CONFIGURED)
        return EligibilityVerdict(allowed=date_ok, reason_code=reason, issues=tuple(issues))

    if sample is None:
        issues.append(ReasonCode.LOCATION_NOT_ACQUIRED)
        return EligibilityVerdict(
            allowed=False,
            reason_code=ReasonCode.LOCATION_NOT_ACQUIRED,
            issues=tuple(issues),
        )

    distance = haversine_m(sample.point, window.target_location)
    distance_ok = distance <= effective_radius(window, policy)

    if not distance_ok and sample.accuracy_meters > policy.accuracy_threshold_meters:
        issues.append(ReasonCode.GPS_ACCURACY_TOO_LOW)
        return EligibilityVerdict(
            allowed=False,
            reason_code=ReasonCode.GPS_ACCURACY_TOO_LOW,
            distance_meters=distance,
            issues=tuple(issues),
        )

    if not distance_ok:
        issues.append(ReasonCode.TOO_FAR)

    if not date_ok:
        reason = ReasonCode.WRONG_DATE
    elif not distance_ok:
        reason = ReasonCode.TOO_FAR
    else:
        reason = ReasonCode.OK

    return EligibilityVerdict(
        allowed=date_ok and distance_ok,
        reason_code=reason,
        distance_meters=distance,
        issues=tuple(issues),
    )
