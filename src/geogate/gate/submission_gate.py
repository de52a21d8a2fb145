"""
Submission gate.

One `SubmissionGate` is owned by one open submission dialog. It decides whether the
comment box, the file-attach control and the submit action are enabled.

States:
- IDLE: internship dialog opened, no check yet
- CHECKING: a position request is in flight (controls disabled)
- ELIGIBLE: verdict allowed (controls enabled)
- BLOCKED: verdict refused or the location request failed (retry available)
- INCONCLUSIVE: no target location configured; controls enabled with a warning

Homework gates start in ELIGIBLE and never check. Checks run only on `open()` and
`retry()`; at most one is in flight, and nothing is retried automatically. After
`close()` a pending check is cancelled and its outcome is discarded.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from enum import Enum
from typing import Any, Callable

from geogate.config.settings import Settings
from geogate.core.geo import GeoPoint
from geogate.core.time import today_in
from geogate.domain.models import EligibilityVerdict, PositionSample, ReasonCode, TaskKind, TaskWindow
from geogate.eligibility.evaluator import EligibilityPolicy, evaluate
from geogate.location.acquirer import AcquireOptions, GeolocationAcquirer
from geogate.location.errors import LocationError
from geogate.records.rows import AnswerRow, already_verified_point, answer_location_fields

logger = logging.getLogger(__name__)

Listener = Callable[["SubmissionGate"], None]


class GateState(str, Enum):
    IDLE = "idle"
    CHECKING = "checking"
    ELIGIBLE = "eligible"
    BLOCKED = "blocked"
    INCONCLUSIVE = "inconclusive"


class SubmissionBlocked(Exception):
    """Raised when a submit is attempted while the gate does not permit it."""

    def __init__(self, reason: str, distance_meters: float | None = None):
        message = f"submission blocked: {reason}"
        if distance_meters is not None:
            message += f" ({distance_meters:.0f} m away)"
        super().__init__(message)
        self.reason = reason
        self.distance_meters = distance_meters


class SubmissionGate:
    """Per-dialog state machine gating a task submission on its eligibility verdict."""

    def __init__(
        self,
        window: TaskWindow,
        acquirer: GeolocationAcquirer,
        *,
        policy: EligibilityPolicy | None = None,
        options: AcquireOptions | None = None,
        today_provider: Callable[[], date] = date.today,
    ):
        self._window = window
        self._acquirer = acquirer
        self._policy = policy or EligibilityPolicy()
        self._options = options or AcquireOptions()
        self._today_provider = today_provider

        self._sample: PositionSample | None = None
        self._location_error: LocationError | None = None
        self._verified_point: GeoPoint | None = None
        self._inflight: asyncio.Future[PositionSample] | None = None
        self._listeners: list[Listener] = []
        self._closed = False

        if window.task_kind is TaskKind.HOMEWORK:
            self._state = GateState.ELIGIBLE
            self._verdict: EligibilityVerdict | None = EligibilityVerdict(
                allowed=True, reason_code=ReasonCode.NOT_APPLICABLE
            )
        else:
            self._state = GateState.IDLE
            self._verdict = None

    @classmethod
    def from_settings(
        cls, window: TaskWindow, acquirer: GeolocationAcquirer, settings: Settings
    ) -> "SubmissionGate":
        """Build a gate using configured policy, request options and timezone."""
        timezone = settings.app.timezone
        return cls(
            window,
            acquirer,
            policy=EligibilityPolicy.from_settings(settings),
            options=AcquireOptions.from_settings(settings),
            today_provider=lambda: today_in(timezone),
        )

    @property
    def window(self) -> TaskWindow:
        return self._window

    @property
    def state(self) -> GateState:
        return self._state

    @property
    def verdict(self) -> EligibilityVerdict | None:
        return self._verdict

    @property
    def sample(self) -> PositionSample | None:
        return self._sample

    @property
    def location_error(self) -> LocationError | None:
        return self._location_error

    @property
    def verified_point(self) -> GeoPoint | None:
        """Location stored on an earlier submission, shown as "already verified"."""
        return self._verified_point

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def busy(self) -> bool:
        return self._state is GateState.CHECKING

    @property
    def controls_enabled(self) -> bool:
        return self._state in (GateState.ELIGIBLE, GateState.INCONCLUSIVE)

    @property
    def submit_permitted(self) -> bool:
        return self.controls_enabled and not self._closed

    @property
    def warning(self) -> ReasonCode | None:
        if self._state is GateState.INCONCLUSIVE:
            return ReasonCode.NO_LOCATION_CONFIGURED
        return None

    @property
    def block_reason(self) -> str | None:
        """Reason shown next to the retry action; platform errors are reported verbatim."""
        if self._state is not GateState.BLOCKED or self._verdict is None:
            return None
        if self._location_error is not None and self._verdict.reason_code is ReasonCode.LOCATION_NOT_ACQUIRED:
            return self._location_error.reason
        return self._verdict.reason_code.value

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener(gate)` after every state change; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def open(self) -> GateState:
        """Run the automatic check performed when the dialog opens."""
        return await self._check("open")

    async def retry(self) -> GateState:
        """Run a manual check (retry button)."""
        return await self._check("retry")

    def close(self) -> None:
        """Dispose the gate; a pending check is cancelled and will not touch its state."""
        if self._closed:
            return
        self._closed = True
        self._listeners.clear()
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()

    def mark_already_verified(self, answer: AnswerRow | None) -> None:
        """Record the location persisted with an earlier answer (display only)."""
        self._verified_point = already_verified_point(answer)

    def require_submittable(self) -> None:
        """Raise `SubmissionBlocked` unless the submit action is currently permitted."""
        if self.submit_permitted:
            return
        if self._closed:
            raise SubmissionBlocked("CLOSED")
        if self._state in (GateState.IDLE, GateState.CHECKING):
            raise SubmissionBlocked(ReasonCode.LOCATION_NOT_ACQUIRED.value)
        distance = self._verdict.distance_meters if self._verdict else None
        raise SubmissionBlocked(self.block_reason or self._state.value, distance)

    def submission_location(self) -> dict[str, Any]:
        """`location_lat`/`location_lng` fields for the answer record."""
        return answer_location_fields(self._sample)

    async def _check(self, trigger: str) -> GateState:
        if self._closed or self._window.task_kind is TaskKind.HOMEWORK:
            return self._state
        if self._inflight is not None:
            logger.debug("Ignoring %s: a location check is already in flight", trigger)
            return self._state

        self._location_error = None
        self._inflight = asyncio.ensure_future(self._acquirer.acquire(self._options))

        sample: PositionSample | None = None
        error: LocationError | None = None
        try:
            self._transition(GateState.CHECKING)
            sample = await self._inflight
        except LocationError as exc:
            error = exc
        except asyncio.CancelledError:
            if self._closed:
                logger.debug("Location check discarded: gate closed")
                return self._state
            # The caller was cancelled; allow a fresh check later.
            self._transition(GateState.IDLE)
            raise
        finally:
            if not self._inflight.done():
                # A listener raised before the acquisition was awaited.
                self._inflight.cancel()
            self._inflight = None

        if self._closed:
            logger.debug("Location check discarded: gate closed")
            return self._state

        self._settle(sample, error)
        return self._state

    def _settle(self, sample: PositionSample | None, error: LocationError | None) -> None:
        self._sample = sample
        self._location_error = error
        verdict = evaluate(self._window, sample, self._today_provider(), policy=self._policy)
        self._verdict = verdict

        if verdict.allowed and verdict.reason_code is ReasonCode.NO_LOCATION_CONFIGURED:
            state = GateState.INCONCLUSIVE
        elif verdict.allowed:
            state = GateState.ELIGIBLE
        else:
            state = GateState.BLOCKED

        logger.info(
            "Submission gate %s: reason=%s distance=%s location_error=%s",
            state.value,
            verdict.reason_code.value,
            f"{verdict.distance_meters:.0f}m" if verdict.distance_meters is not None else "n/a",
            error.reason if error else None,
        )
        self._transition(state)

    def _transition(self, state: GateState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(self)
