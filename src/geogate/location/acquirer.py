"""
Geolocation acquisition.

`GeolocationAcquirer.acquire()` issues one position request to the injected platform
source and returns a `PositionSample`, or raises a `LocationError`:
- `PermissionDenied` / `PositionUnavailable` / `LocationTimeout` from platform codes 1/2/3
- `LocationTimeout` when the source does not answer within `timeout_ms`
- `LocationUnsupported` when the host has no location capability (no source)

Each call is independent: nothing is cached between calls.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from pydantic import ValidationError

from geogate.config.settings import Settings
from geogate.core.geo import GeoPoint
from geogate.domain.models import PositionSample
from geogate.location.errors import (
    LocationTimeout,
    LocationUnsupported,
    PositionSourceError,
    PositionUnavailable,
    error_for_code,
)
from geogate.location.sources import PositionSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AcquireOptions:
    """Parameters of a one-shot position request."""

    high_accuracy: bool = True
    timeout_ms: int = 10_000
    max_age_ms: int = 0

    def __post_init__(self) -> None:
        if self.timeout_ms <= 0:
            raise ValueError("timeout_ms must be > 0")
        if self.max_age_ms < 0:
            raise ValueError("max_age_ms must be >= 0")

    @classmethod
    def from_settings(cls, settings: Settings) -> "AcquireOptions":
        return cls(
            high_accuracy=settings.location.high_accuracy,
            timeout_ms=settings.location.timeout_ms,
            max_age_ms=settings.location.max_age_ms,
        )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GeolocationAcquirer:
    """Obtains fresh position samples from a platform `PositionSource`."""

    def __init__(self, source: PositionSource | None, *, clock: Callable[[], datetime] = _utcnow):
        self._source = source
        self._clock = clock

    @property
    def supported(self) -> bool:
        return self._source is not None

    async def acquire(self, options: AcquireOptions | None = None) -> PositionSample:
        """Request one position fix; may suspend the caller for up to `options.timeout_ms`."""
        options = options or AcquireOptions()
        if self._source is None:
            raise LocationUnsupported("geolocation is not supported on this host")

        request = self._source.get_current_position(
            enable_high_accuracy=options.high_accuracy,
            timeout_ms=options.timeout_ms,
            maximum_age_ms=options.max_age_ms,
        )
        try:
            raw = await asyncio.wait_for(request, timeout=options.timeout_ms / 1000)
        except asyncio.TimeoutError as exc:
            logger.info("Position request timed out after %d ms", options.timeout_ms)
            raise LocationTimeout(f"no position fix within {options.timeout_ms} ms") from exc
        except PositionSourceError as exc:
            error = error_for_code(exc.code, str(exc))
            logger.info("Position request failed: %s (code=%d)", error.reason, exc.code)
            raise error from exc
        except Exception as exc:
            logger.exception("Position source failed unexpectedly")
            raise PositionUnavailable(f"position source failed: {exc}") from exc

        try:
            sample = PositionSample(
                point=GeoPoint(latitude=raw.latitude, longitude=raw.longitude),
                accuracy_meters=raw.accuracy,
                captured_at=self._clock(),
            )
        except ValidationError as exc:
            raise PositionUnavailable(f"platform returned an invalid fix: {raw!r}") from exc

        logger.debug(
            "Acquired position lat=%.5f lng=%.5f accuracy=%.0fm",
            sample.point.latitude,
            sample.point.longitude,
            sample.accuracy_meters,
        )
        return sample
