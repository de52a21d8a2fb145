"""
Platform location sources.

A `PositionSource` wraps the host's one-shot position request. The acquirer only
depends on this protocol, so tests and the CLI can plug in deterministic sources.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Protocol

from geogate.location.errors import PositionSourceError


@dataclass(frozen=True)
class RawPosition:
    """Coordinates + accuracy radius (meters) as reported by the platform."""

    latitude: float
    longitude: float
    accuracy: float


class PositionSource(Protocol):
    async def get_current_position(
        self,
        *,
        enable_high_accuracy: bool,
        timeout_ms: int,
        maximum_age_ms: int,
    ) -> RawPosition: ...


class StaticPositionSource:
    """Always reports the same fix, optionally after a delay."""

    def __init__(self, latitude: float, longitude: float, accuracy: float = 10.0, *, delay_seconds: float = 0.0):
        self._position = RawPosition(latitude=latitude, longitude=longitude, accuracy=accuracy)
        self._delay_seconds = delay_seconds

    async def get_current_position(
        self,
        *,
        enable_high_accuracy: bool,
        timeout_ms: int,
        maximum_age_ms: int,
    ) -> RawPosition:
        if self._delay_seconds > 0:
            await asyncio.sleep(self._delay_seconds)
        return self._position


class FailingPositionSource:
    """Always fails with the given platform error code."""

    def __init__(self, code: int, message: str = ""):
        self._code = code
        self._message = message

    async def get_current_position(
        self,
        *,
        enable_high_accuracy: bool,
        timeout_ms: int,
        maximum_age_ms: int,
    ) -> RawPosition:
        raise PositionSourceError(self._code, self._message)
