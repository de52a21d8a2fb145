"""Location failures, as surfaced to the submission gate."""

from __future__ import annotations

# Platform error codes of the one-shot position request.
PERMISSION_DENIED = 1
POSITION_UNAVAILABLE = 2
TIMEOUT = 3


class PositionSourceError(Exception):
    """Raised by a `PositionSource` with the platform's numeric error code."""

    def __init__(self, code: int, message: str = ""):
        super().__init__(message or f"position source error {code}")
        self.code = code


class LocationError(Exception):
    """Base class for failures to obtain a device position."""

    reason = "LOCATION_ERROR"


class PermissionDenied(LocationError):
    reason = "PERMISSION_DENIED"


class PositionUnavailable(LocationError):
    reason = "POSITION_UNAVAILABLE"


class LocationTimeout(LocationError):
    reason = "TIMEOUT"


class LocationUnsupported(LocationError):
    reason = "UNSUPPORTED"


_BY_PLATFORM_CODE: dict[int, type[LocationError]] = {
    PERMISSION_DENIED: PermissionDenied,
    POSITION_UNAVAILABLE: PositionUnavailable,
    TIMEOUT: LocationTimeout,
}


def error_for_code(code: int, message: str = "") -> LocationError:
    """Map a platform error code to its `LocationError` (unknown codes mean no fix)."""
    error_cls = _BY_PLATFORM_CODE.get(code, PositionUnavailable)
    return error_cls(message or error_cls.reason)
