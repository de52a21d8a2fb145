from __future__ import annotations

from math import atan2, cos, radians, sin, sqrt

from pydantic import BaseModel, ConfigDict, Field

"""
Geospatial helpers.

A tiny geometry layer: the point type shared by every module, great-circle distance,
and the coordinate string shown when an address cannot be resolved.
"""

EARTH_RADIUS_M = 6_371_000


class GeoPoint(BaseModel):
    """A latitude/longitude pair in decimal degrees (immutable)."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


def haversine_m(a: GeoPoint, b: GeoPoint) -> float:
    """Compute great-circle distance in meters between two points."""
    phi1 = radians(a.latitude)
    phi2 = radians(b.latitude)
    dphi = radians(b.latitude - a.latitude)
    dlambda = radians(b.longitude - a.longitude)

    h = sin(dphi / 2) ** 2 + cos(phi1) * cos(phi2) * sin(dlambda / 2) ** 2
    # Rounding can push h just past 1 for antipodal points.
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_M * atan2(sqrt(h), sqrt(1 - h))


def format_coordinates(point: GeoPoint, digits: int = 4) -> str:
    """Render `point` as `"lat, lng"` with a fixed number of decimals."""
    return f"{point.latitude:.{digits}f}, {point.longitude:.{digits}f}"
