"""
API routes.

Endpoints:
- POST `/api/eligibility`: evaluate a task window against a position sample.
- GET  `/api/distance`: great-circle distance between two points.
- GET  `/api/reverse-geocode`: display address for a coordinate (never fails).
- GET  `/api/settings`: public policy settings for the front-end.
"""

from __future__ import annotations

from datetime import date
from functools import lru_cache
from typing import Any

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, ValidationError

from geogate.config.overrides import apply_settings_overrides
from geogate.config.settings import get_settings
from geogate.core.geo import GeoPoint, haversine_m
from geogate.core.time import today_in
from geogate.domain.models import EligibilityVerdict, PositionSample, TaskWindow
from geogate.eligibility.evaluator import EligibilityPolicy, effective_radius, evaluate
from geogate.geocoding.reverse import ReverseGeocoder, build_geocoder

router = APIRouter()


class EligibilityRequest(BaseModel):
    window: TaskWindow
    sample: PositionSample | None = None
    # Defaults to the current date in the configured timezone.
    today: date | None = None
    policy_overrides: dict[str, Any] | None = None


class EligibilityResponse(BaseModel):
    verdict: EligibilityVerdict
    radius_meters: float
    today: date


@lru_cache
def _geocoder() -> ReverseGeocoder:
    return build_geocoder(get_settings())


def _point(lat: float, lng: float) -> GeoPoint:
    try:
        return GeoPoint(latitude=lat, longitude=lng)
    except ValidationError as e:
        raise HTTPException(
            status_code=400,
            detail={"code": "VALIDATION_ERROR", "message": f"invalid coordinate ({lat}, {lng})"},
        ) from e


@router.get("/api/health")
def get_health() -> dict:
    return {"status": "ok"}


@router.post("/api/eligibility", response_model=EligibilityResponse)
def post_eligibility(request: EligibilityRequest) -> EligibilityResponse:
    """Evaluate one submission check; the result is computed fresh and never stored."""
    try:
        settings = apply_settings_overrides(get_settings(), request.policy_overrides)
    except ValueError as e:
        raise HTTPException(
            status_code=400,
            detail={"code": "VALIDATION_ERROR", "message": str(e)},
        ) from e

    policy = EligibilityPolicy.from_settings(settings)
    today = request.today or today_in(settings.app.timezone)
    verdict = evaluate(request.window, request.sample, today, policy=policy)
    return EligibilityResponse(
        verdict=verdict,
        radius_meters=effective_radius(request.window, policy),
        today=today,
    )


@router.get("/api/distance")
def get_distance(
    from_lat: float = Query(...),
    from_lng: float = Query(...),
    to_lat: float = Query(...),
    to_lng: float = Query(...),
) -> dict:
    a = _point(from_lat, from_lng)
    b = _point(to_lat, to_lng)
    return {"distance_meters": haversine_m(a, b)}


@router.get("/api/reverse-geocode")
def get_reverse_geocode(lat: float = Query(...), lng: float = Query(...)) -> dict:
    """Return a display address; falls back to formatted coordinates on lookup failure."""
    point = _point(lat, lng)
    return {"address": _geocoder().describe(point), "lat": point.latitude, "lng": point.longitude}


@router.get("/api/settings")
def get_public_settings() -> dict:
    """Return settings the front-end needs (policy + location request parameters)."""
    settings = get_settings()
    return {
        "timezone": settings.app.timezone,
        "eligibility": settings.eligibility.model_dump(mode="json"),
        "location": settings.location.model_dump(mode="json"),
    }
