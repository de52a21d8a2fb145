"""
Reverse geocoding client (Photon).

Turns a coordinate into a human-readable address for display next to the map. It is
never part of the eligibility decision: any failure (network, HTTP status, bad JSON,
no features) falls back to the `"lat, lng"` string.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from geogate.config.settings import Settings
from geogate.core.cache import FileCache
from geogate.core.env import resolve_project_path
from geogate.core.geo import GeoPoint, format_coordinates
from geogate.core.http import get_json

logger = logging.getLogger(__name__)

# Photon feature properties joined (in order) into the display address.
ADDRESS_FIELDS = ("name", "street", "housenumber", "district", "city", "state", "country")


def format_address(payload: Any) -> str | None:
    """Build an address from the first feature of a Photon response (None if absent)."""
    if not isinstance(payload, dict):
        return None
    features = payload.get("features")
    if not isinstance(features, list) or not features:
        return None
    first = features[0]
    props = first.get("properties") if isinstance(first, dict) else None
    if not isinstance(props, dict):
        return None
    parts = [str(props[k]).strip() for k in ADDRESS_FIELDS if props.get(k) not in (None, "")]
    return ", ".join(p for p in parts if p) or None


class ReverseGeocoder:
    """Resolves coordinates to display addresses, with on-disk caching."""

    def __init__(self, settings: Settings, cache: FileCache):
        self._settings = settings
        self._cache = cache

    def _fetch_photon(self, point: GeoPoint) -> dict[str, Any]:
        url = self._settings.geocoding.base_url.rstrip("/") + "/reverse"
        params = {"lon": point.longitude, "lat": point.latitude}
        return get_json(url, params=params, timeout_seconds=self._settings.app.http_timeout_seconds)

    def describe(self, point: GeoPoint) -> str:
        """Return a display address for `point`; never raises on lookup failures."""
        fallback = format_coordinates(point, self._settings.geocoding.coordinate_digits)
        if not self._settings.geocoding.enabled:
            return fallback

        cache_key = f"photon:{point.latitude:.5f}:{point.longitude:.5f}"

        def builder() -> dict[str, Any]:
            logger.info("Reverse geocoding lat=%.5f lng=%.5f", point.latitude, point.longitude)
            return self._fetch_photon(point)

        try:
            payload = self._cache.get_or_set(
                "reverse_geocode",
                cache_key,
                builder,
                ttl_seconds=int(self._settings.geocoding.cache_ttl_seconds),
            )
        except (httpx.HTTPError, ValueError, OSError) as exc:
            logger.warning("Reverse geocoding failed (%s); using coordinates", exc)
            return fallback

        return format_address(payload) or fallback


def build_geocoder(settings: Settings) -> ReverseGeocoder:
    """Create a `ReverseGeocoder` backed by the configured on-disk cache."""
    cache = FileCache(
        resolve_project_path(settings.cache.dir),
        enabled=settings.cache.enabled,
        default_ttl_seconds=settings.cache.default_ttl_seconds,
    )
    return ReverseGeocoder(settings, cache)
