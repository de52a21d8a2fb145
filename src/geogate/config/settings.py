# src/geogate/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/geogate/config/defaults.yaml`, then optionally overridden by:
- environment variables (e.g., `GEOGATE_LOG_LEVEL`, `GEOGATE_TIMEZONE`)
- an external YAML file via `GEOGATE_CONFIG_PATH`

Design rule:
- Policy knobs (radius, accuracy threshold, location timeouts) live in YAML, not in business logic.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from geogate.core.env import load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `geogate.config`."""
    text = resources.files("geogate.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "GeoGate"
    timezone: str = "Asia/Tashkent"
    http_timeout_seconds: float = 10
    log_level: str = "INFO"


class CacheSettings(BaseModel):
    enabled: bool = True
    dir: str = ".cache/geogate"
    default_ttl_seconds: int = 60 * 60 * 24


class LocationSettings(BaseModel):
    """One-shot position request parameters handed to the platform location service."""

    high_accuracy: bool = True
    timeout_ms: int = Field(10_000, gt=0)
    max_age_ms: int = Field(0, ge=0)


class EligibilitySettings(BaseModel):
    default_radius_meters: float = Field(500, gt=0)
    accuracy_threshold_meters: float = Field(200, gt=0)


class GeocodingSettings(BaseModel):
    enabled: bool = True
    base_url: str = "https://photon.komoot.io"
    cache_ttl_seconds: int = 60 * 60 * 24 * 7
    coordinate_digits: int = Field(4, ge=0, le=8)


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    location: LocationSettings = Field(default_factory=LocationSettings)
    eligibility: EligibilitySettings = Field(default_factory=EligibilitySettings)
    geocoding: GeocodingSettings = Field(default_factory=GeocodingSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Only a small whitelist is honoured; policy thresholds are changed through YAML.
    """
    load_dotenv_if_present()
    data = dict(data)
    cache_dir = os.getenv("GEOGATE_CACHE_DIR")
    if cache_dir:
        data.setdefault("cache", {})["dir"] = cache_dir

    log_level = os.getenv("GEOGATE_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    timezone = os.getenv("GEOGATE_TIMEZONE")
    if timezone:
        data.setdefault("app", {})["timezone"] = timezone

    geocoder_url = os.getenv("GEOGATE_GEOCODER_URL")
    if geocoder_url:
        data.setdefault("geocoding", {})["base_url"] = geocoder_url

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("GEOGATE_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
