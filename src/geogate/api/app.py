# src/geogate/api/app.py
"""
FastAPI application wiring.

Business logic lives in `geogate.eligibility` and `geogate.geocoding`; this file only
creates the app, configures logging and CORS, and mounts the routes.
"""

from __future__ import annotations

import os

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from geogate.core.logging import configure_logging

from .routes import router

configure_logging()

app = FastAPI(title="GeoGate API", version="0.1.0")

# The submission front-end is served from another origin.
# - GEOGATE_CORS_ORIGINS="https://app.example,http://localhost:5173"
# - GEOGATE_CORS_ALLOW_LOCAL=0 disables the default localhost allowance
cors_origins = [s.strip() for s in os.getenv("GEOGATE_CORS_ORIGINS", "").split(",") if s.strip()]
cors_allow_local = os.getenv("GEOGATE_CORS_ALLOW_LOCAL", "1").strip().lower() in {"1", "true", "yes", "y"}
cors_origin_regex = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$" if cors_allow_local and not cors_origins else ""
if cors_origins or cors_origin_regex:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_origin_regex=cors_origin_regex or None,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(router)
