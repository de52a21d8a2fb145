"""
GeoGate CLI entrypoint.

Intended for local checks and debugging without the front-end. `evaluate` runs a full
submission-gate cycle against a fixed device position given on the command line.
"""

from __future__ import annotations

import argparse
import asyncio
import json
from datetime import date
from typing import Any

from geogate.config.settings import get_settings
from geogate.core.geo import GeoPoint, haversine_m
from geogate.core.logging import configure_logging
from geogate.core.time import today_in
from geogate.domain.models import TaskKind, TaskWindow
from geogate.eligibility.evaluator import EligibilityPolicy
from geogate.gate.submission_gate import SubmissionGate
from geogate.geocoding.reverse import build_geocoder
from geogate.location.acquirer import AcquireOptions, GeolocationAcquirer
from geogate.location.sources import StaticPositionSource


def _optional_point(lat: float | None, lng: float | None, label: str) -> GeoPoint | None:
    if lat is None and lng is None:
        return None
    if lat is None or lng is None:
        raise ValueError(f"--{label}-lat and --{label}-lng must be given together")
    return GeoPoint(latitude=lat, longitude=lng)


def _cmd_distance(args: argparse.Namespace) -> int:
    a = GeoPoint(latitude=args.from_lat, longitude=args.from_lng)
    b = GeoPoint(latitude=args.to_lat, longitude=args.to_lng)
    print(f"{haversine_m(a, b):.1f}")
    return 0


def _cmd_evaluate(args: argparse.Namespace) -> int:
    """Handle the `evaluate` subcommand; exit code 0 when submission would be permitted."""
    settings = get_settings()

    window = TaskWindow(
        task_kind=TaskKind(args.kind),
        scheduled_date=date.fromisoformat(args.date) if args.date else None,
        target_location=_optional_point(args.target_lat, args.target_lng, "target"),
        allowed_radius_meters=args.radius,
    )
    device = _optional_point(args.lat, args.lng, "device")
    source = (
        StaticPositionSource(device.latitude, device.longitude, accuracy=float(args.accuracy))
        if device is not None
        else None
    )
    today_provider = (lambda: date.fromisoformat(args.today)) if args.today else (
        lambda: today_in(settings.app.timezone)
    )
    gate = SubmissionGate(
        window,
        GeolocationAcquirer(source),
        policy=EligibilityPolicy.from_settings(settings),
        options=AcquireOptions.from_settings(settings),
        today_provider=today_provider,
    )

    asyncio.run(gate.open())
    verdict = gate.verdict

    if args.json:
        payload: dict[str, Any] = {
            "state": gate.state.value,
            "submit_permitted": gate.submit_permitted,
            "block_reason": gate.block_reason,
            "warning": gate.warning.value if gate.warning else None,
            "verdict": verdict.model_dump(mode="json") if verdict else None,
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        print(f"state: {gate.state.value}")
        if verdict is not None:
            print(f"reason: {verdict.reason_code.value}")
            if verdict.distance_meters is not None:
                print(f"distance: {verdict.distance_meters:.0f} m")
            if len(verdict.issues) > 1:
                print("issues: " + ", ".join(i.value for i in verdict.issues))
        if gate.block_reason:
            print(f"blocked: {gate.block_reason}")
        if gate.warning:
            print(f"warning: {gate.warning.value}")

    return 0 if gate.submit_permitted else 1


def _cmd_reverse(args: argparse.Namespace) -> int:
    geocoder = build_geocoder(get_settings())
    print(geocoder.describe(GeoPoint(latitude=args.lat, longitude=args.lng)))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the GeoGate CLI."""
    parser = argparse.ArgumentParser(prog="geogate")
    sub = parser.add_subparsers(dest="command", required=True)

    dist = sub.add_parser("distance", help="Great-circle distance in meters between two points.")
    dist.add_argument("--from-lat", required=True, type=float)
    dist.add_argument("--from-lng", required=True, type=float)
    dist.add_argument("--to-lat", required=True, type=float)
    dist.add_argument("--to-lng", required=True, type=float)
    dist.set_defaults(func=_cmd_distance)

    ev = sub.add_parser("evaluate", help="Run a submission check for a task against a device position.")
    ev.add_argument("--kind", choices=[k.value for k in TaskKind], default=TaskKind.INTERNSHIP.value)
    ev.add_argument("--date", default=None, help="Scheduled day (YYYY-MM-DD)")
    ev.add_argument("--today", default=None, help="Override today's date (YYYY-MM-DD)")
    ev.add_argument("--target-lat", type=float, default=None)
    ev.add_argument("--target-lng", type=float, default=None)
    ev.add_argument("--radius", type=float, default=None, help="Allowed radius in meters")
    ev.add_argument("--lat", type=float, default=None, help="Device latitude (omit: no location service)")
    ev.add_argument("--lng", type=float, default=None, help="Device longitude")
    ev.add_argument("--accuracy", type=float, default=10.0, help="Reported GPS accuracy in meters")
    ev.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    ev.set_defaults(func=_cmd_evaluate)

    rev = sub.add_parser("reverse", help="Display address for a coordinate.")
    rev.add_argument("--lat", required=True, type=float)
    rev.add_argument("--lng", required=True, type=float)
    rev.set_defaults(func=_cmd_reverse)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m geogate.cli`."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    func: Any = getattr(args, "func")
    return int(func(args))


if __name__ == "__main__":
    raise SystemExit(main())
