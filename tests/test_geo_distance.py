import pytest
from pydantic import ValidationError

from geogate.core.geo import GeoPoint, format_coordinates, haversine_m


def test_haversine_zero_for_identical_points():
    for p in [
        GeoPoint(latitude=0, longitude=0),
        GeoPoint(latitude=41.2995, longitude=69.2401),
        GeoPoint(latitude=-90, longitude=180),
    ]:
        assert haversine_m(p, p) == 0


def test_haversine_is_symmetric():
    a = GeoPoint(latitude=41.2995, longitude=69.2401)
    b = GeoPoint(latitude=39.6542, longitude=66.9597)
    assert haversine_m(a, b) == haversine_m(b, a)


def test_haversine_one_kilometre_along_equator():
    a = GeoPoint(latitude=0, longitude=0)
    b = GeoPoint(latitude=0, longitude=0.008993)
    assert haversine_m(a, b) == pytest.approx(1000, abs=1.0)


def test_haversine_grows_with_separation():
    origin = GeoPoint(latitude=41.0, longitude=69.0)
    distances = [haversine_m(origin, GeoPoint(latitude=41.0 + d, longitude=69.0)) for d in (0.001, 0.01, 0.1, 1.0)]
    assert distances == sorted(distances)


def test_haversine_handles_antipodes_without_error():
    d = haversine_m(GeoPoint(latitude=0, longitude=0), GeoPoint(latitude=0, longitude=180))
    assert d == pytest.approx(3.141592653589793 * 6_371_000, rel=1e-9)


def test_haversine_antipodes_with_rounding_past_one():
    a = GeoPoint(latitude=66.16849958870057, longitude=-136.09604216031624)
    b = GeoPoint(latitude=-66.16849958870057, longitude=-136.09604216031624 + 180)
    assert haversine_m(a, b) == pytest.approx(3.141592653589793 * 6_371_000, rel=1e-6)
    assert haversine_m(b, a) == haversine_m(a, b)


def test_geopoint_rejects_out_of_range_coordinates():
    with pytest.raises(ValidationError):
        GeoPoint(latitude=91, longitude=0)
    with pytest.raises(ValidationError):
        GeoPoint(latitude=0, longitude=-180.5)


def test_format_coordinates_fallback_string():
    assert format_coordinates(GeoPoint(latitude=41.29951, longitude=69.24007)) == "41.2995, 69.2401"
    assert format_coordinates(GeoPoint(latitude=1, longitude=2), digits=6) == "1.000000, 2.000000"
