import httpx

from geogate.config.settings import get_settings
from geogate.core.cache import FileCache
from geogate.core.geo import GeoPoint
from geogate.geocoding.reverse import ReverseGeocoder, format_address

POINT = GeoPoint(latitude=41.31108, longitude=69.27973)

PHOTON_RESPONSE = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [69.2797, 41.3111]},
            "properties": {
                "name": "Amir Timur Square",
                "street": "Amir Temur Avenue",
                "housenumber": "",
                "city": "Tashkent",
                "country": "Uzbekistan",
            },
        }
    ],
}


def test_format_address_joins_present_fields_in_order():
    assert format_address(PHOTON_RESPONSE) == "Amir Timur Square, Amir Temur Avenue, Tashkent, Uzbekistan"
    assert format_address({"features": []}) is None
    assert format_address(["not", "a", "mapping"]) is None


def test_describe_calls_photon_reverse_and_caches(monkeypatch, tmp_path):
    calls: list[tuple[str, dict]] = []

    def fake_get_json(url, *, params=None, headers=None, timeout_seconds=10):  # noqa: ARG001
        calls.append((url, dict(params or {})))
        return PHOTON_RESPONSE

    monkeypatch.setattr("geogate.geocoding.reverse.get_json", fake_get_json)
    geocoder = ReverseGeocoder(get_settings(), FileCache(tmp_path, enabled=True))

    assert geocoder.describe(POINT) == "Amir Timur Square, Amir Temur Avenue, Tashkent, Uzbekistan"
    assert geocoder.describe(POINT) == "Amir Timur Square, Amir Temur Avenue, Tashkent, Uzbekistan"

    assert len(calls) == 1
    url, params = calls[0]
    assert url == "https://photon.komoot.io/reverse"
    assert params == {"lon": POINT.longitude, "lat": POINT.latitude}


def test_describe_falls_back_to_coordinates_on_http_error(monkeypatch, tmp_path):
    def failing_get_json(url, *, params=None, headers=None, timeout_seconds=10):  # noqa: ARG001
        request = httpx.Request("GET", url)
        response = httpx.Response(503, request=request)
        raise httpx.HTTPStatusError("503", request=request, response=response)

    monkeypatch.setattr("geogate.geocoding.reverse.get_json", failing_get_json)
    geocoder = ReverseGeocoder(get_settings(), FileCache(tmp_path, enabled=True))

    assert geocoder.describe(POINT) == "41.3111, 69.2797"
    assert not any(tmp_path.rglob("*.json"))


def test_describe_falls_back_when_no_features(monkeypatch, tmp_path):
    monkeypatch.setattr("geogate.geocoding.reverse.get_json", lambda *_a, **_k: {"features": []})
    geocoder = ReverseGeocoder(get_settings(), FileCache(tmp_path, enabled=False))
    assert geocoder.describe(POINT) == "41.3111, 69.2797"


def test_describe_skips_lookup_when_disabled(monkeypatch, tmp_path):
    def unexpected(*_args, **_kwargs):
        raise AssertionError("geocoder should not be called")

    monkeypatch.setattr("geogate.geocoding.reverse.get_json", unexpected)
    settings = get_settings()
    settings = settings.model_copy(
        update={"geocoding": settings.geocoding.model_copy(update={"enabled": False})}
    )
    geocoder = ReverseGeocoder(settings, FileCache(tmp_path, enabled=True))
    assert geocoder.describe(POINT) == "41.3111, 69.2797"


def test_describe_falls_back_when_cache_is_not_writable(monkeypatch, tmp_path):
    def read_only_set(*_args, **_kwargs):
        raise PermissionError("read-only cache dir")

    monkeypatch.setattr("geogate.geocoding.reverse.get_json", lambda *_a, **_k: PHOTON_RESPONSE)
    cache = FileCache(tmp_path, enabled=True)
    monkeypatch.setattr(cache, "set", read_only_set)
    geocoder = ReverseGeocoder(get_settings(), cache)

    assert geocoder.describe(POINT) == "41.3111, 69.2797"
