import pytest

from geogate.core.cache import FileCache


def test_file_cache_expires_entries_on_read(monkeypatch, tmp_path):
    cache = FileCache(tmp_path, enabled=True, default_ttl_seconds=60)

    monkeypatch.setattr("geogate.core.cache.time.time", lambda: 1000)
    cache.set("ns", "k", {"v": 1})
    assert cache.get("ns", "k") == {"v": 1}

    monkeypatch.setattr("geogate.core.cache.time.time", lambda: 1061)
    assert cache.get("ns", "k") is None
    assert cache.get("ns", "k", ttl_seconds=3600) == {"v": 1}


def test_file_cache_get_or_set_builds_once(tmp_path):
    cache = FileCache(tmp_path, enabled=True)
    calls = []

    def builder():
        calls.append(1)
        return {"address": "Tashkent"}

    assert cache.get_or_set("ns", "k", builder) == {"address": "Tashkent"}
    assert cache.get_or_set("ns", "k", builder) == {"address": "Tashkent"}
    assert len(calls) == 1


def test_file_cache_builder_errors_propagate_and_store_nothing(tmp_path):
    cache = FileCache(tmp_path, enabled=True)

    def builder():
        raise RuntimeError("upstream down")

    with pytest.raises(RuntimeError):
        cache.get_or_set("ns", "k", builder)
    assert cache.get("ns", "k") is None


def test_file_cache_ignores_corrupt_entries(tmp_path):
    cache = FileCache(tmp_path, enabled=True)
    cache.set("ns", "k", [1, 2])
    path = next((tmp_path / "ns").glob("*.json"))
    path.write_text("{not json", encoding="utf-8")
    assert cache.get("ns", "k") is None


def test_disabled_file_cache_is_a_no_op(tmp_path):
    cache = FileCache(tmp_path, enabled=False)
    cache.set("ns", "k", 1)
    assert cache.get("ns", "k") is None
    assert not any(tmp_path.iterdir())
