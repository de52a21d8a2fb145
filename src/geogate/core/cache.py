from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from hashlib import sha256
from pathlib import Path
from typing import Any, Callable

"""
Simple on-disk JSON cache.

Used by the reverse geocoder so reopening a submission dialog at the same spot does not
hit the public geocoding service again:
- values are stored as JSON under `.cache/geogate/` by default,
- keys are hashed (SHA-256) to avoid filesystem path issues,
- TTL is enforced on read.
"""

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """Serialized cache envelope stored on disk."""

    created_at_unix: int
    ttl_seconds: int
    value: Any


class FileCache:
    """A filesystem-backed cache keyed by (namespace, key)."""

    def __init__(self, base_dir: Path, enabled: bool = True, default_ttl_seconds: int = 86400):
        self._base_dir = base_dir
        self._enabled = enabled
        self._default_ttl_seconds = default_ttl_seconds

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    @property
    def enabled(self) -> bool:
        return self._enabled

    def _key_path(self, namespace: str, key: str) -> Path:
        digest = sha256(f"{namespace}:{key}".encode("utf-8")).hexdigest()
        return self._base_dir / namespace / f"{digest}.json"

    def _read_entry(self, path: Path) -> CacheEntry | None:
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            return CacheEntry(
                created_at_unix=int(raw["created_at_unix"]),
                ttl_seconds=int(raw["ttl_seconds"]),
                value=raw["value"],
            )
        except (OSError, ValueError, KeyError, TypeError):
            logger.debug("Ignoring unreadable cache entry %s", path)
            return None

    def get(self, namespace: str, key: str, ttl_seconds: int | None = None) -> Any | None:
        """Read a cached value if present and not expired; otherwise return None."""
        if not self._enabled:
            return None

        path = self._key_path(namespace, key)
        if not path.exists():
            return None

        entry = self._read_entry(path)
        if entry is None:
            return None

        effective_ttl = ttl_seconds if ttl_seconds is not None else entry.ttl_seconds
        if int(time.time()) - entry.created_at_unix > effective_ttl:
            return None
        return entry.value

    def set(self, namespace: str, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """Write a JSON-serializable value to disk (temp file + atomic replace)."""
        if not self._enabled:
            return None

        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl_seconds
        path = self._key_path(namespace, key)
        path.parent.mkdir(parents=True, exist_ok=True)

        payload = {
            "created_at_unix": int(time.time()),
            "ttl_seconds": int(ttl),
            "value": value,
        }
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
        tmp.replace(path)

    def get_or_set(
        self,
        namespace: str,
        key: str,
        builder: Callable[[], Any],
        ttl_seconds: int | None = None,
    ) -> Any:
        """Return cached value, or compute/store it via `builder`.

        Exceptions raised by `builder` propagate and nothing is stored.
        """
        cached = self.get(namespace, key, ttl_seconds=ttl_seconds)
        if cached is not None:
            return cached
        value = builder()
        self.set(namespace, key, value, ttl_seconds=ttl_seconds)
        return value
