from __future__ import annotations

from typing import Any, Mapping

from geogate.config.settings import Settings

"""
Per-request settings overrides (safe subset).

API callers may send `policy_overrides` to evaluate a check under a different radius or
accuracy threshold (e.g. a group that meets in a large campus). This module:
- validates the override payload against a whitelist,
- deep-merges the safe subset onto current settings,
- re-validates with Pydantic so ranges (radius > 0, ...) still hold.

Cache locations, URLs and timeouts are never overridable per request.
"""

# True allows the whole subtree; a nested dict allows only the listed keys.
ALLOWED_SETTINGS_OVERRIDES_TREE: dict[str, Any] = {
    "eligibility": True,
    "location": {"high_accuracy": True, "timeout_ms": True},
}


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged: dict[str, Any] = dict(base)
    for key, override_value in override.items():
        if isinstance(override_value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = _deep_merge(dict(merged[key]), override_value)
            continue
        merged[key] = override_value
    return merged


def _filter_overrides(
    overrides: Mapping[str, Any],
    *,
    allowed_tree: Mapping[str, Any],
    path: tuple[str, ...] = (),
) -> dict[str, Any]:
    filtered: dict[str, Any] = {}
    for key, value in overrides.items():
        if key not in allowed_tree:
            dotted_path = ".".join((*path, key))
            raise ValueError(f"policy_overrides contains a disallowed key: '{dotted_path}'")

        allowed = allowed_tree[key]
        if allowed is True:
            filtered[key] = value
            continue

        if not isinstance(value, Mapping):
            dotted_path = ".".join((*path, key))
            raise ValueError(f"policy_overrides key '{dotted_path}' must be a mapping")

        filtered[key] = _filter_overrides(value, allowed_tree=allowed, path=(*path, key))
    return filtered


def apply_settings_overrides(settings: Settings, overrides: Mapping[str, Any] | None) -> Settings:
    """Return `settings` with the whitelisted `overrides` applied (original left untouched).

    Raises:
        ValueError: If a key outside the whitelist is present or a value fails validation.
    """
    if not overrides:
        return settings

    safe_overrides = _filter_overrides(overrides, allowed_tree=ALLOWED_SETTINGS_OVERRIDES_TREE)
    merged_payload = _deep_merge(settings.model_dump(mode="python"), safe_overrides)
    # pydantic.ValidationError subclasses ValueError, so callers see one error type.
    return Settings.model_validate(merged_payload)
