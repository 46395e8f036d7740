"""Derive the short origin label shown next to a log line."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from npd.lib.domain import LogEntry


def _field(value: object, key: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(key)
    return getattr(value, key, None)


def guess_origin(data: Mapping[str, Any] | None) -> str | None:
    """Return `name#target` for the package or endpoint a payload refers to."""

    if not data:
        return None

    endpoint = data.get("endpoint")
    if endpoint:
        origin = _field(endpoint, "name") or (
            _field(endpoint, "source") if data.get("registry") else None
        )
        # Unnamed endpoints fall back to the resolver that handled them.
        if not origin and data.get("resolver"):
            origin = _field(data["resolver"], "name")
        if not origin:
            return None
        target = _field(endpoint, "target")
        return f"{origin}#{target}" if target else str(origin)

    name = data.get("name")
    if name:
        version = data.get("version")
        return f"{name}#{version}" if version else str(name)

    return None


def with_origin(entry: LogEntry) -> LogEntry:
    """Annotate an entry with the origin derived from its data, if any."""

    origin = guess_origin(entry.data)
    if origin is None or origin == entry.origin:
        return entry
    return replace(entry, origin=origin)
