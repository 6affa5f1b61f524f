"""Log-safe rendering of travel entries.

Entries carry precise coordinates and home-ish addresses, and ``imageUri``
is frequently a multi-kilobyte inline data URI.  :func:`redact_entry`
turns a stored entry mapping into something fit for a log line.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

LOCATION_FIELDS: frozenset[str] = frozenset({"latitude", "longitude", "address"})

REDACTED = "<redacted>"


def _shorten(text: str, max_string: int) -> str:
    if len(text) <= max_string:
        return text
    return f"{text[:max_string]}…<truncated>"


def _scrub(value: Any, max_string: int) -> Any:
    # Only tags (list) and weather (mapping) nest, one level deep in practice.
    if isinstance(value, str):
        return _shorten(value, max_string)
    if isinstance(value, Mapping):
        return {str(k): _scrub(v, max_string) for k, v in value.items()}
    if isinstance(value, list):
        return [_scrub(item, max_string) for item in value]
    return value


def redact_entry(
    entry: Mapping[str, Any],
    *,
    max_string: int = 120,
    redact_location: bool = True,
) -> dict[str, Any]:
    """Return a copy of a stored entry mapping suitable for log output.

    Location fields are replaced by ``"<redacted>"`` when *redact_location*
    is set; every string longer than *max_string* is truncated.
    """
    safe: dict[str, Any] = {}
    for key, value in entry.items():
        if redact_location and key in LOCATION_FIELDS:
            safe[key] = REDACTED
        else:
            safe[key] = _scrub(value, max_string)
    return safe
