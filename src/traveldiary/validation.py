"""Record validator for stored travel entries.

Stored data is untyped JSON, so nothing read back from the key-value
backend is trusted until it passes :func:`validate_entries`.  Both
predicates only ever return a boolean; every rejection is logged with the
field that caused it.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TypeGuard

_logger = logging.getLogger(__name__)

# (field, kind) pairs; every one of them must be present.
REQUIRED_FIELDS: tuple[tuple[str, str], ...] = (
    ("id", "string"),
    ("imageUri", "string"),
    ("address", "string"),
    ("latitude", "number"),
    ("longitude", "number"),
    ("createdAt", "number"),
)

# Checked only when present.  An explicit null is a type mismatch except
# for weather, where null counts as an (empty) object.
OPTIONAL_FIELDS: tuple[tuple[str, str, bool], ...] = (
    ("title", "string", False),
    ("notes", "string", False),
    ("tags", "array", False),
    ("weather", "object", True),
)


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a JSON number here.
    return isinstance(value, (int, float)) and not isinstance(value, bool)


_KIND_CHECKS = {
    "string": lambda value: isinstance(value, str),
    "number": _is_number,
    "array": lambda value: isinstance(value, list),
    "object": lambda value: isinstance(value, Mapping),
}


def _kind_matches(value: Any, kind: str) -> bool:
    return bool(_KIND_CHECKS[kind](value))


def validate_entry(entry: Any) -> TypeGuard[dict[str, Any]]:
    """Return ``True`` when *entry* has the shape of a stored travel entry."""
    if not isinstance(entry, Mapping):
        _logger.warning("Entry validation failed: expected an object but got %s", type(entry).__name__)
        return False

    for name, kind in REQUIRED_FIELDS:
        value = entry.get(name)
        if not _kind_matches(value, kind):
            _logger.warning(
                "Entry validation failed: %s should be %s but got %s",
                name,
                kind,
                "missing" if name not in entry else type(value).__name__,
            )
            return False

    for name, kind, nullable in OPTIONAL_FIELDS:
        if name not in entry:
            continue
        value = entry[name]
        if value is None and nullable:
            continue
        if not _kind_matches(value, kind):
            _logger.warning(
                "Entry validation failed: optional %s should be %s but got %s",
                name,
                kind,
                type(value).__name__,
            )
            return False

    return True


def validate_entries(entries: Any) -> TypeGuard[list[dict[str, Any]]]:
    """Return ``True`` only when *entries* is a list whose every item is valid.

    A single bad item fails the whole collection.
    """
    if not isinstance(entries, list):
        _logger.warning("Storage data is not an array (got %s)", type(entries).__name__)
        return False
    return all(validate_entry(entry) for entry in entries)
