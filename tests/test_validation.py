from __future__ import annotations

import logging
from typing import Any

import pytest

from traveldiary.validation import validate_entries, validate_entry


def _raw_entry(**overrides: Any) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "id": "entry-1",
        "imageUri": "file:///photos/1.jpg",
        "address": "Rua Augusta, Lisbon",
        "latitude": 38.7104,
        "longitude": -9.1386,
        "createdAt": 1_700_000_000_000,
    }
    entry.update(overrides)
    return entry


class TestValidateEntry:
    def test_minimal_entry_is_valid(self) -> None:
        assert validate_entry(_raw_entry())

    def test_integer_coordinates_are_numbers(self) -> None:
        assert validate_entry(_raw_entry(latitude=38, longitude=-9, createdAt=10))

    def test_optional_fields_accepted(self) -> None:
        entry = _raw_entry(
            title="Tram 28",
            notes="Crowded but worth it",
            tags=["tram", "lisbon"],
            weather={"temperature": 21.5, "conditions": "sunny", "humidity": 40},
        )
        assert validate_entry(entry)

    @pytest.mark.parametrize("field", ["title", "notes", "tags"])
    def test_explicit_null_optional_rejected(self, field: str) -> None:
        assert not validate_entry(_raw_entry(**{field: None}))

    def test_null_weather_accepted(self) -> None:
        assert validate_entry(_raw_entry(weather=None))

    @pytest.mark.parametrize("value", [None, "entry", 42, ["id"], True])
    def test_non_mapping_rejected(self, value: Any) -> None:
        assert not validate_entry(value)

    @pytest.mark.parametrize("field", ["id", "imageUri", "address", "latitude", "longitude", "createdAt"])
    def test_missing_required_field_rejected(self, field: str) -> None:
        entry = _raw_entry()
        del entry[field]
        assert not validate_entry(entry)

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("id", 1),
            ("imageUri", None),
            ("address", ["street"]),
            ("latitude", "38.71"),
            ("longitude", True),
            ("createdAt", "2024-01-01"),
        ],
    )
    def test_wrong_required_kind_rejected(self, field: str, value: Any) -> None:
        assert not validate_entry(_raw_entry(**{field: value}))

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("title", 5),
            ("notes", {"text": "hi"}),
            ("tags", "tram,lisbon"),
            ("weather", "sunny"),
        ],
    )
    def test_wrong_optional_kind_rejected(self, field: str, value: Any) -> None:
        assert not validate_entry(_raw_entry(**{field: value}))

    def test_rejection_logs_offending_field(self, caplog: pytest.LogCaptureFixture) -> None:
        entry = _raw_entry()
        del entry["latitude"]

        with caplog.at_level(logging.WARNING, logger="traveldiary.validation"):
            assert not validate_entry(entry)

        assert "latitude should be number" in caplog.text
        assert "missing" in caplog.text

    def test_never_raises_on_odd_input(self) -> None:
        class Weird:
            def __getattr__(self, name: str) -> Any:
                raise RuntimeError(name)

        assert not validate_entry(Weird())


class TestValidateEntries:
    def test_empty_list_is_valid(self) -> None:
        assert validate_entries([])

    def test_all_valid(self) -> None:
        assert validate_entries([_raw_entry(id="a"), _raw_entry(id="b")])

    def test_single_bad_item_fails_whole_collection(self) -> None:
        bad = _raw_entry(id="b")
        del bad["latitude"]
        assert not validate_entries([_raw_entry(id="a"), bad, _raw_entry(id="c")])

    @pytest.mark.parametrize("value", [None, {"entries": []}, "[]", 3])
    def test_non_list_rejected(self, value: Any) -> None:
        assert not validate_entries(value)
