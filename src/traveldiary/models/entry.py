"""Travel entry model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from traveldiary.models._base import DiaryBaseModel


class Weather(DiaryBaseModel):
    """Weather observed when an entry was captured.

    Convenience builder for :attr:`TravelEntry.weather`; the stored shape is
    a plain mapping and is not validated field by field.
    """

    temperature: float | None = None
    conditions: str | None = None
    humidity: float | None = None


class TravelEntry(DiaryBaseModel):
    """One travel diary entry.

    Parameters
    ----------
    id : str
        Unique within the stored collection.  Generated by the caller; the
        store only replaces it when it collides with a stored id.
    image_uri : str
        Opaque reference to the attached photo (stored as ``imageUri``).
    address : str
        Human-readable location label.
    latitude, longitude : int or float
        Coordinates.  No range validation is applied.
    created_at : int or float
        Creation timestamp (stored as ``createdAt``); the sole sort key.
    title, notes : str or None
        Optional free text.
    tags : list or None
        Optional tag list.
    weather : dict or None
        Optional weather mapping (see :class:`Weather`).
    """

    id: str
    image_uri: str
    address: str
    latitude: int | float
    longitude: int | float
    created_at: int | float
    title: str | None = None
    notes: str | None = None
    tags: list[Any] | None = None
    weather: dict[str, Any] | None = None

    @field_validator("weather", mode="before")
    @classmethod
    def _unwrap_weather_model(cls, value: Any) -> Any:
        if isinstance(value, BaseModel):
            return value.model_dump(mode="json", by_alias=True, exclude_none=True)
        return value

    def with_id(self, new_id: str) -> TravelEntry:
        """Return a copy of this entry carrying *new_id*."""
        return self.model_copy(update={"id": new_id})


class StorageDiagnostics(BaseModel):
    """Read-only summary of the stored collection."""

    storage_key: str
    entry_count: int = 0
    storage_bytes: int = 0
    newest_created_at: int | float | None = None
    oldest_created_at: int | float | None = None
    sample: dict[str, Any] | None = Field(default=None, description="Log-safe rendering of the newest entry")
