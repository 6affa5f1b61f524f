"""Data models for stored travel diary records."""

from traveldiary.models._base import DiaryBaseModel
from traveldiary.models.entry import StorageDiagnostics, TravelEntry, Weather

__all__ = [
    "DiaryBaseModel",
    "StorageDiagnostics",
    "TravelEntry",
    "Weather",
]
