"""traveldiary - Async record store for travel diary entries."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("traveldiary")
except PackageNotFoundError:
    __version__ = "0+local"
from traveldiary.backends import FileKeyValueStore, HttpKeyValueStore, KeyValueStore, MemoryKeyValueStore
from traveldiary.config import StoreConfig
from traveldiary.exceptions import (
    EntryValidationError,
    StorageError,
    TravelDiaryConfigError,
    TravelDiaryError,
)
from traveldiary.ids import generate_entry_id
from traveldiary.models import StorageDiagnostics, TravelEntry, Weather
from traveldiary.store import EntryStore
from traveldiary.validation import validate_entries, validate_entry

__all__ = [
    "__version__",
    "EntryStore",
    "EntryValidationError",
    "FileKeyValueStore",
    "HttpKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "StorageDiagnostics",
    "StorageError",
    "StoreConfig",
    "TravelDiaryConfigError",
    "TravelDiaryError",
    "TravelEntry",
    "Weather",
    "generate_entry_id",
    "validate_entries",
    "validate_entry",
]
