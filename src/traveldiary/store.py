"""Entry store: CRUD over a single serialized collection.

The whole collection lives as one JSON array under one key of a
:class:`~traveldiary.backends.KeyValueStore`.  Every mutation reads the
full collection, rewrites it wholesale and then re-reads it to confirm its
own postcondition (the "verification read").  The backend has no
transactions, so verification is best effort: a failed check is logged and
reported as ``False``/``None`` while the write itself is left in place.

No public method raises.  Failures collapse to ``False``, ``[]``, ``0`` or
``None``.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from traveldiary._redact import redact_entry
from traveldiary.backends import KeyValueStore
from traveldiary.config import StoreConfig
from traveldiary.exceptions import EntryValidationError
from traveldiary.ids import generate_entry_id
from traveldiary.models.entry import StorageDiagnostics, TravelEntry
from traveldiary.validation import validate_entries, validate_entry

_logger = logging.getLogger(__name__)


def _sort_newest_first(entries: list[TravelEntry]) -> list[TravelEntry]:
    # sorted() is stable with reverse=True, equal createdAt keep stored order.
    return sorted(entries, key=lambda entry: entry.created_at, reverse=True)


def _encode(entries: list[TravelEntry]) -> str:
    return json.dumps([entry.to_storage() for entry in entries], ensure_ascii=False, separators=(",", ":"))


class EntryStore:
    """Travel entry CRUD engine.

    Usage::

        store = EntryStore(FileKeyValueStore("~/.travel-diary"))
        saved = await store.save_entry(entry)
        if saved is not None:
            entries = await store.get_entries()

    With ``config.serialize_writes`` enabled (the default) the
    read-modify-write-verify cycle of each mutation runs under one
    ``asyncio.Lock`` so concurrent callers sharing this instance cannot
    lose each other's updates.  Writers outside this instance (another
    process, another ``EntryStore`` on the same key) are not coordinated.
    """

    def __init__(self, backend: KeyValueStore, config: StoreConfig | None = None) -> None:
        self._backend = backend
        self._config = config or StoreConfig()
        self._write_lock = asyncio.Lock()

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def storage_key(self) -> str:
        return self._config.storage_key

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _write_guard(self) -> contextlib.AbstractAsyncContextManager[Any]:
        if self._config.serialize_writes:
            return self._write_lock
        return contextlib.nullcontext()

    def _log_safe(self, entry: TravelEntry) -> dict[str, Any]:
        return redact_entry(
            entry.to_storage(),
            max_string=self._config.log_max_string,
            redact_location=self._config.redact_location_in_logs,
        )

    @staticmethod
    def _coerce_entry(entry: TravelEntry | Mapping[str, Any]) -> TravelEntry:
        """Validate caller input and return a fresh model.

        Mappings must use the stored (camelCase) field names.
        """
        if isinstance(entry, TravelEntry):
            raw: Any = entry.to_storage()
        elif isinstance(entry, Mapping):
            raw = dict(entry)
        else:
            raw = entry
        if not validate_entry(raw):
            raise EntryValidationError("Invalid entry data structure")
        try:
            return TravelEntry.model_validate(raw)
        except ValidationError as exc:
            raise EntryValidationError(f"Invalid entry data structure: {exc}") from exc

    async def _load(self) -> list[TravelEntry]:
        """Read and validate the stored collection.

        Backend failures propagate so mutating operations abort instead of
        overwriting data they could not read.  An absent key, an
        undecodable blob or a collection failing validation all read as
        empty.
        """
        key = self._config.storage_key
        raw = await self._backend.get(key)
        if not raw:
            return []

        try:
            decoded = json.loads(raw)
        except (ValueError, RecursionError) as exc:
            # ValueError covers JSONDecodeError and oversized integer literals.
            _logger.error("Stored entries under %s are not valid JSON (%s), returning empty list", key, exc)
            return []

        if not validate_entries(decoded):
            _logger.error("Invalid entries format in storage, returning empty list")
            return []

        try:
            entries = [TravelEntry.model_validate(item) for item in decoded]
        except ValidationError as exc:
            _logger.error("Stored entries could not be parsed (%s), returning empty list", exc)
            return []

        return _sort_newest_first(entries)

    async def _store(self, entries: list[TravelEntry]) -> None:
        await self._backend.set(self._config.storage_key, _encode(entries))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_entries(self) -> list[TravelEntry]:
        """Return every stored entry, newest first."""
        try:
            return await self._load()
        except Exception:
            _logger.exception("Error getting entries")
            return []

    async def get_entry_by_id(self, entry_id: str) -> TravelEntry | None:
        """Return the entry with *entry_id*, or ``None``."""
        entries = await self.get_entries()
        return next((entry for entry in entries if entry.id == entry_id), None)

    async def get_entry_count(self) -> int:
        """Return the number of stored entries (``0`` on failure)."""
        try:
            return len(await self._load())
        except Exception:
            _logger.exception("Error getting entry count")
            return 0

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def save_entry(self, entry: TravelEntry | Mapping[str, Any]) -> TravelEntry | None:
        """Insert *entry* and return the record as stored.

        When ``entry.id`` already exists the stored record gets a freshly
        generated id; the caller's object is left untouched, so callers
        must use the returned record.  Returns ``None`` when the entry is
        invalid, the backend fails, or the verification read does not find
        the new id.
        """
        try:
            candidate = self._coerce_entry(entry)
            async with self._write_guard():
                existing = await self._load()
                taken = {stored.id for stored in existing}
                if candidate.id in taken:
                    new_id = generate_entry_id()
                    while new_id in taken:
                        new_id = generate_entry_id()
                    _logger.warning("Duplicate entry id %s detected, storing as %s", candidate.id, new_id)
                    candidate = candidate.with_id(new_id)

                await self._store([*existing, candidate])

                current = await self._load()
                if not any(stored.id == candidate.id for stored in current):
                    _logger.error("Entry save verification failed for %s", candidate.id)
                    return None
            _logger.debug("Saved entry %s", self._log_safe(candidate))
            return candidate
        except EntryValidationError as exc:
            _logger.error("Error saving entry: %s", exc)
            return None
        except Exception:
            _logger.exception("Error saving entry")
            return None

    async def remove_entry(self, entry_id: str) -> bool:
        """Delete the entry with *entry_id*; ``False`` when absent or unconfirmed."""
        if not isinstance(entry_id, str) or not entry_id:
            _logger.error("Error removing entry: invalid entry id %r", entry_id)
            return False
        try:
            async with self._write_guard():
                existing = await self._load()
                if not any(stored.id == entry_id for stored in existing):
                    _logger.warning("Entry %s not found for deletion", entry_id)
                    return False

                await self._store([stored for stored in existing if stored.id != entry_id])

                current = await self._load()
                if any(stored.id == entry_id for stored in current):
                    _logger.error("Deletion verification failed for %s", entry_id)
                    return False
            return True
        except Exception:
            _logger.exception("Error removing entry")
            return False

    async def update_entry(self, entry: TravelEntry | Mapping[str, Any]) -> bool:
        """Replace the stored record whose id matches *entry* as a whole.

        Verified by finding a stored record with the same id and
        ``createdAt`` afterwards.
        """
        try:
            replacement = self._coerce_entry(entry)
            async with self._write_guard():
                existing = await self._load()
                index = next((i for i, stored in enumerate(existing) if stored.id == replacement.id), None)
                if index is None:
                    _logger.warning("Entry %s not found for update", replacement.id)
                    return False

                existing[index] = replacement
                await self._store(existing)

                current = await self._load()
                if not any(
                    stored.id == replacement.id and stored.created_at == replacement.created_at for stored in current
                ):
                    _logger.error("Update verification failed for %s", replacement.id)
                    return False
            return True
        except EntryValidationError as exc:
            _logger.error("Error updating entry: %s", exc)
            return False
        except Exception:
            _logger.exception("Error updating entry")
            return False

    async def clear_all_entries(self) -> bool:
        """Remove the storage key; ``True`` once the collection reads empty."""
        try:
            async with self._write_guard():
                await self._backend.remove(self._config.storage_key)
                current = await self._load()
                if current:
                    _logger.error("Clear verification failed, %d entries remain", len(current))
                    return False
            return True
        except Exception:
            _logger.exception("Error clearing entries")
            return False

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    async def get_diagnostics(self) -> StorageDiagnostics | None:
        """Summarize the stored collection without modifying it."""
        try:
            entries = await self._load()
            return StorageDiagnostics(
                storage_key=self._config.storage_key,
                entry_count=len(entries),
                # surrogatepass: lone surrogate escapes decode from JSON but are not valid UTF-8.
                storage_bytes=len(_encode(entries).encode("utf-8", errors="surrogatepass")),
                newest_created_at=entries[0].created_at if entries else None,
                oldest_created_at=entries[-1].created_at if entries else None,
                sample=self._log_safe(entries[0]) if entries else None,
            )
        except Exception:
            _logger.exception("Storage diagnostics failed")
            return None

    async def debug_storage(self) -> None:
        """Log the storage diagnostics at INFO level."""
        diagnostics = await self.get_diagnostics()
        if diagnostics is None:
            return
        _logger.info(
            "Storage %s: %d entries, %d bytes",
            diagnostics.storage_key,
            diagnostics.entry_count,
            diagnostics.storage_bytes,
        )
        if diagnostics.sample is not None:
            _logger.info("Sample entry: %s", diagnostics.sample)
