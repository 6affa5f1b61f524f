"""Custom exception hierarchy for traveldiary."""

from __future__ import annotations


class TravelDiaryError(Exception):
    """Base exception for all traveldiary errors."""


class TravelDiaryConfigError(TravelDiaryError):
    """Invalid or missing configuration."""


class StorageError(TravelDiaryError):
    """Key-value backend failure (IO, network, non-2xx status)."""

    def __init__(
        self,
        message: str,
        *,
        key: str = "",
        status_code: int | None = None,
    ) -> None:
        self.key = key
        self.status_code = status_code
        super().__init__(message)


class EntryValidationError(TravelDiaryError):
    """A travel entry does not match the stored record schema.

    Raised inside :class:`~traveldiary.store.EntryStore` to fail fast on
    invalid caller input.  It never escapes a public store operation; the
    operation returns its safe default instead.
    """
