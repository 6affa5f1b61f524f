"""Store configuration for traveldiary."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from traveldiary._constants import ENTRIES_KEY
from traveldiary.exceptions import TravelDiaryConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class StoreConfig:
    """Entry store configuration.

    Parameters
    ----------
    storage_key : str
        Key holding the serialized entry collection.
    serialize_writes : bool
        Run every mutating operation under a per-store ``asyncio.Lock``
        (single-writer mode).  ``False`` restores the unguarded
        read-modify-write behaviour where only the verification read can
        notice an interleaved writer.
    redact_location_in_logs : bool
        Mask ``latitude``, ``longitude`` and ``address`` when entries are
        rendered into log output.
    log_max_string : int
        Strings longer than this are truncated in log output (image URIs
        are frequently inline data URIs).
    """

    storage_key: str = ENTRIES_KEY
    serialize_writes: bool = True
    redact_location_in_logs: bool = True
    log_max_string: int = 120

    def __post_init__(self) -> None:
        if not isinstance(self.storage_key, str) or not self.storage_key.strip():
            raise TravelDiaryConfigError("storage_key must be a non-empty string")
        if self.log_max_string <= 0:
            raise TravelDiaryConfigError("log_max_string must be positive")

    @classmethod
    def from_env(cls, **overrides: Any) -> StoreConfig:
        """Create configuration from environment variables.

        Reads ``TRAVEL_DIARY_STORAGE_KEY``, ``TRAVEL_DIARY_SERIALIZE_WRITES``,
        ``TRAVEL_DIARY_REDACT_LOCATION`` and ``TRAVEL_DIARY_LOG_MAX_STRING``.
        Explicit keyword arguments override environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        key_env = env.get("TRAVEL_DIARY_STORAGE_KEY")
        if key_env is not None:
            config_kwargs["storage_key"] = key_env

        if "serialize_writes" not in overrides:
            config_kwargs["serialize_writes"] = _env_bool(env.get("TRAVEL_DIARY_SERIALIZE_WRITES"), True)

        if "redact_location_in_logs" not in overrides:
            config_kwargs["redact_location_in_logs"] = _env_bool(env.get("TRAVEL_DIARY_REDACT_LOCATION"), True)

        max_string_env = env.get("TRAVEL_DIARY_LOG_MAX_STRING")
        if max_string_env is not None and "log_max_string" not in overrides:
            try:
                config_kwargs["log_max_string"] = int(max_string_env)
            except ValueError as exc:
                raise TravelDiaryConfigError(
                    f"TRAVEL_DIARY_LOG_MAX_STRING must be an integer, got {max_string_env!r}"
                ) from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
