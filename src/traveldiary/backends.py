"""Key-value persistence backends.

The entry store only needs three asynchronous string operations.  Any
object with matching ``get``/``set``/``remove`` coroutines satisfies
:class:`KeyValueStore`; the implementations here cover tests
(:class:`MemoryKeyValueStore`), a single device (:class:`FileKeyValueStore`)
and a remote key-value service (:class:`HttpKeyValueStore`).
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol
from urllib.parse import quote

import aiohttp

from traveldiary.exceptions import StorageError

_logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Structural key-value interface used by the entry store.

    Implementations raise :class:`~traveldiary.exceptions.StorageError`
    (or anything else) on failure; the store treats every failure alike.
    """

    async def get(self, key: str) -> str | None:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def remove(self, key: str) -> None:
        ...


class MemoryKeyValueStore:
    """Dict-backed store; values live only as long as the instance."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        """Copy of the raw key/value pairs (debugging and tests)."""
        return dict(self._data)


class FileKeyValueStore:
    """One UTF-8 file per key inside *directory*.

    Keys are percent-encoded into file names.  Writes go to a temporary
    file that is then renamed over the target, so a crash mid-write leaves
    either the old value or the new one.  Blocking IO runs in a worker
    thread via :func:`asyncio.to_thread`.
    """

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        return self._directory / f"{quote(key, safe='')}.json"

    def _read(self, key: str) -> str | None:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def _write(self, key: str, value: str) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        fd, tmp_name = tempfile.mkstemp(dir=self._directory, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _remove(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)

    async def get(self, key: str) -> str | None:
        try:
            return await asyncio.to_thread(self._read, key)
        except (OSError, UnicodeError) as exc:
            raise StorageError(f"Reading {key!r} failed: {exc}", key=key) from exc

    async def set(self, key: str, value: str) -> None:
        try:
            await asyncio.to_thread(self._write, key, value)
        except (OSError, UnicodeError) as exc:
            raise StorageError(f"Writing {key!r} failed: {exc}", key=key) from exc

    async def remove(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._remove, key)
        except OSError as exc:
            raise StorageError(f"Removing {key!r} failed: {exc}", key=key) from exc


class HttpKeyValueStore:
    """Key-value store backed by a plain REST service.

    ``GET {base_url}/{key}`` returns the value (404 means absent),
    ``PUT`` stores the request body and ``DELETE`` removes the key
    (404 tolerated).

    Usage::

        async with HttpKeyValueStore("http://localhost:8080/kv") as backend:
            store = EntryStore(backend)
    """

    def __init__(
        self,
        base_url: str,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._external_session = session is not None
        self._http = session

    async def __aenter__(self) -> HttpKeyValueStore:
        if self._http is None:
            self._http = aiohttp.ClientSession()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http is not None:
            await self._http.close()
            self._http = None

    def _require_session(self) -> aiohttp.ClientSession:
        if self._http is None:
            raise StorageError("Backend not initialized. Use 'async with HttpKeyValueStore(...) as backend:'")
        return self._http

    def _url(self, key: str) -> str:
        return f"{self._base_url}/{quote(key, safe='')}"

    async def _request(self, method: str, key: str, *, data: str | None = None) -> tuple[int, str]:
        http = self._require_session()
        url = self._url(key)
        headers = {"content-type": "text/plain; charset=UTF-8"} if data is not None else None

        _logger.debug("%s %s", method, url)

        try:
            async with http.request(method, url, data=data, headers=headers) as resp:
                text = await resp.text()
                return resp.status, text
        except aiohttp.ClientError as exc:
            raise StorageError(f"{method} {key!r} failed: {exc}", key=key) from exc

    @staticmethod
    def _raise_for_status(method: str, key: str, status: int, text: str) -> None:
        if 200 <= status < 300:
            return
        raise StorageError(
            f"HTTP {status} on {method} {key!r}: {text[:200]}",
            key=key,
            status_code=status,
        )

    async def get(self, key: str) -> str | None:
        status, text = await self._request("GET", key)
        if status == 404:
            return None
        self._raise_for_status("GET", key, status, text)
        return text

    async def set(self, key: str, value: str) -> None:
        status, text = await self._request("PUT", key, data=value)
        self._raise_for_status("PUT", key, status, text)

    async def remove(self, key: str) -> None:
        status, text = await self._request("DELETE", key)
        if status == 404:
            return
        self._raise_for_status("DELETE", key, status, text)
