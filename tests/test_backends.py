from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import unquote

import aiohttp
import pytest

from traveldiary.backends import FileKeyValueStore, HttpKeyValueStore, MemoryKeyValueStore
from traveldiary.exceptions import StorageError
from traveldiary.store import EntryStore

KEY = "@travel_diary_entries"


@pytest.mark.asyncio
async def test_memory_store_get_set_remove() -> None:
    backend = MemoryKeyValueStore()
    assert await backend.get(KEY) is None

    await backend.set(KEY, "[]")
    assert await backend.get(KEY) == "[]"
    assert backend.snapshot() == {KEY: "[]"}

    await backend.remove(KEY)
    await backend.remove(KEY)
    assert await backend.get(KEY) is None


# ------------------------------------------------------------------
# FileKeyValueStore
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_file_store_round_trip(tmp_path: Path) -> None:
    backend = FileKeyValueStore(tmp_path / "diary")
    assert await backend.get(KEY) is None

    await backend.set(KEY, '[{"id":"ü"}]')
    assert await backend.get(KEY) == '[{"id":"ü"}]'

    # A second instance on the same directory sees the value.
    assert await FileKeyValueStore(tmp_path / "diary").get(KEY) == '[{"id":"ü"}]'

    await backend.remove(KEY)
    await backend.remove(KEY)
    assert await backend.get(KEY) is None


@pytest.mark.asyncio
async def test_file_store_encodes_key_into_file_name(tmp_path: Path) -> None:
    backend = FileKeyValueStore(tmp_path)
    await backend.set("@a/b", "x")

    path = backend.path_for("@a/b")
    assert path.parent == tmp_path
    assert path.name == "%40a%2Fb.json"
    assert path.read_text(encoding="utf-8") == "x"
    assert [p.name for p in tmp_path.iterdir()] == ["%40a%2Fb.json"]


@pytest.mark.asyncio
async def test_file_store_wraps_os_errors(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    backend = FileKeyValueStore(blocker)

    with pytest.raises(StorageError) as excinfo:
        await backend.set(KEY, "[]")
    assert excinfo.value.key == KEY

    with pytest.raises(StorageError):
        await backend.get(KEY)


@pytest.mark.asyncio
async def test_file_store_wraps_unicode_errors(tmp_path: Path) -> None:
    backend = FileKeyValueStore(tmp_path)
    backend.path_for(KEY).write_bytes(b"\xff\xfe not utf-8")

    with pytest.raises(StorageError) as excinfo:
        await backend.get(KEY)
    assert excinfo.value.key == KEY

    with pytest.raises(StorageError):
        await backend.set(KEY, "\ud800")
    assert [p.name for p in tmp_path.iterdir()] == [backend.path_for(KEY).name]


# ------------------------------------------------------------------
# HttpKeyValueStore
# ------------------------------------------------------------------


@dataclass
class _FakeResponse:
    status: int
    body: str = ""

    async def text(self) -> str:
        return self.body

    async def __aenter__(self) -> _FakeResponse:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


@dataclass
class _FakeHttpSession:
    data: dict[str, str] = field(default_factory=dict)
    calls: list[tuple[str, str]] = field(default_factory=list)
    fail_with: Exception | None = None
    forced_status: int | None = None
    closed: bool = False

    def request(
        self,
        method: str,
        url: str,
        *,
        data: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> _FakeResponse:
        self.calls.append((method, url))
        if self.fail_with is not None:
            raise self.fail_with
        if self.forced_status is not None:
            return _FakeResponse(self.forced_status, "server unhappy")

        key = unquote(url.rsplit("/", 1)[1])
        if method == "GET":
            if key not in self.data:
                return _FakeResponse(404)
            return _FakeResponse(200, self.data[key])
        if method == "PUT":
            assert data is not None
            self.data[key] = data
            return _FakeResponse(204)
        if method == "DELETE":
            if self.data.pop(key, None) is None:
                return _FakeResponse(404)
            return _FakeResponse(200)
        return _FakeResponse(405)

    async def close(self) -> None:
        self.closed = True


@pytest.mark.asyncio
async def test_http_store_round_trip() -> None:
    session = _FakeHttpSession()
    backend = HttpKeyValueStore("http://kv.local/store/", session=session)  # type: ignore[arg-type]

    assert await backend.get(KEY) is None
    await backend.set(KEY, "[]")
    assert session.data == {KEY: "[]"}
    assert await backend.get(KEY) == "[]"
    await backend.remove(KEY)
    await backend.remove(KEY)

    assert session.calls[0] == ("GET", "http://kv.local/store/%40travel_diary_entries")


@pytest.mark.asyncio
async def test_http_store_raises_on_error_status() -> None:
    session = _FakeHttpSession(forced_status=503)
    backend = HttpKeyValueStore("http://kv.local", session=session)  # type: ignore[arg-type]

    with pytest.raises(StorageError) as excinfo:
        await backend.set(KEY, "[]")
    assert excinfo.value.status_code == 503
    assert excinfo.value.key == KEY


@pytest.mark.asyncio
async def test_http_store_wraps_client_errors() -> None:
    session = _FakeHttpSession(fail_with=aiohttp.ClientConnectionError("connection refused"))
    backend = HttpKeyValueStore("http://kv.local", session=session)  # type: ignore[arg-type]

    with pytest.raises(StorageError):
        await backend.get(KEY)


@pytest.mark.asyncio
async def test_http_store_requires_session() -> None:
    backend = HttpKeyValueStore("http://kv.local")
    with pytest.raises(StorageError):
        await backend.get(KEY)


@pytest.mark.asyncio
async def test_http_store_does_not_close_external_session() -> None:
    session = _FakeHttpSession()
    async with HttpKeyValueStore("http://kv.local", session=session) as backend:  # type: ignore[arg-type]
        await backend.set(KEY, "[]")
    assert session.closed is False


@pytest.mark.asyncio
async def test_entry_store_over_http_backend() -> None:
    session = _FakeHttpSession()
    store = EntryStore(HttpKeyValueStore("http://kv.local", session=session))  # type: ignore[arg-type]

    saved = await store.save_entry(
        {
            "id": "entry-1",
            "imageUri": "file:///1.jpg",
            "address": "Oslo",
            "latitude": 59.91,
            "longitude": 10.75,
            "createdAt": 1,
        }
    )

    assert saved is not None
    assert await store.get_entry_count() == 1

    session.forced_status = 500
    assert await store.get_entries() == []
    assert await store.clear_all_entries() is False
