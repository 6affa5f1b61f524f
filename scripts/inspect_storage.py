#!/usr/bin/env python3
"""Inspect a travel diary entry collection.

Opens a file-backed (``--dir``) or HTTP-backed (``--url``) key-value
store, prints the storage diagnostics and optionally lists every entry.
Nothing is modified.

Usage
-----
::

    python scripts/inspect_storage.py --dir ~/.travel-diary
    python scripts/inspect_storage.py --url http://localhost:8080/kv --list --json

Options::

    --dir DIR        Directory of a FileKeyValueStore
    --url URL        Base URL of an HTTP key-value service
    --key KEY        Storage key (default: TRAVEL_DIARY_STORAGE_KEY or the built-in key)
    --list           Also print every entry, newest first
    --json           Output machine-readable JSON
    --show-location  Do not mask coordinates and addresses
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from traveldiary import EntryStore, FileKeyValueStore, HttpKeyValueStore, StoreConfig  # noqa: E402
from traveldiary._redact import redact_entry  # noqa: E402


def _section(title: str) -> str:
    return f"\n{'=' * 60}\n  {title}\n{'=' * 60}"


async def _collect(store: EntryStore, *, list_entries: bool) -> dict[str, Any]:
    diagnostics = await store.get_diagnostics()
    result: dict[str, Any] = {
        "diagnostics": diagnostics.model_dump() if diagnostics is not None else None,
    }
    if list_entries:
        config = store.config
        result["entries"] = [
            redact_entry(
                entry.to_storage(),
                max_string=config.log_max_string,
                redact_location=config.redact_location_in_logs,
            )
            for entry in await store.get_entries()
        ]
    return result


def _print_text(result: dict[str, Any]) -> None:
    out: list[str] = [_section("traveldiary storage")]
    diagnostics = result["diagnostics"]
    if diagnostics is None:
        out.append("  diagnostics unavailable (see log output)")
    else:
        out.append(f"  key       : {diagnostics['storage_key']}")
        out.append(f"  entries   : {diagnostics['entry_count']}")
        out.append(f"  size      : {diagnostics['storage_bytes']} bytes")
        out.append(f"  newest    : {diagnostics['newest_created_at']}")
        out.append(f"  oldest    : {diagnostics['oldest_created_at']}")

    entries = result.get("entries")
    if entries is not None:
        out.append(_section("ENTRIES"))
        for entry in entries:
            out.append(f"  {entry.get('id')}  createdAt={entry.get('createdAt')}")
            for key, value in entry.items():
                if key in ("id", "createdAt"):
                    continue
                out.append(f"      {key:<10}: {value}")
    print("\n".join(out))


async def main() -> None:
    parser = argparse.ArgumentParser(description="Inspect a travel diary entry collection.")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--dir", help="Directory of a file-backed store")
    target.add_argument("--url", help="Base URL of an HTTP key-value service")
    parser.add_argument("--key", help="Storage key to inspect")
    parser.add_argument("--list", action="store_true", dest="list_entries", help="Print every entry")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--show-location", action="store_true", help="Do not mask coordinates and addresses")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides: dict[str, Any] = {}
    if args.key:
        overrides["storage_key"] = args.key
    if args.show_location:
        overrides["redact_location_in_logs"] = False
    config = StoreConfig.from_env(**overrides)

    if args.dir:
        store = EntryStore(FileKeyValueStore(Path(args.dir).expanduser()), config)
        result = await _collect(store, list_entries=args.list_entries)
    else:
        async with HttpKeyValueStore(args.url) as backend:
            store = EntryStore(backend, config)
            result = await _collect(store, list_entries=args.list_entries)

    if args.json_mode:
        print(json.dumps(result, indent=2, default=str, ensure_ascii=False))
    else:
        _print_text(result)


if __name__ == "__main__":
    asyncio.run(main())
