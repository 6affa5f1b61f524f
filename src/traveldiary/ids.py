"""Entry id generation for collision recovery."""

from __future__ import annotations

import secrets
import time

from traveldiary._constants import BASE36_ALPHABET, ENTRY_ID_PREFIX, ENTRY_ID_RANDOM_LENGTH


def to_base36(value: int) -> str:
    """Render a non-negative integer in lowercase base 36."""
    if value < 0:
        raise ValueError(f"value must be non-negative, got {value}")
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_entry_id(now_ms: int | None = None) -> str:
    """Return a fresh id of the form ``entry_<base36 ms>_<random>``.

    The time component keeps ids roughly ordered; the random suffix makes
    two ids generated in the same millisecond distinct.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(ENTRY_ID_RANDOM_LENGTH))
    return f"{ENTRY_ID_PREFIX}_{to_base36(now_ms)}_{suffix}"
