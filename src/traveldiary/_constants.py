"""Internal constants shared across the library."""

# ------------------------------------------------------------------
# Storage key
# ------------------------------------------------------------------

ENTRIES_KEY = "@travel_diary_entries"

# ------------------------------------------------------------------
# Collision ids  (``entry_<base36 ms>_<9 random base36 chars>``)
# ------------------------------------------------------------------

ENTRY_ID_PREFIX = "entry"
ENTRY_ID_RANDOM_LENGTH = 9
BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
