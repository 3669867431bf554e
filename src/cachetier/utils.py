"""Key and input helpers shared by the coordinator and the CLI."""

from __future__ import annotations

import re
import unicodedata
from typing import Optional

from cachetier.exceptions import KeyValidationError

MAX_KEY_LENGTH = 512


def is_exact_key_match(key: str, cache_key: Optional[str]) -> bool:
    """Case-insensitive, accent-sensitive comparison of a requested and a matched key."""
    if not cache_key:
        return False
    left = unicodedata.normalize("NFC", cache_key).casefold()
    right = unicodedata.normalize("NFC", key).casefold()
    return left == right


def check_key(key: str) -> None:
    """Reject keys that no tier accepts. Raises KeyValidationError."""
    if len(key) > MAX_KEY_LENGTH:
        raise KeyValidationError(
            f"Key Validation Error: {key} cannot be larger than {MAX_KEY_LENGTH} characters."
        )
    if "," in key:
        raise KeyValidationError(f"Key Validation Error: {key} cannot contain commas.")


def get_input_as_array(value: str) -> list[str]:
    """Split a newline-separated input into trimmed, non-empty entries.

    ``! pattern`` is normalised to ``!pattern``.
    """
    entries = (re.sub(r"^!\s+", "!", line).strip() for line in value.split("\n"))
    return [e for e in entries if e]


def get_input_as_int(value: str) -> Optional[int]:
    """Parse a non-negative integer input; anything else yields None."""
    match = re.match(r"^\s*(\d+)", value or "")
    if match is None:
        return None
    return int(match.group(1))
