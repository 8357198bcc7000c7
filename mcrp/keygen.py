from __future__ import annotations

import secrets

from .constants import KEY_ALPHABET, KEY_SIZE


def generate_key(length: int = KEY_SIZE) -> str:
    """Return a fresh random alphanumeric key string."""
    return "".join(secrets.choice(KEY_ALPHABET) for _ in range(length))
