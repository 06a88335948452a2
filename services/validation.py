from __future__ import annotations

from typing import Any

CEP_LENGTH = 8
_DIGITS = frozenset("0123456789")


def validate(code: Any) -> bool:
    """Return True when ``code`` is exactly eight ASCII decimal digits."""
    if not isinstance(code, str) or len(code) != CEP_LENGTH:
        return False
    return all(char in _DIGITS for char in code)
