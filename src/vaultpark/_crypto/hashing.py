"""Hash functions for QR token integrity."""

from __future__ import annotations

import hashlib


def sha256_hex(value: str) -> str:
    """Compute SHA-256 of a UTF-8 string, returning lowercase hex.

    Parameters
    ----------
    value : str
        The string to hash.

    Returns
    -------
    str
        64-character lowercase hex digest.

    Raises
    ------
    UnicodeEncodeError
        If *value* holds code points UTF-8 cannot encode (lone surrogates).
    """
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def truncate_hex(digest: str, length: int) -> str:
    """Keep the first *length* characters of a hex digest."""
    return digest[:length]


def is_lower_hex(value: str, length: int) -> bool:
    """Return ``True`` when *value* is exactly *length* lowercase hex characters."""
    if len(value) != length:
        return False
    return all(ch in "0123456789abcdef" for ch in value)
