"""Cryptographic primitives for QR token integrity."""

from __future__ import annotations

from typing import Protocol

from vaultpark._crypto.hashing import is_lower_hex, sha256_hex, truncate_hex
from vaultpark._crypto.signing import HmacSha256Signer, Sha256Signer


class TokenSigner(Protocol):
    """Protocol for the integrity primitive appended to every token."""

    def digest_hex(self, data: str) -> str: ...


__all__ = [
    "HmacSha256Signer",
    "Sha256Signer",
    "TokenSigner",
    "is_lower_hex",
    "sha256_hex",
    "truncate_hex",
]
