"""Token signing strategies.

A signer turns the joined token fields into a full-length lowercase hex
digest.  The token format decides how much of it travels in the QR code.
"""

from __future__ import annotations

from cryptography.hazmat.primitives import hashes, hmac

from vaultpark._crypto.hashing import sha256_hex
from vaultpark.exceptions import SigningKeyError

_MIN_KEY_BYTES = 16


class Sha256Signer:
    """Unkeyed SHA-256.

    Detects corruption only; anyone who knows the format can mint tokens.
    """

    def digest_hex(self, data: str) -> str:
        return sha256_hex(data)

    def __repr__(self) -> str:
        return "Sha256Signer()"


class HmacSha256Signer:
    """HMAC-SHA-256 keyed with a secret held by the parking operator.

    Parameters
    ----------
    key : str or bytes
        Shared secret. Text keys are UTF-8 encoded. At least 16 bytes.
    """

    def __init__(self, key: str | bytes) -> None:
        raw = key.encode("utf-8") if isinstance(key, str) else bytes(key)
        if len(raw) < _MIN_KEY_BYTES:
            raise SigningKeyError(f"signing key must be at least {_MIN_KEY_BYTES} bytes (got {len(raw)})")
        self._key = raw

    def digest_hex(self, data: str) -> str:
        mac = hmac.HMAC(self._key, hashes.SHA256())
        mac.update(data.encode("utf-8"))
        return mac.finalize().hex()

    def __repr__(self) -> str:
        # Never expose the key.
        return "HmacSha256Signer(key=<redacted>)"
