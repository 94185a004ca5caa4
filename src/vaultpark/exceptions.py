"""Custom exception hierarchy for vaultpark."""

from __future__ import annotations


class VaultParkError(Exception):
    """Base exception for all vaultpark errors."""


class VaultParkConfigError(VaultParkError):
    """Invalid or missing configuration."""


class TokenError(VaultParkError):
    """Token generation failure.

    Validation never raises; it reports rejection through return values.
    """


class TokenEncodeError(TokenError, ValueError):
    """Encoder inputs cannot be represented unambiguously in a token."""


class SigningKeyError(TokenError):
    """Signing key missing or unusable."""


class SessionStoreError(VaultParkError):
    """Document store call failed."""

    def __init__(self, message: str, *, operation: str = "") -> None:
        self.operation = operation
        super().__init__(message)


class SessionNotFoundError(SessionStoreError):
    """Update targeted a parking session the store does not hold."""
