"""Library configuration for vaultpark."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from vaultpark._constants import (
    DEFAULT_GATE,
    DEFAULT_MAX_CLOCK_SKEW,
    DEFAULT_RECENT_SCANS_LIMIT,
    DEFAULT_SCAN_DEBOUNCE,
    DEFAULT_TOKEN_TTL,
)
from vaultpark._crypto import HmacSha256Signer, Sha256Signer, TokenSigner
from vaultpark.exceptions import SigningKeyError, VaultParkConfigError
from vaultpark.tokens.encoder import TokenEncoder
from vaultpark.tokens.format import FORMATS, TokenFormat
from vaultpark.tokens.validator import TokenValidator


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, raw: str, kind: type[int] | type[float]) -> int | float:
    try:
        return kind(raw)
    except ValueError as exc:
        raise VaultParkConfigError(f"{env_key} must be a number, got {raw!r}") from exc


@dataclasses.dataclass(frozen=True)
class VaultParkConfig:
    """Token and scanner configuration.

    Parameters
    ----------
    token_format : str
        ``"v1"`` (canonical, 16-char digest) or ``"v2"`` (optional gate/lot
        fields, full digest).
    token_ttl : float
        Seconds a token is accepted after creation.
    enforce_expiry : bool
        Whether the gate scanner rejects expired tokens.
    max_clock_skew : float
        Seconds a token timestamp may run ahead of the scanner clock.
    signing_key : str or None
        Shared secret for HMAC-SHA-256 tokens. ``None`` uses unkeyed SHA-256.
    default_gate : str
        Gate recorded on sessions when the guard has not picked one.
    scan_debounce : float
        Seconds during which a repeat read of the same code is ignored.
    recent_scans_limit : int
        Sessions returned by :meth:`GateScanner.recent_scans`.
    guard_id : str
        Id of the guard operating the scanner.
    """

    token_format: str = "v1"
    token_ttl: float = DEFAULT_TOKEN_TTL
    enforce_expiry: bool = True
    max_clock_skew: float = DEFAULT_MAX_CLOCK_SKEW
    signing_key: str | None = dataclasses.field(default=None, repr=False)
    default_gate: str = DEFAULT_GATE
    scan_debounce: float = DEFAULT_SCAN_DEBOUNCE
    recent_scans_limit: int = DEFAULT_RECENT_SCANS_LIMIT
    guard_id: str = ""

    def __post_init__(self) -> None:
        if self.token_format not in FORMATS:
            raise VaultParkConfigError(f"token_format must be one of {sorted(FORMATS)}, got {self.token_format!r}")
        if self.token_ttl <= 0:
            raise VaultParkConfigError("token_ttl must be positive")
        if self.max_clock_skew < 0:
            raise VaultParkConfigError("max_clock_skew must not be negative")
        if self.scan_debounce < 0:
            raise VaultParkConfigError("scan_debounce must not be negative")
        if self.recent_scans_limit < 1:
            raise VaultParkConfigError("recent_scans_limit must be at least 1")

    @classmethod
    def from_env(cls, **overrides: Any) -> VaultParkConfig:
        """Create configuration from ``VAULTPARK_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "VAULTPARK_TOKEN_FORMAT": "token_format",
            "VAULTPARK_SIGNING_KEY": "signing_key",
            "VAULTPARK_DEFAULT_GATE": "default_gate",
            "VAULTPARK_GUARD_ID": "guard_id",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_NUMERIC_MAP: dict[str, tuple[str, type[int] | type[float]]] = {
            "VAULTPARK_TOKEN_TTL": ("token_ttl", float),
            "VAULTPARK_MAX_CLOCK_SKEW": ("max_clock_skew", float),
            "VAULTPARK_SCAN_DEBOUNCE": ("scan_debounce", float),
            "VAULTPARK_RECENT_SCANS_LIMIT": ("recent_scans_limit", int),
        }
        for env_key, (field_name, kind) in _ENV_NUMERIC_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, kind)

        if "enforce_expiry" not in overrides:
            config_kwargs["enforce_expiry"] = _env_bool(env.get("VAULTPARK_ENFORCE_EXPIRY"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)

    def resolve_format(self) -> TokenFormat:
        return FORMATS[self.token_format]

    def build_signer(self) -> TokenSigner:
        """HMAC signer when a key is configured, plain SHA-256 otherwise."""
        if self.signing_key is None:
            return Sha256Signer()
        try:
            return HmacSha256Signer(self.signing_key)
        except SigningKeyError as exc:
            raise VaultParkConfigError(str(exc)) from exc

    def build_validator(self) -> TokenValidator:
        return TokenValidator(
            self.resolve_format(),
            self.build_signer(),
            ttl=self.token_ttl,
            max_clock_skew=self.max_clock_skew,
        )

    def build_encoder(self) -> TokenEncoder:
        return TokenEncoder(self.resolve_format(), self.build_signer())
