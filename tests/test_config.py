from __future__ import annotations

import pytest

from vaultpark._crypto import HmacSha256Signer, Sha256Signer
from vaultpark.config import VaultParkConfig
from vaultpark.exceptions import VaultParkConfigError
from vaultpark.tokens import VAULTPARK_V1, VAULTPARK_V2

_ENV_KEYS = (
    "VAULTPARK_TOKEN_FORMAT",
    "VAULTPARK_SIGNING_KEY",
    "VAULTPARK_DEFAULT_GATE",
    "VAULTPARK_GUARD_ID",
    "VAULTPARK_TOKEN_TTL",
    "VAULTPARK_MAX_CLOCK_SKEW",
    "VAULTPARK_SCAN_DEBOUNCE",
    "VAULTPARK_RECENT_SCANS_LIMIT",
    "VAULTPARK_ENFORCE_EXPIRY",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults() -> None:
    config = VaultParkConfig()
    assert config.resolve_format() is VAULTPARK_V1
    assert isinstance(config.build_signer(), Sha256Signer)
    assert config.token_ttl == 120.0
    assert config.enforce_expiry is True
    assert config.default_gate == "Main Entrance"


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VAULTPARK_TOKEN_FORMAT", "v2")
    monkeypatch.setenv("VAULTPARK_SIGNING_KEY", "0123456789abcdef-key")
    monkeypatch.setenv("VAULTPARK_TOKEN_TTL", "60")
    monkeypatch.setenv("VAULTPARK_RECENT_SCANS_LIMIT", "5")
    monkeypatch.setenv("VAULTPARK_ENFORCE_EXPIRY", "no")
    monkeypatch.setenv("VAULTPARK_GUARD_ID", "guard-7")

    config = VaultParkConfig.from_env()

    assert config.resolve_format() is VAULTPARK_V2
    assert isinstance(config.build_signer(), HmacSha256Signer)
    assert config.token_ttl == 60.0
    assert config.recent_scans_limit == 5
    assert config.enforce_expiry is False
    assert config.guard_id == "guard-7"


def test_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VAULTPARK_TOKEN_TTL", "60")
    monkeypatch.setenv("VAULTPARK_ENFORCE_EXPIRY", "false")
    config = VaultParkConfig.from_env(token_ttl=30.0, enforce_expiry=True)
    assert config.token_ttl == 30.0
    assert config.enforce_expiry is True


def test_signing_key_hidden_from_repr() -> None:
    assert "super-secret-signing-key" not in repr(VaultParkConfig(signing_key="super-secret-signing-key"))


@pytest.mark.parametrize(
    "kwargs",
    [
        {"token_format": "v3"},
        {"token_ttl": 0},
        {"max_clock_skew": -1},
        {"scan_debounce": -0.5},
        {"recent_scans_limit": 0},
    ],
)
def test_invalid_values_raise(kwargs: dict[str, object]) -> None:
    with pytest.raises(VaultParkConfigError):
        VaultParkConfig(**kwargs)  # type: ignore[arg-type]


def test_non_numeric_env_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VAULTPARK_TOKEN_TTL", "two minutes")
    with pytest.raises(VaultParkConfigError, match="VAULTPARK_TOKEN_TTL"):
        VaultParkConfig.from_env()


def test_short_signing_key_is_config_error() -> None:
    with pytest.raises(VaultParkConfigError, match="at least 16 bytes"):
        VaultParkConfig(signing_key="short").build_signer()


def test_built_encoder_and_validator_agree() -> None:
    config = VaultParkConfig(token_format="v2", signing_key="0123456789abcdef-key", token_ttl=45.0)
    token = config.build_encoder().encode("driver", "ABC", 1_700_000_000_000, gate_hint="East")
    validator = config.build_validator()
    assert validator.ttl == 45.0
    assert validator.verify_integrity(token)
