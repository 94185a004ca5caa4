"""Token encoder: builds the delimited payload and appends its digest."""

from __future__ import annotations

import time
from collections.abc import Callable

from vaultpark._constants import DELIMITER, in_int64_range
from vaultpark._crypto import Sha256Signer, TokenSigner, truncate_hex
from vaultpark.exceptions import TokenEncodeError
from vaultpark.tokens.format import VAULTPARK_V1, TokenFormat

_DEFAULT_SIGNER = Sha256Signer()


def now_ms() -> int:
    """Current epoch timestamp in milliseconds."""
    return int(time.time() * 1000)


def _check_field(name: str, value: str, *, required: bool) -> None:
    if not isinstance(value, str):
        raise TokenEncodeError(f"{name} must be a string, got {type(value).__name__}")
    if required and not value.strip():
        raise TokenEncodeError(f"{name} must be non-empty")
    if DELIMITER in value:
        raise TokenEncodeError(f"{name} must not contain {DELIMITER!r}")
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise TokenEncodeError(f"{name} is not UTF-8 encodable") from exc


def _optional_values(
    token_format: TokenFormat,
    supplied: dict[str, str | None],
) -> list[str]:
    given = {name: value for name, value in supplied.items() if value is not None}
    unsupported = [name for name in given if name not in token_format.optional_fields]
    if unsupported:
        raise TokenEncodeError(f"format {token_format.name!r} does not carry {', '.join(sorted(unsupported))}")

    values: list[str] = []
    gap: str | None = None
    for name in token_format.optional_fields:
        value = given.get(name)
        if value is None:
            gap = gap or name
            continue
        if gap is not None:
            # Optional fields are positional; a hole would shift later ones.
            raise TokenEncodeError(f"{name} requires {gap} in format {token_format.name!r}")
        _check_field(name, value, required=False)
        values.append(value)
    return values


def encode(
    user_id: str,
    vehicle_number: str,
    timestamp: int | None = None,
    *,
    gate_hint: str | None = None,
    lot_id: str | None = None,
    token_format: TokenFormat = VAULTPARK_V1,
    signer: TokenSigner | None = None,
) -> str:
    """Build a verifiable token for a driver.

    Parameters
    ----------
    user_id : str
        Driver id.
    vehicle_number : str
        Vehicle plate.
    timestamp : int or None
        Creation time in epoch milliseconds. Defaults to now.
    gate_hint, lot_id : str or None
        Optional context, only for formats that declare it.
    token_format : TokenFormat
        Layout to produce. Defaults to the canonical ``VAULTPARK_V1``.
    signer : TokenSigner or None
        Integrity primitive. Defaults to unkeyed SHA-256.

    Returns
    -------
    str
        ``prefix|userId|timestamp|vehicleNumber[|optional...]|hash``.

    Raises
    ------
    TokenEncodeError
        If a field is empty, contains the delimiter, or is not valid for
        the chosen format, or if the timestamp is outside the signed
        64-bit range.
    """
    _check_field("user_id", user_id, required=True)
    _check_field("vehicle_number", vehicle_number, required=True)
    if timestamp is None:
        timestamp = now_ms()
    elif isinstance(timestamp, bool) or not isinstance(timestamp, int):
        raise TokenEncodeError(f"timestamp must be an int (epoch ms), got {type(timestamp).__name__}")
    if not in_int64_range(timestamp):
        raise TokenEncodeError(f"timestamp {timestamp} does not fit a signed 64-bit integer")

    fields = [token_format.prefix, user_id, str(timestamp), vehicle_number]
    fields.extend(_optional_values(token_format, {"gate_hint": gate_hint, "lot_id": lot_id}))

    data = DELIMITER.join(fields)
    digest = truncate_hex((signer or _DEFAULT_SIGNER).digest_hex(data), token_format.hash_length)
    return f"{data}{DELIMITER}{digest}"


class TokenEncoder:
    """Encoder bound to one format, signer and clock.

    Usage::

        encoder = TokenEncoder(signer=HmacSha256Signer(key))
        token = encoder.encode("driver-42", "ABC-123")
    """

    def __init__(
        self,
        token_format: TokenFormat = VAULTPARK_V1,
        signer: TokenSigner | None = None,
        *,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self.token_format = token_format
        self.signer: TokenSigner = signer or _DEFAULT_SIGNER
        self._clock = clock or now_ms

    def encode(
        self,
        user_id: str,
        vehicle_number: str,
        timestamp: int | None = None,
        *,
        gate_hint: str | None = None,
        lot_id: str | None = None,
    ) -> str:
        return encode(
            user_id,
            vehicle_number,
            self._clock() if timestamp is None else timestamp,
            gate_hint=gate_hint,
            lot_id=lot_id,
            token_format=self.token_format,
            signer=self.signer,
        )
