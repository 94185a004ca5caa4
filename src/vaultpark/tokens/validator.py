"""Token decoder and validator.

Every public operation here is total: any input, including non-``str``
values, empty strings, lone surrogates and oversized payloads, yields
``False``/``None`` or a rejected :class:`ParsedToken`, never an exception.
A scanner fed a corrupted barcode must reject it and keep scanning.
"""

from __future__ import annotations

import logging
import re
import secrets
from collections.abc import Callable
from typing import Any

from vaultpark._constants import DEFAULT_MAX_CLOCK_SKEW, DEFAULT_TOKEN_TTL, DELIMITER, in_int64_range
from vaultpark._crypto import Sha256Signer, TokenSigner, is_lower_hex, truncate_hex
from vaultpark._redact import redact_token
from vaultpark.models.token import ParsedToken, TokenRejection
from vaultpark.tokens.encoder import now_ms
from vaultpark.tokens.format import (
    FIRST_OPTIONAL_INDEX,
    PREFIX_INDEX,
    TIMESTAMP_INDEX,
    USER_ID_INDEX,
    VAULTPARK_V1,
    VEHICLE_NUMBER_INDEX,
    TokenFormat,
)

_logger = logging.getLogger(__name__)

# At most 19 digits keeps int() cheap and inside the signed 64-bit range check.
_TIMESTAMP_RE = re.compile(r"-?[0-9]{1,19}")

_FIELD_ALIASES: dict[str, str] = {
    "userId": "user_id",
    "vehicleNumber": "vehicle_number",
    "gateHint": "gate_hint",
    "lotId": "lot_id",
}

_FIXED_FIELDS: dict[str, int] = {
    "prefix": PREFIX_INDEX,
    "user_id": USER_ID_INDEX,
    "timestamp": TIMESTAMP_INDEX,
    "vehicle_number": VEHICLE_NUMBER_INDEX,
}


def parse_timestamp(text: str) -> int | None:
    """Parse a decimal epoch-ms field, ``None`` if it is not a signed 64-bit integer."""
    if not _TIMESTAMP_RE.fullmatch(text):
        return None
    value = int(text)
    return value if in_int64_range(value) else None


def _is_utf8_text(value: str) -> bool:
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


class TokenValidator:
    """Checks tokens of one format against one signer.

    Parameters
    ----------
    token_format : TokenFormat
        Accepted layout. Tokens of any other layout fail the format check.
    signer : TokenSigner or None
        Integrity primitive; must match the one used by the encoder.
    ttl : float
        Seconds after creation at which :meth:`is_expired` turns true.
    max_clock_skew : float
        Seconds a token timestamp may run ahead of the local clock.
    clock : callable or None
        Returns the current epoch time in ms.
    """

    def __init__(
        self,
        token_format: TokenFormat = VAULTPARK_V1,
        signer: TokenSigner | None = None,
        *,
        ttl: float = DEFAULT_TOKEN_TTL,
        max_clock_skew: float = DEFAULT_MAX_CLOCK_SKEW,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self.token_format = token_format
        self.signer: TokenSigner = signer or Sha256Signer()
        self.ttl = ttl
        self.max_clock_skew = max_clock_skew
        self._clock = clock or now_ms

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def _split(self, token: Any) -> list[str] | None:
        if not isinstance(token, str):
            return None
        parts = token.split(DELIMITER)
        if not self.token_format.accepts_field_count(len(parts)):
            return None
        if parts[PREFIX_INDEX] != self.token_format.prefix:
            return None
        return parts

    def validate_format(self, token: Any) -> bool:
        """Field count fits the format and the first field is its prefix."""
        return self._split(token) is not None

    # ------------------------------------------------------------------
    # Integrity
    # ------------------------------------------------------------------

    def _digest_matches(self, parts: list[str]) -> bool:
        provided = parts[-1]
        if not is_lower_hex(provided, self.token_format.hash_length):
            return False
        # Re-join the raw fields; never re-serialize parsed values.
        data = DELIMITER.join(parts[:-1])
        try:
            expected = truncate_hex(self.signer.digest_hex(data), self.token_format.hash_length)
        except UnicodeEncodeError:
            _logger.debug("Token fields are not UTF-8 encodable", exc_info=True)
            return False
        return secrets.compare_digest(expected, provided)

    def verify_integrity(self, token: Any) -> bool:
        """Recompute the digest and compare it with the trailing field."""
        parts = self._split(token)
        if parts is None:
            return False
        return self._digest_matches(parts)

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    def _field_index(self, name: str, field_count: int) -> int | None:
        key = _FIELD_ALIASES.get(name, name)
        if key == "hash":
            return field_count - 1
        if key in _FIXED_FIELDS:
            return _FIXED_FIELDS[key]
        if key in self.token_format.optional_fields:
            index = FIRST_OPTIONAL_INDEX + self.token_format.optional_fields.index(key)
            return index if index < field_count - 1 else None
        return None

    def extract_field(self, token: Any, field_name: Any) -> str | None:
        """Return a positional field of a format-valid token.

        Accepts ``userId``, ``timestamp``, ``vehicleNumber``, ``gateHint``,
        ``lotId``, ``hash``, ``prefix`` and their snake_case spellings.
        """
        if not isinstance(field_name, str):
            return None
        parts = self._split(token)
        if parts is None:
            return None
        index = self._field_index(field_name, len(parts))
        if index is None:
            return None
        return parts[index]

    def extract_timestamp(self, token: Any) -> int | None:
        raw = self.extract_field(token, "timestamp")
        if raw is None:
            return None
        return parse_timestamp(raw)

    # ------------------------------------------------------------------
    # Freshness
    # ------------------------------------------------------------------

    def _age_ms(self, timestamp: int, now: int | None) -> int:
        return (self._clock() if now is None else now) - timestamp

    def is_expired(self, token: Any, now_ms: int | None = None) -> bool:
        """Older than ``ttl`` seconds, or no readable timestamp."""
        timestamp = self.extract_timestamp(token)
        if timestamp is None:
            return True
        return self._age_ms(timestamp, now_ms) > self.ttl * 1000

    def is_from_future(self, token: Any, now_ms: int | None = None) -> bool:
        """Timestamp ahead of the local clock by more than ``max_clock_skew``."""
        timestamp = self.extract_timestamp(token)
        if timestamp is None:
            return False
        return -self._age_ms(timestamp, now_ms) > self.max_clock_skew * 1000

    # ------------------------------------------------------------------
    # Full check
    # ------------------------------------------------------------------

    def parse(self, token: Any, *, check_expiry: bool = False, now_ms: int | None = None) -> ParsedToken:
        """Run every check and report the first failure.

        Order: field count, prefix, timestamp, empty user id, empty vehicle
        number, digest, then (with *check_expiry*) future and expired.
        """
        result = self._parse(token, check_expiry=check_expiry, now_ms=now_ms)
        if not result.is_valid:
            _logger.debug("Rejected %s: %s", redact_token(token), result.rejection)
        return result

    def _parse(self, token: Any, *, check_expiry: bool, now_ms: int | None) -> ParsedToken:
        fmt = self.token_format
        if not isinstance(token, str):
            return ParsedToken.rejected(TokenRejection.FORMAT, "Invalid QR code: not text")

        parts = token.split(DELIMITER)
        if not fmt.accepts_field_count(len(parts)):
            expected = str(fmt.min_fields) if fmt.min_fields == fmt.max_fields else f"{fmt.min_fields}-{fmt.max_fields}"
            return ParsedToken.rejected(
                TokenRejection.FORMAT,
                f"Invalid QR code format. Expected {expected} parts, got {len(parts)}",
            )
        if parts[PREFIX_INDEX] != fmt.prefix:
            return ParsedToken.rejected(TokenRejection.PREFIX, f"Invalid QR code prefix. Expected '{fmt.prefix}'")
        if not _is_utf8_text(token):
            return ParsedToken.rejected(TokenRejection.FORMAT, "Invalid QR code: not valid UTF-8 text")

        timestamp = parse_timestamp(parts[TIMESTAMP_INDEX])
        if timestamp is None:
            return ParsedToken.rejected(TokenRejection.TIMESTAMP, "Invalid timestamp format")

        user_id = parts[USER_ID_INDEX]
        vehicle_number = parts[VEHICLE_NUMBER_INDEX]
        provided_hash = parts[-1]
        if not user_id.strip():
            return ParsedToken.rejected(TokenRejection.EMPTY_FIELD, "User ID is empty")
        if not vehicle_number.strip():
            return ParsedToken.rejected(
                TokenRejection.EMPTY_FIELD,
                "Vehicle number is empty",
                user_id=user_id,
                timestamp=timestamp,
                hash=provided_hash,
            )

        fields: dict[str, Any] = {
            "user_id": user_id,
            "timestamp": timestamp,
            "vehicle_number": vehicle_number,
            "gate_hint": self.extract_field(token, "gate_hint"),
            "lot_id": self.extract_field(token, "lot_id"),
            "hash": provided_hash,
        }
        if not self._digest_matches(parts):
            return ParsedToken.rejected(
                TokenRejection.INTEGRITY,
                "Invalid QR code hash. Possible tampering detected",
                **fields,
            )

        if check_expiry:
            age = self._age_ms(timestamp, now_ms)
            if -age > self.max_clock_skew * 1000:
                return ParsedToken.rejected(TokenRejection.FUTURE, "QR code timestamp is in the future", **fields)
            if age > self.ttl * 1000:
                return ParsedToken.rejected(TokenRejection.EXPIRED, "QR code expired. Please request a new one", **fields)

        return ParsedToken(**fields)


_default_validator = TokenValidator()


def validate_format(token: Any) -> bool:
    """:meth:`TokenValidator.validate_format` for the canonical format."""
    return _default_validator.validate_format(token)


def verify_integrity(token: Any) -> bool:
    """:meth:`TokenValidator.verify_integrity` for the canonical format."""
    return _default_validator.verify_integrity(token)


def extract_field(token: Any, field_name: Any) -> str | None:
    return _default_validator.extract_field(token, field_name)


def extract_timestamp(token: Any) -> int | None:
    return _default_validator.extract_timestamp(token)
