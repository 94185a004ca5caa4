"""Token layouts.

A layout is identified by its prefix, which doubles as the version tag: a
validator built for one layout rejects tokens of every other layout at the
prefix check, before any hashing.

``VAULTPARK_V1`` is canonical::

    VAULTPARK|{userId}|{timestamp}|{vehicleNumber}|{hash16}

``VAULTPARK_V2`` adds optional context and keeps the full digest::

    VAULTPARK2|{userId}|{timestamp}|{vehicleNumber}[|{gateHint}[|{lotId}]]|{hash64}
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vaultpark._constants import (
    CORE_FIELD_COUNT,
    DELIMITER,
    FULL_HASH_LENGTH,
    SHORT_HASH_LENGTH,
    TOKEN_PREFIX,
    TOKEN_PREFIX_V2,
)

#: Positions of the fixed fields.
PREFIX_INDEX = 0
USER_ID_INDEX = 1
TIMESTAMP_INDEX = 2
VEHICLE_NUMBER_INDEX = 3
FIRST_OPTIONAL_INDEX = 4

#: Optional context fields known to the encoder, in wire order.
KNOWN_OPTIONAL_FIELDS: tuple[str, ...] = ("gate_hint", "lot_id")


class TokenFormat(BaseModel):
    """Describes one token layout."""

    model_config = ConfigDict(frozen=True)

    name: str
    prefix: str
    optional_fields: tuple[str, ...] = ()
    hash_length: int = Field(default=SHORT_HASH_LENGTH, ge=8, le=FULL_HASH_LENGTH)

    @field_validator("prefix")
    @classmethod
    def _check_prefix(cls, value: str) -> str:
        if not value or DELIMITER in value:
            raise ValueError("prefix must be non-empty and free of the delimiter")
        return value

    @field_validator("optional_fields")
    @classmethod
    def _check_optional_fields(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        unknown = [name for name in value if name not in KNOWN_OPTIONAL_FIELDS]
        if unknown:
            raise ValueError(f"unknown optional fields: {unknown}")
        return value

    @property
    def min_fields(self) -> int:
        return CORE_FIELD_COUNT

    @property
    def max_fields(self) -> int:
        return CORE_FIELD_COUNT + len(self.optional_fields)

    def accepts_field_count(self, count: int) -> bool:
        return self.min_fields <= count <= self.max_fields


VAULTPARK_V1 = TokenFormat(name="v1", prefix=TOKEN_PREFIX)
VAULTPARK_V2 = TokenFormat(
    name="v2",
    prefix=TOKEN_PREFIX_V2,
    optional_fields=KNOWN_OPTIONAL_FIELDS,
    hash_length=FULL_HASH_LENGTH,
)

FORMATS: dict[str, TokenFormat] = {fmt.name: fmt for fmt in (VAULTPARK_V1, VAULTPARK_V2)}
