"""Parsed QR token model."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class TokenRejection(StrEnum):
    """Why a presented token was refused."""

    FORMAT = "format"
    PREFIX = "prefix"
    TIMESTAMP = "timestamp"
    EMPTY_FIELD = "empty_field"
    INTEGRITY = "integrity"
    EXPIRED = "expired"
    FUTURE = "future"
    REPLAYED = "replayed"


class ParsedToken(BaseModel):
    """Outcome of a full token check.

    Parameters
    ----------
    user_id : str
        Driver id, empty when the token was rejected before it could be read.
    timestamp : int
        Creation time in epoch milliseconds, ``0`` when unreadable.
    vehicle_number : str
        Plate carried by the token.
    gate_hint : str or None
        Preferred gate (extended format only).
    lot_id : str or None
        Parking lot id (extended format only).
    hash : str
        Trailing digest as presented.
    is_valid : bool
        ``True`` only when every requested check passed.
    rejection : TokenRejection or None
        First failed check.
    message : str or None
        Human readable rejection text for the scanner screen.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str = ""
    timestamp: int = 0
    vehicle_number: str = ""
    gate_hint: str | None = None
    lot_id: str | None = None
    hash: str = ""
    is_valid: bool = True
    rejection: TokenRejection | None = None
    message: str | None = None

    @classmethod
    def rejected(cls, rejection: TokenRejection, message: str, **fields: object) -> ParsedToken:
        return cls(is_valid=False, rejection=rejection, message=message, **fields)
