"""QR session tokens: encoding, format checks, integrity and extraction."""

from vaultpark.tokens.encoder import TokenEncoder, encode, now_ms
from vaultpark.tokens.format import FORMATS, VAULTPARK_V1, VAULTPARK_V2, TokenFormat
from vaultpark.tokens.validator import (
    TokenValidator,
    extract_field,
    extract_timestamp,
    parse_timestamp,
    validate_format,
    verify_integrity,
)

__all__ = [
    "FORMATS",
    "VAULTPARK_V1",
    "VAULTPARK_V2",
    "TokenEncoder",
    "TokenFormat",
    "TokenValidator",
    "encode",
    "extract_field",
    "extract_timestamp",
    "now_ms",
    "parse_timestamp",
    "validate_format",
    "verify_integrity",
]
