"""Internal constants shared across the library."""

TOKEN_PREFIX = "VAULTPARK"
TOKEN_PREFIX_V2 = "VAULTPARK2"
DELIMITER = "|"

# userId, timestamp, vehicleNumber between the prefix and the hash.
CORE_FIELD_COUNT = 5

SHORT_HASH_LENGTH = 16
FULL_HASH_LENGTH = 64

#: Seconds a scanned token stays acceptable.
DEFAULT_TOKEN_TTL: float = 2 * 60
DEFAULT_MAX_CLOCK_SKEW: float = 30.0

DEFAULT_GATE = "Main Entrance"
DEFAULT_SCAN_DEBOUNCE: float = 3.0
DEFAULT_RECENT_SCANS_LIMIT = 10

# Signed 64-bit range accepted for embedded timestamps.
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def in_int64_range(value: int) -> bool:
    """Return ``True`` when *value* fits a signed 64-bit integer."""
    return _INT64_MIN <= value <= _INT64_MAX
