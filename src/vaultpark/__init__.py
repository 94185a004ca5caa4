"""vaultpark - QR session tokens and gate scanning for VaultPark parking."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("vaultpark")
except PackageNotFoundError:
    __version__ = "0+local"
from vaultpark._crypto import HmacSha256Signer, Sha256Signer, TokenSigner
from vaultpark.config import VaultParkConfig
from vaultpark.exceptions import (
    SessionNotFoundError,
    SessionStoreError,
    SigningKeyError,
    TokenEncodeError,
    TokenError,
    VaultParkConfigError,
    VaultParkError,
)
from vaultpark.models import (
    Driver,
    ParkingSession,
    ParsedToken,
    ScanOutcome,
    ScanResult,
    SessionStatus,
    TokenRejection,
)
from vaultpark.scanner import GateScanner
from vaultpark.state import InMemorySessionStore, SessionStore
from vaultpark.tokens import (
    VAULTPARK_V1,
    VAULTPARK_V2,
    TokenEncoder,
    TokenFormat,
    TokenValidator,
    encode,
    extract_field,
    extract_timestamp,
    validate_format,
    verify_integrity,
)

__all__ = [
    "__version__",
    "VAULTPARK_V1",
    "VAULTPARK_V2",
    "Driver",
    "GateScanner",
    "HmacSha256Signer",
    "InMemorySessionStore",
    "ParkingSession",
    "ParsedToken",
    "ScanOutcome",
    "ScanResult",
    "SessionNotFoundError",
    "SessionStatus",
    "SessionStore",
    "SessionStoreError",
    "Sha256Signer",
    "SigningKeyError",
    "TokenEncodeError",
    "TokenEncoder",
    "TokenError",
    "TokenFormat",
    "TokenRejection",
    "TokenSigner",
    "TokenValidator",
    "VaultParkConfig",
    "VaultParkConfigError",
    "VaultParkError",
    "encode",
    "extract_field",
    "extract_timestamp",
    "validate_format",
    "verify_integrity",
]
