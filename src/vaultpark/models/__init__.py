"""Data models for VaultPark tokens, sessions and scans."""

from vaultpark.models._base import EpochMillis, VaultParkBaseModel, millis_to_datetime, parse_epoch_millis
from vaultpark.models.scan import ScanOutcome, ScanResult
from vaultpark.models.session import Driver, ParkingSession, SessionStatus
from vaultpark.models.token import ParsedToken, TokenRejection

__all__ = [
    "Driver",
    "EpochMillis",
    "ParkingSession",
    "ParsedToken",
    "ScanOutcome",
    "ScanResult",
    "SessionStatus",
    "TokenRejection",
    "VaultParkBaseModel",
    "millis_to_datetime",
    "parse_epoch_millis",
]
