"""Driver and parking-session records."""

from __future__ import annotations

from enum import StrEnum

from pydantic import field_validator

from vaultpark.models._base import EpochMillis, OptionalEpochMillis, VaultParkBaseModel

_MS_PER_MINUTE = 60_000


class SessionStatus(StrEnum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"


class Driver(VaultParkBaseModel):
    """A registered driver as stored under ``users/{id}``."""

    id: str
    name: str = ""
    vehicle_number: str = ""
    email: str | None = None

    @field_validator("id")
    @classmethod
    def _normalize_id(cls, value: str) -> str:
        driver_id = value.strip()
        if not driver_id:
            raise ValueError("id must be non-empty")
        return driver_id


class ParkingSession(VaultParkBaseModel):
    """A parking session opened by an entry scan and closed by an exit scan."""

    id: str = ""
    driver_id: str
    driver_name: str = ""
    vehicle_number: str
    entry_time: EpochMillis
    exit_time: OptionalEpochMillis = None
    gate_location: str = ""
    scanned_by_guard_id: str = ""
    status: SessionStatus = SessionStatus.ACTIVE
    qr_code_data_used: str = ""
    """Redacted description of the token that opened the session."""

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE and self.exit_time is None

    @property
    def duration_minutes(self) -> int | None:
        """Whole minutes parked, ``None`` while the session is open."""
        if self.exit_time is None:
            return None
        return max(0, self.exit_time - self.entry_time) // _MS_PER_MINUTE

    def completed(self, exit_time: int) -> ParkingSession:
        """Copy of this session closed at *exit_time* (epoch ms).

        Goes through validation so *exit_time* gets the same coercion as
        ``entry_time``.
        """
        return self.model_validate({**self.model_dump(), "exit_time": exit_time, "status": SessionStatus.COMPLETED})
