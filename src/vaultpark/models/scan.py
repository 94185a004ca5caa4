"""Gate scan results."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from vaultpark.models.session import ParkingSession
from vaultpark.models.token import TokenRejection


class ScanOutcome(StrEnum):
    ENTRY = "entry"
    EXIT = "exit"
    REJECTED = "rejected"
    IGNORED = "ignored"


class ScanResult(BaseModel):
    """What the guard's screen shows after a scan.

    ``IGNORED`` covers a duplicate read of the same code inside the debounce
    window and a read that arrived while another scan was processing.
    """

    model_config = ConfigDict(frozen=True)

    outcome: ScanOutcome
    session: ParkingSession | None = None
    message: str | None = None
    rejection: TokenRejection | None = None

    @property
    def accepted(self) -> bool:
        return self.outcome in (ScanOutcome.ENTRY, ScanOutcome.EXIT)
