"""Guard-side gate scan flow.

A scan either opens a parking session (entry) or closes the driver's open
one (exit).  Every refusal is reported as a :class:`ScanResult` so the
scanning loop keeps running; there is no retry, the driver must present a
freshly generated code.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from vaultpark._redact import redact_for_log, redact_token
from vaultpark.config import VaultParkConfig
from vaultpark.exceptions import SessionStoreError
from vaultpark.models.scan import ScanOutcome, ScanResult
from vaultpark.models.session import Driver, ParkingSession
from vaultpark.models.token import ParsedToken, TokenRejection
from vaultpark.state.policy import ConsumedTokens, ScanDebouncer
from vaultpark.state.store import SessionStore
from vaultpark.tokens.encoder import now_ms
from vaultpark.tokens.validator import TokenValidator

_logger = logging.getLogger(__name__)


def _rejected(message: str, rejection: TokenRejection | None = None) -> ScanResult:
    return ScanResult(outcome=ScanOutcome.REJECTED, message=message, rejection=rejection)


class GateScanner:
    """Turns scanned QR codes into session entries and exits.

    Usage::

        scanner = GateScanner(store, VaultParkConfig(guard_id="guard-7"))
        scanner.set_gate("North Gate")
        result = await scanner.scan(raw_qr_text)
    """

    def __init__(
        self,
        store: SessionStore,
        config: VaultParkConfig | None = None,
        *,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._config = config or VaultParkConfig()
        self._store = store
        self._clock = clock or now_ms
        self._validator = TokenValidator(
            self._config.resolve_format(),
            self._config.build_signer(),
            ttl=self._config.token_ttl,
            max_clock_skew=self._config.max_clock_skew,
            clock=self._clock,
        )
        self._gate = self._config.default_gate
        self._debouncer = ScanDebouncer(int(self._config.scan_debounce * 1000))
        self._consumed = ConsumedTokens(int((self._config.token_ttl + self._config.max_clock_skew) * 1000))
        self._lock = asyncio.Lock()

    @property
    def gate(self) -> str:
        return self._gate

    def set_gate(self, gate: str) -> None:
        gate = gate.strip()
        if not gate:
            raise ValueError("gate must be non-empty")
        self._gate = gate

    def reset(self) -> None:
        """Forget the last scanned code so it can be read again immediately."""
        self._debouncer.reset()

    async def scan(self, token: str) -> ScanResult:
        """Process one decoded QR payload."""
        if self._lock.locked():
            return ScanResult(outcome=ScanOutcome.IGNORED, message="Scan already in progress")

        now = self._clock()
        if self._debouncer.should_ignore(token, now):
            return ScanResult(outcome=ScanOutcome.IGNORED, message="Duplicate scan")
        self._debouncer.record(token, now)

        async with self._lock:
            result = await self._process(token, now)
        _logger.debug("Scan of %s at gate=%s -> %s", redact_token(token), self._gate, result.outcome)
        return result

    async def _process(self, token: str, now: int) -> ScanResult:
        parsed = self._validator.parse(token, check_expiry=self._config.enforce_expiry, now_ms=now)
        if not parsed.is_valid:
            return _rejected(parsed.message or "Invalid QR code", parsed.rejection)
        if self._consumed.is_consumed(parsed.hash, now):
            return _rejected("QR code already used. Please request a new one", TokenRejection.REPLAYED)

        try:
            driver = await self._store.get_driver(parsed.user_id)
            if driver is None:
                return _rejected("Driver not found in system")
            active = await self._store.get_active_session(driver.id)
            if active is not None:
                result = await self._handle_exit(active, parsed, now)
            else:
                result = await self._handle_entry(driver, parsed, token, now)
        except SessionStoreError as exc:
            _logger.warning("Session store %s failed: %s", exc.operation or "call", exc)
            return _rejected(f"Failed to record parking session: {exc}")

        if result.accepted:
            self._consumed.consume(parsed.hash, now)
        return result

    async def _handle_entry(self, driver: Driver, parsed: ParsedToken, token: str, now: int) -> ScanResult:
        if parsed.gate_hint and parsed.gate_hint != self._gate:
            _logger.debug("Driver prefers gate=%s, scanned at gate=%s", parsed.gate_hint, self._gate)
        session = ParkingSession(
            driver_id=driver.id,
            driver_name=driver.name,
            vehicle_number=parsed.vehicle_number,
            entry_time=now,
            gate_location=self._gate,
            scanned_by_guard_id=self._config.guard_id,
            qr_code_data_used=redact_token(token),
        )
        saved = await self._store.create_session(session)
        _logger.debug("Opened session %s", redact_for_log(saved.to_document()))
        return ScanResult(outcome=ScanOutcome.ENTRY, session=saved, message=f"Entry recorded at {self._gate}")

    async def _handle_exit(self, active: ParkingSession, parsed: ParsedToken, now: int) -> ScanResult:
        if active.vehicle_number != parsed.vehicle_number:
            return _rejected(f"Vehicle number mismatch. Expected {active.vehicle_number}")
        updated = active.completed(now)
        await self._store.update_session(updated)
        _logger.debug("Closed session %s", redact_for_log(updated.to_document()))
        return ScanResult(
            outcome=ScanOutcome.EXIT,
            session=updated,
            message=f"Exit recorded after {updated.duration_minutes} min",
        )

    async def recent_scans(self) -> list[ParkingSession]:
        return await self._store.recent_sessions(self._config.recent_scans_limit)
