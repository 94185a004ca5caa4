from __future__ import annotations

import asyncio
import logging

import pytest

from vaultpark.config import VaultParkConfig
from vaultpark.exceptions import SessionStoreError
from vaultpark.models import Driver, ParkingSession, ScanOutcome, SessionStatus, TokenRejection
from vaultpark.scanner import GateScanner
from vaultpark.state import InMemorySessionStore
from vaultpark.tokens import encode

T0 = 1_700_000_000_000
KEY = "gate-operator-secret-0001"


class FakeClock:
    def __init__(self, now: int) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FailingStore(InMemorySessionStore):
    async def create_session(self, session: ParkingSession) -> ParkingSession:
        raise SessionStoreError("backend unavailable", operation="create_session")


class BlockingStore(InMemorySessionStore):
    def __init__(self, drivers: list[Driver]) -> None:
        super().__init__(drivers)
        self.release = asyncio.Event()

    async def get_driver(self, user_id: str) -> Driver | None:
        await self.release.wait()
        return await super().get_driver(user_id)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(T0)


@pytest.fixture
def driver() -> Driver:
    return Driver(id="driver-42", name="Ada", vehicle_number="ABC-123")


@pytest.fixture
def store(driver: Driver) -> InMemorySessionStore:
    return InMemorySessionStore([driver])


@pytest.fixture
def scanner(store: InMemorySessionStore, clock: FakeClock) -> GateScanner:
    return GateScanner(store, VaultParkConfig(guard_id="guard-7"), clock=clock)


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_entry_then_exit(scanner: GateScanner, store: InMemorySessionStore, clock: FakeClock) -> None:
    scanner.set_gate("North Gate")
    entry = await scanner.scan(encode("driver-42", "ABC-123", clock.now))

    assert entry.outcome is ScanOutcome.ENTRY
    assert entry.session is not None
    assert entry.session.id == "session-1"
    assert entry.session.gate_location == "North Gate"
    assert entry.session.scanned_by_guard_id == "guard-7"
    assert entry.session.driver_name == "Ada"
    assert entry.session.status is SessionStatus.ACTIVE
    assert "driver-42" not in entry.session.qr_code_data_used

    clock.advance(90 * 60_000)
    exit_ = await scanner.scan(encode("driver-42", "ABC-123", clock.now))

    assert exit_.outcome is ScanOutcome.EXIT
    assert exit_.session is not None
    assert exit_.session.id == "session-1"
    assert exit_.session.duration_minutes == 90
    assert store.sessions[0].status is SessionStatus.COMPLETED

    recent = await scanner.recent_scans()
    assert [s.id for s in recent] == ["session-1"]


@pytest.mark.asyncio
async def test_session_documents_logged_with_token_masked(
    scanner: GateScanner, clock: FakeClock, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.DEBUG, logger="vaultpark.scanner")
    await scanner.scan(encode("driver-42", "ABC-123", clock.now))
    clock.advance(10 * 60_000)
    await scanner.scan(encode("driver-42", "ABC-123", clock.now))

    opened = [r for r in caplog.records if r.getMessage().startswith("Opened session")]
    closed = [r for r in caplog.records if r.getMessage().startswith("Closed session")]
    assert len(opened) == 1
    assert len(closed) == 1
    for record in opened + closed:
        text = record.getMessage()
        assert "'driverId': 'driver-42'" in text
        assert "'qrCodeDataUsed': '<redacted>'" in text
        assert "<token" not in text
    assert "'status': 'COMPLETED'" in closed[0].getMessage()


@pytest.mark.asyncio
async def test_duplicate_read_within_debounce_is_ignored(scanner: GateScanner, clock: FakeClock) -> None:
    token = encode("driver-42", "ABC-123", clock.now)
    assert (await scanner.scan(token)).outcome is ScanOutcome.ENTRY

    clock.advance(2_999)
    assert (await scanner.scan(token)).outcome is ScanOutcome.IGNORED


@pytest.mark.asyncio
async def test_reused_token_is_rejected_after_debounce(scanner: GateScanner, clock: FakeClock) -> None:
    token = encode("driver-42", "ABC-123", clock.now)
    assert (await scanner.scan(token)).outcome is ScanOutcome.ENTRY

    clock.advance(5_000)
    again = await scanner.scan(token)
    assert again.outcome is ScanOutcome.REJECTED
    assert again.rejection is TokenRejection.REPLAYED


@pytest.mark.asyncio
async def test_reset_allows_immediate_rescan_of_rejected_code(scanner: GateScanner, clock: FakeClock) -> None:
    assert (await scanner.scan("garbage")).outcome is ScanOutcome.REJECTED
    assert (await scanner.scan("garbage")).outcome is ScanOutcome.IGNORED
    scanner.reset()
    assert (await scanner.scan("garbage")).outcome is ScanOutcome.REJECTED


@pytest.mark.asyncio
async def test_expired_token_rejected(scanner: GateScanner, clock: FakeClock) -> None:
    token = encode("driver-42", "ABC-123", clock.now - 121_000)
    result = await scanner.scan(token)
    assert result.outcome is ScanOutcome.REJECTED
    assert result.rejection is TokenRejection.EXPIRED
    assert result.message == "QR code expired. Please request a new one"


@pytest.mark.asyncio
async def test_expiry_can_be_disabled(store: InMemorySessionStore, clock: FakeClock) -> None:
    scanner = GateScanner(store, VaultParkConfig(enforce_expiry=False), clock=clock)
    result = await scanner.scan(encode("driver-42", "ABC-123", 0))
    assert result.outcome is ScanOutcome.ENTRY


@pytest.mark.asyncio
async def test_tampered_token_rejected(scanner: GateScanner, store: InMemorySessionStore, clock: FakeClock) -> None:
    token = encode("driver-42", "ABC-123", clock.now).replace("ABC-123", "ABC-124")
    result = await scanner.scan(token)
    assert result.rejection is TokenRejection.INTEGRITY
    assert store.sessions == []


@pytest.mark.asyncio
async def test_unknown_driver_rejected(scanner: GateScanner, clock: FakeClock) -> None:
    result = await scanner.scan(encode("nobody", "ABC-123", clock.now))
    assert result.outcome is ScanOutcome.REJECTED
    assert result.message == "Driver not found in system"


@pytest.mark.asyncio
async def test_exit_with_other_vehicle_rejected(scanner: GateScanner, clock: FakeClock) -> None:
    await scanner.scan(encode("driver-42", "ABC-123", clock.now))
    clock.advance(60_000)
    result = await scanner.scan(encode("driver-42", "XYZ-999", clock.now))
    assert result.outcome is ScanOutcome.REJECTED
    assert result.message == "Vehicle number mismatch. Expected ABC-123"


@pytest.mark.asyncio
async def test_store_failure_becomes_rejection(driver: Driver, clock: FakeClock) -> None:
    scanner = GateScanner(FailingStore([driver]), clock=clock)
    token = encode("driver-42", "ABC-123", clock.now)

    result = await scanner.scan(token)
    assert result.outcome is ScanOutcome.REJECTED
    assert "backend unavailable" in (result.message or "")

    # The failed attempt did not consume the token.
    scanner.reset()
    assert (await scanner.scan(token)).rejection is not TokenRejection.REPLAYED


@pytest.mark.asyncio
async def test_scan_while_processing_is_ignored(driver: Driver, clock: FakeClock) -> None:
    store = BlockingStore([driver])
    scanner = GateScanner(store, clock=clock)

    first = asyncio.create_task(scanner.scan(encode("driver-42", "ABC-123", clock.now)))
    await asyncio.sleep(0)
    second = await scanner.scan(encode("driver-42", "ABC-123", clock.now + 1))
    assert second.outcome is ScanOutcome.IGNORED

    store.release.set()
    assert (await first).outcome is ScanOutcome.ENTRY


@pytest.mark.asyncio
async def test_keyed_scanner_refuses_unkeyed_tokens(store: InMemorySessionStore, clock: FakeClock) -> None:
    config = VaultParkConfig(signing_key=KEY)
    scanner = GateScanner(store, config, clock=clock)

    forged = await scanner.scan(encode("driver-42", "ABC-123", clock.now))
    assert forged.rejection is TokenRejection.INTEGRITY

    genuine = await scanner.scan(config.build_encoder().encode("driver-42", "ABC-123", clock.now))
    assert genuine.outcome is ScanOutcome.ENTRY


def test_set_gate_rejects_blank(scanner: GateScanner) -> None:
    with pytest.raises(ValueError):
        scanner.set_gate("  ")
    assert scanner.gate == "Main Entrance"
