"""Session store interface and an in-memory implementation.

The hosted document store is an external service; the scanner only talks
to it through :class:`SessionStore`.  :class:`InMemorySessionStore` keeps
the same semantics in process for tests and local tooling.
"""

from __future__ import annotations

import asyncio
import itertools
from typing import Protocol

from vaultpark.exceptions import SessionNotFoundError, SessionStoreError
from vaultpark.models.session import Driver, ParkingSession, SessionStatus


class SessionStore(Protocol):
    """Async persistence operations used by the gate scanner.

    Implementations raise :class:`SessionStoreError` for backend failures.
    """

    async def get_driver(self, user_id: str) -> Driver | None: ...

    async def get_active_session(self, driver_id: str) -> ParkingSession | None: ...

    async def create_session(self, session: ParkingSession) -> ParkingSession: ...

    async def update_session(self, session: ParkingSession) -> None: ...

    async def recent_sessions(self, limit: int) -> list[ParkingSession]: ...


class InMemorySessionStore:
    """Deterministic in-memory :class:`SessionStore`.

    Session ids are assigned on creation as ``session-<n>``.
    """

    def __init__(self, drivers: list[Driver] | None = None) -> None:
        self._drivers: dict[str, Driver] = {d.id: d for d in drivers or ()}
        self._sessions: dict[str, ParkingSession] = {}
        self._ids = itertools.count(1)
        self._lock = asyncio.Lock()

    @property
    def sessions(self) -> list[ParkingSession]:
        return list(self._sessions.values())

    async def get_driver(self, user_id: str) -> Driver | None:
        return self._drivers.get(user_id)

    async def get_active_session(self, driver_id: str) -> ParkingSession | None:
        for session in self._sessions.values():
            if session.driver_id == driver_id and session.status == SessionStatus.ACTIVE:
                return session
        return None

    async def create_session(self, session: ParkingSession) -> ParkingSession:
        async with self._lock:
            if session.id and session.id in self._sessions:
                raise SessionStoreError(f"session {session.id} already exists", operation="create_session")
            stored = session.model_copy(update={"id": session.id or f"session-{next(self._ids)}"})
            self._sessions[stored.id] = stored
            return stored

    async def update_session(self, session: ParkingSession) -> None:
        async with self._lock:
            if session.id not in self._sessions:
                raise SessionNotFoundError(f"session {session.id!r} not found", operation="update_session")
            self._sessions[session.id] = session

    async def recent_sessions(self, limit: int) -> list[ParkingSession]:
        ordered = sorted(self._sessions.values(), key=lambda s: s.entry_time, reverse=True)
        return ordered[:limit]
