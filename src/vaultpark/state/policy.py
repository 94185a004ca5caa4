"""Scan acceptance policy.

Pure bookkeeping for repeat reads: the camera reports the same code many
times per second, and an accepted token must not open or close a second
session while it is still fresh.
"""

from __future__ import annotations


class ScanDebouncer:
    """Drops a repeat read of the last code within *window_ms*."""

    def __init__(self, window_ms: int) -> None:
        self.window_ms = window_ms
        self._last_token: str | None = None
        self._last_at: int = 0

    def should_ignore(self, token: str, now_ms: int) -> bool:
        return token == self._last_token and now_ms - self._last_at < self.window_ms

    def record(self, token: str, now_ms: int) -> None:
        self._last_token = token
        self._last_at = now_ms

    def reset(self) -> None:
        self._last_token = None
        self._last_at = 0


class ConsumedTokens:
    """Digests of accepted tokens, kept until the tokens could no longer pass expiry.

    Parameters
    ----------
    retention_ms : int
        How long a digest is remembered after it was consumed.
    """

    def __init__(self, retention_ms: int) -> None:
        self.retention_ms = retention_ms
        self._consumed: dict[str, int] = {}

    def prune(self, now_ms: int) -> None:
        cutoff = now_ms - self.retention_ms
        for digest in [d for d, at in self._consumed.items() if at < cutoff]:
            del self._consumed[digest]

    def is_consumed(self, digest: str, now_ms: int) -> bool:
        self.prune(now_ms)
        return digest in self._consumed

    def consume(self, digest: str, now_ms: int) -> None:
        self._consumed[digest] = now_ms
