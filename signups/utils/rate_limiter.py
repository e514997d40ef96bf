"""Per-client admission gates (fixed-window rate limiting)."""
from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable

from redis.asyncio import Redis
from redis.exceptions import RedisError

from ..config import Settings
from ..logging_config import logger

UNKNOWN_CLIENT = "unknown"


@dataclass
class RateLimitRecord:
    count: int
    window_start: float


class AdmissionGate(ABC):
    """Decides whether a client may make another request.

    Implementations must never raise: a broken backend degrades to admitting
    or to a local fallback, not to a failed request.
    """

    max_requests: int
    window_seconds: float

    @abstractmethod
    async def allow(self, identity: str | None) -> bool:
        ...

    def sweep(self) -> int:
        return 0

    async def close(self) -> None:
        return None


class InMemoryAdmissionGate(AdmissionGate):
    """Fixed-window counter kept in process memory.

    A client that bursts on both sides of a window boundary can get up to
    ``2 * max_requests`` requests through. Callers rely on that behaviour, so
    it is kept as is.
    """

    def __init__(
        self,
        max_requests: int = 5,
        window_ms: int = 600_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_ms / 1000
        self._clock = clock
        self._store: dict[str, RateLimitRecord] = {}

    def __len__(self) -> int:
        return len(self._store)

    async def allow(self, identity: str | None) -> bool:
        return self.hit(identity)

    def hit(self, identity: str | None) -> bool:
        # No await between read and write: concurrent requests cannot interleave here.
        key = identity or UNKNOWN_CLIENT
        now = self._clock()
        record = self._store.get(key)
        if record is None or now - record.window_start > self.window_seconds:
            self._store[key] = RateLimitRecord(count=1, window_start=now)
            return True
        if record.count >= self.max_requests:
            return False
        record.count += 1
        return True

    def sweep(self) -> int:
        cutoff = self._clock() - self.window_seconds * 2
        stale = [key for key, record in self._store.items() if record.window_start < cutoff]
        for key in stale:
            del self._store[key]
        return len(stale)


class RedisAdmissionGate(AdmissionGate):
    """Fixed-window counter shared by every process pointing at one Redis.

    The key is created with the window as its TTL on the first hit, so the
    window starts at the first request exactly like the in-memory gate.
    """

    key_prefix = "signups:ratelimit:"

    def __init__(
        self,
        client: Any,
        max_requests: int = 5,
        window_ms: int = 600_000,
        fallback: AdmissionGate | None = None,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_ms / 1000
        self._window_ms = window_ms
        self._client = client
        self._fallback = fallback or InMemoryAdmissionGate(max_requests, window_ms)

    @classmethod
    def from_url(cls, url: str, max_requests: int, window_ms: int) -> "RedisAdmissionGate":
        client = Redis.from_url(url, encoding="utf-8", decode_responses=True)
        return cls(client, max_requests=max_requests, window_ms=window_ms)

    async def allow(self, identity: str | None) -> bool:
        key = self.key_prefix + (identity or UNKNOWN_CLIENT)
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.set(key, 0, px=self._window_ms, nx=True)
                pipe.incr(key)
                _, count = await pipe.execute()
        except (RedisError, OSError) as exc:
            logger.warning("ratelimit.redis_unavailable", error=str(exc))
            return await self._fallback.allow(identity)
        return int(count) <= self.max_requests

    def sweep(self) -> int:
        return self._fallback.sweep()

    async def close(self) -> None:
        try:
            await self._client.aclose()
        except (RedisError, OSError) as exc:  # pragma: no cover - shutdown path
            logger.debug("ratelimit.redis_close_failed", error=str(exc))


def build_admission_gate(settings: Settings) -> AdmissionGate:
    if settings.rate_limit_backend.lower() == "redis":
        return RedisAdmissionGate.from_url(
            settings.redis_url,
            max_requests=settings.rate_limit_max_requests,
            window_ms=settings.rate_limit_window_ms,
        )
    return InMemoryAdmissionGate(
        max_requests=settings.rate_limit_max_requests,
        window_ms=settings.rate_limit_window_ms,
    )


async def run_sweeper(gate: AdmissionGate, interval_seconds: float) -> None:
    while True:
        await asyncio.sleep(interval_seconds)
        removed = gate.sweep()
        if removed:
            logger.info("ratelimit.sweep", removed=removed)
