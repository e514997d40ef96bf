from __future__ import annotations

import asyncio

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from signups.config import Settings
from signups.utils.rate_limiter import (
    UNKNOWN_CLIENT,
    InMemoryAdmissionGate,
    RedisAdmissionGate,
    build_admission_gate,
    run_sweeper,
)


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_gate(max_requests: int = 3, window_ms: int = 60_000) -> tuple[InMemoryAdmissionGate, FakeClock]:
    clock = FakeClock()
    return InMemoryAdmissionGate(max_requests=max_requests, window_ms=window_ms, clock=clock), clock


def test_denies_request_after_max_within_window():
    gate, clock = make_gate(max_requests=3)
    assert [gate.hit("198.51.100.1") for _ in range(3)] == [True, True, True]
    clock.advance(30)
    assert gate.hit("198.51.100.1") is False
    assert gate.hit("198.51.100.1") is False


def test_denied_requests_do_not_extend_the_count():
    gate, clock = make_gate(max_requests=2)
    gate.hit("a")
    gate.hit("a")
    for _ in range(5):
        assert gate.hit("a") is False
    clock.advance(61)
    assert gate.hit("a") is True


def test_identities_are_counted_separately():
    gate, _ = make_gate(max_requests=1)
    assert gate.hit("a") is True
    assert gate.hit("b") is True
    assert gate.hit("a") is False


def test_allows_again_after_window_expires():
    gate, clock = make_gate(max_requests=2, window_ms=60_000)
    gate.hit("a")
    gate.hit("a")
    assert gate.hit("a") is False
    clock.advance(60.001)
    assert gate.hit("a") is True
    assert gate.hit("a") is True
    assert gate.hit("a") is False


def test_request_exactly_at_window_end_still_counts_in_old_window():
    gate, clock = make_gate(max_requests=1, window_ms=10_000)
    gate.hit("a")
    clock.advance(10)
    assert gate.hit("a") is False


def test_window_boundary_burst_admits_twice_the_limit():
    # Fixed windows: a burst straddling the reset gets 2 * max through.
    gate, clock = make_gate(max_requests=3, window_ms=10_000)
    gate.hit("a")
    clock.advance(9.9)
    assert gate.hit("a") and gate.hit("a")
    clock.advance(0.2)
    admitted = [gate.hit("a") for _ in range(4)]
    assert admitted == [True, True, True, False]


def test_missing_identity_shares_unknown_bucket():
    gate, _ = make_gate(max_requests=2)
    assert gate.hit(None) is True
    assert gate.hit("") is True
    assert gate.hit(UNKNOWN_CLIENT) is False


def test_sweep_removes_only_stale_windows():
    gate, clock = make_gate(max_requests=5, window_ms=10_000)
    gate.hit("old")
    clock.advance(15)
    gate.hit("recent")
    clock.advance(6)
    assert gate.sweep() == 1
    assert len(gate) == 1
    assert gate.hit("recent") is True


async def test_allow_is_awaitable():
    gate, _ = make_gate(max_requests=1)
    assert await gate.allow("a") is True
    assert await gate.allow("a") is False


class FakePipeline:
    def __init__(self, store: dict[str, int]) -> None:
        self.store = store
        self.ops: list[tuple] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def set(self, key, value, px=None, nx=False):
        self.ops.append(("set", key, value, px, nx))
        return self

    def incr(self, key):
        self.ops.append(("incr", key))
        return self

    async def execute(self):
        results = []
        for op in self.ops:
            if op[0] == "set":
                created = op[1] not in self.store
                if created:
                    self.store[op[1]] = op[2]
                results.append(True if created else None)
            else:
                self.store[op[1]] += 1
                results.append(self.store[op[1]])
        return results


class FakeRedis:
    def __init__(self) -> None:
        self.store: dict[str, int] = {}
        self.pipelines: list[FakePipeline] = []

    def pipeline(self, transaction=True):
        pipe = FakePipeline(self.store)
        self.pipelines.append(pipe)
        return pipe

    async def aclose(self):
        return None


class BrokenRedis(FakeRedis):
    def pipeline(self, transaction=True):
        raise RedisConnectionError("connection refused")


async def test_redis_gate_counts_with_window_ttl():
    client = FakeRedis()
    gate = RedisAdmissionGate(client, max_requests=2, window_ms=5_000)
    assert await gate.allow("203.0.113.9") is True
    assert await gate.allow("203.0.113.9") is True
    assert await gate.allow("203.0.113.9") is False
    first_set = client.pipelines[0].ops[0]
    assert first_set == ("set", "signups:ratelimit:203.0.113.9", 0, 5_000, True)


async def test_redis_gate_falls_back_to_memory_when_unreachable():
    fallback = InMemoryAdmissionGate(max_requests=1, window_ms=5_000)
    gate = RedisAdmissionGate(BrokenRedis(), max_requests=1, window_ms=5_000, fallback=fallback)
    assert await gate.allow("a") is True
    assert await gate.allow("a") is False


@pytest.mark.parametrize(
    ("backend", "expected"),
    [("memory", InMemoryAdmissionGate), ("redis", RedisAdmissionGate)],
)
def test_build_admission_gate_uses_settings(backend, expected):
    settings = Settings(rate_limit_backend=backend, rate_limit_max_requests=7, rate_limit_window_ms=2_000)
    gate = build_admission_gate(settings)
    assert isinstance(gate, expected)
    assert gate.max_requests == 7
    assert gate.window_seconds == 2.0


async def test_sweeper_evicts_stale_windows_until_cancelled():
    gate, clock = make_gate(max_requests=5, window_ms=1_000)
    gate.hit("old")
    clock.advance(5)
    task = asyncio.create_task(run_sweeper(gate, 0.01))
    for _ in range(100):
        if len(gate) == 0:
            break
        await asyncio.sleep(0.01)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert len(gate) == 0
