"""Per-address request rate limiting with escalating blocks.

Requests are counted in fixed windows. An address that exceeds the limit
inside one window is blocked, and each further violation doubles the length
of the next block. Counter state lives behind a small store interface so a
process-local map and a shared Redis hash are interchangeable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Protocol

import redis

from storefront_gate.core.settings import settings

logger = logging.getLogger(__name__)


@dataclass
class RateRecord:
    """Counter state for a single source address."""

    count: int
    window_start: int
    blocked_until: int | None
    block_duration_ms: int


@dataclass(frozen=True)
class BlockedAddress:
    """Block event emitted when an address exceeds the limit. Times in epoch ms."""

    address: str
    route: str
    block_start: int
    block_end: int
    request_count: int
    first_request: int
    last_request: int


@dataclass(frozen=True)
class RateDecision:
    """Outcome of a rate limit check."""

    allowed: bool
    retry_after_seconds: int = 0
    message: str | None = None
    block: BlockedAddress | None = None


class CounterStore(Protocol):
    """Storage for per-address rate records."""

    def get_state(self, address: str) -> RateRecord | None:
        """Return the current record for `address`, if any."""
        ...

    def start_window(self, address: str, now_ms: int, block_duration_ms: int) -> None:
        """Open a new window with a count of one and no active block."""
        ...

    def increment(self, address: str) -> int:
        """Increment the window count and return the new value."""
        ...

    def set_block(self, address: str, blocked_until: int, next_block_duration_ms: int) -> None:
        """Block the address until `blocked_until` and store the next block length."""
        ...


class InMemoryCounterStore:
    """Process-local counter store.

    Limits are per process; horizontally scaled deployments each keep their own
    counts. Updates to an address with no record start from an empty one.
    """

    def __init__(self) -> None:
        self._records: dict[str, RateRecord] = {}
        self._lock = Lock()

    def get_state(self, address: str) -> RateRecord | None:
        with self._lock:
            record = self._records.get(address)
            if record is None:
                return None
            return RateRecord(
                count=record.count,
                window_start=record.window_start,
                blocked_until=record.blocked_until,
                block_duration_ms=record.block_duration_ms,
            )

    def start_window(self, address: str, now_ms: int, block_duration_ms: int) -> None:
        with self._lock:
            self._records[address] = RateRecord(
                count=1,
                window_start=now_ms,
                blocked_until=None,
                block_duration_ms=block_duration_ms,
            )

    def increment(self, address: str) -> int:
        with self._lock:
            record = self._record(address)
            record.count += 1
            return record.count

    def set_block(self, address: str, blocked_until: int, next_block_duration_ms: int) -> None:
        with self._lock:
            record = self._record(address)
            record.blocked_until = blocked_until
            record.block_duration_ms = next_block_duration_ms

    def clear(self) -> None:
        """Forget every tracked address."""
        with self._lock:
            self._records.clear()

    def _record(self, address: str) -> RateRecord:
        # Caller holds the lock.
        return self._records.setdefault(
            address,
            RateRecord(count=0, window_start=0, blocked_until=None, block_duration_ms=0),
        )


class RedisCounterStore:
    """Counter store shared between processes through one Redis hash per address.

    When a Redis call fails the operation is served from a process-local
    `InMemoryCounterStore` instead, so an outage degrades limits to per-process
    counting rather than failing requests.
    """

    key_prefix = "ratelimit:"

    def __init__(self, client: redis.Redis, fallback: InMemoryCounterStore | None = None) -> None:
        self._redis = client
        self.fallback = fallback if fallback is not None else InMemoryCounterStore()

    def _key(self, address: str) -> str:
        return f"{self.key_prefix}{address}"

    def _log_fallback(self, operation: str, address: str, err: redis.RedisError) -> None:
        logger.error(
            "Redis rate limit %s failed for %s (falling back to local): %s",
            operation,
            address,
            err,
        )

    def get_state(self, address: str) -> RateRecord | None:
        try:
            raw = self._redis.hgetall(self._key(address))
        except redis.RedisError as err:
            self._log_fallback("read", address, err)
            return self.fallback.get_state(address)
        if not raw:
            return None
        data = {
            (k.decode() if isinstance(k, bytes) else k): int(v) for k, v in raw.items()
        }
        return RateRecord(
            count=data.get("count", 0),
            window_start=data.get("window_start", 0),
            # 0 marks "no active block"
            blocked_until=data.get("blocked_until") or None,
            block_duration_ms=data.get("block_duration_ms", 0),
        )

    def start_window(self, address: str, now_ms: int, block_duration_ms: int) -> None:
        try:
            self._redis.hset(
                self._key(address),
                mapping={
                    "count": 1,
                    "window_start": now_ms,
                    "blocked_until": 0,
                    "block_duration_ms": block_duration_ms,
                },
            )
        except redis.RedisError as err:
            self._log_fallback("reset", address, err)
            self.fallback.start_window(address, now_ms, block_duration_ms)

    def increment(self, address: str) -> int:
        try:
            return int(self._redis.hincrby(self._key(address), "count", 1))
        except redis.RedisError as err:
            self._log_fallback("increment", address, err)
            return self.fallback.increment(address)

    def set_block(self, address: str, blocked_until: int, next_block_duration_ms: int) -> None:
        try:
            self._redis.hset(
                self._key(address),
                mapping={
                    "blocked_until": blocked_until,
                    "block_duration_ms": next_block_duration_ms,
                },
            )
        except redis.RedisError as err:
            self._log_fallback("block", address, err)
            self.fallback.set_block(address, blocked_until, next_block_duration_ms)


def _ceil_seconds(milliseconds: int) -> int:
    return -(-milliseconds // 1000)


class RateLimiter:
    """Fixed-window limiter that blocks repeat offenders for escalating periods."""

    def __init__(
        self,
        store: CounterStore | None = None,
        *,
        request_limit: int | None = None,
        window_ms: int | None = None,
        base_block_ms: int | None = None,
    ) -> None:
        self.store: CounterStore = store if store is not None else InMemoryCounterStore()
        self.request_limit = (
            request_limit if request_limit is not None else settings.rate_limit_requests
        )
        self.window_ms = window_ms if window_ms is not None else settings.rate_limit_window_ms
        self.base_block_ms = (
            base_block_ms if base_block_ms is not None else settings.rate_limit_block_ms
        )

    def check_and_record(self, source_address: str, route: str, now_ms: int) -> RateDecision:
        """Count a request from `source_address` and decide whether to allow it.

        Args:
            source_address: Client address used as the counter key.
            route: Requested path, recorded when a block is triggered.
            now_ms: Current time in epoch milliseconds.

        Returns:
            The decision. Rejections carry the seconds until the address may
            retry; a freshly triggered block also carries the event to audit.
        """
        record = self.store.get_state(source_address)

        if record is None:
            self.store.start_window(source_address, now_ms, self.base_block_ms)
            return RateDecision(allowed=True)

        if record.blocked_until is not None and record.blocked_until > now_ms:
            wait = _ceil_seconds(record.blocked_until - now_ms)
            return RateDecision(
                allowed=False,
                retry_after_seconds=wait,
                message=f"Too many requests. Please try again in {wait} seconds.",
            )

        if now_ms - record.window_start < self.window_ms:
            count = self.store.increment(source_address)
            if count <= self.request_limit:
                return RateDecision(allowed=True)

            block_duration = record.block_duration_ms
            blocked_until = now_ms + block_duration
            self.store.set_block(source_address, blocked_until, block_duration * 2)
            wait = _ceil_seconds(block_duration)
            logger.warning(
                "Blocking %s for %d seconds after %d requests to %s",
                source_address,
                wait,
                count,
                route,
            )
            return RateDecision(
                allowed=False,
                retry_after_seconds=wait,
                message=f"Too many requests. Blocked for {wait} seconds.",
                block=BlockedAddress(
                    address=source_address,
                    route=route,
                    block_start=now_ms,
                    block_end=blocked_until,
                    request_count=count,
                    first_request=record.window_start,
                    last_request=now_ms,
                ),
            )

        # Window elapsed: start counting again. The escalated block length is
        # kept so the next violation is punished harder than the last one.
        self.store.start_window(source_address, now_ms, record.block_duration_ms)
        return RateDecision(allowed=True)


def build_counter_store() -> CounterStore:
    """Return the counter store selected by `RATE_LIMIT_BACKEND`."""
    if settings.rate_limit_backend == "redis":
        return RedisCounterStore(redis.from_url(settings.redis_url))  # type: ignore[no-untyped-call]
    return InMemoryCounterStore()


def build_rate_limiter() -> RateLimiter:
    """Return a rate limiter configured from application settings."""
    return RateLimiter(build_counter_store())
