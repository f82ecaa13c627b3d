"""Token-bucket rate limiter keyed by API key."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable


@dataclass
class _Bucket:
    tokens: float
    updated_at: float


class RateLimiter:
    """Per-key token buckets; each request spends one token.

    Buckets start full and refill continuously up to ``max_tokens``.
    """

    def __init__(
        self,
        max_tokens: int,
        refill_per_second: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_tokens = max(max_tokens, 1)
        self.refill_per_second = max(refill_per_second, 0.0)
        self._clock = clock
        self._buckets: dict[str, _Bucket] = {}
        self._lock = threading.Lock()

    def try_acquire(self, key: str) -> bool:
        bucket_key = key or "anonymous"
        with self._lock:
            now = self._clock()
            bucket = self._buckets.get(bucket_key)
            if bucket is None:
                self._evict_idle(now)
                bucket = _Bucket(tokens=float(self.max_tokens), updated_at=now)
                self._buckets[bucket_key] = bucket
            else:
                elapsed = max(now - bucket.updated_at, 0.0)
                bucket.tokens = min(
                    float(self.max_tokens), bucket.tokens + elapsed * self.refill_per_second
                )
                bucket.updated_at = now
            if bucket.tokens < 1.0:
                return False
            bucket.tokens -= 1.0
            return True

    def _evict_idle(self, now: float) -> None:
        """Drop buckets that have refilled completely; they are equal to a fresh one."""
        if self.refill_per_second <= 0:
            return
        idle = [
            key
            for key, bucket in self._buckets.items()
            if bucket.tokens + (now - bucket.updated_at) * self.refill_per_second >= self.max_tokens
        ]
        for key in idle:
            del self._buckets[key]

    def remaining(self, key: str) -> int:
        with self._lock:
            bucket = self._buckets.get(key or "anonymous")
            return self.max_tokens if bucket is None else int(bucket.tokens)

    def reset(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._buckets.clear()
            else:
                self._buckets.pop(key or "anonymous", None)
