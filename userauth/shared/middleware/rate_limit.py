# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps

from flask import Request, jsonify, request

from userauth.shared.config import load_config
from userauth.shared.logging import logger


@dataclass
class Bucket:
    timestamps: deque[float]


class InMemoryRateLimiter:
    def __init__(
        self,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._limit = max(1, int(limit))
        self._window = max(0.1, float(window_seconds))
        self._buckets: dict[str, Bucket] = {}
        self._lock = threading.Lock()
        self._clock = clock
        self._last_prune = clock()

    def __len__(self) -> int:
        return len(self._buckets)

    def _prune(self, now: float) -> None:
        # Forget keys whose newest hit has left the window.
        stale = [
            key
            for key, bucket in self._buckets.items()
            if not bucket.timestamps or (now - bucket.timestamps[-1]) > self._window
        ]
        for key in stale:
            del self._buckets[key]
        self._last_prune = now

    def allow(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            if (now - self._last_prune) > self._window:
                self._prune(now)
            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = self._buckets[key] = Bucket(deque(maxlen=self._limit))
            # Drop old
            while bucket.timestamps and (now - bucket.timestamps[0]) > self._window:
                bucket.timestamps.popleft()
            if len(bucket.timestamps) >= self._limit:
                return False
            bucket.timestamps.append(now)
            return True


def _client_key(req: Request) -> str:
    # Behind a proxy, ProxyFix rewrites remote_addr from the trusted hops only.
    return req.remote_addr or "unknown"


def rate_limit(limit: int | None = None, window_seconds: float | None = None):
    config = load_config()
    enabled = config.security.enable_rate_limit
    limiter = InMemoryRateLimiter(
        limit or config.security.rate_limit_requests,
        window_seconds or config.security.rate_limit_window,
    )

    def decorator(f: Callable):
        if not enabled:
            return f

        @wraps(f)
        def wrapper(*args, **kwargs):
            key = f"{request.path}:{_client_key(request)}"
            if not limiter.allow(key):
                logger.warning(f"rate_limit: rejected {request.method} {request.path}")
                return jsonify({"error": "rate_limited"}), 429
            return f(*args, **kwargs)

        return wrapper

    return decorator


__all__ = ["InMemoryRateLimiter", "rate_limit"]
