# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Sliding-window request limiting for the credential endpoints."""

from __future__ import annotations

import time
from collections import deque
from collections.abc import Callable
from functools import wraps
from threading import Lock

from flask import jsonify, render_template, request

from authapp.shared.config import load_config
from authapp.shared.logging import logger


class InMemoryRateLimiter:
    """Per-process limiter; each key keeps the timestamps of its recent hits."""

    def __init__(
        self, limit: int, window_seconds: float, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self.limit = max(1, int(limit))
        self.window = max(0.1, float(window_seconds))
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._lock = Lock()
        self._next_sweep = clock() + self.window

    def allow(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            self._sweep(now)
            hits = self._hits.setdefault(key, deque())
            while hits and now - hits[0] > self.window:
                hits.popleft()
            if len(hits) >= self.limit:
                return False
            hits.append(now)
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._hits)

    def _sweep(self, now: float) -> None:
        # drop requesters whose newest hit has aged out of the window
        if now < self._next_sweep:
            return
        self._next_sweep = now + self.window
        for key in [k for k, hits in self._hits.items() if not hits or now - hits[-1] > self.window]:
            del self._hits[key]


def _requester() -> str:
    forwarded = request.headers.get("X-Forwarded-For", "")
    return forwarded.split(",")[0].strip() or request.remote_addr or "unknown"


def _refuse():
    if request.path.startswith("/api/"):
        return jsonify({"error": "rate_limited"}), 429
    return render_template("error.html", message="Too many requests, slow down"), 429


def rate_limit(limit: int | None = None, window_seconds: float | None = None):
    security = load_config().security

    def decorator(view: Callable):
        if not security.enable_rate_limit:
            return view

        limiter = InMemoryRateLimiter(
            limit or security.rate_limit_requests,
            window_seconds or security.rate_limit_window,
        )

        @wraps(view)
        def limited(*args, **kwargs):
            if limiter.allow(f"{request.endpoint}:{_requester()}"):
                return view(*args, **kwargs)
            logger.warning(f"rate_limit: refused {request.method} {request.path}")
            return _refuse()

        return limited

    return decorator


__all__ = ["InMemoryRateLimiter", "rate_limit"]
