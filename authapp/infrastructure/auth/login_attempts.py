# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import time
from collections import defaultdict, deque
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock
from typing import ClassVar

from authapp.shared.logging import logger


@dataclass
class LoginAttempt:
    timestamp: float
    success: bool
    ip_address: str | None = None


class LoginAttemptsTracker:
    """Counts failed logins per normalized email, whether or not the account exists."""

    MAX_ATTEMPTS: ClassVar[int] = 5
    LOCKOUT_DURATION: ClassVar[float] = 15 * 60  # 15 minutes in seconds
    ATTEMPT_WINDOW: ClassVar[float] = 60 * 60  # 1 hour in seconds

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._attempts: dict[str, deque[LoginAttempt]] = defaultdict(
            lambda: deque(maxlen=self.MAX_ATTEMPTS * 2)
        )
        self._lock = Lock()
        self._lockouts: dict[str, float] = {}  # key -> unlock_time
        self._next_sweep = self._clock() + self.ATTEMPT_WINDOW

    def record_attempt(self, key: str, success: bool, ip_address: str | None = None) -> None:
        with self._lock:
            self._sweep()
            attempt = LoginAttempt(
                timestamp=self._clock(),
                success=success,
                ip_address=ip_address,
            )

            if success:
                self._attempts.pop(key, None)
                if self._lockouts.pop(key, None) is not None:
                    logger.info("login_attempts: cleared lockout after success")
                return

            self._attempts[key].append(attempt)
            self._check_and_lock(key)

    def is_locked(self, key: str) -> bool:
        with self._lock:
            if key not in self._lockouts:
                return False

            if self._clock() >= self._lockouts[key]:
                del self._lockouts[key]
                self._attempts.pop(key, None)
                logger.info("login_attempts: lockout expired")
                return False

            return True

    def get_lockout_remaining(self, key: str) -> float:
        with self._lock:
            if key not in self._lockouts:
                return 0.0
            return max(0.0, self._lockouts[key] - self._clock())

    def get_failed_attempts_count(self, key: str) -> int:
        with self._lock:
            return len(self._recent_failures(key))

    def clear_attempts(self, key: str) -> None:
        with self._lock:
            self._attempts.pop(key, None)
            self._lockouts.pop(key, None)

    @property
    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._attempts.keys() | self._lockouts.keys())

    def _sweep(self) -> None:
        """Forget keys whose failures all fell out of the window and whose lockout ended."""
        now = self._clock()
        if now < self._next_sweep:
            return
        self._next_sweep = now + self.ATTEMPT_WINDOW
        cutoff = now - self.ATTEMPT_WINDOW
        for key in [k for k, until in self._lockouts.items() if until <= now]:
            del self._lockouts[key]
        for key in [k for k, q in self._attempts.items() if not q or q[-1].timestamp <= cutoff]:
            if key not in self._lockouts:
                del self._attempts[key]

    def _recent_failures(self, key: str) -> list[LoginAttempt]:
        if key not in self._attempts:
            return []
        cutoff = self._clock() - self.ATTEMPT_WINDOW
        return [
            attempt
            for attempt in self._attempts[key]
            if not attempt.success and attempt.timestamp > cutoff
        ]

    def _check_and_lock(self, key: str) -> None:
        failed_attempts = self._recent_failures(key)

        if len(failed_attempts) >= self.MAX_ATTEMPTS:
            self._lockouts[key] = self._clock() + self.LOCKOUT_DURATION

            ips = {attempt.ip_address for attempt in failed_attempts if attempt.ip_address}
            logger.warning(
                f"login_attempts: LOCKED failed_attempts={len(failed_attempts)} "
                f"lockout_duration={self.LOCKOUT_DURATION}s "
                f"ip_addresses={sorted(ips) if ips else 'unknown'}"
            )


__all__ = ["LoginAttempt", "LoginAttemptsTracker"]
