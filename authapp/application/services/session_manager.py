# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Server-side session lifecycle.

A session is issued at login, validated on every authenticated request and
ends either by revocation (logout) or by reaching ``expires_at``. Only the
SHA-256 digest of a token is stored, so the token handed to the client is
the sole copy of the credential.
"""

from __future__ import annotations

import hashlib
import secrets
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from authapp.domain.users.entities import IssuedSession, SessionRecord
from authapp.domain.users.repositories import SessionRepository
from authapp.shared.logging import logger

TOKEN_BYTES = 32


def _utcnow() -> datetime:
    return datetime.now(UTC)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


class SessionManager:
    def __init__(
        self,
        *,
        sessions: SessionRepository,
        ttl: timedelta,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if ttl <= timedelta(0):
            raise ValueError("session ttl must be positive")
        self._sessions = sessions
        self._ttl = ttl
        self._clock = clock

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(self, user_id: int) -> IssuedSession:
        token = secrets.token_urlsafe(TOKEN_BYTES)
        now = self._clock()
        record = SessionRecord(
            token_hash=hash_token(token),
            user_id=user_id,
            expires_at=now + self._ttl,
            created_at=now,
        )
        self._sessions.add(record)
        logger.info(
            f"session.issue: user={user_id} exp={record.expires_at.isoformat()} "
            f"ref={record.token_hash[:8]}"
        )
        return IssuedSession(token=token, user_id=user_id, expires_at=record.expires_at)

    def validate(self, token: str | None) -> int | None:
        if not token:
            return None
        token_hash = hash_token(token)
        record = self._sessions.get(token_hash)
        if record is None:
            logger.debug(f"session.validate: unknown ref={token_hash[:8]}")
            return None
        if record.is_expired(self._clock()):
            self._sessions.delete(token_hash)
            logger.info(f"session.validate: expired user={record.user_id} ref={token_hash[:8]}")
            return None
        return record.user_id

    def revoke(self, token: str | None) -> None:
        if not token:
            return
        token_hash = hash_token(token)
        self._sessions.delete(token_hash)
        logger.info(f"session.revoke: ref={token_hash[:8]}")

    def revoke_all(self, user_id: int) -> int:
        removed = self._sessions.delete_for_user(user_id)
        logger.info(f"session.revoke_all: user={user_id} removed={removed}")
        return removed

    def purge_expired(self) -> int:
        removed = self._sessions.delete_expired(self._clock())
        if removed:
            logger.info(f"session.purge_expired: removed={removed}")
        return removed


__all__ = ["SessionManager", "hash_token"]
