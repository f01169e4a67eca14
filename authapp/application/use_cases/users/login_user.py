# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import secrets

from authapp.application.services.session_manager import SessionManager
from authapp.domain.users.entities import IssuedSession, normalize_email
from authapp.domain.users.exceptions import AccountLockedError, InvalidCredentialsError
from authapp.domain.users.repositories import PasswordHasher, UserRepository
from authapp.infrastructure.auth.login_attempts import LoginAttemptsTracker


class LoginUserUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        sessions: SessionManager,
        password_hasher: PasswordHasher,
        attempts: LoginAttemptsTracker | None = None,
    ) -> None:
        self._users = users
        self._sessions = sessions
        self._password_hasher = password_hasher
        self._attempts = attempts or LoginAttemptsTracker()
        self._dummy_digest: str | None = None

    def _decoy_digest(self) -> str:
        # Verified when the email is unknown so both failure paths cost one hash.
        if self._dummy_digest is None:
            self._dummy_digest = self._password_hasher.hash(secrets.token_urlsafe(16))
        return self._dummy_digest

    def execute(self, email: str, password: str, ip_address: str | None = None) -> IssuedSession:
        key = normalize_email(email or "")
        if self._attempts.is_locked(key):
            raise AccountLockedError(lockout_remaining=self._attempts.get_lockout_remaining(key))

        user = self._users.find_by_email(key) if key else None
        if user is None:
            self._password_hasher.verify(password or "", self._decoy_digest())
            password_valid = False
        else:
            password_valid = self._password_hasher.verify(password or "", user.password_digest)

        if user is None or not password_valid:
            self._attempts.record_attempt(key, success=False, ip_address=ip_address)
            raise InvalidCredentialsError()

        self._attempts.record_attempt(key, success=True, ip_address=ip_address)
        return self._sessions.issue(user.id)
