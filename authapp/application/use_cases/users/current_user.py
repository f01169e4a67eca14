"""Use-case resolving a session token to the user it authenticates."""

from __future__ import annotations

from authapp.application.services.session_manager import SessionManager
from authapp.domain.users.entities import UserProfile
from authapp.domain.users.repositories import UserRepository
from authapp.infrastructure.audit import AuditAction, audit_log
from authapp.shared.logging import logger


class CurrentUserUseCase:
    def __init__(self, *, users: UserRepository, sessions: SessionManager) -> None:
        self._users = users
        self._sessions = sessions

    def execute(self, token: str | None) -> UserProfile | None:
        user_id = self._sessions.validate(token)
        if user_id is None:
            return None

        user = self._users.find_by_id(user_id)
        if user is None:
            logger.warning(f"current_user: session bound to missing user={user_id}, revoking")
            self._sessions.revoke(token)
            removed = self._sessions.revoke_all(user_id)
            audit_log(
                AuditAction.SESSION_REVOKED,
                user_id=user_id,
                details={"reason": "user_missing", "removed": removed},
                success=True,
            )
            return None
        return user.profile()
