"""Use-case for revoking a session token."""

from __future__ import annotations

from authapp.application.services.session_manager import SessionManager


class LogoutUserUseCase:
    def __init__(self, *, sessions: SessionManager) -> None:
        self._sessions = sessions

    def execute(self, token: str | None) -> None:
        if token:
            self._sessions.revoke(token)
