# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Single entry point the HTTP layer uses for the authentication lifecycle."""

from __future__ import annotations

from authapp.application.use_cases.users.current_user import CurrentUserUseCase
from authapp.application.use_cases.users.login_user import LoginUserUseCase
from authapp.application.use_cases.users.logout_user import LogoutUserUseCase
from authapp.application.use_cases.users.register_user import (
    RegisterCommand,
    RegisterUserUseCase,
)
from authapp.domain.users.entities import IssuedSession, UserProfile


class AuthService:
    def __init__(
        self,
        *,
        register_use_case: RegisterUserUseCase,
        login_use_case: LoginUserUseCase,
        logout_use_case: LogoutUserUseCase,
        current_user_use_case: CurrentUserUseCase,
    ) -> None:
        self._register = register_use_case
        self._login = login_use_case
        self._logout = logout_use_case
        self._current_user = current_user_use_case

    def register(self, command: RegisterCommand) -> UserProfile:
        return self._register.execute(command)

    def login(self, email: str, password: str, ip_address: str | None = None) -> IssuedSession:
        return self._login.execute(email, password, ip_address)

    def logout(self, token: str | None) -> None:
        self._logout.execute(token)

    def current_user(self, token: str | None) -> UserProfile | None:
        return self._current_user.execute(token)
