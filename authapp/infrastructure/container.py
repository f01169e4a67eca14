# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from functools import cached_property

from authapp.application.services.auth_service import AuthService
from authapp.application.services.password_hashing import build_password_hasher
from authapp.application.services.session_manager import SessionManager
from authapp.application.use_cases.users.current_user import CurrentUserUseCase
from authapp.application.use_cases.users.login_user import LoginUserUseCase
from authapp.application.use_cases.users.logout_user import LogoutUserUseCase
from authapp.application.use_cases.users.register_user import RegisterUserUseCase
from authapp.domain.users.repositories import PasswordHasher
from authapp.infrastructure.auth.login_attempts import LoginAttemptsTracker
from authapp.infrastructure.repositories.users.sqlalchemy_user_repository import (
    SqlAlchemySessionRepository, SqlAlchemyUserRepository)
from authapp.infrastructure.storage import LocalFileStorage
from authapp.interfaces.http.controllers.auth_controller import AuthController
from authapp.interfaces.http.controllers.dashboard_controller import \
    DashboardController
from authapp.shared.config import AppConfig, load_config


class Container:
    def __init__(self, config: AppConfig | None = None) -> None:
        self._config = config or load_config()

    @cached_property
    def password_hasher(self) -> PasswordHasher:
        return build_password_hasher(self._config.password_hasher)

    @cached_property
    def user_repository(self) -> SqlAlchemyUserRepository:
        return SqlAlchemyUserRepository()

    @cached_property
    def session_repository(self) -> SqlAlchemySessionRepository:
        return SqlAlchemySessionRepository()

    @cached_property
    def session_manager(self) -> SessionManager:
        return SessionManager(
            sessions=self.session_repository,
            ttl=self._config.session.ttl,
        )

    @cached_property
    def upload_storage(self) -> LocalFileStorage:
        return LocalFileStorage(self._config.uploads.directory)

    @cached_property
    def login_attempts(self) -> LoginAttemptsTracker:
        return LoginAttemptsTracker()

    @cached_property
    def register_user_use_case(self) -> RegisterUserUseCase:
        return RegisterUserUseCase(
            users=self.user_repository,
            password_hasher=self.password_hasher,
            storage=self.upload_storage,
            allowed_extensions=self._config.uploads.allowed_extensions,
            max_image_bytes=self._config.uploads.max_bytes,
        )

    @cached_property
    def login_user_use_case(self) -> LoginUserUseCase:
        return LoginUserUseCase(
            users=self.user_repository,
            sessions=self.session_manager,
            password_hasher=self.password_hasher,
            attempts=self.login_attempts,
        )

    @cached_property
    def logout_user_use_case(self) -> LogoutUserUseCase:
        return LogoutUserUseCase(sessions=self.session_manager)

    @cached_property
    def current_user_use_case(self) -> CurrentUserUseCase:
        return CurrentUserUseCase(users=self.user_repository, sessions=self.session_manager)

    @cached_property
    def auth_service(self) -> AuthService:
        return AuthService(
            register_use_case=self.register_user_use_case,
            login_use_case=self.login_user_use_case,
            logout_use_case=self.logout_user_use_case,
            current_user_use_case=self.current_user_use_case,
        )

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(auth_service=self.auth_service, config=self._config)

    @cached_property
    def dashboard_controller(self) -> DashboardController:
        return DashboardController(
            auth_service=self.auth_service,
            storage=self.upload_storage,
            config=self._config,
        )


container = Container()
