# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .entities import SessionRecord, User


class UserRepository(Protocol):
    def create(
        self,
        email: str,
        username: str,
        password_digest: str,
        profile_image: str | None = None,
    ) -> User: ...
    def find_by_email(self, email: str) -> User | None: ...
    def find_by_id(self, user_id: int) -> User | None: ...


class SessionRepository(Protocol):
    def add(self, record: SessionRecord) -> None: ...
    def get(self, token_hash: str) -> SessionRecord | None: ...
    def delete(self, token_hash: str) -> None: ...
    def delete_for_user(self, user_id: int) -> int: ...
    def delete_expired(self, now: datetime) -> int: ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, hashed: str) -> bool: ...
