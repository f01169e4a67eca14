# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


def normalize_email(email: str) -> str:
    return email.strip().lower()


@dataclass(slots=True, frozen=True)
class User:

    id: int
    email: str
    username: str
    password_digest: str
    created_at: datetime
    profile_image: str | None = None

    def profile(self) -> UserProfile:
        return UserProfile(
            id=self.id,
            email=self.email,
            username=self.username,
            created_at=self.created_at,
            profile_image=self.profile_image,
        )


@dataclass(slots=True, frozen=True)
class UserProfile:
    """What leaves the application layer: a user without its password digest."""

    id: int
    email: str
    username: str
    created_at: datetime
    profile_image: str | None = None


@dataclass(slots=True, frozen=True)
class SessionRecord:

    token_hash: str
    user_id: int
    expires_at: datetime
    created_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


@dataclass(slots=True, frozen=True)
class IssuedSession:

    token: str
    user_id: int
    expires_at: datetime
