# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .users.entities import IssuedSession, SessionRecord, User, UserProfile, normalize_email
from .users.exceptions import AccountLockedError, DuplicateUserError, InvalidCredentialsError

__all__ = [
    "AccountLockedError",
    "DuplicateUserError",
    "InvalidCredentialsError",
    "IssuedSession",
    "SessionRecord",
    "User",
    "UserProfile",
    "normalize_email",
]
