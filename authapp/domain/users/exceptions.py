# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from authapp.shared.errors.base import DomainError


class DuplicateUserError(DomainError):
    error_code = "duplicate_user"
    error_status = HTTPStatus.CONFLICT
    public_message = "That email or username is already registered"


class InvalidCredentialsError(DomainError):
    error_code = "invalid_credentials"
    error_status = HTTPStatus.UNAUTHORIZED
    public_message = "Invalid email or password"


class AccountLockedError(DomainError):
    error_code = "account_locked"
    error_status = HTTPStatus.TOO_MANY_REQUESTS
    public_message = "Too many failed attempts, please try again later"

    def __init__(self, lockout_remaining: float = 0) -> None:
        super().__init__(context={"lockout_remaining_seconds": round(lockout_remaining, 1)})
