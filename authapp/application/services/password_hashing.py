"""Password hashing strategies."""

from __future__ import annotations

from argon2 import PasswordHasher as Argon2Hasher
from argon2.exceptions import HashingError as Argon2HashingError
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from werkzeug.security import check_password_hash, generate_password_hash

from authapp.domain.users.repositories import PasswordHasher
from authapp.shared.errors import HashingError


class Argon2PasswordHasher(PasswordHasher):
    """Argon2id digests in PHC string format; salt and parameters travel inside the digest."""

    def __init__(self, hasher: Argon2Hasher | None = None) -> None:
        self._hasher = hasher or Argon2Hasher()

    def hash(self, password: str) -> str:
        if not password:
            raise HashingError(context={"reason": "empty_password"})
        try:
            return self._hasher.hash(password)
        except Argon2HashingError as exc:
            raise HashingError(context={"reason": "argon2_failure"}) from exc

    def verify(self, password: str, hashed: str) -> bool:
        try:
            return bool(self._hasher.verify(hashed, password))
        except VerifyMismatchError:
            return False
        except (InvalidHashError, VerificationError) as exc:
            # decode faults on a corrupted digest land here
            raise HashingError(context={"reason": "malformed_digest"}) from exc


class WerkzeugPasswordHasher(PasswordHasher):
    def hash(self, password: str) -> str:
        if not password:
            raise HashingError(context={"reason": "empty_password"})
        return str(generate_password_hash(password))

    def verify(self, password: str, hashed: str) -> bool:
        try:
            return bool(check_password_hash(hashed, password))
        except ValueError as exc:
            raise HashingError(context={"reason": "malformed_digest"}) from exc


def build_password_hasher(name: str) -> PasswordHasher:
    if name == "werkzeug":
        return WerkzeugPasswordHasher()
    return Argon2PasswordHasher()


__all__ = ["Argon2PasswordHasher", "WerkzeugPasswordHasher", "build_password_hasher"]
