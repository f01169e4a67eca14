# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import re
import uuid
from collections.abc import Iterable
from dataclasses import dataclass

from authapp.domain.users.entities import UserProfile, normalize_email
from authapp.domain.users.repositories import PasswordHasher, UserRepository
from authapp.infrastructure.storage import StoragePort
from authapp.shared.errors import UploadRejectedError, ValidationError
from authapp.shared.logging import logger

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(slots=True, frozen=True)
class ImageUpload:
    filename: str
    content: bytes


@dataclass(slots=True, frozen=True)
class RegisterCommand:
    email: str
    username: str
    password: str
    image: ImageUpload | None = None


def _image_extension(filename: str) -> str:
    _, dot, ext = filename.rpartition(".")
    return ext.lower() if dot else ""


class RegisterUserUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        password_hasher: PasswordHasher,
        storage: StoragePort | None = None,
        allowed_extensions: Iterable[str] = ("png", "jpg", "jpeg", "gif", "webp"),
        max_image_bytes: int = 5 * 1024 * 1024,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher
        self._storage = storage
        self._allowed_extensions = frozenset(allowed_extensions)
        self._max_image_bytes = max_image_bytes

    def _validate(self, command: RegisterCommand) -> tuple[str, str]:
        email = normalize_email(command.email or "")
        username = (command.username or "").strip()
        missing = [
            name
            for name, value in (
                ("email", email),
                ("username", username),
                ("password", command.password),
            )
            if not value
        ]
        if missing:
            raise ValidationError(context={"fields": missing, "reason": "required"})
        if not EMAIL_RE.match(email):
            raise ValidationError(context={"fields": ["email"], "reason": "malformed"})

        image = command.image
        if image is not None:
            if not self._storage:
                raise UploadRejectedError("uploads_disabled")
            if _image_extension(image.filename) not in self._allowed_extensions:
                raise UploadRejectedError("extension_not_allowed")
            if not image.content:
                raise UploadRejectedError("empty_file")
            if len(image.content) > self._max_image_bytes:
                raise UploadRejectedError("too_large")
        return email, username

    def execute(self, command: RegisterCommand) -> UserProfile:
        email, username = self._validate(command)

        digest = self._password_hasher.hash(command.password)
        reference = self._store_image(command.image)
        try:
            user = self._users.create(email, username, digest, profile_image=reference)
        except Exception:
            if reference is not None:
                self._discard_image(reference)
            raise

        logger.info(f"register: created user_id={user.id} image={reference is not None}")
        return user.profile()

    def _store_image(self, image: ImageUpload | None) -> str | None:
        if image is None or self._storage is None:
            return None
        # the row does not exist yet, so the reference cannot carry the user id
        reference = f"profiles/{uuid.uuid4().hex}.{_image_extension(image.filename)}"
        self._storage.write_bytes(reference, image.content)
        return reference

    def _discard_image(self, reference: str) -> None:
        try:
            self._storage.delete(reference)
        except OSError as exc:
            logger.warning(f"register: could not remove orphan image {reference} ({exc!r})")
