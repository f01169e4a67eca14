# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy.exc import IntegrityError

from authapp.domain.users.entities import SessionRecord, normalize_email
from authapp.domain.users.entities import User as DomainUser
from authapp.domain.users.exceptions import DuplicateUserError
from authapp.domain.users.repositories import SessionRepository, UserRepository
from authapp.infrastructure.db.models import SessionToken, User
from authapp.infrastructure.db.session import session_scope
from authapp.shared.logging import logger


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _to_domain(row: User) -> DomainUser:
    return DomainUser(
        id=row.id,
        email=row.email,
        username=row.username,
        password_digest=row.password_digest,
        created_at=_as_utc(row.created_at),
        profile_image=row.profile_image,
    )


class SqlAlchemyUserRepository(UserRepository):
    def create(
        self,
        email: str,
        username: str,
        password_digest: str,
        profile_image: str | None = None,
    ) -> DomainUser:
        try:
            with session_scope() as session:
                row = User(
                    email=normalize_email(email),
                    username=username,
                    password_digest=password_digest,
                    profile_image=profile_image,
                    created_at=datetime.now(UTC),
                )
                session.add(row)
                session.flush()
                session.refresh(row)
                return _to_domain(row)
        except IntegrityError as exc:
            # UNIQUE(email) / UNIQUE(username) decide the race, not a prior lookup.
            logger.info("users.create: uniqueness constraint rejected insert")
            raise DuplicateUserError() from exc

    def find_by_email(self, email: str) -> DomainUser | None:
        with session_scope() as session:
            row = session.query(User).filter(User.email == normalize_email(email)).first()
            if not row:
                return None
            return _to_domain(row)

    def find_by_id(self, user_id: int) -> DomainUser | None:
        with session_scope() as session:
            row = session.get(User, user_id)
            if not row:
                return None
            return _to_domain(row)


class SqlAlchemySessionRepository(SessionRepository):
    def add(self, record: SessionRecord) -> None:
        with session_scope() as session:
            session.add(
                SessionToken(
                    user_id=record.user_id,
                    token_hash=record.token_hash,
                    expires_at=record.expires_at,
                    created_at=record.created_at,
                )
            )

    def get(self, token_hash: str) -> SessionRecord | None:
        with session_scope() as session:
            row = (
                session.query(SessionToken)
                .filter(SessionToken.token_hash == token_hash)
                .first()
            )
            if not row:
                return None
            return SessionRecord(
                token_hash=row.token_hash,
                user_id=row.user_id,
                expires_at=_as_utc(row.expires_at),
                created_at=_as_utc(row.created_at),
            )

    def delete(self, token_hash: str) -> None:
        with session_scope() as session:
            session.query(SessionToken).filter(SessionToken.token_hash == token_hash).delete()

    def delete_for_user(self, user_id: int) -> int:
        with session_scope() as session:
            return session.query(SessionToken).filter(SessionToken.user_id == user_id).delete()

    def delete_expired(self, now: datetime) -> int:
        with session_scope() as session:
            return session.query(SessionToken).filter(SessionToken.expires_at <= now).delete()
