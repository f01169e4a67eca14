from __future__ import annotations

from datetime import UTC, datetime, timedelta
from threading import Lock

from authapp.domain.users.entities import SessionRecord, User, normalize_email
from authapp.domain.users.exceptions import DuplicateUserError
from authapp.domain.users.repositories import PasswordHasher, SessionRepository, UserRepository


class InMemoryUserRepository(UserRepository):
    def __init__(self) -> None:
        self._users: dict[int, User] = {}
        self._seq = 1
        self._lock = Lock()

    def create(self, email, username, password_digest, profile_image=None) -> User:
        email = normalize_email(email)
        with self._lock:
            for existing in self._users.values():
                if existing.email == email or existing.username == username:
                    raise DuplicateUserError()
            user = User(
                id=self._seq,
                email=email,
                username=username,
                password_digest=password_digest,
                created_at=datetime.now(UTC),
                profile_image=profile_image,
            )
            self._seq += 1
            self._users[user.id] = user
            return user

    def find_by_email(self, email: str) -> User | None:
        email = normalize_email(email)
        return next((u for u in self._users.values() if u.email == email), None)

    def find_by_id(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    def remove(self, user_id: int) -> None:
        self._users.pop(user_id, None)


class InMemorySessionRepository(SessionRepository):
    def __init__(self) -> None:
        self.records: dict[str, SessionRecord] = {}

    def add(self, record: SessionRecord) -> None:
        self.records[record.token_hash] = record

    def get(self, token_hash: str) -> SessionRecord | None:
        return self.records.get(token_hash)

    def delete(self, token_hash: str) -> None:
        self.records.pop(token_hash, None)

    def delete_for_user(self, user_id: int) -> int:
        doomed = [k for k, r in self.records.items() if r.user_id == user_id]
        for key in doomed:
            del self.records[key]
        return len(doomed)

    def delete_expired(self, now: datetime) -> int:
        doomed = [k for k, r in self.records.items() if r.expires_at <= now]
        for key in doomed:
            del self.records[key]
        return len(doomed)


class DeterministicHasher(PasswordHasher):
    def __init__(self) -> None:
        self.hash_calls = 0
        self.verify_calls = 0

    def hash(self, password: str) -> str:
        self.hash_calls += 1
        return f"hashed:{password}"

    def verify(self, password: str, hashed: str) -> bool:
        self.verify_calls += 1
        return hashed == f"hashed:{password}"


class FakeClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class MemoryStorage:
    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}

    def read_bytes(self, path: str) -> bytes:
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]

    def write_bytes(self, path: str, data: bytes) -> None:
        self.files[path] = data

    def delete(self, path: str) -> None:
        self.files.pop(path, None)
