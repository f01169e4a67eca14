from __future__ import annotations

from datetime import timedelta

import pytest

from authapp.application.services.session_manager import SessionManager, hash_token
from fakes import FakeClock, InMemorySessionRepository


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def repo() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture()
def manager(repo: InMemorySessionRepository, clock: FakeClock) -> SessionManager:
    return SessionManager(sessions=repo, ttl=timedelta(hours=1), clock=clock)


def test_issue_then_validate_returns_user(manager: SessionManager, clock: FakeClock) -> None:
    issued = manager.issue(7)

    assert issued.user_id == 7
    assert issued.expires_at == clock.now + timedelta(hours=1)
    assert manager.validate(issued.token) == 7


def test_only_token_digest_is_stored(
    manager: SessionManager, repo: InMemorySessionRepository
) -> None:
    issued = manager.issue(1)

    assert issued.token not in repo.records
    assert hash_token(issued.token) in repo.records


def test_tokens_are_long_and_unique(manager: SessionManager) -> None:
    tokens = {manager.issue(1).token for _ in range(200)}

    assert len(tokens) == 200
    # 32 random bytes, urlsafe base64
    assert all(len(token) >= 43 for token in tokens)


def test_session_expires_after_ttl(
    manager: SessionManager, repo: InMemorySessionRepository, clock: FakeClock
) -> None:
    issued = manager.issue(3)

    clock.advance(minutes=59)
    assert manager.validate(issued.token) == 3

    clock.advance(minutes=1)
    assert manager.validate(issued.token) is None
    assert repo.records == {}


def test_revoke_invalidates_and_is_idempotent(manager: SessionManager) -> None:
    issued = manager.issue(3)

    manager.revoke(issued.token)
    manager.revoke(issued.token)
    manager.revoke("never-issued")
    manager.revoke("")

    assert manager.validate(issued.token) is None


def test_validate_unknown_or_empty_token_is_invalid(manager: SessionManager) -> None:
    assert manager.validate("nope") is None
    assert manager.validate("") is None
    assert manager.validate(None) is None


def test_revoke_all_and_purge_expired(manager: SessionManager, clock: FakeClock) -> None:
    first = manager.issue(1)
    manager.issue(1)
    other = manager.issue(2)

    assert manager.revoke_all(1) == 2
    assert manager.validate(first.token) is None
    assert manager.validate(other.token) == 2

    clock.advance(hours=2)
    assert manager.purge_expired() == 1


def test_ttl_must_be_positive(repo: InMemorySessionRepository) -> None:
    with pytest.raises(ValueError):
        SessionManager(sessions=repo, ttl=timedelta(0))
