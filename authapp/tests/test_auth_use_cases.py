from __future__ import annotations

from datetime import timedelta

import pytest

from authapp.application.services.auth_service import AuthService
from authapp.application.services.session_manager import SessionManager
from authapp.application.use_cases.users.current_user import CurrentUserUseCase
from authapp.application.use_cases.users.login_user import LoginUserUseCase
from authapp.application.use_cases.users.logout_user import LogoutUserUseCase
from authapp.application.use_cases.users.register_user import (
    ImageUpload,
    RegisterCommand,
    RegisterUserUseCase,
)
from authapp.domain.users.exceptions import (
    AccountLockedError,
    DuplicateUserError,
    InvalidCredentialsError,
)
from authapp.infrastructure.auth.login_attempts import LoginAttemptsTracker
from authapp.shared.errors import UploadRejectedError, ValidationError
from fakes import (
    DeterministicHasher,
    FakeClock,
    InMemorySessionRepository,
    InMemoryUserRepository,
    MemoryStorage,
)


class Harness:
    def __init__(self, *, with_storage: bool = True) -> None:
        self.users = InMemoryUserRepository()
        self.session_repo = InMemorySessionRepository()
        self.hasher = DeterministicHasher()
        self.clock = FakeClock()
        self.storage = MemoryStorage() if with_storage else None
        self.attempts = LoginAttemptsTracker(clock=lambda: self.clock().timestamp())
        self.sessions = SessionManager(
            sessions=self.session_repo, ttl=timedelta(hours=1), clock=self.clock
        )
        self.service = AuthService(
            register_use_case=RegisterUserUseCase(
                users=self.users,
                password_hasher=self.hasher,
                storage=self.storage,
                max_image_bytes=16,
            ),
            login_use_case=LoginUserUseCase(
                users=self.users,
                sessions=self.sessions,
                password_hasher=self.hasher,
                attempts=self.attempts,
            ),
            logout_use_case=LogoutUserUseCase(sessions=self.sessions),
            current_user_use_case=CurrentUserUseCase(users=self.users, sessions=self.sessions),
        )


@pytest.fixture()
def h() -> Harness:
    return Harness()


def test_register_login_dashboard_logout_scenario(h: Harness) -> None:
    profile = h.service.register(RegisterCommand("a@x.com", "a", "pw123456"))
    assert profile.username == "a"
    assert not hasattr(profile, "password_digest")

    stored = h.users.find_by_email("a@x.com")
    assert stored is not None
    assert stored.password_digest != "pw123456"

    issued = h.service.login("a@x.com", "pw123456")
    current = h.service.current_user(issued.token)
    assert current is not None
    assert current.username == "a"

    h.service.logout(issued.token)
    assert h.service.current_user(issued.token) is None


def test_register_normalizes_email(h: Harness) -> None:
    profile = h.service.register(RegisterCommand("  Alice@Example.COM ", "Alice", "pw123456"))

    assert profile.email == "alice@example.com"
    assert profile.username == "Alice"
    assert h.service.login("ALICE@example.com", "pw123456").user_id == profile.id


def test_duplicate_email_differing_in_case_is_rejected(h: Harness) -> None:
    h.service.register(RegisterCommand("a@x.com", "a", "pw123456"))

    with pytest.raises(DuplicateUserError):
        h.service.register(RegisterCommand("A@X.com", "someone-else", "pw123456"))


def test_duplicate_username_is_rejected(h: Harness) -> None:
    h.service.register(RegisterCommand("a@x.com", "a", "pw123456"))

    with pytest.raises(DuplicateUserError) as info:
        h.service.register(RegisterCommand("b@x.com", "a", "pw123456"))

    assert info.value.status == 409


@pytest.mark.parametrize(
    "command",
    [
        RegisterCommand("", "a", "pw123456"),
        RegisterCommand("a@x.com", "", "pw123456"),
        RegisterCommand("a@x.com", "a", ""),
        RegisterCommand("not-an-email", "a", "pw123456"),
    ],
)
def test_invalid_registration_never_hashes(h: Harness, command: RegisterCommand) -> None:
    with pytest.raises(ValidationError):
        h.service.register(command)

    assert h.hasher.hash_calls == 0
    assert h.users.find_by_email("a@x.com") is None


def test_login_failures_are_indistinguishable(h: Harness) -> None:
    h.service.register(RegisterCommand("a@x.com", "a", "pw123456"))

    with pytest.raises(InvalidCredentialsError) as wrong_password:
        h.service.login("a@x.com", "wrong-password")
    with pytest.raises(InvalidCredentialsError) as unknown_user:
        h.service.login("nobody@x.com", "pw123456")

    assert wrong_password.value.to_dict() == unknown_user.value.to_dict()
    assert wrong_password.value.status == unknown_user.value.status
    assert wrong_password.value.message == "Invalid email or password"


def test_unknown_user_still_runs_a_password_verify(h: Harness) -> None:
    with pytest.raises(InvalidCredentialsError):
        h.service.login("nobody@x.com", "pw123456")

    assert h.hasher.verify_calls == 1


def test_login_with_empty_fields_is_invalid_credentials(h: Harness) -> None:
    with pytest.raises(InvalidCredentialsError):
        h.service.login("", "")


def test_repeated_failures_lock_the_email(h: Harness) -> None:
    h.service.register(RegisterCommand("a@x.com", "a", "pw123456"))

    for _ in range(LoginAttemptsTracker.MAX_ATTEMPTS):
        with pytest.raises(InvalidCredentialsError):
            h.service.login("a@x.com", "wrong-password")

    # the right password is refused while locked
    with pytest.raises(AccountLockedError) as info:
        h.service.login("a@x.com", "pw123456")
    assert info.value.context["lockout_remaining_seconds"] > 0

    h.clock.advance(seconds=LoginAttemptsTracker.LOCKOUT_DURATION + 1)
    assert h.service.login("a@x.com", "pw123456").user_id == 1


def test_successful_login_resets_failure_count(h: Harness) -> None:
    h.service.register(RegisterCommand("a@x.com", "a", "pw123456"))

    for _ in range(LoginAttemptsTracker.MAX_ATTEMPTS - 1):
        with pytest.raises(InvalidCredentialsError):
            h.service.login("a@x.com", "wrong-password")
    h.service.login("a@x.com", "pw123456")

    assert h.attempts.get_failed_attempts_count("a@x.com") == 0


def test_each_login_issues_an_independent_session(h: Harness) -> None:
    h.service.register(RegisterCommand("a@x.com", "a", "pw123456"))

    first = h.service.login("a@x.com", "pw123456")
    second = h.service.login("a@x.com", "pw123456")
    h.service.logout(first.token)

    assert first.token != second.token
    assert h.service.current_user(first.token) is None
    assert h.service.current_user(second.token) is not None


def test_session_expires_after_ttl(h: Harness) -> None:
    h.service.register(RegisterCommand("a@x.com", "a", "pw123456"))
    issued = h.service.login("a@x.com", "pw123456")

    h.clock.advance(hours=1, seconds=1)

    assert h.service.current_user(issued.token) is None


def test_logout_without_session_is_a_no_op(h: Harness) -> None:
    h.service.logout(None)
    h.service.logout("")
    h.service.logout("garbage")


def test_session_for_deleted_user_is_revoked(h: Harness) -> None:
    profile = h.service.register(RegisterCommand("a@x.com", "a", "pw123456"))
    issued = h.service.login("a@x.com", "pw123456")
    h.users.remove(profile.id)

    assert h.service.current_user(issued.token) is None
    assert h.session_repo.records == {}


def test_register_stores_profile_image(h: Harness) -> None:
    profile = h.service.register(
        RegisterCommand("a@x.com", "a", "pw123456", ImageUpload("me.PNG", b"\x89PNG"))
    )

    assert profile.profile_image is not None
    assert profile.profile_image.startswith("profiles/")
    assert profile.profile_image.endswith(".png")
    assert h.storage.files[profile.profile_image] == b"\x89PNG"
    assert h.users.find_by_id(profile.id).profile_image == profile.profile_image


@pytest.mark.parametrize(
    ("upload", "reason"),
    [
        (ImageUpload("script.exe", b"MZ"), "extension_not_allowed"),
        (ImageUpload("noext", b"data"), "extension_not_allowed"),
        (ImageUpload("empty.png", b""), "empty_file"),
        (ImageUpload("big.png", b"x" * 17), "too_large"),
    ],
)
def test_rejected_image_creates_no_user(h: Harness, upload: ImageUpload, reason: str) -> None:
    with pytest.raises(UploadRejectedError) as info:
        h.service.register(RegisterCommand("a@x.com", "a", "pw123456", upload))

    assert info.value.context == {"reason": reason}
    assert h.users.find_by_email("a@x.com") is None
    assert h.storage.files == {}
    assert h.hasher.hash_calls == 0


def test_image_rejected_when_uploads_disabled() -> None:
    h = Harness(with_storage=False)

    with pytest.raises(UploadRejectedError) as info:
        h.service.register(
            RegisterCommand("a@x.com", "a", "pw123456", ImageUpload("me.png", b"img"))
        )

    assert info.value.context == {"reason": "uploads_disabled"}


class BrokenStorage(MemoryStorage):
    def write_bytes(self, path: str, data: bytes) -> None:
        raise OSError("disk full")


def test_failed_image_write_creates_no_user(h: Harness) -> None:
    use_case = RegisterUserUseCase(
        users=h.users, password_hasher=h.hasher, storage=BrokenStorage()
    )
    command = RegisterCommand("a@x.com", "a", "pw123456", ImageUpload("me.png", b"img"))

    with pytest.raises(OSError):
        use_case.execute(command)

    assert h.users.find_by_email("a@x.com") is None


def test_image_is_discarded_when_user_insert_fails(h: Harness) -> None:
    h.service.register(RegisterCommand("a@x.com", "a", "pw123456"))

    with pytest.raises(DuplicateUserError):
        h.service.register(
            RegisterCommand("a@x.com", "b", "pw123456", ImageUpload("me.png", b"img"))
        )

    assert h.storage.files == {}
