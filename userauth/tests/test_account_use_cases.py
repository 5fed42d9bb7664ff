from __future__ import annotations

import pytest

from fakes import (
    CapturingNotifier,
    DeterministicHasher,
    InMemoryUserRepository,
    ManualClock,
    MemoryAvatarStore,
)
from userauth.application.services.credentials import CredentialService
from userauth.application.use_cases.account.change_email import (
    SendCurrentEmailOtpUseCase,
    SendNewEmailOtpUseCase,
    VerifyCurrentEmailOtpUseCase,
    VerifyNewEmailOtpUseCase,
)
from userauth.application.use_cases.account.change_password import ChangePasswordUseCase
from userauth.application.use_cases.account.messages import (
    AvatarUpload,
    ChangePasswordRequest,
    SendNewEmailOtpRequest,
    VerifyCurrentEmailRequest,
    VerifyNewEmailRequest,
)
from userauth.application.use_cases.account.update_profile import (
    DeleteSelfUseCase,
    UpdateFullNameUseCase,
)
from userauth.application.use_cases.account.upload_avatar import UploadAvatarUseCase
from userauth.application.use_cases.admin.manage_users import (
    DeleteUserUseCase,
    GetUserUseCase,
    ListUsersUseCase,
)
from userauth.domain.users.entities import Role, User
from userauth.domain.users.exceptions import (
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    OtpExpiredError,
    OtpInvalidError,
    PasswordConfirmationError,
    UserNotFoundError,
)
from userauth.shared.config import OtpConfig
from userauth.shared.errors.base import ValidationError


@pytest.fixture()
def users() -> InMemoryUserRepository:
    repo = InMemoryUserRepository()
    repo.add(User(id=0, full_name="Ann", email="ann@x.com", password_hash="hashed:p1"))
    repo.add(
        User(id=0, full_name="Bob", email="bob@x.com", role=Role.ADMIN, password_hash="hashed:p2")
    )
    return repo


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture()
def credentials(clock: ManualClock) -> CredentialService:
    return CredentialService(
        config=OtpConfig(OTP_HASH_SECRET="unit-test-otp-secret"),
        password_hasher=DeterministicHasher(),
        clock=clock,
    )


@pytest.fixture()
def notifier() -> CapturingNotifier:
    return CapturingNotifier()


def _email_steps(users, credentials, notifier):
    kwargs = {"users": users, "credentials": credentials, "notifier": notifier}
    return (
        SendCurrentEmailOtpUseCase(**kwargs),
        VerifyCurrentEmailOtpUseCase(**kwargs),
        SendNewEmailOtpUseCase(**kwargs),
        VerifyNewEmailOtpUseCase(**kwargs),
    )


def _grant(users, credentials, notifier) -> str:
    send_current, verify_current, _, _ = _email_steps(users, credentials, notifier)
    sent = send_current.execute(1)
    granted = verify_current.execute(
        VerifyCurrentEmailRequest(user_id=1, otp=notifier.last_otp, hash_otp=sent.hash_otp)
    )
    return granted.grant


# Email change


def test_email_change_full_flow(users, credentials, notifier) -> None:
    send_current, verify_current, send_new, verify_new = _email_steps(
        users, credentials, notifier
    )

    sent = send_current.execute(1)
    assert sent.email == "ann@x.com"
    assert notifier.sent[-1][0] == "ann@x.com"
    assert notifier.sent[-1][3] == "email_change_current"

    granted = verify_current.execute(
        VerifyCurrentEmailRequest(user_id=1, otp=notifier.last_otp, hash_otp=sent.hash_otp)
    )

    sent_new = send_new.execute(
        SendNewEmailOtpRequest(user_id=1, new_email="ann@new.com", grant=granted.grant)
    )
    assert sent_new.email == "ann@new.com"
    assert notifier.sent[-1][0] == "ann@new.com"

    user = verify_new.execute(
        VerifyNewEmailRequest(
            user_id=1,
            new_email="ann@new.com",
            otp=notifier.last_otp,
            hash_otp=sent_new.hash_otp,
            grant=granted.grant,
        )
    )

    assert user.email == "ann@new.com"
    assert user.password_hash is None
    assert users.find_by_email("ann@x.com") is None


def test_email_change_envelopes_do_not_carry_stored_hash(users, credentials, notifier) -> None:
    send_current, verify_current, _, _ = _email_steps(users, credentials, notifier)

    sent = send_current.execute(1)
    granted = verify_current.execute(
        VerifyCurrentEmailRequest(user_id=1, otp=notifier.last_otp, hash_otp=sent.hash_otp)
    )

    for raw in (sent.hash_otp, granted.grant):
        bound = raw.split("#")[2]
        assert bound != "hashed:p1"
        assert "hashed" not in bound
        assert bound == credentials.hash_proof("pw.hashed:p1")


def test_new_email_step_requires_valid_grant(users, credentials, notifier) -> None:
    send_current, _, send_new, _ = _email_steps(users, credentials, notifier)
    sent = send_current.execute(1)

    # An OTP envelope is not a grant.
    with pytest.raises(OtpInvalidError):
        send_new.execute(
            SendNewEmailOtpRequest(user_id=1, new_email="ann@new.com", grant=sent.hash_otp)
        )

    grant = _grant(users, credentials, notifier)
    # Bob cannot use Ann's grant.
    with pytest.raises(OtpInvalidError):
        send_new.execute(SendNewEmailOtpRequest(user_id=2, new_email="bob@new.com", grant=grant))


def test_new_email_must_differ_and_be_free(users, credentials, notifier) -> None:
    _, _, send_new, _ = _email_steps(users, credentials, notifier)
    grant = _grant(users, credentials, notifier)

    with pytest.raises(ValidationError):
        send_new.execute(SendNewEmailOtpRequest(user_id=1, new_email="ann@x.com", grant=grant))
    with pytest.raises(EmailAlreadyRegisteredError):
        send_new.execute(SendNewEmailOtpRequest(user_id=1, new_email="bob@x.com", grant=grant))


def test_verify_new_email_rejects_other_address(users, credentials, notifier) -> None:
    _, _, send_new, verify_new = _email_steps(users, credentials, notifier)
    grant = _grant(users, credentials, notifier)
    sent = send_new.execute(SendNewEmailOtpRequest(user_id=1, new_email="ann@new.com", grant=grant))

    with pytest.raises(OtpInvalidError):
        verify_new.execute(
            VerifyNewEmailRequest(
                user_id=1,
                new_email="ann@other.com",
                otp=notifier.last_otp,
                hash_otp=sent.hash_otp,
                grant=grant,
            )
        )


def test_password_change_voids_pending_grant(users, credentials, notifier) -> None:
    _, _, send_new, _ = _email_steps(users, credentials, notifier)
    grant = _grant(users, credentials, notifier)

    ChangePasswordUseCase(users=users, credentials=credentials).execute(
        ChangePasswordRequest(
            user_id=1, old_password="p1", new_password="p3", confirm_password="p3"
        )
    )

    with pytest.raises(OtpInvalidError):
        send_new.execute(SendNewEmailOtpRequest(user_id=1, new_email="ann@new.com", grant=grant))


def test_grant_expires(users, credentials, notifier, clock) -> None:
    _, _, send_new, _ = _email_steps(users, credentials, notifier)
    grant = _grant(users, credentials, notifier)

    clock.advance(10 * 60 * 1000 + 1)
    with pytest.raises(OtpExpiredError):
        send_new.execute(SendNewEmailOtpRequest(user_id=1, new_email="ann@new.com", grant=grant))


# Profile


def test_change_password(users, credentials) -> None:
    use_case = ChangePasswordUseCase(users=users, credentials=credentials)

    with pytest.raises(PasswordConfirmationError):
        use_case.execute(
            ChangePasswordRequest(user_id=1, old_password="p1", new_password="a", confirm_password="b")
        )

    with pytest.raises(InvalidCredentialsError) as exc_info:
        use_case.execute(
            ChangePasswordRequest(
                user_id=1, old_password="wrong", new_password="p3", confirm_password="p3"
            )
        )
    assert exc_info.value.code == "old_password_mismatch"

    use_case.execute(
        ChangePasswordRequest(user_id=1, old_password="p1", new_password="p3", confirm_password="p3")
    )
    stored = users.find_by_id(1, with_password=True)
    assert stored is not None
    assert stored.password_hash == "hashed:p3"


def test_update_full_name(users) -> None:
    use_case = UpdateFullNameUseCase(users=users)

    assert use_case.execute(1, "Ann Smith").full_name == "Ann Smith"
    with pytest.raises(UserNotFoundError):
        use_case.execute(999, "Ghost")


def test_upload_avatar(users) -> None:
    store = MemoryAvatarStore()
    use_case = UploadAvatarUseCase(users=users, store=store, max_bytes=1024)

    user = use_case.execute(AvatarUpload(user_id=1, filename="Me.PNG", content=b"\x89PNG"))

    assert user.avatar_url == "https://media.test/avatars/1/avatar.png"
    assert store.uploads == [(1, "avatar.png", b"\x89PNG")]


@pytest.mark.parametrize(
    ("filename", "content"),
    [("me.exe", b"MZ"), ("me.png", b""), ("me.png", b"x" * 1025), ("", b"x")],
)
def test_upload_avatar_rejects_bad_files(users, filename: str, content: bytes) -> None:
    store = MemoryAvatarStore()
    use_case = UploadAvatarUseCase(users=users, store=store, max_bytes=1024)

    with pytest.raises(ValidationError):
        use_case.execute(AvatarUpload(user_id=1, filename=filename, content=content))
    assert store.uploads == []


def test_delete_self(users) -> None:
    use_case = DeleteSelfUseCase(users=users)

    use_case.execute(1)
    assert users.find_by_id(1) is None
    with pytest.raises(UserNotFoundError):
        use_case.execute(1)


# Admin


def test_admin_list_and_get(users) -> None:
    listed = ListUsersUseCase(users=users).execute()

    assert [u.email for u in listed] == ["ann@x.com", "bob@x.com"]
    assert all(u.password_hash is None for u in listed)
    assert GetUserUseCase(users=users).execute(2).role is Role.ADMIN
    with pytest.raises(UserNotFoundError):
        GetUserUseCase(users=users).execute(999)


def test_admin_delete(users) -> None:
    use_case = DeleteUserUseCase(users=users)

    with pytest.raises(ValidationError):
        use_case.execute(2, 2)

    use_case.execute(2, 1)
    assert users.find_by_id(1) is None
    with pytest.raises(UserNotFoundError):
        use_case.execute(2, 1)
