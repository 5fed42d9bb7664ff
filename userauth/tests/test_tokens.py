from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
import pytest

from fakes import InMemoryRefreshTokenRepository
from userauth.application.services.sessions import SessionIssuer
from userauth.application.services.tokens import TokenService
from userauth.domain.users.entities import (
    AccessTokenPayload,
    RefreshTokenPayload,
    RefreshTokenRecord,
    Role,
    User,
)
from userauth.domain.users.exceptions import (
    InvalidTokenError,
    TokenExpiredError,
    TokenRevokedError,
)
from userauth.shared.config import AppConfig, OtpConfig, TokenConfig

ACCESS_SECRET = "access-secret-for-unit-tests-0123456789"
REFRESH_SECRET = "refresh-secret-for-unit-tests-0123456789"


@pytest.fixture()
def config() -> TokenConfig:
    return TokenConfig(ACCESS_TOKEN_SECRET=ACCESS_SECRET, REFRESH_TOKEN_SECRET=REFRESH_SECRET)


@pytest.fixture()
def records() -> InMemoryRefreshTokenRepository:
    return InMemoryRefreshTokenRepository()


@pytest.fixture()
def tokens(config: TokenConfig, records: InMemoryRefreshTokenRepository) -> TokenService:
    return TokenService(config=config, tokens=records)


ANN = User(id=7, full_name="Ann", email="ann@x.com", role=Role.CUSTOMER)


def test_access_token_claims(tokens: TokenService) -> None:
    token = tokens.sign_access_token(AccessTokenPayload(user_id=7, role=Role.ADMIN))

    claims = jwt.decode(token, ACCESS_SECRET, algorithms=["HS256"])
    assert claims["userId"] == "7"
    assert claims["role"] == "admin"
    assert claims["exp"] - claims["iat"] == 24 * 60 * 60

    assert tokens.decode_access_token(token) == AccessTokenPayload(user_id=7, role=Role.ADMIN)


def test_refresh_token_claims(tokens: TokenService) -> None:
    token = tokens.sign_refresh_token(RefreshTokenPayload(user_id=7, role=Role.CUSTOMER, token_id=3))

    claims = jwt.decode(token, REFRESH_SECRET, algorithms=["HS256"])
    assert claims["tokenId"] == "3"
    assert claims["exp"] - claims["iat"] == 365 * 24 * 60 * 60

    payload = tokens.decode_refresh_token(token)
    assert payload.token_id == 3
    assert payload.user_id == 7


def test_tokens_are_not_interchangeable(tokens: TokenService) -> None:
    access = tokens.sign_access_token(AccessTokenPayload(user_id=7, role=Role.CUSTOMER))
    refresh = tokens.sign_refresh_token(
        RefreshTokenPayload(user_id=7, role=Role.CUSTOMER, token_id=1)
    )

    with pytest.raises(InvalidTokenError):
        tokens.decode_refresh_token(access)
    with pytest.raises(InvalidTokenError):
        tokens.decode_access_token(refresh)


def test_decode_rejects_garbage_and_foreign_signatures(tokens: TokenService) -> None:
    foreign = jwt.encode(
        {"userId": "7", "role": "admin", "iat": 0, "exp": 4_102_444_800},
        "someone-elses-secret-0123456789abcdef",
        algorithm="HS256",
    )

    for token in ("", "not.a.jwt", foreign):
        with pytest.raises(InvalidTokenError):
            tokens.decode_access_token(token)


def test_decode_rejects_unknown_role(tokens: TokenService) -> None:
    now = int(datetime.now(UTC).timestamp())
    token = jwt.encode(
        {"userId": "7", "role": "superuser", "iat": now, "exp": now + 60},
        ACCESS_SECRET,
        algorithm="HS256",
    )

    with pytest.raises(InvalidTokenError):
        tokens.decode_access_token(token)


def test_expired_access_token(config: TokenConfig, records: InMemoryRefreshTokenRepository) -> None:
    past = TokenService(
        config=config,
        tokens=records,
        now=lambda: datetime.now(UTC) - timedelta(days=2),
    )
    token = past.sign_access_token(AccessTokenPayload(user_id=7, role=Role.CUSTOMER))

    with pytest.raises(TokenExpiredError):
        past.decode_access_token(token)


def test_saved_record_expires_in_a_year(
    tokens: TokenService, records: InMemoryRefreshTokenRepository
) -> None:
    before = datetime.now(UTC)
    record = tokens.save_refresh_token(ANN)

    assert records.get(record.id) == record
    assert record.user_id == ANN.id
    assert record.expires_at - before >= timedelta(days=365) - timedelta(seconds=5)


def test_delete_token_reports_missing_record(tokens: TokenService) -> None:
    record = tokens.save_refresh_token(ANN)

    assert tokens.delete_token(record.id) is True
    assert tokens.delete_token(record.id) is False


def test_ensure_active_after_revocation(tokens: TokenService) -> None:
    record = tokens.save_refresh_token(ANN)
    payload = RefreshTokenPayload(user_id=ANN.id, role=ANN.role, token_id=record.id)

    assert tokens.ensure_active(payload) == record

    tokens.delete_token(record.id)
    with pytest.raises(TokenRevokedError):
        tokens.ensure_active(payload)


def test_ensure_active_checks_owner_and_expiry(
    tokens: TokenService, records: InMemoryRefreshTokenRepository
) -> None:
    record = tokens.save_refresh_token(ANN)
    with pytest.raises(InvalidTokenError):
        tokens.ensure_active(RefreshTokenPayload(user_id=99, role=Role.CUSTOMER, token_id=record.id))

    records.records[record.id] = RefreshTokenRecord(
        id=record.id,
        user_id=ANN.id,
        # Naive timestamps come back from SQLite.
        expires_at=datetime.now(UTC).replace(tzinfo=None) - timedelta(seconds=1),
    )
    with pytest.raises(TokenExpiredError):
        tokens.ensure_active(
            RefreshTokenPayload(user_id=ANN.id, role=Role.CUSTOMER, token_id=record.id)
        )


def test_session_issuer_creates_one_record(
    tokens: TokenService, records: InMemoryRefreshTokenRepository
) -> None:
    session = SessionIssuer(tokens=tokens).issue(ANN)

    assert list(records.records) == [session.token_id]
    assert tokens.decode_refresh_token(session.refresh_token).token_id == session.token_id
    assert tokens.decode_access_token(session.access_token).user_id == ANN.id


def test_config_refuses_shared_secret() -> None:
    with pytest.raises(ValueError):
        TokenConfig(ACCESS_TOKEN_SECRET="same-secret", REFRESH_TOKEN_SECRET="same-secret")


@pytest.mark.parametrize("shared", ["access-secret-0123456789", "refresh-secret-0123456789"])
def test_config_refuses_otp_secret_shared_with_tokens(shared: str) -> None:
    tokens = TokenConfig(
        ACCESS_TOKEN_SECRET="access-secret-0123456789",
        REFRESH_TOKEN_SECRET="refresh-secret-0123456789",
    )

    with pytest.raises(ValueError):
        AppConfig(tokens=tokens, otp=OtpConfig(OTP_HASH_SECRET=shared))


def test_default_secrets_are_pairwise_distinct() -> None:
    defaults = {
        TokenConfig.model_fields["access_secret"].default,
        TokenConfig.model_fields["refresh_secret"].default,
        OtpConfig.model_fields["hash_secret"].default,
    }

    assert len(defaults) == 3
