from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest
from flask import Flask

from fakes import InMemoryRefreshTokenRepository
from userauth.application.services.tokens import TokenService
from userauth.application.use_cases.users.messages import (
    LoggedOut,
    OtpSent,
    SendOtpRequest,
    SessionIssued,
)
from userauth.domain.users.entities import AccessTokenPayload, RefreshTokenPayload, Role, User
from userauth.domain.users.exceptions import InvalidCredentialsError, OtpExpiredError
from userauth.interfaces.http.controllers.auth_controller import AuthController
from userauth.interfaces.http.controllers.users_controller import UsersController
from userauth.shared.config import TokenConfig
from userauth.shared.config.settings import SecurityConfig
from userauth.shared.middleware.error_handler import configure_error_handling

ANN = User(
    id=1,
    full_name="Ann",
    email="ann@x.com",
    role=Role.CUSTOMER,
    created_at=datetime(2025, 1, 1, tzinfo=UTC),
)


@pytest.fixture(autouse=True)
def _no_audit_storage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "userauth.infrastructure.audit._store_audit_log", lambda **kwargs: None
    )


@pytest.fixture()
def tokens_config() -> TokenConfig:
    return TokenConfig(
        ACCESS_TOKEN_SECRET="access-secret-for-unit-tests-0123456789",
        REFRESH_TOKEN_SECRET="refresh-secret-for-unit-tests-0123456789",
    )


@pytest.fixture()
def tokens(tokens_config: TokenConfig) -> TokenService:
    return TokenService(config=tokens_config, tokens=InMemoryRefreshTokenRepository())


@pytest.fixture()
def use_cases() -> dict[str, MagicMock]:
    return {
        name: MagicMock()
        for name in (
            "send_otp_use_case",
            "verify_otp_use_case",
            "login_use_case",
            "logout_use_case",
            "refresh_use_case",
            "self_use_case",
        )
    }


@pytest.fixture()
def flask_app(tokens: TokenService, tokens_config: TokenConfig, use_cases) -> Flask:
    app = Flask(__name__)
    configure_error_handling(app)
    controller = AuthController(
        tokens=tokens,
        security=SecurityConfig(COOKIE_SAMESITE="Lax"),
        tokens_config=tokens_config,
        **use_cases,
    )
    app.register_blueprint(controller.as_blueprint())
    return app


def _issued(user: User = ANN) -> SessionIssued:
    return SessionIssued(user=user, access_token="access.jwt", refresh_token="refresh.jwt")


def test_send_otp_returns_envelope_without_code(flask_app: Flask, use_cases) -> None:
    use_cases["send_otp_use_case"].execute.return_value = OtpSent(
        full_name="Ann", email="ann@x.com", hash_otp="proof#123#hash"
    )

    with flask_app.test_client() as client:
        response = client.post(
            "/api/auth/send-otp",
            json={
                "fullName": "Ann",
                "email": " Ann@X.com ",
                "password": "password1",
                "confirmPassword": "password1",
            },
        )

    assert response.status_code == 200
    assert response.get_json() == {"fullName": "Ann", "email": "ann@x.com", "hashOtp": "proof#123#hash"}
    use_cases["send_otp_use_case"].execute.assert_called_once_with(
        SendOtpRequest(
            full_name="Ann", email="ann@x.com", password="password1", confirm_password="password1"
        )
    )


def test_send_otp_invalid_payload_returns_422(flask_app: Flask, use_cases) -> None:
    with flask_app.test_client() as client:
        response = client.post("/api/auth/send-otp", json={"email": "not-an-email"})

    assert response.status_code == 422
    payload = response.get_json()
    assert payload["error"] == "validation_error"
    assert "email" in payload["context"]["fields"]
    use_cases["send_otp_use_case"].execute.assert_not_called()


def test_verify_otp_sets_both_cookies(flask_app: Flask, use_cases) -> None:
    use_cases["verify_otp_use_case"].execute.return_value = _issued()

    with flask_app.test_client() as client:
        response = client.post(
            "/api/auth/verify-otp",
            json={"fullName": "Ann", "email": "ann@x.com", "otp": "123456", "hashOtp": "a#1#b"},
        )
        access = client.get_cookie("accessToken")
        refresh = client.get_cookie("refreshToken")

    assert response.status_code == 200
    body = response.get_json()
    assert body["email"] == "ann@x.com"
    assert body["role"] == "customer"
    assert "password" not in body and "passwordHash" not in body
    assert access is not None and access.value == "access.jwt"
    assert refresh is not None and refresh.value == "refresh.jwt"
    assert access.http_only and refresh.http_only


def test_verify_otp_expired_is_408(flask_app: Flask, use_cases) -> None:
    use_cases["verify_otp_use_case"].execute.side_effect = OtpExpiredError()

    with flask_app.test_client() as client:
        response = client.post(
            "/api/auth/verify-otp",
            json={"fullName": "Ann", "email": "ann@x.com", "otp": "123456", "hashOtp": "a#1#b"},
        )

    assert response.status_code == 408
    assert response.get_json() == {"error": "otp_expired"}


def test_login_failure_is_401(flask_app: Flask, use_cases) -> None:
    use_cases["login_use_case"].execute.side_effect = InvalidCredentialsError()

    with flask_app.test_client() as client:
        response = client.post("/api/auth/login", json={"email": "ann@x.com", "password": "x"})

    assert response.status_code == 401
    assert response.get_json() == {"error": "invalid_credentials"}
    assert "Set-Cookie" not in response.headers


def test_self_requires_access_token(flask_app: Flask, tokens: TokenService, use_cases) -> None:
    use_cases["self_use_case"].execute.return_value = ANN
    token = tokens.sign_access_token(AccessTokenPayload(user_id=1, role=Role.CUSTOMER))

    with flask_app.test_client() as client:
        anonymous = client.get("/api/auth/self")
        bearer = client.get("/api/auth/self", headers={"Authorization": f"Bearer {token}"})
        client.set_cookie("accessToken", "garbage")
        garbage = client.get("/api/auth/self")

    assert anonymous.status_code == 401
    assert anonymous.get_json()["error"] == "authentication_required"
    assert bearer.status_code == 200
    assert bearer.get_json()["id"] == 1
    use_cases["self_use_case"].execute.assert_called_once_with(1)
    assert garbage.status_code == 401
    assert garbage.get_json()["error"] == "invalid_token"


def test_logout_clears_cookies_even_when_already_revoked(
    flask_app: Flask, tokens: TokenService, use_cases
) -> None:
    use_cases["logout_use_case"].execute.return_value = LoggedOut(revoked=False)
    refresh = tokens.sign_refresh_token(
        RefreshTokenPayload(user_id=1, role=Role.CUSTOMER, token_id=42)
    )

    with flask_app.test_client() as client:
        client.set_cookie("refreshToken", refresh)
        client.set_cookie("accessToken", "stale")
        response = client.post("/api/auth/logout")
        remaining = (client.get_cookie("accessToken"), client.get_cookie("refreshToken"))

    assert response.status_code == 200
    assert response.get_json() == {"user": None, "message": "User successfully logout."}
    use_cases["logout_use_case"].execute.assert_called_once_with(42)
    assert remaining == (None, None)


def test_refresh_accepts_body_token(flask_app: Flask, tokens: TokenService, use_cases) -> None:
    use_cases["refresh_use_case"].execute.return_value = _issued()
    refresh = tokens.sign_refresh_token(
        RefreshTokenPayload(user_id=1, role=Role.CUSTOMER, token_id=5)
    )

    with flask_app.test_client() as client:
        response = client.post("/api/auth/refresh", json={"refreshToken": refresh})

    assert response.status_code == 200
    use_cases["refresh_use_case"].execute.assert_called_once_with(refresh)


def test_admin_routes_require_admin_role(tokens: TokenService) -> None:
    list_users = MagicMock()
    list_users.execute.return_value = [ANN]
    controller = UsersController(
        tokens=tokens,
        update_full_name=MagicMock(),
        change_password=MagicMock(),
        upload_avatar=MagicMock(),
        delete_self=MagicMock(),
        send_current_email_otp=MagicMock(),
        verify_current_email_otp=MagicMock(),
        send_new_email_otp=MagicMock(),
        verify_new_email_otp=MagicMock(),
        get_user=MagicMock(),
        list_users=list_users,
        delete_user=MagicMock(),
    )
    app = Flask(__name__)
    configure_error_handling(app)
    app.register_blueprint(controller.as_blueprint())

    customer = tokens.sign_access_token(AccessTokenPayload(user_id=1, role=Role.CUSTOMER))
    admin = tokens.sign_access_token(AccessTokenPayload(user_id=2, role=Role.ADMIN))

    with app.test_client() as client:
        forbidden = client.get("/api/users/", headers={"Authorization": f"Bearer {customer}"})
        allowed = client.get("/api/users/", headers={"Authorization": f"Bearer {admin}"})

    assert forbidden.status_code == 403
    assert forbidden.get_json() == {"error": "permission_denied"}
    assert allowed.status_code == 200
    assert [u["email"] for u in allowed.get_json()] == ["ann@x.com"]
