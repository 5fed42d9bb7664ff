# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, g, jsonify, request
from pydantic import ValidationError

from userauth.application.services.tokens import TokenService
from userauth.application.use_cases.users.get_current_user import GetCurrentUserUseCase
from userauth.application.use_cases.users.login_user import LoginUserUseCase
from userauth.application.use_cases.users.logout_user import LogoutUserUseCase
from userauth.application.use_cases.users.messages import (
    LoginRequest,
    SendOtpRequest,
    SessionIssued,
    VerifyOtpRequest,
)
from userauth.application.use_cases.users.refresh_session import RefreshSessionUseCase
from userauth.application.use_cases.users.register_user import (
    SendRegistrationOtpUseCase,
    VerifyRegistrationOtpUseCase,
)
from userauth.domain.users.exceptions import InvalidCredentialsError
from userauth.infrastructure.audit import AuditAction, audit_log
from userauth.interfaces.http.dto.auth import (
    LoginRequestDTO,
    LogoutDTO,
    OtpSentDTO,
    SendOtpRequestDTO,
    UserDTO,
    VerifyOtpRequestDTO,
)
from userauth.interfaces.http.security import (
    AuthGuard,
    clear_session_cookies,
    set_session_cookies,
)
from userauth.shared.config import TokenConfig
from userauth.shared.config.settings import SecurityConfig
from userauth.shared.errors import AppError
from userauth.shared.errors.validation import raise_validation_error
from userauth.shared.logging import logger
from userauth.shared.middleware.rate_limit import rate_limit


def get_client_ip() -> str | None:
    return request.remote_addr


class AuthController:
    def __init__(
        self,
        *,
        tokens: TokenService,
        send_otp_use_case: SendRegistrationOtpUseCase,
        verify_otp_use_case: VerifyRegistrationOtpUseCase,
        login_use_case: LoginUserUseCase,
        logout_use_case: LogoutUserUseCase,
        refresh_use_case: RefreshSessionUseCase,
        self_use_case: GetCurrentUserUseCase,
        security: SecurityConfig,
        tokens_config: TokenConfig,
    ) -> None:
        self._guard = AuthGuard(tokens)
        self._send_otp_use_case = send_otp_use_case
        self._verify_otp_use_case = verify_otp_use_case
        self._login_use_case = login_use_case
        self._logout_use_case = logout_use_case
        self._refresh_use_case = refresh_use_case
        self._self_use_case = self_use_case
        self._security = security
        self._tokens_config = tokens_config

    def _session_response(self, issued: SessionIssued) -> Response:
        response = jsonify(UserDTO.from_user(issued.user).dump())
        set_session_cookies(
            response,
            access_token=issued.access_token,
            refresh_token=issued.refresh_token,
            security=self._security,
            tokens=self._tokens_config,
        )
        return response

    @rate_limit(limit=5, window_seconds=60.0)
    def send_otp(self) -> tuple[Response, int]:
        try:
            dto = SendOtpRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        sent = self._send_otp_use_case.execute(
            SendOtpRequest(
                full_name=dto.full_name,
                email=dto.email,
                password=dto.password,
                confirm_password=dto.confirm_password,
            )
        )

        audit_log(AuditAction.OTP_SENT, ip_address=get_client_ip(), details={"email": sent.email})

        payload = OtpSentDTO(
            full_name=sent.full_name, email=sent.email, hash_otp=sent.hash_otp
        ).model_dump(by_alias=True)
        logger.info("auth.send_otp: ok")
        return jsonify(payload), 200

    @rate_limit(limit=10, window_seconds=60.0)
    def verify_otp(self) -> tuple[Response, int]:
        try:
            dto = VerifyOtpRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        ip_address = get_client_ip()
        try:
            issued = self._verify_otp_use_case.execute(
                VerifyOtpRequest(
                    full_name=dto.full_name,
                    email=dto.email,
                    otp=dto.otp,
                    hash_otp=dto.hash_otp,
                )
            )
        except AppError as exc:
            audit_log(
                AuditAction.REGISTER_FAILED,
                ip_address=ip_address,
                details={"email": dto.email, "error": exc.code},
                success=False,
            )
            raise

        audit_log(
            AuditAction.REGISTER,
            user_id=issued.user.id,
            ip_address=ip_address,
            details={"email": dto.email},
        )
        logger.info(f"auth.verify_otp: ok user_id={issued.user.id}")
        return self._session_response(issued), 200

    @rate_limit(limit=10, window_seconds=60.0)
    def login(self) -> tuple[Response, int]:
        try:
            dto = LoginRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        ip_address = get_client_ip()
        try:
            issued = self._login_use_case.execute(
                LoginRequest(email=dto.email, password=dto.password)
            )
        except InvalidCredentialsError as exc:
            audit_log(
                AuditAction.LOGIN_FAILED,
                ip_address=ip_address,
                details={"email": dto.email, "error": exc.code},
                success=False,
            )
            raise

        audit_log(
            AuditAction.LOGIN_SUCCESS,
            user_id=issued.user.id,
            ip_address=ip_address,
            details={"email": dto.email},
        )
        logger.info(f"auth.login: ok user_id={issued.user.id}")
        return self._session_response(issued), 200

    def current_user(self) -> tuple[Response, int]:
        user = self._self_use_case.execute(g.user_id)
        return jsonify(UserDTO.from_user(user).dump()), 200

    def refresh(self) -> tuple[Response, int]:
        issued = self._refresh_use_case.execute(g.refresh_token)
        audit_log(
            AuditAction.SESSION_REFRESHED,
            user_id=issued.user.id,
            ip_address=get_client_ip(),
        )
        logger.info(f"auth.refresh: rotated user_id={issued.user.id}")
        return self._session_response(issued), 200

    def logout(self) -> tuple[Response, int]:
        result = self._logout_use_case.execute(g.token_id)

        audit_log(
            AuditAction.LOGOUT,
            user_id=g.user_id,
            ip_address=get_client_ip(),
            details={"revoked": result.revoked},
        )

        response = jsonify(LogoutDTO().model_dump())
        clear_session_cookies(response, security=self._security)
        logger.info(f"auth.logout: ok user_id={g.user_id} revoked={result.revoked}")
        return response, 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("auth", __name__, url_prefix="/api/auth")
        bp.add_url_rule("/send-otp", view_func=self.send_otp, methods=["POST"])
        bp.add_url_rule("/verify-otp", view_func=self.verify_otp, methods=["POST"])
        bp.add_url_rule("/login", view_func=self.login, methods=["POST"])
        bp.add_url_rule(
            "/self",
            view_func=self._guard.access_required(self.current_user),
            methods=["GET"],
            endpoint="self",
        )
        bp.add_url_rule(
            "/refresh",
            view_func=self._guard.refresh_required(self.refresh),
            methods=["POST"],
            endpoint="refresh",
        )
        bp.add_url_rule(
            "/logout",
            view_func=self._guard.refresh_required(self.logout),
            methods=["POST"],
            endpoint="logout",
        )
        return bp
