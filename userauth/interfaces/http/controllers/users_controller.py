# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""HTTP controller for account maintenance and admin user management."""

from __future__ import annotations

from flask import Blueprint, Response, g, jsonify, request
from pydantic import ValidationError

from userauth.application.services.tokens import TokenService
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
from userauth.domain.users.entities import Role
from userauth.infrastructure.audit import AuditAction, audit_log
from userauth.interfaces.http.controllers.auth_controller import get_client_ip
from userauth.interfaces.http.dto.auth import UserDTO
from userauth.interfaces.http.dto.users import (
    ChangePasswordDTO,
    EmailChangeGrantDTO,
    EmailOtpSentDTO,
    NewEmailDTO,
    UpdateFullNameDTO,
    VerifyEmailOtpDTO,
    VerifyNewEmailDTO,
)
from userauth.interfaces.http.security import AuthGuard
from userauth.shared.errors.base import ValidationError as AppValidationError
from userauth.shared.errors.validation import raise_validation_error
from userauth.shared.logging import logger
from userauth.shared.middleware.rate_limit import rate_limit


def _json_body() -> dict:
    return request.get_json(silent=True) or {}


class UsersController:
    def __init__(
        self,
        *,
        tokens: TokenService,
        update_full_name: UpdateFullNameUseCase,
        change_password: ChangePasswordUseCase,
        upload_avatar: UploadAvatarUseCase,
        delete_self: DeleteSelfUseCase,
        send_current_email_otp: SendCurrentEmailOtpUseCase,
        verify_current_email_otp: VerifyCurrentEmailOtpUseCase,
        send_new_email_otp: SendNewEmailOtpUseCase,
        verify_new_email_otp: VerifyNewEmailOtpUseCase,
        get_user: GetUserUseCase,
        list_users: ListUsersUseCase,
        delete_user: DeleteUserUseCase,
    ) -> None:
        self._guard = AuthGuard(tokens)
        self._update_full_name = update_full_name
        self._change_password = change_password
        self._upload_avatar = upload_avatar
        self._delete_self = delete_self
        self._send_current_email_otp = send_current_email_otp
        self._verify_current_email_otp = verify_current_email_otp
        self._send_new_email_otp = send_new_email_otp
        self._verify_new_email_otp = verify_new_email_otp
        self._get_user = get_user
        self._list_users = list_users
        self._delete_user = delete_user

    # Profile

    def update_full_name(self) -> tuple[Response, int]:
        try:
            dto = UpdateFullNameDTO.model_validate(_json_body())
        except ValidationError as exc:
            raise_validation_error(exc)

        user = self._update_full_name.execute(g.user_id, dto.full_name)
        audit_log(AuditAction.PROFILE_UPDATED, user_id=user.id, ip_address=get_client_ip())
        return jsonify(UserDTO.from_user(user).dump()), 200

    def change_password(self) -> tuple[Response, int]:
        try:
            dto = ChangePasswordDTO.model_validate(_json_body())
        except ValidationError as exc:
            raise_validation_error(exc)

        user = self._change_password.execute(
            ChangePasswordRequest(
                user_id=g.user_id,
                old_password=dto.old_password,
                new_password=dto.new_password,
                confirm_password=dto.confirm_password,
            )
        )
        audit_log(AuditAction.PASSWORD_CHANGED, user_id=user.id, ip_address=get_client_ip())
        return jsonify(UserDTO.from_user(user).dump()), 200

    def upload_profile_picture(self) -> tuple[Response, int]:
        file = request.files.get("avatar")
        if file is None:
            raise AppValidationError(context={"fields": ["avatar"], "reason": "missing"})

        user = self._upload_avatar.execute(
            AvatarUpload(user_id=g.user_id, filename=file.filename or "", content=file.read())
        )
        audit_log(AuditAction.AVATAR_UPDATED, user_id=user.id, ip_address=get_client_ip())
        return jsonify(UserDTO.from_user(user).dump()), 200

    def delete_self(self) -> tuple[Response, int]:
        self._delete_self.execute(g.user_id)
        audit_log(AuditAction.ACCOUNT_DELETED, user_id=g.user_id, ip_address=get_client_ip())
        logger.info(f"users.delete_self: ok user_id={g.user_id}")
        return jsonify({"deleted": True}), 200

    # Email change

    @rate_limit(limit=5, window_seconds=60.0)
    def send_current_email_otp(self) -> tuple[Response, int]:
        sent = self._send_current_email_otp.execute(g.user_id)
        audit_log(
            AuditAction.EMAIL_CHANGE_STARTED, user_id=g.user_id, ip_address=get_client_ip()
        )
        payload = EmailOtpSentDTO(email=sent.email, hash_otp=sent.hash_otp)
        return jsonify(payload.model_dump(by_alias=True)), 200

    @rate_limit(limit=10, window_seconds=60.0)
    def verify_current_email_otp(self) -> tuple[Response, int]:
        try:
            dto = VerifyEmailOtpDTO.model_validate(_json_body())
        except ValidationError as exc:
            raise_validation_error(exc)

        granted = self._verify_current_email_otp.execute(
            VerifyCurrentEmailRequest(user_id=g.user_id, otp=dto.otp, hash_otp=dto.hash_otp)
        )
        return jsonify(EmailChangeGrantDTO(grant=granted.grant).model_dump()), 200

    @rate_limit(limit=5, window_seconds=60.0)
    def send_new_email_otp(self) -> tuple[Response, int]:
        try:
            dto = NewEmailDTO.model_validate(_json_body())
        except ValidationError as exc:
            raise_validation_error(exc)

        sent = self._send_new_email_otp.execute(
            SendNewEmailOtpRequest(user_id=g.user_id, new_email=dto.email, grant=dto.grant)
        )
        payload = EmailOtpSentDTO(email=sent.email, hash_otp=sent.hash_otp)
        return jsonify(payload.model_dump(by_alias=True)), 200

    @rate_limit(limit=10, window_seconds=60.0)
    def verify_new_email_otp(self) -> tuple[Response, int]:
        try:
            dto = VerifyNewEmailDTO.model_validate(_json_body())
        except ValidationError as exc:
            raise_validation_error(exc)

        user = self._verify_new_email_otp.execute(
            VerifyNewEmailRequest(
                user_id=g.user_id,
                new_email=dto.email,
                otp=dto.otp,
                hash_otp=dto.hash_otp,
                grant=dto.grant,
            )
        )
        audit_log(AuditAction.EMAIL_CHANGED, user_id=user.id, ip_address=get_client_ip())
        return jsonify(UserDTO.from_user(user).dump()), 200

    # Admin

    def list_users(self) -> tuple[Response, int]:
        users = self._list_users.execute()
        return jsonify([UserDTO.from_user(user).dump() for user in users]), 200

    def get_user(self, user_id: int) -> tuple[Response, int]:
        user = self._get_user.execute(user_id)
        return jsonify(UserDTO.from_user(user).dump()), 200

    def delete_user(self, user_id: int) -> tuple[Response, int]:
        self._delete_user.execute(g.user_id, user_id)
        audit_log(
            AuditAction.ADMIN_USER_DELETED,
            user_id=g.user_id,
            ip_address=get_client_ip(),
            details={"target_user_id": user_id},
        )
        return jsonify({"deleted": True}), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("users", __name__, url_prefix="/api/users")
        authed = self._guard.access_required
        admin = self._guard.require_role(Role.ADMIN)

        bp.add_url_rule(
            "/update-full-name",
            view_func=authed(self.update_full_name),
            methods=["POST"],
            endpoint="update_full_name",
        )
        bp.add_url_rule(
            "/change-password",
            view_func=authed(self.change_password),
            methods=["POST"],
            endpoint="change_password",
        )
        bp.add_url_rule(
            "/upload-profile-picture",
            view_func=authed(self.upload_profile_picture),
            methods=["POST"],
            endpoint="upload_profile_picture",
        )
        bp.add_url_rule(
            "/send-otp-for-email-change",
            view_func=authed(self.send_current_email_otp),
            methods=["POST"],
            endpoint="send_current_email_otp",
        )
        bp.add_url_rule(
            "/verify-otp-for-email-change",
            view_func=authed(self.verify_current_email_otp),
            methods=["POST"],
            endpoint="verify_current_email_otp",
        )
        bp.add_url_rule(
            "/send-otp-to-new-email-for-email-change",
            view_func=authed(self.send_new_email_otp),
            methods=["POST"],
            endpoint="send_new_email_otp",
        )
        bp.add_url_rule(
            "/verify-new-email-for-email-change",
            view_func=authed(self.verify_new_email_otp),
            methods=["POST"],
            endpoint="verify_new_email_otp",
        )
        bp.add_url_rule(
            "/", view_func=authed(self.delete_self), methods=["DELETE"], endpoint="delete_self"
        )
        bp.add_url_rule(
            "/", view_func=admin(self.list_users), methods=["GET"], endpoint="list_users"
        )
        bp.add_url_rule(
            "/<int:user_id>", view_func=admin(self.get_user), methods=["GET"], endpoint="get_user"
        )
        bp.add_url_rule(
            "/<int:user_id>",
            view_func=admin(self.delete_user),
            methods=["DELETE"],
            endpoint="delete_user",
        )
        return bp
