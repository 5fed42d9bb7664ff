# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from functools import cached_property

from userauth.application.services.credentials import CredentialService
from userauth.application.services.password_hashing import WerkzeugPasswordHasher
from userauth.application.services.sessions import SessionIssuer
from userauth.application.services.tokens import TokenService
from userauth.application.use_cases.account.change_email import (
    SendCurrentEmailOtpUseCase,
    SendNewEmailOtpUseCase,
    VerifyCurrentEmailOtpUseCase,
    VerifyNewEmailOtpUseCase,
)
from userauth.application.use_cases.account.change_password import ChangePasswordUseCase
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
from userauth.application.use_cases.users.get_current_user import GetCurrentUserUseCase
from userauth.application.use_cases.users.login_user import LoginUserUseCase
from userauth.application.use_cases.users.logout_user import LogoutUserUseCase
from userauth.application.use_cases.users.refresh_session import RefreshSessionUseCase
from userauth.application.use_cases.users.register_user import (
    SendRegistrationOtpUseCase,
    VerifyRegistrationOtpUseCase,
)
from userauth.domain.users.repositories import AvatarStore, OtpNotifier
from userauth.infrastructure.admin_setup import AdminSetup
from userauth.infrastructure.media import build_avatar_store
from userauth.infrastructure.notifications import LogOtpNotifier
from userauth.infrastructure.repositories.users.sqlalchemy_user_repository import (
    SqlAlchemyRefreshTokenRepository,
    SqlAlchemyUserRepository,
)
from userauth.interfaces.http.controllers.auth_controller import AuthController
from userauth.interfaces.http.controllers.users_controller import UsersController
from userauth.shared.config import AppConfig, load_config


class Container:
    def __init__(self, config: AppConfig | None = None) -> None:
        self.config = config or load_config()

    # Collaborators

    @cached_property
    def password_hasher(self) -> WerkzeugPasswordHasher:
        return WerkzeugPasswordHasher()

    @cached_property
    def user_repository(self) -> SqlAlchemyUserRepository:
        return SqlAlchemyUserRepository()

    @cached_property
    def refresh_token_repository(self) -> SqlAlchemyRefreshTokenRepository:
        return SqlAlchemyRefreshTokenRepository()

    @cached_property
    def otp_notifier(self) -> OtpNotifier:
        return LogOtpNotifier(log_codes=self.config.otp.log_codes)

    @cached_property
    def avatar_store(self) -> AvatarStore:
        return build_avatar_store(self.config.media)

    # Services

    @cached_property
    def credential_service(self) -> CredentialService:
        return CredentialService(config=self.config.otp, password_hasher=self.password_hasher)

    @cached_property
    def token_service(self) -> TokenService:
        return TokenService(config=self.config.tokens, tokens=self.refresh_token_repository)

    @cached_property
    def session_issuer(self) -> SessionIssuer:
        return SessionIssuer(tokens=self.token_service)

    # Authentication use cases

    @cached_property
    def send_registration_otp_use_case(self) -> SendRegistrationOtpUseCase:
        return SendRegistrationOtpUseCase(
            users=self.user_repository,
            credentials=self.credential_service,
            notifier=self.otp_notifier,
        )

    @cached_property
    def verify_registration_otp_use_case(self) -> VerifyRegistrationOtpUseCase:
        return VerifyRegistrationOtpUseCase(
            users=self.user_repository,
            credentials=self.credential_service,
            sessions=self.session_issuer,
        )

    @cached_property
    def login_user_use_case(self) -> LoginUserUseCase:
        return LoginUserUseCase(
            users=self.user_repository,
            credentials=self.credential_service,
            sessions=self.session_issuer,
        )

    @cached_property
    def logout_user_use_case(self) -> LogoutUserUseCase:
        return LogoutUserUseCase(tokens=self.token_service)

    @cached_property
    def refresh_session_use_case(self) -> RefreshSessionUseCase:
        return RefreshSessionUseCase(
            users=self.user_repository,
            tokens=self.token_service,
            sessions=self.session_issuer,
        )

    @cached_property
    def get_current_user_use_case(self) -> GetCurrentUserUseCase:
        return GetCurrentUserUseCase(users=self.user_repository)

    # Account use cases

    def _email_change_kwargs(self) -> dict:
        return {
            "users": self.user_repository,
            "credentials": self.credential_service,
            "notifier": self.otp_notifier,
        }

    @cached_property
    def send_current_email_otp_use_case(self) -> SendCurrentEmailOtpUseCase:
        return SendCurrentEmailOtpUseCase(**self._email_change_kwargs())

    @cached_property
    def verify_current_email_otp_use_case(self) -> VerifyCurrentEmailOtpUseCase:
        return VerifyCurrentEmailOtpUseCase(**self._email_change_kwargs())

    @cached_property
    def send_new_email_otp_use_case(self) -> SendNewEmailOtpUseCase:
        return SendNewEmailOtpUseCase(**self._email_change_kwargs())

    @cached_property
    def verify_new_email_otp_use_case(self) -> VerifyNewEmailOtpUseCase:
        return VerifyNewEmailOtpUseCase(**self._email_change_kwargs())

    @cached_property
    def update_full_name_use_case(self) -> UpdateFullNameUseCase:
        return UpdateFullNameUseCase(users=self.user_repository)

    @cached_property
    def change_password_use_case(self) -> ChangePasswordUseCase:
        return ChangePasswordUseCase(
            users=self.user_repository, credentials=self.credential_service
        )

    @cached_property
    def upload_avatar_use_case(self) -> UploadAvatarUseCase:
        return UploadAvatarUseCase(
            users=self.user_repository,
            store=self.avatar_store,
            max_bytes=self.config.media.max_bytes,
        )

    @cached_property
    def delete_self_use_case(self) -> DeleteSelfUseCase:
        return DeleteSelfUseCase(users=self.user_repository)

    @cached_property
    def admin_setup(self) -> AdminSetup:
        return AdminSetup(users=self.user_repository)

    # Admin use cases

    @cached_property
    def get_user_use_case(self) -> GetUserUseCase:
        return GetUserUseCase(users=self.user_repository)

    @cached_property
    def list_users_use_case(self) -> ListUsersUseCase:
        return ListUsersUseCase(users=self.user_repository)

    @cached_property
    def delete_user_use_case(self) -> DeleteUserUseCase:
        return DeleteUserUseCase(users=self.user_repository)

    # Controllers

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(
            tokens=self.token_service,
            send_otp_use_case=self.send_registration_otp_use_case,
            verify_otp_use_case=self.verify_registration_otp_use_case,
            login_use_case=self.login_user_use_case,
            logout_use_case=self.logout_user_use_case,
            refresh_use_case=self.refresh_session_use_case,
            self_use_case=self.get_current_user_use_case,
            security=self.config.security,
            tokens_config=self.config.tokens,
        )

    @cached_property
    def users_controller(self) -> UsersController:
        return UsersController(
            tokens=self.token_service,
            update_full_name=self.update_full_name_use_case,
            change_password=self.change_password_use_case,
            upload_avatar=self.upload_avatar_use_case,
            delete_self=self.delete_self_use_case,
            send_current_email_otp=self.send_current_email_otp_use_case,
            verify_current_email_otp=self.verify_current_email_otp_use_case,
            send_new_email_otp=self.send_new_email_otp_use_case,
            verify_new_email_otp=self.verify_new_email_otp_use_case,
            get_user=self.get_user_use_case,
            list_users=self.list_users_use_case,
            delete_user=self.delete_user_use_case,
        )


container = Container()
