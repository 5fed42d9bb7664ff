# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from userauth.application.services import otp_envelope
from userauth.application.services.credentials import CredentialService
from userauth.application.services.sessions import SessionIssuer
from userauth.application.use_cases.users.messages import (
    OtpSent,
    SendOtpRequest,
    SessionIssued,
    VerifyOtpRequest,
)
from userauth.domain.users.entities import Role, User
from userauth.domain.users.exceptions import (
    EmailAlreadyRegisteredError,
    PasswordConfirmationError,
)
from userauth.domain.users.repositories import OtpNotifier, UserRepository
from userauth.shared.logging import logger

OTP_PURPOSE_REGISTRATION = "registration"


class SendRegistrationOtpUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        credentials: CredentialService,
        notifier: OtpNotifier,
    ) -> None:
        self._users = users
        self._credentials = credentials
        self._notifier = notifier

    def execute(self, request: SendOtpRequest) -> OtpSent:
        if request.password != request.confirm_password:
            raise PasswordConfirmationError()

        # Nothing is reserved here; verify repeats this check.
        if self._users.find_by_email(request.email):
            raise EmailAlreadyRegisteredError()

        password_hash = self._credentials.hash_password(request.password)
        otp = self._credentials.generate_otp()
        envelope = self._credentials.seal(otp, request.email, password_hash)

        self._notifier.send_otp(
            request.email, request.full_name, otp, purpose=OTP_PURPOSE_REGISTRATION
        )
        logger.info(f"register.send_otp: sent expires_at={envelope.expires_at_ms}")
        return OtpSent(
            full_name=request.full_name,
            email=request.email,
            hash_otp=otp_envelope.encode(envelope),
        )


class VerifyRegistrationOtpUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        credentials: CredentialService,
        sessions: SessionIssuer,
    ) -> None:
        self._users = users
        self._credentials = credentials
        self._sessions = sessions

    def execute(self, request: VerifyOtpRequest) -> SessionIssued:
        if self._users.find_by_email(request.email):
            raise EmailAlreadyRegisteredError()

        envelope = self._credentials.open(request.otp, request.email, request.hash_otp)

        # The unique index on email settles concurrent verifies.
        user = self._users.add(
            User(
                id=0,
                full_name=request.full_name,
                email=request.email,
                role=Role.CUSTOMER,
                password_hash=envelope.password_hash,
            )
        )
        logger.info(f"register.verify_otp: created user_id={user.id}")

        session = self._sessions.issue(user)
        return SessionIssued(
            user=user.scrubbed(),
            access_token=session.access_token,
            refresh_token=session.refresh_token,
        )


__all__ = ["SendRegistrationOtpUseCase", "VerifyRegistrationOtpUseCase"]
