# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Two-phase email change.

The current address proves ownership first and receives a grant; the grant
then unlocks an OTP round trip on the new address. Envelopes and grants are
bound to a keyed digest of the user's password hash, so changing the
password in between voids them. The stored hash itself never leaves the
service.
"""

from __future__ import annotations

import hmac

from userauth.application.services import otp_envelope
from userauth.application.services.credentials import CredentialService
from userauth.application.use_cases.account.messages import (
    EmailChangeGranted,
    EmailChangeOtpSent,
    SendNewEmailOtpRequest,
    VerifyCurrentEmailRequest,
    VerifyNewEmailRequest,
)
from userauth.domain.users.entities import User
from userauth.domain.users.exceptions import (
    EmailAlreadyRegisteredError,
    OtpInvalidError,
    UserNotFoundError,
)
from userauth.domain.users.repositories import OtpNotifier, UserRepository
from userauth.shared.errors.base import ValidationError
from userauth.shared.logging import logger

OTP_PURPOSE_CURRENT_EMAIL = "email_change_current"
OTP_PURPOSE_NEW_EMAIL = "email_change_new"


class _EmailChangeStep:
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

    def _load_user(self, user_id: int) -> User:
        user = self._users.find_by_id(user_id, with_password=True)
        if user is None or not user.password_hash:
            raise UserNotFoundError()
        return user

    def _password_binding(self, user: User) -> str:
        return self._credentials.hash_proof(f"pw.{user.password_hash}")

    def _check_grant(self, user: User, grant: str) -> None:
        envelope = self._credentials.check_grant(user.email, grant)
        if not hmac.compare_digest(envelope.password_hash, self._password_binding(user)):
            raise OtpInvalidError()

    def _open_bound(self, user: User, email: str, otp: str, hash_otp: str) -> None:
        envelope = self._credentials.open(otp, email, hash_otp)
        if not hmac.compare_digest(envelope.password_hash, self._password_binding(user)):
            raise OtpInvalidError()

    def _send(self, user: User, email: str, purpose: str) -> EmailChangeOtpSent:
        otp = self._credentials.generate_otp()
        envelope = self._credentials.seal(otp, email, self._password_binding(user))
        self._notifier.send_otp(email, user.full_name, otp, purpose=purpose)
        return EmailChangeOtpSent(email=email, hash_otp=otp_envelope.encode(envelope))


class SendCurrentEmailOtpUseCase(_EmailChangeStep):
    def execute(self, user_id: int) -> EmailChangeOtpSent:
        user = self._load_user(user_id)
        sent = self._send(user, user.email, OTP_PURPOSE_CURRENT_EMAIL)
        logger.info(f"account.email_change: otp sent to current address user_id={user.id}")
        return sent


class VerifyCurrentEmailOtpUseCase(_EmailChangeStep):
    def execute(self, request: VerifyCurrentEmailRequest) -> EmailChangeGranted:
        user = self._load_user(request.user_id)
        self._open_bound(user, user.email, request.otp, request.hash_otp)
        grant = self._credentials.issue_grant(user.email, self._password_binding(user))
        return EmailChangeGranted(grant=otp_envelope.encode(grant))


class SendNewEmailOtpUseCase(_EmailChangeStep):
    def execute(self, request: SendNewEmailOtpRequest) -> EmailChangeOtpSent:
        user = self._load_user(request.user_id)
        self._check_grant(user, request.grant)

        if request.new_email.lower() == user.email.lower():
            raise ValidationError(context={"fields": ["email"], "reason": "unchanged"})
        if self._users.find_by_email(request.new_email):
            raise EmailAlreadyRegisteredError()

        sent = self._send(user, request.new_email, OTP_PURPOSE_NEW_EMAIL)
        logger.info(f"account.email_change: otp sent to new address user_id={user.id}")
        return sent


class VerifyNewEmailOtpUseCase(_EmailChangeStep):
    def execute(self, request: VerifyNewEmailRequest) -> User:
        user = self._load_user(request.user_id)
        self._check_grant(user, request.grant)
        self._open_bound(user, request.new_email, request.otp, request.hash_otp)

        if self._users.find_by_email(request.new_email):
            raise EmailAlreadyRegisteredError()

        updated = self._users.update(user.id, email=request.new_email)
        if updated is None:
            raise UserNotFoundError()
        logger.info(f"account.email_change: completed user_id={user.id}")
        return updated.scrubbed()


__all__ = [
    "SendCurrentEmailOtpUseCase",
    "SendNewEmailOtpUseCase",
    "VerifyCurrentEmailOtpUseCase",
    "VerifyNewEmailOtpUseCase",
]
