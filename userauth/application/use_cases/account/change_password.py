# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from userauth.application.services.credentials import CredentialService
from userauth.application.use_cases.account.messages import ChangePasswordRequest
from userauth.domain.users.entities import User
from userauth.domain.users.exceptions import (
    InvalidCredentialsError,
    PasswordConfirmationError,
    UserNotFoundError,
)
from userauth.domain.users.repositories import UserRepository
from userauth.shared.logging import logger


class ChangePasswordUseCase:
    def __init__(self, *, users: UserRepository, credentials: CredentialService) -> None:
        self._users = users
        self._credentials = credentials

    def execute(self, request: ChangePasswordRequest) -> User:
        if request.new_password != request.confirm_password:
            raise PasswordConfirmationError()

        user = self._users.find_by_id(request.user_id, with_password=True)
        if user is None or not user.password_hash:
            raise UserNotFoundError()

        if not self._credentials.compare_password(request.old_password, user.password_hash):
            raise InvalidCredentialsError(code="old_password_mismatch")

        updated = self._users.update(
            user.id, password_hash=self._credentials.hash_password(request.new_password)
        )
        if updated is None:
            raise UserNotFoundError()
        logger.info(f"account.change_password: ok user_id={user.id}")
        return updated.scrubbed()


__all__ = ["ChangePasswordUseCase"]
