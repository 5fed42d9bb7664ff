# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from userauth.application.services.credentials import CredentialService
from userauth.application.services.sessions import SessionIssuer
from userauth.application.use_cases.users.messages import LoginRequest, SessionIssued
from userauth.domain.users.exceptions import InvalidCredentialsError
from userauth.domain.users.repositories import UserRepository


class LoginUserUseCase:
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

    def execute(self, request: LoginRequest) -> SessionIssued:
        user = self._users.find_by_email_with_password(request.email)
        if user is None or not user.password_hash:
            raise InvalidCredentialsError()

        if not self._credentials.compare_password(request.password, user.password_hash):
            raise InvalidCredentialsError()

        session = self._sessions.issue(user)
        return SessionIssued(
            user=user.scrubbed(),
            access_token=session.access_token,
            refresh_token=session.refresh_token,
        )


__all__ = ["LoginUserUseCase"]
