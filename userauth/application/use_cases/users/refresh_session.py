# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from userauth.application.services.sessions import SessionIssuer
from userauth.application.services.tokens import TokenService
from userauth.application.use_cases.users.messages import SessionIssued
from userauth.domain.users.exceptions import TokenRevokedError, UserNotFoundError
from userauth.domain.users.repositories import UserRepository
from userauth.shared.logging import logger


class RefreshSessionUseCase:
    """Trades a live refresh token for a new pair and retires the old record."""

    def __init__(
        self,
        *,
        users: UserRepository,
        tokens: TokenService,
        sessions: SessionIssuer,
    ) -> None:
        self._users = users
        self._tokens = tokens
        self._sessions = sessions

    def execute(self, refresh_token: str) -> SessionIssued:
        payload = self._tokens.decode_refresh_token(refresh_token)
        record = self._tokens.ensure_active(payload)
        # Losing the delete race means another request already rotated it.
        if not self._tokens.delete_token(record.id):
            raise TokenRevokedError()

        user = self._users.find_by_id(payload.user_id)
        if user is None:
            raise UserNotFoundError()

        session = self._sessions.issue(user)
        logger.info(
            f"auth.refresh: rotated token_id={record.id} -> {session.token_id} user_id={user.id}"
        )
        return SessionIssued(
            user=user.scrubbed(),
            access_token=session.access_token,
            refresh_token=session.refresh_token,
        )


__all__ = ["RefreshSessionUseCase"]
