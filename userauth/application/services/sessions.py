# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass

from userauth.application.services.tokens import TokenService
from userauth.domain.users.entities import AccessTokenPayload, RefreshTokenPayload, User


@dataclass(slots=True, frozen=True)
class IssuedSession:
    access_token: str
    refresh_token: str
    token_id: int


class SessionIssuer:
    """Mints the access token, persists a refresh record, then signs the refresh token.

    If the record cannot be stored the error propagates and no token leaves
    this object.
    """

    def __init__(self, *, tokens: TokenService) -> None:
        self._tokens = tokens

    def issue(self, user: User) -> IssuedSession:
        access_token = self._tokens.sign_access_token(
            AccessTokenPayload(user_id=user.id, role=user.role)
        )
        record = self._tokens.save_refresh_token(user)
        refresh_token = self._tokens.sign_refresh_token(
            RefreshTokenPayload(user_id=user.id, role=user.role, token_id=record.id)
        )
        return IssuedSession(
            access_token=access_token,
            refresh_token=refresh_token,
            token_id=record.id,
        )


__all__ = ["IssuedSession", "SessionIssuer"]
