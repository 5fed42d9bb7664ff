# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Access/refresh token signing and the refresh-token record lifecycle."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from userauth.domain.users.entities import (
    AccessTokenPayload,
    RefreshTokenPayload,
    RefreshTokenRecord,
    Role,
    User,
)
from userauth.domain.users.exceptions import (
    InvalidTokenError,
    TokenConfigurationError,
    TokenExpiredError,
    TokenRevokedError,
)
from userauth.domain.users.repositories import RefreshTokenRepository
from userauth.shared.config import TokenConfig
from userauth.shared.logging import logger

REFRESH_ALGORITHM = "HS256"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TokenService:
    def __init__(
        self,
        *,
        config: TokenConfig,
        tokens: RefreshTokenRepository,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._config = config
        self._tokens = tokens
        self._now = now

    # signing

    def _sign(self, claims: dict[str, Any], key: str, algorithm: str, ttl_seconds: int) -> str:
        issued_at = self._now()
        claims = {
            **claims,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + timedelta(seconds=ttl_seconds)).timestamp()),
        }
        try:
            return jwt.encode(claims, key, algorithm=algorithm)
        except (jwt.PyJWTError, ValueError, TypeError) as exc:
            logger.error(f"tokens: signing failed alg={algorithm}: {type(exc).__name__}")
            raise TokenConfigurationError() from exc

    def sign_access_token(self, payload: AccessTokenPayload) -> str:
        return self._sign(
            {"userId": str(payload.user_id), "role": payload.role.value},
            self._config.access_secret,
            self._config.access_algorithm,
            self._config.access_ttl_seconds,
        )

    def sign_refresh_token(self, payload: RefreshTokenPayload) -> str:
        return self._sign(
            {
                "userId": str(payload.user_id),
                "role": payload.role.value,
                "tokenId": str(payload.token_id),
            },
            self._config.refresh_secret,
            REFRESH_ALGORITHM,
            self._config.refresh_ttl_seconds,
        )

    # verification

    def _decode(self, token: str, key: str, algorithm: str, required: tuple[str, ...]) -> dict[str, Any]:
        if not token:
            raise InvalidTokenError()
        try:
            claims = jwt.decode(
                token,
                key,
                algorithms=[algorithm],
                options={"require": ["exp", "iat", *required]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError() from exc
        except jwt.PyJWTError as exc:
            raise InvalidTokenError() from exc
        return claims

    @staticmethod
    def _common_claims(claims: dict[str, Any]) -> tuple[int, Role]:
        try:
            return int(claims["userId"]), Role(claims["role"])
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidTokenError() from exc

    def decode_access_token(self, token: str) -> AccessTokenPayload:
        claims = self._decode(
            token,
            self._config.access_verify_key,
            self._config.access_algorithm,
            ("userId", "role"),
        )
        user_id, role = self._common_claims(claims)
        return AccessTokenPayload(user_id=user_id, role=role)

    def decode_refresh_token(self, token: str) -> RefreshTokenPayload:
        claims = self._decode(
            token,
            self._config.refresh_secret,
            REFRESH_ALGORITHM,
            ("userId", "role", "tokenId"),
        )
        user_id, role = self._common_claims(claims)
        try:
            token_id = int(claims["tokenId"])
        except (TypeError, ValueError) as exc:
            raise InvalidTokenError() from exc
        return RefreshTokenPayload(user_id=user_id, role=role, token_id=token_id)

    # persistence

    def save_refresh_token(self, user: User) -> RefreshTokenRecord:
        expires_at = self._now() + timedelta(seconds=self._config.refresh_ttl_seconds)
        record = self._tokens.create(user.id, expires_at)
        logger.debug(f"tokens: saved refresh record id={record.id} user={user.id}")
        return record

    def delete_token(self, token_id: int) -> bool:
        """Revoke a refresh-token record; ``False`` when it was already gone."""
        found = self._tokens.delete_by_id(token_id)
        if not found:
            logger.info(f"tokens: refresh record id={token_id} already revoked")
        return found

    def ensure_active(self, payload: RefreshTokenPayload) -> RefreshTokenRecord:
        record = self._tokens.get(payload.token_id)
        if record is None:
            raise TokenRevokedError()
        if record.user_id != payload.user_id:
            raise InvalidTokenError()

        expires_at = record.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        if expires_at < self._now():
            raise TokenExpiredError()
        return record


__all__ = ["TokenService"]
