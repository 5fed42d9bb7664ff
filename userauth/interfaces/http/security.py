# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Request guards and cookie helpers for the JWT session pair."""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps

from flask import Response, g, request

from userauth.application.services.tokens import TokenService
from userauth.domain.users.entities import Role
from userauth.domain.users.exceptions import (
    AuthenticationRequiredError,
    PermissionDeniedError,
)
from userauth.shared.config import TokenConfig
from userauth.shared.config.settings import SecurityConfig
from userauth.shared.logging import logger

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


def _access_token_from_request() -> str:
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth[7:].strip()
    return request.cookies.get(ACCESS_COOKIE, "")


def _refresh_token_from_request() -> str:
    token = request.cookies.get(REFRESH_COOKIE, "")
    if token:
        return token
    body = request.get_json(silent=True) or {}
    value = body.get("refreshToken") if isinstance(body, dict) else None
    return value if isinstance(value, str) else ""


class AuthGuard:
    def __init__(self, tokens: TokenService) -> None:
        self._tokens = tokens

    def access_required(self, f: Callable) -> Callable:
        @wraps(f)
        def inner(*args, **kwargs):
            token = _access_token_from_request()
            if not token:
                logger.warning(
                    f"No access token on {request.method} {request.path}"
                )
                raise AuthenticationRequiredError()

            payload = self._tokens.decode_access_token(token)
            g.user_id = payload.user_id
            g.role = payload.role
            return f(*args, **kwargs)

        return inner

    def refresh_required(self, f: Callable) -> Callable:
        """Signature and expiry only; revocation is checked by the use case."""

        @wraps(f)
        def inner(*args, **kwargs):
            token = _refresh_token_from_request()
            if not token:
                raise AuthenticationRequiredError()

            payload = self._tokens.decode_refresh_token(token)
            g.user_id = payload.user_id
            g.role = payload.role
            g.token_id = payload.token_id
            g.refresh_token = token
            return f(*args, **kwargs)

        return inner

    def require_role(self, *roles: Role) -> Callable[[Callable], Callable]:
        allowed = frozenset(roles)

        def decorator(f: Callable) -> Callable:
            @wraps(f)
            def inner(*args, **kwargs):
                if getattr(g, "role", None) not in allowed:
                    logger.warning(
                        f"Permission denied for user={getattr(g, 'user_id', None)} "
                        f"on {request.method} {request.path}"
                    )
                    raise PermissionDeniedError()
                return f(*args, **kwargs)

            return self.access_required(inner)

        return decorator


def set_session_cookies(
    response: Response,
    *,
    access_token: str,
    refresh_token: str,
    security: SecurityConfig,
    tokens: TokenConfig,
) -> None:
    for name, value, max_age in (
        (ACCESS_COOKIE, access_token, tokens.access_ttl_seconds),
        (REFRESH_COOKIE, refresh_token, tokens.refresh_ttl_seconds),
    ):
        response.set_cookie(
            name,
            value,
            httponly=True,
            samesite=security.cookie_samesite,
            secure=security.cookie_secure,
            domain=security.cookie_domain,
            max_age=max_age,
        )


def clear_session_cookies(response: Response, *, security: SecurityConfig) -> None:
    for name in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(
            name,
            domain=security.cookie_domain,
            httponly=True,
            samesite=security.cookie_samesite,
            secure=security.cookie_secure,
        )


__all__ = [
    "ACCESS_COOKIE",
    "REFRESH_COOKIE",
    "AuthGuard",
    "clear_session_cookies",
    "set_session_cookies",
]
