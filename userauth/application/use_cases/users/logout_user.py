"""Use-case for revoking refresh-token records."""

from __future__ import annotations

from userauth.application.services.tokens import TokenService
from userauth.application.use_cases.users.messages import LoggedOut


class LogoutUserUseCase:
    def __init__(self, *, tokens: TokenService) -> None:
        self._tokens = tokens

    def execute(self, token_id: int) -> LoggedOut:
        return LoggedOut(revoked=self._tokens.delete_token(token_id))
