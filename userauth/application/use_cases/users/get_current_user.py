# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from userauth.domain.users.entities import User
from userauth.domain.users.exceptions import UserNotFoundError
from userauth.domain.users.repositories import UserRepository


class GetCurrentUserUseCase:
    def __init__(self, *, users: UserRepository) -> None:
        self._users = users

    def execute(self, user_id: int) -> User:
        user = self._users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError()
        return user.scrubbed()


__all__ = ["GetCurrentUserUseCase"]
