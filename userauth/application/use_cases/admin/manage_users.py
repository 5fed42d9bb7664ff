# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from userauth.domain.users.entities import User
from userauth.domain.users.exceptions import UserNotFoundError
from userauth.domain.users.repositories import UserRepository
from userauth.shared.errors.base import ValidationError
from userauth.shared.logging import logger


class GetUserUseCase:
    def __init__(self, *, users: UserRepository) -> None:
        self._users = users

    def execute(self, user_id: int) -> User:
        user = self._users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError()
        return user.scrubbed()


class ListUsersUseCase:
    def __init__(self, *, users: UserRepository) -> None:
        self._users = users

    def execute(self) -> list[User]:
        return [user.scrubbed() for user in self._users.list_all()]


class DeleteUserUseCase:
    def __init__(self, *, users: UserRepository) -> None:
        self._users = users

    def execute(self, actor_id: int, user_id: int) -> None:
        if actor_id == user_id:
            raise ValidationError(context={"reason": "use_self_delete"})

        if not self._users.delete(user_id):
            raise UserNotFoundError()

        logger.info(f"admin: deleted user_id={user_id} by admin_id={actor_id}")


__all__ = ["DeleteUserUseCase", "GetUserUseCase", "ListUsersUseCase"]
