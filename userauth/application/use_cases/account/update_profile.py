# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from userauth.domain.users.entities import User
from userauth.domain.users.exceptions import UserNotFoundError
from userauth.domain.users.repositories import UserRepository
from userauth.shared.errors.base import ValidationError


class UpdateFullNameUseCase:
    def __init__(self, *, users: UserRepository) -> None:
        self._users = users

    def execute(self, user_id: int, full_name: str) -> User:
        full_name = full_name.strip()
        if not full_name:
            raise ValidationError(context={"fields": ["fullName"]})

        user = self._users.update(user_id, full_name=full_name)
        if user is None:
            raise UserNotFoundError()
        return user.scrubbed()


class DeleteSelfUseCase:
    def __init__(self, *, users: UserRepository) -> None:
        self._users = users

    def execute(self, user_id: int) -> None:
        # Refresh-token records go with the user (ON DELETE CASCADE).
        if not self._users.delete(user_id):
            raise UserNotFoundError()


__all__ = ["DeleteSelfUseCase", "UpdateFullNameUseCase"]
