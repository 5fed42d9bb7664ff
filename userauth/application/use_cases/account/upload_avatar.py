# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from pathlib import PurePath

from userauth.application.use_cases.account.messages import AvatarUpload
from userauth.domain.users.entities import User
from userauth.domain.users.exceptions import UserNotFoundError
from userauth.domain.users.repositories import AvatarStore, UserRepository
from userauth.shared.errors.base import ValidationError
from userauth.shared.logging import logger

ALLOWED_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".gif", ".webp"})


class UploadAvatarUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        store: AvatarStore,
        max_bytes: int,
    ) -> None:
        self._users = users
        self._store = store
        self._max_bytes = max_bytes

    def execute(self, upload: AvatarUpload) -> User:
        extension = PurePath(upload.filename or "").suffix.lower()
        if extension not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                context={"fields": ["avatar"], "allowed": sorted(ALLOWED_EXTENSIONS)}
            )
        if not upload.content:
            raise ValidationError(context={"fields": ["avatar"], "reason": "empty"})
        if len(upload.content) > self._max_bytes:
            raise ValidationError(
                context={"fields": ["avatar"], "max_bytes": self._max_bytes}
            )

        if self._users.find_by_id(upload.user_id) is None:
            raise UserNotFoundError()

        url = self._store.upload(upload.user_id, f"avatar{extension}", upload.content)
        user = self._users.update(upload.user_id, avatar_url=url)
        if user is None:
            raise UserNotFoundError()
        logger.info(f"account.avatar: uploaded user_id={upload.user_id} size={len(upload.content)}")
        return user.scrubbed()


__all__ = ["ALLOWED_EXTENSIONS", "UploadAvatarUseCase"]
