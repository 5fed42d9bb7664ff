# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from userauth.domain.users.entities import Role
from userauth.domain.users.repositories import UserRepository
from userauth.shared.logging import logger


class AdminSetup:
    def __init__(self, *, users: UserRepository) -> None:
        self._users = users

    def setup_admin_user(self, email: str | None) -> bool:
        """Promote the account registered under ``ADMIN_EMAIL`` to admin."""
        if not email:
            logger.info("admin_setup: No ADMIN_EMAIL configured, skipping admin setup")
            return False

        user = self._users.find_by_email(email.strip().lower())
        if user is None:
            logger.warning(
                "admin_setup: ADMIN_EMAIL is not registered yet; "
                "register it and restart to grant admin privileges"
            )
            return False

        if user.role is Role.ADMIN:
            logger.info(f"admin_setup: user_id={user.id} already has admin privileges")
            return False

        self._users.update(user.id, role=Role.ADMIN)
        logger.info(f"admin_setup: Granted admin privileges to user_id={user.id}")
        return True


__all__ = ["AdminSetup"]
