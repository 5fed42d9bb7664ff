# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import json
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from userauth.shared.logging import logger


class AuditAction(str, Enum):
    # Registration
    OTP_SENT = "otp_sent"
    REGISTER = "register"
    REGISTER_FAILED = "register_failed"

    # Sessions
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    LOGOUT = "logout"
    SESSION_REFRESHED = "session_refreshed"

    # Account
    PROFILE_UPDATED = "profile_updated"
    PASSWORD_CHANGED = "password_changed"
    EMAIL_CHANGE_STARTED = "email_change_started"
    EMAIL_CHANGED = "email_changed"
    AVATAR_UPDATED = "avatar_updated"
    ACCOUNT_DELETED = "account_deleted"

    # Admin
    ADMIN_USER_DELETED = "admin_user_deleted"


_SENSITIVE_KEYS = {"password", "token", "otp", "secret", "hash", "grant"}


class AuditLogger:
    @staticmethod
    def log(
        action: AuditAction,
        user_id: int | None = None,
        ip_address: str | None = None,
        details: dict[str, Any] | None = None,
        success: bool = True,
    ) -> None:
        timestamp = datetime.now(UTC)

        safe_details = _sanitize_details(details) if details else {}

        log_message = (
            f"AUDIT: {action.value} | "
            f"user_id={user_id} | "
            f"ip={ip_address} | "
            f"success={success}"
        )

        if safe_details:
            log_message += f" | details={safe_details}"

        if success:
            logger.info(log_message)
        else:
            logger.warning(log_message)

        _store_audit_log(
            timestamp=timestamp,
            action=action.value,
            user_id=user_id,
            ip_address=ip_address,
            success=success,
            details=safe_details,
        )


def _sanitize_details(details: dict[str, Any]) -> dict[str, Any]:
    sanitized = {}
    for key, value in details.items():
        key_lower = key.lower()

        if any(sensitive in key_lower for sensitive in _SENSITIVE_KEYS):
            sanitized[key] = "***REDACTED***"
        else:
            sanitized[key] = value

    return sanitized


audit = AuditLogger()


def audit_log(
    action: AuditAction,
    user_id: int | None = None,
    ip_address: str | None = None,
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> None:
    audit.log(action, user_id, ip_address, details, success)


def _store_audit_log(
    timestamp: datetime,
    action: str,
    user_id: int | None,
    ip_address: str | None,
    success: bool,
    details: dict[str, Any],
) -> None:
    from userauth.infrastructure.db.models import AuditLog
    from userauth.infrastructure.db.session import SessionLocal

    db = SessionLocal()
    try:
        db.add(
            AuditLog(
                timestamp=timestamp,
                action=action,
                user_id=user_id,
                ip_address=ip_address,
                success=success,
                details_json=json.dumps(details, default=str) if details else None,
            )
        )
        db.commit()
    except SQLAlchemyError as db_error:
        db.rollback()
        logger.warning(f"Failed to store audit log in database: {type(db_error).__name__}")
    finally:
        db.close()


__all__ = [
    "AuditAction",
    "AuditLogger",
    "audit",
    "audit_log",
]
