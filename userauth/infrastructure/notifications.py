# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""OTP delivery adapters."""

from __future__ import annotations

from userauth.domain.users.repositories import OtpNotifier
from userauth.shared.logging import logger


class LogOtpNotifier(OtpNotifier):
    """Stands in for the mail gateway: records that a code went out.

    With ``log_codes`` the code itself is written to the log, which is only
    meant for local development and is refused by the production config.
    """

    def __init__(self, *, log_codes: bool = False) -> None:
        self._log_codes = log_codes

    def send_otp(self, email: str, full_name: str, otp: str, *, purpose: str) -> None:
        if self._log_codes:
            logger.bind(unsanitized=True).info(
                f"notify.otp: purpose={purpose} to={email} code={otp}"
            )
            return
        logger.info(f"notify.otp: purpose={purpose} to={email}")


__all__ = ["LogOtpNotifier"]
