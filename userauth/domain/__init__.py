# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .users.entities import (
    AccessTokenPayload,
    OtpEnvelope,
    RefreshTokenPayload,
    RefreshTokenRecord,
    Role,
    User,
)
from .users.exceptions import (
    CryptoError,
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    OtpExpiredError,
    OtpInvalidError,
    UserNotFoundError,
)

__all__ = [
    "AccessTokenPayload",
    "OtpEnvelope",
    "RefreshTokenPayload",
    "RefreshTokenRecord",
    "Role",
    "User",
    "CryptoError",
    "EmailAlreadyRegisteredError",
    "InvalidCredentialsError",
    "OtpExpiredError",
    "OtpInvalidError",
    "UserNotFoundError",
]
