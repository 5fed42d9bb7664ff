# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


@dataclass(slots=True, frozen=True)
class User:

    id: int
    full_name: str
    email: str
    role: Role = Role.CUSTOMER
    password_hash: str | None = None
    avatar_url: str | None = None
    created_at: datetime | None = None

    def scrubbed(self) -> User:
        """Copy of the user that is safe to hand to callers."""
        if self.password_hash is None:
            return self
        return replace(self, password_hash=None)


@dataclass(slots=True, frozen=True)
class RefreshTokenRecord:

    id: int
    user_id: int
    expires_at: datetime
    created_at: datetime | None = None


@dataclass(slots=True, frozen=True)
class OtpEnvelope:
    """Proof, expiry and password hash travelling between send and verify."""

    proof: str
    expires_at_ms: int
    password_hash: str


@dataclass(slots=True, frozen=True)
class AccessTokenPayload:

    user_id: int
    role: Role


@dataclass(slots=True, frozen=True)
class RefreshTokenPayload:

    user_id: int
    role: Role
    token_id: int
