# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol

from .entities import RefreshTokenRecord, User


class UserRepository(Protocol):
    def find_by_email(self, email: str) -> User | None: ...
    def find_by_email_with_password(self, email: str) -> User | None: ...
    def find_by_id(self, user_id: int, *, with_password: bool = False) -> User | None: ...
    def add(self, user: User) -> User: ...
    def update(self, user_id: int, **changes: Any) -> User | None: ...
    def delete(self, user_id: int) -> bool: ...
    def list_all(self) -> list[User]: ...


class RefreshTokenRepository(Protocol):
    def create(self, user_id: int, expires_at: datetime) -> RefreshTokenRecord: ...
    def get(self, token_id: int) -> RefreshTokenRecord | None: ...
    def delete_by_id(self, token_id: int) -> bool: ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, hashed: str) -> bool: ...


class OtpNotifier(Protocol):
    def send_otp(self, email: str, full_name: str, otp: str, *, purpose: str) -> None: ...


class AvatarStore(Protocol):
    def upload(self, user_id: int, filename: str, content: bytes) -> str: ...
