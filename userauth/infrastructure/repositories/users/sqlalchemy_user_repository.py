# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from userauth.domain.users.entities import RefreshTokenRecord, Role
from userauth.domain.users.entities import User as DomainUser
from userauth.domain.users.exceptions import EmailAlreadyRegisteredError
from userauth.domain.users.repositories import RefreshTokenRepository, UserRepository
from userauth.infrastructure.db.models import RefreshToken, User
from userauth.infrastructure.db.session import session_scope
from userauth.shared.errors.base import PersistenceError

_UPDATABLE_FIELDS = frozenset({"full_name", "email", "password_hash", "role", "avatar_url"})


@contextmanager
def _translated(operation: str, scope: Callable[[], Any]) -> Iterator[Session]:
    try:
        with scope() as session:
            yield session
    except IntegrityError as exc:
        if "email" in str(exc.orig).lower():
            raise EmailAlreadyRegisteredError() from exc
        raise PersistenceError(operation) from exc
    except SQLAlchemyError as exc:
        raise PersistenceError(operation) from exc


def _to_domain(row: User, *, with_password: bool = False) -> DomainUser:
    return DomainUser(
        id=row.id,
        full_name=row.full_name,
        email=row.email,
        role=Role(row.role),
        password_hash=row.password_hash if with_password else None,
        avatar_url=row.avatar_url,
        created_at=row.created_at,
    )


class SqlAlchemyUserRepository(UserRepository):
    def __init__(self, scope: Callable[[], Any] = session_scope) -> None:
        self._scope = scope

    def find_by_email(self, email: str) -> DomainUser | None:
        with _translated("find_user_by_email", self._scope) as session:
            row = session.scalars(select(User).where(User.email == email)).first()
            return _to_domain(row) if row else None

    def find_by_email_with_password(self, email: str) -> DomainUser | None:
        with _translated("find_user_by_email", self._scope) as session:
            row = session.scalars(select(User).where(User.email == email)).first()
            return _to_domain(row, with_password=True) if row else None

    def find_by_id(self, user_id: int, *, with_password: bool = False) -> DomainUser | None:
        with _translated("find_user_by_id", self._scope) as session:
            row = session.get(User, user_id)
            return _to_domain(row, with_password=with_password) if row else None

    def add(self, user: DomainUser) -> DomainUser:
        with _translated("add_user", self._scope) as session:
            row = User(
                full_name=user.full_name,
                email=user.email,
                password_hash=user.password_hash,
                role=user.role.value,
                avatar_url=user.avatar_url,
            )
            session.add(row)
            session.flush()
            session.refresh(row)
            return _to_domain(row)

    def update(self, user_id: int, **changes: Any) -> DomainUser | None:
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"cannot update user fields: {sorted(unknown)}")

        with _translated("update_user", self._scope) as session:
            row = session.get(User, user_id)
            if row is None:
                return None
            for field, value in changes.items():
                setattr(row, field, value.value if isinstance(value, Role) else value)
            session.flush()
            session.refresh(row)
            return _to_domain(row)

    def delete(self, user_id: int) -> bool:
        with _translated("delete_user", self._scope) as session:
            result = session.execute(delete(User).where(User.id == user_id))
            return bool(result.rowcount)

    def list_all(self) -> list[DomainUser]:
        with _translated("list_users", self._scope) as session:
            rows = session.scalars(select(User).order_by(User.id.asc())).all()
            return [_to_domain(row) for row in rows]


class SqlAlchemyRefreshTokenRepository(RefreshTokenRepository):
    def __init__(self, scope: Callable[[], Any] = session_scope) -> None:
        self._scope = scope

    def create(self, user_id: int, expires_at: datetime) -> RefreshTokenRecord:
        with _translated("save_refresh_token", self._scope) as session:
            row = RefreshToken(user_id=user_id, expires_at=expires_at)
            session.add(row)
            session.flush()
            return RefreshTokenRecord(
                id=row.id,
                user_id=row.user_id,
                expires_at=row.expires_at,
                created_at=row.created_at,
            )

    def get(self, token_id: int) -> RefreshTokenRecord | None:
        with _translated("get_refresh_token", self._scope) as session:
            row = session.get(RefreshToken, token_id)
            if row is None:
                return None
            return RefreshTokenRecord(
                id=row.id,
                user_id=row.user_id,
                expires_at=row.expires_at,
                created_at=row.created_at,
            )

    def delete_by_id(self, token_id: int) -> bool:
        with _translated("delete_refresh_token", self._scope) as session:
            result = session.execute(delete(RefreshToken).where(RefreshToken.id == token_id))
            return bool(result.rowcount)
