# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from userauth.shared.config import load_config
from userauth.shared.logging import logger

_config = load_config()


class Base(DeclarativeBase):
    pass


def _build_engine(url: str) -> Engine:
    if not url.startswith("sqlite"):
        return create_engine(
            url,
            echo=False,
            pool_pre_ping=True,
            pool_size=_config.database.pool_size,
            max_overflow=_config.database.max_overflow,
            pool_timeout=_config.database.pool_timeout,
        )

    connect_args: dict[str, object] = {
        "check_same_thread": False,
        "timeout": int(_config.database.pool_timeout),
    }
    if url in ("sqlite://", "sqlite:///:memory:"):
        engine = create_engine(
            url, echo=False, connect_args=connect_args, poolclass=StaticPool
        )
    else:
        engine = create_engine(url, echo=False, connect_args=connect_args)

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


ENGINE: Engine = _build_engine(_config.database.url)


SessionLocal = scoped_session(
    sessionmaker(bind=ENGINE, autoflush=False, autocommit=False, expire_on_commit=False)
)


@contextmanager
def session_scope() -> Iterator[Session]:
    session = SessionLocal()
    logger.debug("db.session: opened scoped session")
    try:
        yield session
        session.commit()
        logger.debug("db.session: committed scoped session")
    except Exception:
        logger.debug("db.session: error, rolling back")
        session.rollback()
        raise
    finally:
        session.close()
        SessionLocal.remove()
        logger.debug("db.session: closed scoped session")


def init_db() -> None:
    from userauth.infrastructure.db import models  # noqa: F401

    Base.metadata.create_all(bind=ENGINE)
    logger.info("Database schema ensured")
