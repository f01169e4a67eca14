# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DisconnectionError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import DeclarativeBase, Session, scoped_session, sessionmaker

from authapp.shared.config import load_config
from authapp.shared.errors import StoreUnavailableError
from authapp.shared.logging import logger

_config = load_config()


class Base(DeclarativeBase):
    pass


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _engine_kwargs(url: str) -> dict[str, object]:
    kwargs: dict[str, object] = {"echo": False, "pool_pre_ping": True}
    if _is_sqlite(url):
        kwargs["connect_args"] = {
            "check_same_thread": False,
            "timeout": int(_config.database.pool_timeout),
        }
        if ":memory:" in url or url.rstrip("/") == "sqlite:":
            return kwargs
    kwargs.update(
        pool_size=_config.database.pool_size,
        max_overflow=_config.database.max_overflow,
        pool_timeout=_config.database.pool_timeout,
    )
    return kwargs


ENGINE: Engine = create_engine(_config.database.url, **_engine_kwargs(_config.database.url))


if _is_sqlite(_config.database.url):

    @event.listens_for(ENGINE, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, _record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


SessionLocal = scoped_session(
    sessionmaker(bind=ENGINE, autoflush=False, autocommit=False, expire_on_commit=False)
)

_UNAVAILABLE = (OperationalError, PoolTimeoutError, DisconnectionError)


@contextmanager
def session_scope() -> Iterator[Session]:
    """Transactional scope; connectivity faults surface as ``StoreUnavailableError``."""
    session = SessionLocal()
    logger.debug("db.session: opened scoped session")
    try:
        yield session
        session.commit()
        logger.debug("db.session: committed scoped session")
    except _UNAVAILABLE as exc:
        logger.error(f"db.session: store unavailable ({type(exc).__name__}), rolling back")
        session.rollback()
        raise StoreUnavailableError(context={"cause": type(exc).__name__}) from exc
    except Exception:
        logger.debug("db.session: error, rolling back")
        session.rollback()
        raise
    finally:
        session.close()
        SessionLocal.remove()
        logger.debug("db.session: closed scoped session")


def init_db() -> None:
    from authapp.infrastructure.db import models  # noqa: F401

    try:
        Base.metadata.create_all(bind=ENGINE)
    except _UNAVAILABLE as exc:
        raise StoreUnavailableError(context={"cause": type(exc).__name__}) from exc
    logger.info("Database schema ensured")
