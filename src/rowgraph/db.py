from __future__ import annotations

from typing import Any, Iterable, Mapping

from sqlalchemy import column, create_engine, table
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.sql.expression import Insert, TableClause

from .config import AppSettings, get_settings
from .logs import getLogger

logger = getLogger(__name__)


# ---------------------------------------------------------------------------
# Engine / session
# ---------------------------------------------------------------------------


def create_engine_from_settings(settings: AppSettings | None = None) -> Engine:
    """Build an Engine from the ``database`` section of the settings."""
    settings = settings or get_settings()
    db = settings.database
    engine = create_engine(db.url, echo=db.echo, pool_pre_ping=db.pool_pre_ping)
    logger.info("Engine created for dialect=%s", engine.dialect.name)
    return engine


def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine)


# ---------------------------------------------------------------------------
# Statement helpers
# ---------------------------------------------------------------------------


def table_clause(name: str, columns: Iterable[str]) -> TableClause:
    """Lightweight table reference; no reflection or MetaData needed."""
    return table(name, *(column(c) for c in columns))


def insert_ignore(
    target: TableClause,
    values: Mapping[str, Any],
    dialect_name: str,
) -> Insert:
    """
    INSERT that skips a row whose identity already exists instead of failing.

    A skipped row shows up as zero affected rows.
    """
    if dialect_name == "postgresql":
        return postgresql.insert(target).values(dict(values)).on_conflict_do_nothing()
    if dialect_name == "sqlite":
        return sqlite.insert(target).values(dict(values)).on_conflict_do_nothing()
    if dialect_name in ("mysql", "mariadb"):
        return mysql.insert(target).values(dict(values)).prefix_with("IGNORE")
    raise NotImplementedError(
        f"insert-or-ignore is not supported for dialect {dialect_name!r}"
    )


__all__ = [
    "create_engine_from_settings",
    "session_factory",
    "table_clause",
    "insert_ignore",
]
