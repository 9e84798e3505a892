from __future__ import annotations

import logging

import pytest
from sqlalchemy import text
from sqlalchemy.dialects import mysql, postgresql

from rowgraph.config import AppSettings, ConfigError, ControllerSettings, LoggingSettings, get_settings
from rowgraph.db import create_engine_from_settings, insert_ignore, session_factory, table_clause
from rowgraph.logs import configure_logging


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults() -> None:
    settings = get_settings()
    assert settings.app_name == "rowgraph"
    assert settings.database.url.startswith("sqlite")
    assert settings.controller == ControllerSettings()
    assert settings.controller.push_down_limit is True


def test_env_overrides(monkeypatch) -> None:
    monkeypatch.setenv("ROWGRAPH_LOGGING__LEVEL", "DEBUG")
    monkeypatch.setenv("ROWGRAPH_CONTROLLER__DEFAULT_VERTEX_LABEL", "node")

    settings = AppSettings()
    assert settings.logging.level == "DEBUG"
    assert settings.controller.default_vertex_label == "node"


def test_init_kwargs_win_over_env(monkeypatch) -> None:
    monkeypatch.setenv("ROWGRAPH_APP_NAME", "from-env")
    assert get_settings(app_name="from-kwargs").app_name == "from-kwargs"


def test_invalid_settings_raise_config_error(monkeypatch) -> None:
    monkeypatch.setenv("ROWGRAPH_DATABASE__URL", "   ")
    with pytest.raises(ConfigError):
        get_settings()


def test_engine_and_session_from_settings() -> None:
    engine = create_engine_from_settings(AppSettings(database={"url": "sqlite+pysqlite:///:memory:"}))
    assert engine.dialect.name == "sqlite"

    with session_factory(engine)() as session:
        assert session.execute(text("SELECT 1")).scalar_one() == 1
    engine.dispose()


def test_insert_ignore_per_dialect() -> None:
    target = table_clause("people", ["id", "name"])
    values = {"id": "marko", "name": "marko"}

    pg = str(insert_ignore(target, values, "postgresql").compile(dialect=postgresql.dialect()))
    assert "ON CONFLICT DO NOTHING" in pg

    my = str(insert_ignore(target, values, "mysql").compile(dialect=mysql.dialect()))
    assert my.startswith("INSERT IGNORE")

    with pytest.raises(NotImplementedError):
        insert_ignore(target, values, "oracle")


def test_configure_logging_is_idempotent() -> None:
    logger = configure_logging(LoggingSettings(level="DEBUG"))
    handlers = list(logger.handlers)
    assert logger.level == logging.DEBUG

    logger = configure_logging(LoggingSettings(level="WARNING", format="%(message)s"))
    assert logger.handlers == handlers
    assert logger.level == logging.WARNING
