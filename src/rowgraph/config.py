from functools import lru_cache
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigError(RuntimeError):
    """Configuration-related error."""
    pass


# ─────────────────────────────────────────────────────────────
# Section configs
# ─────────────────────────────────────────────────────────────


class LoggingSettings(BaseModel):
    level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "INFO"
    format: str = (
        "%(asctime)-20s %(name)-30s "
        "%(levelname)-8s: %(message)s"
    )


class DatabaseSettings(BaseModel):
    """
    DB config as a SQLAlchemy URL.

    In production, override via:
    - env var:     ROWGRAPH_DATABASE__URL
    - dotenv:      .env / .env.local
    - secret file: /run/secrets/rowgraph/database__url
    """
    url: str = Field(
        "sqlite+pysqlite:///:memory:",
        description="SQLAlchemy-style database URL.",
    )
    echo: bool = Field(
        False, description="Log every emitted statement (SQLAlchemy echo)."
    )
    pool_pre_ping: bool = Field(
        True, description="Test pooled connections before handing them out."
    )

    @field_validator("url")
    @classmethod
    def _url_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("database url must not be empty")
        return value


class ControllerSettings(BaseModel):
    default_vertex_label: str = Field(
        "vertex",
        description="Label given to added vertices without a ~label property.",
    )
    default_edge_label: str = Field(
        "edge",
        description="Label given to added edges without a ~label property.",
    )
    push_down_limit: bool = Field(
        True,
        description=(
            "Add the search limit to every per-table SELECT. The merged result "
            "is limited either way; this only saves rows on the wire."
        ),
    )


# ─────────────────────────────────────────────────────────────
# Top-level settings
# ─────────────────────────────────────────────────────────────


class AppSettings(BaseSettings):
    """
    Canonical configuration for a rowgraph-backed service.

    Precedence (highest → lowest):

    1. Init kwargs (tests/overrides)
    2. Environment variables
    3. .env and .env.local
    4. Secret files in /run/secrets/rowgraph
    5. Defaults in this class
    """

    model_config = SettingsConfigDict(
        env_prefix="ROWGRAPH_",  # ROWGRAPH_LOGGING__LEVEL, ROWGRAPH_DATABASE__URL, ...
        env_file=(".env", ".env.local"),  # .env.local overrides .env
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        secrets_dir="/run/secrets/rowgraph",
        extra="ignore",
        validate_default=True,
    )

    app_name: str = "rowgraph"
    debug: bool = False

    logging: LoggingSettings = LoggingSettings()
    database: DatabaseSettings = DatabaseSettings()  # type: ignore[call-arg]
    controller: ControllerSettings = ControllerSettings()  # type: ignore[call-arg]


@lru_cache(maxsize=1)
def get_settings(**overrides: Any) -> AppSettings:
    """
    Cached accessor for process-wide settings.

    `overrides` are init kwargs → highest precedence (handy in tests).
    """
    try:
        return AppSettings(**overrides)
    except ValueError as exc:
        raise ConfigError(f"invalid rowgraph settings: {exc}") from exc
