from __future__ import annotations

import logging
from pathlib import Path

from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from zappi.core.config import DATABASE_URL, ENV_NORMALIZED, IS_PROD
from zappi.core.database import Base
import zappi.models  # noqa: F401

logger = logging.getLogger(__name__)
MIGRATIONS_PREFIX = "[MIGRATIONS]"


def validate_database_environment() -> None:
    if IS_PROD and DATABASE_URL.startswith("sqlite"):
        logger.critical("%s SQLite is forbidden in production", MIGRATIONS_PREFIX)
        raise RuntimeError("SQLite is forbidden in production environment")


def _expected_heads(alembic_config_path: Path) -> set[str]:
    if not alembic_config_path.exists():
        logger.critical("%s alembic config not found path=%s", MIGRATIONS_PREFIX, alembic_config_path)
        raise RuntimeError("alembic config not found")
    script_directory = ScriptDirectory.from_config(Config(str(alembic_config_path)))
    return set(script_directory.get_heads())


def ensure_migrations_applied(*, engine: Engine, alembic_config_path: Path) -> None:
    if ENV_NORMALIZED == "test":
        logger.info("%s skipped migration check in test environment", MIGRATIONS_PREFIX)
        return

    expected_heads = _expected_heads(alembic_config_path)

    with engine.connect() as connection:
        tables = set(inspect(connection).get_table_names())
        if "alembic_version" not in tables:
            logger.critical("%s alembic_version table missing", MIGRATIONS_PREFIX)
            raise RuntimeError("Database has no migration state")
        current_rows = connection.exec_driver_sql("SELECT version_num FROM alembic_version").fetchall()

    current_heads = {row[0] for row in current_rows if row and row[0]}
    if current_heads != expected_heads:
        logger.critical(
            "%s pending migration detected current=%s expected=%s",
            MIGRATIONS_PREFIX,
            sorted(current_heads),
            sorted(expected_heads),
        )
        raise RuntimeError("Pending migrations detected")

    missing = sorted(set(Base.metadata.tables) - tables)
    if missing:
        logger.critical("%s tables missing after migrations: %s", MIGRATIONS_PREFIX, missing)
        raise RuntimeError("Database schema is incomplete")

    logger.info("%s migration state verified", MIGRATIONS_PREFIX)


def prepare_schema(*, engine: Engine, alembic_config_path: Path) -> None:
    """SQLite (dev/local) cria as tabelas direto; outros bancos exigem as migrações aplicadas."""
    if engine.url.get_backend_name() == "sqlite":
        Base.metadata.create_all(bind=engine)
        logger.info("%s sqlite schema ensured", MIGRATIONS_PREFIX)
        return
    ensure_migrations_applied(engine=engine, alembic_config_path=alembic_config_path)
