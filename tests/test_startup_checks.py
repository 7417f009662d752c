import importlib.util

import pytest
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect
from sqlalchemy.pool import StaticPool

from zappi.core import startup_checks
from zappi.core.config import PROJECT_ROOT
from zappi.main import ALEMBIC_CONFIG_PATH


def _memory_engine():
    return create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


def test_prepare_schema_creates_tables_on_sqlite():
    engine = _memory_engine()

    startup_checks.prepare_schema(engine=engine, alembic_config_path=ALEMBIC_CONFIG_PATH)

    tables = set(inspect(engine).get_table_names())
    assert {"sessions", "cooldowns", "orders", "processed_messages"}.issubset(tables)


def test_sqlite_is_refused_in_production(monkeypatch):
    monkeypatch.setattr(startup_checks, "IS_PROD", True)
    monkeypatch.setattr(startup_checks, "DATABASE_URL", "sqlite:///zappi.db")

    with pytest.raises(RuntimeError, match="SQLite is forbidden"):
        startup_checks.validate_database_environment()


def test_missing_migration_state_is_reported(monkeypatch):
    monkeypatch.setattr(startup_checks, "ENV_NORMALIZED", "prod")

    with pytest.raises(RuntimeError, match="no migration state"):
        startup_checks.ensure_migrations_applied(engine=_memory_engine(), alembic_config_path=ALEMBIC_CONFIG_PATH)


def test_missing_alembic_config_is_reported(monkeypatch, tmp_path):
    monkeypatch.setattr(startup_checks, "ENV_NORMALIZED", "prod")

    with pytest.raises(RuntimeError, match="alembic config not found"):
        startup_checks.ensure_migrations_applied(engine=_memory_engine(), alembic_config_path=tmp_path / "nada.ini")


def _schema(engine) -> dict:
    inspector = inspect(engine)
    return {
        table: (
            sorted(inspector.get_pk_constraint(table)["constrained_columns"]),
            sorted((index["name"], tuple(index["column_names"])) for index in inspector.get_indexes(table)),
            sorted(column["name"] for column in inspector.get_columns(table)),
        )
        for table in inspector.get_table_names()
    }


def test_initial_migration_matches_models():
    spec = importlib.util.spec_from_file_location(
        "migration_0001", PROJECT_ROOT / "alembic" / "versions" / "0001_create_schema.py"
    )
    migration = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(migration)

    migrated = _memory_engine()
    with migrated.begin() as connection:
        with Operations.context(MigrationContext.configure(connection)):
            migration.upgrade()

    from_models = _memory_engine()
    startup_checks.prepare_schema(engine=from_models, alembic_config_path=ALEMBIC_CONFIG_PATH)

    assert _schema(migrated) == _schema(from_models)
