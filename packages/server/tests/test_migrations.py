"""
The initial Alembic migration must produce the indexes the models declare.
"""

from __future__ import annotations

import importlib.util
from pathlib import Path

import sqlalchemy as sa
from alembic.autogenerate import compare_metadata
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlmodel import SQLModel

import app.models  # noqa: F401

MIGRATION = Path(__file__).resolve().parents[1] / "alembic" / "versions" / "0001_initial_schema.py"


def _load_migration():
    spec = importlib.util.spec_from_file_location("initial_schema", MIGRATION)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_migration_indexes_match_models():
    """Autogenerate reports no index differences after the initial upgrade."""
    migration = _load_migration()
    engine = sa.create_engine("sqlite://")
    with engine.begin() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            migration.upgrade()
        diff = compare_metadata(MigrationContext.configure(conn), SQLModel.metadata)
    engine.dispose()

    index_ops = [
        (op[0], op[1].name)
        for op in diff
        if isinstance(op, tuple) and op[0] in ("add_index", "remove_index")
    ]
    assert index_ops == []


def test_every_table_created():
    """The migration creates every table the models define."""
    migration = _load_migration()
    engine = sa.create_engine("sqlite://")
    with engine.begin() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            migration.upgrade()
        tables = set(sa.inspect(conn).get_table_names())
    engine.dispose()

    assert set(SQLModel.metadata.tables) <= tables
