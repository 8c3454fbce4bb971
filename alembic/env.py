"""
Alembic environment configuration for the auth backend.

What this file does:
  1. Pulls the real database URL from our Settings class (reads .env)
     so credentials are never hardcoded here.
  2. Imports ALL SQLAlchemy models so Alembic knows every table.
     New model files must be imported in authapp/models/__init__.py.
  3. Sets compare_type=True so autogenerate notices column type changes.

Running migrations:
  Generate:  alembic revision --autogenerate -m "describe_change"
  Apply:     alembic upgrade head
  Rollback:  alembic downgrade -1
"""

import os
import sys
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from alembic import context

# Make `authapp` importable when Alembic runs from any directory
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from authapp.config import settings
from authapp.database import Base
import authapp.models  # noqa: F401 side-effect import, registers all ORM models

config = context.config

# Credentials live only in .env; alembic.ini carries no URL
config.set_main_option("sqlalchemy.url", settings.database_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """
    Generate SQL without connecting to the DB.
    Usage: alembic upgrade head --sql
    """
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """
    Connect and apply migrations. NullPool: a migration run opens and closes its
    own connection instead of borrowing from the app's pool.
    """
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
