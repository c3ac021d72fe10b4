"""Alembic configuration.

Loads metadata from the shared Base, wires the database URL from env (prefers
ALEMBIC_DATABASE_URL, then the application settings), and runs migrations in
offline/online modes.
"""

import os
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context
import gallery_notifications.models  # noqa: F401 - registers every table on Base.metadata
from gallery_notifications.core.config import settings
from gallery_notifications.models.base import Base

config = context.config
db_url = os.getenv("ALEMBIC_DATABASE_URL") or settings.get_database_url(
    use_test=settings.environment.lower() == "test"
)
config.set_main_option("sqlalchemy.url", db_url.replace("%", "%%"))

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit SQL for the configured URL without connecting."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations against a live connection."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
