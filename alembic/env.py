from __future__ import annotations

from logging.config import fileConfig
from typing import Any

from alembic import context as _context  # type: ignore[attr-defined]
from sqlalchemy import engine_from_config, pool

# Expose name 'context' with flexible typing for attribute access used by Alembic
context: Any = _context

# This is the Alembic Config object, which provides
# access to the values within the .ini file in use.
config = context.config

if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name, disable_existing_loggers=False)


def _database_url() -> str:
    """URL set by the caller (demo setup/reset), else the demo app's configured database."""
    url = config.get_main_option("sqlalchemy.url")
    if url:
        return url
    from demo import create_app

    app = create_app()
    return app.config["SQLALCHEMY_DATABASE_URI"]


def run_migrations_offline() -> None:
    context.configure(
        url=_database_url(),
        target_metadata=None,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = _database_url()
    connectable = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        if connection.dialect.name == "sqlite":
            # tabelas são recriadas em batch; FKs verificadas só ao final
            connection.exec_driver_sql("PRAGMA foreign_keys=OFF")
            # PRAGMA abre transação implícita: encerrar antes do Alembic
            connection.commit()
        context.configure(connection=connection, target_metadata=None, render_as_batch=True)
        with context.begin_transaction():
            context.run_migrations()
        connection.commit()
        if connection.dialect.name == "sqlite":
            connection.exec_driver_sql("PRAGMA foreign_keys=ON")
            connection.commit()
    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
