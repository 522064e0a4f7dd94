from logging.config import fileConfig
import logging
import os
from alembic import context
from flask import current_app

config = context.config

if config.config_file_name is not None and os.path.exists(config.config_file_name):
    fileConfig(config.config_file_name)
logger = logging.getLogger("alembic.env")

# Runs under `flask db ...`, so the app context and Flask-Migrate are already set up.
migrate_ext = current_app.extensions["migrate"]
target_metadata = migrate_ext.db.metadata

def get_database_url() -> str:
    """Gets the database URL from the Flask app config."""
    return current_app.config["SQLALCHEMY_DATABASE_URI"]

def run_migrations_offline() -> None:
    """Emit SQL to stdout without a live connection."""
    context.configure(
        url=get_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()

def run_migrations_online() -> None:
    """Run migrations against the app's engine."""
    connectable = migrate_ext.db.engine

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        logger.info("migrating %s", connection.engine.url.render_as_string(hide_password=True))

        with context.begin_transaction():
            context.run_migrations()

if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
