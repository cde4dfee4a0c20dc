# migrations/env.py
"""Alembic environment for tcms_api; the database URL always comes from the Flask app."""
from __future__ import annotations
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from tcms_api.wsgi import app as flask_app
from tcms_api.extensions import db, is_sqlite

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

db_uri = flask_app.config["SQLALCHEMY_DATABASE_URI"]
config.set_main_option("sqlalchemy.url", db_uri.replace("%", "%%"))

CONFIGURE_KW = dict(
    target_metadata=db.metadata,
    compare_type=True,
    render_as_batch=is_sqlite(db_uri),  # sqlite needs table copies for ALTER
)


def run_migrations_offline() -> None:
    context.configure(url=db_uri, literal_binds=True, **CONFIGURE_KW)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with engine.connect() as connection, flask_app.app_context():
        context.configure(connection=connection, **CONFIGURE_KW)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
