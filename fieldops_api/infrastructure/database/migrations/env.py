"""Alembic environment for the fieldops schema."""
from alembic import context
from sqlalchemy import create_engine, pool

from fieldops_api.infrastructure.database.config import build_database_url


def run_migrations_offline() -> None:
    context.configure(url=build_database_url(), literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(build_database_url(), poolclass=pool.NullPool)
    with engine.connect() as connection:
        context.configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
