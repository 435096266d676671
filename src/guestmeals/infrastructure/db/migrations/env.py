from __future__ import annotations

import os

from alembic import context
from sqlalchemy.engine import Connection

from guestmeals.infrastructure.db.models import billing, order, subscription, time_slot  # noqa: F401
from guestmeals.infrastructure.db.models.base import Base
from guestmeals.infrastructure.db.session import get_engine

config = context.config
target_metadata = Base.metadata


def _run(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        # SQLite cannot ALTER most columns in place.
        render_as_batch=connection.dialect.name == "sqlite",
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_offline() -> None:
    context.configure(
        url=config.get_main_option("sqlalchemy.url") or os.environ["DATABASE_URL"],
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    # migrate_schema() hands over a connection inside its own transaction.
    connection = config.attributes.get("connection")
    if connection is not None:
        _run(connection)
        return
    with get_engine().connect() as fresh_connection:
        _run(fresh_connection)


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
