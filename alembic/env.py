"""Alembic async env — autogenerate against the vendor, catalog and audit models."""

from __future__ import annotations

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy.ext.asyncio import create_async_engine

from app.core.config import settings
from app.db.base import Base

# Registers Vendor, Category, SubCategory, Bundle, AuditTrail on Base.metadata
import app.domain  # noqa: F401

config = context.config
if config.config_file_name:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

_configure_kwargs = {
    "target_metadata": target_metadata,
    "compare_type": True,
    # SQLite needs batch mode for ALTER; also carries the partial
    # trade-license index through table rebuilds.
    "render_as_batch": settings.database_url.startswith("sqlite"),
}


def run_migrations_offline() -> None:
    context.configure(
        url=settings.database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_kwargs,
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = create_async_engine(settings.database_url)
    async with engine.connect() as connection:
        await connection.run_sync(
            lambda sync_conn: context.configure(connection=sync_conn, **_configure_kwargs)
        )
        async with connection.begin():
            await connection.run_sync(lambda _: context.run_migrations())
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
