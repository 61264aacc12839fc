"""Alembic environment for the reconciler schema.

The database URL is injected by MigrationManager; see
reconciler/database/migration_manager.py.
"""

from sqlalchemy import engine_from_config, pool
from alembic import context

from reconciler.database.base import ModelBase
from reconciler.database.types import EvmAddressType, EvmHashType, TokenAmountType
from reconciler.database import tables  # noqa: F401

config = context.config
target_metadata = ModelBase.metadata


def render_item(type_, obj, autogen_context):
    """Render custom column types with their import so autogenerated revisions run"""
    if type_ == 'type':
        for custom_type in (EvmAddressType, EvmHashType, TokenAmountType):
            if isinstance(obj, custom_type):
                name = custom_type.__name__
                autogen_context.imports.add(f"from reconciler.database.types import {name}")
                return f"{name}()"
    return False


def run_migrations_offline() -> None:
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_item=render_item,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_item=render_item,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
