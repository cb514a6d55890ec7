"""
Alembic environment for the CareShare schema.

The database URL comes from the application settings (DATABASE_URL or .env),
so migrations and the API always target the same database.
"""
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from careshare.config.settings import get_settings
from careshare.database.config import Base
from careshare.database import models  # noqa: F401  registers tables on Base.metadata

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

database_url = config.get_main_option("sqlalchemy.url") or get_settings().database_url

MIGRATION_OPTIONS = dict(
    target_metadata=Base.metadata,
    compare_type=True,
    compare_server_default=True,
    # SQLite cannot ALTER most constraints in place
    render_as_batch=database_url.startswith("sqlite"),
)


def run_migrations_offline() -> None:
    context.configure(
        url=database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **MIGRATION_OPTIONS,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(database_url, poolclass=pool.NullPool)

    with engine.connect() as connection:
        context.configure(connection=connection, **MIGRATION_OPTIONS)

        with context.begin_transaction():
            context.run_migrations()

    engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
