from logging.config import fileConfig
import importlib

from sqlalchemy import engine_from_config, pool
from alembic import context

from benchwatch.database import Base, url

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

for module in ('project', 'dimensions', 'report', 'metric', 'threshold', 'alert'):
    importlib.import_module(f'benchwatch.models.{module}')

target_metadata = Base.metadata


def run_migrations_offline():
    context.configure(url=url, target_metadata=target_metadata, literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    connectable = engine_from_config({"sqlalchemy.url": url}, prefix="sqlalchemy.", poolclass=pool.NullPool)
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
