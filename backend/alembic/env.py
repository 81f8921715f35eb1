"""
Alembic environment configuration
"""
import sys
from logging.config import fileConfig
from pathlib import Path
from urllib.parse import urlparse, urlunparse

# Make the depin package importable when running from backend/
BASE_DIR = Path(__file__).resolve().parent.parent
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from alembic import context
from sqlalchemy import engine_from_config, pool

from depin.core.config import get_settings
from depin.core.database import Base
from depin.models import *  # noqa: F401, F403 - Import all models

config = context.config


def _mask_database_url(url: str) -> str:
    """Mask password in a database URL for safe logging."""
    p = urlparse(url)
    if not p.password:
        return url
    netloc = f"{p.username}:***@{p.hostname or ''}"
    if p.port:
        netloc = f"{netloc}:{p.port}"
    return urlunparse((p.scheme, netloc, p.path or "", p.params or "", p.query or "", p.fragment or ""))


settings = get_settings()
config.set_main_option("sqlalchemy.url", settings.database_url)
sys.stderr.write(f"Alembic will use database URL: {_mask_database_url(settings.database_url)}\n")

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection, target_metadata=target_metadata
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
