"""
Schema migrations.

The firms table evolves through the versioned Alembic scripts in
firmscout/migrations/versions. run_migrations() upgrades a database to head
and is called once from the application lifespan.
"""
import logging
from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config

from firmscout.core.config import get_settings

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / "migrations"


def get_alembic_config(database_url: Optional[str] = None) -> Config:
    """
    Build an Alembic config without an alembic.ini file.

    Args:
        database_url: Target database; defaults to settings.database_url
    """
    url = database_url or get_settings().database_url
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    # configparser interpolation treats '%' specially
    config.set_main_option("sqlalchemy.url", url.replace("%", "%%"))
    return config


def run_migrations(database_url: Optional[str] = None, revision: str = "head") -> None:
    """
    Upgrade the database schema to the given revision.

    Idempotent - revisions already applied are skipped by Alembic.
    """
    logger.info(f"Applying schema migrations up to '{revision}'")
    command.upgrade(get_alembic_config(database_url), revision)
    logger.info("Schema migrations complete")
