"""
Migration utilities for the application

Alembic commands run env.py, which starts its own event loop, so the
upgrade and revision helpers must not be called from inside a running loop.
"""
from pathlib import Path
from typing import Optional
from alembic.config import Config
from alembic import command
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool
import logging

from social_network.config import settings

logger = logging.getLogger(__name__)

ALEMBIC_INI_PATH = Path(__file__).parent.parent.parent / "alembic.ini"

def get_alembic_config(db_url: Optional[str] = None) -> Config:
    """Get Alembic configuration"""
    config = Config(str(ALEMBIC_INI_PATH))
    config.set_main_option("script_location", str(ALEMBIC_INI_PATH.parent / "alembic"))
    config.set_main_option("sqlalchemy.url", db_url or settings.database_url)
    return config

def run_migrations(db_url: Optional[str] = None, revision: str = "head") -> None:
    """Upgrade the database to ``revision``"""
    config = get_alembic_config(db_url)
    command.upgrade(config, revision)
    logger.info(f"Database upgraded to {revision}")

def create_migration(message: str, autogenerate: bool = True) -> None:
    """Create a new migration"""
    config = get_alembic_config()
    command.revision(config, message=message, autogenerate=autogenerate)
    logger.info(f"Created migration: {message}")

def downgrade_migration(revision: str) -> None:
    """Downgrade to a specific revision"""
    config = get_alembic_config()
    command.downgrade(config, revision)
    logger.info(f"Downgraded to revision: {revision}")

def show_migrations() -> None:
    """Show migration history"""
    command.history(get_alembic_config())

async def check_migration_status(db_url: Optional[str] = None) -> bool:
    """Check if database is up to date"""
    config = get_alembic_config(db_url)
    script = ScriptDirectory.from_config(config)

    engine = create_async_engine(config.get_main_option("sqlalchemy.url"), poolclass=NullPool)
    try:
        async with engine.connect() as connection:
            current_rev = await connection.run_sync(
                lambda sync_conn: MigrationContext.configure(sync_conn).get_current_revision()
            )
    finally:
        await engine.dispose()

    head_rev = script.get_current_head()
    logger.info(f"Current revision: {current_rev}, head: {head_rev}")
    return current_rev == head_rev
