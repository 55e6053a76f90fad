#!/usr/bin/env python3
"""
Run database migrations to head with logging.
This can be called directly or as part of the container startup.
"""
import sys
import logging
from pathlib import Path

from alembic.config import Config
from alembic import command
from sqlalchemy.exc import SQLAlchemyError

from timeclock.core.config import settings

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def run_migrations() -> int:
    """Run Alembic migrations to head revision."""
    try:
        logger.info("Starting database migrations...")
        logger.info(f"Database URL: {settings.DATABASE_URL[:20]}...")  # Log partial URL only

        alembic_cfg = Config(str(Path(__file__).parent / "alembic.ini"))
        command.upgrade(alembic_cfg, "head")

        logger.info("Migrations completed successfully")
        return 0
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Migration failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(run_migrations())
