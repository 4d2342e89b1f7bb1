#!/usr/bin/env python3
"""
Drop and recreate every money request table, optionally reseeding demo data.

WARNING: This deletes all requests, approval chains, templates and fund balances!
"""

import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Load environment variables from .env file if it exists
from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), '.env'))

from sqlalchemy import text
from money_requests.database import engine, Base
import money_requests.models  # noqa: F401  registers every table on Base.metadata
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _masked_url(db_url: str) -> str:
    if "@" not in db_url:
        return db_url
    scheme, _, rest = db_url.partition("://")
    return f"{scheme}://***@{rest.split('@', 1)[1]}"


def reset_database(reseed: bool = False):
    """Drop all tables, recreate them and clear the Alembic revision"""
    tables = [table.name for table in Base.metadata.sorted_tables]

    logger.warning("=" * 60)
    logger.warning("This will DELETE every money request, approval step and template")
    logger.warning(f"Database: {_masked_url(engine.url.render_as_string(hide_password=False))}")
    logger.warning(f"Tables: {', '.join(tables)}")
    logger.warning("=" * 60)

    response = input("Type 'reset' to continue: ")
    if response.strip().lower() != "reset":
        logger.info("Aborted.")
        return

    try:
        Base.metadata.drop_all(bind=engine)
        logger.info(f"Dropped {len(tables)} tables")
        Base.metadata.create_all(bind=engine)
        logger.info(f"Recreated {len(tables)} tables")

        with engine.connect() as conn:
            conn.execute(text("DROP TABLE IF EXISTS alembic_version"))
            conn.commit()
        logger.info("Cleared alembic_version; run 'alembic stamp head' to mark the schema current")
    except Exception as e:
        logger.error(f"Error resetting database: {e}", exc_info=True)
        raise

    if reseed:
        from seed_data import main as seed
        seed()


if __name__ == "__main__":
    reset_database(reseed="--seed" in sys.argv[1:])
