"""Database migrations for the request workflow domain.

This module handles schema initialization by executing the schema.sql file.
All DDL is stored in schema.sql for maintainability.
"""

from pathlib import Path

import asyncpg
from loguru import logger

SCHEMA_PATH = Path(__file__).parent / "schema.sql"


def load_schema_sql() -> str:
    """Read the bundled schema.sql.

    Raises
    ------
    FileNotFoundError
        If schema.sql is missing from the installed package
    """
    if not SCHEMA_PATH.exists():
        raise FileNotFoundError(
            f"Schema file not found: {SCHEMA_PATH}\n"
            "Expected location: src/reqflow_api/workflow/db/schema.sql"
        )
    return SCHEMA_PATH.read_text(encoding="utf-8")


async def run_migrations(pool: asyncpg.Pool) -> None:
    """Run database migrations to create the reqflow schema and tables.

    All SQL uses CREATE ... IF NOT EXISTS, so it's safe to run multiple times.

    Parameters
    ----------
    pool : asyncpg.Pool
        Database connection pool

    Raises
    ------
    FileNotFoundError
        If schema.sql file not found
    Exception
        If migration fails
    """
    schema_sql = load_schema_sql()
    logger.info(f"Loaded schema from {SCHEMA_PATH}")

    async with pool.acquire() as conn:
        try:
            await conn.execute(schema_sql)
            logger.info("Workflow database migrations completed successfully")
        except Exception as e:
            logger.error(f"Migration failed: {e}")
            raise
