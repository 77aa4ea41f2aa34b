"""
Workflow Domain Database Connection Pool

Manages the asyncpg connection pool for the request workflow database.
Automatically runs migrations on initialization.

Schema Evolution:
-----------------
When adding/removing/renaming tables in schema.sql:
1. Update the schema.sql file with new DDL
2. Update DomainDBPool.EXPECTED_TABLES constant with new table names
"""

from typing import Optional

import asyncpg
from loguru import logger

from reqflow_api.workflow.db.migrations import run_migrations


class DomainDBPool:
    """Workflow domain database connection pool manager."""

    SCHEMA = "reqflow"

    # Update this set when schema evolves (add/remove/rename tables)
    EXPECTED_TABLES = {
        "requests",
        "request_history",
        "audit_trail",
        "notifications",
    }

    def __init__(self, connection_string: str, min_size: int = 2, max_size: int = 10):
        """
        Initialize domain DB pool.

        Args:
            connection_string: PostgreSQL connection string for the workflow database
            min_size: Minimum pooled connections
            max_size: Maximum pooled connections
        """
        self.connection_string = connection_string
        self.min_size = min_size
        self.max_size = max_size
        self.pool: Optional[asyncpg.Pool] = None
        self._pool_initialized = False

    async def initialize(self) -> None:
        """
        Initialize connection pool and run migrations.
        """
        if self._pool_initialized and self.pool is not None:
            logger.debug("Domain DB pool already initialized")
            return

        try:
            logger.info("Initializing workflow domain database pool")

            self.pool = await asyncpg.create_pool(
                self.connection_string,
                min_size=self.min_size,
                max_size=self.max_size,
                command_timeout=60,  # Query timeout (60 seconds)
                timeout=15,  # Connection timeout (15 seconds)
            )

            # Validate pool connection
            async with self.pool.acquire() as conn:
                result = await conn.fetchval("SELECT 1")
                if result != 1:
                    raise RuntimeError("Pool validation query failed")

            logger.info("Domain DB pool validated")

            await run_migrations(self.pool)
            await self._verify_tables()

            self._pool_initialized = True
            logger.success("Workflow domain database initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize domain DB pool: {e}", exc_info=True)
            if self.pool:
                await self.pool.close()
                self.pool = None
            raise

    async def _verify_tables(self) -> None:
        """Check that every expected table exists after migrations."""
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT table_name
                FROM information_schema.tables
                WHERE table_schema = $1
                ORDER BY table_name
                """,
                self.SCHEMA,
            )

        existing_tables = {row["table_name"] for row in rows}
        missing_tables = self.EXPECTED_TABLES - existing_tables
        if missing_tables:
            logger.error(
                f"Reqflow schema is missing {len(missing_tables)} table(s): {missing_tables}. "
                f"Existing: {sorted(existing_tables)}"
            )
            raise RuntimeError(f"Incomplete database schema: missing tables {missing_tables}")

        logger.info(f"All {len(self.EXPECTED_TABLES)} workflow tables verified")

    async def close(self) -> None:
        """Close the connection pool gracefully."""
        if self.pool:
            logger.info("Closing workflow domain database pool")
            await self.pool.close()
            self.pool = None
            self._pool_initialized = False
            logger.info("Domain DB pool closed")

    def acquire(self):
        """
        Acquire a database connection from the pool.

        Returns async context manager that yields a connection.

        Usage:
            async with pool.acquire() as conn:
                result = await conn.fetchrow("SELECT * FROM ...")
        """
        if not self.pool:
            raise RuntimeError("Domain DB pool not initialized - call initialize() first")
        return self.pool.acquire()

    async def health_check(self) -> bool:
        """
        Check if database connection is healthy.

        Returns:
            True if connection is healthy, False otherwise
        """
        try:
            if not self.pool:
                return False

            async with self.pool.acquire() as conn:
                result = await conn.fetchval("SELECT 1")
                return result == 1
        except Exception as e:
            logger.error(f"Domain DB health check failed: {e}")
            return False
