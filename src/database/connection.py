"""
Database connection and pool management
"""

import asyncpg
import logging

from config import settings

logger = logging.getLogger(__name__)


async def init_database() -> asyncpg.Pool:
    """Initialize database connection pool"""
    settings.validate_settings()

    db_pool = await asyncpg.create_pool(
        settings.DATABASE_URL,
        min_size=settings.DB_POOL_MIN_SIZE,
        max_size=settings.DB_POOL_MAX_SIZE,
        command_timeout=settings.DB_COMMAND_TIMEOUT,
        statement_cache_size=0  # pgbouncer compatibility
    )

    # Test connection
    async with db_pool.acquire() as conn:
        await conn.fetchval("SELECT 1")

    logger.info("Database initialized successfully")
    return db_pool


async def close_database(db_pool: asyncpg.Pool):
    """Close database connection pool"""
    if db_pool:
        await db_pool.close()
    logger.info("Database connections closed")
