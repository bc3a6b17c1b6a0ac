import logging

import asyncpg  # type: ignore[import-untyped]

from app.core.config import Settings

logger = logging.getLogger(__name__)


async def create_db_pool(settings: Settings) -> asyncpg.Pool:
    """Create the process-wide pool shared by every dashboard query."""
    # Without an explicit mode the ``sslmode`` of the URL applies.
    ssl_mode = settings.database_ssl_mode or None
    pool = await asyncpg.create_pool(
        settings.database_url,
        min_size=settings.database_pool_min_size,
        max_size=settings.database_pool_max_size,
        ssl=ssl_mode,
    )
    logger.info(
        "db_pool_created min_size=%s max_size=%s ssl_mode=%s",
        settings.database_pool_min_size,
        settings.database_pool_max_size,
        ssl_mode or "from_url",
    )
    return pool


async def close_db_pool(pool: asyncpg.Pool) -> None:
    await pool.close()
    logger.info("db_pool_closed")
