import logging
from typing import AsyncIterator

import asyncpg

logger = logging.getLogger(__name__)

_pool: asyncpg.Pool | None = None

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS availability_windows (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id TEXT NOT NULL,
    day_of_week SMALLINT NOT NULL CHECK (day_of_week BETWEEN 0 AND 6),
    start_time TEXT NOT NULL,
    end_time TEXT NOT NULL,
    timezone TEXT NOT NULL DEFAULT 'UTC',
    is_active BOOLEAN NOT NULL DEFAULT true,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
);
CREATE INDEX IF NOT EXISTS idx_aw_user_day ON availability_windows(user_id, day_of_week);

CREATE TABLE IF NOT EXISTS blackout_dates (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id TEXT NOT NULL,
    start_date TIMESTAMPTZ NOT NULL,
    end_date TIMESTAMPTZ NOT NULL,
    reason TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now()
);
CREATE INDEX IF NOT EXISTS idx_bd_user_range ON blackout_dates(user_id, start_date, end_date);

CREATE TABLE IF NOT EXISTS bookings (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id TEXT NOT NULL,
    customer_email TEXT NOT NULL,
    customer_name TEXT,
    start_time TIMESTAMPTZ NOT NULL,
    end_time TIMESTAMPTZ NOT NULL,
    duration INT NOT NULL,
    status TEXT NOT NULL DEFAULT 'PENDING',
    notes TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now()
);
CREATE INDEX IF NOT EXISTS idx_bk_user_start ON bookings(user_id, start_time);
-- The checkout write path relies on this to claim a slot at most once.
CREATE UNIQUE INDEX IF NOT EXISTS idx_bk_active_slot ON bookings(user_id, start_time)
    WHERE status IN ('PENDING', 'CONFIRMED');
"""


async def get_pool() -> asyncpg.Pool:
    global _pool
    if _pool is None:
        raise RuntimeError("Database pool not initialised - call init_pool() first")
    return _pool


async def init_pool(dsn: str, min_size: int = 0, max_size: int = 5, timeout: float = 30) -> None:
    global _pool
    _pool = await asyncpg.create_pool(
        dsn, min_size=min_size, max_size=max_size, timeout=timeout, command_timeout=timeout,
    )
    async with _pool.acquire(timeout=timeout) as conn:
        await conn.execute(SCHEMA_SQL)
    logger.info("Database pool ready (min_size=%s, max_size=%s)", min_size, max_size)


async def close_pool() -> None:
    global _pool
    if _pool:
        await _pool.close()
        _pool = None
        logger.info("Database pool closed")


async def get_connection() -> AsyncIterator[asyncpg.Connection]:
    """FastAPI dependency yielding a pooled connection for one request."""
    pool = await get_pool()
    async with pool.acquire() as conn:
        yield conn
