from __future__ import annotations

from datetime import datetime
from uuid import UUID

import asyncpg

from availability_api.models import BlackoutDate

_COLUMNS = "id, user_id, start_date, end_date, reason, created_at"


def _to_blackout(row: asyncpg.Record) -> BlackoutDate:
    return BlackoutDate(**dict(row))


async def list_overlapping_blackouts(
    conn: asyncpg.Connection, user_id: str, range_start: datetime, range_end: datetime
) -> list[BlackoutDate]:
    """Blackouts whose [start_date, end_date] intersects [range_start, range_end], inclusive."""
    rows = await conn.fetch(
        f"SELECT {_COLUMNS} FROM blackout_dates "
        "WHERE user_id = $1 AND start_date <= $3 AND end_date >= $2 "
        "ORDER BY start_date",
        user_id,
        range_start,
        range_end,
    )
    return [_to_blackout(r) for r in rows]


async def list_blackouts(
    conn: asyncpg.Connection,
    user_id: str,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[BlackoutDate]:
    if start is not None and end is not None:
        return await list_overlapping_blackouts(conn, user_id, start, end)

    clauses = ["user_id = $1"]
    args: list = [user_id]
    if start is not None:
        args.append(start)
        clauses.append(f"end_date >= ${len(args)}")
    elif end is not None:
        args.append(end)
        clauses.append(f"start_date <= ${len(args)}")

    rows = await conn.fetch(
        f"SELECT {_COLUMNS} FROM blackout_dates WHERE {' AND '.join(clauses)} "
        "ORDER BY start_date",
        *args,
    )
    return [_to_blackout(r) for r in rows]


async def get_blackout(conn: asyncpg.Connection, blackout_id: UUID) -> BlackoutDate | None:
    row = await conn.fetchrow(
        f"SELECT {_COLUMNS} FROM blackout_dates WHERE id = $1", blackout_id,
    )
    return _to_blackout(row) if row else None


async def create_blackout(
    conn: asyncpg.Connection,
    user_id: str,
    start_date: datetime,
    end_date: datetime,
    reason: str | None = None,
) -> BlackoutDate:
    row = await conn.fetchrow(
        "INSERT INTO blackout_dates (user_id, start_date, end_date, reason) "
        f"VALUES ($1, $2, $3, $4) RETURNING {_COLUMNS}",
        user_id,
        start_date,
        end_date,
        reason,
    )
    return _to_blackout(row)


async def delete_blackout(conn: asyncpg.Connection, blackout_id: UUID) -> bool:
    result = await conn.execute("DELETE FROM blackout_dates WHERE id = $1", blackout_id)
    return result != "DELETE 0"
