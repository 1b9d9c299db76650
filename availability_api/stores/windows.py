from __future__ import annotations

from uuid import UUID

import asyncpg

from availability_api.models import AvailabilityWindow

_COLUMNS = (
    "id, user_id, day_of_week, start_time, end_time, timezone, is_active, "
    "created_at, updated_at"
)

# Columns a PATCH may touch, keyed by model field name.
_UPDATABLE = ("day_of_week", "start_time", "end_time", "timezone", "is_active")


def _to_window(row: asyncpg.Record) -> AvailabilityWindow:
    return AvailabilityWindow(**dict(row))


async def list_active_windows(
    conn: asyncpg.Connection, user_id: str, day_of_week: int
) -> list[AvailabilityWindow]:
    rows = await conn.fetch(
        f"SELECT {_COLUMNS} FROM availability_windows "
        "WHERE user_id = $1 AND day_of_week = $2 AND is_active = true "
        "ORDER BY start_time",
        user_id,
        day_of_week,
    )
    return [_to_window(r) for r in rows]


async def list_windows(
    conn: asyncpg.Connection,
    user_id: str,
    day_of_week: int | None = None,
    is_active: bool | None = None,
) -> list[AvailabilityWindow]:
    clauses = ["user_id = $1"]
    args: list = [user_id]
    if day_of_week is not None:
        args.append(day_of_week)
        clauses.append(f"day_of_week = ${len(args)}")
    if is_active is not None:
        args.append(is_active)
        clauses.append(f"is_active = ${len(args)}")

    rows = await conn.fetch(
        f"SELECT {_COLUMNS} FROM availability_windows "
        f"WHERE {' AND '.join(clauses)} "
        "ORDER BY day_of_week, start_time",
        *args,
    )
    return [_to_window(r) for r in rows]


async def get_window(conn: asyncpg.Connection, window_id: UUID) -> AvailabilityWindow | None:
    row = await conn.fetchrow(
        f"SELECT {_COLUMNS} FROM availability_windows WHERE id = $1",
        window_id,
    )
    return _to_window(row) if row else None


async def find_overlapping_windows(
    conn: asyncpg.Connection,
    user_id: str,
    day_of_week: int,
    start_time: str,
    end_time: str,
    exclude_id: UUID | None = None,
) -> list[AvailabilityWindow]:
    """Active windows on the same day whose HH:MM range touches [start_time, end_time].

    Zero-padded HH:MM strings order lexically, so the comparison runs on TEXT.
    Touching endpoints count as an overlap.
    """
    rows = await conn.fetch(
        f"SELECT {_COLUMNS} FROM availability_windows "
        "WHERE user_id = $1 AND day_of_week = $2 AND is_active = true "
        "AND start_time <= $4 AND end_time >= $3 "
        "AND ($5::uuid IS NULL OR id <> $5::uuid)",
        user_id,
        day_of_week,
        start_time,
        end_time,
        exclude_id,
    )
    return [_to_window(r) for r in rows]


async def create_window(
    conn: asyncpg.Connection,
    user_id: str,
    day_of_week: int,
    start_time: str,
    end_time: str,
    timezone: str = "UTC",
    is_active: bool = True,
) -> AvailabilityWindow:
    row = await conn.fetchrow(
        "INSERT INTO availability_windows "
        "(user_id, day_of_week, start_time, end_time, timezone, is_active) "
        "VALUES ($1, $2, $3, $4, $5, $6) "
        f"RETURNING {_COLUMNS}",
        user_id,
        day_of_week,
        start_time,
        end_time,
        timezone,
        is_active,
    )
    return _to_window(row)


async def update_window(
    conn: asyncpg.Connection, window_id: UUID, changes: dict
) -> AvailabilityWindow | None:
    sets: list[str] = []
    args: list = [window_id]
    for field in _UPDATABLE:
        if field in changes:
            args.append(changes[field])
            sets.append(f"{field} = ${len(args)}")
    sets.append("updated_at = now()")

    row = await conn.fetchrow(
        f"UPDATE availability_windows SET {', '.join(sets)} "
        f"WHERE id = $1 RETURNING {_COLUMNS}",
        *args,
    )
    return _to_window(row) if row else None


async def delete_window(conn: asyncpg.Connection, window_id: UUID) -> bool:
    result = await conn.execute("DELETE FROM availability_windows WHERE id = $1", window_id)
    return result != "DELETE 0"
