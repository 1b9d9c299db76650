from __future__ import annotations

from datetime import datetime

import asyncpg

from availability_api.models import ACTIVE_BOOKING_STATUSES, Booking, BookingStatus

_COLUMNS = (
    "id, user_id, customer_email, customer_name, start_time, end_time, duration, "
    "status, notes, created_at"
)


def _to_booking(row: asyncpg.Record) -> Booking:
    return Booking(**dict(row))


async def list_active_bookings_on_day(
    conn: asyncpg.Connection, user_id: str, day_start: datetime, day_end: datetime
) -> list[Booking]:
    """PENDING/CONFIRMED bookings that start within [day_start, day_end]."""
    rows = await conn.fetch(
        f"SELECT {_COLUMNS} FROM bookings "
        "WHERE user_id = $1 AND start_time >= $2 AND start_time <= $3 "
        "AND status = ANY($4::text[]) "
        "ORDER BY start_time",
        user_id,
        day_start,
        day_end,
        [s.value for s in ACTIVE_BOOKING_STATUSES],
    )
    return [_to_booking(r) for r in rows]


async def list_bookings(
    conn: asyncpg.Connection,
    user_id: str,
    status: BookingStatus | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[Booking]:
    clauses = ["user_id = $1"]
    args: list = [user_id]
    if status is not None:
        args.append(status.value)
        clauses.append(f"status = ${len(args)}")
    if start is not None:
        args.append(start)
        clauses.append(f"start_time >= ${len(args)}")
    if end is not None:
        args.append(end)
        clauses.append(f"start_time <= ${len(args)}")

    rows = await conn.fetch(
        f"SELECT {_COLUMNS} FROM bookings WHERE {' AND '.join(clauses)} "
        "ORDER BY start_time",
        *args,
    )
    return [_to_booking(r) for r in rows]
