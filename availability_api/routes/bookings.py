from __future__ import annotations

import asyncpg
from fastapi import APIRouter, Depends, HTTPException, Query

from availability_api.auth import get_caller_id
from availability_api.database import get_connection
from availability_api.models import BookingStatus, to_utc_datetime
from availability_api.stores import bookings as booking_store

router = APIRouter()


@router.get("/api/bookings")
async def list_bookings(
    user_id: str | None = Query(None, alias="userId"),
    status: str | None = Query(None),
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    caller_id: str | None = Depends(get_caller_id),
    conn: asyncpg.Connection = Depends(get_connection),
):
    """List a coach's bookings. Bookings are written by the checkout flow, not here."""
    requested = user_id or caller_id
    if not requested:
        raise HTTPException(status_code=400, detail="userId is required")

    booking_status = None
    if status:
        try:
            booking_status = BookingStatus(status.upper())
        except ValueError:
            allowed = ", ".join(s.value for s in BookingStatus)
            raise HTTPException(status_code=400, detail=f"status must be one of: {allowed}")

    try:
        start = to_utc_datetime(start_date) if start_date else None
        end = to_utc_datetime(end_date) if end_date else None
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid startDate or endDate format")

    bookings = await booking_store.list_bookings(conn, requested, booking_status, start, end)
    return {"bookings": bookings}
