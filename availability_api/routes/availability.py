from __future__ import annotations

import re
from datetime import date

import asyncpg
from fastapi import APIRouter, Depends, HTTPException, Query

from availability_api.config import settings
from availability_api.database import get_connection
from availability_api.services.calendar import MAX_DURATION_MINUTES, get_available_slots

router = APIRouter()

_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)
_DIGITS_RE = re.compile(r"\d+", re.ASCII)


@router.get("/api/availability/slots")
async def availability_slots(
    user_id: str | None = Query(None, alias="userId"),
    date_str: str | None = Query(None, alias="date"),
    duration_str: str | None = Query(None, alias="duration"),
    conn: asyncpg.Connection = Depends(get_connection),
):
    if not user_id:
        raise HTTPException(status_code=400, detail="userId is required")
    if not date_str:
        raise HTTPException(status_code=400, detail="date is required")
    if not duration_str:
        raise HTTPException(status_code=400, detail="duration is required")

    if not _DATE_RE.fullmatch(date_str):
        raise HTTPException(status_code=400, detail="Invalid date format, use YYYY-MM-DD")
    try:
        target_date = date.fromisoformat(date_str)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date format, use YYYY-MM-DD")

    duration = int(duration_str) if _DIGITS_RE.fullmatch(duration_str) else 0
    if duration <= 0:
        raise HTTPException(status_code=400, detail="duration must be a positive number of minutes")
    if duration > MAX_DURATION_MINUTES:
        raise HTTPException(
            status_code=400, detail=f"duration must be at most {MAX_DURATION_MINUTES} minutes",
        )

    slots = await get_available_slots(
        conn, user_id, target_date, duration,
        interval_minutes=settings.slot_interval_minutes,
    )
    return {"slots": slots}
