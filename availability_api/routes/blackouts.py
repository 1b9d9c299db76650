from __future__ import annotations

import logging
from uuid import UUID

import asyncpg
from fastapi import APIRouter, Depends, HTTPException, Query

from availability_api.auth import check_owner, get_caller_id, require_caller_id
from availability_api.database import get_connection
from availability_api.models import BlackoutCreate, to_utc_datetime
from availability_api.stores import blackouts as blackout_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/availability/blackouts")


def _parse_bound(value: str | None, field: str):
    if value is None:
        return None
    try:
        return to_utc_datetime(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {field} format")


@router.get("")
async def list_blackouts(
    user_id: str | None = Query(None, alias="userId"),
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    caller_id: str | None = Depends(get_caller_id),
    conn: asyncpg.Connection = Depends(get_connection),
):
    requested = user_id or caller_id
    if not requested:
        raise HTTPException(status_code=400, detail="userId is required")

    start = _parse_bound(start_date, "startDate")
    end = _parse_bound(end_date, "endDate")

    blackouts = await blackout_store.list_blackouts(conn, requested, start, end)
    return {"blackouts": blackouts}


@router.post("", status_code=201)
async def create_blackout(
    body: BlackoutCreate,
    caller_id: str = Depends(require_caller_id),
    conn: asyncpg.Connection = Depends(get_connection),
):
    if body.end_date < body.start_date:
        raise HTTPException(status_code=400, detail="endDate must be after startDate")

    overlaps = await blackout_store.list_overlapping_blackouts(
        conn, caller_id, body.start_date, body.end_date,
    )
    if overlaps:
        raise HTTPException(status_code=409, detail="Blackout date overlaps with existing blackout")

    blackout = await blackout_store.create_blackout(
        conn, caller_id, body.start_date, body.end_date, body.reason or None,
    )
    logger.info(
        "Blackout date created id=%s user=%s start=%s end=%s",
        blackout.id, caller_id, blackout.start_date.isoformat(), blackout.end_date.isoformat(),
    )
    return {"blackout": blackout}


@router.delete("/{blackout_id}")
async def delete_blackout(
    blackout_id: UUID,
    caller_id: str = Depends(require_caller_id),
    conn: asyncpg.Connection = Depends(get_connection),
):
    blackout = await blackout_store.get_blackout(conn, blackout_id)
    if not blackout:
        raise HTTPException(status_code=404, detail="Blackout date not found")
    check_owner(blackout.user_id, caller_id)

    await blackout_store.delete_blackout(conn, blackout_id)
    logger.info("Blackout date deleted id=%s user=%s", blackout_id, caller_id)
    return {"message": "Blackout date deleted successfully"}
