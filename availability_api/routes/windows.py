from __future__ import annotations

import logging
from uuid import UUID

import asyncpg
from fastapi import APIRouter, Depends, HTTPException, Query

from availability_api.auth import check_owner, get_caller_id, require_caller_id
from availability_api.database import get_connection
from availability_api.models import AvailabilityWindow, WindowCreate, WindowUpdate, parse_hhmm
from availability_api.stores import windows as window_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/availability/windows")


def _check_order(start_time: str, end_time: str) -> None:
    if parse_hhmm(end_time) <= parse_hhmm(start_time):
        raise HTTPException(status_code=400, detail="endTime must be after startTime")


async def _load_owned(
    conn: asyncpg.Connection, window_id: UUID, caller_id: str | None
) -> AvailabilityWindow:
    window = await window_store.get_window(conn, window_id)
    if not window:
        raise HTTPException(status_code=404, detail="Availability window not found")
    check_owner(window.user_id, caller_id)
    return window


@router.get("")
async def list_windows(
    user_id: str | None = Query(None, alias="userId"),
    day_of_week: int | None = Query(None, alias="dayOfWeek"),
    is_active: bool | None = Query(None, alias="isActive"),
    caller_id: str | None = Depends(get_caller_id),
    conn: asyncpg.Connection = Depends(get_connection),
):
    requested = user_id or caller_id
    if not requested:
        raise HTTPException(status_code=400, detail="userId is required")

    windows = await window_store.list_windows(conn, requested, day_of_week, is_active)
    return {"windows": windows}


@router.post("", status_code=201)
async def create_window(
    body: WindowCreate,
    caller_id: str = Depends(require_caller_id),
    conn: asyncpg.Connection = Depends(get_connection),
):
    _check_order(body.start_time, body.end_time)

    overlaps = await window_store.find_overlapping_windows(
        conn, caller_id, body.day_of_week, body.start_time, body.end_time,
    )
    if overlaps:
        raise HTTPException(
            status_code=409,
            detail="Availability window overlaps with existing window for this day",
        )

    window = await window_store.create_window(
        conn,
        caller_id,
        body.day_of_week,
        body.start_time,
        body.end_time,
        body.timezone,
        body.is_active,
    )
    logger.info("Availability window created id=%s user=%s day=%s", window.id, caller_id, window.day_of_week)
    return {"window": window}


@router.get("/{window_id}")
async def get_window(
    window_id: UUID,
    caller_id: str | None = Depends(get_caller_id),
    conn: asyncpg.Connection = Depends(get_connection),
):
    window = await _load_owned(conn, window_id, caller_id)
    return {"window": window}


@router.patch("/{window_id}")
async def update_window(
    window_id: UUID,
    body: WindowUpdate,
    caller_id: str = Depends(require_caller_id),
    conn: asyncpg.Connection = Depends(get_connection),
):
    existing = await _load_owned(conn, window_id, caller_id)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)

    start_time = changes.get("start_time", existing.start_time)
    end_time = changes.get("end_time", existing.end_time)
    if "start_time" in changes or "end_time" in changes:
        _check_order(start_time, end_time)

    # any change that can move or reactivate the window must keep active windows disjoint
    reshaped = changes.keys() & {"start_time", "end_time", "day_of_week", "is_active"}
    if reshaped and changes.get("is_active", existing.is_active):
        overlaps = await window_store.find_overlapping_windows(
            conn,
            caller_id,
            changes.get("day_of_week", existing.day_of_week),
            start_time,
            end_time,
            exclude_id=window_id,
        )
        if overlaps:
            raise HTTPException(
                status_code=409, detail="Availability window overlaps with existing window",
            )

    window = await window_store.update_window(conn, window_id, changes)
    if not window:
        raise HTTPException(status_code=404, detail="Availability window not found")

    logger.info("Availability window updated id=%s user=%s", window_id, caller_id)
    return {"window": window}


@router.delete("/{window_id}")
async def delete_window(
    window_id: UUID,
    caller_id: str = Depends(require_caller_id),
    conn: asyncpg.Connection = Depends(get_connection),
):
    await _load_owned(conn, window_id, caller_id)
    await window_store.delete_window(conn, window_id)
    logger.info("Availability window deleted id=%s user=%s", window_id, caller_id)
    return {"message": "Availability window deleted successfully"}
