from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone

import asyncpg

from availability_api.models import AvailabilityWindow, Booking, parse_hhmm
from availability_api.stores import blackouts as blackout_store
from availability_api.stores import bookings as booking_store
from availability_api.stores import windows as window_store

logger = logging.getLogger(__name__)

DEFAULT_SLOT_INTERVAL_MINUTES = 30
MAX_DURATION_MINUTES = 24 * 60


def day_of_week(target_date: date) -> int:
    """0=Sunday .. 6=Saturday."""
    return target_date.isoweekday() % 7


def day_bounds(target_date: date) -> tuple[datetime, datetime]:
    """Return the first and last instants of *target_date*, both inclusive."""
    start = datetime.combine(target_date, time.min, tzinfo=timezone.utc)
    end = datetime.combine(target_date, time.max, tzinfo=timezone.utc)
    return start, end.replace(microsecond=999000)


def to_iso(instant: datetime) -> str:
    return instant.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def compute_available_slots(
    windows: list[AvailabilityWindow],
    bookings: list[Booking],
    target_date: date,
    duration_minutes: int,
    now: datetime,
    interval_minutes: int = DEFAULT_SLOT_INTERVAL_MINUTES,
) -> list[dict]:
    """Return bookable slots on *target_date* across all *windows*.

    Each window is scanned from its start in ``interval_minutes`` ticks. A tick
    yields ``[cursor, cursor + duration]`` when it fits inside the window, does
    not start before *now* and does not overlap an active booking. Ticks are
    independent of the duration, so consecutive slots may overlap.

    Window ``HH:MM`` values are wall-clock times on *target_date* read as UTC;
    the window's ``timezone`` is not applied.

    Returns:
        list of ``{"start": <iso8601>, "end": <iso8601>}`` dicts sorted by start.
    """
    # windows never cross midnight, so nothing longer than a day can fit
    if duration_minutes > MAX_DURATION_MINUTES:
        return []

    slot_delta = timedelta(minutes=duration_minutes)
    tick = timedelta(minutes=interval_minutes)

    busy_intervals: list[tuple[datetime, datetime]] = [
        (b.start_time, b.end_time) for b in bookings
    ]

    found: list[tuple[datetime, datetime]] = []
    for window in windows:
        window_start = datetime.combine(target_date, parse_hhmm(window.start_time), tzinfo=timezone.utc)
        window_end = datetime.combine(target_date, parse_hhmm(window.end_time), tzinfo=timezone.utc)

        cursor = window_start
        try:
            while cursor + slot_delta <= window_end:
                slot_end = cursor + slot_delta
                if cursor >= now:
                    conflict = any(b_start < slot_end and b_end > cursor for b_start, b_end in busy_intervals)
                    if not conflict:
                        found.append((cursor, slot_end))
                cursor += tick
        except OverflowError:
            # ran past datetime.max; no later tick of this window can fit
            pass

    found.sort(key=lambda iv: iv[0])
    return [{"start": to_iso(start), "end": to_iso(end)} for start, end in found]


async def get_available_slots(
    conn: asyncpg.Connection,
    user_id: str,
    target_date: date,
    duration_minutes: int,
    now: datetime | None = None,
    interval_minutes: int = DEFAULT_SLOT_INTERVAL_MINUTES,
) -> list[dict]:
    """Load the user's windows, blackouts and bookings for *target_date* and compute slots.

    A day with no active windows or with any overlapping blackout yields no
    slots without reading further. Store errors propagate to the caller.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    windows = await window_store.list_active_windows(conn, user_id, day_of_week(target_date))
    if not windows:
        return []

    day_start, day_end = day_bounds(target_date)
    blackouts = await blackout_store.list_overlapping_blackouts(conn, user_id, day_start, day_end)
    if blackouts:
        logger.debug("User %s blacked out on %s", user_id, target_date)
        return []

    bookings = await booking_store.list_active_bookings_on_day(conn, user_id, day_start, day_end)

    return compute_available_slots(
        windows, bookings, target_date, duration_minutes, now, interval_minutes,
    )
