from __future__ import annotations

import re
from datetime import date, datetime, time, timezone
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

HHMM_RE = re.compile(r"^([01][0-9]|2[0-3]):[0-5][0-9]$")


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


# Statuses that hold a slot.
ACTIVE_BOOKING_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)


class _Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AvailabilityWindow(_Record):
    id: UUID
    user_id: str
    day_of_week: int
    start_time: str
    end_time: str
    timezone: str = "UTC"
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BlackoutDate(_Record):
    id: UUID
    user_id: str
    start_date: datetime
    end_date: datetime
    reason: str | None = None
    created_at: datetime | None = None


class Booking(_Record):
    id: UUID
    user_id: str
    customer_email: str
    customer_name: str | None = None
    start_time: datetime
    end_time: datetime
    duration: int
    status: BookingStatus
    notes: str | None = None
    created_at: datetime | None = None


def parse_hhmm(value: str) -> time:
    """Parse a zero-padded 24-hour ``HH:MM`` string."""
    if not isinstance(value, str) or not HHMM_RE.match(value):
        raise ValueError("Invalid time format. Use HH:MM (24-hour format)")
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


def to_utc_datetime(value: str | date | datetime) -> datetime:
    """Coerce a date or datetime input into an aware UTC datetime.

    Date-only values mean midnight UTC. Naive datetimes are taken as UTC.
    """
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            raise ValueError("Invalid date format") from None
    elif not isinstance(value, date):
        raise ValueError("Invalid date format")
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class WindowFields(_Record):
    @field_validator("day_of_week", check_fields=False)
    @classmethod
    def _check_day(cls, v: int | None) -> int | None:
        if v is not None and not 0 <= v <= 6:
            raise ValueError("dayOfWeek must be between 0 (Sunday) and 6 (Saturday)")
        return v

    @field_validator("start_time", "end_time", check_fields=False)
    @classmethod
    def _check_time(cls, v: str | None) -> str | None:
        if v is not None:
            parse_hhmm(v)
        return v


class WindowCreate(WindowFields):
    day_of_week: int
    start_time: str
    end_time: str
    timezone: str = "UTC"
    is_active: bool = True


class WindowUpdate(WindowFields):
    day_of_week: int | None = None
    start_time: str | None = None
    end_time: str | None = None
    timezone: str | None = None
    is_active: bool | None = None


class BlackoutCreate(_Record):
    start_date: datetime
    end_date: datetime
    reason: str | None = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _coerce_date(cls, v):
        return to_utc_datetime(v)
