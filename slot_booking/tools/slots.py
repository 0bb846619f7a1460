from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from typing import Iterable

SLOT_MINUTES = 30


@dataclass(frozen=True)
class Slot:
    start: datetime
    end: datetime

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return self.start < end and start < self.end


def snap_to_slot(value: datetime) -> datetime:
    minute = 0 if value.minute < 30 else 30
    return value.replace(minute=minute, second=0, microsecond=0)


def slot_end(start: datetime, slot_minutes: int = SLOT_MINUTES) -> datetime:
    return start + timedelta(minutes=slot_minutes)


def build_slot(value: datetime, slot_minutes: int = SLOT_MINUTES) -> Slot:
    start = snap_to_slot(value)
    return Slot(start=start, end=slot_end(start, slot_minutes))


def is_weekday(value: datetime) -> bool:
    return value.weekday() < 5


def business_day_window(value: datetime, start_hour: int, end_hour: int) -> tuple[datetime, datetime]:
    day_start = value.replace(hour=start_hour, minute=0, second=0, microsecond=0)
    day_end = value.replace(hour=end_hour, minute=0, second=0, microsecond=0)
    return day_start, day_end


def within_business_hours(slot: Slot, start_hour: int, end_hour: int) -> bool:
    day_start, day_end = business_day_window(slot.start, start_hour, end_hour)
    return day_start <= slot.start and slot.end <= day_end


def parse_rfc3339(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def event_bounds(event: dict, tz: tzinfo) -> tuple[datetime, datetime] | None:
    """Return the (start, end) of a timed event, or None for all-day events."""
    start_value = event.get("start", {}).get("dateTime")
    end_value = event.get("end", {}).get("dateTime")
    if not start_value or not end_value:
        return None
    start = parse_rfc3339(start_value)
    end = parse_rfc3339(end_value)
    if start.tzinfo is None:
        start = start.replace(tzinfo=tz)
    if end.tzinfo is None:
        end = end.replace(tzinfo=tz)
    return start, end


def conflicting_event(
    events: Iterable[dict],
    slot: Slot,
    tz: tzinfo,
    exclude_id: str | None = None,
) -> dict | None:
    for event in events:
        if exclude_id and event.get("id") == exclude_id:
            continue
        bounds = event_bounds(event, tz)
        if bounds and slot.overlaps(*bounds):
            return event
    return None


def format_slot(slot: Slot) -> str:
    return slot.start.strftime("%a %b %d at %-I:%M %p")
