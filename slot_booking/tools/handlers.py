from __future__ import annotations

import logging
from datetime import datetime

from ..config import Settings
from ..gcal.repository import CalendarRepository
from .phrases import parse_time_phrase
from .slots import (
    Slot,
    build_slot,
    business_day_window,
    conflicting_event,
    format_slot,
    is_weekday,
    within_business_hours,
)

logger = logging.getLogger(__name__)


class BookingError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidRequestError(BookingError):
    status_code = 400


class InvalidTimeError(InvalidRequestError):
    pass


class SlotUnavailableError(BookingError):
    status_code = 409


class EventNotFoundError(BookingError):
    status_code = 404


def _now(settings: Settings, now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(settings.tz)
    return now.astimezone(settings.tz)


def _require_name(name: str) -> str:
    if not name or not name.strip():
        raise InvalidRequestError("Name missing")
    return name.strip()


def resolve_slot(phrase: str, settings: Settings, now: datetime, invalid_message: str) -> Slot:
    parsed = parse_time_phrase(phrase, now)
    if parsed is None or not is_weekday(parsed):
        raise InvalidTimeError(invalid_message)
    slot = build_slot(parsed, settings.slot_minutes)
    if not within_business_hours(slot, settings.business_start_hour, settings.business_end_hour):
        raise InvalidTimeError("Outside business hours")
    # The slot holding a requested future time stays bookable after snapping down.
    if parsed < now:
        raise InvalidTimeError("Slot is in the past")
    return slot


def ensure_slot_free(
    repository: CalendarRepository,
    slot: Slot,
    settings: Settings,
    exclude_id: str | None = None,
) -> None:
    day_start, day_end = business_day_window(
        slot.start, settings.business_start_hour, settings.business_end_hour
    )
    events = repository.list_events(day_start, day_end)
    conflict = conflicting_event(events, slot, settings.tz, exclude_id=exclude_id)
    if conflict:
        logger.info(f"Slot {format_slot(slot)} taken by event {conflict.get('id')}")
        raise SlotUnavailableError("Slot not available")


def find_upcoming_event(
    repository: CalendarRepository,
    name: str,
    now: datetime,
    max_results: int | None = None,
) -> dict:
    needle = name.lower()
    for event in repository.list_events(now, max_results=max_results):
        if needle in (event.get("summary") or "").lower():
            return event
    raise EventNotFoundError("Event not found")


def event_times(slot: Slot) -> dict:
    return {
        "start": {"dateTime": slot.start.isoformat()},
        "end": {"dateTime": slot.end.isoformat()},
    }


def book(
    repository: CalendarRepository,
    settings: Settings,
    name: str,
    time_phrase: str,
    now: datetime | None = None,
) -> dict:
    now = _now(settings, now)
    name = _require_name(name)
    slot = resolve_slot(time_phrase, settings, now, "Invalid or weekend date")
    ensure_slot_free(repository, slot, settings)
    created = repository.insert(
        {"summary": f"{settings.summary_prefix} – {name}", **event_times(slot)}
    )
    logger.info(f"Booked {format_slot(slot)} for {name}")
    return created


def cancel(
    repository: CalendarRepository,
    settings: Settings,
    name: str,
    now: datetime | None = None,
) -> dict:
    now = _now(settings, now)
    name = _require_name(name)
    event = find_upcoming_event(repository, name, now, max_results=settings.cancel_lookahead)
    repository.delete(event["id"])
    logger.info(f"Canceled event {event['id']} ({event.get('summary')})")
    return event


def reschedule(
    repository: CalendarRepository,
    settings: Settings,
    name: str,
    new_time: str,
    now: datetime | None = None,
) -> dict:
    now = _now(settings, now)
    name = _require_name(name)
    slot = resolve_slot(new_time, settings, now, "Invalid date")
    event = find_upcoming_event(repository, name, now)
    ensure_slot_free(repository, slot, settings, exclude_id=event["id"])
    # Summary and any other fields are carried over.
    body = {key: value for key, value in event.items() if key not in ("start", "end")}
    updated = repository.update(event["id"], {**body, **event_times(slot)})
    logger.info(f"Rescheduled event {event['id']} to {format_slot(slot)}")
    return updated
