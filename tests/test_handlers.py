from datetime import timedelta

import pytest

from slot_booking.tools import handlers
from slot_booking.tools.handlers import (
    EventNotFoundError,
    InvalidRequestError,
    InvalidTimeError,
    SlotUnavailableError,
)

from conftest import NOW, make_event


def test_book_inserts_half_hour_event(repository, test_settings):
    created = handlers.book(repository, test_settings, " Anna ", "tomorrow at 10:20", now=NOW)

    assert created["summary"] == "Probetraining – Anna"
    assert created["start"] == {"dateTime": "2026-10-15T10:00:00+00:00"}
    assert created["end"] == {"dateTime": "2026-10-15T10:30:00+00:00"}
    assert list(repository.store) == [created["id"]]


def test_book_rejects_taken_slot(repository, test_settings):
    handlers.book(repository, test_settings, "Anna", "tomorrow at 10am", now=NOW)

    with pytest.raises(SlotUnavailableError, match="Slot not available"):
        handlers.book(repository, test_settings, "Ben", "tomorrow at 10:29", now=NOW)
    assert len(repository.store) == 1


def test_book_rejects_slot_overlapping_foreign_event(repository, test_settings):
    repository.insert(
        make_event("meeting", "Team sync", "2026-10-15T10:15:00+00:00", "2026-10-15T11:00:00+00:00")
    )

    with pytest.raises(SlotUnavailableError):
        handlers.book(repository, test_settings, "Anna", "tomorrow at 10:30", now=NOW)

    created = handlers.book(repository, test_settings, "Anna", "tomorrow at 11am", now=NOW)
    assert created["start"]["dateTime"] == "2026-10-15T11:00:00+00:00"


def test_book_ignores_all_day_events(repository, test_settings):
    repository.insert(
        {"id": "holiday", "summary": "Office party", "start": {"date": "2026-10-15"}, "end": {"date": "2026-10-16"}}
    )

    created = handlers.book(repository, test_settings, "Anna", "tomorrow at 9am", now=NOW)

    assert created["start"]["dateTime"] == "2026-10-15T09:00:00+00:00"


@pytest.mark.parametrize(
    "phrase, message",
    [
        ("saturday 10am", "Invalid or weekend date"),
        ("gibberish", "Invalid or weekend date"),
        ("tomorrow at 7pm", "Outside business hours"),
        ("tomorrow at 7:45", "Outside business hours"),
        ("today at 8am", "Slot is in the past"),
    ],
)
def test_book_rejects_invalid_times(repository, test_settings, phrase, message):
    with pytest.raises(InvalidTimeError, match=message):
        handlers.book(repository, test_settings, "Anna", phrase, now=NOW)
    assert repository.store == {}


def test_book_requires_name(repository, test_settings):
    with pytest.raises(InvalidRequestError, match="Name missing"):
        handlers.book(repository, test_settings, "  ", "tomorrow at 10am", now=NOW)


def test_cancel_deletes_first_upcoming_match(repository, test_settings):
    handlers.book(repository, test_settings, "Anna Schmidt", "tomorrow at 10am", now=NOW)
    later = handlers.book(repository, test_settings, "Anna Schmidt", "friday at 10am", now=NOW)

    canceled = handlers.cancel(repository, test_settings, "anna", now=NOW)

    assert canceled["start"]["dateTime"] == "2026-10-15T10:00:00+00:00"
    assert list(repository.store) == [later["id"]]


def test_cancel_skips_past_events(repository, test_settings):
    repository.insert(
        make_event("old", "Probetraining – Anna", "2026-10-13T10:00:00+00:00", "2026-10-13T10:30:00+00:00")
    )

    with pytest.raises(EventNotFoundError, match="Event not found"):
        handlers.cancel(repository, test_settings, "Anna", now=NOW)
    assert "old" in repository.store


def test_cancel_only_scans_lookahead_window(repository, test_settings):
    for index in range(10):
        start = NOW + timedelta(days=1, hours=index % 8, minutes=30 * (index // 8))
        repository.insert(
            make_event(
                f"e{index}",
                f"Probetraining – Person {index}",
                start.isoformat(),
                (start + timedelta(minutes=30)).isoformat(),
            )
        )
    handlers.book(repository, test_settings, "Zoe", "friday at 10am", now=NOW)

    with pytest.raises(EventNotFoundError):
        handlers.cancel(repository, test_settings, "Zoe", now=NOW)

    test_settings.cancel_lookahead = 11
    handlers.cancel(repository, test_settings, "Zoe", now=NOW)
    assert len(repository.store) == 10


def test_reschedule_moves_event_and_keeps_fields(repository, test_settings):
    created = handlers.book(repository, test_settings, "Anna", "tomorrow at 10am", now=NOW)
    repository.store[created["id"]]["description"] = "First visit"

    updated = handlers.reschedule(repository, test_settings, "Anna", "friday 2:30pm", now=NOW)

    assert updated["id"] == created["id"]
    assert updated["summary"] == "Probetraining – Anna"
    assert updated["description"] == "First visit"
    assert updated["start"] == {"dateTime": "2026-10-16T14:30:00+00:00"}
    assert updated["end"] == {"dateTime": "2026-10-16T15:00:00+00:00"}


def test_reschedule_ignores_the_event_being_moved(repository, test_settings):
    handlers.book(repository, test_settings, "Anna", "tomorrow at 10am", now=NOW)

    updated = handlers.reschedule(repository, test_settings, "Anna", "tomorrow at 10:10", now=NOW)

    assert updated["start"]["dateTime"] == "2026-10-15T10:00:00+00:00"


def test_reschedule_rejects_taken_slot(repository, test_settings):
    handlers.book(repository, test_settings, "Anna", "tomorrow at 10am", now=NOW)
    handlers.book(repository, test_settings, "Ben", "tomorrow at 11am", now=NOW)

    with pytest.raises(SlotUnavailableError):
        handlers.reschedule(repository, test_settings, "Anna", "tomorrow at 11am", now=NOW)


def test_reschedule_errors(repository, test_settings):
    with pytest.raises(InvalidTimeError, match="Invalid date"):
        handlers.reschedule(repository, test_settings, "Anna", "sunday at 10am", now=NOW)
    with pytest.raises(EventNotFoundError):
        handlers.reschedule(repository, test_settings, "Anna", "tomorrow at 10am", now=NOW)


def test_reschedule_missing_event_wins_over_taken_slot(repository, test_settings):
    handlers.book(repository, test_settings, "Ben", "tomorrow at 11am", now=NOW)

    with pytest.raises(EventNotFoundError):
        handlers.reschedule(repository, test_settings, "Anna", "tomorrow at 11am", now=NOW)


def test_book_uses_configured_timezone(repository, test_settings):
    test_settings.timezone = "Europe/Berlin"

    # 08:00 in Berlin is 06:00 UTC, before opening if read in UTC.
    created = handlers.book(repository, test_settings, "Anna", "tomorrow at 8am", now=NOW)

    assert created["start"] == {"dateTime": "2026-10-15T08:00:00+02:00"}
    assert created["end"] == {"dateTime": "2026-10-15T08:30:00+02:00"}
    with pytest.raises(InvalidTimeError, match="Outside business hours"):
        handlers.book(repository, test_settings, "Ben", "tomorrow at 6pm", now=NOW)


def test_book_accepts_current_slot_for_near_future_time(repository, test_settings):
    now = NOW.replace(minute=10)

    created = handlers.book(repository, test_settings, "Anna", "in 10 minutes", now=now)

    assert created["start"]["dateTime"] == "2026-10-14T09:00:00+00:00"
