from datetime import datetime, timezone

import pytest

from slot_booking.config import Settings
from slot_booking.gcal.repository import InMemoryCalendarRepository

# Wednesday
NOW = datetime(2026, 10, 14, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        calendar_backend="memory",
        timezone="UTC",
        business_start_hour=8,
        business_end_hour=18,
        slot_minutes=30,
        cancel_lookahead=10,
        summary_prefix="Probetraining",
    )


@pytest.fixture
def repository() -> InMemoryCalendarRepository:
    return InMemoryCalendarRepository()


def make_event(event_id: str, summary: str, start: str, end: str) -> dict:
    return {
        "id": event_id,
        "summary": summary,
        "start": {"dateTime": start},
        "end": {"dateTime": end},
    }
