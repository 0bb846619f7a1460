from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Protocol

from google.oauth2.service_account import Credentials
from googleapiclient.discovery import build

from ..config import Settings
from ..tools.slots import parse_rfc3339

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar"]


class CalendarRepository(Protocol):
    def list_events(
        self,
        time_min: datetime,
        time_max: datetime | None = None,
        max_results: int | None = None,
    ) -> list[dict]:
        ...

    def insert(self, event: dict) -> dict:
        ...

    def delete(self, event_id: str) -> None:
        ...

    def update(self, event_id: str, event: dict) -> dict:
        ...


@dataclass
class InMemoryCalendarRepository:
    store: dict[str, dict] = field(default_factory=dict)

    def list_events(
        self,
        time_min: datetime,
        time_max: datetime | None = None,
        max_results: int | None = None,
    ) -> list[dict]:
        events = []
        for event in self.store.values():
            start = _event_time(event["start"], time_min)
            end = _event_time(event["end"], time_min)
            if end <= time_min:
                continue
            if time_max is not None and start >= time_max:
                continue
            events.append((start, event))
        events.sort(key=lambda item: item[0])
        items = [event for _, event in events]
        if max_results is not None:
            items = items[:max_results]
        return items

    def insert(self, event: dict) -> dict:
        created = {**event, "id": event.get("id") or uuid.uuid4().hex}
        self.store[created["id"]] = created
        return created

    def delete(self, event_id: str) -> None:
        if event_id not in self.store:
            raise KeyError(f"Unknown event: {event_id}")
        del self.store[event_id]

    def update(self, event_id: str, event: dict) -> dict:
        if event_id not in self.store:
            raise KeyError(f"Unknown event: {event_id}")
        updated = {**event, "id": event_id}
        self.store[event_id] = updated
        return updated


def _event_time(value: dict, reference: datetime) -> datetime:
    if "dateTime" in value:
        return parse_rfc3339(value["dateTime"])
    return datetime.fromisoformat(value["date"]).replace(tzinfo=reference.tzinfo)


class GoogleCalendarRepository:
    def __init__(self, service, calendar_id: str = "primary") -> None:
        self.service = service
        self.calendar_id = calendar_id

    def list_events(
        self,
        time_min: datetime,
        time_max: datetime | None = None,
        max_results: int | None = None,
    ) -> list[dict]:
        params = {
            "calendarId": self.calendar_id,
            "timeMin": time_min.isoformat(),
            "singleEvents": True,
            "orderBy": "startTime",
        }
        if time_max is not None:
            params["timeMax"] = time_max.isoformat()
        if max_results is not None:
            params["maxResults"] = max_results
        response = self.service.events().list(**params).execute()
        return response.get("items", [])

    def insert(self, event: dict) -> dict:
        return self.service.events().insert(calendarId=self.calendar_id, body=event).execute()

    def delete(self, event_id: str) -> None:
        self.service.events().delete(calendarId=self.calendar_id, eventId=event_id).execute()

    def update(self, event_id: str, event: dict) -> dict:
        return (
            self.service.events()
            .update(calendarId=self.calendar_id, eventId=event_id, body=event)
            .execute()
        )


def load_credentials(settings: Settings) -> Credentials:
    if settings.google_credentials:
        try:
            info = json.loads(settings.google_credentials)
        except json.JSONDecodeError as exc:
            raise ValueError("GOOGLE_CREDENTIALS is not valid JSON") from exc
        return Credentials.from_service_account_info(info, scopes=SCOPES)
    if not Path(settings.service_account_file).exists():
        raise ValueError(
            "Missing Google credentials (GOOGLE_CREDENTIALS/GOOGLE_SERVICE_ACCOUNT_FILE)."
        )
    return Credentials.from_service_account_file(settings.service_account_file, scopes=SCOPES)


def build_calendar_service(settings: Settings):
    credentials = load_credentials(settings)
    return build("calendar", "v3", credentials=credentials, cache_discovery=False)


def build_repository(settings: Settings) -> CalendarRepository:
    if settings.calendar_backend == "memory":
        logger.info("Using in-memory calendar")
        return InMemoryCalendarRepository()
    if settings.calendar_backend != "google":
        raise ValueError(f"Unknown calendar backend: {settings.calendar_backend}")
    service = build_calendar_service(settings)
    logger.info(f"Google Calendar service created for calendar {settings.calendar_id}")
    return GoogleCalendarRepository(service, settings.calendar_id)
