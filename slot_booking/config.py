import os
from typing import Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel


class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "development")
    port: int = int(os.getenv("PORT", "3000"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    calendar_backend: str = os.getenv("CALENDAR_BACKEND", "google").lower()
    calendar_id: str = os.getenv("GOOGLE_CALENDAR_ID", "primary")
    google_credentials: Optional[str] = os.getenv("GOOGLE_CREDENTIALS")
    service_account_file: str = os.getenv("GOOGLE_SERVICE_ACCOUNT_FILE", "g-service.json")
    timezone: str = os.getenv("TIMEZONE", "UTC")
    business_start_hour: int = int(os.getenv("BUSINESS_HOURS_START", "8"))
    business_end_hour: int = int(os.getenv("BUSINESS_HOURS_END", "18"))
    slot_minutes: int = int(os.getenv("SLOT_MINUTES", "30"))
    cancel_lookahead: int = int(os.getenv("CANCEL_LOOKAHEAD", "10"))
    summary_prefix: str = os.getenv("EVENT_SUMMARY_PREFIX", "Probetraining")

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


settings = Settings()
