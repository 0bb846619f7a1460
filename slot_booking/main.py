from __future__ import annotations

import logging
from functools import lru_cache

from dotenv import load_dotenv

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

load_dotenv()

from .config import Settings, settings
from .gcal.repository import CalendarRepository, build_repository
from .schemas import BookRequest, CancelRequest, RescheduleRequest
from .tools.handlers import BookingError, book, cancel, reschedule

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Slot Booking API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_settings() -> Settings:
    return settings


@lru_cache
def get_repository() -> CalendarRepository:
    return build_repository(settings)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError) -> PlainTextResponse:
    logger.warning(f"{request.url.path} rejected ({exc.status_code}): {exc.message}")
    return PlainTextResponse(exc.message, status_code=exc.status_code)


def _describe_error(error: dict) -> str:
    location = [str(part) for part in error.get("loc", ())[1:] if not isinstance(part, int)]
    if not location:
        return error.get("msg", "invalid body")
    return ".".join(location)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> PlainTextResponse:
    fields = ", ".join(_describe_error(error) for error in exc.errors())
    logger.warning(f"{request.url.path} invalid request: {fields}")
    return PlainTextResponse(f"Invalid request: {fields}", status_code=400)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> PlainTextResponse:
    logger.exception(f"{request.url.path} failed")
    return PlainTextResponse(f"Error: {exc}", status_code=500)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.post("/check_and_book", response_class=PlainTextResponse)
def check_and_book(
    payload: BookRequest,
    repository: CalendarRepository = Depends(get_repository),
    config: Settings = Depends(get_settings),
) -> str:
    book(repository, config, payload.name, payload.time_phrase)
    return "Booked"


@app.post("/cancel", response_class=PlainTextResponse)
def cancel_booking(
    payload: CancelRequest,
    repository: CalendarRepository = Depends(get_repository),
    config: Settings = Depends(get_settings),
) -> str:
    cancel(repository, config, payload.name)
    return "Canceled"


@app.post("/reschedule", response_class=PlainTextResponse)
def reschedule_booking(
    payload: RescheduleRequest,
    repository: CalendarRepository = Depends(get_repository),
    config: Settings = Depends(get_settings),
) -> str:
    reschedule(repository, config, payload.name, payload.new_time)
    return "Rescheduled"


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Server running on port {settings.port}")
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
