from __future__ import annotations

import re
from datetime import datetime, timedelta

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

DEFAULT_HOUR = 12

_RELATIVE_OFFSET = re.compile(r"\bin\s+(\d+)\s+(minute|hour|day|week)s?\b")
_DAY_ANCHORS = (
    ("day after tomorrow", 2),
    ("tomorrow", 1),
    ("today", 0),
)
_NEXT_WEEKDAY = re.compile(r"\bnext\s+(?=(?:mon|tue|wed|thu|fri|sat|sun)[a-z]*\b)")
_NOON = re.compile(r"\bnoon\b")
_MIDNIGHT = re.compile(r"\bmidnight\b")
# "at 9" would otherwise be read as the 9th of the month.
_BARE_HOUR = re.compile(r"\bat\s+(\d{1,2})(?![\d:.]|\s*[ap]\.?m)")


def parse_time_phrase(phrase: str | None, now: datetime) -> datetime | None:
    """Parse phrases like "tomorrow at 3pm" or "next monday 10:30".

    The result carries ``now``'s tzinfo. A phrase naming only a day resolves
    to noon. A month and day without a year more than six months back means
    next year. Returns None when nothing date-like can be read.
    """
    if not phrase or not phrase.strip():
        return None
    text = " ".join(phrase.lower().split())
    base = now.replace(tzinfo=None, hour=DEFAULT_HOUR, minute=0, second=0, microsecond=0)
    anchored = False

    offset = _RELATIVE_OFFSET.search(text)
    if offset:
        try:
            delta = timedelta(**{f"{offset.group(2)}s": int(offset.group(1))})
            if offset.group(2) in ("minute", "hour"):
                return now + delta
            base += delta
        except (OverflowError, ValueError):
            return None
        anchored = True
        text = _RELATIVE_OFFSET.sub(" ", text)

    for words, days in _DAY_ANCHORS:
        pattern = rf"\b{words}\b"
        if re.search(pattern, text):
            text = re.sub(pattern, " ", text)
            base += timedelta(days=days)
            anchored = True
            break

    if _NEXT_WEEKDAY.search(text):
        text = _NEXT_WEEKDAY.sub("", text)
        base += timedelta(days=1)

    text = _NOON.sub("12:00", text)
    text = _MIDNIGHT.sub("00:00", text)
    text = _BARE_HOUR.sub(r"at \1:00", text)

    try:
        parsed = date_parser.parse(text, default=base, fuzzy=True, ignoretz=True)
        if not anchored and parsed < base - relativedelta(months=6):
            # Only roll forward when the year came from the default.
            next_year = date_parser.parse(
                text, default=base + relativedelta(years=1), fuzzy=True, ignoretz=True
            )
            if next_year.year != parsed.year:
                parsed += relativedelta(years=1)
    except (ValueError, OverflowError):
        if not anchored:
            return None
        parsed = base
    return parsed.replace(tzinfo=now.tzinfo)
