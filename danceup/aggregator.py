"""
aggregator.py – Calendar aggregation
────────────────────────────────────────────
Turns one owner's classes, events and workshops into a flat list of
calendar occurrences.

 • Events      → one occurrence, fixed 60 minutes
 • Workshops   → one occurrence, fixed 120 minutes (stored duration ignored)
 • Classes     → one occurrence per week for HORIZON_WEEKS weeks, starting at
                 the next matching weekday on or after today

Pure: no I/O, never raises. Bad times fall back to midnight, bad durations
to 60 minutes, unknown weekdays and unreadable dates produce nothing.
All datetimes are naive local wall-clock values.
────────────────────────────────────────────
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Literal, Optional, Union

from .entities import ClassEntry, EventEntry, WorkshopEntry, WEEKDAYS, normalize_weekday

log = logging.getLogger(__name__)

HORIZON_WEEKS = 12
EVENT_MINUTES = 60
WORKSHOP_MINUTES = 120
DEFAULT_CLASS_MINUTES = 60

OccurrenceKind = Literal["class", "event", "workshop"]
SourceEntry = Union[ClassEntry, EventEntry, WorkshopEntry]

_TIME_24 = re.compile(r"^(\d{1,2}):(\d{2})$")
_TIME_12 = re.compile(r"(\d{1,2}):(\d{2})\s*(AM|PM)", re.IGNORECASE)
_DUR_HOURS = re.compile(r"(\d+)\s*hour", re.IGNORECASE)
_DUR_MINUTES = re.compile(r"(\d+)\s*min", re.IGNORECASE)


@dataclass(frozen=True)
class Occurrence:
    id: str
    title: str
    start: datetime
    end: datetime
    kind: OccurrenceKind
    source: SourceEntry
    location: str = ""
    time: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "start": self.start.isoformat(timespec="minutes"),
            "end": self.end.isoformat(timespec="minutes"),
            "kind": self.kind,
            "location": self.location,
            "time": self.time,
            "source_id": self.source.id,
        }


# ─────────────────────────────────────────────────────────────
# Parsing helpers
# ─────────────────────────────────────────────────────────────
def parse_time(text: Optional[str]) -> time:
    """'14:30' or '2:30 PM' → time(14, 30); anything unreadable → 00:00."""
    s = (text or "").strip()

    m = _TIME_24.match(s)
    if m:
        hours, minutes = int(m.group(1)), int(m.group(2))
    else:
        m = _TIME_12.search(s)
        if not m:
            return time(0, 0)
        hours, minutes = int(m.group(1)), int(m.group(2))
        ampm = m.group(3).upper()
        if hours > 12:
            return time(0, 0)
        if ampm == "PM" and hours != 12:
            hours += 12
        if ampm == "AM" and hours == 12:
            hours = 0

    if hours > 23 or minutes > 59:
        return time(0, 0)
    return time(hours, minutes)


def parse_duration(text: Optional[str]) -> int:
    """'1 hour' → 60, '90 minutes' → 90; unreadable or non-positive → 60."""
    s = text or ""
    m = _DUR_HOURS.search(s)
    if m:
        minutes = int(m.group(1)) * 60
    else:
        m = _DUR_MINUTES.search(s)
        minutes = int(m.group(1)) if m else DEFAULT_CLASS_MINUTES
    return minutes if minutes > 0 else DEFAULT_CLASS_MINUTES


def parse_date(text: Optional[str]) -> Optional[date]:
    try:
        return datetime.strptime((text or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        return None


def weekday_index(day: Optional[str]) -> Optional[int]:
    """Monday=0 … Sunday=6, matching date.weekday(); None if unrecognized."""
    name = normalize_weekday(day)
    return WEEKDAYS.index(name) if name else None


def first_on_or_after(today: date, weekday: int) -> date:
    return today + timedelta(days=(weekday - today.weekday()) % 7)


# ─────────────────────────────────────────────────────────────
# Expansion per entity type
# ─────────────────────────────────────────────────────────────
def _single(entry: Union[EventEntry, WorkshopEntry], kind: OccurrenceKind, minutes: int) -> List[Occurrence]:
    day = parse_date(entry.date)
    if day is None:
        log.debug(f"[CALENDAR] skipping {kind} {entry.id}: unreadable date {entry.date!r}")
        return []
    start = datetime.combine(day, parse_time(entry.time))
    return [Occurrence(
        id=entry.id,
        title=entry.title,
        start=start,
        end=start + timedelta(minutes=minutes),
        kind=kind,
        source=entry,
        location=entry.location,
        time=entry.time,
    )]


def expand_event(event: EventEntry) -> List[Occurrence]:
    return _single(event, "event", EVENT_MINUTES)


def expand_workshop(workshop: WorkshopEntry) -> List[Occurrence]:
    return _single(workshop, "workshop", WORKSHOP_MINUTES)


def expand_class(entry: ClassEntry, today: date) -> List[Occurrence]:
    idx = weekday_index(entry.day)
    if idx is None:
        log.debug(f"[CALENDAR] skipping class {entry.id}: unknown day {entry.day!r}")
        return []

    at = parse_time(entry.time)
    length = timedelta(minutes=parse_duration(entry.duration))
    first = first_on_or_after(today, idx)

    out = []
    for week in range(HORIZON_WEEKS):
        start = datetime.combine(first + timedelta(weeks=week), at)
        out.append(Occurrence(
            id=f"{entry.id}-{week}",
            title=entry.name,
            start=start,
            end=start + length,
            kind="class",
            source=entry,
            location=entry.location,
            time=entry.time,
        ))
    return out


# ─────────────────────────────────────────────────────────────
# Public entry point
# ─────────────────────────────────────────────────────────────
def aggregate(
    classes: Iterable[ClassEntry],
    events: Iterable[EventEntry],
    workshops: Iterable[WorkshopEntry],
    today: Optional[date] = None,
) -> List[Occurrence]:
    """
    Merge the three collections into calendar occurrences.
    Output order: events, workshops, then classes; callers sort if they need to.
    Inactive classes are skipped even if the caller forgot to filter them.
    """
    today = today or date.today()
    out: List[Occurrence] = []
    for e in events:
        out.extend(expand_event(e))
    for w in workshops:
        out.extend(expand_workshop(w))
    for c in classes:
        if c.is_active:
            out.extend(expand_class(c, today))
    return out
