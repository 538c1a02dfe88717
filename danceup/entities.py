# danceup/entities.py
"""
Typed views over raw store documents.

Documents come back from the store as loose dicts (optional fields, older
records with a combined location string, numbers stored as text). Each
entity has a single `from_document` that normalizes once at read time, so
nothing downstream needs fallback parsing.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Literal, Optional

# ── Constants ────────────────────────────────────────────────────────────────
WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

Level = Literal["beginner", "intermediate", "advanced", "all-levels"]
LEVELS = ("beginner", "intermediate", "advanced", "all-levels")
DEFAULT_LEVEL = "all-levels"

EventType = Literal["workshop", "competition", "showcase", "other"]
EVENT_TYPES = ("workshop", "competition", "showcase", "other")

UNLIMITED_CLASSES = 999

US_STATES = (
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "FL", "GA",
    "HI", "ID", "IL", "IN", "IA", "KS", "KY", "LA", "ME", "MD",
    "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH", "NJ",
    "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC",
    "SD", "TN", "TX", "UT", "VT", "VA", "WA", "WV", "WI", "WY",
)

_CITY_STATE = re.compile(r"^\s*(?P<city>[^,]+?)\s*,\s*(?P<state>[A-Za-z]{2})\s*$")


# ── Coercion helpers ─────────────────────────────────────────────────────────
def _str(v: Any) -> str:
    return "" if v is None else str(v).strip()


def _int(v: Any, default: int = 0) -> int:
    try:
        return int(v)
    except (TypeError, ValueError):
        try:
            return int(float(v))
        except (TypeError, ValueError):
            return default


def _float(v: Any) -> Optional[float]:
    if v is None or v == "":
        return None
    try:
        return float(v)
    except (TypeError, ValueError):
        return None


def _bool(v: Any, default: bool = True) -> bool:
    if v is None:
        return default
    if isinstance(v, str):
        return v.strip().lower() in ("1", "true", "yes", "on")
    return bool(v)


def _level(v: Any) -> str:
    s = _str(v).lower()
    return s if s in LEVELS else DEFAULT_LEVEL


def normalize_weekday(v: Any) -> Optional[str]:
    """'monday ' -> 'Monday'; None if not one of the seven day names."""
    s = _str(v).capitalize()
    return s if s in WEEKDAYS else None


def split_city_state(location: str):
    """Legacy 'Austin, TX' -> ('Austin', 'TX'); ('', '') if it doesn't look like one."""
    m = _CITY_STATE.match(location or "")
    if not m:
        return "", ""
    return m.group("city"), m.group("state").upper()


# ── Entities ─────────────────────────────────────────────────────────────────
@dataclass
class ClassEntry:
    id: str
    owner_id: str
    name: str
    instructor: str
    day: str
    time: str
    duration: str = "1 hour"
    location: str = ""
    description: str = ""
    level: Level = DEFAULT_LEVEL
    max_students: int = 0
    current_students: int = 0
    is_active: bool = True
    price: Optional[float] = None

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any]) -> "ClassEntry":
        return cls(
            id=doc_id,
            owner_id=_str(data.get("owner_id")),
            name=_str(data.get("name")),
            instructor=_str(data.get("instructor")),
            # keep raw text so an unknown day stays visible in the editor
            day=normalize_weekday(data.get("day")) or _str(data.get("day")),
            time=_str(data.get("time")),
            duration=_str(data.get("duration")) or "1 hour",
            location=_str(data.get("location")),
            description=_str(data.get("description")),
            level=_level(data.get("level")),
            max_students=_int(data.get("max_students")),
            current_students=_int(data.get("current_students")),
            is_active=_bool(data.get("is_active"), True),
            price=_float(data.get("price")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class EventEntry:
    id: str
    owner_id: str
    title: str
    date: str
    time: str
    location: str = ""
    city: str = ""
    state: str = ""
    description: str = ""
    event_type: EventType = "other"
    image_url: Optional[str] = None

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any]) -> "EventEntry":
        city = _str(data.get("city"))
        state = _str(data.get("state")).upper()
        location = _str(data.get("location"))

        if city and state:
            location = f"{city}, {state}"
        elif location:
            city, state = split_city_state(location)

        event_type = _str(data.get("event_type") or data.get("type")).lower()
        return cls(
            id=doc_id,
            owner_id=_str(data.get("owner_id")),
            title=_str(data.get("title")),
            date=_str(data.get("date")),
            time=_str(data.get("time")),
            location=location,
            city=city,
            state=state,
            description=_str(data.get("description")),
            event_type=event_type if event_type in EVENT_TYPES else "other",
            image_url=_str(data.get("image_url")) or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class WorkshopEntry:
    id: str
    owner_id: str
    title: str
    instructor: str
    date: str
    time: str
    duration: str = ""
    location: str = ""
    description: str = ""
    level: Level = DEFAULT_LEVEL
    max_participants: int = 0
    current_participants: int = 0
    price: Optional[float] = None
    image_url: Optional[str] = None

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any]) -> "WorkshopEntry":
        return cls(
            id=doc_id,
            owner_id=_str(data.get("owner_id")),
            title=_str(data.get("title")),
            instructor=_str(data.get("instructor")),
            date=_str(data.get("date")),
            time=_str(data.get("time")),
            duration=_str(data.get("duration")),
            location=_str(data.get("location")),
            description=_str(data.get("description")),
            level=_level(data.get("level")),
            max_participants=_int(data.get("max_participants")),
            current_participants=_int(data.get("current_participants")),
            price=_float(data.get("price")),
            image_url=_str(data.get("image_url")) or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PackageEntry:
    id: str
    owner_id: str
    name: str
    price: float
    number_of_classes: int
    validity_days: int
    description: str = ""
    is_active: bool = True
    class_ids: List[str] = field(default_factory=list)

    @property
    def is_unlimited(self) -> bool:
        return self.number_of_classes == UNLIMITED_CLASSES

    @property
    def classes_label(self) -> str:
        return "Unlimited" if self.is_unlimited else f"{self.number_of_classes} classes"

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any]) -> "PackageEntry":
        raw_ids = data.get("class_ids") or []
        return cls(
            id=doc_id,
            owner_id=_str(data.get("owner_id")),
            name=_str(data.get("name")),
            price=_float(data.get("price")) or 0.0,
            number_of_classes=_int(data.get("number_of_classes")),
            validity_days=_int(data.get("validity_days")),
            description=_str(data.get("description")),
            is_active=_bool(data.get("is_active"), True),
            class_ids=[_str(c) for c in raw_ids if _str(c)] if isinstance(raw_ids, list) else [],
        )

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["is_unlimited"] = self.is_unlimited
        out["classes_label"] = self.classes_label
        return out


@dataclass
class SocialLinks:
    facebook: str = ""
    instagram: str = ""
    tiktok: str = ""


@dataclass
class OwnerProfile:
    uid: str
    email: str
    first_name: str
    last_name: str
    address1: str
    city: str
    state: str
    zip_code: str
    studio_name: str
    address2: str = ""
    studio_image_url: Optional[str] = None
    website: str = ""
    social_media: SocialLinks = field(default_factory=SocialLinks)
    access_level: str = "studio_owner"
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any]) -> "OwnerProfile":
        social = data.get("social_media") or {}
        if not isinstance(social, dict):
            social = {}
        return cls(
            uid=_str(data.get("uid")) or doc_id,
            email=_str(data.get("email")),
            first_name=_str(data.get("first_name")),
            last_name=_str(data.get("last_name")),
            address1=_str(data.get("address1")),
            address2=_str(data.get("address2")),
            city=_str(data.get("city")),
            state=_str(data.get("state")).upper(),
            zip_code=_str(data.get("zip_code")),
            studio_name=_str(data.get("studio_name")),
            studio_image_url=_str(data.get("studio_image_url")) or None,
            website=_str(data.get("website")),
            social_media=SocialLinks(
                facebook=_str(social.get("facebook")),
                instagram=_str(social.get("instagram")),
                tiktok=_str(social.get("tiktok")),
            ),
            access_level=_str(data.get("access_level")) or "studio_owner",
            created_at=_str(data.get("created_at")) or None,
            updated_at=_str(data.get("updated_at")) or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
