"""
editors.py – CRUD editors for the dashboard collections
────────────────────────────────────────────────────────────
One editor per entity type, bound to an explicit OwnerSession.

 • save()   → required-field check, form → document mapping, add or update
 • delete() → remove the document and any image blob it points to
 • toggle_active() on classes & packages

Store failures surface as StoreError so the caller can tell the user;
stale image blobs that fail to delete are only logged.
────────────────────────────────────────────────────────────
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from . import config
from .auth import OwnerSession, check_profile_fields, profile_document
from .blobs import BlobStore, ImageUpload, entity_image_path, studio_image_path, validate_image
from .entities import (
    EVENT_TYPES, LEVELS, DEFAULT_LEVEL,
    ClassEntry, EventEntry, OwnerProfile, PackageEntry, WorkshopEntry,
    normalize_weekday,
)
from .errors import DanceUpError, NotFoundError, StoreError, ValidationError
from .store import CLASSES, EVENTS, PACKAGES, STUDIO_OWNERS, WORKSHOPS, DocumentStore

log = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────
# Form helpers
# ─────────────────────────────────────────────────────────────
def _text(form: Dict[str, Any], key: str) -> str:
    v = form.get(key)
    return "" if v is None else str(v).strip()


def _require(form: Dict[str, Any], keys: Iterable[str]) -> None:
    missing = [k for k in keys if not _text(form, k)]
    if missing:
        log.debug(f"missing required fields: {missing}")
        raise ValidationError("Please fill in all required fields")


def _whole(form: Dict[str, Any], key: str, default: Optional[int] = None) -> int:
    raw = _text(form, key)
    if not raw and default is not None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f"{key.replace('_', ' ').capitalize()} must be a whole number")
    if value < 0:
        raise ValidationError(f"{key.replace('_', ' ').capitalize()} cannot be negative")
    return value


def _money(form: Dict[str, Any], key: str, required: bool = False) -> Optional[float]:
    raw = _text(form, key)
    if not raw:
        if required:
            raise ValidationError("Please fill in all required fields")
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ValidationError(f"{key.replace('_', ' ').capitalize()} must be a number")
    if value < 0:
        raise ValidationError(f"{key.replace('_', ' ').capitalize()} cannot be negative")
    return value


def _flag(form: Dict[str, Any], key: str, default: bool = True) -> bool:
    v = form.get(key)
    if v is None or v == "":
        return default
    if isinstance(v, str):
        return v.strip().lower() in ("1", "true", "yes", "on")
    return bool(v)


def _level(form: Dict[str, Any]) -> str:
    level = _text(form, "level").lower() or DEFAULT_LEVEL
    if level not in LEVELS:
        raise ValidationError(f"Level must be one of: {', '.join(LEVELS)}")
    return level


def _iso_date(form: Dict[str, Any], key: str = "date") -> str:
    raw = _text(form, key)
    try:
        datetime.strptime(raw, "%Y-%m-%d")
    except ValueError:
        raise ValidationError("Date must be in YYYY-MM-DD format")
    return raw


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


# ─────────────────────────────────────────────────────────────
# Base editor
# ─────────────────────────────────────────────────────────────
class CollectionEditor:
    collection = ""
    entity_cls = None
    label = "item"
    required: tuple = ()

    def __init__(self, session: OwnerSession, store: DocumentStore, blobs: BlobStore,
                 max_image_bytes: int = None):
        self.session = session
        self.store = store
        self.blobs = blobs
        self.max_image_bytes = max_image_bytes or config.MAX_IMAGE_BYTES

    @property
    def owner_id(self) -> str:
        return self.session.uid

    # ── Reads ────────────────────────────────────
    def list(self) -> List[Any]:
        docs = self.store.query(self.collection, self.owner_id)
        return [self.entity_cls.from_document(d.id, d.data) for d in docs]

    def get(self, doc_id: str):
        doc = self.store.get(self.collection, doc_id, self.owner_id)
        if doc is None:
            raise NotFoundError(f"{self.label.capitalize()} not found")
        return self.entity_cls.from_document(doc.id, doc.data)

    # ── Writes ───────────────────────────────────
    def build(self, form: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    def save(self, form: Dict[str, Any], doc_id: Optional[str] = None,
             image: Optional[ImageUpload] = None, remove_image: bool = False):
        """Create (doc_id None) or update an entry; returns the stored entity."""
        _require(form, self.required)
        existing = self.get(doc_id) if doc_id else None
        doc = self.build(form)
        stale_url = self._apply_image(doc, existing, image, remove_image)
        uploaded_url = doc.get("image_url") if image is not None else None

        try:
            if existing is None:
                doc_id = self.store.add(self.collection, self.owner_id, doc)
                log.info(f"✅ Created {self.label} {doc_id} for owner={self.owner_id}")
            else:
                self.store.update(self.collection, doc_id, self.owner_id, doc)
                log.info(f"✅ Updated {self.label} {doc_id}")
        except DanceUpError:
            # nothing references the fresh upload
            if uploaded_url:
                self._drop_blob(uploaded_url)
            raise

        if stale_url:
            self._drop_blob(stale_url)
        return self.get(doc_id)

    def delete(self, doc_id: str) -> None:
        entry = self.get(doc_id)
        self.store.delete(self.collection, doc_id, self.owner_id)
        log.info(f"🗑️ Deleted {self.label} {doc_id}")
        image_url = getattr(entry, "image_url", None)
        if image_url:
            self._drop_blob(image_url)

    # ── Images ───────────────────────────────────
    def _apply_image(self, doc, existing, image, remove_image) -> Optional[str]:
        """Entity types without images ignore uploads; returns a URL to clean up after saving."""
        return None

    def _drop_blob(self, url: str) -> None:
        try:
            self.blobs.delete_url(url)
        except DanceUpError as e:
            log.error(f"⚠️ Could not delete image {url}: {e}")


class ImageEditor(CollectionEditor):
    """Editors whose entries carry an optional image_url."""

    def _apply_image(self, doc, existing, image, remove_image) -> Optional[str]:
        old_url = existing.image_url if existing else None
        if image is not None:
            validate_image(image, self.max_image_bytes)
            path = entity_image_path(self.collection, self.owner_id, image.filename)
            doc["image_url"] = self.blobs.write(path, image.data)
            return old_url
        if remove_image and old_url:
            doc["image_url"] = None
            return old_url
        doc["image_url"] = old_url
        return None


# ─────────────────────────────────────────────────────────────
# Concrete editors
# ─────────────────────────────────────────────────────────────
class ClassEditor(CollectionEditor):
    collection = CLASSES
    entity_cls = ClassEntry
    label = "class"
    required = ("name", "instructor", "day", "time", "duration", "location", "max_students")

    def build(self, form):
        day = normalize_weekday(form.get("day"))
        if day is None:
            raise ValidationError("Day must be a day of the week")
        return {
            "name": _text(form, "name"),
            "description": _text(form, "description"),
            "instructor": _text(form, "instructor"),
            "day": day,
            "time": _text(form, "time"),
            "duration": _text(form, "duration"),
            "location": _text(form, "location"),
            "level": _level(form),
            "max_students": _whole(form, "max_students"),
            "current_students": _whole(form, "current_students", default=0),
            "is_active": _flag(form, "is_active", True),
            "price": _money(form, "price"),
        }

    def toggle_active(self, doc_id: str) -> ClassEntry:
        entry = self.get(doc_id)
        self.store.update(self.collection, doc_id, self.owner_id, {"is_active": not entry.is_active})
        return self.get(doc_id)


class EventEditor(ImageEditor):
    collection = EVENTS
    entity_cls = EventEntry
    label = "event"
    required = ("title", "date", "time")

    def build(self, form):
        location = _text(form, "location")
        city, state = _text(form, "city"), _text(form, "state").upper()
        if not location and not (city and state):
            raise ValidationError("Please fill in all required fields")

        event_type = _text(form, "event_type").lower() or "other"
        if event_type not in EVENT_TYPES:
            raise ValidationError(f"Event type must be one of: {', '.join(EVENT_TYPES)}")

        return {
            "title": _text(form, "title"),
            "description": _text(form, "description"),
            "date": _iso_date(form),
            "time": _text(form, "time"),
            "location": f"{city}, {state}" if city and state else location,
            "city": city,
            "state": state,
            "event_type": event_type,
        }


class WorkshopEditor(ImageEditor):
    collection = WORKSHOPS
    entity_cls = WorkshopEntry
    label = "workshop"
    required = ("title", "instructor", "date", "time", "duration", "location", "max_participants")

    def build(self, form):
        return {
            "title": _text(form, "title"),
            "description": _text(form, "description"),
            "instructor": _text(form, "instructor"),
            "date": _iso_date(form),
            "time": _text(form, "time"),
            "duration": _text(form, "duration"),
            "location": _text(form, "location"),
            "level": _level(form),
            "max_participants": _whole(form, "max_participants"),
            "current_participants": _whole(form, "current_participants", default=0),
            "price": _money(form, "price"),
        }


class PackageEditor(CollectionEditor):
    collection = PACKAGES
    entity_cls = PackageEntry
    label = "package"
    required = ("name", "price", "number_of_classes", "validity_days")

    def build(self, form):
        class_ids = form.get("class_ids") or []
        if isinstance(class_ids, str):
            class_ids = [c for c in class_ids.split(",")]
        class_ids = [str(c).strip() for c in class_ids if str(c).strip()]

        if class_ids:
            owned = {d.id for d in self.store.query(CLASSES, self.owner_id)}
            unknown = [c for c in class_ids if c not in owned]
            if unknown:
                raise ValidationError(f"Unknown class ids: {', '.join(unknown)}")

        return {
            "name": _text(form, "name"),
            "description": _text(form, "description"),
            "price": _money(form, "price", required=True),
            "number_of_classes": _whole(form, "number_of_classes"),
            "validity_days": _whole(form, "validity_days"),
            "is_active": _flag(form, "is_active", True),
            "class_ids": class_ids,
        }

    def toggle_active(self, doc_id: str) -> PackageEntry:
        entry = self.get(doc_id)
        self.store.update(self.collection, doc_id, self.owner_id, {"is_active": not entry.is_active})
        return self.get(doc_id)


# ─────────────────────────────────────────────────────────────
# Studio profile
# ─────────────────────────────────────────────────────────────
class ProfileEditor:
    def __init__(self, session: OwnerSession, store: DocumentStore, blobs: BlobStore,
                 max_image_bytes: int = None):
        self.session = session
        self.store = store
        self.blobs = blobs
        self.max_image_bytes = max_image_bytes or config.MAX_IMAGE_BYTES

    def load(self) -> OwnerProfile:
        doc = self.store.get(STUDIO_OWNERS, self.session.uid, self.session.uid)
        if doc is None:
            raise NotFoundError("Studio profile not found")
        return OwnerProfile.from_document(doc.id, doc.data)

    def save(self, form: Dict[str, Any], image: Optional[ImageUpload] = None,
             remove_image: bool = False) -> OwnerProfile:
        current = self.load()
        check_profile_fields(form)

        image_url = current.studio_image_url or ""
        stale_url = None
        if image is not None:
            validate_image(image, self.max_image_bytes)
            # fixed path per owner: the upload overwrites the previous picture
            try:
                image_url = self.blobs.write(studio_image_path(self.session.uid), image.data)
            except DanceUpError as e:
                log.error(f"❌ Studio image upload failed for {self.session.uid}: {e}")
                raise StoreError("Failed to upload image") from e
        elif remove_image and image_url:
            stale_url, image_url = image_url, ""

        fields = profile_document(self.session.uid, current.email, form, image_url)
        fields["updated_at"] = _now_iso()
        self.store.update(STUDIO_OWNERS, self.session.uid, self.session.uid, fields)
        log.info(f"✅ Studio information updated for {self.session.email}")
        if stale_url:
            try:
                self.blobs.delete_url(stale_url)
            except DanceUpError as e:
                log.error(f"⚠️ Could not delete studio image {stale_url}: {e}")
        return self.load()
