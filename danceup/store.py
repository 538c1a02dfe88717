"""
store.py – Owner-scoped document store
────────────────────────────────────────────
Collections of JSON documents (classes, events, workshops, packages,
studio_owners) kept in one SQLAlchemy table.

 • Every read and write is scoped by owner_id; there is no unscoped query.
 • subscribe() behaves like a live query: the callback fires once with the
   current snapshot and again after every committed write to the same
   (collection, owner) pair.
 • Updates merge fields into the stored document (last write wins).
────────────────────────────────────────────
"""
from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from .db import get_session
from .errors import AuthError, NotFoundError, StoreError
from .models import Document

log = logging.getLogger(__name__)

CLASSES = "classes"
EVENTS = "events"
WORKSHOPS = "workshops"
PACKAGES = "packages"
STUDIO_OWNERS = "studio_owners"


@dataclass(frozen=True)
class StoredDocument:
    id: str
    owner_id: str
    data: Dict[str, Any] = field(default_factory=dict)


Listener = Callable[[List[StoredDocument]], None]


@dataclass(eq=False)
class _Subscription:
    callback: Listener
    where: Dict[str, Any]


def _new_id() -> str:
    return uuid.uuid4().hex


def _matches(data: Dict[str, Any], where: Optional[Dict[str, Any]]) -> bool:
    return all(data.get(k) == v for k, v in (where or {}).items())


def _find(s, doc_id: str) -> Optional[Document]:
    return s.execute(select(Document).where(Document.id == doc_id)).scalars().first()


def _to_stored(row: Document) -> StoredDocument:
    return StoredDocument(id=row.id, owner_id=row.owner_id, data=dict(row.data or {}))


class DocumentStore:
    def __init__(self):
        self._lock = threading.RLock()
        self._listeners: Dict[Tuple[str, str], List[_Subscription]] = {}

    # ── Writes ───────────────────────────────────
    def add(self, collection: str, owner_id: str, data: Dict[str, Any]) -> str:
        """Insert a new document and return its generated id."""
        doc_id = _new_id()
        payload = {**data, "owner_id": owner_id}
        try:
            with get_session() as s:
                s.add(Document(id=doc_id, collection=collection, owner_id=owner_id, data=payload))
        except SQLAlchemyError as e:
            log.error(f"❌ add {collection} failed for owner={owner_id}: {e}")
            raise StoreError(f"Could not save to {collection}") from e

        log.info(f"[STORE] + {collection}/{doc_id} owner={owner_id}")
        self._notify(collection, owner_id)
        return doc_id

    def set(self, collection: str, doc_id: str, owner_id: str, data: Dict[str, Any]) -> None:
        """Create or fully replace a document under a caller-chosen id."""
        payload = {**data, "owner_id": owner_id}
        try:
            with get_session() as s:
                row = _find(s, doc_id)
                if row is not None and (row.collection != collection or row.owner_id != owner_id):
                    raise NotFoundError(f"{collection}/{doc_id} not found")
                if row is None:
                    s.add(Document(id=doc_id, collection=collection, owner_id=owner_id, data=payload))
                else:
                    row.data = payload
        except SQLAlchemyError as e:
            log.error(f"❌ set {collection}/{doc_id} failed: {e}")
            raise StoreError(f"Could not save to {collection}") from e

        log.info(f"[STORE] = {collection}/{doc_id} owner={owner_id}")
        self._notify(collection, owner_id)

    def update(self, collection: str, doc_id: str, owner_id: str, fields: Dict[str, Any]) -> None:
        """Merge fields into an existing document owned by owner_id."""
        try:
            with get_session() as s:
                row = self._owned_row(s, collection, doc_id, owner_id)
                # new dict so the JSON column is flagged dirty
                row.data = {**(row.data or {}), **fields, "owner_id": owner_id}
        except SQLAlchemyError as e:
            log.error(f"❌ update {collection}/{doc_id} failed: {e}")
            raise StoreError(f"Could not update {collection}") from e

        log.info(f"[STORE] ~ {collection}/{doc_id} fields={sorted(fields)}")
        self._notify(collection, owner_id)

    def delete(self, collection: str, doc_id: str, owner_id: str) -> None:
        try:
            with get_session() as s:
                row = self._owned_row(s, collection, doc_id, owner_id)
                s.delete(row)
        except SQLAlchemyError as e:
            log.error(f"❌ delete {collection}/{doc_id} failed: {e}")
            raise StoreError(f"Could not delete from {collection}") from e

        log.info(f"[STORE] - {collection}/{doc_id} owner={owner_id}")
        self._notify(collection, owner_id)

    # ── Reads ────────────────────────────────────
    def get(self, collection: str, doc_id: str, owner_id: str) -> Optional[StoredDocument]:
        try:
            with get_session() as s:
                row = _find(s, doc_id)
                if row is None or row.collection != collection or row.owner_id != owner_id:
                    return None
                return _to_stored(row)
        except SQLAlchemyError as e:
            log.error(f"❌ get {collection}/{doc_id} failed: {e}")
            raise StoreError(f"Could not read {collection}") from e

    def query(self, collection: str, owner_id: str, where: Optional[Dict[str, Any]] = None) -> List[StoredDocument]:
        """All documents of one owner in a collection, optionally filtered by field equality."""
        if not owner_id:
            raise AuthError("Queries must be scoped to an owner")
        try:
            with get_session() as s:
                rows = s.execute(
                    select(Document)
                    .where(Document.collection == collection, Document.owner_id == owner_id)
                    .order_by(Document.pk)
                ).scalars().all()
                docs = [_to_stored(r) for r in rows]
        except SQLAlchemyError as e:
            log.error(f"❌ query {collection} failed for owner={owner_id}: {e}")
            raise StoreError(f"Could not read {collection}") from e

        return [d for d in docs if _matches(d.data, where)]

    # ── Live queries ─────────────────────────────
    def subscribe(
        self,
        collection: str,
        owner_id: str,
        callback: Listener,
        where: Optional[Dict[str, Any]] = None,
    ) -> Callable[[], None]:
        """Register a live query; returns an unsubscribe callable."""
        sub = _Subscription(callback=callback, where=dict(where or {}))
        key = (collection, owner_id)
        with self._lock:
            self._listeners.setdefault(key, []).append(sub)

        self._deliver(collection, owner_id, [sub])

        def unsubscribe():
            with self._lock:
                subs = self._listeners.get(key, [])
                if sub in subs:
                    subs.remove(sub)
                if not subs:
                    self._listeners.pop(key, None)

        return unsubscribe

    def listener_count(self, collection: str, owner_id: str) -> int:
        with self._lock:
            return len(self._listeners.get((collection, owner_id), []))

    # ── Internals ────────────────────────────────
    def _owned_row(self, s, collection: str, doc_id: str, owner_id: str) -> Document:
        row = _find(s, doc_id)
        if row is None or row.collection != collection or row.owner_id != owner_id:
            raise NotFoundError(f"{collection}/{doc_id} not found")
        return row

    def _notify(self, collection: str, owner_id: str):
        with self._lock:
            subs = list(self._listeners.get((collection, owner_id), []))
        if subs:
            self._deliver(collection, owner_id, subs)

    def _deliver(self, collection: str, owner_id: str, subs: List[_Subscription]):
        try:
            snapshot = self.query(collection, owner_id)
        except StoreError:
            log.exception(f"[STORE] snapshot for {collection} owner={owner_id} failed; listeners not notified")
            return
        for sub in subs:
            try:
                sub.callback([d for d in snapshot if _matches(d.data, sub.where)])
            except Exception:
                log.exception(f"[STORE] listener on {collection} raised")
