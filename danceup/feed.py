"""
feed.py – Live schedule per owner
────────────────────────────────────────────
A ScheduleFeed subscribes to the owner's active classes, events and
workshops. Each "collection changed" notification replaces that
collection's snapshot and re-runs aggregate() over all three. There is no
delta update and no ordering between the three subscriptions; a briefly
stale collection is fixed by its own next notification.

Notifications only travel inside one process. Reads therefore re-check the
stored snapshots, so writes made by another worker on the same database
still show up on the next read.

FeedRegistry keeps one feed per signed-in owner. Feeds close on sign-out
or after sitting unread for `idle_seconds`.
────────────────────────────────────────────
"""
from __future__ import annotations

import logging
import threading
import time
from datetime import date
from typing import Callable, Dict, List, Optional, Tuple

from .aggregator import Occurrence, aggregate
from .entities import ClassEntry, EventEntry, WorkshopEntry
from .store import CLASSES, EVENTS, WORKSHOPS, DocumentStore, StoredDocument

log = logging.getLogger(__name__)

# collection → (entry type, live-query filter)
_SOURCES = {
    CLASSES: (ClassEntry, {"is_active": True}),
    EVENTS: (EventEntry, None),
    WORKSHOPS: (WorkshopEntry, None),
}


class ScheduleFeed:
    def __init__(
        self,
        store: DocumentStore,
        owner_id: str,
        today: Optional[Callable[[], date]] = None,
        on_change: Optional[Callable[[List[Occurrence]], None]] = None,
    ):
        self.store = store
        self.owner_id = owner_id
        self._today = today or date.today
        self._on_change = on_change
        self._lock = threading.RLock()
        self._snapshots: Dict[str, List[StoredDocument]] = {c: [] for c in _SOURCES}
        self._entries: Dict[str, list] = {c: [] for c in _SOURCES}
        self._occurrences: List[Occurrence] = []
        self._computed_for: Optional[date] = None
        self.recomputes = 0

        self._unsubscribers = [
            store.subscribe(collection, owner_id, self._listener(collection), where=where)
            for collection, (_, where) in _SOURCES.items()
        ]
        log.info(f"[FEED] opened for owner={owner_id}")

    # ── Subscription callbacks ───────────────────
    def _listener(self, collection: str):
        def changed(docs: List[StoredDocument]):
            with self._lock:
                self._replace(collection, docs)
                self._recompute()
        return changed

    def _replace(self, collection: str, docs: List[StoredDocument]):
        entry_cls = _SOURCES[collection][0]
        self._snapshots[collection] = list(docs)
        self._entries[collection] = [entry_cls.from_document(d.id, d.data) for d in docs]

    def _recompute(self):
        today = self._today()
        self._occurrences = aggregate(
            self._entries[CLASSES], self._entries[EVENTS], self._entries[WORKSHOPS], today=today
        )
        self._computed_for = today
        self.recomputes += 1
        if self._on_change:
            self._on_change(list(self._occurrences))

    def _refresh(self) -> bool:
        """Pick up writes this process was never notified about; True if anything changed."""
        stale = False
        for collection, (_, where) in _SOURCES.items():
            docs = self.store.query(collection, self.owner_id, where=where)
            if docs != self._snapshots[collection]:
                self._replace(collection, docs)
                stale = True
        if stale:
            log.info(f"[FEED] owner={self.owner_id} caught up with external writes")
        return stale

    # ── Read side ────────────────────────────────
    @property
    def occurrences(self) -> List[Occurrence]:
        with self._lock:
            # the class horizon is anchored on today; roll it forward after midnight
            if self._refresh() or self._computed_for != self._today():
                self._recompute()
            return list(self._occurrences)

    def find(self, occurrence_id: str) -> Optional[Occurrence]:
        return next((o for o in self.occurrences if o.id == occurrence_id), None)

    def close(self):
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        log.info(f"[FEED] closed for owner={self.owner_id}")


class FeedRegistry:
    def __init__(
        self,
        store: DocumentStore,
        today: Optional[Callable[[], date]] = None,
        idle_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self._today = today
        self.idle_seconds = idle_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._feeds: Dict[str, Tuple[ScheduleFeed, float]] = {}

    def today(self) -> date:
        return (self._today or date.today)()

    def for_owner(self, owner_id: str) -> ScheduleFeed:
        now = self._clock()
        with self._lock:
            idle = self._sweep(now, keep=owner_id)
            entry = self._feeds.get(owner_id)
            feed = entry[0] if entry else ScheduleFeed(self.store, owner_id, today=self._today)
            self._feeds[owner_id] = (feed, now)
        for old in idle:
            old.close()
        return feed

    def _sweep(self, now: float, keep: str) -> List[ScheduleFeed]:
        if not self.idle_seconds:
            return []
        expired = [o for o, (_, seen) in self._feeds.items()
                   if o != keep and now - seen > self.idle_seconds]
        if expired:
            log.info(f"[FEED] evicting {len(expired)} idle feed(s)")
        return [self._feeds.pop(o)[0] for o in expired]

    def close(self, owner_id: str) -> bool:
        with self._lock:
            entry = self._feeds.pop(owner_id, None)
        if entry is None:
            return False
        entry[0].close()
        return True

    def close_all(self):
        with self._lock:
            feeds, self._feeds = [f for f, _ in self._feeds.values()], {}
        for feed in feeds:
            feed.close()

    def __contains__(self, owner_id: str) -> bool:
        with self._lock:
            return owner_id in self._feeds
