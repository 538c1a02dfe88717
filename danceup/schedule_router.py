"""
schedule_router.py – Calendar view over the owner's schedule feed
────────────────────────────────────────────────────────────
 • GET /schedule?view=month|week|day&date=YYYY-MM-DD
       → occurrences inside the window, sorted and bucketed per day
 • GET /schedule/occurrences/<occurrence_id>
       → one occurrence with its source entry (instructor, price, capacity…)

Weeks start on Sunday; the month view covers the full weeks around the month.
────────────────────────────────────────────────────────────
"""

import logging
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Tuple

from flask import Blueprint, g, jsonify, request

from .aggregator import Occurrence
from .errors import NotFoundError, ValidationError
from .web import login_required, services

bp = Blueprint("schedule_bp", __name__)
log = logging.getLogger(__name__)

VIEWS = ("month", "week", "day")


# ─────────────────────────────────────────────────────────────
# Window helpers
# ─────────────────────────────────────────────────────────────
def week_start(day: date) -> date:
    """Sunday on or before `day`."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def window_bounds(view: str, anchor: date) -> Tuple[date, date]:
    """[start, end) dates covered by a calendar view around `anchor`."""
    if view == "day":
        return anchor, anchor + timedelta(days=1)
    if view == "week":
        start = week_start(anchor)
        return start, start + timedelta(days=7)
    if view == "month":
        first = anchor.replace(day=1)
        next_first = (first + timedelta(days=32)).replace(day=1)
        last = next_first - timedelta(days=1)
        return week_start(first), week_start(last) + timedelta(days=7)
    raise ValidationError(f"view must be one of: {', '.join(VIEWS)}")


def bucket_by_day(occurrences: Iterable[Occurrence], start: date, end: date) -> Dict[str, List[dict]]:
    days: Dict[str, List[dict]] = {}
    d = start
    while d < end:
        days[d.isoformat()] = []
        d += timedelta(days=1)

    for occ in sorted(occurrences, key=lambda o: (o.start, o.id)):
        key = occ.start.date().isoformat()
        if key in days:
            days[key].append(occ.to_dict())
    return days


def _anchor() -> date:
    raw = (request.args.get("date") or "").strip()
    if not raw:
        return services().feeds.today()
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("date must be in YYYY-MM-DD format")


# ─────────────────────────────────────────────────────────────
# Routes
# ─────────────────────────────────────────────────────────────
@bp.route("/schedule", methods=["GET"])
@login_required
def schedule():
    view = (request.args.get("view") or "month").strip().lower()
    anchor = _anchor()
    start, end = window_bounds(view, anchor)

    feed = services().feeds.for_owner(g.owner.uid)
    days = bucket_by_day(feed.occurrences, start, end)
    total = sum(len(v) for v in days.values())
    log.info(f"[SCHEDULE] {g.owner.uid} {view} {start}→{end}: {total} occurrences")

    return jsonify({
        "ok": True,
        "view": view,
        "date": anchor.isoformat(),
        "start": start.isoformat(),
        "end": end.isoformat(),
        "count": total,
        "days": days,
    })


@bp.route("/schedule/occurrences/<occurrence_id>", methods=["GET"])
@login_required
def occurrence_detail(occurrence_id):
    occ = services().feeds.for_owner(g.owner.uid).find(occurrence_id)
    if occ is None:
        raise NotFoundError("Occurrence not found")
    out = occ.to_dict()
    out["source"] = occ.source.to_dict()
    return jsonify({"ok": True, "occurrence": out})
