"""
dashboard_router.py – Studio overview
────────────────────────────────────────────
GET /dashboard/overview → greeting + headline stats:
 • total classes
 • active students (enrolled across active classes)
 • class occurrences in the current Sunday–Saturday week
 • distinct class locations
────────────────────────────────────────────
"""

import logging
from datetime import date, timedelta
from flask import Blueprint, g, jsonify

from .editors import ClassEditor
from .schedule_router import week_start
from .web import editor, login_required, services

bp = Blueprint("dashboard_bp", __name__)
log = logging.getLogger(__name__)


def overview_stats(classes, occurrences, today: date) -> dict:
    start = week_start(today)
    end = start + timedelta(days=7)
    active = [c for c in classes if c.is_active]
    return {
        "total_classes": len(classes),
        "active_students": sum(c.current_students for c in active),
        "this_week_classes": sum(
            1 for o in occurrences if o.kind == "class" and start <= o.start.date() < end
        ),
        "locations": len({c.location.strip().lower() for c in classes if c.location.strip()}),
    }


@bp.route("/dashboard/overview", methods=["GET"])
@login_required
def overview():
    classes = editor(ClassEditor).list()
    occurrences = services().feeds.for_owner(g.owner.uid).occurrences
    stats = overview_stats(classes, occurrences, services().feeds.today())
    return jsonify({
        "ok": True,
        "greeting": f"Welcome back, {g.owner.display_name}!",
        "stats": stats,
    })
