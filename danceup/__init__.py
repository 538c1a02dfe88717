"""
__init__.py – DanceUp Studio Dashboard backend
────────────────────────────────────────────────────────────
Initialises the Flask app and registers all feature blueprints.

✅ Includes:
 • auth_router         → sign-up / login / logout / me
 • studio_router       → studio profile (+ studio image)
 • collections_router  → classes, events, workshops, packages CRUD
 • schedule_router     → calendar view over the live schedule feed
 • dashboard_router    → overview stats
 • blobs_router        → uploaded image downloads
────────────────────────────────────────────────────────────
"""

import logging
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from . import config, db
from .auth import AuthService
from .blobs import BlobStore
from .errors import DanceUpError
from .feed import FeedRegistry
from .store import DocumentStore
from .web import Services

log = logging.getLogger(__name__)

_OVERRIDABLE = (
    "DATABASE_URL", "SECRET_KEY", "SESSION_MAX_AGE", "PASSWORD_MIN_LENGTH",
    "BLOB_ROOT", "BLOB_BASE_URL", "MAX_IMAGE_BYTES", "FEED_IDLE_SECONDS", "LOG_LEVEL",
)


# ─────────────────────────────────────────────────────────────
# Flask App Factory
# ─────────────────────────────────────────────────────────────
def create_app(overrides: dict = None, today=None):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    settings = {k: getattr(config, k) for k in _OVERRIDABLE}
    settings.update(overrides or {})
    app.config.update(settings)
    app.secret_key = settings["SECRET_KEY"]

    # ── Configure logging ───────────────────────────────
    logging.basicConfig(
        level=settings["LOG_LEVEL"],
        format="%(asctime)s [%(levelname)s] %(name)s :: %(message)s",
    )

    # ── Backends ────────────────────────────────────────
    db.configure(settings["DATABASE_URL"])
    db.init_db()
    log.info("[DB] Tables created / verified")

    store = DocumentStore()
    blobs = BlobStore(settings["BLOB_ROOT"], settings["BLOB_BASE_URL"])
    app.extensions["danceup"] = Services(
        store=store,
        blobs=blobs,
        auth=AuthService(
            store,
            blobs,
            secret_key=settings["SECRET_KEY"],
            max_age=settings["SESSION_MAX_AGE"],
            password_min_length=settings["PASSWORD_MIN_LENGTH"],
            max_image_bytes=settings["MAX_IMAGE_BYTES"],
        ),
        feeds=FeedRegistry(store, today=today, idle_seconds=settings["FEED_IDLE_SECONDS"]),
        max_image_bytes=settings["MAX_IMAGE_BYTES"],
    )

    # ── Register Blueprints ─────────────────────────────
    from .auth_router import bp as auth_bp
    from .studio_router import bp as studio_bp
    from .collections_router import ALL as collection_bps
    from .schedule_router import bp as schedule_bp
    from .dashboard_router import bp as dashboard_bp
    from .blobs_router import bp as blobs_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(studio_bp)
    for bp in collection_bps:
        app.register_blueprint(bp)
    app.register_blueprint(schedule_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(blobs_bp)

    # ── Error replies ───────────────────────────────────
    @app.errorhandler(DanceUpError)
    def handle_dashboard_error(e):
        if e.status >= 500:
            log.error(f"❌ {type(e).__name__}: {e}")
        return jsonify({"ok": False, "error": str(e)}), e.status

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return jsonify({"ok": False, "error": e.description}), e.code
        log.exception("Unhandled error")
        return jsonify({"ok": False, "error": "Something went wrong, please try again"}), 500

    # ── Root health check ───────────────────────────────
    @app.route("/health", methods=["GET"])
    def health_root():
        return {"status": "ok", "service": "DanceUp Studio Dashboard"}, 200

    return app
