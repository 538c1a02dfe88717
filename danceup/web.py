"""
web.py – Shared plumbing for the dashboard blueprints
────────────────────────────────────────────
 • Services       → the store / blobs / auth / feeds wired by create_app()
 • login_required → resolves the caller's token into g.owner (OwnerSession)
 • form_payload() / image_upload() → JSON or multipart request bodies
────────────────────────────────────────────
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import wraps
from typing import Any, Dict, Optional

from flask import current_app, g, jsonify, request, session

from .auth import AuthService
from .blobs import BlobStore, ImageUpload
from .errors import AuthError
from .feed import FeedRegistry
from .store import DocumentStore

log = logging.getLogger(__name__)

LOGIN_URL = "/login"


@dataclass
class Services:
    store: DocumentStore
    blobs: BlobStore
    auth: AuthService
    feeds: FeedRegistry
    max_image_bytes: int


def services() -> Services:
    return current_app.extensions["danceup"]


def editor(editor_cls):
    """Build an editor bound to the signed-in owner."""
    svc = services()
    return editor_cls(g.owner, svc.store, svc.blobs, svc.max_image_bytes)


# ── Auth gate ───────────────────────────────────────────────
def _request_token() -> str:
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip()
    return session.get("token", "")


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            g.owner = services().auth.session_from_token(_request_token())
        except AuthError as e:
            return jsonify({"ok": False, "error": str(e), "redirect": LOGIN_URL}), 401
        return view(*args, **kwargs)
    return wrapper


# ── Request bodies ──────────────────────────────────────────
def form_payload() -> Dict[str, Any]:
    if request.files or request.form:
        data = request.form.to_dict()
        if "class_ids" in request.form:
            data["class_ids"] = request.form.getlist("class_ids")
        return data
    return request.get_json(silent=True) or {}


def image_upload(field: str = "image") -> Optional[ImageUpload]:
    f = request.files.get(field)
    if f is None or not f.filename:
        return None
    return ImageUpload(filename=f.filename, content_type=f.mimetype or "", data=f.read())


def truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)
