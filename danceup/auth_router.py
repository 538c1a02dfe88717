"""
auth_router.py – Sign-up / login / logout
────────────────────────────────────────────
 • POST /auth/signup  → create account + studio profile (JSON or multipart with `image`)
 • POST /auth/login   → token for an existing account
 • POST /auth/logout  → void all tokens, close the owner's schedule feed
 • GET  /auth/me      → the current session + profile
────────────────────────────────────────────
"""

import logging
from flask import Blueprint, g, jsonify, session

from .editors import ProfileEditor
from .errors import NotFoundError
from .web import editor, form_payload, image_upload, login_required, services

bp = Blueprint("auth_bp", __name__)
log = logging.getLogger(__name__)


@bp.route("/auth/signup", methods=["POST"])
def signup():
    data = form_payload()
    owner = services().auth.sign_up(
        email=data.get("email", ""),
        password=data.get("password", ""),
        confirm_password=data.get("confirm_password", ""),
        profile=data,
        image=image_upload(),
    )
    session["token"] = owner.token
    g.owner = owner
    profile = editor(ProfileEditor).load().to_dict()
    return jsonify({
        "ok": True,
        "token": owner.token,
        "uid": owner.uid,
        "profile": profile,
        "redirect": "/dashboard",
    }), 201


@bp.route("/auth/login", methods=["POST"])
def login():
    data = form_payload()
    owner = services().auth.sign_in(data.get("email", ""), data.get("password", ""))
    session["token"] = owner.token
    return jsonify({"ok": True, "token": owner.token, "uid": owner.uid, "redirect": "/dashboard"})


@bp.route("/auth/logout", methods=["POST"])
@login_required
def logout():
    svc = services()
    svc.auth.sign_out(g.owner)
    svc.feeds.close(g.owner.uid)
    session.clear()
    return jsonify({"ok": True, "redirect": "/login"})


@bp.route("/auth/me", methods=["GET"])
@login_required
def me():
    try:
        profile = editor(ProfileEditor).load().to_dict()
    except NotFoundError:
        profile = None
    return jsonify({
        "ok": True,
        "uid": g.owner.uid,
        "email": g.owner.email,
        "display_name": g.owner.display_name,
        "profile": profile,
    })
