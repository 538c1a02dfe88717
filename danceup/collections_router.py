"""
collections_router.py – CRUD endpoints for classes, events, workshops, packages
────────────────────────────────────────────────────────────
Each collection gets the same shape:

 • GET    /<name>               → list the owner's entries
 • POST   /<name>               → create
 • GET    /<name>/<id>          → one entry
 • PUT    /<name>/<id>          → update (multipart `image` / `remove_image` where supported)
 • DELETE /<name>/<id>          → delete (+ image cleanup)
 • POST   /<name>/<id>/toggle   → flip is_active (classes, packages)
────────────────────────────────────────────────────────────
"""

import logging
from flask import Blueprint, jsonify

from .editors import ClassEditor, EventEditor, PackageEditor, WorkshopEditor
from .web import editor, form_payload, image_upload, login_required, truthy

log = logging.getLogger(__name__)


def make_collection_bp(name: str, editor_cls, key: str, toggle: bool = False) -> Blueprint:
    bp = Blueprint(f"{name}_bp", __name__)

    @bp.route(f"/{name}", methods=["GET"])
    @login_required
    def list_entries():
        entries = editor(editor_cls).list()
        return jsonify({"ok": True, name: [e.to_dict() for e in entries]})

    @bp.route(f"/{name}", methods=["POST"])
    @login_required
    def create_entry():
        entry = editor(editor_cls).save(form_payload(), image=image_upload())
        return jsonify({"ok": True, key: entry.to_dict()}), 201

    @bp.route(f"/{name}/<doc_id>", methods=["GET"])
    @login_required
    def get_entry(doc_id):
        return jsonify({"ok": True, key: editor(editor_cls).get(doc_id).to_dict()})

    @bp.route(f"/{name}/<doc_id>", methods=["PUT"])
    @login_required
    def update_entry(doc_id):
        data = form_payload()
        entry = editor(editor_cls).save(
            data,
            doc_id=doc_id,
            image=image_upload(),
            remove_image=truthy(data.get("remove_image", False)),
        )
        return jsonify({"ok": True, key: entry.to_dict()})

    @bp.route(f"/{name}/<doc_id>", methods=["DELETE"])
    @login_required
    def delete_entry(doc_id):
        editor(editor_cls).delete(doc_id)
        return jsonify({"ok": True, "deleted": doc_id})

    if toggle:
        @bp.route(f"/{name}/<doc_id>/toggle", methods=["POST"])
        @login_required
        def toggle_entry(doc_id):
            entry = editor(editor_cls).toggle_active(doc_id)
            return jsonify({"ok": True, key: entry.to_dict()})

    return bp


classes_bp = make_collection_bp("classes", ClassEditor, "class", toggle=True)
events_bp = make_collection_bp("events", EventEditor, "event")
workshops_bp = make_collection_bp("workshops", WorkshopEditor, "workshop")
packages_bp = make_collection_bp("packages", PackageEditor, "package", toggle=True)

ALL = (classes_bp, events_bp, workshops_bp, packages_bp)
