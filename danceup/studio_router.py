# danceup/studio_router.py
import logging
from flask import Blueprint, jsonify

from .editors import ProfileEditor
from .web import editor, form_payload, image_upload, login_required, truthy

bp = Blueprint("studio_bp", __name__)
log = logging.getLogger(__name__)


@bp.route("/studio", methods=["GET"])
@login_required
def get_studio():
    profile = editor(ProfileEditor).load()
    return jsonify({"ok": True, "studio": profile.to_dict()})


@bp.route("/studio", methods=["PUT", "POST"])
@login_required
def update_studio():
    data = form_payload()
    profile = editor(ProfileEditor).save(
        data,
        image=image_upload(),
        remove_image=truthy(data.get("remove_image", False)),
    )
    return jsonify({
        "ok": True,
        "studio": profile.to_dict(),
        "message": "Studio information updated successfully!",
    })
