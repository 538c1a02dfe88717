# danceup/blobs_router.py
import os
import logging
from flask import Blueprint, send_file

from .errors import NotFoundError
from .web import services

bp = Blueprint("blobs_bp", __name__)
log = logging.getLogger(__name__)


# Public like the managed-storage download URLs it stands in for.
@bp.route("/blobs/<path:path>", methods=["GET"])
def download(path):
    full = services().blobs.resolve(path)
    if not os.path.isfile(full):
        raise NotFoundError("Image not found")
    return send_file(full)
