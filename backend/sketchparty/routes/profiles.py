from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from ..errors import StoreUnavailable

bp = Blueprint("profiles", __name__)


@bp.get("/profiles/<uid>")
def get_profile(uid: str):
    store = current_app.extensions["sketchparty"].profiles
    try:
        profile = store.get(uid)
    except StoreUnavailable:
        current_app.logger.exception("Profile lookup failed for %s", uid)
        return jsonify({"error": "store_unavailable"}), 503
    if profile is None:
        return jsonify({"error": "profile_not_found"}), 404
    return jsonify(profile)
