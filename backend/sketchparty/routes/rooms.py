from __future__ import annotations

from flask import Blueprint, current_app, jsonify

bp = Blueprint("rooms", __name__)


def _service():
    return current_app.extensions["sketchparty"]


@bp.get("/rooms")
def list_rooms():
    return jsonify({"rooms": _service().list_rooms()})


@bp.get("/rooms/<room_id>")
def get_room(room_id: str):
    state = _service().room_snapshot(room_id)
    if state is None:
        return jsonify({"error": "room_not_found"}), 404
    return jsonify(state)
