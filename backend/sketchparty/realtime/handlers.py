from __future__ import annotations

import logging
from typing import Any

from flask import request
from flask_socketio import SocketIO, emit

from ..errors import GameError, StoreUnavailable
from ..game.service import GameService
from . import events

logger = logging.getLogger(__name__)


def _field(data: Any, key: str, strip: bool = True) -> str:
    # Single-argument events may arrive as a bare string.
    if isinstance(data, str):
        value = data
    elif isinstance(data, dict):
        value = data.get(key) or ""
    else:
        value = ""
    value = str(value)
    return value.strip() if strip else value


def _validate_name(name: str) -> bool:
    n = (name or "").strip()
    if not n:
        return False
    if len(n) > 32:
        return False
    # Avoid obvious HTML/script injection.
    if "<" in n or ">" in n:
        return False
    # No control characters.
    for ch in n:
        if ord(ch) < 32:
            return False
    return True


def register_socketio_handlers(socketio: SocketIO, service: GameService) -> None:
    def _reject(exc: GameError) -> dict:
        emit(events.ERROR, exc.to_payload())
        return {"ok": False, "error": exc.code}

    def _invalid(code: str) -> dict:
        emit(events.ERROR, {"error": code, "message": code.replace("_", " ")})
        return {"ok": False, "error": code}

    @socketio.on("connect")
    def on_connect(auth=None):
        logger.debug("Client connected: %s", request.sid)

    @socketio.on(events.LOGIN)
    def on_login(data):
        uid = _field(data, "uid")
        username = _field(data, "username")
        if not uid or not _validate_name(username):
            return _invalid("invalid_payload")

        try:
            profile = service.login(request.sid, uid, username)
        except StoreUnavailable as exc:
            logger.exception("Profile lookup failed for %s", uid)
            return _reject(exc)
        return {"ok": True, "profile": profile}

    @socketio.on(events.CREATE_ROOM)
    def on_create_room(data=None):
        name = _field(data, "name")
        if name and len(name) > 48:
            return _invalid("invalid_name")

        try:
            room = service.create_room(request.sid, name)
        except GameError as exc:
            return _reject(exc)
        return {"ok": True, "roomId": room.id}

    @socketio.on(events.JOIN_ROOM)
    def on_join_room(data):
        room_id = _field(data, "roomId")
        if not room_id:
            return _invalid("invalid_room")

        try:
            room = service.join_room(request.sid, room_id)
        except GameError as exc:
            return _reject(exc)
        return {"ok": True, "roomId": room.id}

    @socketio.on(events.LEAVE_ROOM)
    def on_leave_room(data=None):
        left = service.leave_room(request.sid)
        return {"ok": left}

    @socketio.on(events.START_GAME)
    def on_start_game(data=None):
        try:
            service.start_game(request.sid)
        except GameError as exc:
            return _reject(exc)
        return {"ok": True}

    @socketio.on(events.SEND_MESSAGE)
    def on_send_message(data):
        text = _field(data, "text", strip=False)
        if not text.strip():
            return {"ok": False, "error": "empty_message"}

        try:
            service.send_message(request.sid, text)
        except GameError as exc:
            return _reject(exc)
        return {"ok": True}

    @socketio.on(events.DRAW_STROKE)
    def on_draw_stroke(data):
        room_id = service.drawing_room(request.sid)
        if room_id:
            emit(events.DRAW_STROKE, data, to=room_id, include_self=False)

    @socketio.on(events.CLEAR_CANVAS)
    def on_clear_canvas(data=None):
        room_id = service.drawing_room(request.sid)
        if room_id:
            emit(events.CLEAR_CANVAS, to=room_id, include_self=False)

    @socketio.on("disconnect")
    def on_disconnect(reason=None):
        service.disconnect(request.sid)
