from __future__ import annotations

from typing import Iterable

from flask_socketio import SocketIO

from ..errors import GameError
from ..game.models import PLAYING, ChatMessage, Room
from ..game.snapshots import room_public_state, room_summary

NAMESPACE = "/"

# Client -> server
LOGIN = "login"
CREATE_ROOM = "create_room"
JOIN_ROOM = "join_room"
LEAVE_ROOM = "leave_room"
START_GAME = "start_game"
SEND_MESSAGE = "send_message"
DRAW_STROKE = "draw_stroke"
CLEAR_CANVAS = "clear_canvas"

# Server -> client
ROOM_STATE = "room_state"
ROOMS_UPDATE = "rooms_update"
TIMER_UPDATE = "timer_update"
CHAT_MESSAGE = "chat_message"
SYSTEM_MESSAGE = "system_message"
GAME_ENDED = "game_ended"
PROFILE_UPDATE = "profile_update"
ERROR = "error"


class Publisher:
    """Fan-out of game events onto Socket.IO rooms.

    Every game room maps to a Socket.IO room of the same id; each connection
    is also implicitly subscribed to a room named after its sid.
    """

    def __init__(self, socketio: SocketIO) -> None:
        self._socketio = socketio

    def _emit(self, event: str, payload, to: str | None = None) -> None:
        if to is None:
            self._socketio.emit(event, payload, namespace=NAMESPACE)
        else:
            self._socketio.emit(event, payload, to=to, namespace=NAMESPACE)

    def subscribe(self, sid: str, room_id: str) -> None:
        self._socketio.server.enter_room(sid, room_id, namespace=NAMESPACE)

    def unsubscribe(self, sid: str, room_id: str) -> None:
        self._socketio.server.leave_room(sid, room_id, namespace=NAMESPACE)

    def room_state(self, room: Room) -> None:
        self._emit(ROOM_STATE, room_public_state(room), to=room.id)

        drawer_id = room.game_state.current_drawer
        if room.game_state.phase == PLAYING and drawer_id:
            self._emit(ROOM_STATE, room_public_state(room, viewer_id=drawer_id), to=drawer_id)

    def rooms_update(self, rooms: Iterable[Room], to: str | None = None) -> None:
        self._emit(ROOMS_UPDATE, [room_summary(r) for r in rooms], to=to)

    def timer_update(self, room: Room) -> None:
        self._emit(TIMER_UPDATE, room.game_state.timer, to=room.id)

    def chat_message(self, room: Room, message: ChatMessage) -> None:
        self._emit(CHAT_MESSAGE, message.to_dict(), to=room.id)

    def system_message(self, room: Room, text: str) -> None:
        self._emit(SYSTEM_MESSAGE, text, to=room.id)

    def game_ended(self, player_id: str, result: dict) -> None:
        self._emit(GAME_ENDED, result, to=player_id)

    def profile_update(self, player_id: str, profile: dict) -> None:
        self._emit(PROFILE_UPDATE, {"coins": profile.get("coins"), "xp": profile.get("xp")}, to=player_id)

    def error(self, sid: str, exc: GameError) -> None:
        self._emit(ERROR, exc.to_payload(), to=sid)
