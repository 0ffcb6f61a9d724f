from __future__ import annotations

import logging
import uuid

from ..errors import RoomFull, RoomNotFound
from .models import GameState, Player, Room

logger = logging.getLogger(__name__)


class PlayerDirectory:
    """Live connections (socket ids) to player records."""

    def __init__(self) -> None:
        self._players: dict[str, Player] = {}

    def register(self, sid: str, uid: str, username: str) -> Player:
        player = self._players.get(sid)
        if player is None:
            player = Player(id=sid, uid=uid, username=username)
            self._players[sid] = player
        else:
            player.uid = uid
            player.username = username
        return player

    def get(self, sid: str) -> Player | None:
        return self._players.get(sid)

    def remove(self, sid: str) -> Player | None:
        return self._players.pop(sid, None)

    def __contains__(self, sid: str) -> bool:
        return sid in self._players

    def __len__(self) -> int:
        return len(self._players)


class RoomRegistry:
    """Room ids to rooms. Membership changes keep ``Player.room_id`` in sync."""

    def __init__(self, capacity: int = 8, total_rounds: int = 10) -> None:
        self._rooms: dict[str, Room] = {}
        self.capacity = capacity
        self.total_rounds = total_rounds

    def create(self, owner: Player, name: str = "") -> Room:
        room_id = uuid.uuid4().hex
        while room_id in self._rooms:
            room_id = uuid.uuid4().hex

        room = Room(
            id=room_id,
            name=(name or "").strip() or f"Room {room_id[:4]}",
            max_players=self.capacity,
            game_state=GameState(total_rounds=self.total_rounds),
        )
        self._rooms[room_id] = room
        self.add_member(room, owner)
        logger.info("Room created: %s (%s) by %s", room.name, room.id, owner.username)
        return room

    def get(self, room_id: str | None) -> Room | None:
        if not room_id:
            return None
        return self._rooms.get(room_id)

    def require(self, room_id: str | None) -> Room:
        room = self.get(room_id)
        if room is None:
            raise RoomNotFound()
        return room

    def list(self) -> list[Room]:
        return list(self._rooms.values())

    def add_member(self, room: Room, player: Player) -> None:
        if room.has_player(player.id):
            return
        if room.is_full:
            raise RoomFull()
        room.players.append(player)
        player.room_id = room.id

    def remove_member(self, room: Room, player: Player) -> None:
        room.players = [p for p in room.players if p.id != player.id]
        room.game_state.correctly_guessed.discard(player.id)
        player.room_id = None
        player.is_drawer = False

    def destroy(self, room_id: str) -> Room | None:
        """Unregister a room and cancel everything still scheduled for it."""
        room = self._rooms.pop(room_id, None)
        if room is None:
            return None
        for handle in (room.timer_task, room.advance_task):
            if handle is not None:
                handle.cancel()
        room.timer_task = None
        room.advance_task = None
        logger.info("Room deleted (empty): %s", room_id)
        return room

    def __contains__(self, room_id: str) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)
