from __future__ import annotations

import logging
import random
from threading import RLock
from typing import Any, Mapping, Sequence

from ..errors import NotInRoom, NotLoggedIn, RoomFull
from .guess import GuessEngine
from .models import PLAYING, ChatMessage, Player, Room
from .registry import PlayerDirectory, RoomRegistry
from .rounds import RoundStateMachine
from .settlement import GameSettlement
from .snapshots import room_public_state, room_summary
from .timer import Scheduler

logger = logging.getLogger(__name__)


class GameService:
    """Entry point for everything the transport layer may do to game state.

    All room and player mutations happen under one re-entrant lock, so a
    multi-step change (record guess, check completion, end round) is never
    observed half-done by a timer tick or another connection.
    """

    def __init__(
        self,
        publisher,
        scheduler: Scheduler,
        profiles,
        config: Mapping[str, Any] | None = None,
        *,
        words: Sequence[str] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        cfg = config or {}
        self.lock = RLock()
        self.publisher = publisher
        self.profiles = profiles
        self.players = PlayerDirectory()
        self.rooms = RoomRegistry(
            capacity=int(cfg.get("ROOM_CAPACITY", 8)),
            total_rounds=int(cfg.get("TOTAL_ROUNDS", 10)),
        )
        self.settlement = GameSettlement(publisher, scheduler, profiles, self.players, self.lock)
        self.rounds = RoundStateMachine(
            self.rooms,
            publisher,
            scheduler,
            self.lock,
            self.settlement,
            round_duration=int(cfg.get("ROUND_DURATION_SEC", 60)),
            total_rounds=int(cfg.get("TOTAL_ROUNDS", 10)),
            round_end_delay=float(cfg.get("ROUND_END_DELAY_SEC", 5)),
            tick_interval=float(cfg.get("TICK_INTERVAL_SEC", 1)),
            min_players=int(cfg.get("MIN_PLAYERS", 2)),
            words=words,
            rng=rng,
        )
        self.guesses = GuessEngine(publisher, self.rounds)

    # -- lookups -------------------------------------------------------

    def _require_player(self, sid: str) -> Player:
        player = self.players.get(sid)
        if player is None:
            raise NotLoggedIn()
        return player

    def _require_room(self, player: Player) -> Room:
        room = self.rooms.get(player.room_id)
        if room is None:
            raise NotInRoom()
        return room

    def list_rooms(self) -> list[dict]:
        with self.lock:
            return [room_summary(r) for r in self.rooms.list()]

    def room_snapshot(self, room_id: str, viewer_id: str | None = None) -> dict | None:
        with self.lock:
            room = self.rooms.get(room_id)
            if room is None:
                return None
            return room_public_state(room, viewer_id=viewer_id)

    # -- connection lifecycle -----------------------------------------

    def login(self, sid: str, uid: str, username: str) -> dict:
        """Register the connection, then load (or create) the persistent profile."""
        with self.lock:
            player = self.players.register(sid, uid, username)
            logger.info("User logged in: %s (%s)", player.username, sid)
            self.publisher.rooms_update(self.rooms.list(), to=sid)

        # Store access happens outside the lock.
        profile = self.profiles.find_or_create(uid, username)
        with self.lock:
            if sid in self.players:
                self.publisher.profile_update(sid, profile)
        return profile

    def disconnect(self, sid: str) -> None:
        with self.lock:
            player = self.players.get(sid)
            if player is None:
                return
            if player.room_id:
                self._leave(player)
            self.players.remove(sid)
            logger.info("Client disconnected: %s", sid)

    # -- rooms ---------------------------------------------------------

    def create_room(self, sid: str, name: str = "") -> Room:
        with self.lock:
            player = self._require_player(sid)
            if player.room_id:
                self._leave(player)

            room = self.rooms.create(player, name)
            self.publisher.subscribe(sid, room.id)
            self.publisher.rooms_update(self.rooms.list())
            self.publisher.room_state(room)
            return room

    def join_room(self, sid: str, room_id: str) -> Room:
        with self.lock:
            player = self._require_player(sid)
            room = self.rooms.require(room_id)
            if room.has_player(sid):
                self.publisher.room_state(room)
                return room
            if room.is_full:
                raise RoomFull()

            if player.room_id:
                self._leave(player)

            self.rooms.add_member(room, player)
            self.publisher.subscribe(sid, room.id)
            logger.info("%s joined room %s", player.username, room.id)
            self.publisher.room_state(room)
            self.publisher.rooms_update(self.rooms.list())
            return room

    def leave_room(self, sid: str) -> bool:
        with self.lock:
            player = self.players.get(sid)
            if player is None or not player.room_id:
                return False
            self._leave(player)
            return True

    def _leave(self, player: Player) -> None:
        room = self.rooms.get(player.room_id)
        if room is None:
            player.room_id = None
            return

        was_drawer = room.game_state.current_drawer == player.id
        self.rooms.remove_member(room, player)
        self.publisher.unsubscribe(player.id, room.id)
        logger.info("%s left room %s", player.username, room.id)

        if not room.players:
            self.rooms.destroy(room.id)
        else:
            if was_drawer:
                self.rounds.abandon_round(room)
            else:
                self.rounds.end_round_if_complete(room)
            self.publisher.room_state(room)

        self.publisher.rooms_update(self.rooms.list())

    # -- game ----------------------------------------------------------

    def start_game(self, sid: str) -> Room:
        with self.lock:
            player = self._require_player(sid)
            room = self._require_room(player)
            self.rounds.start_game(room)
            return room

    def send_message(self, sid: str, text: str) -> ChatMessage | None:
        with self.lock:
            player = self._require_player(sid)
            room = self._require_room(player)

            if room.game_state.phase == PLAYING:
                message = self.guesses.handle_message(room, player, text)
            else:
                message = ChatMessage(player_id=player.id, username=player.username, text=text)

            if message is not None:
                self.publisher.chat_message(room, message)
            return message

    def drawing_room(self, sid: str) -> str | None:
        """Room id the sender may relay strokes to (drawers only), else None."""
        with self.lock:
            player = self.players.get(sid)
            if player is None or not player.room_id or not player.is_drawer:
                return None
            return player.room_id
