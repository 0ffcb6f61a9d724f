from __future__ import annotations

import logging
import random
from threading import RLock
from typing import Sequence

from ..errors import GameInProgress, NotEnoughPlayers
from .guess import initial_reveal
from .models import GAME_OVER, PLAYING, ROUND_END, Player, Room
from .registry import RoomRegistry
from .timer import RoundTimer, Scheduler
from .words import pick_word

logger = logging.getLogger(__name__)


class RoundStateMachine:
    """LOBBY -> PLAYING -> ROUND_END -> PLAYING | GAME_OVER.

    Callers hold ``lock`` for every public method; the timer and the delayed
    round advance acquire it themselves.
    """

    def __init__(
        self,
        registry: RoomRegistry,
        publisher,
        scheduler: Scheduler,
        lock: RLock,
        settlement,
        *,
        round_duration: int = 60,
        total_rounds: int = 10,
        round_end_delay: float = 5,
        tick_interval: float = 1.0,
        min_players: int = 2,
        words: Sequence[str] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._registry = registry
        self._publisher = publisher
        self._scheduler = scheduler
        self._lock = lock
        self._settlement = settlement
        self.round_duration = round_duration
        self.total_rounds = total_rounds
        self.round_end_delay = round_end_delay
        self.min_players = min_players
        self._words = words
        self._rng = rng or random.Random()
        self.timer = RoundTimer(
            scheduler,
            publisher,
            lock,
            registry.get,
            self.end_round,
            interval=tick_interval,
        )

    def start_game(self, room: Room) -> None:
        if len(room.players) < self.min_players:
            raise NotEnoughPlayers()
        if room.game_state.phase in (PLAYING, ROUND_END):
            raise GameInProgress()

        self._cancel_advance(room)
        gs = room.game_state
        gs.total_rounds = self.total_rounds
        gs.current_round = 1
        for p in room.players:
            p.score = 0
            p.session_coins = 0

        logger.info("Game started in room %s with %d players", room.id, len(room.players))
        self.start_round(room)

    def start_round(self, room: Room) -> None:
        gs = room.game_state
        gs.phase = PLAYING
        gs.timer = self.round_duration
        gs.correctly_guessed = set()
        gs.round_token += 1

        drawer = self._pick_drawer(room)
        for p in room.players:
            p.is_drawer = False
        drawer.is_drawer = True
        gs.current_drawer = drawer.id

        word = pick_word(self._words, self._rng)
        gs.current_word = word
        gs.revealed_word = initial_reveal(word)

        self._cancel_advance(room)
        self.timer.start(room)

        logger.info(
            "Round %d/%d started in room %s, drawer %s",
            gs.current_round,
            gs.total_rounds,
            room.id,
            drawer.username,
        )
        self._publisher.room_state(room)

    def _pick_drawer(self, room: Room) -> Player:
        candidates = room.players
        previous = room.game_state.current_drawer
        if len(room.players) > 1 and previous:
            candidates = [p for p in room.players if p.id != previous]
        return self._rng.choice(candidates)

    def end_round(self, room: Room) -> bool:
        """End the current round. Runs at most once per round; returns False if it was a no-op."""
        gs = room.game_state
        if gs.phase != PLAYING:
            return False

        self.timer.cancel(room)
        gs.phase = ROUND_END
        for p in room.players:
            p.is_drawer = False

        logger.info("Round %d ended in room %s", gs.current_round, room.id)
        self._publisher.system_message(room, f"The word was {gs.current_word}")
        self._publisher.room_state(room)
        self._schedule_advance(room)
        return True

    def end_round_if_complete(self, room: Room) -> bool:
        gs = room.game_state
        if gs.phase != PLAYING:
            return False
        guessers = room.guessers()
        if guessers and all(p.id in gs.correctly_guessed for p in guessers):
            return self.end_round(room)
        return False

    def abandon_round(self, room: Room) -> bool:
        """The drawer left: drop the word and let the room move on."""
        gs = room.game_state
        gs.current_drawer = None
        if gs.phase != PLAYING:
            return False

        self.timer.cancel(room)
        gs.phase = ROUND_END
        for p in room.players:
            p.is_drawer = False

        logger.info("Drawer left room %s during round %d", room.id, gs.current_round)
        self._publisher.system_message(room, f"The drawer left. The word was {gs.current_word}")
        self._schedule_advance(room)
        return True

    def end_game(self, room: Room) -> None:
        gs = room.game_state
        gs.phase = GAME_OVER
        gs.timer = 0
        for p in room.players:
            p.is_drawer = False

        logger.info("Game over in room %s", room.id)
        self._publisher.room_state(room)
        self._settlement.settle(room)

    def _schedule_advance(self, room: Room) -> None:
        self._cancel_advance(room)
        token = room.game_state.round_token
        room.advance_task = self._scheduler.call_later(
            self.round_end_delay,
            self._advance,
            room.id,
            token,
            name=f"advance:{room.id}:{token}",
        )

    @staticmethod
    def _cancel_advance(room: Room) -> None:
        if room.advance_task is not None:
            room.advance_task.cancel()
            room.advance_task = None

    def _advance(self, room_id: str, token: int) -> None:
        with self._lock:
            room = self._registry.get(room_id)
            if room is None:
                return
            gs = room.game_state
            if gs.phase != ROUND_END or gs.round_token != token:
                return

            room.advance_task = None
            if gs.current_round < gs.total_rounds:
                gs.current_round += 1
                self.start_round(room)
            else:
                self.end_game(room)
