from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from .timer import TaskHandle


GamePhase = Literal["LOBBY", "PLAYING", "ROUND_END", "GAME_OVER"]

LOBBY: GamePhase = "LOBBY"
PLAYING: GamePhase = "PLAYING"
ROUND_END: GamePhase = "ROUND_END"
GAME_OVER: GamePhase = "GAME_OVER"

MessageType = Literal["chat", "system", "guess"]

PLACEHOLDER = "_"
SYSTEM_ID = "system"
SYSTEM_NAME = "System"


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Player:
    id: str
    uid: str
    username: str
    score: int = 0
    session_coins: int = 0
    is_drawer: bool = False
    room_id: str | None = None


@dataclass
class GameState:
    phase: GamePhase = LOBBY
    current_round: int = 0
    total_rounds: int = 10
    timer: int = 0
    current_drawer: str | None = None
    current_word: str | None = None
    revealed_word: str = ""
    correctly_guessed: set[str] = field(default_factory=set)
    # Bumped on every round start; callbacks holding an older value are stale.
    round_token: int = 0


@dataclass
class Room:
    id: str
    name: str
    max_players: int = 8
    players: list[Player] = field(default_factory=list)
    game_state: GameState = field(default_factory=GameState)
    timer_task: TaskHandle | None = None
    advance_task: TaskHandle | None = None

    def find_player(self, player_id: str | None) -> Player | None:
        if player_id is None:
            return None
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def has_player(self, player_id: str) -> bool:
        return self.find_player(player_id) is not None

    @property
    def is_full(self) -> bool:
        return len(self.players) >= self.max_players

    def guessers(self) -> list[Player]:
        return [p for p in self.players if p.id != self.game_state.current_drawer]


@dataclass
class ChatMessage:
    player_id: str
    username: str
    text: str
    type: MessageType = "chat"
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: int = field(default_factory=now_ms)

    @classmethod
    def system(cls, text: str, type: MessageType = "system") -> ChatMessage:
        return cls(player_id=SYSTEM_ID, username=SYSTEM_NAME, text=text, type=type)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "playerId": self.player_id,
            "username": self.username,
            "text": self.text,
            "type": self.type,
            "timestamp": self.timestamp,
        }
