from __future__ import annotations

import logging

from .models import PLACEHOLDER, ChatMessage, Player, Room

logger = logging.getLogger(__name__)

GUESSER_COINS = 5
GUESSER_POINTS = 100
DRAWER_COINS = 2
DRAWER_POINTS = 50


def initial_reveal(word: str) -> str:
    return PLACEHOLDER * len(word)


def reveal_matches(word: str, guess: str, revealed: str) -> str:
    """Reveal every hidden position where ``guess`` has the same letter as ``word``.

    Comparison is positional and case-insensitive; only positions present in
    both strings are compared. Revealed positions take the word's own casing
    and are never hidden again.
    """
    chars = list(revealed)
    for i, (expected, actual) in enumerate(zip(word, guess)):
        if chars[i] == PLACEHOLDER and actual.lower() == expected.lower():
            chars[i] = expected
    return "".join(chars)


def is_exact_guess(word: str, text: str) -> bool:
    guess = text.strip()
    return bool(guess) and guess.lower() == word.lower()


class GuessEngine:
    """Classifies chat text during a round: correct guess, hint or plain chat."""

    def __init__(self, publisher, rounds) -> None:
        self._publisher = publisher
        self._rounds = rounds

    def handle_message(self, room: Room, player: Player, text: str) -> ChatMessage | None:
        """Evaluate ``text`` from ``player`` against the current word.

        Returns the chat message to broadcast, or None when the text was a
        correct guess (announced as a system message instead, so the word is
        never echoed to the room).
        """
        gs = room.game_state
        word = gs.current_word
        if not word:
            return ChatMessage(player_id=player.id, username=player.username, text=text)

        can_score = player.id != gs.current_drawer and player.id not in gs.correctly_guessed

        if can_score and is_exact_guess(word, text):
            self._record_correct_guess(room, player)
            return None

        if can_score:
            revealed = reveal_matches(word, text.strip(), gs.revealed_word)
            if revealed != gs.revealed_word:
                gs.revealed_word = revealed
                self._publisher.room_state(room)

        return ChatMessage(player_id=player.id, username=player.username, text=text)

    def _record_correct_guess(self, room: Room, player: Player) -> None:
        gs = room.game_state
        gs.correctly_guessed.add(player.id)

        player.session_coins += GUESSER_COINS
        player.score += GUESSER_POINTS

        drawer = room.find_player(gs.current_drawer)
        if drawer is not None:
            drawer.session_coins += DRAWER_COINS
            drawer.score += DRAWER_POINTS

        logger.info("%s guessed the word in room %s", player.username, room.id)

        announcement = ChatMessage.system(
            f"{player.username} guessed the word! (+{GUESSER_COINS} Coins)",
            type="guess",
        )
        self._publisher.chat_message(room, announcement)
        self._publisher.room_state(room)

        # Must run before the lock is released so a timer tick cannot end the round twice.
        self._rounds.end_round_if_complete(room)
