from __future__ import annotations

from .models import GAME_OVER, ROUND_END, Player, Room


def player_public_state(player: Player) -> dict:
    return {
        "id": player.id,
        "uid": player.uid,
        "username": player.username,
        "score": player.score,
        "sessionCoins": player.session_coins,
        "isDrawer": player.is_drawer,
    }


def room_summary(room: Room) -> dict:
    return {
        "id": room.id,
        "name": room.name,
        "maxPlayers": room.max_players,
        "currentPlayers": len(room.players),
    }


def room_public_state(room: Room, viewer_id: str | None = None) -> dict:
    """Serialize a room for clients.

    The secret word is only included for the current drawer, or for everybody
    once the round is over.
    """
    gs = room.game_state
    game_state = {
        "phase": gs.phase,
        "timer": gs.timer,
        "currentRound": gs.current_round,
        "totalRounds": gs.total_rounds,
        "currentDrawer": gs.current_drawer,
        "revealedWord": gs.revealed_word,
        "correctlyGuessedPlayerIds": [p.id for p in room.players if p.id in gs.correctly_guessed],
    }

    if gs.current_word and gs.phase in (ROUND_END, GAME_OVER):
        game_state["currentWord"] = gs.current_word

    if viewer_id and viewer_id == gs.current_drawer and gs.current_word:
        game_state["currentWord"] = gs.current_word

    return {
        "id": room.id,
        "name": room.name,
        "maxPlayers": room.max_players,
        "players": [player_public_state(p) for p in room.players],
        "gameState": game_state,
    }
