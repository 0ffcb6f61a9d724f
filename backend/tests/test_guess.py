from sketchparty.game.guess import is_exact_guess, reveal_matches
from sketchparty.game.models import PLAYING, ROUND_END


def _drawer_and_guessers(room):
    drawer = room.find_player(room.game_state.current_drawer)
    return drawer, room.guessers()


def test_reveal_matches_positional():
    assert reveal_matches("Apple", "xpple", "_____") == "_pple"


def test_reveal_keeps_answer_casing():
    assert reveal_matches("Apple", "aXXXX", "_____") == "A____"


def test_reveal_is_monotonic():
    revealed = reveal_matches("Apple", "xpple", "_____")
    assert reveal_matches("Apple", "zzzzz", revealed) == "_pple"
    assert reveal_matches("Apple", "Azzzz", revealed) == "Apple"


def test_reveal_short_and_long_guesses():
    assert reveal_matches("Apple", "ap", "_____") == "Ap___"
    assert reveal_matches("Apple", "xxxxeTOOLONG", "_____") == "____e"
    assert reveal_matches("Apple", "", "_____") == "_____"


def test_is_exact_guess_trims_and_ignores_case():
    assert is_exact_guess("Apple", "  aPPle ")
    assert not is_exact_guess("Apple", "apples")
    assert not is_exact_guess("Apple", "   ")


def test_correct_guess_scores_guesser_and_drawer(service, playing_room, sio):
    drawer, (guesser, _other) = _drawer_and_guessers(playing_room)

    result = service.send_message(guesser.id, "apple")

    assert result is None
    assert guesser.score == 100
    assert guesser.session_coins == 5
    assert drawer.score == 50
    assert drawer.session_coins == 2
    assert playing_room.game_state.correctly_guessed == {guesser.id}


def test_correct_guess_is_announced_without_echoing_the_word(service, playing_room, sio):
    _drawer, (guesser, _other) = _drawer_and_guessers(playing_room)
    sio.clear()

    service.send_message(guesser.id, "apple")

    chats = sio.events("chat_message", to=playing_room.id)
    assert len(chats) == 1
    assert chats[0].payload["playerId"] == "system"
    assert chats[0].payload["type"] == "guess"
    assert "apple" not in chats[0].payload["text"].lower()


def test_repeated_guess_counts_once_and_becomes_chat(service, playing_room):
    drawer, (guesser, _other) = _drawer_and_guessers(playing_room)

    service.send_message(guesser.id, "apple")
    again = service.send_message(guesser.id, "Apple")

    assert again is not None
    assert again.type == "chat"
    assert guesser.score == 100
    assert drawer.score == 50
    assert list(playing_room.game_state.correctly_guessed).count(guesser.id) == 1


def test_drawer_cannot_score_or_reveal(service, playing_room):
    drawer, _ = _drawer_and_guessers(playing_room)

    message = service.send_message(drawer.id, "apple")

    assert message is not None
    assert message.type == "chat"
    assert drawer.score == 0
    assert playing_room.game_state.correctly_guessed == set()
    assert playing_room.game_state.revealed_word == "_____"


def test_partial_guess_reveals_and_is_still_chat(service, playing_room, sio):
    _drawer, (guesser, _other) = _drawer_and_guessers(playing_room)
    sio.clear()

    message = service.send_message(guesser.id, "xpple")

    assert message.text == "xpple"
    assert playing_room.game_state.revealed_word == "_pple"
    assert sio.events("room_state", to=playing_room.id)
    assert [c.payload["text"] for c in sio.events("chat_message")] == ["xpple"]


def test_miss_does_not_broadcast_state(service, playing_room, sio):
    _drawer, (guesser, _other) = _drawer_and_guessers(playing_room)
    sio.clear()

    service.send_message(guesser.id, "zzz")

    assert sio.events("room_state") == []
    assert playing_room.game_state.revealed_word == "_____"


def test_revealed_word_tracks_word_length(service, playing_room):
    _drawer, (guesser, other) = _drawer_and_guessers(playing_room)
    gs = playing_room.game_state

    for text in ("a", "xpple", "banana split", "  ", "APPLE!"):
        service.send_message(other.id, text)
        assert len(gs.revealed_word) == len(gs.current_word)


def test_guessed_player_cannot_reveal_more(service, playing_room):
    _drawer, (guesser, _other) = _drawer_and_guessers(playing_room)

    service.send_message(guesser.id, "apple")
    service.send_message(guesser.id, "xpple")

    assert playing_room.game_state.revealed_word == "_____"


def test_everyone_guessing_ends_round_early(service, playing_room, scheduler):
    drawer, (first, second) = _drawer_and_guessers(playing_room)

    service.send_message(first.id, "apple")
    assert playing_room.game_state.phase == PLAYING

    scheduler.advance(10)
    service.send_message(second.id, "APPLE")

    assert playing_room.game_state.phase == ROUND_END
    assert playing_room.game_state.timer == 50
    assert drawer.score == 100
