"""
Tests for the wire codec.
"""

import json

import pytest

from wordrooms.shared.protocols import (
    AnagramsPostGame,
    ChatMessageAction,
    ConnectionUpdateEvent,
    CountdownInProgress,
    CountdownStopped,
    DecodeError,
    Disconnected,
    GameEndedEvent,
    GameStartedEvent,
    InfoEvent,
    LobbyInfo,
    PracticeSetEvent,
    PracticeSubmissionAction,
    ReadyAction,
    ReadyPlayersEvent,
    RoomSettingsAction,
    RoomSettingsEvent,
    WordBombInfo,
    WordBombPromptEvent,
    decode,
    decode_action,
    encode,
    encode_text,
)


def test_decode_info_translates_wire_names(lobby_info):
    event = decode(json.dumps(lobby_info))
    assert isinstance(event, InfoEvent)
    assert event.self_id == "u1"
    assert event.room.owner_id == "u1"
    assert event.room.settings.game_mode == "WordBomb"
    assert [c.id for c in event.room.clients] == ["u1", "u2"]
    assert isinstance(event.room.state, LobbyInfo)
    assert event.room.state.ready_ids == []


def test_decode_accepts_bytes(lobby_info):
    event = decode(json.dumps(lobby_info).encode("utf-8"))
    assert isinstance(event, InfoEvent)


def test_decode_game_started(word_bomb_game):
    event = decode(json.dumps(word_bomb_game))
    assert isinstance(event, GameStartedEvent)
    assert event.rejoin_token == "tok-1"
    assert isinstance(event.game, WordBombInfo)
    assert event.game.turn_id == "u1"
    assert event.game.used_letters is None


def test_decode_prompt_defaults():
    event = decode('{"type": "WordBombPrompt", "prompt": "og", "turn": "u2"}')
    assert isinstance(event, WordBombPromptEvent)
    assert event.correct_guess is None
    assert event.life_change == 0


def test_decode_connection_update_variants():
    joined = decode('{"type": "ConnectionUpdate", "uuid": "u3", "state": {"type": "Connected", "username": "ali"}}')
    left = decode(
        '{"type": "ConnectionUpdate", "uuid": "u1", "state": {"type": "Disconnected", "new_room_owner": "u2"}}'
    )
    assert isinstance(joined, ConnectionUpdateEvent)
    assert joined.state.username == "ali"
    assert isinstance(left.state, Disconnected)
    assert left.state.new_owner_id == "u2"


@pytest.mark.parametrize("tag", ["Stopped", "stopped"])
def test_countdown_stop_tag_spellings(tag):
    event = decode(json.dumps({"type": "ReadyPlayers", "ready": ["u1"], "countdown_update": {"type": tag}}))
    assert isinstance(event, ReadyPlayersEvent)
    assert isinstance(event.countdown_update, CountdownStopped)


def test_countdown_in_progress():
    event = decode('{"type": "ReadyPlayers", "ready": ["u1", "u2"], "countdown_update": {"type": "InProgress", "time_left": 10}}')
    assert isinstance(event.countdown_update, CountdownInProgress)
    assert event.countdown_update.time_left == 10


def test_partial_room_settings():
    event = decode('{"type": "RoomSettings", "public": true}')
    assert isinstance(event, RoomSettingsEvent)
    assert event.public is True
    assert event.game_mode is None


def test_game_ended_anagrams():
    event = decode(
        json.dumps(
            {
                "type": "GameEnded",
                "info": {"type": "Anagrams", "original_word": "stearin", "leaderboard": [["u1", 400], ["u2", 900]]},
            }
        )
    )
    assert isinstance(event, GameEndedEvent)
    assert isinstance(event.info, AnagramsPostGame)
    assert event.info.leaderboard[1] == ("u2", 900)
    assert event.new_owner_id is None


def test_practice_set_alias():
    event = decode('{"type": "PracticeSet", "set": ["ab", "cd"]}')
    assert isinstance(event, PracticeSetEvent)
    assert event.prompts == ["ab", "cd"]


def test_unknown_fields_are_ignored():
    event = decode('{"type": "StartingCountdown", "time_left": 3, "extra": 1}')
    assert event.time_left == 3


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "{}",
        '{"type": "Nope"}',
        '{"type": "StartingCountdown"}',
        '{"type": "WordBombPrompt", "prompt": "og"}',
        "[1, 2]",
    ],
)
def test_decode_rejects_malformed_frames(raw):
    with pytest.raises(DecodeError):
        decode(raw)


def test_decode_error_is_value_error():
    assert issubclass(DecodeError, ValueError)


def test_encode_uses_wire_names():
    payload = json.loads(encode(RoomSettingsAction(public=True, game_mode="Anagrams")))
    assert payload == {"type": "RoomSettings", "public": True, "game": "Anagrams"}


def test_encode_unit_action():
    assert json.loads(encode_text(ReadyAction())) == {"type": "Ready"}


def test_encode_returns_utf8_bytes():
    data = encode(ChatMessageAction(content="héllo"))
    assert isinstance(data, bytes)
    assert json.loads(data.decode("utf-8"))["content"] == "héllo"


def test_practice_submission_round_trip():
    action = PracticeSubmissionAction(game_mode="WordBomb", prompt="ca", input="cat")
    assert json.loads(encode_text(action)) == {"type": "PracticeSubmission", "game": "WordBomb", "prompt": "ca", "input": "cat"}
    assert decode_action(encode_text(action)) == action


def test_models_are_frozen():
    action = ChatMessageAction(content="hi")
    with pytest.raises(Exception):
        action.content = "other"
