"""
Tests for client action validation.
"""

import pytest

from wordrooms.client.actions import ActionEmitter, ActionError


@pytest.fixture
def sent():
    return []


@pytest.fixture
def emitter(sent):
    return ActionEmitter(sent.append)


def types(sent):
    return [a.type for a in sent]


def test_lobby_actions(emitter, sent):
    emitter.ready()
    emitter.unready()
    emitter.start_early()
    assert types(sent) == ["Ready", "Unready", "StartEarly"]


def test_room_settings(emitter, sent):
    emitter.room_settings(public=True, game_mode="Anagrams")
    assert sent[0].public is True
    assert sent[0].game_mode == "Anagrams"
    with pytest.raises(ActionError):
        emitter.room_settings(public=True, game_mode="Chess")


def test_chat_is_trimmed(emitter, sent):
    assert emitter.chat("  hello  ")
    assert sent[0].content == "hello"


def test_blank_chat_is_not_sent(emitter, sent):
    assert not emitter.chat("   ")
    assert sent == []


def test_chat_length_limit(emitter, sent):
    assert emitter.chat("x" * 250)
    with pytest.raises(ActionError):
        emitter.chat("x" * 251)
    assert len(sent) == 1


def test_guess_length_limit(emitter, sent):
    assert emitter.word_bomb_guess("x" * 35)
    with pytest.raises(ActionError):
        emitter.word_bomb_guess("x" * 36)
    with pytest.raises(ActionError):
        emitter.anagrams_guess("y" * 36)
    assert types(sent) == ["WordBombGuess"]


def test_empty_guess_is_not_sent(emitter, sent):
    assert not emitter.anagrams_guess(" ")
    assert sent == []


def test_input_echo_is_truncated(emitter, sent):
    assert emitter.word_bomb_input("z" * 40) == "z" * 35
    assert sent[0].input == "z" * 35


def test_practice(emitter, sent):
    emitter.practice_request("WordBomb")
    assert emitter.practice_submission("WordBomb", "ca", " cat ") == "cat"
    assert types(sent) == ["PracticeRequest", "PracticeSubmission"]
    assert sent[1].prompt == "ca"
    with pytest.raises(ActionError):
        emitter.practice_request("Chess")


def test_action_error_is_value_error():
    assert issubclass(ActionError, ValueError)
