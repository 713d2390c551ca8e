"""
Tests for the room connector using a fake websocket.
"""

import json

import pytest

from wordrooms.client.network import ChannelClosed, NetworkClient, room_url
from wordrooms.client.storage import TokenStore
from wordrooms.shared.protocols import ChatMessageAction, ChatMessageEvent, InfoEvent, ReadyAction


def make_client(fake_ws, storage=None):
    calls = []

    def connect_fn(url, **kwargs):
        calls.append((url, kwargs))
        return fake_ws

    return NetworkClient("ws://game.test:8080/", storage=storage, connect_fn=connect_fn), calls


def finish(client, fake_ws, reason=""):
    fake_ws.server_close(reason)
    client.join(timeout=5)
    return client.drain_events()


def test_room_url():
    assert room_url("ws://h:1", "abc", "nat") == "ws://h:1/rooms/abc?username=nat"
    assert room_url("ws://h:1/", "a b", "nat", "t1") == "ws://h:1/rooms/a%20b?username=nat&rejoin_token=t1"


def test_connect_opens_one_channel(fake_ws):
    client, calls = make_client(fake_ws)
    assert client.connect("abc", "nat", "tok")
    assert calls[0][0] == "ws://game.test:8080/rooms/abc?username=nat&rejoin_token=tok"
    assert "open_timeout" in calls[0][1]
    assert client.connected
    finish(client, fake_ws)


def test_events_arrive_in_order(fake_ws, lobby_info):
    client, _ = make_client(fake_ws)
    client.connect("abc", "nat")
    fake_ws.feed(lobby_info)
    fake_ws.feed({"type": "ChatMessage", "author": "u2", "content": "hi"})
    events = finish(client, fake_ws, "room closed")

    assert isinstance(events[0], InfoEvent)
    assert isinstance(events[1], ChatMessageEvent)
    assert events[2] == ChannelClosed("room closed")
    assert not client.connected


def test_undecodable_frames_are_dropped(fake_ws, caplog):
    client, _ = make_client(fake_ws)
    client.connect("abc", "nat")
    fake_ws.feed("garbage")
    fake_ws.feed({"type": "StartingCountdown", "time_left": 5})
    events = finish(client, fake_ws)

    assert [e.type for e in events] == ["StartingCountdown", "Closed"]
    assert events[-1].reason == "connection closed"
    assert "忽略无法解析的消息" in caplog.text


def test_game_started_token_is_persisted(fake_ws, storage, word_bomb_game):
    client, _ = make_client(fake_ws, storage=storage)
    client.connect("abc", "nat")
    fake_ws.feed(word_bomb_game)
    finish(client, fake_ws)
    assert TokenStore(storage).get("abc") == "tok-1"


def test_connect_failure_reports_closed():
    def refuse(url, **kwargs):
        raise ConnectionRefusedError("refused")

    client = NetworkClient(connect_fn=refuse)
    assert client.connect("abc", "nat") is False
    events = client.drain_events()
    assert len(events) == 1
    assert isinstance(events[0], ChannelClosed)
    assert events[0].reason.startswith("connection failed")


def test_connect_validates_username(fake_ws):
    client, _ = make_client(fake_ws)
    with pytest.raises(ValueError):
        client.connect("abc", "")
    with pytest.raises(ValueError):
        client.connect("abc", "x" * 21)


def test_client_cannot_be_reused(fake_ws):
    client, _ = make_client(fake_ws)
    client.connect("abc", "nat")
    finish(client, fake_ws)
    with pytest.raises(RuntimeError):
        client.connect("abc", "nat")


def test_send_encodes_actions(fake_ws):
    client, _ = make_client(fake_ws)
    client.connect("abc", "nat")
    client.send(ReadyAction())
    client.send(ChatMessageAction(content="x" * 600))
    assert [json.loads(s) for s in fake_ws.sent] == [{"type": "Ready"}]
    finish(client, fake_ws)


def test_send_without_channel_is_noop():
    client = NetworkClient(connect_fn=lambda url, **kwargs: None)
    client.send(ReadyAction())


def test_close_is_idempotent_and_reports_once(fake_ws):
    client, _ = make_client(fake_ws)
    client.connect("abc", "nat")
    client.close()
    client.close()
    client.join(timeout=5)
    events = client.drain_events()
    assert events == [ChannelClosed("connection closed")]
    assert fake_ws.closed
