"""
Pytest configuration and shared fixtures for the Word Rooms client.
"""

import json
import os
import queue
import sys

import pytest

# Add src to path for testing
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from websockets.exceptions import ConnectionClosed  # noqa: E402
from websockets.frames import Close  # noqa: E402

from wordrooms.client.storage import LocalStorage  # noqa: E402
from wordrooms.shared.protocols import decode  # noqa: E402


class FakeWebSocket:
    """Stand-in for a websockets sync connection fed from a queue."""

    def __init__(self):
        self.incoming = queue.Queue()
        self.sent = []
        self.closed = False

    def feed(self, payload):
        self.incoming.put(payload if isinstance(payload, (str, bytes)) else json.dumps(payload))

    def server_close(self, reason=""):
        self.incoming.put(ConnectionClosed(Close(1000, reason), None))

    def recv(self):
        item = self.incoming.get(timeout=5)
        if isinstance(item, Exception):
            raise item
        return item

    def send(self, data):
        self.sent.append(data)

    def close(self):
        self.closed = True
        self.incoming.put(ConnectionClosed(None, None))


class FakeNetwork:
    """Connector double for session tests: records actions, hands out queued events."""

    def __init__(self):
        self.sent = []
        self.queued = []
        self.connected_with = None
        self.closed = False

    def connect(self, room_id, username, rejoin_token=None):
        self.connected_with = (room_id, username, rejoin_token)
        return True

    def send(self, action):
        self.sent.append(action)

    def feed(self, payload):
        self.queued.append(decode(json.dumps(payload)) if isinstance(payload, dict) else payload)

    def drain_events(self):
        items, self.queued = self.queued, []
        return items

    def close(self):
        self.closed = True


@pytest.fixture
def fake_ws():
    return FakeWebSocket()


@pytest.fixture
def fake_network():
    return FakeNetwork()


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "storage.json")


@pytest.fixture
def lobby_info():
    """Info frame for room 'abc' where u1 (self) owns a lobby with u2 present."""
    return {
        "type": "Info",
        "uuid": "u1",
        "room": {
            "owner": "u1",
            "settings": {"public": False, "game": "WordBomb"},
            "clients": [
                {"uuid": "u1", "username": "nat", "disconnected": False},
                {"uuid": "u2", "username": "kim", "disconnected": False},
            ],
            "state": {"type": "Lobby", "ready": []},
        },
    }


@pytest.fixture
def word_bomb_game():
    """GameStarted frame for a two-player Word Bomb game where u1 holds the turn."""
    return {
        "type": "GameStarted",
        "rejoin_token": "tok-1",
        "game": {
            "type": "WordBomb",
            "players": [
                {"uuid": "u1", "input": "", "lives": 2},
                {"uuid": "u2", "input": "", "lives": 2},
            ],
            "turn": "u1",
            "prompt": "ca",
        },
    }


@pytest.fixture
def anagrams_game():
    return {
        "type": "GameStarted",
        "game": {
            "type": "Anagrams",
            "players": [{"uuid": "u1", "used_words": []}, {"uuid": "u2", "used_words": []}],
            "anagram": "stearin",
        },
    }
