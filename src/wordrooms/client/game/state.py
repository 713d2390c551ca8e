"""
客户端会话的不可变状态快照。

所有状态都是 frozen dataclass，更新时通过 dataclasses.replace 生成新对象，
UI 层只观察快照，不直接修改。
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import FrozenSet, Optional, Tuple, Union

from wordrooms.shared.constants import GAME_WORD_BOMB


class Phase(str, Enum):
    CONNECTING = "Connecting"
    LOBBY = "Lobby"
    WORD_BOMB = "WordBomb"
    ANAGRAMS = "Anagrams"
    ERROR = "Error"


class ChatKind(str, Enum):
    INFO = "Info"
    ERROR = "Error"
    CLIENT = "Client"


@dataclass(frozen=True)
class ChatEntry:
    kind: ChatKind
    content: str
    author_id: Optional[str] = None


@dataclass(frozen=True)
class ClientInfo:
    id: str
    username: str
    disconnected: bool = False


@dataclass(frozen=True)
class Settings:
    public: bool = False
    game_mode: str = GAME_WORD_BOMB


# ---------------------------
# 赛后总结
# ---------------------------
@dataclass(frozen=True)
class WordBombSummary:
    winner_id: str
    mins_elapsed: float = 0.0
    words_used: int = 0
    letters_typed: int = 0
    fastest_guesses: Tuple[Tuple[str, float, str], ...] = ()
    longest_words: Tuple[Tuple[str, str], ...] = ()
    avg_wpms: Tuple[Tuple[str, float], ...] = ()
    avg_word_lengths: Tuple[Tuple[str, float], ...] = ()
    game_mode: str = "WordBomb"


@dataclass(frozen=True)
class AnagramsSummary:
    original_word: str
    # 按分数从高到低
    leaderboard: Tuple[Tuple[str, int], ...] = ()
    game_mode: str = "Anagrams"

    @property
    def winner_id(self) -> Optional[str]:
        return self.leaderboard[0][0] if self.leaderboard else None


PostGameSummary = Union[WordBombSummary, AnagramsSummary]


# ---------------------------
# 模式状态
# ---------------------------
@dataclass(frozen=True)
class LobbyState:
    ready_ids: FrozenSet[str] = frozenset()
    countdown: Optional[int] = None
    post_game: Optional[PostGameSummary] = None
    practice_prompts: Tuple[str, ...] = ()


@dataclass(frozen=True)
class WordBombPlayer:
    id: str
    input: str = ""
    lives: int = 0


@dataclass(frozen=True)
class WordBombState:
    players: Tuple[WordBombPlayer, ...]
    turn_id: str
    prompt: str
    used_letters: Optional[FrozenSet[str]] = None
    input_draft: str = ""

    def player(self, player_id: str) -> Optional[WordBombPlayer]:
        return next((p for p in self.players if p.id == player_id), None)


@dataclass(frozen=True)
class AnagramsPlayer:
    id: str
    used_words: Tuple[str, ...] = ()


@dataclass(frozen=True)
class AnagramsState:
    players: Tuple[AnagramsPlayer, ...]
    anagram: str
    input_draft: str = ""

    def player(self, player_id: str) -> Optional[AnagramsPlayer]:
        return next((p for p in self.players if p.id == player_id), None)


ModeState = Union[LobbyState, WordBombState, AnagramsState]


@dataclass(frozen=True)
class SessionState:
    room_id: str
    phase: Phase = Phase.CONNECTING
    self_id: str = ""
    settings: Settings = field(default_factory=Settings)
    owner_id: str = ""
    roster: Tuple[ClientInfo, ...] = ()
    chat_log: Tuple[ChatEntry, ...] = ()
    mode: Optional[ModeState] = None
    error: Optional[str] = None

    @property
    def lobby(self) -> Optional[LobbyState]:
        return self.mode if isinstance(self.mode, LobbyState) else None

    @property
    def word_bomb(self) -> Optional[WordBombState]:
        return self.mode if isinstance(self.mode, WordBombState) else None

    @property
    def anagrams(self) -> Optional[AnagramsState]:
        return self.mode if isinstance(self.mode, AnagramsState) else None

    @property
    def is_owner(self) -> bool:
        return bool(self.self_id) and self.self_id == self.owner_id

    def client(self, player_id: str) -> Optional[ClientInfo]:
        return next((c for c in self.roster if c.id == player_id), None)

    def username(self, player_id: str) -> Optional[str]:
        client = self.client(player_id)
        return client.username if client else None


def phase_of(mode: ModeState) -> Phase:
    if isinstance(mode, LobbyState):
        return Phase.LOBBY
    if isinstance(mode, WordBombState):
        return Phase.WORD_BOMB
    return Phase.ANAGRAMS


def enter_mode(state: SessionState, mode: ModeState) -> SessionState:
    """切换到新的模式状态（旧模式状态直接丢弃，不做合并）"""
    return replace(state, mode=mode, phase=phase_of(mode))


def append_chat(state: SessionState, entry: ChatEntry) -> SessionState:
    return replace(state, chat_log=state.chat_log + (entry,))


def upsert_client(roster: Tuple[ClientInfo, ...], client: ClientInfo) -> Tuple[ClientInfo, ...]:
    """新玩家追加到末尾；已有玩家原位替换，保持显示顺序"""
    if any(c.id == client.id for c in roster):
        return tuple(client if c.id == client.id else c for c in roster)
    return roster + (client,)


def remove_client(roster: Tuple[ClientInfo, ...], player_id: str) -> Tuple[ClientInfo, ...]:
    return tuple(c for c in roster if c.id != player_id)


def mark_disconnected(roster: Tuple[ClientInfo, ...], player_id: str) -> Tuple[ClientInfo, ...]:
    return tuple(replace(c, disconnected=True) if c.id == player_id else c for c in roster)


def drop_disconnected(roster: Tuple[ClientInfo, ...]) -> Tuple[ClientInfo, ...]:
    return tuple(c for c in roster if not c.disconnected)
