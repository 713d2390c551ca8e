"""
协议定义

基于 JSON 的标签消息：每一帧都是一个带 "type" 字段的对象，"type" 决定变体。

- 服务器 -> 客户端：*Event 模型，通过 decode() 解析
- 客户端 -> 服务器：*Action 模型，通过 encode() / encode_text() 序列化

线路上的字段名（uuid/owner/turn/...）与本地字段名（player_id/owner_id/turn_id/...）
通过 pydantic 别名在这里统一转换，其他模块只使用本地字段名。
"""

from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from wordrooms.shared.constants import GAME_WORD_BOMB

GameMode = Literal["WordBomb", "Anagrams"]


class DecodeError(ValueError):
    """无法解析的服务器消息（只影响当前帧）"""


class WireModel(BaseModel):
    """所有线路模型的基类：不可变，接受别名或本地字段名"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


# ---------------------------
# 房间 / 快照
# ---------------------------
class RoomSettings(WireModel):
    public: bool = False
    game_mode: GameMode = Field(default=GAME_WORD_BOMB, alias="game")


class ClientInfo(WireModel):
    id: str = Field(alias="uuid")
    username: str
    disconnected: bool = False


class LobbyInfo(WireModel):
    type: Literal["Lobby"] = "Lobby"
    ready_ids: List[str] = Field(default_factory=list, alias="ready")
    starting_countdown: Optional[int] = None


class WordBombPlayerData(WireModel):
    id: str = Field(alias="uuid")
    input: str = ""
    lives: int


class WordBombInfo(WireModel):
    type: Literal["WordBomb"] = "WordBomb"
    players: List[WordBombPlayerData]
    turn_id: str = Field(alias="turn")
    prompt: str
    used_letters: Optional[List[str]] = None


class AnagramsPlayerData(WireModel):
    id: str = Field(alias="uuid")
    used_words: List[str] = Field(default_factory=list)


class AnagramsInfo(WireModel):
    type: Literal["Anagrams"] = "Anagrams"
    players: List[AnagramsPlayerData]
    anagram: str


RoomStateInfo = Annotated[Union[LobbyInfo, WordBombInfo, AnagramsInfo], Field(discriminator="type")]
GameInfo = Annotated[Union[WordBombInfo, AnagramsInfo], Field(discriminator="type")]


class RoomInfo(WireModel):
    owner_id: str = Field(alias="owner")
    settings: RoomSettings = Field(default_factory=RoomSettings)
    clients: List[ClientInfo] = Field(default_factory=list)
    state: RoomStateInfo


# ---------------------------
# 连接状态 / 倒计时 / 猜词原因
# ---------------------------
class Connected(WireModel):
    type: Literal["Connected"] = "Connected"
    username: str


class Reconnected(WireModel):
    type: Literal["Reconnected"] = "Reconnected"
    username: str


class Disconnected(WireModel):
    type: Literal["Disconnected"] = "Disconnected"
    new_owner_id: Optional[str] = Field(default=None, alias="new_room_owner")


ConnectionState = Annotated[Union[Connected, Reconnected, Disconnected], Field(discriminator="type")]


class CountdownInProgress(WireModel):
    type: Literal["InProgress"] = "InProgress"
    time_left: int


class CountdownStopped(WireModel):
    # 不同版本的服务器分别使用过两种写法
    type: Literal["Stopped", "stopped"] = "Stopped"


CountdownUpdate = Annotated[Union[CountdownInProgress, CountdownStopped], Field(discriminator="type")]


class WordBombGuessReason(WireModel):
    type: Literal["PromptNotIn", "NotEnglish", "AlreadyUsed"]


class AnagramsGuessReason(WireModel):
    type: Literal["NotLongEnough", "PromptMismatch", "NotEnglish", "AlreadyUsed"]


# ---------------------------
# 赛后信息
# ---------------------------
class WordBombPostGame(WireModel):
    type: Literal["WordBomb"] = "WordBomb"
    winner_id: str = Field(alias="winner")
    mins_elapsed: float = 0.0
    words_used: int = 0
    letters_typed: int = 0
    fastest_guesses: List[Tuple[str, float, str]] = Field(default_factory=list)
    longest_words: List[Tuple[str, str]] = Field(default_factory=list)
    avg_wpms: List[Tuple[str, float]] = Field(default_factory=list)
    avg_word_lengths: List[Tuple[str, float]] = Field(default_factory=list)


class AnagramsPostGame(WireModel):
    type: Literal["Anagrams"] = "Anagrams"
    original_word: str
    leaderboard: List[Tuple[str, int]] = Field(default_factory=list)


PostGameInfo = Annotated[Union[WordBombPostGame, AnagramsPostGame], Field(discriminator="type")]


# ---------------------------
# 服务器 -> 客户端
# ---------------------------
class InfoEvent(WireModel):
    type: Literal["Info"] = "Info"
    self_id: str = Field(alias="uuid")
    room: RoomInfo


class ErrorEvent(WireModel):
    type: Literal["Error"] = "Error"
    content: str


class RoomSettingsEvent(WireModel):
    type: Literal["RoomSettings"] = "RoomSettings"
    public: Optional[bool] = None
    game_mode: Optional[GameMode] = Field(default=None, alias="game")


class ChatMessageEvent(WireModel):
    type: Literal["ChatMessage"] = "ChatMessage"
    author_id: str = Field(alias="author")
    content: str


class ConnectionUpdateEvent(WireModel):
    type: Literal["ConnectionUpdate"] = "ConnectionUpdate"
    player_id: str = Field(alias="uuid")
    state: ConnectionState


class ReadyPlayersEvent(WireModel):
    type: Literal["ReadyPlayers"] = "ReadyPlayers"
    ready_ids: List[str] = Field(alias="ready")
    countdown_update: Optional[CountdownUpdate] = None


class StartingCountdownEvent(WireModel):
    type: Literal["StartingCountdown"] = "StartingCountdown"
    time_left: int


class GameStartedEvent(WireModel):
    type: Literal["GameStarted"] = "GameStarted"
    rejoin_token: Optional[str] = None
    game: GameInfo


class GameEndedEvent(WireModel):
    type: Literal["GameEnded"] = "GameEnded"
    new_owner_id: Optional[str] = Field(default=None, alias="new_room_owner")
    info: PostGameInfo


class WordBombInputEvent(WireModel):
    type: Literal["WordBombInput"] = "WordBombInput"
    player_id: str = Field(alias="uuid")
    input: str


class WordBombInvalidGuessEvent(WireModel):
    type: Literal["WordBombInvalidGuess"] = "WordBombInvalidGuess"
    player_id: str = Field(alias="uuid")
    reason: WordBombGuessReason


class WordBombPromptEvent(WireModel):
    type: Literal["WordBombPrompt"] = "WordBombPrompt"
    correct_guess: Optional[str] = None
    life_change: int = 0
    prompt: str
    turn_id: str = Field(alias="turn")


class AnagramsInvalidGuessEvent(WireModel):
    type: Literal["AnagramsInvalidGuess"] = "AnagramsInvalidGuess"
    reason: AnagramsGuessReason


class AnagramsCorrectGuessEvent(WireModel):
    type: Literal["AnagramsCorrectGuess"] = "AnagramsCorrectGuess"
    player_id: str = Field(alias="uuid")
    guess: str


class AnagramsPromptEvent(WireModel):
    type: Literal["AnagramsPrompt"] = "AnagramsPrompt"
    anagram: str


class PracticeSetEvent(WireModel):
    type: Literal["PracticeSet"] = "PracticeSet"
    prompts: List[str] = Field(alias="set")


class PracticeResultEvent(WireModel):
    type: Literal["PracticeResult"] = "PracticeResult"
    correct: bool


ServerEvent = Annotated[
    Union[
        InfoEvent,
        ErrorEvent,
        RoomSettingsEvent,
        ChatMessageEvent,
        ConnectionUpdateEvent,
        ReadyPlayersEvent,
        StartingCountdownEvent,
        GameStartedEvent,
        GameEndedEvent,
        WordBombInputEvent,
        WordBombInvalidGuessEvent,
        WordBombPromptEvent,
        AnagramsInvalidGuessEvent,
        AnagramsCorrectGuessEvent,
        AnagramsPromptEvent,
        PracticeSetEvent,
        PracticeResultEvent,
    ],
    Field(discriminator="type"),
]


# ---------------------------
# 客户端 -> 服务器
# ---------------------------
class ReadyAction(WireModel):
    type: Literal["Ready"] = "Ready"


class UnreadyAction(WireModel):
    type: Literal["Unready"] = "Unready"


class StartEarlyAction(WireModel):
    type: Literal["StartEarly"] = "StartEarly"


class RoomSettingsAction(WireModel):
    type: Literal["RoomSettings"] = "RoomSettings"
    public: bool
    game_mode: GameMode = Field(alias="game")


class ChatMessageAction(WireModel):
    type: Literal["ChatMessage"] = "ChatMessage"
    content: str


class WordBombInputAction(WireModel):
    type: Literal["WordBombInput"] = "WordBombInput"
    input: str


class WordBombGuessAction(WireModel):
    type: Literal["WordBombGuess"] = "WordBombGuess"
    word: str


class AnagramsGuessAction(WireModel):
    type: Literal["AnagramsGuess"] = "AnagramsGuess"
    word: str


class PracticeRequestAction(WireModel):
    type: Literal["PracticeRequest"] = "PracticeRequest"
    game_mode: GameMode = Field(alias="game")


class PracticeSubmissionAction(WireModel):
    type: Literal["PracticeSubmission"] = "PracticeSubmission"
    game_mode: GameMode = Field(alias="game")
    prompt: str
    input: str


ClientAction = Annotated[
    Union[
        ReadyAction,
        UnreadyAction,
        StartEarlyAction,
        RoomSettingsAction,
        ChatMessageAction,
        WordBombInputAction,
        WordBombGuessAction,
        AnagramsGuessAction,
        PracticeRequestAction,
        PracticeSubmissionAction,
    ],
    Field(discriminator="type"),
]

_server_adapter: TypeAdapter = TypeAdapter(ServerEvent)
_client_adapter: TypeAdapter = TypeAdapter(ClientAction)


def decode(raw: Union[bytes, str]) -> ServerEvent:
    """解析一帧服务器消息；任何格式问题都抛出 DecodeError。"""
    try:
        return _server_adapter.validate_json(raw)
    except ValueError as exc:
        raise DecodeError(f"bad frame: {exc}") from exc


def decode_action(raw: Union[bytes, str]) -> ClientAction:
    """解析客户端动作（测试替身和调试工具使用）。"""
    try:
        return _client_adapter.validate_json(raw)
    except ValueError as exc:
        raise DecodeError(f"bad action: {exc}") from exc


def encode_text(action: ClientAction) -> str:
    return action.to_json()


def encode(action: ClientAction) -> bytes:
    return encode_text(action).encode("utf-8")


__all__ = [
    "DecodeError",
    "ServerEvent",
    "ClientAction",
    "decode",
    "decode_action",
    "encode",
    "encode_text",
]
