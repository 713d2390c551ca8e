"""
会话状态机

reduce(state, event) 是纯函数：根据服务器事件生成新的 SessionState 快照。
GameSession 是外层的有状态封装，负责：
- 持有网络通道、事件分发器和最新快照
- 在调用方线程 pump() 时把收到的事件按顺序交给 reduce
- 状态变化后通知观察者（界面层）
- 提供准备/开局/聊天/猜词等本地动作

状态流转：Connecting -> Lobby/WordBomb/Anagrams <-> ... -> Error（终态）。
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional

from wordrooms.client.actions import ActionEmitter
from wordrooms.client.events import EventDispatcher
from wordrooms.client.game import anagrams, lobby, word_bomb
from wordrooms.client.game.state import (
    ChatEntry,
    ChatKind,
    ClientInfo,
    ModeState,
    Phase,
    SessionState,
    Settings,
    append_chat,
    drop_disconnected,
    enter_mode,
    mark_disconnected,
    remove_client,
    upsert_client,
)
from wordrooms.client.network import ChannelClosed, NetworkClient
from wordrooms.client.storage import LocalStorage, TokenStore, UsernameStore
from wordrooms.shared.constants import (
    DEFAULT_SERVER_URL,
    MSG_ANAGRAMS_CORRECT_GUESS,
    MSG_ANAGRAMS_INVALID_GUESS,
    MSG_ANAGRAMS_PROMPT,
    MSG_CHAT,
    MSG_CLOSED,
    MSG_CONNECTION_UPDATE,
    MSG_ERROR,
    MSG_GAME_ENDED,
    MSG_GAME_STARTED,
    MSG_INFO,
    MSG_PRACTICE_RESULT,
    MSG_PRACTICE_SET,
    MSG_READY_PLAYERS,
    MSG_ROOM_SETTINGS,
    MSG_STARTING_COUNTDOWN,
    MSG_WORD_BOMB_INPUT,
    MSG_WORD_BOMB_INVALID_GUESS,
    MSG_WORD_BOMB_PROMPT,
    SERVER_MESSAGE_TYPES,
)
from wordrooms.shared.protocols import (
    AnagramsInfo,
    ChatMessageEvent,
    ConnectionUpdateEvent,
    Disconnected,
    ErrorEvent,
    GameEndedEvent,
    GameStartedEvent,
    InfoEvent,
    LobbyInfo,
    RoomSettingsEvent,
    WordBombInfo,
)

logger = logging.getLogger(__name__)

Reducer = Callable[[SessionState, Any], SessionState]
StateHandler = Callable[[SessionState], None]


# ---------------------------
# 纯函数部分
# ---------------------------
def _mode_from_snapshot(info: Any, self_id: str, starting: bool = False) -> ModeState:
    if isinstance(info, LobbyInfo):
        return lobby.from_snapshot(info)
    if isinstance(info, WordBombInfo):
        return word_bomb.from_snapshot(info, self_id, starting=starting)
    if isinstance(info, AnagramsInfo):
        return anagrams.from_snapshot(info)
    raise TypeError(f"unexpected room state: {type(info).__name__}")


def _on_info(state: SessionState, event: InfoEvent) -> SessionState:
    room = event.room
    state = replace(
        state,
        self_id=event.self_id,
        owner_id=room.owner_id,
        settings=Settings(public=room.settings.public, game_mode=room.settings.game_mode),
        roster=tuple(ClientInfo(id=c.id, username=c.username, disconnected=c.disconnected) for c in room.clients),
        error=None,
    )
    return enter_mode(state, _mode_from_snapshot(room.state, event.self_id))


def _on_error(state: SessionState, event: ErrorEvent) -> SessionState:
    return append_chat(state, ChatEntry(kind=ChatKind.ERROR, content=event.content))


def _on_settings(state: SessionState, event: RoomSettingsEvent) -> SessionState:
    current = state.settings
    settings = Settings(
        public=current.public if event.public is None else event.public,
        game_mode=current.game_mode if event.game_mode is None else event.game_mode,
    )
    return replace(state, settings=settings)


def _on_chat(state: SessionState, event: ChatMessageEvent) -> SessionState:
    if state.client(event.author_id) is None:
        logger.debug("聊天作者不在名单中: %s", event.author_id)
    return append_chat(state, ChatEntry(kind=ChatKind.CLIENT, content=event.content, author_id=event.author_id))


def _on_connection(state: SessionState, event: ConnectionUpdateEvent) -> SessionState:
    player_id = event.player_id
    update = event.state
    if not isinstance(update, Disconnected):
        roster = upsert_client(state.roster, ClientInfo(id=player_id, username=update.username))
        state = replace(state, roster=roster)
        return append_chat(state, ChatEntry(kind=ChatKind.INFO, content=f"{update.username} has joined"))

    if update.new_owner_id:
        state = replace(state, owner_id=update.new_owner_id)
    username = state.username(player_id)
    if username is None:
        logger.warning("断开连接的玩家不在名单中: %s", player_id)
        return state
    # // 大厅里直接移除；游戏中保留位置，只标记断线
    if state.phase in (Phase.LOBBY, Phase.CONNECTING):
        roster = remove_client(state.roster, player_id)
    else:
        roster = mark_disconnected(state.roster, player_id)
    state = replace(state, roster=roster)
    return append_chat(state, ChatEntry(kind=ChatKind.INFO, content=f"{username} has left"))


def _on_lobby_event(state: SessionState, event: Any) -> SessionState:
    current = state.lobby
    if current is None:
        logger.warning("不在大厅，忽略事件: %s (phase=%s)", event.type, state.phase.value)
        return state
    return replace(state, mode=lobby.apply(current, event, state.settings.game_mode))


def _on_game_started(state: SessionState, event: GameStartedEvent) -> SessionState:
    if state.phase is not Phase.LOBBY:
        logger.warning("收到 GameStarted 时不在大厅: phase=%s", state.phase.value)
    return enter_mode(state, _mode_from_snapshot(event.game, state.self_id, starting=True))


def _on_game_ended(state: SessionState, event: GameEndedEvent) -> SessionState:
    if state.phase not in (Phase.WORD_BOMB, Phase.ANAGRAMS):
        logger.warning("收到 GameEnded 时不在游戏中: phase=%s", state.phase.value)
    summary = lobby.summary_from_info(event.info)
    state = replace(
        state,
        roster=drop_disconnected(state.roster),
        owner_id=event.new_owner_id or state.owner_id,
    )
    return enter_mode(state, lobby.after_game(summary))


def _on_word_bomb_event(state: SessionState, event: Any) -> SessionState:
    current = state.word_bomb
    if current is None:
        logger.warning("不在 Word Bomb 中，忽略事件: %s (phase=%s)", event.type, state.phase.value)
        return state
    return replace(state, mode=word_bomb.apply(current, event, state.self_id))


def _on_anagrams_event(state: SessionState, event: Any) -> SessionState:
    current = state.anagrams
    if current is None:
        logger.warning("不在 Anagrams 中，忽略事件: %s (phase=%s)", event.type, state.phase.value)
        return state
    return replace(state, mode=anagrams.apply(current, event, state.self_id))


def _on_closed(state: SessionState, event: ChannelClosed) -> SessionState:
    return replace(state, phase=Phase.ERROR, error=event.reason, mode=None)


_HANDLERS: Dict[str, Reducer] = {
    MSG_INFO: _on_info,
    MSG_ERROR: _on_error,
    MSG_ROOM_SETTINGS: _on_settings,
    MSG_CHAT: _on_chat,
    MSG_CONNECTION_UPDATE: _on_connection,
    MSG_READY_PLAYERS: _on_lobby_event,
    MSG_STARTING_COUNTDOWN: _on_lobby_event,
    MSG_PRACTICE_SET: _on_lobby_event,
    MSG_PRACTICE_RESULT: _on_lobby_event,
    MSG_GAME_STARTED: _on_game_started,
    MSG_GAME_ENDED: _on_game_ended,
    MSG_WORD_BOMB_INPUT: _on_word_bomb_event,
    MSG_WORD_BOMB_INVALID_GUESS: _on_word_bomb_event,
    MSG_WORD_BOMB_PROMPT: _on_word_bomb_event,
    MSG_ANAGRAMS_INVALID_GUESS: _on_anagrams_event,
    MSG_ANAGRAMS_CORRECT_GUESS: _on_anagrams_event,
    MSG_ANAGRAMS_PROMPT: _on_anagrams_event,
    MSG_CLOSED: _on_closed,
}

_missing = set(SERVER_MESSAGE_TYPES) - set(_HANDLERS)
if _missing:
    raise AssertionError(f"server message types without a handler: {sorted(_missing)}")


def reduce(state: SessionState, event: Any) -> SessionState:
    """应用一条事件，返回新快照（不修改传入的 state）"""
    if state.phase is Phase.ERROR:
        logger.debug("会话已结束，忽略事件: %s", event.type)
        return state
    if state.phase is Phase.CONNECTING and event.type not in (MSG_INFO, MSG_CLOSED, MSG_ERROR):
        logger.warning("尚未收到房间信息，忽略事件: %s", event.type)
        return state
    handler = _HANDLERS.get(event.type)
    if handler is None:
        logger.warning("未知事件类型: %s", event.type)
        return state
    return handler(state, event)


# ---------------------------
# 有状态外壳
# ---------------------------
# 连接后立即订阅的类型（不等待第一条 Info）
_EARLY_KINDS = (MSG_INFO, MSG_ERROR, MSG_CLOSED)


class GameSession:
    """一个房间成员身份对应一个 GameSession"""

    def __init__(
        self,
        room_id: str,
        network: Optional[Any] = None,
        storage: Optional[LocalStorage] = None,
        server_url: str = DEFAULT_SERVER_URL,
    ) -> None:
        self.room_id = room_id
        self.network = network if network is not None else NetworkClient(server_url, storage=storage)
        self.tokens: Optional[TokenStore] = TokenStore(storage) if storage is not None else None
        self.usernames: Optional[UsernameStore] = UsernameStore(storage) if storage is not None else None
        self.dispatcher = EventDispatcher()
        self.actions = ActionEmitter(self.network.send)
        self._state = SessionState(room_id=room_id)
        self._observers: List[StateHandler] = []
        self._unsubscribers: List[Callable[[], None]] = []
        self._live = False

        # // 其余类型等到第一条 Info 之后再订阅，之前到达的事件由分发器暂存并回放；
        # // 回放按类型分组（SERVER_MESSAGE_TYPES 顺序），不同类型之间不保留到达顺序
        self._unsubscribers.append(
            self.dispatcher.subscribe_many({k: self._on_event for k in _EARLY_KINDS})
        )

    @property
    def state(self) -> SessionState:
        return self._state

    # 生命周期
    def join(self, username: Optional[str] = None) -> bool:
        """连接房间；未指定用户名时使用上次记住的用户名"""
        if not username and self.usernames is not None:
            username = self.usernames.get()
        if not username:
            raise ValueError("username is required")
        token = self.tokens.get(self.room_id) if self.tokens is not None else None
        if self.usernames is not None:
            self.usernames.set(username)
        return self.network.connect(self.room_id, username, token)

    def pump(self) -> int:
        """在调用方线程处理所有已到达的事件，返回处理条数"""
        events = self.network.drain_events()
        for event in events:
            self.dispatcher.publish(event)
        return len(events)

    def dispatch(self, event: Any) -> None:
        self.dispatcher.publish(event)

    def on_state(self, handler: StateHandler) -> Callable[[], None]:
        self._observers.append(handler)

        def unsubscribe() -> None:
            if handler in self._observers:
                self._observers.remove(handler)

        return unsubscribe

    def dispose(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        self.dispatcher.dispose()
        self._observers.clear()
        self.network.close()

    # 本地动作
    def toggle_ready(self) -> bool:
        current = self._state.lobby
        if current is None:
            logger.warning("只有在大厅中才能切换准备状态")
            return False
        self.actions.emit(lobby.ready_action(current, self._state.self_id))
        return True

    def start_early(self) -> bool:
        current = self._state.lobby
        if current is None or not lobby.can_start_early(current, self._state.self_id, self._state.owner_id):
            logger.warning("当前无法提前开始")
            return False
        self.actions.start_early()
        return True

    def change_settings(self, public: Optional[bool] = None, game_mode: Optional[str] = None) -> bool:
        if not self._state.is_owner:
            logger.warning("只有房主可以修改房间设置")
            return False
        current = self._state.settings
        self.actions.room_settings(
            public=current.public if public is None else public,
            game_mode=current.game_mode if game_mode is None else game_mode,
        )
        return True

    def send_chat(self, text: str) -> bool:
        if self._state.phase is Phase.ERROR:
            return False
        return self.actions.chat(text)

    def type_input(self, text: str) -> bool:
        """本地输入：Word Bomb 回显给其他玩家，Anagrams 只更新草稿"""
        state = self._state
        if state.word_bomb is not None:
            if not word_bomb.is_our_turn(state.word_bomb, state.self_id):
                logger.debug("不是自己的回合，忽略输入")
                return False
            text = self.actions.word_bomb_input(text)
            self._set_state(replace(state, mode=word_bomb.set_draft(state.word_bomb, text, state.self_id)))
            return True
        if state.anagrams is not None:
            self._set_state(replace(state, mode=anagrams.set_draft(state.anagrams, text)))
            return True
        return False

    def submit_guess(self, word: str) -> bool:
        state = self._state
        if state.word_bomb is not None:
            if not word_bomb.is_our_turn(state.word_bomb, state.self_id):
                logger.warning("不是自己的回合，拒绝提交: %s", word)
                return False
            return self.actions.word_bomb_guess(word)
        if state.anagrams is not None:
            return self.actions.anagrams_guess(word)
        logger.warning("不在游戏中，无法提交猜词")
        return False

    def request_practice(self, game_mode: Optional[str] = None) -> bool:
        if self._state.lobby is None:
            return False
        self.actions.practice_request(game_mode or self._state.settings.game_mode)
        return True

    def submit_practice(self, text: str) -> bool:
        current = self._state.lobby
        prompt = lobby.current_practice_prompt(current) if current is not None else None
        if prompt is None:
            logger.warning("没有可用的练习题")
            return False
        return self.actions.practice_submission(self._state.settings.game_mode, prompt, text) is not None

    # 内部方法
    def _on_event(self, event: Any) -> None:
        self._set_state(reduce(self._state, event))
        if event.type == MSG_INFO and not self._live:
            self._live = True
            kinds = [k for k in SERVER_MESSAGE_TYPES if k not in _EARLY_KINDS]
            self._unsubscribers.append(self.dispatcher.subscribe_many({k: self._on_event for k in kinds}))

    def _set_state(self, state: SessionState) -> None:
        if state is self._state:
            return
        previous, self._state = self._state, state
        if previous.phase is not state.phase:
            logger.info("房间 %s: %s -> %s", self.room_id, previous.phase.value, state.phase.value)
        for handler in list(self._observers):
            try:
                handler(state)
            except Exception:
                logger.exception("状态观察者出错")


__all__ = ["GameSession", "reduce"]
