"""
客户端动作：校验输入并构造协议模型，交给网络层发送。

动作都是“请求”，发送后不修改本地权威状态；
结果以服务器回传的事件为准。
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from wordrooms.shared.constants import GAME_MODES, MAX_CHAT_LEN, MAX_GUESS_LEN
from wordrooms.shared.protocols import (
    AnagramsGuessAction,
    ChatMessageAction,
    ClientAction,
    PracticeRequestAction,
    PracticeSubmissionAction,
    ReadyAction,
    RoomSettingsAction,
    StartEarlyAction,
    UnreadyAction,
    WordBombGuessAction,
    WordBombInputAction,
)

logger = logging.getLogger(__name__)


class ActionError(ValueError):
    """动作参数不合法（调用方的问题，不会发送）"""


class ActionEmitter:
    def __init__(self, send: Callable[[ClientAction], None]) -> None:
        self._send = send

    def emit(self, action: ClientAction) -> None:
        logger.debug("发送动作: type=%s", action.type)
        self._send(action)

    # 大厅
    def ready(self) -> None:
        self.emit(ReadyAction())

    def unready(self) -> None:
        self.emit(UnreadyAction())

    def start_early(self) -> None:
        self.emit(StartEarlyAction())

    def room_settings(self, public: bool, game_mode: str) -> None:
        if game_mode not in GAME_MODES:
            raise ActionError(f"unknown game mode: {game_mode!r}")
        self.emit(RoomSettingsAction(public=public, game_mode=game_mode))

    def chat(self, content: str) -> bool:
        """发送聊天消息；去掉首尾空白后为空则不发送"""
        content = content.strip()
        if not content:
            return False
        if len(content) > MAX_CHAT_LEN:
            raise ActionError(f"chat message longer than {MAX_CHAT_LEN} characters")
        self.emit(ChatMessageAction(content=content))
        return True

    # 游戏
    def word_bomb_input(self, text: str) -> str:
        text = text[:MAX_GUESS_LEN]
        self.emit(WordBombInputAction(input=text))
        return text

    def word_bomb_guess(self, word: str) -> bool:
        word = _checked_guess(word)
        if not word:
            return False
        self.emit(WordBombGuessAction(word=word))
        return True

    def anagrams_guess(self, word: str) -> bool:
        word = _checked_guess(word)
        if not word:
            return False
        self.emit(AnagramsGuessAction(word=word))
        return True

    # 练习
    def practice_request(self, game_mode: str) -> None:
        if game_mode not in GAME_MODES:
            raise ActionError(f"unknown game mode: {game_mode!r}")
        self.emit(PracticeRequestAction(game_mode=game_mode))

    def practice_submission(self, game_mode: str, prompt: str, text: str) -> Optional[str]:
        text = _checked_guess(text)
        if not text:
            return None
        self.emit(PracticeSubmissionAction(game_mode=game_mode, prompt=prompt, input=text))
        return text


def _checked_guess(word: str) -> str:
    word = word.strip()
    if len(word) > MAX_GUESS_LEN:
        raise ActionError(f"guess longer than {MAX_GUESS_LEN} characters")
    return word


__all__ = ["ActionEmitter", "ActionError"]
