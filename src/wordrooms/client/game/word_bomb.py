"""
Word Bomb 状态归约。

- 生命值只随服务器的 WordBombPrompt 变化，本地提交猜词不改动生命值
- 已用字母只根据自己答对的词更新，24 个追踪字母全部用过后清空
- 其他玩家的输入预览（WordBombInput）只影响显示
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, FrozenSet, Optional

from wordrooms.client.game.state import WordBombPlayer, WordBombState
from wordrooms.shared.constants import MAX_GUESS_LEN, TRACKED_LETTERS
from wordrooms.shared.protocols import (
    WordBombInfo,
    WordBombInputEvent,
    WordBombInvalidGuessEvent,
    WordBombPromptEvent,
)

logger = logging.getLogger(__name__)


def from_snapshot(info: WordBombInfo, self_id: str, starting: bool = False) -> WordBombState:
    """从快照初始化。starting=True 表示新开局（GameStarted），已用字母从空集开始"""
    players = tuple(WordBombPlayer(id=p.id, input=p.input, lives=p.lives) for p in info.players)
    if info.used_letters is not None:
        used: Optional[FrozenSet[str]] = track_letters(frozenset(), "".join(info.used_letters))
    elif starting:
        used = frozenset()
    else:
        used = None
    own = next((p for p in players if p.id == self_id), None)
    return WordBombState(
        players=players,
        turn_id=info.turn_id,
        prompt=info.prompt,
        used_letters=used,
        input_draft=own.input if own else "",
    )


def apply(state: WordBombState, event: Any, self_id: str) -> WordBombState:
    if isinstance(event, WordBombPromptEvent):
        return _advance(state, event, self_id)
    if isinstance(event, WordBombInputEvent):
        return _input_echo(state, event)
    if isinstance(event, WordBombInvalidGuessEvent):
        # 只用于界面提示
        return state
    logger.warning("Word Bomb 忽略事件: %s", event.type)
    return state


def track_letters(used: FrozenSet[str], word: str) -> FrozenSet[str]:
    letters = used | {ch for ch in word.lower() if ch in TRACKED_LETTERS}
    if letters >= TRACKED_LETTERS:
        return frozenset()
    return frozenset(letters)


def unused_letters(state: WordBombState) -> str:
    used = state.used_letters or frozenset()
    return "".join(sorted(TRACKED_LETTERS - used))


def _advance(state: WordBombState, event: WordBombPromptEvent, self_id: str) -> WordBombState:
    previous = state.turn_id
    players = state.players
    if state.player(previous) is None:
        logger.warning("回合玩家不在列表中: %s", previous)
    elif event.life_change:
        players = tuple(
            replace(p, lives=p.lives + event.life_change) if p.id == previous else p for p in players
        )

    used_letters = state.used_letters
    if previous == self_id and event.correct_guess:
        used_letters = track_letters(used_letters or frozenset(), event.correct_guess)

    input_draft = state.input_draft
    if event.turn_id == self_id:
        # // 草稿和自己的输入预览一起清空
        input_draft = ""
        players = tuple(replace(p, input="") if p.id == self_id else p for p in players)
    return replace(
        state,
        players=players,
        used_letters=used_letters,
        input_draft=input_draft,
        prompt=event.prompt,
        turn_id=event.turn_id,
    )


def _input_echo(state: WordBombState, event: WordBombInputEvent) -> WordBombState:
    if state.player(event.player_id) is None:
        logger.warning("未知玩家的输入预览: %s", event.player_id)
        return state
    return replace(
        state,
        players=tuple(replace(p, input=event.input) if p.id == event.player_id else p for p in state.players),
    )


def set_draft(state: WordBombState, text: str, self_id: str) -> WordBombState:
    """本地输入回显：只改草稿和自己的输入预览，不碰生命值与回合"""
    text = text[:MAX_GUESS_LEN]
    players = tuple(replace(p, input=text) if p.id == self_id else p for p in state.players)
    return replace(state, input_draft=text, players=players)


def is_our_turn(state: WordBombState, self_id: str) -> bool:
    return bool(self_id) and state.turn_id == self_id
