"""
Anagrams 状态归约。

所有玩家同时作答；每位玩家的已用词列表只增不减，整局保留到赛后排行。
本地分数只用于实时显示，最终以服务器的 GameEnded 排行为准。
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, List, Tuple

from wordrooms.client.game.state import AnagramsPlayer, AnagramsState
from wordrooms.shared.constants import MAX_GUESS_LEN
from wordrooms.shared.protocols import (
    AnagramsCorrectGuessEvent,
    AnagramsInfo,
    AnagramsInvalidGuessEvent,
    AnagramsPromptEvent,
)

logger = logging.getLogger(__name__)


def from_snapshot(info: AnagramsInfo) -> AnagramsState:
    return AnagramsState(
        players=tuple(AnagramsPlayer(id=p.id, used_words=tuple(p.used_words)) for p in info.players),
        anagram=info.anagram,
    )


def apply(state: AnagramsState, event: Any, self_id: str) -> AnagramsState:
    if isinstance(event, AnagramsCorrectGuessEvent):
        return _accept(state, event, self_id)
    if isinstance(event, AnagramsPromptEvent):
        return replace(state, anagram=event.anagram)
    if isinstance(event, AnagramsInvalidGuessEvent):
        return state
    logger.warning("Anagrams 忽略事件: %s", event.type)
    return state


def _accept(state: AnagramsState, event: AnagramsCorrectGuessEvent, self_id: str) -> AnagramsState:
    if state.player(event.player_id) is None:
        logger.warning("未知玩家的正确答案: %s", event.player_id)
        return state
    players = tuple(
        replace(p, used_words=p.used_words + (event.guess,)) if p.id == event.player_id else p
        for p in state.players
    )
    input_draft = "" if event.player_id == self_id else state.input_draft
    return replace(state, players=players, input_draft=input_draft)


def set_draft(state: AnagramsState, text: str) -> AnagramsState:
    return replace(state, input_draft=text[:MAX_GUESS_LEN])


def word_score(word: str) -> int:
    """词越长分越高：50 * 2^(长度-2)"""
    if len(word) < 2:
        return 0
    return 50 * 2 ** (len(word) - 2)


def live_scores(state: AnagramsState) -> List[Tuple[str, int]]:
    scores = [(p.id, sum(word_score(w) for w in p.used_words)) for p in state.players]
    return sorted(scores, key=lambda entry: entry[1], reverse=True)
