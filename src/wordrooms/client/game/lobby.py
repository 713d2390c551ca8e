"""
大厅状态：准备名单、开局倒计时、赛后总结与练习题。

倒计时由服务器计时，客户端只保存最近一次收到的剩余秒数；
只有准备人数不少于 MIN_PLAYERS 时才显示倒计时。
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Optional, Union

from wordrooms.client.game.state import AnagramsSummary, LobbyState, PostGameSummary, WordBombSummary
from wordrooms.shared.constants import GAME_WORD_BOMB, MIN_PLAYERS
from wordrooms.shared.protocols import (
    AnagramsPostGame,
    CountdownInProgress,
    LobbyInfo,
    PracticeResultEvent,
    PracticeSetEvent,
    ReadyAction,
    ReadyPlayersEvent,
    StartingCountdownEvent,
    UnreadyAction,
    WordBombPostGame,
)

logger = logging.getLogger(__name__)


def from_snapshot(info: LobbyInfo, post_game: Optional[PostGameSummary] = None) -> LobbyState:
    ready = frozenset(info.ready_ids)
    countdown = info.starting_countdown if len(ready) >= MIN_PLAYERS else None
    return LobbyState(ready_ids=ready, countdown=countdown, post_game=post_game)


def after_game(summary: PostGameSummary) -> LobbyState:
    """游戏结束后回到大厅：准备名单清空、倒计时清除、保留赛后总结"""
    return LobbyState(post_game=summary)


def apply(state: LobbyState, event: Any, game_mode: str = GAME_WORD_BOMB) -> LobbyState:
    if isinstance(event, ReadyPlayersEvent):
        return _ready_players(state, event)
    if isinstance(event, StartingCountdownEvent):
        return _countdown_tick(state, event)
    if isinstance(event, PracticeSetEvent):
        return replace(state, practice_prompts=tuple(event.prompts))
    if isinstance(event, PracticeResultEvent):
        # // Word Bomb 练习答对即换下一题；Anagrams 同一题可以多次作答
        if event.correct and game_mode == GAME_WORD_BOMB:
            return advance_practice(state)
        return state
    logger.warning("大厅忽略事件: %s", event.type)
    return state


def _ready_players(state: LobbyState, event: ReadyPlayersEvent) -> LobbyState:
    ready = frozenset(event.ready_ids)
    countdown = state.countdown
    update = event.countdown_update
    if update is not None:
        countdown = update.time_left if isinstance(update, CountdownInProgress) else None
    if len(ready) < MIN_PLAYERS:
        countdown = None
    return replace(state, ready_ids=ready, countdown=countdown)


def _countdown_tick(state: LobbyState, event: StartingCountdownEvent) -> LobbyState:
    if len(state.ready_ids) < MIN_PLAYERS:
        logger.debug("准备人数不足，忽略倒计时: %s", event.time_left)
        return replace(state, countdown=None)
    return replace(state, countdown=event.time_left)


def advance_practice(state: LobbyState) -> LobbyState:
    return replace(state, practice_prompts=state.practice_prompts[1:])


def current_practice_prompt(state: LobbyState) -> Optional[str]:
    return state.practice_prompts[0] if state.practice_prompts else None


def ready_action(state: LobbyState, self_id: str) -> Union[ReadyAction, UnreadyAction]:
    """切换准备状态的请求；名单只在服务器广播 ReadyPlayers 后才会变化"""
    if self_id in state.ready_ids:
        return UnreadyAction()
    return ReadyAction()


def can_start_early(state: LobbyState, self_id: str, owner_id: str) -> bool:
    return bool(self_id) and self_id == owner_id and len(state.ready_ids) >= MIN_PLAYERS


def summary_from_info(info: Union[WordBombPostGame, AnagramsPostGame]) -> PostGameSummary:
    if isinstance(info, WordBombPostGame):
        return WordBombSummary(
            winner_id=info.winner_id,
            mins_elapsed=info.mins_elapsed,
            words_used=info.words_used,
            letters_typed=info.letters_typed,
            fastest_guesses=tuple(info.fastest_guesses),
            longest_words=tuple(info.longest_words),
            avg_wpms=tuple(info.avg_wpms),
            avg_word_lengths=tuple(info.avg_word_lengths),
        )
    leaderboard = sorted(info.leaderboard, key=lambda entry: entry[1], reverse=True)
    return AnagramsSummary(original_word=info.original_word, leaderboard=tuple(leaderboard))
