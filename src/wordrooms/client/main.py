"""
命令行客户端入口

加入一个房间，把聊天与阶段变化打印为文本行，从标准输入读取命令。
仅用于手动测试服务器，不做任何界面渲染。

命令：
  /ready                 切换准备状态
  /start                 提前开始（房主，至少两人准备）
  /public on|off         设置房间公开/私密（房主）
  /game wordbomb|anagrams  切换游戏模式（房主）
  /say TEXT              发送聊天
  /quit                  退出
其他输入：游戏中作为猜词提交，大厅中作为聊天发送。
"""

import argparse
import logging
import os
import sys
import threading
import time
from queue import Empty, SimpleQueue
from typing import List, Optional

from wordrooms.client.actions import ActionError
from wordrooms.client.game import GameSession, Phase, SessionState
from wordrooms.client.game.anagrams import live_scores
from wordrooms.client.game.word_bomb import unused_letters
from wordrooms.client.storage import LocalStorage
from wordrooms.shared.constants import DEFAULT_SERVER_URL, GAME_ANAGRAMS, GAME_WORD_BOMB

logger = logging.getLogger(__name__)

SERVER_URL_ENV = "WORDROOMS_SERVER"
PUMP_INTERVAL = 0.05  # 秒

_GAME_NAMES = {"wordbomb": GAME_WORD_BOMB, "anagrams": GAME_ANAGRAMS}


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="wordrooms-client", description="Word Rooms 命令行客户端")
    parser.add_argument("room", help="房间 ID")
    parser.add_argument("--username", "-u", default=None, help="用户名（默认使用上次记住的）")
    parser.add_argument(
        "--server",
        default=os.environ.get(SERVER_URL_ENV, DEFAULT_SERVER_URL),
        help=f"服务器地址（默认 ${SERVER_URL_ENV} 或 {DEFAULT_SERVER_URL}）",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="输出调试日志")
    return parser.parse_args(argv)


class ConsolePrinter:
    """观察会话快照，只打印新增的聊天与阶段变化"""

    def __init__(self) -> None:
        self._seen_chat = 0
        self._phase: Optional[Phase] = None

    def __call__(self, state: SessionState) -> None:
        for entry in state.chat_log[self._seen_chat :]:
            if entry.author_id:
                name = state.username(entry.author_id) or entry.author_id
                print(f"<{name}> {entry.content}")
            else:
                print(f"[{entry.kind.value}] {entry.content}")
        self._seen_chat = len(state.chat_log)

        if state.phase is not self._phase:
            self._phase = state.phase
            print(f"== {describe(state)}")
        elif state.word_bomb is not None or state.anagrams is not None:
            print(f"   {describe(state)}")


def describe(state: SessionState) -> str:
    if state.phase is Phase.ERROR:
        return f"disconnected: {state.error}"
    if state.lobby is not None:
        summary = state.lobby.post_game
        text = f"lobby ({len(state.lobby.ready_ids)}/{len(state.roster)} ready, game={state.settings.game_mode})"
        if state.lobby.countdown is not None:
            text += f" starting in {state.lobby.countdown}s"
        if summary is not None and summary.winner_id:
            text += f" last winner: {state.username(summary.winner_id) or summary.winner_id}"
        return text
    if state.word_bomb is not None:
        wb = state.word_bomb
        lives = ", ".join(f"{state.username(p.id) or p.id}:{p.lives}" for p in wb.players)
        turn = state.username(wb.turn_id) or wb.turn_id
        return f"word bomb prompt={wb.prompt!r} turn={turn} lives=[{lives}] unused={unused_letters(wb)}"
    if state.anagrams is not None:
        scores = ", ".join(f"{state.username(pid) or pid}:{score}" for pid, score in live_scores(state.anagrams))
        return f"anagrams {state.anagrams.anagram!r} scores=[{scores}]"
    return state.phase.value


def handle_line(session: GameSession, line: str) -> bool:
    """处理一行输入；返回 False 表示退出"""
    line = line.strip()
    if not line:
        return True
    cmd, _, arg = line.partition(" ")
    try:
        if cmd == "/quit":
            return False
        if cmd == "/ready":
            session.toggle_ready()
        elif cmd == "/start":
            session.start_early()
        elif cmd == "/public":
            session.change_settings(public=arg.strip().lower() == "on")
        elif cmd == "/game":
            game_mode = _GAME_NAMES.get(arg.strip().lower())
            if game_mode is None:
                print("usage: /game wordbomb|anagrams")
            else:
                session.change_settings(game_mode=game_mode)
        elif cmd == "/say":
            session.send_chat(arg)
        elif session.state.word_bomb is not None or session.state.anagrams is not None:
            session.submit_guess(line)
        else:
            session.send_chat(line)
    except ActionError as exc:
        print(f"! {exc}")
    return True


def _read_stdin(lines: "SimpleQueue[Optional[str]]") -> None:
    for line in sys.stdin:
        lines.put(line)
    lines.put(None)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    storage = LocalStorage()
    session = GameSession(args.room, storage=storage, server_url=args.server)
    session.on_state(ConsolePrinter())
    try:
        if not session.join(args.username):
            session.pump()
            return 1
    except ValueError as exc:
        print(f"! {exc}")
        return 2

    lines: "SimpleQueue[Optional[str]]" = SimpleQueue()
    threading.Thread(target=_read_stdin, args=(lines,), name="stdin-reader", daemon=True).start()
    try:
        while session.state.phase is not Phase.ERROR:
            session.pump()
            try:
                line = lines.get_nowait()
            except Empty:
                time.sleep(PUMP_INTERVAL)
                continue
            if line is None or not handle_line(session, line):
                break
    except KeyboardInterrupt:
        logger.info("用户中断")
    finally:
        session.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main())
