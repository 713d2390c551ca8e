"""
客户端游戏逻辑模块

负责客户端本地的游戏状态管理：
- state: 不可变状态快照（会话、大厅、Word Bomb、Anagrams）
- lobby / word_bomb / anagrams: 各模式的纯函数归约
- session: 会话状态机 reduce() 与有状态外壳 GameSession

该模块不依赖任何界面库，界面层通过 GameSession.on_state() 观察快照。
"""

from __future__ import annotations

from wordrooms.client.game.session import GameSession, reduce
from wordrooms.client.game.state import ChatEntry, ChatKind, Phase, SessionState

__all__ = [
	"ChatEntry",
	"ChatKind",
	"GameSession",
	"Phase",
	"SessionState",
	"reduce",
]
