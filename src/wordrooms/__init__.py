"""
Word Rooms - 联机文字游戏客户端会话引擎

A client-side session and game-state sync engine for the Word Bomb and
Anagrams multiplayer word games.
"""

__version__ = "0.1.0"
__author__ = "Word Rooms Team"
__license__ = "MIT"

# 导出主要组件
from . import client, shared

__all__ = ["client", "shared", "__version__"]
