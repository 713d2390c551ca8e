"""
客户端模块

负责房间连接、事件分发、会话状态同步与本地动作等客户端功能。

模块组成：
- network: WebSocket 通道封装（接收线程解码入队，调用方线程取出）
- events: 按消息类型发布/订阅的事件分发器
- storage: 本地 JSON 存储（记住的用户名、按房间保存的重连令牌）
- actions: 客户端动作的校验与发送
- game: 会话状态机与大厅 / Word Bomb / Anagrams 三个模式的归约函数

入口提示：
- 运行 wordrooms-client ROOM 启动命令行客户端（仅用于手动测试）
"""

from . import actions, events, game, network, storage

__all__ = ["actions", "events", "game", "network", "storage"]
