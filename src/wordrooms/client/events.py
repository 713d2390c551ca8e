"""
事件分发器：按消息类型发布/订阅。

每个会话持有一个实例（不使用模块级的全局监听表）。
某类型在没有订阅者时发布的事件会被暂存，第一个订阅该类型的处理器
会按到达顺序收到全部暂存事件（只回放一次），之后正常接收新事件。
"""
from __future__ import annotations

import logging
from collections import defaultdict, deque
from typing import Any, Callable, Deque, Dict, List, Mapping

logger = logging.getLogger(__name__)

Handler = Callable[[Any], None]


class EventDispatcher:
    """按 event.type 扇出的发布/订阅注册表"""

    def __init__(self) -> None:
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)
        self._pending: Dict[str, Deque[Any]] = defaultdict(deque)
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def subscribe(self, kind: str, handler: Handler) -> Callable[[], None]:
        """订阅某类型事件，返回取消订阅函数。"""
        if self._disposed:
            return lambda: None

        # // 先回放暂存事件，再注册为实时处理器
        pending = self._pending.pop(kind, None)
        if pending:
            logger.debug("回放 %d 条暂存事件: %s", len(pending), kind)
            for event in pending:
                self._deliver(handler, event)
        self._handlers[kind].append(handler)

        def unsubscribe() -> None:
            handlers = self._handlers.get(kind)
            if handlers and handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def subscribe_many(self, handlers: Mapping[str, Handler]) -> Callable[[], None]:
        unsubscribers = [self.subscribe(kind, handler) for kind, handler in handlers.items()]

        def unsubscribe_all() -> None:
            for unsubscribe in unsubscribers:
                unsubscribe()

        return unsubscribe_all

    def publish(self, event: Any) -> None:
        if self._disposed:
            return
        kind = event.type
        handlers = self._handlers.get(kind)
        if not handlers:
            self._pending[kind].append(event)
            return
        # // 复制一份，处理器内部可以安全地取消订阅
        for handler in list(handlers):
            self._deliver(handler, event)

    def pending_count(self, kind: str) -> int:
        return len(self._pending.get(kind, ()))

    def dispose(self) -> None:
        self._disposed = True
        self._handlers.clear()
        self._pending.clear()

    def _deliver(self, handler: Handler, event: Any) -> None:
        try:
            handler(event)
        except Exception:
            logger.exception("事件处理器出错: %s", event.type)


__all__ = ["EventDispatcher", "Handler"]
