"""
简单的客户端网络封装：负责连接房间、收发消息并提供事件队列。

一个 NetworkClient 只对应一个 WebSocket 通道。接收线程只负责解码并入队，
状态变更由调用方线程通过 drain_events() 取出事件后同步执行。
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from queue import Empty, SimpleQueue
from typing import Any, Callable, List, Optional, Union
from urllib.parse import quote, urlencode

from websockets.exceptions import ConnectionClosed, WebSocketException
from websockets.sync.client import connect as ws_connect

from wordrooms.client.storage import LocalStorage, TokenStore
from wordrooms.shared.constants import (
    CONNECT_TIMEOUT,
    DEFAULT_SERVER_URL,
    MAX_FRAME_LEN,
    MAX_USERNAME_LEN,
    MSG_CLOSED,
    ROOM_PATH,
)
from wordrooms.shared.protocols import ClientAction, DecodeError, GameStartedEvent, decode, encode_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChannelClosed:
    """通道已关闭（本地终止事件，不在线路上传输）"""

    reason: str
    type: str = MSG_CLOSED


def room_url(server_url: str, room_id: str, username: str, rejoin_token: Optional[str] = None) -> str:
    params = {"username": username}
    if rejoin_token:
        params["rejoin_token"] = rejoin_token
    path = ROOM_PATH.format(room=quote(room_id, safe=""))
    return f"{server_url.rstrip('/')}{path}?{urlencode(params)}"


class NetworkClient:
    """线程驱动的轻量客户端，用于与一个房间同步。"""

    def __init__(
        self,
        server_url: str = DEFAULT_SERVER_URL,
        storage: Optional[LocalStorage] = None,
        connect_fn: Optional[Callable[..., Any]] = None,
    ) -> None:
        self.server_url = server_url
        self.tokens: Optional[TokenStore] = TokenStore(storage) if storage is not None else None
        self._connect_fn = connect_fn or ws_connect
        self.ws: Optional[Any] = None
        self._recv_thread: Optional[threading.Thread] = None
        self._running = threading.Event()
        self._lock = threading.Lock()
        self._opened = False
        self._closed_reported = False
        self.events: SimpleQueue[Any] = SimpleQueue()
        self.room_id: Optional[str] = None
        self.username: Optional[str] = None

    @property
    def connected(self) -> bool:
        return self.ws is not None and self._running.is_set()

    def connect(self, room_id: str, username: str, rejoin_token: Optional[str] = None) -> bool:
        """打开到房间的通道。失败时入队 ChannelClosed 并返回 False。"""
        if not username or len(username) > MAX_USERNAME_LEN:
            raise ValueError(f"username must be 1-{MAX_USERNAME_LEN} characters")
        with self._lock:
            if self._opened:
                raise RuntimeError("channel already opened; create a new NetworkClient to reconnect")
            self._opened = True

        self.room_id = room_id
        self.username = username
        url = room_url(self.server_url, room_id, username, rejoin_token)
        logger.info("连接房间 %s (%s, rejoin=%s)", room_id, self.server_url, bool(rejoin_token))
        try:
            self.ws = self._connect_fn(url, open_timeout=CONNECT_TIMEOUT)
        except (OSError, TimeoutError, WebSocketException) as exc:
            logger.warning("连接失败: %s", exc)
            self._report_closed(f"connection failed: {exc}")
            return False

        self._running.set()
        self._recv_thread = threading.Thread(target=self._recv_loop, name="room-recv", daemon=True)
        self._recv_thread.start()
        return True

    def send(self, action: ClientAction) -> None:
        ws = self.ws
        if ws is None or not self._running.is_set():
            return
        payload = encode_text(action)
        size = len(payload.encode("utf-8"))
        if size > MAX_FRAME_LEN:
            logger.warning("消息过长已丢弃: type=%s, %d 字节", action.type, size)
            return
        try:
            ws.send(payload)
        except (OSError, WebSocketException) as exc:
            logger.warning("发送失败: %s", exc)
            self.close()

    def drain_events(self) -> List[Any]:
        items: List[Any] = []
        while True:
            try:
                items.append(self.events.get_nowait())
            except Empty:
                break
        return items

    def join(self, timeout: Optional[float] = None) -> None:
        """等待接收线程结束（测试与命令行退出时使用）"""
        if self._recv_thread is not None:
            self._recv_thread.join(timeout)

    def close(self) -> None:
        self._running.clear()
        ws, self.ws = self.ws, None
        if ws is None:
            return
        try:
            ws.close()
        except (OSError, WebSocketException) as exc:
            logger.debug("关闭通道出错: %s", exc)
        finally:
            self._report_closed("connection closed")

    # 内部方法
    def _recv_loop(self) -> None:
        ws = self.ws
        reason = "connection closed"
        try:
            while ws is not None and self._running.is_set():
                raw = ws.recv()
                self._handle_raw(raw)
        except ConnectionClosed as exc:
            if exc.rcvd is not None and exc.rcvd.reason:
                reason = exc.rcvd.reason
        except (OSError, WebSocketException) as exc:
            reason = f"connection error: {exc}"
        finally:
            self._running.clear()
            self._report_closed(reason)

    def _handle_raw(self, raw: Union[str, bytes]) -> None:
        try:
            event = decode(raw)
        except DecodeError as exc:
            logger.warning("忽略无法解析的消息: %s", exc)
            return
        logger.debug("收到消息: type=%s", event.type)
        if isinstance(event, GameStartedEvent) and event.rejoin_token and self.tokens is not None:
            self.tokens.set(self.room_id, event.rejoin_token)
        self.events.put(event)

    def _report_closed(self, reason: str) -> None:
        with self._lock:
            if self._closed_reported:
                return
            self._closed_reported = True
        logger.info("房间 %s 的通道已关闭: %s", self.room_id, reason)
        self.events.put(ChannelClosed(reason))


__all__ = ["ChannelClosed", "NetworkClient", "room_url"]
