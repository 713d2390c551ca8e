"""
本地持久化：记住的用户名与按房间保存的重连令牌。

数据保存在一个 JSON 文件中，读取时用 pydantic 校验结构；
文件缺失、损坏或结构不对时回退为空数据并记录警告，不会中断会话。
"""
from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Dict, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from wordrooms.shared.constants import DEFAULT_STORAGE_PATH

logger = logging.getLogger(__name__)

STORAGE_PATH_ENV = "WORDROOMS_STORAGE"


class StoredData(BaseModel):
    username: Optional[str] = None
    rejoin_tokens: Dict[str, str] = Field(default_factory=dict)


def storage_path() -> Path:
    p = (os.environ.get(STORAGE_PATH_ENV) or "").strip()
    if p:
        return Path(p).expanduser()
    return DEFAULT_STORAGE_PATH


class LocalStorage:
    """基于 JSON 文件的本地存储（线程安全，后写覆盖）"""

    def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
        self.path = Path(path) if path is not None else storage_path()
        self._lock = threading.Lock()

    def load(self) -> StoredData:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return StoredData()
        except OSError as exc:
            logger.warning("读取本地存储失败: %s", exc)
            return StoredData()
        try:
            return StoredData.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("本地存储格式无效，已忽略: %s (%d 个错误)", self.path, exc.error_count())
            return StoredData()

    def save(self, data: StoredData) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data.model_dump(), f, ensure_ascii=False, indent=2)
        except OSError as exc:
            logger.warning("保存本地存储失败: %s", exc)

    def get_rejoin_token(self, room_id: str) -> Optional[str]:
        with self._lock:
            return self.load().rejoin_tokens.get(room_id)

    def set_rejoin_token(self, room_id: str, token: str) -> None:
        with self._lock:
            data = self.load()
            data.rejoin_tokens[room_id] = token
            self.save(data)

    def get_username(self) -> Optional[str]:
        with self._lock:
            return self.load().username

    def set_username(self, username: str) -> None:
        with self._lock:
            data = self.load()
            data.username = username
            self.save(data)


class TokenStore:
    """重连令牌视图：room_id -> token"""

    def __init__(self, storage: LocalStorage) -> None:
        self._storage = storage

    def get(self, room_id: str) -> Optional[str]:
        return self._storage.get_rejoin_token(room_id)

    def set(self, room_id: str, token: str) -> None:
        self._storage.set_rejoin_token(room_id, token)


class UsernameStore:
    """记住的用户名视图"""

    def __init__(self, storage: LocalStorage) -> None:
        self._storage = storage

    def get(self) -> Optional[str]:
        return self._storage.get_username()

    def set(self, username: str) -> None:
        self._storage.set_username(username)


__all__ = ["LocalStorage", "StoredData", "TokenStore", "UsernameStore", "storage_path"]
