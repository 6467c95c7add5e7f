"""
客户端会话
保存当前令牌和用户信息，由调用方显式持有并传递
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """登录会话"""
    token: Optional[str] = None
    user: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_auth_payload(cls, payload: Dict[str, Any]) -> "Session":
        """由注册/登录响应的 data 部分构造"""
        return cls(token=payload["token"], user=dict(payload.get("user") or {}))

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def user_id(self) -> Optional[int]:
        return self.user.get("id")

    def update(self, payload: Dict[str, Any]):
        """登录或注册成功后刷新会话"""
        self.token = payload["token"]
        self.user = dict(payload.get("user") or {})

    def clear(self):
        """退出登录"""
        self.token = None
        self.user = {}

    def authorization_header(self) -> Dict[str, str]:
        """未登录时返回空字典"""
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    # ==================== 持久化 ====================

    def save(self, path: Union[str, Path]):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps({"token": self.token, "user": self.user}, ensure_ascii=False),
            encoding="utf-8"
        )

    @classmethod
    def load(cls, path: Union[str, Path]) -> "Session":
        """
        从文件读取会话
        文件不存在或内容损坏时返回未登录的会话
        """
        path = Path(path)
        if not path.is_file():
            return cls()
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"会话文件读取失败，已忽略: {e}")
            return cls()
        if not isinstance(data, dict):
            return cls()
        return cls(token=data.get("token"), user=data.get("user") or {})
