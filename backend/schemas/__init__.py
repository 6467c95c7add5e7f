"""
数据验证模式目录
"""

from .auth import UserCreate, UserLogin, UserInfo
from .response import success

__all__ = [
    # 认证
    "UserCreate", "UserLogin", "UserInfo",
    # 响应
    "success"
]
