"""
博客 API 客户端
"""

from .session import Session
from .api import BlogApiClient, ApiError

__all__ = ["Session", "BlogApiClient", "ApiError"]
