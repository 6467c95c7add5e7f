"""
路由目录
"""

from . import auth, health, sitemap

__all__ = ["auth", "health", "sitemap"]
