"""
前端静态文件服务
- 为构建产物添加 HTTP 缓存控制头
- 单页应用 History 路由回退到 index.html
"""

from pathlib import Path
from typing import Optional

from starlette.staticfiles import StaticFiles
from starlette.responses import Response
from starlette.types import Scope


class CachedStaticFiles(StaticFiles):
    """
    增强版静态文件服务
    构建产物文件名带哈希，可长期缓存；HTML 不缓存
    """

    # 缓存时间配置（秒）
    CACHE_AGES = {
        '.js': 31536000,
        '.css': 31536000,
        '.woff': 31536000,
        '.woff2': 31536000,
        '.png': 2592000,
        '.jpg': 2592000,
        '.jpeg': 2592000,
        '.gif': 2592000,
        '.svg': 2592000,
        '.ico': 2592000,
        '.webp': 2592000,
        '.html': 0,
    }

    # 默认缓存时间（1天）
    DEFAULT_CACHE_AGE = 86400

    async def get_response(self, path: str, scope: Scope) -> Response:
        """覆盖父类方法，添加缓存控制头"""
        response = await super().get_response(path, scope)

        ext = Path(path).suffix.lower()
        cache_age = self.CACHE_AGES.get(ext, self.DEFAULT_CACHE_AGE)

        if cache_age > 0:
            response.headers["Cache-Control"] = f"public, max-age={cache_age}"
        else:
            response.headers["Cache-Control"] = "no-cache"

        return response


def resolve_index(frontend_path: Optional[str]) -> Optional[Path]:
    """返回前端 index.html 路径，未构建时返回 None"""
    if not frontend_path:
        return None
    index_path = Path(frontend_path) / "index.html"
    return index_path if index_path.is_file() else None
