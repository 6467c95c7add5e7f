"""
静态文件服务测试
"""

import pytest
from httpx import AsyncClient, ASGITransport
from starlette.applications import Starlette
from starlette.routing import Mount

from core.static_files import CachedStaticFiles, resolve_index


class TestCachedStaticFiles:
    """测试带缓存的静态文件服务"""

    @pytest.mark.asyncio
    async def test_cache_headers(self, tmp_path):
        """测试不同文件类型的缓存头"""
        (tmp_path / "app.js").write_text("console.log(1)", encoding="utf-8")
        (tmp_path / "image.png").write_bytes(b"fake png")
        (tmp_path / "index.html").write_text("<html></html>", encoding="utf-8")

        app = Starlette(routes=[
            Mount("/assets", app=CachedStaticFiles(directory=str(tmp_path)), name="assets")
        ])
        transport = ASGITransport(app=app)

        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get("/assets/app.js")
            assert response.status_code == 200
            assert response.headers["cache-control"] == "public, max-age=31536000"

            response = await ac.get("/assets/image.png")
            assert "2592000" in response.headers["cache-control"]

            response = await ac.get("/assets/index.html")
            assert response.headers["cache-control"] == "no-cache"

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        app = Starlette(routes=[Mount("/assets", app=CachedStaticFiles(directory=str(tmp_path)))])

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            response = await ac.get("/assets/missing.js")
        assert response.status_code == 404


class TestResolveIndex:
    """前端入口"""

    def test_not_configured(self):
        assert resolve_index(None) is None

    def test_missing_build(self, tmp_path):
        assert resolve_index(str(tmp_path)) is None

    def test_index_found(self, tmp_path):
        index = tmp_path / "index.html"
        index.write_text("<html></html>", encoding="utf-8")
        assert resolve_index(str(tmp_path)) == index
