"""
应用入口测试
路由注册、前端回退
"""

import pytest
from httpx import AsyncClient

from core.config import get_settings
from core.errors import ErrorCode
from main import app


class TestAppSetup:
    """应用配置"""

    def test_routes_registered(self):
        paths = app.openapi()["paths"]
        for path in (
            "/auth/signup",
            "/auth/login",
            "/auth/me",
            "/blogs",
            "/blogs/{blog_id}",
            "/blogs/user/my-blogs",
            "/health",
        ):
            assert path in paths

    def test_hidden_routes_not_in_schema(self):
        """站点地图、尾部斜杠别名和前端回退不出现在接口文档中"""
        paths = app.openapi()["paths"]
        assert "/sitemap.xml" not in paths
        assert "/blogs/" not in paths
        assert "/{full_path}" not in paths
        assert "/{full_path:path}" not in paths

    @pytest.mark.asyncio
    async def test_sitemap_served_before_fallback(self, client: AsyncClient):
        response = await client.get("/sitemap.xml")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/xml")


@pytest.mark.asyncio
class TestFallback:
    """前端 History 回退"""

    async def test_unknown_api_path_returns_json_404(self, client: AsyncClient):
        response = await client.get("/blogs/1/comments")
        assert response.status_code == 404
        body = response.json()
        assert body["code"] == ErrorCode.RESOURCE_NOT_FOUND

        response = await client.post("/auth/logout")
        assert response.status_code == 404
        assert response.headers["content-type"].startswith("application/json")

    async def test_page_without_frontend_build(self, client: AsyncClient, monkeypatch):
        monkeypatch.setattr(get_settings(), "frontend_path", None)

        response = await client.get("/blog/1")
        assert response.status_code == 404

    async def test_page_served_from_frontend_build(self, client: AsyncClient, monkeypatch, tmp_path):
        (tmp_path / "index.html").write_text("<html><body>blog</body></html>", encoding="utf-8")
        monkeypatch.setattr(get_settings(), "frontend_path", str(tmp_path))

        for path in ("/", "/login", "/blog/3", "/create"):
            response = await client.get(path)
            assert response.status_code == 200
            assert "blog" in response.text

    async def test_openapi_available(self, client: AsyncClient):
        response = await client.get("/openapi.json")
        assert response.status_code == 200
        assert "/blogs" in response.json()["paths"]

    async def test_cors_preflight(self, client: AsyncClient):
        response = await client.options(
            "/blogs",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "POST",
            }
        )
        assert response.status_code == 200
        assert "access-control-allow-origin" in response.headers

    async def test_api_trailing_slash_redirects(self, client: AsyncClient):
        """接口路径带尾部斜杠时 307 重定向，方法和请求体保持不变"""
        response = await client.post("/auth/login/", json={"email": "a@b.com", "password": "x"})
        assert response.status_code == 307
        assert response.headers["location"].endswith("/auth/login")

        response = await client.get("/blogs/user/my-blogs/")
        assert response.status_code == 307
        assert response.headers["location"].endswith("/blogs/user/my-blogs")

    async def test_trailing_slash_redirect_keeps_query(self, client: AsyncClient):
        response = await client.get("/auth/me/?x=1")
        assert response.status_code == 307
        assert response.headers["location"].endswith("/auth/me?x=1")
