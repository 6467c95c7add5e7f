"""
博客 API 客户端
基于 httpx 的异步封装，认证状态保存在传入的 Session 中
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from .session import Session

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:5000"


class ApiError(Exception):
    """服务端返回非 2xx 状态"""

    def __init__(self, status: int, code: Optional[int] = None, message: str = "请求失败", data: Any = None):
        self.status = status
        self.code = code
        self.message = message
        self.data = data
        super().__init__(f"[{status}] {message}")


class BlogApiClient:
    """
    博客 API 客户端

    Usage:
        session = Session()
        async with BlogApiClient(session=session) as api:
            await api.login("alice@example.com", "secret1")
            blogs = await api.list_blogs(category="Travel")
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        session: Optional[Session] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.session = session if session is not None else Session()
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"}
        )

    async def __aenter__(self) -> "BlogApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        """发送请求并解包 data 字段"""
        headers = kwargs.pop("headers", {})
        headers.update(self.session.authorization_header())

        response = await self._client.request(method, path, headers=headers, **kwargs)

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_error:
            code = message = data = None
            if isinstance(body, dict):
                code = body.get("code")
                message = body.get("message")
                data = body.get("data")
            logger.debug(f"{method} {path} 失败: {response.status_code} {message}")
            raise ApiError(response.status_code, code, message or response.reason_phrase, data)

        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    # ==================== 认证 ====================

    async def signup(self, name: str, email: str, password: str) -> Dict[str, Any]:
        """注册并登录"""
        payload = await self._request(
            "POST", "/auth/signup",
            json={"name": name, "email": email, "password": password}
        )
        self.session.update(payload)
        return payload["user"]

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        payload = await self._request(
            "POST", "/auth/login",
            json={"email": email, "password": password}
        )
        self.session.update(payload)
        return payload["user"]

    def logout(self):
        """令牌无状态，退出只需清除本地会话"""
        self.session.clear()

    async def me(self) -> Dict[str, Any]:
        return await self._request("GET", "/auth/me")

    # ==================== 文章 ====================

    async def list_blogs(
        self,
        category: Optional[str] = None,
        author: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        params = {}
        if category:
            params["category"] = category
        if author:
            params["author"] = author
        data = await self._request("GET", "/blogs", params=params)
        return data["blogs"]

    async def get_blog(self, blog_id: int) -> Dict[str, Any]:
        data = await self._request("GET", f"/blogs/{blog_id}")
        return data["blog"]

    async def create_blog(
        self,
        title: str,
        category: str,
        content: str,
        image: Optional[str] = None
    ) -> Dict[str, Any]:
        body = {"title": title, "category": category, "content": content}
        if image:
            body["image"] = image
        data = await self._request("POST", "/blogs", json=body)
        return data["blog"]

    async def update_blog(self, blog_id: int, **changes) -> Dict[str, Any]:
        """只发送传入的字段；image=None 表示清除图片"""
        data = await self._request("PUT", f"/blogs/{blog_id}", json=changes)
        return data["blog"]

    async def delete_blog(self, blog_id: int):
        await self._request("DELETE", f"/blogs/{blog_id}")

    async def my_blogs(self) -> List[Dict[str, Any]]:
        data = await self._request("GET", "/blogs/user/my-blogs")
        return data["blogs"]
