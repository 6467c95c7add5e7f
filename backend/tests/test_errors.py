"""
错误处理模块测试
"""
import json

import pytest
from fastapi import status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from starlette.requests import Request

from core.errors import (
    ErrorCode,
    AppException,
    ValidationException,
    AuthException,
    NotFoundException,
    PermissionException,
    app_exception_handler,
    unhandled_exception_handler,
    database_exception_handler,
    ERROR_MESSAGES
)


def _make_request(request_id=None) -> Request:
    request = Request({"type": "http", "method": "GET", "path": "/blogs", "headers": []})
    if request_id:
        request.state.request_id = request_id
    return request


class TestErrors:
    """错误处理测试"""

    def test_error_codes(self):
        """测试错误码定义"""
        assert ErrorCode.SUCCESS == 0
        assert ErrorCode.INTERNAL_ERROR == 1000
        assert ErrorCode.UNAUTHORIZED == 2001
        assert ErrorCode.BLOG_NOT_FOUND == 4001

    def test_every_code_has_message(self):
        """每个错误码都有默认消息"""
        for code in ErrorCode:
            assert code in ERROR_MESSAGES

    def test_app_exception(self):
        """测试应用异常基类"""
        exc = AppException(code=ErrorCode.RESOURCE_NOT_FOUND)
        assert exc.code == ErrorCode.RESOURCE_NOT_FOUND
        assert exc.http_status == status.HTTP_404_NOT_FOUND
        assert exc.message == ERROR_MESSAGES[ErrorCode.RESOURCE_NOT_FOUND]

        d = exc.to_dict()
        assert d == {
            "code": ErrorCode.RESOURCE_NOT_FOUND,
            "message": ERROR_MESSAGES[ErrorCode.RESOURCE_NOT_FOUND],
            "data": None
        }

        resp = exc.to_response()
        assert isinstance(resp, JSONResponse)
        assert resp.status_code == status.HTTP_404_NOT_FOUND

    def test_specific_exceptions(self):
        """测试具体异常类"""
        v_exc = ValidationException(errors=["e1"])
        assert v_exc.code == ErrorCode.VALIDATION_ERROR
        assert v_exc.http_status == status.HTTP_400_BAD_REQUEST
        assert v_exc.data["errors"] == ["e1"]

        a_exc = AuthException()
        assert a_exc.code == ErrorCode.UNAUTHORIZED
        assert a_exc.http_status == status.HTTP_401_UNAUTHORIZED

        n_exc = NotFoundException(resource="文章", resource_id=123, code=ErrorCode.BLOG_NOT_FOUND)
        assert n_exc.http_status == status.HTTP_404_NOT_FOUND
        assert "123" in n_exc.message

        p_exc = PermissionException(code=ErrorCode.BLOG_NOT_OWNER)
        assert p_exc.http_status == status.HTTP_403_FORBIDDEN

    def test_account_exists_is_bad_request(self):
        """重复注册返回 400"""
        exc = AppException(ErrorCode.ACCOUNT_EXISTS)
        assert exc.http_status == status.HTTP_400_BAD_REQUEST

    def test_unauthorized_response_has_challenge(self):
        """401 响应携带 WWW-Authenticate"""
        resp = AuthException(ErrorCode.TOKEN_EXPIRED).to_response()
        assert resp.status_code == 401
        assert resp.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_app_exception_handler(self):
        """测试异常处理器"""
        exc = PermissionException("无权修改此文章", code=ErrorCode.BLOG_NOT_OWNER)
        resp = await app_exception_handler(_make_request(), exc)

        assert resp.status_code == 403
        body = json.loads(resp.body)
        assert body["code"] == ErrorCode.BLOG_NOT_OWNER
        assert body["message"] == "无权修改此文章"

    @pytest.mark.asyncio
    async def test_unhandled_exception_is_opaque(self, caplog):
        """未处理异常不向调用方透出细节，只记录到日志"""
        exc = RuntimeError("connection string with password=secret")
        resp = await unhandled_exception_handler(_make_request("abc12345"), exc)

        assert resp.status_code == 500
        body = json.loads(resp.body)
        assert body["code"] == ErrorCode.INTERNAL_ERROR
        assert body["data"] == {"request_id": "abc12345"}
        assert "secret" not in resp.body.decode()
        assert "password=secret" in caplog.text

    @pytest.mark.asyncio
    async def test_database_error_is_opaque(self):
        """数据库异常返回 DATABASE_ERROR，不透出 SQL"""
        exc = OperationalError("SELECT * FROM blog_posts", {}, Exception("disk I/O error"))
        resp = await database_exception_handler(_make_request("req-1"), exc)

        assert resp.status_code == 500
        body = json.loads(resp.body)
        assert body["code"] == ErrorCode.DATABASE_ERROR
        assert "blog_posts" not in resp.body.decode()


@pytest.mark.asyncio
class TestErrorResponses:
    """应用层错误响应格式"""

    async def test_validation_error_format(self, client):
        response = await client.post("/auth/signup", json={"email": "bad"})
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == ErrorCode.VALIDATION_ERROR
        assert body["message"] == "参数验证失败"
        fields = {e["field"] for e in body["data"]["errors"]}
        assert "body.name" in fields
        assert "body.password" in fields

