"""
标准错误码体系
提供统一的错误码定义和异常处理
"""

import logging
from typing import Optional, Any, Dict
from enum import IntEnum
from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ErrorCode(IntEnum):
    """
    标准错误码

    错误码规范：
    - 0: 成功
    - 1xxx: 系统级错误
    - 2xxx: 认证/授权错误
    - 3xxx: 业务通用错误
    - 4xxx: 模块级错误
    """

    # ==================== 成功 ====================
    SUCCESS = 0

    # ==================== 系统级错误 (1xxx) ====================
    INTERNAL_ERROR = 1000           # 服务器内部错误
    DATABASE_ERROR = 1001           # 数据库错误
    SERVICE_UNAVAILABLE = 1004      # 服务不可用

    # ==================== 认证/授权错误 (2xxx) ====================
    UNAUTHORIZED = 2001             # 未认证（未登录）
    TOKEN_EXPIRED = 2002            # 令牌过期
    TOKEN_INVALID = 2003            # 令牌无效
    PERMISSION_DENIED = 2004        # 权限不足
    LOGIN_FAILED = 2007             # 登录失败
    ACCOUNT_NOT_FOUND = 2009        # 账户不存在
    ACCOUNT_EXISTS = 2010           # 账户已存在

    # ==================== 业务通用错误 (3xxx) ====================
    VALIDATION_ERROR = 3001         # 参数验证失败
    RESOURCE_NOT_FOUND = 3002       # 资源不存在

    # ==================== 模块级错误 (4xxx) ====================
    # 4000-4099: 博客模块
    BLOG_NOT_FOUND = 4001
    BLOG_NOT_OWNER = 4002


# 错误码对应的默认消息
ERROR_MESSAGES: Dict[int, str] = {
    ErrorCode.SUCCESS: "操作成功",

    # 系统级
    ErrorCode.INTERNAL_ERROR: "服务器内部错误，请稍后重试",
    ErrorCode.DATABASE_ERROR: "数据库操作失败",
    ErrorCode.SERVICE_UNAVAILABLE: "服务暂时不可用",

    # 认证/授权
    ErrorCode.UNAUTHORIZED: "请先登录",
    ErrorCode.TOKEN_EXPIRED: "登录已过期，请重新登录",
    ErrorCode.TOKEN_INVALID: "无效的认证凭据",
    ErrorCode.PERMISSION_DENIED: "没有权限执行此操作",
    ErrorCode.LOGIN_FAILED: "邮箱或密码错误",
    ErrorCode.ACCOUNT_NOT_FOUND: "用户不存在",
    ErrorCode.ACCOUNT_EXISTS: "该邮箱已被注册",

    # 业务通用
    ErrorCode.VALIDATION_ERROR: "参数验证失败",
    ErrorCode.RESOURCE_NOT_FOUND: "请求的资源不存在",

    # 模块级
    ErrorCode.BLOG_NOT_FOUND: "文章不存在",
    ErrorCode.BLOG_NOT_OWNER: "只能修改或删除自己的文章",
}

# 错误码对应的 HTTP 状态码
ERROR_HTTP_STATUS: Dict[int, int] = {
    ErrorCode.SUCCESS: status.HTTP_200_OK,

    # 系统级 -> 500
    ErrorCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.DATABASE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.SERVICE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,

    # 认证/授权 -> 401/403
    ErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.TOKEN_EXPIRED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.TOKEN_INVALID: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorCode.LOGIN_FAILED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.ACCOUNT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.ACCOUNT_EXISTS: status.HTTP_400_BAD_REQUEST,

    # 业务通用 -> 400/404
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.RESOURCE_NOT_FOUND: status.HTTP_404_NOT_FOUND,

    # 模块级
    ErrorCode.BLOG_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.BLOG_NOT_OWNER: status.HTTP_403_FORBIDDEN,
}


class AppException(Exception):
    """
    业务异常基类
    错误码决定 HTTP 状态码和默认消息

    Usage:
        raise AppException(ErrorCode.ACCOUNT_EXISTS)
        raise NotFoundException("文章", blog_id, code=ErrorCode.BLOG_NOT_FOUND)
    """

    def __init__(
        self,
        code: int = ErrorCode.INTERNAL_ERROR,
        message: Optional[str] = None,
        data: Any = None
    ):
        self.code = code
        self.message = message or ERROR_MESSAGES.get(code, "未知错误")
        self.data = data
        self.http_status = ERROR_HTTP_STATUS.get(code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return _envelope(self.code, self.message, self.data)

    def to_response(self) -> JSONResponse:
        headers = None
        if self.http_status == status.HTTP_401_UNAUTHORIZED:
            headers = {"WWW-Authenticate": "Bearer"}
        return JSONResponse(status_code=self.http_status, content=self.to_dict(), headers=headers)


class ValidationException(AppException):
    """参数验证异常"""

    def __init__(self, message: str = "参数验证失败", errors: Optional[list] = None):
        super().__init__(ErrorCode.VALIDATION_ERROR, message, {"errors": errors} if errors else None)


class AuthException(AppException):
    """认证失败：未携带、过期或无效的令牌，以及登录失败"""

    def __init__(self, code: int = ErrorCode.UNAUTHORIZED, message: Optional[str] = None):
        super().__init__(code, message)


class NotFoundException(AppException):
    """资源不存在"""

    def __init__(
        self,
        resource: str = "资源",
        resource_id: Any = None,
        code: int = ErrorCode.RESOURCE_NOT_FOUND
    ):
        if resource_id is not None:
            message = f"{resource} (ID: {resource_id}) 不存在"
        else:
            message = f"{resource}不存在"
        super().__init__(code, message)


class PermissionException(AppException):
    """已认证但无权操作"""

    def __init__(self, message: str = "没有权限执行此操作", code: int = ErrorCode.PERMISSION_DENIED):
        super().__init__(code, message)


# ==================== 异常处理器 ====================

def _envelope(code: int, message: str, data: Any = None) -> dict:
    return {"code": code, "message": message, "data": data}


def _request_id(request) -> Optional[str]:
    if request is None:
        return None
    return getattr(request.state, "request_id", None)


# HTTP 状态码 -> 业务错误码（框架抛出的 HTTPException）
HTTP_STATUS_CODES: Dict[int, int] = {
    status.HTTP_401_UNAUTHORIZED: ErrorCode.UNAUTHORIZED,
    status.HTTP_403_FORBIDDEN: ErrorCode.PERMISSION_DENIED,
    status.HTTP_404_NOT_FOUND: ErrorCode.RESOURCE_NOT_FOUND,
    status.HTTP_503_SERVICE_UNAVAILABLE: ErrorCode.SERVICE_UNAVAILABLE,
}


async def app_exception_handler(request, exc: AppException):
    """业务异常：按错误码返回"""
    if exc.http_status >= 500:
        logger.error(f"业务异常 [{_request_id(request)}]: {exc.code} {exc.message}")
    return exc.to_response()


def _opaque_error(request, exc: Exception, code: int) -> JSONResponse:
    request_id = _request_id(request)
    logger.error(f"未处理异常 [{request_id}]: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(
            code,
            ERROR_MESSAGES[code],
            {"request_id": request_id} if request_id else None
        )
    )


async def database_exception_handler(request, exc: SQLAlchemyError):
    """数据库异常：细节只写日志"""
    return _opaque_error(request, exc, ErrorCode.DATABASE_ERROR)


async def unhandled_exception_handler(request, exc: Exception):
    """
    全局未捕获异常处理

    详细错误只写入服务端日志，响应中仅返回错误码和请求ID
    """
    return _opaque_error(request, exc, ErrorCode.INTERNAL_ERROR)


async def validation_exception_handler(request, exc: RequestValidationError):
    """请求参数校验失败统一返回 400"""
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        }
        for error in exc.errors()
    ]
    return ValidationException(errors=errors).to_response()


async def http_exception_handler(request, exc: StarletteHTTPException):
    """框架层 HTTP 异常（405 等）转为统一格式"""
    code = HTTP_STATUS_CODES.get(exc.status_code, ErrorCode.INTERNAL_ERROR)
    message = str(exc.detail) if exc.detail else ERROR_MESSAGES.get(code, "请求失败")
    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(code, message),
        headers=getattr(exc, "headers", None)
    )


def register_exception_handlers(app):
    """
    注册异常处理器

    在 main.py 中调用：
        from core.errors import register_exception_handlers
        register_exception_handlers(app)
    """
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
