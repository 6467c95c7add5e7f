"""
统一鉴权模块
提供JWT令牌生成、验证和密码处理功能
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel, ValidationError

from .config import get_settings
from .errors import AuthException, ErrorCode

logger = logging.getLogger(__name__)

# Bearer令牌认证（缺失时由 get_current_user 统一返回 401）
security = HTTPBearer(auto_error=False)

ACCESS_TOKEN_TYPE = "access"


class InvalidToken(Exception):
    """令牌签名错误、载荷格式错误或已过期"""

    def __init__(self, message: str = "无效的令牌", expired: bool = False):
        self.expired = expired
        super().__init__(message)


class TokenData(BaseModel):
    """令牌数据"""
    user_id: int


def hash_password(password: str) -> str:
    """
    加密密码
    bcrypt 限制密码长度不超过 72 字节
    """
    if not isinstance(password, str):
        password = str(password)

    password_bytes = password.encode('utf-8')[:72]

    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """验证密码"""
    if not isinstance(plain_password, str):
        plain_password = str(plain_password)

    password_bytes = plain_password.encode('utf-8')[:72]
    hashed_bytes = hashed_password.encode('utf-8')

    try:
        return bcrypt.checkpw(password_bytes, hashed_bytes)
    except ValueError:
        # 存储的哈希格式不合法
        return False


def create_token(data: TokenData, expires_delta: Optional[timedelta] = None) -> str:
    """
    创建JWT访问令牌

    Args:
        data: 令牌数据
        expires_delta: 过期时间增量，默认使用 jwt_expire_minutes
    """
    settings = get_settings()
    to_encode = data.model_dump()

    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.jwt_expire_minutes)
    expire = datetime.now(timezone.utc) + expires_delta

    to_encode.update({
        "exp": expire,
        "type": ACCESS_TOKEN_TYPE
    })

    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> TokenData:
    """
    解码JWT令牌
    支持密钥轮换：先尝试新密钥，失败则尝试旧密钥

    Raises:
        InvalidToken: 签名不匹配、载荷格式错误或令牌已过期
    """
    settings = get_settings()

    def _decode(secret: str) -> dict:
        return jwt.decode(token, secret, algorithms=[settings.jwt_algorithm])

    try:
        payload = _decode(settings.jwt_secret)
    except ExpiredSignatureError:
        raise InvalidToken("令牌已过期", expired=True)
    except JWTError:
        if not settings.jwt_secret_old:
            raise InvalidToken()
        try:
            payload = _decode(settings.jwt_secret_old)
        except ExpiredSignatureError:
            raise InvalidToken("令牌已过期", expired=True)
        except JWTError:
            raise InvalidToken()

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise InvalidToken("令牌类型不匹配")

    try:
        return TokenData(**payload)
    except ValidationError:
        raise InvalidToken("令牌载荷格式错误")


def _extract_token_data(credentials: Optional[HTTPAuthorizationCredentials]) -> TokenData:
    if credentials is None:
        raise AuthException(ErrorCode.UNAUTHORIZED, "未提供认证令牌")

    try:
        return decode_token(credentials.credentials)
    except InvalidToken as e:
        logger.info(f"令牌校验失败: {e}")
        code = ErrorCode.TOKEN_EXPIRED if e.expired else ErrorCode.TOKEN_INVALID
        raise AuthException(code)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenData:
    """获取当前用户（依赖注入用），并写入 request.state.user_id"""
    token_data = _extract_token_data(credentials)
    request.state.user_id = token_data.user_id
    return token_data
