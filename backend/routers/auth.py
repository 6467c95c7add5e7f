"""
认证路由
用户注册、登录
"""

import logging
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.accounts import AccountService
from core.config import get_settings
from core.database import get_db
from core.errors import AuthException, ErrorCode, NotFoundException
from core.events import event_bus, Events
from core.middleware import get_client_ip
from core.security import create_token, get_current_user, TokenData
from models import User
from schemas import UserCreate, UserLogin, UserInfo, success

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["认证"])


def _auth_payload(user: User) -> dict:
    """生成令牌并组装登录响应"""
    settings = get_settings()
    token = create_token(TokenData(user_id=user.id))
    return {
        "token": token,
        "token_type": "bearer",
        "expires_in": settings.jwt_expire_minutes * 60,
        "user": UserInfo.model_validate(user).model_dump()
    }


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(data: UserCreate, db: AsyncSession = Depends(get_db)):
    """用户注册，成功后直接返回令牌"""
    service = AccountService(db)
    user = await service.create_user(data.name, data.email, data.password)

    event_bus.emit(Events.USER_REGISTER, "auth", {"user_id": user.id})

    return success(_auth_payload(user), "注册成功")


@router.post("/login")
async def login(data: UserLogin, request: Request, db: AsyncSession = Depends(get_db)):
    """用户登录"""
    service = AccountService(db)
    user = await service.authenticate(data.email, data.password)

    if not user:
        logger.warning(f"登录失败 - IP: {get_client_ip(request)}")
        raise AuthException(ErrorCode.LOGIN_FAILED)

    event_bus.emit(Events.USER_LOGIN, "auth", {"user_id": user.id})

    return success(_auth_payload(user), "登录成功")


@router.get("/me")
async def get_me(
    current_user: TokenData = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """获取当前用户信息"""
    service = AccountService(db)
    user = await service.get_user(current_user.user_id)

    if not user:
        raise NotFoundException("用户", current_user.user_id, code=ErrorCode.ACCOUNT_NOT_FOUND)

    return success(UserInfo.model_validate(user).model_dump())
