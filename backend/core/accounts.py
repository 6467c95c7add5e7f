"""
账户存储
用户的查询与创建，邮箱统一小写后存储和比较
"""

import logging
from typing import Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .errors import AppException, ErrorCode
from .security import hash_password, verify_password
from models import User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """邮箱标识：去除首尾空白并转小写"""
    return email.strip().lower()


class AccountService:
    """账户服务"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, user_id: int) -> Optional[User]:
        """按ID获取用户"""
        return await self.db.get(User, user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """按邮箱获取用户（大小写不敏感）"""
        result = await self.db.execute(
            select(User).where(User.email == normalize_email(email))
        )
        return result.scalar_one_or_none()

    async def create_user(self, name: str, email: str, password: str) -> User:
        """
        创建用户

        Raises:
            AppException(ACCOUNT_EXISTS): 邮箱已被注册
        """
        email = normalize_email(email)
        if await self.get_user_by_email(email):
            raise AppException(ErrorCode.ACCOUNT_EXISTS)

        user = User(
            name=name.strip(),
            email=email,
            password_hash=hash_password(password)
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # 并发注册同一邮箱
            await self.db.rollback()
            raise AppException(ErrorCode.ACCOUNT_EXISTS)
        await self.db.refresh(user)
        logger.info(f"新用户注册: {user.id}")
        return user

    async def authenticate(self, email: str, password: str) -> Optional[User]:
        """校验邮箱和密码，失败返回 None"""
        user = await self.get_user_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            return None
        return user
