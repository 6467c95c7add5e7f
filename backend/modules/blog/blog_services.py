"""
博客业务逻辑

修改和删除使用带所有者条件的单条语句（WHERE id AND user_id），
未命中时再查询一次区分"不存在"与"无权限"。
"""

import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import String, select, update, delete, func

from core.accounts import AccountService
from core.errors import ErrorCode, NotFoundException, PermissionException
from .blog_models import Blog
from .blog_schemas import BlogCreate, BlogUpdate, normalize_category

logger = logging.getLogger(__name__)


class BlogService:
    """博客服务"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _load(self, blog_id: int) -> Optional[Blog]:
        result = await self.db.execute(
            select(Blog)
            .where(Blog.id == blog_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _raise_missing_or_forbidden(self, blog_id: int, user_id: int, action: str):
        """条件语句未命中时判断原因"""
        result = await self.db.execute(select(Blog.user_id).where(Blog.id == blog_id))
        owner_id = result.scalar_one_or_none()
        if owner_id is None:
            raise NotFoundException("文章", blog_id, code=ErrorCode.BLOG_NOT_FOUND)
        logger.warning(f"用户 {user_id} 尝试{action}他人文章 {blog_id}（所有者 {owner_id}）")
        raise PermissionException(f"无权{action}此文章", code=ErrorCode.BLOG_NOT_OWNER)

    async def list_blogs(
        self,
        category: Optional[str] = None,
        author: Optional[str] = None,
        user_id: Optional[int] = None
    ) -> List[Blog]:
        """
        获取文章列表（按创建时间倒序，不分页）

        Args:
            category: 分类，按与写入相同的规则规范化后匹配
            author: 作者名，大小写不敏感的子串匹配
            user_id: 所有者
        """
        query = select(Blog)

        if category:
            query = query.where(Blog.category == normalize_category(category))

        if author:
            query = query.where(
                func.lower(Blog.author, type_=String).contains(author.lower(), autoescape=True)
            )

        if user_id is not None:
            query = query.where(Blog.user_id == user_id)

        query = query.order_by(Blog.created_at.desc(), Blog.id.desc())

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_user_blogs(self, user_id: int) -> List[Blog]:
        """获取某用户的全部文章"""
        return await self.list_blogs(user_id=user_id)

    async def get_blog(self, blog_id: int) -> Blog:
        """获取文章，不存在时抛出 NotFoundException"""
        blog = await self._load(blog_id)
        if not blog:
            raise NotFoundException("文章", blog_id, code=ErrorCode.BLOG_NOT_FOUND)
        return blog

    async def create_blog(self, data: BlogCreate, user_id: int) -> Blog:
        """
        创建文章
        作者名取自创建时的用户名称，之后不再同步
        """
        user = await AccountService(self.db).get_user(user_id)
        if not user:
            # 令牌有效但账户已不存在
            raise NotFoundException("用户", user_id, code=ErrorCode.ACCOUNT_NOT_FOUND)

        blog = Blog(
            title=data.title,
            category=data.category.value,
            author=user.name,
            content=data.content,
            image=data.image,
            user_id=user_id
        )
        self.db.add(blog)
        await self.db.commit()

        logger.info(f"用户 {user_id} 创建文章 {blog.id}")
        return await self.get_blog(blog.id)

    async def update_blog(self, blog_id: int, data: BlogUpdate, user_id: int) -> Blog:
        """
        更新文章（仅所有者）
        每次成功调用都会刷新 updated_at，即使没有字段变化
        """
        values = data.changes()
        values["updated_at"] = datetime.now()

        result = await self.db.execute(
            update(Blog)
            .where(Blog.id == blog_id, Blog.user_id == user_id)
            .values(**values)
        )
        if result.rowcount == 0:
            await self._raise_missing_or_forbidden(blog_id, user_id, "修改")

        await self.db.commit()
        logger.info(f"用户 {user_id} 更新文章 {blog_id}: {sorted(values)}")
        return await self.get_blog(blog_id)

    async def delete_blog(self, blog_id: int, user_id: int) -> None:
        """删除文章（仅所有者，物理删除）"""
        result = await self.db.execute(
            delete(Blog).where(Blog.id == blog_id, Blog.user_id == user_id)
        )
        if result.rowcount == 0:
            await self._raise_missing_or_forbidden(blog_id, user_id, "删除")

        await self.db.commit()
        logger.info(f"用户 {user_id} 删除文章 {blog_id}")
